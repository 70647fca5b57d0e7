"""
Tests for the observation pipeline.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from smhiobs.client import SMHIClient
from smhiobs.exceptions import SMHINotFoundError, SMHIValidationError
from smhiobs.models import (
    AggregatedObservationResult,
    DateRange,
    ObservationResult,
    ParameterSummary,
    PeriodSummary,
    Reading,
    StationInfo,
    StationSummary,
)
from smhiobs.service import ObservationService


def _hourly_result(start: datetime, hours: int, station_id: int = 98230) -> ObservationResult:
    readings = [
        Reading(start + timedelta(hours=i), float(i % 10), "G") for i in range(hours)
    ]
    return ObservationResult(
        station=StationSummary(id=station_id, name="Stockholm"),
        parameter=ParameterSummary(name="Lufttemperatur", unit="degree celsius"),
        period=PeriodSummary(readings[0].timestamp, readings[-1].timestamp, "hourly"),
        readings=readings,
    )


@pytest.fixture
def client():
    client = SMHIClient()
    client.get_stations = AsyncMock(
        return_value=[
            StationInfo(98230, "Stockholm-Observatoriekullen A", 59.3417, 18.0549, True),
            StationInfo(71420, "Göteborg A", 57.7156, 11.9924, True),
            StationInfo(53430, "Lund", 55.7137, 13.2123, True),
        ]
    )
    return client


@pytest.fixture
def service(client):
    service = ObservationService(client)
    service.fetcher.fetch = AsyncMock()
    return service


class TestResolveCoordinate:
    def test_explicit_coordinates(self, service):
        coordinate = service.resolve_coordinate(59.0, 18.0)
        assert (coordinate.latitude, coordinate.longitude) == (59.0, 18.0)

    def test_coordinates_win_over_area(self, service):
        coordinate = service.resolve_coordinate(57.0, 12.0, "AB")
        assert coordinate.latitude == 57.0

    def test_area_code(self, service):
        coordinate = service.resolve_coordinate(area_code="O")
        assert coordinate.latitude == 57.7089

    def test_only_one_coordinate(self, service):
        with pytest.raises(SMHIValidationError, match="Both latitude and longitude") as exc_info:
            service.resolve_coordinate(latitude=59.0)
        assert exc_info.value.field == "longitude"

    def test_nothing_given(self, service):
        with pytest.raises(SMHIValidationError, match="Location required"):
            service.resolve_coordinate()

    def test_malformed_area_code(self, service):
        with pytest.raises(SMHIValidationError, match="Invalid administrative-area code") as exc_info:
            service.resolve_coordinate(area_code="Stockholm")
        assert exc_info.value.field == "area_code"
        assert exc_info.value.code == "VALIDATION_ERROR"

    def test_non_ascii_digits_are_malformed(self, service):
        with pytest.raises(SMHIValidationError, match="Invalid administrative-area code"):
            service.resolve_coordinate(area_code="\u0660\u0661\u0668\u0660")

    def test_unknown_area_code(self, service):
        with pytest.raises(SMHINotFoundError, match="Administrative area not found"):
            service.resolve_coordinate(area_code="QQ")


class TestGetObservations:
    @pytest.mark.asyncio
    async def test_station_id_skips_lookup(self, service, client):
        service.fetcher.fetch.return_value = _hourly_result(
            datetime(2024, 1, 1, tzinfo=timezone.utc), 3
        )

        result = await service.get_observations(
            "meteorological", "temperature", station_id=98230, area_code="M"
        )

        assert isinstance(result, ObservationResult)
        client.get_stations.assert_not_awaited()
        service.fetcher.fetch.assert_awaited_once_with(
            "meteorological", 98230, "temperature", "latest-hour"
        )

    @pytest.mark.asyncio
    async def test_area_code_uses_nearest_station(self, service):
        service.fetcher.fetch.return_value = _hourly_result(
            datetime(2024, 1, 1, tzinfo=timezone.utc), 3, station_id=53430
        )

        await service.get_observations("meteorological", "temperature", area_code="M")

        assert service.fetcher.fetch.call_args[0][1] == 53430

    @pytest.mark.asyncio
    async def test_coordinates_use_nearest_station(self, service):
        service.fetcher.fetch.return_value = _hourly_result(
            datetime(2024, 1, 1, tzinfo=timezone.utc), 3, station_id=71420
        )

        await service.get_observations(
            "meteorological", "temperature", latitude=57.7, longitude=12.0
        )

        assert service.fetcher.fetch.call_args[0][1] == 71420

    @pytest.mark.asyncio
    async def test_no_date_range_returns_raw_readings(self, service):
        service.fetcher.fetch.return_value = _hourly_result(
            datetime(2024, 1, 1, tzinfo=timezone.utc), 5
        )

        result = await service.get_observations("meteorological", "temperature", station_id=1)

        assert isinstance(result, ObservationResult)
        assert len(result.readings) == 5
        assert "aggregation" not in result.to_dict()

    @pytest.mark.asyncio
    async def test_short_window_aggregates_daily(self, service):
        service.fetcher.fetch.return_value = _hourly_result(
            datetime(2024, 1, 1, tzinfo=timezone.utc), 24 * 10
        )

        result = await service.get_observations(
            "meteorological",
            "temperature",
            period="corrected-archive",
            station_id=98230,
            date_range=DateRange.from_values("2024-01-02", "2024-01-04"),
        )

        assert isinstance(result, AggregatedObservationResult)
        assert result.aggregation.granularity == "daily"
        assert result.aggregation.range_days == 3
        assert result.aggregation.raw_count == 72
        assert result.aggregation.aggregated_count == 3
        assert [bucket.period_label for bucket in result.buckets] == [
            "2024-01-02",
            "2024-01-03",
            "2024-01-04",
        ]
        assert sum(bucket.count for bucket in result.buckets) == 72

        data = result.to_dict()
        assert data["aggregation"] == {
            "granularity": "daily",
            "rangeDays": 3,
            "rawCount": 72,
            "aggregatedCount": 3,
        }
        assert data["observations"][0]["kind"] == "day"

    @pytest.mark.asyncio
    async def test_naive_window_is_read_as_utc(self, service):
        service.fetcher.fetch.return_value = _hourly_result(
            datetime(2024, 1, 1, tzinfo=timezone.utc), 24 * 10
        )

        result = await service.get_observations(
            "meteorological",
            "temperature",
            station_id=98230,
            date_range=DateRange(start=datetime(2024, 1, 2), end=datetime(2024, 1, 4)),
        )

        assert result.aggregation.granularity == "daily"
        assert result.aggregation.range_days == 3
        # Both bounds are inclusive instants: Jan 2 00:00 through Jan 4 00:00 UTC
        assert result.aggregation.raw_count == 49
        assert [bucket.count for bucket in result.buckets] == [24, 24, 1]

    @pytest.mark.asyncio
    async def test_long_window_aggregates_weekly(self, service):
        service.fetcher.fetch.return_value = _hourly_result(
            datetime(2023, 1, 1, tzinfo=timezone.utc), 24 * 365
        )

        result = await service.get_observations(
            "meteorological",
            "temperature",
            period="corrected-archive",
            station_id=98230,
            date_range=DateRange.from_values("2023-01-01", "2023-12-31"),
        )

        assert result.aggregation.granularity == "weekly"
        assert result.aggregation.range_days == 365
        assert result.aggregation.raw_count == 24 * 365
        assert sum(bucket.count for bucket in result.buckets) == 24 * 365
        assert all(bucket.bucket_kind == "week" for bucket in result.buckets)

    @pytest.mark.asyncio
    async def test_window_threshold(self, service):
        service.fetcher.fetch.return_value = _hourly_result(
            datetime(2024, 1, 1, tzinfo=timezone.utc), 24 * 100
        )

        daily = await service.get_observations(
            "meteorological",
            "temperature",
            station_id=1,
            date_range=DateRange.from_values("2024-01-01", "2024-03-29"),
        )
        weekly = await service.get_observations(
            "meteorological",
            "temperature",
            station_id=1,
            date_range=DateRange.from_values("2024-01-01", "2024-03-30"),
        )

        assert (daily.aggregation.range_days, daily.aggregation.granularity) == (89, "daily")
        assert (weekly.aggregation.range_days, weekly.aggregation.granularity) == (90, "weekly")

    @pytest.mark.asyncio
    async def test_window_without_readings(self, service):
        service.fetcher.fetch.return_value = _hourly_result(
            datetime(2024, 1, 1, tzinfo=timezone.utc), 24
        )

        with pytest.raises(SMHINotFoundError, match="Observation data not found"):
            await service.get_observations(
                "meteorological",
                "temperature",
                station_id=1,
                date_range=DateRange.from_values("2020-01-01", "2020-12-31"),
            )

    @pytest.mark.asyncio
    async def test_missing_data(self, service):
        service.fetcher.fetch.return_value = None

        with pytest.raises(SMHINotFoundError, match="Observation data not found"):
            await service.get_observations("meteorological", "temperature", station_id=1)

    @pytest.mark.asyncio
    async def test_missing_location(self, service):
        with pytest.raises(SMHIValidationError, match="Location required"):
            await service.get_observations("meteorological", "temperature")
        service.fetcher.fetch.assert_not_awaited()


class TestListings:
    @pytest.mark.asyncio
    async def test_list_stations_default_parameter(self, service, client):
        stations = await service.list_stations("hydrological")

        assert len(stations) == 3
        client.get_stations.assert_awaited_once_with("hydrological", 1)

    def test_describe(self, service):
        parameters = service.describe("meteorological")
        assert parameters[0] == {
            "id": 1,
            "name": "temperature",
            "description": "Lufttemperatur momentanvärde",
            "unit": "°C",
        }
        assert [p["name"] for p in service.describe("hydrological")] == [
            "water_level",
            "water_flow",
        ]
