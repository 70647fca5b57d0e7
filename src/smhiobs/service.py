"""
Observation pipeline: location -> station -> readings -> optional aggregation.
"""

import logging
from typing import Dict, List, Optional, Union

from .aggregation import (
    TemporalAggregator,
    compute_range_days,
    filter_readings,
    select_granularity,
)
from .client import SMHIClient
from .exceptions import SMHINotFoundError, SMHIValidationError
from .fetcher import ObservationFetcher
from .locator import StationLocator
from .models import (
    AggregatedObservationResult,
    AggregationInfo,
    Coordinate,
    DateRange,
    ObservationResult,
    StationInfo,
)
from .parameters import DEFAULT_PERIOD, ParameterTable
from .regions import AdminAreaResolver

logger = logging.getLogger(__name__)

ObservationOutcome = Union[ObservationResult, AggregatedObservationResult]


class ObservationService:
    """
    Answer "what were conditions at this location over this period".

    Each call is an independent pipeline run: the station roster and the
    readings are fetched fresh and nothing is kept between calls.
    """

    def __init__(
        self,
        client: SMHIClient,
        parameters: Optional[ParameterTable] = None,
        resolver: Optional[AdminAreaResolver] = None,
        locator: Optional[StationLocator] = None,
        fetcher: Optional[ObservationFetcher] = None,
        aggregator: Optional[TemporalAggregator] = None,
    ):
        self.client = client
        self.parameters = parameters or ParameterTable()
        self.resolver = resolver or AdminAreaResolver()
        self.locator = locator or StationLocator(client, self.parameters)
        self.fetcher = fetcher or ObservationFetcher(client, self.parameters)
        self.aggregator = aggregator or TemporalAggregator()

    def resolve_coordinate(
        self,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        area_code: Optional[str] = None,
    ) -> Coordinate:
        """
        Turn explicit coordinates or an administrative-area code into a point.

        Raises:
            SMHIValidationError: If only one coordinate is given, nothing is
                given, or the area code is malformed
            SMHINotFoundError: If a well-formed area code is unknown
        """
        if (latitude is None) != (longitude is None):
            raise SMHIValidationError(
                "Both latitude and longitude must be provided together, or both omitted",
                field="latitude" if latitude is None else "longitude",
            )
        if latitude is not None and longitude is not None:
            return Coordinate(latitude, longitude)

        if area_code:
            if not self.resolver.is_valid_code(area_code.strip()):
                raise SMHIValidationError(
                    f"Invalid administrative-area code: {area_code!r}. "
                    "Use a 4-digit municipality code or a 1-2 letter county code",
                    field="area_code",
                )
            area = self.resolver.resolve(area_code)
            if area is None:
                raise SMHINotFoundError("Administrative area", area_code)
            logger.debug(f"Resolved area {area_code} to {area.name}")
            return area.coordinate

        raise SMHIValidationError(
            "Location required. Provide station_id, latitude/longitude, or area_code."
        )

    async def get_observations(
        self,
        network: str,
        parameter: str,
        period: str = DEFAULT_PERIOD,
        station_id: Optional[int] = None,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        area_code: Optional[str] = None,
        date_range: Optional[DateRange] = None,
    ) -> ObservationOutcome:
        """
        Get observations for a location.

        Location precedence: station_id, then latitude/longitude, then
        area_code. Without a date range the raw readings are returned; with
        one, readings are filtered to the window and summarised daily or
        weekly depending on its length.

        Args:
            network: 'meteorological' or 'hydrological'
            parameter: Logical parameter name (e.g. 'temperature')
            period: Observation period (default 'latest-hour')
            station_id: Explicit SMHI station id
            latitude: Latitude for nearest-station search
            longitude: Longitude for nearest-station search
            area_code: Municipality or county code for nearest-station search
            date_range: Optional window; None means unfiltered and unaggregated

        Returns:
            ObservationResult, or AggregatedObservationResult when a date
            range is given

        Raises:
            SMHIValidationError: On missing or inconsistent input
            SMHINotFoundError: When no station, parameter or data matches
            SMHIConnectionError: On upstream failures
        """
        if station_id is None:
            coordinate = self.resolve_coordinate(latitude, longitude, area_code)
            station = await self.locator.find_nearest(network, coordinate, parameter)
            station_id = station.id

        result = await self.fetcher.fetch(network, station_id, parameter, period)
        if result is None:
            raise SMHINotFoundError(
                "Observation data", f"station {station_id}, parameter {parameter}"
            )

        if date_range is None:
            return result

        return self._aggregate(result, date_range)

    def _aggregate(
        self, result: ObservationResult, date_range: DateRange
    ) -> AggregatedObservationResult:
        readings = filter_readings(result.readings, date_range)
        if not readings:
            raise SMHINotFoundError(
                "Observation data",
                f"station {result.station.id}, parameter {result.parameter.name}, "
                f"window {date_range}",
            )

        range_days = compute_range_days(readings, date_range)
        granularity = select_granularity(range_days)
        buckets = self.aggregator.aggregate(readings, granularity)

        return AggregatedObservationResult(
            station=result.station,
            parameter=result.parameter,
            period=result.period,
            aggregation=AggregationInfo(
                granularity=granularity,
                range_days=range_days,
                raw_count=len(readings),
                aggregated_count=len(buckets),
            ),
            buckets=buckets,
        )

    async def list_stations(
        self, network: str, parameter: Optional[str] = None
    ) -> List[StationInfo]:
        """Active stations of a network, by default those reporting its first parameter."""
        if parameter is None:
            names = self.parameters.names(network)
            if not names:
                raise SMHINotFoundError(f"{network} parameter", "any")
            parameter = names[0]
        return await self.locator.list_stations(network, parameter)

    def describe(self, network: str) -> List[Dict]:
        """Parameters available for a network."""
        return self.parameters.describe(network)
