"""
Tests for the SMHI HTTP client.
"""

from unittest.mock import AsyncMock, Mock, patch

import pytest

from smhiobs.client import SMHIClient
from smhiobs.config import ClientConfig
from smhiobs.exceptions import (
    SMHIConnectionError,
    SMHINotFoundError,
    SMHIQueryError,
    SMHIValidationError,
)


def _json_response(payload):
    response = Mock()
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


def _status_error(status_code):
    from httpx import HTTPStatusError

    response = Mock()
    response.status_code = status_code
    return HTTPStatusError("error", request=Mock(), response=response)


class TestSMHIClient:
    """Test SMHIClient functionality."""

    @pytest.fixture
    def client(self):
        """Create a test client."""
        return SMHIClient(timeout=5)

    def test_init(self, client):
        """Test client initialization."""
        assert client.timeout == 5
        assert client.config.metobs_base_url == "https://opendata-download-metobs.smhi.se"
        assert client.config.hydroobs_base_url == "https://opendata-download-hydroobs.smhi.se"

    def test_timeout_defaults_to_config(self):
        client = SMHIClient(config=ClientConfig(timeout=12.5))
        assert client.timeout == 12.5

    def test_url_per_network(self, client):
        assert (
            client._url("meteorological", "parameter/1.json")
            == "https://opendata-download-metobs.smhi.se/api/version/1.0/parameter/1.json"
        )
        assert (
            client._url("hydrological", "parameter/2.json")
            == "https://opendata-download-hydroobs.smhi.se/api/version/1.0/parameter/2.json"
        )

    def test_unknown_network(self, client):
        with pytest.raises(SMHIValidationError, match="Unknown network"):
            client._url("oceanographic", "parameter/1.json")

    @patch("httpx.AsyncClient")
    @pytest.mark.asyncio
    async def test_get_stations_success(self, mock_client_class, client):
        """Test successful station roster retrieval."""
        mock_response = _json_response(
            {
                "key": "1",
                "title": "Lufttemperatur",
                "station": [
                    {
                        "key": "98230",
                        "id": 98230,
                        "name": "Stockholm-Observatoriekullen A",
                        "owner": "SMHI",
                        "height": 43.133,
                        "latitude": 59.3417,
                        "longitude": 18.0549,
                        "active": True,
                    },
                    {
                        "key": "97400",
                        "id": 97400,
                        "name": "Arlanda",
                        "height": 37.0,
                        "latitude": 59.6269,
                        "longitude": 17.9545,
                        "active": False,
                    },
                ],
            }
        )

        mock_client = AsyncMock()
        mock_client.get.return_value = mock_response
        mock_client_class.return_value = mock_client

        # Replace the client's _client with the mock
        client._client = mock_client

        stations = await client.get_stations("meteorological", 1)

        assert len(stations) == 2
        station = stations[0]
        assert station.id == 98230
        assert station.name == "Stockholm-Observatoriekullen A"
        assert station.latitude == 59.3417
        assert station.longitude == 18.0549
        assert station.active is True
        assert station.network == "meteorological"
        assert station.owner == "SMHI"
        assert stations[1].active is False

        url = mock_client.get.call_args[0][0]
        assert url.endswith("/api/version/1.0/parameter/1.json")
        assert url.startswith("https://opendata-download-metobs.smhi.se")

    @pytest.mark.asyncio
    async def test_get_stations_hydrological_fields(self, client):
        mock_client = AsyncMock()
        mock_client.get.return_value = _json_response(
            {
                "station": [
                    {
                        "id": 2357,
                        "name": "Torneträsk",
                        "latitude": 68.2,
                        "longitude": 19.7,
                        "active": True,
                        "waterCourse": "Torne älv",
                        "riverBasin": "Torneälven",
                    }
                ]
            }
        )
        client._client = mock_client

        stations = await client.get_stations("hydrological", 2)

        assert stations[0].water_course == "Torne älv"
        assert stations[0].to_dict()["riverBasin"] == "Torneälven"
        assert mock_client.get.call_args[0][0].startswith(
            "https://opendata-download-hydroobs.smhi.se"
        )

    @pytest.mark.asyncio
    async def test_get_stations_skips_malformed_entries(self, client):
        mock_client = AsyncMock()
        mock_client.get.return_value = _json_response(
            {
                "station": [
                    {"name": "No id", "latitude": 59.0, "longitude": 18.0},
                    {"id": "abc", "name": "Bad id"},
                    {"id": 1, "name": "Good", "latitude": 59.0, "longitude": 18.0, "active": True},
                ]
            }
        )
        client._client = mock_client

        stations = await client.get_stations("meteorological", 1)

        assert [station.id for station in stations] == [1]

    @patch("httpx.AsyncClient")
    @pytest.mark.asyncio
    async def test_timeout_error(self, mock_client_class, client):
        """Test timeout error handling."""
        from httpx import TimeoutException

        mock_client = AsyncMock()
        mock_client.get.side_effect = TimeoutException("Timeout")
        mock_client_class.return_value = mock_client

        # Replace the client's _client with the mock
        client._client = mock_client

        with pytest.raises(SMHIConnectionError, match="Request timeout") as exc_info:
            await client.get_stations("meteorological", 1)
        assert exc_info.value.status_code == 0
        assert exc_info.value.code == "UPSTREAM_API_ERROR"

    @pytest.mark.asyncio
    async def test_http_error_404(self, client):
        """404 means the resource does not exist upstream."""
        mock_client = AsyncMock()
        mock_client.get.side_effect = _status_error(404)
        client._client = mock_client

        with pytest.raises(SMHINotFoundError):
            await client.get_observation_data("meteorological", 1, 1, "latest-hour")

    @pytest.mark.asyncio
    async def test_http_error_500(self, client):
        mock_client = AsyncMock()
        mock_client.get.side_effect = _status_error(503)
        client._client = mock_client

        with pytest.raises(SMHIConnectionError, match="temporarily unavailable") as exc_info:
            await client.get_stations("hydrological", 1)
        assert exc_info.value.status_code == 503
        assert exc_info.value.origin == "https://opendata-download-hydroobs.smhi.se"

    @pytest.mark.asyncio
    async def test_http_error_429(self, client):
        mock_client = AsyncMock()
        mock_client.get.side_effect = _status_error(429)
        client._client = mock_client

        with pytest.raises(SMHIConnectionError, match="Rate limit"):
            await client.get_stations("meteorological", 1)

    @pytest.mark.asyncio
    async def test_network_error(self, client):
        from httpx import ConnectError

        mock_client = AsyncMock()
        mock_client.get.side_effect = ConnectError("connection refused")
        client._client = mock_client

        with pytest.raises(SMHIConnectionError, match="Network error"):
            await client.get_stations("meteorological", 1)

    @pytest.mark.asyncio
    async def test_invalid_json(self, client):
        import json

        response = Mock()
        response.raise_for_status.return_value = None
        response.json.side_effect = json.JSONDecodeError("Expecting value", "", 0)
        mock_client = AsyncMock()
        mock_client.get.return_value = response
        client._client = mock_client

        with pytest.raises(SMHIQueryError, match="Invalid JSON"):
            await client.get_observation_data("meteorological", 1, 1, "latest-hour")

    @pytest.mark.asyncio
    async def test_observation_payload_must_be_object(self, client):
        mock_client = AsyncMock()
        mock_client.get.return_value = _json_response([1, 2, 3])
        client._client = mock_client

        with pytest.raises(SMHIQueryError, match="Unexpected observation payload"):
            await client.get_observation_data("meteorological", 1, 1, "latest-day")

    @pytest.mark.asyncio
    async def test_get_archive_csv(self, client):
        response = Mock()
        response.raise_for_status.return_value = None
        response.text = "Datum;Tid (UTC);Lufttemperatur;Kvalitet\n"
        mock_client = AsyncMock()
        mock_client.get.return_value = response
        client._client = mock_client

        text = await client.get_archive_csv("meteorological", 1, 98230)

        assert text.startswith("Datum;Tid")
        url = mock_client.get.call_args[0][0]
        assert url.endswith(
            "parameter/1/station/98230/period/corrected-archive/data.csv"
        )
        assert mock_client.get.call_args[1]["headers"] == {"Accept": "text/plain"}

    @pytest.mark.asyncio
    async def test_context_manager_closes(self):
        client = SMHIClient()
        mock_client = AsyncMock()
        client._client = mock_client

        async with client as entered:
            assert entered is client

        mock_client.aclose.assert_awaited_once()
