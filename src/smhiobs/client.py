"""
HTTP client for the SMHI meteorological and hydrological observation APIs.
"""

import json
import logging
from typing import Any, Dict, List, Optional

import httpx

from .config import ClientConfig
from .exceptions import (
    SMHIConnectionError,
    SMHIError,
    SMHINotFoundError,
    SMHIQueryError,
)
from .models import StationInfo

logger = logging.getLogger(__name__)


class SMHIClient:
    """
    Client for the SMHI open data observation services.

    Two services share one URL scheme: metobs (meteorological stations) and
    hydroobs (hydrological stations). Every call is a single GET bounded by
    the configured timeout; nothing is cached or retried.
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        config: Optional[ClientConfig] = None,
    ):
        self.config = config or ClientConfig()
        self.timeout = timeout if timeout is not None else self.config.timeout
        self._client = httpx.AsyncClient(
            timeout=self.timeout,
            headers={
                "User-Agent": self.config.user_agent,
                "Accept": "application/json",
            },
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "SMHIClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    def _url(self, network: str, path: str) -> str:
        base = self.config.base_url_for(network)
        return f"{base}/api/version/{self.config.api_version}/{path}"

    async def _make_request(
        self, network: str, path: str, response_type: str = "json"
    ) -> Any:
        """Make a request to an SMHI API with error handling."""
        url = self._url(network, path)
        origin = self.config.base_url_for(network)
        headers = {"Accept": "text/plain"} if response_type == "text" else None

        logger.debug(f"GET {url}")
        try:
            response = await self._client.get(url, headers=headers)
            response.raise_for_status()
            if response_type == "text":
                return response.text
            return response.json()

        except httpx.TimeoutException as e:
            raise SMHIConnectionError(
                f"Request timeout after {self.timeout}s", status_code=0, origin=origin
            ) from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 404:
                raise SMHINotFoundError("SMHI resource", path) from e
            elif status == 429:
                raise SMHIConnectionError(
                    "Rate limit exceeded", status_code=status, origin=origin
                ) from e
            elif status >= 500:
                raise SMHIConnectionError(
                    "SMHI service temporarily unavailable",
                    status_code=status,
                    origin=origin,
                ) from e
            else:
                raise SMHIConnectionError(
                    f"HTTP error {status}: {e}", status_code=status, origin=origin
                ) from e
        except httpx.RequestError as e:
            raise SMHIConnectionError(
                f"Network error: {e}", status_code=0, origin=origin
            ) from e
        except json.JSONDecodeError as e:
            raise SMHIQueryError(f"Invalid JSON response: {e}") from e

    async def get_stations(self, network: str, parameter_code: int) -> List[StationInfo]:
        """
        Get the station roster for a parameter.

        Args:
            network: 'meteorological' or 'hydrological'
            parameter_code: SMHI parameter id

        Returns:
            List of StationInfo objects, active and inactive alike
        """
        try:
            data = await self._make_request(network, f"parameter/{parameter_code}.json")

            stations = []
            for station_data in data.get("station", []):
                try:
                    station = StationInfo(
                        id=int(station_data["id"]),
                        name=station_data.get("name", "Unknown"),
                        latitude=float(station_data.get("latitude", 0)),
                        longitude=float(station_data.get("longitude", 0)),
                        active=bool(station_data.get("active", False)),
                        height=station_data.get("height"),
                        network=network,
                        owner=station_data.get("owner"),
                        water_course=station_data.get("waterCourse"),
                        river_basin=station_data.get("riverBasin"),
                    )
                    stations.append(station)
                except (KeyError, ValueError, TypeError):
                    logger.debug(f"Skipping malformed station entry: {station_data!r}")
                    continue

            return stations

        except SMHIError:
            raise
        except Exception as e:
            raise SMHIQueryError(f"Failed to retrieve station list: {e}") from e

    async def get_observation_data(
        self, network: str, parameter_code: int, station_id: int, period: str
    ) -> Dict[str, Any]:
        """
        Get the structured JSON payload for a short observation period.

        The payload carries 'value' ({date, value, quality} entries, dates in
        epoch milliseconds), 'station', 'parameter' and 'period' blocks.
        """
        data = await self._make_request(
            network,
            f"parameter/{parameter_code}/station/{station_id}/period/{period}/data.json",
        )
        if not isinstance(data, dict):
            raise SMHIQueryError("Unexpected observation payload shape")
        return data

    async def get_archive_csv(
        self, network: str, parameter_code: int, station_id: int
    ) -> str:
        """Download the full-history corrected archive as delimited text."""
        return await self._make_request(
            network,
            f"parameter/{parameter_code}/station/{station_id}/period/corrected-archive/data.csv",
            response_type="text",
        )
