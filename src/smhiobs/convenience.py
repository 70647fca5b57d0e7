"""
High-level convenience functions for SMHI observation access.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

from .client import SMHIClient
from .config import ClientConfig
from .exceptions import SMHINotFoundError
from .locator import haversine_distance
from .models import DateRange
from .parameters import DEFAULT_PERIOD, ParameterTable
from .regions import AdminAreaResolver
from .service import ObservationService
from .utils import add_sync_version, run_with_concurrency


@asynccontextmanager
async def _client_scope(client: Optional[SMHIClient]) -> AsyncIterator[SMHIClient]:
    """Use the given client, or a temporary one configured from the environment."""
    if client is not None:
        yield client
        return
    async with SMHIClient(config=ClientConfig.from_env()) as temp_client:
        yield temp_client


def _date_range(start_date: Optional[str], end_date: Optional[str]) -> Optional[DateRange]:
    if not start_date and not end_date:
        return None
    return DateRange.from_values(start_date, end_date)


@add_sync_version
async def get_observations(
    network: str,
    parameter: str,
    period: str = DEFAULT_PERIOD,
    station_id: Optional[int] = None,
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
    area_code: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    client: Optional[SMHIClient] = None,
) -> Dict[str, Any]:
    """
    Get observations for a station or a location.

    Provide station_id directly, or a location as latitude/longitude or an
    administrative-area code (municipality '0180' or county 'AB'). When
    start_date or end_date is given, readings are restricted to that window
    and summarised per day (windows under 90 days) or per ISO week.

    Args:
        network: 'meteorological' or 'hydrological'
        parameter: Parameter name, e.g. 'temperature', 'precipitation',
                   'water_level', 'water_flow'
        period: 'latest-hour', 'latest-day', 'latest-months' or
                'corrected-archive' (full history)
        station_id: SMHI station id
        latitude: Latitude (WGS84) for the nearest-station search
        longitude: Longitude (WGS84) for the nearest-station search
        area_code: Municipality or county code for the nearest-station search
        start_date: Window start, YYYY-MM-DD or ISO-8601 timestamp
        end_date: Window end (inclusive), YYYY-MM-DD or ISO-8601 timestamp
        client: Optional SMHIClient; a temporary one is created otherwise

    Returns:
        Dictionary with station, parameter, period and observations, plus
        an aggregation block when a window was given

    Examples:
        # Last hour of temperature at the station nearest Stockholm
        result = await get_observations(
            "meteorological", "temperature", latitude=59.33, longitude=18.07
        )

        # Weekly summaries of 2020 river flow in Västra Götaland
        result = await get_observations(
            "hydrological", "water_flow", period="corrected-archive",
            area_code="O", start_date="2020-01-01", end_date="2020-12-31",
        )
    """
    date_range = _date_range(start_date, end_date)

    async with _client_scope(client) as active_client:
        service = ObservationService(active_client)
        result = await service.get_observations(
            network,
            parameter,
            period=period,
            station_id=station_id,
            latitude=latitude,
            longitude=longitude,
            area_code=area_code,
            date_range=date_range,
        )
        return result.to_dict()


@add_sync_version
async def get_observations_batch(
    requests: List[Dict[str, Any]],
    concurrency: Optional[int] = None,
    client: Optional[SMHIClient] = None,
) -> List[Dict[str, Any]]:
    """
    Run several get_observations requests with a bounded number in flight.

    Args:
        requests: Keyword-argument dictionaries for get_observations
        concurrency: Requests per batch (default from ClientConfig, 2)
        client: Optional shared SMHIClient

    Returns:
        One result dictionary per request, in request order
    """
    async with _client_scope(client) as active_client:
        limit = concurrency or active_client.config.max_concurrency

        def _factory(kwargs: Dict[str, Any]) -> Any:
            return lambda: get_observations(**kwargs, client=active_client)

        return await run_with_concurrency(
            [_factory(kwargs) for kwargs in requests], limit
        )


@add_sync_version
async def find_nearest_station(
    network: str,
    parameter: str,
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
    area_code: Optional[str] = None,
    client: Optional[SMHIClient] = None,
) -> Dict[str, Any]:
    """
    Find the nearest active station reporting a parameter.

    Returns:
        Station dictionary with a distance_km entry
    """
    async with _client_scope(client) as active_client:
        service = ObservationService(active_client)
        coordinate = service.resolve_coordinate(latitude, longitude, area_code)
        station = await service.locator.find_nearest(network, coordinate, parameter)

        station_dict = station.to_dict()
        station_dict["distance_km"] = round(
            haversine_distance(
                coordinate.latitude,
                coordinate.longitude,
                station.latitude,
                station.longitude,
            ),
            2,
        )
        return station_dict


@add_sync_version
async def get_nearby_stations(
    network: str,
    parameter: str,
    latitude: float,
    longitude: float,
    max_distance_km: float = 50.0,
    limit: int = 10,
    client: Optional[SMHIClient] = None,
) -> List[Dict[str, Any]]:
    """
    Find active stations near a location.

    Returns:
        List of station dictionaries with distance information, nearest first
    """
    async with _client_scope(client) as active_client:
        service = ObservationService(active_client)
        coordinate = service.resolve_coordinate(latitude, longitude)
        nearby = await service.locator.find_nearby(
            network, coordinate, parameter, max_distance_km=max_distance_km, limit=limit
        )

        result = []
        for station, distance in nearby:
            station_dict = station.to_dict()
            station_dict["distance_km"] = round(distance, 2)
            result.append(station_dict)
        return result


@add_sync_version
async def list_stations(
    network: str,
    parameter: Optional[str] = None,
    client: Optional[SMHIClient] = None,
) -> List[Dict[str, Any]]:
    """
    List active stations of a network.

    Args:
        network: 'meteorological' or 'hydrological'
        parameter: Only stations reporting this parameter (default: the
                   network's first parameter, temperature or water_level)
    """
    async with _client_scope(client) as active_client:
        stations = await ObservationService(active_client).list_stations(
            network, parameter
        )
        return [station.to_dict() for station in stations]


def list_parameters(network: str) -> List[Dict[str, Any]]:
    """Observation parameters available for a network."""
    return ParameterTable().describe(network)


def resolve_area(code: str) -> Dict[str, Any]:
    """
    Representative coordinate for a municipality or county code.

    Raises:
        SMHINotFoundError: If the code is malformed or unknown
    """
    area = AdminAreaResolver().resolve(code)
    if area is None:
        raise SMHINotFoundError("Administrative area", code)
    return {
        "code": area.code,
        "name": area.name,
        "type": area.kind,
        "region": area.region_code,
        "latitude": area.coordinate.latitude,
        "longitude": area.coordinate.longitude,
    }
