"""
Nearest-station search over SMHI station rosters.
"""

import logging
from math import atan2, cos, radians, sin, sqrt
from typing import List, Optional, Tuple

from .client import SMHIClient
from .exceptions import SMHINotFoundError
from .models import Coordinate, StationInfo
from .parameters import ParameterTable

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate distance between two points using Haversine formula."""
    lat1_rad, lon1_rad = radians(lat1), radians(lon1)
    lat2_rad, lon2_rad = radians(lat2), radians(lon2)

    dlat = lat2_rad - lat1_rad
    dlon = lon2_rad - lon1_rad

    a = sin(dlat / 2) ** 2 + cos(lat1_rad) * cos(lat2_rad) * sin(dlon / 2) ** 2
    c = 2 * atan2(sqrt(a), sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def nearest_station(
    stations: List[StationInfo], coordinate: Coordinate
) -> Optional[StationInfo]:
    """Station with minimal distance; the first one wins exact ties."""
    nearest = None
    min_distance = float("inf")
    for station in stations:
        distance = haversine_distance(
            coordinate.latitude, coordinate.longitude, station.latitude, station.longitude
        )
        if distance < min_distance:
            nearest = station
            min_distance = distance
    return nearest


class StationLocator:
    """Find active stations reporting a parameter near a coordinate."""

    def __init__(self, client: SMHIClient, parameters: Optional[ParameterTable] = None):
        self.client = client
        self.parameters = parameters or ParameterTable()

    async def list_stations(
        self, network: str, parameter_name: str, active_only: bool = True
    ) -> List[StationInfo]:
        """
        Fetch the roster for a network and logical parameter.

        Raises:
            SMHINotFoundError: If the parameter name has no mapping
        """
        definition = self.parameters.lookup(network, parameter_name)
        if definition is None:
            raise SMHINotFoundError(f"{network} parameter", parameter_name)

        stations = await self.client.get_stations(network, definition.code)
        if active_only:
            stations = [station for station in stations if station.active]
        return stations

    async def find_nearest(
        self, network: str, coordinate: Coordinate, parameter_name: str
    ) -> StationInfo:
        """
        Find the nearest active station reporting a parameter.

        Args:
            network: 'meteorological' or 'hydrological'
            coordinate: Query point
            parameter_name: Logical parameter name (e.g. 'temperature')

        Returns:
            The active station closest to the coordinate

        Raises:
            SMHINotFoundError: If the parameter is unmapped or no active
                station reports it
        """
        stations = await self.list_stations(network, parameter_name)
        station = nearest_station(stations, coordinate)
        if station is None:
            raise SMHINotFoundError(
                f"{network} station",
                f"near {coordinate.latitude},{coordinate.longitude} for {parameter_name}",
            )

        logger.debug(
            f"Nearest {network} station for {parameter_name}: {station.id} ({station.name})"
        )
        return station

    async def find_nearby(
        self,
        network: str,
        coordinate: Coordinate,
        parameter_name: str,
        max_distance_km: float = 50.0,
        limit: int = 10,
    ) -> List[Tuple[StationInfo, float]]:
        """
        Find active stations within a radius.

        Returns:
            List of (StationInfo, distance_km) tuples, sorted by distance
        """
        stations = await self.list_stations(network, parameter_name)

        nearby_stations = []
        for station in stations:
            distance = haversine_distance(
                coordinate.latitude,
                coordinate.longitude,
                station.latitude,
                station.longitude,
            )
            if distance <= max_distance_km:
                nearby_stations.append((station, distance))

        # Sort by distance
        nearby_stations.sort(key=lambda x: x[1])

        return nearby_stations[:limit]
