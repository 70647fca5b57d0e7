"""
Synchronous wrapper functions and utilities for smhiobs.

This module provides synchronous versions of the async convenience functions
for users who prefer blocking calls or cannot use async/await syntax. Under
the hood, these functions use asyncio to run async code synchronously.

Usage:
    # Instead of this async code:
    async with SMHIClient() as client:
        result = await ObservationService(client).get_observations(...)

    # Use this sync code:
    from smhiobs.sync import get_observations_sync
    result = get_observations_sync("meteorological", "temperature", area_code="AB")
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Optional, TypeVar

R = TypeVar("R")


class AsyncSyncBridge:
    """Runs async functions to completion from synchronous code."""

    @staticmethod
    def run_async(
        async_fn: Callable[..., Awaitable[R]],
        args: tuple = (),
        kwargs: Optional[dict] = None,
    ) -> R:
        """Run an async function synchronously.

        Args:
            async_fn: Async function to run
            args: Positional arguments for the function
            kwargs: Keyword arguments for the function

        Returns:
            Result of running the async function

        Raises:
            RuntimeError: If called from within an existing event loop
        """
        if kwargs is None:
            kwargs = {}

        try:
            asyncio.get_running_loop()
        except RuntimeError:
            pass
        else:
            raise RuntimeError(
                "Cannot use sync version from within an existing asyncio event loop. "
                "Use the async version instead."
            )

        return asyncio.run(async_fn(*args, **kwargs))


def get_observations_sync(
    network: str,
    parameter: str,
    period: str = "latest-hour",
    station_id: Optional[int] = None,
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
    area_code: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> Dict[str, Any]:
    """Synchronous version of get_observations.

    Examples:
        >>> result = get_observations_sync(
        ...     "meteorological", "temperature", period="corrected-archive",
        ...     area_code="AB", start_date="2020-01-01", end_date="2020-12-31",
        ... )
        >>> result["aggregation"]["granularity"]
        'weekly'
    """
    from .convenience import get_observations

    return AsyncSyncBridge.run_async(
        get_observations,
        args=(network, parameter),
        kwargs={
            "period": period,
            "station_id": station_id,
            "latitude": latitude,
            "longitude": longitude,
            "area_code": area_code,
            "start_date": start_date,
            "end_date": end_date,
        },
    )


def find_nearest_station_sync(
    network: str,
    parameter: str,
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
    area_code: Optional[str] = None,
) -> Dict[str, Any]:
    """Synchronous version of find_nearest_station."""
    from .convenience import find_nearest_station

    return AsyncSyncBridge.run_async(
        find_nearest_station,
        args=(network, parameter),
        kwargs={"latitude": latitude, "longitude": longitude, "area_code": area_code},
    )


def list_stations_sync(
    network: str, parameter: Optional[str] = None
) -> List[Dict[str, Any]]:
    """Synchronous version of list_stations."""
    from .convenience import list_stations

    return AsyncSyncBridge.run_async(
        list_stations, args=(network,), kwargs={"parameter": parameter}
    )


__all__ = [
    "AsyncSyncBridge",
    "get_observations_sync",
    "find_nearest_station_sync",
    "list_stations_sync",
]
