"""
Python client for SMHI meteorological and hydrological station observations.

Find the station nearest a point or administrative area, fetch its readings,
and summarise long historical windows per day or per ISO week.
"""

try:
    from importlib import metadata

    __version__ = metadata.version(__name__)
except Exception:
    __version__ = "unknown"

from .aggregation import TemporalAggregator
from .archive import ArchiveDocument, ArchiveFamily, ArchiveRecordParser
from .client import SMHIClient
from .config import ClientConfig
from .convenience import (
    find_nearest_station,
    get_nearby_stations,
    get_observations,
    get_observations_batch,
    list_parameters,
    list_stations,
    resolve_area,
)
from .exceptions import (
    SMHIArchiveFormatError,
    SMHIConnectionError,
    SMHIError,
    SMHINotFoundError,
    SMHIQueryError,
    SMHIValidationError,
)
from .fetcher import ObservationFetcher
from .locator import StationLocator, haversine_distance
from .models import (
    AggregatedBucket,
    AggregatedObservationResult,
    AggregationInfo,
    Coordinate,
    DateRange,
    ObservationResult,
    Reading,
    StationInfo,
)
from .parameters import ParameterDefinition, ParameterTable
from .regions import AdminAreaResolver
from .service import ObservationService
from .sync import (
    find_nearest_station_sync,
    get_observations_sync,
    list_stations_sync,
)

__all__ = [
    # Core client and pipeline
    "SMHIClient",
    "ClientConfig",
    "ObservationService",
    "StationLocator",
    "ObservationFetcher",
    "TemporalAggregator",
    "ArchiveRecordParser",
    "AdminAreaResolver",
    "ParameterTable",
    # Convenience functions
    "get_observations",
    "get_observations_batch",
    "find_nearest_station",
    "get_nearby_stations",
    "list_stations",
    "list_parameters",
    "resolve_area",
    # Sync versions
    "get_observations_sync",
    "find_nearest_station_sync",
    "list_stations_sync",
    # Models
    "AggregatedBucket",
    "AggregatedObservationResult",
    "AggregationInfo",
    "ArchiveDocument",
    "ArchiveFamily",
    "Coordinate",
    "DateRange",
    "ObservationResult",
    "ParameterDefinition",
    "Reading",
    "StationInfo",
    # Utilities
    "haversine_distance",
    # Exceptions
    "SMHIError",
    "SMHIValidationError",
    "SMHINotFoundError",
    "SMHIConnectionError",
    "SMHIQueryError",
    "SMHIArchiveFormatError",
]
