"""
Observation retrieval for one station, parameter and period.
"""

import logging
import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .archive import ArchiveRecordParser
from .client import SMHIClient
from .exceptions import SMHINotFoundError, SMHIQueryError
from .models import (
    ObservationResult,
    ParameterSummary,
    PeriodSummary,
    Reading,
    StationSummary,
)
from .parameters import ARCHIVE_PERIOD, ParameterTable, validate_period

logger = logging.getLogger(__name__)


def _from_epoch_ms(value: Any) -> datetime:
    return datetime.fromtimestamp(int(value) / 1000, tz=timezone.utc)


def transform_observations(values: List[Dict[str, Any]]) -> List[Reading]:
    """Convert upstream {date, value, quality} entries to readings."""
    readings = []
    for item in values:
        try:
            timestamp = _from_epoch_ms(item["date"])
            value = float(item["value"])
        except (KeyError, ValueError, TypeError):
            # Skip invalid data points
            logger.debug(f"Skipping unreadable observation value: {item!r}")
            continue
        if not math.isfinite(value):
            logger.debug(f"Skipping non-finite observation value: {item!r}")
            continue
        readings.append(
            Reading(
                timestamp=timestamp,
                value=value,
                quality=str(item.get("quality", "")),
            )
        )
    return readings


def _latest_position(positions: Any) -> Dict[str, Any]:
    """Most recent entry of the payload's position history, or {}."""
    entries = [entry for entry in positions or [] if isinstance(entry, dict)]
    if not entries:
        return {}
    return max(entries, key=lambda entry: entry.get("from") or 0)


class ObservationFetcher:
    """
    Fetch readings for a station, normalising the structured recent periods
    and the corrected archive into the same ObservationResult shape.
    """

    def __init__(
        self,
        client: SMHIClient,
        parameters: Optional[ParameterTable] = None,
        archive_parser: Optional[ArchiveRecordParser] = None,
    ):
        self.client = client
        self.parameters = parameters or ParameterTable()
        self.archive_parser = archive_parser or ArchiveRecordParser(
            client.config.local_timezone
        )

    async def fetch(
        self, network: str, station_id: int, parameter_name: str, period: str
    ) -> Optional[ObservationResult]:
        """
        Get observation data for a station.

        Args:
            network: 'meteorological' or 'hydrological'
            station_id: SMHI station id
            parameter_name: Logical parameter name (e.g. 'water_level')
            period: 'latest-hour', 'latest-day', 'latest-months' or
                    'corrected-archive'

        Returns:
            ObservationResult, or None when SMHI has no data for the
            combination (upstream 404 or an archive without readable rows)

        Raises:
            SMHINotFoundError: If the parameter name has no mapping
            SMHIValidationError: If the period is not supported
        """
        definition = self.parameters.lookup(network, parameter_name)
        if definition is None:
            raise SMHINotFoundError(f"{network} parameter", parameter_name)
        validate_period(period)

        try:
            if period == ARCHIVE_PERIOD:
                return await self._fetch_archive(
                    network, station_id, definition.code, definition.unit
                )
            return await self._fetch_recent(network, station_id, definition.code, period)
        except SMHINotFoundError:
            logger.debug(
                f"No {period} data for station {station_id}, parameter {parameter_name}"
            )
            return None

    async def _fetch_recent(
        self, network: str, station_id: int, parameter_code: int, period: str
    ) -> ObservationResult:
        payload = await self.client.get_observation_data(
            network, parameter_code, station_id, period
        )

        station = payload.get("station") or {}
        position = _latest_position(payload.get("position"))
        parameter = payload.get("parameter") or {}
        period_info = payload.get("period") or {}

        try:
            return ObservationResult(
                station=StationSummary(
                    id=int(station.get("key") or station.get("id") or station_id),
                    name=station.get("name", ""),
                    latitude=float(
                        station.get("latitude") or position.get("latitude") or 0.0
                    ),
                    longitude=float(
                        station.get("longitude") or position.get("longitude") or 0.0
                    ),
                    height=float(station.get("height") or position.get("height") or 0.0),
                    active=bool(station.get("active", True)),
                ),
                parameter=ParameterSummary(
                    name=parameter.get("name", ""), unit=parameter.get("unit", "")
                ),
                period=PeriodSummary(
                    start=_from_epoch_ms(period_info["from"])
                    if period_info.get("from") is not None
                    else None,
                    end=_from_epoch_ms(period_info["to"])
                    if period_info.get("to") is not None
                    else None,
                    sampling=period_info.get("sampling", ""),
                ),
                readings=transform_observations(payload.get("value") or []),
            )
        except (ValueError, TypeError) as e:
            raise SMHIQueryError(f"Failed to read observation payload: {e}") from e

    async def _fetch_archive(
        self, network: str, station_id: int, parameter_code: int, default_unit: str
    ) -> Optional[ObservationResult]:
        text = await self.client.get_archive_csv(network, parameter_code, station_id)
        document = self.archive_parser.parse(text)
        if not document.readings:
            logger.debug(f"Archive for station {station_id} holds no readable rows")
            return None

        start = document.period.start or document.readings[0].timestamp
        end = document.period.end or document.readings[-1].timestamp

        # The archive export carries no station coordinates; they stay zero
        station = document.station or StationSummary(id=station_id, name="")
        parameter = document.parameter or ParameterSummary(name="", unit=default_unit)

        return ObservationResult(
            station=StationSummary(
                id=station.id,
                name=station.name,
                latitude=0.0,
                longitude=0.0,
                height=0.0,
                active=True,
            ),
            parameter=parameter,
            period=PeriodSummary(
                start=start,
                end=end,
                sampling=document.family.value if document.family else "",
            ),
            readings=document.readings,
        )
