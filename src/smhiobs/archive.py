"""
Parser for SMHI corrected-archive documents.

The archive export is semicolon-delimited text made of several blocks: a
station block, a parameter block, a position table and finally the data
table. The data table layout depends on the kind of series and no tag names
it up front, so the layout is recognised from the table's header line:

    Datum;Tid (UTC);Lufttemperatur;Kvalitet;;Tidsutsnitt:
    1985-06-01;00:00:00;6.5;G;;

    Från Datum Tid (UTC);Till Datum Tid (UTC);Representativt dygn;Nederbördsmängd;Kvalitet;;
    1945-01-01 07:00:01;1945-01-02 07:00:00;1945-01-01;2.4;G;;

    Datum (svensk sommartid);Vattenföring (Dygn);Kvalitet;;;
    1901-01-01;248;G;;;

Rows that cannot be read (blank or non-numeric values, missing fields) are
counted and dropped; one corrupt row never fails the whole document.
"""

import enum
import logging
import math
import re
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from typing import Callable, Dict, List, Optional
from zoneinfo import ZoneInfo

from .exceptions import SMHIArchiveFormatError
from .models import ParameterSummary, PeriodSummary, Reading, StationSummary

logger = logging.getLogger(__name__)

DELIMITER = ";"

DATE_LED_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}")
PERIOD_START_PATTERN = re.compile(
    r"fr\.o\.m\.?\)?\s*=\s*(\d{4}-\d{2}-\d{2}(?:[ T]\d{2}:\d{2}(?::\d{2})?)?)"
)
PERIOD_END_PATTERN = re.compile(
    r"t\.o\.m\.?\)?\s*=\s*(\d{4}-\d{2}-\d{2}(?:[ T]\d{2}:\d{2}(?::\d{2})?)?)"
)

# Lines starting with these words are block headers, never identity lines
HEADER_KEYWORDS = (
    "Stationsnamn",
    "Parameternamn",
    "Tidsperiod",
    "Datum",
    "Från Datum",
    "Tidsutsnitt",
)

# Station lines name the operating network in one of their fields
NETWORK_OPERATOR_MARKERS = ("smhi", "stationsnät")

# Lower-cased fragments that identify the unit field of a parameter line
UNIT_TOKENS = (
    "celsius",
    "millimeter",
    "m³/s",
    "m3/s",
    "kubikmeter",
    "procent",
    "percent",
    "hektopascal",
    "hpa",
    "meter per sekund",
    "m/s",
    "grader",
    "degree",
    "centimeter",
    "cm",
)


class ArchiveFamily(enum.Enum):
    """Data table layouts found in corrected-archive documents."""

    HOURLY = "hourly"
    DAILY_PRECIPITATION = "daily_precipitation"
    HYDRO_DAILY = "hydro_daily"


# Checked in order: the more specific date headers come first
HEADER_MARKERS = (
    ("Från Datum", ArchiveFamily.DAILY_PRECIPITATION),
    ("Datum (svensk sommartid)", ArchiveFamily.HYDRO_DAILY),
    ("Datum;Tid", ArchiveFamily.HOURLY),
)


def classify_header(line: str) -> Optional[ArchiveFamily]:
    """Return the table family announced by a header line, if any."""
    for marker, family in HEADER_MARKERS:
        if line.startswith(marker):
            return family
    return None


@dataclass
class RowOutcome:
    """Result of reading one data row: a reading or the reason it was dropped."""

    reading: Optional[Reading] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.reading is not None


@dataclass
class ArchiveDocument:
    """Uniform view of a parsed archive document."""

    readings: List[Reading] = field(default_factory=list)
    station: Optional[StationSummary] = None
    parameter: Optional[ParameterSummary] = None
    period: PeriodSummary = field(default_factory=lambda: PeriodSummary(None, None))
    family: Optional[ArchiveFamily] = None
    skipped_rows: int = 0


def _split(line: str) -> List[str]:
    return [part.strip() for part in line.split(DELIMITER)]


def _is_header_line(line: str) -> bool:
    return line.startswith(HEADER_KEYWORDS)


def _parse_value(raw: str) -> Optional[float]:
    text = raw.strip().replace(",", ".")
    if not text:
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def _parse_utc_timestamp(text: str) -> datetime:
    """Parse 'YYYY-MM-DD[ HH:MM[:SS]]' as a UTC instant."""
    parsed = datetime.fromisoformat(text.strip().replace(" ", "T"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class ArchiveRecordParser:
    """
    Convert corrected-archive text into readings plus station, parameter
    and period metadata.
    """

    def __init__(self, local_timezone: str = "Europe/Stockholm"):
        self.local_timezone = ZoneInfo(local_timezone)
        self._row_parsers: Dict[ArchiveFamily, Callable[[List[str]], RowOutcome]] = {
            ArchiveFamily.HOURLY: self._parse_hourly_row,
            ArchiveFamily.DAILY_PRECIPITATION: self._parse_daily_precipitation_row,
            ArchiveFamily.HYDRO_DAILY: self._parse_hydro_daily_row,
        }

    def _local_noon(self, day_text: str) -> datetime:
        day = date.fromisoformat(day_text.strip())
        local = datetime.combine(day, time(12, 0), tzinfo=self.local_timezone)
        return local.astimezone(timezone.utc)

    def _parse_hourly_row(self, fields: List[str]) -> RowOutcome:
        if len(fields) < 3:
            return RowOutcome(reason="too few fields")
        value = _parse_value(fields[2])
        if value is None:
            return RowOutcome(reason="non-numeric value")
        try:
            timestamp = _parse_utc_timestamp(f"{fields[0]} {fields[1]}")
        except ValueError:
            return RowOutcome(reason="invalid timestamp")
        quality = fields[3] if len(fields) > 3 else ""
        return RowOutcome(reading=Reading(timestamp, value, quality))

    def _parse_daily_precipitation_row(self, fields: List[str]) -> RowOutcome:
        if len(fields) < 4:
            return RowOutcome(reason="too few fields")
        value = _parse_value(fields[3])
        if value is None:
            return RowOutcome(reason="non-numeric value")
        try:
            timestamp = self._local_noon(fields[2])
        except ValueError:
            return RowOutcome(reason="invalid representative day")
        quality = fields[4] if len(fields) > 4 else ""
        return RowOutcome(reading=Reading(timestamp, value, quality))

    def _parse_hydro_daily_row(self, fields: List[str]) -> RowOutcome:
        if len(fields) < 2:
            return RowOutcome(reason="too few fields")
        value = _parse_value(fields[1])
        if value is None:
            return RowOutcome(reason="non-numeric value")
        try:
            timestamp = self._local_noon(fields[0])
        except ValueError:
            return RowOutcome(reason="invalid date")
        quality = fields[2] if len(fields) > 2 else ""
        return RowOutcome(reading=Reading(timestamp, value, quality))

    def parse_row(self, family: ArchiveFamily, line: str) -> RowOutcome:
        """Parse one date-led data row according to a table family."""
        return self._row_parsers[family](_split(line))

    @staticmethod
    def _station_from(line: str, after_station_header: bool) -> Optional[StationSummary]:
        if _is_header_line(line) or DATE_LED_PATTERN.match(line):
            return None
        lowered = line.lower()
        if not after_station_header and not any(
            marker in lowered for marker in NETWORK_OPERATOR_MARKERS
        ):
            return None
        fields = _split(line)
        if len(fields) < 2 or not fields[0]:
            return None
        try:
            station_id = int(fields[1])
        except ValueError:
            return None
        return StationSummary(id=station_id, name=fields[0])

    @staticmethod
    def _parameter_from(line: str) -> Optional[ParameterSummary]:
        if _is_header_line(line) or DATE_LED_PATTERN.match(line):
            return None
        fields = _split(line)
        if not 2 <= len(fields) <= 4:
            return None
        unit = fields[-1]
        if not any(token in unit.lower() for token in UNIT_TOKENS):
            return None
        return ParameterSummary(name=fields[0], unit=unit)

    def parse(self, text: str) -> ArchiveDocument:
        """
        Parse a corrected-archive document.

        Args:
            text: Full archive document

        Returns:
            ArchiveDocument with readings in document order

        Raises:
            SMHIArchiveFormatError: If a non-empty document contains no
                recognisable data table header
        """
        document = ArchiveDocument()
        family: Optional[ArchiveFamily] = None
        previous_line = ""
        skip_reasons: Dict[str, int] = {}

        for raw_line in text.splitlines():
            line = raw_line.strip().lstrip("\ufeff")
            if not line:
                continue

            if document.station is None:
                station = self._station_from(
                    line, previous_line.startswith("Stationsnamn")
                )
                if station is not None:
                    document.station = station
                    previous_line = line
                    continue

            if document.parameter is None:
                parameter = self._parameter_from(line)
                if parameter is not None:
                    document.parameter = parameter
                    previous_line = line
                    continue

            start_match = PERIOD_START_PATTERN.search(line)
            if start_match and document.period.start is None:
                document.period.start = _parse_utc_timestamp(start_match.group(1))
            end_match = PERIOD_END_PATTERN.search(line)
            if end_match and document.period.end is None:
                document.period.end = _parse_utc_timestamp(end_match.group(1))

            header_family = classify_header(line)
            if header_family is not None:
                family = header_family
                document.family = family
                previous_line = line
                continue

            if family is not None and DATE_LED_PATTERN.match(line):
                outcome = self.parse_row(family, line)
                if outcome.ok:
                    document.readings.append(outcome.reading)  # type: ignore[arg-type]
                else:
                    document.skipped_rows += 1
                    reason = outcome.reason or "unknown"
                    skip_reasons[reason] = skip_reasons.get(reason, 0) + 1

            previous_line = line

        if document.family is None and text.strip():
            raise SMHIArchiveFormatError(
                "No recognised data table header in archive document"
            )

        if document.skipped_rows:
            logger.warning(
                f"Dropped {document.skipped_rows} unreadable archive rows: {skip_reasons}"
            )
        logger.debug(
            f"Parsed {len(document.readings)} readings ({document.family}) from archive"
        )
        return document
