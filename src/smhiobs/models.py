"""
Data models for SMHI meteorological and hydrological observations.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union

from .exceptions import SMHIValidationError

if TYPE_CHECKING:
    import pandas as pd


def _isoformat_utc(value: datetime) -> str:
    """ISO-8601 with a trailing Z for UTC instants."""
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class Coordinate:
    """WGS84 point in decimal degrees."""

    latitude: float
    longitude: float


@dataclass
class StationInfo:
    """An observation station from an SMHI roster."""

    id: int
    name: str
    latitude: float
    longitude: float
    active: bool
    height: Optional[float] = None
    network: Optional[str] = None  # 'meteorological' or 'hydrological'
    owner: Optional[str] = None
    water_course: Optional[str] = None
    river_basin: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "height": self.height,
            "active": self.active,
        }
        if self.water_course is not None:
            data["waterCourse"] = self.water_course
        if self.river_basin is not None:
            data["riverBasin"] = self.river_basin
        return data


@dataclass
class Reading:
    """A single timestamped observation value."""

    timestamp: datetime
    value: float
    quality: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": _isoformat_utc(self.timestamp),
            "value": self.value,
            "quality": self.quality,
        }


@dataclass
class StationSummary:
    """Station block of an observation result."""

    id: int
    name: str
    latitude: float = 0.0
    longitude: float = 0.0
    height: float = 0.0
    active: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "height": self.height,
            "active": self.active,
        }


@dataclass
class ParameterSummary:
    name: str
    unit: str

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "unit": self.unit}


@dataclass
class PeriodSummary:
    """Coverage of a reading set as reported upstream."""

    start: Optional[datetime]
    end: Optional[datetime]
    sampling: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from": _isoformat_utc(self.start) if self.start else None,
            "to": _isoformat_utc(self.end) if self.end else None,
            "sampling": self.sampling,
        }


@dataclass
class ObservationResult:
    """Raw readings for one station, parameter and period."""

    station: StationSummary
    parameter: ParameterSummary
    period: PeriodSummary
    readings: List[Reading] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "station": self.station.to_dict(),
            "parameter": self.parameter.to_dict(),
            "period": self.period.to_dict(),
            "observations": [reading.to_dict() for reading in self.readings],
        }

    def to_pandas(self) -> "pd.DataFrame":
        """Readings as a DataFrame with timestamp, value and quality columns."""
        import pandas as pd

        return pd.DataFrame(
            {
                "timestamp": pd.to_datetime(
                    [reading.timestamp for reading in self.readings], utc=True
                ),
                "value": [reading.value for reading in self.readings],
                "quality": [reading.quality for reading in self.readings],
            }
        )


@dataclass
class AggregatedBucket:
    """Summary statistics for the readings of one day or one ISO week."""

    period_label: str
    bucket_kind: str  # 'day' or 'week'
    min: float
    max: float
    avg: float
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "period": self.period_label,
            "kind": self.bucket_kind,
            "min": self.min,
            "max": self.max,
            "avg": self.avg,
            "count": self.count,
        }


@dataclass
class AggregationInfo:
    granularity: str  # 'daily' or 'weekly'
    range_days: int
    raw_count: int
    aggregated_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "granularity": self.granularity,
            "rangeDays": self.range_days,
            "rawCount": self.raw_count,
            "aggregatedCount": self.aggregated_count,
        }


@dataclass
class AggregatedObservationResult:
    """Observation result whose readings were reduced to buckets."""

    station: StationSummary
    parameter: ParameterSummary
    period: PeriodSummary
    aggregation: AggregationInfo
    buckets: List[AggregatedBucket] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "station": self.station.to_dict(),
            "parameter": self.parameter.to_dict(),
            "period": self.period.to_dict(),
            "aggregation": self.aggregation.to_dict(),
            "observations": [bucket.to_dict() for bucket in self.buckets],
        }

    def to_pandas(self) -> "pd.DataFrame":
        import pandas as pd

        return pd.DataFrame(
            [bucket.to_dict() for bucket in self.buckets],
            columns=["period", "kind", "min", "max", "avg", "count"],
        )


@dataclass
class ResolvedArea:
    """Representative point for an administrative-area code."""

    coordinate: Coordinate
    name: str
    kind: str  # 'municipality' or 'region'
    code: str
    region_code: str


DateLike = Union[str, date, datetime, None]


def _coerce_bound(value: DateLike, field_name: str, is_end: bool) -> Optional[datetime]:
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.max if is_end else time.min)
    elif isinstance(value, str):
        text = value.strip()
        try:
            if len(text) == 10:
                day = date.fromisoformat(text)
                parsed = datetime.combine(day, time.max if is_end else time.min)
            else:
                parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError as e:
            raise SMHIValidationError(
                f"Invalid date format for {field_name}: {value!r}. "
                "Use YYYY-MM-DD or an ISO-8601 timestamp",
                field=field_name,
            ) from e
    else:
        raise SMHIValidationError(
            f"Unsupported {field_name} value: {value!r}", field=field_name
        )

    return _as_utc(parsed)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class DateRange:
    """
    Optional inclusive window used to slice readings after fetching.

    A missing bound means the window is open on that side. Date-only bounds
    cover the whole day (an end date includes every reading on that date).
    """

    start: Optional[datetime] = None
    end: Optional[datetime] = None

    def __post_init__(self) -> None:
        # Naive bounds are read as UTC so they compare with reading timestamps
        for name in ("start", "end"):
            value = getattr(self, name)
            if value is None:
                continue
            if not isinstance(value, datetime):
                raise SMHIValidationError(
                    f"Date range {name} must be a datetime, got {value!r}",
                    field=f"{name}_date",
                )
            object.__setattr__(self, name, _as_utc(value))
        if self.start is not None and self.end is not None and self.start > self.end:
            raise SMHIValidationError(
                "Start of date range must not be after its end", field="start_date"
            )

    @classmethod
    def from_values(cls, start: DateLike = None, end: DateLike = None) -> "DateRange":
        return cls(
            start=_coerce_bound(start, "start_date", is_end=False),
            end=_coerce_bound(end, "end_date", is_end=True),
        )

    @property
    def is_open(self) -> bool:
        """True when neither bound is set."""
        return self.start is None and self.end is None

    def contains(self, instant: datetime) -> bool:
        if self.start is not None and instant < self.start:
            return False
        if self.end is not None and instant > self.end:
            return False
        return True

    def span_days(self) -> Optional[int]:
        """Inclusive number of calendar days, if both bounds are set."""
        if self.start is None or self.end is None:
            return None
        return (self.end.date() - self.start.date()).days + 1

    def __str__(self) -> str:
        start = self.start.date().isoformat() if self.start else "..."
        end = self.end.date().isoformat() if self.end else "..."
        return f"{start}/{end}"


