"""
Date-bucketed reduction of reading sequences.

Long historical windows are summarised per day or per ISO week so that the
size of a response stays bounded: ten years of hourly readings (~87,000
values) become a few hundred weekly buckets.
"""

import logging
from typing import List, Optional, Sequence

import pandas as pd

from .exceptions import SMHIValidationError
from .models import AggregatedBucket, DateRange, Reading

logger = logging.getLogger(__name__)

DAILY = "daily"
WEEKLY = "weekly"
GRANULARITIES = (DAILY, WEEKLY)

# Windows of this many days or more are summarised per week
WEEKLY_THRESHOLD_DAYS = 90

_BUCKET_KIND = {DAILY: "day", WEEKLY: "week"}


def filter_readings(
    readings: Sequence[Reading], date_range: Optional[DateRange]
) -> List[Reading]:
    """Keep readings inside an inclusive window; no window keeps everything."""
    if date_range is None or date_range.is_open:
        return list(readings)
    return [reading for reading in readings if date_range.contains(reading.timestamp)]


def compute_range_days(
    readings: Sequence[Reading], date_range: Optional[DateRange] = None
) -> int:
    """
    Inclusive calendar-day span of a query.

    Caller-supplied bounds take precedence; an open side falls back to the
    earliest or latest reading timestamp.
    """
    start = date_range.start if date_range else None
    end = date_range.end if date_range else None

    if readings:
        if start is None:
            start = min(reading.timestamp for reading in readings)
        if end is None:
            end = max(reading.timestamp for reading in readings)

    if start is None or end is None:
        return 0
    return (end.date() - start.date()).days + 1


def select_granularity(range_days: int) -> str:
    """Weekly buckets for spans of WEEKLY_THRESHOLD_DAYS or more, else daily."""
    return WEEKLY if range_days >= WEEKLY_THRESHOLD_DAYS else DAILY


class TemporalAggregator:
    """Group readings by UTC day or ISO week and summarise each group."""

    def aggregate(
        self, readings: Sequence[Reading], granularity: str
    ) -> List[AggregatedBucket]:
        """
        Summarise readings into buckets.

        Args:
            readings: Readings to reduce, in any order
            granularity: 'daily' or 'weekly'

        Returns:
            Buckets sorted by period label. Daily labels are UTC dates,
            weekly labels are the Monday of the ISO week. Empty buckets are
            never emitted.
        """
        if granularity not in GRANULARITIES:
            raise SMHIValidationError(
                f"Unsupported granularity '{granularity}'. Available: {list(GRANULARITIES)}",
                field="granularity",
            )
        if not readings:
            return []

        frame = pd.DataFrame(
            {
                "timestamp": pd.to_datetime(
                    [reading.timestamp for reading in readings], utc=True
                ),
                "value": [reading.value for reading in readings],
            }
        )

        day = frame["timestamp"].dt.floor("D")
        if granularity == WEEKLY:
            day = day - pd.to_timedelta(day.dt.weekday, unit="D")
        frame["bucket"] = day.dt.strftime("%Y-%m-%d")

        stats = frame.groupby("bucket", sort=True)["value"].agg(
            ["min", "max", "mean", "count"]
        )

        kind = _BUCKET_KIND[granularity]
        buckets = [
            AggregatedBucket(
                period_label=str(label),
                bucket_kind=kind,
                min=round(float(row["min"]), 1),
                max=round(float(row["max"]), 1),
                avg=round(float(row["mean"]), 1),
                count=int(row["count"]),
            )
            for label, row in stats.iterrows()
        ]

        logger.debug(
            f"Aggregated {len(readings)} readings into {len(buckets)} {granularity} buckets"
        )
        return buckets

    def aggregate_daily(self, readings: Sequence[Reading]) -> List[AggregatedBucket]:
        return self.aggregate(readings, DAILY)

    def aggregate_weekly(self, readings: Sequence[Reading]) -> List[AggregatedBucket]:
        return self.aggregate(readings, WEEKLY)
