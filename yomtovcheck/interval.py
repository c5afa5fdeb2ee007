"""
Time intervals.

An Interval is a pair of timezone-aware datetimes. All comparisons are done
on the UTC instant, so two intervals expressed in different zones compare
correctly.

Overlap rule (strict at both ends):
    A contains dt  <=>  A.start < dt < A.end
    A overlaps B   <=>  A contains B.start or B.end, or B contains A.start or A.end

Two back-to-back intervals (one ends exactly when the other starts) do NOT
overlap.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo


def _utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        raise ValueError(f"Naive datetime not allowed in an interval: {dt!r}")
    return dt.astimezone(timezone.utc)


def shift(dt: datetime, delta: timedelta) -> datetime:
    """
    Add delta to dt on the absolute timeline and return it in dt's zone.

    Plain `dt + delta` on an aware datetime is wall-clock arithmetic and is
    off by an hour across a DST change.
    """
    return (_utc(dt) + delta).astimezone(dt.tzinfo)


@dataclass(frozen=True)
class Interval:
    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if _utc(self.start) > _utc(self.end):
            raise ValueError(f"Interval start {self.start} is after end {self.end}")

    def contains(self, dt: datetime) -> bool:
        return _utc(self.start) < _utc(dt) < _utc(self.end)

    def overlaps(self, other: Interval) -> bool:
        return (
            self.contains(other.start)
            or self.contains(other.end)
            or other.contains(self.start)
            or other.contains(self.end)
        )

    def duration(self) -> timedelta:
        return _utc(self.end) - _utc(self.start)

    def canonical(self, zone: tzinfo) -> Interval:
        """
        Same instants, re-expressed in `zone`.
        """
        return Interval(self.start.astimezone(zone), self.end.astimezone(zone))

    def __str__(self) -> str:
        return f"{self.start.isoformat()} - {self.end.isoformat()}"
