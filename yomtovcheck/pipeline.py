"""
End-to-end check: calendar text -> schedule -> holidays -> conflicts.

Nothing after a failed step runs: a calendar parse error stops before any
holiday work, a feed parse error stops before conflict detection.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Tuple

from yomtovcheck.config import Settings
from yomtovcheck.conflicts import find_conflicts
from yomtovcheck.errors import ParseError
from yomtovcheck.feed import parse_feed
from yomtovcheck.fetch import fetch_holiday_feed, holiday_window
from yomtovcheck.holidays import build_holiday_intervals
from yomtovcheck.model import Conflict, HolidayInterval, Schedule
from yomtovcheck.parse import parse_schedule


@dataclass(frozen=True)
class CheckResult:
    schedule: Schedule
    holidays: Tuple[HolidayInterval, ...]
    conflicts: Tuple[Conflict, ...]
    window: Tuple[date, date]


def run_check(
    calendar_text: str,
    settings: Settings,
    feed_text: Optional[str] = None,
    issues: Optional[List[ParseError]] = None,
) -> CheckResult:
    zone = settings.zone
    schedule = parse_schedule(calendar_text, zone, settings.policy, issues)

    window = holiday_window(schedule, settings.pad_days)
    if feed_text is None:
        feed_text = fetch_holiday_feed(window[0], window[1], settings)

    records = parse_feed(feed_text, settings.policy, issues)
    holidays = build_holiday_intervals(records, zone, window, settings.policy, issues)
    conflicts = find_conflicts(schedule, holidays)

    return CheckResult(
        schedule=schedule,
        holidays=tuple(holidays),
        conflicts=tuple(conflicts),
        window=window,
    )
