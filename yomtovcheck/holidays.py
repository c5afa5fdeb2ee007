"""
Holiday intervals (flat feed records -> HolidayInterval list).

The feed is a flat, date-ordered list. A holiday (or Shabbat) is everything
from a "Candle lighting" record to the next "Havdalah" record:

    awaiting-start --Candle lighting--> in-group --Havdalah--> awaiting-start

While in a group, every record with yomtov == "true" contributes its title
to the holiday name. A group still open when the feed ends (Havdalah falls
after the requested range) ends 73 hours after it started.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, timedelta, tzinfo
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from yomtovcheck.errors import ErrorPolicy, MalformedFeedStructureError, ParseError, handle
from yomtovcheck.feed import FeedRecord
from yomtovcheck.interval import Interval, shift
from yomtovcheck.model import HolidayInterval

logger = logging.getLogger(__name__)

CANDLE_LIGHTING = "Candle lighting"
HAVDALAH = "Havdalah"
DANGLING_GROUP_LENGTH = timedelta(hours=1 + 3 * 24)

FRIDAY = 5
SATURDAY = 6

_ROMAN_SUFFIX_RE = re.compile(r"(.*?) +[IVX]+", re.IGNORECASE)
_ROSH_HASHANA_YEAR_RE = re.compile(r"(rosh hashana) +\d{4}", re.IGNORECASE)


# ---------------------------------------------------------------------------
# Names
# ---------------------------------------------------------------------------


def clean_name(name: str) -> str:
    """
    "Sukkot II" -> "Sukkot", "Rosh Hashana 5784" -> "Rosh Hashana".
    """
    m = _ROMAN_SUFFIX_RE.fullmatch(name)
    if m:
        return m.group(1)
    m = _ROSH_HASHANA_YEAR_RE.fullmatch(name)
    if m:
        return m.group(1)
    return name


def contains_shabbat(interval: Interval) -> bool:
    if interval.duration() >= timedelta(days=7):
        return True
    start_day = interval.start.isoweekday()
    end_day = interval.end.isoweekday()
    if start_day > end_day:
        # wraps past Sunday
        return start_day <= FRIDAY
    return start_day <= FRIDAY and end_day >= SATURDAY


def holiday_name(names: List[str], interval: Interval) -> str:
    if not names:
        names = ["Shabbat" if contains_shabbat(interval) else "Yom Tov"]
    cleaned = [clean_name(n) for n in names]
    return "/".join(dict.fromkeys(cleaned))


def parse_feed_datetime(record: FeedRecord, zone: tzinfo) -> datetime:
    raw = record.get("date")
    if raw is None:
        raise MalformedFeedStructureError("Record has no date", line=str(record))
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError as e:
        raise MalformedFeedStructureError(f"Unparseable date {raw!r}", line=str(record)) from e
    if parsed.tzinfo is None:
        raise MalformedFeedStructureError(f"Date {raw!r} has no UTC offset", line=str(record))
    return parsed.astimezone(zone)


# ---------------------------------------------------------------------------
# Grouping state machine
# ---------------------------------------------------------------------------


class GroupState(Enum):
    AWAITING_START = "awaiting-start"
    IN_GROUP = "in-group"


class HolidayGrouper:
    """
    Feed records one at a time with `push`, then call `finish`.

    Under ErrorPolicy.LENIENT a record whose date cannot be used is skipped
    and the grouper stays in its current state.
    """

    def __init__(
        self,
        zone: tzinfo,
        policy: ErrorPolicy = ErrorPolicy.STRICT,
        issues: Optional[List[ParseError]] = None,
    ) -> None:
        self.zone = zone
        self.policy = policy
        self.issues = issues
        self.state = GroupState.AWAITING_START
        self.start: Optional[datetime] = None
        self.names: List[str] = []
        self.holidays: List[HolidayInterval] = []

    def push(self, record: FeedRecord) -> None:
        try:
            self._step(record)
        except MalformedFeedStructureError as e:
            handle(e, self.policy, self.issues, logger)

    def finish(self) -> List[HolidayInterval]:
        if self.state is GroupState.IN_GROUP and self.start is not None:
            end = shift(self.start, DANGLING_GROUP_LENGTH)
            logger.debug("No Havdalah after %s; assuming the holiday ends at %s", self.start, end)
            self._close(self.start, end)
        return list(self.holidays)

    def _step(self, record: FeedRecord) -> None:
        if self.state is GroupState.AWAITING_START or self.start is None:
            if record.get("title_orig") == CANDLE_LIGHTING:
                self._open(parse_feed_datetime(record, self.zone))
            return

        if record.get("yomtov") == "true":
            title = record.get("title")
            if title is not None:
                self.names.append(title)
        elif record.get("title_orig") == HAVDALAH:
            end = parse_feed_datetime(record, self.zone)
            try:
                self._close(self.start, end)
            except ValueError as e:
                raise MalformedFeedStructureError(str(e), line=str(record)) from e

    def _open(self, start: datetime) -> None:
        logger.debug("Holiday group opened at %s", start)
        self.state = GroupState.IN_GROUP
        self.start = start
        self.names = []

    def _close(self, start: datetime, end: datetime) -> None:
        interval = Interval(start, end)
        holiday = HolidayInterval(event_name=holiday_name(self.names, interval), interval=interval)
        logger.debug("Holiday group closed: %s", holiday.event_name)
        self.holidays.append(holiday)
        self.state = GroupState.AWAITING_START
        self.start = None
        self.names = []


def build_holiday_intervals(
    records: Iterable[FeedRecord],
    zone: tzinfo,
    window: Optional[Tuple[date, date]] = None,
    policy: ErrorPolicy = ErrorPolicy.STRICT,
    issues: Optional[List[ParseError]] = None,
) -> List[HolidayInterval]:
    """
    Group flat feed records into holiday intervals, in feed order.

    `window` is the date range the feed was requested for; it is only used
    for diagnostics.
    """
    grouper = HolidayGrouper(zone, policy, issues)
    for record in records:
        grouper.push(record)
    holidays = grouper.finish()
    if window is not None:
        logger.debug("Found %d holiday intervals between %s and %s", len(holidays), window[0], window[1])
    return holidays
