"""
Parsing (.ics calendar text -> Schedule).

- Unfolds continuation lines and splits the text into logical lines
- Collects every VEVENT block (SUMMARY, DTSTART, DTEND, RRULE)
- Turns each block into exactly ONE course:
  - RRULE with BYDAY -> WeeklyCourse
  - otherwise        -> SingletonCourse
- Computes the schedule's first/last date and fills in missing UNTIL dates

Time zone rules for DTSTART / DTEND:
1. TZID=... parameter wins
2. a trailing "Z" means UTC, except for exporters known to write local
   times with a "Z" (see LOCAL_TIME_AS_UTC_PRODIDS)
3. otherwise the configured local zone
VALUE=DATE start -> local midnight, VALUE=DATE end -> last instant of that day.
Every datetime is converted to the canonical zone before it is stored.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from datetime import date, datetime, time, timezone, tzinfo
from typing import FrozenSet, List, Optional, Tuple

from yomtovcheck.config import resolve_zone
from yomtovcheck.errors import (
    AmbiguousTimeZoneError,
    CalendarParseError,
    EmptyScheduleError,
    ErrorPolicy,
    MalformedCalendarBlockError,
    ParseError,
    UnrecognizedTimeZoneError,
    handle,
)
from yomtovcheck.interval import Interval
from yomtovcheck.model import Course, Schedule, SingletonCourse, WeeklyCourse

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_FOLD_RE = re.compile(r"(?:\r\n|\n|\r)[ \t]")
_LINE_BREAK_RE = re.compile(r"\r\n|\n|\r")

# Penn Labs (PennCoursePlan) writes local times with a "Z" suffix.
# See https://github.com/pennlabs/penn-courses/issues/489
LOCAL_TIME_AS_UTC_PRODIDS = frozenset({"PRODID:Penn Labs"})

_WEEKDAYS = {
    "MO": 1,
    "TU": 2,
    "WE": 3,
    "TH": 4,
    "FR": 5,
    "SA": 6,
    "SU": 7,
    "MONDAY": 1,
    "TUESDAY": 2,
    "WEDNESDAY": 3,
    "THURSDAY": 4,
    "FRIDAY": 5,
    "SATURDAY": 6,
    "SUNDAY": 7,
}

_TEXT_ESCAPES = re.compile(r"\\([\\;,nN])")


# ---------------------------------------------------------------------------
# Line handling
# ---------------------------------------------------------------------------


def unfold_lines(text: str) -> List[str]:
    """
    Merge continuation lines (leading space/tab) into the previous line,
    then split into logical lines.
    """
    return _LINE_BREAK_RE.split(_FOLD_RE.sub("", text))


def _unescape_text(value: str) -> str:
    def repl(m: re.Match) -> str:
        ch = m.group(1)
        return "\n" if ch in "nN" else ch

    return _TEXT_ESCAPES.sub(repl, value)


def _property_value(line: str) -> str:
    # NAME;PARAM=x:value -> value
    return line.split(":", 1)[1] if ":" in line else ""


def _has_property(line: str, name: str) -> bool:
    return line.startswith(name) and line[len(name) : len(name) + 1] in (":", ";")


# ---------------------------------------------------------------------------
# Date-time values
# ---------------------------------------------------------------------------


def _lookup_zone(name: str, line_no: Optional[int], line: str) -> tzinfo:
    try:
        return resolve_zone(name.strip('"'))
    except UnrecognizedTimeZoneError as e:
        raise UnrecognizedTimeZoneError(e.message, line_no=line_no, line=line) from e


def parse_dt_property(
    line: str,
    zone: tzinfo,
    local_as_utc: bool = False,
    line_no: Optional[int] = None,
) -> datetime:
    """
    Parse a whole DTSTART / DTEND line into an aware datetime in `zone`.
    """
    parts = line.split(":")
    if len(parts) != 2:
        raise MalformedCalendarBlockError("Invalid date-time property", line_no=line_no, line=line)
    head, value = parts
    name, *params = head.split(";")

    date_only = False
    tz_name: Optional[str] = None
    for param in params:
        if param.startswith("TZID="):
            if tz_name is not None:
                raise AmbiguousTimeZoneError("Multiple time zones specified", line_no=line_no, line=line)
            tz_name = param[len("TZID=") :]
        elif param == "VALUE=DATE":
            date_only = True

    value_zone: tzinfo
    if value.endswith("Z"):
        if tz_name is not None:
            raise AmbiguousTimeZoneError("Both TZID and a UTC marker specified", line_no=line_no, line=line)
        value = value[:-1]
        value_zone = zone if local_as_utc else timezone.utc
    elif tz_name is not None:
        value_zone = _lookup_zone(tz_name, line_no, line)
    else:
        value_zone = zone

    try:
        if date_only:
            day = datetime.strptime(value, "%Y%m%d").date()
            clock = time.max if name == "DTEND" else time.min
            parsed = datetime.combine(day, clock, tzinfo=value_zone)
        else:
            parsed = datetime.strptime(value, "%Y%m%dT%H%M%S").replace(tzinfo=value_zone)
    except ValueError as e:
        raise MalformedCalendarBlockError(f"Unparseable timestamp {value!r}", line_no=line_no, line=line) from e

    return parsed.astimezone(zone)


def parse_until(
    value: str,
    zone: tzinfo,
    local_as_utc: bool = False,
    line_no: Optional[int] = None,
    line: Optional[str] = None,
) -> date:
    """
    Parse an RRULE UNTIL value (date-time or date) into a date in `zone`.
    """
    try:
        if len(value) == 8:
            return datetime.strptime(value, "%Y%m%d").date()
        if value.endswith("Z"):
            parsed = datetime.strptime(value[:-1], "%Y%m%dT%H%M%S")
            if local_as_utc:
                return parsed.date()
            return parsed.replace(tzinfo=timezone.utc).astimezone(zone).date()
        return datetime.strptime(value, "%Y%m%dT%H%M%S").date()
    except ValueError as e:
        raise MalformedCalendarBlockError(f"Unparseable UNTIL value {value!r}", line_no=line_no, line=line) from e


def parse_byday(value: str, line_no: Optional[int] = None, line: Optional[str] = None) -> FrozenSet[int]:
    days = set()
    for token in value.split(","):
        key = token.strip().upper()
        if key not in _WEEKDAYS:
            raise MalformedCalendarBlockError(f"Unknown weekday {token!r} in BYDAY", line_no=line_no, line=line)
        days.add(_WEEKDAYS[key])
    return frozenset(days)


# ---------------------------------------------------------------------------
# Event blocks
# ---------------------------------------------------------------------------


@dataclass
class _EventDraft:
    line_no: int
    name: Optional[str] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    days: Optional[FrozenSet[int]] = None
    until: Optional[date] = None

    def to_course(self, zone: tzinfo) -> Course:
        if self.name is None or self.start is None or self.end is None:
            missing = [k for k in ("name", "start", "end") if getattr(self, k) is None]
            raise MalformedCalendarBlockError(
                f"Event is missing {', '.join(missing)}", line_no=self.line_no, line="BEGIN:VEVENT"
            )

        if self.days is not None:
            return WeeklyCourse(
                name=self.name,
                days=self.days,
                start_time=self.start.time(),
                end_time=self.end.time(),
                first_date=self.start.date(),
                last_date=self.until,
                zone=zone,
            )

        try:
            interval = Interval(self.start, self.end)
        except ValueError as e:
            raise MalformedCalendarBlockError(str(e), line_no=self.line_no, line="BEGIN:VEVENT") from e
        return SingletonCourse(name=self.name, interval=interval)


def _parse_rrule(line: str, draft: _EventDraft, zone: tzinfo, local_as_utc: bool, line_no: int) -> None:
    for comp in re.split(r"[:;]", line)[1:]:
        key, _, value = comp.partition("=")
        if key == "FREQ" and value != "WEEKLY":
            raise MalformedCalendarBlockError(f"Unsupported recurrence frequency {value!r}", line_no=line_no, line=line)
        if key == "INTERVAL" and value != "1":
            raise MalformedCalendarBlockError(f"Unsupported recurrence interval {value!r}", line_no=line_no, line=line)
        if key == "UNTIL":
            draft.until = parse_until(value, zone, local_as_utc, line_no, line)
        elif key == "BYDAY":
            draft.days = parse_byday(value, line_no, line)


def _parse_event(begin_no: int, block: List[Tuple[int, str]], zone: tzinfo, local_as_utc: bool) -> Course:
    """
    Parse the lines between BEGIN:VEVENT and END:VEVENT into one course.
    """
    draft = _EventDraft(line_no=begin_no)

    for line_no, line in block:
        if _has_property(line, "SUMMARY"):
            draft.name = _unescape_text(_property_value(line))
        elif _has_property(line, "DTSTART"):
            draft.start = parse_dt_property(line, zone, local_as_utc, line_no)
        elif _has_property(line, "DTEND"):
            draft.end = parse_dt_property(line, zone, local_as_utc, line_no)
        elif line.startswith("RRULE:"):
            _parse_rrule(line, draft, zone, local_as_utc, line_no)

    return draft.to_course(zone)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_courses(
    text: str,
    zone: tzinfo,
    policy: ErrorPolicy = ErrorPolicy.STRICT,
    issues: Optional[List[ParseError]] = None,
) -> List[Course]:
    """
    Parse every VEVENT in the calendar text into a course, in file order.

    Weekly courses without UNTIL still have last_date=None here.
    """
    lines = unfold_lines(text)
    local_as_utc = False
    courses: List[Course] = []

    i = 0
    while i < len(lines):
        line = lines[i]
        i += 1

        if line == "END:VCALENDAR":
            break
        if line in LOCAL_TIME_AS_UTC_PRODIDS:
            logger.debug("Exporter writes local times as UTC: %s", line)
            local_as_utc = True
            continue
        if line != "BEGIN:VEVENT":
            continue

        begin_no = i
        block: List[Tuple[int, str]] = []
        while i < len(lines) and lines[i] != "END:VEVENT":
            block.append((i + 1, lines[i]))
            i += 1
        if i >= len(lines):
            # No END:VEVENT: nothing after this point can be trusted
            raise MalformedCalendarBlockError("Unterminated event block", line_no=begin_no, line=line)
        i += 1  # skip END:VEVENT

        try:
            courses.append(_parse_event(begin_no, block, zone, local_as_utc))
        except CalendarParseError as e:
            handle(e, policy, issues, logger)

    logger.debug("Parsed %d courses", len(courses))
    return courses


def build_schedule(courses: List[Course], zone: tzinfo) -> Schedule:
    """
    Compute the schedule's date bounds and give every open-ended weekly
    course the schedule's last date.
    """
    if not courses:
        raise EmptyScheduleError("No courses were found in the calendar")

    first_date = min(c.first_date for c in courses)
    ends = [c.last_date for c in courses if c.last_date is not None]
    if not ends:
        raise MalformedCalendarBlockError("Cannot determine the schedule's last date: no course has an end date")
    last_date = max(ends)

    filled: List[Course] = []
    for c in courses:
        if isinstance(c, WeeklyCourse) and c.last_date is None:
            c = replace(c, last_date=last_date)
        filled.append(c)

    return Schedule(courses=tuple(filled), first_date=first_date, last_date=last_date, zone=zone)


def parse_schedule(
    text: str,
    zone: tzinfo,
    policy: ErrorPolicy = ErrorPolicy.STRICT,
    issues: Optional[List[ParseError]] = None,
) -> Schedule:
    """
    Parse calendar text into a complete Schedule.
    """
    return build_schedule(parse_courses(text, zone, policy, issues), zone)
