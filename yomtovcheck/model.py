"""
Central data model definitions used across the project.

This module defines the canonical structure of courses, holidays and
conflicts so that:
- the calendar parser, the holiday builder and the conflict engine share the same types
- every stored datetime is timezone-aware and already in the canonical zone
- values are immutable once built (a course with a filled-in end date is a new value)

A course is one of exactly two shapes:
- SingletonCourse: meets once, at a fixed interval
- WeeklyCourse: meets on some weekdays, at a fixed time of day, between two dates
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, tzinfo
from typing import FrozenSet, Optional, Tuple, Union

from yomtovcheck.interval import Interval


@dataclass(frozen=True)
class SingletonCourse:
    """
    A course event that happens exactly once.
    """

    name: str
    interval: Interval

    @property
    def first_date(self) -> date:
        return self.interval.start.date()

    @property
    def last_date(self) -> date:
        return self.interval.end.date()

    def meeting_on_date(self, day: date) -> Optional[Interval]:
        if self.first_date <= day <= self.last_date:
            return self.interval
        return None


@dataclass(frozen=True)
class WeeklyCourse:
    """
    A course that repeats every week.

    `days` holds ISO weekday numbers (Monday=1 ... Sunday=7).
    `last_date` is None only while the schedule is still being built
    (an RRULE without UNTIL); Schedule never contains such a course.
    """

    name: str
    days: FrozenSet[int]
    start_time: time
    end_time: time
    first_date: date
    last_date: Optional[date]
    zone: tzinfo = field(compare=False)

    def meeting_on_date(self, day: date) -> Optional[Interval]:
        if self.last_date is None:
            raise ValueError(f"Weekly course {self.name!r} has no end date")
        if day < self.first_date or day > self.last_date:
            return None
        if day.isoweekday() not in self.days:
            return None
        start = datetime.combine(day, self.start_time, tzinfo=self.zone)
        end_day = day if self.end_time >= self.start_time else day + timedelta(days=1)
        end = datetime.combine(end_day, self.end_time, tzinfo=self.zone)
        return Interval(start, end)


Course = Union[SingletonCourse, WeeklyCourse]


@dataclass(frozen=True)
class Schedule:
    """
    The parsed calendar: all courses plus the earliest/latest meeting date.
    """

    courses: Tuple[Course, ...]
    first_date: date
    last_date: date
    zone: tzinfo = field(compare=False)


@dataclass(frozen=True)
class CourseMeeting:
    course_name: str
    interval: Interval


@dataclass(frozen=True)
class HolidayInterval:
    event_name: str
    interval: Interval


@dataclass(frozen=True)
class Conflict:
    holiday: HolidayInterval
    meetings: Tuple[CourseMeeting, ...]
