"""
Conflict detection.

Given a schedule and the holiday intervals, find every class meeting that
falls inside a holiday.

Overlap rule (see yomtovcheck.interval):
    strict at both ends, so a class ending exactly at candle lighting
    is NOT a conflict
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, Iterator, List

from yomtovcheck.interval import Interval
from yomtovcheck.model import Conflict, CourseMeeting, HolidayInterval, Schedule


def _dates_inclusive(first: date, last: date) -> Iterator[date]:
    day = first
    while day <= last:
        yield day
        day += timedelta(days=1)


def meetings_on_date(schedule: Schedule, day: date) -> List[CourseMeeting]:
    """
    All meetings of all courses on `day`, in course order.
    """
    out: List[CourseMeeting] = []
    for course in schedule.courses:
        meeting = course.meeting_on_date(day)
        if meeting is not None:
            out.append(CourseMeeting(course_name=course.name, interval=meeting))
    return out


def meetings_in_interval(schedule: Schedule, interval: Interval) -> List[CourseMeeting]:
    """
    Meetings that overlap `interval`, ordered by date, then course.

    Every calendar day touched by the interval is checked, even if the
    interval only covers part of it. A one-off meeting spanning several
    days is listed once for each of those days.
    """
    interval = interval.canonical(schedule.zone)
    out: List[CourseMeeting] = []
    for day in _dates_inclusive(interval.start.date(), interval.end.date()):
        for meeting in meetings_on_date(schedule, day):
            if interval.overlaps(meeting.interval):
                out.append(meeting)
    return out


def find_conflicts(schedule: Schedule, holidays: Iterable[HolidayInterval]) -> List[Conflict]:
    """
    One Conflict per holiday that has at least one overlapping meeting,
    in holiday order.
    """
    conflicts: List[Conflict] = []
    for holiday in holidays:
        meetings = meetings_in_interval(schedule, holiday.interval)
        if meetings:
            conflicts.append(Conflict(holiday=holiday, meetings=tuple(meetings)))
    return conflicts
