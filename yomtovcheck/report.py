"""
Console output for conflicts.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from yomtovcheck.interval import Interval
from yomtovcheck.model import Conflict

NO_CONFLICTS = "There were no conflicts with your schedule"


def time_slot(interval: Interval) -> str:
    return f"{interval.start:%H:%M}-{interval.end:%H:%M}"


def date_slot(interval: Interval) -> str:
    return f"{interval.start:%m/%d}"


def conflict_sentences(conflicts: Iterable[Conflict]) -> List[str]:
    out: List[str] = []
    for conflict in conflicts:
        for m in conflict.meetings:
            out.append(
                f"The course {m.course_name} meeting from {time_slot(m.interval)} "
                f"on {date_slot(m.interval)} conflicts with the holiday of {conflict.holiday.event_name}."
            )
    return out


def print_conflicts(conflicts: List[Conflict], console: Optional[Console] = None) -> None:
    console = console or Console()
    if not conflicts:
        console.print(NO_CONFLICTS)
        return

    table = Table(box=box.SIMPLE_HEAVY)
    table.add_column("Holiday", style="bold magenta")
    table.add_column("Date", style="cyan")
    table.add_column("Time", style="yellow")
    table.add_column("Course")

    for conflict in conflicts:
        for m in conflict.meetings:
            table.add_row(conflict.holiday.event_name, date_slot(m.interval), time_slot(m.interval), m.course_name)

    console.print(table)
    n = sum(len(c.meetings) for c in conflicts)
    console.print(f"Conflicts found: {n}")
