"""
Email drafts for professors.

Groups the missed meetings by course and writes one short email per course
into a plain text file the student can copy from.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List

from yomtovcheck.model import Conflict
from yomtovcheck.report import date_slot


def conflicts_by_course(conflicts: Iterable[Conflict]) -> Dict[str, List[str]]:
    """
    course name -> one sentence per missed meeting, in first-seen course order.
    """
    out: Dict[str, List[str]] = {}
    for conflict in conflicts:
        for m in conflict.meetings:
            line = f"I will be missing class on {date_slot(m.interval)} for the holiday of {conflict.holiday.event_name}."
            out.setdefault(m.course_name, []).append(line)
    return out


def render_email(course: str, lines: List[str], sender_name: str = "") -> str:
    classes = "classes" if len(lines) > 1 else "class"
    parts = [
        f"------- {course} -------",
        "",
        "Dear Professor,",
        "",
        f"I hope this email finds you well. I am enrolled to take {course} with you this semester.",
        "",
        "I wanted to reach out to you now to let you know that I am an observant Jew "
        f"and will have to miss some {classes} due to conflicts with Jewish holidays.",
        "",
        *lines,
        "",
        "I'm looking forward to taking your class, and hope these absences will not be too much of an inconvenience.",
        "",
        "Thank you so much for your understanding!",
    ]
    if sender_name.strip():
        parts += ["", "Best,", sender_name.strip()]
    return "\n".join(parts)


def render_emails(conflicts: Iterable[Conflict], sender_name: str = "") -> str:
    by_course = conflicts_by_course(conflicts)
    return "\n\n\n".join(render_email(course, lines, sender_name) for course, lines in by_course.items())


def write_emails(conflicts: Iterable[Conflict], out_path: str | Path, sender_name: str = "") -> int:
    """
    Write all emails to a text file. Returns the number of emails written.
    """
    conflicts = list(conflicts)
    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)

    n = len(conflicts_by_course(conflicts))
    text = render_emails(conflicts, sender_name)
    out.write_text(text + "\n" if text else "", encoding="utf-8")
    return n
