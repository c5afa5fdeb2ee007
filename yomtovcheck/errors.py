"""
Parse errors and the error policy.

Every error carries the offending logical line (calendar) or record text
(holiday feed) so the user can see exactly what went wrong.

Policy:
- STRICT  (default): the first error aborts the whole parse.
- LENIENT: the failing event block / feed object is skipped, the error is
  appended to the caller's `issues` list and logged as a warning.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional


class ErrorPolicy(str, Enum):
    STRICT = "strict"
    LENIENT = "lenient"


class ParseError(Exception):
    def __init__(self, message: str, *, line_no: Optional[int] = None, line: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.line_no = line_no
        self.line = line

    def __str__(self) -> str:
        where = ""
        if self.line_no is not None:
            where = f" (line {self.line_no})"
        text = f"{self.message}{where}"
        if self.line:
            text += f": {self.line!r}"
        return text


class CalendarParseError(ParseError):
    pass


class MalformedCalendarBlockError(CalendarParseError):
    pass


class AmbiguousTimeZoneError(CalendarParseError):
    pass


class UnrecognizedTimeZoneError(CalendarParseError):
    pass


class EmptyScheduleError(CalendarParseError):
    pass


class FeedParseError(ParseError):
    pass


class MalformedFeedStructureError(FeedParseError):
    pass


def handle(
    err: ParseError,
    policy: ErrorPolicy,
    issues: Optional[list[ParseError]],
    logger: logging.Logger,
) -> None:
    """
    Apply the error policy to one recoverable error: raise it (STRICT) or
    record and log it (LENIENT).
    """
    if policy is ErrorPolicy.STRICT:
        raise err
    logger.warning("Skipping: %s", err)
    if issues is not None:
        issues.append(err)
