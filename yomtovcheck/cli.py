"""
CLI (Command Line Interface).

Quick terminal commands, e.g.:

    yomtovcheck check schedule.ics
    yomtovcheck check https://penncourseplan.com/api/plan/calendar/<token>
    yomtovcheck emails schedule.ics --name "Sarah" --out emails.txt
    yomtovcheck interactive

Note:
- The interactive session lives in yomtovcheck/interactive.py
- Every command exits with 0 on success and 1 on a parse / download error
"""

from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

import requests

from yomtovcheck.config import Settings, resolve_zone
from yomtovcheck.emails import write_emails
from yomtovcheck.errors import ErrorPolicy, ParseError
from yomtovcheck.fetch import load_calendar_text
from yomtovcheck.pipeline import CheckResult, run_check
from yomtovcheck.report import NO_CONFLICTS, conflict_sentences

DEFAULT_EMAILS_FILE = "yomtovcheck_emails.txt"


def _settings_from_args(args: argparse.Namespace) -> Settings:
    """
    Environment first, then explicit CLI flags on top.
    """
    settings = Settings.from_env()
    if args.tz:
        settings = replace(settings, timezone=args.tz)
    if args.zip:
        settings = replace(settings, zip_code=args.zip)
    if args.pad_days is not None:
        settings = replace(settings, pad_days=args.pad_days)
    if args.lenient:
        settings = replace(settings, policy=ErrorPolicy.LENIENT)
    return settings


def _run(args: argparse.Namespace, settings: Settings) -> Optional[CheckResult]:
    """
    Load inputs and run the check. Prints a diagnostic and returns None on failure.
    """
    issues: List[ParseError] = []
    try:
        calendar_text = load_calendar_text(args.source, timeout=settings.timeout)
        feed_text = Path(args.feed_file).read_text(encoding="utf-8") if args.feed_file else None
        result = run_check(calendar_text, settings, feed_text=feed_text, issues=issues)
    except ParseError as e:
        print(f"Error while parsing: {e}")
        return None
    except requests.RequestException as e:
        print(f"Error while downloading: {e}")
        return None
    except OSError as e:
        print(f"Error while reading a file: {e}")
        return None

    for issue in issues:
        print(f"Skipped: {issue}")
    return result


def _cmd_check(args: argparse.Namespace, settings: Settings) -> int:
    """
    Print every class meeting that falls on a holiday.
    """
    result = _run(args, settings)
    if result is None:
        return 1

    lines = conflict_sentences(result.conflicts)
    if not lines:
        print(NO_CONFLICTS)
        return 0

    for line in lines:
        print(line)
    return 0


def _cmd_emails(args: argparse.Namespace, settings: Settings) -> int:
    """
    Write one email per affected course into a text file.
    """
    result = _run(args, settings)
    if result is None:
        return 1

    if not result.conflicts:
        print(NO_CONFLICTS)
        return 0

    n = write_emails(result.conflicts, args.out, sender_name=args.name or "")
    print(f"Generated {n} email(s) into: {args.out}")
    return 0


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument("source", type=str, help="Path or URL of the .ics file with your schedule")
    p.add_argument("--feed-file", type=str, default=None, help="Use a saved Hebcal JSON response instead of downloading")


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="yomtovcheck", description="Find classes that fall on Jewish holidays")
    parser.add_argument("--tz", type=str, default=None, help="Local time zone (default America/New_York)")
    parser.add_argument("--zip", type=str, default=None, help="ZIP code for candle lighting times (default 19104)")
    parser.add_argument("--pad-days", type=int, default=None, help="Days added before/after the semester (default 7)")
    parser.add_argument("--lenient", action="store_true", help="Skip broken events/records instead of stopping")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_check = sub.add_parser("check", help="Show classes that conflict with holidays")
    _add_common(p_check)

    p_emails = sub.add_parser("emails", help="Generate emails to your professors")
    _add_common(p_emails)
    p_emails.add_argument("--out", type=str, default=DEFAULT_EMAILS_FILE, help="Output text file")
    p_emails.add_argument("--name", type=str, default="", help="Your name, used to sign the emails")

    sub.add_parser("interactive", help="Interactive mode")

    return parser


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    try:
        settings = _settings_from_args(args)
        resolve_zone(settings.timezone)
    except (ParseError, ValueError) as e:
        print(f"Invalid settings: {e}")
        raise SystemExit(1)

    if args.command == "check":
        raise SystemExit(_cmd_check(args, settings))
    if args.command == "emails":
        raise SystemExit(_cmd_emails(args, settings))

    if args.command == "interactive":
        from yomtovcheck.interactive import run_interactive

        raise SystemExit(run_interactive(settings))

    raise SystemExit(2)
