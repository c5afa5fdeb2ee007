from __future__ import annotations

from typing import List, Optional

import requests
from rich.console import Console

from yomtovcheck.config import Settings
from yomtovcheck.emails import write_emails
from yomtovcheck.errors import ParseError
from yomtovcheck.fetch import clean_source, load_calendar_text
from yomtovcheck.pipeline import CheckResult, run_check
from yomtovcheck.report import print_conflicts

EMAILS_FILE = "yomtovcheck_emails.txt"

console = Console()


def _println(msg: str = "") -> None:
    console.print(msg)


def _prompt(msg: str) -> str:
    return console.input(msg)


def _flow_load(settings: Settings) -> Optional[CheckResult]:
    _println(
        "We need to know which classes you are in. Download the .ics file (or copy the .ics link) "
        "of your schedule from PennCoursePlan, or the secret .ics address of a Google Calendar "
        "that only contains your classes."
    )
    source = clean_source(_prompt("Enter the file path or URL of the .ics file with your schedule: "))
    _println(f"You entered: {source}")

    issues: List[ParseError] = []
    try:
        with console.status("Checking your schedule against the holiday calendar..."):
            result = run_check(load_calendar_text(source, timeout=settings.timeout), settings, issues=issues)
    except ParseError as e:
        _println(f"[red]An error occurred while parsing:[/] {e}")
        return None
    except requests.RequestException as e:
        _println(f"[red]The request failed:[/] {e}")
        _println(
            "If this is a PennCoursePlan url, use your browser to check the url is valid. "
            "If this is a Google Calendar url, check in a private window that the link is publicly viewable."
        )
        return None
    except OSError as e:
        _println(f"[red]Could not read the schedule file:[/] {e}")
        return None

    for issue in issues:
        _println(f"[yellow]Skipped:[/] {issue}")
    return result


def run_interactive(settings: Settings) -> int:
    """
    Ask for name and schedule, show conflicts, optionally write emails.
    Returns the process exit code.
    """
    name = _prompt("Hello!\nTo start please enter your name: ").strip()
    _println(
        "Welcome to yomtovcheck: a tool to help you track which classes you may miss for Jewish holidays."
    )

    result = _flow_load(settings)
    if result is None:
        return 1

    _println()
    print_conflicts(list(result.conflicts), console)

    if not result.conflicts:
        _println("Okay, thank you for using yomtovcheck!")
        return 0

    answer = _prompt("Would you like us to generate emails you can send to your professors (Y/N)? ")
    if answer.strip().lower().startswith("y"):
        n = write_emails(result.conflicts, EMAILS_FILE, sender_name=name)
        _println(f"{n} email(s) generated into the file {EMAILS_FILE}.")
        _println("Thank you for using our tool!")
    else:
        _println("Okay, thank you for using yomtovcheck!")
    return 0
