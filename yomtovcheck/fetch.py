from __future__ import annotations

import logging
from datetime import date, timedelta
from pathlib import Path
from typing import Tuple
from urllib.parse import urlencode

import requests

from yomtovcheck.config import Settings
from yomtovcheck.model import Schedule

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# URLs
# ---------------------------------------------------------------------------

HEBCAL_URL = "https://www.hebcal.com/hebcal"

HEADERS = {"User-Agent": "yomtovcheck/0.1"}


# ---------------------------------------------------------------------------
# Calendar text
# ---------------------------------------------------------------------------


def clean_source(source: str) -> str:
    """
    Strip whitespace and the quotes a terminal adds around dragged-in paths.
    """
    s = source.strip()
    while len(s) >= 2 and s[0] == s[-1] and s[0] in "\"'":
        s = s[1:-1].strip()
    return s


def is_url(source: str) -> bool:
    return source.lower().startswith(("http://", "https://", "webcal://"))


def load_calendar_text(source: str, timeout: float = 30) -> str:
    """
    Return the .ics text from a URL (PennCoursePlan / Google Calendar link)
    or from a local file.
    """
    src = clean_source(source)
    if not is_url(src):
        logger.debug("Reading calendar file %s", src)
        return Path(src).read_text(encoding="utf-8")

    if src.lower().startswith("webcal://"):
        src = "https://" + src[len("webcal://") :]

    logger.debug("Fetching calendar %s", src)
    resp = requests.get(src, headers=HEADERS, timeout=timeout, allow_redirects=True)
    resp.raise_for_status()
    return resp.text


# ---------------------------------------------------------------------------
# Holiday feed
# ---------------------------------------------------------------------------


def holiday_window(schedule: Schedule, pad_days: int) -> Tuple[date, date]:
    pad = timedelta(days=pad_days)
    return schedule.first_date - pad, schedule.last_date + pad


def holiday_feed_url(start: date, end: date, zip_code: str) -> str:
    params = {
        "cfg": "json",
        "v": "1",
        "maj": "on",
        "leyning": "off",
        "c": "on",
        "geo": "zip",
        "zip": zip_code,
        "start": start.isoformat(),
        "end": end.isoformat(),
    }
    return f"{HEBCAL_URL}?{urlencode(params)}"


def fetch_holiday_feed(start: date, end: date, settings: Settings) -> str:
    """
    Download the major holidays and candle lighting times for [start, end].
    """
    url = holiday_feed_url(start, end, settings.zip_code)
    logger.debug("Fetching holidays %s", url)
    resp = requests.get(url, headers=HEADERS, timeout=settings.timeout)
    resp.raise_for_status()
    return resp.text
