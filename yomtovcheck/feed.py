"""
Holiday feed parsing (response body -> flat records).

The Hebcal response is JSON, but we only need the flat string fields of
each entry in its "items" array. The items are cut out with a handful of
regular expressions instead of a JSON parser:

1. find `"items": [ ... ]`
2. split at `},{` into objects
3. split each object at commas next to a quote into `"key": value` pairs
4. match each pair and store it as str -> str

Limitations: items must not contain nested objects/arrays, and values must
not contain a quote or a comma that sits next to a quote. Feeds that break
this are rejected (MalformedFeedStructureError), never silently mis-read.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional

from yomtovcheck.errors import ErrorPolicy, MalformedFeedStructureError, ParseError, handle

logger = logging.getLogger(__name__)

FeedRecord = Dict[str, str]

_ITEMS_RE = re.compile(r'"items"\s*:\s*\[([^\[\]]*)\]')
_OBJECT_SEPARATOR_RE = re.compile(r"(?<=\})\s*,\s*(?=\{)")
_OBJECT_RE = re.compile(r"\s*\{([^{}]*)\}\s*")
_PAIR_SEPARATOR_RE = re.compile(r'(?<=")\s*,\s*|\s*,\s*(?=")')
_PAIR_RE = re.compile(r'\s*"([^"]*)"\s*:\s*(?:"([^"]*)"|([^"]*?))\s*')


def extract_items(body: str) -> str:
    """
    Return the raw text between the brackets of the "items" array.
    """
    m = _ITEMS_RE.search(body)
    if not m:
        raise MalformedFeedStructureError("Could not find a flat \"items\" array in the feed", line=body[:200])
    return m.group(1)


def split_objects(items: str) -> List[str]:
    if not items.strip():
        return []
    return _OBJECT_SEPARATOR_RE.split(items)


def parse_object(obj: str, index: Optional[int] = None) -> FeedRecord:
    """
    Parse one `{ "k": "v", ... }` substring into a flat record.
    """
    m = _OBJECT_RE.fullmatch(obj)
    if not m:
        raise MalformedFeedStructureError("Could not match feed object", line_no=index, line=obj)

    record: FeedRecord = {}
    content = m.group(1)
    if not content.strip():
        return record

    for pair in _PAIR_SEPARATOR_RE.split(content):
        pm = _PAIR_RE.fullmatch(pair)
        if not pm:
            raise MalformedFeedStructureError("Could not match key/value pair", line_no=index, line=pair)
        quoted, bare = pm.group(2), pm.group(3)
        record[pm.group(1)] = quoted if quoted is not None else bare
    return record


def parse_feed(
    body: str,
    policy: ErrorPolicy = ErrorPolicy.STRICT,
    issues: Optional[List[ParseError]] = None,
) -> List[FeedRecord]:
    """
    Parse the feed body into flat records, keeping feed order.

    `line_no` on errors is the 1-based position of the item in the array.
    """
    records: List[FeedRecord] = []
    for i, obj in enumerate(split_objects(extract_items(body)), start=1):
        try:
            records.append(parse_object(obj, i))
        except MalformedFeedStructureError as e:
            handle(e, policy, issues, logger)

    logger.debug("Parsed %d feed records", len(records))
    return records
