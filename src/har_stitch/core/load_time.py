"""Fully-loaded time per page, derived from HAR entry timings.

A page is fully loaded when its slowest request finishes. For every page the
result is the latest ``entry start + entry time`` measured from the page's own
``startedDateTime``, in milliseconds.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from numbers import Real
from typing import TypedDict

from har_stitch.core.errors import HarFormatError, MalformedTimestampError
from har_stitch.core.records import entry_record, page_id

_ONE_MS = timedelta(milliseconds=1)


class FullyLoaded(TypedDict):
    url: str | None
    fullyLoaded: float


def parse_timestamp(value: object) -> datetime:
    """Parse an ISO-8601 HAR timestamp into an aware datetime.

    Values without a UTC offset are read as UTC.

    Raises:
        MalformedTimestampError: value is not a parseable ISO-8601 string
    """
    if not isinstance(value, str) or not value:
        raise MalformedTimestampError(value)
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as e:
        raise MalformedTimestampError(value) from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _entry_time(entry: dict) -> float:
    duration = entry.get("time")
    # bool is a Real subclass; a True duration is a bug upstream, not 1ms.
    if isinstance(duration, bool) or not isinstance(duration, Real):
        raise HarFormatError(f"entry time must be a number, got {duration!r}")
    return float(duration)


def _page_fully_loaded(page_start: datetime, entries: list[dict]) -> float:
    # Negative offsets (requests that began before the page) are kept as-is.
    ends = [
        (parse_timestamp(entry.get("startedDateTime")) - page_start) / _ONE_MS + _entry_time(entry)
        for entry in entries
    ]
    return max(ends) if ends else 0


def get_fully_loaded(har: dict) -> list[FullyLoaded]:
    """Return ``{url, fullyLoaded}`` for each page, in ``log.pages`` order.

    Pages without entries report ``fullyLoaded == 0``.

    Raises:
        HarFormatError: a page or entry is malformed
        MalformedTimestampError: a startedDateTime cannot be parsed
    """
    log = har["log"]
    entries_by_page: dict[str, list[dict]] = {}
    for entry_index, entry in enumerate(log.get("entries", [])):
        entry = entry_record(entry, entry_index)
        entries_by_page.setdefault(entry.get("pageref"), []).append(entry)

    results: list[FullyLoaded] = []
    for page_index, page in enumerate(log.get("pages", [])):
        pageref = page_id(page, page_index)
        page_start = parse_timestamp(page.get("startedDateTime"))
        results.append(
            {
                "url": page.get("_url"),
                "fullyLoaded": _page_fully_loaded(page_start, entries_by_page.get(pageref, [])),
            }
        )
    return results
