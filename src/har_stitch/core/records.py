"""Checked access to HAR page and entry records.

Pages and entries are plain dicts; these helpers turn a wrong shape into a
HarFormatError instead of a KeyError deep inside merging or timing code.
"""

from __future__ import annotations

from har_stitch.core.errors import HarFormatError


def entry_record(entry: object, entry_index: int) -> dict:
    if not isinstance(entry, dict):
        raise HarFormatError(f"entry {entry_index} must be an object, got {type(entry).__name__}")
    # pageref is optional, but when present it must be a page id.
    if "pageref" in entry and not isinstance(entry["pageref"], str):
        raise HarFormatError(f"entry {entry_index} pageref must be a string, got {entry['pageref']!r}")
    return entry


def page_id(page: object, page_index: int) -> str:
    """Return the page's id, which HAR 1.2 requires to be a string."""
    if not isinstance(page, dict):
        raise HarFormatError(f"page {page_index} must be an object, got {type(page).__name__}")
    value = page.get("id")
    if not isinstance(value, str):
        raise HarFormatError(f"page {page_index} id must be a string, got {value!r}")
    return value
