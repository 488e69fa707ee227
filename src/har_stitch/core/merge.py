"""Merge several HAR captures of the same run into one HAR document.

Page ids are only unique inside the capture that produced them. When two
captures both contain ``page_1`` the later one is renamed (``page_1-1``,
``page_1-1-1``, ...) and every entry of that capture pointing at it is
re-pointed, so the merged log keeps one page per id and every entry still
belongs to the page it was recorded under.

// [LAW:one-source-of-truth] Input order alone decides which page keeps an id.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from har_stitch.core.errors import DanglingPageRefError, DuplicatePageIdError
from har_stitch.core.records import entry_record, page_id as checked_page_id

logger = logging.getLogger(__name__)

# Top-level log fields taken from the first capture; later captures' values are dropped.
LOG_METADATA_KEYS = ("version", "creator", "browser", "comment")

RENAME_SUFFIX = "-1"


def generate_unique_page_id(base_id: str, claimed) -> str:
    """Append ``-1`` to base_id until it is not in claimed."""
    new_id = base_id
    while new_id in claimed:
        new_id = new_id + RENAME_SUFFIX
    return new_id


def check_page_refs(har: dict, index: int = 0) -> None:
    """Verify page ids are unique and every entry pageref resolves.

    Entries without a ``pageref`` are allowed (HAR 1.2 makes it optional).

    Raises:
        HarFormatError: a page or entry is not an object, or a page has no string id
        DuplicatePageIdError: a page id occurs twice in this document
        DanglingPageRefError: an entry references a page id not in this document
    """
    log = har["log"]
    page_ids: set[str] = set()
    for page_index, page in enumerate(log.get("pages", [])):
        page_id = checked_page_id(page, page_index)
        if page_id in page_ids:
            raise DuplicatePageIdError(index, page_id)
        page_ids.add(page_id)

    for entry_index, entry in enumerate(log.get("entries", [])):
        entry = entry_record(entry, entry_index)
        if "pageref" in entry and entry["pageref"] not in page_ids:
            raise DanglingPageRefError(index, entry_index, entry["pageref"])


def _repoint_entries(entries: Sequence[dict], renames: dict[str, str]) -> list[dict]:
    """Copy entries whose pageref was renamed; keep the rest as-is.

    Lookups use the entry's original pageref, so a chain of renames inside one
    document (``a -> a-1`` then ``a-1 -> a-1-1``) is applied exactly once.
    """
    repointed = []
    for entry_index, entry in enumerate(entries):
        old_ref = entry_record(entry, entry_index).get("pageref")
        if old_ref in renames:
            entry = {**entry, "pageref": renames[old_ref]}
        repointed.append(entry)
    return repointed


def merge_hars(hars: Sequence[dict] | None, *, validate: bool = True) -> dict | None:
    """Combine HAR documents into one.

    Args:
        hars: HAR documents in capture order
        validate: check each document's page ids and pagerefs before merging

    Returns:
        None for no input, the very same object for a single document,
        otherwise a new HAR whose metadata comes from the first document and
        whose pages and entries are the concatenation of all documents.

    The input documents are never modified; renamed pages and re-pointed
    entries are shallow copies.
    """
    if not hars:
        return None
    if len(hars) == 1:
        return hars[0]

    if validate:
        for index, har in enumerate(hars):
            check_page_refs(har, index)

    first_log = hars[0]["log"]
    combined_log: dict[str, Any] = {
        key: first_log[key] for key in LOG_METADATA_KEYS if key in first_log
    }

    # [LAW:single-enforcer] Claimed ids accumulate here and nowhere else.
    pages_by_id: dict[str, dict] = {}
    all_entries: list[dict] = []
    rename_count = 0

    for index, har in enumerate(hars):
        log = har["log"]
        renames: dict[str, str] = {}
        for page_index, page in enumerate(log.get("pages", [])):
            page_id = checked_page_id(page, page_index)
            if page_id in pages_by_id:
                new_id = generate_unique_page_id(page_id, pages_by_id)
                logger.debug("HAR #%s: renamed page %s -> %s", index, page_id, new_id)
                # First rename wins if a malformed document repeats an id.
                renames.setdefault(page_id, new_id)
                page = {**page, "id": new_id}
                page_id = new_id
                rename_count += 1
            pages_by_id[page_id] = page
        all_entries.extend(_repoint_entries(log.get("entries", []), renames))

    combined_log["pages"] = list(pages_by_id.values())
    combined_log["entries"] = all_entries
    logger.info(
        "merged %s HARs: pages=%s entries=%s renamed=%s",
        len(hars),
        len(combined_log["pages"]),
        len(all_entries),
        rename_count,
    )
    return {"log": combined_log}
