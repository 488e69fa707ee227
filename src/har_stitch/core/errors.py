"""Error types raised for malformed HAR input.

Everything derives from ValueError so callers that already guard HAR loading
with ``except ValueError`` keep working.
"""

from __future__ import annotations


class HarError(ValueError):
    """Base class for HAR structure and content problems."""


class HarFormatError(HarError):
    """HAR document is missing a required field or has the wrong shape."""


class MalformedTimestampError(HarError):
    """A startedDateTime value could not be parsed as an ISO-8601 instant."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"malformed timestamp: {value!r}")


class DuplicatePageIdError(HarError):
    """The same page id appears twice inside one HAR document."""

    def __init__(self, document_index: int, page_id: str):
        self.document_index = document_index
        self.page_id = page_id
        super().__init__(f"HAR #{document_index}: duplicate page id {page_id!r}")


class DanglingPageRefError(HarError):
    """An entry's pageref names no page of its own HAR document."""

    def __init__(self, document_index: int, entry_index: int, pageref: str):
        self.document_index = document_index
        self.entry_index = entry_index
        self.pageref = pageref
        super().__init__(
            f"HAR #{document_index}: entry {entry_index} references unknown page {pageref!r}"
        )
