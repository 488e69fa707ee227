"""Relative result folder for a tested URL.

Screenshots, videos and traces for a URL are stored under
``pages/<host>/<path...>/``; the folder name is reused when linking them from
the HAR page ``_meta`` block.
"""

from __future__ import annotations

import hashlib
from typing import TYPE_CHECKING
from urllib.parse import urlparse

if TYPE_CHECKING:
    from har_stitch.pipeline.enrichment import EnrichmentOptions

_DIGEST_LENGTH = 8


def _short_digest(value: str) -> str:
    return hashlib.sha1(value.encode("utf-8")).hexdigest()[:_DIGEST_LENGTH]


def _safe_segment(segment: str) -> str:
    return "".join(ch if (ch.isalnum() or ch in {"-", "_", "."}) else "_" for ch in segment)


def path_to_folder(url: str, options: EnrichmentOptions) -> str:
    """Return the folder for url, always ending with ``/``.

    ``https://www.example.com/a/b?x=1`` maps to
    ``pages/www_example_com/a/b/query-<sha1 prefix>/``.
    """
    parsed = urlparse(url)
    segments = ["pages", (parsed.hostname or "unknown").replace(".", "_")]

    if options.url_alias:
        segments.append(_safe_segment(options.url_alias))
    else:
        segments.extend(_safe_segment(part) for part in parsed.path.split("/") if part)
        if parsed.query:
            segments.append(f"query-{_short_digest(parsed.query)}")
        if options.use_hash and parsed.fragment:
            segments.append(f"hash-{_short_digest(parsed.fragment)}")

    return "/".join(segments) + "/"
