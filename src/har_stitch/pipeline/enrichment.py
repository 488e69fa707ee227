"""Stamp run metadata onto HAR documents and pages.

These helpers decorate HAR records produced by the capture step: creator and
browser blocks, a placeholder HAR for failed runs, links to per-run artifacts
(``_meta``) and visual/CPU metrics (``_visualMetrics``, ``_cpu``). Custom
fields use the underscore prefix HAR 1.2 reserves for extensions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from har_stitch import __version__
from har_stitch.pipeline.page_paths import path_to_folder

logger = logging.getLogger(__name__)

CREATOR_NAME = "har-stitch"
FAILING_PAGE_ID = "failing_page"

# Summary scores stay out of pageTimings; VisualProgress is reformatted separately.
DO_NOT_INCLUDE_IN_HAR_TIMINGS = frozenset(
    {
        "VisualReadiness",
        "SpeedIndex",
        "PerceptualSpeedIndex",
        "ContentfulSpeedIndex",
        "VisualProgress",
    }
)


@dataclass(frozen=True)
class EnrichmentOptions:
    """Run options that decide which ``_meta`` links are written."""

    connectivity_profile: str | None = None
    connectivity_alias: str | None = None
    result_url: str | None = None
    screenshot: bool = False
    screenshot_type: str = "png"
    video: bool = False
    chrome_timeline: bool = False
    url_alias: str | None = None
    use_hash: bool = False

    @property
    def connectivity(self) -> str:
        return self.connectivity_alias or self.connectivity_profile or "native"


def _deep_merge(target: dict, source: dict) -> dict:
    for key, value in source.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _deep_merge(target[key], value)
        else:
            target[key] = value
    return target


def add_browser(har: dict, name: str, version: str, comment: str | None = None) -> dict:
    _deep_merge(har["log"], {"browser": {"name": name, "version": version, "comment": comment}})
    if not comment:
        har["log"]["browser"].pop("comment", None)
    return har


def add_creator(har: dict, comment: str | None = None) -> dict:
    _deep_merge(
        har["log"],
        {"creator": {"name": CREATOR_NAME, "version": __version__, "comment": comment}},
    )
    if not comment:
        har["log"]["creator"].pop("comment", None)
    return har


def get_empty_har(url: str, browser: str) -> dict:
    """Build a placeholder HAR for a run that produced no capture.

    The single page has id ``failing_page`` and no entries, so downstream
    reporting still has a page to attach metadata to.
    """
    return {
        "log": {
            "version": "1.2",
            "creator": {"name": CREATOR_NAME, "version": __version__, "comment": ""},
            "browser": {"name": browser, "version": ""},
            "pages": [
                {
                    "startedDateTime": datetime.now(timezone.utc).isoformat(),
                    "id": FAILING_PAGE_ID,
                    "title": url,
                    "pageTimings": {},
                    "comment": "",
                }
            ],
            "entries": [],
            "comment": "",
        }
    }


def add_meta_to_har(index: int, har_page: dict, url: str, options: EnrichmentOptions) -> dict:
    """Attach ``_meta`` (connectivity and artifact links) to a HAR page.

    Args:
        index: zero-based iteration number; artifact files are numbered from 1
        har_page: page record to decorate in place
        url: tested URL, used to derive the artifact folder
        options: run options

    Returns:
        The ``_meta`` dict that was attached
    """
    meta: dict[str, Any] = {"connectivity": options.connectivity}
    har_page["_meta"] = meta

    if options.result_url:
        base = options.result_url if options.result_url.endswith("/") else options.result_url + "/"
        folder = base + path_to_folder(url, options)
        run = index + 1
        if options.screenshot:
            meta["screenshot"] = f"{folder}screenshots/{run}.{options.screenshot_type}"
        if options.video:
            meta["video"] = f"{folder}video/{run}.mp4"
        if options.chrome_timeline:
            meta["timeline"] = f"{folder}trace-{run}.json.gz"
    return meta


def format_visual_progress(visual_progress: list[dict] | None) -> dict[str, Any]:
    """Convert ``[{timestamp, percent}, ...]`` into ``{"<timestamp>": percent}``."""
    return {str(point["timestamp"]): point["percent"] for point in visual_progress or []}


def _timing_key(metric: str) -> str:
    return "_" + metric[:1].lower() + metric[1:]


def add_timings_to_har(
    har_page: dict,
    visual_metrics: dict | None,
    timings: dict | None,
    cpu: Any = None,
) -> None:
    """Copy visual metrics, browser timings and CPU stats onto a HAR page.

    Metrics are written both to ``_visualMetrics`` and, prefixed with ``_``,
    into ``pageTimings`` so HAR waterfall viewers show them as markers.
    """
    page_timings = har_page.setdefault("pageTimings", {})
    page_visual_metrics: dict[str, Any] = {}
    har_page["_visualMetrics"] = page_visual_metrics
    har_page["_cpu"] = cpu

    if visual_metrics:
        for key, value in visual_metrics.items():
            if key not in DO_NOT_INCLUDE_IN_HAR_TIMINGS:
                page_timings[_timing_key(key)] = value
                page_visual_metrics[key] = value
            elif key != "VisualProgress":
                page_visual_metrics[key] = value
        page_visual_metrics["VisualProgress"] = format_visual_progress(
            visual_metrics.get("VisualProgress")
        )
    elif timings and timings.get("firstPaint"):
        # First paint only stands in when there are no visual metrics.
        page_timings["_firstPaint"] = timings["firstPaint"]

    if timings and timings.get("pageTimings"):
        browser_timings = timings["pageTimings"]
        page_timings["_domInteractiveTime"] = browser_timings.get("domInteractiveTime")
        page_timings["_domContentLoadedTime"] = browser_timings.get("domContentLoadedTime")
    logger.debug("added timings to page %s", har_page.get("id"))
