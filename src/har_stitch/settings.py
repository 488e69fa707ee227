"""Settings file I/O for har-stitch.

Reads a JSON settings file at XDG_CONFIG_HOME/har-stitch/settings.json.
The ``enrichment`` key holds defaults for EnrichmentOptions; command-line
flags override them.
"""

import dataclasses
import json
import logging
import os
from pathlib import Path

from har_stitch.pipeline.enrichment import EnrichmentOptions

logger = logging.getLogger(__name__)

_ENRICHMENT_FIELDS = {f.name: f for f in dataclasses.fields(EnrichmentOptions)}


def get_config_path() -> Path:
    """Return path to settings file.

    Uses XDG_CONFIG_HOME (default ~/.config) / har-stitch / settings.json.
    """
    config_home = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
    return Path(config_home) / "har-stitch" / "settings.json"


def load_settings() -> dict:
    """Load settings from JSON file. Returns empty dict on missing/corrupt file."""
    path = get_config_path()
    # [LAW:dataflow-not-control-flow] Always attempt read; empty dict is the "no data" value.
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("ignoring unreadable settings file %s: %s", path, e)
        return {}
    return data if isinstance(data, dict) else {}


def _accepted_type(field: dataclasses.Field) -> type:
    # Fields default to None (optional text), False (flags) or a string.
    if field.default is None:
        return str
    return type(field.default)


def load_enrichment_options(overrides: dict | None = None) -> EnrichmentOptions:
    """Build EnrichmentOptions from the settings file plus overrides.

    Override values of None mean "not given" and leave the file value alone.
    Unknown keys and values of the wrong type in the settings file are
    ignored with a warning; null values count as not given.
    """
    section = load_settings().get("enrichment", {})
    if not isinstance(section, dict):
        logger.warning("settings 'enrichment' must be an object, got %r", type(section).__name__)
        section = {}

    unknown = sorted(set(section) - set(_ENRICHMENT_FIELDS))
    if unknown:
        logger.warning("ignoring unknown enrichment settings: %s", ", ".join(unknown))

    values = {}
    for key, field in _ENRICHMENT_FIELDS.items():
        value = section.get(key)
        if value is None:
            continue
        expected = _accepted_type(field)
        if not isinstance(value, expected):
            logger.warning(
                "ignoring enrichment setting %s: expected %s, got %r",
                key,
                expected.__name__,
                value,
            )
            continue
        values[key] = value
    values.update({key: value for key, value in (overrides or {}).items() if value is not None})
    return EnrichmentOptions(**values)
