"""Read and write HAR files.

``.har.gz`` files are transparently (de)compressed.
"""

import gzip
import json
import logging
import os
import tempfile
from pathlib import Path

from har_stitch.core.errors import HarFormatError
from har_stitch.core.records import entry_record, page_id

logger = logging.getLogger(__name__)


def _is_gzip(path: Path) -> bool:
    return path.suffix == ".gz"


def load_har(path: str | Path) -> dict:
    """Load a HAR file and check its top-level shape.

    Args:
        path: Path to a .har or .har.gz file

    Returns:
        The parsed HAR document

    Raises:
        HarFormatError: If the HAR structure is invalid
        FileNotFoundError: If file doesn't exist
        json.JSONDecodeError: If file is not valid JSON
    """
    path = Path(path)
    opener = gzip.open if _is_gzip(path) else open
    with opener(path, "rt", encoding="utf-8") as f:
        har = json.load(f)

    if not isinstance(har, dict) or "log" not in har:
        raise HarFormatError(f"{path}: missing 'log' key")
    log = har["log"]
    if not isinstance(log, dict):
        raise HarFormatError(f"{path}: 'log' must be an object")
    for key in ("pages", "entries"):
        # pages is optional in HAR 1.2; default it so merging sees a list.
        value = log.setdefault(key, [])
        if not isinstance(value, list):
            raise HarFormatError(f"{path}: log.{key} must be a list")
    try:
        for page_index, page in enumerate(log["pages"]):
            page_id(page, page_index)
        for entry_index, entry in enumerate(log["entries"]):
            entry_record(entry, entry_index)
    except HarFormatError as e:
        raise HarFormatError(f"{path}: {e}") from e

    logger.debug(
        "loaded %s pages=%s entries=%s", path, len(log["pages"]), len(log["entries"])
    )
    return har


def write_har(path: str | Path, har: dict, indent: int | None = None) -> None:
    """Atomically write a HAR document.

    Writes to a temp file in the target directory, then renames over path.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as raw:
            if _is_gzip(path):
                with gzip.open(raw, "wt", encoding="utf-8") as f:
                    json.dump(har, f, ensure_ascii=False, indent=indent)
            else:
                raw.write(json.dumps(har, ensure_ascii=False, indent=indent).encode("utf-8"))
        os.replace(tmp_path, path)
    except Exception:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise
    logger.info("wrote %s", path)
