"""Logging for one har-stitch command-line run.

Diagnostics go to stderr so stdout stays clean for ``--json`` output.
``-v`` raises the level to INFO (merge summaries), ``-vv`` to DEBUG
(individual page renames); ``--log-file`` additionally appends a
timestamped copy to a file.

// [LAW:single-enforcer] Handlers on the har_stitch logger are attached only here.
"""

from __future__ import annotations

import logging
from pathlib import Path

LOGGER_NAME = "har_stitch"

_VERBOSITY_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)


def level_for_verbosity(verbosity: int) -> int:
    """Map a ``-v`` count to a logging level; counts past ``-vv`` stay at DEBUG."""
    return _VERBOSITY_LEVELS[max(0, min(verbosity, len(_VERBOSITY_LEVELS) - 1))]


def configure(verbosity: int = 0, log_file: str | Path | None = None) -> int:
    """Attach stderr (and optional file) handlers to the har_stitch logger.

    Replaces handlers from any earlier call, so tests and repeated ``main()``
    invocations in one process never stack duplicate output.

    Returns:
        The level the logger was set to
    """
    level = level_for_verbosity(verbosity)
    logger = reset()
    logger.setLevel(level)
    logger.propagate = False

    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter("har-stitch: %(levelname)s %(message)s"))
    logger.addHandler(console)

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s %(levelname)s %(name)s %(message)s",
                datefmt="%Y-%m-%dT%H:%M:%S",
            )
        )
        logger.addHandler(file_handler)
    return level


def reset() -> logging.Logger:
    """Close and detach every handler; the logger propagates again."""
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
    return logger
