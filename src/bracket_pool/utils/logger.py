"""Project-wide logging setup for the bracket pool.

Every module logs through ``logging.getLogger(__name__)``, so all records
land under the ``bracket_pool`` logger.  This module owns the single place
where that logger gets a handler and a level.  Project verbosity names map
onto Python levels as follows:

    ========  ==============  =====
    Project   Python level    Value
    ========  ==============  =====
    QUIET     WARNING          30
    NORMAL    INFO             20
    VERBOSE   VERBOSE (custom) 15
    DEBUG     DEBUG            10
    ========  ==============  =====

Winner recordings, corrections and cascade deletions are emitted at INFO;
per-match resolution and correction detail at VERBOSE;
projection fallbacks at DEBUG.  The level can be set explicitly, or through
the ``BRACKET_POOL_LOG_LEVEL`` environment variable (case-insensitive).

Example::

    >>> import logging
    >>> from bracket_pool.utils.logger import VERBOSE, configure_logging
    >>> configure_logging("VERBOSE")
    >>> logging.getLogger("bracket_pool.cli").log(VERBOSE, "Resolved %s", "R32-W-1")
"""

from __future__ import annotations

import logging
import os
import sys
from typing import TextIO

VERBOSE: int = 15
"""Custom level between INFO and DEBUG for per-match detail."""

logging.addLevelName(VERBOSE, "VERBOSE")

QUIET: int = logging.WARNING
NORMAL: int = logging.INFO
DEBUG: int = logging.DEBUG

_LEVEL_MAP: dict[str, int] = {
    "QUIET": QUIET,
    "NORMAL": NORMAL,
    "VERBOSE": VERBOSE,
    "DEBUG": DEBUG,
}

ENV_VAR: str = "BRACKET_POOL_LOG_LEVEL"

_ROOT_LOGGER_NAME: str = "bracket_pool"
_LOG_FORMAT: str = "%(asctime)s | %(name)s | %(levelname)-8s | %(message)s"


def resolve_level(level: str | None = None) -> int:
    """Translate a project verbosity name into a numeric logging level.

    Args:
        level: ``"QUIET"``, ``"NORMAL"``, ``"VERBOSE"`` or ``"DEBUG"``
            (case-insensitive).  ``None`` reads ``BRACKET_POOL_LOG_LEVEL``
            and falls back to ``"NORMAL"``.

    Raises:
        ValueError: If the resolved name is not a project level.
    """
    resolved = level if level is not None else os.environ.get(ENV_VAR, "NORMAL")
    try:
        return _LEVEL_MAP[resolved.upper()]
    except KeyError:
        msg = f"Unknown log level {resolved!r}. Valid levels: {', '.join(sorted(_LEVEL_MAP))}"
        raise ValueError(msg) from None


def configure_logging(level: str | None = None, stream: TextIO | None = None) -> None:
    """Install one stream handler on the ``bracket_pool`` logger.

    Safe to call repeatedly: previous handlers are removed first, and the
    logger stops propagating to the Python root logger.

    Args:
        level: Project verbosity name; see :func:`resolve_level`.
        stream: Destination stream.  Defaults to ``sys.stderr``.

    Raises:
        ValueError: If *level* is not recognised.
    """
    numeric_level = resolve_level(level)

    root = logging.getLogger(_ROOT_LOGGER_NAME)
    root.setLevel(numeric_level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(numeric_level)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    root.addHandler(handler)
    root.propagate = False
