"""Shared utilities module."""

from __future__ import annotations

from bracket_pool.utils.assertions import (
    assert_columns,
    assert_no_nulls,
    assert_unique,
    assert_value_range,
)
from bracket_pool.utils.logger import (
    DEBUG,
    NORMAL,
    QUIET,
    VERBOSE,
    configure_logging,
    resolve_level,
)

__all__ = [
    "DEBUG",
    "NORMAL",
    "QUIET",
    "VERBOSE",
    "assert_columns",
    "assert_no_nulls",
    "assert_unique",
    "assert_value_range",
    "configure_logging",
    "resolve_level",
]
