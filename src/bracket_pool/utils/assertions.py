"""Pandera-backed checks for tabular inputs.

Used on the entrant import path before any row is turned into a model, so
a malformed spreadsheet fails with a column-level report instead of a
pile of per-row validation errors.

All helpers raise ``pandera.errors.SchemaError`` on failure.

Usage:
    >>> import pandas as pd
    >>> from bracket_pool.utils.assertions import assert_columns, assert_value_range
    >>> df = pd.DataFrame({"entrant_id": ["W01"], "seed": [1]})
    >>> assert_columns(df, ["entrant_id", "seed"])
    >>> assert_value_range(df, "seed", min_val=1, max_val=16)
"""

from __future__ import annotations

from collections.abc import Sequence

import pandas as pd  # type: ignore[import-untyped]
import pandera.pandas as pa


def assert_columns(df: pd.DataFrame, required: Sequence[str]) -> None:
    """Validate that every column in *required* is present.

    Extra columns are allowed.
    """
    if not required:
        return
    pa.DataFrameSchema({col: pa.Column() for col in required}, strict=False).validate(df)


def assert_no_nulls(df: pd.DataFrame, columns: Sequence[str] | None = None) -> None:
    """Validate that *columns* (all columns when ``None``) hold no nulls."""
    cols = list(df.columns) if columns is None else list(columns)
    if not cols:
        return
    pa.DataFrameSchema({col: pa.Column(nullable=False) for col in cols}, strict=False).validate(df)


def assert_unique(df: pd.DataFrame, columns: Sequence[str]) -> None:
    """Validate that the combination of *columns* identifies each row.

    Args:
        df: DataFrame to check.
        columns: Key columns; a single column checks plain uniqueness.
    """
    if not columns:
        return
    pa.DataFrameSchema(
        {col: pa.Column() for col in columns},
        unique=list(columns),
        strict=False,
    ).validate(df)


def assert_value_range(
    df: pd.DataFrame,
    column: str,
    *,
    min_val: float | None = None,
    max_val: float | None = None,
) -> None:
    """Validate that *column* values fall within ``[min_val, max_val]``.

    The column must exist even when neither bound is given.
    """
    checks: list[pa.Check] = []
    if min_val is not None:
        checks.append(pa.Check.ge(min_val))
    if max_val is not None:
        checks.append(pa.Check.le(max_val))
    pa.DataFrameSchema({column: pa.Column(checks=checks or None)}, strict=False).validate(df)
