"""Load the entrant field from a CSV file.

Expected columns: ``entrant_id``, ``display_name``, ``region``, ``seed``.
Any further column (department, title, …) is carried into each entrant's
``metadata`` as a string; empty cells are dropped.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd  # type: ignore[import-untyped]

from bracket_pool.ingest.schema import Entrant
from bracket_pool.utils.assertions import (
    assert_columns,
    assert_no_nulls,
    assert_unique,
    assert_value_range,
)

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: tuple[str, ...] = ("entrant_id", "display_name", "region", "seed")


def entrants_from_frame(df: pd.DataFrame) -> list[Entrant]:
    """Validate an entrant table and convert each row to an :class:`Entrant`.

    Raises:
        pandera.errors.SchemaError: If a required column is missing or null,
            a seed is outside 1..16, or an entrant id repeats.
        pydantic.ValidationError: If a row fails model validation (for
            example an unknown region code).
    """
    assert_columns(df, REQUIRED_COLUMNS)
    assert_no_nulls(df, REQUIRED_COLUMNS)
    assert_value_range(df, "seed", min_val=1, max_val=16)
    assert_unique(df, ["entrant_id"])

    extra = [c for c in df.columns if c not in REQUIRED_COLUMNS]
    entrants: list[Entrant] = []
    for row in df.to_dict(orient="records"):
        metadata = {col: str(row[col]) for col in extra if not pd.isna(row[col])}
        entrants.append(
            Entrant(
                entrant_id=str(row["entrant_id"]),
                display_name=str(row["display_name"]),
                region=str(row["region"]).strip().upper(),
                seed=int(row["seed"]),
                metadata=metadata,
            )
        )
    return entrants


def load_entrants_csv(path: Path) -> list[Entrant]:
    """Read and validate an entrant CSV.

    Raises:
        FileNotFoundError: If *path* does not exist.
    """
    df = pd.read_csv(path, dtype={"entrant_id": str, "display_name": str, "region": str})
    entrants = entrants_from_frame(df)
    logger.info("Loaded %d entrants from %s", len(entrants), path)
    return entrants
