"""Shared pytest fixtures for the bracket_pool test suite.

Fixtures defined here are available to all tests without explicit imports.
Entrant ids follow ``<region><seed:02d>`` (``W01`` … ``Z16``) so a test can
name any entrant without a lookup.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from pathlib import Path

import pandas as pd  # type: ignore[import-untyped]
import pytest

from bracket_pool.bracket.field import build_matches
from bracket_pool.bracket.topology import (
    REGION_ORDER,
    SEED_PAIRINGS,
    all_match_keys,
    feeder_slots,
    match_id_for,
)
from bracket_pool.ingest.schema import Entrant, Match, Pick


@pytest.fixture(autouse=True)
def _reset_pool_logger() -> Iterator[None]:
    """Undo any ``configure_logging`` call so caplog sees pool records."""
    yield
    root = logging.getLogger("bracket_pool")
    root.handlers.clear()
    root.setLevel(logging.NOTSET)
    root.propagate = True


@pytest.fixture
def temp_data_dir(tmp_path: Path) -> Path:
    """Provide an isolated temporary directory for pool data."""
    data_dir = tmp_path / "pool_data"
    data_dir.mkdir()
    return data_dir


@pytest.fixture
def entrants() -> list[Entrant]:
    """Return a valid 64-entrant field (4 regions x seeds 1..16)."""
    return [
        Entrant(
            entrant_id=f"{region}{seed:02d}",
            display_name=f"Team {region}{seed}",
            region=region,
            seed=seed,
        )
        for region in REGION_ORDER
        for seed in range(1, 17)
    ]


@pytest.fixture
def entrant_map(entrants: list[Entrant]) -> dict[str, Entrant]:
    return {e.entrant_id: e for e in entrants}


@pytest.fixture
def matches(entrants: list[Entrant]) -> list[Match]:
    """Return the 63 matches of a freshly set-up tournament."""
    return build_matches(entrants)


@pytest.fixture
def chalk_picks(entrant_map: dict[str, Entrant]) -> Callable[[str], list[Pick]]:
    """Factory for a complete bracket in which the better seed always wins.

    Seed ties (Final Four onward) go to the lower entrant id, so the chalk
    champion is ``W01``.
    """

    def _make(bracket_id: str) -> list[Pick]:
        winners: dict[str, str] = {}
        picks: list[Pick] = []
        for key in all_match_keys():
            if key.round == "R64":
                left_seed, right_seed = SEED_PAIRINGS[key.match_number - 1]
                pair = (f"{key.region}{left_seed:02d}", f"{key.region}{right_seed:02d}")
            else:
                left_key, right_key = feeder_slots(*key)
                pair = (winners[match_id_for(left_key)], winners[match_id_for(right_key)])
            best = min(pair, key=lambda eid: (entrant_map[eid].seed, eid))
            mid = match_id_for(key)
            winners[mid] = best
            picks.append(Pick(bracket_id=bracket_id, match_id=mid, picked_entrant_id=best))
        return picks

    return _make


@pytest.fixture
def write_entrants_csv(tmp_path: Path, entrants: list[Entrant]) -> Callable[..., Path]:
    """Factory that writes the fixture field (optionally altered) to a CSV."""

    def _write(rows: list[dict[str, object]] | None = None, name: str = "entrants.csv") -> Path:
        if rows is None:
            rows = [
                {
                    "entrant_id": e.entrant_id,
                    "display_name": e.display_name,
                    "region": e.region,
                    "seed": e.seed,
                    "department": "Sales" if e.seed % 2 else None,
                }
                for e in entrants
            ]
        path = tmp_path / name
        pd.DataFrame(rows).to_csv(path, index=False)
        return path

    return _write
