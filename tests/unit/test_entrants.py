"""Unit tests for entrant CSV import."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pandas as pd  # type: ignore[import-untyped]
import pandera.errors
import pytest
from pydantic import ValidationError

from bracket_pool.ingest.entrants import entrants_from_frame, load_entrants_csv


def _row(entrant_id: str = "W01", region: str = "W", seed: int = 1) -> dict[str, object]:
    return {"entrant_id": entrant_id, "display_name": f"Name {entrant_id}", "region": region, "seed": seed}


class TestEntrantsFromFrame:
    def test_basic_row(self) -> None:
        (entrant,) = entrants_from_frame(pd.DataFrame([_row()]))
        assert entrant.entrant_id == "W01"
        assert entrant.seed == 1
        assert entrant.metadata == {}

    def test_region_normalised(self) -> None:
        (entrant,) = entrants_from_frame(pd.DataFrame([_row(region=" x ")]))
        assert entrant.region == "X"

    def test_extra_columns_become_metadata(self) -> None:
        df = pd.DataFrame([{**_row(), "department": "Ops"}, {**_row("W02", seed=2), "department": None}])
        first, second = entrants_from_frame(df)
        assert first.metadata == {"department": "Ops"}
        assert second.metadata == {}

    def test_missing_column(self) -> None:
        df = pd.DataFrame([_row()]).drop(columns=["display_name"])
        with pytest.raises(pandera.errors.SchemaError):
            entrants_from_frame(df)

    def test_seed_out_of_range(self) -> None:
        with pytest.raises(pandera.errors.SchemaError):
            entrants_from_frame(pd.DataFrame([_row(seed=17)]))

    def test_duplicate_id(self) -> None:
        with pytest.raises(pandera.errors.SchemaError):
            entrants_from_frame(pd.DataFrame([_row(), _row(seed=2)]))

    def test_unknown_region(self) -> None:
        with pytest.raises(ValidationError):
            entrants_from_frame(pd.DataFrame([_row(region="Q")]))


class TestLoadEntrantsCsv:
    def test_full_field(self, write_entrants_csv: Callable[..., Path]) -> None:
        entrants = load_entrants_csv(write_entrants_csv())
        assert len(entrants) == 64
        w01 = next(e for e in entrants if e.entrant_id == "W01")
        assert w01.metadata == {"department": "Sales"}
        w02 = next(e for e in entrants if e.entrant_id == "W02")
        assert w02.metadata == {}

    def test_numeric_looking_ids_stay_strings(self, write_entrants_csv: Callable[..., Path]) -> None:
        path = write_entrants_csv([{**_row(), "entrant_id": "007"}])
        (entrant,) = load_entrants_csv(path)
        assert entrant.entrant_id == "007"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_entrants_csv(tmp_path / "nope.csv")
