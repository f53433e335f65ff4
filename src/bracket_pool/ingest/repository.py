"""Repository pattern for pool state.

Defines an abstract ``Repository`` interface and a concrete
``ParquetRepository`` backed by Apache Parquet files plus a JSON settings
file.  The core never touches a repository; the CLI orchestration layer
reads a snapshot from it, asks the core for a plan, and writes the result
back one table at a time.
"""

from __future__ import annotations

import abc
import json
from pathlib import Path
from typing import Any

import pyarrow as pa  # type: ignore[import-untyped]
import pyarrow.parquet as pq  # type: ignore[import-untyped]
from pydantic import BaseModel

from bracket_pool.ingest.schema import AdminAction, Bracket, Entrant, Match, Pick, PoolSettings

# ---------------------------------------------------------------------------
# Abstract Repository
# ---------------------------------------------------------------------------


class Repository(abc.ABC):
    """Abstract base class for pool persistence.

    ``save_*`` methods replace the whole stored collection.
    """

    @abc.abstractmethod
    def get_entrants(self) -> list[Entrant]:
        """Return all stored entrants."""

    @abc.abstractmethod
    def get_matches(self) -> list[Match]:
        """Return all stored matches."""

    @abc.abstractmethod
    def get_brackets(self) -> list[Bracket]:
        """Return all stored brackets."""

    @abc.abstractmethod
    def get_picks(self, bracket_id: str | None = None) -> list[Pick]:
        """Return stored picks, optionally only those of *bracket_id*."""

    @abc.abstractmethod
    def get_settings(self) -> PoolSettings:
        """Return stored settings, or defaults when none were saved."""

    @abc.abstractmethod
    def get_admin_actions(self) -> list[AdminAction]:
        """Return the administrator audit trail, oldest first."""

    @abc.abstractmethod
    def save_entrants(self, entrants: list[Entrant]) -> None:
        """Persist the entrant field (overwrite)."""

    @abc.abstractmethod
    def save_matches(self, matches: list[Match]) -> None:
        """Persist every match (overwrite)."""

    @abc.abstractmethod
    def save_brackets(self, brackets: list[Bracket]) -> None:
        """Persist every bracket (overwrite)."""

    @abc.abstractmethod
    def save_picks(self, picks: list[Pick]) -> None:
        """Persist every pick (overwrite)."""

    @abc.abstractmethod
    def save_settings(self, settings: PoolSettings) -> None:
        """Persist pool settings (overwrite)."""

    @abc.abstractmethod
    def save_admin_actions(self, actions: list[AdminAction]) -> None:
        """Persist the audit trail (overwrite)."""

    def get_bracket(self, bracket_id: str) -> Bracket | None:
        """Return the bracket with *bracket_id*, or ``None``."""
        return next((b for b in self.get_brackets() if b.bracket_id == bracket_id), None)

    def log_admin_action(self, action: AdminAction) -> None:
        """Append *action* to the audit trail."""
        self.save_admin_actions([*self.get_admin_actions(), action])


# ---------------------------------------------------------------------------
# Parquet Repository
# ---------------------------------------------------------------------------

# Explicit PyArrow schemas for deterministic column types across reads/writes.

_ENTRANT_SCHEMA = pa.schema([
    ("entrant_id", pa.string()),
    ("display_name", pa.string()),
    ("region", pa.string()),
    ("seed", pa.int64()),
    ("metadata", pa.string()),
])

_MATCH_SCHEMA = pa.schema([
    ("match_id", pa.string()),
    ("round", pa.string()),
    ("region", pa.string()),
    ("match_number", pa.int64()),
    ("left_entrant_id", pa.string()),
    ("right_entrant_id", pa.string()),
    ("winner_entrant_id", pa.string()),
])

_BRACKET_SCHEMA = pa.schema([
    ("bracket_id", pa.string()),
    ("participant_id", pa.string()),
    ("locked_at", pa.timestamp("us", tz="UTC")),
    ("is_admin_override", pa.bool_()),
])

_PICK_SCHEMA = pa.schema([
    ("bracket_id", pa.string()),
    ("match_id", pa.string()),
    ("picked_entrant_id", pa.string()),
])

_ADMIN_ACTION_SCHEMA = pa.schema([
    ("admin_id", pa.string()),
    ("action_type", pa.string()),
    ("payload", pa.string()),
    ("created_at", pa.timestamp("us", tz="UTC")),
])


class ParquetRepository(Repository):
    """Repository implementation backed by Parquet files.

    Directory layout::

        {base_path}/
            entrants.parquet
            matches.parquet
            brackets.parquet
            picks.parquet
            admin_actions.parquet
            settings.json
    """

    def __init__(self, base_path: Path) -> None:
        self._base_path = base_path

    # -- helpers -------------------------------------------------------------

    def _read(self, name: str) -> list[dict[str, Any]]:
        path = self._base_path / name
        if not path.exists():
            return []
        rows: list[dict[str, Any]] = pq.read_table(path).to_pylist()
        return rows

    def _write(self, name: str, models: list[BaseModel], schema: pa.Schema) -> None:
        self._base_path.mkdir(parents=True, exist_ok=True)
        rows = [m.model_dump(include=set(schema.names)) for m in models]
        table = pa.Table.from_pylist(rows, schema=schema)
        pq.write_table(table, self._base_path / name)

    # -- reads ---------------------------------------------------------------

    def get_entrants(self) -> list[Entrant]:
        return [
            Entrant(**{**row, "metadata": json.loads(row["metadata"] or "{}")})
            for row in self._read("entrants.parquet")
        ]

    def get_matches(self) -> list[Match]:
        return [Match(**row) for row in self._read("matches.parquet")]

    def get_brackets(self) -> list[Bracket]:
        return [Bracket(**row) for row in self._read("brackets.parquet")]

    def get_picks(self, bracket_id: str | None = None) -> list[Pick]:
        picks = [Pick(**row) for row in self._read("picks.parquet")]
        if bracket_id is None:
            return picks
        return [p for p in picks if p.bracket_id == bracket_id]

    def get_settings(self) -> PoolSettings:
        path = self._base_path / "settings.json"
        if not path.exists():
            return PoolSettings()
        return PoolSettings.model_validate_json(path.read_text())

    def get_admin_actions(self) -> list[AdminAction]:
        return [
            AdminAction(**{**row, "payload": json.loads(row["payload"] or "{}")})
            for row in self._read("admin_actions.parquet")
        ]

    # -- writes --------------------------------------------------------------

    def save_entrants(self, entrants: list[Entrant]) -> None:
        self._base_path.mkdir(parents=True, exist_ok=True)
        rows = [{**e.model_dump(), "metadata": json.dumps(e.metadata, sort_keys=True)} for e in entrants]
        pq.write_table(
            pa.Table.from_pylist(rows, schema=_ENTRANT_SCHEMA),
            self._base_path / "entrants.parquet",
        )

    def save_matches(self, matches: list[Match]) -> None:
        self._write("matches.parquet", list(matches), _MATCH_SCHEMA)

    def save_brackets(self, brackets: list[Bracket]) -> None:
        self._write("brackets.parquet", list(brackets), _BRACKET_SCHEMA)

    def save_picks(self, picks: list[Pick]) -> None:
        self._write("picks.parquet", list(picks), _PICK_SCHEMA)

    def save_settings(self, settings: PoolSettings) -> None:
        self._base_path.mkdir(parents=True, exist_ok=True)
        (self._base_path / "settings.json").write_text(settings.model_dump_json(indent=2))

    def save_admin_actions(self, actions: list[AdminAction]) -> None:
        self._base_path.mkdir(parents=True, exist_ok=True)
        rows = [{**a.model_dump(), "payload": json.dumps(a.payload, sort_keys=True)} for a in actions]
        pq.write_table(
            pa.Table.from_pylist(rows, schema=_ADMIN_ACTION_SCHEMA),
            self._base_path / "admin_actions.parquet",
        )
