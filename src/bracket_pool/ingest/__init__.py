"""Pool data models, entrant import and persistence."""

from __future__ import annotations

from bracket_pool.ingest.entrants import entrants_from_frame, load_entrants_csv
from bracket_pool.ingest.repository import ParquetRepository, Repository
from bracket_pool.ingest.schema import Bracket, Entrant, Match, Pick, PoolSettings

__all__ = [
    "Bracket",
    "Entrant",
    "Match",
    "ParquetRepository",
    "Pick",
    "PoolSettings",
    "Repository",
    "entrants_from_frame",
    "load_entrants_csv",
]
