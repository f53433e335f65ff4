"""Bracket topology, projection, cascade invalidation and result advancement.

Only the schema-free pieces (topology and errors) are re-exported here;
``bracket_pool.ingest.schema`` depends on the topology, so the modules
that depend on the schema are imported from their own paths.
"""

from __future__ import annotations

from bracket_pool.bracket.errors import (
    BracketLockedError,
    BracketPoolError,
    FieldError,
    InvalidPickError,
    InvalidWinnerError,
    SubmissionError,
    TopologyError,
)
from bracket_pool.bracket.topology import (
    MATCHES_PER_ROUND,
    N_MATCHES,
    REGION_ORDER,
    ROUND_DISPLAY_NAMES,
    ROUND_ORDER,
    SEED_PAIRINGS,
    MatchKey,
    Region,
    Round,
    Side,
    SlotRef,
    all_match_keys,
    downstream_keys,
    feeder_slots,
    match_id_for,
    match_key,
    next_round,
    previous_round,
    round_index,
    successor_slot,
)

__all__ = [
    "MATCHES_PER_ROUND",
    "N_MATCHES",
    "REGION_ORDER",
    "ROUND_DISPLAY_NAMES",
    "ROUND_ORDER",
    "SEED_PAIRINGS",
    "BracketLockedError",
    "BracketPoolError",
    "FieldError",
    "InvalidPickError",
    "InvalidWinnerError",
    "MatchKey",
    "Region",
    "Round",
    "Side",
    "SlotRef",
    "SubmissionError",
    "TopologyError",
    "all_match_keys",
    "downstream_keys",
    "feeder_slots",
    "match_id_for",
    "match_key",
    "next_round",
    "previous_round",
    "round_index",
    "successor_slot",
]
