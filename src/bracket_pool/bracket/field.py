"""Tournament setup: validate the entrant field and create the 63 matches.

The Round of 64 is created with both slots filled from the seed table;
every later match is created empty and is only ever filled by result
advancement.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from bracket_pool.bracket.errors import FieldError
from bracket_pool.bracket.topology import (
    REGION_ORDER,
    SEED_PAIRINGS,
    Region,
    all_match_keys,
    match_id_for,
)
from bracket_pool.ingest.schema import Entrant, Match

logger = logging.getLogger(__name__)

_SEEDS: frozenset[int] = frozenset(range(1, 17))


def validate_field(entrants: Iterable[Entrant]) -> dict[tuple[Region, int], Entrant]:
    """Check that *entrants* form 4 regions of 16 with seeds 1..16 each.

    Returns:
        Lookup of ``(region, seed) -> Entrant``.

    Raises:
        FieldError: On duplicate ids, duplicate seeds within a region, or a
            region that does not hold exactly seeds 1..16.
    """
    by_slot: dict[tuple[Region, int], Entrant] = {}
    seen_ids: set[str] = set()
    for entrant in entrants:
        if entrant.entrant_id in seen_ids:
            msg = f"Duplicate entrant id {entrant.entrant_id!r}"
            raise FieldError(msg)
        seen_ids.add(entrant.entrant_id)
        slot = (entrant.region, entrant.seed)
        if slot in by_slot:
            msg = f"Region {entrant.region} has two entrants seeded {entrant.seed}"
            raise FieldError(msg)
        by_slot[slot] = entrant

    for region in REGION_ORDER:
        seeds = {seed for (r, seed) in by_slot if r == region}
        if seeds != _SEEDS:
            missing = sorted(_SEEDS - seeds)
            msg = f"Region {region} must have seeds 1..16; missing {missing}"
            raise FieldError(msg)
    return by_slot


def build_matches(entrants: Sequence[Entrant]) -> list[Match]:
    """Create every match of the tournament from a validated field.

    Raises:
        FieldError: If the field is malformed (see :func:`validate_field`).
    """
    by_slot = validate_field(entrants)
    matches: list[Match] = []
    for key in all_match_keys():
        left_id: str | None = None
        right_id: str | None = None
        if key.round == "R64":
            assert key.region is not None
            left_seed, right_seed = SEED_PAIRINGS[key.match_number - 1]
            left_id = by_slot[(key.region, left_seed)].entrant_id
            right_id = by_slot[(key.region, right_seed)].entrant_id
        matches.append(
            Match(
                match_id=match_id_for(key),
                round=key.round,
                region=key.region,
                match_number=key.match_number,
                left_entrant_id=left_id,
                right_entrant_id=right_id,
            )
        )
    logger.info("Built %d matches for a field of %d entrants", len(matches), len(by_slot))
    return matches
