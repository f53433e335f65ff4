"""Static shape of a 64-entrant, 4-region single-elimination bracket.

Every match is addressed by a :class:`MatchKey` ``(round, region,
match_number)``.  Regional rounds (R64 through E8) carry a region and a
1-based position within it; the Final Four and Championship are
cross-regional and carry ``region=None``.

The feeder and successor relations are spelled out as lookup tables rather
than derived from a binary-tree index, so the region-to-Final-Four wiring
and the odd/even slot assignment are visible in one place:

* regional rounds: matches ``2k-1`` and ``2k`` feed match ``k`` of the next
  round (odd number into the left slot, even into the right);
* Final Four: W plays X in match 1, Y plays Z in match 2;
* Championship: Final-Four match 1 on the left, match 2 on the right.

All functions are pure and raise :class:`TopologyError` for coordinates
that do not exist.
"""

from __future__ import annotations

from typing import Literal, NamedTuple

from bracket_pool.bracket.errors import TopologyError

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

Round = Literal["R64", "R32", "S16", "E8", "F4", "CHAMP"]
Region = Literal["W", "X", "Y", "Z"]
Side = Literal["left", "right"]

#: Rounds in elimination order.
ROUND_ORDER: tuple[Round, ...] = ("R64", "R32", "S16", "E8", "F4", "CHAMP")

#: Regions in bracket-position order.
REGION_ORDER: tuple[Region, ...] = ("W", "X", "Y", "Z")

#: Rounds played inside a single region.
REGIONAL_ROUNDS: frozenset[Round] = frozenset({"R64", "R32", "S16", "E8"})

#: Round-of-64 seed pairings; position ``i`` is match number ``i + 1``.
SEED_PAIRINGS: tuple[tuple[int, int], ...] = (
    (1, 16),
    (8, 9),
    (5, 12),
    (4, 13),
    (6, 11),
    (3, 14),
    (7, 10),
    (2, 15),
)

#: Matches per round; per region for regional rounds, overall otherwise.
MATCHES_PER_ROUND: dict[Round, int] = {
    "R64": 8,
    "R32": 4,
    "S16": 2,
    "E8": 1,
    "F4": 2,
    "CHAMP": 1,
}

ROUND_DISPLAY_NAMES: dict[Round, str] = {
    "R64": "Round of 64",
    "R32": "Round of 32",
    "S16": "Sweet 16",
    "E8": "Elite 8",
    "F4": "Final 4",
    "CHAMP": "Championship",
}

#: Total number of matches in the bracket (63).
N_MATCHES: int = sum(
    count * (len(REGION_ORDER) if rnd in REGIONAL_ROUNDS else 1) for rnd, count in MATCHES_PER_ROUND.items()
)


class MatchKey(NamedTuple):
    """Coordinates of one match."""

    round: Round
    region: Region | None
    match_number: int


class SlotRef(NamedTuple):
    """One side of one match."""

    round: Round
    region: Region | None
    match_number: int
    side: Side

    @property
    def key(self) -> MatchKey:
        """Return the coordinates of the match this slot belongs to."""
        return MatchKey(self.round, self.region, self.match_number)


# ---------------------------------------------------------------------------
# Lookup tables
# ---------------------------------------------------------------------------

#: Regional advancement: this match number -> (next-round match number, side).
_REGIONAL_ADVANCEMENT: dict[int, tuple[int, Side]] = {
    1: (1, "left"),
    2: (1, "right"),
    3: (2, "left"),
    4: (2, "right"),
    5: (3, "left"),
    6: (3, "right"),
    7: (4, "left"),
    8: (4, "right"),
}

#: Elite-8 winner of a region -> (Final-Four match number, side).
_FINAL_FOUR_ENTRY: dict[Region, tuple[int, Side]] = {
    "W": (1, "left"),
    "X": (1, "right"),
    "Y": (2, "left"),
    "Z": (2, "right"),
}

#: Final-Four match number -> (left region, right region).
_FINAL_FOUR_FEEDERS: dict[int, tuple[Region, Region]] = {
    1: ("W", "X"),
    2: ("Y", "Z"),
}

#: Final-Four match number -> Championship side.
_CHAMPIONSHIP_ENTRY: dict[int, Side] = {
    1: "left",
    2: "right",
}


# ---------------------------------------------------------------------------
# Round helpers
# ---------------------------------------------------------------------------


def round_index(round_: str) -> int:
    """Return the 0-based position of *round_* in :data:`ROUND_ORDER`.

    Raises:
        TopologyError: If *round_* is not a known round.
    """
    try:
        return ROUND_ORDER.index(round_)  # type: ignore[arg-type]
    except ValueError:
        msg = f"Unknown round {round_!r}. Valid rounds: {', '.join(ROUND_ORDER)}"
        raise TopologyError(msg) from None


def previous_round(round_: Round) -> Round | None:
    """Return the round feeding *round_*, or ``None`` for the Round of 64."""
    idx = round_index(round_)
    return ROUND_ORDER[idx - 1] if idx > 0 else None


def next_round(round_: Round) -> Round | None:
    """Return the round *round_* feeds, or ``None`` for the Championship."""
    idx = round_index(round_)
    return ROUND_ORDER[idx + 1] if idx + 1 < len(ROUND_ORDER) else None


def is_regional(round_: Round) -> bool:
    """Return ``True`` for rounds played inside a single region."""
    round_index(round_)
    return round_ in REGIONAL_ROUNDS


def match_key(round_: str, region: str | None, match_number: int) -> MatchKey:
    """Validate coordinates and return them as a :class:`MatchKey`.

    Raises:
        TopologyError: If the round is unknown, the region does not fit the
            round (missing for a regional round, present for a cross-regional
            one, or not a known region), or the match number is out of range.
    """
    rnd: Round = ROUND_ORDER[round_index(round_)]
    if rnd in REGIONAL_ROUNDS:
        if region not in REGION_ORDER:
            msg = f"Round {rnd} requires a region in {REGION_ORDER}, got {region!r}"
            raise TopologyError(msg)
    elif region is not None:
        msg = f"Round {rnd} is cross-regional; region must be None, got {region!r}"
        raise TopologyError(msg)
    limit = MATCHES_PER_ROUND[rnd]
    if not 1 <= match_number <= limit:
        msg = f"Match number {match_number} out of range 1..{limit} for round {rnd}"
        raise TopologyError(msg)
    return MatchKey(rnd, region, match_number)  # type: ignore[arg-type]


def all_match_keys() -> tuple[MatchKey, ...]:
    """Return every match in the bracket, ordered by round, region, number."""
    keys: list[MatchKey] = []
    for rnd in ROUND_ORDER:
        regions: tuple[Region | None, ...] = REGION_ORDER if rnd in REGIONAL_ROUNDS else (None,)
        for region in regions:
            for number in range(1, MATCHES_PER_ROUND[rnd] + 1):
                keys.append(MatchKey(rnd, region, number))
    return tuple(keys)


def match_id_for(key: MatchKey) -> str:
    """Return the canonical identifier for *key* (``R64-W-1``, ``F4-2``)."""
    if key.region is None:
        return f"{key.round}-{key.match_number}"
    return f"{key.round}-{key.region}-{key.match_number}"


# ---------------------------------------------------------------------------
# Feeder / successor mappings
# ---------------------------------------------------------------------------


def feeder_slots(round_: str, region: str | None, match_number: int) -> tuple[MatchKey, ...]:
    """Return the matches whose winners fill this match's left and right slots.

    The Round of 64 has no feeders and returns an empty tuple; every other
    round returns exactly ``(left_feeder, right_feeder)``.

    Raises:
        TopologyError: If the coordinates do not name a match.
    """
    key = match_key(round_, region, match_number)
    if key.round == "R64":
        return ()
    if key.round == "CHAMP":
        return (MatchKey("F4", None, 1), MatchKey("F4", None, 2))
    if key.round == "F4":
        left_region, right_region = _FINAL_FOUR_FEEDERS[key.match_number]
        return (MatchKey("E8", left_region, 1), MatchKey("E8", right_region, 1))

    prev = previous_round(key.round)
    assert prev is not None
    k = key.match_number
    return (MatchKey(prev, key.region, 2 * k - 1), MatchKey(prev, key.region, 2 * k))


def successor_slot(round_: str, region: str | None, match_number: int) -> SlotRef | None:
    """Return the downstream match and side this match's winner advances into.

    Returns ``None`` for the Championship.

    Raises:
        TopologyError: If the coordinates do not name a match.
    """
    key = match_key(round_, region, match_number)
    if key.round == "CHAMP":
        return None
    if key.round == "F4":
        return SlotRef("CHAMP", None, 1, _CHAMPIONSHIP_ENTRY[key.match_number])
    if key.round == "E8":
        assert key.region is not None
        f4_number, side = _FINAL_FOUR_ENTRY[key.region]
        return SlotRef("F4", None, f4_number, side)

    nxt = next_round(key.round)
    assert nxt is not None
    next_number, side = _REGIONAL_ADVANCEMENT[key.match_number]
    return SlotRef(nxt, key.region, next_number, side)


def downstream_keys(key: MatchKey) -> list[MatchKey]:
    """Return the successor chain of *key* up to and including the Championship."""
    chain: list[MatchKey] = []
    slot = successor_slot(*key)
    while slot is not None:
        chain.append(slot.key)
        slot = successor_slot(*slot.key)
    return chain
