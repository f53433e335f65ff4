"""Result advancement: push an actual winner into the next match.

A match moves through ``EMPTY -> PARTIAL -> READY -> DECIDED``.  The only
caller-triggered transition is ``READY -> DECIDED`` (recording a winner);
the others happen when winners of feeder matches are written into its
slots.

:func:`record_winner` returns an :class:`Advancement` describing the
writes; :func:`apply_advancement` performs them on a snapshot and returns
the new one.  Recording the same winner again re-issues the identical slot
write.  Recording a *different* winner on a decided match is treated as a
correction: the successor slot is overwritten, and every later slot or
result still holding the superseded entrant is cleared.  A decided match
that loses an entrant this way has its result reset as well, and the
reset carries on through that winner's later slots.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import NamedTuple

from bracket_pool.bracket.errors import InvalidWinnerError, TopologyError
from bracket_pool.bracket.snapshot import MatchIndex, key_of
from bracket_pool.bracket.topology import Side, successor_slot
from bracket_pool.ingest.schema import Match
from bracket_pool.utils.logger import VERBOSE

logger = logging.getLogger(__name__)


class MatchState(enum.Enum):
    """Lifecycle state of a match."""

    EMPTY = "empty"
    PARTIAL = "partial"
    READY = "ready"
    DECIDED = "decided"


def match_state(match: Match) -> MatchState:
    """Return the lifecycle state of *match*."""
    if match.winner_entrant_id is not None:
        return MatchState.DECIDED
    filled = sum(eid is not None for eid in match.entrant_ids)
    if filled == 2:
        return MatchState.READY
    return MatchState.PARTIAL if filled == 1 else MatchState.EMPTY


class SlotWrite(NamedTuple):
    """Instruction to store *entrant_id* (``None`` clears) in one slot."""

    match_id: str
    side: Side
    entrant_id: str | None


@dataclass(frozen=True)
class Advancement:
    """Writes produced by recording one result.

    Attributes:
        match_id: Match whose winner is being set.
        winner_entrant_id: The recorded winner.
        slot_write: Write into the successor slot; ``None`` for the
            Championship.
        superseded_entrant_id: Previous winner when this is a correction.
        clears: Later slots emptied because they held the superseded entrant.
        cleared_winners: Later matches whose recorded winner was the
            superseded entrant and must be reset.
    """

    match_id: str
    winner_entrant_id: str
    slot_write: SlotWrite | None
    superseded_entrant_id: str | None = None
    clears: tuple[SlotWrite, ...] = ()
    cleared_winners: tuple[str, ...] = ()

    @property
    def is_correction(self) -> bool:
        return self.superseded_entrant_id is not None

    @property
    def writes(self) -> tuple[SlotWrite, ...]:
        """Return every slot write, successor first."""
        head = (self.slot_write,) if self.slot_write is not None else ()
        return head + self.clears


def _successor(index: MatchIndex, match: Match) -> tuple[Match, Side] | None:
    slot = successor_slot(*key_of(match))
    if slot is None:
        return None
    downstream = index.at(slot.key)
    if downstream is None:
        msg = f"Snapshot has no match at {slot.key} to receive the winner of {match.match_id}"
        raise TopologyError(msg)
    return downstream, slot.side


def record_winner(
    matches: Iterable[Match] | MatchIndex,
    match: Match | str,
    winner_entrant_id: str,
) -> Advancement:
    """Validate a result and compute the writes that propagate it.

    Args:
        matches: Snapshot of every match.
        match: The decided match, or its id.
        winner_entrant_id: Must be one of the match's stored entrants.

    Raises:
        InvalidWinnerError: If the match does not have both entrants, or
            the winner is not one of them.
        TopologyError: If the snapshot lacks the successor match.
    """
    index = matches if isinstance(matches, MatchIndex) else MatchIndex(matches)
    target = index.by_id(match) if isinstance(match, str) else match

    state = match_state(target)
    if state in (MatchState.EMPTY, MatchState.PARTIAL):
        msg = f"Match {target.match_id} is {state.value}; both entrants must be known before a result"
        raise InvalidWinnerError(msg)
    if winner_entrant_id not in target.entrant_ids:
        msg = f"Winner {winner_entrant_id!r} is not an entrant of {target.match_id} {target.entrant_ids}"
        raise InvalidWinnerError(msg)

    previous = target.winner_entrant_id
    successor = _successor(index, target)
    slot_write = (
        SlotWrite(successor[0].match_id, successor[1], winner_entrant_id) if successor is not None else None
    )

    if previous is None or previous == winner_entrant_id:
        if previous is not None:
            logger.info("Re-recording %s as winner of %s", winner_entrant_id, target.match_id)
        else:
            logger.info("Recorded %s as winner of %s", winner_entrant_id, target.match_id)
        return Advancement(target.match_id, winner_entrant_id, slot_write)

    clears: list[SlotWrite] = []
    cleared_winners: list[str] = []
    cursor = successor
    overwritten = True
    # The successor slot is overwritten by slot_write, so a result there
    # stands unless the superseded entrant won it.  Further down, an emptied
    # slot leaves its match unplayable and any recorded result is reset,
    # taking that winner's own successor slot with it.
    while cursor is not None:
        current, _ = cursor
        winner = current.winner_entrant_id
        if winner is None or (overwritten and winner != previous):
            break
        cleared_winners.append(current.match_id)
        cursor = _successor(index, current)
        if cursor is None:
            break
        nxt, side = cursor
        if nxt.slot(side) != winner:
            break
        clears.append(SlotWrite(nxt.match_id, side, None))
        logger.log(VERBOSE, "Clearing %s slot of %s (held %s)", side, nxt.match_id, winner)
        overwritten = False

    logger.info(
        "Corrected winner of %s from %s to %s; cleared %d slot(s) and %d result(s) downstream",
        target.match_id,
        previous,
        winner_entrant_id,
        len(clears),
        len(cleared_winners),
    )
    return Advancement(
        target.match_id,
        winner_entrant_id,
        slot_write,
        superseded_entrant_id=previous,
        clears=tuple(clears),
        cleared_winners=tuple(cleared_winners),
    )


def apply_advancement(matches: Iterable[Match], advancement: Advancement) -> list[Match]:
    """Return a new snapshot with *advancement* applied as one unit."""
    updates: dict[str, dict[str, str | None]] = {}
    updates.setdefault(advancement.match_id, {})["winner_entrant_id"] = advancement.winner_entrant_id
    for write in advancement.writes:
        updates.setdefault(write.match_id, {})[f"{write.side}_entrant_id"] = write.entrant_id
    for match_id in advancement.cleared_winners:
        updates.setdefault(match_id, {})["winner_entrant_id"] = None

    return [m.model_copy(update=updates[m.match_id]) if m.match_id in updates else m for m in matches]
