"""Virtual projection: who a bracket's own picks put into each match.

For a Round-of-64 match the virtual pair is simply the stored pair.  For
any later match each side is the entrant the bracket picked to win the
corresponding feeder match, or ``None`` (TBD) when no pick exists there.
The picked identity is matched against the feeder's own virtual pair,
which makes the computation recursive down to the Round of 64.

The feeder graph is a DAG once the Final Four is reached, so results are
memoised per ``(bracket_id, match_id)`` for the lifetime of a
:class:`VirtualResolver`.  A resolver is bound to one snapshot; build a
new one after any pick or match changes.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import NamedTuple

from bracket_pool.bracket.snapshot import MatchIndex, key_of
from bracket_pool.bracket.topology import MatchKey, feeder_slots
from bracket_pool.ingest.schema import Entrant, Match, Pick
from bracket_pool.utils.logger import VERBOSE

logger = logging.getLogger(__name__)


class VirtualPair(NamedTuple):
    """The two entrants a bracket projects into one match."""

    left: Entrant | None
    right: Entrant | None

    @property
    def ids(self) -> tuple[str | None, str | None]:
        """Return the entrant ids on each side (``None`` for TBD)."""
        return (
            self.left.entrant_id if self.left is not None else None,
            self.right.entrant_id if self.right is not None else None,
        )

    def holds(self, entrant_id: str) -> bool:
        """Return ``True`` if *entrant_id* occupies either side."""
        return entrant_id in self.ids


_EMPTY = VirtualPair(None, None)


class VirtualResolver:
    """Computes virtual pairs for one bracket over one snapshot.

    Args:
        matches: Every match of the tournament.
        picks: The bracket's picks.
        entrants: Entrant lookup by id, or an iterable of entrants.
        bracket_id: Owning bracket; defaults to the bracket of the first pick.
    """

    def __init__(
        self,
        matches: Iterable[Match] | MatchIndex,
        picks: Iterable[Pick],
        entrants: Mapping[str, Entrant] | Iterable[Entrant],
        bracket_id: str | None = None,
    ) -> None:
        self._index = matches if isinstance(matches, MatchIndex) else MatchIndex(matches)
        pick_list = list(picks)
        self._picks: dict[str, str] = {p.match_id: p.picked_entrant_id for p in pick_list}
        if isinstance(entrants, Mapping):
            self._entrants: dict[str, Entrant] = dict(entrants)
        else:
            self._entrants = {e.entrant_id: e for e in entrants}
        if bracket_id is None and pick_list:
            bracket_id = pick_list[0].bracket_id
        self._bracket_id = bracket_id
        self._memo: dict[tuple[str | None, str], VirtualPair] = {}
        self._first_round_ids: set[str] | None = None

    @property
    def index(self) -> MatchIndex:
        return self._index

    def resolve(self, match: Match | str) -> VirtualPair:
        """Return the virtual pair for *match* (a :class:`Match` or its id)."""
        target = self._index.by_id(match) if isinstance(match, str) else match
        memo_key = (self._bracket_id, target.match_id)
        cached = self._memo.get(memo_key)
        if cached is not None:
            return cached
        pair = self._compute(target)
        self._memo[memo_key] = pair
        return pair

    def resolve_all(self) -> dict[str, VirtualPair]:
        """Return the virtual pair of every match, keyed by match id."""
        return {m.match_id: self.resolve(m) for m in self._index.in_round_order()}

    def _compute(self, target: Match) -> VirtualPair:
        if target.round == "R64":
            return VirtualPair(self._entrant(target.left_entrant_id), self._entrant(target.right_entrant_id))

        feeders = feeder_slots(*key_of(target))
        if len(feeders) != 2:
            logger.warning("Match %s has %d feeders; projecting TBD", target.match_id, len(feeders))
            return _EMPTY
        left_key, right_key = feeders
        pair = VirtualPair(self._picked_winner(left_key), self._picked_winner(right_key))
        logger.log(VERBOSE, "Resolved %s for %s: %s", target.match_id, self._bracket_id, pair.ids)
        return pair

    def _picked_winner(self, feeder_key: MatchKey) -> Entrant | None:
        feeder = self._index.at(feeder_key)
        if feeder is None:
            return None
        picked_id = self._picks.get(feeder.match_id)
        if picked_id is None:
            return None

        pair = self.resolve(feeder)
        if pair.left is not None and pair.left.entrant_id == picked_id:
            return pair.left
        if pair.right is not None and pair.right.entrant_id == picked_id:
            return pair.right

        # Picks are stored by identity only; accept any first-round entrant.
        if self._first_round_ids is None:
            self._first_round_ids = self._index.first_round_entrant_ids()
        if picked_id in self._first_round_ids:
            logger.debug(
                "Pick %s on %s is not in its virtual pair %s; resolved from the first round",
                picked_id,
                feeder.match_id,
                pair.ids,
            )
            return self._entrant(picked_id)
        return None

    def _entrant(self, entrant_id: str | None) -> Entrant | None:
        if entrant_id is None:
            return None
        entrant = self._entrants.get(entrant_id)
        if entrant is None:
            logger.warning("Entrant %r referenced by the snapshot is not in the entrant lookup", entrant_id)
        return entrant


def virtual_entrants(
    matches: Iterable[Match],
    picks: Iterable[Pick],
    target: Match,
    entrants: Mapping[str, Entrant] | Iterable[Entrant],
) -> VirtualPair:
    """Return the virtual pair of *target* for the bracket owning *picks*.

    One-shot convenience around :class:`VirtualResolver`; use the class
    directly when resolving many matches of the same snapshot.
    """
    return VirtualResolver(matches, picks, entrants).resolve(target)
