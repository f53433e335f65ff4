"""Bracket scoring: points earned so far and points still available.

Scoring rules are small plugin classes registered by name, so a pool can
select a preset (``standard``, ``fibonacci``) or supply its own table via
:class:`~bracket_pool.ingest.schema.PoolSettings`.

:func:`score_bracket` walks one bracket's picks:

* a pick on a decided match earns the round's points when it matches the
  actual winner, and otherwise clears ``is_perfect``;
* a pick on an undecided match adds the round's points to
  ``possible_remaining_points``.  This is an upper bound; it does not
  check whether the picked entrant is still alive.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Protocol, TypeVar, runtime_checkable

from bracket_pool.bracket.errors import InvalidPickError
from bracket_pool.bracket.snapshot import MatchIndex
from bracket_pool.bracket.topology import ROUND_ORDER, Round, all_match_keys
from bracket_pool.ingest.schema import Bracket, Match, Pick, PoolSettings

logger = logging.getLogger(__name__)

#: Default points per correct pick; doubles every round.
DEFAULT_WEIGHTS: dict[Round, int] = {
    "R64": 1,
    "R32": 2,
    "S16": 4,
    "E8": 8,
    "F4": 16,
    "CHAMP": 32,
}

# ---------------------------------------------------------------------------
# Scoring registry
# ---------------------------------------------------------------------------

_ST = TypeVar("_ST")

_SCORING_REGISTRY: dict[str, type] = {}


class ScoringNotFoundError(KeyError):
    """Raised when a requested scoring name is not in the registry."""


def register_scoring(name: str) -> Callable[[_ST], _ST]:
    """Class decorator that registers a scoring rule class under *name*.

    Raises:
        ValueError: If *name* is already registered.
    """

    def decorator(cls: _ST) -> _ST:
        if name in _SCORING_REGISTRY:
            msg = f"Scoring name {name!r} is already registered to {_SCORING_REGISTRY[name].__name__}"
            raise ValueError(msg)
        _SCORING_REGISTRY[name] = cls  # type: ignore[assignment]
        return cls

    return decorator


def get_scoring(name: str) -> type:
    """Return the scoring class registered under *name*.

    Raises:
        ScoringNotFoundError: If *name* is not registered.
    """
    try:
        return _SCORING_REGISTRY[name]
    except KeyError:
        msg = f"No scoring registered with name {name!r}. Available: {list_scorings()}"
        raise ScoringNotFoundError(msg) from None


def list_scorings() -> list[str]:
    """Return all registered scoring names (sorted)."""
    return sorted(_SCORING_REGISTRY)


# ---------------------------------------------------------------------------
# Scoring rules
# ---------------------------------------------------------------------------


@runtime_checkable
class ScoringRule(Protocol):
    """Protocol for per-round bracket scoring."""

    @property
    def name(self) -> str:
        """Human-readable name of the scoring rule."""
        ...

    def points_per_round(self, round_: Round) -> int:
        """Return points awarded for a correct pick in *round_*."""
        ...


@register_scoring("standard")
class StandardScoring:
    """Doubling scoring: 1-2-4-8-16-32 (192 for a perfect bracket)."""

    @property
    def name(self) -> str:
        return "standard"

    def points_per_round(self, round_: Round) -> int:
        return DEFAULT_WEIGHTS[round_]


@register_scoring("fibonacci")
class FibonacciScoring:
    """Fibonacci-style scoring: 2-3-5-8-13-21 (231 for a perfect bracket)."""

    _POINTS: dict[Round, int] = {"R64": 2, "R32": 3, "S16": 5, "E8": 8, "F4": 13, "CHAMP": 21}

    @property
    def name(self) -> str:
        return "fibonacci"

    def points_per_round(self, round_: Round) -> int:
        return self._POINTS[round_]


class DictScoring:
    """Scoring rule from an explicit ``round -> points`` table.

    Args:
        points: Points for every round in :data:`ROUND_ORDER`.
        scoring_name: Name for this rule.

    Raises:
        ValueError: If *points* does not cover exactly the six rounds.
    """

    def __init__(self, points: Mapping[Round, int], scoring_name: str = "custom") -> None:
        if set(points) != set(ROUND_ORDER):
            msg = f"DictScoring requires exactly the rounds {ROUND_ORDER}, got {sorted(points)}"
            raise ValueError(msg)
        self._points = dict(points)
        self._name = scoring_name

    @property
    def name(self) -> str:
        return self._name

    def points_per_round(self, round_: Round) -> int:
        return self._points[round_]


def scoring_from_settings(settings: PoolSettings | None) -> ScoringRule:
    """Return the pool's scoring rule; the standard table when none is set.

    A partial table in the settings is completed from :data:`DEFAULT_WEIGHTS`.
    """
    if settings is None or settings.scoring is None:
        return StandardScoring()
    return DictScoring({**DEFAULT_WEIGHTS, **settings.scoring}, scoring_name="settings")


def _as_rule(scoring: ScoringRule | Mapping[Round, int] | None) -> ScoringRule:
    if scoring is None:
        return StandardScoring()
    if isinstance(scoring, Mapping):
        return DictScoring({**DEFAULT_WEIGHTS, **scoring})
    return scoring


def max_score(scoring: ScoringRule | Mapping[Round, int] | None = None) -> int:
    """Return the score of a perfect bracket under *scoring*."""
    rule = _as_rule(scoring)
    return sum(rule.points_per_round(key.round) for key in all_match_keys())


# ---------------------------------------------------------------------------
# Bracket score
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RoundResult:
    """Per-round tally of a bracket's picks."""

    correct: int = 0
    total: int = 0
    points: int = 0


@dataclass(frozen=True)
class BracketScore:
    """Score record for one bracket.

    Attributes:
        bracket_id: Scored bracket.
        total_points: Points earned on decided matches.
        possible_remaining_points: Points still on offer from picks on
            undecided matches.
        is_perfect: ``False`` once any decided pick was wrong.
        round_breakdown: ``round -> RoundResult``; ``total`` counts every
            pick in the round, decided or not.
    """

    bracket_id: str
    total_points: int
    possible_remaining_points: int
    is_perfect: bool
    round_breakdown: dict[Round, RoundResult] = field(default_factory=dict)

    @property
    def max_possible_points(self) -> int:
        return self.total_points + self.possible_remaining_points


def score_bracket(
    bracket: Bracket | str,
    picks: Iterable[Pick],
    matches: Iterable[Match] | MatchIndex,
    scoring: ScoringRule | Mapping[Round, int] | None = None,
) -> BracketScore:
    """Score *bracket*'s picks against the actual results in *matches*.

    Args:
        bracket: The bracket, or its id.  Picks of other brackets are ignored.
        picks: Picks to score.
        matches: Snapshot of every match.
        scoring: Rule or ``round -> points`` table; defaults to
            :class:`StandardScoring`.

    Raises:
        InvalidPickError: If a pick refers to a match not in the snapshot.
    """
    bracket_id = bracket if isinstance(bracket, str) else bracket.bracket_id
    rule = _as_rule(scoring)
    index = matches if isinstance(matches, MatchIndex) else MatchIndex(matches)

    tallies: dict[Round, dict[str, int]] = {rnd: {"correct": 0, "total": 0, "points": 0} for rnd in ROUND_ORDER}
    total_points = 0
    remaining = 0
    is_perfect = True

    for pick in picks:
        if pick.bracket_id != bracket_id:
            continue
        if pick.match_id not in index:
            msg = f"Pick {pick.pick_id} refers to unknown match {pick.match_id!r}"
            raise InvalidPickError(msg)
        match = index.by_id(pick.match_id)
        tally = tallies[match.round]
        tally["total"] += 1
        points = rule.points_per_round(match.round)

        if not match.is_decided:
            remaining += points
        elif pick.picked_entrant_id == match.winner_entrant_id:
            tally["correct"] += 1
            tally["points"] += points
            total_points += points
        else:
            is_perfect = False

    logger.debug(
        "Scored bracket %s: %d points, %d remaining, perfect=%s",
        bracket_id,
        total_points,
        remaining,
        is_perfect,
    )
    return BracketScore(
        bracket_id=bracket_id,
        total_points=total_points,
        possible_remaining_points=remaining,
        is_perfect=is_perfect,
        round_breakdown={rnd: RoundResult(**t) for rnd, t in tallies.items()},
    )
