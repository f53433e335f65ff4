"""Leaderboard assembly from per-bracket scores.

Brackets are ordered by ``total_points`` descending, ties broken by
``possible_remaining_points`` descending; the rank is the resulting
1-based position.  Brackets still tied after both keys keep their input
order.  A bracket that cannot be scored is logged and left off the board
rather than failing the whole ranking.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass

import pandas as pd  # type: ignore[import-untyped]

from bracket_pool.bracket.errors import BracketPoolError
from bracket_pool.bracket.snapshot import MatchIndex
from bracket_pool.bracket.topology import Round
from bracket_pool.evaluation.scoring import BracketScore, ScoringRule, score_bracket
from bracket_pool.ingest.schema import Bracket, Match, Pick

logger = logging.getLogger(__name__)

LEADERBOARD_COLUMNS: tuple[str, ...] = (
    "rank",
    "bracket_id",
    "participant_id",
    "total_points",
    "possible_remaining_points",
    "is_perfect",
)


@dataclass(frozen=True)
class LeaderboardEntry:
    """One ranked row of the leaderboard."""

    rank: int
    bracket_id: str
    participant_id: str
    total_points: int
    possible_remaining_points: int
    is_perfect: bool


@dataclass(frozen=True)
class Leaderboard:
    """Ranked entries plus pool-wide tallies.

    Attributes:
        entries: Ranked rows, best first.
        skipped: Ids of brackets left off because they could not be scored.
    """

    entries: tuple[LeaderboardEntry, ...]
    skipped: tuple[str, ...] = ()

    @property
    def perfect_brackets(self) -> int:
        return sum(e.is_perfect for e in self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def to_frame(self) -> pd.DataFrame:
        """Return the leaderboard as a DataFrame with :data:`LEADERBOARD_COLUMNS`."""
        return pd.DataFrame([asdict(e) for e in self.entries], columns=list(LEADERBOARD_COLUMNS))


def rank_scores(
    scores: Iterable[BracketScore],
    participants: Mapping[str, str] | None = None,
) -> Leaderboard:
    """Rank already-computed scores.

    Args:
        scores: One score per bracket.
        participants: Optional ``bracket_id -> participant_id`` lookup;
            brackets without an entry show their own id.
    """
    participants = participants or {}
    ordered = sorted(scores, key=lambda s: (-s.total_points, -s.possible_remaining_points))
    return Leaderboard(
        entries=tuple(
            LeaderboardEntry(
                rank=position,
                bracket_id=score.bracket_id,
                participant_id=participants.get(score.bracket_id, score.bracket_id),
                total_points=score.total_points,
                possible_remaining_points=score.possible_remaining_points,
                is_perfect=score.is_perfect,
            )
            for position, score in enumerate(ordered, start=1)
        )
    )


def build_leaderboard(
    brackets: Iterable[Bracket],
    picks: Iterable[Pick],
    matches: Iterable[Match],
    scoring: ScoringRule | Mapping[Round, int] | None = None,
) -> Leaderboard:
    """Score every bracket against one snapshot and rank them."""
    index = MatchIndex(matches)
    picks_by_bracket: dict[str, list[Pick]] = {}
    for pick in picks:
        picks_by_bracket.setdefault(pick.bracket_id, []).append(pick)

    bracket_list = list(brackets)
    scores: list[BracketScore] = []
    skipped: list[str] = []
    for bracket in bracket_list:
        try:
            score = score_bracket(bracket, picks_by_bracket.get(bracket.bracket_id, []), index, scoring)
        except BracketPoolError as exc:
            logger.warning("Leaving bracket %s off the leaderboard: %s", bracket.bracket_id, exc)
            skipped.append(bracket.bracket_id)
            continue
        scores.append(score)

    board = rank_scores(scores, {b.bracket_id: b.participant_id for b in bracket_list})
    return Leaderboard(entries=board.entries, skipped=tuple(skipped))
