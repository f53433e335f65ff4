"""Bracket scoring and leaderboard module."""

from __future__ import annotations

from bracket_pool.evaluation.leaderboard import (
    Leaderboard,
    LeaderboardEntry,
    build_leaderboard,
    rank_scores,
)
from bracket_pool.evaluation.scoring import (
    DEFAULT_WEIGHTS,
    BracketScore,
    DictScoring,
    FibonacciScoring,
    RoundResult,
    ScoringNotFoundError,
    ScoringRule,
    StandardScoring,
    get_scoring,
    list_scorings,
    max_score,
    register_scoring,
    score_bracket,
    scoring_from_settings,
)

__all__ = [
    "DEFAULT_WEIGHTS",
    "BracketScore",
    "DictScoring",
    "FibonacciScoring",
    "Leaderboard",
    "LeaderboardEntry",
    "RoundResult",
    "ScoringNotFoundError",
    "ScoringRule",
    "StandardScoring",
    "build_leaderboard",
    "get_scoring",
    "list_scorings",
    "max_score",
    "rank_scores",
    "register_scoring",
    "score_bracket",
    "scoring_from_settings",
]
