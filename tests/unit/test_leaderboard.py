"""Unit tests for leaderboard ranking."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from bracket_pool.bracket.advancement import apply_advancement, record_winner
from bracket_pool.evaluation.leaderboard import (
    LEADERBOARD_COLUMNS,
    build_leaderboard,
    rank_scores,
)
from bracket_pool.evaluation.scoring import BracketScore
from bracket_pool.ingest.schema import Bracket, Match, Pick


def _score(bracket_id: str, total: int, remaining: int, perfect: bool = False) -> BracketScore:
    return BracketScore(
        bracket_id=bracket_id,
        total_points=total,
        possible_remaining_points=remaining,
        is_perfect=perfect,
    )


class TestRankScores:
    def test_orders_by_points_then_remaining(self) -> None:
        board = rank_scores([_score("a", 10, 5), _score("b", 12, 0), _score("c", 10, 50)])
        assert [e.bracket_id for e in board.entries] == ["b", "c", "a"]
        assert [e.rank for e in board.entries] == [1, 2, 3]

    def test_full_ties_keep_input_order(self) -> None:
        board = rank_scores([_score("z", 4, 4), _score("a", 4, 4)])
        assert [e.bracket_id for e in board.entries] == ["z", "a"]

    def test_participants_lookup(self) -> None:
        board = rank_scores([_score("a", 1, 0), _score("b", 0, 0)], {"a": "alice"})
        assert board.entries[0].participant_id == "alice"
        assert board.entries[1].participant_id == "b"

    def test_empty(self) -> None:
        board = rank_scores([])
        assert len(board) == 0
        assert board.perfect_brackets == 0
        assert list(board.to_frame().columns) == list(LEADERBOARD_COLUMNS)

    def test_to_frame(self) -> None:
        board = rank_scores([_score("a", 3, 1, perfect=True), _score("b", 1, 1)])
        df = board.to_frame()
        assert list(df.columns) == list(LEADERBOARD_COLUMNS)
        assert df["rank"].tolist() == [1, 2]
        assert df["is_perfect"].tolist() == [True, False]
        assert board.perfect_brackets == 1


class TestBuildLeaderboard:
    def test_scores_every_bracket(
        self,
        matches: list[Match],
        chalk_picks: Callable[[str], list[Pick]],
    ) -> None:
        snap = apply_advancement(matches, record_winner(matches, "R64-W-1", "W16"))
        upset = [
            p.model_copy(update={"picked_entrant_id": "W16"}) if p.match_id == "R64-W-1" else p
            for p in chalk_picks("b2")
        ]
        brackets = [
            Bracket(bracket_id="b1", participant_id="alice"),
            Bracket(bracket_id="b2", participant_id="bob"),
            Bracket(bracket_id="b3", participant_id="carol"),
        ]
        board = build_leaderboard(brackets, [*chalk_picks("b1"), *upset], snap)

        assert [e.participant_id for e in board.entries] == ["bob", "alice", "carol"]
        bob, alice, carol = board.entries
        assert (bob.total_points, bob.is_perfect) == (1, True)
        assert (alice.total_points, alice.is_perfect) == (0, False)
        assert (carol.total_points, carol.possible_remaining_points, carol.is_perfect) == (0, 0, True)
        assert board.perfect_brackets == 2

    def test_unscorable_bracket_is_left_off(
        self,
        matches: list[Match],
        chalk_picks: Callable[[str], list[Pick]],
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        brackets = [
            Bracket(bracket_id="b1", participant_id="alice"),
            Bracket(bracket_id="b2", participant_id="bob"),
        ]
        corrupt = Pick(bracket_id="b2", match_id="GONE", picked_entrant_id="W01")
        with caplog.at_level("WARNING", logger="bracket_pool.evaluation.leaderboard"):
            board = build_leaderboard(brackets, [*chalk_picks("b1"), corrupt], matches)

        assert [e.bracket_id for e in board.entries] == ["b1"]
        assert board.entries[0].rank == 1
        assert board.skipped == ("b2",)
        assert "Leaving bracket b2 off the leaderboard" in caplog.text
