"""Unit tests for pick gating, validation, planning and submission."""

from __future__ import annotations

import datetime
from collections.abc import Callable

import pytest

from bracket_pool.bracket.errors import BracketLockedError, InvalidPickError, SubmissionError
from bracket_pool.bracket.picks import (
    PickPlan,
    apply_pick_plan,
    ensure_pick_allowed,
    is_locked,
    plan_pick,
    submit_bracket,
    validate_pick,
    validate_submission,
)
from bracket_pool.bracket.projection import VirtualResolver
from bracket_pool.ingest.schema import Bracket, Entrant, Match, Pick, PoolSettings

_UTC = datetime.timezone.utc
_LOCK = datetime.datetime(2026, 3, 19, 16, 0, tzinfo=_UTC)
_BEFORE = _LOCK - datetime.timedelta(hours=1)
_AFTER = _LOCK + datetime.timedelta(minutes=1)


@pytest.fixture
def bracket() -> Bracket:
    return Bracket(bracket_id="b1", participant_id="alice")


# ---------------------------------------------------------------------------
# Lock gating
# ---------------------------------------------------------------------------


class TestLockGating:
    def test_no_deadline_never_locks(self) -> None:
        assert not is_locked(None, _AFTER)

    def test_deadline(self) -> None:
        assert not is_locked(_LOCK, _BEFORE)
        assert not is_locked(_LOCK, _LOCK)
        assert is_locked(_LOCK, _AFTER)

    def test_naive_now_is_utc(self, bracket: Bracket) -> None:
        assert not is_locked(_LOCK, _BEFORE.replace(tzinfo=None))
        assert is_locked(_LOCK, _AFTER.replace(tzinfo=None))
        with pytest.raises(BracketLockedError):
            ensure_pick_allowed(bracket, PoolSettings(lock_datetime=_LOCK), now=_AFTER.replace(tzinfo=None))

    def test_open_bracket_allowed(self, bracket: Bracket) -> None:
        ensure_pick_allowed(bracket, PoolSettings(lock_datetime=_LOCK), now=_BEFORE)

    def test_past_deadline_rejected(self, bracket: Bracket) -> None:
        with pytest.raises(BracketLockedError, match="Picks locked"):
            ensure_pick_allowed(bracket, PoolSettings(lock_datetime=_LOCK), now=_AFTER)

    def test_submitted_bracket_rejected(self, bracket: Bracket) -> None:
        submitted = bracket.model_copy(update={"locked_at": _BEFORE})
        with pytest.raises(BracketLockedError, match="submitted"):
            ensure_pick_allowed(submitted, PoolSettings(), now=_BEFORE)

    def test_admin_bypasses_lock(self, bracket: Bracket) -> None:
        submitted = bracket.model_copy(update={"locked_at": _BEFORE})
        ensure_pick_allowed(submitted, PoolSettings(lock_datetime=_LOCK), is_admin=True, now=_AFTER)


# ---------------------------------------------------------------------------
# validate_pick
# ---------------------------------------------------------------------------


class TestValidatePick:
    def test_first_round_entrant_accepted(self, matches: list[Match], entrants: list[Entrant]) -> None:
        resolver = VirtualResolver(matches, [], entrants, bracket_id="b1")
        assert validate_pick(resolver, "R64-W-1", "W16").match_id == "R64-W-1"

    def test_non_occupant_rejected(self, matches: list[Match], entrants: list[Entrant]) -> None:
        resolver = VirtualResolver(matches, [], entrants, bracket_id="b1")
        with pytest.raises(InvalidPickError, match="not a current occupant"):
            validate_pick(resolver, "R64-W-1", "W08")

    def test_tbd_match_rejects_everything(self, matches: list[Match], entrants: list[Entrant]) -> None:
        resolver = VirtualResolver(matches, [], entrants, bracket_id="b1")
        with pytest.raises(InvalidPickError):
            validate_pick(resolver, "R32-W-1", "W01")

    def test_unknown_match(self, matches: list[Match], entrants: list[Entrant]) -> None:
        resolver = VirtualResolver(matches, [], entrants, bracket_id="b1")
        with pytest.raises(InvalidPickError, match="Unknown match"):
            validate_pick(resolver, "R64-W-9", "W01")


# ---------------------------------------------------------------------------
# plan_pick / apply_pick_plan
# ---------------------------------------------------------------------------


class TestPlanPick:
    def test_new_pick(self, bracket: Bracket, matches: list[Match], entrants: list[Entrant]) -> None:
        plan = plan_pick(bracket, [], matches, entrants, "R64-W-1", "W01")
        assert plan.upsert == Pick(bracket_id="b1", match_id="R64-W-1", picked_entrant_id="W01")
        assert plan.previous_entrant_id is None
        assert plan.deletions == frozenset()
        assert not plan.is_noop

    def test_repeat_pick_is_noop(self, bracket: Bracket, matches: list[Match], entrants: list[Entrant]) -> None:
        existing = [Pick(bracket_id="b1", match_id="R64-W-1", picked_entrant_id="W01")]
        assert plan_pick(bracket, existing, matches, entrants, "R64-W-1", "W01").is_noop

    def test_change_cascades(
        self,
        bracket: Bracket,
        matches: list[Match],
        entrants: list[Entrant],
        chalk_picks: Callable[[str], list[Pick]],
    ) -> None:
        picks = chalk_picks("b1")
        plan = plan_pick(bracket, picks, matches, entrants, "R64-W-1", "W16")
        assert plan.previous_entrant_id == "W01"
        assert "b1:CHAMP-1" in plan.deletions
        assert len(plan.deletions) == 5

        after = apply_pick_plan(picks, plan)
        assert len(after) == 63 - 5
        assert next(p for p in after if p.match_id == "R64-W-1").picked_entrant_id == "W16"

    def test_other_brackets_ignored(
        self,
        bracket: Bracket,
        matches: list[Match],
        entrants: list[Entrant],
        chalk_picks: Callable[[str], list[Pick]],
    ) -> None:
        others = chalk_picks("b2")
        plan = plan_pick(bracket, others, matches, entrants, "R64-W-1", "W16")
        assert plan.previous_entrant_id is None
        assert apply_pick_plan(others, plan)[-1] == plan.upsert

    def test_pick_into_projected_match(
        self,
        bracket: Bracket,
        matches: list[Match],
        entrants: list[Entrant],
    ) -> None:
        picks = [
            Pick(bracket_id="b1", match_id="R64-W-1", picked_entrant_id="W16"),
            Pick(bracket_id="b1", match_id="R64-W-2", picked_entrant_id="W09"),
        ]
        plan = plan_pick(bracket, picks, matches, entrants, "R32-W-1", "W16")
        assert plan.upsert.match_id == "R32-W-1"
        with pytest.raises(InvalidPickError):
            plan_pick(bracket, picks, matches, entrants, "R32-W-1", "W01")

    def test_locked_rejected(self, bracket: Bracket, matches: list[Match], entrants: list[Entrant]) -> None:
        with pytest.raises(BracketLockedError):
            plan_pick(
                bracket,
                [],
                matches,
                entrants,
                "R64-W-1",
                "W01",
                settings=PoolSettings(lock_datetime=_LOCK),
                now=_AFTER,
            )

    def test_admin_override_flagged(self, bracket: Bracket, matches: list[Match], entrants: list[Entrant]) -> None:
        plan = plan_pick(
            bracket,
            [],
            matches,
            entrants,
            "R64-W-1",
            "W01",
            settings=PoolSettings(lock_datetime=_LOCK),
            is_admin=True,
            now=_AFTER,
        )
        assert plan.admin_override

    def test_admin_before_lock_is_not_override(
        self,
        bracket: Bracket,
        matches: list[Match],
        entrants: list[Entrant],
    ) -> None:
        plan = plan_pick(bracket, [], matches, entrants, "R64-W-1", "W01", is_admin=True)
        assert not plan.admin_override

    def test_apply_plan_deletes_and_upserts(self) -> None:
        picks = [
            Pick(bracket_id="b1", match_id="R64-W-1", picked_entrant_id="W01"),
            Pick(bracket_id="b1", match_id="R32-W-1", picked_entrant_id="W01"),
        ]
        plan = PickPlan(
            upsert=Pick(bracket_id="b1", match_id="R64-W-1", picked_entrant_id="W16"),
            previous_entrant_id="W01",
            deletions=frozenset({"b1:R32-W-1"}),
        )
        assert apply_pick_plan(picks, plan) == [plan.upsert]


# ---------------------------------------------------------------------------
# Submission
# ---------------------------------------------------------------------------


class TestSubmission:
    def test_incomplete_rejected(self, bracket: Bracket, matches: list[Match]) -> None:
        picks = [Pick(bracket_id="b1", match_id="R64-W-1", picked_entrant_id="W01")]
        with pytest.raises(SubmissionError, match="Incomplete bracket: 1/63 picks made"):
            validate_submission(bracket, picks, matches)

    def test_complete_bracket_submitted(
        self,
        bracket: Bracket,
        matches: list[Match],
        chalk_picks: Callable[[str], list[Pick]],
    ) -> None:
        submitted = submit_bracket(bracket, chalk_picks("b1"), matches, now=_BEFORE)
        assert submitted.locked_at == _BEFORE
        assert submitted.is_submitted
        assert not bracket.is_submitted

    def test_double_submit_rejected(
        self,
        bracket: Bracket,
        matches: list[Match],
        chalk_picks: Callable[[str], list[Pick]],
    ) -> None:
        submitted = submit_bracket(bracket, chalk_picks("b1"), matches, now=_BEFORE)
        with pytest.raises(SubmissionError, match="already submitted"):
            submit_bracket(submitted, chalk_picks("b1"), matches)

    def test_other_brackets_picks_do_not_count(
        self,
        bracket: Bracket,
        matches: list[Match],
        chalk_picks: Callable[[str], list[Pick]],
    ) -> None:
        with pytest.raises(SubmissionError, match="0/63"):
            validate_submission(bracket, chalk_picks("b2"), matches)
