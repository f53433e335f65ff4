"""Pool operations over a repository.

Each function reads one snapshot from a :class:`Repository`, asks the core
for a plan, and writes the outcome back.  These are what the Typer
commands in :mod:`bracket_pool.cli.main` call; a web backend would sit at
the same seam.
"""

from __future__ import annotations

import datetime
import logging
from pathlib import Path

from bracket_pool.bracket.advancement import Advancement, apply_advancement, record_winner
from bracket_pool.bracket.field import build_matches
from bracket_pool.bracket.picks import PickPlan, apply_pick_plan, plan_pick, submit_bracket
from bracket_pool.bracket.projection import VirtualPair, VirtualResolver
from bracket_pool.bracket.topology import ROUND_ORDER, Region
from bracket_pool.evaluation.leaderboard import Leaderboard, build_leaderboard
from bracket_pool.evaluation.scoring import BracketScore, get_scoring, score_bracket, scoring_from_settings
from bracket_pool.ingest.entrants import load_entrants_csv
from bracket_pool.ingest.repository import Repository
from bracket_pool.ingest.schema import AdminAction, Bracket, Match, PoolSettings

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_ID = "admin"


def init_pool(
    repo: Repository,
    entrants_csv: Path,
    *,
    lock_datetime: datetime.datetime | None = None,
    scoring_name: str | None = None,
    region_names: dict[Region, str] | None = None,
) -> list[Match]:
    """Load the field, create all matches and reset brackets, picks and the audit trail.

    Raises:
        FieldError: If the CSV does not describe a valid 64-entrant field.
        ScoringNotFoundError: If *scoring_name* is not a registered preset.
    """
    entrants = load_entrants_csv(entrants_csv)
    matches = build_matches(entrants)

    scoring = None
    if scoring_name is not None:
        rule = get_scoring(scoring_name)()
        scoring = {rnd: rule.points_per_round(rnd) for rnd in ROUND_ORDER}

    repo.save_entrants(entrants)
    repo.save_matches(matches)
    repo.save_brackets([])
    repo.save_picks([])
    repo.save_admin_actions([])
    repo.save_settings(
        PoolSettings(lock_datetime=lock_datetime, scoring=scoring, region_names=region_names or {})
    )
    logger.info("Initialised pool with %d entrants and %d matches", len(entrants), len(matches))
    return matches


def _new_bracket(bracket_id: str, participant_id: str | None) -> Bracket:
    """Build the bracket a participant gets on their first visit."""
    return Bracket(bracket_id=bracket_id, participant_id=participant_id or bracket_id)


def _replace_bracket(repo: Repository, bracket: Bracket) -> None:
    repo.save_brackets([bracket if b.bracket_id == bracket.bracket_id else b for b in repo.get_brackets()])


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def make_pick(  # noqa: PLR0913
    repo: Repository,
    bracket_id: str,
    match_id: str,
    entrant_id: str,
    *,
    participant_id: str | None = None,
    is_admin: bool = False,
    admin_id: str = DEFAULT_ADMIN_ID,
    now: datetime.datetime | None = None,
) -> PickPlan:
    """Validate and store one pick, deleting the picks it invalidates.

    A bracket seen for the first time is stored only once the pick has been
    accepted.  Administrator edits that bypass the lock or a submission are
    appended to the audit trail as ``OVERRIDE_PICK``.

    Raises:
        BracketLockedError: If the bracket can no longer be edited.
        InvalidPickError: If the entrant is not a virtual occupant.
    """
    existing = repo.get_bracket(bracket_id)
    bracket = existing if existing is not None else _new_bracket(bracket_id, participant_id)
    all_picks = repo.get_picks()
    plan = plan_pick(
        bracket,
        all_picks,
        repo.get_matches(),
        repo.get_entrants(),
        match_id,
        entrant_id,
        settings=repo.get_settings(),
        is_admin=is_admin,
        now=now,
    )
    if existing is None:
        if plan.admin_override:
            bracket = bracket.model_copy(update={"is_admin_override": True})
        repo.save_brackets([*repo.get_brackets(), bracket])
        logger.info("Created bracket %s for %s", bracket.bracket_id, bracket.participant_id)
    if plan.is_noop:
        return plan

    repo.save_picks(apply_pick_plan(all_picks, plan))
    if plan.admin_override:
        if not bracket.is_admin_override:
            _replace_bracket(repo, bracket.model_copy(update={"is_admin_override": True}))
        repo.log_admin_action(
            AdminAction(
                admin_id=admin_id,
                action_type="OVERRIDE_PICK",
                payload={
                    "bracket_id": bracket.bracket_id,
                    "match_id": match_id,
                    "picked_entrant_id": entrant_id,
                    "previous_entrant_id": plan.previous_entrant_id,
                    "target_participant_id": bracket.participant_id,
                    "deleted_picks": len(plan.deletions),
                },
                created_at=now or _utcnow(),
            )
        )
    return plan


def submit(repo: Repository, bracket_id: str, now: datetime.datetime | None = None) -> Bracket:
    """Submit a bracket, making it immutable to its owner.

    Raises:
        KeyError: If the bracket does not exist.
        SubmissionError: If it is incomplete or already submitted.
    """
    bracket = repo.get_bracket(bracket_id)
    if bracket is None:
        msg = f"Unknown bracket {bracket_id!r}"
        raise KeyError(msg)
    submitted = submit_bracket(bracket, repo.get_picks(bracket_id), repo.get_matches(), now=now)
    _replace_bracket(repo, submitted)
    return submitted


def record_result(
    repo: Repository,
    match_id: str,
    winner_entrant_id: str,
    *,
    admin_id: str = DEFAULT_ADMIN_ID,
    now: datetime.datetime | None = None,
) -> Advancement:
    """Record an actual result, propagate it downstream and audit it.

    Raises:
        KeyError: If *match_id* is unknown.
        InvalidWinnerError: If the winner is not one of the match entrants.
    """
    matches = repo.get_matches()
    advancement = record_winner(matches, match_id, winner_entrant_id)
    repo.save_matches(apply_advancement(matches, advancement))

    match = next(m for m in matches if m.match_id == match_id)
    repo.log_admin_action(
        AdminAction(
            admin_id=admin_id,
            action_type="SET_MATCH_WINNER",
            payload={
                "match_id": match_id,
                "winner_entrant_id": winner_entrant_id,
                "round": match.round,
                "region": match.region,
                "match_number": match.match_number,
                "superseded_entrant_id": advancement.superseded_entrant_id,
            },
            created_at=now or _utcnow(),
        )
    )
    return advancement


def virtual_bracket(repo: Repository, bracket_id: str) -> dict[str, VirtualPair]:
    """Return every match's virtual pair for *bracket_id*."""
    resolver = VirtualResolver(
        repo.get_matches(),
        repo.get_picks(bracket_id),
        repo.get_entrants(),
        bracket_id=bracket_id,
    )
    return resolver.resolve_all()


def bracket_score(repo: Repository, bracket_id: str) -> BracketScore:
    """Score one bracket under the pool's scoring settings."""
    return score_bracket(
        bracket_id,
        repo.get_picks(bracket_id),
        repo.get_matches(),
        scoring_from_settings(repo.get_settings()),
    )


def leaderboard(repo: Repository) -> Leaderboard:
    """Score and rank every bracket in the pool."""
    return build_leaderboard(
        repo.get_brackets(),
        repo.get_picks(),
        repo.get_matches(),
        scoring_from_settings(repo.get_settings()),
    )
