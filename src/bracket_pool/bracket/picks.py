"""Pick validation, lock gating and submission checks.

These are the checks a collaborator runs before writing a pick:

1. :func:`ensure_pick_allowed` - is the bracket still editable by this caller?
2. :func:`validate_pick` - is the entrant a current virtual occupant?
3. :func:`~bracket_pool.bracket.cascade.invalidate` - which later picks die?

:func:`plan_pick` runs all three and returns a :class:`PickPlan` that the
caller applies in one transaction.
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from bracket_pool.bracket.cascade import invalidate
from bracket_pool.bracket.errors import BracketLockedError, InvalidPickError, SubmissionError
from bracket_pool.bracket.projection import VirtualResolver
from bracket_pool.bracket.snapshot import MatchIndex
from bracket_pool.ingest.schema import Bracket, Entrant, Match, Pick, PoolSettings

logger = logging.getLogger(__name__)


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def is_locked(lock_datetime: datetime.datetime | None, now: datetime.datetime | None = None) -> bool:
    """Return ``True`` once *now* is past the lock deadline.

    No deadline means the pool never locks.  A naive *now* is read as UTC.
    """
    if lock_datetime is None:
        return False
    current = now or _utcnow()
    if current.tzinfo is None:
        current = current.replace(tzinfo=datetime.timezone.utc)
    return current > lock_datetime


def ensure_pick_allowed(
    bracket: Bracket,
    settings: PoolSettings,
    *,
    is_admin: bool = False,
    now: datetime.datetime | None = None,
) -> None:
    """Reject pick edits on a locked or submitted bracket.

    Administrators may always edit.

    Raises:
        BracketLockedError: If the pool is past its deadline or the bracket
            was submitted, and the caller is not an administrator.
    """
    if is_admin:
        return
    if bracket.is_submitted:
        msg = f"Bracket {bracket.bracket_id} was submitted at {bracket.locked_at:%Y-%m-%d %H:%M %Z}"
        raise BracketLockedError(msg)
    if is_locked(settings.lock_datetime, now):
        msg = f"Picks locked at {settings.lock_datetime:%Y-%m-%d %H:%M %Z}"
        raise BracketLockedError(msg)


def validate_pick(resolver: VirtualResolver, match_id: str, entrant_id: str) -> Match:
    """Check that *entrant_id* is a virtual occupant of *match_id*.

    Returns:
        The target match.

    Raises:
        InvalidPickError: If the match is unknown or the entrant is not one
            of its current virtual occupants.
    """
    if match_id not in resolver.index:
        msg = f"Unknown match {match_id!r}"
        raise InvalidPickError(msg)
    match = resolver.index.by_id(match_id)
    pair = resolver.resolve(match)
    if not pair.holds(entrant_id):
        msg = f"Entrant {entrant_id!r} is not a current occupant of {match_id} (projected {pair.ids})"
        raise InvalidPickError(msg)
    return match


@dataclass(frozen=True)
class PickPlan:
    """Writes needed to set one pick.

    Attributes:
        upsert: The pick to insert or overwrite.
        previous_entrant_id: Entrant picked before, if the pick existed.
        deletions: Ids of downstream picks to delete.
        admin_override: ``True`` when an administrator edited a bracket
            that its owner could no longer change.
    """

    upsert: Pick
    previous_entrant_id: str | None
    deletions: frozenset[str]
    admin_override: bool = False

    @property
    def is_noop(self) -> bool:
        return self.previous_entrant_id == self.upsert.picked_entrant_id


def plan_pick(  # noqa: PLR0913
    bracket: Bracket,
    picks: Iterable[Pick],
    matches: Iterable[Match],
    entrants: Mapping[str, Entrant] | Iterable[Entrant],
    match_id: str,
    entrant_id: str,
    *,
    settings: PoolSettings | None = None,
    is_admin: bool = False,
    now: datetime.datetime | None = None,
) -> PickPlan:
    """Validate a pick and compute the writes that apply it.

    Raises:
        BracketLockedError: See :func:`ensure_pick_allowed`.
        InvalidPickError: See :func:`validate_pick`.
    """
    settings = settings or PoolSettings()
    ensure_pick_allowed(bracket, settings, is_admin=is_admin, now=now)
    override = is_admin and (bracket.is_submitted or is_locked(settings.lock_datetime, now))

    own_picks = [p for p in picks if p.bracket_id == bracket.bracket_id]
    index = MatchIndex(matches)
    resolver = VirtualResolver(index, own_picks, entrants, bracket_id=bracket.bracket_id)
    match = validate_pick(resolver, match_id, entrant_id)

    previous = next((p.picked_entrant_id for p in own_picks if p.match_id == match_id), None)
    deletions: frozenset[str] = frozenset()
    if previous is not None and previous != entrant_id:
        deletions = invalidate(own_picks, index, match, previous, entrant_id)

    if override:
        logger.info(
            "Administrator override on bracket %s: %s -> %s",
            bracket.bracket_id,
            match_id,
            entrant_id,
        )
    return PickPlan(
        upsert=Pick(bracket_id=bracket.bracket_id, match_id=match_id, picked_entrant_id=entrant_id),
        previous_entrant_id=previous,
        deletions=deletions,
        admin_override=override,
    )


def apply_pick_plan(picks: Iterable[Pick], plan: PickPlan) -> list[Pick]:
    """Return *picks* with the plan's upsert and deletions applied."""
    result: list[Pick] = []
    replaced = False
    for pick in picks:
        if pick.pick_id in plan.deletions:
            continue
        if pick.pick_id == plan.upsert.pick_id:
            result.append(plan.upsert)
            replaced = True
        else:
            result.append(pick)
    if not replaced:
        result.append(plan.upsert)
    return result


def validate_submission(bracket: Bracket, picks: Iterable[Pick], matches: Iterable[Match]) -> None:
    """Check that *bracket* can be submitted.

    Raises:
        SubmissionError: If already submitted, or if it does not hold a
            pick for every match.
    """
    if bracket.is_submitted:
        msg = f"Bracket {bracket.bracket_id} was already submitted"
        raise SubmissionError(msg)
    match_ids = {m.match_id for m in matches}
    picked = {p.match_id for p in picks if p.bracket_id == bracket.bracket_id and p.match_id in match_ids}
    if len(picked) < len(match_ids):
        msg = f"Incomplete bracket: {len(picked)}/{len(match_ids)} picks made"
        raise SubmissionError(msg)


def submit_bracket(
    bracket: Bracket,
    picks: Iterable[Pick],
    matches: Iterable[Match],
    now: datetime.datetime | None = None,
) -> Bracket:
    """Validate and return *bracket* stamped with its submission time.

    Raises:
        SubmissionError: See :func:`validate_submission`.
    """
    validate_submission(bracket, picks, matches)
    submitted = bracket.model_copy(update={"locked_at": now or _utcnow()})
    logger.info("Bracket %s submitted", bracket.bracket_id)
    return submitted
