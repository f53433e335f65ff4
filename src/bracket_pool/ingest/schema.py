"""Pydantic v2 schema models for the prediction pool.

Defines Entrant, Match, Bracket, Pick, AdminAction and PoolSettings.  All
models are frozen: the core only ever reads snapshots, and every state
change is expressed as a new model produced with ``model_copy(update=...)``
by the caller that applies a plan.

Entities refer to one another by identifier only (``left_entrant_id``,
``bracket_id`` …); lookups go through an index built by the caller.
"""

from __future__ import annotations

import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from bracket_pool.bracket.topology import REGIONAL_ROUNDS, Region, Round, Side, match_key


class Entrant(BaseModel):
    """One of the 64 competitors in the field."""

    model_config = ConfigDict(frozen=True)

    entrant_id: str = Field(..., min_length=1)
    display_name: str = Field(..., min_length=1)
    region: Region
    seed: int = Field(..., ge=1, le=16)
    metadata: dict[str, str] = Field(default_factory=dict)


class Match(BaseModel):
    """A single game in the bracket, with its actual occupants and result."""

    model_config = ConfigDict(frozen=True)

    match_id: str = Field(..., min_length=1)
    round: Round
    region: Region | None = None
    match_number: int = Field(..., ge=1)
    left_entrant_id: str | None = None
    right_entrant_id: str | None = None
    winner_entrant_id: str | None = None

    @model_validator(mode="after")
    def _check_match_integrity(self) -> Match:
        # Raises TopologyError (a ValueError) for coordinates outside the bracket.
        match_key(self.round, self.region, self.match_number)
        if self.winner_entrant_id is not None and self.winner_entrant_id not in self.entrant_ids:
            msg = f"winner {self.winner_entrant_id!r} is not one of the match entrants {self.entrant_ids}"
            raise ValueError(msg)
        return self

    @property
    def entrant_ids(self) -> tuple[str | None, str | None]:
        """Return ``(left_entrant_id, right_entrant_id)``."""
        return (self.left_entrant_id, self.right_entrant_id)

    @property
    def is_regional(self) -> bool:
        return self.round in REGIONAL_ROUNDS

    @property
    def is_decided(self) -> bool:
        return self.winner_entrant_id is not None

    def slot(self, side: Side) -> str | None:
        """Return the entrant id stored in *side*."""
        return self.left_entrant_id if side == "left" else self.right_entrant_id


class Bracket(BaseModel):
    """A participant's bracket.  Immutable to the owner once ``locked_at`` is set."""

    model_config = ConfigDict(frozen=True)

    bracket_id: str = Field(..., min_length=1)
    participant_id: str = Field(..., min_length=1)
    locked_at: datetime.datetime | None = None
    is_admin_override: bool = False

    @property
    def is_submitted(self) -> bool:
        return self.locked_at is not None


class Pick(BaseModel):
    """A bracket's predicted winner for one match."""

    model_config = ConfigDict(frozen=True)

    bracket_id: str = Field(..., min_length=1)
    match_id: str = Field(..., min_length=1)
    picked_entrant_id: str = Field(..., min_length=1)

    @property
    def pick_id(self) -> str:
        """Identity of the pick; one pick exists per (bracket, match)."""
        return f"{self.bracket_id}:{self.match_id}"


AdminActionType = Literal["OVERRIDE_PICK", "SET_MATCH_WINNER"]


class AdminAction(BaseModel):
    """One audited administrator action.

    ``payload`` carries the action's details (bracket, match, entrants) as
    plain JSON-compatible values.
    """

    model_config = ConfigDict(frozen=True)

    admin_id: str = Field(..., min_length=1)
    action_type: AdminActionType
    payload: dict[str, str | int | bool | None] = Field(default_factory=dict)
    created_at: datetime.datetime

    @field_validator("created_at")
    @classmethod
    def _require_timezone(cls, value: datetime.datetime) -> datetime.datetime:
        if value.tzinfo is None:
            msg = "created_at must be timezone-aware"
            raise ValueError(msg)
        return value


class PoolSettings(BaseModel):
    """Pool-wide configuration, passed explicitly to the calls that need it.

    Attributes:
        lock_datetime: Deadline after which ordinary participants can no
            longer change picks.  ``None`` means never locked.
        scoring: Per-round points table.  ``None`` selects the standard
            1-2-4-8-16-32 table.
        region_names: Optional display names per region code.
    """

    model_config = ConfigDict(frozen=True)

    lock_datetime: datetime.datetime | None = None
    scoring: dict[Round, int] | None = None
    region_names: dict[Region, str] = Field(default_factory=dict)

    @field_validator("lock_datetime")
    @classmethod
    def _require_timezone(cls, value: datetime.datetime | None) -> datetime.datetime | None:
        if value is not None and value.tzinfo is None:
            msg = "lock_datetime must be timezone-aware"
            raise ValueError(msg)
        return value

    @field_validator("scoring")
    @classmethod
    def _check_scoring(cls, value: dict[Round, int] | None) -> dict[Round, int] | None:
        if value is None:
            return value
        negative = {rnd: pts for rnd, pts in value.items() if pts < 0}
        if negative:
            msg = f"scoring weights must be non-negative, got {negative}"
            raise ValueError(msg)
        return value

    def region_name(self, region: Region) -> str:
        """Return the display name for *region*, defaulting to its code."""
        return self.region_names.get(region, region)
