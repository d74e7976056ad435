"""Pydantic models for the member roster, detail entries, and evaluation inputs."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

# Storage key under which the admin's evaluation of a member is filed.
ROOM_KEY = "room"


class Role(str, Enum):
    ADMIN = "admin"
    MEMBER = "member"
    VISITOR = "visitor"


def is_number(value: Any) -> bool:
    """Return True for int/float values, excluding bools."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_finite_number(value: Any) -> bool:
    """Return True for numbers that convert to a finite float."""
    if not is_number(value):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


def storage_key_for(evaluator_key: str, evaluator_role: Role) -> str:
    """Key an evaluator's scores are filed under inside a target's detail_score."""
    return ROOM_KEY if evaluator_role == Role.ADMIN else evaluator_key


class CriterionScore(BaseModel):
    """A single criterion score inside a detail entry."""

    id: int | str
    score: int | float

    @field_validator("score", mode="before")
    @classmethod
    def _finite_number(cls, value: Any) -> Any:
        if not is_finite_number(value):
            raise ValueError("score must be a finite number")
        return value


class DetailEntry(BaseModel):
    """One evaluator's scores for one member: a total plus per-criterion records."""

    model_config = ConfigDict(extra="allow")

    score: int | float | None = 0
    criteria: list[CriterionScore] = Field(default_factory=list)

    @field_validator("score", mode="before")
    @classmethod
    def _non_numeric_as_absent(cls, value: Any) -> Any:
        if value is None or is_finite_number(value):
            return value
        logger.warning("Ignoring non-numeric or non-finite detail entry score: %r", value)
        return None

    @field_validator("criteria", mode="before")
    @classmethod
    def _drop_malformed_criteria(cls, value: Any) -> Any:
        if value is None:
            return []
        if not isinstance(value, list):
            logger.warning("Ignoring malformed criteria list: %r", value)
            return []
        kept = [
            item for item in value
            if isinstance(item, CriterionScore)
            or (isinstance(item, dict) and "id" in item and is_finite_number(item.get("score")))
        ]
        if len(kept) != len(value):
            logger.warning("Dropped %d malformed criterion record(s)", len(value) - len(kept))
        return kept

    @property
    def numeric_score(self) -> float | None:
        """The entry total, or None when it is absent or malformed."""
        return self.score if is_number(self.score) else None

    @property
    def stored_total(self) -> int | float:
        """Sum of every criterion score currently stored in the entry."""
        return sum(c.score for c in self.criteria)

    def upsert(self, scores: list[CriterionScore]) -> None:
        """Overwrite known criterion ids in place and append unseen ones in order."""
        index = {c.id: c for c in self.criteria}
        for incoming in scores:
            existing = index.get(incoming.id)
            if existing is not None:
                existing.score = incoming.score
            else:
                record = CriterionScore(id=incoming.id, score=incoming.score)
                self.criteria.append(record)
                index[record.id] = record


class Member(BaseModel):
    """A roster record: the admin, a scored member, or a visitor slot."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: int | str
    key: str
    name: str = ""
    role: Role = Field(validation_alias=AliasChoices("role", "rule"))
    score: float = 0
    detail_score: dict[str, DetailEntry] = Field(default_factory=dict)

    @field_validator("name", mode="before")
    @classmethod
    def _none_name_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("score", mode="before")
    @classmethod
    def _missing_score_as_zero(cls, value: Any) -> Any:
        return value if is_finite_number(value) else 0

    @field_validator("detail_score", mode="before")
    @classmethod
    def _drop_malformed_entries(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return {}
        kept = {k: v for k, v in value.items() if isinstance(v, (dict, DetailEntry))}
        for dropped in value.keys() - kept.keys():
            logger.warning("Dropping malformed detail entry %r", dropped)
        return kept

    def entry_score(self, storage_key: str) -> float | None:
        """Numeric total of the entry filed under ``storage_key``, if any."""
        entry = self.detail_score.get(storage_key)
        return entry.numeric_score if entry is not None else None


@dataclass(frozen=True)
class MemberLookup:
    """Typed outcome of resolving a member by key and role."""

    key: str
    role: Role
    member: Member | None = None

    @property
    def found(self) -> bool:
        return self.member is not None


class Roster(BaseModel):
    """The whole persisted dataset: every member of the session."""

    model_config = ConfigDict(extra="allow")

    members: list[Member] = Field(default_factory=list)

    def by_role(self, role: Role) -> list[Member]:
        return [m for m in self.members if m.role == role]

    def find(self, key: str) -> Member | None:
        return next((m for m in self.members if m.key == key), None)

    def resolve(self, key: str, role: Role) -> MemberLookup:
        """Find the member holding ``key`` with exactly ``role``."""
        member = next((m for m in self.members if m.key == key and m.role == role), None)
        return MemberLookup(key=key, role=role, member=member)
