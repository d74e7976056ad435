"""Record one evaluator's criterion scores against one target member."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from src.config import EntryTotalPolicy
from src.evaluator import (
    CriterionScore,
    DetailEntry,
    Role,
    is_finite_number,
    storage_key_for,
)
from src.evaluator.exceptions import (
    EvaluatorNotFoundError,
    InputValidationError,
    TargetNotFoundError,
)
from src.realtime.bus import EvaluationSubmitted, NotificationBus
from src.store import MemberStore

logger = logging.getLogger(__name__)


@dataclass
class RecordResult:
    """Outcome of a successful recording.

    Attributes:
        evaluator_key: Key of the member who evaluated.
        target_key: Key of the member who was evaluated.
        storage_key: Key the entry is filed under (``"room"`` for the admin).
        entry: Snapshot of the detail entry as persisted.
    """

    evaluator_key: str
    target_key: str
    storage_key: str
    entry: DetailEntry


def submitted_total(scores: Iterable[CriterionScore]) -> int | float:
    """Entry total from the current submission only.

    A resubmission that omits previously recorded criteria leaves those
    records in the entry but excludes them from the total.
    """
    return sum(s.score for s in scores)


def parse_scores(scores: Any) -> list[CriterionScore]:
    """Validate a raw ``[{id, score}, ...]`` list into criterion scores.

    Raises:
        InputValidationError: ``scores`` is not a non-empty list of objects each
            carrying an ``id`` and a finite numeric ``score``.
    """
    if not isinstance(scores, list) or not scores:
        raise InputValidationError("scores must be a non-empty list")

    parsed: list[CriterionScore] = []
    for index, item in enumerate(scores):
        if isinstance(item, CriterionScore):
            parsed.append(item)
            continue
        if not isinstance(item, Mapping) or item.get("id") in (None, ""):
            raise InputValidationError(
                "each score needs an id", context={"index": index}
            )
        if not is_finite_number(item.get("score")):
            raise InputValidationError(
                "each score needs a finite numeric score", context={"index": index, "id": item.get("id")}
            )
        try:
            parsed.append(CriterionScore(id=item["id"], score=item["score"]))
        except ValidationError as exc:
            raise InputValidationError(
                "malformed criterion id", context={"index": index}
            ) from exc
    return parsed


def _required(value: Any, field: str) -> str:
    text = value.strip() if isinstance(value, str) else ""
    if not text:
        raise InputValidationError(f"{field} is required", context={"field": field})
    return text


class EvaluationRecorder:
    """Applies submitted criterion scores to a target member's detail entry.

    Attributes:
        total_policy: How the entry total is derived after the upsert.
    """

    def __init__(
        self,
        store: MemberStore,
        bus: NotificationBus,
        total_policy: EntryTotalPolicy = EntryTotalPolicy.SUBMITTED,
    ) -> None:
        self._store = store
        self._bus = bus
        self.total_policy = total_policy

    async def record(
        self,
        evaluator_key: str,
        evaluator_role: Role | str,
        target_key: str,
        scores: list[Any],
    ) -> RecordResult:
        """Upsert the evaluator's scores into the target's detail entry and persist.

        Args:
            evaluator_key: Key of the evaluating member.
            evaluator_role: Role the evaluator claims; must match the stored role.
            target_key: Key of the member being evaluated.
            scores: ``[{id, score}, ...]``; any finite number is accepted as a score.

        Returns:
            A ``RecordResult`` describing the persisted entry.

        Raises:
            InputValidationError: A required field is missing or malformed,
                or the resulting entry total is not finite.
            TargetNotFoundError: No member holds ``target_key``.
            EvaluatorNotFoundError: No member holds ``evaluator_key`` with that role.
            PersistenceError: The dataset could not be read or written.
        """
        evaluator_key = _required(evaluator_key, "evaluatorKey")
        role_value = _required(
            evaluator_role.value if isinstance(evaluator_role, Role) else evaluator_role,
            "evaluatorRole",
        )
        target_key = _required(target_key, "targetKey")
        parsed = parse_scores(scores)
        try:
            role = Role(role_value)
        except ValueError as exc:
            raise InputValidationError(
                f"invalid evaluatorRole: {role_value}", context={"field": "evaluatorRole"}
            ) from exc

        storage_key = storage_key_for(evaluator_key, role)

        async with self._store.transaction() as roster:
            target = roster.find(target_key)
            if target is None:
                raise TargetNotFoundError(
                    "Target member not found", context={"targetKey": target_key}
                )
            if not roster.resolve(evaluator_key, role).found:
                raise EvaluatorNotFoundError(
                    "Evaluator not found",
                    context={"evaluatorKey": evaluator_key, "evaluatorRole": role.value},
                )

            entry = target.detail_score.setdefault(storage_key, DetailEntry())
            entry.upsert(parsed)
            if self.total_policy == EntryTotalPolicy.STORED:
                entry.score = entry.stored_total
            else:
                entry.score = submitted_total(parsed)
            if not is_finite_number(entry.score):
                raise InputValidationError(
                    "entry total is out of range",
                    context={"targetKey": target_key, "storageKey": storage_key},
                )
            snapshot = entry.model_copy(deep=True)

        logger.info(
            "Recorded %d criteria from %s on %s (entry %s = %s)",
            len(parsed), evaluator_key, target_key, storage_key, snapshot.score,
        )
        await self._bus.publish(
            EvaluationSubmitted(evaluator_key=evaluator_key, target_key=target_key)
        )
        return RecordResult(
            evaluator_key=evaluator_key,
            target_key=target_key,
            storage_key=storage_key,
            entry=snapshot,
        )
