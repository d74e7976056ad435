"""Recompute every scored member's final score from the accumulated evaluations.

A member's final score is the sum of three independent contributions:

* **room** – the admin's entry total, or 0 without one.
* **peers** – mean entry total over the other members who evaluated this
  member. A peer total of 0 counts; a missing entry does not.
* **visitors** – mean entry total over visitors whose total is strictly
  positive. Zero and missing entries are left out of the mean entirely.

The sum is rounded half-up to two decimals.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Context, Decimal

from src.evaluator import ROOM_KEY, Member, Role, Roster, is_finite_number
from src.realtime.bus import EvaluationFinalized, NotificationBus
from src.store import MemberStore

logger = logging.getLogger(__name__)

_HUNDREDTHS = Decimal("0.01")
# Wide enough for every finite float at two decimals
_ROUNDING_CONTEXT = Context(prec=330)


@dataclass(frozen=True)
class ScoreBreakdown:
    """The three contributions behind one member's final score."""

    room: float
    peer_average: float
    visitor_average: float

    @property
    def raw_total(self) -> float:
        return self.room + self.peer_average + self.visitor_average

    @property
    def total(self) -> float:
        return round_half_up(self.raw_total)


def round_half_up(value: float) -> float:
    """Round to two decimals, halves going up at the hundredths digit."""
    quantized = Decimal(str(value)).quantize(
        _HUNDREDTHS, rounding=ROUND_HALF_UP, context=_ROUNDING_CONTEXT
    )
    return float(quantized)


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _entry_score(member: Member, storage_key: str) -> float | None:
    score = member.entry_score(storage_key)
    if not is_finite_number(score):
        return None
    return float(score)


def compute_breakdown(member: Member, members: list[Member], visitors: list[Member]) -> ScoreBreakdown:
    """Compute the contributions for ``member`` given the session roster.

    Args:
        member: The member being scored.
        members: Every role-member in the session (``member`` included).
        visitors: Every visitor in the session.
    """
    room = _entry_score(member, ROOM_KEY) or 0.0

    peer_scores: list[float] = []
    for other in members:
        if other.key == member.key:
            continue
        score = _entry_score(member, other.key)
        if score is not None:
            peer_scores.append(score)

    visitor_scores: list[float] = []
    for visitor in visitors:
        score = _entry_score(member, visitor.key)
        if score is not None and score > 0:
            visitor_scores.append(score)

    return ScoreBreakdown(
        room=room,
        peer_average=_mean(peer_scores),
        visitor_average=_mean(visitor_scores),
    )


def apply_final_scores(roster: Roster) -> dict[str, float]:
    """Overwrite ``score`` on every role-member of ``roster``.

    A member whose total is not finite keeps its previous score.

    Returns:
        Mapping of member key to its new final score.
    """
    members = roster.by_role(Role.MEMBER)
    visitors = roster.by_role(Role.VISITOR)
    results: dict[str, float] = {}
    for member in members:
        breakdown = compute_breakdown(member, members, visitors)
        if not math.isfinite(breakdown.raw_total):
            logger.error(
                "Final score for %s overflowed (%s); keeping previous score %s",
                member.key, breakdown, member.score,
            )
            results[member.key] = member.score
            continue
        member.score = breakdown.total
        results[member.key] = member.score
        logger.debug("Final score for %s: %s (%s)", member.key, member.score, breakdown)
    return results


class ScoreFinalizer:
    """Batch recomputation of final scores, persisted in one write."""

    def __init__(self, store: MemberStore, bus: NotificationBus) -> None:
        self._store = store
        self._bus = bus

    async def finalize(self) -> dict[str, float]:
        """Recompute, persist, then broadcast ``evaluation_finalized``.

        Returns:
            Mapping of member key to final score.

        Raises:
            PersistenceError: The dataset could not be read or written.
        """
        async with self._store.transaction() as roster:
            results = apply_final_scores(roster)

        logger.info("Finalized scores for %d member(s)", len(results))
        await self._bus.publish(EvaluationFinalized())
        return results
