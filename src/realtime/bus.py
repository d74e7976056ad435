"""Typed publish/subscribe bus for session state-change events.

Every subscriber receives every event; there is no topic filtering. The
WebSocket connection manager is the production subscriber and forwards each
event to all connected clients as ``{"event": <name>, "data": <payload>}``.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


class SessionEvent(BaseModel):
    """Base class for broadcast events. ``name`` is the wire event name."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: ClassVar[str] = ""

    def payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)

    def to_message(self) -> dict[str, Any]:
        return {"event": self.name, "data": self.payload()}


class EvaluationSubmitted(SessionEvent):
    name: ClassVar[str] = "evaluation_submitted"

    evaluator_key: str = Field(alias="evaluatorKey")
    target_key: str = Field(alias="targetKey")


class EvaluationFinalized(SessionEvent):
    name: ClassVar[str] = "evaluation_finalized"


class MemberStatusChanged(SessionEvent):
    name: ClassVar[str] = "member_status_change"

    key: str
    is_online: bool = Field(alias="isOnline")


class EvaluationModeStarted(SessionEvent):
    name: ClassVar[str] = "evaluation_mode_started"


Subscriber = Callable[[SessionEvent], Awaitable[None]]


class NotificationBus:
    """Fans every published event out to every subscriber, in subscription order."""

    def __init__(self) -> None:
        self._subscribers: list[Subscriber] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, handler: Subscriber) -> Callable[[], None]:
        """Register ``handler``; returns a callable that removes it again."""
        self._subscribers.append(handler)

        def unsubscribe() -> None:
            if handler in self._subscribers:
                self._subscribers.remove(handler)

        return unsubscribe

    async def publish(self, event: SessionEvent) -> None:
        """Deliver ``event`` to all subscribers.

        The state change behind an event is already persisted when it is
        published, so a failing subscriber is logged and the rest still run.
        """
        logger.debug("Publishing %s %s", event.name, event.payload())
        for handler in list(self._subscribers):
            try:
                await handler(event)
            except Exception:
                logger.exception("Subscriber %r failed on %s", handler, event.name)
