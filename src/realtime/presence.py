"""Live presence registry: which member key each open connection belongs to."""

from __future__ import annotations

import logging

from src.evaluator import Role
from src.realtime.bus import EvaluationModeStarted, MemberStatusChanged, NotificationBus
from src.store import MemberStore

logger = logging.getLogger(__name__)


class PresenceTracker:
    """Maps connection ids to member keys and broadcasts online/offline changes.

    The mapping lives in memory only and starts empty on every process start.
    Keys are labels: they are not checked against the roster on registration.
    """

    def __init__(self, store: MemberStore, bus: NotificationBus) -> None:
        self._store = store
        self._bus = bus
        self._connections: dict[str, str] = {}

    async def register(self, connection_id: str, key: str) -> bool:
        """Bind ``connection_id`` to ``key`` and announce the key as online.

        Returns:
            False when ``key`` is blank and nothing was registered.
        """
        key = (key or "").strip()
        if not key:
            return False
        self._connections[connection_id] = key
        logger.info("Connection %s registered as %s", connection_id, key)
        await self._bus.publish(MemberStatusChanged(key=key, is_online=True))
        return True

    async def unregister(self, connection_id: str) -> str | None:
        """Drop ``connection_id`` and announce its key as offline.

        Returns:
            The key that went offline, or None for a never-registered connection.
        """
        key = self._connections.pop(connection_id, None)
        if key is None:
            logger.debug("Unregistered connection %s closed", connection_id)
            return None
        logger.info("Connection %s (%s) closed", connection_id, key)
        await self._bus.publish(MemberStatusChanged(key=key, is_online=False))
        return key

    def key_for(self, connection_id: str) -> str | None:
        return self._connections.get(connection_id)

    def online_keys(self) -> set[str]:
        return set(self._connections.values())

    async def start_evaluation(self, connection_id: str) -> bool:
        """Broadcast ``evaluation_mode_started`` if the connection belongs to the admin.

        Connections that are unregistered, or registered under a non-admin or
        unknown key, are ignored without an error.

        Returns:
            True when the broadcast was sent.
        """
        key = self._connections.get(connection_id)
        if key is None:
            return False
        lookup = await self._store.resolve_member(key, Role.ADMIN)
        if not lookup.found:
            logger.info("Ignoring start_evaluation from non-admin key %s", key)
            return False
        logger.info("Evaluation mode started by %s", key)
        await self._bus.publish(EvaluationModeStarted())
        return True
