"""Assign a participant's display name to an admin, member, or visitor slot."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from src.evaluator import Role
from src.evaluator.exceptions import (
    InputValidationError,
    MemberNotFoundError,
    SlotUnavailableError,
)
from src.store import MemberStore

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_NAME = "Admin"


@dataclass
class JoinResult:
    key: str
    role: Role
    name: str


class JoinService:
    """Claims roster slots for joining participants."""

    def __init__(self, store: MemberStore) -> None:
        self._store = store

    async def join(self, role: str, name: str = "", group_key: str = "") -> JoinResult:
        """Bind ``name`` to a slot for ``role``.

        * admin: always the single admin record; its name is set to
          ``"Admin"`` only while empty.
        * member: the member whose key is ``group_key``; the name is overwritten.
        * visitor: the first visitor slot without a name.

        Raises:
            InputValidationError: Missing role/name/group key, or unknown role.
            MemberNotFoundError: No admin configured, or no member with ``group_key``.
            SlotUnavailableError: Every visitor slot is taken.
            PersistenceError: The dataset could not be read or written.
        """
        role = (role or "").strip()
        name = (name or "").strip()
        group_key = (group_key or "").strip()
        if not role:
            raise InputValidationError("role required", context={"field": "role"})
        try:
            parsed_role = Role(role)
        except ValueError as exc:
            raise InputValidationError("invalid role", context={"role": role}) from exc

        if parsed_role == Role.MEMBER:
            if not group_key:
                raise InputValidationError("groupKey required", context={"field": "groupKey"})
            if not name:
                raise InputValidationError("name required", context={"field": "name"})
        elif parsed_role == Role.VISITOR and not name:
            raise InputValidationError("name required", context={"field": "name"})

        async with self._store.transaction() as roster:
            if parsed_role == Role.ADMIN:
                admins = roster.by_role(Role.ADMIN)
                if not admins:
                    raise MemberNotFoundError("admin not configured")
                slot = admins[0]
                if not slot.name.strip():
                    slot.name = DEFAULT_ADMIN_NAME
            elif parsed_role == Role.MEMBER:
                slot = roster.resolve(group_key, Role.MEMBER).member
                if slot is None:
                    raise MemberNotFoundError("group not found", context={"groupKey": group_key})
                slot.name = name
            else:
                slot = next((v for v in roster.by_role(Role.VISITOR) if not v.name.strip()), None)
                if slot is None:
                    raise SlotUnavailableError("no visitor slot left")
                slot.name = name
            result = JoinResult(key=slot.key, role=parsed_role, name=slot.name)

        logger.info("%s joined as %s (%s)", result.name, result.role.value, result.key)
        return result
