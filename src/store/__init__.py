"""JSON-file member store with serialized read-modify-write transactions."""

from __future__ import annotations

import asyncio
import json
import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiofiles
import aiofiles.os
from pydantic import ValidationError

from src.evaluator import MemberLookup, Role, Roster
from src.evaluator.exceptions import PersistenceError

logger = logging.getLogger(__name__)


class MemberStore:
    """Owns the persisted roster; the only component that reads or writes it.

    Every mutation runs inside :meth:`transaction`, which holds a single
    dataset-wide ``asyncio.Lock`` across the read, the in-memory change and the
    write, so two concurrent submissions can no longer overwrite each other.
    Writes go to a sibling temp file that is then moved over the dataset, so
    readers never observe a half-written file.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._lock = asyncio.Lock()

    @property
    def lock(self) -> asyncio.Lock:
        return self._lock

    @property
    def tmp_path(self) -> Path:
        """Sibling file a new dataset is written to before replacing the live one."""
        return self.path.with_name(f".{self.path.name}.tmp")

    async def load(self) -> Roster:
        """Read and parse the whole dataset.

        Raises:
            PersistenceError: The file is missing, unreadable, or not a valid roster.
        """
        try:
            async with aiofiles.open(self.path, encoding="utf-8") as f:
                raw = await f.read()
        except OSError as exc:
            raise PersistenceError(
                f"Failed to read members: {exc}", context={"path": str(self.path)}
            ) from exc

        try:
            return Roster.model_validate_json(raw)
        except ValidationError as exc:
            raise PersistenceError(
                f"Members file is malformed: {exc.error_count()} error(s)",
                context={"path": str(self.path)},
            ) from exc

    async def save(self, roster: Roster) -> None:
        """Write the whole dataset atomically.

        Raises:
            PersistenceError: The dataset could not be written; the previous
                file is left untouched.
        """
        payload = json.dumps(roster.model_dump(mode="json"), indent=4, ensure_ascii=False)
        tmp_path = self.tmp_path
        try:
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(payload)
            os.replace(tmp_path, self.path)
        except OSError as exc:
            if await aiofiles.os.path.isfile(tmp_path):
                await aiofiles.os.remove(tmp_path)
            raise PersistenceError(
                f"Failed to write members: {exc}", context={"path": str(self.path)}
            ) from exc
        logger.debug("Saved %d member(s) to %s", len(roster.members), self.path)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[Roster]:
        """Yield a freshly loaded roster and persist it when the block exits.

        The write is skipped when the block raises, so a failed operation
        never lands partially.

        Yields:
            The roster to mutate in place.
        """
        async with self._lock:
            roster = await self.load()
            yield roster
            await self.save(roster)

    async def resolve_member(self, key: str, role: Role) -> MemberLookup:
        """Resolve ``key`` against the current dataset, pinned to ``role``."""
        roster = await self.load()
        return roster.resolve(key, role)
