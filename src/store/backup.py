"""Backup the live dataset and restore it from the default seed."""

from __future__ import annotations

import logging
import os
from datetime import date
from pathlib import Path

import aiofiles
import aiofiles.os

from src.evaluator.exceptions import PersistenceError
from src.store import MemberStore

logger = logging.getLogger(__name__)


async def next_backup_path(directory: Path, stem: str, today: date) -> Path:
    """First free ``<stem>_YYYY_MM_DD_bk[N].json`` name in ``directory``."""
    base = f"{stem}_{today:%Y_%m_%d}_bk"
    candidate = directory / f"{base}.json"
    counter = 1
    while await aiofiles.os.path.exists(candidate):
        candidate = directory / f"{base}{counter}.json"
        counter += 1
    return candidate


async def reset_dataset(
    store: MemberStore,
    default_path: Path,
    *,
    today: date | None = None,
) -> str | None:
    """Back up the live dataset and replace it with the default dataset.

    Runs under the store lock so no recording or finalize can interleave. The
    seed is staged next to the live file and moved over it last, so a failure
    at any step leaves the live dataset in place.

    Args:
        store: The store whose file is being reset.
        default_path: Seed dataset copied over the live one.
        today: Date used in the backup name; defaults to the current date.

    Returns:
        The backup file name, or None when there was no live dataset to back up.

    Raises:
        PersistenceError: The seed is missing or a file operation failed.
    """
    if not await aiofiles.os.path.exists(default_path):
        raise PersistenceError(
            f"{default_path.name} not found", context={"path": str(default_path)}
        )

    async with store.lock:
        backup_name: str | None = None
        tmp_path = store.tmp_path
        try:
            async with aiofiles.open(default_path, "rb") as src:
                seed = await src.read()
            async with aiofiles.open(tmp_path, "wb") as dst:
                await dst.write(seed)

            if await aiofiles.os.path.exists(store.path):
                backup_path = await next_backup_path(
                    store.path.parent, store.path.stem, today or date.today()
                )
                async with aiofiles.open(store.path, "rb") as live:
                    current = await live.read()
                async with aiofiles.open(backup_path, "wb") as backup:
                    await backup.write(current)
                backup_name = backup_path.name

            os.replace(tmp_path, store.path)
        except OSError as exc:
            if await aiofiles.os.path.isfile(tmp_path):
                await aiofiles.os.remove(tmp_path)
            raise PersistenceError(f"Reset failed: {exc}", context={"path": str(store.path)}) from exc

    logger.info("Dataset reset from %s (backup: %s)", default_path.name, backup_name)
    return backup_name
