"""Helpers shared by the test modules."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from src.realtime.bus import SessionEvent


class CollectedEvents:
    """Bus subscriber that keeps every event it receives."""

    def __init__(self) -> None:
        self.events: list[SessionEvent] = []

    async def __call__(self, event: SessionEvent) -> None:
        self.events.append(event)

    @property
    def names(self) -> list[str]:
        return [e.name for e in self.events]

    @property
    def messages(self) -> list[dict[str, Any]]:
        return [e.to_message() for e in self.events]


def make_member(id_: int, key: str, role: str, name: str = "", detail_score: dict | None = None) -> dict:
    return {
        "id": id_,
        "key": key,
        "name": name,
        "role": role,
        "score": 0,
        "detail_score": detail_score or {},
    }


def entry(score: float, criteria: list[tuple[int, float]] | None = None) -> dict:
    """Raw detail entry; criteria default to a single record carrying the score."""
    pairs = criteria if criteria is not None else [(1, score)]
    return {"score": score, "criteria": [{"id": i, "score": s} for i, s in pairs]}


def write_roster(path: Path, members: list[dict]) -> Path:
    path.write_text(json.dumps({"members": members}, indent=4), encoding="utf-8")
    return path


def read_roster(path: Path) -> dict:
    return json.loads(path.read_text(encoding="utf-8"))


def member_record(path: Path, key: str) -> dict:
    return next(m for m in read_roster(path)["members"] if m["key"] == key)
