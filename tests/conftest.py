"""Shared test fixtures and configuration."""

from __future__ import annotations

from pathlib import Path

import pytest

from src.config import Settings
from src.evaluator.finalizer import ScoreFinalizer
from src.evaluator.recorder import EvaluationRecorder
from src.realtime.bus import NotificationBus
from src.realtime.presence import PresenceTracker
from src.store import MemberStore
from tests.helpers import CollectedEvents, make_member, write_roster


@pytest.fixture
def seed_members() -> list[dict]:
    """One admin, three members and two visitors with no evaluations yet."""
    return [
        make_member(1, "admin", "admin"),
        make_member(2, "m1", "member", "Team One"),
        make_member(3, "m2", "member", "Team Two"),
        make_member(4, "m3", "member", "Team Three"),
        make_member(5, "v1", "visitor"),
        make_member(6, "v2", "visitor"),
    ]


@pytest.fixture
def members_path(tmp_path: Path, seed_members: list[dict]) -> Path:
    return write_roster(tmp_path / "member.json", seed_members)


@pytest.fixture
def store(members_path: Path) -> MemberStore:
    return MemberStore(members_path)


@pytest.fixture
def collected() -> CollectedEvents:
    return CollectedEvents()


@pytest.fixture
def bus(collected: CollectedEvents) -> NotificationBus:
    bus = NotificationBus()
    bus.subscribe(collected)
    return bus


@pytest.fixture
def recorder(store: MemberStore, bus: NotificationBus) -> EvaluationRecorder:
    return EvaluationRecorder(store, bus)


@pytest.fixture
def finalizer(store: MemberStore, bus: NotificationBus) -> ScoreFinalizer:
    return ScoreFinalizer(store, bus)


@pytest.fixture
def presence(store: MemberStore, bus: NotificationBus) -> PresenceTracker:
    return PresenceTracker(store, bus)


@pytest.fixture
def settings(tmp_path: Path, members_path: Path) -> Settings:
    """Settings pointing every data file into the test's temp directory."""
    (tmp_path / "member_default.json").write_text(
        members_path.read_text(encoding="utf-8"), encoding="utf-8"
    )
    (tmp_path / "criteria.yaml").write_text(
        "ratingLevels:\n"
        "  - {score: 1, label: Poor}\n"
        "  - {score: 5, label: Excellent}\n"
        "presentation:\n"
        "  - {id: 1, name: Content}\n"
        "  - {id: 2, name: Delivery}\n",
        encoding="utf-8",
    )
    return Settings(_env_file=None, data_dir=tmp_path)
