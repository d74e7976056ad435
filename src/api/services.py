"""Wiring of the session components shared by HTTP and WebSocket handlers."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Request

from src.config import Settings
from src.config.criteria import CriteriaCatalogue, load_criteria_catalogue
from src.evaluator.finalizer import ScoreFinalizer
from src.evaluator.join import JoinService
from src.evaluator.recorder import EvaluationRecorder
from src.realtime.bus import NotificationBus
from src.realtime.connections import ConnectionManager
from src.realtime.presence import PresenceTracker
from src.store import MemberStore


@dataclass
class SessionServices:
    """Every long-lived component of one running session server."""

    settings: Settings
    store: MemberStore
    bus: NotificationBus
    presence: PresenceTracker
    recorder: EvaluationRecorder
    finalizer: ScoreFinalizer
    joins: JoinService
    connections: ConnectionManager
    criteria: CriteriaCatalogue


def build_services(settings: Settings) -> SessionServices:
    """Create the store, bus and services, and subscribe the WebSocket fan-out."""
    store = MemberStore(settings.members_path)
    bus = NotificationBus()
    connections = ConnectionManager()
    bus.subscribe(connections.on_event)
    return SessionServices(
        settings=settings,
        store=store,
        bus=bus,
        presence=PresenceTracker(store, bus),
        recorder=EvaluationRecorder(store, bus, total_policy=settings.entry_total_policy),
        finalizer=ScoreFinalizer(store, bus),
        joins=JoinService(store),
        connections=connections,
        criteria=load_criteria_catalogue(settings.criteria_path),
    )


def get_services(request: Request) -> SessionServices:
    """FastAPI dependency returning the services attached to the app."""
    return request.app.state.services
