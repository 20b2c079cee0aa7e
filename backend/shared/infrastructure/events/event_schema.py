"""
Event envelope published on the live-update channels.

    {"type": "ORDER_ASSIGNED", "session_id": 3,
     "entity": {"order_id": 41, "status": "PENDING", "assigned_worker_id": 7},
     "actor": {"user_id": 7, "role": "WORKER"},
     "ts": "2024-05-04T18:21:07.120Z", "v": 1}

Clients refetch the order or session on receipt; the entity only carries
enough to decide whether a refetch is needed.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any

from .event_types import ORDER_EVENTS, SESSION_EVENTS

SCHEMA_VERSION = 1
KNOWN_EVENTS = ORDER_EVENTS | SESSION_EVENTS


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class Event:
    type: str
    session_id: int | None = None
    entity: dict[str, Any] = field(default_factory=dict)
    actor: dict[str, Any] = field(default_factory=dict)
    ts: str = field(default_factory=_utc_now_iso)
    v: int = SCHEMA_VERSION

    def __post_init__(self) -> None:
        if self.type not in KNOWN_EVENTS:
            raise ValueError(f"Unknown event type: {self.type!r}")
        if self.session_id is not None and (
            isinstance(self.session_id, bool)
            or not isinstance(self.session_id, int)
            or self.session_id <= 0
        ):
            raise ValueError("session_id must be a positive integer or None")
        if not isinstance(self.entity, dict) or not isinstance(self.actor, dict):
            raise ValueError("entity and actor must be dicts")

    @classmethod
    def for_order(
        cls,
        event_type: str,
        order_id: int,
        session_id: int,
        status: str,
        assigned_worker_id: int | None,
        actor_user_id: int | None,
        actor_role: str,
    ) -> "Event":
        if event_type not in ORDER_EVENTS:
            raise ValueError(f"Not an order event: {event_type!r}")
        return cls(
            type=event_type,
            session_id=session_id,
            entity={
                "order_id": order_id,
                "status": status,
                "assigned_worker_id": assigned_worker_id,
            },
            actor={"user_id": actor_user_id, "role": actor_role},
        )

    @classmethod
    def for_session(
        cls,
        event_type: str,
        session_id: int,
        name: str,
        is_active: bool,
        actor_user_id: int | None,
        actor_role: str,
    ) -> "Event":
        if event_type not in SESSION_EVENTS:
            raise ValueError(f"Not a session event: {event_type!r}")
        return cls(
            type=event_type,
            session_id=session_id,
            entity={"session_id": session_id, "name": name, "is_active": is_active},
            actor={"user_id": actor_user_id, "role": actor_role},
        )

    def to_json(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False, default=str)

    @classmethod
    def from_json(cls, raw: str) -> "Event":
        return cls(**json.loads(raw))
