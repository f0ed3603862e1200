from __future__ import annotations

import uuid
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from leadhub.context import get_correlation_id
from leadhub.core.config import get_settings


@dataclass(frozen=True, slots=True)
class AuditEntry:
    actor_user_id: str
    entity_type: str
    entity_id: str
    action: str
    before: dict[str, Any] | None
    after: dict[str, Any] | None
    changed_fields: tuple[str, ...]
    correlation_id: str | None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


# Newest entries only; the oldest fall off once the buffer is full.
audit_entries: deque[AuditEntry] = deque(maxlen=get_settings().audit_buffer_size)


def changed_fields(before: dict[str, Any] | None, after: dict[str, Any] | None) -> tuple[str, ...]:
    """Keys whose values differ between two snapshots. Creates and deletes list every key."""

    before = before or {}
    after = after or {}
    keys = set(before) | set(after)
    return tuple(sorted(key for key in keys if before.get(key) != after.get(key)))


def record(
    actor_user_id: str,
    entity_type: str,
    entity_id: str,
    action: str,
    before: dict[str, Any] | None,
    after: dict[str, Any] | None,
    correlation_id: str | None = None,
) -> AuditEntry:
    entry = AuditEntry(
        actor_user_id=actor_user_id,
        entity_type=entity_type,
        entity_id=entity_id,
        action=action,
        before=before,
        after=after,
        changed_fields=changed_fields(before, after),
        correlation_id=correlation_id or get_correlation_id(),
    )
    audit_entries.append(entry)
    return entry


def history(entity_type: str, entity_id: str) -> list[AuditEntry]:
    return [entry for entry in audit_entries if entry.entity_type == entity_type and entry.entity_id == entity_id]
