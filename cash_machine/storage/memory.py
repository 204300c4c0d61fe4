"""
In-Memory Audit Storage

Keeps the audit trail in a process-local list. The trail lives exactly
as long as the storage object does.
"""

from threading import Lock
from typing import Optional
from uuid import UUID

from cash_machine.models.audit import AuditEvent, AuditEventType
from cash_machine.storage.interface import AuditStorageInterface, DuplicateError


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only audit trail held in memory."""

    def __init__(self):
        self._events: list[AuditEvent] = []
        self._event_ids: set[UUID] = set()
        self._lock = Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    def append_event(self, event: AuditEvent) -> bool:
        with self._lock:
            if event.event_id in self._event_ids:
                raise DuplicateError(f"Audit event {event.event_id} already stored")
            self._events.append(event)
            self._event_ids.add(event.event_id)
        return True

    def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        with self._lock:
            return [e for e in self._events if e.correlation_id == correlation_id]

    def get_recent_events(
        self,
        limit: int = 100,
        event_type: Optional[AuditEventType] = None,
    ) -> list[AuditEvent]:
        with self._lock:
            events = [
                e for e in reversed(self._events)
                if event_type is None or e.event_type == event_type
            ]
        return events[:limit]
