"""
Abstract Audit Storage Interface

DESIGN DECISION: The audit logger writes through an abstract interface.
This allows us to:
1. Keep the trail in memory for tests and single-process use
2. Plug in a durable backend later without touching the dispenser
3. Keep withdrawal logic decoupled from where the trail ends up

Storage of the note inventory itself is out of scope; only audit events
go through here.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from cash_machine.models.audit import AuditEvent, AuditEventType


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Args:
            event: The audit event to log

        Returns:
            True if logged successfully

        Raises:
            StorageError: If the backend rejects the write
        """
        pass

    @abstractmethod
    def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a correlation ID (e.g., one withdrawal).

        Returns:
            List of related events in chronological order
        """
        pass

    @abstractmethod
    def get_recent_events(
        self,
        limit: int = 100,
        event_type: Optional[AuditEventType] = None,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Args:
            limit: Maximum number of events to return
            event_type: Only return events of this type

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class DuplicateError(StorageError):
    """Attempted to append an event that is already stored."""
    pass
