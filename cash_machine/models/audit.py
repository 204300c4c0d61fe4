"""
Audit Models for the Cash Machine

Every withdrawal attempt is logged for audit purposes, whether it
dispensed notes or was rejected. Together with the inventory load event
this is enough to reconstruct the stock of a machine at any point.

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Inventory lifecycle
    INVENTORY_LOADED = "inventory_loaded"
    INVENTORY_VALIDATION_FAILED = "inventory_validation_failed"

    # Withdrawals
    WITHDRAWAL_REQUESTED = "withdrawal_requested"
    WITHDRAWAL_DISPENSED = "withdrawal_dispensed"
    WITHDRAWAL_REJECTED = "withdrawal_rejected"

    # Stock anomalies
    NEGATIVE_STOCK_DETECTED = "negative_stock_detected"
    UNDISPENSED_REMAINDER = "undispensed_remainder"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - which machine and which withdrawal?
    machine_id: Optional[str] = Field(
        default=None,
        description="Machine that produced the event"
    )
    entity_id: Optional[UUID] = Field(
        default=None,
        description="Withdrawal this event relates to, if any"
    )
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., all events in one withdrawal)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "machine_id": self.machine_id,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
        }


def _notes_detail(notes: dict[int, int]) -> dict[str, int]:
    # str keys keep the details JSON-renderable
    return {str(denomination): count for denomination, count in notes.items()}


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.withdrawal_requested(machine_id, 150, correlation_id)
        event = AuditEventBuilder.withdrawal_rejected(machine_id, 150, "EmptyInventory", ...)
    """

    @staticmethod
    def inventory_loaded(
        machine_id: str,
        notes: dict[int, int],
        total_cash: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INVENTORY_LOADED,
            machine_id=machine_id,
            description=f"Inventory loaded with {total_cash} in cash",
            details={
                "notes": _notes_detail(notes),
                "total_cash": total_cash,
            },
        )

    @staticmethod
    def inventory_validation_failed(
        machine_id: str,
        issues: list[dict],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INVENTORY_VALIDATION_FAILED,
            severity=AuditSeverity.ERROR,
            machine_id=machine_id,
            description=f"Inventory validation failed with {len(issues)} issues",
            details={
                "issues": issues,
            },
        )

    @staticmethod
    def withdrawal_requested(
        machine_id: str,
        amount: int,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.WITHDRAWAL_REQUESTED,
            machine_id=machine_id,
            correlation_id=correlation_id,
            description=f"Withdrawal of {amount} requested",
            details={
                "amount": amount,
            },
        )

    @staticmethod
    def withdrawal_dispensed(
        machine_id: str,
        withdrawal_id: UUID,
        amount: int,
        notes: dict[int, int],
        remaining_cash: int,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.WITHDRAWAL_DISPENSED,
            machine_id=machine_id,
            entity_id=withdrawal_id,
            correlation_id=correlation_id,
            description=f"Dispensed {amount} in {sum(notes.values())} notes",
            details={
                "amount": amount,
                "notes": _notes_detail(notes),
                "remaining_cash": remaining_cash,
            },
        )

    @staticmethod
    def withdrawal_rejected(
        machine_id: str,
        amount: object,
        reason: str,
        error_message: str,
        correlation_id: UUID,
        available: Optional[int] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.WITHDRAWAL_REJECTED,
            severity=AuditSeverity.WARNING,
            machine_id=machine_id,
            correlation_id=correlation_id,
            description=f"Withdrawal of {amount} rejected: {reason}",
            details={
                "amount": amount if isinstance(amount, int) else repr(amount),
                "available": available,
            },
            error_code=reason,
            error_message=error_message,
        )

    @staticmethod
    def negative_stock_detected(
        machine_id: str,
        withdrawal_id: UUID,
        notes: dict[int, int],
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.NEGATIVE_STOCK_DETECTED,
            severity=AuditSeverity.ERROR,
            machine_id=machine_id,
            entity_id=withdrawal_id,
            correlation_id=correlation_id,
            description="Withdrawal drove note stock below zero",
            details={
                "negative_notes": _notes_detail(notes),
            },
        )

    @staticmethod
    def undispensed_remainder(
        machine_id: str,
        withdrawal_id: UUID,
        amount: int,
        remainder: int,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.UNDISPENSED_REMAINDER,
            severity=AuditSeverity.WARNING,
            machine_id=machine_id,
            entity_id=withdrawal_id,
            correlation_id=correlation_id,
            description=f"{remainder} of {amount} could not be composed from the denominations held",
            details={
                "amount": amount,
                "remainder": remainder,
            },
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        machine_id: Optional[str] = None,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            machine_id=machine_id,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
