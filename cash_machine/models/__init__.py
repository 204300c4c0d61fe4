"""
Data Models Package

This package contains all Pydantic models used by the cash machine.
Everything the inventory hands out to callers conforms to these schemas.
"""

from cash_machine.models.notes import (
    InventorySnapshot,
    ValidationIssue,
    ValidationResult,
    WithdrawalReceipt,
)
from cash_machine.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Note models
    "InventorySnapshot",
    "ValidationIssue",
    "ValidationResult",
    "WithdrawalReceipt",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
