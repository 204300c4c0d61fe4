"""
Audit Storage Package

Provides the abstract audit storage interface and an in-memory
implementation.
"""

from cash_machine.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    StorageError,
)
from cash_machine.storage.memory import InMemoryAuditStorage

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    # Exceptions
    "DuplicateError",
    "StorageError",
    # In-memory implementation
    "InMemoryAuditStorage",
]
