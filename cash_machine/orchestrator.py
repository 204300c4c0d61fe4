"""
Main Orchestrator for the Cash Machine

Ties the note inventory to validation, locking and the audit trail, and
defines the end-to-end withdrawal flow:
request -> audit -> inventory check and dispense -> receipt -> audit

DESIGN DECISION: NoteInventory is single-threaded by contract. The
orchestrator is where a shared machine gets serialized: one lock is held
for the whole withdrawal, checks and decrements included.
"""

from threading import RLock
from typing import Optional
from uuid import UUID, uuid4

import structlog

from cash_machine.audit import AuditLogger, create_correlation_id
from cash_machine.config import DispenserSettings, get_settings
from cash_machine.inventory import InsufficientFunds, NoteInventory, WithdrawalError
from cash_machine.models.notes import (
    InventorySnapshot,
    ValidationResult,
    WithdrawalReceipt,
)
from cash_machine.validation import InventoryValidator


logger = structlog.get_logger(__name__)


class InventoryError(Exception):
    """Base exception for unusable inventories."""
    pass


class InvalidInventoryError(InventoryError):
    """The configured note mapping failed validation."""

    def __init__(self, result: ValidationResult, message: str):
        self.result = result
        super().__init__(message)


class CashMachine:
    """
    A note inventory put in service.

    Flow of one withdrawal:
    1. Request -> audited with a fresh correlation ID
    2. Inventory checks (empty, amount, funds) -> rejection audited and re-raised
    3. Greedy dispense -> receipt built from the notes handed out
    4. Anomalies (negative stock, unpaid remainder) -> audited, not corrected
    """

    def __init__(
        self,
        inventory: NoteInventory,
        audit_logger: Optional[AuditLogger] = None,
        machine_id: str = "cash-machine-1",
    ):
        self._inventory = inventory
        self._audit_logger = audit_logger
        self._machine_id = machine_id
        self._lock = RLock()

        if self._audit_logger:
            self._audit_logger.log_inventory_loaded(
                machine_id=machine_id,
                notes=inventory.notes,
                total_cash=inventory.total_cash_available(),
            )

    @classmethod
    def from_settings(
        cls,
        settings: Optional[DispenserSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
        validator: Optional[InventoryValidator] = None,
    ) -> "CashMachine":
        """
        Build a machine from configured denominations and stock.

        Raises:
            InvalidInventoryError: If the configured mapping fails validation
        """
        settings = settings or get_settings().dispenser
        validator = validator or InventoryValidator()

        notes = settings.initial_notes_map
        result = validator.validate(notes)

        if not result.is_valid:
            issues = [
                {"field": i.field, "type": i.issue_type, "message": i.message}
                for i in result.issues
                if i.severity == "error"
            ]
            if audit_logger:
                audit_logger.log_inventory_validation_failed(
                    machine_id=settings.machine_id,
                    issues=issues,
                )
            raise InvalidInventoryError(
                result,
                f"Configured inventory is invalid: {'; '.join(i['message'] for i in issues)}",
            )

        for warning in result.warnings:
            logger.warning(
                "inventory_validation_warning",
                machine_id=settings.machine_id,
                warning=warning,
            )

        inventory = NoteInventory(notes, strict=settings.strict_dispensing)
        return cls(inventory, audit_logger=audit_logger, machine_id=settings.machine_id)

    def __repr__(self) -> str:
        return f"CashMachine({self._machine_id!r}, {self._inventory!r})"

    @property
    def machine_id(self) -> str:
        return self._machine_id

    @property
    def strict(self) -> bool:
        return self._inventory.strict

    def is_empty(self) -> bool:
        with self._lock:
            return self._inventory.is_empty()

    def total_cash_available(self) -> int:
        with self._lock:
            return self._inventory.total_cash_available()

    def snapshot(self) -> InventorySnapshot:
        with self._lock:
            return self._inventory.snapshot()

    def withdraw(
        self,
        amount: int,
        correlation_id: Optional[UUID] = None,
    ) -> WithdrawalReceipt:
        """
        Dispense `amount` and return a receipt.

        Rejections from the inventory are audited and re-raised unchanged,
        so callers catch the same WithdrawalError subclasses they would
        get from NoteInventory.withdraw.
        """
        correlation_id = correlation_id or create_correlation_id()

        with self._lock:
            if self._audit_logger:
                self._audit_logger.log_withdrawal_requested(
                    machine_id=self._machine_id,
                    amount=amount,
                    correlation_id=correlation_id,
                )

            try:
                dispensed = self._inventory.withdraw(amount)
            except WithdrawalError as e:
                if self._audit_logger:
                    self._audit_logger.log_withdrawal_rejected(
                        machine_id=self._machine_id,
                        amount=amount,
                        reason=type(e).__name__,
                        error_message=str(e),
                        correlation_id=correlation_id,
                        available=e.available if isinstance(e, InsufficientFunds) else None,
                    )
                raise
            except Exception as e:
                if self._audit_logger:
                    self._audit_logger.log_error(
                        error_type=type(e).__name__,
                        error_message=str(e),
                        machine_id=self._machine_id,
                        details={"amount": repr(amount)},
                        correlation_id=correlation_id,
                    )
                raise

            receipt = WithdrawalReceipt(
                withdrawal_id=uuid4(),
                machine_id=self._machine_id,
                correlation_id=correlation_id,
                amount=amount,
                notes=dispensed,
                remaining_cash=self._inventory.total_cash_available(),
            )
            negative = {
                d: self._inventory.count(d)
                for d in dispensed
                if self._inventory.count(d) < 0
            }

            if self._audit_logger:
                self._audit_logger.log_withdrawal_dispensed(
                    machine_id=self._machine_id,
                    withdrawal_id=receipt.withdrawal_id,
                    amount=amount,
                    notes=dispensed,
                    remaining_cash=receipt.remaining_cash,
                    correlation_id=correlation_id,
                )
                if negative:
                    self._audit_logger.log_negative_stock(
                        machine_id=self._machine_id,
                        withdrawal_id=receipt.withdrawal_id,
                        notes=negative,
                        correlation_id=correlation_id,
                    )
                if not receipt.is_complete:
                    self._audit_logger.log_undispensed_remainder(
                        machine_id=self._machine_id,
                        withdrawal_id=receipt.withdrawal_id,
                        amount=amount,
                        remainder=amount - receipt.dispensed_total,
                        correlation_id=correlation_id,
                    )

        return receipt
