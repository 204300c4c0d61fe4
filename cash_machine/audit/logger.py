"""
Audit Logger

DESIGN DECISION: Every withdrawal attempt is logged, dispensed or not.
This provides:
1. Complete traceability of the cash that left the machine
2. Debugging capability when stock and receipts disagree
3. A record of stock anomalies (negative counts, unpaid remainders)

The audit logger:
- Is synchronous, like the withdrawals it records
- Gracefully handles storage failures (a broken audit backend does not
  stop a withdrawal that already happened)
- Supports correlation IDs to trace related events
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from cash_machine.config import LoggingSettings, get_settings
from cash_machine.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from cash_machine.storage import AuditStorageInterface


def _configure_structlog(renderer) -> None:
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


# Configure structlog for local logging; stdlib handlers and levels stay
# with the host application
_configure_structlog(structlog.processors.JSONRenderer())


def configure_logging(settings: Optional[LoggingSettings] = None) -> None:
    """
    Apply LoggingSettings to stdlib logging and structlog.

    Never called on import. A host application that wants this package to
    own logging calls it once at startup; it sets the root logger level.
    """
    settings = settings or get_settings().logging

    logging.basicConfig(format="%(message)s", level=settings.level)
    logging.getLogger().setLevel(settings.level)

    if settings.renderer == "console":
        _configure_structlog(structlog.dev.ConsoleRenderer())
    else:
        _configure_structlog(structlog.processors.JSONRenderer())


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage, if one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for the audit trail.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger(__name__)

    @property
    def storage(self) -> Optional[AuditStorageInterface]:
        return self._storage

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage is not None:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_inventory_loaded(
        self,
        machine_id: str,
        notes: dict[int, int],
        total_cash: int,
    ) -> None:
        """Log a machine being put in service with its initial stock."""
        event = AuditEventBuilder.inventory_loaded(
            machine_id=machine_id,
            notes=notes,
            total_cash=total_cash,
        )
        self.log(event)

    def log_inventory_validation_failed(
        self,
        machine_id: str,
        issues: list[dict],
    ) -> None:
        event = AuditEventBuilder.inventory_validation_failed(
            machine_id=machine_id,
            issues=issues,
        )
        self.log(event)

    def log_withdrawal_requested(
        self,
        machine_id: str,
        amount: int,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.withdrawal_requested(
            machine_id=machine_id,
            amount=amount,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_withdrawal_dispensed(
        self,
        machine_id: str,
        withdrawal_id: UUID,
        amount: int,
        notes: dict[int, int],
        remaining_cash: int,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.withdrawal_dispensed(
            machine_id=machine_id,
            withdrawal_id=withdrawal_id,
            amount=amount,
            notes=notes,
            remaining_cash=remaining_cash,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_withdrawal_rejected(
        self,
        machine_id: str,
        amount: object,
        reason: str,
        error_message: str,
        correlation_id: UUID,
        available: Optional[int] = None,
    ) -> None:
        """Log a withdrawal the inventory refused."""
        event = AuditEventBuilder.withdrawal_rejected(
            machine_id=machine_id,
            amount=amount,
            reason=reason,
            error_message=error_message,
            correlation_id=correlation_id,
            available=available,
        )
        self.log(event)

    def log_negative_stock(
        self,
        machine_id: str,
        withdrawal_id: UUID,
        notes: dict[int, int],
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.negative_stock_detected(
            machine_id=machine_id,
            withdrawal_id=withdrawal_id,
            notes=notes,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_undispensed_remainder(
        self,
        machine_id: str,
        withdrawal_id: UUID,
        amount: int,
        remainder: int,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.undispensed_remainder(
            machine_id=machine_id,
            withdrawal_id=withdrawal_id,
            amount=amount,
            remainder=remainder,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_error(
        self,
        error_type: str,
        error_message: str,
        machine_id: Optional[str] = None,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            machine_id=machine_id,
            details=details,
            correlation_id=correlation_id,
        )
        self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a withdrawal and pass it through all
    subsequent audit calls.
    """
    return uuid4()
