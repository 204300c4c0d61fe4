"""
Cash Machine - Source Package

A note-dispensing engine that keeps an inventory of banknotes by
denomination and pays out withdrawals with the fewest notes possible.

DESIGN PRINCIPLES:
1. Check before you touch: a rejected withdrawal never mutates stock
2. Fail early, fail visibly
3. No silent corrections (stock anomalies are logged, not patched)
4. Every withdrawal must be auditable
"""

from cash_machine.inventory import (
    DenominationUnavailable,
    EmptyInventory,
    InsufficientFunds,
    InvalidAmount,
    NoteInventory,
    WithdrawalError,
)
from cash_machine.orchestrator import CashMachine, InvalidInventoryError

__version__ = "1.0.0"
__author__ = "Cash Machine Team"

__all__ = [
    "CashMachine",
    "DenominationUnavailable",
    "EmptyInventory",
    "InsufficientFunds",
    "InvalidAmount",
    "InvalidInventoryError",
    "NoteInventory",
    "WithdrawalError",
]
