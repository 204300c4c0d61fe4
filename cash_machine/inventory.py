"""
Note Inventory and Withdrawal Engine

Holds the number of notes available per denomination and pays out
withdrawals greedily, largest denomination first.

DESIGN DECISION: Greedy selection gives the fewest notes for canonical
denomination systems (1/5/10/20/50/100 and the like). It is NOT optimal
for arbitrary sets such as {1, 3, 4}; see
cash_machine.validation.find_greedy_counterexample for a check.

KNOWN EDGE CASE: In the default (reference) mode only the aggregate value
is checked before dispensing. The inner loop looks at face value and the
remaining amount, never at per-denomination stock, so a denomination that
is individually exhausted can be driven below zero. This is preserved
deliberately and reported through a warning log. Pass strict=True to skip
exhausted denominations and refuse amounts the stock cannot compose.
"""

from typing import Mapping, Optional

import structlog

from cash_machine.models.notes import InventorySnapshot


logger = structlog.get_logger(__name__)


class WithdrawalError(Exception):
    """Base exception for withdrawals the inventory refuses."""

    def __init__(self, message: str, amount: object = None):
        self.amount = amount
        super().__init__(message)


class EmptyInventory(WithdrawalError):
    """The inventory holds no notes at all."""
    pass


class InvalidAmount(WithdrawalError, ValueError):
    """The requested amount is not a positive whole number."""
    pass


class InsufficientFunds(WithdrawalError):
    """The inventory cannot cover the requested amount."""

    def __init__(self, message: str, amount: object = None, available: Optional[int] = None):
        self.available = available
        super().__init__(message, amount)


class DenominationUnavailable(InsufficientFunds):
    """
    Strict mode only: enough value is held, but not in notes that can
    compose the requested amount.
    """
    pass


class NoteInventory:
    """
    Notes held by one machine, keyed by denomination.

    The denomination set is fixed at construction. The constructor
    trusts its caller: run cash_machine.validation.InventoryValidator
    first if the mapping comes from outside.
    """

    def __init__(self, notes: Mapping[int, int], strict: bool = False):
        # Own copy, highest denomination first
        self._notes: dict[int, int] = {
            denomination: notes[denomination]
            for denomination in sorted(notes, reverse=True)
        }
        self._strict = strict

    def __repr__(self) -> str:
        return f"NoteInventory({self._notes!r}, strict={self._strict})"

    @property
    def notes(self) -> dict[int, int]:
        """Copy of the current denomination -> count mapping."""
        return dict(self._notes)

    @property
    def denominations(self) -> tuple[int, ...]:
        """Denominations held, highest first."""
        return tuple(self._notes)

    @property
    def strict(self) -> bool:
        return self._strict

    def count(self, denomination: int) -> int:
        """Notes held of one denomination; unknown denominations hold zero."""
        return self._notes.get(denomination, 0)

    def note_count(self) -> int:
        return sum(self._notes.values())

    def is_empty(self) -> bool:
        """True if and only if the counts sum to exactly zero."""
        return self.note_count() == 0

    def total_cash_available(self) -> int:
        return sum(denomination * count for denomination, count in self._notes.items())

    def has_negative_stock(self) -> bool:
        return any(count < 0 for count in self._notes.values())

    def snapshot(self) -> InventorySnapshot:
        return InventorySnapshot(
            notes=self.notes,
            total_cash=self.total_cash_available(),
            is_empty=self.is_empty(),
        )

    def withdraw(self, amount: int) -> dict[int, int]:
        """
        Dispense `amount` and return the notes handed out.

        Checks, in order:
        1. EmptyInventory if no notes are held, whatever the amount.
        2. InvalidAmount if amount is not a positive int.
        3. InsufficientFunds if the total cash is below amount
           (asking for exactly the total is allowed).

        Returns a sparse mapping denomination -> notes dispensed, highest
        denomination first. Counts are decremented in place. A rejected
        withdrawal leaves the inventory untouched.

        Raises:
            EmptyInventory, InvalidAmount, InsufficientFunds,
            DenominationUnavailable (strict mode only)
        """
        if self.is_empty():
            raise EmptyInventory("Inventory holds no notes", amount)

        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise InvalidAmount(
                f"Amount must be a positive whole number, got {amount!r}", amount
            )

        available = self.total_cash_available()
        if available < amount:
            raise InsufficientFunds(
                f"Requested {amount} but only {available} is available",
                amount,
                available,
            )

        dispensed, remainder = self._select_notes(amount)

        if remainder and self._strict:
            raise DenominationUnavailable(
                f"Cannot compose {amount} from the notes in stock "
                f"({remainder} left over)",
                amount,
                available,
            )

        for denomination, count in dispensed.items():
            self._notes[denomination] -= count

        if remainder:
            logger.warning(
                "undispensed_remainder",
                amount=amount,
                remainder=remainder,
                denominations=list(self._notes),
            )
        negative = {d: self._notes[d] for d in dispensed if self._notes[d] < 0}
        if negative:
            logger.warning(
                "negative_stock",
                amount=amount,
                negative_notes=negative,
            )

        return dispensed

    def _select_notes(self, amount: int) -> tuple[dict[int, int], int]:
        """
        Greedy selection without side effects.

        Returns (dispensed, remainder). Once a denomination is passed over
        it is never reconsidered.
        """
        dispensed: dict[int, int] = {}
        remaining = amount

        for denomination, in_stock in self._notes.items():
            taken = 0
            while remaining > 0:
                if denomination > remaining:
                    break
                if self._strict and taken >= in_stock:
                    break
                remaining -= denomination
                taken += 1
            if taken:
                dispensed[denomination] = taken
            if remaining == 0:
                break

        return dispensed, remaining
