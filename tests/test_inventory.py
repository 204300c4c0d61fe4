"""
Tests for the note inventory and its greedy withdrawal.

Test strategy:
1. The fixed withdrawal scenarios over the standard 1/5/10/20/50/100 stock
2. Check ordering of the failure conditions
3. Conservation: stock after = stock before - notes dispensed
4. The per-denomination stock edge case, reference and strict modes
"""

import pytest

from cash_machine.inventory import (
    DenominationUnavailable,
    EmptyInventory,
    InsufficientFunds,
    InvalidAmount,
    NoteInventory,
    WithdrawalError,
)


class TestWithdrawalScenarios:
    """Withdrawals from the standard stock."""

    def test_withdraw_exact_amount(self, stocked_notes):
        """Test an amount paid entirely in the largest denomination."""
        inventory = NoteInventory(stocked_notes)
        assert inventory.withdraw(300) == {100: 3}

    def test_withdraw_composed_amount_tens(self, stocked_notes):
        """Test an amount needing a second denomination."""
        inventory = NoteInventory(stocked_notes)
        assert inventory.withdraw(210) == {100: 2, 10: 1}

    def test_withdraw_composed_amount_tens_and_units(self, stocked_notes):
        """Test an amount spanning hundreds, fifties and units."""
        inventory = NoteInventory(stocked_notes)
        assert inventory.withdraw(151) == {100: 1, 50: 1, 1: 1}

    def test_withdraw_units_only(self, stocked_notes):
        """Test an amount below every denomination but the unit note."""
        inventory = NoteInventory(stocked_notes)
        assert inventory.withdraw(3) == {1: 3}

    def test_remaining_notes_are_consistent(self, stocked_notes):
        """Test the stock left behind after a mixed withdrawal."""
        inventory = NoteInventory(stocked_notes)
        inventory.withdraw(572)
        assert inventory.notes == {
            1: 3,
            5: 10,
            10: 5,
            20: 4,
            50: 14,
            100: 5,
        }

    def test_result_is_ordered_highest_first(self, stocked_notes):
        """Test the dispensed mapping lists the largest denomination first."""
        inventory = NoteInventory(stocked_notes)
        assert list(inventory.withdraw(186)) == [100, 50, 20, 10, 5, 1]

    def test_withdraw_everything(self, stocked_notes):
        """Test that asking for exactly the total is allowed."""
        inventory = NoteInventory(stocked_notes, strict=True)
        dispensed = inventory.withdraw(1955)
        assert dispensed == stocked_notes
        assert inventory.is_empty() is True
        assert inventory.total_cash_available() == 0

    def test_withdrawals_accumulate(self, stocked_notes):
        """Test that each withdrawal sees the stock left by the previous one."""
        inventory = NoteInventory(stocked_notes)
        inventory.withdraw(300)
        inventory.withdraw(300)
        assert inventory.count(100) == 4
        assert inventory.total_cash_available() == 1955 - 600


class TestQueries:
    """Tests for total_cash_available and is_empty."""

    def test_total_cash_available(self):
        """Test the weighted sum over every denomination."""
        inventory = NoteInventory({1: 10, 5: 10, 10: 10, 20: 10, 50: 10, 100: 10})
        assert inventory.total_cash_available() == 1860

    def test_total_cash_reflects_withdrawals(self, stocked_notes):
        inventory = NoteInventory(stocked_notes)
        inventory.withdraw(151)
        assert inventory.total_cash_available() == 1955 - 151

    def test_is_empty_with_zero_counts(self):
        """Test a zero-count inventory of any denomination set is empty."""
        assert NoteInventory({1: 0, 5: 0, 100: 0}).is_empty() is True
        assert NoteInventory({}).is_empty() is True

    def test_is_not_empty_with_one_note(self):
        assert NoteInventory({1: 0, 100: 1}).is_empty() is False

    def test_queries_are_repeatable(self, stocked_notes):
        """Test queries without an intervening withdrawal agree."""
        inventory = NoteInventory(stocked_notes)
        assert inventory.total_cash_available() == inventory.total_cash_available()
        assert inventory.is_empty() == inventory.is_empty()
        assert inventory.notes == stocked_notes

    def test_unknown_denomination_counts_zero(self, stocked_notes):
        """Test absent denominations read as zero without being added."""
        inventory = NoteInventory(stocked_notes)
        assert inventory.count(200) == 0
        assert 200 not in inventory.denominations

    def test_denominations_highest_first(self):
        inventory = NoteInventory({5: 1, 100: 1, 1: 1, 20: 1})
        assert inventory.denominations == (100, 20, 5, 1)

    def test_constructor_copies_mapping(self, stocked_notes):
        """Test the caller's dict is not mutated by withdrawals."""
        inventory = NoteInventory(stocked_notes)
        inventory.withdraw(300)
        assert stocked_notes[100] == 10
        assert inventory.count(100) == 7

    def test_notes_property_is_a_copy(self, stocked_notes):
        inventory = NoteInventory(stocked_notes)
        inventory.notes[100] = 0
        assert inventory.count(100) == 10

    def test_snapshot(self, stocked_notes):
        """Test the snapshot mirrors the live state."""
        inventory = NoteInventory(stocked_notes)
        inventory.withdraw(100)
        snapshot = inventory.snapshot()
        assert snapshot.notes[100] == 9
        assert snapshot.total_cash == 1855
        assert snapshot.is_empty is False
        assert snapshot.note_count == inventory.note_count()


class TestWithdrawalFailures:
    """Tests for the failure conditions and their ordering."""

    def test_empty_inventory(self):
        """Test an inventory with no notes refuses any withdrawal."""
        inventory = NoteInventory({1: 0, 5: 0, 10: 0, 20: 0, 50: 0, 100: 0})
        with pytest.raises(EmptyInventory):
            inventory.withdraw(100)

    @pytest.mark.parametrize("amount", [1, 5, 10_000])
    def test_empty_checked_before_funds(self, amount):
        """Test emptiness is reported even when funds would also fail."""
        with pytest.raises(EmptyInventory):
            NoteInventory({10: 0, 20: 0}).withdraw(amount)

    def test_empty_checked_before_amount(self):
        with pytest.raises(EmptyInventory):
            NoteInventory({10: 0}).withdraw(-5)

    def test_insufficient_funds(self):
        """Test an amount above the total value is refused."""
        inventory = NoteInventory({1: 10, 5: 10})
        with pytest.raises(InsufficientFunds) as exc_info:
            inventory.withdraw(100)
        assert exc_info.value.amount == 100
        assert exc_info.value.available == 60

    def test_insufficient_funds_by_one(self, stocked_notes):
        with pytest.raises(InsufficientFunds):
            NoteInventory(stocked_notes).withdraw(1956)

    @pytest.mark.parametrize("amount", [0, -10, 10.0, "10", True, None])
    def test_invalid_amount(self, stocked_notes, amount):
        """Test that only positive ints are accepted."""
        with pytest.raises(InvalidAmount):
            NoteInventory(stocked_notes).withdraw(amount)

    def test_invalid_amount_is_a_value_error(self, stocked_notes):
        with pytest.raises(ValueError):
            NoteInventory(stocked_notes).withdraw(0)

    def test_failures_share_a_base(self):
        assert issubclass(EmptyInventory, WithdrawalError)
        assert issubclass(InsufficientFunds, WithdrawalError)
        assert issubclass(DenominationUnavailable, InsufficientFunds)

    def test_failed_withdrawal_leaves_stock_unchanged(self):
        """Test a rejected withdrawal does not touch any count."""
        inventory = NoteInventory({1: 10, 5: 10})
        with pytest.raises(InsufficientFunds):
            inventory.withdraw(100)
        assert inventory.notes == {5: 10, 1: 10}


class TestConservation:
    """Stock after a withdrawal = stock before - notes dispensed."""

    @pytest.mark.parametrize("amount", [1, 4, 9, 38, 99, 186, 572, 999])
    def test_conservation(self, stocked_notes, amount):
        inventory = NoteInventory(stocked_notes)
        before = inventory.notes

        dispensed = inventory.withdraw(amount)

        assert sum(d * c for d, c in dispensed.items()) == amount
        assert all(count > 0 for count in dispensed.values())
        for denomination, count in before.items():
            assert inventory.count(denomination) == count - dispensed.get(denomination, 0)


class TestStockEdgeCases:
    """Tests for per-denomination stock, reference vs strict mode."""

    def test_reference_mode_can_drive_stock_negative(self):
        """Test the aggregate-only check lets a denomination go below zero."""
        inventory = NoteInventory({100: 2, 50: 10})
        assert inventory.withdraw(300) == {100: 3}
        assert inventory.count(100) == -1
        assert inventory.has_negative_stock() is True

    def test_reference_mode_full_withdrawal_overdraws_hundreds(self, stocked_notes):
        """Test the total can hit zero while notes are still counted."""
        inventory = NoteInventory(stocked_notes)
        assert inventory.withdraw(1955) == {100: 19, 50: 1, 5: 1}
        assert inventory.total_cash_available() == 0
        assert inventory.count(100) == -9
        assert inventory.is_empty() is False

    def test_reference_mode_returns_partial_mapping(self):
        """Test a remainder no denomination fits is left unpaid."""
        inventory = NoteInventory({5: 10})
        assert inventory.withdraw(3) == {}
        assert inventory.count(5) == 10

    def test_reference_mode_partial_after_skipping(self):
        inventory = NoteInventory({100: 1, 20: 3})
        assert inventory.withdraw(150) == {100: 1, 20: 2}
        assert inventory.notes == {100: 0, 20: 1}

    def test_strict_mode_falls_through_to_smaller_notes(self):
        """Test strict mode skips an exhausted denomination."""
        inventory = NoteInventory({100: 2, 50: 10}, strict=True)
        assert inventory.withdraw(300) == {100: 2, 50: 2}
        assert inventory.notes == {100: 0, 50: 8}
        assert inventory.has_negative_stock() is False

    def test_strict_mode_refuses_uncomposable_amount(self):
        """Test strict mode raises and leaves the stock untouched."""
        inventory = NoteInventory({100: 1, 20: 3}, strict=True)
        with pytest.raises(DenominationUnavailable) as exc_info:
            inventory.withdraw(150)
        assert exc_info.value.available == 160
        assert inventory.notes == {100: 1, 20: 3}

    def test_strict_mode_is_still_greedy(self, stocked_notes):
        """Test strict mode matches reference mode when stock suffices."""
        strict = NoteInventory(stocked_notes, strict=True)
        reference = NoteInventory(stocked_notes)
        assert strict.withdraw(572) == reference.withdraw(572)
        assert strict.notes == reference.notes

    def test_skipped_denomination_not_reconsidered(self):
        """Test greedy never backtracks, even if that leaves a remainder."""
        # 60 = 20 + 20 + 20, but greedy takes the 50 first
        inventory = NoteInventory({50: 1, 20: 3}, strict=True)
        with pytest.raises(DenominationUnavailable):
            inventory.withdraw(60)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
