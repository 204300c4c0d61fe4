"""Inventory validation package."""

from cash_machine.validation.validator import InventoryValidator, find_greedy_counterexample

__all__ = ["InventoryValidator", "find_greedy_counterexample"]
