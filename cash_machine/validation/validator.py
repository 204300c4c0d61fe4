"""
Two-Stage Inventory Validation

NoteInventory trusts its caller. This module is what the caller runs
before handing over a mapping that came from configuration or an
operator.

STAGE 1 - SCHEMA VALIDATION:
- Denominations are positive whole numbers
- Counts are non-negative whole numbers
- At least one denomination is present

STAGE 2 - SEMANTIC VALIDATION:
- Empty stock (every withdrawal would be refused)
- Denominations sharing a common factor (some amounts can never be paid)
- Non-canonical denomination systems, where greedy selection pays
  some amounts with more notes than necessary

IMPORTANT: Validation NEVER silently fixes issues.
It reports them for the operator to act on.
"""

from functools import reduce
from math import gcd
from typing import Iterable, Mapping, Optional

from cash_machine.models.notes import ValidationIssue, ValidationResult


def _greedy_note_count(amount: int, denominations_desc: list[int]) -> Optional[int]:
    """Notes greedy selection uses for amount with unlimited stock, None if it cannot."""
    remaining = amount
    count = 0
    for denomination in denominations_desc:
        if remaining <= 0:
            break
        taken = remaining // denomination
        count += taken
        remaining -= taken * denomination
    return count if remaining == 0 else None


def find_greedy_counterexample(denominations: Iterable[int]) -> Optional[int]:
    """
    Smallest amount for which greedy selection is not optimal.

    Compares greedy against the true minimum (dynamic programming) for
    every amount below the sum of the two largest denominations; if greedy
    is ever beaten in a system with a 1-note, it is beaten somewhere in
    that range (Kozen & Zaks).
    Stock is assumed unlimited.

    Returns None for canonical systems such as 1/5/10/20/50/100.
    """
    coins = sorted({d for d in denominations if d > 0})
    if len(coins) < 2:
        return None

    bound = coins[-1] + coins[-2]
    coins_desc = coins[::-1]

    unreachable = bound + 1
    best = [0] + [unreachable] * bound
    for amount in range(1, bound + 1):
        for coin in coins:
            if coin > amount:
                break
            if best[amount - coin] + 1 < best[amount]:
                best[amount] = best[amount - coin] + 1

        if best[amount] == unreachable:
            continue
        greedy = _greedy_note_count(amount, coins_desc)
        if greedy is None or greedy > best[amount]:
            return amount

    return None


class InventoryValidator:
    """
    Validates an initial denomination -> count mapping.

    Stage 1 errors make the mapping unusable. Stage 2 only produces
    warnings and info: the machine can run, but the operator should know.
    """

    def _validate_schema(
        self,
        notes: Mapping,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 1: Schema validation.

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        if not notes:
            issues.append(ValidationIssue(
                field="denominations",
                issue_type="missing",
                message="No denominations configured",
                severity="error",
                suggested_fix="Configure at least one note denomination",
            ))

        for denomination, count in notes.items():
            if (
                isinstance(denomination, bool)
                or not isinstance(denomination, int)
                or denomination <= 0
            ):
                issues.append(ValidationIssue(
                    field=f"denomination:{denomination!r}",
                    issue_type="invalid_value",
                    message=f"Denomination {denomination!r} is not a positive whole number",
                    severity="error",
                ))
            if isinstance(count, bool) or not isinstance(count, int):
                issues.append(ValidationIssue(
                    field=f"count:{denomination!r}",
                    issue_type="invalid_type",
                    message=f"Count for {denomination!r} is not a whole number: {count!r}",
                    severity="error",
                ))
            elif count < 0:
                issues.append(ValidationIssue(
                    field=f"count:{denomination!r}",
                    issue_type="invalid_value",
                    message=f"Count for {denomination!r} is negative ({count})",
                    severity="error",
                    suggested_fix="Counts start at zero or above",
                ))

        is_valid = not any(issue.severity == "error" for issue in issues)

        return is_valid, issues

    def _validate_semantic(
        self,
        notes: Mapping[int, int],
    ) -> tuple[bool, list[ValidationIssue], Optional[int]]:
        """
        Stage 2: Semantic validation.

        Only runs on a mapping that passed stage 1.

        Returns: (is_valid, list_of_issues, greedy_counterexample)
        """
        issues = []

        if sum(notes.values()) == 0:
            issues.append(ValidationIssue(
                field="counts",
                issue_type="empty",
                message="Inventory holds no notes; every withdrawal will be refused",
                severity="warning",
                suggested_fix="Load notes before putting the machine in service",
            ))

        common = reduce(gcd, notes)
        if common > 1:
            issues.append(ValidationIssue(
                field="denominations",
                issue_type="coarse_denominations",
                message=f"Only multiples of {common} can ever be dispensed",
                severity="info",
            ))

        counterexample = find_greedy_counterexample(notes)
        if counterexample is not None:
            issues.append(ValidationIssue(
                field="denominations",
                issue_type="non_canonical",
                message=(
                    f"Denominations {sorted(notes)} are not canonical: greedy "
                    f"selection is not minimal for an amount of {counterexample}"
                ),
                severity="warning",
                suggested_fix="Expect more notes than necessary for some amounts",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)

        return is_valid, issues, counterexample

    def validate(self, notes: Mapping) -> ValidationResult:
        """Run both stages; stage 2 is skipped if stage 1 fails."""
        schema_valid, issues = self._validate_schema(notes)

        semantic_valid = False
        counterexample = None
        if schema_valid:
            semantic_valid, semantic_issues, counterexample = self._validate_semantic(notes)
            issues.extend(semantic_issues)

        return ValidationResult(
            schema_valid=schema_valid,
            semantic_valid=semantic_valid,
            is_valid=schema_valid and semantic_valid,
            issues=issues,
            greedy_counterexample=counterexample,
        )
