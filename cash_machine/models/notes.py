"""
Core Data Models for the Cash Machine

These models describe what leaves the note inventory:
1. Receipts for completed withdrawals
2. Point-in-time snapshots of the stock
3. Validation findings about an initial note mapping

DESIGN DECISION: The inventory itself is a plain mutable object (it is
mutated on every withdrawal). Everything it hands out is an immutable
Pydantic model so callers cannot reach back into the live counts.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PositiveInt,
    model_validator,
)


# =============================================================================
# WITHDRAWAL MODELS
# =============================================================================

class WithdrawalReceipt(BaseModel):
    """
    Record of one withdrawal that went through.

    `notes` is sparse: only denominations with at least one note
    dispensed appear, highest denomination first.
    """
    model_config = ConfigDict(frozen=True)

    withdrawal_id: UUID = Field(
        default_factory=uuid4,
        description="Unique withdrawal identifier"
    )
    machine_id: str = Field(
        ...,
        min_length=1,
        description="Machine the notes were dispensed from"
    )
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID correlating the audit events of this withdrawal"
    )
    dispensed_at: datetime = Field(
        default_factory=datetime.utcnow
    )
    amount: PositiveInt = Field(
        ...,
        description="Amount requested"
    )
    notes: dict[int, int] = Field(
        default_factory=dict,
        description="Denomination -> number of notes dispensed"
    )
    remaining_cash: int = Field(
        ...,
        description="Total cash left in the machine after dispensing"
    )

    @model_validator(mode='after')
    def validate_notes(self) -> 'WithdrawalReceipt':
        """Receipts never list a denomination with zero notes."""
        for denomination, count in self.notes.items():
            if denomination <= 0:
                raise ValueError(f"Invalid denomination on receipt: {denomination}")
            if count <= 0:
                raise ValueError(f"Receipt lists {count} notes of {denomination}")
        return self

    @property
    def dispensed_total(self) -> int:
        """Value of the notes actually handed out."""
        return sum(denomination * count for denomination, count in self.notes.items())

    @property
    def note_count(self) -> int:
        return sum(self.notes.values())

    @property
    def is_complete(self) -> bool:
        """False when the denominations could not compose the full amount."""
        return self.dispensed_total == self.amount


class InventorySnapshot(BaseModel):
    """Point-in-time copy of a note inventory."""
    model_config = ConfigDict(frozen=True)

    taken_at: datetime = Field(
        default_factory=datetime.utcnow
    )
    notes: dict[int, int] = Field(
        ...,
        description="Denomination -> count held, highest denomination first"
    )
    total_cash: int = Field(
        ...,
        description="Sum of denomination * count"
    )
    is_empty: bool

    @property
    def note_count(self) -> int:
        return sum(self.notes.values())

    @property
    def negative_denominations(self) -> list[int]:
        """Denominations whose count has been driven below zero."""
        return [d for d, count in self.notes.items() if count < 0]


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Part of the inventory with the issue (e.g., 'denomination:3')"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'invalid_value', 'non_canonical')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """
    Result of the two-stage inventory validation.

    Stage 1: Schema validation (types, signs)
    Stage 2: Semantic validation (denomination system checks)
    """

    validated_at: datetime = Field(
        default_factory=datetime.utcnow
    )

    schema_valid: bool = Field(
        ...,
        description="Did schema validation pass?"
    )
    semantic_valid: bool = Field(
        ...,
        description="Did semantic validation pass?"
    )
    is_valid: bool = Field(
        ...,
        description="Overall validation result"
    )

    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All validation issues found"
    )

    # Smallest amount greedy selection pays with more notes than needed
    greedy_counterexample: Optional[int] = Field(
        default=None,
        ge=1,
    )

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def warnings(self) -> list[str]:
        """Messages of the non-blocking issues."""
        return [issue.message for issue in self.issues if issue.severity == "warning"]
