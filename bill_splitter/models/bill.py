"""
Core Data Models for Bill Splitter

These models define the schemas for all data flowing through the system:
1. Parsed input (items, participants, tax rates)
2. Allocation output (per-participant shares, bill totals)
3. Non-blocking input issues for inline display

DESIGN DECISION: Every model is frozen. Replacing an item's attribution
produces a new item, so the allocation engine never sees shared mutable
state between recomputations.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# INPUT MODELS
# =============================================================================

class Item(BaseModel):
    """
    A purchased good or service on the bill.

    attributed_participants is ordered for display but behaves as a set:
    duplicates are dropped, first occurrence wins.
    """
    model_config = ConfigDict(frozen=True)

    name: str = Field(
        ...,
        description="Item name as typed on its line"
    )
    price: float = Field(
        default=0.0,
        description="Pre-tax price of the item"
    )
    attributed_participants: tuple[str, ...] = Field(
        default_factory=tuple,
        description="Participants sharing this item's cost"
    )

    @field_validator('attributed_participants')
    @classmethod
    def dedupe_participants(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Treat the attribution as a set while keeping display order."""
        return tuple(dict.fromkeys(v))


class InputIssue(BaseModel):
    """
    A single problem found while parsing raw input.

    Issues never block the calculation. They exist so a front end can
    show an inline hint next to the offending field.
    """
    model_config = ConfigDict(frozen=True)

    field: str = Field(
        ...,
        description="Input field with the issue (items, participants, gst_rate, service_tax_rate)"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing_price', 'invalid_number')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="warning",
        pattern="^(warning|info)$",
        description="Issue severity"
    )
    line_number: Optional[int] = Field(
        default=None,
        ge=1,
        description="1-based line in the raw text, if line-oriented"
    )
    raw_value: Optional[str] = Field(
        default=None,
        description="The text that could not be understood"
    )


class ParsedBill(BaseModel):
    """Structured bill derived from the raw form input."""
    model_config = ConfigDict(frozen=True)

    items: tuple[Item, ...] = Field(default_factory=tuple)
    participants: tuple[str, ...] = Field(default_factory=tuple)
    gst_rate: float = 0.0
    service_tax_rate: float = 0.0
    issues: tuple[InputIssue, ...] = Field(default_factory=tuple)

    @property
    def has_issues(self) -> bool:
        return bool(self.issues)


# =============================================================================
# OUTPUT MODELS
# =============================================================================

class ParticipantShare(BaseModel):
    """
    What one participant owes.

    untaxed_share keeps full precision; total_owed is rounded for display.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    untaxed_share: float = Field(
        ...,
        description="Sum of this participant's item allocations before tax"
    )
    untaxed_share_rounded: Decimal = Field(
        ...,
        description="untaxed_share rounded for display"
    )
    total_owed: Decimal = Field(
        ...,
        description="Amount to pay after GST and service tax, rounded"
    )
    gst_rate: float
    service_tax_rate: float


class BillTotals(BaseModel):
    """Bill-wide figures, mostly for a sanity line under the summary table."""
    model_config = ConfigDict(frozen=True)

    item_subtotal: float = Field(
        ...,
        description="Sum of all counted item prices"
    )
    unattributed_amount: float = Field(
        ...,
        description="Price of items nobody is currently attributed to"
    )
    untaxed_total: float = Field(
        ...,
        description="Sum of every participant's untaxed share"
    )
    total_owed: Decimal = Field(
        ...,
        description="Sum of the rounded amounts every participant pays"
    )


class AllocationResult(BaseModel):
    """
    Result of one allocation run.

    participants follows the participant list order. items carries the
    effective attribution of each item, for the assignment surface.
    """
    model_config = ConfigDict(frozen=True)

    participants: tuple[ParticipantShare, ...] = Field(default_factory=tuple)
    items: tuple[Item, ...] = Field(default_factory=tuple)
    totals: BillTotals
    issues: tuple[InputIssue, ...] = Field(default_factory=tuple)
    revision: int = Field(
        default=0,
        ge=0,
        description="Session revision this result was computed from"
    )

    def share_for(self, name: str) -> Optional[ParticipantShare]:
        """Look up a participant's share by name."""
        return next((p for p in self.participants if p.name == name), None)

    def summary_rows(self) -> list[dict]:
        """
        Rows for the bill summary table.

        Columns match the summary display: name, total to pay, untaxed
        food price, GST and service tax.
        """
        return [
            {
                "Name": share.name,
                "Total Amount to Pay": str(share.total_owed),
                "Untaxed Food Price": str(share.untaxed_share_rounded),
                "GST": share.gst_rate,
                "Service Tax": share.service_tax_rate,
            }
            for share in self.participants
        ]
