"""
Allocation Engine

Computes what every participant owes:

    untaxed_share = sum(item.price / len(attribution)) over attributed items
    total_owed    = (untaxed + untaxed * gst / 100) * (1 + service_tax / 100)

GST is applied first and service tax compounds on the GST-inclusive amount.

CRITICAL: Everything here is a pure function. Nothing is mutated, nothing
is cached, and malformed numbers count as zero instead of raising. The
engine is safe to call on every keystroke.
"""

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Mapping, Sequence

from bill_splitter.models.bill import (
    AllocationResult,
    BillTotals,
    InputIssue,
    Item,
    ParsedBill,
    ParticipantShare,
)


class SplitterError(Exception):
    """Base exception for bill splitter errors."""
    pass


class UnknownItemError(SplitterError, IndexError):
    """An assignment referred to an item that is not on the bill."""

    def __init__(self, index: int, item_count: int):
        self.index = index
        self.item_count = item_count
        super().__init__(
            f"No item at index {index}; the bill has {item_count} items"
        )


def _finite_or_zero(value: float) -> float:
    return value if math.isfinite(value) else 0.0


def round_amount(value: float, decimal_places: int = 2) -> Decimal:
    """Round an amount for display, halves rounded away from zero."""
    quantum = Decimal(1).scaleb(-decimal_places)
    return Decimal(repr(_finite_or_zero(value))).quantize(quantum, rounding=ROUND_HALF_UP)


def apply_taxes(untaxed: float, gst_rate: float, service_tax_rate: float) -> float:
    """Apply GST, then service tax on top of the GST-inclusive amount."""
    with_gst = untaxed + untaxed * (gst_rate / 100)
    return with_gst * (1 + service_tax_rate / 100)


def effective_attribution(item: Item, participants: Iterable[str]) -> tuple[str, ...]:
    """Attribution restricted to participants currently on the bill."""
    known = set(participants)
    return tuple(name for name in item.attributed_participants if name in known)


def compute_allocation(
    items: Sequence[Item],
    participants: Sequence[str],
    gst_rate: float = 0.0,
    service_tax_rate: float = 0.0,
    decimal_places: int = 2,
) -> AllocationResult:
    """
    Compute each participant's share of the bill.

    Args:
        items: Items with their attributions
        participants: Participant names, in display order
        gst_rate: GST percentage
        service_tax_rate: Service tax percentage, compounded after GST
        decimal_places: Rounding used for the displayed amounts

    Returns:
        AllocationResult with one share per participant, in order, and the
        items carrying their effective attribution
    """
    names = tuple(dict.fromkeys(participants))
    gst = _finite_or_zero(gst_rate)
    service = _finite_or_zero(service_tax_rate)

    untaxed = {name: 0.0 for name in names}
    item_subtotal = 0.0
    unattributed = 0.0
    effective_items = []

    for item in items:
        price = _finite_or_zero(item.price)
        attribution = effective_attribution(item, names)
        item_subtotal += price

        if attribution:
            per_person = price / len(attribution)
            for name in attribution:
                untaxed[name] += per_person
        else:
            # Nobody to divide by; the item contributes nothing
            unattributed += price

        effective_items.append(Item(
            name=item.name,
            price=price,
            attributed_participants=attribution,
        ))

    shares = []
    issues = []
    for name in names:
        total = apply_taxes(untaxed[name], gst, service)
        if not (math.isfinite(untaxed[name]) and math.isfinite(total)):
            # Sum ran past the float range; both figures count as zero
            untaxed[name] = total = 0.0
            issues.append(InputIssue(
                field="items",
                issue_type="amount_overflow",
                message=f"Amounts for '{name}' are too large to compute, counted as 0",
            ))
        shares.append(ParticipantShare(
            name=name,
            untaxed_share=untaxed[name],
            untaxed_share_rounded=round_amount(untaxed[name], decimal_places),
            total_owed=round_amount(total, decimal_places),
            gst_rate=gst,
            service_tax_rate=service,
        ))

    totals = BillTotals(
        item_subtotal=_finite_or_zero(item_subtotal),
        unattributed_amount=_finite_or_zero(unattributed),
        untaxed_total=sum(untaxed.values()),
        total_owed=sum((share.total_owed for share in shares), Decimal(0)),
    )

    return AllocationResult(
        participants=tuple(shares),
        items=tuple(effective_items),
        totals=totals,
        issues=tuple(issues),
    )


def allocate_bill(bill: ParsedBill, decimal_places: int = 2) -> AllocationResult:
    """Run the engine on a parsed bill, carrying its input issues along."""
    result = compute_allocation(
        bill.items,
        bill.participants,
        bill.gst_rate,
        bill.service_tax_rate,
        decimal_places=decimal_places,
    )
    return result.model_copy(update={"issues": bill.issues + result.issues})


# =============================================================================
# ASSIGNMENT OVERRIDES
# =============================================================================

def with_assignment(
    items: Sequence[Item],
    index: int,
    participants: Iterable[str],
) -> tuple[Item, ...]:
    """
    Return a new item tuple with one item's attribution replaced.

    The replacement may be any subset of participants, including none.
    Repeated names are counted once. The input sequence is left untouched.

    Raises:
        UnknownItemError: If index does not point at an item
    """
    if not 0 <= index < len(items):
        raise UnknownItemError(index, len(items))

    original = items[index]
    replacement = Item(
        name=original.name,
        price=original.price,
        attributed_participants=tuple(participants),
    )
    return tuple(items[:index]) + (replacement,) + tuple(items[index + 1:])


def apply_overrides(
    items: Sequence[Item],
    overrides: Mapping[int, Iterable[str]],
) -> tuple[Item, ...]:
    """
    Apply a mapping of item index to participants.

    Indexes past the end of the item list are ignored; the item they
    referred to no longer exists.
    """
    result = tuple(items)
    for index in sorted(overrides):
        if 0 <= index < len(result):
            result = with_assignment(result, index, overrides[index])
    return result


def restrict_overrides(
    overrides: Mapping[int, Iterable[str]],
    participants: Iterable[str],
) -> dict[int, tuple[str, ...]]:
    """Drop names that are no longer participants from every override."""
    known = set(participants)
    return {
        index: tuple(name for name in dict.fromkeys(names) if name in known)
        for index, names in overrides.items()
    }
