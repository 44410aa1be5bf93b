"""Allocation engine package."""

from bill_splitter.engine.allocation import (
    SplitterError,
    UnknownItemError,
    allocate_bill,
    apply_overrides,
    apply_taxes,
    compute_allocation,
    effective_attribution,
    restrict_overrides,
    round_amount,
    with_assignment,
)

__all__ = [
    # Exceptions
    "SplitterError",
    "UnknownItemError",
    # Allocation
    "allocate_bill",
    "apply_taxes",
    "compute_allocation",
    "effective_attribution",
    "round_amount",
    # Overrides
    "apply_overrides",
    "restrict_overrides",
    "with_assignment",
]
