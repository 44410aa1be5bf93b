"""
Data Models Package

This package contains all Pydantic models used in the Bill Splitter.
All data flowing through the system must conform to these schemas.
"""

from bill_splitter.models.bill import (
    AllocationResult,
    BillTotals,
    InputIssue,
    Item,
    ParsedBill,
    ParticipantShare,
)
from bill_splitter.models.events import (
    SplitEvent,
    SplitEventBuilder,
    SplitEventSeverity,
    SplitEventType,
)

__all__ = [
    # Bill models
    "AllocationResult",
    "BillTotals",
    "InputIssue",
    "Item",
    "ParsedBill",
    "ParticipantShare",
    # Event models
    "SplitEvent",
    "SplitEventBuilder",
    "SplitEventSeverity",
    "SplitEventType",
]
