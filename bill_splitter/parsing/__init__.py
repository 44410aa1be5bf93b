"""Input parsing package."""

from bill_splitter.parsing.parser import (
    parse_bill,
    parse_item_line,
    parse_items,
    parse_participants,
    parse_rate,
    safe_number,
)

__all__ = [
    "parse_bill",
    "parse_item_line",
    "parse_items",
    "parse_participants",
    "parse_rate",
    "safe_number",
]
