"""
Input Parsing

Turns the raw form text into structured entities:
- Item list: one "name price" per line, split on the first whitespace run
- Participant list: one name per line
- Tax rates: plain percentages

IMPORTANT: Parsing never raises on bad input. A malformed number becomes
0.0 and an InputIssue is recorded, so the form always shows a result while
the user is still typing.
"""

import math
from typing import Optional, Union

from bill_splitter.models.bill import InputIssue, Item, ParsedBill


RateInput = Union[str, float, int, None]

_FIELD_LABELS = {
    "gst_rate": "GST",
    "service_tax_rate": "Service tax",
}


def safe_number(value: RateInput) -> Optional[float]:
    """
    Safely convert a value to a finite float.

    Returns None for blanks, unparseable text, NaN and infinities.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    if not math.isfinite(number):
        return None
    return number


def parse_rate(value: RateInput, field: str) -> tuple[float, list[InputIssue]]:
    """
    Parse a tax rate percentage.

    Rates are not bounded; 150 or -5 are accepted as typed.
    Blank or malformed input counts as 0.
    """
    number = safe_number(value)
    if number is not None:
        return number, []

    blank = value is None or (isinstance(value, str) and not value.strip())
    issue = InputIssue(
        field=field,
        issue_type="missing_number" if blank else "invalid_number",
        message=(
            f"{_FIELD_LABELS.get(field, field)} is empty, using 0"
            if blank
            else f"{_FIELD_LABELS.get(field, field)} '{value}' is not a number, using 0"
        ),
        raw_value=None if value is None else str(value),
    )
    return 0.0, [issue]


def parse_participants(
    raw_text: str,
    keep_blank: bool = False,
) -> tuple[tuple[str, ...], list[InputIssue]]:
    """
    Parse the participant list, one name per line.

    Surrounding whitespace is stripped from each name. Blank lines are
    skipped unless keep_blank is set, in which case each blank line yields
    an empty-named participant. Repeated names collapse into the first
    occurrence so their shares merge.
    """
    issues = []
    names: dict[str, None] = {}

    for line_number, line in enumerate((raw_text or "").split("\n"), start=1):
        name = line.strip()
        if not name and not keep_blank:
            continue
        if name in names:
            issues.append(InputIssue(
                field="participants",
                issue_type="duplicate_participant",
                message=f"'{name}' is listed more than once; shares are merged",
                severity="info",
                line_number=line_number,
                raw_value=line,
            ))
            continue
        names[name] = None

    return tuple(names), issues


def parse_item_line(
    line: str,
    line_number: int,
    participants: tuple[str, ...],
) -> tuple[Optional[Item], list[InputIssue]]:
    """Parse a single item line. Blank lines give no item."""
    stripped = line.strip()
    if not stripped:
        return None, []

    parts = stripped.split(None, 1)
    name = parts[0]
    raw_price = parts[1] if len(parts) > 1 else None

    issues = []
    price = safe_number(raw_price)
    if price is None:
        if raw_price is None:
            issues.append(InputIssue(
                field="items",
                issue_type="missing_price",
                message=f"'{name}' has no price, counted as 0",
                line_number=line_number,
                raw_value=line,
            ))
        else:
            issues.append(InputIssue(
                field="items",
                issue_type="invalid_price",
                message=f"'{raw_price}' is not a valid price for '{name}', counted as 0",
                line_number=line_number,
                raw_value=line,
            ))
        price = 0.0
    elif price < 0:
        issues.append(InputIssue(
            field="items",
            issue_type="negative_price",
            message=f"'{name}' has a negative price and reduces the bill",
            severity="info",
            line_number=line_number,
            raw_value=line,
        ))

    item = Item(
        name=name,
        price=price,
        attributed_participants=participants,
    )
    return item, issues


def parse_items(
    raw_text: str,
    participants: tuple[str, ...],
) -> tuple[tuple[Item, ...], list[InputIssue]]:
    """
    Parse the item list.

    Every item starts out attributed to the complete participant list,
    i.e. split evenly among everyone.
    """
    items = []
    issues = []

    for line_number, line in enumerate((raw_text or "").split("\n"), start=1):
        item, line_issues = parse_item_line(line, line_number, participants)
        issues.extend(line_issues)
        if item is not None:
            items.append(item)

    return tuple(items), issues


def parse_bill(
    raw_items_text: str,
    raw_participants_text: str,
    gst_rate: RateInput = 0.0,
    service_tax_rate: RateInput = 0.0,
    keep_blank_participants: bool = False,
) -> ParsedBill:
    """Parse the complete form input into a ParsedBill."""
    participants, participant_issues = parse_participants(
        raw_participants_text,
        keep_blank=keep_blank_participants,
    )
    items, item_issues = parse_items(raw_items_text, participants)
    gst, gst_issues = parse_rate(gst_rate, "gst_rate")
    service, service_issues = parse_rate(service_tax_rate, "service_tax_rate")

    return ParsedBill(
        items=items,
        participants=participants,
        gst_rate=gst,
        service_tax_rate=service,
        issues=tuple(item_issues + participant_issues + gst_issues + service_issues),
    )

