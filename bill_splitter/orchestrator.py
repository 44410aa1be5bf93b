"""
Session Orchestrator for Bill Splitter

This module ties parsing, overrides and the allocation engine together
into the reactive flow behind the form:

    raw text + tax rates + overrides → parse → apply overrides → allocate

DESIGN DECISION: The session holds one immutable SessionState. Every edit
replaces it with a new state carrying the next revision number and runs a
full synchronous recomputation. Results are published last-write-wins, so
a result computed from an older revision never replaces a newer one.
"""

from typing import Iterable, Mapping, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field

from bill_splitter.audit import SplitEventLogger
from bill_splitter.config import SplitterSettings, get_settings
from bill_splitter.engine import (
    UnknownItemError,
    allocate_bill,
    apply_overrides,
    restrict_overrides,
)
from bill_splitter.models.bill import AllocationResult, ParsedBill
from bill_splitter.models.events import SplitEventType
from bill_splitter.parsing import parse_bill


RateValue = Union[str, float, int, None]


class ItemAssignment(BaseModel):
    """Participants manually assigned to the item with the given name."""
    model_config = ConfigDict(frozen=True)

    item_name: str
    participants: tuple[str, ...] = ()


class SessionState(BaseModel):
    """
    Everything the form has committed so far.

    Overrides map an item index to a manual assignment. Each assignment
    remembers the name of the item it was made for, so it can follow that
    item when lines are inserted or removed above it. Names no longer on
    the participant list are ignored when the bill is evaluated.
    """
    model_config = ConfigDict(frozen=True)

    items_text: str = ""
    participants_text: str = ""
    gst_rate: RateValue = 0.0
    service_tax_rate: RateValue = 0.0
    overrides: dict[int, ItemAssignment] = Field(default_factory=dict)
    revision: int = Field(default=0, ge=0)


def follow_item_names(
    overrides: Mapping[int, ItemAssignment],
    item_names: Sequence[str],
) -> dict[int, ItemAssignment]:
    """
    Re-key manual assignments against a new list of item names.

    Assignments whose position still holds the same name are kept first.
    The rest move to the position of their item name if that name occurs
    exactly once and the position is free; anything else is left out.
    """
    in_place = {
        index
        for index, assignment in overrides.items()
        if index < len(item_names) and item_names[index] == assignment.item_name
    }
    kept = {index: overrides[index] for index in in_place}
    for index in sorted(set(overrides) - in_place):
        assignment = overrides[index]
        if item_names.count(assignment.item_name) != 1:
            continue
        target = item_names.index(assignment.item_name)
        if target not in kept:
            kept[target] = assignment
    return kept


class SplitSession:
    """
    Orchestrates one bill-splitting form.

    Flow:
    1. Edit → a new SessionState with the next revision
    2. Parse → items, participants, rates, input issues
    3. Override → manual assignments replace default attributions
    4. Allocate → per-participant shares
    5. Publish → newest revision wins
    """

    def __init__(
        self,
        settings: Optional[SplitterSettings] = None,
        event_logger: Optional[SplitEventLogger] = None,
        state: Optional[SessionState] = None,
    ):
        self._settings = settings or get_settings()
        self._events = event_logger or SplitEventLogger()
        if state is None:
            state = SessionState(
                items_text=self._settings.default_items_text,
                participants_text=self._settings.default_participants_text,
                gst_rate=self._settings.default_gst_rate,
                service_tax_rate=self._settings.default_service_tax_rate,
            )
        self._state = state
        self._result: Optional[AllocationResult] = None
        self.publish(self.evaluate())

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def result(self) -> AllocationResult:
        """The most recently published allocation."""
        return self._result

    @property
    def events(self) -> SplitEventLogger:
        return self._events

    # -------------------------------------------------------------------------
    # Evaluation
    # -------------------------------------------------------------------------

    def parse(self, state: Optional[SessionState] = None) -> ParsedBill:
        """Parse a state (the current one by default) with overrides applied."""
        if state is None:
            state = self._state
        bill = parse_bill(
            state.items_text,
            state.participants_text,
            state.gst_rate,
            state.service_tax_rate,
            keep_blank_participants=self._settings.keep_blank_participants,
        )
        if state.overrides:
            bill = bill.model_copy(update={
                "items": apply_overrides(bill.items, {
                    index: assignment.participants
                    for index, assignment in state.overrides.items()
                }),
            })
        return bill

    def evaluate(self, state: Optional[SessionState] = None) -> AllocationResult:
        """
        Compute the allocation for a state without publishing it.

        Pure with respect to the session: calling it twice on the same
        state gives equal results.
        """
        if state is None:
            state = self._state
        result = allocate_bill(
            self.parse(state),
            decimal_places=self._settings.display_decimal_places,
        )
        return result.model_copy(update={"revision": state.revision})

    def publish(self, result: AllocationResult) -> bool:
        """
        Publish a result unless a newer revision is already published.

        Returns True if the result was accepted.
        """
        if self._result is not None and result.revision < self._result.revision:
            self._events.log_stale_result(result.revision, self._result.revision)
            return False
        self._result = result
        self._events.log_recomputed(result)
        return True

    def _commit(self, **changes) -> AllocationResult:
        """Replace the state with an updated copy and recompute."""
        changes["revision"] = self._state.revision + 1
        self._state = self._state.model_copy(update=changes)
        self.publish(self.evaluate())
        return self._result

    # -------------------------------------------------------------------------
    # Edits
    # -------------------------------------------------------------------------

    def set_items_text(self, text: str) -> AllocationResult:
        """
        Replace the item list.

        Manual assignments stay with the item they were made for. An
        assignment is kept while its position still holds an item of the
        same name, moves to the item's new position when that name appears
        exactly once in the new list, and is dropped otherwise.
        """
        overrides = follow_item_names(
            self._state.overrides,
            [item.name for item in parse_bill(text, "").items],
        )
        dropped = len(self._state.overrides) - len(overrides)

        result = self._commit(items_text=text, overrides=overrides)
        self._events.log_input_edited(SplitEventType.ITEMS_EDITED, result.revision, "items")
        if dropped:
            self._events.log_overrides_dropped(result.revision, dropped, "item renamed or removed")
        return result

    def set_participants_text(self, text: str) -> AllocationResult:
        """
        Replace the participant list.

        With preserve_overrides enabled, manual assignments are kept and
        simply ignore names that are no longer listed. Otherwise every
        item goes back to being split among all participants.
        """
        overrides = self._state.overrides
        dropped = 0
        if not self._settings.preserve_overrides and text != self._state.participants_text:
            dropped = len(overrides)
            overrides = {}

        result = self._commit(participants_text=text, overrides=overrides)
        self._events.log_input_edited(
            SplitEventType.PARTICIPANTS_EDITED, result.revision, "participants"
        )
        if dropped:
            self._events.log_overrides_dropped(result.revision, dropped, "participant list changed")
        return result

    def set_tax_rates(
        self,
        gst_rate: RateValue = None,
        service_tax_rate: RateValue = None,
    ) -> AllocationResult:
        """Update GST and/or service tax. A rate left as None is unchanged."""
        changes = {}
        if gst_rate is not None:
            changes["gst_rate"] = gst_rate
        if service_tax_rate is not None:
            changes["service_tax_rate"] = service_tax_rate

        result = self._commit(**changes)
        self._events.log_input_edited(
            SplitEventType.TAX_RATES_EDITED, result.revision, ",".join(changes) or "none"
        )
        return result

    def assign(self, item_index: int, participants: Iterable[str]) -> AllocationResult:
        """
        Manually assign an item to a subset of the participants.

        The subset may be empty. Repeated names count once and names not
        on the participant list are ignored.

        Raises:
            UnknownItemError: If item_index is not on the bill
        """
        bill = self.parse()
        if not 0 <= item_index < len(bill.items):
            raise UnknownItemError(item_index, len(bill.items))

        names = restrict_overrides({item_index: participants}, bill.participants)[item_index]
        overrides = dict(self._state.overrides)
        overrides[item_index] = ItemAssignment(
            item_name=bill.items[item_index].name,
            participants=names,
        )

        result = self._commit(overrides=overrides)
        self._events.log_assignment_overridden(result.revision, item_index, list(names))
        return result

    def assign_many(self, overrides: Mapping[int, Iterable[str]]) -> AllocationResult:
        """Apply several manual assignments as one edit."""
        bill = self.parse()
        for index in overrides:
            if not 0 <= index < len(bill.items):
                raise UnknownItemError(index, len(bill.items))

        merged = dict(self._state.overrides)
        for index, names in restrict_overrides(overrides, bill.participants).items():
            merged[index] = ItemAssignment(item_name=bill.items[index].name, participants=names)

        result = self._commit(overrides=merged)
        for index in sorted(overrides):
            self._events.log_assignment_overridden(
                result.revision, index, list(merged[index].participants)
            )
        return result

    def reset(self) -> AllocationResult:
        """
        Restore the baseline item text, participant text and tax rates.

        All four values and the manual assignments change in one commit.
        """
        result = self._commit(
            items_text=self._settings.reset_items_text,
            participants_text=self._settings.reset_participants_text,
            gst_rate=self._settings.reset_gst_rate,
            service_tax_rate=self._settings.reset_service_tax_rate,
            overrides={},
        )
        self._events.log_bill_reset(result.revision)
        return result


def create_session(
    settings: Optional[SplitterSettings] = None,
) -> SplitSession:
    """
    Factory function to create a session with its own event logger.

    Args:
        settings: Settings to use. Defaults to the cached environment settings.
    """
    return SplitSession(
        settings=settings,
        event_logger=SplitEventLogger(),
    )
