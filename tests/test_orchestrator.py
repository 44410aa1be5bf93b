"""Tests for the reactive session flow."""

import pytest
from decimal import Decimal

from bill_splitter.audit import SplitEventLogger
from bill_splitter.config import SplitterSettings
from bill_splitter.engine import UnknownItemError, compute_allocation
from bill_splitter.models.events import SplitEventType
from bill_splitter.orchestrator import SessionState, SplitSession
from bill_splitter.parsing import parse_bill


@pytest.fixture
def settings():
    return SplitterSettings(
        default_items_text="soup 100\negg 4",
        default_participants_text="A\nB",
        default_gst_rate=0,
        default_service_tax_rate=0,
    )


@pytest.fixture
def session(settings):
    return SplitSession(settings=settings, event_logger=SplitEventLogger())


def owed(session, name):
    return session.result.share_for(name).total_owed


def event_types(session):
    return [event.event_type for event in session.events.events]


class TestSessionStart:
    """Tests for the initial state."""

    def test_starts_from_settings(self, session):
        assert session.state.items_text == "soup 100\negg 4"
        assert session.state.revision == 0
        assert owed(session, "A") == Decimal("52.00")
        assert owed(session, "B") == Decimal("52.00")

    def test_default_settings_bill(self):
        session = SplitSession(settings=SplitterSettings())
        assert len(session.result.items) == 9
        assert len(session.result.participants) == 9
        assert session.result.totals.item_subtotal == pytest.approx(160.7)

    def test_explicit_state(self, settings):
        state = SessionState(items_text="rice 9", participants_text="A\nB\nC", gst_rate="10")
        session = SplitSession(settings=settings, state=state)
        assert owed(session, "C") == Decimal("3.30")


class TestSessionEdits:
    """Tests for edits and recomputation."""

    def test_items_edit(self, session):
        result = session.set_items_text("soup 100")
        assert result.revision == 1
        assert owed(session, "A") == Decimal("50.00")
        assert SplitEventType.ITEMS_EDITED in event_types(session)

    def test_tax_edit(self, session):
        session.set_items_text("soup 100")
        session.set_tax_rates(gst_rate=10, service_tax_rate="10")
        assert owed(session, "A") == Decimal("60.50")

    def test_single_rate_edit_keeps_other(self, session):
        session.set_tax_rates(gst_rate=10, service_tax_rate=10)
        session.set_tax_rates(gst_rate="0")
        assert session.state.service_tax_rate == 10
        assert session.state.gst_rate == "0"

    def test_malformed_rate_does_not_block(self, session):
        result = session.set_tax_rates(gst_rate="abc")
        assert owed(session, "A") == Decimal("52.00")
        assert result.issues[0].field == "gst_rate"
        assert SplitEventType.INPUT_ISSUE_DETECTED in event_types(session)

    def test_participant_removal_shrinks_divisor(self, session):
        session.set_participants_text("A\nB\nC")
        assert owed(session, "C") == Decimal("34.67")
        session.set_participants_text("A\nB")
        assert owed(session, "A") == Decimal("52.00")
        assert session.result.share_for("C") is None
        assert all("C" not in item.attributed_participants for item in session.result.items)

    def test_state_is_replaced_not_mutated(self, session):
        before = session.state
        session.set_items_text("soup 1")
        assert before.items_text == "soup 100\negg 4"
        assert session.state is not before


class TestSessionAssignments:
    """Tests for manual item assignments."""

    def test_assign_subset(self, session):
        session.assign(0, ["A"])
        assert owed(session, "A") == Decimal("102.00")
        assert owed(session, "B") == Decimal("2.00")
        assert session.result.items[0].attributed_participants == ("A",)
        assert SplitEventType.ASSIGNMENT_OVERRIDDEN in event_types(session)

    def test_assign_empty(self, session):
        session.assign(0, [])
        assert owed(session, "A") == Decimal("2.00")
        assert session.result.totals.unattributed_amount == 100.0

    def test_assign_deduplicates(self, session):
        session.assign(0, ["A", "A", "B"])
        assert session.state.overrides[0].participants == ("A", "B")
        assert owed(session, "A") == Decimal("52.00")

    def test_assign_ignores_unknown_names(self, session):
        session.assign(0, ["A", "Zed"])
        assert session.state.overrides[0].participants == ("A",)

    def test_assign_unknown_item(self, session):
        with pytest.raises(UnknownItemError):
            session.assign(2, ["A"])
        assert session.state.revision == 0

    def test_assign_many(self, session):
        result = session.assign_many({0: ["A"], 1: ["B"]})
        assert result.revision == 1
        assert owed(session, "A") == Decimal("100.00")
        assert owed(session, "B") == Decimal("4.00")

    def test_assign_many_rejects_unknown_item(self, session):
        with pytest.raises(UnknownItemError):
            session.assign_many({0: ["A"], 9: ["B"]})
        assert session.state.overrides == {}

    def test_overrides_survive_participant_edit(self, session):
        session.assign(0, ["A"])
        session.set_participants_text("A\nB\nC")
        assert session.result.items[0].attributed_participants == ("A",)
        assert session.result.items[1].attributed_participants == ("A", "B", "C")

    def test_overrides_skip_removed_participant(self, session):
        session.assign(0, ["A", "B"])
        session.set_participants_text("B")
        assert owed(session, "B") == Decimal("104.00")

    def test_overrides_cleared_when_not_preserved(self, settings):
        settings = settings.model_copy(update={"preserve_overrides": False})
        session = SplitSession(settings=settings)
        session.assign(0, ["A"])
        session.set_participants_text("A\nB\nC")
        assert session.state.overrides == {}
        assert session.result.items[0].attributed_participants == ("A", "B", "C")
        assert SplitEventType.OVERRIDES_DROPPED in event_types(session)

    def test_overrides_survive_item_edit(self, session):
        session.assign(0, ["A"])
        session.set_items_text("soup 200\negg 4")
        assert owed(session, "A") == Decimal("202.00")

    def test_overrides_past_end_are_dropped(self, session):
        session.assign(1, ["B"])
        session.set_items_text("soup 100")
        assert session.state.overrides == {}
        assert SplitEventType.OVERRIDES_DROPPED in event_types(session)

    def test_assignment_remembers_item_name(self, session):
        session.assign(1, ["B"])
        assert session.state.overrides[1].item_name == "egg"

    def test_inserted_line_keeps_assignment_on_item(self, session):
        """A line added above an assigned item must not shift the assignment."""
        session.assign(0, ["A"])
        session.set_items_text("rice 10\nsoup 100\negg 4")
        attributions = [
            (item.name, item.attributed_participants) for item in session.result.items
        ]
        assert attributions == [
            ("rice", ("A", "B")),
            ("soup", ("A",)),
            ("egg", ("A", "B")),
        ]
        assert owed(session, "A") == Decimal("107.00")
        assert SplitEventType.OVERRIDES_DROPPED not in event_types(session)

    def test_deleted_line_keeps_assignment_on_item(self, session):
        session.assign(1, ["B"])
        session.set_items_text("egg 4")
        assert session.result.items[0].attributed_participants == ("B",)
        assert owed(session, "A") == Decimal("0.00")

    def test_renamed_item_drops_assignment(self, session):
        session.assign(0, ["A"])
        session.set_items_text("broth 100\negg 4")
        assert session.state.overrides == {}
        assert session.result.items[0].attributed_participants == ("A", "B")
        assert SplitEventType.OVERRIDES_DROPPED in event_types(session)

    def test_ambiguous_name_drops_moved_assignment(self, session):
        session.assign(0, ["A"])
        session.set_items_text("rice 10\nsoup 100\nsoup 5")
        assert session.state.overrides == {}
        assert SplitEventType.OVERRIDES_DROPPED in event_types(session)


class TestSessionReset:
    """Tests for the reset action."""

    def test_reset_restores_baseline(self, session, settings):
        session.assign(0, ["A"])
        result = session.reset()
        state = session.state
        assert state.items_text == settings.reset_items_text == ""
        assert state.participants_text == settings.reset_participants_text == ""
        assert state.gst_rate == settings.reset_gst_rate == 9.0
        assert state.service_tax_rate == settings.reset_service_tax_rate == 10.0
        assert state.overrides == {}
        assert result.participants == ()
        assert SplitEventType.BILL_RESET in event_types(session)

    def test_reset_matches_direct_computation(self, settings):
        settings = settings.model_copy(update={
            "reset_items_text": "soup 100",
            "reset_participants_text": "A\nB",
        })
        session = SplitSession(settings=settings)
        session.set_tax_rates(gst_rate=0, service_tax_rate=0)
        result = session.reset()

        bill = parse_bill("soup 100", "A\nB", 9.0, 10.0)
        direct = compute_allocation(bill.items, bill.participants, bill.gst_rate, bill.service_tax_rate)
        assert result.participants == direct.participants
        assert result.share_for("A").total_owed == Decimal("59.95")

    def test_reset_is_one_revision(self, session):
        result = session.reset()
        assert result.revision == 1


class TestLastWriteWins:
    """Tests for publishing results."""

    def test_stale_result_is_discarded(self, session):
        stale = session.evaluate()
        session.set_items_text("soup 10")
        assert session.publish(stale) is False
        assert session.result.revision == 1
        assert owed(session, "A") == Decimal("5.00")
        assert SplitEventType.STALE_RESULT_DISCARDED in event_types(session)

    def test_same_revision_is_accepted(self, session):
        assert session.publish(session.evaluate()) is True

    def test_evaluate_is_idempotent(self, session):
        session.assign(1, ["B"])
        assert session.evaluate() == session.evaluate()
        assert session.evaluate() == session.result


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
