"""
Session Event Models for Bill Splitter

Every user action on the form and every recomputation is described by an
event. Events are only logged; nothing is persisted.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class SplitEventType(str, Enum):
    """Types of events a session emits."""
    # Input edits
    ITEMS_EDITED = "items_edited"
    PARTICIPANTS_EDITED = "participants_edited"
    TAX_RATES_EDITED = "tax_rates_edited"
    ASSIGNMENT_OVERRIDDEN = "assignment_overridden"
    OVERRIDES_DROPPED = "overrides_dropped"
    BILL_RESET = "bill_reset"

    # Computation
    BILL_RECOMPUTED = "bill_recomputed"
    INPUT_ISSUE_DETECTED = "input_issue_detected"
    STALE_RESULT_DISCARDED = "stale_result_discarded"


class SplitEventSeverity(str, Enum):
    """Severity level for session events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"


class SplitEvent(BaseModel):
    """A single session event."""

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )
    event_type: SplitEventType
    severity: SplitEventSeverity = SplitEventSeverity.INFO

    session_id: Optional[UUID] = Field(
        default=None,
        description="Session the event belongs to"
    )
    revision: Optional[int] = Field(
        default=None,
        description="Input revision the event refers to"
    )
    description: str = Field(
        ...,
        max_length=500
    )
    details: dict[str, Any] = Field(default_factory=dict)
    is_user_action: bool = False

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "session_id": str(self.session_id) if self.session_id else None,
            "revision": self.revision,
            "description": self.description,
            "details": self.details,
            "is_user_action": self.is_user_action,
        }


class SplitEventBuilder:
    """
    Helper class to build session events with common patterns.

    Usage:
        event = SplitEventBuilder.bill_reset(session_id, revision)
        event = SplitEventBuilder.bill_recomputed(session_id, revision, 9, 9)
    """

    @staticmethod
    def input_edited(
        event_type: SplitEventType,
        session_id: UUID,
        revision: int,
        field: str,
    ) -> SplitEvent:
        return SplitEvent(
            event_type=event_type,
            session_id=session_id,
            revision=revision,
            description=f"User edited {field}",
            details={"field": field},
            is_user_action=True,
        )

    @staticmethod
    def assignment_overridden(
        session_id: UUID,
        revision: int,
        item_index: int,
        participants: list[str],
    ) -> SplitEvent:
        return SplitEvent(
            event_type=SplitEventType.ASSIGNMENT_OVERRIDDEN,
            session_id=session_id,
            revision=revision,
            description=f"Item {item_index} assigned to {len(participants)} participants",
            details={
                "item_index": item_index,
                "participants": participants,
            },
            is_user_action=True,
        )

    @staticmethod
    def overrides_dropped(
        session_id: UUID,
        revision: int,
        dropped_count: int,
        reason: str,
    ) -> SplitEvent:
        return SplitEvent(
            event_type=SplitEventType.OVERRIDES_DROPPED,
            session_id=session_id,
            revision=revision,
            description=f"{dropped_count} manual assignments dropped: {reason}",
            details={
                "dropped_count": dropped_count,
                "reason": reason,
            },
        )

    @staticmethod
    def bill_reset(
        session_id: UUID,
        revision: int,
    ) -> SplitEvent:
        return SplitEvent(
            event_type=SplitEventType.BILL_RESET,
            session_id=session_id,
            revision=revision,
            description="Bill reset to baseline values",
            is_user_action=True,
        )

    @staticmethod
    def bill_recomputed(
        session_id: UUID,
        revision: int,
        item_count: int,
        participant_count: int,
        total_owed: str,
    ) -> SplitEvent:
        return SplitEvent(
            event_type=SplitEventType.BILL_RECOMPUTED,
            severity=SplitEventSeverity.DEBUG,
            session_id=session_id,
            revision=revision,
            description=f"Bill recomputed: {item_count} items, {participant_count} participants",
            details={
                "item_count": item_count,
                "participant_count": participant_count,
                "total_owed": total_owed,
            },
        )

    @staticmethod
    def input_issue_detected(
        session_id: UUID,
        revision: int,
        issues: list[dict],
    ) -> SplitEvent:
        return SplitEvent(
            event_type=SplitEventType.INPUT_ISSUE_DETECTED,
            severity=SplitEventSeverity.WARNING,
            session_id=session_id,
            revision=revision,
            description=f"Input has {len(issues)} issues",
            details={"issues": issues},
        )

    @staticmethod
    def stale_result_discarded(
        session_id: UUID,
        stale_revision: int,
        current_revision: int,
    ) -> SplitEvent:
        return SplitEvent(
            event_type=SplitEventType.STALE_RESULT_DISCARDED,
            severity=SplitEventSeverity.DEBUG,
            session_id=session_id,
            revision=stale_revision,
            description=(
                f"Discarded result for revision {stale_revision}; "
                f"revision {current_revision} already published"
            ),
            details={
                "stale_revision": stale_revision,
                "current_revision": current_revision,
            },
        )
