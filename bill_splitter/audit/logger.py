"""
Session Event Logger

DESIGN DECISION: Every user action and every recomputation is logged.
This provides:
1. Traceability of how a bill reached its current split
2. Debugging capability when a share looks wrong

The logger:
- Is synchronous; the whole form recomputes synchronously anyway
- Never raises into the calculation path
- Tags every event with the session ID to group one user's edits
"""

import logging
from collections import deque
from typing import Optional
from uuid import UUID, uuid4

import structlog

from bill_splitter.models.bill import AllocationResult, InputIssue
from bill_splitter.models.events import (
    SplitEvent,
    SplitEventBuilder,
    SplitEventSeverity,
    SplitEventType,
)


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route structlog output through the standard library at the given level."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper()))


class SplitEventLogger:
    """
    Central event logging service for one bill-splitting session.
    """

    def __init__(self, session_id: Optional[UUID] = None, max_events: int = 500):
        """
        Initialize event logger.

        Args:
            session_id: ID attached to every event.
                        A new one is created if not given.
            max_events: How many recent events to keep in memory.
        """
        self.session_id = session_id or create_session_id()
        self._logger = structlog.get_logger("bill_splitter")
        self.events: deque[SplitEvent] = deque(maxlen=max_events)

    def log(self, event: SplitEvent) -> None:
        """Log an event at a level matching its severity."""
        self.events.append(event)
        log_dict = event.to_log_dict()

        if event.severity == SplitEventSeverity.WARNING:
            self._logger.warning("split_event", **log_dict)
        elif event.severity == SplitEventSeverity.DEBUG:
            self._logger.debug("split_event", **log_dict)
        else:
            self._logger.info("split_event", **log_dict)

    def log_input_edited(self, event_type: SplitEventType, revision: int, field: str) -> None:
        self.log(SplitEventBuilder.input_edited(
            event_type=event_type,
            session_id=self.session_id,
            revision=revision,
            field=field,
        ))

    def log_assignment_overridden(
        self,
        revision: int,
        item_index: int,
        participants: list[str],
    ) -> None:
        self.log(SplitEventBuilder.assignment_overridden(
            session_id=self.session_id,
            revision=revision,
            item_index=item_index,
            participants=participants,
        ))

    def log_overrides_dropped(self, revision: int, dropped_count: int, reason: str) -> None:
        self.log(SplitEventBuilder.overrides_dropped(
            session_id=self.session_id,
            revision=revision,
            dropped_count=dropped_count,
            reason=reason,
        ))

    def log_bill_reset(self, revision: int) -> None:
        self.log(SplitEventBuilder.bill_reset(
            session_id=self.session_id,
            revision=revision,
        ))

    def log_recomputed(self, result: AllocationResult) -> None:
        """Log a recomputation, plus any input issues it carried."""
        self.log(SplitEventBuilder.bill_recomputed(
            session_id=self.session_id,
            revision=result.revision,
            item_count=len(result.items),
            participant_count=len(result.participants),
            total_owed=str(result.totals.total_owed),
        ))
        if result.issues:
            self.log_input_issues(result.revision, list(result.issues))

    def log_input_issues(self, revision: int, issues: list[InputIssue]) -> None:
        self.log(SplitEventBuilder.input_issue_detected(
            session_id=self.session_id,
            revision=revision,
            issues=[issue.model_dump() for issue in issues],
        ))

    def log_stale_result(self, stale_revision: int, current_revision: int) -> None:
        self.log(SplitEventBuilder.stale_result_discarded(
            session_id=self.session_id,
            stale_revision=stale_revision,
            current_revision=current_revision,
        ))


def create_session_id() -> UUID:
    """
    Create a new session ID for grouping related events.

    Use this once per open form.
    """
    return uuid4()
