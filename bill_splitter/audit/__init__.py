"""Session event logging package."""

from bill_splitter.audit.logger import (
    SplitEventLogger,
    configure_logging,
    create_session_id,
)

__all__ = ["SplitEventLogger", "configure_logging", "create_session_id"]
