"""Tests for configuration and event logging."""

import pytest

from bill_splitter.audit import SplitEventLogger, create_session_id
from bill_splitter.config import DEFAULT_PARTICIPANTS_TEXT, SplitterSettings, get_settings
from bill_splitter.models.events import SplitEventSeverity, SplitEventType


class TestSettings:
    """Tests for SplitterSettings."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("SPLITTER_RESET_GST_RATE", raising=False)
        settings = SplitterSettings(_env_file=None)
        assert settings.default_participants_text == DEFAULT_PARTICIPANTS_TEXT
        assert settings.default_gst_rate == 0.0
        assert settings.reset_gst_rate == 9.0
        assert settings.reset_service_tax_rate == 10.0
        assert settings.keep_blank_participants is False
        assert settings.preserve_overrides is True

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("SPLITTER_RESET_GST_RATE", "7")
        monkeypatch.setenv("SPLITTER_KEEP_BLANK_PARTICIPANTS", "true")
        settings = SplitterSettings(_env_file=None)
        assert settings.reset_gst_rate == 7.0
        assert settings.keep_blank_participants is True

    def test_log_level_is_normalised(self):
        assert SplitterSettings(log_level=" debug ", _env_file=None).log_level == "DEBUG"

    def test_log_level_rejects_unknown(self):
        with pytest.raises(ValueError, match="Unsupported log level"):
            SplitterSettings(log_level="LOUD", _env_file=None)

    def test_decimal_places_bounds(self):
        with pytest.raises(ValueError):
            SplitterSettings(display_decimal_places=-1, _env_file=None)

    def test_get_settings_is_cached(self):
        get_settings.cache_clear()
        assert get_settings() is get_settings()
        get_settings.cache_clear()


class TestEventLogger:
    """Tests for SplitEventLogger."""

    def test_session_id_attached(self):
        session_id = create_session_id()
        logger = SplitEventLogger(session_id=session_id)
        logger.log_bill_reset(revision=2)
        event = logger.events[-1]
        assert event.event_type == SplitEventType.BILL_RESET
        assert event.session_id == session_id
        assert event.revision == 2

    def test_recent_events_are_bounded(self):
        logger = SplitEventLogger(max_events=3)
        for revision in range(5):
            logger.log_bill_reset(revision=revision)
        assert [event.revision for event in logger.events] == [2, 3, 4]

    def test_stale_result_is_debug(self):
        logger = SplitEventLogger()
        logger.log_stale_result(stale_revision=1, current_revision=3)
        event = logger.events[-1]
        assert event.severity == SplitEventSeverity.DEBUG
        assert event.details == {"stale_revision": 1, "current_revision": 3}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
