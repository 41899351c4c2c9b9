# ABOUTME: Unit tests for utility functions and input data structures
import json
import tempfile
from pathlib import Path

import pytest

from keystroke_analytics.utils import (
    ConfigManager,
    KeystrokeEvent,
    SessionLoader,
    SessionValidationError,
    WritingSession,
    calculate_wpm,
    is_number,
    round_half_up,
)


class TestKeystrokeEvent:
    """Test KeystrokeEvent classification and serialization."""

    def test_character_keydown_is_productive(self, make_event):
        event = make_event(1000, "a")

        assert event.is_character is True
        assert event.is_productive is True
        assert event.is_deletion is False

    def test_keyup_is_never_productive(self, make_event):
        event = make_event(1000, "a", event_type="keyup")

        assert event.is_character is False
        assert event.is_productive is False

    def test_deletion_keys(self, make_event):
        for key in ("Backspace", "Delete"):
            event = make_event(1000, value=None, key=key)
            assert event.is_deletion is True
            assert event.is_productive is True
            # Deletions do not add characters
            assert event.is_character is False

    def test_enter_counts_as_newline_character(self, make_event):
        event = make_event(1000, value="\n", key="Enter")
        assert event.is_character is True

    def test_navigation_and_modifier_keys(self, make_event):
        for key in ("ArrowLeft", "Shift", "F5", "Tab"):
            event = make_event(1000, value=None, key=key)
            assert event.is_productive is False

        # A tab character is not printable text
        assert make_event(1000, value="\t", key="Tab").is_productive is False

    def test_event_serialization(self):
        """Test event serialization to/from dict."""
        original = KeystrokeEvent(
            key="a",
            code="KeyA",
            type="keydown",
            timestamp=1700000000123,
            value="a",
            cursor_position=42,
            id="evt-1",
        )

        data = original.to_dict()
        assert data["cursorPosition"] == 42
        assert data["timestamp"] == 1700000000123

        restored = KeystrokeEvent.from_dict(data)
        assert restored == original

    def test_from_dict_rejects_malformed_events(self):
        with pytest.raises(ValueError):
            KeystrokeEvent.from_dict({"key": "a", "type": "keydown"})
        with pytest.raises(ValueError):
            KeystrokeEvent.from_dict({"key": "a", "timestamp": "soon"})
        with pytest.raises(ValueError):
            KeystrokeEvent.from_dict({"key": "a", "timestamp": True})
        with pytest.raises(ValueError):
            KeystrokeEvent.from_dict({"key": "a", "type": "press", "timestamp": 5})
        with pytest.raises(ValueError):
            KeystrokeEvent.from_dict({"key": "5", "timestamp": 5, "value": 5})

    def test_non_text_value_is_not_a_character(self):
        event = KeystrokeEvent(key="5", code="Digit5", type="keydown", timestamp=0, value=5)

        assert event.is_character is False
        assert event.is_productive is False
        assert KeystrokeEvent(key="a", code="KeyA", type="keydown", timestamp=0, value="").is_character is False


class TestWritingSession:
    """Test building sessions from the JSON body shape."""

    def test_from_dict(self):
        session = WritingSession.from_dict(
            {
                "sessionId": "s-1",
                "userId": "u-1",
                "documentId": "d-1",
                "startTime": 1000,
                "endTime": 5000,
                "events": [{"key": "a", "timestamp": 1200}],
                "metadata": {"assignmentType": "essay"},
            }
        )

        assert session.id == "s-1"
        assert session.start_time == 1000
        assert session.end_time == 5000
        assert len(session.events) == 1
        assert session.metadata["assignmentType"] == "essay"

    def test_missing_required_fields(self):
        with pytest.raises(SessionValidationError) as excinfo:
            WritingSession.from_dict({"sessionId": "s-1", "events": []})

        assert "userId" in str(excinfo.value)
        assert "documentId" in str(excinfo.value)

    def test_events_must_be_a_list(self):
        with pytest.raises(SessionValidationError):
            WritingSession.from_dict(
                {"sessionId": "s", "userId": "u", "documentId": "d", "events": "abc"}
            )


class TestConfigManager:
    """Test configuration management."""

    def test_yaml_config(self):
        """Test loading values from a YAML file."""
        with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
            f.write("""
analysis:
  short_pause_ms: 1500
  target_wpm: 45
output:
  log_level: DEBUG
            """)
            config_path = f.name

        try:
            config = ConfigManager(config_path)
            assert config.get("analysis.short_pause_ms") == 1500
            assert config.get("analysis.target_wpm") == 45
            # Unspecified keys keep their defaults
            assert config.get("analysis.window_size_ms") == 60000
            assert config.get("output.log_level") == "DEBUG"
            assert config.get("nonexistent.key", "default") == "default"
        finally:
            Path(config_path).unlink()

    def test_missing_config_file(self):
        """Test behavior with missing config file."""
        config = ConfigManager("nonexistent.yaml")
        # Should use defaults
        assert config.get("analysis.short_pause_ms") == 2000
        assert config.get("analysis.struggling_wpm_fraction") == 0.4

    def test_invalid_yaml_falls_back_to_defaults(self, tmp_path):
        config_path = tmp_path / "broken.yaml"
        config_path.write_text("analysis: [unclosed\n")

        config = ConfigManager(config_path)
        assert config.get("analysis.long_pause_ms") == 15000


class TestSessionLoader:
    """Test reading sessions from JSON files."""

    def _session(self, session_id):
        return {
            "sessionId": session_id,
            "userId": "u-1",
            "documentId": "d-1",
            "events": [{"key": "a", "value": "a", "timestamp": 100}],
        }

    def test_loads_directory_and_skips_broken_files(self, tmp_path):
        (tmp_path / "a.json").write_text(json.dumps(self._session("s-1")))
        (tmp_path / "b.json").write_text(
            json.dumps([self._session("s-2"), self._session("s-3")])
        )
        (tmp_path / "c.json").write_text("{not json")
        (tmp_path / "d.json").write_text(json.dumps({"sessionId": "no-user"}))

        sessions = SessionLoader(tmp_path).load_sessions()

        assert [s.id for s in sessions] == ["s-1", "s-2", "s-3"]

    def test_loads_single_file(self, tmp_path):
        path = tmp_path / "session.json"
        path.write_text(json.dumps(self._session("only")))

        sessions = SessionLoader(path).load_sessions()
        assert len(sessions) == 1
        assert sessions[0].events[0]["timestamp"] == 100


class TestUtilityFunctions:
    """Test utility functions."""

    def test_wpm_calculation(self):
        """Test words per minute calculation."""
        # 25 characters (5 words) in 60 seconds = 5 WPM
        assert calculate_wpm(25, 60000) == 5.0
        assert calculate_wpm(25, 30000) == 10.0

        # Test with zero duration
        assert calculate_wpm(25, 0) == 0.0

    def test_round_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(82.5) == 83
        assert round_half_up(-0.4) == 0
        assert round_half_up(133.3333, 2) == 133.33

    def test_is_number(self):
        assert is_number(5)
        assert is_number(5.5)
        assert not is_number(True)
        assert not is_number("5")
        assert not is_number(None)
        assert not is_number(float("nan"))


if __name__ == "__main__":
    pytest.main([__file__])
