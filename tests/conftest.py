# ABOUTME: Shared fixtures for building keystroke events and writing sessions
import pytest

from keystroke_analytics.utils import KeystrokeEvent, WritingSession


def _event(timestamp, value="a", key=None, event_type="keydown"):
    key = key if key is not None else value
    code = f"Key{key.upper()}" if len(key) == 1 else key
    return KeystrokeEvent(
        key=key, code=code, type=event_type, timestamp=timestamp, value=value
    )


@pytest.fixture
def make_event():
    """Factory for a single keydown (or keyup) event."""
    return _event


@pytest.fixture
def backspace():
    return lambda timestamp: _event(timestamp, value=None, key="Backspace")


@pytest.fixture
def typing_run():
    """Factory for evenly spaced character keydowns."""
    def build(start, count, spacing=100, value="a"):
        return [_event(start + i * spacing, value) for i in range(count)]
    return build


@pytest.fixture
def make_session():
    def build(events, start_time=None, end_time=None, session_id="session-1"):
        return WritingSession(
            id=session_id,
            user_id="student-1",
            document_id="doc-1",
            events=tuple(events),
            start_time=start_time,
            end_time=end_time,
            metadata={"documentTitle": "Essay", "privacyLevel": "full"},
        )
    return build
