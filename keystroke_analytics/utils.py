# ABOUTME: Shared utilities for the keystroke session analytics engine
import json
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import yaml


DELETION_KEYS = frozenset({"Backspace", "Delete"})
NEWLINE_KEYS = frozenset({"Enter"})
EVENT_TYPES = ("keydown", "keyup")


class SessionValidationError(ValueError):
    """Raised when a writing session cannot be analyzed at all."""


class ConfigurationError(ValueError):
    """Raised for analysis settings that make no sense."""


@dataclass(frozen=True)
class KeystrokeEvent:
    """One observed key action, timestamps in epoch milliseconds."""

    key: str
    code: str
    type: str
    timestamp: float
    value: Optional[str] = None
    cursor_position: Optional[int] = None
    id: Optional[str] = None

    @property
    def is_keydown(self) -> bool:
        return self.type == "keydown"

    @property
    def is_deletion(self) -> bool:
        return self.is_keydown and self.key in DELETION_KEYS

    @property
    def is_character(self) -> bool:
        """Keydown that puts a visible character (or a newline) in the text."""
        if not self.is_keydown or self.key in DELETION_KEYS:
            return False
        if self.key in NEWLINE_KEYS:
            return True
        return isinstance(self.value, str) and self.value != "" and self.value.isprintable()

    @property
    def is_productive(self) -> bool:
        return self.is_character or self.is_deletion

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the camelCase wire shape."""
        data: Dict[str, Any] = {
            "key": self.key,
            "code": self.code,
            "type": self.type,
            "timestamp": self.timestamp,
        }
        if self.id is not None:
            data["id"] = self.id
        if self.value is not None:
            data["value"] = self.value
        if self.cursor_position is not None:
            data["cursorPosition"] = self.cursor_position
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "KeystrokeEvent":
        """Create from a wire mapping; raises ValueError when malformed."""
        timestamp = data.get("timestamp")
        if not is_number(timestamp):
            raise ValueError(f"event has no numeric timestamp: {timestamp!r}")

        event_type = data.get("type", "keydown")
        if event_type not in EVENT_TYPES:
            raise ValueError(f"unknown event type: {event_type!r}")

        value = data.get("value")
        if value is not None and not isinstance(value, str):
            raise ValueError(f"event value must be text: {value!r}")

        cursor = data.get("cursorPosition", data.get("cursor_position"))
        return cls(
            key=str(data.get("key", "")),
            code=str(data.get("code", "")),
            type=event_type,
            timestamp=timestamp,
            value=value,
            cursor_position=cursor if isinstance(cursor, int) else None,
            id=data.get("id"),
        )


@dataclass(frozen=True)
class WritingSession:
    """A finalized recording handed to the engine for one analysis."""

    id: str
    user_id: str
    document_id: str
    events: Sequence[Union[KeystrokeEvent, Dict[str, Any]]] = ()
    start_time: Optional[float] = None
    end_time: Optional[float] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sessionId": self.id,
            "userId": self.user_id,
            "documentId": self.document_id,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "events": [
                e.to_dict() if isinstance(e, KeystrokeEvent) else dict(e)
                for e in self.events
            ],
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WritingSession":
        """Build a session from the HTTP/JSON body shape.

        Events are kept raw so the normalizer can count the malformed ones.
        """
        session_id = data.get("sessionId", data.get("id"))
        user_id = data.get("userId")
        document_id = data.get("documentId")
        missing = [
            name
            for name, value in (
                ("sessionId", session_id),
                ("userId", user_id),
                ("documentId", document_id),
            )
            if not value
        ]
        if missing:
            raise SessionValidationError(
                f"Missing required fields: {', '.join(missing)}"
            )

        events = data.get("events", [])
        if not isinstance(events, list):
            raise SessionValidationError("events must be a list")

        return cls(
            id=str(session_id),
            user_id=str(user_id),
            document_id=str(document_id),
            events=tuple(events),
            start_time=data.get("startTime"),
            end_time=data.get("endTime"),
            metadata=dict(data.get("metadata") or {}),
        )


class ConfigManager:
    """Configuration management with validation."""

    def __init__(self, config_path: Union[str, Path] = "config.yaml"):
        self.config_path = Path(config_path)
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration, falling back to defaults."""
        try:
            with open(self.config_path, "r") as f:
                config = yaml.safe_load(f)
        except FileNotFoundError:
            logging.warning(f"Config file {self.config_path} not found, using defaults")
            return self._default_config()
        except yaml.YAMLError as e:
            logging.error(f"Error parsing config file: {e}")
            return self._default_config()

        if not isinstance(config, dict):
            logging.warning(f"Config file {self.config_path} is empty, using defaults")
            return self._default_config()
        return _deep_merge(self._default_config(), config)

    def _default_config(self) -> Dict[str, Any]:
        """Default configuration values."""
        return {
            "analysis": {
                "short_pause_ms": 2000,
                "medium_pause_ms": 5000,
                "long_pause_ms": 15000,
                "minimum_burst_keystrokes": 5,
                "target_wpm": 30.0,
                "editing_ratio_threshold": 0.2,
                "focused_score_threshold": 70,
                "window_size_ms": 60000,
                "struggling_wpm_fraction": 0.4,
                "peak_extension_fraction": 0.5,
            },
            "scoring": {},
            "output": {
                "reports_directory": "./reports",
                "log_level": "INFO",
            },
        }

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value with dot notation."""
        keys = key.split(".")
        value = self.config
        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value


class SessionLoader:
    """Reads exported writing sessions from JSON files."""

    def __init__(self, source: Union[str, Path]):
        self.source = Path(source)

    def files(self) -> List[Path]:
        if self.source.is_dir():
            return sorted(self.source.glob("*.json"))
        return [self.source]

    def load_sessions(self) -> List[WritingSession]:
        """Load every session found; unreadable files are logged and skipped."""
        sessions = []
        for file_path in self.files():
            try:
                with open(file_path, "r") as f:
                    data = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                logging.error(f"Error loading {file_path}: {e}")
                continue

            items = data if isinstance(data, list) else [data]
            for item in items:
                try:
                    sessions.append(WritingSession.from_dict(item))
                except (SessionValidationError, AttributeError) as e:
                    logging.error(f"Skipping session in {file_path}: {e}")

        logging.info(f"Loaded {len(sessions)} writing sessions from {self.source}")
        return sessions


def setup_logging(level: str = "INFO", log_file: Optional[Union[str, Path]] = None) -> None:
    """Configure logging for the application."""
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )


def is_number(value: Any) -> bool:
    """True for real numbers, excluding bools and NaN/inf."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like a calculator does (2.5 -> 3), unlike round()."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def calculate_wpm(character_count: int, duration_ms: float, word_length: int = 5) -> float:
    """Calculate words per minute from a character count."""
    if duration_ms <= 0:
        return 0.0

    # Standard WPM calculation (5 characters = 1 word)
    words = character_count / word_length
    minutes = duration_ms / 60000

    return words / minutes


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged
