# ABOUTME: Immutable result records produced by the analytics pipeline
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from .utils import KeystrokeEvent


SHORT = "short"
MEDIUM = "medium"
LONG = "long"

SESSION_TYPES = ("focused", "exploratory", "distracted", "editing")


@dataclass(frozen=True)
class TimeRange:
    start: float
    end: float

    @property
    def duration(self) -> float:
        return self.end - self.start

    def to_dict(self) -> Dict[str, Any]:
        return {"start": self.start, "end": self.end, "duration": self.duration}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TimeRange":
        return cls(start=data["start"], end=data["end"])


@dataclass(frozen=True)
class Pause:
    """An inter-event gap at or above the short-pause threshold."""

    start_time: float
    end_time: float
    category: str

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time


@dataclass(frozen=True)
class Burst:
    """A maximal span of activity not interrupted by a pause."""

    start_time: float
    end_time: float
    keystrokes: int
    characters: int
    event_count: int
    average_wpm: float

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time

    def to_dict(self) -> Dict[str, Any]:
        return {
            "startTime": self.start_time,
            "endTime": self.end_time,
            "keystrokes": self.keystrokes,
            "duration": self.duration,
            "averageWPM": self.average_wpm,
            "characters": self.characters,
            "eventCount": self.event_count,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Burst":
        return cls(
            start_time=data["startTime"],
            end_time=data["endTime"],
            keystrokes=data["keystrokes"],
            characters=data.get("characters", data["keystrokes"]),
            event_count=data.get("eventCount", data["keystrokes"]),
            average_wpm=data["averageWPM"],
        )


@dataclass(frozen=True)
class RevisionPattern:
    timestamp: float
    length: int
    type: str = "deletion"

    def to_dict(self) -> Dict[str, Any]:
        return {"timestamp": self.timestamp, "type": self.type, "length": self.length}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RevisionPattern":
        return cls(
            timestamp=data["timestamp"],
            length=data["length"],
            type=data.get("type", "deletion"),
        )


@dataclass(frozen=True)
class NormalizedEvents:
    """Sorted, validated events plus how many raw events were unusable."""

    events: Tuple[KeystrokeEvent, ...]
    dropped: int = 0

    @property
    def productive_count(self) -> int:
        return sum(1 for e in self.events if e.is_productive)

    @property
    def character_count(self) -> int:
        return sum(1 for e in self.events if e.is_character)


@dataclass(frozen=True)
class Segmentation:
    """Pauses and bursts tiling the session timeline, in time order."""

    pauses: Tuple[Pause, ...]
    bursts: Tuple[Burst, ...]
    reported_bursts: Tuple[Burst, ...]

    def count(self, category: str) -> int:
        return sum(1 for p in self.pauses if p.category == category)

    @property
    def total_pause_time(self) -> float:
        return sum(p.duration for p in self.pauses)


@dataclass(frozen=True)
class ScalarMetrics:
    total_duration: float
    active_writing_time: float
    total_keystrokes: int
    productive_keystrokes: int
    words_per_minute: float
    characters_per_minute: float
    time_on_task: int
    editing_ratio: float


@dataclass(frozen=True)
class Scores:
    focus_score: int
    productivity_score: int
    engagement_score: int
    session_type: str


@dataclass(frozen=True)
class SessionAnalytics:
    """Everything the engine derives from one writing session."""

    session_id: str
    user_id: str
    document_id: str
    total_duration: float = 0
    active_writing_time: float = 0
    total_keystrokes: int = 0
    productive_keystrokes: int = 0
    words_per_minute: float = 0.0
    characters_per_minute: float = 0.0
    time_on_task: int = 0
    total_pauses: int = 0
    average_pause_length: float = 0
    longest_pause: float = 0
    short_pauses: int = 0
    medium_pauses: int = 0
    long_pauses: int = 0
    bursts_of_activity: Tuple[Burst, ...] = ()
    editing_ratio: float = 0.0
    revision_patterns: Tuple[RevisionPattern, ...] = ()
    focus_score: int = 0
    productivity_score: int = 0
    engagement_score: int = 0
    session_type: str = "exploratory"
    peak_productivity_period: Optional[TimeRange] = None
    struggling_periods: Tuple[TimeRange, ...] = ()
    dropped_events: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the camelCase JSON shape, timestamps as epoch ms."""
        return {
            "sessionId": self.session_id,
            "userId": self.user_id,
            "documentId": self.document_id,
            "totalDuration": self.total_duration,
            "activeWritingTime": self.active_writing_time,
            "totalKeystrokes": self.total_keystrokes,
            "productiveKeystrokes": self.productive_keystrokes,
            "wordsPerMinute": self.words_per_minute,
            "charactersPerMinute": self.characters_per_minute,
            "timeOnTask": self.time_on_task,
            "totalPauses": self.total_pauses,
            "averagePauseLength": self.average_pause_length,
            "longestPause": self.longest_pause,
            "shortPauses": self.short_pauses,
            "mediumPauses": self.medium_pauses,
            "longPauses": self.long_pauses,
            "burstsOfActivity": [b.to_dict() for b in self.bursts_of_activity],
            "editingRatio": self.editing_ratio,
            "revisionPatterns": [r.to_dict() for r in self.revision_patterns],
            "focusScore": self.focus_score,
            "productivityScore": self.productivity_score,
            "engagementScore": self.engagement_score,
            "sessionType": self.session_type,
            "peakProductivityPeriod": (
                self.peak_productivity_period.to_dict()
                if self.peak_productivity_period
                else None
            ),
            "strugglingPeriods": [p.to_dict() for p in self.struggling_periods],
            "droppedEvents": self.dropped_events,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionAnalytics":
        """Create from the camelCase JSON shape produced by to_dict."""
        peak = data.get("peakProductivityPeriod")
        return cls(
            session_id=data["sessionId"],
            user_id=data["userId"],
            document_id=data["documentId"],
            total_duration=data.get("totalDuration", 0),
            active_writing_time=data.get("activeWritingTime", 0),
            total_keystrokes=data.get("totalKeystrokes", 0),
            productive_keystrokes=data.get("productiveKeystrokes", 0),
            words_per_minute=data.get("wordsPerMinute", 0.0),
            characters_per_minute=data.get("charactersPerMinute", 0.0),
            time_on_task=data.get("timeOnTask", 0),
            total_pauses=data.get("totalPauses", 0),
            average_pause_length=data.get("averagePauseLength", 0),
            longest_pause=data.get("longestPause", 0),
            short_pauses=data.get("shortPauses", 0),
            medium_pauses=data.get("mediumPauses", 0),
            long_pauses=data.get("longPauses", 0),
            bursts_of_activity=tuple(
                Burst.from_dict(b) for b in data.get("burstsOfActivity", [])
            ),
            editing_ratio=data.get("editingRatio", 0.0),
            revision_patterns=tuple(
                RevisionPattern.from_dict(r) for r in data.get("revisionPatterns", [])
            ),
            focus_score=data.get("focusScore", 0),
            productivity_score=data.get("productivityScore", 0),
            engagement_score=data.get("engagementScore", 0),
            session_type=data.get("sessionType", "exploratory"),
            peak_productivity_period=TimeRange.from_dict(peak) if peak else None,
            struggling_periods=tuple(
                TimeRange.from_dict(p) for p in data.get("strugglingPeriods", [])
            ),
            dropped_events=data.get("droppedEvents", 0),
        )


@dataclass(frozen=True)
class SessionSummary:
    total_sessions: int = 0
    total_time_on_task: float = 0
    average_wpm: float = 0.0
    average_focus_score: int = 0
    average_productivity_score: int = 0
    average_engagement_score: int = 0
    highest_wpm: float = 0.0
    lowest_wpm: float = 0.0
    session_type_distribution: Dict[str, int] = field(default_factory=dict)
    improvement_trend: str = "stable"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalSessions": self.total_sessions,
            "totalTimeOnTask": self.total_time_on_task,
            "averageWPM": self.average_wpm,
            "averageFocusScore": self.average_focus_score,
            "averageProductivityScore": self.average_productivity_score,
            "averageEngagementScore": self.average_engagement_score,
            "highestWPM": self.highest_wpm,
            "lowestWPM": self.lowest_wpm,
            "sessionTypeDistribution": dict(self.session_type_distribution),
            "improvementTrend": self.improvement_trend,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionSummary":
        return cls(
            total_sessions=data.get("totalSessions", 0),
            total_time_on_task=data.get("totalTimeOnTask", 0),
            average_wpm=data.get("averageWPM", 0.0),
            average_focus_score=data.get("averageFocusScore", 0),
            average_productivity_score=data.get("averageProductivityScore", 0),
            average_engagement_score=data.get("averageEngagementScore", 0),
            highest_wpm=data.get("highestWPM", 0.0),
            lowest_wpm=data.get("lowestWPM", 0.0),
            session_type_distribution=dict(data.get("sessionTypeDistribution", {})),
            improvement_trend=data.get("improvementTrend", "stable"),
        )

