# ABOUTME: Package initialization for the keystroke session analytics engine
"""
Keystroke Session Analytics

Derives typing speed, pause structure, activity bursts, revision patterns
and focus/productivity/engagement scores from the keystrokes recorded
during a writing session.
"""

__version__ = "1.0.0"
__description__ = (
    "Behavioral analytics for keystroke-captured writing sessions"
)

from .analyzer import SessionAnalyzer, analyze_session, summarize_sessions
from .config import AnalysisConfig, ScoringWeights
from .models import SessionAnalytics, SessionSummary
from .utils import (
    ConfigManager,
    ConfigurationError,
    KeystrokeEvent,
    SessionValidationError,
    WritingSession,
)

__all__ = [
    "SessionAnalyzer",
    "analyze_session",
    "summarize_sessions",
    "AnalysisConfig",
    "ScoringWeights",
    "SessionAnalytics",
    "SessionSummary",
    "ConfigManager",
    "ConfigurationError",
    "KeystrokeEvent",
    "SessionValidationError",
    "WritingSession",
]
