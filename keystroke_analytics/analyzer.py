# ABOUTME: Session analytics pipeline and command-line entry point
import argparse
import logging
import statistics
import sys
from collections import Counter
from typing import Any, Dict, List, Optional, Sequence, Union

from .config import AnalysisConfig
from .models import LONG, MEDIUM, SHORT, SessionAnalytics, SessionSummary
from .reporting import ReportWriter
from .scoring import aggregate_metrics, score_session
from .segmentation import (
    detect_revisions,
    normalize_events,
    resolve_bounds,
    segment_timeline,
)
from .utils import (
    ConfigManager,
    SessionLoader,
    SessionValidationError,
    WritingSession,
    round_half_up,
    setup_logging,
)
from .windows import find_peak_and_struggling

# Half-to-half change in mean composite score that counts as a trend
TREND_THRESHOLD = 5


class SessionAnalyzer:
    """Derives behavioral writing metrics from keystroke sessions.

    Holds nothing but its configuration, so one instance can serve any
    number of sessions, from any number of threads.
    """

    def __init__(self, config: Optional[AnalysisConfig] = None):
        self.config = config or AnalysisConfig()

    @classmethod
    def from_config_file(cls, config_path: str = "config.yaml") -> "SessionAnalyzer":
        return cls(AnalysisConfig.load(config_path))

    def analyze_session(
        self, session: Union[WritingSession, Dict[str, Any]]
    ) -> SessionAnalytics:
        """Analyze one writing session.

        Raises SessionValidationError when the session cannot be analyzed;
        malformed individual events are skipped and counted instead.
        """
        if not isinstance(session, WritingSession):
            session = WritingSession.from_dict(session)
        self._validate(session)

        logging.info(f"Analyzing session {session.id} ({len(session.events)} events)")
        normalized = normalize_events(session.events)
        bounds = resolve_bounds(session, normalized.events)

        if not normalized.events:
            return SessionAnalytics(
                session_id=session.id,
                user_id=session.user_id,
                document_id=session.document_id,
            )

        config = self.config
        segmentation = segment_timeline(normalized.events, bounds, config)
        revisions = detect_revisions(normalized.events, config)
        metrics = aggregate_metrics(normalized, bounds, segmentation, revisions, config)
        scores = score_session(metrics, segmentation, config)

        peak, struggling = find_peak_and_struggling(
            normalized.events, bounds, metrics.words_per_minute, config
        )

        pause_lengths = [p.duration for p in segmentation.pauses]
        return SessionAnalytics(
            session_id=session.id,
            user_id=session.user_id,
            document_id=session.document_id,
            total_duration=metrics.total_duration,
            active_writing_time=metrics.active_writing_time,
            total_keystrokes=metrics.total_keystrokes,
            productive_keystrokes=metrics.productive_keystrokes,
            words_per_minute=metrics.words_per_minute,
            characters_per_minute=metrics.characters_per_minute,
            time_on_task=metrics.time_on_task,
            total_pauses=len(pause_lengths),
            average_pause_length=(
                round_half_up(statistics.mean(pause_lengths)) if pause_lengths else 0
            ),
            longest_pause=max(pause_lengths, default=0),
            short_pauses=segmentation.count(SHORT),
            medium_pauses=segmentation.count(MEDIUM),
            long_pauses=segmentation.count(LONG),
            bursts_of_activity=segmentation.reported_bursts,
            editing_ratio=metrics.editing_ratio,
            revision_patterns=tuple(revisions),
            focus_score=scores.focus_score,
            productivity_score=scores.productivity_score,
            engagement_score=scores.engagement_score,
            session_type=scores.session_type,
            peak_productivity_period=peak,
            struggling_periods=tuple(struggling),
            dropped_events=normalized.dropped,
        )

    @staticmethod
    def summarize_sessions(analyses: Sequence[SessionAnalytics]) -> SessionSummary:
        """Means, extremes and trend across a set of analyses."""
        if not analyses:
            return SessionSummary()

        wpms = [a.words_per_minute for a in analyses]
        composites = [
            (a.focus_score + a.productivity_score + a.engagement_score) / 3
            for a in analyses
        ]

        trend = "stable"
        if len(analyses) >= 4:
            mid = len(analyses) // 2
            change = statistics.mean(composites[mid:]) - statistics.mean(composites[:mid])
            if change > TREND_THRESHOLD:
                trend = "improving"
            elif change < -TREND_THRESHOLD:
                trend = "declining"

        return SessionSummary(
            total_sessions=len(analyses),
            total_time_on_task=sum(a.time_on_task for a in analyses),
            average_wpm=round_half_up(statistics.mean(wpms), 2),
            average_focus_score=_mean_score(a.focus_score for a in analyses),
            average_productivity_score=_mean_score(a.productivity_score for a in analyses),
            average_engagement_score=_mean_score(a.engagement_score for a in analyses),
            highest_wpm=max(wpms),
            lowest_wpm=min(wpms),
            session_type_distribution=dict(Counter(a.session_type for a in analyses)),
            improvement_trend=trend,
        )

    def _validate(self, session: WritingSession) -> None:
        missing = [
            name
            for name in ("id", "user_id", "document_id")
            if not getattr(session, name)
        ]
        if missing:
            raise SessionValidationError(
                f"Missing required session fields: {', '.join(missing)}"
            )


def _mean_score(values) -> int:
    return int(round_half_up(statistics.mean(values)))


def analyze_session(
    session: Union[WritingSession, Dict[str, Any]],
    config: Optional[AnalysisConfig] = None,
) -> SessionAnalytics:
    """Analyze one session with the given (or default) configuration."""
    return SessionAnalyzer(config).analyze_session(session)


def summarize_sessions(analyses: Sequence[SessionAnalytics]) -> SessionSummary:
    return SessionAnalyzer.summarize_sessions(analyses)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the analyzer."""
    parser = argparse.ArgumentParser(description="Keystroke Session Analytics")
    parser.add_argument(
        "--config", default="config.yaml", help="Configuration file path"
    )
    parser.add_argument(
        "--input", required=True, help="Session JSON file or directory of them"
    )
    parser.add_argument("--output", help="Output directory for reports")
    parser.add_argument(
        "--export-csv", action="store_true", help="Also export per-session CSV"
    )
    parser.add_argument("--log-level", help="Override the configured log level")

    args = parser.parse_args(argv)

    config_manager = ConfigManager(args.config)
    setup_logging(args.log_level or config_manager.get("output.log_level", "INFO"))
    analyzer = SessionAnalyzer(AnalysisConfig.from_config_manager(config_manager))

    sessions = SessionLoader(args.input).load_sessions()
    analyses = []
    for session in sessions:
        try:
            analyses.append(analyzer.analyze_session(session))
        except SessionValidationError as e:
            logging.error(f"Skipping session {session.id}: {e}")

    if not analyses:
        print("No analyzable writing sessions found.")
        return 1

    summary = analyzer.summarize_sessions(analyses)

    formats = ["json"]
    if args.export_csv:
        formats.append("csv")
    writer = ReportWriter(
        args.output or config_manager.get("output.reports_directory", "./reports")
    )
    generated_files = writer.write_reports(analyses, summary, formats)

    # Print summary to console
    print("\n=== Writing Session Analysis Summary ===")
    print(f"Sessions Analyzed: {summary.total_sessions}")
    print(f"Total Time on Task: {summary.total_time_on_task} minutes")
    print(f"Average WPM: {summary.average_wpm:.1f}")
    print(
        f"Average Scores: focus {summary.average_focus_score} | "
        f"productivity {summary.average_productivity_score} | "
        f"engagement {summary.average_engagement_score}"
    )
    print(f"Trend: {summary.improvement_trend}")
    for session_type, count in sorted(summary.session_type_distribution.items()):
        print(f"  {session_type}: {count}")

    print("\nReports generated:")
    for format_type, filepath in generated_files.items():
        print(f"  {format_type.upper()}: {filepath}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
