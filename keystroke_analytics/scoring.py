# ABOUTME: Scalar session metrics, composite scores and session classification
import statistics
from typing import Sequence

from .config import AnalysisConfig
from .models import (
    LONG,
    Burst,
    NormalizedEvents,
    RevisionPattern,
    ScalarMetrics,
    Scores,
    Segmentation,
    TimeRange,
)
from .utils import calculate_wpm, round_half_up


def aggregate_metrics(
    normalized: NormalizedEvents,
    bounds: TimeRange,
    segmentation: Segmentation,
    revisions: Sequence[RevisionPattern],
    config: AnalysisConfig,
) -> ScalarMetrics:
    """Compute durations, keystroke counts and typing speed."""
    total_duration = bounds.duration
    active_time = max(0, total_duration - segmentation.total_pause_time)
    total_keystrokes = len(normalized.events)
    characters = normalized.character_count

    active_minutes = active_time / 60000
    wpm = calculate_wpm(characters, active_time, config.average_word_length)
    cpm = characters / active_minutes if active_minutes > 0 else 0.0

    revised = sum(r.length for r in revisions)
    editing_ratio = revised / total_keystrokes if total_keystrokes else 0.0

    return ScalarMetrics(
        total_duration=total_duration,
        active_writing_time=active_time,
        total_keystrokes=total_keystrokes,
        productive_keystrokes=normalized.productive_count,
        words_per_minute=round_half_up(wpm, 2),
        characters_per_minute=round_half_up(cpm, 2),
        time_on_task=int(round_half_up(active_minutes)),
        editing_ratio=round_half_up(editing_ratio, 4),
    )


def score_session(
    metrics: ScalarMetrics, segmentation: Segmentation, config: AnalysisConfig
) -> Scores:
    """Turn metrics into focus/productivity/engagement scores (0-100).

    focus:        long reported bursts, few pauses per minute, and a
                  penalty for the share of pauses that are long
    productivity: WPM against the target speed, plus accuracy
    engagement:   share of the session spent writing, plus how many
                  reported bursts happen per minute, a burst longer than
                  a minute counting once for every minute it spans
    """
    w = config.weights
    reported = segmentation.reported_bursts
    minutes = metrics.total_duration / 60000
    long_share = _long_pause_share(segmentation)

    if reported:
        mean_burst = statistics.mean(b.duration for b in reported)
        burst_signal = min(1.0, mean_burst / w.focus_target_burst_ms)
        pause_rate = len(segmentation.pauses) / minutes if minutes > 0 else 0.0
        continuity = 1.0 - min(1.0, pause_rate / w.focus_pause_rate_ceiling)
    else:
        burst_signal = continuity = 0.0
    focus = (
        w.focus_burst_weight * burst_signal
        + w.focus_continuity_weight * continuity
        - w.focus_long_pause_penalty * long_share
    )

    speed = min(1.0, metrics.words_per_minute / config.target_wpm)
    accuracy = 1.0 - metrics.editing_ratio if metrics.words_per_minute > 0 else 0.0
    productivity = w.productivity_wpm_weight * speed + w.productivity_accuracy_weight * accuracy

    if metrics.total_duration > 0:
        utilization = metrics.active_writing_time / metrics.total_duration
        bursts_per_minute = _burst_credit(reported) / minutes
        density = min(1.0, bursts_per_minute / w.engagement_target_bursts_per_minute)
    else:
        utilization = density = 0.0
    engagement = (
        w.engagement_utilization_weight * utilization
        + w.engagement_density_weight * density
    )

    focus_score = _to_score(focus)
    productivity_score = _to_score(productivity)
    return Scores(
        focus_score=focus_score,
        productivity_score=productivity_score,
        engagement_score=_to_score(engagement),
        session_type=classify_session(
            metrics, segmentation, focus_score, productivity_score, config
        ),
    )


def classify_session(
    metrics: ScalarMetrics,
    segmentation: Segmentation,
    focus_score: int,
    productivity_score: int,
    config: AnalysisConfig,
) -> str:
    """Pick the session type; rules are checked in a fixed priority order."""
    w = config.weights

    # editing wins regardless of the scores, but only strictly above the threshold
    if metrics.editing_ratio > config.editing_ratio_threshold:
        return "editing"
    if (
        focus_score >= config.focused_score_threshold
        and productivity_score >= config.focused_score_threshold
    ):
        return "focused"
    if (
        segmentation.pauses
        and _long_pause_share(segmentation) >= w.distracted_long_pause_share
        and focus_score < w.distracted_focus_threshold
    ):
        return "distracted"
    return "exploratory"


def _long_pause_share(segmentation: Segmentation) -> float:
    if not segmentation.pauses:
        return 0.0
    return segmentation.count(LONG) / len(segmentation.pauses)


def _burst_credit(bursts: Sequence[Burst]) -> float:
    return sum(max(1.0, b.duration / 60000) for b in bursts)


def _to_score(fraction: float) -> int:
    return int(round_half_up(min(100.0, max(0.0, fraction * 100))))
