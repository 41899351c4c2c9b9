# ABOUTME: Event normalization, pause/burst segmentation and revision detection
import logging
from typing import Any, Iterable, List, Optional, Sequence, Union

import numpy as np

from .config import AnalysisConfig
from .models import (
    LONG,
    MEDIUM,
    SHORT,
    Burst,
    NormalizedEvents,
    Pause,
    RevisionPattern,
    Segmentation,
    TimeRange,
)
from .utils import (
    KeystrokeEvent,
    SessionValidationError,
    WritingSession,
    calculate_wpm,
    is_number,
    round_half_up,
)


def normalize_events(raw_events: Iterable[Union[KeystrokeEvent, Any]]) -> NormalizedEvents:
    """Validate and stably sort events by timestamp.

    Events without a usable timestamp are dropped and counted. If every
    event is unusable the session cannot be analyzed at all.
    """
    events: List[KeystrokeEvent] = []
    dropped = 0
    seen = 0

    for item in raw_events:
        seen += 1
        if isinstance(item, KeystrokeEvent):
            if is_number(item.timestamp):
                events.append(item)
            else:
                dropped += 1
            continue
        try:
            events.append(KeystrokeEvent.from_dict(item))
        except (ValueError, AttributeError):
            dropped += 1

    if seen and not events:
        raise SessionValidationError(
            f"None of the {seen} events has a numeric timestamp"
        )
    if dropped:
        logging.warning(f"Dropped {dropped} malformed keystroke events")

    # list.sort is stable, so equal timestamps keep their input order
    events.sort(key=lambda e: e.timestamp)
    return NormalizedEvents(events=tuple(events), dropped=dropped)


def resolve_bounds(session: WritingSession, events: Sequence[KeystrokeEvent]) -> TimeRange:
    """Work out the analysed time span of a session."""
    for name in ("start_time", "end_time"):
        value = getattr(session, name)
        if value is not None and not is_number(value):
            raise SessionValidationError(f"{name} must be a number, got {value!r}")

    start, end = session.start_time, session.end_time
    if start is not None and end is not None and end < start:
        raise SessionValidationError(
            f"endTime ({end}) is earlier than startTime ({start})"
        )

    if not events:
        start = start if start is not None else 0
        return TimeRange(start=start, end=end if end is not None else start)

    first, last = events[0].timestamp, events[-1].timestamp
    if start is None:
        start = first
    if end is None:
        end = max(last, start)
    if first < start or last > end:
        logging.warning(
            f"Session {session.id} has events outside its bounds, widening to fit"
        )
        start, end = min(start, first), max(end, last)
    return TimeRange(start=start, end=end)


def classify_pause(gap: float, config: AnalysisConfig) -> Optional[str]:
    """Bucket a gap; buckets are inclusive-lower, exclusive-upper."""
    if gap >= config.long_pause_ms:
        return LONG
    if gap >= config.medium_pause_ms:
        return MEDIUM
    if gap >= config.short_pause_ms:
        return SHORT
    return None


def segment_timeline(
    events: Sequence[KeystrokeEvent], bounds: TimeRange, config: AnalysisConfig
) -> Segmentation:
    """Split the session into alternating bursts and pauses.

    Sub-threshold gaps at the edges of the session are absorbed into the
    first/last burst so that bursts and pauses together cover the bounds.
    """
    if not events:
        return Segmentation(pauses=(), bursts=(), reported_bursts=())

    timestamps = np.array([e.timestamp for e in events], dtype=float)
    gaps = np.diff(timestamps)
    breaks = np.flatnonzero(gaps >= config.short_pause_ms).tolist()

    pauses: List[Pause] = []
    bursts: List[Burst] = []

    first, last = events[0].timestamp, events[-1].timestamp
    lead = classify_pause(first - bounds.start, config)
    if lead:
        pauses.append(Pause(bounds.start, first, lead))
    burst_start = first if lead else bounds.start

    run_start = 0
    for i in breaks:
        bursts.append(_build_burst(events[run_start : i + 1], burst_start, events[i].timestamp, config))
        gap_end = events[i + 1].timestamp
        pauses.append(Pause(events[i].timestamp, gap_end, classify_pause(gap_end - events[i].timestamp, config)))
        run_start = i + 1
        burst_start = gap_end

    trail = classify_pause(bounds.end - last, config)
    bursts.append(_build_burst(events[run_start:], burst_start, last if trail else bounds.end, config))
    if trail:
        pauses.append(Pause(last, bounds.end, trail))

    reported = tuple(
        b for b in bursts if b.keystrokes >= config.minimum_burst_keystrokes
    )
    logging.debug(
        f"Segmented {len(events)} events into {len(bursts)} bursts "
        f"({len(reported)} reported) and {len(pauses)} pauses"
    )
    return Segmentation(pauses=tuple(pauses), bursts=tuple(bursts), reported_bursts=reported)


def _build_burst(
    run: Sequence[KeystrokeEvent], start: float, end: float, config: AnalysisConfig
) -> Burst:
    characters = sum(1 for e in run if e.is_character)
    return Burst(
        start_time=start,
        end_time=end,
        keystrokes=sum(1 for e in run if e.is_productive),
        characters=characters,
        event_count=len(run),
        average_wpm=round_half_up(
            calculate_wpm(characters, end - start, config.average_word_length), 2
        ),
    )


def detect_revisions(
    events: Sequence[KeystrokeEvent], config: Optional[AnalysisConfig] = None
) -> List[RevisionPattern]:
    """Collapse runs of Backspace/Delete keydowns into revision records.

    A run ends at the next character-producing key or when a pause is
    crossed; navigation keys and keyups inside a run are ignored.
    """
    config = config or AnalysisConfig()
    patterns: List[RevisionPattern] = []
    run_start: Optional[float] = None
    run_length = 0
    previous: Optional[float] = None

    for event in events:
        crossed_pause = (
            previous is not None and event.timestamp - previous >= config.short_pause_ms
        )
        if run_length and (crossed_pause or event.is_character):
            patterns.append(RevisionPattern(timestamp=run_start, length=run_length))
            run_length = 0

        if event.is_deletion:
            if run_length == 0:
                run_start = event.timestamp
            run_length += 1
        previous = event.timestamp

    if run_length:
        patterns.append(RevisionPattern(timestamp=run_start, length=run_length))

    return patterns
