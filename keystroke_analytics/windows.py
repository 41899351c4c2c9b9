# ABOUTME: Fixed-window scan for peak productivity and struggling periods
import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .config import AnalysisConfig
from .models import TimeRange
from .utils import KeystrokeEvent, calculate_wpm


def build_windows(bounds: TimeRange, window_size_ms: float) -> List[TimeRange]:
    """Non-overlapping windows laid from the session start.

    Windows are anchored at the session start, not at bursts, so the idle
    stretches of a sparse session come out as empty windows. A tail shorter
    than half a window is folded into the window before it, which keeps
    every window between half and one and a half window sizes long. A
    session no longer than one window is a single window covering it.
    """
    if bounds.duration <= window_size_ms:
        return [TimeRange(bounds.start, bounds.end)]
    starts = np.arange(bounds.start, bounds.end, window_size_ms).tolist()
    if bounds.end - starts[-1] < window_size_ms / 2:
        starts.pop()
    ends = starts[1:] + [bounds.end]
    return [TimeRange(s, e) for s, e in zip(starts, ends)]


def window_character_counts(
    events: Sequence[KeystrokeEvent], windows: Sequence[TimeRange]
) -> List[int]:
    """Characters typed inside each [start, end) window.

    The final window is closed so an event exactly at the session end counts.
    """
    timestamps = np.array([e.timestamp for e in events if e.is_character], dtype=float)
    starts = np.array([w.start for w in windows], dtype=float)
    ends = np.array([w.end for w in windows], dtype=float)

    lo = np.searchsorted(timestamps, starts, side="left")
    hi = np.searchsorted(timestamps, ends, side="left")
    hi[-1] = np.searchsorted(timestamps, ends[-1], side="right")
    return (hi - lo).tolist()


def find_peak_and_struggling(
    events: Sequence[KeystrokeEvent],
    bounds: TimeRange,
    session_wpm: float,
    config: AnalysisConfig,
) -> Tuple[Optional[TimeRange], List[TimeRange]]:
    """Locate the highest-output period and the low-output windows.

    Each window's WPM is measured over its own length. The peak starts at
    the earliest window with the highest WPM and grows over neighbouring
    windows, in both directions, while their WPM stays at or above
    ``peak_extension_fraction`` of that best WPM. A window is struggling
    when its WPM is below ``struggling_wpm_fraction`` of the session WPM;
    struggling windows that touch or overlap are merged.
    """
    if not events:
        return None, []

    windows = build_windows(bounds, config.window_size_ms)
    counts = window_character_counts(events, windows)
    wpms = [
        calculate_wpm(c, w.duration, config.average_word_length)
        for c, w in zip(counts, windows)
    ]

    peak = None
    best = max(wpms)
    if best > 0:
        first = last = wpms.index(best)
        floor = config.peak_extension_fraction * best
        while first > 0 and wpms[first - 1] >= floor:
            first -= 1
        while last + 1 < len(wpms) and wpms[last + 1] >= floor:
            last += 1
        peak = TimeRange(windows[first].start, windows[last].end)

    threshold = config.struggling_wpm_fraction * session_wpm
    struggling = merge_ranges(
        [w for w, wpm in zip(windows, wpms) if wpm < threshold]
    )

    logging.debug(
        f"Scanned {len(windows)} windows: best {best:.2f} WPM, "
        f"{len(struggling)} struggling periods below {threshold:.2f} WPM"
    )
    return peak, struggling


def merge_ranges(ranges: Sequence[TimeRange]) -> List[TimeRange]:
    """Merge time-ordered ranges that touch or overlap."""
    merged: List[TimeRange] = []
    for current in ranges:
        if merged and current.start <= merged[-1].end:
            previous = merged.pop()
            current = TimeRange(previous.start, max(previous.end, current.end))
        merged.append(current)
    return merged
