# ABOUTME: Safe demonstration script for the session analytics engine
from keystroke_analytics import SessionAnalyzer, WritingSession
from keystroke_analytics.utils import KeystrokeEvent
import random
import time


def create_realistic_session(num_keystrokes=1500, seed=None):
    """Create a realistic synthetic writing session for demonstration."""
    rng = random.Random(seed)

    common_words = [
        "the", "essay", "argues", "that", "climate", "policy", "should",
        "reflect", "evidence", "from", "recent", "research", "and", "local",
        "community", "needs", "because", "students", "learn", "best",
    ]

    events = []
    current_time = time.time() * 1000
    start_time = current_time
    word_idx = 0
    typed_in_word = 0

    for i in range(num_keystrokes):
        current_word = common_words[word_idx % len(common_words)]

        if typed_in_word == len(current_word):
            key = value = " "
            code = "Space"
            # Longer pauses at word boundaries, sometimes a real thinking pause
            time_delta = rng.uniform(200, 400)
            if rng.random() < 0.03:
                time_delta = rng.uniform(3000, 20000)
            word_idx += 1
            typed_in_word = 0
        elif typed_in_word > 0 and rng.random() < 0.04:
            # Occasional corrections: a short run of backspaces
            for _ in range(rng.randint(1, 4)):
                current_time += rng.uniform(80, 150)
                events.append(KeystrokeEvent(
                    key="Backspace", code="Backspace", type="keydown",
                    timestamp=round(current_time), id=f"demo-{len(events)}",
                ))
            continue
        else:
            value = current_word[typed_in_word]
            key, code = value, f"Key{value.upper()}"
            # Normal typing rhythm
            time_delta = rng.uniform(80, 180)
            typed_in_word += 1

        current_time += time_delta
        events.append(KeystrokeEvent(
            key=key, code=code, type="keydown", timestamp=round(current_time),
            value=value, id=f"demo-{len(events)}",
        ))

    return WritingSession(
        id="demo-session",
        user_id="demo-student",
        document_id="demo-essay",
        events=tuple(events),
        start_time=round(start_time),
        end_time=round(current_time),
        metadata={"documentTitle": "Demo Essay", "privacyLevel": "full"},
    )


def run_demo_analysis():
    """Run a complete demonstration of the session analyzer."""

    print("Creating realistic sample writing session...")
    session = create_realistic_session(seed=7)
    print(f"Generated {len(session.events)} sample keystrokes")

    analyzer = SessionAnalyzer.from_config_file("config.yaml")
    analytics = analyzer.analyze_session(session)

    print("\n" + "=" * 50)
    print("WRITING SESSION ANALYSIS")
    print("=" * 50)
    print(f"Total Keystrokes: {analytics.total_keystrokes:,}")
    print(f"Productive Keystrokes: {analytics.productive_keystrokes:,}")
    print(f"WPM: {analytics.words_per_minute:.1f}")
    print(f"Time on Task: {analytics.time_on_task} minutes")
    print(f"Editing Ratio: {analytics.editing_ratio:.2f}")

    print("\nPAUSES:")
    print(f"  Total: {analytics.total_pauses}")
    print(f"  Short / Medium / Long: {analytics.short_pauses} / "
          f"{analytics.medium_pauses} / {analytics.long_pauses}")
    print(f"  Longest: {analytics.longest_pause / 1000:.1f}s")

    print("\nSCORES:")
    print(f"  Focus: {analytics.focus_score}")
    print(f"  Productivity: {analytics.productivity_score}")
    print(f"  Engagement: {analytics.engagement_score}")
    print(f"  Session type: {analytics.session_type}")

    print(f"\nBursts of activity: {len(analytics.bursts_of_activity)}")
    print(f"Revision patterns: {len(analytics.revision_patterns)}")
    peak = analytics.peak_productivity_period
    if peak:
        print(f"Peak period: {(peak.start - session.start_time) / 1000:.0f}s "
              f"into the session, {peak.duration / 1000:.0f}s long")
    print(f"Struggling periods: {len(analytics.struggling_periods)}")

    return analytics


if __name__ == "__main__":
    run_demo_analysis()
