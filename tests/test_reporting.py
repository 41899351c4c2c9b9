# ABOUTME: Unit tests for JSON and CSV report generation
import json

import pandas as pd
import pytest

from keystroke_analytics import SessionAnalyzer
from keystroke_analytics.reporting import ReportWriter, analytics_dataframe


@pytest.fixture
def analyses(make_session, typing_run, backspace):
    analyzer = SessionAnalyzer()
    return [
        analyzer.analyze_session(make_session(typing_run(0, 10), session_id="s-1")),
        analyzer.analyze_session(
            make_session(
                typing_run(0, 20) + [backspace(2000), backspace(2100)] + typing_run(12000, 20),
                session_id="s-2",
            )
        ),
    ]


class TestAnalyticsDataFrame:
    def test_one_row_per_session(self, analyses):
        df = analytics_dataframe(analyses)

        assert len(df) == 2
        assert list(df["sessionId"]) == ["s-1", "s-2"]
        assert list(df["burstCount"]) == [1, 2]
        assert list(df["revisionCount"]) == [0, 1]
        assert "wordsPerMinute" in df.columns
        assert "peakStart" in df.columns
        # Nested lists stay out of the flat table
        assert "burstsOfActivity" not in df.columns
        assert "strugglingPeriods" not in df.columns


class TestReportWriter:
    """Test report files on disk."""

    def test_json_report(self, tmp_path, analyses):
        summary = SessionAnalyzer.summarize_sessions(analyses)
        writer = ReportWriter(tmp_path / "reports")

        generated = writer.write_reports(analyses, summary)

        assert list(generated) == ["json"]
        with open(generated["json"]) as f:
            report = json.load(f)
        assert report["metadata"]["total_sessions"] == 2
        assert report["summary"]["totalSessions"] == 2
        assert [s["sessionId"] for s in report["sessions"]] == ["s-1", "s-2"]

    def test_csv_report(self, tmp_path, analyses):
        summary = SessionAnalyzer.summarize_sessions(analyses)
        writer = ReportWriter(tmp_path)

        generated = writer.write_reports(analyses, summary, ["json", "csv"])

        df = pd.read_csv(generated["csv"])
        assert len(df) == 2
        assert list(df["sessionType"]) == [a.session_type for a in analyses]

    def test_unsupported_format(self, tmp_path, analyses):
        writer = ReportWriter(tmp_path)

        with pytest.raises(ValueError):
            writer.write_reports(analyses, SessionAnalyzer.summarize_sessions(analyses), ["html"])


if __name__ == "__main__":
    pytest.main([__file__])
