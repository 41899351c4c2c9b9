# ABOUTME: JSON and CSV report generation for analyzed writing sessions
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

import pandas as pd

from .models import SessionAnalytics, SessionSummary

REPORT_FORMATS = ("json", "csv")


def analytics_dataframe(analyses: Sequence[SessionAnalytics]) -> pd.DataFrame:
    """One row per session with the scalar metrics and list sizes."""
    rows = []
    for analytics in analyses:
        row = {
            k: v
            for k, v in analytics.to_dict().items()
            if not isinstance(v, (list, dict)) and k != "peakProductivityPeriod"
        }
        peak = analytics.peak_productivity_period
        row["burstCount"] = len(analytics.bursts_of_activity)
        row["revisionCount"] = len(analytics.revision_patterns)
        row["strugglingPeriodCount"] = len(analytics.struggling_periods)
        row["peakStart"] = peak.start if peak else None
        row["peakEnd"] = peak.end if peak else None
        rows.append(row)
    return pd.DataFrame(rows)


class ReportWriter:
    """Writes analysis results into a reports directory."""

    def __init__(self, reports_dir: Union[str, Path] = "./reports"):
        self.reports_dir = Path(reports_dir)
        self.reports_dir.mkdir(parents=True, exist_ok=True)

    def write_reports(
        self,
        analyses: Sequence[SessionAnalytics],
        summary: SessionSummary,
        formats: Optional[List[str]] = None,
    ) -> Dict[str, str]:
        """Generate reports in the requested formats, returning their paths."""
        formats = formats or ["json"]
        unknown = set(formats) - set(REPORT_FORMATS)
        if unknown:
            raise ValueError(f"Unsupported report formats: {sorted(unknown)}")

        generated_files = {}
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

        if "json" in formats:
            filename = self.reports_dir / f"session_analysis_{timestamp}.json"
            report = {
                "metadata": {
                    "analysis_timestamp": datetime.now().isoformat(),
                    "total_sessions": len(analyses),
                },
                "summary": summary.to_dict(),
                "sessions": [a.to_dict() for a in analyses],
            }
            with open(filename, "w") as f:
                json.dump(report, f, indent=2)
            generated_files["json"] = str(filename)

        if "csv" in formats:
            filename = self.reports_dir / f"session_metrics_{timestamp}.csv"
            analytics_dataframe(analyses).to_csv(filename, index=False)
            generated_files["csv"] = str(filename)

        logging.info(f"Generated reports: {list(generated_files.keys())}")
        return generated_files
