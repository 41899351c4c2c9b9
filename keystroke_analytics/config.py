# ABOUTME: Analysis thresholds and scoring weights for session analytics
"""
All tunable numbers used by the engine live here.

Thresholds come from the ``analysis:`` section of the YAML config and the
score weights from ``scoring:``. Keys may be given in snake_case or in the
camelCase used by the HTTP layer (``shortPauseMs``, ``targetWPM`` ...).
"""
import re
from dataclasses import asdict, dataclass, field, fields, replace
from typing import Any, Dict, Mapping, Optional

from .utils import ConfigManager, ConfigurationError


@dataclass(frozen=True)
class ScoringWeights:
    """Weights and normalization targets for the composite scores.

    Each score is ``100 * sum(weight * signal)`` with every signal scaled to
    [0, 1], then clamped to [0, 100].
    """

    # focus = burst length + continuity - long pause penalty
    focus_burst_weight: float = 0.6
    focus_continuity_weight: float = 0.4
    focus_long_pause_penalty: float = 0.5
    focus_target_burst_ms: float = 60000.0
    focus_pause_rate_ceiling: float = 4.0  # pauses per minute that zero continuity

    # productivity = speed against target + accuracy
    productivity_wpm_weight: float = 0.8
    productivity_accuracy_weight: float = 0.2

    # engagement = utilization + burst density
    engagement_utilization_weight: float = 0.7
    engagement_density_weight: float = 0.3
    engagement_target_bursts_per_minute: float = 1.0

    # sessionType "distracted" rule
    distracted_long_pause_share: float = 0.5
    distracted_focus_threshold: float = 40.0


@dataclass(frozen=True)
class AnalysisConfig:
    short_pause_ms: float = 2000.0
    medium_pause_ms: float = 5000.0
    long_pause_ms: float = 15000.0
    minimum_burst_keystrokes: int = 5
    target_wpm: float = 30.0
    editing_ratio_threshold: float = 0.2
    focused_score_threshold: float = 70.0
    window_size_ms: float = 60000.0
    struggling_wpm_fraction: float = 0.4
    peak_extension_fraction: float = 0.5
    average_word_length: int = 5
    weights: ScoringWeights = field(default_factory=ScoringWeights)

    def __post_init__(self):
        if self.short_pause_ms <= 0:
            raise ConfigurationError("short_pause_ms must be positive")
        if not self.short_pause_ms <= self.medium_pause_ms <= self.long_pause_ms:
            raise ConfigurationError(
                "pause thresholds must satisfy short <= medium <= long"
            )
        if self.minimum_burst_keystrokes < 0:
            raise ConfigurationError("minimum_burst_keystrokes cannot be negative")
        if self.target_wpm <= 0:
            raise ConfigurationError("target_wpm must be positive")
        if self.window_size_ms <= 0:
            raise ConfigurationError("window_size_ms must be positive")
        if self.average_word_length <= 0:
            raise ConfigurationError("average_word_length must be positive")
        for name in ("editing_ratio_threshold", "struggling_wpm_fraction"):
            if not 0 <= getattr(self, name) <= 1:
                raise ConfigurationError(f"{name} must be within [0, 1]")
        if not 0 < self.peak_extension_fraction <= 1:
            raise ConfigurationError("peak_extension_fraction must be within (0, 1]")

    @classmethod
    def from_mapping(
        cls,
        analysis: Optional[Mapping[str, Any]] = None,
        scoring: Optional[Mapping[str, Any]] = None,
    ) -> "AnalysisConfig":
        """Build a config from plain mappings, ignoring unknown keys."""
        analysis = _normalize_keys(analysis or {})
        scoring = _normalize_keys(scoring or {})

        weight_names = {f.name for f in fields(ScoringWeights)}
        config_names = {f.name for f in fields(cls)} - {"weights"}
        values = {k: v for k, v in analysis.items() if k in config_names}
        try:
            weights = ScoringWeights(
                **{k: float(v) for k, v in scoring.items() if k in weight_names}
            )
            for name in ("minimum_burst_keystrokes", "average_word_length"):
                if name in values:
                    values[name] = int(values[name])
            return cls(weights=weights, **values)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(str(e)) from e

    @classmethod
    def from_config_manager(cls, manager: ConfigManager) -> "AnalysisConfig":
        return cls.from_mapping(
            manager.get("analysis", {}), manager.get("scoring", {})
        )

    @classmethod
    def load(cls, config_path: str = "config.yaml") -> "AnalysisConfig":
        """Read a YAML config file; a missing file yields the defaults."""
        return cls.from_config_manager(ConfigManager(config_path))

    def with_overrides(self, **overrides: Any) -> "AnalysisConfig":
        """Copy with some settings replaced; unknown names are an error."""
        try:
            return replace(self, **_normalize_keys(overrides))
        except (TypeError, ValueError) as e:
            raise ConfigurationError(str(e)) from e

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# shortPauseMs -> short_pause_ms, targetWPM -> target_wpm
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def _normalize_keys(values: Mapping[str, Any]) -> Dict[str, Any]:
    return {_CAMEL_BOUNDARY.sub("_", key).lower(): value for key, value in values.items()}
