"""
Centralized configuration for every threshold, weight, and ladder table.

Every tunable constant lives here. Components never import module-level
constants; they receive a ThresholdConfig and read the section they need.
"""

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

import yaml


# ---------------------------------------------------------------------------
# Feature validation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ValidationRanges:
    """Inclusive ranges a feature set must satisfy before classification."""

    rms_min: float = 0.0
    rms_max: float = 1.0
    speech_rate_min: float = 0.0
    speech_rate_max: float = 20.0
    pause_ratio_min: float = 0.0
    pause_ratio_max: float = 1.0
    zcr_min: float = 0.0
    zcr_max: float = 1.0

    # Fewer pauses than this means too little speech to analyze
    min_pause_count: int = 2


# ---------------------------------------------------------------------------
# Indicator ladders (declarative threshold tables)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class IndicatorLadder:
    """
    One acoustic indicator: a weight bucket plus ordered (threshold, points) tiers.

    Tiers are listed strongest first. direction="above" fires when the value is
    strictly greater than the tier threshold, "below" when strictly less.
    The weight is always counted in the denominator, tier hit or not.
    strengths ranks the (high, moderate) tier when reporting drivers.
    """

    feature: str
    display_name: str
    weight: int
    tiers: Tuple[Tuple[float, int], ...]
    direction: str = "above"
    high_label: str = ""
    moderate_label: str = ""
    strengths: Tuple[float, float] = (1.0, 0.5)

    def __post_init__(self):
        if self.direction not in ("above", "below"):
            raise ValueError(f"Unknown ladder direction: {self.direction!r}")
        if not self.tiers:
            raise ValueError(f"Ladder {self.feature!r} has no tiers")
        for _, points in self.tiers:
            if points > self.weight:
                raise ValueError(
                    f"Ladder {self.feature!r}: tier points {points} exceed weight {self.weight}"
                )


DEFAULT_STRESS_LADDERS: tuple = (
    IndicatorLadder(
        feature="speech_rate", display_name="Speech Rate", weight=30,
        tiers=((5.5, 30), (4.5, 15)),
        high_label="Very fast speech", moderate_label="Faster speech",
        strengths=(2.0, 1.0),
    ),
    IndicatorLadder(
        feature="rms", display_name="Voice Energy", weight=25,
        tiers=((0.3, 25), (0.2, 12)),
        high_label="High vocal energy", moderate_label="Elevated vocal energy",
        strengths=(1.4, 0.9),
    ),
    IndicatorLadder(
        feature="spectral_flux", display_name="Spectral Flux", weight=25,
        tiers=((0.15, 25), (0.1, 12)),
        high_label="Rapid vocal changes", moderate_label="More vocal variability",
        strengths=(1.2, 0.8),
    ),
    IndicatorLadder(
        feature="zcr", display_name="Zero Crossing Rate", weight=20,
        tiers=((0.08, 20), (0.05, 10)),
        high_label="More vocal tension", moderate_label="Slight vocal tension",
        strengths=(1.1, 0.7),
    ),
)

DEFAULT_FATIGUE_LADDERS: tuple = (
    IndicatorLadder(
        feature="speech_rate", display_name="Speech Rate", weight=30,
        tiers=((3.0, 30), (3.5, 15)), direction="below",
        high_label="Very slow speech", moderate_label="Slower speech",
        strengths=(2.0, 1.0),
    ),
    IndicatorLadder(
        feature="rms", display_name="Voice Energy", weight=25,
        tiers=((0.1, 25), (0.15, 12)), direction="below",
        high_label="Very low vocal energy", moderate_label="Lower vocal energy",
        strengths=(1.5, 1.0),
    ),
    IndicatorLadder(
        feature="pause_ratio", display_name="Pause Ratio", weight=25,
        tiers=((0.4, 25), (0.3, 12)),
        high_label="Frequent pauses", moderate_label="More pauses",
        strengths=(1.2, 0.8),
    ),
    IndicatorLadder(
        feature="spectral_centroid", display_name="Voice Brightness", weight=20,
        tiers=((0.3, 20), (0.45, 10)), direction="below",
        high_label="Duller vocal tone", moderate_label="Less bright vocal tone",
        strengths=(1.1, 0.7),
    ),
)


# ---------------------------------------------------------------------------
# Score levels
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ScoreLevels:
    """Boundaries shared by the stress and fatigue axes (inclusive lower bounds)."""

    high: float = 70
    elevated: float = 50
    moderate: float = 30


STRESS_LEVEL_NAMES = ("low", "moderate", "elevated", "high")
FATIGUE_LEVEL_NAMES = ("rested", "normal", "tired", "exhausted")


# ---------------------------------------------------------------------------
# Acoustic confidence
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ConfidenceParams:
    """Adjustments applied to the base acoustic confidence."""

    base: float = 0.7

    pause_count_high: int = 10
    pause_count_moderate: int = 5
    pause_count_low: int = 3

    boost_high: float = 0.15
    boost_moderate: float = 0.10
    penalty_low_data: float = -0.10

    # Audio quality, judged from RMS
    rms_poor_quality: float = 0.05
    rms_good_quality: float = 0.15
    penalty_poor_audio: float = -0.20
    boost_good_audio: float = 0.10


# ---------------------------------------------------------------------------
# Text inference (lexicon rules)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TermRule:
    """A lexicon entry: matching the term yields this score and confidence."""

    term: str
    score: float
    confidence: float


DEFAULT_STRESS_LEXICON: tuple = (
    # high
    (
        TermRule("overwhelmed", 95, 0.95),
        TermRule("panicking", 98, 0.95),
        TermRule("panic", 96, 0.9),
        TermRule("burned out", 95, 0.9),
        TermRule("burnt out", 95, 0.9),
        TermRule("too much", 92, 0.85),
        TermRule("can't cope", 96, 0.9),
        TermRule("cant cope", 96, 0.9),
    ),
    # moderate
    (
        TermRule("stressed", 90, 0.9),
        TermRule("stress", 85, 0.8),
        TermRule("anxious", 88, 0.9),
        TermRule("anxiety", 88, 0.85),
        TermRule("worried", 78, 0.75),
        TermRule("nervous", 72, 0.7),
        TermRule("tense", 78, 0.75),
        TermRule("on edge", 82, 0.8),
        TermRule("pressure", 78, 0.7),
    ),
    # low / relief
    (
        TermRule("not stressed", 20, 0.75),
        TermRule("relaxed", 25, 0.6),
        TermRule("calm", 30, 0.55),
        TermRule("at ease", 30, 0.55),
    ),
)

DEFAULT_FATIGUE_LEXICON: tuple = (
    (
        TermRule("exhausted", 95, 0.95),
        TermRule("sleep deprived", 95, 0.9),
        TermRule("drained", 90, 0.85),
        TermRule("wiped", 90, 0.85),
        TermRule("burned out", 90, 0.85),
        TermRule("burnt out", 90, 0.85),
        TermRule("can't stay awake", 98, 0.9),
        TermRule("cant stay awake", 98, 0.9),
    ),
    (
        TermRule("tired", 82, 0.85),
        TermRule("fatigued", 88, 0.9),
        TermRule("fatigue", 82, 0.8),
        TermRule("sleepy", 78, 0.8),
        TermRule("low energy", 82, 0.8),
        TermRule("run down", 82, 0.8),
        TermRule("worn out", 88, 0.85),
    ),
    (
        TermRule("not tired", 20, 0.75),
        TermRule("rested", 25, 0.65),
        TermRule("energized", 30, 0.65),
        TermRule("slept well", 25, 0.65),
    ),
)

DEFAULT_NEGATION_TOKENS: tuple = (
    "not", "no", "never", "dont", "don't", "do not",
    "isnt", "isn't", "arent", "aren't", "cant", "can't",
)


@dataclass(frozen=True)
class TextInferenceParams:
    """Neutral baseline plus tiered lexicons (strongest tier first)."""

    baseline_score: float = 50
    baseline_confidence: float = 0.0
    negation_window: int = 2
    negation_tokens: tuple = DEFAULT_NEGATION_TOKENS
    stress_lexicon: tuple = DEFAULT_STRESS_LEXICON
    fatigue_lexicon: tuple = DEFAULT_FATIGUE_LEXICON


# ---------------------------------------------------------------------------
# Blending
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TextBlendParams:
    """Base weights for the acoustic + free-text confidence-weighted blend."""

    stress_acoustic: float = 0.25
    stress_semantic: float = 0.75
    fatigue_acoustic: float = 0.35
    fatigue_semantic: float = 0.65

    # acoustic weight = base * (floor + (1 - floor) * acoustic_confidence)
    acoustic_confidence_floor: float = 0.2

    def __post_init__(self):
        for axis, a, s in (
            ("stress", self.stress_acoustic, self.stress_semantic),
            ("fatigue", self.fatigue_acoustic, self.fatigue_semantic),
        ):
            if abs(a + s - 1.0) > 1e-9:
                raise ValueError(f"{axis} blend weights must sum to 1.0, got {a + s}")


@dataclass(frozen=True)
class ObservationBlendParams:
    """Adjustments for structured LLM observations and the fixed 70/30 blend."""

    stress_cue: float = 12.0
    fatigue_cue: float = 12.0
    positive_cue: float = 8.0
    positive_damping: float = 0.7

    relevance_multipliers: Tuple[Tuple[str, float], ...] = (
        ("high", 1.0),
        ("medium", 0.6),
        ("low", 0.3),
    )

    # (emotion, stress adjustment, fatigue adjustment), scaled by emotion confidence
    emotion_adjustments: Tuple[Tuple[str, float, float], ...] = (
        ("happy", -8.0, -8.0),
        ("sad", 0.0, 10.0),
        ("angry", 12.0, 0.0),
        ("neutral", 0.0, 0.0),
    )

    adjustment_min: float = -15.0
    adjustment_max: float = 20.0

    acoustic_weight: float = 0.7
    semantic_weight: float = 0.3

    def __post_init__(self):
        total = self.acoustic_weight + self.semantic_weight
        if abs(total - 1.0) > 1e-9:
            raise ValueError(f"Observation blend weights must sum to 1.0, got {total}")


# ---------------------------------------------------------------------------
# Burnout forecasting
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ForecastParams:
    """Trend, level, horizon, factor, and confidence parameters for forecasting."""

    min_data_points: int = 2
    recent_window: int = 3

    # Slope → trend direction (positive slope = worsening)
    slope_declining: float = 2.0
    slope_improving: float = -2.0

    # Risk score → level (inclusive lower bounds)
    risk_critical: float = 75
    risk_high: float = 55
    risk_moderate: float = 35

    # Horizon estimate
    days_rapid_decline: int = 3
    days_moderate_decline: int = 5
    days_slow_decline: int = 7
    slope_rapid: float = 5.0
    slope_moderate: float = 2.0

    # Contributing factors
    stress_elevated: float = 60
    fatigue_elevated: float = 60
    volatility_high: float = 15
    burden_high: float = 65

    # Confidence
    data_points_high: int = 14
    data_points_moderate: int = 7
    data_points_low: int = 3
    volatility_low: float = 10
    volatility_concerning: float = 20
    strong_slope: float = 3.0
    confidence_base: float = 0.5
    boost_high_data: float = 0.3
    boost_moderate_data: float = 0.2
    boost_low_data: float = 0.1
    penalty_minimal_data: float = -0.2
    boost_low_volatility: float = 0.15
    penalty_high_volatility: float = -0.1
    boost_strong_trend: float = 0.05
    confidence_floor: float = 0.1

    # Trailing window handed to the forecaster by the history helpers
    window_days: int = 30


@dataclass(frozen=True)
class RiskWeights:
    """Composition of the burnout risk score."""

    recent_average: float = 0.4
    slope_multiplier: float = 3.0
    upward_trend_max: float = 30.0
    volatility_multiplier: float = 0.3
    volatility_max: float = 20.0
    recent_vs_overall_diff: float = 10.0
    recent_worse: float = 10.0


# ---------------------------------------------------------------------------
# Personal calibration
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CalibrationParams:
    """Bounds and learning rates for per-user score calibration."""

    scale_min: float = 0.75
    scale_max: float = 1.25
    bias_min: float = -25.0
    bias_max: float = 25.0
    bias_learning_rate: float = 0.08
    scale_learning_rate: float = 0.04


# ---------------------------------------------------------------------------
# Voice data quality
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class QualityParams:
    """Parameters for judging how much usable speech a recording holds."""

    speech_time_constant: float = 4.0
    speech_amount_weight: float = 0.75
    ratio_weight: float = 0.25
    ratio_floor: float = 0.2
    ratio_span: float = 0.6

    very_little_speech_seconds: float = 2.0
    very_little_speech_factor: float = 0.55
    short_speech_seconds: float = 5.0
    short_speech_factor: float = 0.8

    mostly_silence_ratio: float = 0.25
    mostly_silence_factor: float = 0.8

    quiet_rms: float = 0.05
    quiet_factor: float = 0.85

    clipping_level: float = 0.98
    clipping_factor: float = 0.9


# ---------------------------------------------------------------------------
# Driver explanations
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DriverParams:
    """Drivers at or below min_strength are dropped; at most limit are reported."""

    min_strength: float = 0.25
    limit: int = 3


# ---------------------------------------------------------------------------
# Baseline-relative scoring
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BaselineIndicator:
    """
    Change of one feature against the user's own baseline.

    Intensity is the change in the worsening direction divided by delta
    (one "meaningful change"), floored at 0.
    """

    feature: str
    delta: float
    weight: float
    direction: str
    label: str

    def __post_init__(self):
        if self.direction not in ("increase", "decrease"):
            raise ValueError(f"Unknown baseline direction: {self.direction!r}")
        if self.delta <= 0:
            raise ValueError(f"Baseline indicator {self.feature!r}: delta must be positive")


DEFAULT_STRESS_BASELINE: tuple = (
    BaselineIndicator("speech_rate", 0.9, 0.35, "increase", "Faster speech than your baseline"),
    BaselineIndicator("rms", 0.06, 0.25, "increase", "Higher vocal energy than usual"),
    BaselineIndicator("spectral_flux", 0.05, 0.25, "increase", "More vocal agitation than usual"),
    BaselineIndicator("zcr", 0.03, 0.15, "increase", "More vocal tension than usual"),
)

DEFAULT_FATIGUE_BASELINE: tuple = (
    BaselineIndicator("speech_rate", 0.8, 0.30, "decrease", "Slower speech than your baseline"),
    BaselineIndicator("rms", 0.05, 0.30, "decrease", "Lower vocal energy than usual"),
    BaselineIndicator("pause_ratio", 0.12, 0.25, "increase", "More pauses than your baseline"),
    BaselineIndicator("spectral_centroid", 0.15, 0.15, "decrease", "Duller tone than usual"),
)


@dataclass(frozen=True)
class BaselineParams:
    """Intensity → score mapping and the threshold/baseline mix per axis."""

    # score = floor + intensity * per_intensity: 0 → 20, 1 → 55, 2 → 90
    score_floor: float = 20.0
    score_per_intensity: float = 35.0

    stress_threshold_weight: float = 0.35
    stress_relative_weight: float = 0.65
    fatigue_threshold_weight: float = 0.30
    fatigue_relative_weight: float = 0.70

    stress_indicators: tuple = DEFAULT_STRESS_BASELINE
    fatigue_indicators: tuple = DEFAULT_FATIGUE_BASELINE

    def __post_init__(self):
        for axis, t, r in (
            ("stress", self.stress_threshold_weight, self.stress_relative_weight),
            ("fatigue", self.fatigue_threshold_weight, self.fatigue_relative_weight),
        ):
            if abs(t + r - 1.0) > 1e-9:
                raise ValueError(f"{axis} baseline weights must sum to 1.0, got {t + r}")


# ---------------------------------------------------------------------------
# Top-level config aggregate
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ThresholdConfig:
    """Complete engine configuration. Pass to any component to override defaults."""

    validation: ValidationRanges = field(default_factory=ValidationRanges)
    stress_ladders: tuple = DEFAULT_STRESS_LADDERS
    fatigue_ladders: tuple = DEFAULT_FATIGUE_LADDERS
    levels: ScoreLevels = field(default_factory=ScoreLevels)
    confidence: ConfidenceParams = field(default_factory=ConfidenceParams)
    text: TextInferenceParams = field(default_factory=TextInferenceParams)
    text_blend: TextBlendParams = field(default_factory=TextBlendParams)
    observation_blend: ObservationBlendParams = field(default_factory=ObservationBlendParams)
    forecast: ForecastParams = field(default_factory=ForecastParams)
    risk: RiskWeights = field(default_factory=RiskWeights)
    calibration: CalibrationParams = field(default_factory=CalibrationParams)
    quality: QualityParams = field(default_factory=QualityParams)
    drivers: DriverParams = field(default_factory=DriverParams)
    baseline: BaselineParams = field(default_factory=BaselineParams)

    def __post_init__(self):
        if not self.stress_ladders or not self.fatigue_ladders:
            raise ValueError("Stress and fatigue ladder sets must not be empty")

    @classmethod
    def from_dict(cls, overrides: Optional[Dict]) -> "ThresholdConfig":
        """
        Build a config from partial overrides, section by section.

        Only scalar sections can be overridden this way; ladder and lexicon
        tables are replaced by constructing ThresholdConfig directly.
        """
        cfg = cls()
        if not overrides:
            return cfg

        sections = {f.name for f in fields(cls)}
        updates = {}
        for name, values in overrides.items():
            if name not in sections:
                raise ValueError(f"Unknown config section: {name!r}")
            current = getattr(cfg, name)
            if not hasattr(current, "__dataclass_fields__") or not isinstance(values, dict):
                raise ValueError(f"Config section {name!r} cannot be overridden from a mapping")
            known = {f.name for f in fields(current)}
            unknown = set(values) - known
            if unknown:
                raise ValueError(f"Unknown keys in section {name!r}: {sorted(unknown)}")
            updates[name] = replace(current, **values)

        return replace(cfg, **updates)


def load_config(config_path: Optional[Union[str, Path]] = None) -> ThresholdConfig:
    """Load YAML overrides into a ThresholdConfig; no path means defaults."""
    if config_path is None:
        return ThresholdConfig()
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file must hold a mapping, got {type(data).__name__}")
    return ThresholdConfig.from_dict(data)
