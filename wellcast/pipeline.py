"""
Pipeline orchestration: validate → classify → personalize → blend, and history → forecast → report.

This is the only module with I/O (file loading, report formatting).
All analytical logic is delegated to acoustic, semantic, blending, forecasting.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Iterable, Mapping, Optional, Union

from wellcast.acoustic import analyze_with_breakdown, classify, validate_features
from wellcast.blending import blend, blend_policy
from wellcast.config import ThresholdConfig
from wellcast.forecasting import predict_burnout_risk
from wellcast.history import aggregate_daily, load_trend_data
from wellcast.models import (
    AcousticFeatures,
    AcousticReading,
    BiomarkerCalibration,
    BurnoutPrediction,
    RecordingAssessment,
    SemanticInput,
)
from wellcast.personalization import apply_calibration, compute_personalized_acoustic_scores

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Per-recording assessment
# ---------------------------------------------------------------------------

def assess_recording(
    features: Union[AcousticFeatures, Mapping],
    semantic: SemanticInput = None,
    cfg: Optional[ThresholdConfig] = None,
    now: Optional[datetime] = None,
    baseline: Optional[Union[AcousticFeatures, Mapping]] = None,
    calibration: Optional[BiomarkerCalibration] = None,
) -> Optional[RecordingAssessment]:
    """
    Score one recording end to end.

    Threshold scores are personalized against the voice baseline (if any)
    and calibrated before blending. Returns None when the features fail
    validation; callers treat that as "no usable reading", not an error.
    """
    if cfg is None:
        cfg = ThresholdConfig()

    if not validate_features(features, cfg):
        logger.debug("Recording skipped: features failed validation")
        return None

    if not isinstance(features, AcousticFeatures):
        features = AcousticFeatures.from_dict(features)

    metrics = classify(features, cfg, now=now)
    personalized = compute_personalized_acoustic_scores(features, baseline, metrics, cfg)
    reading = AcousticReading(
        apply_calibration(personalized.stress_score, "stress", calibration, cfg),
        apply_calibration(personalized.fatigue_score, "fatigue", calibration, cfg),
        metrics.confidence,
    )
    combined = blend(reading, semantic, cfg)

    return RecordingAssessment(
        metrics=metrics,
        combined=combined,
        policy=blend_policy(semantic),
        breakdown=analyze_with_breakdown(features, cfg),
        explanations=personalized.explanations,
    )


# ---------------------------------------------------------------------------
# Forecast entry points
# ---------------------------------------------------------------------------

def forecast(
    data: Iterable[Mapping],
    cfg: Optional[ThresholdConfig] = None,
    policy: str = "latest",
) -> BurnoutPrediction:
    """
    Backend / UI integration entry point.

    Accepts dated score records directly, aggregates them to one row per day
    over the configured trailing window, and predicts.
    """
    if cfg is None:
        cfg = ThresholdConfig()

    daily = aggregate_daily(data, policy=policy, window_days=cfg.forecast.window_days)
    return predict_burnout_risk(daily, cfg)


def forecast_file(
    filepath: Union[str, Path],
    cfg: Optional[ThresholdConfig] = None,
) -> BurnoutPrediction:
    """CLI entry point: reads a JSON file of dated scores and forecasts."""
    return forecast(load_trend_data(filepath), cfg)


# ---------------------------------------------------------------------------
# Report generation
# ---------------------------------------------------------------------------

def generate_report(
    prediction: BurnoutPrediction,
    assessment: Optional[RecordingAssessment] = None,
) -> str:
    """Format a prediction (and optionally the latest recording) as a text report."""
    lines = [
        "WELLCAST STATUS REPORT",
        "=" * 58,
        "",
        f"  Burnout Risk        : {prediction.risk_score} ({prediction.risk_level})",
        f"  Trend               : {prediction.trend}",
        f"  Horizon             : {prediction.predicted_days} days",
        f"  Confidence          : {prediction.confidence:.2f}",
        "",
        "  Contributing Factors:",
    ]
    for factor in prediction.factors:
        lines.append(f"    - {factor}")

    if assessment is not None:
        m = assessment.metrics
        c = assessment.combined
        lines.extend([
            "",
            "  Latest Recording:",
            f"    Stress            : {m.stress_score} ({m.stress_level}) -> {c.final_stress_score}",
            f"    Fatigue           : {m.fatigue_score} ({m.fatigue_level}) -> {c.final_fatigue_score}",
            f"    Confidence        : {m.confidence:.2f}",
            f"    Blend Policy      : {assessment.policy}",
        ])
        e = assessment.explanations
        if e is not None:
            lines.append(f"    Drivers ({e.mode}) : " + (", ".join(e.stress + e.fatigue) or "none"))

    if prediction.risk_level == "critical":
        lines.append("")
        lines.append("  ⚠  WARNING: Burnout risk is critical")

    lines.append("")
    lines.append("=" * 58)
    return "\n".join(lines)
