"""
WELLCAST v1.0 — Biomarker Scoring and Burnout Forecasting Engine

Deterministic, stateless scoring of speech-derived stress/fatigue readings,
semantic fusion, and near-term burnout risk projection.

Architecture:
    config          — All thresholds, ladders, lexicons, and weights (single source of truth)
    scoring         — Rounding, clamping, score → level mapping
    acoustic        — Feature validation, ladder classification, breakdown
    semantic        — Free-text inference and reading merge
    blending        — Acoustic + semantic fusion (text and observation policies)
    forecasting     — Trend analysis and burnout prediction
    personalization — Calibration, baseline-relative scoring, recording quality
    history         — Records → ordered daily trend data
    pipeline        — Orchestration and report formatting

Public API:
    assess_recording(features, semantic)  → per-recording scores
    forecast(data)                        → burnout prediction
    generate_report(prediction)           → formatted report
"""

from wellcast.acoustic import classify, validate_features
from wellcast.blending import blend
from wellcast.config import ThresholdConfig, load_config
from wellcast.forecasting import predict_burnout_risk
from wellcast.personalization import compute_personalized_acoustic_scores
from wellcast.pipeline import assess_recording, forecast, forecast_file, generate_report
from wellcast.semantic import infer_from_text, merge_readings

__version__ = "1.0.0"

__all__ = [
    "ThresholdConfig",
    "load_config",
    "validate_features",
    "classify",
    "infer_from_text",
    "merge_readings",
    "blend",
    "predict_burnout_risk",
    "compute_personalized_acoustic_scores",
    "assess_recording",
    "forecast",
    "forecast_file",
    "generate_report",
]
