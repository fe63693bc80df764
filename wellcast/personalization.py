"""
Per-user calibration, baseline-relative scoring, and recording quality.

Calibration is a bounded linear correction around the neutral score,
nudged toward the user's self-reports. With a stored voice baseline,
scores also weigh how far each feature moved from that baseline. Data
quality scores how much usable speech a recording holds and scales the
acoustic confidence accordingly.
"""

import math
from dataclasses import replace
from datetime import datetime
from typing import List, Mapping, Optional, Sequence, Tuple, Union

from wellcast.acoustic import pick_top_drivers, threshold_drivers
from wellcast.config import BaselineIndicator, CalibrationParams, ThresholdConfig
from wellcast.models import (
    AcousticFeatures,
    BiomarkerCalibration,
    BiomarkerExplanations,
    PersonalizedScores,
    VoiceDataQuality,
)
from wellcast.scoring import (
    NEUTRAL_SCORE,
    clamp,
    clamp_score,
    clamp_unit,
    fatigue_level,
    stress_level,
)
from wellcast.utils import iso_timestamp


DIMENSIONS = ("stress", "fatigue")


def _check_dimension(dimension: str) -> None:
    if dimension not in DIMENSIONS:
        raise ValueError(f"Unknown dimension: {dimension!r}")


def _safe(value: float, default: float) -> float:
    return value if isinstance(value, (int, float)) and math.isfinite(value) else default


def _bias_and_scale(cal: BiomarkerCalibration, dimension: str, p: CalibrationParams):
    bias = cal.stress_bias if dimension == "stress" else cal.fatigue_bias
    scale = cal.stress_scale if dimension == "stress" else cal.fatigue_scale
    return (
        clamp(_safe(bias, 0.0), p.bias_min, p.bias_max),
        clamp(_safe(scale, 1.0), p.scale_min, p.scale_max),
    )


# ---------------------------------------------------------------------------
# Calibration
# ---------------------------------------------------------------------------

def apply_calibration(
    raw_score: float,
    dimension: str,
    calibration: Optional[BiomarkerCalibration] = None,
    cfg: Optional[ThresholdConfig] = None,
) -> int:
    """50 + (raw - 50) * scale + bias, with scale and bias held to their bounds."""
    if cfg is None:
        cfg = ThresholdConfig()
    _check_dimension(dimension)

    raw = clamp_score(raw_score)
    if calibration is None:
        return raw

    bias, scale = _bias_and_scale(calibration, dimension, cfg.calibration)
    return clamp_score(NEUTRAL_SCORE + (raw - NEUTRAL_SCORE) * scale + bias)


def update_calibration_from_self_report(
    dimension: str,
    acoustic_score: float,
    self_report_score: float,
    calibration: Optional[BiomarkerCalibration] = None,
    cfg: Optional[ThresholdConfig] = None,
    now: Optional[datetime] = None,
) -> BiomarkerCalibration:
    """One online step moving a single dimension's bias and scale toward the self-report."""
    if cfg is None:
        cfg = ThresholdConfig()
    _check_dimension(dimension)
    p = cfg.calibration
    stamp = iso_timestamp(now)

    prev = calibration if calibration is not None else BiomarkerCalibration(updated_at=stamp)

    raw = clamp_score(acoustic_score)
    target = clamp_score(self_report_score)
    prev_bias = prev.stress_bias if dimension == "stress" else prev.fatigue_bias
    prev_scale = prev.stress_scale if dimension == "stress" else prev.fatigue_scale

    predicted = clamp_score(NEUTRAL_SCORE + (raw - NEUTRAL_SCORE) * prev_scale + prev_bias)
    error = target - predicted
    centered = (raw - NEUTRAL_SCORE) / NEUTRAL_SCORE

    next_bias = clamp(prev_bias + p.bias_learning_rate * error, p.bias_min, p.bias_max)
    next_scale = clamp(prev_scale + p.scale_learning_rate * error * centered, p.scale_min, p.scale_max)

    if dimension == "stress":
        return replace(prev, stress_bias=next_bias, stress_scale=next_scale, updated_at=stamp)
    return replace(prev, fatigue_bias=next_bias, fatigue_scale=next_scale, updated_at=stamp)


def update_calibration_from_submission(
    acoustic_stress: float,
    acoustic_fatigue: float,
    self_report_stress: float,
    self_report_fatigue: float,
    calibration: Optional[BiomarkerCalibration] = None,
    cfg: Optional[ThresholdConfig] = None,
    now: Optional[datetime] = None,
) -> BiomarkerCalibration:
    """Update both dimensions from one self-report submission and count the sample."""
    if cfg is None:
        cfg = ThresholdConfig()
    stamp = iso_timestamp(now)
    base = calibration if calibration is not None else BiomarkerCalibration(updated_at=stamp)

    after_stress = update_calibration_from_self_report(
        "stress", acoustic_stress, self_report_stress, base, cfg, now
    )
    after_both = update_calibration_from_self_report(
        "fatigue", acoustic_fatigue, self_report_fatigue, after_stress, cfg, now
    )
    return replace(after_both, sample_count=base.sample_count + 1, updated_at=stamp)


# ---------------------------------------------------------------------------
# Voice data quality
# ---------------------------------------------------------------------------

def compute_voice_data_quality(
    speech_seconds: float,
    total_seconds: float,
    rms: Optional[float] = None,
    max_abs: Optional[float] = None,
    cfg: Optional[ThresholdConfig] = None,
) -> VoiceDataQuality:
    """Quality in [0, 1] with the reasons that reduced it."""
    if cfg is None:
        cfg = ThresholdConfig()
    q = cfg.quality

    speech = max(0.0, _safe(speech_seconds, 0.0))
    total = max(0.0, _safe(total_seconds, 0.0))
    ratio = clamp_unit(speech / total) if total > 0 else 0.0

    reasons: List[str] = []

    # Early seconds of speech matter most
    speech_amount = 1 - math.exp(-speech / q.speech_time_constant)
    ratio_score = clamp_unit((ratio - q.ratio_floor) / q.ratio_span)
    quality = clamp_unit(speech_amount * q.speech_amount_weight + ratio_score * q.ratio_weight)

    if speech < q.very_little_speech_seconds:
        quality *= q.very_little_speech_factor
        reasons.append("Very little speech")
    elif speech < q.short_speech_seconds:
        quality *= q.short_speech_factor
        reasons.append("Short speech sample")

    if total > 0 and ratio < q.mostly_silence_ratio:
        quality *= q.mostly_silence_factor
        reasons.append("Mostly silence")

    if rms is not None and math.isfinite(rms) and rms < q.quiet_rms:
        quality *= q.quiet_factor
        reasons.append("Very quiet audio")

    if max_abs is not None and math.isfinite(max_abs) and max_abs > q.clipping_level:
        quality *= q.clipping_factor
        reasons.append("Audio near clipping")

    return VoiceDataQuality(
        speech_seconds=speech,
        total_seconds=total,
        speech_ratio=ratio,
        quality=clamp_unit(quality),
        reasons=tuple(reasons),
    )


def combined_confidence(base_confidence: float, quality: VoiceDataQuality) -> float:
    """Acoustic confidence scaled by recording quality."""
    return clamp_unit(clamp_unit(base_confidence) * clamp_unit(quality.quality))


# ---------------------------------------------------------------------------
# Baseline-relative scoring
# ---------------------------------------------------------------------------

def _as_features(features: Union[AcousticFeatures, Mapping]) -> AcousticFeatures:
    if isinstance(features, AcousticFeatures):
        return features
    return AcousticFeatures.from_dict(features)


def _intensity(current: AcousticFeatures, baseline: AcousticFeatures, ind: BaselineIndicator) -> float:
    change = getattr(current, ind.feature) - getattr(baseline, ind.feature)
    if ind.direction == "decrease":
        change = -change
    return max(0.0, change / ind.delta)


def baseline_relative_score(
    features: AcousticFeatures,
    baseline: AcousticFeatures,
    indicators: Sequence[BaselineIndicator],
    cfg: ThresholdConfig,
) -> Tuple[int, List[str]]:
    """Score one axis from weighted changes against the baseline, plus its drivers."""
    b = cfg.baseline
    contributions = [(_intensity(features, baseline, ind), ind.label) for ind in indicators]
    weighted = sum(ind.weight * strength for ind, (strength, _) in zip(indicators, contributions))
    score = clamp_score(b.score_floor + max(0.0, weighted) * b.score_per_intensity)
    drivers = pick_top_drivers(contributions, cfg.drivers.min_strength, cfg.drivers.limit)
    return score, drivers


def compute_personalized_acoustic_scores(
    features: Union[AcousticFeatures, Mapping],
    baseline: Optional[Union[AcousticFeatures, Mapping]],
    fallback_scores,
    cfg: Optional[ThresholdConfig] = None,
) -> PersonalizedScores:
    """
    Personalize threshold scores against the user's stored voice baseline.

    fallback_scores is anything carrying stress_score and fatigue_score
    (typically the VoiceMetrics from classify). With a baseline the result
    mixes threshold and baseline-relative scores and explains itself in
    "baseline" mode; without one the threshold scores pass through with
    threshold drivers.
    """
    if cfg is None:
        cfg = ThresholdConfig()
    current = _as_features(features)

    if baseline is not None:
        b = cfg.baseline
        reference = _as_features(baseline)
        rel_stress, stress_drivers = baseline_relative_score(
            current, reference, b.stress_indicators, cfg
        )
        rel_fatigue, fatigue_drivers = baseline_relative_score(
            current, reference, b.fatigue_indicators, cfg
        )
        stress = clamp_score(
            fallback_scores.stress_score * b.stress_threshold_weight
            + rel_stress * b.stress_relative_weight
        )
        fatigue = clamp_score(
            fallback_scores.fatigue_score * b.fatigue_threshold_weight
            + rel_fatigue * b.fatigue_relative_weight
        )
        explanations = BiomarkerExplanations(
            mode="baseline",
            stress=tuple(stress_drivers),
            fatigue=tuple(fatigue_drivers),
        )
    else:
        stress = clamp_score(fallback_scores.stress_score)
        fatigue = clamp_score(fallback_scores.fatigue_score)
        drivers = threshold_drivers(current, stress, fatigue, cfg)
        explanations = BiomarkerExplanations(
            mode="threshold",
            stress=tuple(drivers["stress"]),
            fatigue=tuple(drivers["fatigue"]),
        )

    return PersonalizedScores(
        stress_score=stress,
        fatigue_score=fatigue,
        stress_level=stress_level(stress, cfg.levels),
        fatigue_level=fatigue_level(fatigue, cfg.levels),
        explanations=explanations,
    )
