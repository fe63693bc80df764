"""
Acoustic classification: feature validation, ladder scoring, confidence, breakdown.

Stress and fatigue are each scored by a set of IndicatorLadders evaluated by
one generic bucket lookup. All functions are pure; validation never raises.
"""

import logging
import math
from datetime import datetime
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

from wellcast.config import IndicatorLadder, ThresholdConfig
from wellcast.models import AcousticFeatures, FeatureContribution, VoiceMetrics
from wellcast.scoring import (
    clamp_unit,
    fatigue_level,
    round_half_up,
    stress_level,
)
from wellcast.utils import iso_timestamp

logger = logging.getLogger(__name__)


# Six core fields a feature set must carry as real numbers
CORE_FIELDS = ("rms", "speechRate", "pauseRatio", "spectralCentroid", "spectralFlux", "zcr")


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def _is_number(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def validate_features(
    features: Union[AcousticFeatures, Mapping],
    cfg: Optional[ThresholdConfig] = None,
) -> bool:
    """
    Structural and range check before classification.

    Total function: returns False on any violation, never raises. Accepts the
    JSON-shaped mapping (camelCase keys) or an AcousticFeatures instance.
    """
    if cfg is None:
        cfg = ThresholdConfig()
    v = cfg.validation

    if isinstance(features, AcousticFeatures):
        features = features.to_dict()
    if not isinstance(features, Mapping):
        logger.debug("Rejected features: expected a mapping, got %s", type(features).__name__)
        return False

    for key in CORE_FIELDS + ("pauseCount",):
        if not _is_number(features.get(key)):
            logger.debug("Rejected features: %s missing or not a number", key)
            return False

    ranges = (
        ("rms", v.rms_min, v.rms_max),
        ("speechRate", v.speech_rate_min, v.speech_rate_max),
        ("pauseRatio", v.pause_ratio_min, v.pause_ratio_max),
        ("zcr", v.zcr_min, v.zcr_max),
    )
    for key, low, high in ranges:
        value = features[key]
        if value < low or value > high:
            logger.debug("Rejected features: %s=%s outside [%s, %s]", key, value, low, high)
            return False

    if features["pauseCount"] < v.min_pause_count:
        logger.debug("Rejected features: pauseCount=%s too little speech", features["pauseCount"])
        return False

    return True


# ---------------------------------------------------------------------------
# Ladder evaluation
# ---------------------------------------------------------------------------

def evaluate_ladder(value: float, ladder: IndicatorLadder) -> Tuple[int, int]:
    """
    Return (points earned, tier index) for one indicator.

    Tier index 0 is the strongest tier; -1 means no tier fired.
    """
    for idx, (threshold, points) in enumerate(ladder.tiers):
        hit = value > threshold if ladder.direction == "above" else value < threshold
        if hit:
            return points, idx
    return 0, -1


def score_ladders(features: AcousticFeatures, ladders: Sequence[IndicatorLadder]) -> int:
    """(earned points / total weight) * 100, rounded half-up."""
    earned = 0
    total = 0
    for ladder in ladders:
        points, _ = evaluate_ladder(getattr(features, ladder.feature), ladder)
        earned += points
        total += ladder.weight
    if total <= 0:
        return 0
    return round_half_up(earned / total * 100)


def compute_confidence(features: AcousticFeatures, cfg: ThresholdConfig) -> float:
    """Base confidence adjusted for amount of speech and capture quality."""
    c = cfg.confidence
    confidence = c.base

    if features.pause_count > c.pause_count_high:
        confidence += c.boost_high
    elif features.pause_count > c.pause_count_moderate:
        confidence += c.boost_moderate
    elif features.pause_count < c.pause_count_low:
        confidence += c.penalty_low_data

    if features.rms < c.rms_poor_quality:
        confidence += c.penalty_poor_audio
    elif features.rms > c.rms_good_quality:
        confidence += c.boost_good_audio

    return clamp_unit(confidence)


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

def classify(
    features: AcousticFeatures,
    cfg: Optional[ThresholdConfig] = None,
    now: Optional[datetime] = None,
) -> VoiceMetrics:
    """Map one validated feature vector to stress/fatigue scores, levels, and confidence."""
    if cfg is None:
        cfg = ThresholdConfig()

    stress = score_ladders(features, cfg.stress_ladders)
    fatigue = score_ladders(features, cfg.fatigue_ladders)

    return VoiceMetrics(
        stress_score=stress,
        fatigue_score=fatigue,
        stress_level=stress_level(stress, cfg.levels),
        fatigue_level=fatigue_level(fatigue, cfg.levels),
        confidence=compute_confidence(features, cfg),
        analyzed_at=iso_timestamp(now),
    )


# ---------------------------------------------------------------------------
# Breakdown (explainability)
# ---------------------------------------------------------------------------

_STATUS_BY_TIER = {0: "high", 1: "elevated"}


def _describe(ladder: IndicatorLadder, axis: str, value: float, status: str) -> str:
    if status == "normal":
        return f"{ladder.display_name} is normal at {value:.2f}"
    label = ladder.high_label if status == "high" else ladder.moderate_label
    return f"{ladder.display_name} at {value:.2f}: {label.lower()} ({axis} indicator)"


def analyze_with_breakdown(
    features: AcousticFeatures,
    cfg: Optional[ThresholdConfig] = None,
) -> List[FeatureContribution]:
    """One contribution entry per ladder, stress ladders first."""
    if cfg is None:
        cfg = ThresholdConfig()

    breakdown: List[FeatureContribution] = []
    for axis, ladders in (("stress", cfg.stress_ladders), ("fatigue", cfg.fatigue_ladders)):
        for ladder in ladders:
            value = getattr(features, ladder.feature)
            points, tier = evaluate_ladder(value, ladder)
            status = _STATUS_BY_TIER.get(tier, "normal")
            breakdown.append(
                FeatureContribution(
                    axis=axis,
                    feature=ladder.feature,
                    display_name=ladder.display_name,
                    raw_value=value,
                    status=status,
                    contribution=points,
                    max_contribution=ladder.weight,
                    description=_describe(ladder, axis, value, status),
                )
            )
    return breakdown


def pick_top_drivers(
    contributions: Sequence[Tuple[float, str]],
    min_strength: float,
    limit: int,
) -> List[str]:
    """Labels of the strongest (strength, label) pairs above min_strength."""
    kept = [c for c in contributions if c[0] > min_strength]
    kept.sort(key=lambda item: item[0], reverse=True)
    return [label for _, label in kept[:limit]]


def threshold_drivers(
    features: AcousticFeatures,
    stress_score: float,
    fatigue_score: float,
    cfg: Optional[ThresholdConfig] = None,
    limit: Optional[int] = None,
) -> Dict[str, List[str]]:
    """
    Human-readable drivers per axis, strongest first.

    An axis reports drivers only once its score reaches the moderate level.
    Each fired tier contributes the strength its ladder assigns to that tier.
    """
    if cfg is None:
        cfg = ThresholdConfig()
    d = cfg.drivers
    if limit is None:
        limit = d.limit

    out: Dict[str, List[str]] = {}
    for axis, ladders, score in (
        ("stress", cfg.stress_ladders, stress_score),
        ("fatigue", cfg.fatigue_ladders, fatigue_score),
    ):
        if score < cfg.levels.moderate:
            out[axis] = []
            continue
        contributions = []
        for ladder in ladders:
            _, tier = evaluate_ladder(getattr(features, ladder.feature), ladder)
            if tier < 0:
                continue
            if tier == 0:
                contributions.append((ladder.strengths[0], ladder.high_label))
            else:
                contributions.append((ladder.strengths[1], ladder.moderate_label))
        out[axis] = pick_top_drivers(contributions, d.min_strength, limit)
    return out
