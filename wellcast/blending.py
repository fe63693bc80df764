"""
Hybrid blending of acoustic readings with optional semantic evidence.

The semantic side is a tagged variant with three cases, each a distinct policy:

    None              → acoustic score unchanged (100% acoustic weight)
    SemanticReading   → per-axis confidence-weighted blend with free-text inference
    SemanticAnalysis  → observation adjustments, fixed 70/30 blend
"""

import logging
from typing import Optional

from wellcast.config import ThresholdConfig
from wellcast.models import (
    AcousticReading,
    AxisBlend,
    BlendedBiomarkers,
    CombinedScore,
    ScoreAdjustments,
    SemanticAnalysis,
    SemanticInput,
    SemanticReading,
)
from wellcast.scoring import (
    clamp,
    clamp_score,
    clamp_unit,
    fatigue_level,
    stress_level,
)

logger = logging.getLogger(__name__)


POLICY_ACOUSTIC_ONLY = "acoustic"
POLICY_TEXT = "text"
POLICY_OBSERVATIONS = "observations"


# ---------------------------------------------------------------------------
# Policy 1: acoustic + free-text reading
# ---------------------------------------------------------------------------

def _blend_axis(
    acoustic_score: float,
    acoustic_confidence: float,
    semantic_score: float,
    semantic_confidence: float,
    base_acoustic: float,
    base_semantic: float,
    floor: float,
) -> AxisBlend:
    a_conf = clamp_unit(acoustic_confidence)
    s_conf = clamp_unit(semantic_confidence)

    acoustic_raw = base_acoustic * (floor + (1.0 - floor) * a_conf)
    semantic_raw = base_semantic * s_conf * s_conf
    total = acoustic_raw + semantic_raw

    if total <= 0 or s_conf == 0:
        return AxisBlend(
            score=clamp_score(acoustic_score),
            acoustic_weight=1.0,
            semantic_weight=0.0,
            acoustic_confidence=a_conf,
            semantic_confidence=s_conf,
            confidence=a_conf,
        )

    acoustic_weight = acoustic_raw / total
    semantic_weight = semantic_raw / total

    return AxisBlend(
        score=clamp_score(acoustic_score * acoustic_weight + semantic_score * semantic_weight),
        acoustic_weight=acoustic_weight,
        semantic_weight=semantic_weight,
        acoustic_confidence=a_conf,
        semantic_confidence=s_conf,
        confidence=clamp_unit(acoustic_weight * a_conf + semantic_weight * s_conf),
    )


def blend_acoustic_and_semantic(
    acoustic: AcousticReading,
    semantic: SemanticReading,
    cfg: Optional[ThresholdConfig] = None,
) -> BlendedBiomarkers:
    """
    Confidence-weighted blend per axis.

    Semantic weight grows with the square of textual confidence; confidence 0
    leaves the axis at the acoustic score exactly.
    """
    if cfg is None:
        cfg = ThresholdConfig()
    tb = cfg.text_blend

    stress = _blend_axis(
        acoustic.stress_score, acoustic.confidence,
        semantic.stress_score, semantic.stress_confidence,
        tb.stress_acoustic, tb.stress_semantic, tb.acoustic_confidence_floor,
    )
    fatigue = _blend_axis(
        acoustic.fatigue_score, acoustic.confidence,
        semantic.fatigue_score, semantic.fatigue_confidence,
        tb.fatigue_acoustic, tb.fatigue_semantic, tb.acoustic_confidence_floor,
    )

    return BlendedBiomarkers(
        stress_score=stress.score,
        fatigue_score=fatigue.score,
        stress_level=stress_level(stress.score, cfg.levels),
        fatigue_level=fatigue_level(fatigue.score, cfg.levels),
        confidence=clamp_unit((stress.confidence + fatigue.confidence) / 2),
        stress=stress,
        fatigue=fatigue,
    )


# ---------------------------------------------------------------------------
# Policy 2: acoustic + structured LLM observations
# ---------------------------------------------------------------------------

def calculate_semantic_adjustments(
    analysis: SemanticAnalysis,
    cfg: Optional[ThresholdConfig] = None,
) -> ScoreAdjustments:
    """Signed point adjustments per axis, clamped to [adjustment_min, adjustment_max]."""
    if cfg is None:
        cfg = ThresholdConfig()
    ob = cfg.observation_blend
    relevance = dict(ob.relevance_multipliers)

    stress = 0.0
    fatigue = 0.0

    for obs in analysis.observations:
        scale = relevance[obs.relevance]
        if obs.type == "stress_cue":
            stress += ob.stress_cue * scale
        elif obs.type == "fatigue_cue":
            fatigue += ob.fatigue_cue * scale
        elif obs.type == "positive_cue":
            relief = ob.positive_cue * scale * ob.positive_damping
            stress -= relief
            fatigue -= relief

    emotions = {name: (s, f) for name, s, f in ob.emotion_adjustments}
    e_stress, e_fatigue = emotions.get(analysis.overall_emotion, (0.0, 0.0))
    stress += e_stress * analysis.emotion_confidence
    fatigue += e_fatigue * analysis.emotion_confidence

    return ScoreAdjustments(
        stress_adjustment=clamp(stress, ob.adjustment_min, ob.adjustment_max),
        fatigue_adjustment=clamp(fatigue, ob.adjustment_min, ob.adjustment_max),
    )


def combine_scores(
    acoustic_stress: float,
    acoustic_fatigue: float,
    analysis: Optional[SemanticAnalysis],
    cfg: Optional[ThresholdConfig] = None,
) -> CombinedScore:
    """
    Fixed-weight blend: acoustic*0.7 + (acoustic + adjustment)*0.3.

    No analysis means the acoustic scores pass through unchanged.
    """
    if cfg is None:
        cfg = ThresholdConfig()

    if analysis is None:
        return CombinedScore(
            final_stress_score=clamp_score(acoustic_stress),
            final_fatigue_score=clamp_score(acoustic_fatigue),
        )

    ob = cfg.observation_blend
    adj = calculate_semantic_adjustments(analysis, cfg)

    final_stress = (
        acoustic_stress * ob.acoustic_weight
        + (acoustic_stress + adj.stress_adjustment) * ob.semantic_weight
    )
    final_fatigue = (
        acoustic_fatigue * ob.acoustic_weight
        + (acoustic_fatigue + adj.fatigue_adjustment) * ob.semantic_weight
    )

    return CombinedScore(
        final_stress_score=clamp_score(final_stress),
        final_fatigue_score=clamp_score(final_fatigue),
    )


# ---------------------------------------------------------------------------
# Variant dispatch
# ---------------------------------------------------------------------------

def blend_policy(semantic: SemanticInput) -> str:
    """Name the policy a semantic variant selects."""
    if semantic is None:
        return POLICY_ACOUSTIC_ONLY
    if isinstance(semantic, SemanticReading):
        return POLICY_TEXT
    if isinstance(semantic, SemanticAnalysis):
        return POLICY_OBSERVATIONS
    raise TypeError(f"Unsupported semantic input: {type(semantic).__name__}")


def blend(
    acoustic: AcousticReading,
    semantic: SemanticInput = None,
    cfg: Optional[ThresholdConfig] = None,
) -> CombinedScore:
    """Fuse one acoustic reading with whichever semantic variant is present."""
    if cfg is None:
        cfg = ThresholdConfig()

    policy = blend_policy(semantic)
    logger.debug("Blending with policy=%s", policy)

    if policy == POLICY_TEXT:
        return blend_acoustic_and_semantic(acoustic, semantic, cfg).to_combined()
    if policy == POLICY_OBSERVATIONS:
        return combine_scores(acoustic.stress_score, acoustic.fatigue_score, semantic, cfg)
    return combine_scores(acoustic.stress_score, acoustic.fatigue_score, None, cfg)
