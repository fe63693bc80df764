"""
Shared score arithmetic: rounding, clamping, and score → level mapping.

Every component funnels its numeric outputs through these helpers so the
[0, 100] and [0, 1] ranges hold on every code path.
"""

import math

from wellcast.config import (
    FATIGUE_LEVEL_NAMES,
    STRESS_LEVEL_NAMES,
    ForecastParams,
    ScoreLevels,
)


SCORE_MIN = 0
SCORE_MAX = 100
NEUTRAL_SCORE = 50


def round_half_up(value: float) -> int:
    """Round halves toward +inf: 2.5 → 3, -2.5 → -2."""
    return int(math.floor(value + 0.5))


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def clamp_unit(value: float) -> float:
    """Clamp a confidence-like value to [0, 1]."""
    return clamp(value, 0.0, 1.0)


def clamp_score(value: float) -> int:
    """Round and clamp to an integer score in [0, 100]."""
    return int(clamp(round_half_up(value), SCORE_MIN, SCORE_MAX))


# ---------------------------------------------------------------------------
# Levels
# ---------------------------------------------------------------------------

def _level_index(score: float, levels: ScoreLevels) -> int:
    if score >= levels.high:
        return 3
    if score >= levels.elevated:
        return 2
    if score >= levels.moderate:
        return 1
    return 0


def stress_level(score: float, levels: ScoreLevels) -> str:
    """low < 30 ≤ moderate < 50 ≤ elevated < 70 ≤ high."""
    return STRESS_LEVEL_NAMES[_level_index(score, levels)]


def fatigue_level(score: float, levels: ScoreLevels) -> str:
    """rested < 30 ≤ normal < 50 ≤ tired < 70 ≤ exhausted."""
    return FATIGUE_LEVEL_NAMES[_level_index(score, levels)]


def risk_level(score: float, f: ForecastParams) -> str:
    """Map a burnout risk score to low / moderate / high / critical."""
    if score >= f.risk_critical:
        return "critical"
    if score >= f.risk_high:
        return "high"
    if score >= f.risk_moderate:
        return "moderate"
    return "low"
