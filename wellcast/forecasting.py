"""
Burnout forecasting over a rolling history of daily scores.

Each day's stress and fatigue collapse into one burden value; slope,
volatility, and recent-vs-overall averages over that series drive a risk
score, a trend label, a horizon estimate, a confidence, and a factor list.
All functions are pure and recompute from the full series on every call.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from wellcast.config import ForecastParams, RiskWeights, ThresholdConfig
from wellcast.models import BurnoutPrediction, TrendDataPoint
from wellcast.scoring import clamp, clamp_score, risk_level

logger = logging.getLogger(__name__)


INSUFFICIENT_DATA = "Insufficient data for prediction"
WITHIN_NORMAL_RANGE = "Overall wellness within normal range"


@dataclass(frozen=True)
class TrendAnalysis:
    """Summary statistics of the burden series."""

    slope: float
    volatility: float
    recent_average: float
    overall_average: float


# ---------------------------------------------------------------------------
# OLS / dispersion primitives
# ---------------------------------------------------------------------------

def _ols_slope(y: np.ndarray) -> float:
    """
    Ordinary least-squares slope for evenly-spaced data.

    Uses the closed-form solution:  slope = Σ(x_c · y_c) / Σ(x_c²)
    where x_c and y_c are mean-centered.
    """
    n = len(y)
    if n < 2:
        return 0.0
    x = np.arange(n, dtype=np.float64)
    x_c = x - x.mean()
    y_c = y - y.mean()
    denom = np.dot(x_c, x_c)
    if denom == 0.0:
        return 0.0
    return float(np.dot(x_c, y_c) / denom)


def _population_std(y: np.ndarray) -> float:
    if len(y) == 0:
        return 0.0
    return float(np.std(y, ddof=0))


def burden_series(series: Sequence[TrendDataPoint]) -> np.ndarray:
    """Per-day mean of stress and fatigue."""
    return np.array(
        [(p.stress_score + p.fatigue_score) / 2 for p in series],
        dtype=np.float64,
    )


def analyze_trend(series: Sequence[TrendDataPoint], f: ForecastParams) -> TrendAnalysis:
    burden = burden_series(series)
    recent = burden[-min(f.recent_window, len(burden)):]
    return TrendAnalysis(
        slope=_ols_slope(burden),
        volatility=_population_std(burden),
        recent_average=float(recent.mean()),
        overall_average=float(burden.mean()),
    )


# ---------------------------------------------------------------------------
# Derived outputs
# ---------------------------------------------------------------------------

def trend_direction(slope: float, f: ForecastParams) -> str:
    """Positive slope means worsening, so it reads as "declining"."""
    if slope > f.slope_declining:
        return "declining"
    if slope < f.slope_improving:
        return "improving"
    return "stable"


def compute_risk_score(analysis: TrendAnalysis, w: RiskWeights) -> int:
    """
    Composite risk in [0, 100].

    Only a worsening (positive) slope adds risk; an improving slope shows up
    in the trend label alone.
    """
    risk = analysis.recent_average * w.recent_average
    risk += min(max(analysis.slope, 0.0) * w.slope_multiplier, w.upward_trend_max)
    risk += min(analysis.volatility * w.volatility_multiplier, w.volatility_max)
    if analysis.recent_average > analysis.overall_average + w.recent_vs_overall_diff:
        risk += w.recent_worse
    return clamp_score(risk)


def estimate_days(analysis: TrendAnalysis, risk_score: int, f: ForecastParams) -> int:
    """Horizon until potential burnout; stable or improving series report the full horizon."""
    if risk_score >= f.risk_critical:
        return f.days_rapid_decline
    if analysis.slope > f.slope_rapid:
        return f.days_rapid_decline
    if analysis.slope > f.slope_moderate:
        return f.days_moderate_decline
    return f.days_slow_decline


def compute_confidence(n: int, analysis: TrendAnalysis, f: ForecastParams) -> float:
    confidence = f.confidence_base

    if n >= f.data_points_high:
        confidence += f.boost_high_data
    elif n >= f.data_points_moderate:
        confidence += f.boost_moderate_data
    elif n >= f.data_points_low:
        confidence += f.boost_low_data
    else:
        confidence += f.penalty_minimal_data

    if analysis.volatility < f.volatility_low:
        confidence += f.boost_low_volatility
    elif analysis.volatility > f.volatility_concerning:
        confidence += f.penalty_high_volatility

    if abs(analysis.slope) > f.strong_slope:
        confidence += f.boost_strong_trend

    return clamp(confidence, f.confidence_floor, 1.0)


def identify_factors(
    analysis: TrendAnalysis,
    series: Sequence[TrendDataPoint],
    f: ForecastParams,
) -> List[str]:
    """
    Ordered checklist of contributing factors; never empty.

    The recent stress and fatigue levels divide by the full window even when
    fewer points exist, so short histories read lower.
    """
    recent = series[-f.recent_window:]
    recent_stress = float(np.sum([p.stress_score for p in recent])) / f.recent_window
    recent_fatigue = float(np.sum([p.fatigue_score for p in recent])) / f.recent_window

    factors: List[str] = []
    if recent_stress > f.stress_elevated:
        factors.append("Elevated stress levels")
    if recent_fatigue > f.fatigue_elevated:
        factors.append("High fatigue levels")
    if analysis.slope > f.slope_declining:
        factors.append("Declining trend over time")
    if analysis.volatility > f.volatility_high:
        factors.append("Inconsistent wellness patterns")
    if analysis.recent_average > f.burden_high:
        factors.append("Sustained high stress/fatigue")

    if not factors:
        factors.append(WITHIN_NORMAL_RANGE)
    return factors


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def insufficient_data_prediction(f: ForecastParams) -> BurnoutPrediction:
    return BurnoutPrediction(
        risk_score=0,
        risk_level="low",
        predicted_days=f.days_slow_decline,
        trend="stable",
        confidence=f.confidence_floor,
        factors=(INSUFFICIENT_DATA,),
    )


def predict_burnout_risk(
    series: Sequence[TrendDataPoint],
    cfg: Optional[ThresholdConfig] = None,
) -> BurnoutPrediction:
    """
    Project near-term burnout risk from an ascending daily series.

    Fewer than two points yields the low-confidence sentinel rather than an error.
    """
    if cfg is None:
        cfg = ThresholdConfig()
    f = cfg.forecast

    series = list(series)
    if len(series) < f.min_data_points:
        logger.debug("Forecast skipped: %d data point(s)", len(series))
        return insufficient_data_prediction(f)

    analysis = analyze_trend(series, f)
    risk_score = compute_risk_score(analysis, cfg.risk)

    logger.debug(
        "Forecast: n=%d slope=%.3f volatility=%.3f recent=%.2f overall=%.2f risk=%d",
        len(series), analysis.slope, analysis.volatility,
        analysis.recent_average, analysis.overall_average, risk_score,
    )

    return BurnoutPrediction(
        risk_score=risk_score,
        risk_level=risk_level(risk_score, f),
        predicted_days=estimate_days(analysis, risk_score, f),
        trend=trend_direction(analysis.slope, f),
        confidence=compute_confidence(len(series), analysis, f),
        factors=tuple(identify_factors(analysis, series, f)),
    )
