"""
Unit Tests for Burnout Forecasting
===================================
Tests cover:
  - Insufficient-data sentinel
  - Risk level classification
  - Trend direction and horizon
  - Confidence behaviour
  - Contributing factors
  - OLS / dispersion primitives
"""

import sys
import unittest
from datetime import date, timedelta
from pathlib import Path

import numpy as np

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from wellcast.config import ThresholdConfig
from wellcast.forecasting import (
    INSUFFICIENT_DATA,
    WITHIN_NORMAL_RANGE,
    _ols_slope,
    _population_std,
    predict_burnout_risk,
)
from wellcast.models import TrendDataPoint

CFG = ThresholdConfig()
START = date(2024, 1, 1)


def series(days, stress, fatigue):
    """Build a daily series; stress/fatigue are constants or callables of the day index."""
    out = []
    for i in range(days):
        s = stress(i) if callable(stress) else stress
        f = fatigue(i) if callable(fatigue) else fatigue
        out.append(TrendDataPoint(START + timedelta(days=i), s, f))
    return out


def oscillating(days, low, high):
    return series(days, lambda i: low if i % 2 == 0 else high, lambda i: low if i % 2 == 0 else high)


class TestInsufficientData(unittest.TestCase):

    def test_empty(self):
        r = predict_burnout_risk([], CFG)
        self.assertEqual(r.risk_level, "low")
        self.assertEqual(r.risk_score, 0)
        self.assertEqual(r.confidence, 0.1)
        self.assertEqual(r.predicted_days, 7)
        self.assertEqual(r.trend, "stable")
        self.assertIn(INSUFFICIENT_DATA, r.factors)

    def test_single_point(self):
        r = predict_burnout_risk(series(1, 50, 50), CFG)
        self.assertEqual(r.risk_level, "low")
        self.assertEqual(r.confidence, 0.1)
        self.assertIn(INSUFFICIENT_DATA, r.factors)

    def test_two_points_is_enough(self):
        r = predict_burnout_risk(series(2, 20, 20), CFG)
        self.assertGreater(r.confidence, 0.1)
        self.assertNotIn(INSUFFICIENT_DATA, r.factors)
        self.assertAlmostEqual(r.confidence, 0.45)


class TestRiskLevels(unittest.TestCase):

    def test_low_for_constant_low_scores(self):
        r = predict_burnout_risk(series(7, 20, 20), CFG)
        self.assertEqual(r.risk_level, "low")
        self.assertLess(r.risk_score, 35)
        self.assertEqual(r.risk_score, 8)

    def test_moderate_for_stable_high_scores(self):
        r = predict_burnout_risk(series(7, 90, 90), CFG)
        self.assertEqual(r.risk_level, "moderate")
        self.assertEqual(r.risk_score, 36)
        self.assertEqual(r.trend, "stable")

    def test_worsening_trend(self):
        r = predict_burnout_risk(series(7, lambda d: 40 + d * 7, lambda d: 40 + d * 7), CFG)
        self.assertEqual(r.trend, "declining")
        self.assertIn(r.risk_level, ("moderate", "high", "critical"))
        # 75*0.4 + 7*3 + 14*0.3 + 10
        self.assertEqual(r.risk_score, 65)
        self.assertEqual(r.risk_level, "high")

    def test_critical_for_steep_volatile_worsening(self):
        points = [
            (30, 30), (50, 40), (45, 55), (65, 60), (70, 75), (85, 80), (95, 90),
        ]
        data = [TrendDataPoint(START + timedelta(days=i), s, f) for i, (s, f) in enumerate(points)]
        r = predict_burnout_risk(data, CFG)
        self.assertEqual(r.risk_level, "critical")
        self.assertGreaterEqual(r.risk_score, 75)
        self.assertEqual(r.predicted_days, 3)

    def test_risk_rounds_half_up(self):
        # 21.25 * 0.4 = 8.5
        r = predict_burnout_risk(series(5, 21.25, 21.25), CFG)
        self.assertEqual(r.risk_score, 9)

    def test_risk_score_bounded(self):
        r = predict_burnout_risk(oscillating(10, 0, 100) + series(3, 100, 100), CFG)
        self.assertTrue(0 <= r.risk_score <= 100)


class TestTrendAndHorizon(unittest.TestCase):

    def test_stable(self):
        self.assertEqual(predict_burnout_risk(series(7, 40, 40), CFG).trend, "stable")

    def test_declining(self):
        r = predict_burnout_risk(series(7, lambda d: 30 + d * 8, lambda d: 30 + d * 8), CFG)
        self.assertEqual(r.trend, "declining")

    def test_improving(self):
        r = predict_burnout_risk(series(7, lambda d: 70 - d * 8, lambda d: 70 - d * 8), CFG)
        self.assertEqual(r.trend, "improving")
        self.assertEqual(r.predicted_days, 7)
        self.assertEqual(r.risk_level, "low")

    def test_rapid_decline_horizon(self):
        r = predict_burnout_risk(series(7, lambda d: 40 + d * 7, lambda d: 40 + d * 7), CFG)
        self.assertEqual(r.predicted_days, 3)

    def test_moderate_decline_horizon(self):
        r = predict_burnout_risk(series(7, lambda d: 40 + d * 3, lambda d: 40 + d * 3), CFG)
        self.assertEqual(r.trend, "declining")
        self.assertEqual(r.predicted_days, 5)

    def test_slow_decline_horizon(self):
        r = predict_burnout_risk(series(7, lambda d: 40 + d, lambda d: 40 + d), CFG)
        self.assertEqual(r.trend, "stable")
        self.assertEqual(r.predicted_days, 7)

    def test_improving_slope_adds_no_risk(self):
        falling = predict_burnout_risk(series(7, lambda d: 36 - d * 2, lambda d: 36 - d * 2), CFG)
        # 26*0.4 + 4*0.3, slope -2 contributes nothing
        self.assertEqual(falling.risk_score, 12)
        self.assertEqual(falling.trend, "stable")


class TestConfidence(unittest.TestCase):

    def test_grows_with_series_length(self):
        short = predict_burnout_risk(series(3, 40, 40), CFG)
        long_ = predict_burnout_risk(series(14, 40, 40), CFG)
        self.assertGreater(long_.confidence, short.confidence)
        self.assertAlmostEqual(short.confidence, 0.75)
        self.assertAlmostEqual(long_.confidence, 0.95)

    def test_drops_with_volatility(self):
        stable = predict_burnout_risk(series(7, 40, 40), CFG)
        volatile = predict_burnout_risk(oscillating(7, 20, 80), CFG)
        self.assertGreater(stable.confidence, volatile.confidence)
        self.assertAlmostEqual(volatile.confidence, 0.6)

    def test_strong_trend_boost(self):
        r = predict_burnout_risk(series(7, lambda d: 30 + d * 8, lambda d: 30 + d * 8), CFG)
        # 0.5 + 0.2 (7 points) + 0.05 (|slope| > 3); volatility 16 gets no adjustment
        self.assertAlmostEqual(r.confidence, 0.75)

    def test_clamped(self):
        for data in (series(7, 40, 40), oscillating(2, 0, 100), series(30, 50, 50)):
            r = predict_burnout_risk(data, CFG)
            self.assertGreaterEqual(r.confidence, 0.1)
            self.assertLessEqual(r.confidence, 1.0)


class TestFactors(unittest.TestCase):

    def test_elevated_stress(self):
        r = predict_burnout_risk(series(7, 70, 30), CFG)
        self.assertIn("Elevated stress levels", r.factors)
        self.assertNotIn("High fatigue levels", r.factors)

    def test_high_fatigue(self):
        self.assertIn("High fatigue levels", predict_burnout_risk(series(7, 30, 70), CFG).factors)

    def test_declining_trend(self):
        r = predict_burnout_risk(series(7, lambda d: 30 + d * 8, lambda d: 30 + d * 8), CFG)
        self.assertIn("Declining trend over time", r.factors)

    def test_inconsistent_patterns(self):
        r = predict_burnout_risk(oscillating(7, 10, 90), CFG)
        self.assertIn("Inconsistent wellness patterns", r.factors)

    def test_sustained_high_burden(self):
        self.assertIn("Sustained high stress/fatigue", predict_burnout_risk(series(7, 70, 70), CFG).factors)

    def test_normal_range_when_nothing_applies(self):
        r = predict_burnout_risk(series(7, 20, 20), CFG)
        self.assertEqual(r.factors, (WITHIN_NORMAL_RANGE,))

    def test_short_history_divides_by_full_window(self):
        # Two days at 70 stress read as 140/3, below the elevated threshold
        r = predict_burnout_risk(series(2, 70, 20), CFG)
        self.assertEqual(r.factors, (WITHIN_NORMAL_RANGE,))

    def test_full_window_unaffected(self):
        r = predict_burnout_risk(series(3, 70, 20), CFG)
        self.assertIn("Elevated stress levels", r.factors)

    def test_factor_order(self):
        r = predict_burnout_risk(series(7, 90, 90), CFG)
        self.assertEqual(
            r.factors,
            ("Elevated stress levels", "High fatigue levels", "Sustained high stress/fatigue"),
        )

    def test_to_dict(self):
        d = predict_burnout_risk(series(7, 90, 90), CFG).to_dict()
        self.assertEqual(d["riskLevel"], "moderate")
        self.assertIsInstance(d["factors"], list)


class TestPrimitives(unittest.TestCase):

    def test_flat_slope(self):
        self.assertAlmostEqual(_ols_slope(np.array([5.0, 5.0, 5.0, 5.0])), 0.0)

    def test_linear_slope(self):
        self.assertAlmostEqual(_ols_slope(np.array([1.0, 2.0, 3.0, 4.0])), 1.0)

    def test_single_point_slope(self):
        self.assertAlmostEqual(_ols_slope(np.array([7.0])), 0.0)

    def test_population_std(self):
        self.assertAlmostEqual(_population_std(np.array([2, 4, 4, 4, 5, 5, 7, 9], dtype=float)), 2.0)


class TestConfigOverride(unittest.TestCase):

    def test_custom_risk_boundaries(self):
        cfg = ThresholdConfig.from_dict({"forecast": {"risk_moderate": 40}})
        r = predict_burnout_risk(series(7, 90, 90), cfg)
        self.assertEqual(r.risk_level, "low")


if __name__ == "__main__":
    unittest.main()
