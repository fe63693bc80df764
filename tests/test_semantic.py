"""
Unit Tests for Text Inference and Reading Merge
================================================
"""

import sys
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from wellcast.models import SemanticReading
from wellcast.semantic import infer_from_text, merge_all, merge_readings, normalize_text


class TestInferFromText(unittest.TestCase):

    def test_explicit_stress(self):
        r = infer_from_text("I feel stressed out right now")
        self.assertGreaterEqual(r.stress_score, 80)
        self.assertGreaterEqual(r.stress_confidence, 0.7)

    def test_explicit_fatigue(self):
        r = infer_from_text("I am exhausted and drained")
        self.assertGreaterEqual(r.fatigue_score, 85)
        self.assertGreaterEqual(r.fatigue_confidence, 0.7)

    def test_no_signal_is_neutral_baseline(self):
        r = infer_from_text("Just checking in")
        self.assertEqual(r.stress_score, 50)
        self.assertEqual(r.fatigue_score, 50)
        self.assertEqual(r.stress_confidence, 0)
        self.assertEqual(r.fatigue_confidence, 0)

    def test_empty_text(self):
        for text in ("", "   ", "!!!", None):
            r = infer_from_text(text)
            self.assertEqual((r.stress_score, r.stress_confidence), (50, 0))
            self.assertEqual((r.fatigue_score, r.fatigue_confidence), (50, 0))

    def test_high_tier_wins_over_moderate(self):
        r = infer_from_text("so stressed, honestly overwhelmed")
        self.assertEqual(r.stress_score, 95)

    def test_case_and_punctuation_ignored(self):
        r = infer_from_text("Feeling OVERWHELMED!!!")
        self.assertEqual(r.stress_score, 95)

    def test_whole_word_matching(self):
        # "stress" must not match inside "stressful"; "stressed" not present either
        r = infer_from_text("a distressful commute")
        self.assertEqual(r.stress_confidence, 0)

    def test_negated_term_ignored(self):
        r = infer_from_text("I don't feel tired today")
        self.assertEqual(r.fatigue_score, 50)
        self.assertEqual(r.fatigue_confidence, 0)

    def test_explicit_not_term_matches_relief(self):
        r = infer_from_text("I'm not stressed at all")
        self.assertEqual(r.stress_score, 20)
        self.assertAlmostEqual(r.stress_confidence, 0.75)

    def test_negated_inflection_suppresses_stem(self):
        # "not stressed" also negates the bare "stress" later in the sentence
        r = infer_from_text("I'm not stressed about the stress")
        self.assertEqual(r.stress_score, 20)
        self.assertAlmostEqual(r.stress_confidence, 0.75)

    def test_relief_vocabulary(self):
        r = infer_from_text("I slept well and feel relaxed")
        self.assertEqual(r.stress_score, 25)
        self.assertEqual(r.fatigue_score, 25)

    def test_axes_are_independent(self):
        r = infer_from_text("I feel stressed")
        self.assertEqual(r.fatigue_confidence, 0)
        self.assertEqual(r.fatigue_score, 50)

    def test_normalize_keeps_apostrophes(self):
        self.assertEqual(normalize_text("  Can't   COPE!! "), "can't cope")


class TestMergeReadings(unittest.TestCase):

    def test_keeps_more_confident_reading(self):
        prev = infer_from_text("I feel stressed")
        nxt = infer_from_text("I'm a bit worried")
        merged = merge_readings(prev, nxt)
        self.assertEqual(merged.stress_score, prev.stress_score)
        self.assertGreaterEqual(merged.stress_confidence, nxt.stress_confidence)

    def test_commutative(self):
        a = SemanticReading(80, 40, 0.7, 0.9)
        b = SemanticReading(30, 60, 0.9, 0.5)
        self.assertEqual(merge_readings(a, b), merge_readings(b, a))

    def test_axes_chosen_independently(self):
        a = SemanticReading(80, 40, 0.7, 0.9)
        b = SemanticReading(30, 60, 0.9, 0.5)
        merged = merge_readings(a, b)
        self.assertEqual((merged.stress_score, merged.stress_confidence), (30, 0.9))
        self.assertEqual((merged.fatigue_score, merged.fatigue_confidence), (40, 0.9))

    def test_tie_goes_to_more_extreme(self):
        a = SemanticReading(stress_score=60, stress_confidence=0.8)
        b = SemanticReading(stress_score=85, stress_confidence=0.8)
        self.assertEqual(merge_readings(a, b).stress_score, 85)
        self.assertEqual(merge_readings(b, a).stress_score, 85)

    def test_associative_fold(self):
        readings = [
            SemanticReading(70, 50, 0.6, 0.0),
            SemanticReading(90, 88, 0.6, 0.9),
            SemanticReading(25, 20, 0.75, 0.9),
        ]
        a, b, c = readings
        left = merge_readings(merge_readings(a, b), c)
        right = merge_readings(a, merge_readings(b, c))
        self.assertEqual(left, right)
        self.assertEqual(merge_all(readings), left)

    def test_none_previous(self):
        r = SemanticReading(70, 50, 0.6, 0.0)
        self.assertIs(merge_readings(None, r), r)
        self.assertIsNone(merge_all([]))

    def test_gemini_source_is_sticky(self):
        a = SemanticReading(source="gemini")
        b = SemanticReading(source="keywords")
        self.assertEqual(merge_readings(a, b).source, "gemini")
        self.assertEqual(merge_readings(b, b).source, "keywords")


if __name__ == "__main__":
    unittest.main()
