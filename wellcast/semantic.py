"""
Semantic readings from free text, and their reduction over a session.

Inference is lexical: each axis scans its tiered lexicon (strongest tier
first) for whole-word matches that are not negated. No match leaves the
axis at the neutral baseline with confidence 0, which downstream blending
reads as "ignore this channel".
"""

import logging
import re
from functools import lru_cache, reduce
from typing import Iterable, Optional, Sequence

from wellcast.config import TermRule, TextInferenceParams, ThresholdConfig
from wellcast.models import SemanticReading
from wellcast.scoring import NEUTRAL_SCORE

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Text normalization and matching
# ---------------------------------------------------------------------------

_NON_WORD = re.compile(r"[^a-z0-9\s']")
_WHITESPACE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """Lowercase, drop punctuation except apostrophes, collapse whitespace."""
    lowered = _NON_WORD.sub(" ", text.lower())
    return _WHITESPACE.sub(" ", lowered).strip()


def _phrase_pattern(phrase: str) -> str:
    return r"\s+".join(re.escape(part) for part in phrase.split())


@lru_cache(maxsize=256)
def _term_regex(term: str) -> "re.Pattern":
    return re.compile(rf"\b{_phrase_pattern(term)}\b")


@lru_cache(maxsize=256)
def _negation_regex(term: str, tokens: tuple, window: int) -> "re.Pattern":
    negation = "|".join(_phrase_pattern(t) for t in tokens)
    return re.compile(rf"\b(?:{negation})\b\s+(?:\w+\s+){{0,{window}}}{_phrase_pattern(term)}")


def _is_negated(text: str, term: str, params: TextInferenceParams) -> bool:
    regex = _negation_regex(term, tuple(params.negation_tokens), params.negation_window)
    return regex.search(text) is not None


def _first_match(text: str, rules: Sequence[TermRule], params: TextInferenceParams) -> Optional[TermRule]:
    for rule in rules:
        if not _term_regex(rule.term).search(text):
            continue
        # Explicit "not X" terms already carry their negation
        if "not " not in rule.term and _is_negated(text, rule.term, params):
            continue
        return rule
    return None


def _pick_signal(text: str, lexicon: Sequence[Sequence[TermRule]], params: TextInferenceParams) -> Optional[TermRule]:
    for tier in lexicon:
        rule = _first_match(text, tier, params)
        if rule is not None:
            return rule
    return None


# ---------------------------------------------------------------------------
# Inference
# ---------------------------------------------------------------------------

def infer_from_text(text: str, cfg: Optional[ThresholdConfig] = None) -> SemanticReading:
    """Stress/fatigue reading from one utterance; neutral baseline when nothing matches."""
    if cfg is None:
        cfg = ThresholdConfig()
    t = cfg.text

    normalized = normalize_text(text or "")
    if not normalized:
        return SemanticReading(
            stress_score=t.baseline_score,
            fatigue_score=t.baseline_score,
            stress_confidence=t.baseline_confidence,
            fatigue_confidence=t.baseline_confidence,
        )

    stress = _pick_signal(normalized, t.stress_lexicon, t)
    fatigue = _pick_signal(normalized, t.fatigue_lexicon, t)

    logger.debug(
        "Text inference: stress=%s fatigue=%s",
        stress.term if stress else None,
        fatigue.term if fatigue else None,
    )

    return SemanticReading(
        stress_score=stress.score if stress else t.baseline_score,
        fatigue_score=fatigue.score if fatigue else t.baseline_score,
        stress_confidence=stress.confidence if stress else t.baseline_confidence,
        fatigue_confidence=fatigue.confidence if fatigue else t.baseline_confidence,
    )


# ---------------------------------------------------------------------------
# Merging
# ---------------------------------------------------------------------------

def _dominance(score: float, confidence: float):
    # Higher confidence wins; ties go to the score further from neutral, then the higher score
    return (confidence, abs(score - NEUTRAL_SCORE), score)


def _pick_axis(a_score, a_conf, b_score, b_conf):
    if _dominance(b_score, b_conf) > _dominance(a_score, a_conf):
        return b_score, b_conf
    return a_score, a_conf


def merge_readings(a: Optional[SemanticReading], b: SemanticReading) -> SemanticReading:
    """
    Combine two readings axis by axis, keeping the dominant one per axis.

    The per-axis choice is a max over a total order, so the merge is
    commutative and associative and can fold over any number of readings.
    """
    if a is None:
        return b

    stress_score, stress_conf = _pick_axis(
        a.stress_score, a.stress_confidence, b.stress_score, b.stress_confidence
    )
    fatigue_score, fatigue_conf = _pick_axis(
        a.fatigue_score, a.fatigue_confidence, b.fatigue_score, b.fatigue_confidence
    )

    return SemanticReading(
        stress_score=stress_score,
        fatigue_score=fatigue_score,
        stress_confidence=stress_conf,
        fatigue_confidence=fatigue_conf,
        source="gemini" if "gemini" in (a.source, b.source) else "keywords",
    )


def merge_all(readings: Iterable[SemanticReading]) -> Optional[SemanticReading]:
    """Fold a session's readings into one; None when there are none."""
    return reduce(merge_readings, readings, None)
