"""
Immutable records flowing through the engine.

Inputs arrive as JSON-shaped mappings (camelCase keys) and are turned into
frozen dataclasses with from_dict(); outputs serialize back with to_dict().
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Optional, Tuple, Union


# ---------------------------------------------------------------------------
# Acoustic input / output
# ---------------------------------------------------------------------------

# JSON key → attribute name
FEATURE_KEYS = {
    "speechRate": "speech_rate",
    "rms": "rms",
    "spectralFlux": "spectral_flux",
    "spectralCentroid": "spectral_centroid",
    "spectralRolloff": "spectral_rolloff",
    "zcr": "zcr",
    "pauseRatio": "pause_ratio",
    "pauseCount": "pause_count",
    "avgPauseDuration": "avg_pause_duration",
    "pitchMean": "pitch_mean",
    "pitchStdDev": "pitch_std_dev",
    "pitchRange": "pitch_range",
    "mfcc": "mfcc",
}


@dataclass(frozen=True)
class AcousticFeatures:
    """Speech-signal descriptors produced upstream by feature extraction."""

    speech_rate: float
    rms: float
    spectral_flux: float
    spectral_centroid: float
    zcr: float
    pause_ratio: float
    pause_count: int
    avg_pause_duration: float = 0.0
    spectral_rolloff: float = 0.0
    pitch_mean: float = 0.0
    pitch_std_dev: float = 0.0
    pitch_range: float = 0.0
    mfcc: Tuple[float, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict) -> "AcousticFeatures":
        kwargs = {attr: data[key] for key, attr in FEATURE_KEYS.items() if key in data}
        if "mfcc" in kwargs:
            kwargs["mfcc"] = tuple(kwargs["mfcc"])
        return cls(**kwargs)

    def to_dict(self) -> Dict:
        out = {key: getattr(self, attr) for key, attr in FEATURE_KEYS.items()}
        out["mfcc"] = list(self.mfcc)
        return out


@dataclass(frozen=True)
class AcousticReading:
    """The part of an acoustic result the blender consumes."""

    stress_score: float
    fatigue_score: float
    confidence: float


@dataclass(frozen=True)
class VoiceMetrics:
    """Classifier output for one feature vector."""

    stress_score: int
    fatigue_score: int
    stress_level: str
    fatigue_level: str
    confidence: float
    analyzed_at: str

    def to_dict(self) -> Dict:
        return {
            "stressScore": self.stress_score,
            "fatigueScore": self.fatigue_score,
            "stressLevel": self.stress_level,
            "fatigueLevel": self.fatigue_level,
            "confidence": self.confidence,
            "analyzedAt": self.analyzed_at,
        }


@dataclass(frozen=True)
class FeatureContribution:
    """How one indicator ladder contributed to a stress or fatigue score."""

    axis: str
    feature: str
    display_name: str
    raw_value: float
    status: str
    contribution: int
    max_contribution: int
    description: str

    def to_dict(self) -> Dict:
        return {
            "axis": self.axis,
            "featureName": self.feature,
            "displayName": self.display_name,
            "rawValue": self.raw_value,
            "status": self.status,
            "contribution": self.contribution,
            "maxContribution": self.max_contribution,
            "description": self.description,
        }


# ---------------------------------------------------------------------------
# Semantic readings
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SemanticReading:
    """Stress/fatigue estimate from text; confidence 0 means no evidence."""

    stress_score: float = 50
    fatigue_score: float = 50
    stress_confidence: float = 0.0
    fatigue_confidence: float = 0.0
    source: str = "keywords"

    @classmethod
    def from_dict(cls, data: Dict) -> "SemanticReading":
        # A single "confidence" applies to both axes when per-axis values are absent
        shared = data.get("confidence", 0.0)
        return cls(
            stress_score=data.get("stressScore", 50),
            fatigue_score=data.get("fatigueScore", 50),
            stress_confidence=data.get("stressConfidence", shared),
            fatigue_confidence=data.get("fatigueConfidence", shared),
            source=data.get("source", "keywords"),
        )

    def to_dict(self) -> Dict:
        return {
            "stressScore": self.stress_score,
            "fatigueScore": self.fatigue_score,
            "stressConfidence": self.stress_confidence,
            "fatigueConfidence": self.fatigue_confidence,
            "source": self.source,
        }


OBSERVATION_TYPES = ("stress_cue", "fatigue_cue", "positive_cue")
RELEVANCE_LEVELS = ("high", "medium", "low")
EMOTIONS = ("happy", "sad", "angry", "neutral")


@dataclass(frozen=True)
class Observation:
    """One labelled cue from the external LLM analysis."""

    type: str
    relevance: str
    observation: str = ""

    def __post_init__(self):
        if self.type not in OBSERVATION_TYPES:
            raise ValueError(f"Unknown observation type: {self.type!r}")
        if self.relevance not in RELEVANCE_LEVELS:
            raise ValueError(f"Unknown observation relevance: {self.relevance!r}")


@dataclass(frozen=True)
class SemanticAnalysis:
    """Structured LLM output: labelled observations plus an overall emotion."""

    observations: Tuple[Observation, ...] = ()
    overall_emotion: str = "neutral"
    emotion_confidence: float = 0.0

    def __post_init__(self):
        if self.overall_emotion not in EMOTIONS:
            raise ValueError(f"Unknown emotion: {self.overall_emotion!r}")

    @classmethod
    def from_dict(cls, data: Dict) -> "SemanticAnalysis":
        observations = tuple(
            Observation(
                type=o["type"],
                relevance=o["relevance"],
                observation=o.get("observation", ""),
            )
            for o in data.get("observations", [])
        )
        return cls(
            observations=observations,
            overall_emotion=data.get("overallEmotion", "neutral"),
            emotion_confidence=data.get("emotionConfidence", 0.0),
        )


# Tagged variant accepted by the blender: absent, free-text reading, or LLM observations
SemanticInput = Union[None, SemanticReading, SemanticAnalysis]


# ---------------------------------------------------------------------------
# Blend outputs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CombinedScore:
    """Final per-event scores after fusion."""

    final_stress_score: int
    final_fatigue_score: int

    def to_dict(self) -> Dict:
        return {
            "finalStressScore": self.final_stress_score,
            "finalFatigueScore": self.final_fatigue_score,
        }


@dataclass(frozen=True)
class ScoreAdjustments:
    """Signed per-axis point adjustments derived from LLM observations."""

    stress_adjustment: float
    fatigue_adjustment: float


@dataclass(frozen=True)
class AxisBlend:
    """Debug view of one axis in the confidence-weighted text blend."""

    score: int
    acoustic_weight: float
    semantic_weight: float
    acoustic_confidence: float
    semantic_confidence: float
    confidence: float


@dataclass(frozen=True)
class BlendedBiomarkers:
    stress_score: int
    fatigue_score: int
    stress_level: str
    fatigue_level: str
    confidence: float
    stress: AxisBlend
    fatigue: AxisBlend

    def to_combined(self) -> CombinedScore:
        return CombinedScore(self.stress_score, self.fatigue_score)


# ---------------------------------------------------------------------------
# Forecasting
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TrendDataPoint:
    """One aggregated day of scores."""

    date: date
    stress_score: float
    fatigue_score: float

    @classmethod
    def from_dict(cls, data: Dict) -> "TrendDataPoint":
        raw = data["date"]
        if isinstance(raw, datetime):
            day = raw.date()
        elif isinstance(raw, date):
            day = raw
        else:
            day = date.fromisoformat(str(raw)[:10])
        return cls(day, data["stressScore"], data["fatigueScore"])

    def to_dict(self) -> Dict:
        return {
            "date": self.date.isoformat(),
            "stressScore": self.stress_score,
            "fatigueScore": self.fatigue_score,
        }


@dataclass(frozen=True)
class BurnoutPrediction:
    risk_score: int
    risk_level: str
    predicted_days: int
    trend: str
    confidence: float
    factors: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict:
        return {
            "riskScore": self.risk_score,
            "riskLevel": self.risk_level,
            "predictedDays": self.predicted_days,
            "trend": self.trend,
            "confidence": self.confidence,
            "factors": list(self.factors),
        }


# ---------------------------------------------------------------------------
# Personalization
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BiomarkerCalibration:
    """Per-user linear correction learned from self-reports."""

    stress_bias: float = 0.0
    fatigue_bias: float = 0.0
    stress_scale: float = 1.0
    fatigue_scale: float = 1.0
    sample_count: int = 0
    updated_at: Optional[str] = None


@dataclass(frozen=True)
class VoiceDataQuality:
    speech_seconds: float
    total_seconds: float
    speech_ratio: float
    quality: float
    reasons: Tuple[str, ...] = ()

    def to_dict(self) -> Dict:
        return {
            "speechSeconds": self.speech_seconds,
            "totalSeconds": self.total_seconds,
            "speechRatio": self.speech_ratio,
            "quality": self.quality,
            "reasons": list(self.reasons),
        }


@dataclass(frozen=True)
class BiomarkerExplanations:
    """Driver labels per axis; mode says whether they are baseline-relative or threshold-based."""

    mode: str
    stress: Tuple[str, ...] = ()
    fatigue: Tuple[str, ...] = ()

    def to_dict(self) -> Dict:
        return {
            "mode": self.mode,
            "stress": list(self.stress),
            "fatigue": list(self.fatigue),
        }


@dataclass(frozen=True)
class PersonalizedScores:
    stress_score: int
    fatigue_score: int
    stress_level: str
    fatigue_level: str
    explanations: BiomarkerExplanations

    def to_dict(self) -> Dict:
        return {
            "stressScore": self.stress_score,
            "fatigueScore": self.fatigue_score,
            "stressLevel": self.stress_level,
            "fatigueLevel": self.fatigue_level,
            "explanations": self.explanations.to_dict(),
        }


@dataclass(frozen=True)
class RecordingAssessment:
    """Everything the pipeline derives from one recording event."""

    metrics: VoiceMetrics
    combined: CombinedScore
    policy: str
    breakdown: List[FeatureContribution] = field(default_factory=list)
    explanations: Optional[BiomarkerExplanations] = None

    def to_dict(self) -> Dict:
        return {
            "metrics": self.metrics.to_dict(),
            "combined": self.combined.to_dict(),
            "policy": self.policy,
            "breakdown": [c.to_dict() for c in self.breakdown],
            "explanations": self.explanations.to_dict() if self.explanations else None,
        }
