"""
Data model for the mood engine.

All records are plain dataclasses. MoodScore is frozen: a re-analysis
builds a new score instead of mutating the old one. Derived views
(TrendReport, StreakStats, Insight) are recomputed on every request and
never persisted by the engine.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from enum import Enum
from typing import Any, Dict, List, Optional

from moodlens.core.errors import InvalidInputError


# ============================================================================
# ENUMS & CONSTANTS
# ============================================================================

class ScoringMode(Enum):
    """Which synthesizer path produced a MoodScore."""
    RICH = "rich"      # lexicon + cognitive/tone signals, deterministic
    BASIC = "basic"    # keyword tiers only, jittered


class TrendDirection(str, Enum):
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


class InsightType(str, Enum):
    PATTERN = "pattern"
    TREND = "trend"
    ANOMALY = "anomaly"
    IMPROVEMENT = "improvement"
    WARNING = "warning"
    ADVICE = "advice"


# Sub-scores, in the order they feed the overall formula
MOOD_DIMENSIONS = ("stress", "happiness", "clarity", "energy", "emotional_stability")
METRICS = ("overall",) + MOOD_DIMENSIONS

# camelCase names used by other layers of the system
_FIELD_ALIASES = {
    "emotionalStability": "emotional_stability",
    "moodScore": "mood_score",
    "moodScores": "mood_score",
}


def normalize_metric(name: str) -> str:
    """Maps 'emotionalStability' style names to the snake_case field name."""
    metric = _FIELD_ALIASES.get(name, name)
    if metric not in METRICS:
        raise InvalidInputError(f"Unknown metric '{name}'. Expected one of {', '.join(METRICS)}")
    return metric


def parse_datetime(value: Any) -> datetime:
    """
    Accepts datetime, date or ISO 8601 string (with 'Z' or an offset).

    Always returns a naive datetime. An offset is dropped and the wall clock
    it was written with is kept, so mixed inputs stay comparable.
    """
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
        except ValueError as e:
            raise InvalidInputError(f"Invalid date '{value}': {e}") from e
        return parsed.replace(tzinfo=None)
    raise InvalidInputError(f"Invalid date: {value!r}")


def _stored_float(values: Dict[str, Any], key: str) -> float:
    value = values.get(key)
    if value is None or value == "":
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"Invalid '{key}' score: {value!r}") from e


# ============================================================================
# SCORES & TEXT ANALYSIS
# ============================================================================

@dataclass(frozen=True)
class MoodScore:
    """Six 0-10 scores for one journal entry; overall is derived, never set freely."""

    stress: float
    happiness: float
    clarity: float
    energy: float
    emotional_stability: float
    overall: float
    mode: ScoringMode = ScoringMode.RICH

    def get(self, metric: str) -> float:
        return getattr(self, normalize_metric(metric))

    def breakdown(self) -> Dict[str, float]:
        return {name: getattr(self, name) for name in MOOD_DIMENSIONS}

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"overall": self.overall}
        data.update(self.breakdown())
        data["mode"] = self.mode.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MoodScore':
        """Loads a stored score. Missing dimensions read as 0, like absent values upstream."""
        if not isinstance(data, dict):
            raise InvalidInputError(f"Mood score must be a mapping, got {type(data).__name__}")
        values = {_FIELD_ALIASES.get(k, k): v for k, v in data.items()}
        try:
            mode = ScoringMode(values.get("mode", ScoringMode.RICH.value))
        except ValueError:
            mode = ScoringMode.RICH
        return cls(
            stress=_stored_float(values, "stress"),
            happiness=_stored_float(values, "happiness"),
            clarity=_stored_float(values, "clarity"),
            energy=_stored_float(values, "energy"),
            emotional_stability=_stored_float(values, "emotional_stability"),
            overall=_stored_float(values, "overall"),
            mode=mode,
        )


@dataclass
class EmotionScore:
    emotion: str
    score: float

    def to_dict(self) -> Dict[str, Any]:
        return {"emotion": self.emotion, "score": self.score}


@dataclass
class Sentiment:
    score: float        # signed, [-5, 5]
    label: str          # positive | negative | neutral
    confidence: float   # [0, 1]

    def to_dict(self) -> Dict[str, Any]:
        return {"score": self.score, "label": self.label, "confidence": self.confidence}


@dataclass
class Emotions:
    primary: str
    secondary: Optional[str] = None
    all: List[EmotionScore] = field(default_factory=list)

    def score_of(self, emotion: str) -> float:
        for item in self.all:
            if item.emotion == emotion:
                return item.score
        return 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "primary": self.primary,
            "secondary": self.secondary,
            "all": [e.to_dict() for e in self.all],
        }


@dataclass
class Tone:
    energy: float
    valence: float
    tension: float

    def to_dict(self) -> Dict[str, float]:
        return {"energy": self.energy, "valence": self.valence, "tension": self.tension}


@dataclass
class Cognitive:
    clarity: float
    focus: float
    cognitive_load: float

    def to_dict(self) -> Dict[str, float]:
        return {"clarity": self.clarity, "focus": self.focus, "cognitive_load": self.cognitive_load}


@dataclass
class TextAnalysis:
    """Structured companion of a MoodScore, owned by the entry that produced it."""

    sentiment: Sentiment
    emotions: Emotions
    tone: Tone
    cognitive: Cognitive
    keywords: List[str] = field(default_factory=list)
    summary: str = ""
    advice: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sentiment": self.sentiment.to_dict(),
            "emotions": self.emotions.to_dict(),
            "tone": self.tone.to_dict(),
            "cognitive": self.cognitive.to_dict(),
            "keywords": list(self.keywords),
            "summary": self.summary,
            "advice": self.advice,
        }


@dataclass
class AnalysisResult:
    """Output of analyze_text: the score plus its analysis."""

    mood_score: MoodScore
    analysis: TextAnalysis

    def to_dict(self) -> Dict[str, Any]:
        return {"mood_score": self.mood_score.to_dict(), "analysis": self.analysis.to_dict()}


# ============================================================================
# HISTORY & TRENDS
# ============================================================================

@dataclass
class HistoryRecord:
    """One stored journal entry as handed over by the persistence layer."""

    date: datetime
    mood_score: MoodScore
    transcript: str = ""
    analysis: Optional[Dict[str, Any]] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'HistoryRecord':
        values = {_FIELD_ALIASES.get(k, k): v for k, v in data.items()}
        if "date" not in values:
            raise InvalidInputError("History record missing 'date' field")
        score = values.get("mood_score")
        if score is None:
            raise InvalidInputError(f"History record for {values['date']} missing mood score")
        if not isinstance(score, MoodScore):
            score = MoodScore.from_dict(score)
        return cls(
            date=parse_datetime(values["date"]),
            mood_score=score,
            transcript=values.get("transcript") or "",
            analysis=values.get("analysis"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "mood_score": self.mood_score.to_dict(),
            "transcript": self.transcript,
            "analysis": self.analysis,
        }


@dataclass
class TrendPoint:
    date: datetime
    overall: float
    breakdown: Dict[str, float]

    def value(self, metric: str) -> float:
        if metric == "overall":
            return self.overall
        return self.breakdown[metric]

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.date.isoformat(), "overall": self.overall, "breakdown": dict(self.breakdown)}


@dataclass
class TrendSummary:
    average: float
    trend: TrendDirection
    change_percent: float
    weekly_averages: List[float] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "average": self.average,
            "trend": self.trend.value,
            "change_percent": self.change_percent,
            "weekly_averages": list(self.weekly_averages),
        }


@dataclass
class PatternFlags:
    weekend_effect: bool = False
    time_of_day_effect: bool = False
    monthly_pattern: bool = False

    def to_dict(self) -> Dict[str, bool]:
        return {
            "weekend_effect": self.weekend_effect,
            "time_of_day_effect": self.time_of_day_effect,
            "monthly_pattern": self.monthly_pattern,
        }


@dataclass
class TrendReport:
    trends: List[TrendPoint] = field(default_factory=list)
    summary: Dict[str, TrendSummary] = field(default_factory=dict)
    patterns: PatternFlags = field(default_factory=PatternFlags)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "trends": [p.to_dict() for p in self.trends],
            "summary": {k: v.to_dict() for k, v in self.summary.items()},
            "patterns": self.patterns.to_dict(),
        }


@dataclass
class AverageMood:
    this_week: float = 0.0
    this_month: float = 0.0
    last_month: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {"this_week": self.this_week, "this_month": self.this_month, "last_month": self.last_month}


@dataclass
class StreakStats:
    """Derived view over the full history; invalidated by any new entry."""

    current_streak: int = 0
    longest_streak: int = 0
    total_entries: int = 0
    average_mood: AverageMood = field(default_factory=AverageMood)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "current_streak": self.current_streak,
            "longest_streak": self.longest_streak,
            "total_entries": self.total_entries,
            "average_mood": self.average_mood.to_dict(),
        }


@dataclass
class PeriodStats:
    average: float = 0.0
    entries: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"average": self.average, "entries": self.entries}


@dataclass
class PeriodComparison:
    period1: PeriodStats
    period2: PeriodStats
    difference: float
    significant: bool
    improvement: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "period1": self.period1.to_dict(),
            "period2": self.period2.to_dict(),
            "difference": self.difference,
            "significant": self.significant,
            "improvement": self.improvement,
        }


# ============================================================================
# INSIGHTS
# ============================================================================

@dataclass
class Insight:
    type: InsightType
    title: str
    description: str
    confidence: float
    action_items: List[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "title": self.title,
            "description": self.description,
            "confidence": self.confidence,
            "action_items": list(self.action_items),
            "created_at": self.created_at.isoformat(),
        }
