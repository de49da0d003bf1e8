"""
Mood score synthesis.

Combines lexicon and cognitive/tone signals into six bounded scores:
- stress, happiness, clarity, energy, emotional_stability (0-10)
- overall: weighted function of the other five (never set freely)

Two modes:
- RICH: deterministic, built from the full signal set
- BASIC: keyword tiers only, with seedable jitter for empty dimensions.
  Used on its own or when rich extraction fails.
"""

import logging
import random
from typing import Dict, Optional, Tuple

from moodlens.core.cognitive import CognitiveTone, estimate_cognitive_and_tone
from moodlens.core.errors import InvalidInputError
from moodlens.core.lexicon import (
    LexiconSignals, extract_keywords, extract_signals, normalize_text, score_emotions
)
from moodlens.core.models import (
    AnalysisResult, Cognitive, Emotions, EmotionScore, MoodScore, ScoringMode,
    Sentiment, TextAnalysis, Tone
)
from moodlens.utils.numbers import bounded_score, clamp, round_half_up, safe_number

logger = logging.getLogger(__name__)


# ============================================================================
# CONFIGURATION - WEIGHTS & CONSTANTS
# ============================================================================

class SynthesizerConfig:
    """Weights and constants. Empirical values, kept as-is pending calibration."""

    # OVERALL WEIGHTS (total = 100%)
    WEIGHT_HAPPINESS: float = 0.30
    WEIGHT_STRESS: float = 0.25       # applied to (10 - stress)
    WEIGHT_CLARITY: float = 0.20
    WEIGHT_ENERGY: float = 0.15
    WEIGHT_STABILITY: float = 0.10

    NEUTRAL: float = 5.0
    SCORE_MIN: float = 0.0
    SCORE_MAX: float = 10.0

    # RICH MODE COEFFICIENTS
    SENTIMENT_FACTOR: float = 0.5
    TENSION_FACTOR: float = 5.0
    JOY_FACTOR: float = 5.0
    TONE_ENERGY_FACTOR: float = 3.0
    ANTICIPATION_FACTOR: float = 2.0
    EMOTION_CENTER: float = 0.5

    # BASIC MODE
    BASIC_FLOOR: float = 1.0
    BASIC_BASE: float = 4.0
    BASIC_JITTER: float = 2.0         # empty dimensions land in [4, 6)
    BASIC_STRESS_INVERSION: float = 11.0

    ANALYSIS_PRECISION: int = 3


# ============================================================================
# OVERALL
# ============================================================================

def compute_overall(stress: float, happiness: float, clarity: float, energy: float,
                    emotional_stability: float, mode: ScoringMode = ScoringMode.RICH) -> float:
    """
    Derives the overall score from the five sub-scores.

    RICH: 0.30*happiness + 0.25*(10 - stress) + 0.20*clarity
          + 0.15*energy + 0.10*emotional_stability
    BASIC: mean of (11 - stress) and the other four.
    """
    if mode is ScoringMode.BASIC:
        value = (
            (SynthesizerConfig.BASIC_STRESS_INVERSION - stress)
            + happiness + clarity + energy + emotional_stability
        ) / 5
    else:
        value = (
            happiness * SynthesizerConfig.WEIGHT_HAPPINESS
            + (SynthesizerConfig.SCORE_MAX - stress) * SynthesizerConfig.WEIGHT_STRESS
            + clarity * SynthesizerConfig.WEIGHT_CLARITY
            + energy * SynthesizerConfig.WEIGHT_ENERGY
            + emotional_stability * SynthesizerConfig.WEIGHT_STABILITY
        )
    return bounded_score(value)


def _build_score(raw: Dict[str, float], mode: ScoringMode) -> MoodScore:
    """Rounds each dimension independently, then derives overall from the rounded values."""
    scores = {name: bounded_score(value) for name, value in raw.items()}
    return MoodScore(
        stress=scores['stress'],
        happiness=scores['happiness'],
        clarity=scores['clarity'],
        energy=scores['energy'],
        emotional_stability=scores['emotional_stability'],
        overall=compute_overall(mode=mode, **scores),
        mode=mode,
    )


def neutral_score(mode: ScoringMode = ScoringMode.RICH) -> MoodScore:
    neutral = SynthesizerConfig.NEUTRAL
    return _build_score({
        'stress': neutral, 'happiness': neutral, 'clarity': neutral,
        'energy': neutral, 'emotional_stability': neutral,
    }, mode)


# ============================================================================
# RICH MODE
# ============================================================================

def emotional_stability_from(emotions: Emotions) -> float:
    """10 - mean |score - 0.5| * 10; neutral when no emotion was detected."""
    if not emotions.all:
        return SynthesizerConfig.NEUTRAL
    center = SynthesizerConfig.EMOTION_CENTER
    deviation = sum(abs(e.score - center) for e in emotions.all) / len(emotions.all)
    return SynthesizerConfig.SCORE_MAX - deviation * 10


def synthesize(signals: LexiconSignals, cognitive_tone: CognitiveTone) -> MoodScore:
    """
    Builds a rich-mode MoodScore from extracted signals.

    Text without a single token scores neutral (5.0) on every dimension.
    """
    if signals.is_empty:
        return neutral_score(ScoringMode.RICH)

    cfg = SynthesizerConfig
    emotions = score_emotions(signals.emotion_hits)
    sentiment_score = safe_number(cognitive_tone.sentiment.score, 0.0)
    tone = cognitive_tone.tone

    raw = {
        'stress': cfg.NEUTRAL - sentiment_score * cfg.SENTIMENT_FACTOR + tone.tension * cfg.TENSION_FACTOR,
        'happiness': cfg.NEUTRAL + sentiment_score * cfg.SENTIMENT_FACTOR + emotions.score_of('joy') * cfg.JOY_FACTOR,
        'clarity': cognitive_tone.cognitive.clarity * cfg.SCORE_MAX,
        'energy': cfg.NEUTRAL + tone.energy * cfg.TONE_ENERGY_FACTOR + emotions.score_of('anticipation') * cfg.ANTICIPATION_FACTOR,
        'emotional_stability': emotional_stability_from(emotions),
    }
    score = _build_score(raw, ScoringMode.RICH)
    logger.debug(f"[SYNTH] rich score: {score.to_dict()}")
    return score


# ============================================================================
# BASIC MODE
# ============================================================================

def synthesize_basic(text: str, rng: Optional[random.Random] = None) -> MoodScore:
    """
    Scores text from keyword tiers alone.

    Each dimension starts at its signed tier total; a dimension with no
    signal gets 4 + jitter in [0, 2). Values are clamped to [1, 10].

    Args:
        text: Transcript.
        rng: Randomness source; pass a seeded random.Random for repeatable output.
    """
    rng = rng or random.Random()
    signals = extract_signals(text)
    cfg = SynthesizerConfig

    raw: Dict[str, float] = {}
    for dimension, hits in signals.category_hits.items():
        value = float(hits)
        if value == 0:
            value = cfg.BASIC_BASE + rng.random() * cfg.BASIC_JITTER
        raw[dimension] = clamp(value, cfg.BASIC_FLOOR, cfg.SCORE_MAX)

    score = _build_score(raw, ScoringMode.BASIC)
    logger.debug(f"[SYNTH] basic score: {score.to_dict()}")
    return score


# ============================================================================
# SUMMARY & ADVICE
# ============================================================================

def generate_summary_and_advice(score: MoodScore, emotions: Emotions) -> Tuple[str, str]:
    """Rule-based prose describing one entry's scores."""
    summary = f"Overall mood score is {score.overall}/10. "
    if score.happiness >= 7:
        summary += "You're feeling quite happy today. "
    elif score.happiness >= 5:
        summary += "Your mood is relatively neutral today. "
    else:
        summary += "You seem to be feeling a bit down today. "

    if score.stress >= 7:
        summary += "Stress levels are elevated. "
    elif score.stress >= 4:
        summary += "Stress levels are moderate. "

    if score.energy >= 7:
        summary += "You have high energy levels. "
    elif score.energy <= 3:
        summary += "Your energy seems low. "

    if score.stress >= 7:
        advice = ("Consider taking a few deep breaths or going for a walk to reduce stress. "
                  "Meditation or journaling might also help process these feelings.")
    elif score.happiness >= 8:
        advice = ("You're in a great mood! Take a moment to appreciate what's contributing to this happiness. "
                  "Consider sharing your joy with others.")
    elif score.energy <= 3:
        advice = ("Your energy seems low. Make sure you're getting enough rest and staying hydrated. "
                  "A short walk or some light exercise might help boost your energy levels.")
    elif score.emotional_stability <= 4:
        advice = ("Your emotions seem to be fluctuating. Try to identify what might be causing this instability. "
                  "Grounding exercises and mindfulness can help create emotional balance.")
    else:
        advice = "Your mood seems balanced. Keep up whatever is working well for you!"

    if emotions.primary == 'fear':
        advice += " Remember to focus on what you can control and take things one step at a time."
    elif emotions.primary == 'anger':
        advice += " Consider channeling this energy into something productive or taking a moment to cool down."
    elif emotions.primary == 'sadness':
        advice += " It's okay to feel sad sometimes. Be gentle with yourself and reach out to someone you trust."

    return summary.strip(), advice.strip()


# ============================================================================
# PUBLIC API
# ============================================================================

def _rounded(value: float) -> float:
    return round_half_up(value, SynthesizerConfig.ANALYSIS_PRECISION)


def _build_analysis(text: str, score: MoodScore, sentiment: Sentiment, emotions: Emotions,
                    tone: Tone, cognitive: Cognitive) -> TextAnalysis:
    summary, advice = generate_summary_and_advice(score, emotions)
    return TextAnalysis(
        sentiment=Sentiment(_rounded(sentiment.score), sentiment.label, _rounded(sentiment.confidence)),
        emotions=Emotions(
            primary=emotions.primary,
            secondary=emotions.secondary,
            all=[EmotionScore(e.emotion, _rounded(e.score)) for e in emotions.all],
        ),
        tone=Tone(_rounded(tone.energy), _rounded(tone.valence), _rounded(tone.tension)),
        cognitive=Cognitive(_rounded(cognitive.clarity), _rounded(cognitive.focus),
                            _rounded(cognitive.cognitive_load)),
        keywords=extract_keywords(text),
        summary=summary,
        advice=advice,
    )


def _basic_result(text: str, rng: Optional[random.Random]) -> AnalysisResult:
    score = synthesize_basic(text, rng)
    emotions = score_emotions(extract_signals(text).emotion_hits)
    analysis = _build_analysis(
        text, score,
        sentiment=Sentiment(0.0, "neutral", 0.5),
        emotions=emotions,
        tone=Tone(0.5, 0.5, 0.5),
        cognitive=Cognitive(0.5, 0.5, 0.5),
    )
    return AnalysisResult(mood_score=score, analysis=analysis)


def analyze_text(text: str, mode: ScoringMode = ScoringMode.RICH,
                 rng: Optional[random.Random] = None) -> AnalysisResult:
    """
    Scores one journal transcript.

    Args:
        text: Transcript; the empty string is valid and scores neutral.
        mode: RICH (deterministic) or BASIC (keyword tiers + jitter).
        rng: Jitter source for BASIC mode.

    Returns:
        AnalysisResult; mood_score.mode tells which path produced it.

    Raises:
        InvalidInputError: If text is not a string.
    """
    normalize_text(text)  # type check before any work

    if mode is ScoringMode.BASIC:
        return _basic_result(text, rng)

    try:
        signals = extract_signals(text)
        cognitive_tone = estimate_cognitive_and_tone(text)
        score = synthesize(signals, cognitive_tone)
        emotions = score_emotions(signals.emotion_hits)
    except InvalidInputError:
        raise
    except Exception as e:
        logger.warning(f"[SYNTH] Rich extraction failed, using basic mode (Non-blocking): {e}")
        return _basic_result(text, rng)

    analysis = _build_analysis(
        text, score, cognitive_tone.sentiment, emotions, cognitive_tone.tone, cognitive_tone.cognitive
    )
    logger.info(
        f"[SYNTH] Analysis complete: overall={score.overall} stress={score.stress} "
        f"happiness={score.happiness} primary={emotions.primary}"
    )
    return AnalysisResult(mood_score=score, analysis=analysis)
