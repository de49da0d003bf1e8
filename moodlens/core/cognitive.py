"""
Cognitive and tone estimation.

Secondary signals derived from the same transcript as the lexicon pass:
- Complexity: connective words + long sentences
- Uncertainty: hedge words
- Sentiment: VADER lexicon pass (signed, scaled to [-5, 5])
- Tone: energy / valence / tension from paired word lists

All outputs live in [0, 1] except the sentiment score.
"""

import logging
import re
from dataclasses import dataclass
from typing import List, Pattern

from vaderSentiment.vaderSentiment import SentimentIntensityAnalyzer

from moodlens.core.lexicon import compile_word_list, count_matches, normalize_text, tokenize
from moodlens.core.models import Cognitive, Sentiment, Tone
from moodlens.utils.numbers import clamp01, safe_number

logger = logging.getLogger(__name__)


# ============================================================================
# CONFIGURATION
# ============================================================================

class CognitiveConfig:
    """Word lists and normalizers for the cognitive and tone signals."""

    CONNECTIVES: List[str] = ['however', 'therefore', 'moreover', 'consequently',
                              'furthermore', 'nevertheless', 'although', 'whereas']
    HEDGES: List[str] = ['maybe', 'perhaps', 'unsure', 'uncertain', 'might', 'could',
                         'possibly', 'probably']

    LONG_SENTENCE_WORDS: int = 20
    COMPLEXITY_DIVISOR: float = 10.0
    UNCERTAINTY_DIVISOR: float = 5.0

    # TONE PAIRS (positive side, negative side)
    ENERGETIC: List[str] = ['excited', 'energetic', 'enthusiastic', 'vibrant', 'dynamic', 'lively']
    FATIGUED: List[str] = ['tired', 'exhausted', 'fatigued', 'drained', 'lethargic', 'weary']
    POSITIVE: List[str] = ['good', 'great', 'excellent', 'wonderful', 'amazing', 'fantastic',
                           'love', 'happy']
    NEGATIVE: List[str] = ['bad', 'terrible', 'awful', 'horrible', 'hate', 'sad', 'angry',
                           'frustrated']
    TENSE: List[str] = ['stressed', 'tense', 'anxious', 'worried', 'nervous', 'pressured',
                        'overwhelmed']
    RELAXED: List[str] = ['calm', 'relaxed', 'peaceful', 'serene', 'comfortable', 'at ease']

    TONE_MIN_DENOMINATOR: int = 5

    # SENTIMENT
    SENTIMENT_SCALE: float = 5.0          # compound [-1, 1] -> score [-5, 5]
    SENTIMENT_LABEL_THRESHOLD: float = 0.05
    CONFIDENCE_TOKEN_RATIO: float = 0.1
    CONFIDENCE_MIN_DENOMINATOR: int = 5


SENTENCE_SPLIT: Pattern[str] = re.compile(r"[.!?]+")

_CONNECTIVES = compile_word_list(CognitiveConfig.CONNECTIVES)
_HEDGES = compile_word_list(CognitiveConfig.HEDGES)
_TONE_PAIRS = {
    'energy': (compile_word_list(CognitiveConfig.ENERGETIC), compile_word_list(CognitiveConfig.FATIGUED)),
    'valence': (compile_word_list(CognitiveConfig.POSITIVE), compile_word_list(CognitiveConfig.NEGATIVE)),
    'tension': (compile_word_list(CognitiveConfig.TENSE), compile_word_list(CognitiveConfig.RELAXED)),
}

# Read-only after construction; safe to share between threads
_VADER = SentimentIntensityAnalyzer()


@dataclass
class CognitiveTone:
    """Secondary signals for one transcript."""

    cognitive: Cognitive
    tone: Tone
    sentiment: Sentiment
    compound: float = 0.0


# ============================================================================
# SENTIMENT
# ============================================================================

def analyze_sentiment(text: str) -> Sentiment:
    """Coarse lexical sentiment: VADER compound scaled to [-5, 5]."""
    return _sentiment_from_compound(text, _compound(text))


def _compound(text: str) -> float:
    if not normalize_text(text).strip():
        return 0.0
    return safe_number(_VADER.polarity_scores(text).get('compound'), 0.0)


def _sentiment_from_compound(text: str, compound: float) -> Sentiment:
    threshold = CognitiveConfig.SENTIMENT_LABEL_THRESHOLD
    if compound >= threshold:
        label = "positive"
    elif compound <= -threshold:
        label = "negative"
    else:
        label = "neutral"

    tokens = tokenize(text)
    if tokens:
        scored = sum(1 for t in tokens if t in _VADER.lexicon)
        denominator = max(len(tokens) * CognitiveConfig.CONFIDENCE_TOKEN_RATIO,
                          CognitiveConfig.CONFIDENCE_MIN_DENOMINATOR)
        confidence = min(1.0, scored / denominator)
    else:
        confidence = 0.5

    return Sentiment(
        score=compound * CognitiveConfig.SENTIMENT_SCALE,
        label=label,
        confidence=clamp01(confidence),
    )


# ============================================================================
# COGNITIVE & TONE
# ============================================================================

def complexity_signal(text: str) -> float:
    lowered = normalize_text(text)
    connectives = count_matches(lowered, _CONNECTIVES)
    long_sentences = sum(
        1 for sentence in SENTENCE_SPLIT.split(lowered)
        if len(sentence.split()) > CognitiveConfig.LONG_SENTENCE_WORDS
    )
    return clamp01((connectives + long_sentences) / CognitiveConfig.COMPLEXITY_DIVISOR)


def uncertainty_signal(text: str) -> float:
    hedges = count_matches(normalize_text(text), _HEDGES)
    return clamp01(hedges / CognitiveConfig.UNCERTAINTY_DIVISOR)


def tone_score(text: str, positive: Pattern[str], negative: Pattern[str]) -> float:
    """(positive - negative) / max(total, 5), in [-1, 1]; 0 when nothing matched."""
    lowered = normalize_text(text)
    pos_hits = count_matches(lowered, positive)
    neg_hits = count_matches(lowered, negative)
    total = pos_hits + neg_hits
    if total == 0:
        return 0.0
    return (pos_hits - neg_hits) / max(total, CognitiveConfig.TONE_MIN_DENOMINATOR)


def estimate_cognitive_and_tone(text: str) -> CognitiveTone:
    """
    Derives cognitive (clarity, focus, load) and tone (energy, valence,
    tension) signals from text.

    Raises:
        InvalidInputError: If text is not a string.
    """
    complexity = complexity_signal(text)
    uncertainty = uncertainty_signal(text)
    compound = _compound(text)
    negativity = clamp01(-compound)

    cognitive = Cognitive(
        clarity=clamp01(1 - (complexity + uncertainty) / 2),
        focus=clamp01(1 - uncertainty),
        cognitive_load=clamp01((complexity + uncertainty + negativity) / 3),
    )

    energy = tone_score(text, *_TONE_PAIRS['energy'])
    valence = tone_score(text, *_TONE_PAIRS['valence'])
    tension = tone_score(text, *_TONE_PAIRS['tension'])
    tone = Tone(
        energy=clamp01(energy),
        valence=clamp01((valence + 1) / 2),
        tension=clamp01(tension),
    )

    logger.debug(
        f"[COGNITIVE] complexity={complexity:.2f} uncertainty={uncertainty:.2f} "
        f"compound={compound:.2f} tone=({tone.energy:.2f}, {tone.valence:.2f}, {tone.tension:.2f})"
    )
    return CognitiveTone(
        cognitive=cognitive,
        tone=tone,
        sentiment=_sentiment_from_compound(text, compound),
        compound=compound,
    )
