"""
Lexicon signal extraction for journal transcripts.

Scans case-folded text for whole-word matches against curated word
lists and returns raw hit counts:
- Mood categories (stress, happiness, energy, clarity, stability), each
  split in weighted tiers
- Emotion taxonomy (joy, sadness, anger, ...) used for primary/secondary
  emotion
- Keywords (frequency ranked, stop-words removed)

Matching is bounded by word boundaries so 'mad' never fires inside
'made'. Everything here is a pure function of the input text.
"""

import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Pattern

from moodlens.core.errors import InvalidInputError
from moodlens.core.models import EmotionScore, Emotions

logger = logging.getLogger(__name__)


# ============================================================================
# CONFIGURATION - CURATED WORD LISTS
# ============================================================================

class LexiconConfig:
    """Centralized word lists and tier weights."""

    # MOOD CATEGORY TIERS
    STRESS: Dict[str, List[str]] = {
        'high': ['stressed', 'overwhelmed', 'anxious', 'worried', 'pressure', 'deadline',
                 'deadlines', 'burnt', 'burnout', 'exhausted', 'panic'],
        'medium': ['busy', 'tired', 'challenging', 'difficult', 'hectic', 'rushed'],
        'low': ['calm', 'relaxed', 'peaceful', 'easy'],
    }
    HAPPINESS: Dict[str, List[str]] = {
        'high': ['happy', 'excited', 'joyful', 'amazing', 'wonderful', 'great', 'love',
                 'grateful', 'blessed', 'thankful'],
        'medium': ['good', 'okay', 'fine', 'nice', 'pleasant'],
        'low': ['sad', 'unhappy', 'terrible', 'awful', 'bad', 'miserable'],
    }
    ENERGY: Dict[str, List[str]] = {
        'high': ['energetic', 'motivated', 'productive', 'active', 'excited', 'energized'],
        'low': ['tired', 'exhausted', 'drained', 'fatigued', 'lazy', 'sleepy'],
    }
    CLARITY: Dict[str, List[str]] = {
        'high': ['clear', 'focused', 'understand', 'insight', 'realization', 'clearer'],
        'low': ['confused', 'uncertain', 'unsure', 'lost'],
    }
    EMOTIONAL_STABILITY: Dict[str, List[str]] = {
        'high': ['balanced', 'stable', 'calm', 'peaceful', 'centered', 'grounded'],
        'low': ['moody', 'emotional', 'upset', 'angry', 'frustrated'],
    }

    CATEGORIES: Dict[str, Dict[str, List[str]]] = {
        'stress': STRESS,
        'happiness': HAPPINESS,
        'energy': ENERGY,
        'clarity': CLARITY,
        'emotional_stability': EMOTIONAL_STABILITY,
    }

    # Signed weight of one hit, per category and tier
    TIER_WEIGHTS: Dict[str, Dict[str, int]] = {
        'stress': {'high': 2, 'medium': 1, 'low': -1},
        'happiness': {'high': 2, 'medium': 1, 'low': -1},
        'energy': {'high': 2, 'low': -2},
        'clarity': {'high': 2, 'low': -1},
        'emotional_stability': {'high': 2, 'low': -1},
    }

    # EMOTION TAXONOMY (declaration order breaks score ties)
    EMOTIONS: Dict[str, List[str]] = {
        'joy': ['happy', 'joy', 'excited', 'delighted', 'pleased', 'glad', 'cheerful',
                'elated', 'thrilled', 'ecstatic', 'grateful'],
        'sadness': ['sad', 'unhappy', 'depressed', 'down', 'blue', 'melancholy', 'gloomy',
                    'miserable', 'heartbroken', 'lonely'],
        'anger': ['angry', 'mad', 'furious', 'irritated', 'annoyed', 'frustrated', 'upset',
                  'enraged', 'livid'],
        'fear': ['afraid', 'scared', 'frightened', 'terrified', 'anxious', 'worried',
                 'nervous', 'panic', 'dread'],
        'surprise': ['surprised', 'amazed', 'astonished', 'shocked', 'stunned', 'astounded'],
        'disgust': ['disgusted', 'revolted', 'repulsed', 'sickened', 'nauseated'],
        'anticipation': ['excited', 'eager', 'enthusiastic', 'looking forward', 'anticipating',
                         'hopeful'],
        'trust': ['trust', 'confident', 'secure', 'safe', 'comfortable', 'reassured'],
        'calm': ['calm', 'peaceful', 'relaxed', 'serene', 'tranquil', 'composed', 'centered'],
        'confused': ['confused', 'uncertain', 'unsure', 'puzzled', 'bewildered', 'unclear'],
    }

    MAX_EMOTIONS: int = 5
    KEYWORD_LIMIT: int = 10
    KEYWORD_MIN_LENGTH: int = 4

    STOP_WORDS = frozenset([
        'a', 'about', 'above', 'after', 'again', 'against', 'all', 'also', 'am', 'an', 'and',
        'any', 'are', 'as', 'at', 'be', 'because', 'been', 'before', 'being', 'below',
        'between', 'both', 'but', 'by', 'can', 'could', 'did', 'do', 'does', 'doing', 'done',
        'down', 'during', 'each', 'even', 'every', 'few', 'for', 'from', 'further', 'get',
        'got', 'had', 'has', 'have', 'having', 'he', 'her', 'here', 'hers', 'herself', 'him',
        'himself', 'his', 'how', 'i', "i'm", "i've", "i'll", "i'd", 'if', 'in', 'into', 'is',
        'it', "it's", 'its', 'itself', 'just', 'like', 'lot', 'made', 'make', 'many', 'me',
        'more', 'most', 'much', 'must', 'my', 'myself', 'no', 'nor', 'not', 'now', 'of', 'off',
        'on', 'once', 'only', 'or', 'other', 'our', 'ours', 'ourselves', 'out', 'over', 'own',
        'really', 'same', 'she', 'should', 'so', 'some', 'still', 'such', 'than', 'that',
        "that's", 'the', 'their', 'theirs', 'them', 'themselves', 'then', 'there', 'these',
        'they', 'thing', 'things', 'this', 'those', 'through', 'to', 'today', 'too', 'under',
        'until', 'up', 'very', 'was', 'way', 'we', 'were', 'what', 'when', 'where', 'which',
        'while', 'who', 'whom', 'why', 'will', 'with', 'would', 'you', 'your', 'yours',
        'yourself', 'yourselves', 'been', 'feel', 'feeling', 'felt', 'know', 'think',
        'going', 'want', 'well', 'yeah', 'kind', 'sort', 'maybe', 'actually', 'basically',
    ])


TOKEN_PATTERN: Pattern[str] = re.compile(r"[a-z0-9]+(?:'[a-z]+)?")


def compile_word_list(words: List[str]) -> Pattern[str]:
    """Builds one whole-word alternation; longest first so phrases win."""
    ordered = sorted(set(words), key=len, reverse=True)
    return re.compile(r"\b(?:" + "|".join(re.escape(w) for w in ordered) + r")\b")


_CATEGORY_PATTERNS: Dict[str, Dict[str, Pattern[str]]] = {
    category: {tier: compile_word_list(words) for tier, words in tiers.items()}
    for category, tiers in LexiconConfig.CATEGORIES.items()
}
_EMOTION_PATTERNS: Dict[str, Pattern[str]] = {
    emotion: compile_word_list(words) for emotion, words in LexiconConfig.EMOTIONS.items()
}


# ============================================================================
# SIGNALS
# ============================================================================

@dataclass
class LexiconSignals:
    """Raw hit counts for one transcript."""

    tier_hits: Dict[str, Dict[str, int]] = field(default_factory=dict)
    category_hits: Dict[str, int] = field(default_factory=dict)   # signed, tier-weighted
    emotion_hits: Dict[str, int] = field(default_factory=dict)
    total_tokens: int = 0

    @property
    def is_empty(self) -> bool:
        return self.total_tokens == 0


def normalize_text(text: str) -> str:
    """Case-folds text; rejects anything that is not a string."""
    if not isinstance(text, str):
        raise InvalidInputError(f"Text must be a string, got {type(text).__name__}")
    return text.casefold()


def tokenize(text: str) -> List[str]:
    return TOKEN_PATTERN.findall(normalize_text(text))


def count_matches(text: str, pattern: Pattern[str]) -> int:
    return len(pattern.findall(text))


def extract_signals(text: str) -> LexiconSignals:
    """
    Counts lexicon hits in text.

    Args:
        text: Transcript (may be empty).

    Returns:
        LexiconSignals with per-tier, per-category and per-emotion counts.

    Raises:
        InvalidInputError: If text is not a string.
    """
    lowered = normalize_text(text)
    signals = LexiconSignals(total_tokens=len(TOKEN_PATTERN.findall(lowered)))

    for category, tiers in _CATEGORY_PATTERNS.items():
        weights = LexiconConfig.TIER_WEIGHTS[category]
        hits = {tier: count_matches(lowered, pattern) for tier, pattern in tiers.items()}
        signals.tier_hits[category] = hits
        signals.category_hits[category] = sum(weights[tier] * n for tier, n in hits.items())

    for emotion, pattern in _EMOTION_PATTERNS.items():
        signals.emotion_hits[emotion] = count_matches(lowered, pattern)

    logger.debug(f"[LEXICON] tokens={signals.total_tokens} categories={signals.category_hits}")
    return signals


def score_emotions(emotion_hits: Dict[str, int]) -> Emotions:
    """
    Normalizes emotion hits into probability-like scores.

    Only emotions with at least one hit are kept, best first, capped at
    MAX_EMOTIONS. Ties keep taxonomy declaration order.
    """
    total = sum(emotion_hits.values())
    if total <= 0:
        return Emotions(primary="neutral", secondary=None, all=[])

    declared = [e for e in LexiconConfig.EMOTIONS if emotion_hits.get(e, 0) > 0]
    # sorted() is stable, so equal scores stay in declaration order
    ranked = sorted(declared, key=lambda e: emotion_hits[e], reverse=True)
    scored = [EmotionScore(e, emotion_hits[e] / total) for e in ranked[:LexiconConfig.MAX_EMOTIONS]]

    return Emotions(
        primary=scored[0].emotion,
        secondary=scored[1].emotion if len(scored) > 1 else None,
        all=scored,
    )


def extract_keywords(text: str, limit: int = LexiconConfig.KEYWORD_LIMIT) -> List[str]:
    """Most frequent content words; ties keep first-appearance order."""
    tokens = [
        t for t in tokenize(text)
        if len(t) >= LexiconConfig.KEYWORD_MIN_LENGTH and t not in LexiconConfig.STOP_WORDS
    ]
    return [word for word, _ in Counter(tokens).most_common(limit)]
