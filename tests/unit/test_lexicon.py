
import pytest

from moodlens.core.errors import InvalidInputError
from moodlens.core.lexicon import (
    extract_keywords, extract_signals, score_emotions, tokenize
)


class TestLexiconSignals:
    """Test suite for keyword and emotion extraction."""

    # ========================================================================
    # 1. CATEGORY TIERS
    # ========================================================================

    def test_tier_weights_are_signed(self):
        """High +2, medium +1, low -1 for stress."""
        signals = extract_signals("Stressed and busy, but calm in the evening.")

        assert signals.tier_hits['stress'] == {'high': 1, 'medium': 1, 'low': 1}
        assert signals.category_hits['stress'] == 2

    def test_case_insensitive(self):
        signals = extract_signals("HAPPY Happy happy")
        assert signals.tier_hits['happiness']['high'] == 3

    def test_whole_word_matching(self):
        """'mad' must not fire inside 'made', nor 'sad' inside 'sadly'."""
        signals = extract_signals("I made dinner and sadly burned it")

        assert signals.emotion_hits['anger'] == 0
        assert signals.emotion_hits['sadness'] == 0

    def test_multi_word_phrase(self):
        signals = extract_signals("I am looking forward to the weekend")
        assert signals.emotion_hits['anticipation'] == 1

    def test_empty_text(self):
        signals = extract_signals("")
        assert signals.is_empty
        assert all(v == 0 for v in signals.category_hits.values())

    def test_non_string_rejected(self):
        with pytest.raises(InvalidInputError):
            extract_signals(None)
        with pytest.raises(InvalidInputError):
            tokenize(42)

    # ========================================================================
    # 2. EMOTIONS
    # ========================================================================

    def test_no_emotion_is_neutral(self):
        emotions = score_emotions(extract_signals("The table is brown").emotion_hits)

        assert emotions.primary == "neutral"
        assert emotions.secondary is None
        assert emotions.all == []

    def test_emotion_scores_sum_to_one(self):
        emotions = score_emotions(extract_signals("happy happy sad angry").emotion_hits)

        assert emotions.primary == "joy"
        assert emotions.score_of('joy') == pytest.approx(0.5)
        assert sum(e.score for e in emotions.all) == pytest.approx(1.0)

    def test_ties_keep_declaration_order(self):
        """joy is declared before sadness, so it wins a 1-1 tie."""
        emotions = score_emotions(extract_signals("sad but happy").emotion_hits)

        assert emotions.primary == "joy"
        assert emotions.secondary == "sadness"

    def test_emotion_list_capped(self):
        text = "happy sad angry afraid surprised disgusted eager trust serene puzzled"
        emotions = score_emotions(extract_signals(text).emotion_hits)
        assert len(emotions.all) == 5

    # ========================================================================
    # 3. KEYWORDS
    # ========================================================================

    def test_keywords_ranked_by_frequency(self):
        text = "Deadline deadline project project project meeting"
        assert extract_keywords(text) == ['project', 'deadline', 'meeting']

    def test_keywords_drop_short_and_stop_words(self):
        assert extract_keywords("The cat and the dog were about") == []

    def test_keywords_limit(self):
        text = " ".join(f"word{i}x" for i in range(20))
        assert len(extract_keywords(text, limit=10)) == 10
