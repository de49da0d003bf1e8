
import pytest

from moodlens.core.cognitive import (
    CognitiveConfig, analyze_sentiment, complexity_signal, estimate_cognitive_and_tone,
    tone_score, uncertainty_signal, _TONE_PAIRS
)


class TestCognitiveSignals:
    """Test suite for complexity, uncertainty and tone."""

    # ========================================================================
    # 1. COGNITIVE
    # ========================================================================

    def test_complexity_counts_connectives(self):
        assert complexity_signal("However, therefore it worked.") == pytest.approx(0.2)

    def test_complexity_counts_long_sentences(self):
        long_sentence = " ".join(["word"] * 25) + "."
        assert complexity_signal(long_sentence) == pytest.approx(0.1)

    def test_uncertainty_from_hedges(self):
        assert uncertainty_signal("maybe, perhaps") == pytest.approx(0.4)
        assert uncertainty_signal("maybe " * 20) == 1.0

    def test_clarity_and_focus(self):
        result = estimate_cognitive_and_tone("maybe perhaps")

        assert result.cognitive.clarity == pytest.approx(0.8)
        assert result.cognitive.focus == pytest.approx(0.6)

    # ========================================================================
    # 2. TONE
    # ========================================================================

    def test_tone_uses_minimum_denominator(self):
        """One positive hit over max(total, 5)."""
        positive, negative = _TONE_PAIRS['energy']
        assert tone_score("I feel energetic", positive, negative) == pytest.approx(0.2)

    def test_tone_zero_without_hits(self):
        positive, negative = _TONE_PAIRS['tension']
        assert tone_score("The sky is blue", positive, negative) == 0.0

    def test_tension_clamped_to_zero_when_relaxed(self):
        result = estimate_cognitive_and_tone("calm relaxed peaceful")
        assert result.tone.tension == 0.0

    def test_valence_centered(self):
        assert estimate_cognitive_and_tone("The sky is blue").tone.valence == pytest.approx(0.5)

    def test_outputs_bounded(self):
        text = "tired exhausted drained " * 50 + "maybe however " * 50
        result = estimate_cognitive_and_tone(text)

        for value in (result.tone.energy, result.tone.valence, result.tone.tension,
                      result.cognitive.clarity, result.cognitive.focus, result.cognitive.cognitive_load):
            assert 0.0 <= value <= 1.0

    # ========================================================================
    # 3. SENTIMENT
    # ========================================================================

    def test_sentiment_empty_text(self):
        sentiment = analyze_sentiment("")

        assert sentiment.score == 0.0
        assert sentiment.label == "neutral"
        assert sentiment.confidence == 0.5

    def test_sentiment_labels(self):
        assert analyze_sentiment("I love this, it is wonderful and great").label == "positive"
        assert analyze_sentiment("This is terrible, awful and horrible").label == "negative"

    def test_sentiment_scale(self):
        sentiment = analyze_sentiment("I love this, it is wonderful and great")
        assert 0 < sentiment.score <= CognitiveConfig.SENTIMENT_SCALE
