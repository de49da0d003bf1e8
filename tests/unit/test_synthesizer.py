
import random

import pytest
from unittest.mock import patch

from moodlens.core.errors import InvalidInputError
from moodlens.core.models import EmotionScore, Emotions, MoodScore, ScoringMode, MOOD_DIMENSIONS
from moodlens.core.synthesizer import (
    SynthesizerConfig, analyze_text, compute_overall, emotional_stability_from,
    generate_summary_and_advice, synthesize_basic
)
from moodlens.utils.numbers import round_half_up

STRESSED_TEXT = ("I'm so stressed and overwhelmed with deadlines, "
                 "I feel anxious and worried about everything.")
HAPPY_TEXT = "Today was amazing! I feel so happy and grateful, excited about everything."

ADVERSARIAL_TEXTS = [
    "",
    "   \n\t ",
    "!!!???...",
    "stressed " * 500,
    "happy " * 500,
    "😀🔥 ∑∞ ñandú",
    "a" * 10000,
    "maybe however " * 200,
]


def weighted_overall(score: MoodScore) -> float:
    return round_half_up(
        0.30 * score.happiness + 0.25 * (10 - score.stress) + 0.20 * score.clarity
        + 0.15 * score.energy + 0.10 * score.emotional_stability, 1
    )


class TestMoodSynthesizer:
    """Test suite for rich and basic scoring."""

    # ========================================================================
    # 1. REFERENCE TEXTS
    # ========================================================================

    def test_stressed_text(self):
        score = analyze_text(STRESSED_TEXT).mood_score

        assert score.stress >= 7.0
        assert score.happiness <= 5.0
        assert score.mode is ScoringMode.RICH

    def test_happy_text(self):
        result = analyze_text(HAPPY_TEXT)

        assert result.mood_score.happiness >= 7.0
        assert result.mood_score.stress <= 4.0
        assert result.analysis.emotions.primary == "joy"
        assert result.analysis.sentiment.label == "positive"

    def test_empty_text_is_neutral(self):
        score = analyze_text("").mood_score

        for name in MOOD_DIMENSIONS:
            assert getattr(score, name) == 5.0
        assert score.overall == 5.0

    def test_non_string_rejected(self):
        with pytest.raises(InvalidInputError):
            analyze_text(None)
        with pytest.raises(InvalidInputError):
            analyze_text(b"bytes are not text")

    # ========================================================================
    # 2. INVARIANTS
    # ========================================================================

    @pytest.mark.parametrize("text", ADVERSARIAL_TEXTS + [STRESSED_TEXT, HAPPY_TEXT])
    def test_scores_bounded(self, text):
        score = analyze_text(text).mood_score

        for value in score.breakdown().values():
            assert 0.0 <= value <= 10.0
            assert round_half_up(value, 1) == value
        assert 0.0 <= score.overall <= 10.0

    @pytest.mark.parametrize("text", ADVERSARIAL_TEXTS + [STRESSED_TEXT, HAPPY_TEXT])
    def test_overall_is_weighted_sum(self, text):
        score = analyze_text(text).mood_score
        assert score.overall == weighted_overall(score)

    def test_rich_mode_is_deterministic(self):
        assert analyze_text(STRESSED_TEXT) == analyze_text(STRESSED_TEXT)

    def test_weights_sum_to_one(self):
        cfg = SynthesizerConfig
        total = (cfg.WEIGHT_HAPPINESS + cfg.WEIGHT_STRESS + cfg.WEIGHT_CLARITY
                 + cfg.WEIGHT_ENERGY + cfg.WEIGHT_STABILITY)
        assert total == pytest.approx(1.0)

    def test_round_half_up(self):
        assert round_half_up(2.25, 1) == 2.3
        assert round_half_up(-2.25, 1) == -2.3
        assert round_half_up(1.005, 2) == 1.01

    def test_compute_overall_guards_nan(self):
        assert compute_overall(float('nan'), 5.0, 5.0, 5.0, 5.0) == 5.0

    # ========================================================================
    # 3. EMOTIONAL STABILITY
    # ========================================================================

    def test_stability_neutral_without_emotions(self):
        assert emotional_stability_from(Emotions(primary="neutral")) == 5.0

    def test_stability_single_emotion(self):
        """One emotion at 1.0 deviates 0.5 from center: 10 - 5 = 5."""
        emotions = Emotions(primary="joy", all=[EmotionScore("joy", 1.0)])
        assert emotional_stability_from(emotions) == pytest.approx(5.0)

    def test_stability_balanced_emotions(self):
        emotions = Emotions(primary="joy", secondary="calm",
                            all=[EmotionScore("joy", 0.5), EmotionScore("calm", 0.5)])
        assert emotional_stability_from(emotions) == pytest.approx(10.0)

    # ========================================================================
    # 4. BASIC MODE
    # ========================================================================

    def test_basic_mode_seeded_is_repeatable(self):
        first = synthesize_basic("Nothing much happened", random.Random(42))
        second = synthesize_basic("Nothing much happened", random.Random(42))
        assert first == second

    @pytest.mark.parametrize("seed", range(20))
    def test_basic_mode_bounds(self, seed):
        score = synthesize_basic("Nothing much happened", random.Random(seed))

        assert score.mode is ScoringMode.BASIC
        for value in score.breakdown().values():
            assert 1.0 <= value <= 10.0
        # Empty dimensions land in [4, 6]
        assert 4.0 <= score.happiness <= 6.0

    def test_basic_overall_is_plain_mean(self):
        score = synthesize_basic("stressed stressed happy happy", random.Random(1))
        expected = round_half_up(
            ((11 - score.stress) + score.happiness + score.clarity
             + score.energy + score.emotional_stability) / 5, 1
        )
        assert score.overall == expected

    def test_basic_mode_uses_tier_totals(self):
        score = synthesize_basic("stressed stressed anxious busy", random.Random(0))
        # 3 high hits (+2 each) + 1 medium (+1)
        assert score.stress == 7.0

    def test_basic_mode_floor(self):
        score = synthesize_basic("tired exhausted drained", random.Random(0))
        assert score.energy == 1.0

    def test_analyze_text_basic_mode(self):
        result = analyze_text(HAPPY_TEXT, mode=ScoringMode.BASIC, rng=random.Random(3))

        assert result.mood_score.mode is ScoringMode.BASIC
        assert result.analysis.sentiment.label == "neutral"
        assert result.analysis.emotions.primary == "joy"

    def test_rich_failure_falls_back_to_basic(self):
        with patch("moodlens.core.synthesizer.estimate_cognitive_and_tone",
                   side_effect=RuntimeError("boom")):
            result = analyze_text(HAPPY_TEXT, rng=random.Random(0))

        assert result.mood_score.mode is ScoringMode.BASIC

    # ========================================================================
    # 5. SUMMARY & ADVICE
    # ========================================================================

    def test_summary_mentions_overall(self):
        result = analyze_text(STRESSED_TEXT)

        assert f"{result.mood_score.overall}/10" in result.analysis.summary
        assert "Stress levels are elevated" in result.analysis.summary
        assert "deep breaths" in result.analysis.advice

    def test_advice_for_fear(self):
        score = MoodScore(stress=5, happiness=5, clarity=5, energy=5, emotional_stability=5, overall=5)
        _, advice = generate_summary_and_advice(score, Emotions(primary="fear"))
        assert "what you can control" in advice

    def test_analysis_values_rounded(self):
        analysis = analyze_text(HAPPY_TEXT).analysis
        assert analysis.tone.energy == round_half_up(analysis.tone.energy, 3)
        assert analysis.keywords
