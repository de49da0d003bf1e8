
import pytest
from unittest.mock import MagicMock

from moodlens.adapters.clients.gemini import PREFERRED_MODELS, GeminiSummarizer
from moodlens.core.errors import UpstreamSummaryUnavailable
from moodlens.core.insights import compose_insights
from moodlens.core.models import StreakStats, TrendDirection, TrendReport, TrendSummary


class TestGeminiSummarizer:
    """Test suite for the Gemini client (genai mocked)."""

    def test_summarize_happy_path(self, mock_genai):
        """Verify the client configures the key and returns the model text."""
        summarizer = GeminiSummarizer()
        result = summarizer.summarize("prompt")

        assert result == "You are doing well.\n- Keep going"
        mock_genai.configure.assert_called_once_with(api_key="fake_key")
        mock_genai.GenerativeModel.assert_called_once_with(PREFERRED_MODELS[0])

    def test_request_timeout_forwarded(self, mock_genai):
        GeminiSummarizer(request_timeout=2.5).summarize("prompt")

        model = mock_genai.GenerativeModel.return_value
        model.generate_content.assert_called_once_with("prompt", request_options={"timeout": 2.5})

    def test_configure_once(self, mock_genai):
        summarizer = GeminiSummarizer()
        summarizer.summarize("one")
        summarizer.summarize("two")
        assert mock_genai.configure.call_count == 1

    def test_model_cascade(self, mock_genai):
        """First model fails, second answers."""
        model = mock_genai.GenerativeModel.return_value
        good = MagicMock()
        good.text = "Second model answer"
        model.generate_content.side_effect = [Exception("quota exceeded"), good]

        assert GeminiSummarizer().summarize("prompt") == "Second model answer"
        assert mock_genai.GenerativeModel.call_count == 2

    def test_empty_answer_moves_on(self, mock_genai):
        model = mock_genai.GenerativeModel.return_value
        empty, good = MagicMock(), MagicMock()
        empty.text = "  "
        good.text = "ok"
        model.generate_content.side_effect = [empty, good]

        assert GeminiSummarizer().summarize("prompt") == "ok"

    def test_all_models_fail(self, mock_genai):
        model = mock_genai.GenerativeModel.return_value
        model.generate_content.side_effect = Exception("API Error")

        with pytest.raises(UpstreamSummaryUnavailable):
            GeminiSummarizer().summarize("prompt")
        assert mock_genai.GenerativeModel.call_count == len(PREFERRED_MODELS)

    def test_missing_key(self, mock_genai, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        summarizer = GeminiSummarizer()

        assert summarizer.available is False
        with pytest.raises(UpstreamSummaryUnavailable):
            summarizer.summarize("prompt")
        mock_genai.configure.assert_not_called()

    def test_composer_survives_gemini_outage(self, mock_genai):
        """A dead Gemini never costs an insight."""
        mock_genai.GenerativeModel.return_value.generate_content.side_effect = Exception("503")
        report = TrendReport(summary={
            'overall': TrendSummary(average=4.2, trend=TrendDirection.DECLINING, change_percent=-20.0),
        })

        insights = compose_insights(report, StreakStats(), summarizer=GeminiSummarizer())

        assert len(insights) == 1
        assert insights[0].title == "Your mood has been declining"

    def test_composer_uses_gemini_text(self, mock_genai):
        report = TrendReport(summary={
            'overall': TrendSummary(average=7.2, trend=TrendDirection.IMPROVING, change_percent=15.0),
        })

        insights = compose_insights(report, StreakStats(), summarizer=GeminiSummarizer())

        assert insights[0].description == "You are doing well."
        assert insights[0].action_items == ["Keep going"]
