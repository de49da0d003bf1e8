"""
Generative-text collaborator backed by Google Generative AI (Gemini).

Used only to rephrase insight descriptions and action items. It is best
effort: every failure surfaces as UpstreamSummaryUnavailable, which the
insight composer catches and answers with its rule-based templates.
"""

import os
import logging
from typing import List, Optional

import google.generativeai as genai

from moodlens.core.errors import UpstreamSummaryUnavailable

logger = logging.getLogger(__name__)


# Model preference order for cascade fallback
PREFERRED_MODELS = [
    'gemini-2.5-flash',
    'gemini-2.0-flash',
    'gemini-2.0-flash-lite',
    'gemini-flash-latest',
]

DEFAULT_REQUEST_TIMEOUT = 5.0


class GeminiSummarizer:
    """
    summarize(prompt) -> str over a cascade of Gemini models.

    Args:
        api_key: Gemini key (defaults to GEMINI_API_KEY env var).
        models: Model names, tried in order.
        request_timeout: Per-request timeout in seconds, passed to the client.
    """

    def __init__(self, api_key: Optional[str] = None, models: Optional[List[str]] = None,
                 request_timeout: float = DEFAULT_REQUEST_TIMEOUT):
        self.api_key = api_key or os.environ.get("GEMINI_API_KEY")
        self.models = list(models or PREFERRED_MODELS)
        self.request_timeout = request_timeout
        self._configured = False

    @property
    def available(self) -> bool:
        return bool(self.api_key)

    def _configure(self) -> None:
        if not self._configured:
            genai.configure(api_key=self.api_key)
            self._configured = True

    def summarize(self, prompt: str) -> str:
        """
        Returns the first non-empty completion along the model cascade.

        Raises:
            UpstreamSummaryUnavailable: No API key, or every model failed
                or answered with empty text.
        """
        if not self.api_key:
            raise UpstreamSummaryUnavailable("No GEMINI_API_KEY found in environment")

        self._configure()

        for model_name in self.models:
            try:
                logger.debug(f"[GEMINI] Summarizing with model: {model_name}")
                model = genai.GenerativeModel(model_name)
                response = model.generate_content(
                    prompt,
                    request_options={"timeout": self.request_timeout},
                )
                text = (response.text or "").strip()
                if text:
                    logger.info(f"[GEMINI] Model {model_name} answered ({len(text)} chars)")
                    return text
                logger.warning(f"[GEMINI] Model {model_name} returned an empty response")
            except Exception as e:
                logger.warning(f"[GEMINI] Model {model_name} failed: {e}")
                continue

        logger.error("[GEMINI] All models failed.")
        raise UpstreamSummaryUnavailable("All Gemini models failed")
