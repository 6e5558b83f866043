import logging
from typing import Any, Dict, List

import google.generativeai as genai

from app.config import Settings
from app.core.exceptions import RemoteCallError
from app.core.workflow.data_processor import parse_highlights
from app.core.workflow.prompt import HIGHLIGHT_SYSTEM_PROMPT, build_highlight_message

logger = logging.getLogger(__name__)


class HighlightClient:
    """
    Wrapper around the Gemini API that proposes viral segments for a transcript.
    """

    def __init__(self, settings: Settings):
        if not settings.gemini_api_key:
            raise RuntimeError("GEMINI_API_KEY is not set in environment.")
        genai.configure(api_key=settings.gemini_api_key)
        self.model_name = settings.highlight_model
        self.temperature = settings.highlight_temperature
        self.timeout = settings.api_timeout_seconds

    def find_highlights(self, transcript_text: str) -> List[Dict[str, Any]]:
        """
        Ask the model for highlight segments.

        Unparseable output falls back to a single default highlight.

        Raises:
            RemoteCallError: If the API call itself fails.
        """
        logger.info(f"Requesting highlights from {self.model_name}")
        try:
            model = genai.GenerativeModel(
                self.model_name,
                system_instruction=HIGHLIGHT_SYSTEM_PROMPT,
                generation_config=genai.GenerationConfig(
                    temperature=self.temperature,
                    response_mime_type="application/json",
                ),
            )
            response = model.generate_content(
                build_highlight_message(transcript_text),
                request_options={"timeout": self.timeout},
            )
        except Exception as e:
            logger.error(f"Highlight request failed with {self.model_name}: {e}")
            raise RemoteCallError(f"Highlight generation failed: {e}") from e

        try:
            text = response.text
        except ValueError as e:
            # Raised when the response carries no usable candidate
            logger.warning(f"Highlight response had no text: {e}")
            text = None

        highlights = parse_highlights(text)
        logger.info(f"Received {len(highlights)} highlight(s)")
        return highlights
