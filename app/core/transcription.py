"""
Speech-to-text through the Gemini Files API.
"""

import logging
import time
from pathlib import Path

import google.generativeai as genai

from app.config import Settings
from app.core.exceptions import TranscriptionError
from app.core.workflow.prompt import TRANSCRIPTION_PROMPT

logger = logging.getLogger(__name__)

POLL_INTERVAL_SECONDS = 2.0


class TranscriptionClient:
    """Uploads a local media file and returns its plain-text transcript."""

    def __init__(self, settings: Settings):
        if not settings.gemini_api_key:
            raise RuntimeError("GEMINI_API_KEY is not set in environment.")
        genai.configure(api_key=settings.gemini_api_key)
        self.model_name = settings.transcription_model
        self.timeout = settings.api_timeout_seconds

    def transcribe(self, media_path: Path) -> str:
        """
        Transcribe `media_path`. The local file is left in place.

        Raises:
            TranscriptionError: On any remote failure or timeout.
        """
        media_path = Path(media_path)
        logger.info(f"Uploading {media_path.name} for transcription...")

        uploaded = None
        try:
            with open(media_path, "rb") as stream:
                uploaded = genai.upload_file(
                    stream,
                    mime_type="video/mp4",
                    display_name=media_path.name,
                )
            uploaded = self._wait_until_active(uploaded)

            model = genai.GenerativeModel(self.model_name)
            response = model.generate_content(
                [uploaded, TRANSCRIPTION_PROMPT],
                request_options={"timeout": self.timeout},
            )
            text = response.text.strip()
        except TranscriptionError:
            raise
        except Exception as e:
            logger.error(f"Transcription failed for {media_path.name}: {e}")
            raise TranscriptionError(f"Transcription failed: {e}") from e
        finally:
            if uploaded is not None:
                self._delete_upload(uploaded)

        logger.info(f"Transcribed {media_path.name} ({len(text)} chars)")
        return text

    def _wait_until_active(self, uploaded):
        started = time.monotonic()
        while uploaded.state.name == "PROCESSING":
            if time.monotonic() - started > self.timeout:
                raise TranscriptionError(
                    f"Media processing timed out after {self.timeout}s"
                )
            time.sleep(POLL_INTERVAL_SECONDS)
            uploaded = genai.get_file(uploaded.name)

        if uploaded.state.name == "FAILED":
            raise TranscriptionError("Remote media processing failed")

        return uploaded

    def _delete_upload(self, uploaded) -> None:
        try:
            genai.delete_file(uploaded.name)
        except Exception as e:
            logger.warning(f"Failed to delete uploaded file {uploaded.name}: {e}")
