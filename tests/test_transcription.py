"""
Tests for the Gemini transcription client.

Run with: pytest tests/test_transcription.py -v
"""

from dataclasses import replace
from unittest.mock import MagicMock, patch

import pytest

from app.core.exceptions import TranscriptionError
from app.core.transcription import TranscriptionClient


def _uploaded(state="ACTIVE", name="files/abc"):
    uploaded = MagicMock()
    uploaded.name = name
    uploaded.state.name = state
    return uploaded


@pytest.fixture
def mock_genai():
    with patch("app.core.transcription.genai") as mock:
        yield mock


@pytest.fixture
def media(tmp_path):
    path = tmp_path / "video_tok.mp4"
    path.write_bytes(b"source-video")
    return path


class TestTranscriptionClient:
    """Tests for TranscriptionClient.transcribe."""

    def test_requires_api_key(self, settings):
        with pytest.raises(RuntimeError, match="GEMINI_API_KEY"):
            TranscriptionClient(replace(settings, gemini_api_key=None))

    def test_returns_text_and_removes_upload(self, settings, mock_genai, media):
        mock_genai.upload_file.return_value = _uploaded()
        mock_genai.GenerativeModel.return_value.generate_content.return_value = MagicMock(
            text="  hello world \n"
        )

        text = TranscriptionClient(settings).transcribe(media)

        assert text == "hello world"
        assert mock_genai.upload_file.call_args.kwargs["mime_type"] == "video/mp4"
        mock_genai.GenerativeModel.assert_called_once_with(settings.transcription_model)
        mock_genai.delete_file.assert_called_once_with("files/abc")
        # Local file is left for later steps
        assert media.exists()

    def test_waits_for_processing(self, settings, mock_genai, media):
        mock_genai.upload_file.return_value = _uploaded("PROCESSING")
        mock_genai.get_file.return_value = _uploaded("ACTIVE")
        mock_genai.GenerativeModel.return_value.generate_content.return_value = MagicMock(text="ok")

        with patch("app.core.transcription.time.sleep") as mock_sleep:
            assert TranscriptionClient(settings).transcribe(media) == "ok"

        mock_sleep.assert_called_once()
        mock_genai.get_file.assert_called_once_with("files/abc")

    def test_remote_processing_failed(self, settings, mock_genai, media):
        mock_genai.upload_file.return_value = _uploaded("FAILED")

        with pytest.raises(TranscriptionError, match="processing failed"):
            TranscriptionClient(settings).transcribe(media)

        mock_genai.GenerativeModel.assert_not_called()
        mock_genai.delete_file.assert_called_once_with("files/abc")

    def test_upload_error(self, settings, mock_genai, media):
        mock_genai.upload_file.side_effect = ConnectionError("reset by peer")

        with pytest.raises(TranscriptionError) as exc:
            TranscriptionClient(settings).transcribe(media)

        assert exc.value.step == "transcribe"
        mock_genai.delete_file.assert_not_called()

    def test_cleanup_failure_does_not_mask_result(self, settings, mock_genai, media):
        mock_genai.upload_file.return_value = _uploaded()
        mock_genai.GenerativeModel.return_value.generate_content.return_value = MagicMock(text="ok")
        mock_genai.delete_file.side_effect = RuntimeError("gone")

        assert TranscriptionClient(settings).transcribe(media) == "ok"

    def test_missing_file(self, settings, mock_genai, tmp_path):
        with pytest.raises(TranscriptionError):
            TranscriptionClient(settings).transcribe(tmp_path / "absent.mp4")
