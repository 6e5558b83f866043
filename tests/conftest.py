"""
Shared fixtures.

External tools and remote APIs are replaced with fakes that write small
files, so no test needs yt-dlp, ffmpeg or network access.
"""

from pathlib import Path
from unittest.mock import MagicMock, patch

import httpx
import pytest

from app.config import Settings
from app.core.artifacts import ArtifactStore
from app.core.workflow import PipelineServices
from app.main import create_app


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        gemini_api_key="test-key",
        artifacts_dir=tmp_path / "artifacts",
        cleanup_delay_seconds=60,
        rate_limit_requests=10,
        rate_limit_window_seconds=3600,
        log_level="WARNING",
    )


@pytest.fixture
def store(settings: Settings) -> ArtifactStore:
    return ArtifactStore(settings.artifacts_dir)


@pytest.fixture
def transcriber() -> MagicMock:
    client = MagicMock()
    client.transcribe.return_value = "hello world"
    return client


@pytest.fixture
def highlighter() -> MagicMock:
    client = MagicMock()
    client.find_highlights.return_value = [
        {"title": "Hook", "summary": "Strong open", "start_time": 0, "end_time": 20, "viral_score": 8},
    ]
    return client


@pytest.fixture
def services(settings, store, transcriber, highlighter) -> PipelineServices:
    return PipelineServices(
        settings=settings,
        artifacts=store,
        transcriber=transcriber,
        highlighter=highlighter,
    )


def fake_download(url, video_file, timeout=None):
    Path(video_file).write_bytes(b"source-video")


def fake_cut(video_file, out_path, start_seconds, end_seconds, timeout=None):
    Path(out_path).write_bytes(f"clip {start_seconds}-{end_seconds}".encode())
    return out_path


@pytest.fixture
def downloader():
    with patch("app.core.clipper.download_video", side_effect=fake_download) as mock:
        yield mock


@pytest.fixture
def cutter():
    with patch("app.core.clipper.run_ffmpeg_clip", side_effect=fake_cut) as mock:
        yield mock


@pytest.fixture
def app(services):
    return create_app(services=services)


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    await app.state.services.artifacts.shutdown()
