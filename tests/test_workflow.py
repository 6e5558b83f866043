"""
Tests for the process and analyze workflows.

Run with: pytest tests/test_workflow.py -v
"""

import asyncio
import threading
from dataclasses import replace
from pathlib import Path

import pytest

from app.core.exceptions import DownloadError, PipelineError, RemoteCallError, TranscodeError, TranscriptionError
from app.core.security import ValidationError
from app.core.workflow import (
    ClipSpecData,
    JobState,
    analyze_video_workflow,
    create_job,
    normalize_clip_specs,
    process_video_workflow,
    schedule_job_cleanup,
)

pytestmark = pytest.mark.anyio

URL = "https://example.com/watch?v=abc"
CLIPS = [
    {"start": 0, "end": 10, "title": "intro"},
    {"start": 20, "end": 35},
    {"start": 40.5, "end": 41},
]


def _files(root: Path):
    return sorted(p.name for p in root.iterdir())


def _write_clip(video_file, out_path, start, end, timeout=None):
    Path(out_path).write_bytes(b"clip")
    return out_path


class TestNormalizeClipSpecs:
    def test_accepts_dicts_and_objects(self):
        specs = normalize_clip_specs([{"start": 1, "end": 2}, ClipSpecData(start=3, end=4, title="x")])
        assert specs == [ClipSpecData(1.0, 2.0, None), ClipSpecData(3.0, 4.0, "x")]

    @pytest.mark.parametrize(
        "clips",
        [
            None,
            "0-10",
            {"start": 0, "end": 1},
            [{"start": "a", "end": 1}],
            [{"start": 0}],
            [{"start": 5, "end": 5}],
            [{"start": -1, "end": 5}],
        ],
    )
    def test_rejects_bad_input(self, clips):
        with pytest.raises(ValidationError) as exc:
            normalize_clip_specs(clips)
        assert exc.value.field == "clips"


class TestProcessWorkflow:
    """Tests for process_video_workflow."""

    async def test_success(self, services, downloader, cutter, transcriber):
        result = await process_video_workflow(services, URL, CLIPS)

        token = result.job.token
        assert result.transcript == "hello world"
        assert result.clips == [f"clip_{i}_{token}.mp4" for i in range(3)]
        assert result.job.state == JobState.CLIPPING

        # URL reaches the downloader untouched
        assert downloader.call_args.args[0] == URL
        transcriber.transcribe.assert_called_once_with(result.job.local_path)

        # Clips were cut in request order from the downloaded file
        calls = [(c.args[2], c.args[3]) for c in cutter.call_args_list]
        assert calls == [(0.0, 10.0), (20.0, 35.0), (40.5, 41.0)]
        assert all(c.args[0] == result.job.local_path for c in cutter.call_args_list)

        root = services.artifacts.root
        assert _files(root) == sorted(result.clips + [f"video_{token}.mp4"])
        assert set(result.job.artifacts) == set(root.iterdir())

    async def test_empty_clip_list(self, services, downloader, cutter):
        result = await process_video_workflow(services, URL, [])
        assert result.clips == []
        cutter.assert_not_called()

    @pytest.mark.parametrize("url", ["", None, "   "])
    async def test_missing_url(self, services, downloader, cutter, transcriber, url):
        with pytest.raises(ValidationError):
            await process_video_workflow(services, url, CLIPS)
        downloader.assert_not_called()
        transcriber.transcribe.assert_not_called()
        cutter.assert_not_called()

    async def test_missing_clips(self, services, downloader):
        with pytest.raises(ValidationError):
            await process_video_workflow(services, URL, None)
        downloader.assert_not_called()
        assert _files(services.artifacts.root) == []

    async def test_download_failure(self, services, downloader, cutter, transcriber):
        def partial_download(url, video_file, timeout=None):
            # yt-dlp leaves a .part file and per-format streams behind when killed
            video_file = Path(video_file)
            Path(f"{video_file}.part").write_bytes(b"partial")
            video_file.with_suffix(".f137.mp4").write_bytes(b"video stream")
            video_file.with_suffix(".f140.m4a").write_bytes(b"audio stream")
            raise DownloadError("Video download failed", details="HTTP 403")

        downloader.side_effect = partial_download

        with pytest.raises(DownloadError):
            await process_video_workflow(services, URL, CLIPS)

        transcriber.transcribe.assert_not_called()
        cutter.assert_not_called()
        assert _files(services.artifacts.root) == []

    async def test_transcription_failure(self, services, downloader, cutter, transcriber):
        transcriber.transcribe.side_effect = TranscriptionError("quota")

        with pytest.raises(TranscriptionError):
            await process_video_workflow(services, URL, CLIPS)

        cutter.assert_not_called()
        assert _files(services.artifacts.root) == []

    async def test_unexpected_transcriber_error_is_wrapped(self, services, downloader, transcriber):
        transcriber.transcribe.side_effect = KeyError("boom")

        with pytest.raises(TranscriptionError):
            await process_video_workflow(services, URL, CLIPS)

    async def test_cut_failure_stops_and_cleans_up(self, services, downloader, cutter):
        def fail_second(video_file, out_path, start, end, timeout=None):
            if cutter.call_count == 2:
                Path(out_path).write_bytes(b"half")
                raise TranscodeError("FFmpeg clipping failed")
            return _write_clip(video_file, out_path, start, end, timeout)

        cutter.side_effect = fail_second

        with pytest.raises(TranscodeError) as exc:
            await process_video_workflow(services, URL, CLIPS)

        assert exc.value.step == "cut"
        # Third clip never started
        assert cutter.call_count == 2
        # Source, first clip and the partial second clip are all gone
        assert _files(services.artifacts.root) == []

    async def test_unexpected_error_becomes_pipeline_error(self, services, downloader, cutter):
        cutter.side_effect = OSError("disk full")

        with pytest.raises(PipelineError) as exc:
            await process_video_workflow(services, URL, CLIPS)

        assert "cut[0]" in exc.value.message
        assert _files(services.artifacts.root) == []

    async def test_concurrent_jobs_do_not_collide(self, services, downloader, cutter):
        first, second = await asyncio.gather(
            process_video_workflow(services, URL, CLIPS[:1]),
            process_video_workflow(services, URL, CLIPS[:1]),
        )
        assert first.job.token != second.job.token
        assert first.clips != second.clips
        assert len(_files(services.artifacts.root)) == 4

    async def test_failure_leaves_other_jobs_alone(self, services, downloader, cutter):
        done = await process_video_workflow(services, URL, CLIPS[:1])
        cutter.side_effect = TranscodeError("FFmpeg clipping failed")

        with pytest.raises(TranscodeError):
            await process_video_workflow(services, URL, CLIPS[:1])

        assert _files(services.artifacts.root) == sorted([done.clips[0], done.job.local_path.name])

    async def test_cancel_reclaims_output_written_afterwards(self, services, downloader, cutter):
        entered = threading.Event()
        release = threading.Event()

        def slow_cut(video_file, out_path, start, end, timeout=None):
            entered.set()
            release.wait(5)
            Path(out_path).write_bytes(b"late")
            return out_path

        cutter.side_effect = slow_cut
        root = services.artifacts.root

        job = asyncio.create_task(process_video_workflow(services, URL, CLIPS[:1]))
        while not entered.is_set():
            await asyncio.sleep(0.01)

        job.cancel()
        with pytest.raises(asyncio.CancelledError):
            await job

        # Cleanup already ran but ffmpeg is still writing
        release.set()
        for _ in range(100):
            if not _files(root):
                break
            await asyncio.sleep(0.02)

        assert _files(root) == []


class TestAnalyzeWorkflow:
    """Tests for analyze_video_workflow."""

    async def test_success(self, services, downloader, transcriber, highlighter):
        result = await analyze_video_workflow(services, URL)

        assert result.transcript == "hello world"
        assert result.highlights == highlighter.find_highlights.return_value
        highlighter.find_highlights.assert_called_once_with("hello world")
        assert result.job.state == JobState.ANALYZED
        assert _files(services.artifacts.root) == [result.job.local_path.name]

    async def test_missing_url(self, services, downloader, highlighter):
        with pytest.raises(ValidationError):
            await analyze_video_workflow(services, "")
        downloader.assert_not_called()
        highlighter.find_highlights.assert_not_called()

    async def test_fallback_highlights_pass_through(self, services, downloader, highlighter):
        fallback = [{"title": "Highlight", "summary": "Fallback moment", "start_time": 30, "end_time": 60, "viral_score": 7}]
        highlighter.find_highlights.return_value = fallback

        result = await analyze_video_workflow(services, URL)
        assert result.highlights == fallback

    async def test_remote_failure(self, services, downloader, highlighter):
        highlighter.find_highlights.side_effect = RemoteCallError("Highlight generation failed")

        with pytest.raises(RemoteCallError):
            await analyze_video_workflow(services, URL)

        assert _files(services.artifacts.root) == []

    async def test_unexpected_remote_error_is_wrapped(self, services, downloader, highlighter):
        highlighter.find_highlights.side_effect = TimeoutError()

        with pytest.raises(RemoteCallError):
            await analyze_video_workflow(services, URL)


class TestScheduleJobCleanup:
    async def test_deletes_after_delay(self, services, downloader, cutter):
        result = await process_video_workflow(services, URL, CLIPS[:2])
        root = services.artifacts.root

        await schedule_job_cleanup(services, result.job)
        assert result.job.state == JobState.CLEANUP_SCHEDULED
        assert services.artifacts.pending_count == 1
        # Still downloadable during the grace period
        assert len(_files(root)) == 3

        await services.artifacts.shutdown()
        assert _files(root) == []

    async def test_short_delay(self, settings, services, downloader):
        services.settings = replace(settings, cleanup_delay_seconds=0.05)
        result = await analyze_video_workflow(services, URL)

        await schedule_job_cleanup(services, result.job)
        await asyncio.sleep(0.2)

        assert _files(services.artifacts.root) == []
        assert services.artifacts.pending_count == 0


class TestCreateJob:
    def test_reserves_video_path(self, services):
        job = create_job(services, URL)
        assert job.local_path.name == f"video_{job.token}.mp4"
        assert job.artifacts == [job.local_path]
        assert job.state == JobState.CREATED

    def test_transcript_set_once(self, services):
        job = create_job(services, URL)
        job.set_transcript("a")
        with pytest.raises(RuntimeError):
            job.set_transcript("b")
