import shutil
import subprocess
import logging
from pathlib import Path
from typing import Optional

from app.core.exceptions import DownloadError, TranscodeError
from app.core.utils.ffmpeg import run_ffmpeg

logger = logging.getLogger(__name__)

# Vertical 9:16 output frame
OUTPUT_WIDTH = 1080
OUTPUT_HEIGHT = 1920

DOWNLOAD_FORMAT = "bestvideo[ext=mp4]+bestaudio[ext=m4a]/best[ext=mp4]/best"


def check_tool(name: str) -> bool:
    """Return True if an external binary is available on PATH."""
    return shutil.which(name) is not None


def download_video(url: str, video_file: Path, timeout: Optional[float] = None) -> None:
    """
    Download `url` to `video_file` with yt-dlp.

    The URL is passed through untouched as the final argument, after `--`
    so it can never be read as an option.
    """
    logger.info(f"Downloading video to {video_file.name}")
    cmd = [
        "yt-dlp",
        "-f", DOWNLOAD_FORMAT,
        "--merge-output-format", "mp4",
        "--no-playlist",
        "--no-progress",
        "-o", str(video_file),
        "--",
        url,
    ]
    try:
        subprocess.run(
            cmd,
            check=True,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.CalledProcessError as e:
        logger.error(f"yt-dlp failed:\n{e.stderr}")
        raise DownloadError("Video download failed", details=e.stderr) from e
    except subprocess.TimeoutExpired as e:
        logger.error(f"yt-dlp timed out after {timeout}s")
        raise DownloadError(f"Video download timed out after {timeout}s") from e
    except FileNotFoundError as e:
        raise DownloadError("yt-dlp executable not found") from e

    if not video_file.exists():
        raise DownloadError(f"yt-dlp reported success but {video_file.name} is missing")


def build_vf_filter(width: int = OUTPUT_WIDTH, height: int = OUTPUT_HEIGHT) -> str:
    """Scale to fit inside the frame, then pad to exactly width x height."""
    return (
        f"scale={width}:{height}:force_original_aspect_ratio=decrease,"
        f"pad={width}:{height}:(ow-iw)/2:(oh-ih)/2"
    )


def run_ffmpeg_clip(
    video_file: Path,
    out_path: Path,
    start_seconds: float,
    end_seconds: float,
    timeout: Optional[float] = None,
) -> Path:
    """
    Cut [start_seconds, end_seconds) out of `video_file` as a vertical MP4.

    Raises:
        TranscodeError: On bad ranges, ffmpeg failure or missing output.
    """
    if start_seconds < 0 or end_seconds <= start_seconds:
        raise TranscodeError(
            f"Invalid clip range {start_seconds}-{end_seconds} for {out_path.name}"
        )

    duration = end_seconds - start_seconds

    cmd = [
        "ffmpeg",
        "-y",
        "-ss", f"{start_seconds:.3f}",
        "-t", f"{duration:.3f}",
        "-i", str(video_file),
        "-vf", build_vf_filter(),
        "-c:v", "libx264",
        "-preset", "fast",
        "-crf", "23",
        "-c:a", "aac",
        "-b:a", "128k",
        "-movflags", "+faststart",
        str(out_path),
    ]

    try:
        run_ffmpeg(cmd, suppress_warnings=True, log_level="error", check=True, timeout=timeout)
    except TranscodeError as e:
        logger.error(f"ffmpeg failed: {e}")
        raise TranscodeError(f"FFmpeg clipping failed for {out_path.name}", details=e.details) from e

    if not out_path.exists() or out_path.stat().st_size == 0:
        raise TranscodeError(f"FFmpeg produced no output for {out_path.name}")

    return out_path
