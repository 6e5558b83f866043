"""
FFmpeg utility functions with improved error handling and logging.

This module provides secure FFmpeg execution: commands are always passed
as argument vectors, never through a shell.
"""

import logging
import subprocess
import re
from typing import Optional

from app.core.exceptions import TranscodeError

logger = logging.getLogger(__name__)

# Patterns for known benign warnings that should be filtered
BENIGN_WARNING_PATTERNS = [
    r"\[av1 @ .*\] Your platform doesn't suppport hardware accelerated AV1 decoding",
    r"\[av1 @ .*\] Failed to get pixel format",
    r"\[av1 @ .*\] Missing Sequence Header",
    r"\[.*\] .* does not support hardware acceleration",
    r"\[.*\] .* hardware acceleration disabled",
]


def filter_benign_warnings(stderr: str) -> tuple[str, list[str]]:
    """
    Filter out known benign warnings from FFmpeg stderr.

    Args:
        stderr: Raw stderr output from FFmpeg.

    Returns:
        Tuple of (filtered_stderr, filtered_warnings_list).
    """
    filtered_lines = []
    filtered_warnings = []

    for line in stderr.split("\n"):
        if any(re.search(pattern, line, re.IGNORECASE) for pattern in BENIGN_WARNING_PATTERNS):
            filtered_warnings.append(line)
        else:
            filtered_lines.append(line)

    return "\n".join(filtered_lines), filtered_warnings


def run_ffmpeg(
    cmd: list[str],
    suppress_warnings: bool = True,
    log_level: str = "warning",
    check: bool = True,
    timeout: Optional[float] = None,
) -> subprocess.CompletedProcess:
    """
    Run FFmpeg command with improved error handling.

    Args:
        cmd: FFmpeg command as list of arguments.
        suppress_warnings: If True, suppress AV1 and other benign warnings.
        log_level: FFmpeg log level (quiet, panic, fatal, error, warning, info, verbose, debug).
        check: If True, raise exception on non-zero exit code.
        timeout: Seconds before the process is killed.

    Returns:
        CompletedProcess instance.

    Raises:
        TranscodeError: If FFmpeg fails, times out or is not installed.
    """
    if suppress_warnings and "-loglevel" not in cmd:
        # Insert log level after 'ffmpeg' (and '-y' if present)
        insert_pos = 2 if len(cmd) > 1 and cmd[1] == "-y" else 1
        cmd = cmd[:insert_pos] + ["-loglevel", log_level] + cmd[insert_pos:]

    try:
        result = subprocess.run(
            cmd,
            check=check,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.CalledProcessError as e:
        stderr = e.stderr or ""
        if suppress_warnings and stderr:
            stderr, warnings = filter_benign_warnings(stderr)
            if warnings:
                logger.debug(f"Filtered {len(warnings)} benign FFmpeg warnings")

        logger.error(f"FFmpeg failed: {stderr}")
        raise TranscodeError("FFmpeg command failed", details=stderr) from e
    except subprocess.TimeoutExpired as e:
        logger.error(f"FFmpeg timed out after {timeout}s")
        raise TranscodeError(f"FFmpeg timed out after {timeout}s") from e
    except FileNotFoundError as e:
        raise TranscodeError("ffmpeg executable not found") from e

    # Filter stderr for benign warnings
    if suppress_warnings and result.stderr:
        filtered_stderr, warnings = filter_benign_warnings(result.stderr)
        if warnings:
            logger.debug(f"Filtered {len(warnings)} benign FFmpeg warnings")
        result.stderr = filtered_stderr

    return result
