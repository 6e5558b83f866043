"""
Core utility modules for video processing and FFmpeg operations.
"""

from app.core.utils.ffmpeg import run_ffmpeg, filter_benign_warnings

__all__ = ["run_ffmpeg", "filter_benign_warnings"]
