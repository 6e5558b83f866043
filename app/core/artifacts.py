"""
Local artifact store for downloaded videos and rendered clips.

Files live flat under one directory. Names embed a per-job token so
concurrent jobs never share a path, and every deletion is best effort.
"""

import asyncio
import glob
import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from app.core.security import (
    CLIP_EXTENSION,
    CLIP_NAME_PREFIX,
    ValidationError,
    validate_clip_name,
)

logger = logging.getLogger(__name__)

ARTIFACT_KINDS = ("video", "clip")


def generate_job_token() -> str:
    """
    Generates a unique token for artifact naming.
    Format: YYYYMMDD_HHMMSS_RANDOM
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    short_uuid = uuid.uuid4().hex[:8]
    return f"{timestamp}_{short_uuid}"


class ArtifactStore:
    """Creates, locates and reclaims job files under a single root directory."""

    def __init__(self, root: Path):
        self.root = Path(root).resolve()
        self.root.mkdir(parents=True, exist_ok=True)
        self._pending: Dict[asyncio.Task, List[Path]] = {}

    def reserve_path(
        self,
        kind: str,
        index: Optional[int] = None,
        token: Optional[str] = None,
    ) -> Path:
        """
        Return a fresh path for a new artifact.

        Args:
            kind: "video" for a downloaded source, "clip" for a rendered cut.
            index: Zero-based clip position, required for clips.
            token: Job token shared by all files of one job.
        """
        if kind not in ARTIFACT_KINDS:
            raise ValueError(f"Unknown artifact kind: {kind}")

        token = token or generate_job_token()

        if kind == "video":
            return self.root / f"video_{token}{CLIP_EXTENSION}"

        if index is None or index < 0:
            raise ValueError("Clip artifacts need a non-negative index")
        return self.root / f"{CLIP_NAME_PREFIX}{index}_{token}{CLIP_EXTENSION}"

    def exists(self, path: Path) -> bool:
        return Path(path).is_file()

    def delete(self, path: Path) -> None:
        """Delete a file, logging instead of raising on failure."""
        try:
            Path(path).unlink(missing_ok=True)
            logger.debug(f"Deleted artifact {path}")
        except OSError as e:
            logger.warning(f"Failed to delete {path}: {e}")

    def delete_many(self, paths: Iterable[Path]) -> None:
        for path in paths:
            self.delete(path)

    def job_files(self, token: str) -> List[Path]:
        """
        Every file in the store whose name carries `token`.

        Covers names the job never reserved, such as yt-dlp's `.part`
        downloads and per-format intermediates like `video_<token>.f137.mp4`.
        """
        if not token:
            return []
        return [path for path in self.root.glob(f"*_{glob.escape(token)}*") if path.is_file()]

    def delete_job_files(self, token: str) -> None:
        self.delete_many(self.job_files(token))

    def schedule_delete(self, paths: Iterable[Path], delay_seconds: float) -> asyncio.Task:
        """
        Delete `paths` after `delay_seconds` on the running event loop.

        The returned task outlives the request that scheduled it.
        """
        paths = list(paths)
        task = asyncio.get_running_loop().create_task(
            self._delete_later(paths, delay_seconds)
        )
        self._pending[task] = paths
        task.add_done_callback(self._on_cleanup_done)
        logger.info(f"Scheduled deletion of {len(paths)} artifact(s) in {delay_seconds}s")
        return task

    async def _delete_later(self, paths: List[Path], delay_seconds: float) -> None:
        await asyncio.sleep(delay_seconds)
        self.delete_many(paths)

    def _on_cleanup_done(self, task: asyncio.Task) -> None:
        self._pending.pop(task, None)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Scheduled artifact cleanup failed: {exc}")

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    async def shutdown(self) -> None:
        """Cancel pending delayed deletions and reclaim their files now."""
        pending = list(self._pending.items())
        for task, paths in pending:
            task.cancel()
            self.delete_many(paths)
        if pending:
            await asyncio.gather(*(task for task, _ in pending), return_exceptions=True)
            logger.info(f"Flushed {len(pending)} pending artifact cleanup(s)")

    def resolve_clip(self, filename: str) -> Optional[Path]:
        """
        Map a client-supplied clip name to a file inside the store.

        Returns None for invalid names, names that escape the root, and
        files that do not exist.
        """
        try:
            filename = validate_clip_name(filename)
        except ValidationError as e:
            logger.debug(f"Rejected clip name {filename!r}: {e.message}")
            return None

        path = (self.root / filename).resolve()
        if path.parent != self.root:
            return None

        if not path.is_file():
            return None

        return path
