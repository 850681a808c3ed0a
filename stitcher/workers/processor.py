"""
Video Job Processor
State machine for one video job run:

    received -> downloading -> transcoding-clips -> muxing -> uploading -> completed

Any stage may instead end in failed.

The record is written to processing before any external call, and to
completed or failed after the run's scratch space has been removed.
Job-scoped failures never escape process().
"""

import logging
import math
import posixpath
from pathlib import Path
from typing import List, Optional, Tuple
from urllib.parse import urlparse

from stitcher.core.config import settings
from stitcher.core.exceptions import JobFailure, StoreError
from stitcher.schemas.job import JobStatus, QueuedJob
from stitcher.services.fetcher import SourceFetcher
from stitcher.services.job_store import JobStore
from stitcher.services.media import MediaPipeline
from stitcher.services.storage import StorageService
from stitcher.workers.base import BaseWorker, ProcessingStage
from stitcher.workers.scratch import ScratchSpace

logger = logging.getLogger(__name__)

MIN_CLIP_SECONDS = 0.2
DEFAULT_CLIP_SECONDS = 1.0


def clip_duration(start, end) -> float:
    """
    Seconds an image stays on screen.

    end - start, floored at 0.2s; 1.0s when the difference is not a finite
    positive number (missing, non-numeric, zero or reversed offsets).
    """
    try:
        span = float(end) - float(start)
    except (TypeError, ValueError):
        return DEFAULT_CLIP_SECONDS
    if not math.isfinite(span) or span <= 0:
        return DEFAULT_CLIP_SECONDS
    return max(MIN_CLIP_SECONDS, span)


def _suffix(url: str) -> str:
    ext = posixpath.splitext(urlparse(url).path)[1]
    return ext if 1 < len(ext) <= 6 else ""


class VideoJobProcessor(BaseWorker):
    """Drives a QueuedJob through the processing state machine."""

    TASK_NAME = "video_assembly"

    def __init__(
        self,
        store: JobStore,
        fetcher: SourceFetcher,
        media: MediaPipeline,
        storage: StorageService,
        scratch_root: Optional[str] = None,
    ):
        super().__init__()
        self.store = store
        self.fetcher = fetcher
        self.media = media
        self.storage = storage
        self.scratch_root = scratch_root if scratch_root is not None else settings.SCRATCH_DIR

    def process(self, job: QueuedJob) -> Optional[JobStatus]:
        """
        Run one job to a terminal state.

        Args:
            job: Dequeued payload

        Returns:
            The terminal status written, or None if the record was not
            pending (already claimed, finished, or missing) and was skipped

        Raises:
            StoreError: Only if the initial processing write fails
        """
        job_id = job.job_id
        self._log_start(job_id, images=len(job.images), audio=job.audio_url)

        if not self.store.mark_processing(job_id):
            logger.warning(f"[{self.TASK_NAME}] Skipping {job_id}: record is not pending")
            return None

        result_url: Optional[str] = None
        error: Optional[str] = None
        try:
            with ScratchSpace(job_id, self.scratch_root) as scratch:
                result_url = self._run(job, scratch)
        except JobFailure as e:
            error = e.message
        except Exception as e:
            logger.exception(f"[{self.TASK_NAME}] Unexpected error in {job_id}")
            error = f"{type(e).__name__}: {e}"

        if error is not None:
            return self._fail(job_id, error)
        return self._complete(job_id, result_url)

    def _run(self, job: QueuedJob, scratch: ScratchSpace) -> str:
        job_id = job.job_id

        # 1) Download audio and images
        self._enter_stage(ProcessingStage.DOWNLOADING, job_id)
        audio_path = self.fetcher.fetch(job.audio_url, scratch.file(f"audio{_suffix(job.audio_url)}"))

        inputs: List[Tuple[Path, float]] = []
        for index, image in enumerate(job.images):
            image_path = self.fetcher.fetch(image.url, scratch.file(f"img{index:04d}{_suffix(image.url)}"))
            inputs.append((image_path, clip_duration(image.start, image.end)))

        # 2) One 1080x1920 clip per image, in input order
        self._enter_stage(ProcessingStage.TRANSCODING_CLIPS, job_id, f"{len(inputs)} clip(s)")
        clips: List[Path] = []
        for index, (image_path, duration) in enumerate(inputs):
            clip = self.media.make_clip(image_path, duration, scratch.file(f"clip{index:04d}.mp4"))
            clips.append(clip)
            scratch.discard(image_path)
            logger.debug(f"[{self.TASK_NAME}] {job_id} clip {index} ({duration:g}s) -> {clip}")

        # 3) Concatenate and add audio; shortest stream wins
        self._enter_stage(ProcessingStage.MUXING, job_id)
        manifest = self.media.write_manifest(clips, scratch.file("concat.txt"))
        final_path = self.media.mux(manifest, audio_path, scratch.file("final.mp4"))
        duration = self.media.probe_duration(final_path)
        if duration is not None:
            logger.info(f"[{self.TASK_NAME}] {job_id} final video is {duration:.2f}s")

        # 4) Upload
        self._enter_stage(ProcessingStage.UPLOADING, job_id)
        return self.storage.put(final_path.read_bytes(), "video/mp4")

    def _complete(self, job_id: str, result_url: str) -> JobStatus:
        try:
            self.store.mark_completed(job_id, result_url)
        except StoreError as e:
            logger.error(f"[{self.TASK_NAME}] Could not record completion of {job_id}: {e}")
        self._log_complete(job_id, f"url={result_url}")
        return JobStatus.COMPLETED

    def _fail(self, job_id: str, error: str) -> JobStatus:
        self._log_error(job_id, error)
        try:
            self.store.mark_failed(job_id, error)
        except StoreError as e:
            logger.error(f"[{self.TASK_NAME}] Could not record failure of {job_id}: {e}")
        return JobStatus.FAILED


__all__ = ["VideoJobProcessor", "clip_duration", "MIN_CLIP_SECONDS", "DEFAULT_CLIP_SECONDS"]
