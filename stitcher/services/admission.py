"""
Job Admission Service
Validates new job requests, records them as pending and enqueues them.
"""

import logging
import math
import uuid
from typing import Callable, Optional

from stitcher.core.exceptions import QueueError, ValidationError
from stitcher.schemas.job import QueuedJob, VideoJobRequest
from stitcher.services.fetcher import is_remote_source
from stitcher.services.job_queue import JobQueue
from stitcher.services.job_store import JobStore

logger = logging.getLogger(__name__)


def _new_job_id() -> str:
    return str(uuid.uuid4())


class JobAdmissionService:
    """Accepts video jobs: record first, then enqueue."""

    def __init__(
        self,
        store: JobStore,
        queue: JobQueue,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        self.store = store
        self.queue = queue
        self._id_factory = id_factory or _new_job_id

    @staticmethod
    def validate(request: VideoJobRequest) -> None:
        """
        Check the request shape.

        Raises:
            ValidationError: If the audio source or images are missing or malformed
        """
        if not request.audio_url or not request.audio_url.strip():
            raise ValidationError("Missing audioUrl or images", details={"field": "audioUrl"})
        if not request.images:
            raise ValidationError("Missing audioUrl or images", details={"field": "images"})

        if not is_remote_source(request.audio_url):
            raise ValidationError("audioUrl must be an http(s) URL", details={"field": "audioUrl"})

        for index, image in enumerate(request.images):
            if not image.url or not image.url.strip():
                raise ValidationError(
                    f"Image {index} is missing its source url",
                    details={"field": f"images[{index}].url"},
                )
            if not is_remote_source(image.url):
                raise ValidationError(
                    f"Image {index} url must be an http(s) URL",
                    details={"field": f"images[{index}].url"},
                )
            if image.start is None or image.end is None:
                raise ValidationError(
                    f"Image {index} needs both start and end offsets",
                    details={"field": f"images[{index}]"},
                )

        transition = request.transition_seconds
        if transition is not None and (not math.isfinite(transition) or transition < 0):
            raise ValidationError(
                "transitionSec must be a non-negative number",
                details={"field": "transitionSec"},
            )

    def submit(self, request: VideoJobRequest) -> str:
        """
        Admit a job.

        Args:
            request: The job request

        Returns:
            The new job id

        Raises:
            ValidationError: Before any side effect, for a bad request
            StoreError: If the record could not be written
            QueueError: If the record was written but the enqueue failed;
                the job then stays pending
        """
        self.validate(request)

        job_id = self._id_factory()
        self.store.create(job_id, request)

        queued = QueuedJob(
            job_id=job_id,
            audio_url=request.audio_url,
            images=request.images,
            transition_seconds=float(request.transition_seconds or 0.0),
        )
        try:
            self.queue.push(queued)
        except QueueError:
            logger.error(f"[Admission] Job {job_id} recorded but not enqueued; it will stay pending")
            raise

        logger.info(f"[Admission] Accepted job {job_id} with {len(request.images)} image(s)")
        return job_id


__all__ = ["JobAdmissionService"]
