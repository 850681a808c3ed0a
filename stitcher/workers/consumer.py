"""
Video Job Worker
Consumption loop: block on the queue, process one job, repeat.
"""

import logging
import threading
from typing import Optional

from stitcher.core.config import settings
from stitcher.services.job_queue import JobQueue
from stitcher.workers.processor import VideoJobProcessor

logger = logging.getLogger(__name__)


class VideoJobWorker:
    """
    Sequential consumer of the video job queue.

    One job at a time per instance; run several instances (processes) to
    process jobs concurrently. Errors in the loop itself (bad payloads,
    queue or store outages) are logged, the payload is dropped, and the
    loop pauses before resuming.

    stop() is only observed between iterations: a payload that has been
    popped is always driven to a terminal state first. With pop_timeout 0
    an idle worker waits until the next job arrives; give a positive
    timeout to make an idle worker notice stop() within that many seconds.
    """

    def __init__(
        self,
        queue: JobQueue,
        processor: VideoJobProcessor,
        error_backoff: Optional[float] = None,
        pop_timeout: float = 0,
    ):
        self.queue = queue
        self.processor = processor
        self.error_backoff = settings.WORKER_ERROR_BACKOFF if error_backoff is None else error_backoff
        self.pop_timeout = pop_timeout
        self._stop = threading.Event()

    def stop(self) -> None:
        """Ask the loop to exit after the current iteration."""
        self._stop.set()

    @property
    def stopping(self) -> bool:
        return self._stop.is_set()

    def run(self, max_jobs: Optional[int] = None) -> int:
        """
        Consume jobs until stopped.

        Args:
            max_jobs: Return after this many payloads have been taken off
                the queue; None runs until stop()

        Returns:
            Number of payloads taken off the queue
        """
        handled = 0
        logger.info(f"[Worker] Started on '{self.queue.name}', waiting for jobs...")

        while not self._stop.is_set():
            try:
                payload = self.queue.pop(timeout=self.pop_timeout)
                if payload is None:
                    continue

                handled += 1
                job = self.queue.parse(payload)
                self.processor.process(job)
            except Exception as e:
                logger.error(f"[Worker] Error in worker loop: {e}")
                self._stop.wait(self.error_backoff)

            if max_jobs is not None and handled >= max_jobs:
                break

        logger.info(f"[Worker] Stopped after {handled} job(s)")
        return handled


__all__ = ["VideoJobWorker"]
