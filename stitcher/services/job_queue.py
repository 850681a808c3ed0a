"""
Job Queue
FIFO channel of QueuedJob payloads on a Redis list.

Producers LPUSH, consumers BRPOP, so the oldest payload is delivered first.
A popped payload is removed from Redis; there is no re-delivery.
"""

import json
import logging
from typing import Optional

from pydantic import ValidationError as PydanticValidationError
from redis import Redis
from redis.exceptions import RedisError

from stitcher.core.config import settings
from stitcher.core.exceptions import MalformedPayloadError, QueueError
from stitcher.schemas.job import QueuedJob

logger = logging.getLogger(__name__)


class JobQueue:
    """Blocking FIFO queue of video jobs."""

    def __init__(self, redis_client: Redis, name: Optional[str] = None):
        self.redis = redis_client
        self.name = name or settings.VIDEO_QUEUE_NAME

    def push(self, job: QueuedJob) -> None:
        """
        Enqueue a job payload.

        Raises:
            QueueError: If Redis rejects the write
        """
        payload = job.model_dump_json()
        try:
            self.redis.lpush(self.name, payload)
        except RedisError as e:
            raise QueueError(f"Failed to enqueue job {job.job_id}: {e}", details={"job_id": job.job_id}) from e
        logger.info(f"[Queue] Enqueued job {job.job_id} on '{self.name}'")

    def pop(self, timeout: float = 0) -> Optional[str]:
        """
        Block until a payload is available.

        Args:
            timeout: Seconds to wait; 0 waits indefinitely

        Returns:
            Raw payload string, or None if the wait timed out
        """
        try:
            result = self.redis.brpop([self.name], timeout=timeout)
        except RedisError as e:
            raise QueueError(f"Failed to pop from '{self.name}': {e}") from e

        if not result:
            return None
        _, payload = result
        if isinstance(payload, bytes):
            payload = payload.decode("utf-8")
        return payload

    @staticmethod
    def parse(payload: str) -> QueuedJob:
        """
        Decode a raw payload.

        Raises:
            MalformedPayloadError: If the payload is not a valid job
        """
        try:
            return QueuedJob.model_validate(json.loads(payload))
        except (ValueError, TypeError, PydanticValidationError) as e:
            raise MalformedPayloadError(
                f"Malformed job payload: {e}", details={"payload": str(payload)[:500]}
            ) from e

    def length(self) -> int:
        """Number of payloads waiting."""
        try:
            return int(self.redis.llen(self.name))
        except RedisError as e:
            raise QueueError(f"Failed to read length of '{self.name}': {e}") from e


__all__ = ["JobQueue"]
