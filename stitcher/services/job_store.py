"""
Job Record Store
Durable persistence of video job records, keyed by job id.

Status writes are conditional updates guarded on the current status, so a
record only moves forward (pending -> processing -> completed | failed) and
a terminal record is never written again.
"""

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from stitcher.core.database import SessionLocal
from stitcher.core.exceptions import StoreError
from stitcher.models.job import VideoJob
from stitcher.schemas.job import TERMINAL_STATUSES, JobStatus, VideoJobRequest

logger = logging.getLogger(__name__)

NON_TERMINAL = tuple(status for status in JobStatus if status not in TERMINAL_STATUSES)


class JobStore:
    """Access layer for VideoJob records."""

    def __init__(self, session_factory: sessionmaker = SessionLocal):
        self._session_factory = session_factory

    @contextmanager
    def _session(self, operation: str):
        db: Session = self._session_factory()
        try:
            yield db
        except IntegrityError:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"[JobStore] {operation} failed: {e}")
            raise StoreError(f"Job store {operation} failed: {e}") from e
        finally:
            db.close()

    def create(self, job_id: str, request: VideoJobRequest) -> VideoJob:
        """
        Insert a new pending job record.

        Args:
            job_id: Fresh unique job id
            request: Validated job request

        Returns:
            The persisted (detached) record

        Raises:
            StoreError: On duplicate id or database failure
        """
        now = datetime.utcnow()
        record = VideoJob(
            id=job_id,
            audio_url=request.audio_url,
            images=[image.model_dump() for image in request.images],
            transition_seconds=float(request.transition_seconds or 0.0),
            status=JobStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        try:
            with self._session("create") as db:
                db.add(record)
                db.commit()
                db.refresh(record)
                db.expunge(record)
        except IntegrityError as e:
            raise StoreError(f"Job already exists: {job_id}", details={"job_id": job_id}) from e
        return record

    def get(self, job_id: str) -> Optional[VideoJob]:
        """Fetch a job record by id, or None."""
        with self._session("read") as db:
            record = db.query(VideoJob).filter(VideoJob.id == job_id).first()
            if record is not None:
                db.expunge(record)
            return record

    def mark_processing(self, job_id: str) -> bool:
        """Move a pending job to processing."""
        return self._transition(job_id, JobStatus.PROCESSING, (JobStatus.PENDING,))

    def mark_completed(self, job_id: str, result_url: str) -> bool:
        """Record a successful run with its artifact URL."""
        return self._transition(
            job_id,
            JobStatus.COMPLETED,
            NON_TERMINAL,
            result_url=result_url,
            error_message=None,
        )

    def mark_failed(self, job_id: str, detail: str) -> bool:
        """Record a failed run with a human-readable cause."""
        return self._transition(
            job_id,
            JobStatus.FAILED,
            NON_TERMINAL,
            error_message=detail or "Unknown error",
            result_url=None,
        )

    def _transition(
        self,
        job_id: str,
        target: JobStatus,
        allowed_from: Iterable[JobStatus],
        **values,
    ) -> bool:
        """
        Conditionally update status.

        Returns:
            True if the record moved to target, False if it was missing or
            not in one of the allowed source statuses
        """
        allowed = [status.value for status in allowed_from]
        with self._session(f"transition to {target.value}") as db:
            updated = (
                db.query(VideoJob)
                .filter(VideoJob.id == job_id, VideoJob.status.in_(allowed))
                .update(
                    {
                        VideoJob.status: target.value,
                        VideoJob.updated_at: datetime.utcnow(),
                        **{getattr(VideoJob, key): value for key, value in values.items()},
                    },
                    synchronize_session=False,
                )
            )
            db.commit()

        if not updated:
            logger.warning(
                f"[JobStore] Ignored transition of {job_id} to {target.value}: "
                f"record missing or not in {allowed}"
            )
        return bool(updated)

    def ping(self) -> None:
        """Round-trip the database; raises StoreError if unreachable."""
        with self._session("ping") as db:
            db.execute(text("SELECT 1"))


__all__ = ["JobStore"]
