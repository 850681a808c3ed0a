"""
Status Query Service
Read-only job lookups for polling clients.
"""

from stitcher.core.exceptions import NotFoundError
from stitcher.schemas.job import JobStatus, JobStatusResponse
from stitcher.services.job_store import JobStore


class JobStatusService:
    """Projects job records for status polling."""

    def __init__(self, store: JobStore):
        self.store = store

    def get_status(self, job_id: str) -> JobStatusResponse:
        """
        Look up a job.

        Raises:
            NotFoundError: If no record exists for job_id
        """
        record = self.store.get(job_id)
        if record is None:
            raise NotFoundError(job_id)

        status = JobStatus(record.status)
        return JobStatusResponse(
            job_id=record.id,
            status=status,
            result_url=record.result_url if status == JobStatus.COMPLETED else None,
            error_detail=record.error_message if status == JobStatus.FAILED else None,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


__all__ = ["JobStatusService"]
