"""
API Dependencies
Builds the services routes depend on. Tests replace these through
app.dependency_overrides.
"""

from functools import lru_cache

from fastapi import Depends

from stitcher.core.database import SessionLocal
from stitcher.core.redis import get_redis
from stitcher.services.admission import JobAdmissionService
from stitcher.services.job_queue import JobQueue
from stitcher.services.job_store import JobStore
from stitcher.services.status import JobStatusService
from stitcher.services.storage import StorageService


def get_job_store() -> JobStore:
    """Record store bound to the application session factory."""
    return JobStore(SessionLocal)


def get_job_queue() -> JobQueue:
    """Producer handle on the video job queue."""
    return JobQueue(get_redis())


def get_admission_service(
    store: JobStore = Depends(get_job_store),
    queue: JobQueue = Depends(get_job_queue),
) -> JobAdmissionService:
    return JobAdmissionService(store, queue)


def get_status_service(store: JobStore = Depends(get_job_store)) -> JobStatusService:
    return JobStatusService(store)


@lru_cache()
def get_storage_service() -> StorageService:
    """Shared object store client."""
    return StorageService()
