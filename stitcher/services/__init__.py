# Services package - record store, queue, admission/status and external adapters
from stitcher.services.job_store import JobStore
from stitcher.services.job_queue import JobQueue
from stitcher.services.admission import JobAdmissionService
from stitcher.services.status import JobStatusService
from stitcher.services.fetcher import SourceFetcher
from stitcher.services.media import MediaPipeline
from stitcher.services.storage import StorageService

__all__ = [
    "JobStore",
    "JobQueue",
    "JobAdmissionService",
    "JobStatusService",
    "SourceFetcher",
    "MediaPipeline",
    "StorageService",
]
