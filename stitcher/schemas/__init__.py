# Pydantic schemas package
from stitcher.schemas.job import (
    JobStatus,
    TERMINAL_STATUSES,
    ImageSpec,
    VideoJobRequest,
    QueuedJob,
    JobSubmitResponse,
    JobStatusResponse,
    UploadImageResponse,
)

__all__ = [
    "JobStatus", "TERMINAL_STATUSES",
    "ImageSpec", "VideoJobRequest", "QueuedJob",
    "JobSubmitResponse", "JobStatusResponse", "UploadImageResponse",
]
