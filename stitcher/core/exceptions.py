"""
Error Taxonomy
Exceptions shared by the API layer, services and workers.

Job-scoped failures (JobFailure subclasses) terminate a single job and are
recorded on its record. Infrastructure failures (QueueError, StoreError)
surface to API callers as server errors.
"""

from typing import Optional


class StitcherError(Exception):
    """Base exception for all service errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(StitcherError):
    """Submitted job request is malformed. Raised before any side effect."""


class NotFoundError(StitcherError):
    """No job record exists for the requested id."""

    def __init__(self, job_id: str):
        super().__init__(f"Job not found: {job_id}", details={"job_id": job_id})
        self.job_id = job_id


class QueueError(StitcherError):
    """Job queue could not be reached or returned an error."""


class MalformedPayloadError(QueueError):
    """A dequeued payload could not be parsed into a job."""


class StoreError(StitcherError):
    """Job record store could not be reached or rejected a write."""


class JobFailure(StitcherError):
    """Failure scoped to a single job run; recorded as the job's error detail."""


class FetchError(JobFailure):
    """Downloading an audio or image source failed."""

    def __init__(self, url: str, reason: str, status_code: Optional[int] = None):
        if status_code is not None:
            message = f"Failed to download {url}: {status_code}"
        else:
            message = f"Failed to download {url}: {reason}"
        super().__init__(message, details={"url": url, "status_code": status_code, "reason": reason})
        self.url = url
        self.status_code = status_code


class TranscodeError(JobFailure):
    """Media pipeline failed to build a clip or mux the final video."""


class StorageError(JobFailure):
    """Object store rejected or could not accept an upload."""


__all__ = [
    "StitcherError",
    "ValidationError",
    "NotFoundError",
    "QueueError",
    "MalformedPayloadError",
    "StoreError",
    "JobFailure",
    "FetchError",
    "TranscodeError",
    "StorageError",
]
