"""
Job Schemas
Pydantic models for job submission, status projection and the queue payload.

Request keys accept both snake_case and the camelCase names used by
existing clients (audioUrl, images[].url, transitionSec).
"""

from datetime import datetime
from typing import Any, List, Optional
from enum import Enum
from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class JobStatus(str, Enum):
    """Persisted job status."""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATUSES = frozenset({JobStatus.COMPLETED, JobStatus.FAILED})


class ImageSpec(BaseModel):
    """One timed image in the requested slideshow."""
    url: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("url", "source"),
        description="Image source reference (http(s) or file URL)",
    )
    # Offsets stay loosely typed; unusable values fall back to a default duration
    start: Any = Field(None, description="Start offset in seconds")
    end: Any = Field(None, description="End offset in seconds")


class VideoJobRequest(BaseModel):
    """Schema for a video assembly request."""
    audio_url: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("audio_url", "audioUrl", "audioSource"),
        description="Audio track source reference",
    )
    images: Optional[List[ImageSpec]] = Field(None, description="Ordered timed images")
    transition_seconds: Optional[float] = Field(
        0.0,
        validation_alias=AliasChoices("transition_seconds", "transitionSec", "transitionSeconds"),
        description="Transition duration between clips (stored, not rendered)",
    )


class QueuedJob(BaseModel):
    """Payload carried on the job queue: the job id plus a copy of the request."""
    job_id: str = Field(..., validation_alias=AliasChoices("job_id", "jobId"))
    audio_url: str = Field(..., validation_alias=AliasChoices("audio_url", "audioUrl"))
    images: List[ImageSpec]
    transition_seconds: float = Field(
        0.0, validation_alias=AliasChoices("transition_seconds", "transitionSec")
    )


class JobSubmitResponse(BaseModel):
    """Schema for job submission response."""
    job_id: str = Field(..., alias="jobId")
    status: JobStatus
    message: str = "Video creation job submitted successfully"

    model_config = ConfigDict(populate_by_name=True)


class JobStatusResponse(BaseModel):
    """Schema for job status lookups."""
    job_id: str = Field(..., alias="jobId")
    status: JobStatus
    result_url: Optional[str] = Field(None, alias="resultUrl")
    error_detail: Optional[str] = Field(None, alias="errorDetail")
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")

    model_config = ConfigDict(populate_by_name=True)


class UploadImageResponse(BaseModel):
    """Schema for the image upload pass-through."""
    url: str
