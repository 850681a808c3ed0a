"""
Jobs API Routes
Handles video job submission and status polling.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from stitcher.api.deps import get_admission_service, get_status_service
from stitcher.core.exceptions import NotFoundError, QueueError, StoreError, ValidationError
from stitcher.schemas.job import JobStatus, JobStatusResponse, JobSubmitResponse, VideoJobRequest
from stitcher.services.admission import JobAdmissionService
from stitcher.services.status import JobStatusService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=JobSubmitResponse, status_code=status.HTTP_202_ACCEPTED)
def create_job(
    request: VideoJobRequest,
    admission: JobAdmissionService = Depends(get_admission_service),
):
    """
    Submit a video assembly job.

    Returns immediately with the job id; poll the status route for the result.
    """
    try:
        job_id = admission.submit(request)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except (QueueError, StoreError) as e:
        logger.error(f"[Jobs API] Submission failed: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message)

    return JobSubmitResponse(job_id=job_id, status=JobStatus.PENDING)


@router.get("/{job_id}", response_model=JobStatusResponse, response_model_exclude_none=True)
def get_job_status(
    job_id: str,
    statuses: JobStatusService = Depends(get_status_service),
):
    """Get job status and result."""
    try:
        return statuses.get_status(job_id)
    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Job not found"
        )
    except StoreError as e:
        logger.error(f"[Jobs API] Status lookup failed for {job_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message)
