"""Job admission and status lookups."""

from datetime import datetime

import pytest

from stitcher.core.exceptions import NotFoundError, QueueError, ValidationError
from stitcher.schemas.job import JobStatus, JobStatusResponse, JobSubmitResponse, VideoJobRequest


def request_from(payload):
    return VideoJobRequest.model_validate(payload)


def test_submit_reports_pending_immediately(admission, statuses, sample_request):
    job_id = admission.submit(request_from(sample_request))

    status = statuses.get_status(job_id)
    assert status.job_id == job_id
    assert status.status == JobStatus.PENDING
    assert status.result_url is None
    assert status.error_detail is None


def test_submit_enqueues_denormalized_payload(admission, queue, sample_request):
    job_id = admission.submit(request_from(sample_request))

    job = queue.parse(queue.pop())
    assert job.job_id == job_id
    assert job.audio_url == sample_request["audioUrl"]
    assert [image.url for image in job.images] == [image["url"] for image in sample_request["images"]]


def test_resubmission_creates_independent_job(admission, statuses, queue, sample_request):
    first = admission.submit(request_from(sample_request))
    second = admission.submit(request_from(sample_request))

    assert first != second
    assert statuses.get_status(first).status == JobStatus.PENDING
    assert statuses.get_status(second).status == JobStatus.PENDING
    assert queue.length() == 2


def test_unknown_job_is_not_found(statuses):
    with pytest.raises(NotFoundError):
        statuses.get_status("never-submitted")


@pytest.mark.parametrize("payload", [
    {"images": [{"url": "https://x/1.png", "start": 0, "end": 1}]},
    {"audioUrl": "", "images": [{"url": "https://x/1.png", "start": 0, "end": 1}]},
    {"audioUrl": "https://x/a.mp3"},
    {"audioUrl": "https://x/a.mp3", "images": []},
    {"audioUrl": "https://x/a.mp3", "images": [{"start": 0, "end": 1}]},
    {"audioUrl": "https://x/a.mp3", "images": [{"url": "https://x/1.png", "start": 0}]},
    {"audioUrl": "https://x/a.mp3", "images": [{"url": "https://x/1.png", "start": 0, "end": 1}],
     "transitionSec": -1},
])
def test_invalid_requests_have_no_side_effects(admission, store, queue, payload):
    ids = iter(["job-under-test"])
    admission._id_factory = lambda: next(ids)

    with pytest.raises(ValidationError):
        admission.submit(request_from(payload))

    assert store.get("job-under-test") is None
    assert queue.length() == 0


def test_alternate_field_names_are_accepted(admission, queue):
    job_id = admission.submit(request_from({
        "audioSource": "https://x/a.mp3",
        "images": [{"source": "https://x/1.png", "start": 0, "end": 1}],
        "transitionSeconds": 0.5,
    }))

    job = queue.parse(queue.pop())
    assert job.job_id == job_id
    assert job.images[0].url == "https://x/1.png"
    assert job.transition_seconds == 0.5


def test_enqueue_failure_leaves_record_pending(admission, statuses, redis_double, sample_request):
    admission._id_factory = lambda: "stranded"
    redis_double.down = True

    with pytest.raises(QueueError):
        admission.submit(request_from(sample_request))

    assert statuses.get_status("stranded").status == JobStatus.PENDING


@pytest.mark.parametrize("payload", [
    {"audioUrl": "/etc/hostname", "images": [{"url": "https://x/1.png", "start": 0, "end": 1}]},
    {"audioUrl": "https://x/a.mp3", "images": [{"url": "file:///etc/passwd", "start": 0, "end": 1}]},
    {"audioUrl": "https://x/a.mp3", "images": [{"url": "../secrets.png", "start": 0, "end": 1}]},
])
def test_only_http_sources_are_admitted(admission, store, queue, payload):
    admission._id_factory = lambda: "local-source"

    with pytest.raises(ValidationError, match="http"):
        admission.submit(request_from(payload))

    assert store.get("local-source") is None
    assert queue.length() == 0


def test_projections_build_by_field_name_and_serialize_camel_case():
    now = datetime(2024, 1, 1, 12, 0, 0)
    status = JobStatusResponse(job_id="abc", status=JobStatus.COMPLETED, result_url="https://x/v.mp4",
                               created_at=now, updated_at=now)

    body = status.model_dump(by_alias=True, exclude_none=True)
    assert body["jobId"] == "abc"
    assert body["resultUrl"] == "https://x/v.mp4"
    assert "errorDetail" not in body
    assert JobSubmitResponse(job_id="abc", status=JobStatus.PENDING).model_dump(by_alias=True)["jobId"] == "abc"
