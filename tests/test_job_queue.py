"""Redis list queue: FIFO order, parsing and error mapping."""

import json

import pytest

from stitcher.core.exceptions import MalformedPayloadError, QueueError
from stitcher.schemas.job import ImageSpec, QueuedJob
from stitcher.services.job_queue import JobQueue


def make_job(job_id):
    return QueuedJob(
        job_id=job_id,
        audio_url="https://cdn.example.com/a.mp3",
        images=[ImageSpec(url="https://cdn.example.com/i.png", start=0, end=1)],
    )


def test_fifo_order(queue):
    for job_id in ("a", "b", "c"):
        queue.push(make_job(job_id))

    assert queue.length() == 3
    popped = [queue.parse(queue.pop()).job_id for _ in range(3)]
    assert popped == ["a", "b", "c"]
    assert queue.length() == 0


def test_pop_on_expired_wait_returns_none(queue):
    assert queue.pop(timeout=1) is None


def test_payload_round_trips_request_copy(queue):
    queue.push(make_job("a"))
    job = queue.parse(queue.pop())

    assert job.audio_url == "https://cdn.example.com/a.mp3"
    assert job.images[0].url == "https://cdn.example.com/i.png"
    assert job.images[0].start == 0
    assert job.images[0].end == 1


def test_parse_accepts_camel_case_payload():
    payload = json.dumps({
        "jobId": "legacy",
        "audioUrl": "https://cdn.example.com/a.mp3",
        "images": [{"url": "https://cdn.example.com/i.png", "start": 0, "end": 2}],
        "transitionSec": 0,
    })
    assert JobQueue.parse(payload).job_id == "legacy"


@pytest.mark.parametrize("payload", ["not json", "{}", json.dumps({"jobId": "x"}), "[]"])
def test_malformed_payload(payload, queue):
    with pytest.raises(MalformedPayloadError):
        queue.parse(payload)


def test_redis_outage_maps_to_queue_error(queue, redis_double):
    redis_double.down = True
    with pytest.raises(QueueError):
        queue.push(make_job("a"))
    with pytest.raises(QueueError):
        queue.pop()
    with pytest.raises(QueueError):
        queue.length()
