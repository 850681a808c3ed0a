"""
Shared fixtures: in-memory SQLite job store, an in-memory Redis list double,
and recording doubles for the fetcher, media pipeline and object store.
"""

from collections import deque
from pathlib import Path

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from stitcher.core.database import Base
from stitcher.core.exceptions import FetchError, StorageError, TranscodeError
from stitcher.models import VideoJob  # noqa: F401
from stitcher.services.admission import JobAdmissionService
from stitcher.services.job_queue import JobQueue
from stitcher.services.job_store import JobStore
from stitcher.services.media import MediaPipeline
from stitcher.services.status import JobStatusService
from stitcher.workers.processor import VideoJobProcessor


# =============================================================================
# Infrastructure doubles
# =============================================================================

class InMemoryRedis:
    """The subset of the Redis list API the job queue uses."""

    def __init__(self):
        self.lists = {}
        self.down = False

    def _check(self):
        if self.down:
            raise RedisConnectionError("Connection refused")

    def lpush(self, name, *values):
        self._check()
        items = self.lists.setdefault(name, deque())
        for value in values:
            items.appendleft(value)
        return len(items)

    def brpop(self, keys, timeout=0):
        self._check()
        for key in keys:
            items = self.lists.get(key)
            if items:
                return key, items.pop()
        # Nothing queued: behave like an expired wait instead of blocking
        return None

    def llen(self, name):
        self._check()
        return len(self.lists.get(name, ()))

    def ping(self):
        self._check()
        return True


class RecordingFetcher:
    """Writes a recognizable payload per source; fails for configured urls."""

    def __init__(self):
        self.calls = []
        self.failures = {}

    def fail(self, url, status_code=404, reason="Not Found"):
        self.failures[url] = (status_code, reason)

    def fetch(self, url, dest):
        self.calls.append(url)
        if url in self.failures:
            status_code, reason = self.failures[url]
            raise FetchError(url, reason, status_code=status_code)
        Path(dest).write_bytes(f"source:{url}".encode())
        return Path(dest)

    def close(self):
        pass


class RecordingMedia:
    """
    Fake pipeline whose outputs encode their inputs, so tests can read back
    clip order and durations from the final artifact.
    """

    def __init__(self):
        self.clips = []
        self.muxed = []
        self.fail_clip_index = None
        self.fail_mux = False
        self.scratch_seen = []

    def make_clip(self, image_path, duration, output_path):
        index = len(self.clips)
        self.scratch_seen.append(Path(output_path).parent)
        if self.fail_clip_index == index:
            raise TranscodeError(f"ffmpeg clip {Path(output_path).name} failed: invalid image data")
        source = Path(image_path).read_bytes().decode()
        self.clips.append((source, duration))
        Path(output_path).write_text(f"{source}|{duration}")
        return Path(output_path)

    write_manifest = staticmethod(MediaPipeline.write_manifest)

    def mux(self, manifest_path, audio_path, output_path):
        if self.fail_mux:
            raise TranscodeError("ffmpeg mux failed: Invalid data found when processing input")
        order = []
        for line in Path(manifest_path).read_text().splitlines():
            clip_path = line[len("file '"):-1]
            order.append(Path(clip_path).read_text())
        self.muxed.append(order)
        Path(output_path).write_text("\n".join(order))
        return Path(output_path)

    def probe_duration(self, path):
        return sum(float(entry.rsplit("|", 1)[1]) for entry in Path(path).read_text().splitlines())


class RecordingStorage:
    """Object store double returning deterministic public URLs."""

    def __init__(self):
        self.puts = []
        self.error = None

    def put(self, data, content_type, key=None):
        if self.error:
            raise StorageError(self.error)
        self.puts.append((data, content_type))
        return f"https://cdn.example.com/videos/{len(self.puts)}.mp4"


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def store(session_factory):
    return JobStore(session_factory)


@pytest.fixture
def redis_double():
    return InMemoryRedis()


@pytest.fixture
def queue(redis_double):
    return JobQueue(redis_double, "video-jobs-test")


@pytest.fixture
def admission(store, queue):
    return JobAdmissionService(store, queue)


@pytest.fixture
def statuses(store):
    return JobStatusService(store)


@pytest.fixture
def fetcher():
    return RecordingFetcher()


@pytest.fixture
def media():
    return RecordingMedia()


@pytest.fixture
def storage():
    return RecordingStorage()


@pytest.fixture
def scratch_root(tmp_path):
    root = tmp_path / "scratch"
    root.mkdir()
    return root


@pytest.fixture
def processor(store, fetcher, media, storage, scratch_root):
    return VideoJobProcessor(
        store=store,
        fetcher=fetcher,
        media=media,
        storage=storage,
        scratch_root=str(scratch_root),
    )


@pytest.fixture
def sample_request():
    return {
        "audioUrl": "https://cdn.example.com/audio/track.mp3",
        "images": [
            {"url": "https://cdn.example.com/images/one.png", "start": 0, "end": 2},
            {"url": "https://cdn.example.com/images/two.jpg", "start": 2, "end": 5},
        ],
    }
