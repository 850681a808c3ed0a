"""Source downloads over HTTP."""

import httpx
import pytest

from stitcher.core.exceptions import FetchError
from stitcher.services.fetcher import CHUNK_SIZE, SourceFetcher


def fetcher_for(handler):
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return SourceFetcher(timeout=5, client=client)


def test_http_download(tmp_path):
    fetcher = fetcher_for(lambda request: httpx.Response(200, content=b"\x89PNG data"))
    dest = fetcher.fetch("https://cdn.example.com/one.png", tmp_path / "one.png")

    assert dest.read_bytes() == b"\x89PNG data"


def test_http_error_names_url_and_status(tmp_path):
    fetcher = fetcher_for(lambda request: httpx.Response(404))

    with pytest.raises(FetchError) as excinfo:
        fetcher.fetch("https://cdn.example.com/missing.png", tmp_path / "x.png")

    assert excinfo.value.status_code == 404
    assert str(excinfo.value) == "Failed to download https://cdn.example.com/missing.png: 404"
    assert not (tmp_path / "x.png").exists()


def test_transport_error_names_url(tmp_path):
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(FetchError, match="https://cdn.example.com/a.mp3"):
        fetcher_for(refuse).fetch("https://cdn.example.com/a.mp3", tmp_path / "a.mp3")


def test_timeout_is_a_fetch_error(tmp_path):
    def slow(request):
        raise httpx.ReadTimeout("read timed out", request=request)

    with pytest.raises(FetchError, match="timed out"):
        fetcher_for(slow).fetch("https://cdn.example.com/a.mp3", tmp_path / "a.mp3")


@pytest.mark.parametrize("source", [
    "/etc/passwd",
    "file:///etc/passwd",
    "ftp://cdn.example.com/a.mp3",
    "https:///no-host.png",
])
def test_non_http_sources_are_refused(tmp_path, source):
    fetcher = SourceFetcher(timeout=5)

    with pytest.raises(FetchError, match="only http"):
        fetcher.fetch(source, tmp_path / "a.bin")

    assert not (tmp_path / "a.bin").exists()


def test_slow_body_hits_the_overall_deadline(tmp_path):
    # Each chunk arrives inside the per-read timeout but the total does not
    ticks = iter(range(0, 100, 2))

    def trickle(request):
        return httpx.Response(200, content=iter([b"x" * CHUNK_SIZE] * 10))

    fetcher = SourceFetcher(
        timeout=5,
        client=httpx.Client(transport=httpx.MockTransport(trickle)),
        clock=lambda: next(ticks),
    )

    with pytest.raises(FetchError, match="timed out after 5s"):
        fetcher.fetch("https://slow.example.com/a.mp3", tmp_path / "a.mp3")

    assert not (tmp_path / "a.mp3").exists()


def test_streamed_body_over_the_size_cap(tmp_path):
    client = httpx.Client(transport=httpx.MockTransport(
        lambda request: httpx.Response(200, content=iter([b"x" * CHUNK_SIZE] * 3))
    ))
    fetcher = SourceFetcher(timeout=5, client=client, max_bytes=2 * CHUNK_SIZE)

    with pytest.raises(FetchError, match="exceeds"):
        fetcher.fetch("https://cdn.example.com/huge.png", tmp_path / "huge.png")

    assert not (tmp_path / "huge.png").exists()


def test_declared_length_over_the_size_cap(tmp_path):
    fetcher = fetcher_for(lambda request: httpx.Response(200, content=b"x" * 64))
    fetcher.max_bytes = 16

    with pytest.raises(FetchError, match="exceeds 16 bytes"):
        fetcher.fetch("https://cdn.example.com/big.png", tmp_path / "big.png")
