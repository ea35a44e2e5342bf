from types import SimpleNamespace

import pytest
import requests

from agentic_media.errors import ProviderError
from agentic_media.providers import ImageProvider, VideoProvider, pick_video_url


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Client Error")

    def json(self):
        return self.payload


class FakeSession:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def request(self, method, url, **kwargs):
        self.requests.append((method, url, kwargs))
        resp = self.responses.pop(0)
        if isinstance(resp, Exception):
            raise resp
        return resp


def test_pick_video_url():
    assert pick_video_url(["https://x/a.png", "https://x/b.mp4"]) == "https://x/b.mp4"
    assert pick_video_url("https://x/clip.webm") == "https://x/clip.webm"
    assert pick_video_url(["https://x/first", "https://x/second"]) == "https://x/first"
    assert pick_video_url([]) is None
    assert pick_video_url(None) is None


def test_video_without_token_signals_fallback():
    session = FakeSession()
    assert VideoProvider(api_token=None, session=session).generate("a cat") is None
    assert session.requests == []


def test_video_prediction_with_wait():
    session = FakeSession(FakeResponse({"status": "succeeded", "output": ["https://r/out.gif", "https://r/out.mp4"]}))
    provider = VideoProvider(api_token="r8_token", session=session)

    assert provider.generate("a cat") == "https://r/out.gif"
    method, url, kwargs = session.requests[0]
    assert method == "POST"
    assert url == "https://api.replicate.com/v1/models/pika-labs/pika-1.4/predictions"
    assert kwargs["headers"]["Authorization"] == "Bearer r8_token"
    assert kwargs["headers"]["Prefer"] == "wait"
    assert kwargs["json"]["input"]["prompt"] == "a cat"
    assert kwargs["json"]["input"]["num_frames"] == 48


def test_video_pinned_version():
    session = FakeSession(FakeResponse({"status": "succeeded", "output": "https://r/out.mp4"}))
    VideoProvider(api_token="t", model="owner/model:abc123", session=session).generate("a cat")
    _, url, kwargs = session.requests[0]
    assert url == "https://api.replicate.com/v1/predictions"
    assert kwargs["json"]["version"] == "abc123"


def test_video_polls_until_done():
    session = FakeSession(
        FakeResponse({"status": "starting", "urls": {"get": "https://api.replicate.com/v1/predictions/p1"}}),
        FakeResponse({"status": "processing", "urls": {"get": "https://api.replicate.com/v1/predictions/p1"}}),
        FakeResponse({"status": "succeeded", "output": ["https://r/out.mp4"]}),
    )
    provider = VideoProvider(api_token="t", session=session, poll_interval_s=0)

    assert provider.generate("a cat") == "https://r/out.mp4"
    assert [m for m, _, _ in session.requests] == ["POST", "GET", "GET"]
    assert "Prefer" not in session.requests[1][2]["headers"]


def test_video_failed_prediction():
    session = FakeSession(FakeResponse({"status": "failed", "error": "NSFW content detected"}))
    with pytest.raises(ProviderError, match="NSFW"):
        VideoProvider(api_token="t", session=session).generate("a cat")


def test_video_times_out():
    session = FakeSession(FakeResponse({"status": "starting", "urls": {"get": "https://r/p1"}}))
    provider = VideoProvider(api_token="t", session=session, timeout_s=0)
    with pytest.raises(ProviderError, match="timed out"):
        provider.generate("a cat")


@pytest.mark.parametrize("failure", [
    FakeResponse({"detail": "Unauthenticated"}, status_code=401),
    requests.ConnectionError("connection refused"),
])
def test_video_http_errors(failure):
    with pytest.raises(ProviderError):
        VideoProvider(api_token="t", session=FakeSession(failure)).generate("a cat")


class FakeImages:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.kwargs = None

    def generate(self, **kwargs):
        self.kwargs = kwargs
        if self.error:
            raise self.error
        return self.response


def fake_client(**kwargs):
    return SimpleNamespace(images=FakeImages(**kwargs))


def test_image_base64():
    client = fake_client(response=SimpleNamespace(data=[SimpleNamespace(b64_json="iVBORw0KGgo=", url=None)]))
    provider = ImageProvider(client=client)
    assert provider.available
    assert provider.generate("a cat") == "data:image/png;base64,iVBORw0KGgo="
    assert client.images.kwargs == {
        "model": "gpt-image-1", "prompt": "a cat", "size": "1024x1024", "quality": "high", "n": 1,
    }


def test_image_url():
    client = fake_client(response=SimpleNamespace(data=[SimpleNamespace(b64_json=None, url="https://o/img.png")]))
    assert ImageProvider(client=client).generate("a cat") == "https://o/img.png"


def test_image_empty_response():
    client = fake_client(response=SimpleNamespace(data=[]))
    with pytest.raises(ProviderError, match="No image from model"):
        ImageProvider(client=client).generate("a cat")


def test_image_api_error():
    client = fake_client(error=RuntimeError("billing hard limit reached"))
    with pytest.raises(ProviderError, match="billing"):
        ImageProvider(client=client).generate("a cat")


def test_image_without_key():
    assert not ImageProvider(api_key=None).available
