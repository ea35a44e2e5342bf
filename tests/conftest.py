import pytest

from agentic_media.config import Settings
from agentic_media.media_store import MediaBlob

PROVIDER_ENV = (
    "GEMINI_API_KEY",
    "OPENAI_API_KEY",
    "REPLICATE_API_TOKEN",
    "ENHANCEMENT_LOG",
)


class FakeSynthesizer:
    def __init__(self, data=b"\x1a\x45\xdf\xa3fake-webm", error=None):
        self.data = data
        self.error = error
        self.calls = []

    def synthesize(self, text, duration_ms=3000, width=720, height=480):
        self.calls.append((text, duration_ms, width, height))
        if self.error:
            raise self.error
        return MediaBlob(self.data, "video/webm")


class FakeVideoProvider:
    def __init__(self, url=None, error=None):
        self.url = url
        self.error = error
        self.prompts = []

    @property
    def available(self):
        return True

    def generate(self, prompt):
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return self.url


@pytest.fixture(autouse=True)
def no_provider_keys(monkeypatch):
    for name in PROVIDER_ENV:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def char_measure():
    # every character is 10px wide
    return lambda s: 10 * len(s)


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def synthesizer():
    return FakeSynthesizer()
