import pytest

from agentic_media.errors import CaptureError, InvalidRequest, ProviderError
from agentic_media.media_store import MediaStore
from agentic_media.orchestrator import MediaOrchestrator, guess_media_type
from agentic_media.providers import ImageProvider, VideoProvider

from conftest import FakeSynthesizer, FakeVideoProvider

PROMPT = "a serene sunrise over a futuristic city skyline"


class FakeImageProvider:
    available = True

    def generate(self, prompt):
        return "data:image/png;base64,iVBORw0KGgo="


def make_orchestrator(settings, **kwargs):
    kwargs.setdefault("synthesizer", FakeSynthesizer())
    kwargs.setdefault("media_store", MediaStore(capacity=4))
    return MediaOrchestrator(settings, **kwargs)


def test_defaults_follow_settings(settings):
    orch = MediaOrchestrator(settings)
    assert isinstance(orch.image_provider, ImageProvider)
    assert isinstance(orch.video_provider, VideoProvider)
    assert not orch.image_provider.available
    assert not orch.video_provider.available
    assert not orch.enhancer.available
    assert orch.media_store.capacity == settings.media_store_capacity


@pytest.mark.parametrize("provider", [
    FakeVideoProvider(url=None),
    FakeVideoProvider(error=ProviderError("quota exceeded")),
    FakeVideoProvider(error=ConnectionError("network down")),
])
def test_video_falls_back_to_local_clip(settings, provider):
    synth = FakeSynthesizer()
    orch = make_orchestrator(settings, video_provider=provider, synthesizer=synth)

    result = orch.generate_video(PROMPT)

    assert provider.prompts == [PROMPT]
    assert synth.calls == [(PROMPT, 3000, 720, 480)]
    assert result.fallback is True
    assert result.kind == "video"
    assert result.media_type == "video/webm"
    assert result.url == f"/media/{result.media_id}"
    assert orch.media_store.get(result.media_id).data == synth.data


def test_video_from_provider(settings, synthesizer):
    provider = FakeVideoProvider(url="https://replicate.delivery/out/clip.mp4")
    orch = make_orchestrator(settings, video_provider=provider, synthesizer=synthesizer)

    result = orch.generate_video(PROMPT)

    assert synthesizer.calls == []
    assert result.fallback is False
    assert result.url == "https://replicate.delivery/out/clip.mp4"
    assert result.media_type == "video/mp4"
    assert result.media_id is None


def test_fallback_failure_surfaces(settings):
    orch = make_orchestrator(settings, video_provider=FakeVideoProvider(url=None),
                             synthesizer=FakeSynthesizer(error=CaptureError("encoder died")))
    with pytest.raises(CaptureError):
        orch.generate_video(PROMPT)
    assert len(orch.media_store) == 0


def test_image_placeholder_without_key(settings):
    result = make_orchestrator(settings).generate_image(PROMPT)
    assert result.fallback is True
    assert result.media_type == "image/png"
    assert result.url.startswith("data:image/png;base64,")


def test_image_from_provider(settings):
    result = make_orchestrator(settings, image_provider=FakeImageProvider()).generate_image(PROMPT)
    assert result.fallback is False
    assert result.media_type == "image/png"


def test_generate_improves_first(settings, synthesizer):
    orch = make_orchestrator(settings, video_provider=FakeVideoProvider(url=None), synthesizer=synthesizer)
    result = orch.generate("pixel art cat", kind="video", improve=True)
    assert result.prompt.startswith("pixel art cat, stylized")
    assert synthesizer.calls[0][0] == result.prompt


@pytest.mark.parametrize("prompt", [None, "", "   ", 42])
def test_generate_requires_prompt(settings, prompt):
    with pytest.raises(InvalidRequest, match="Missing prompt"):
        make_orchestrator(settings).generate(prompt)


def test_generate_rejects_unknown_kind(settings):
    with pytest.raises(InvalidRequest):
        make_orchestrator(settings).generate(PROMPT, kind="audio")


def test_result_dict_uses_type_key(settings):
    data = make_orchestrator(settings).generate(PROMPT).to_dict()
    assert data["type"] == "image"
    assert "kind" not in data


def test_guess_media_type():
    assert guess_media_type("data:image/png;base64,xx", "x") == "image/png"
    assert guess_media_type("https://a.b/c.webm?sig=1", "video/mp4") == "video/webm"
    assert guess_media_type("https://a.b/c.gif", "video/mp4") == "image/gif"
    assert guess_media_type("https://a.b/output", "video/mp4") == "video/mp4"
