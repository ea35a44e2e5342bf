"""
High-level orchestrator: improves the prompt, then asks the image or video
provider for media, substituting local fallbacks when a provider has nothing
to give.
"""
import logging
import mimetypes
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional
from urllib.parse import urlparse

from .capture import ClipSynthesizer
from .config import Settings
from .enhancer import PromptEnhancer
from .errors import InvalidRequest
from .media_store import MEDIA_EXTENSIONS, MediaStore
from .placeholder import placeholder_image
from .providers import ImageProvider, VideoProvider

logger = logging.getLogger(__name__)

MEDIA_KINDS = ("image", "video")
EXTENSION_MEDIA_TYPES = {ext: media_type for media_type, ext in MEDIA_EXTENSIONS.items()}


@dataclass
class GenerationResult:
    kind: str
    url: str
    media_type: str
    fallback: bool
    prompt: str
    media_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["type"] = data.pop("kind")
        return data


def guess_media_type(url: str, default: str) -> str:
    if url.startswith("data:"):
        return url[5:].split(",", 1)[0].split(";", 1)[0] or default
    path = urlparse(url).path
    ext = path.rsplit(".", 1)[-1].lower() if "." in path else ""
    if ext in EXTENSION_MEDIA_TYPES:
        return EXTENSION_MEDIA_TYPES[ext]
    guessed, _ = mimetypes.guess_type(path)
    return guessed or default


class MediaOrchestrator:
    def __init__(self, settings: Optional[Settings] = None,
                 enhancer: Optional[PromptEnhancer] = None,
                 image_provider: Optional[ImageProvider] = None,
                 video_provider: Optional[VideoProvider] = None,
                 media_store: Optional[MediaStore] = None,
                 synthesizer: Optional[ClipSynthesizer] = None):
        self.settings = settings or Settings()
        s = self.settings
        self.enhancer = enhancer or PromptEnhancer(s.gemini_api_key, model=s.gemini_model,
                                                   log_path=s.enhancement_log)
        self.image_provider = image_provider or ImageProvider(s.openai_api_key, model=s.openai_image_model)
        self.video_provider = video_provider or VideoProvider(s.replicate_api_token, model=s.replicate_video_model,
                                                              timeout_s=s.replicate_timeout_s)
        self.media_store = media_store or MediaStore(capacity=s.media_store_capacity)
        self.synthesizer = synthesizer or ClipSynthesizer()

    def improve(self, prompt: str) -> str:
        return self.enhancer.improve(prompt)

    def generate_image(self, prompt: str) -> GenerationResult:
        if self.image_provider.available:
            url = self.image_provider.generate(prompt)
            return GenerationResult("image", url, guess_media_type(url, "image/png"), False, prompt)

        blob = placeholder_image(prompt)
        return GenerationResult("image", blob.to_data_uri(), blob.media_type, True, prompt)

    def generate_video(self, prompt: str) -> GenerationResult:
        url = None
        try:
            url = self.video_provider.generate(prompt)
        except Exception as e:
            logger.warning("Video provider failed, rendering fallback clip: %s", e)
        else:
            if not url:
                logger.warning("Video provider returned no url, rendering fallback clip")
        if url:
            return GenerationResult("video", url, guess_media_type(url, "video/mp4"), False, prompt)

        s = self.settings
        blob = self.synthesizer.synthesize(prompt, s.fallback_duration_ms, s.fallback_width, s.fallback_height)
        media_id = self.media_store.add(blob)
        return GenerationResult("video", self.media_store.url_for(media_id), blob.media_type, True, prompt,
                                media_id=media_id)

    def generate(self, prompt: Optional[str], kind: str = "image", improve: bool = False) -> GenerationResult:
        if not prompt or not isinstance(prompt, str) or not prompt.strip():
            raise InvalidRequest("Missing prompt")
        if kind not in MEDIA_KINDS:
            raise InvalidRequest(f"Unknown media type: {kind}")

        if improve:
            prompt = self.improve(prompt) or prompt
        if kind == "image":
            return self.generate_image(prompt)
        return self.generate_video(prompt)
