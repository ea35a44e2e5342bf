"""
Image and video generation providers.

ImageProvider calls OpenAI's image API. VideoProvider runs a text-to-video
model on Replicate over its HTTP API; it returns None when no token is
configured, which callers treat as "render the local fallback".
"""
import logging
import time
from typing import Any, Dict, Optional

import requests
from openai import OpenAI

from .errors import ProviderError

logger = logging.getLogger(__name__)

REPLICATE_API_URL = "https://api.replicate.com/v1"
VIDEO_EXTENSIONS = (".mp4", ".webm", ".gif")
TERMINAL_STATUSES = {"succeeded", "failed", "canceled"}

# Safe default size; 48 frames at 16 fps is a 3 s clip where the model supports it.
VIDEO_INPUT_DEFAULTS = {
    "guidance_scale": 7.5,
    "num_frames": 48,
    "fps": 16,
    "width": 720,
    "height": 480,
}


class ImageProvider:
    def __init__(self, api_key: Optional[str] = None, model: str = "gpt-image-1",
                 size: str = "1024x1024", quality: str = "high", client: Optional[OpenAI] = None):
        self.api_key = api_key
        self.model = model
        self.size = size
        self.quality = quality
        self._client = client

    @property
    def available(self) -> bool:
        return bool(self.api_key or self._client)

    def _get_client(self) -> OpenAI:
        if self._client is None:
            self._client = OpenAI(api_key=self.api_key)
        return self._client

    def generate(self, prompt: str) -> str:
        """Returns a data: URI (or remote URL) for the generated image."""
        try:
            image = self._get_client().images.generate(
                model=self.model,
                prompt=prompt,
                size=self.size,
                quality=self.quality,
                n=1,
            )
        except Exception as e:
            logger.error("Image generation failed: %s", e)
            raise ProviderError(str(e) or "Image generation failed", provider="openai") from e

        data = image.data[0] if image.data else None
        if data is not None and getattr(data, "b64_json", None):
            return f"data:image/png;base64,{data.b64_json}"
        if data is not None and getattr(data, "url", None):
            return data.url
        raise ProviderError("No image from model", provider="openai")


def pick_video_url(output: Any) -> Optional[str]:
    """Many Replicate models return a list of URLs; prefer the first video file."""
    urls = output if isinstance(output, (list, tuple)) else [output]
    for u in urls:
        if isinstance(u, str) and u.endswith(VIDEO_EXTENSIONS):
            return u
    first = urls[0] if urls else None
    return first if isinstance(first, str) and first else None


class VideoProvider:
    def __init__(self, api_token: Optional[str] = None, model: str = "pika-labs/pika-1.4",
                 timeout_s: float = 300, poll_interval_s: float = 2.0,
                 session: Optional[requests.Session] = None, base_url: str = REPLICATE_API_URL):
        self.api_token = api_token
        self.model = model
        self.timeout_s = timeout_s
        self.poll_interval_s = poll_interval_s
        self.session = session or requests.Session()
        self.base_url = base_url.rstrip("/")

    @property
    def available(self) -> bool:
        return bool(self.api_token)

    def _headers(self, wait: bool = False) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.api_token}",
            "Content-Type": "application/json",
        }
        if wait:
            headers["Prefer"] = "wait"
        return headers

    def _request(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        try:
            response = self.session.request(method, url, timeout=60, **kwargs)
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as e:
            raise ProviderError(str(e) or "Video generation failed", provider="replicate") from e

    def _create_prediction(self, prompt: str) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"input": {"prompt": prompt, **VIDEO_INPUT_DEFAULTS}}
        if ":" in self.model:
            # owner/name:version pins a specific model version
            payload["version"] = self.model.split(":", 1)[1]
            url = f"{self.base_url}/predictions"
        else:
            url = f"{self.base_url}/models/{self.model}/predictions"
        return self._request("POST", url, headers=self._headers(wait=True), json=payload)

    def _wait(self, prediction: Dict[str, Any]) -> Dict[str, Any]:
        deadline = time.monotonic() + self.timeout_s
        while prediction.get("status") not in TERMINAL_STATUSES:
            if time.monotonic() >= deadline:
                raise ProviderError(f"Video generation timed out after {self.timeout_s}s", provider="replicate")
            get_url = (prediction.get("urls") or {}).get("get")
            if not get_url:
                raise ProviderError("Prediction has no status URL", provider="replicate")
            time.sleep(self.poll_interval_s)
            prediction = self._request("GET", get_url, headers=self._headers())
        return prediction

    def generate(self, prompt: str) -> Optional[str]:
        if not self.available:
            return None

        logger.info("Starting Replicate prediction with %s", self.model)
        prediction = self._wait(self._create_prediction(prompt))
        status = prediction.get("status")
        if status != "succeeded":
            raise ProviderError(prediction.get("error") or f"Video generation {status}", provider="replicate")
        return pick_video_url(prediction.get("output"))
