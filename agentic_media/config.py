"""
Runtime settings.

Values come from the process environment (and a .env file, if one is found),
are read once into a Settings object and then passed to the components that
need them. Nothing else in the package reads os.environ.
"""
import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv, find_dotenv

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


@dataclass(frozen=True)
class Settings:
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.0-flash"
    openai_api_key: Optional[str] = None
    openai_image_model: str = "gpt-image-1"
    replicate_api_token: Optional[str] = None
    # Pika text-to-video model on Replicate; the alias may change over time.
    replicate_video_model: str = "pika-labs/pika-1.4"
    replicate_timeout_s: int = 300
    fallback_duration_ms: int = 3000
    fallback_width: int = 720
    fallback_height: int = 480
    media_store_capacity: int = 32
    enhancement_log: Optional[str] = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        env_path = find_dotenv(usecwd=True)
        if env_path:
            load_dotenv(env_path)

        return cls(
            gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
            gemini_model=os.getenv("GEMINI_MODEL", cls.gemini_model),
            openai_api_key=os.getenv("OPENAI_API_KEY") or None,
            openai_image_model=os.getenv("OPENAI_IMAGE_MODEL", cls.openai_image_model),
            replicate_api_token=os.getenv("REPLICATE_API_TOKEN") or None,
            replicate_video_model=os.getenv("REPLICATE_VIDEO_MODEL", cls.replicate_video_model),
            replicate_timeout_s=_env_int("REPLICATE_TIMEOUT_S", cls.replicate_timeout_s),
            fallback_duration_ms=_env_int("FALLBACK_DURATION_MS", cls.fallback_duration_ms),
            fallback_width=_env_int("FALLBACK_WIDTH", cls.fallback_width),
            fallback_height=_env_int("FALLBACK_HEIGHT", cls.fallback_height),
            media_store_capacity=_env_int("MEDIA_STORE_CAPACITY", cls.media_store_capacity),
            enhancement_log=os.getenv("ENHANCEMENT_LOG") or None,
            log_level=os.getenv("LOG_LEVEL", cls.log_level).upper(),
        )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
