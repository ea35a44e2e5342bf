"""
Exception types shared by the providers, the fallback synthesizer and the API.
"""


class AgenticMediaError(Exception):
    """Base class for every error raised by agentic_media."""

    status_code = 500


class CapabilityUnavailable(AgenticMediaError):
    """The drawing surface could not provide a 2D drawing context."""


class CaptureError(AgenticMediaError):
    """Recording failed after it had started; the partial clip is discarded."""


class ProviderError(AgenticMediaError):
    """A third-party provider call failed or returned nothing usable."""

    def __init__(self, message: str, provider: str = ""):
        super().__init__(message)
        self.provider = provider


class MediaNotFound(AgenticMediaError):
    status_code = 404

    def __init__(self, media_id: str):
        super().__init__(f"Media not found: {media_id}")
        self.media_id = media_id


class InvalidRequest(AgenticMediaError):
    status_code = 400
