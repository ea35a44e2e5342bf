"""
In-memory registry for generated media.

Blobs live only as long as the process (or until released); the API hands out
/media/<id> references to them, the same way a browser hands out object URLs.
"""
import base64
import logging
import threading
import uuid
from collections import OrderedDict
from dataclasses import dataclass
from typing import Iterable

from .errors import MediaNotFound

logger = logging.getLogger(__name__)

MEDIA_EXTENSIONS = {
    "video/webm": "webm",
    "video/mp4": "mp4",
    "image/gif": "gif",
    "image/png": "png",
    "image/svg+xml": "svg",
}


@dataclass(frozen=True)
class MediaBlob:
    data: bytes
    media_type: str

    @classmethod
    def from_chunks(cls, chunks: Iterable[bytes], media_type: str) -> "MediaBlob":
        return cls(b"".join(chunks), media_type)

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str:
        return MEDIA_EXTENSIONS.get(self.media_type.split(";")[0], "bin")

    def to_data_uri(self) -> str:
        return f"data:{self.media_type};base64,{base64.b64encode(self.data).decode('ascii')}"


class MediaStore:
    def __init__(self, capacity: int = 32, url_prefix: str = "/media"):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self.url_prefix = url_prefix.rstrip("/")
        self._blobs: "OrderedDict[str, MediaBlob]" = OrderedDict()
        self._lock = threading.Lock()

    def add(self, blob: MediaBlob) -> str:
        media_id = uuid.uuid4().hex
        with self._lock:
            self._blobs[media_id] = blob
            while len(self._blobs) > self.capacity:
                evicted, _ = self._blobs.popitem(last=False)
                logger.info("Evicted media %s (capacity %d)", evicted, self.capacity)
        return media_id

    def url_for(self, media_id: str) -> str:
        return f"{self.url_prefix}/{media_id}"

    def get(self, media_id: str) -> MediaBlob:
        with self._lock:
            blob = self._blobs.get(media_id)
        if blob is None:
            raise MediaNotFound(media_id)
        return blob

    def release(self, media_id: str) -> None:
        with self._lock:
            if self._blobs.pop(media_id, None) is None:
                raise MediaNotFound(media_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._blobs)

    def __contains__(self, media_id: str) -> bool:
        with self._lock:
            return media_id in self._blobs
