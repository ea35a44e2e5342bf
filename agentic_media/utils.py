import base64
import os
import re
from urllib.parse import unquote_to_bytes

from .media_store import MediaBlob

DATA_URI_RE = re.compile(r"^data:(?P<type>[^;,]*)(?P<b64>;base64)?,(?P<data>.*)$", re.DOTALL)


def ensure_directory(path: str) -> None:
    if path:
        os.makedirs(path, exist_ok=True)


def clean_filename(text: str) -> str:
    cleaned = re.sub(r'[^a-zA-Z0-9_\-\.]', '_', text)
    return cleaned[:100]


def decode_data_uri(uri: str) -> MediaBlob:
    m = DATA_URI_RE.match(uri)
    if not m:
        raise ValueError("not a data: URI")
    if m.group("b64"):
        data = base64.b64decode(m.group("data"))
    else:
        data = unquote_to_bytes(m.group("data"))
    return MediaBlob(data, m.group("type") or "text/plain")


def save_blob(blob: MediaBlob, path: str) -> str:
    ensure_directory(os.path.dirname(path))
    with open(path, "wb") as f:
        f.write(blob.data)
    return path
