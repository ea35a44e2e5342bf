import pytest

from agentic_media.media_store import MediaBlob
from agentic_media.utils import clean_filename, decode_data_uri, save_blob


def test_decode_base64_data_uri():
    blob = decode_data_uri(MediaBlob(b"\x00\x01png", "image/png").to_data_uri())
    assert blob == MediaBlob(b"\x00\x01png", "image/png")


def test_decode_plain_data_uri():
    blob = decode_data_uri("data:,hello%20world")
    assert blob.data == b"hello world"
    assert blob.media_type == "text/plain"


def test_decode_rejects_urls():
    with pytest.raises(ValueError):
        decode_data_uri("https://example.com/a.png")


def test_clean_filename():
    assert clean_filename("a serene sunrise / city?") == "a_serene_sunrise___city_"


def test_save_blob(tmp_path):
    path = save_blob(MediaBlob(b"data", "video/webm"), str(tmp_path / "out" / "clip.webm"))
    with open(path, "rb") as f:
        assert f.read() == b"data"
