import io

from PIL import Image

from agentic_media import main as cli
from agentic_media.media_store import MediaBlob


def test_cli_image_placeholder(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    out = tmp_path / "idea.png"

    assert cli.main(["a serene sunrise", "--out", str(out)]) == 0

    assert Image.open(io.BytesIO(out.read_bytes())).size == (1024, 1024)
    assert "local fallback" in capsys.readouterr().out


def test_cli_video_fallback_default_path(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    rc = cli.main(["a serene sunrise", "--type", "video", "--fast",
                   "--duration-ms", "300", "--width", "160", "--height", "120"])

    assert rc == 0
    out = tmp_path / "outputs" / "a_serene_sunrise.webm"
    assert out.read_bytes().startswith(b"\x1a\x45\xdf\xa3")


def test_cli_improve(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    assert cli.main(["cartoon fox", "--improve", "--out", str(tmp_path / "fox.png")]) == 0
    assert "Improved input: cartoon fox, stylized" in capsys.readouterr().out


def test_fetch_remote_result(monkeypatch):
    class FakeResponse:
        content = b"mp4-bytes"
        headers = {"Content-Type": "video/mp4"}

        def raise_for_status(self):
            pass

    monkeypatch.setattr(cli.requests, "get", lambda url, timeout: FakeResponse())
    result = cli.GenerationResult("video", "https://r/out.mp4", "video/mp4", False, "p")
    assert cli.fetch_result(None, result) == MediaBlob(b"mp4-bytes", "video/mp4")
