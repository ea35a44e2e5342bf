"""
Capture/encode pipeline for the fallback clip.

A FrameStream samples a drawing surface at a fixed frame rate and pushes the
frames to its sinks. A ClipRecorder is one such sink: it encodes the frames
with ffmpeg (through moviepy's writer) and, when stopped, hands the encoded
bytes to its on_data callback in fragments before firing on_stop.

ClipSynthesizer ties them together:
    start recorder -> render/capture until the duration has elapsed
    -> settle -> stop recorder -> assemble the recorded chunks.
"""
import logging
import os
import tempfile
from concurrent.futures import Future
from typing import Callable, List, Optional, Tuple

import numpy as np
from PIL import Image
from moviepy.video.io.ffmpeg_writer import FFMPEG_VideoWriter

from .clock import RealtimeClock
from .errors import CaptureError
from .frames import FrameRenderer, default_renderer, drawing_context
from .media_store import MediaBlob

logger = logging.getLogger(__name__)

CAPTURE_FPS = 30
SETTLE_MS = 150
DEFAULT_DURATION_MS = 3000
DEFAULT_SIZE = (720, 480)

CLIP_MEDIA_TYPE = "video/webm"
CLIP_CODEC = "libvpx-vp9"
CHUNK_SIZE = 64 * 1024
# realtime encoder settings, the recorder has to keep up with capture
ENCODER_PARAMS = ["-deadline", "realtime", "-cpu-used", "8", "-pix_fmt", "yuv420p"]

FrameSink = Callable[[np.ndarray], None]


class FrameStream:
    """Fixed-rate sampler of a drawing surface."""

    def __init__(self, surface: Image.Image, fps: int = CAPTURE_FPS):
        self.surface = surface
        self.fps = fps
        self.interval_ms = 1000.0 / fps
        self.frames_captured = 0
        self._next_due = 0.0
        self._sinks: List[FrameSink] = []

    @property
    def size(self) -> Tuple[int, int]:
        return self.surface.size

    def add_sink(self, sink: FrameSink) -> None:
        self._sinks.append(sink)

    def remove_sink(self, sink: FrameSink) -> None:
        if sink in self._sinks:
            self._sinks.remove(sink)

    def tick(self, elapsed_ms: float) -> int:
        """Capture every frame that is due by elapsed_ms; returns how many."""
        captured = 0
        while elapsed_ms >= self._next_due:
            self._next_due += self.interval_ms
            if not self._sinks:
                continue
            frame = np.array(self.surface, dtype=np.uint8)
            for sink in list(self._sinks):
                sink(frame)
            captured += 1
        self.frames_captured += captured
        return captured


class ClipRecorder:
    """Encodes a FrameStream into a WebM clip."""

    media_type = CLIP_MEDIA_TYPE

    def __init__(self, stream: FrameStream, codec: str = CLIP_CODEC, chunk_size: int = CHUNK_SIZE,
                 ffmpeg_params: Optional[List[str]] = None):
        self.stream = stream
        self.codec = codec
        self.chunk_size = chunk_size
        self.ffmpeg_params = list(ENCODER_PARAMS if ffmpeg_params is None else ffmpeg_params)
        self.on_data: Optional[Callable[[bytes], None]] = None
        self.on_stop: Optional[Callable[[], None]] = None
        self.state = "inactive"
        self._writer = None
        self._path: Optional[str] = None

    def start(self) -> None:
        if self.state != "inactive":
            raise RuntimeError(f"recorder is {self.state}")
        fd, self._path = tempfile.mkstemp(prefix="clip_", suffix=".webm")
        os.close(fd)
        try:
            self._writer = FFMPEG_VideoWriter(self._path, self.stream.size, self.stream.fps,
                                              codec=self.codec, ffmpeg_params=self.ffmpeg_params)
        except Exception:
            self._cleanup()
            raise
        self.stream.add_sink(self._write_frame)
        self.state = "recording"

    def _write_frame(self, frame: np.ndarray) -> None:
        self._writer.write_frame(frame)

    def stop(self) -> None:
        if self.state != "recording":
            raise RuntimeError(f"recorder is {self.state}")
        self.stream.remove_sink(self._write_frame)
        try:
            self._writer.close()
            self._writer = None
            with open(self._path, "rb") as f:
                for chunk in iter(lambda: f.read(self.chunk_size), b""):
                    if self.on_data:
                        self.on_data(chunk)
        finally:
            self._cleanup()
        if self.on_stop:
            self.on_stop()

    def abort(self) -> None:
        """Tear down without delivering data or firing on_stop."""
        self.stream.remove_sink(self._write_frame)
        if self._writer is not None:
            try:
                self._writer.close()
            except (OSError, ValueError) as e:
                logger.debug("Encoder close failed during abort: %s", e)
            self._writer = None
        self._cleanup()

    def _cleanup(self) -> None:
        if self._path and os.path.exists(self._path):
            os.remove(self._path)
        self._path = None
        self.state = "inactive"


class ClipSynthesizer:
    def __init__(self, fps: int = CAPTURE_FPS, settle_ms: float = SETTLE_MS,
                 clock_factory: Callable = RealtimeClock,
                 recorder_factory: Callable[[FrameStream], ClipRecorder] = ClipRecorder,
                 renderer: Optional[FrameRenderer] = None):
        self.fps = fps
        self.settle_ms = settle_ms
        self.clock_factory = clock_factory
        self.recorder_factory = recorder_factory
        self.renderer = renderer or default_renderer()

    def synthesize(self, text: str, duration_ms: float = DEFAULT_DURATION_MS,
                   width: int = DEFAULT_SIZE[0], height: int = DEFAULT_SIZE[1]) -> MediaBlob:
        if width <= 0 or height <= 0:
            raise ValueError(f"invalid clip size {width}x{height}")
        surface = Image.new("RGB", (width, height))
        drawing_context(surface)

        stream = FrameStream(surface, fps=self.fps)
        recorder = self.recorder_factory(stream)
        chunks: List[bytes] = []
        stopped: Future = Future()

        def on_data(chunk: bytes) -> None:
            if chunk:
                chunks.append(chunk)

        recorder.on_data = on_data
        recorder.on_stop = lambda: stopped.set_result(None)

        logger.info("Synthesizing %dx%d fallback clip (%d ms)", width, height, duration_ms)
        clock = self.clock_factory()
        try:
            recorder.start()
            start = clock.now()
            while True:
                elapsed = clock.now() - start
                self.renderer.render(surface, elapsed, text, duration_ms)
                stream.tick(elapsed)
                if elapsed >= duration_ms:
                    break
                clock.wait_for_refresh()

            clock.sleep(self.settle_ms)
            stream.tick(clock.now() - start)
            recorder.stop()
        except Exception as e:
            recorder.abort()
            chunks.clear()
            raise CaptureError(f"Capture failed: {e}") from e

        if not stopped.done():
            raise CaptureError("Recorder stopped without signalling completion")
        blob = MediaBlob.from_chunks(chunks, recorder.media_type)
        chunks.clear()
        logger.info("Fallback clip ready: %d frames, %d bytes", stream.frames_captured, blob.size)
        return blob


def synthesize(text: str, duration_ms: float = DEFAULT_DURATION_MS,
               width: int = DEFAULT_SIZE[0], height: int = DEFAULT_SIZE[1], **kwargs) -> MediaBlob:
    return ClipSynthesizer(**kwargs).synthesize(text, duration_ms, width, height)
