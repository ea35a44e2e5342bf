"""
Frame renderer for the fallback clip.

Every frame is a pure function of the elapsed time:
 - background fill whose hue cycles once every 7.2 s
 - diagonal gradient overlay, hue-shifted from the background, at 35% alpha
 - typewriter reveal of the prompt, word-wrapped and vertically centered,
   drawn with a soft drop shadow
"""
import colorsys
import math
from functools import lru_cache
from typing import Optional, Tuple

import numpy as np
from PIL import Image, ImageDraw, ImageFilter, ImageFont

from .errors import CapabilityUnavailable
from .layout import font_measure, load_font, wrap_text

MAX_PROMPT_CHARS = 240
MIN_REVEAL_CHARS = 12

HUE_MS_PER_DEGREE = 20
BACKGROUND_SL = (65, 14)
OVERLAY_STOPS = ((60, 70, 60), (180, 70, 50))  # (hue offset, saturation, lightness)
OVERLAY_ALPHA = 0.35

FONT_SIZE = 28
TEXT_MARGIN = 40
LINE_HEIGHT = 32
LINE_PITCH = 36
TEXT_COLOR = (255, 255, 255)
SHADOW_ALPHA = 0x88
SHADOW_BLUR = 8

RGB = Tuple[int, int, int]


def hsl_to_rgb(hue: float, saturation: float, lightness: float) -> RGB:
    """CSS-style hsl(); saturation and lightness are percentages."""
    r, g, b = colorsys.hls_to_rgb((hue % 360) / 360.0, lightness / 100.0, saturation / 100.0)
    return (int(round(r * 255)), int(round(g * 255)), int(round(b * 255)))


def background_hue(elapsed_ms: float) -> float:
    return (elapsed_ms / HUE_MS_PER_DEGREE) % 360


def background_color(elapsed_ms: float) -> RGB:
    return hsl_to_rgb(background_hue(elapsed_ms), *BACKGROUND_SL)


def overlay_colors(elapsed_ms: float) -> Tuple[RGB, RGB]:
    hue = background_hue(elapsed_ms)
    start, end = (hsl_to_rgb(hue + offset, s, l) for offset, s, l in OVERLAY_STOPS)
    return start, end


def truncate_prompt(text: str) -> str:
    return (text or "").strip()[:MAX_PROMPT_CHARS]


def reveal_progress(elapsed_ms: float, duration_ms: float) -> float:
    if duration_ms <= 0:
        return 1.0
    return max(0.0, min(1.0, elapsed_ms / duration_ms))


def revealed_chars(text: str, elapsed_ms: float, duration_ms: float) -> int:
    """Number of characters of the truncated prompt visible at elapsed_ms."""
    words = truncate_prompt(text)
    count = max(MIN_REVEAL_CHARS, math.floor(len(words) * reveal_progress(elapsed_ms, duration_ms)))
    return min(len(words), count)


def visible_text(text: str, elapsed_ms: float, duration_ms: float) -> str:
    return truncate_prompt(text)[:revealed_chars(text, elapsed_ms, duration_ms)]


def drawing_context(surface: Image.Image) -> ImageDraw.ImageDraw:
    """Return a 2D drawing context for an RGB surface."""
    if not isinstance(surface, Image.Image) or surface.mode != "RGB":
        mode = getattr(surface, "mode", type(surface).__name__)
        raise CapabilityUnavailable(f"2D drawing context not available for surface ({mode})")
    return ImageDraw.Draw(surface)


@lru_cache(maxsize=8)
def _diagonal_ramp(width: int, height: int) -> np.ndarray:
    # Projection of each pixel onto the (0,0)->(width,height) axis, in [0, 1].
    ys, xs = np.mgrid[0:height, 0:width].astype(np.float32)
    denom = float(width * width + height * height) or 1.0
    ramp = (xs * width + ys * height) / denom
    return np.clip(ramp, 0.0, 1.0)[..., None]


def diagonal_gradient(width: int, height: int, start: RGB, end: RGB) -> np.ndarray:
    ramp = _diagonal_ramp(width, height)
    a = np.array(start, dtype=np.float32)
    b = np.array(end, dtype=np.float32)
    return a + (b - a) * ramp


class FrameRenderer:
    def __init__(self, font: Optional[ImageFont.ImageFont] = None):
        self.font = font or load_font(FONT_SIZE)
        self.measure = font_measure(self.font)

    def layout(self, text: str, elapsed_ms: float, duration_ms: float, width: int):
        return wrap_text(visible_text(text, elapsed_ms, duration_ms), width - 2 * TEXT_MARGIN, self.measure)

    def render(self, surface: Image.Image, elapsed_ms: float, text: str, duration_ms: float) -> None:
        draw = drawing_context(surface)
        width, height = surface.size

        draw.rectangle([0, 0, width, height], fill=background_color(elapsed_ms))

        start, end = overlay_colors(elapsed_ms)
        base = np.asarray(surface, dtype=np.float32)
        blended = base * (1.0 - OVERLAY_ALPHA) + diagonal_gradient(width, height, start, end) * OVERLAY_ALPHA
        surface.paste(Image.fromarray(np.clip(blended + 0.5, 0, 255).astype(np.uint8)))

        lines = self.layout(text, elapsed_ms, duration_ms, width)
        if not lines:
            return
        y0 = height / 2 - (len(lines) * LINE_HEIGHT) / 2
        positions = [(TEXT_MARGIN, y0 + i * LINE_PITCH) for i in range(len(lines))]

        # shadow on its own layer so nothing else on the frame is blurred
        shadow = Image.new("L", surface.size, 0)
        shadow_draw = ImageDraw.Draw(shadow)
        for (x, y), line in zip(positions, lines):
            shadow_draw.text((x, y), line, font=self.font, fill=SHADOW_ALPHA, anchor="ls")
        shadow = shadow.filter(ImageFilter.GaussianBlur(SHADOW_BLUR / 2))
        surface.paste((0, 0, 0), (0, 0, width, height), shadow)

        draw = ImageDraw.Draw(surface)
        for (x, y), line in zip(positions, lines):
            draw.text((x, y), line, font=self.font, fill=TEXT_COLOR, anchor="ls")


_default_renderer: Optional[FrameRenderer] = None


def default_renderer() -> FrameRenderer:
    """Shared renderer, so the font is loaded once per process."""
    global _default_renderer
    if _default_renderer is None:
        _default_renderer = FrameRenderer()
    return _default_renderer


def render_frame(surface: Image.Image, elapsed_ms: float, text: str, duration_ms: float) -> None:
    default_renderer().render(surface, elapsed_ms, text, duration_ms)
