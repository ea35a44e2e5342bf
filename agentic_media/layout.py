"""
Greedy word wrapping against a pixel width.
"""
from typing import Callable, List, Sequence

from PIL import ImageFont

MAX_LINES = 8

Measure = Callable[[str], float]

FONT_CANDIDATES: Sequence[str] = (
    "DejaVuSans-Bold.ttf",
    "Arial Bold.ttf",
    "arialbd.ttf",
    "arial.ttf",
)


def load_font(size: int) -> ImageFont.ImageFont:
    for name in FONT_CANDIDATES:
        try:
            return ImageFont.truetype(name, size)
        except OSError:
            continue
    return ImageFont.load_default(size=size)


def font_measure(font: ImageFont.ImageFont) -> Measure:
    """Build a measure function (rendered width in pixels) for a Pillow font."""
    def measure(text: str) -> float:
        try:
            return font.getlength(text)
        except AttributeError:
            left, _, right, _ = font.getbbox(text)
            return right - left
    return measure


def wrap_text(text: str, max_width: float, measure: Measure) -> List[str]:
    """
    Pack words into lines no wider than max_width.

    A word that is wider than max_width on its own gets a line to itself and
    is never split. At most MAX_LINES lines are returned; the rest are dropped.
    """
    words = text.split()
    lines: List[str] = []
    line = ""
    for word in words:
        candidate = f"{line} {word}" if line else word
        if measure(candidate) > max_width:
            if line:
                lines.append(line)
            line = word
        else:
            line = candidate
    if line:
        lines.append(line)
    return lines[:MAX_LINES]
