"""
Placeholder image returned by the image endpoint when no image API key is set.
"""
import io

from PIL import Image, ImageDraw

from .frames import diagonal_gradient
from .layout import font_measure, load_font, wrap_text
from .media_store import MediaBlob

SIZE = 1024
GRADIENT = ((0x34, 0x3A, 0x7A), (0x6B, 0x7C, 0xFF))
TITLE = "Generated Placeholder"
MAX_CHARS = 160
BOX = (64, 220, 64 + 896, 220 + 720)
BOX_PADDING = 16


def placeholder_image(prompt: str) -> MediaBlob:
    content = (prompt or "").replace("\n", " ")[:MAX_CHARS]

    base = Image.fromarray(diagonal_gradient(SIZE, SIZE, *GRADIENT).astype("uint8")).convert("RGBA")
    overlay = Image.new("RGBA", base.size, (0, 0, 0, 0))
    ImageDraw.Draw(overlay).rounded_rectangle(BOX, radius=12, fill=(0, 0, 0, int(255 * 0.15)))
    img = Image.alpha_composite(base, overlay).convert("RGB")

    draw = ImageDraw.Draw(img)
    draw.text((64, 160), TITLE, font=load_font(48), fill="white", anchor="ls")

    font = load_font(28)
    x0, y0, x1, _ = BOX
    lines = wrap_text(content, (x1 - x0) - 2 * BOX_PADDING, font_measure(font))
    y = y0 + BOX_PADDING
    for line in lines:
        draw.text((x0 + BOX_PADDING, y), line, font=font, fill="white")
        y += int(28 * 1.3)

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return MediaBlob(buf.getvalue(), "image/png")
