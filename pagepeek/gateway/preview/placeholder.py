"""Generic "preview unavailable" image, the universal fallback.

The icon is drawn from plain polygons and lines so it needs no fonts and cannot fail on
a host without them.
"""

from functools import lru_cache

from PIL import Image, ImageDraw

from pagepeek.gateway.preview.imaging import encode_png
from pagepeek.gateway.preview.models import MEDIA_TYPE_PNG, PreviewResult
from pagepeek.gateway.preview.sizing import TargetBox

BACKGROUND = (211, 211, 211)
ICON_FILL = (169, 169, 169)
ICON_DETAIL = (225, 225, 225)

ICON_SCALE = 0.5  # icon height relative to min(width, height)
MIN_ICON_HEIGHT = 8


def _draw_document_icon(draw: ImageDraw.ImageDraw, width: int, height: int) -> None:
    icon_h = int(min(width, height) * ICON_SCALE)
    if icon_h < MIN_ICON_HEIGHT:
        return
    icon_w = icon_h * 3 // 4
    fold = icon_w // 3

    left = (width - icon_w) // 2
    top = (height - icon_h) // 2
    right = left + icon_w
    bottom = top + icon_h

    outline = [(left, top), (right - fold, top), (right, top + fold), (right, bottom), (left, bottom)]
    draw.polygon(outline, fill=ICON_FILL)
    draw.polygon([(right - fold, top), (right - fold, top + fold), (right, top + fold)], fill=ICON_DETAIL)

    line_width = max(1, icon_h // 24)
    margin = icon_w // 6
    for i in range(4):
        y = top + fold + margin + i * (icon_h - fold - 2 * margin) // 4
        x_end = right - margin if i < 3 else left + icon_w // 2
        draw.line([(left + margin, y), (x_end, y)], fill=ICON_DETAIL, width=line_width)


@lru_cache(maxsize=64)
def _placeholder_png(width: int, height: int) -> bytes:
    image = Image.new("RGB", (width, height), BACKGROUND)
    _draw_document_icon(ImageDraw.Draw(image), width, height)
    return encode_png(image)


def render_placeholder(box: TargetBox) -> PreviewResult:
    """Render the placeholder at exactly ``box`` dimensions, PNG-encoded."""
    return PreviewResult(
        content=_placeholder_png(box.width, box.height),
        media_type=MEDIA_TYPE_PNG,
        is_placeholder=True,
    )
