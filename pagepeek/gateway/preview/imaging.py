"""Pillow helpers shared by the renderers: mode normalisation, fit-resize and encoding."""

import io

from PIL import Image

from pagepeek.gateway.preview.sizing import TargetBox, fit_within

JPEG_QUALITY = 85
JPEG_BACKGROUND = (255, 255, 255)
SIXTEEN_BIT_MODES = ("I;16", "I;16B", "I;16L", "I")


def normalize_mode(image: Image.Image) -> Image.Image:
    """Convert palette and exotic modes so that resampling filters apply."""
    if image.mode in ("RGB", "RGBA", "L"):
        return image
    if image.mode in SIXTEEN_BIT_MODES:
        # Pillow clips rather than scales when converting 16-bit samples to 8-bit
        return image.convert("I").point(lambda v: v * (1 / 256)).convert("L")
    if image.mode in ("P", "PA", "LA", "1") and ("transparency" in image.info or image.mode.endswith("A")):
        return image.convert("RGBA")
    return image.convert("RGB")


def resize_to_fit(
    image: Image.Image,
    box: TargetBox,
    *,
    allow_upscale: bool,
    resample: Image.Resampling = Image.Resampling.BICUBIC,
) -> Image.Image:
    size = fit_within(image.size, box, allow_upscale=allow_upscale)
    if size == image.size:
        return image
    return image.resize(size, resample=resample)


def encode_png(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def encode_jpeg(image: Image.Image, quality: int = JPEG_QUALITY) -> bytes:
    # JPEG has no alpha channel, flatten onto white
    if image.mode == "RGBA":
        background = Image.new("RGB", image.size, JPEG_BACKGROUND)
        background.paste(image, mask=image.getchannel("A"))
        image = background
    elif image.mode not in ("RGB", "L"):
        image = image.convert("RGB")

    buffer = io.BytesIO()
    image.save(buffer, format="JPEG", quality=quality)
    return buffer.getvalue()
