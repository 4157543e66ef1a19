from pathlib import Path

from loguru import logger
from PIL import Image, UnidentifiedImageError

from pagepeek.gateway.preview.imaging import encode_jpeg, encode_png, normalize_mode, resize_to_fit
from pagepeek.gateway.preview.models import (
    MEDIA_TYPE_JPEG,
    MEDIA_TYPE_PNG,
    FailureKind,
    PreviewResult,
    RenderFailure,
    RenderOutcome,
)
from pagepeek.gateway.preview.sizing import SizeRequest

# Output format follows the source extension, not its transparency
PNG_SOURCE_EXTENSIONS = frozenset({".png", ".gif"})


def render_raster(path: Path, size: SizeRequest) -> RenderOutcome:
    """Decode a raster image and shrink it to fit inside the resolved target box.

    Sources already smaller than the box are returned at their natural size.
    """
    try:
        if path.stat().st_size == 0:
            return RenderFailure(FailureKind.EMPTY, f"{path} is empty")

        with Image.open(path) as source:
            source.load()
            box = size.resolve(source.size)
            image = resize_to_fit(
                normalize_mode(source), box, allow_upscale=False, resample=Image.Resampling.LANCZOS
            )
            logger.debug(f"Raster {path.name}: {source.size} -> {image.size} (box {box.size})")

            if path.suffix.lower() in PNG_SOURCE_EXTENSIONS:
                return PreviewResult(content=encode_png(image), media_type=MEDIA_TYPE_PNG)
            return PreviewResult(content=encode_jpeg(image), media_type=MEDIA_TYPE_JPEG)

    except UnidentifiedImageError as e:
        return RenderFailure(FailureKind.UNSUPPORTED, str(e))
    except Image.DecompressionBombError as e:
        return RenderFailure(FailureKind.UNSUPPORTED, str(e))
    except (FileNotFoundError, PermissionError, IsADirectoryError) as e:
        return RenderFailure(FailureKind.UNREADABLE, str(e))
    except (OSError, SyntaxError, ValueError) as e:
        # Pillow reports truncated and malformed payloads through all three
        return RenderFailure(FailureKind.CORRUPT, str(e))
