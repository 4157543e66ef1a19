"""Paged document (PDF) previews using PyMuPDF.

Two-stage pipeline: the selected page is rasterized at a fixed base resolution, then the
page bitmap is resized with Pillow to fit the target box. Rasterization dominates the
cost of a preview.
"""

from pathlib import Path

import pymupdf
from loguru import logger
from PIL import Image

from pagepeek.gateway.preview.imaging import encode_jpeg, resize_to_fit
from pagepeek.gateway.preview.models import (
    MEDIA_TYPE_JPEG,
    FailureKind,
    PreviewResult,
    RenderFailure,
    RenderOutcome,
)
from pagepeek.gateway.preview.sizing import SizeRequest

BASE_DPI = 96


def page_index(page: int, page_count: int) -> int:
    """Clamp a 1-based page number into ``[1, page_count]`` and return the 0-based index."""
    return max(1, min(page, page_count)) - 1


def rasterize_page(document: pymupdf.Document, index: int, dpi: int = BASE_DPI) -> Image.Image:
    pix = document[index].get_pixmap(dpi=dpi, alpha=False)
    return Image.frombytes("RGB", (pix.width, pix.height), pix.samples)


def _open_document(path: Path) -> pymupdf.Document | RenderFailure:
    try:
        return pymupdf.open(str(path), filetype="pdf")
    except pymupdf.EmptyFileError as e:
        return RenderFailure(FailureKind.EMPTY, str(e))
    except (FileNotFoundError, PermissionError, IsADirectoryError) as e:
        return RenderFailure(FailureKind.UNREADABLE, str(e))
    except (RuntimeError, ValueError, OSError) as e:
        return RenderFailure(FailureKind.CORRUPT, str(e))


def render_paged(path: Path, size: SizeRequest, page: int = 1) -> RenderOutcome:
    """Render one page of a paged document as a JPEG preview.

    Args:
        path: Resolved document path.
        size: Requested dimensions; the box is finalised against the rasterized page.
        page: 1-based page number, clamped into the document's page range.
    """
    document = _open_document(path)
    if isinstance(document, RenderFailure):
        return document

    with document:
        if document.needs_pass:
            return RenderFailure(FailureKind.ENCRYPTED, f"{path.name} is password protected")
        if document.page_count == 0:
            return RenderFailure(FailureKind.EMPTY, f"{path.name} has no pages")

        index = page_index(page, document.page_count)
        try:
            bitmap = rasterize_page(document, index)
        except Exception as e:  # MuPDF raises several unrelated types for damaged content streams
            return RenderFailure(FailureKind.RASTERIZE, f"page {index + 1}: {e}")

    box = size.resolve(bitmap.size)
    preview = resize_to_fit(bitmap, box, allow_upscale=True, resample=Image.Resampling.BICUBIC)
    logger.debug(f"Paged {path.name} p{index + 1}: {bitmap.size} -> {preview.size} (box {box.size})")
    return PreviewResult(content=encode_jpeg(preview), media_type=MEDIA_TYPE_JPEG)
