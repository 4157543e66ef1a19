from typing import Annotated

from fastapi import APIRouter, Query
from fastapi.responses import Response
from loguru import logger

from pagepeek.gateway.deps import PreviewPipelineDep
from pagepeek.gateway.exceptions import ValidationError
from pagepeek.gateway.hashing import calculate_path_etag, calculate_period_etag
from pagepeek.gateway.preview.models import PreviewResult
from pagepeek.gateway.preview.sizing import MAX_DIMENSION, SizeRequest

router = APIRouter(prefix="/v1/api", tags=["Files"])

PREVIEW_CACHE_CONTROL = "max-age=86400"  # 24h
PREVIEW_RESPONSES = {
    200: {"content": {"image/png": {}, "image/jpeg": {}}, "description": "Preview image"},
    400: {"description": "Invalid parameters"},
}

Dimension = Annotated[int | None, Query(ge=1, le=MAX_DIMENSION, description=f"Preview dimension, 1-{MAX_DIMENSION}")]
Page = Annotated[int, Query(ge=1, description="1-based page of a paged document")]


def _image_response(result: PreviewResult, etag: str) -> Response:
    headers = {"Cache-Control": PREVIEW_CACHE_CONTROL, "ETag": etag}
    if result.is_placeholder:
        headers["X-Preview-Placeholder"] = "true"
    return Response(content=result.content, media_type=result.media_type, headers=headers)


@router.get("/preview", responses=PREVIEW_RESPONSES)
async def get_preview(
    pipeline: PreviewPipelineDep,
    period: Annotated[str, Query(description="Period folder name, e.g. 2024-01")],
    filename: Annotated[str, Query(description="File name inside the period folder")],
    width: Dimension = None,
    height: Dimension = None,
    page: Page = 1,
) -> Response:
    """Preview a file stored in a period folder (defaults: 300x300).

    Never 404s: a missing folder, missing file or unrenderable source yields a placeholder.
    """
    if not period.strip():
        raise ValidationError("Parameter 'period' is required")
    if not filename.strip():
        raise ValidationError("Parameter 'filename' is required")

    size = SizeRequest.for_period(width, height)
    logger.info(f"Preview requested: period={period!r} filename={filename!r} width={width} height={height} page={page}")

    result = await pipeline.preview_period_file(period, filename, size, page)

    logger.info(f"Preview ready: period={period!r} filename={filename!r} size={len(result.content)} bytes")
    etag = calculate_period_etag(period, filename, size.effective_width, size.effective_height, page)
    return _image_response(result, etag)


@router.get("/file/preview", responses={**PREVIEW_RESPONSES, 404: {"description": "File not found"}})
async def get_file_preview(
    pipeline: PreviewPipelineDep,
    path: Annotated[str, Query(description="File path relative to the storage root")],
    width: Dimension = None,
    height: Dimension = None,
    page: Page = 1,
) -> Response:
    """Preview a file addressed by its path under the storage root (defaults: 256x256)."""
    if not path.strip():
        raise ValidationError("Parameter 'path' is required")

    size = SizeRequest.for_path(width, height)
    logger.info(f"File preview requested: path={path!r} width={size.effective_width} height={size.effective_height}")

    result = await pipeline.preview_path(path, size, page)

    logger.info(f"File preview ready: path={path!r} size={len(result.content)} bytes")
    etag = calculate_path_etag(path, size.effective_width, size.effective_height, page)
    return _image_response(result, etag)
