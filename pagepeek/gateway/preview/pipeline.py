"""Preview orchestration: resolve the identifier, classify the source, render, or fall back.

Path rejections propagate to the caller as validation errors. Everything that goes
wrong after resolution is absorbed: the caller receives a placeholder image and the
failure is logged.

Filesystem probes, rendering and placeholder drawing all run on the executor; the event
loop only sequences them.
"""

import asyncio
from collections.abc import Callable
from concurrent.futures import Executor
from enum import StrEnum, auto
from functools import partial
from pathlib import Path
from typing import Any

from loguru import logger

from pagepeek.gateway.exceptions import SourceNotFoundError
from pagepeek.gateway.preview.cache import PreviewCache, PreviewKey
from pagepeek.gateway.preview.formats import SourceFormat, classify
from pagepeek.gateway.preview.models import FailureKind, PreviewResult, RenderFailure, RenderOutcome
from pagepeek.gateway.preview.paged import render_paged
from pagepeek.gateway.preview.paths import PathResolver
from pagepeek.gateway.preview.placeholder import render_placeholder
from pagepeek.gateway.preview.raster import render_raster
from pagepeek.gateway.preview.sizing import SizeRequest, TargetBox


class SourceState(StrEnum):
    PRESENT = auto()
    MISSING_FILE = auto()
    MISSING_FOLDER = auto()


def source_state(path: Path) -> SourceState:
    if path.is_file():
        return SourceState.PRESENT
    if not path.parent.is_dir():
        return SourceState.MISSING_FOLDER
    return SourceState.MISSING_FILE


class PreviewPipeline:
    def __init__(
        self,
        storage_root: Path,
        *,
        executor: Executor | None = None,
        render_timeout_seconds: float | None = None,
        cache: PreviewCache | None = None,
    ):
        self.resolver = PathResolver(storage_root)
        self.executor = executor
        self.render_timeout_seconds = render_timeout_seconds
        self.cache = cache

    async def preview_path(self, relative_path: str, size: SizeRequest, page: int = 1) -> PreviewResult:
        """Preview a file addressed by a path relative to the storage root.

        Raises:
            PathRejectedError: the identifier tries to leave the storage root.
            SourceNotFoundError: the file does not exist. This entry point does not
                substitute a placeholder for missing files.
        """
        path = self.resolver.resolve_relative(relative_path)
        if await self._offload(source_state, path) is not SourceState.PRESENT:
            logger.warning(f"File not found: {relative_path!r} ({path})")
            raise SourceNotFoundError(relative_path)
        return await self._preview(path, size, page)

    async def preview_period_file(
        self, period: str, filename: str, size: SizeRequest, page: int = 1
    ) -> PreviewResult:
        """Preview ``<root>/<period>/<filename>``.

        A missing period folder or file yields a placeholder, never a not-found error.

        Raises:
            PathRejectedError: ``period`` or ``filename`` is not a single path component.
        """
        path = self.resolver.resolve_period_file(period, filename)
        match await self._offload(source_state, path):
            case SourceState.MISSING_FOLDER:
                logger.warning(f"Period folder does not exist: {period!r}")
                return await self._placeholder(size.fallback_box())
            case SourceState.MISSING_FILE:
                logger.warning(f"File {filename!r} not found in period {period!r}")
                return await self._placeholder(size.fallback_box())
        return await self._preview(path, size, page)

    async def _preview(self, path: Path, size: SizeRequest, page: int) -> PreviewResult:
        try:
            if self.cache is None:
                return await self._render(path, size, page)
            key = await self._offload(PreviewKey.for_source, path, size, page)
            return await self.cache.get_or_render(key, lambda: self._render(path, size, page))
        except Exception:
            box = size.fallback_box()
            logger.exception(f"Unexpected failure while previewing {path} (box {box.width}x{box.height})")
            return await self._placeholder(box)

    async def _render(self, path: Path, size: SizeRequest, page: int) -> PreviewResult:
        source_format = classify(path)
        match source_format:
            case SourceFormat.RASTER:
                job = partial(render_raster, path, size)
            case SourceFormat.PAGED:
                job = partial(render_paged, path, size, page)
            case _:
                logger.info(f"Unsupported file format {path.suffix or '<none>'!r}: {path.name}")
                return await self._placeholder(size.fallback_box())

        logger.debug(f"Rendering {source_format} preview for {path}")
        outcome = await self._run(job)
        match outcome:
            case PreviewResult():
                return outcome
            case RenderFailure(kind=kind, message=message):
                box = size.fallback_box()
                logger.error(
                    f"Preview rendering failed ({kind}) for {path}, requested box {box.width}x{box.height}: {message}"
                )
                return await self._placeholder(box)

    async def _placeholder(self, box: TargetBox) -> PreviewResult:
        return await self._offload(render_placeholder, box)

    async def _offload(self, func: Callable[..., Any], *args: Any) -> Any:
        return await asyncio.get_running_loop().run_in_executor(self.executor, partial(func, *args))

    async def _run(self, job: Callable[[], RenderOutcome]) -> RenderOutcome:
        future = asyncio.get_running_loop().run_in_executor(self.executor, job)
        try:
            return await asyncio.wait_for(future, timeout=self.render_timeout_seconds)
        except TimeoutError:
            return RenderFailure(FailureKind.TIMEOUT, f"render exceeded {self.render_timeout_seconds}s")
