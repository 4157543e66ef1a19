"""In-memory preview cache with single-flight de-duplication.

Concurrent requests for the same key share one render task. Keys include the source's
mtime and size, so a modified file is rendered afresh.
"""

import asyncio
from collections import OrderedDict
from collections.abc import Callable, Coroutine
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from loguru import logger

from pagepeek.gateway.preview.models import PreviewResult
from pagepeek.gateway.preview.sizing import SizeRequest


@dataclass(frozen=True)
class PreviewKey:
    path: str
    mtime_ns: int
    file_size: int
    requested_width: int | None
    requested_height: int | None
    default_width: int
    default_height: int
    page: int

    @classmethod
    def for_source(cls, path: Path, size: SizeRequest, page: int) -> "PreviewKey":
        stat = path.stat()
        return cls(
            path=str(path),
            mtime_ns=stat.st_mtime_ns,
            file_size=stat.st_size,
            requested_width=size.requested_width,
            requested_height=size.requested_height,
            default_width=size.default_width,
            default_height=size.default_height,
            page=page,
        )


class PreviewCache:
    """LRU of rendered previews. Placeholders are never stored."""

    def __init__(self, max_entries: int):
        if max_entries < 1:
            raise ValueError(f"max_entries must be positive, got {max_entries}")
        self.max_entries = max_entries
        self._entries: OrderedDict[PreviewKey, PreviewResult] = OrderedDict()
        self._inflight: dict[PreviewKey, asyncio.Task[PreviewResult]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: PreviewKey) -> bool:
        return key in self._entries

    async def get_or_render(
        self,
        key: PreviewKey,
        render: Callable[[], Coroutine[Any, Any, PreviewResult]],
    ) -> PreviewResult:
        cached = self._entries.get(key)
        if cached is not None:
            self._entries.move_to_end(key)
            return cached

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.create_task(render())
            self._inflight[key] = task
            task.add_done_callback(lambda done: self._settle(key, done))
        else:
            logger.debug(f"Joining in-flight render for {key.path}")

        # A disconnecting caller must not cancel the render other callers are waiting on
        return await asyncio.shield(task)

    def _settle(self, key: PreviewKey, task: asyncio.Task[PreviewResult]) -> None:
        self._inflight.pop(key, None)
        if task.cancelled() or task.exception() is not None:
            return

        result = task.result()
        if result.is_placeholder:
            return
        self._entries[key] = result
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)
