import asyncio

import pytest

from pagepeek.gateway.preview.cache import PreviewCache, PreviewKey
from pagepeek.gateway.preview.models import MEDIA_TYPE_PNG, PreviewResult
from pagepeek.gateway.preview.sizing import SizeRequest


def make_key(name: str, width: int | None = None) -> PreviewKey:
    return PreviewKey(
        path=f"/storage/{name}",
        mtime_ns=1,
        file_size=10,
        requested_width=width,
        requested_height=None,
        default_width=256,
        default_height=256,
        page=1,
    )


def result(content: bytes, placeholder: bool = False) -> PreviewResult:
    return PreviewResult(content=content, media_type=MEDIA_TYPE_PNG, is_placeholder=placeholder)


class Renderer:
    """Counts calls and returns a fixed result."""

    def __init__(self, outcome: PreviewResult):
        self.outcome = outcome
        self.calls = 0

    async def __call__(self) -> PreviewResult:
        self.calls += 1
        return self.outcome


def test_requires_positive_capacity():
    with pytest.raises(ValueError):
        PreviewCache(max_entries=0)


class TestGetOrRender:
    @pytest.mark.asyncio
    async def test_second_request_is_served_from_cache(self):
        cache = PreviewCache(max_entries=4)
        render = Renderer(result(b"a"))
        key = make_key("a.png")

        assert await cache.get_or_render(key, render) == result(b"a")
        assert await cache.get_or_render(key, render) == result(b"a")

        assert render.calls == 1
        assert key in cache

    @pytest.mark.asyncio
    async def test_different_sizes_are_distinct_entries(self):
        cache = PreviewCache(max_entries=4)
        render = Renderer(result(b"a"))

        await cache.get_or_render(make_key("a.png", width=100), render)
        await cache.get_or_render(make_key("a.png", width=200), render)

        assert render.calls == 2
        assert len(cache) == 2

    @pytest.mark.asyncio
    async def test_concurrent_requests_share_one_render(self):
        cache = PreviewCache(max_entries=4)
        release = asyncio.Event()
        calls = 0

        async def render() -> PreviewResult:
            nonlocal calls
            calls += 1
            await release.wait()
            return result(b"shared")

        key = make_key("a.png")
        waiters = [asyncio.create_task(cache.get_or_render(key, render)) for _ in range(3)]
        await asyncio.sleep(0)
        release.set()

        assert await asyncio.gather(*waiters) == [result(b"shared")] * 3
        assert calls == 1

    @pytest.mark.asyncio
    async def test_cancelled_waiter_does_not_cancel_shared_render(self):
        cache = PreviewCache(max_entries=4)
        release = asyncio.Event()

        async def render() -> PreviewResult:
            await release.wait()
            return result(b"shared")

        key = make_key("a.png")
        first = asyncio.create_task(cache.get_or_render(key, render))
        second = asyncio.create_task(cache.get_or_render(key, render))
        await asyncio.sleep(0)

        first.cancel()
        release.set()

        assert await second == result(b"shared")
        assert first.cancelled()
        assert key in cache

    @pytest.mark.asyncio
    async def test_placeholders_are_not_stored(self):
        cache = PreviewCache(max_entries=4)
        render = Renderer(result(b"placeholder", placeholder=True))
        key = make_key("broken.pdf")

        await cache.get_or_render(key, render)
        await cache.get_or_render(key, render)

        assert render.calls == 2
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_failed_render_is_retried(self):
        cache = PreviewCache(max_entries=4)
        key = make_key("a.png")

        async def fail() -> PreviewResult:
            raise RuntimeError("decoder crashed")

        with pytest.raises(RuntimeError, match="decoder crashed"):
            await cache.get_or_render(key, fail)

        render = Renderer(result(b"a"))
        assert await cache.get_or_render(key, render) == result(b"a")
        assert render.calls == 1


class TestEviction:
    @pytest.mark.asyncio
    async def test_oldest_entry_is_evicted(self):
        cache = PreviewCache(max_entries=2)
        a, b, c = make_key("a.png"), make_key("b.png"), make_key("c.png")

        for key in (a, b, c):
            await cache.get_or_render(key, Renderer(result(key.path.encode())))

        assert len(cache) == 2
        assert a not in cache
        assert b in cache and c in cache

    @pytest.mark.asyncio
    async def test_recently_used_entry_survives(self):
        cache = PreviewCache(max_entries=2)
        a, b, c = make_key("a.png"), make_key("b.png"), make_key("c.png")

        await cache.get_or_render(a, Renderer(result(b"a")))
        await cache.get_or_render(b, Renderer(result(b"b")))
        await cache.get_or_render(a, Renderer(result(b"unused")))
        await cache.get_or_render(c, Renderer(result(b"c")))

        assert a in cache
        assert b not in cache


class TestPreviewKey:
    def test_key_tracks_source_modification(self, storage_root):
        path = storage_root / "a.png"
        path.write_bytes(b"one")
        before = PreviewKey.for_source(path, SizeRequest.for_path(), page=1)

        path.write_bytes(b"three")
        after = PreviewKey.for_source(path, SizeRequest.for_path(), page=1)

        assert before != after
        assert after.file_size == 5

    def test_key_includes_page_and_size(self, storage_root):
        path = storage_root / "doc.pdf"
        path.write_bytes(b"%PDF")

        assert PreviewKey.for_source(path, SizeRequest.for_path(), page=1) != PreviewKey.for_source(
            path, SizeRequest.for_path(), page=2
        )
        assert PreviewKey.for_source(path, SizeRequest.for_path(), page=1) != PreviewKey.for_source(
            path, SizeRequest.for_period(), page=1
        )
