"""Shared fixtures: a storage root and factories for generated images and PDFs."""

from pathlib import Path

import pymupdf
import pytest
from loguru import logger
from PIL import Image


@pytest.fixture
def storage_root(tmp_path: Path) -> Path:
    root = tmp_path / "storage"
    root.mkdir()
    return root


@pytest.fixture
def make_image():
    """Write a solid-colour image; the format follows the file extension."""

    def _make(path: Path, size: tuple[int, int], mode: str = "RGB", color=(200, 30, 30)) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        Image.new(mode, size, color).save(path)
        return path

    return _make


@pytest.fixture
def make_pdf():
    """Write a PDF with `pages` pages of `page_size` points, each labelled with its page number."""

    def _make(path: Path, pages: int = 1, page_size: tuple[float, float] = (400, 200)) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        doc = pymupdf.open()
        for i in range(pages):
            page = doc.new_page(width=page_size[0], height=page_size[1])
            page.insert_text((20, 40), f"Page {i + 1}", fontsize=18)
        doc.save(str(path))
        doc.close()
        return path

    return _make


@pytest.fixture
def log_records():
    """Capture loguru records emitted during the test."""
    records = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)
