from enum import StrEnum, auto
from pathlib import PurePath

RASTER_EXTENSIONS = frozenset({"jpg", "jpeg", "png", "gif", "bmp", "webp"})
PAGED_EXTENSIONS = frozenset({"pdf"})


class SourceFormat(StrEnum):
    RASTER = auto()
    PAGED = auto()
    UNKNOWN = auto()


def classify(path: str | PurePath) -> SourceFormat:
    """Classify a source by its lowercase file extension. Never opens the file."""
    extension = PurePath(path).suffix.lower().removeprefix(".")
    if extension in RASTER_EXTENSIONS:
        return SourceFormat.RASTER
    if extension in PAGED_EXTENSIONS:
        return SourceFormat.PAGED
    return SourceFormat.UNKNOWN
