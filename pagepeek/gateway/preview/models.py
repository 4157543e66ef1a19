from dataclasses import dataclass
from enum import StrEnum, auto
from typing import TypeAlias

MEDIA_TYPE_JPEG = "image/jpeg"
MEDIA_TYPE_PNG = "image/png"


@dataclass(frozen=True)
class PreviewResult:
    """Encoded preview bitmap returned to the transport layer."""

    content: bytes
    media_type: str
    is_placeholder: bool = False


class FailureKind(StrEnum):
    UNREADABLE = auto()  # missing, permission denied, or other I/O error
    EMPTY = auto()  # zero-byte file, or a document with no pages
    UNSUPPORTED = auto()  # payload is not a format the decoder understands
    CORRUPT = auto()  # recognised format, broken payload
    ENCRYPTED = auto()
    RASTERIZE = auto()
    TIMEOUT = auto()


@dataclass(frozen=True)
class RenderFailure:
    """Anticipated rendering failure. Renderers return this instead of raising."""

    kind: FailureKind
    message: str


RenderOutcome: TypeAlias = PreviewResult | RenderFailure
