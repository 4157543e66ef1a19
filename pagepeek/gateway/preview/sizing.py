"""Turn requested preview dimensions into a concrete target box.

When a caller supplies only one dimension (and it differs from the entry point's
default) the other one is derived from the source's own aspect ratio, which is only
known once the renderer has opened the source. :class:`SizeRequest` carries the
request until then and :meth:`SizeRequest.resolve` finalises the box.
"""

from dataclasses import dataclass
from enum import StrEnum, auto

MAX_DIMENSION = 1920
PATH_DEFAULT_DIMENSION = 256
PERIOD_DEFAULT_DIMENSION = 300


def clamp_dimension(value: int) -> int:
    return max(1, min(value, MAX_DIMENSION))


class DerivedAxis(StrEnum):
    WIDTH = auto()
    HEIGHT = auto()


@dataclass(frozen=True)
class TargetBox:
    width: int
    height: int
    preserve_aspect: bool = False

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height


def derived_axis(
    requested_width: int | None,
    requested_height: int | None,
    default_width: int,
    default_height: int,
) -> DerivedAxis | None:
    """Return the axis to derive from the source ratio, or None for an explicit box.

    Ambiguous combinations (both supplied, neither supplied, or a supplied value equal
    to its default) fall back to the explicit box and never raise.
    """
    if requested_width is not None and requested_height is None and requested_width != default_width:
        return DerivedAxis.HEIGHT
    if requested_height is not None and requested_width is None and requested_height != default_height:
        return DerivedAxis.WIDTH
    return None


def resolve_target_box(
    requested_width: int | None,
    requested_height: int | None,
    default_width: int,
    default_height: int,
    source_aspect_ratio: float | None = None,
) -> TargetBox:
    """Resolve a target box; ``source_aspect_ratio`` is the source's width / height."""
    width = requested_width if requested_width is not None else default_width
    height = requested_height if requested_height is not None else default_height

    axis = derived_axis(requested_width, requested_height, default_width, default_height)
    if axis is None or not source_aspect_ratio or source_aspect_ratio <= 0:
        return TargetBox(clamp_dimension(width), clamp_dimension(height), preserve_aspect=False)

    match axis:
        case DerivedAxis.HEIGHT:
            height = round(width / source_aspect_ratio)
        case DerivedAxis.WIDTH:
            width = round(height * source_aspect_ratio)

    # Derived values can blow past the bound for very wide or narrow sources
    return TargetBox(clamp_dimension(width), clamp_dimension(height), preserve_aspect=True)


@dataclass(frozen=True)
class SizeRequest:
    """Requested dimensions plus the defaults of the entry point they arrived through."""

    requested_width: int | None
    requested_height: int | None
    default_width: int
    default_height: int

    @classmethod
    def for_path(cls, width: int | None = None, height: int | None = None) -> "SizeRequest":
        return cls(width, height, PATH_DEFAULT_DIMENSION, PATH_DEFAULT_DIMENSION)

    @classmethod
    def for_period(cls, width: int | None = None, height: int | None = None) -> "SizeRequest":
        return cls(width, height, PERIOD_DEFAULT_DIMENSION, PERIOD_DEFAULT_DIMENSION)

    @property
    def effective_width(self) -> int:
        return self.requested_width if self.requested_width is not None else self.default_width

    @property
    def effective_height(self) -> int:
        return self.requested_height if self.requested_height is not None else self.default_height

    def resolve(self, source_size: tuple[int, int] | None = None) -> TargetBox:
        """Finalise the box against the source's natural ``(width, height)``."""
        ratio = None
        if source_size is not None and source_size[0] > 0 and source_size[1] > 0:
            ratio = source_size[0] / source_size[1]
        return resolve_target_box(
            self.requested_width,
            self.requested_height,
            self.default_width,
            self.default_height,
            source_aspect_ratio=ratio,
        )

    def fallback_box(self) -> TargetBox:
        """Box used when the source could not be opened, so no ratio is available."""
        return self.resolve(None)


def fit_within(source_size: tuple[int, int], box: TargetBox, *, allow_upscale: bool) -> tuple[int, int]:
    """Largest size with the source's aspect ratio that fits inside ``box``."""
    source_width, source_height = source_size
    scale = min(box.width / source_width, box.height / source_height)
    if not allow_upscale:
        scale = min(scale, 1.0)
    return max(1, round(source_width * scale)), max(1, round(source_height * scale))
