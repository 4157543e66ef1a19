"""Resolve external file identifiers to paths under the storage root.

Every check here is lexical. A rejected identifier never causes filesystem access,
and a resolved path is not guaranteed to exist.
"""

import os
from pathlib import Path

from loguru import logger

from pagepeek.gateway.exceptions import PathRejectedError

_SEPARATORS = ("/", "\\")
_FORBIDDEN_TOKENS = ("..", "~", "\x00")


def _is_single_component(value: str) -> bool:
    if value in ("", ".", ".."):
        return False
    return not any(char in value for char in (*_SEPARATORS, "\x00"))


class PathResolver:
    """Maps relative paths and (period, filename) pairs onto the storage root."""

    def __init__(self, storage_root: Path):
        self.storage_root = Path(os.path.normpath(Path(storage_root).absolute()))

    def resolve_relative(self, relative_path: str) -> Path:
        """Resolve a path-style identifier such as ``/docs/a.png``.

        Exactly one leading separator is stripped. Identifiers containing ``..`` or ``~``
        anywhere are rejected outright rather than sanitized.
        """
        if any(token in relative_path for token in _FORBIDDEN_TOKENS):
            logger.warning(f"Rejected path identifier {relative_path!r}: traversal or home reference")
            raise PathRejectedError(relative_path)

        stripped = relative_path[1:] if relative_path.startswith(_SEPARATORS) else relative_path
        return self._join(relative_path, stripped)

    def resolve_period_file(self, period: str, filename: str) -> Path:
        """Resolve ``<root>/<period>/<filename>``. Both parts must be single path components."""
        for component in (period, filename):
            if not _is_single_component(component):
                logger.warning(f"Rejected period identifier {period!r}/{filename!r}")
                raise PathRejectedError(f"{period}/{filename}")
        return self._join(f"{period}/{filename}", period, filename)

    def _join(self, identifier: str, *parts: str) -> Path:
        candidate = Path(os.path.normpath(self.storage_root.joinpath(*parts)))
        if candidate == self.storage_root or not candidate.is_relative_to(self.storage_root):
            logger.warning(f"Rejected path identifier {identifier!r}: resolves outside storage root")
            raise PathRejectedError(identifier)
        return candidate
