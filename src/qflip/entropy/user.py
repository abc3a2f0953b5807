"""User-supplied entropy: a hex string or a file.

When present this source replaces the whole chain; explicit operator
input always wins over automatic acquisition. A file whose text decodes
as hex is read as hex, anything else is taken as raw bytes.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from qflip.entropy.base import EntropySource
from qflip.entropy.registry import register_entropy_source
from qflip.exceptions import SourceUnavailableError
from qflip.storage import decode_hex

if TYPE_CHECKING:
    from qflip.config import QFlipConfig

logger = logging.getLogger("qflip")


def has_user_entropy(config: QFlipConfig) -> bool:
    """Whether the config carries user-supplied entropy."""
    return bool(config.entropy_hex or config.entropy_file)


def _read_entropy_file(path: Path) -> bytes:
    raw = path.read_bytes()
    try:
        return decode_hex(raw.decode("ascii"))
    except (UnicodeDecodeError, ValueError):
        return raw


@register_entropy_source("user")
class UserEntropySource(EntropySource):
    """Serves the bytes given via ``entropy_hex`` or ``entropy_file``.

    The hex string takes precedence when both are set. The supplied bytes
    are returned as-is, even when their length differs from the request.

    Args:
        config: Configuration providing ``entropy_hex`` / ``entropy_file``.
    """

    persists = True

    def __init__(self, config: QFlipConfig) -> None:
        self._hex = config.entropy_hex
        self._path = Path(config.entropy_file) if config.entropy_file else None

    @property
    def name(self) -> str:
        """Return ``'user'``."""
        return "user"

    @property
    def is_available(self) -> bool:
        return bool(self._hex) or (self._path is not None and self._path.is_file())

    def get_random_bytes(self, n: int) -> bytes:
        """Return the user-supplied bytes.

        Raises:
            SourceUnavailableError: If nothing was supplied, the file cannot
                be read, the hex string is invalid, or the input is empty.
        """
        try:
            if self._hex:
                data = decode_hex(self._hex)
            elif self._path is not None:
                data = _read_entropy_file(self._path)
            else:
                raise SourceUnavailableError("No user entropy supplied")
        except ValueError as exc:
            raise SourceUnavailableError(f"Invalid hex entropy: {exc}") from exc
        except OSError as exc:
            raise SourceUnavailableError(f"Cannot read entropy file {str(self._path)!r}: {exc}") from exc

        if not data:
            raise SourceUnavailableError("User-supplied entropy is empty")
        if len(data) != n:
            logger.warning("User-supplied entropy has %d bytes (requested %d); using it as-is", len(data), n)
        return data

    def close(self) -> None:
        """No-op: no resources to release."""
