"""Saved entropy source: the hex file written by a previous run."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from qflip.entropy.base import EntropySource
from qflip.entropy.registry import register_entropy_source
from qflip.exceptions import SourceUnavailableError
from qflip.storage import read_hex_file

if TYPE_CHECKING:
    from qflip.config import QFlipConfig

logger = logging.getLogger("qflip")


@register_entropy_source("saved")
class SavedEntropySource(EntropySource):
    """Replays entropy saved by an earlier successful acquisition.

    The file is only read. If it holds more bytes than requested the
    leading *n* are used; if it holds fewer, all of them are used.

    Args:
        config: Configuration providing ``saved_entropy_path``.
    """

    def __init__(self, config: QFlipConfig) -> None:
        self._path = Path(config.saved_entropy_path)

    @property
    def name(self) -> str:
        """Return ``'saved'``."""
        return "saved"

    @property
    def is_available(self) -> bool:
        return self._path.is_file()

    def get_random_bytes(self, n: int) -> bytes:
        """Return up to *n* bytes from the saved hex file.

        Raises:
            SourceUnavailableError: If the file is missing, unreadable, not
                hex, or empty.
        """
        try:
            data = read_hex_file(self._path)
        except (OSError, ValueError) as exc:
            raise SourceUnavailableError(f"Saved entropy {str(self._path)!r} unusable: {exc}") from exc
        if not data:
            raise SourceUnavailableError(f"Saved entropy {str(self._path)!r} is empty")
        if len(data) < n:
            logger.warning("Saved entropy has only %d of %d requested bytes", len(data), n)
        return data[:n]

    def close(self) -> None:
        """No-op: the file is opened per read."""

    def health_check(self) -> dict[str, Any]:
        return {"source": self.name, "healthy": self.is_available, "path": str(self._path)}
