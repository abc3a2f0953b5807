"""Abstract base class for all entropy sources.

Every entropy provider in the chain implements this interface: remote
quantum services, user supplied bytes, the OS CSPRNG and previously
saved files. Subclasses must implement the four abstract members:
``name``, ``is_available``, ``get_random_bytes()``, and ``close()``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar


class EntropySource(ABC):
    """Abstract base for all entropy sources.

    Implementations return random bytes on demand and signal a recoverable
    failure by raising :class:`~qflip.exceptions.SourceUnavailableError`.
    """

    persists: ClassVar[bool] = False
    """Whether bytes from this source are written to the output hex file."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Source identifier (e.g., ``'qrandom'``, ``'system'``)."""

    @property
    @abstractmethod
    def is_available(self) -> bool:
        """Whether the source can currently be asked for entropy."""

    @abstractmethod
    def get_random_bytes(self, n: int) -> bytes:
        """Return *n* random bytes.

        Local sources backed by fixed data (user input, saved files) may
        return a different, non-zero length; see their docstrings.

        Args:
            n: Number of random bytes requested.

        Raises:
            SourceUnavailableError: If the source cannot provide bytes.
        """

    @abstractmethod
    def close(self) -> None:
        """Release resources (HTTP clients, file handles)."""

    def health_check(self) -> dict[str, Any]:
        """Return a status dictionary for this source.

        Returns:
            Dictionary with at least ``'source'`` and ``'healthy'`` keys.
        """
        return {"source": self.name, "healthy": self.is_available}
