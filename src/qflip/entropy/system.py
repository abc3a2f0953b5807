"""System entropy source using ``os.urandom()``.

Cryptographically secure and always available, but not quantum. Sits
after the network and user sources in the default chain.
"""

from __future__ import annotations

import os

from qflip.entropy.base import EntropySource
from qflip.entropy.registry import register_entropy_source


@register_entropy_source("system")
class SystemEntropySource(EntropySource):
    """``os.urandom()`` wrapper. Always available and cryptographically secure."""

    @property
    def name(self) -> str:
        """Return ``'system'``."""
        return "system"

    @property
    def is_available(self) -> bool:
        """Always returns ``True``."""
        return True

    def get_random_bytes(self, n: int) -> bytes:
        """Return *n* bytes from the OS CSPRNG."""
        return os.urandom(n)

    def close(self) -> None:
        """No-op: no resources to release."""
