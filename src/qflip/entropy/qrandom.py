"""qrandom.io entropy source, the primary quantum service.

The binary endpoint is a two-step protocol: a JSON request that returns a
``binaryURL``, followed by a download of the raw bytes from that URL.
Each step is a single HTTP request bounded by ``http_timeout_s``; there
are no retries inside the source.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from qflip.entropy.base import EntropySource
from qflip.entropy.registry import register_entropy_source
from qflip.exceptions import SourceUnavailableError

if TYPE_CHECKING:
    from qflip.config import QFlipConfig

logger = logging.getLogger("qflip")


@register_entropy_source("qrandom")
class QRandomSource(EntropySource):
    """Fetches quantum random bytes from qrandom.io.

    Args:
        config: Configuration providing ``qrandom_url`` and ``http_timeout_s``.
        client: Optional pre-built ``httpx.Client``. When omitted the source
            owns a client and closes it in :meth:`close`.
    """

    persists = True

    def __init__(self, config: QFlipConfig, client: httpx.Client | None = None) -> None:
        self._url = config.qrandom_url
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=config.http_timeout_s)
        self._closed = False

    @property
    def name(self) -> str:
        """Return ``'qrandom'``."""
        return "qrandom"

    @property
    def is_available(self) -> bool:
        return not self._closed

    def get_random_bytes(self, n: int) -> bytes:
        """Fetch exactly *n* bytes from qrandom.io.

        Raises:
            SourceUnavailableError: On transport errors, timeouts, non-2xx
                responses, a payload without a usable ``binaryURL``, or a
                byte count other than *n*.
        """
        if self._closed:
            raise SourceUnavailableError("QRandomSource is closed")

        try:
            response = self._client.get(self._url, params={"bytes": n})
            response.raise_for_status()
            payload: Any = response.json()
            binary_url = payload["binaryURL"]
            if not isinstance(binary_url, str) or not binary_url:
                raise ValueError(f"binaryURL is not a URL: {binary_url!r}")

            binary = self._client.get(binary_url)
            binary.raise_for_status()
            data = binary.content
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise SourceUnavailableError(f"qrandom.io request failed: {exc}") from exc
        except (ValueError, KeyError, TypeError) as exc:
            raise SourceUnavailableError(f"qrandom.io returned a malformed payload: {exc}") from exc

        if len(data) != n:
            raise SourceUnavailableError(f"qrandom.io returned {len(data)} bytes, expected {n}")
        logger.debug("qrandom.io delivered %d bytes", n)
        return data

    def close(self) -> None:
        """Close the HTTP client if this source created it."""
        if self._closed:
            return
        self._closed = True
        if self._owns_client:
            self._client.close()

    def health_check(self) -> dict[str, Any]:
        return {"source": self.name, "healthy": self.is_available, "url": self._url}
