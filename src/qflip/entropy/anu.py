"""ANU QRNG entropy source, the secondary quantum service.

The ANU JSON API returns at most ``anu_max_block`` uint8 values per call,
so larger requests are split into consecutive blocks. Any failing block
fails the whole attempt; partial data is discarded.
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


def _decode_block(payload: Any, expected: int) -> bytes:
    """Validate one ANU JSON payload and return its values as bytes.

    Raises:
        ValueError: If the payload is not a successful response carrying
            exactly *expected* integers in ``[0, 255]``.
    """
    if not isinstance(payload, dict) or payload.get("success") is not True:
        raise ValueError("response does not report success")
    values = payload.get("data")
    if not isinstance(values, list) or len(values) != expected:
        raise ValueError(f"expected {expected} values in 'data'")
    # bytes() rejects anything outside range(256).
    return bytes(values)


@register_entropy_source("anu")
class AnuQrngSource(EntropySource):
    """Fetches quantum random bytes from the ANU QRNG JSON API.

    Args:
        config: Configuration providing ``anu_url``, ``anu_max_block`` and
            ``http_timeout_s``.
        client: Optional pre-built ``httpx.Client``.
    """

    persists = True

    def __init__(self, config: QFlipConfig, client: httpx.Client | None = None) -> None:
        self._url = config.anu_url
        self._max_block = config.anu_max_block
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=config.http_timeout_s)
        self._closed = False

    @property
    def name(self) -> str:
        """Return ``'anu'``."""
        return "anu"

    @property
    def is_available(self) -> bool:
        return not self._closed

    def get_random_bytes(self, n: int) -> bytes:
        """Fetch exactly *n* bytes, in blocks of at most ``anu_max_block``.

        Raises:
            SourceUnavailableError: On any transport error, non-2xx status
                or malformed block.
        """
        if self._closed:
            raise SourceUnavailableError("AnuQrngSource is closed")

        chunks: list[bytes] = []
        remaining = n
        while remaining > 0:
            block = min(remaining, self._max_block)
            try:
                response = self._client.get(self._url, params={"length": block, "type": "uint8"})
                response.raise_for_status()
                chunks.append(_decode_block(response.json(), block))
            except (httpx.HTTPError, httpx.InvalidURL) as exc:
                raise SourceUnavailableError(f"ANU QRNG request failed: {exc}") from exc
            except (ValueError, TypeError) as exc:
                raise SourceUnavailableError(f"ANU QRNG returned a malformed payload: {exc}") from exc
            remaining -= block

        logger.debug("ANU QRNG delivered %d bytes in %d request(s)", n, len(chunks))
        return b"".join(chunks)

    def close(self) -> None:
        """Close the HTTP client if this source created it."""
        if self._closed:
            return
        self._closed = True
        if self._owns_client:
            self._client.close()

    def health_check(self) -> dict[str, Any]:
        return {
            "source": self.name,
            "healthy": self.is_available,
            "url": self._url,
            "max_block": self._max_block,
        }
