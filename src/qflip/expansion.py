"""Deterministic multi-flip expansion of a base entropy buffer.

For ``N > 1`` flips the base buffer is kept as the last flip and ``N - 1``
further buffers of the same length are derived from it::

    key     = SHA-256(base)
    flip[i] = SHAKE-256(b"qflip-expand-v1" || key || i as u64 big-endian)[:L]

Each derived buffer depends only on ``(base, i)``, never on a shared RNG
state, so the work units run concurrently in any order and always yield
the same bytes. SHAKE-256 is an extendable-output function, so one call
squeezes any length ``L``.
"""

from __future__ import annotations

import hashlib
import logging
from concurrent import futures

from qflip.entropy.buffer import EntropyBuffer
from qflip.exceptions import InvalidFlipCountError

logger = logging.getLogger("qflip")

_DOMAIN = b"qflip-expand-v1"

FlipSet = tuple[EntropyBuffer, ...]


def validate_flip_count(flips: int) -> None:
    """Raise :class:`InvalidFlipCountError` unless *flips* is at least 1."""
    if isinstance(flips, bool) or not isinstance(flips, int) or flips < 1:
        raise InvalidFlipCountError(f"Flip count must be an integer >= 1, got {flips!r}")


def expansion_key(base: EntropyBuffer) -> bytes:
    """Return the 32-byte key all derived buffers are computed from."""
    return hashlib.sha256(base.data).digest()


def derive_buffer(key: bytes, index: int, length: int) -> EntropyBuffer:
    """Derive flip *index* of *length* bytes from *key*.

    Pure function of its arguments; safe to call from any thread.
    """
    xof = hashlib.shake_256(_DOMAIN + key + index.to_bytes(8, "big"))
    return EntropyBuffer(xof.digest(length))


class FlipExpander:
    """Expands one base buffer into a FlipSet of *N* equal-length buffers.

    Args:
        max_workers: Thread pool size for the derived buffers. hashlib
            releases the GIL on large inputs, so threads run in parallel.
    """

    def __init__(self, max_workers: int = 8) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        self._max_workers = max_workers

    def expand(self, base: EntropyBuffer, flips: int) -> FlipSet:
        """Build the FlipSet for *flips* flips.

        Args:
            base: Entropy acquired from the source chain. Must be non-empty.
            flips: Number of flips, at least 1.

        Returns:
            ``(base,)`` when *flips* is 1, otherwise ``flips - 1`` derived
            buffers in index order followed by *base* unmodified.

        Raises:
            InvalidFlipCountError: If *flips* is below 1.
            ValueError: If *base* is empty.
        """
        validate_flip_count(flips)
        if not len(base):
            raise ValueError("Cannot expand an empty entropy buffer")
        if flips == 1:
            return (base,)

        key = expansion_key(base)
        length = len(base)
        derived_count = flips - 1
        workers = min(self._max_workers, derived_count)

        with futures.ThreadPoolExecutor(max_workers=workers, thread_name_prefix="qflip-expand") as pool:
            # map() preserves index order regardless of completion order.
            derived = list(pool.map(lambda i: derive_buffer(key, i, length), range(derived_count)))

        logger.debug("Expanded %d-byte base into %d flips using %d worker(s)", length, flips, workers)
        return (*derived, base)
