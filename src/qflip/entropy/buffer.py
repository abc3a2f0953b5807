"""Immutable entropy byte buffer with bit-level accessors.

Bit numbering is LSB-first within each byte: bit ``i`` of the buffer is
bit ``i % 8`` of byte ``i // 8``, where bit 0 is the least significant
bit (``byte >> (i % 8) & 1``). Tallies do not depend on this choice, but
:meth:`EntropyBuffer.bit` and :meth:`EntropyBuffer.bits` do.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from qflip.storage import decode_hex


@dataclass(frozen=True, slots=True)
class EntropyBuffer:
    """An owned, immutable sequence of entropy bytes.

    Attributes:
        data: The raw bytes. Any bytes-like input is copied into ``bytes``.
    """

    data: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.data, bytes):
            object.__setattr__(self, "data", bytes(self.data))

    def __len__(self) -> int:
        return len(self.data)

    @property
    def bit_length(self) -> int:
        """Number of bits held, ``len(data) * 8``."""
        return len(self.data) * 8

    def bit(self, index: int) -> int:
        """Return bit *index* (0 or 1) using LSB-first order.

        Raises:
            IndexError: If *index* is outside ``[0, bit_length)``.
        """
        if not 0 <= index < self.bit_length:
            raise IndexError(f"bit index {index} out of range for {self.bit_length} bits")
        return (self.data[index >> 3] >> (index & 7)) & 1

    def bits(self) -> np.ndarray:
        """Return every bit as a ``uint8`` array in LSB-first order."""
        return np.unpackbits(self.as_array(), bitorder="little")

    def as_array(self) -> np.ndarray:
        """Return a read-only ``uint8`` view over the bytes (no copy)."""
        return np.frombuffer(self.data, dtype=np.uint8)

    def to_hex(self) -> str:
        """Lowercase hex, no prefix."""
        return self.data.hex()

    @classmethod
    def from_hex(cls, text: str) -> EntropyBuffer:
        """Parse a hex string with an optional ``0x`` prefix.

        Surrounding whitespace is ignored.

        Raises:
            ValueError: If the remaining text is not valid hex.
        """
        return cls(decode_hex(text))
