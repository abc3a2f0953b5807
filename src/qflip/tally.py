"""Bit tally and majority decision across a FlipSet.

Counting is split into independent units (one per byte chunk of each
buffer) and the partial :class:`TallyResult` values are summed. Addition
of results is associative and commutative with ``TallyResult()`` as the
identity, so any partitioning and any completion order give the same
totals as a sequential count.
"""

from __future__ import annotations

import enum
import logging
from concurrent import futures
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from qflip.entropy.buffer import EntropyBuffer

logger = logging.getLogger("qflip")

# Number of set bits in each byte value.
_POPCOUNT = np.array([bin(i).count("1") for i in range(256)], dtype=np.uint8)


class Outcome(enum.Enum):
    """Majority decision over all tallied bits."""

    YES = "yes"
    NO = "no"
    TIE = "tie"


@dataclass(frozen=True, slots=True)
class TallyResult:
    """Counts of set and unset bits.

    Attributes:
        ones: Number of 1-bits examined.
        zeros: Number of 0-bits examined.
    """

    ones: int = 0
    zeros: int = 0

    def __add__(self, other: TallyResult) -> TallyResult:
        if not isinstance(other, TallyResult):
            return NotImplemented
        return TallyResult(self.ones + other.ones, self.zeros + other.zeros)

    @property
    def total_bits(self) -> int:
        return self.ones + self.zeros

    @property
    def margin(self) -> int:
        """Absolute difference between ones and zeros (the "votes")."""
        return abs(self.ones - self.zeros)

    @property
    def ones_ratio(self) -> float:
        return self.ones / self.total_bits if self.total_bits else 0.0

    @property
    def outcome(self) -> Outcome:
        return decide(self)


def decide(result: TallyResult) -> Outcome:
    """Map a tally to YES (more ones), NO (more zeros) or TIE."""
    if result.ones > result.zeros:
        return Outcome.YES
    if result.zeros > result.ones:
        return Outcome.NO
    return Outcome.TIE


def count_bits(data: bytes | np.ndarray) -> TallyResult:
    """Count set and unset bits in *data*.

    Args:
        data: Raw bytes or a ``uint8`` array.
    """
    arr = data if isinstance(data, np.ndarray) else np.frombuffer(data, dtype=np.uint8)
    ones = int(_POPCOUNT[arr].sum(dtype=np.uint64))
    return TallyResult(ones=ones, zeros=arr.size * 8 - ones)


def combine(results: Iterable[TallyResult]) -> TallyResult:
    """Sum partial results."""
    return sum(results, TallyResult())


def _check_flip_set(flip_set: Sequence[EntropyBuffer]) -> None:
    if not flip_set:
        raise ValueError("Cannot tally an empty flip set")
    for index, buffer in enumerate(flip_set):
        if not len(buffer):
            raise ValueError(f"Cannot tally empty buffer at index {index}")


def sequential_tally(flip_set: Sequence[EntropyBuffer]) -> TallyResult:
    """Reference single-threaded tally, one buffer at a time.

    Raises:
        ValueError: If *flip_set* or any buffer in it is empty.
    """
    _check_flip_set(flip_set)
    return combine(count_bits(buffer.as_array()) for buffer in flip_set)


class BitTally:
    """Parallel bit tally over a FlipSet.

    Args:
        max_workers: Thread pool size. numpy releases the GIL while
            summing, so chunks are counted concurrently.
        chunk_size: Bytes per work unit; buffers larger than this are
            split into several units.
    """

    def __init__(self, max_workers: int = 8, chunk_size: int = 1 << 20) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        if chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")
        self._max_workers = max_workers
        self._chunk_size = chunk_size

    def _units(self, flip_set: Sequence[EntropyBuffer]) -> list[np.ndarray]:
        units: list[np.ndarray] = []
        for buffer in flip_set:
            arr = buffer.as_array()
            step = self._chunk_size
            units.extend(arr[start : start + step] for start in range(0, arr.size, step))
        return units

    def tally(self, flip_set: Sequence[EntropyBuffer]) -> TallyResult:
        """Count ones and zeros across every buffer in *flip_set*.

        Raises:
            ValueError: If *flip_set* or any buffer in it is empty.
        """
        _check_flip_set(flip_set)
        units = self._units(flip_set)
        if len(units) == 1:
            return count_bits(units[0])

        workers = min(self._max_workers, len(units))
        with futures.ThreadPoolExecutor(max_workers=workers, thread_name_prefix="qflip-tally") as pool:
            pending = [pool.submit(count_bits, unit) for unit in units]
            partials = [future.result() for future in futures.as_completed(pending)]

        result = combine(partials)
        logger.debug(
            "Tallied %d bits in %d unit(s) across %d buffer(s) using %d worker(s)",
            result.total_bits,
            len(units),
            len(flip_set),
            workers,
        )
        return result
