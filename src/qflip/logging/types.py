"""Data types for the run logging subsystem."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class FlipRunRecord:
    """Immutable record of one decision run.

    Attributes:
        timestamp_ns: Wall-clock time the run finished (ns since epoch).
        acquire_ms: Time spent in the source chain (milliseconds).
        expand_ms: Time spent expanding flips (milliseconds).
        tally_ms: Time spent tallying bits (milliseconds).
        total_ms: Total pipeline time (milliseconds).
        source_used: Name of the source that provided the base entropy.
        source_rank: 1-based chain position of that source.
        is_fallback: True if any earlier source failed first.
        bytes_per_flip: Length of the base buffer.
        flips: Number of flips tallied.
        ones: Total 1-bits.
        zeros: Total 0-bits.
        outcome: ``'yes'``, ``'no'`` or ``'tie'``.
        saved_path: Where the entropy was written, empty if not written.
        config_hash: 16-char SHA-256 prefix of the active config.
    """

    # Timing
    timestamp_ns: int
    acquire_ms: float
    expand_ms: float
    tally_ms: float
    total_ms: float

    # Entropy source
    source_used: str
    source_rank: int
    is_fallback: bool

    # Flips
    bytes_per_flip: int
    flips: int

    # Tally
    ones: int
    zeros: int
    outcome: str

    # Output
    saved_path: str

    # Config snapshot
    config_hash: str
