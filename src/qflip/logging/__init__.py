"""Run logging subsystem for qflip.

Provides immutable per-run records and a configurable logger that
supports none/summary/full verbosity and in-memory diagnostic mode.
"""

from qflip.logging.logger import RunLogger
from qflip.logging.types import FlipRunRecord

__all__ = [
    "FlipRunRecord",
    "RunLogger",
]
