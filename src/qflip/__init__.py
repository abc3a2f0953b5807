"""qflip: yes/no decisions from quantum entropy.

Acquires entropy through an ordered chain of sources (two quantum HTTP
services, user input, the OS CSPRNG, a previously saved file), expands it
deterministically for multi-flip runs, and decides by majority of bits.
"""

from __future__ import annotations

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("qflip")
except PackageNotFoundError:
    __version__ = "0.0.0"

from qflip.config import QFlipConfig, resolve_config, validate_config
from qflip.entropy.buffer import EntropyBuffer
from qflip.entropy.chain import SourceChain, SourceDescriptor, build_source_chain
from qflip.exceptions import (
    AllSourcesFailedError,
    ConfigValidationError,
    InvalidFlipCountError,
    OutputPathConflictError,
    QFlipError,
    SourceUnavailableError,
)
from qflip.expansion import FlipExpander
from qflip.pipeline import FlipPipeline, FlipReport, PipelineState
from qflip.tally import BitTally, Outcome, TallyResult, decide

__all__ = [
    "AllSourcesFailedError",
    "BitTally",
    "ConfigValidationError",
    "EntropyBuffer",
    "FlipExpander",
    "FlipPipeline",
    "FlipReport",
    "InvalidFlipCountError",
    "Outcome",
    "OutputPathConflictError",
    "PipelineState",
    "QFlipConfig",
    "QFlipError",
    "SourceChain",
    "SourceDescriptor",
    "SourceUnavailableError",
    "TallyResult",
    "__version__",
    "build_source_chain",
    "decide",
    "resolve_config",
    "validate_config",
]
