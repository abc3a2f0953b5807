"""Decision pipeline: wires acquisition, expansion, tally and report.

The pipeline is a strictly forward state machine::

    ACQUIRE_ENTROPY -> EXPAND_FLIPS -> TALLY -> REPORT

The flip count is validated before any entropy is requested. After that
the only failure is :class:`~qflip.exceptions.AllSourcesFailedError` from
the acquisition step, which moves the pipeline to ``FAILED`` and
propagates. No partial result is ever returned.
"""

from __future__ import annotations

import enum
import functools
import hashlib
import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from qflip.config import QFlipConfig, validate_config
from qflip.entropy.chain import build_source_chain
from qflip.exceptions import AllSourcesFailedError
from qflip.expansion import FlipExpander, validate_flip_count
from qflip.logging.logger import RunLogger
from qflip.logging.types import FlipRunRecord
from qflip.storage import save_entropy
from qflip.tally import BitTally

if TYPE_CHECKING:
    from pathlib import Path

    from qflip.entropy.chain import SourceChain, SourceDescriptor
    from qflip.tally import Outcome, TallyResult

logger = logging.getLogger("qflip")


class PipelineState(enum.Enum):
    """Pipeline stages, in execution order."""

    IDLE = "idle"
    ACQUIRE_ENTROPY = "acquire_entropy"
    EXPAND_FLIPS = "expand_flips"
    TALLY = "tally"
    REPORT = "report"
    FAILED = "failed"


_ORDER = (
    PipelineState.IDLE,
    PipelineState.ACQUIRE_ENTROPY,
    PipelineState.EXPAND_FLIPS,
    PipelineState.TALLY,
    PipelineState.REPORT,
)


@dataclass(frozen=True, slots=True)
class FlipReport:
    """Result of one complete run.

    Attributes:
        tally: Aggregate bit counts over all flips.
        source: Descriptor of the source that provided the base entropy.
        attempts: Descriptors of every acquisition attempt, in order.
        flips: Number of flips tallied.
        bytes_per_flip: Length of each flip buffer.
        saved_path: Where the base entropy was written, or ``None``.
    """

    tally: TallyResult
    source: SourceDescriptor
    attempts: tuple[SourceDescriptor, ...]
    flips: int
    bytes_per_flip: int
    saved_path: Path | None

    @property
    def outcome(self) -> Outcome:
        return self.tally.outcome


def _config_hash(config: QFlipConfig) -> str:
    """First 16 hex characters of the SHA-256 of the config dump."""
    raw = config.model_dump_json().encode("utf-8")
    return hashlib.sha256(raw).hexdigest()[:16]


class FlipPipeline:
    """Runs one yes/no decision per :meth:`run` call.

    Args:
        config: Run configuration. Output and fallback file names come
            from here rather than module constants.
        chain: Optional pre-built source chain (tests inject fakes). When
            omitted the chain is built from ``config.source_order`` and
            persists acquired entropy to ``config.output_path``.
        run_logger: Optional run logger; defaults to one built from config.

    Raises:
        ConfigValidationError: If the configuration is invalid, including
            an unknown name in ``source_order``.
    """

    def __init__(
        self,
        config: QFlipConfig | None = None,
        chain: SourceChain | None = None,
        run_logger: RunLogger | None = None,
    ) -> None:
        self._config = config or QFlipConfig()
        validate_config(self._config)
        if chain is None:
            persist = functools.partial(
                save_entropy,
                path=self._config.output_path,
                default_path=self._config.default_output_path,
            )
            chain = build_source_chain(self._config, persist=persist)
        self._chain = chain
        self._expander = FlipExpander(max_workers=self._config.max_workers)
        self._tally = BitTally(
            max_workers=self._config.max_workers,
            chunk_size=self._config.tally_chunk_size,
        )
        self._run_logger = run_logger or RunLogger(self._config)
        self._config_hash = _config_hash(self._config)
        self._state = PipelineState.IDLE
        self._history: list[PipelineState] = [PipelineState.IDLE]

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def history(self) -> tuple[PipelineState, ...]:
        """States visited during the last run, in order."""
        return tuple(self._history)

    @property
    def chain(self) -> SourceChain:
        return self._chain

    def _enter(self, state: PipelineState) -> None:
        if state is not PipelineState.FAILED:
            current = _ORDER.index(self._state)
            if _ORDER.index(state) != current + 1:
                raise RuntimeError(f"Illegal pipeline transition {self._state.value} -> {state.value}")
        logger.debug("Pipeline %s -> %s", self._state.value, state.value)
        self._state = state
        self._history.append(state)

    def run(self) -> FlipReport:
        """Acquire entropy, expand it, tally it and report the decision.

        Raises:
            InvalidFlipCountError: If ``config.flips`` is below 1. Raised
                before any source is contacted.
            AllSourcesFailedError: If no source could provide entropy.
        """
        validate_flip_count(self._config.flips)
        self._state = PipelineState.IDLE
        self._history = [PipelineState.IDLE]
        t_start = time.perf_counter()

        self._enter(PipelineState.ACQUIRE_ENTROPY)
        try:
            base, source = self._chain.acquire(self._config.num_bytes)
        except AllSourcesFailedError:
            self._enter(PipelineState.FAILED)
            logger.error("Entropy acquisition failed; no decision produced")
            raise
        t_acquired = time.perf_counter()

        self._enter(PipelineState.EXPAND_FLIPS)
        flip_set = self._expander.expand(base, self._config.flips)
        t_expanded = time.perf_counter()

        self._enter(PipelineState.TALLY)
        result = self._tally.tally(flip_set)
        t_tallied = time.perf_counter()

        self._enter(PipelineState.REPORT)
        report = FlipReport(
            tally=result,
            source=source,
            attempts=self._chain.attempts,
            flips=len(flip_set),
            bytes_per_flip=len(base),
            saved_path=self._chain.last_saved_path,
        )
        self._run_logger.log_run(
            FlipRunRecord(
                timestamp_ns=time.time_ns(),
                acquire_ms=(t_acquired - t_start) * 1000.0,
                expand_ms=(t_expanded - t_acquired) * 1000.0,
                tally_ms=(t_tallied - t_expanded) * 1000.0,
                total_ms=(time.perf_counter() - t_start) * 1000.0,
                source_used=source.name,
                source_rank=source.rank,
                is_fallback=len(report.attempts) > 1,
                bytes_per_flip=report.bytes_per_flip,
                flips=report.flips,
                ones=result.ones,
                zeros=result.zeros,
                outcome=result.outcome.value,
                saved_path=str(report.saved_path or ""),
                config_hash=self._config_hash,
            )
        )
        return report

    def close(self) -> None:
        """Close every source in the chain."""
        self._chain.close()

    def __enter__(self) -> FlipPipeline:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
