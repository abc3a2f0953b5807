"""Ordered fallback chain across entropy sources.

``SourceChain`` generalises a primary/fallback pair to any number of
providers tried in priority order. Only
:class:`~qflip.exceptions.SourceUnavailableError` moves the chain on to
the next provider; **all other exceptions propagate unchanged**. Every
attempt is recorded as a :class:`SourceDescriptor` and logged.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from qflip.config import QFlipConfig
from qflip.entropy.buffer import EntropyBuffer
from qflip.entropy.registry import get_source_class
from qflip.entropy.user import has_user_entropy
from qflip.exceptions import (
    AllSourcesFailedError,
    ConfigValidationError,
    SourceUnavailableError,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from pathlib import Path

    from qflip.entropy.base import EntropySource

logger = logging.getLogger("qflip")


@dataclass(frozen=True, slots=True)
class SourceDescriptor:
    """Outcome of one acquisition attempt.

    Attributes:
        name: Source identifier.
        rank: 1-based priority of the source in ``source_order``.
        succeeded: Whether the source delivered bytes.
        byte_count: Bytes delivered (0 on failure).
        error: Failure message, empty on success.
    """

    name: str
    rank: int
    succeeded: bool
    byte_count: int
    error: str = ""


class SourceChain:
    """Tries entropy sources in order until one delivers.

    Args:
        sources: Providers in priority order.
        ranks: Priority rank reported for each source. Defaults to the
            1-based position in *sources*.
        persist: Optional callback invoked with the acquired buffer when
            the winning source has ``persists`` set. Its return value is
            exposed as :attr:`last_saved_path`.
    """

    def __init__(
        self,
        sources: Sequence[EntropySource],
        persist: Callable[[EntropyBuffer], Path | None] | None = None,
        ranks: Sequence[int] | None = None,
    ) -> None:
        if not sources:
            raise ValueError("SourceChain needs at least one source")
        if ranks is not None and len(ranks) != len(sources):
            raise ValueError(f"Got {len(ranks)} ranks for {len(sources)} sources")
        self._sources = tuple(sources)
        self._ranks = tuple(ranks) if ranks is not None else tuple(range(1, len(sources) + 1))
        self._persist = persist
        self._attempts: tuple[SourceDescriptor, ...] = ()
        self._last_saved_path: Path | None = None

    @property
    def name(self) -> str:
        """Compound name, e.g. ``'qrandom>anu>system>saved'``."""
        return ">".join(source.name for source in self._sources)

    @property
    def sources(self) -> tuple[EntropySource, ...]:
        return self._sources

    @property
    def attempts(self) -> tuple[SourceDescriptor, ...]:
        """Descriptors of every attempt made by the last :meth:`acquire`."""
        return self._attempts

    @property
    def last_saved_path(self) -> Path | None:
        """Where the last acquired buffer was written, if anywhere."""
        return self._last_saved_path

    def acquire(self, requested_len: int) -> tuple[EntropyBuffer, SourceDescriptor]:
        """Obtain a non-empty buffer from the first source that delivers.

        Args:
            requested_len: Number of bytes to ask each source for.

        Returns:
            The buffer and the descriptor of the source that provided it.

        Raises:
            AllSourcesFailedError: If every source raised
                ``SourceUnavailableError``.
        """
        attempts: list[SourceDescriptor] = []
        self._last_saved_path = None

        for rank, source in zip(self._ranks, self._sources):
            try:
                data = source.get_random_bytes(requested_len)
                if not data:
                    raise SourceUnavailableError("source returned no bytes")
            except SourceUnavailableError as exc:
                attempts.append(SourceDescriptor(source.name, rank, False, 0, str(exc)))
                logger.warning("Entropy source %r (rank %d) unavailable: %s", source.name, rank, exc)
                continue

            buffer = EntropyBuffer(data)
            descriptor = SourceDescriptor(source.name, rank, True, len(buffer))
            attempts.append(descriptor)
            self._attempts = tuple(attempts)
            logger.info("Acquired %d bytes from %r (rank %d)", len(buffer), source.name, rank)

            if self._persist is not None and source.persists:
                self._last_saved_path = self._persist(buffer)
            return buffer, descriptor

        self._attempts = tuple(attempts)
        tried = ", ".join(a.name for a in attempts)
        raise AllSourcesFailedError(f"All entropy sources failed (tried: {tried})", self._attempts)

    def close(self) -> None:
        """Close every source in the chain."""
        for source in self._sources:
            source.close()

    def health_check(self) -> dict[str, Any]:
        return {
            "source": self.name,
            "healthy": any(source.is_available for source in self._sources),
            "sources": [source.health_check() for source in self._sources],
        }


def _accepts_config(cls: type) -> bool:
    """Check if a source constructor takes a ``QFlipConfig`` first argument."""
    try:
        sig = inspect.signature(cls)
    except (ValueError, TypeError):
        return False

    for param in sig.parameters.values():
        annotation = param.annotation
        if annotation is inspect.Parameter.empty:
            return param.name == "config"
        return annotation is QFlipConfig or (
            isinstance(annotation, str) and "QFlipConfig" in annotation
        )
    return False


def _priority_rank(config: QFlipConfig, name: str) -> int:
    """1-based position of *name* in ``source_order`` (1 if absent)."""
    try:
        return config.source_order.index(name) + 1
    except ValueError:
        return 1


def build_source_chain(
    config: QFlipConfig,
    persist: Callable[[EntropyBuffer], Path | None] | None = None,
) -> SourceChain:
    """Build the chain named by ``config.source_order``.

    User-supplied entropy short-circuits the chain: when ``entropy_hex`` or
    ``entropy_file`` is set the chain holds only the ``user`` source.
    Otherwise ``user`` is skipped. Descriptors report each source's rank
    in ``source_order``, so skipping ``user`` leaves the other ranks alone.

    Args:
        config: Configuration naming the sources and their settings.
        persist: Passed through to :class:`SourceChain`.

    Raises:
        ConfigValidationError: If a name is not registered, or no source
            remains once ``user`` is skipped.
    """
    if has_user_entropy(config):
        names = ["user"]
    else:
        names = [name for name in config.source_order if name != "user"]
        if not names:
            raise ConfigValidationError(
                "source_order has no source besides 'user' and no user entropy was supplied"
            )

    try:
        classes = [get_source_class(name) for name in names]
    except KeyError as exc:
        raise ConfigValidationError(exc.args[0]) from exc

    sources: list[EntropySource] = []
    for source_cls in classes:
        if _accepts_config(source_cls):
            sources.append(source_cls(config))  # type: ignore[call-arg]
        else:
            sources.append(source_cls())

    ranks = [_priority_rank(config, name) for name in names]
    chain = SourceChain(sources, persist=persist, ranks=ranks)
    logger.debug("Built entropy source chain %s", chain.name)
    return chain
