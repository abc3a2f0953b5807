"""Exception hierarchy for qflip.

All exceptions derive from QFlipError, enabling broad catch patterns
at the CLI boundary while allowing fine-grained handling internally.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from qflip.entropy.chain import SourceDescriptor


class QFlipError(Exception):
    """Base exception for all qflip errors."""


class SourceUnavailableError(QFlipError):
    """A single entropy source could not provide bytes.

    Recoverable: the source chain records the attempt and moves on to the
    next provider.
    """


class AllSourcesFailedError(QFlipError):
    """Every source in the chain failed.

    Fatal for the run. ``attempts`` holds one descriptor per provider that
    was tried, in priority order.
    """

    def __init__(self, message: str, attempts: tuple[SourceDescriptor, ...] = ()) -> None:
        super().__init__(message)
        self.attempts = attempts


class InvalidFlipCountError(QFlipError):
    """The requested number of flips is below 1.

    Raised before any entropy is acquired.
    """


class OutputPathConflictError(QFlipError):
    """A non-default output path already exists.

    Recovered by redirecting the write to the default path with a warning.
    """

    def __init__(self, path: str) -> None:
        super().__init__(f"Output file {path!r} already exists")
        self.path = path


class ConfigValidationError(QFlipError):
    """Configuration field validation failed.

    Raised for unknown source names, non-positive sizes, or CLI overrides
    that do not map onto a config field.
    """
