"""Configuration system for qflip.

Uses pydantic-settings for declarative, layered configuration:
init kwargs -> environment variables (QFLIP_*) -> .env file -> field defaults.

Command-line overrides are applied via resolve_config() which creates a new
config instance without mutating the defaults.
"""

from __future__ import annotations

from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from qflip.exceptions import ConfigValidationError

_LOG_LEVELS: frozenset[str] = frozenset({"none", "summary", "full"})

# All known config field names (populated after class definition).
_ALL_FIELDS: frozenset[str] = frozenset()


class QFlipConfig(BaseSettings):
    """Configuration for qflip.

    Resolution order: init kwargs -> env vars (QFLIP_*) -> .env file -> defaults.

    Fields are grouped as:
    - **Sources**: service URLs, timeout, and the fallback order.
    - **Files**: where acquired entropy is written and read back from.
    - **Run**: byte count, flip count, and parallelism.
    - **Logging**: verbosity and in-memory diagnostics.
    """

    model_config = SettingsConfigDict(
        env_prefix="QFLIP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Sources ---

    qrandom_url: str = Field(
        default="https://qrandom.io/api/random/binary",
        description="qrandom.io binary endpoint (returns JSON with a binaryURL)",
    )
    anu_url: str = Field(
        default="https://qrng.anu.edu.au/API/jsonI.php",
        description="ANU QRNG JSON endpoint",
    )
    anu_max_block: int = Field(
        default=1024,
        description="Maximum uint8 values requested from ANU per HTTP call",
    )
    http_timeout_s: float = Field(
        default=10.0,
        description="Per-request HTTP timeout in seconds",
    )
    source_order: list[str] = Field(
        default_factory=lambda: ["qrandom", "anu", "user", "system", "saved"],
        description="Entropy sources in priority order",
    )
    entropy_hex: str = Field(
        default="",
        description="User-supplied entropy as a hex string (bypasses network sources)",
    )
    entropy_file: str = Field(
        default="",
        description="Path to user-supplied entropy, hex text or raw bytes",
    )

    # --- Files ---

    output_path: str = Field(
        default="qrandom_bytes.hex",
        description="Where acquired entropy is written as hex",
    )
    default_output_path: str = Field(
        default="qrandom_bytes.hex",
        description="Redirect target when output_path already exists",
    )
    saved_entropy_path: str = Field(
        default="qrandom_bytes.hex",
        description="Hex file from a previous run, read as the last-resort source",
    )

    # --- Run ---

    num_bytes: int = Field(
        default=1024,
        description="Entropy bytes to acquire (bytes per flip)",
    )
    flips: int = Field(
        default=1,
        description="Number of flips tallied into the decision",
    )
    max_workers: int = Field(
        default=8,
        description="Thread pool size for expansion and tally",
    )
    tally_chunk_size: int = Field(
        default=1 << 20,
        description="Bytes per tally work unit",
    )

    # --- Logging ---

    log_level: str = Field(
        default="summary",
        description="Run logging verbosity: 'none', 'summary', 'full'",
    )
    diagnostic_mode: bool = Field(
        default=False,
        description="Store all run records in memory for analysis",
    )


_ALL_FIELDS = frozenset(QFlipConfig.model_fields.keys())


def validate_config(config: QFlipConfig) -> None:
    """Check semantic constraints that field types cannot express.

    The flip count is deliberately not checked here; it is validated by the
    pipeline so that it surfaces as ``InvalidFlipCountError``.

    Args:
        config: The configuration to check.

    Raises:
        ConfigValidationError: If a size is non-positive, the log level is
            unknown, or ``source_order`` names an unregistered source.
    """
    for field_name in ("num_bytes", "anu_max_block", "max_workers", "tally_chunk_size"):
        if getattr(config, field_name) <= 0:
            raise ConfigValidationError(f"{field_name} must be positive")
    if config.http_timeout_s <= 0:
        raise ConfigValidationError("http_timeout_s must be positive")
    if config.log_level not in _LOG_LEVELS:
        raise ConfigValidationError(
            f"Unknown log_level {config.log_level!r}; expected one of {sorted(_LOG_LEVELS)}"
        )
    if not config.source_order:
        raise ConfigValidationError("source_order must name at least one source")

    # Imported here so that every built-in source has registered itself.
    from qflip.entropy.registry import get_source_class

    for name in config.source_order:
        try:
            get_source_class(name)
        except KeyError as exc:
            raise ConfigValidationError(exc.args[0]) from exc


def resolve_config(
    defaults: QFlipConfig,
    overrides: dict[str, Any] | None,
) -> QFlipConfig:
    """Create a new config instance merging defaults with overrides.

    ``None`` values are treated as "not given" and skipped, which lets the
    CLI pass its parsed namespace straight through.

    Args:
        defaults: The base configuration loaded from the environment.
        overrides: Field values to apply on top of the defaults.

    Returns:
        A new QFlipConfig with overrides applied, or *defaults* itself when
        there is nothing to apply.

    Raises:
        ConfigValidationError: If a key does not name a config field.
    """
    if not overrides:
        return defaults

    applied: dict[str, Any] = {}
    for key, value in overrides.items():
        if key not in _ALL_FIELDS:
            raise ConfigValidationError(f"Unknown config field: {key!r}")
        if value is not None:
            applied[key] = value

    if not applied:
        return defaults

    # model_validate (not model_copy) so values are coerced and checked.
    merged = defaults.model_dump()
    merged.update(applied)
    return QFlipConfig.model_validate(merged)
