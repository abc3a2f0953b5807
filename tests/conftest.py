"""Shared pytest fixtures for qflip tests.

Provides configuration factories that keep every file the pipeline
touches inside ``tmp_path``, plus a few canonical entropy buffers.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest

from qflip.config import QFlipConfig
from qflip.entropy.buffer import EntropyBuffer

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


@pytest.fixture
def hex_path(tmp_path: Path) -> Path:
    """Default output / saved-entropy path inside the test's tmp dir."""
    return tmp_path / "qrandom_bytes.hex"


@pytest.fixture
def make_config(hex_path: Path) -> Callable[..., QFlipConfig]:
    """Return a factory building configs isolated from ``.env`` and the CWD.

    All three file paths default to ``hex_path`` and logging is silenced;
    keyword arguments override any field.
    """

    def _make(**overrides: Any) -> QFlipConfig:
        fields: dict[str, Any] = {
            "output_path": str(hex_path),
            "default_output_path": str(hex_path),
            "saved_entropy_path": str(hex_path),
            "log_level": "none",
        }
        fields.update(overrides)
        return QFlipConfig(_env_file=None, **fields)  # type: ignore[call-arg]

    return _make


@pytest.fixture
def default_config(make_config: Callable[..., QFlipConfig]) -> QFlipConfig:
    """An isolated config with all other fields at their defaults."""
    return make_config()


@pytest.fixture
def random_buffer() -> EntropyBuffer:
    """A 4 KiB buffer of fixed pseudo-random bytes (seeded, reproducible)."""
    import numpy as np

    rng = np.random.default_rng(seed=12345)
    return EntropyBuffer(rng.integers(0, 256, size=4096, dtype=np.uint8).tobytes())
