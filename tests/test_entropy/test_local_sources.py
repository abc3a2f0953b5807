"""Tests for the user, system and saved entropy sources."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest

from qflip.entropy.saved import SavedEntropySource
from qflip.entropy.system import SystemEntropySource
from qflip.entropy.user import UserEntropySource, has_user_entropy
from qflip.exceptions import SourceUnavailableError

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from qflip.config import QFlipConfig


class TestUserEntropySource:
    """Hex string and file input."""

    def test_hex_string_with_prefix(self, make_config: Callable[..., QFlipConfig]) -> None:
        source = UserEntropySource(make_config(entropy_hex="0xDEADBEEF"))
        assert source.get_random_bytes(4) == b"\xde\xad\xbe\xef"

    def test_hex_takes_precedence_over_file(
        self, make_config: Callable[..., QFlipConfig], tmp_path: Path
    ) -> None:
        entropy = tmp_path / "e.hex"
        entropy.write_text("00")
        source = UserEntropySource(make_config(entropy_hex="ff", entropy_file=str(entropy)))
        assert source.get_random_bytes(1) == b"\xff"

    def test_hex_file(self, make_config: Callable[..., QFlipConfig], tmp_path: Path) -> None:
        entropy = tmp_path / "e.hex"
        entropy.write_text("0x0102ff\n")
        source = UserEntropySource(make_config(entropy_file=str(entropy)))
        assert source.get_random_bytes(3) == b"\x01\x02\xff"

    def test_raw_file(self, make_config: Callable[..., QFlipConfig], tmp_path: Path) -> None:
        entropy = tmp_path / "e.bin"
        entropy.write_bytes(b"\x00\xfe\x80")
        source = UserEntropySource(make_config(entropy_file=str(entropy)))
        assert source.get_random_bytes(3) == b"\x00\xfe\x80"

    def test_length_mismatch_warns_and_uses_input(
        self, make_config: Callable[..., QFlipConfig], caplog: pytest.LogCaptureFixture
    ) -> None:
        source = UserEntropySource(make_config(entropy_hex="abcd"))
        with caplog.at_level(logging.WARNING, logger="qflip"):
            assert source.get_random_bytes(1024) == b"\xab\xcd"
        assert "requested 1024" in caplog.text

    def test_invalid_hex(self, make_config: Callable[..., QFlipConfig]) -> None:
        source = UserEntropySource(make_config(entropy_hex="0xzz"))
        with pytest.raises(SourceUnavailableError, match="Invalid hex"):
            source.get_random_bytes(1)

    def test_empty_hex_file(self, make_config: Callable[..., QFlipConfig], tmp_path: Path) -> None:
        entropy = tmp_path / "empty.hex"
        entropy.write_text("0x")
        source = UserEntropySource(make_config(entropy_file=str(entropy)))
        with pytest.raises(SourceUnavailableError, match="empty"):
            source.get_random_bytes(1)

    def test_missing_file(self, make_config: Callable[..., QFlipConfig], tmp_path: Path) -> None:
        source = UserEntropySource(make_config(entropy_file=str(tmp_path / "nope.hex")))
        assert source.is_available is False
        with pytest.raises(SourceUnavailableError, match="Cannot read"):
            source.get_random_bytes(1)

    def test_nothing_supplied(self, default_config: QFlipConfig) -> None:
        assert has_user_entropy(default_config) is False
        with pytest.raises(SourceUnavailableError):
            UserEntropySource(default_config).get_random_bytes(1)

    def test_persists(self, default_config: QFlipConfig) -> None:
        assert UserEntropySource(default_config).persists is True


class TestSystemEntropySource:
    """Tests for the os.urandom() wrapper."""

    def test_name(self) -> None:
        assert SystemEntropySource().name == "system"

    def test_is_always_available(self) -> None:
        assert SystemEntropySource().is_available is True

    def test_returns_correct_byte_count(self) -> None:
        source = SystemEntropySource()
        for n in (1, 10, 1024, 20480):
            assert len(source.get_random_bytes(n)) == n

    def test_consecutive_calls_differ(self) -> None:
        source = SystemEntropySource()
        # Statistically near-impossible for 32 random bytes to be equal.
        assert source.get_random_bytes(32) != source.get_random_bytes(32)

    def test_does_not_persist(self) -> None:
        assert SystemEntropySource().persists is False

    def test_health_check(self) -> None:
        assert SystemEntropySource().health_check() == {"source": "system", "healthy": True}


class TestSavedEntropySource:
    """Replay of a previously written hex file."""

    def test_reads_saved_hex(self, default_config: QFlipConfig, hex_path: Path) -> None:
        hex_path.write_text("00ff00ff")
        source = SavedEntropySource(default_config)
        assert source.is_available is True
        assert source.get_random_bytes(4) == b"\x00\xff\x00\xff"

    def test_truncates_to_request(self, default_config: QFlipConfig, hex_path: Path) -> None:
        hex_path.write_text("01020304")
        assert SavedEntropySource(default_config).get_random_bytes(2) == b"\x01\x02"

    def test_short_file_used_as_is(
        self, default_config: QFlipConfig, hex_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        hex_path.write_text("0102")
        with caplog.at_level(logging.WARNING, logger="qflip"):
            assert SavedEntropySource(default_config).get_random_bytes(8) == b"\x01\x02"
        assert "only 2 of 8" in caplog.text

    def test_missing_file(self, default_config: QFlipConfig) -> None:
        source = SavedEntropySource(default_config)
        assert source.is_available is False
        with pytest.raises(SourceUnavailableError, match="unusable"):
            source.get_random_bytes(4)

    def test_corrupt_file(self, default_config: QFlipConfig, hex_path: Path) -> None:
        hex_path.write_text("not hex at all")
        with pytest.raises(SourceUnavailableError):
            SavedEntropySource(default_config).get_random_bytes(4)

    def test_empty_file(self, default_config: QFlipConfig, hex_path: Path) -> None:
        hex_path.write_text("")
        with pytest.raises(SourceUnavailableError, match="empty"):
            SavedEntropySource(default_config).get_random_bytes(4)

    def test_does_not_persist(self, default_config: QFlipConfig) -> None:
        assert SavedEntropySource(default_config).persists is False
