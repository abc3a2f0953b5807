"""Tests for hex storage and output-path conflict handling."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest

from qflip.entropy.buffer import EntropyBuffer
from qflip.exceptions import OutputPathConflictError
from qflip.storage import (
    check_output_path,
    decode_hex,
    read_hex_file,
    resolve_output_path,
    save_entropy,
)

if TYPE_CHECKING:
    from pathlib import Path


class TestDecodeHex:
    def test_plain(self) -> None:
        assert decode_hex("00ff") == b"\x00\xff"

    def test_prefix(self) -> None:
        assert decode_hex("0x00ff") == b"\x00\xff"

    def test_invalid(self) -> None:
        with pytest.raises(ValueError):
            decode_hex("0xg0")


class TestOutputPath:
    """Conflict detection and redirect."""

    def test_new_path_is_used(self, tmp_path: Path) -> None:
        target = tmp_path / "custom.hex"
        assert check_output_path(target, tmp_path / "default.hex") == target

    def test_existing_default_may_be_overwritten(self, tmp_path: Path) -> None:
        default = tmp_path / "default.hex"
        default.write_text("00")
        assert check_output_path(default, default) == default

    def test_existing_custom_path_conflicts(self, tmp_path: Path) -> None:
        target = tmp_path / "custom.hex"
        target.write_text("00")
        with pytest.raises(OutputPathConflictError) as excinfo:
            check_output_path(target, tmp_path / "default.hex")
        assert excinfo.value.path == str(target)

    def test_conflict_redirects_with_warning(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        target = tmp_path / "custom.hex"
        target.write_text("00")
        default = tmp_path / "default.hex"

        with caplog.at_level(logging.WARNING, logger="qflip"):
            assert resolve_output_path(target, default) == default
        assert "already exists" in caplog.text


class TestSaveEntropy:
    """Writing entropy files."""

    def test_writes_hex(self, tmp_path: Path) -> None:
        target = tmp_path / "out.hex"
        written = save_entropy(EntropyBuffer(b"\xde\xad"), target, tmp_path / "default.hex")
        assert written == target
        assert target.read_text() == "dead"
        assert read_hex_file(target) == b"\xde\xad"

    def test_does_not_clobber_existing_custom_file(self, tmp_path: Path) -> None:
        target = tmp_path / "precious.hex"
        target.write_text("cafe")
        default = tmp_path / "default.hex"

        written = save_entropy(EntropyBuffer(b"\x01"), target, default)
        assert written == default
        assert target.read_text() == "cafe"
        assert default.read_text() == "01"

    def test_unwritable_target_falls_back_to_default(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        target = tmp_path / "missing" / "out.hex"
        default = tmp_path / "default.hex"

        with caplog.at_level(logging.WARNING, logger="qflip"):
            written = save_entropy(EntropyBuffer(b"\xbe\xef"), target, default)

        assert written == default
        assert default.read_text() == "beef"
        assert "Could not save entropy" in caplog.text

    def test_unwritable_default_returns_none(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        target = tmp_path / "missing" / "out.hex"
        default = tmp_path / "also_missing" / "default.hex"

        with caplog.at_level(logging.ERROR, logger="qflip"):
            assert save_entropy(EntropyBuffer(b"\x01"), target, default) is None
        assert "default path" in caplog.text

    def test_unwritable_default_as_target_returns_none(self, tmp_path: Path) -> None:
        default = tmp_path / "missing" / "default.hex"
        assert save_entropy(EntropyBuffer(b"\x01"), default, default) is None
