"""Tests for report rendering."""

from __future__ import annotations

from pathlib import Path

import pytest

from qflip.entropy.chain import SourceDescriptor
from qflip.pipeline import FlipReport
from qflip.report import format_count, render_decision, render_report
from qflip.tally import TallyResult


def _report(ones: int, zeros: int, saved_path: Path | None = None) -> FlipReport:
    source = SourceDescriptor("qrandom", 1, True, 1024)
    return FlipReport(
        tally=TallyResult(ones, zeros),
        source=source,
        attempts=(source,),
        flips=1,
        bytes_per_flip=1024,
        saved_path=saved_path,
    )


class TestFormatCount:
    @pytest.mark.parametrize(
        ("value", "text"),
        [(0, "0"), (999, "999"), (1000, "1,000"), (1234567, "1,234,567"), (40_000_000, "40,000,000")],
    )
    def test_commas(self, value: int, text: str) -> None:
        assert format_count(value) == text


class TestRenderDecision:
    def test_yes(self) -> None:
        assert render_decision(_report(5000, 3192), color=False) == "yes by 1,808 votes"

    def test_no(self) -> None:
        assert render_decision(_report(10, 14), color=False) == "no by 4 votes"

    def test_tie(self) -> None:
        assert render_decision(_report(4, 4)) == "MIRACLE! It's a tie"

    def test_yes_is_bold_green(self) -> None:
        assert render_decision(_report(2, 0)) == "\x1b[1;32myes by 2 votes\x1b[0m"

    def test_no_is_bold_red(self) -> None:
        assert render_decision(_report(0, 2)) == "\x1b[1;31mno by 2 votes\x1b[0m"


class TestRenderReport:
    def test_contains_counts_and_ratio(self) -> None:
        text = render_report(_report(6144, 2048), color=False)
        assert "Generated 8,192 total bits: 6,144 ones, 2,048 zeros" in text
        assert "Ratio: 0.750000 ones per bit" in text
        assert text.endswith("yes by 4,096 votes")

    def test_mentions_saved_path(self) -> None:
        text = render_report(_report(1, 0, saved_path=Path("qrandom_bytes.hex")), color=False)
        assert "Saved entropy hex to qrandom_bytes.hex" in text

    def test_omits_saved_line_when_not_saved(self) -> None:
        assert "Saved" not in render_report(_report(1, 0), color=False)
