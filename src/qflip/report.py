"""Human-readable rendering of a :class:`~qflip.pipeline.FlipReport`."""

from __future__ import annotations

from typing import TYPE_CHECKING

from qflip.tally import Outcome

if TYPE_CHECKING:
    from qflip.pipeline import FlipReport

_BOLD_GREEN = "\x1b[1;32m"
_BOLD_RED = "\x1b[1;31m"
_RESET = "\x1b[0m"


def format_count(value: int) -> str:
    """Format an integer with comma thousands separators (``1,234,567``)."""
    return f"{value:,}"


def render_decision(report: FlipReport, color: bool = True) -> str:
    """Return the one-line verdict, e.g. ``yes by 1,024 votes``."""
    votes = format_count(report.tally.margin)
    if report.outcome is Outcome.YES:
        text, code = f"yes by {votes} votes", _BOLD_GREEN
    elif report.outcome is Outcome.NO:
        text, code = f"no by {votes} votes", _BOLD_RED
    else:
        return "MIRACLE! It's a tie"
    return f"{code}{text}{_RESET}" if color else text


def render_report(report: FlipReport, color: bool = True) -> str:
    """Render the full multi-line report printed by the CLI."""
    tally = report.tally
    lines = [
        f"Entropy: {format_count(report.bytes_per_flip)} bytes from {report.source.name}",
    ]
    if report.saved_path is not None:
        lines.append(f"Saved entropy hex to {report.saved_path}")
    lines.extend(
        [
            f"Flips: {format_count(report.flips)}",
            f"Generated {format_count(tally.total_bits)} total bits: "
            f"{format_count(tally.ones)} ones, {format_count(tally.zeros)} zeros",
            f"Ratio: {tally.ones_ratio:.6f} ones per bit",
            render_decision(report, color=color),
        ]
    )
    return "\n".join(lines)
