"""Run logger for decision pipeline events.

Uses the standard ``logging`` module with the ``"qflip"`` logger.
Supports three verbosity levels and an in-memory diagnostic mode for
post-hoc analysis across many runs.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from qflip.config import QFlipConfig
    from qflip.logging.types import FlipRunRecord

logger = logging.getLogger("qflip")


class RunLogger:
    """Per-run diagnostic logger.

    Log levels:
        ``"none"``: No logging output. Records are still stored if
        ``diagnostic_mode=True``.

        ``"summary"``: One line per run with source, counts and outcome.

        ``"full"``: Full JSON dump of all record fields.
    """

    def __init__(self, config: QFlipConfig) -> None:
        self._log_level = config.log_level
        self._diagnostic_mode = config.diagnostic_mode
        self._records: list[FlipRunRecord] = []

    def log_run(self, record: FlipRunRecord) -> None:
        """Log a single completed run."""
        if self._diagnostic_mode:
            self._records.append(record)

        if self._log_level == "none":
            return

        if self._log_level == "summary":
            logger.info(
                "outcome=%s ones=%d zeros=%d flips=%d bytes=%d source=%s%s total=%.2fms",
                record.outcome,
                record.ones,
                record.zeros,
                record.flips,
                record.bytes_per_flip,
                record.source_used,
                " [FALLBACK]" if record.is_fallback else "",
                record.total_ms,
            )
        elif self._log_level == "full":
            logger.info("flip_record: %s", json.dumps(asdict(record), default=str))

    def get_diagnostic_data(self) -> list[FlipRunRecord]:
        """Return all stored records (empty unless ``diagnostic_mode``)."""
        return list(self._records)

    def get_summary_stats(self) -> dict[str, Any]:
        """Compute summary statistics over all stored records.

        Returns:
            Dictionary with aggregate stats, or empty dict if no records.
        """
        if not self._records:
            return {}

        n = len(self._records)
        total_bits = sum(r.ones + r.zeros for r in self._records)
        fallback_count = sum(1 for r in self._records if r.is_fallback)
        return {
            "total_runs": n,
            "yes_count": sum(1 for r in self._records if r.outcome == "yes"),
            "no_count": sum(1 for r in self._records if r.outcome == "no"),
            "tie_count": sum(1 for r in self._records if r.outcome == "tie"),
            "ones_ratio": sum(r.ones for r in self._records) / total_bits,
            "mean_acquire_ms": sum(r.acquire_ms for r in self._records) / n,
            "mean_total_ms": sum(r.total_ms for r in self._records) / n,
            "max_total_ms": max(r.total_ms for r in self._records),
            "fallback_count": fallback_count,
            "fallback_rate": fallback_count / n,
        }
