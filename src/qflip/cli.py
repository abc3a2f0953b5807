"""Command-line entry point: ``qflip [BYTES] [--flips N] ...``.

Exit status is 0 on a decision, 1 when every entropy source failed and
2 for invalid arguments or configuration.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import TYPE_CHECKING

from pydantic import ValidationError

from qflip.config import QFlipConfig, resolve_config, validate_config
from qflip.exceptions import AllSourcesFailedError, ConfigValidationError, InvalidFlipCountError
from qflip.expansion import validate_flip_count
from qflip.pipeline import FlipPipeline
from qflip.report import render_report

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger("qflip")

EXIT_OK = 0
EXIT_ALL_SOURCES_FAILED = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="qflip",
        description="Decide yes or no from quantum entropy by majority of bits.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Examples:
  %(prog)s                          # 1024 bytes, one flip
  %(prog)s 4096 --flips 100         # 4096-byte base, 100 flips
  %(prog)s --hex 0xdeadbeef         # decide from the given bytes
  %(prog)s --source saved.hex       # decide from a hex or raw file
""",
    )
    parser.add_argument(
        "num_bytes",
        nargs="?",
        type=int,
        default=None,
        help="Entropy bytes to acquire per flip (default: 1024).",
    )
    parser.add_argument(
        "--flips",
        "-n",
        type=int,
        default=None,
        help="Number of flips to tally (default: 1).",
    )
    user = parser.add_mutually_exclusive_group()
    user.add_argument(
        "--hex",
        dest="entropy_hex",
        default=None,
        help="Use this hex string (optional 0x prefix) instead of network sources.",
    )
    user.add_argument(
        "--source",
        dest="entropy_file",
        default=None,
        help="Use entropy from this file (hex text or raw bytes) instead of network sources.",
    )
    parser.add_argument(
        "--output",
        "-o",
        dest="output_path",
        default=None,
        help="Where to save acquired entropy as hex (default: qrandom_bytes.hex).",
    )
    parser.add_argument(
        "--workers",
        dest="max_workers",
        type=int,
        default=None,
        help="Thread pool size for expansion and tally (default: 8).",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Print the decision without ANSI colors.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging.",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Parse arguments, run the pipeline and print the report."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    overrides = {
        "num_bytes": args.num_bytes,
        "flips": args.flips,
        "entropy_hex": args.entropy_hex,
        "entropy_file": args.entropy_file,
        "output_path": args.output_path,
        "max_workers": args.max_workers,
    }
    try:
        config = resolve_config(QFlipConfig(), overrides)
        validate_flip_count(config.flips)
        validate_config(config)
    except InvalidFlipCountError as exc:
        logger.error("%s", exc)
        return EXIT_USAGE
    except (ConfigValidationError, ValidationError) as exc:
        logger.error("Invalid configuration: %s", exc)
        return EXIT_USAGE

    with FlipPipeline(config) as pipeline:
        try:
            report = pipeline.run()
        except AllSourcesFailedError as exc:
            logger.error("%s", exc)
            return EXIT_ALL_SOURCES_FAILED

    print(render_report(report, color=not args.no_color and sys.stdout.isatty()))
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
