"""Hex file storage for acquired entropy.

Acquired entropy is written once per run as lowercase hex. A non-default
output path that already exists is never overwritten: the write is
redirected to the default path and a warning is logged. The same
redirect applies when the requested path cannot be written.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from qflip.exceptions import OutputPathConflictError

if TYPE_CHECKING:
    from qflip.entropy.buffer import EntropyBuffer

logger = logging.getLogger("qflip")


def decode_hex(text: str) -> bytes:
    """Decode hex text with an optional ``0x`` prefix.

    Raises:
        ValueError: If the text is not valid hex.
    """
    cleaned = text.strip()
    if cleaned[:2].lower() == "0x":
        cleaned = cleaned[2:]
    return bytes.fromhex(cleaned)


def read_hex_file(path: str | Path) -> bytes:
    """Read and decode a hex file.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the file content is not valid hex.
    """
    return decode_hex(Path(path).read_text(encoding="ascii"))


def check_output_path(path: str | Path, default_path: str | Path) -> Path:
    """Return *path* if it may be written.

    Raises:
        OutputPathConflictError: If *path* is not the default path and
            already exists.
    """
    target = Path(path)
    if target.exists() and target.resolve() != Path(default_path).resolve():
        raise OutputPathConflictError(str(target))
    return target


def resolve_output_path(path: str | Path, default_path: str | Path) -> Path:
    """Pick the path to write to, redirecting to the default on conflict."""
    try:
        return check_output_path(path, default_path)
    except OutputPathConflictError as exc:
        logger.warning("%s; writing to default path %r instead", exc, str(default_path))
        return Path(default_path)


def _write_hex(buffer: EntropyBuffer, target: Path) -> None:
    target.write_text(buffer.to_hex(), encoding="ascii")
    logger.info("Saved %d bytes of entropy as hex to %s", len(buffer), target)


def save_entropy(
    buffer: EntropyBuffer,
    path: str | Path,
    default_path: str | Path,
) -> Path | None:
    """Write *buffer* as hex, honouring the output-path conflict rule.

    Saving never fails the run. If the requested path cannot be written
    the default path is tried instead; if that fails too the error is
    logged and nothing is saved.

    Args:
        buffer: The entropy to persist.
        path: The requested output path.
        default_path: The path used when *path* is occupied or unwritable.

    Returns:
        The path actually written, or ``None`` if no write succeeded.
    """
    target = resolve_output_path(path, default_path)
    default = Path(default_path)
    try:
        _write_hex(buffer, target)
        return target
    except OSError as exc:
        if target.resolve() == default.resolve():
            logger.error("Could not save entropy to %s: %s", target, exc)
            return None
        logger.warning(
            "Could not save entropy to %s (%s); writing to default path %r instead",
            target,
            exc,
            str(default),
        )

    try:
        _write_hex(buffer, default)
    except OSError as exc:
        logger.error("Could not save entropy to default path %s: %s", default, exc)
        return None
    return default
