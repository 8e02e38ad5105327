from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from .config import DEFAULT_SEARCH_CONFIG

logger = logging.getLogger(__name__)


def unique_upload_name(filename: str | None) -> str:
    """Per-request file name: nanosecond timestamp, random token, client base name."""
    base = Path(filename or "").name or "upload"
    return f"temp_{time.time_ns()}_{uuid.uuid4().hex[:12]}_{base}"


@contextmanager
def staged_upload(
    data: bytes,
    filename: str | None,
    directory: Path | None = None,
) -> Iterator[Path]:
    """
    Write ``data`` to a uniquely named file and yield its path.

    The file is removed on every exit path. A failed removal is logged and
    never replaces the outcome of the ``with`` body.
    """
    directory = directory or DEFAULT_SEARCH_CONFIG.upload_dir
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / unique_upload_name(filename)
    path.write_bytes(data)

    try:
        yield path
    finally:
        try:
            if path.exists():
                path.unlink()
        except OSError:
            logger.warning("Failed to remove staged upload %s", path, exc_info=True)
