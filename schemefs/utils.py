"""Shared helpers for providers and composite operations.

Key utilities:
- Chunked stream copying
- Handle mode validation
- Millisecond timestamps
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from .interfaces import DEFAULT_CHUNK_SIZE, HANDLE_MODES, InvalidOperationError

if TYPE_CHECKING:
    from typing import BinaryIO


def copy_stream(
    source: BinaryIO,
    target: BinaryIO,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> int:
    """Copy every remaining byte of ``source`` into ``target``.

    Neither stream is closed.

    Args:
        source: Readable binary stream.
        target: Writable binary stream.
        chunk_size: Size of the chunks read from ``source``.

    Returns:
        Number of bytes copied.

    """
    total = 0
    while True:
        chunk = source.read(chunk_size)
        if not chunk:
            break
        target.write(chunk)
        total += len(chunk)
    return total


def validate_handle_mode(mode: str, path: str) -> None:
    """Validate a random access mode.

    Raises:
        InvalidOperationError: If ``mode`` is not one of r, rw, rws, rwd.

    """
    if mode not in HANDLE_MODES:
        raise InvalidOperationError.unsupported_mode(mode, path)


def current_time_millis() -> int:
    """Return the current time in milliseconds since the epoch."""
    return time.time_ns() // 1_000_000
