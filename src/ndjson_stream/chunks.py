from __future__ import annotations

from typing import Any

Chunk = bytes | bytearray | memoryview | str


def as_bytes(chunk: Any) -> bytes | bytearray | memoryview:
    """Return the raw bytes of one input chunk.

    Text chunks are encoded as UTF-8; bytes-like chunks pass through untouched.
    """

    if isinstance(chunk, (bytes, bytearray, memoryview)):
        return chunk
    if isinstance(chunk, str):
        return chunk.encode("utf-8")
    raise TypeError(f"unsupported chunk type: {type(chunk).__name__}")
