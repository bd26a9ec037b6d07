from __future__ import annotations

from .chunks import Chunk, as_bytes

NEW_LINE = ord("\n")
CARRIAGE_RETURN = ord("\r")


def _strip_cr(data: bytes | bytearray, end: int, start: int = 0) -> int:
    if end > start and data[end - 1] == CARRIAGE_RETURN:
        return end - 1
    return end


class LineBuffer:
    """Assembles complete lines out of arbitrarily split chunks.

    Between calls the pending tail never holds a `\\n`, so a scan only has to
    look at the bytes appended by the latest chunk.
    """

    def __init__(self) -> None:
        self._pending = bytearray()

    def __len__(self) -> int:
        return len(self._pending)

    def feed(self, chunk: Chunk) -> list[bytes]:
        data = as_bytes(chunk)
        if not data:
            return []

        pending = self._pending
        scan_from = len(pending)
        pending += data

        lines: list[bytes] = []
        start = 0
        while True:
            idx = pending.find(NEW_LINE, scan_from)
            if idx < 0:
                break
            end = _strip_cr(pending, idx, start)
            lines.append(bytes(pending[start:end]))
            start = scan_from = idx + 1

        if start:
            # Drop consumed bytes; only the unterminated tail stays.
            del pending[:start]
        return lines

    def flush(self) -> bytes | None:
        """Return the unterminated residual (if any) and clear the buffer."""

        pending = self._pending
        end = _strip_cr(pending, len(pending))
        rest = bytes(pending[:end])
        pending.clear()
        return rest or None
