from __future__ import annotations

import logging
from collections import deque
from typing import Any, Generic, TypeVar

from .chunks import Chunk
from .config import NdjsonConfig, admit
from .decoder import Decoder, decode_line, json_decoder
from .line_buffer import LineBuffer
from .record import Record

T = TypeVar("T")

logger = logging.getLogger(__name__)


class NdjsonEngine(Generic[T]):
    """Push-style NDJSON parser.

    Feed chunks with `input`, signal the end of data with `finalize`, and collect
    results in line order with `pop`. The drivers in `ndjson_stream.driver` wrap
    this in iterator form.
    """

    def __init__(self, decoder: Decoder[T] | None = None, config: NdjsonConfig | None = None):
        self._decoder: Decoder[Any] = decoder or json_decoder
        self._config = config or NdjsonConfig()
        self._buffer = LineBuffer()
        self._out: deque[Record[T]] = deque()
        self._lines_seen = 0
        self._finalized = False

    @property
    def config(self) -> NdjsonConfig:
        return self._config

    @property
    def lines_seen(self) -> int:
        """Number of physical lines completed so far, skipped ones included."""

        return self._lines_seen

    def __len__(self) -> int:
        return len(self._out)

    def pop(self) -> Record[T] | None:
        return self._out.popleft() if self._out else None

    def _accept(self, line: bytes) -> None:
        self._lines_seen += 1
        if admit(line, self._config):
            self._out.append(decode_line(self._decoder, line, self._lines_seen))

    def input(self, chunk: Chunk) -> None:
        if self._finalized:
            raise RuntimeError("input() after finalize()")
        lines = self._buffer.feed(chunk)
        logger.debug("chunk: %d complete line(s), %d byte(s) pending", len(lines), len(self._buffer))
        for line in lines:
            self._accept(line)

    def finalize(self) -> None:
        if self._finalized:
            return
        self._finalized = True

        rest = self._buffer.flush()
        if rest is None:
            return
        if not self._config.parse_rest:
            logger.warning("dropping %d unterminated byte(s) at end of input", len(rest))
            return
        self._accept(rest)
