from __future__ import annotations

import enum
import logging
from collections.abc import AsyncIterable, AsyncIterator, Iterable, Iterator
from dataclasses import replace
from typing import IO, Any, Generic, TypeVar

from .chunks import Chunk
from .config import NdjsonConfig
from .decoder import Decoder
from .engine import NdjsonEngine
from .errors import InputError, JsonError
from .record import Record

T = TypeVar("T")

DEFAULT_CHUNK_SIZE = 64 * 1024

ErrorTypes = tuple[type[BaseException], ...]

logger = logging.getLogger(__name__)


class _State(enum.Enum):
    ACTIVE = "active"
    DRAINING = "draining"
    DONE = "done"


class _Driver(Generic[T]):
    """State shared by the iterator and async-iterator front ends.

    ACTIVE pulls chunks; once the source is exhausted the residual (if any) is
    queued and the driver moves to DRAINING; when the queue runs dry it is DONE.
    """

    # Fallible drivers report decode failures as JsonError so they can be told
    # apart from InputError; plain drivers pass the decoder's error through.
    _wrap_json_errors = True

    def __init__(
        self,
        decoder: Decoder[T] | None,
        config: NdjsonConfig | None,
        input_errors: Iterable[type[BaseException]],
    ):
        self._engine: NdjsonEngine[T] = NdjsonEngine(decoder, config)
        self._input_errors: ErrorTypes = tuple(input_errors)
        self._state = _State.ACTIVE

    @property
    def config(self) -> NdjsonConfig:
        return self._engine.config

    def _next_queued(self) -> Record[T] | None:
        record = self._engine.pop()
        if record is None:
            if self._state is _State.DRAINING:
                self._state = _State.DONE
            return None
        if self._wrap_json_errors and record.error is not None:
            return replace(record, error=JsonError(record.error))
        return record

    def _source_exhausted(self) -> None:
        self._engine.finalize()
        self._state = _State.DRAINING if len(self._engine) else _State.DONE
        logger.debug("source exhausted after %d line(s); %s", self._engine.lines_seen, self._state.value)

    def _input_error(self, error: BaseException) -> Record[T]:
        logger.debug("source failed after line %d: %s", self._engine.lines_seen, error)
        return Record(line_number=self._engine.lines_seen, raw=None, error=InputError(error))


class _SyncDriver(_Driver[T]):
    def __init__(
        self,
        source: Iterable[Chunk],
        decoder: Decoder[T] | None,
        config: NdjsonConfig | None,
        input_errors: Iterable[type[BaseException]],
    ):
        super().__init__(decoder, config, input_errors)
        self._source: Iterator[Chunk] = iter(source)

    def __iter__(self) -> Iterator[Record[T]]:
        return self

    def __next__(self) -> Record[T]:
        while True:
            record = self._next_queued()
            if record is not None:
                return record
            if self._state is not _State.ACTIVE:
                raise StopIteration

            try:
                chunk = next(self._source)
            except StopIteration:
                self._source_exhausted()
                continue
            except self._input_errors as e:
                return self._input_error(e)

            self._engine.input(chunk)


class _AsyncDriver(_Driver[T]):
    def __init__(
        self,
        source: AsyncIterable[Chunk],
        decoder: Decoder[T] | None,
        config: NdjsonConfig | None,
        input_errors: Iterable[type[BaseException]],
    ):
        super().__init__(decoder, config, input_errors)
        self._source: AsyncIterator[Chunk] = aiter(source)

    def __aiter__(self) -> AsyncIterator[Record[T]]:
        return self

    async def __anext__(self) -> Record[T]:
        while True:
            record = self._next_queued()
            if record is not None:
                return record
            if self._state is not _State.ACTIVE:
                raise StopAsyncIteration

            # The only suspension point: everything after runs to completion.
            try:
                chunk = await anext(self._source)
            except StopAsyncIteration:
                self._source_exhausted()
                continue
            except self._input_errors as e:
                return self._input_error(e)

            self._engine.input(chunk)


class NdjsonIter(_SyncDriver[T]):
    """Iterator of `Record`s parsed from an iterable of chunks.

    A failing record carries the decoder's exception unchanged in `error`.
    """

    _wrap_json_errors = False

    def __init__(self, source: Iterable[Chunk], decoder: Decoder[T] | None = None, config: NdjsonConfig | None = None):
        super().__init__(source, decoder, config, input_errors=())


class FallibleNdjsonIter(_SyncDriver[T]):
    """Like `NdjsonIter`, but the source itself may fail.

    An exception of one of the `input_errors` types raised while fetching a chunk
    becomes a single record with `error=InputError(exc)`; the next pull asks the
    source again. Decode failures are reported as `JsonError`.
    """

    def __init__(
        self,
        source: Iterable[Chunk],
        decoder: Decoder[T] | None = None,
        config: NdjsonConfig | None = None,
        *,
        input_errors: Iterable[type[BaseException]] = (Exception,),
    ):
        super().__init__(source, decoder, config, input_errors=input_errors)


class AsyncNdjsonIter(_AsyncDriver[T]):
    _wrap_json_errors = False

    def __init__(
        self,
        source: AsyncIterable[Chunk],
        decoder: Decoder[T] | None = None,
        config: NdjsonConfig | None = None,
    ):
        super().__init__(source, decoder, config, input_errors=())


class FallibleAsyncNdjsonIter(_AsyncDriver[T]):
    def __init__(
        self,
        source: AsyncIterable[Chunk],
        decoder: Decoder[T] | None = None,
        config: NdjsonConfig | None = None,
        *,
        input_errors: Iterable[type[BaseException]] = (Exception,),
    ):
        super().__init__(source, decoder, config, input_errors=input_errors)


class _ReadChunks:
    # Not a generator: a generator that raised once is finished, whereas a
    # failed read here can be retried on the next pull.
    def __init__(self, fp: IO[Any], chunk_size: int):
        self._fp = fp
        self._chunk_size = chunk_size

    def __iter__(self) -> _ReadChunks:
        return self

    def __next__(self) -> Chunk:
        data = self._fp.read(self._chunk_size)
        if not data:
            raise StopIteration
        return data


def from_iter(
    chunks: Iterable[Chunk],
    decoder: Decoder[T] | None = None,
    config: NdjsonConfig | None = None,
) -> NdjsonIter[T]:
    """Parse NDJSON records from an iterable of chunks.

    >>> [r.value for r in from_iter(["123\\n", "456\\n789\\n"])]
    [123, 456, 789]
    """

    return NdjsonIter(chunks, decoder, config)


def from_fallible_iter(
    chunks: Iterable[Chunk],
    decoder: Decoder[T] | None = None,
    config: NdjsonConfig | None = None,
    *,
    input_errors: Iterable[type[BaseException]] = (Exception,),
) -> FallibleNdjsonIter[T]:
    return FallibleNdjsonIter(chunks, decoder, config, input_errors=input_errors)


def from_stream(
    chunks: AsyncIterable[Chunk],
    decoder: Decoder[T] | None = None,
    config: NdjsonConfig | None = None,
) -> AsyncNdjsonIter[T]:
    return AsyncNdjsonIter(chunks, decoder, config)


def from_fallible_stream(
    chunks: AsyncIterable[Chunk],
    decoder: Decoder[T] | None = None,
    config: NdjsonConfig | None = None,
    *,
    input_errors: Iterable[type[BaseException]] = (Exception,),
) -> FallibleAsyncNdjsonIter[T]:
    return FallibleAsyncNdjsonIter(chunks, decoder, config, input_errors=input_errors)


def from_file(
    fp: IO[Any],
    decoder: Decoder[T] | None = None,
    config: NdjsonConfig | None = None,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> FallibleNdjsonIter[T]:
    """Parse an open file (binary or text) in `chunk_size` reads.

    Failed reads (`OSError`) are reported as `InputError` records.
    """

    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    return FallibleNdjsonIter(_ReadChunks(fp, chunk_size), decoder, config, input_errors=(OSError,))
