from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from pydantic import TypeAdapter

from .record import Record

T = TypeVar("T")

# Decoders signal a bad line by raising ValueError. json.JSONDecodeError,
# UnicodeDecodeError and pydantic.ValidationError all qualify. A line nested
# too deeply for the decoder (RecursionError) is a bad line as well.
Decoder = Callable[[bytes], T]

logger = logging.getLogger(__name__)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant: {name}")


def json_decoder(line: bytes) -> Any:
    # Lines are strict UTF-8; json.loads(bytes) would also guess UTF-16/32.
    return json.loads(line.decode("utf-8"), parse_constant=_reject_constant)


class ModelDecoder(Generic[T]):
    """Decode lines into `type_` using pydantic (models, dataclasses, TypedDicts, ...)."""

    def __init__(self, type_: type[T] | Any):
        self.type_ = type_
        self._adapter: TypeAdapter[T] = TypeAdapter(type_)

    def __call__(self, line: bytes) -> T:
        return self._adapter.validate_json(line)

    def __repr__(self) -> str:
        return f"ModelDecoder({self.type_!r})"


def decode_line(decoder: Decoder[T], line: bytes, line_number: int) -> Record[T]:
    try:
        value = decoder(line)
    except (ValueError, RecursionError) as e:
        logger.debug("line %d: decode failed: %s", line_number, e)
        return Record(line_number=line_number, raw=line, error=e)
    return Record(line_number=line_number, raw=line, value=value)
