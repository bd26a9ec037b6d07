from __future__ import annotations


class NdjsonStreamError(Exception):
    """Base class for errors raised or reported by ndjson_stream."""


class InputError(NdjsonStreamError):
    """The chunk source failed to produce the next chunk."""

    def __init__(self, error: BaseException):
        super().__init__(f"error reading input: {error}")
        self.error = error


class JsonError(NdjsonStreamError):
    """One line could not be decoded. `error` is the decoder's own exception."""

    def __init__(self, error: BaseException):
        super().__init__(f"error parsing line: {error}")
        self.error = error


class ConfigError(NdjsonStreamError):
    pass
