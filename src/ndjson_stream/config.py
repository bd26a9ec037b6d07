from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError

CONFIG_FILENAME = "ndjson-stream.yaml"

# Unicode White_Space. str.isspace() also accepts U+001C..U+001F, which are not.
WHITESPACE = frozenset(
    "\t\n\x0b\x0c\r \x85\xa0\u1680"
    "\u2000\u2001\u2002\u2003\u2004\u2005\u2006\u2007\u2008\u2009\u200a"
    "\u2028\u2029\u202f\u205f\u3000"
)


class EmptyLineHandling(enum.Enum):
    # Decode every line, even empty ones (which then fail to decode).
    ERROR = "error"
    # Skip lines with no bytes at all; a `\r` before `\n` is already stripped.
    IGNORE_EMPTY = "ignore_empty"
    # Skip lines holding nothing but whitespace.
    IGNORE_BLANK = "ignore_blank"


@dataclass(frozen=True)
class NdjsonConfig:
    empty_line_handling: EmptyLineHandling = EmptyLineHandling.ERROR

    # Decode unterminated trailing bytes as a final line once the source ends.
    parse_rest: bool = True

    def with_empty_line_handling(self, empty_line_handling: EmptyLineHandling) -> NdjsonConfig:
        return replace(self, empty_line_handling=empty_line_handling)

    def with_parse_rest(self, parse_rest: bool) -> NdjsonConfig:
        return replace(self, parse_rest=parse_rest)


def is_blank(line: bytes) -> bool:
    if not line:
        return True
    try:
        text = line.decode("utf-8")
    except UnicodeDecodeError:
        return False
    return all(c in WHITESPACE for c in text)


def admit(line: bytes, config: NdjsonConfig) -> bool:
    """Whether `line` should reach the decoder under `config`."""

    handling = config.empty_line_handling
    if handling is EmptyLineHandling.IGNORE_EMPTY:
        return bool(line)
    if handling is EmptyLineHandling.IGNORE_BLANK:
        return not is_blank(line)
    return True


def parse_empty_line_handling(v: Any) -> EmptyLineHandling:
    if isinstance(v, EmptyLineHandling):
        return v
    if isinstance(v, str):
        key = v.strip().lower().replace("-", "_")
        try:
            return EmptyLineHandling(key)
        except ValueError:
            pass
    choices = ", ".join(h.value for h in EmptyLineHandling)
    raise ConfigError(f"invalid empty_line_handling {v!r} (expected one of: {choices})")


def _as_bool(v: Any, *, key: str) -> bool:
    if isinstance(v, bool):
        return v
    raise ConfigError(f"{key} must be a boolean, got {v!r}")


def find_config_file(start: Path | None = None) -> Path | None:
    """Walk up from `start` (default: cwd) to the nearest ndjson-stream.yaml."""

    cur = (start or Path.cwd()).resolve()
    for p in [cur, *cur.parents]:
        candidate = p / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def load_config(path: Path | None) -> NdjsonConfig:
    """Load an NdjsonConfig from YAML if present; otherwise return defaults."""

    data: dict[str, Any] = {}
    if path is not None and path.exists():
        try:
            loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"cannot read config {path}: {e}") from e
        if isinstance(loaded, dict):
            data = loaded

    cfg = NdjsonConfig()

    if data.get("empty_line_handling") is not None:
        cfg = cfg.with_empty_line_handling(parse_empty_line_handling(data["empty_line_handling"]))
    if data.get("parse_rest") is not None:
        cfg = cfg.with_parse_rest(_as_bool(data["parse_rest"], key="parse_rest"))

    return cfg
