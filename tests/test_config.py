from __future__ import annotations

import pytest

from ndjson_stream.config import (
    EmptyLineHandling,
    NdjsonConfig,
    admit,
    find_config_file,
    is_blank,
    load_config,
)
from ndjson_stream.errors import ConfigError


def test_defaults() -> None:
    cfg = NdjsonConfig()

    assert cfg.empty_line_handling is EmptyLineHandling.ERROR
    assert cfg.parse_rest is True


def test_with_methods_return_copies() -> None:
    cfg = NdjsonConfig()
    other = cfg.with_empty_line_handling(EmptyLineHandling.IGNORE_BLANK).with_parse_rest(False)

    assert cfg == NdjsonConfig()
    assert other.empty_line_handling is EmptyLineHandling.IGNORE_BLANK
    assert other.parse_rest is False


def test_is_blank() -> None:
    assert is_blank(b"")
    assert is_blank(b" \t\r")
    assert is_blank("\u3000\u00a0".encode("utf-8"))
    assert not is_blank(b" 1 ")
    assert not is_blank(b"\xff ")
    assert not is_blank(b"\x1c")
    assert not is_blank(b" \x1f ")


def test_admit_error_mode_admits_everything() -> None:
    cfg = NdjsonConfig()

    assert admit(b"", cfg)
    assert admit(b"   ", cfg)
    assert admit(b"{}", cfg)


def test_admit_ignore_empty() -> None:
    cfg = NdjsonConfig(empty_line_handling=EmptyLineHandling.IGNORE_EMPTY)

    assert not admit(b"", cfg)
    assert admit(b" \t", cfg)
    assert admit(b"{}", cfg)


def test_admit_ignore_blank() -> None:
    cfg = NdjsonConfig(empty_line_handling=EmptyLineHandling.IGNORE_BLANK)

    assert not admit(b"", cfg)
    assert not admit(b" \t", cfg)
    assert admit(b" {} ", cfg)
    # Idempotent, no hidden state.
    assert admit(b" {} ", cfg)


def test_load_config_missing_file_gives_defaults(tmp_path) -> None:
    assert load_config(tmp_path / "nope.yaml") == NdjsonConfig()
    assert load_config(None) == NdjsonConfig()


def test_load_config_reads_yaml(tmp_path) -> None:
    path = tmp_path / "ndjson-stream.yaml"
    path.write_text("empty_line_handling: Ignore-Blank\nparse_rest: false\n", encoding="utf-8")

    cfg = load_config(path)

    assert cfg.empty_line_handling is EmptyLineHandling.IGNORE_BLANK
    assert cfg.parse_rest is False


def test_load_config_ignores_non_mapping(tmp_path) -> None:
    path = tmp_path / "ndjson-stream.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")

    assert load_config(path) == NdjsonConfig()


def test_load_config_rejects_unknown_handling(tmp_path) -> None:
    path = tmp_path / "ndjson-stream.yaml"
    path.write_text("empty_line_handling: sometimes\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(path)


def test_load_config_rejects_non_bool_parse_rest(tmp_path) -> None:
    path = tmp_path / "ndjson-stream.yaml"
    path.write_text("parse_rest: maybe\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(path)


def test_load_config_wraps_yaml_errors(tmp_path) -> None:
    path = tmp_path / "ndjson-stream.yaml"
    path.write_text("empty_line_handling: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(path)


def test_find_config_file_walks_up(tmp_path) -> None:
    cfg_path = tmp_path / "ndjson-stream.yaml"
    cfg_path.write_text("parse_rest: true\n", encoding="utf-8")
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)

    assert find_config_file(nested) == cfg_path.resolve()
