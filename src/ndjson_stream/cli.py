from __future__ import annotations

import json
import logging
import sys
from collections.abc import Callable
from pathlib import Path
from typing import IO, Any

import typer

from .config import NdjsonConfig, find_config_file, load_config, parse_empty_line_handling
from .driver import DEFAULT_CHUNK_SIZE, from_file
from .errors import ConfigError
from .record import Record

app = typer.Typer(add_completion=False, help="ndjson-stream: incremental NDJSON parser")


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _resolve_config(config_path: Path | None, empty_lines: str | None, no_parse_rest: bool) -> NdjsonConfig:
    # Command-line flags win over the config file.
    path = config_path if config_path is not None else find_config_file()
    try:
        cfg = load_config(path)
        if empty_lines is not None:
            cfg = cfg.with_empty_line_handling(parse_empty_line_handling(empty_lines))
    except ConfigError as e:
        typer.secho(str(e), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2) from e

    if no_parse_rest:
        cfg = cfg.with_parse_rest(False)
    return cfg


def _open_input(file: str) -> IO[bytes]:
    if file == "-":
        return sys.stdin.buffer
    try:
        return Path(file).open("rb")
    except OSError as e:
        typer.secho(f"Cannot open {file}: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2) from e


def _describe(record: Record[Any]) -> str:
    return f"line {record.line_number}: {record.error}"


def _stream(
    file: str,
    cfg: NdjsonConfig,
    chunk_size: int,
    on_record: Callable[[Record[Any]], None],
) -> tuple[int, int]:
    """Feed `file` through the parser; return (records, errors)."""

    records = 0
    errors = 0
    fp = _open_input(file)
    try:
        for record in from_file(fp, config=cfg, chunk_size=chunk_size):
            if record.ok:
                records += 1
            else:
                errors += 1
            on_record(record)
    finally:
        if fp is not sys.stdin.buffer:
            fp.close()
    return records, errors


@app.command()
def check(
    file: str = typer.Argument(..., help="NDJSON file to validate, or - for stdin"),
    empty_lines: str | None = typer.Option(
        None,
        "--empty-lines",
        help="Blank line handling: error|ignore-empty|ignore-blank",
    ),
    no_parse_rest: bool = typer.Option(False, "--no-parse-rest", help="Drop an unterminated final line"),
    chunk_size: int = typer.Option(DEFAULT_CHUNK_SIZE, "--chunk-size", min=1, help="Bytes per read"),
    config: Path | None = typer.Option(
        None,
        "--config",
        help="YAML config file (defaults to the nearest ndjson-stream.yaml)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Report every line that fails to parse."""

    _setup_logging(verbose)
    cfg = _resolve_config(config, empty_lines, no_parse_rest)

    def on_record(record: Record[Any]) -> None:
        if not record.ok:
            typer.secho(_describe(record), fg=typer.colors.RED)

    records, errors = _stream(file, cfg, chunk_size, on_record)

    color = typer.colors.GREEN if errors == 0 else typer.colors.RED
    typer.secho(f"{records} records, {errors} errors", fg=color)
    if errors:
        raise typer.Exit(code=1)


@app.command()
def cat(
    file: str = typer.Argument(..., help="NDJSON file to read, or - for stdin"),
    empty_lines: str | None = typer.Option(
        None,
        "--empty-lines",
        help="Blank line handling: error|ignore-empty|ignore-blank",
    ),
    no_parse_rest: bool = typer.Option(False, "--no-parse-rest", help="Drop an unterminated final line"),
    chunk_size: int = typer.Option(DEFAULT_CHUNK_SIZE, "--chunk-size", min=1, help="Bytes per read"),
    config: Path | None = typer.Option(
        None,
        "--config",
        help="YAML config file (defaults to the nearest ndjson-stream.yaml)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Print each decoded record as compact JSON; failures go to stderr."""

    _setup_logging(verbose)
    cfg = _resolve_config(config, empty_lines, no_parse_rest)

    def on_record(record: Record[Any]) -> None:
        if record.ok:
            typer.echo(json.dumps(record.value, ensure_ascii=False, separators=(",", ":")))
        else:
            typer.secho(_describe(record), fg=typer.colors.RED, err=True)

    _, errors = _stream(file, cfg, chunk_size, on_record)
    if errors:
        raise typer.Exit(code=1)


def main() -> None:
    # Entry point for console script.
    app()


if __name__ == "__main__":
    main()
