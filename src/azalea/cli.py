"""
Azalea command line interface.

Commands:
- run:      Execute an Azalea source file
- eval:     Execute inline code
- tokens:   Show the token stream of a file
- ast:      Dump the parsed AST as JSON
- keywords: Show canonical keywords and their synonyms
- repl:     Read-eval-print loop on one runtime
"""

from __future__ import annotations

import dataclasses
import logging
import os
import sys
from pathlib import Path
from typing import NoReturn

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from azalea._version import __version__
from azalea.core.config import InterpreterConfig, find_config, load_config
from azalea.core.errors import AzaleaError
from azalea.core.keywords import Canonical, synonyms_of
from azalea.core.tokenizer import tokenize
from azalea.runtime import Runtime
from azalea.testing import RecordingModule

app = typer.Typer(
    help="Azalea - a permissive, synonym-rich scripting language",
    no_args_is_help=True,
)

console = Console()

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _configure_logging(verbose: bool) -> None:
    """Log to stderr at DEBUG with --verbose, else at AZALEA_LOG_LEVEL (WARNING)."""
    if verbose:
        level = logging.DEBUG
    else:
        level_name = os.getenv("AZALEA_LOG_LEVEL", "WARNING").upper()
        level = getattr(logging, level_name, logging.WARNING)
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr, force=True)


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"Azalea version {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """Azalea interpreter."""


def _fail(message: str) -> NoReturn:
    console.print(f"[red]Error:[/red] {escape(message)}")
    raise typer.Exit(code=1)


def _load_settings(config_path: Path | None, near: Path, strict: bool) -> InterpreterConfig:
    """Explicit --config, else the nearest azalea.toml, else defaults."""
    path = config_path or find_config(near)
    try:
        config = load_config(path) if path else InterpreterConfig()
    except AzaleaError as e:
        _fail(str(e))
    if strict:
        config = dataclasses.replace(config, strict=True)
    return config


def _make_runtime(
    config: InterpreterConfig, record_modules: bool
) -> tuple[Runtime, list[RecordingModule]]:
    runtime = Runtime(config=config, output=typer.echo)
    recorders: list[RecordingModule] = []
    if record_modules:
        for name in sorted(config.capabilities.modules):
            recorder = RecordingModule(name=name)
            runtime.register_module(name, recorder)
            recorders.append(recorder)
    return runtime, recorders


def _show_recorded_calls(recorders: list[RecordingModule]) -> None:
    calls = [call for recorder in recorders for call in recorder.calls]
    if not calls:
        console.print("[dim]No module calls recorded[/dim]")
        return
    table = Table(title="Module Calls")
    table.add_column("Module", style="cyan")
    table.add_column("Method", style="green")
    table.add_column("Arguments")
    for call in calls:
        table.add_row(call.module, call.method, escape(", ".join(repr(a) for a in call.args)))
    console.print(table)


def _execute(
    source: str,
    source_name: str,
    config: InterpreterConfig,
    record_modules: bool,
) -> None:
    runtime, recorders = _make_runtime(config, record_modules)
    try:
        result = runtime.execute(source, source_name=source_name)
    except AzaleaError as e:
        _fail(str(e))
    except RecursionError:
        _fail("Maximum recursion depth exceeded")

    for recovery in runtime.recoveries:
        logging.getLogger(__name__).info("Recovered: %s", recovery)
    if not result.is_void:
        console.print(f"[dim]=>[/dim] {escape(result.to_text())}")
    if record_modules:
        _show_recorded_calls(recorders)


def _read_source(file: Path) -> str:
    try:
        return file.read_text(encoding="utf-8")
    except OSError as e:
        _fail(f"Cannot read {file}: {e}")


@app.command()
def run(
    file: Path = typer.Argument(..., help="Azalea source file"),
    strict: bool = typer.Option(False, "--strict", help="Raise on recoveries and anomalies"),
    config_path: Path | None = typer.Option(
        None, "--config", "-c", help="Path to azalea.toml"
    ),
    record_modules: bool = typer.Option(
        False, "--record-modules", help="Record module calls instead of performing them"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Execute an Azalea source file."""
    _configure_logging(verbose)
    source = _read_source(file)
    config = _load_settings(config_path, file.parent, strict)
    _execute(source, str(file), config, record_modules)


@app.command("eval")
def eval_command(
    code: str = typer.Argument(..., help="Azalea code to run"),
    strict: bool = typer.Option(False, "--strict", help="Raise on recoveries and anomalies"),
    config_path: Path | None = typer.Option(
        None, "--config", "-c", help="Path to azalea.toml"
    ),
    record_modules: bool = typer.Option(
        False, "--record-modules", help="Record module calls instead of performing them"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Execute inline Azalea code."""
    _configure_logging(verbose)
    config = _load_settings(config_path, Path.cwd(), strict)
    _execute(code, "<eval>", config, record_modules)


@app.command()
def tokens(
    file: Path = typer.Argument(..., help="Azalea source file"),
) -> None:
    """Show the token stream of a file."""
    source = _read_source(file)
    table = Table(title=f"Tokens: {file.name}")
    table.add_column("Line", justify="right", style="dim")
    table.add_column("Col", justify="right", style="dim")
    table.add_column("Kind", style="cyan")
    table.add_column("Lexeme")
    for token in tokenize(source):
        table.add_row(str(token.line), str(token.column), token.kind.value, escape(token.lexeme))
    console.print(table)


@app.command()
def ast(
    file: Path = typer.Argument(..., help="Azalea source file"),
    strict: bool = typer.Option(False, "--strict", help="Fail instead of recovering"),
) -> None:
    """Dump the parsed AST as JSON."""
    source = _read_source(file)
    config = _load_settings(None, file.parent, strict)
    runtime = Runtime(config=config)
    try:
        program = runtime.parse(source, source_name=str(file))
    except AzaleaError as e:
        _fail(str(e))
    typer.echo(program.model_dump_json(indent=2, exclude_defaults=True))


@app.command()
def keywords() -> None:
    """Show every canonical keyword with its accepted spellings."""
    table = Table(title="Azalea Keywords")
    table.add_column("Canonical", style="cyan")
    table.add_column("Synonyms")
    for canonical in Canonical:
        table.add_row(canonical.value, escape(" ".join(synonyms_of(canonical))))
    console.print(table)


@app.command()
def repl(
    strict: bool = typer.Option(False, "--strict", help="Raise on recoveries and anomalies"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Run statements line by line on one runtime. Exit with :quit or EOF."""
    _configure_logging(verbose)
    config = _load_settings(None, Path.cwd(), strict)
    runtime = Runtime(config=config, output=typer.echo)

    while True:
        try:
            line = input("az> ")
        except EOFError:
            break
        if line.strip() in (":quit", ":q"):
            break
        if not line.strip():
            continue
        try:
            result = runtime.execute(line, source_name="<repl>")
        except AzaleaError as e:
            console.print(f"[red]Error:[/red] {escape(str(e))}")
            continue
        if not result.is_void:
            console.print(f"[dim]=>[/dim] {escape(result.to_text())}")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
