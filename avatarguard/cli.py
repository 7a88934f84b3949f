"""CLI interface."""
from __future__ import annotations

import json
import logging
from typing import Any, Callable, Optional

import typer

from avatarguard.models.report import ValidationReport
from avatarguard.tools.definition_validator import validate_definition
from avatarguard.tools.json_schema import schema_errors, schema_for
from avatarguard.tools.options_validator import validate_options
from avatarguard.utils.config import MAX_DEPTH_LIMIT, settings
from avatarguard.utils.file_utils import read_json_file

app = typer.Typer(add_completion=False, help="Validate avatar definition and options documents.")

EXIT_INVALID = 1
EXIT_UNREADABLE = 2


@app.callback()
def main(log_level: Optional[str] = typer.Option(None, "--log-level", help="Override the configured log level.")):
    logging.basicConfig(level=(log_level or settings.log_level).upper())


def _load(path: str) -> Any:
    try:
        return read_json_file(path)
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=EXIT_UNREADABLE)


def _emit(report: ValidationReport, as_json: bool) -> None:
    if as_json:
        typer.echo(json.dumps(report.model_dump(mode="json"), indent=2))
    elif report.valid:
        typer.echo("valid")
    else:
        for violation in report.violations:
            typer.echo(f"{violation.path or '/'}: [{violation.category.value}:{violation.code.value}] {violation.message}")
    if not report.valid:
        raise typer.Exit(code=EXIT_INVALID)


def _run(validate: Callable[[Any], ValidationReport], path: str, as_json: bool) -> None:
    _emit(validate(_load(path)), as_json)


@app.command()
def definition(
    path: str = typer.Argument(..., help="Path to a definition JSON file."),
    as_json: bool = typer.Option(False, "--json", help="Print the report as JSON."),
    max_depth: Optional[int] = typer.Option(None, "--max-depth", min=1, max=MAX_DEPTH_LIMIT, help="Maximum element nesting depth."),
):
    """Validate a definition document."""
    _run(lambda document: validate_definition(document, max_depth=max_depth), path, as_json)


@app.command()
def options(
    path: str = typer.Argument(..., help="Path to an options JSON file."),
    as_json: bool = typer.Option(False, "--json", help="Print the report as JSON."),
):
    """Validate an options document."""
    _run(validate_options, path, as_json)


@app.command()
def schema(
    kind: str = typer.Argument(..., help="Document kind: definition or options."),
    path: Optional[str] = typer.Argument(None, help="Check this JSON file against the schema instead of printing it."),
):
    """Print the JSON Schema for a document kind, or check a file against it."""
    try:
        document = schema_for(kind)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="KIND")
    if path is None:
        typer.echo(json.dumps(document, indent=2))
        return
    errors = schema_errors(kind, _load(path))
    for line in errors:
        typer.echo(line)
    if errors:
        raise typer.Exit(code=EXIT_INVALID)
    typer.echo("valid")


if __name__ == "__main__":
    app()
