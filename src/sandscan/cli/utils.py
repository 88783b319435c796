"""CLI utilities."""

from __future__ import annotations

import json
from pathlib import Path

import click
from rich.console import Console

from sandscan.cli.render import render_errors
from sandscan.config.loader import load_config
from sandscan.config.models import SandScanConfig
from sandscan.core.errors import ConfigError
from sandscan.detect.models import ProjectErrors


def load_cli_config(config_path: Path | None) -> SandScanConfig:
    """Load config, turning configuration problems into a clean CLI error."""
    try:
        return load_config(config_path)
    except ConfigError as e:
        raise click.ClickException(e.message) from e


def read_source_files(paths: tuple[Path, ...], root: Path) -> dict[str, str]:
    """Read files keyed by their POSIX path relative to ``root`` when possible."""
    root = root.resolve()
    files: dict[str, str] = {}
    for path in paths:
        resolved = path.resolve()
        try:
            key = resolved.relative_to(root).as_posix()
        except ValueError:
            key = path.as_posix()
        try:
            files[key] = resolved.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise click.ClickException(f"Cannot read {path}: {e}") from e
    return files


def emit_result(ctx: click.Context, result: ProjectErrors, as_json: bool) -> None:
    """Print the result and exit 1 when anything HIGH or CRITICAL was found."""
    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        render_errors(Console(), result)
    ctx.exit(1 if result.has_blocking_errors else 0)
