"""sandscan fragment command - analyze local files in isolation."""

import asyncio
from pathlib import Path

import click

from sandscan.analysis.ops import AnalysisOps
from sandscan.cli.utils import emit_result, load_cli_config, read_source_files


@click.command()
@click.argument(
    "files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.option(
    "--root",
    default=".",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Directory that reported paths are relative to",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML config file",
)
@click.pass_context
def fragment_command(
    ctx: click.Context, files: tuple[Path, ...], root: Path, as_json: bool, config_path: Path | None
) -> None:
    """Check FILES for likely errors without running anything.

    Only heuristics apply: risky type escapes, known-bad imports, unexported
    entry components and suspicious links.
    """
    config = load_cli_config(config_path)
    sources = read_source_files(files, root)
    result = asyncio.run(AnalysisOps(config=config).analyze_fragment(sources))
    emit_result(ctx, result, as_json)
