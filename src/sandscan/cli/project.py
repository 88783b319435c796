"""sandscan project command - full analysis of a project directory."""

import asyncio
from pathlib import Path

import click

from sandscan.analysis.ops import AnalysisOps
from sandscan.cli.utils import emit_result, load_cli_config, read_source_files
from sandscan.core.logging import configure_logging
from sandscan.remote.local import LocalSandbox


@click.command()
@click.argument("root", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option(
    "--file",
    "fragment_files",
    multiple=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Recently changed file, used if project analysis is unavailable (repeatable)",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML config file",
)
@click.pass_context
def project_command(
    ctx: click.Context,
    root: Path,
    fragment_files: tuple[Path, ...],
    as_json: bool,
    config_path: Path | None,
) -> None:
    """Run the compiler and import checks over the project at ROOT.

    Commands run inside ROOT as if it were a sandbox. When they cannot run,
    the --file sources are analyzed on their own instead.
    """
    config = load_cli_config(config_path)
    if config_path is not None and not ctx.obj.get("verbose"):
        configure_logging(config=config.logging)

    root = root.resolve()
    sources = read_source_files(fragment_files, root)
    ops = AnalysisOps(LocalSandbox(root), config)
    result = asyncio.run(ops.analyze_project_hybrid(sources, "."))
    emit_result(ctx, result, as_json)
