"""SandScan CLI - sandscan command."""

import click

from sandscan.cli.fragment import fragment_command
from sandscan.cli.project import project_command
from sandscan.core.logging import configure_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="sandscan")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """SandScan - error detection for generated TypeScript projects."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    configure_logging(level="DEBUG" if verbose else "INFO")


cli.add_command(fragment_command, name="fragment")
cli.add_command(project_command, name="project")


if __name__ == "__main__":
    cli()
