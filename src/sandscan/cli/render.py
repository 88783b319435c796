"""Terminal rendering of analysis results."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table
from rich.text import Text

from sandscan.detect.models import ProjectError, ProjectErrors, Severity

_SEVERITY_STYLE = {
    Severity.CRITICAL: "bold red",
    Severity.HIGH: "red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "dim",
}


def _location(error: ProjectError) -> str:
    if not error.file:
        return "-"
    parts = [error.file]
    if error.line is not None:
        parts.append(str(error.line))
        if error.column is not None:
            parts.append(str(error.column))
    return ":".join(parts)


def _sort_key(error: ProjectError) -> tuple[int, str, int]:
    return (-error.severity.rank, error.file or "", error.line or 0)


def make_error_table(title: str, errors: tuple[ProjectError, ...]) -> Table:
    table = Table(title=f"{title} ({len(errors)})", title_justify="left", pad_edge=False)
    table.add_column("Severity", no_wrap=True)
    table.add_column("Location", style="cyan")
    table.add_column("Message")
    for error in sorted(errors, key=_sort_key):
        table.add_row(
            Text(error.severity.value, style=_SEVERITY_STYLE[error.severity]),
            _location(error),
            error.message,
        )
    return table


def render_errors(console: Console, result: ProjectErrors) -> None:
    if result.total_errors == 0:
        console.print(f"[green]No errors detected[/green] [dim](mode: {result.mode.value})[/dim]")
        return

    groups: tuple[tuple[str, tuple[ProjectError, ...]], ...] = (
        ("Build errors", result.build_errors),
        ("Import errors", result.import_errors),
        ("Navigation errors", result.navigation_errors),
    )
    for title, errors in groups:
        if errors:
            console.print(make_error_table(title, errors))
            console.print()

    severity = result.severity
    console.print(
        f"[bold]{result.total_errors}[/bold] errors, severity "
        f"[{_SEVERITY_STYLE[severity]}]{severity.value}[/{_SEVERITY_STYLE[severity]}], "
        f"auto-fixable: {'yes' if result.auto_fixable else 'no'} "
        f"[dim](mode: {result.mode.value})[/dim]"
    )
