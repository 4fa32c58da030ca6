"""jsclean CLI - dead binding and dangling assignment removal for JS/TS files."""
from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape
from rich.table import Table

from jsclean.config import __version__, get_config
from jsclean.reaper.formatter import FormatterError
from jsclean.reaper.pipeline import CleanResult, clean_file
from jsclean.reaper.report import EliminationReport
from jsclean.reaper.surgery import TreeSurgeryError
from jsclean.utils.safe_console import SafeConsole

app = typer.Typer(
    name="jsclean",
    help="Remove unreferenced bindings and dangling numeric assignments from JS/TS files",
    add_completion=False
)
# Use SafeConsole for Windows Unicode compatibility
console = SafeConsole()

REMOVAL_LABELS = {
    'declaration': "Declarations",
    'declarator': "Declarators",
    'function': "Functions",
    'import': "Import specifiers",
    'assignment': "Dangling assignments",
}


def _print_report(report: EliminationReport, verbose: bool) -> None:
    """Render a summary table, plus every removal when verbose."""
    table = Table(title="Removed")
    table.add_column("Kind", style="cyan")
    table.add_column("Count", justify="right", style="magenta")
    for what, label in REMOVAL_LABELS.items():
        table.add_row(label, str(report.count(what)))
    table.add_row("[bold]Total[/bold]", f"[bold]{report.total}[/bold]")
    console.print(table)

    if verbose and report.removals:
        details = Table(title="Details")
        details.add_column("Line", justify="right", style="dim")
        details.add_column("Kind", style="cyan")
        details.add_column("Name", style="yellow")
        for removal in sorted(report.removals, key=lambda r: r.line):
            details.add_row(str(removal.line), removal.what, escape(removal.name))
        console.print(details)


@app.command()
def clean(
    input_path: str = typer.Argument(..., help="JavaScript/TypeScript file to clean"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Output file (default: <name>.cleaned<ext> next to the input)"),
    no_format: bool = typer.Option(False, "--no-format", help="Skip prettier; keep the rendered text as is"),
    until_stable: bool = typer.Option(False, "--until-stable", help="Repeat passes until nothing more is removed"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would be removed without writing the output"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="List every removed construct"),
):
    """Remove dead bindings and dangling numeric assignments from one file."""

    path = Path(input_path)
    if not path.is_file():
        console.error(f"Input file does not exist: {escape(str(path))}")
        raise typer.Exit(1)

    try:
        config = get_config()
        with console.status(f"Cleaning {escape(path.name)}..."):
            result: CleanResult = clean_file(
                path,
                output_path=output,
                config=config,
                format_output=False if no_format else None,
                until_stable=True if until_stable else None,
                dry_run=dry_run,
            )
    except (ValueError, FormatterError, TreeSurgeryError, OSError) as e:
        # ParseError and bad configuration values are ValueErrors
        console.error(escape(str(e)))
        raise typer.Exit(1)

    _print_report(result.report, verbose)
    passes = result.report.passes
    console.print(f"[dim]{passes} pass{'es' if passes != 1 else ''}[/dim]")

    if dry_run:
        console.print(f"[yellow]Dry run:[/yellow] would write {escape(str(result.output_path))}")
    else:
        console.print(f"[green]✓ Wrote {escape(str(result.output_path))}[/green]")


@app.command()
def version():
    """Print the jsclean version."""
    console.print(f"jsclean {__version__}")


@app.callback()
def main():
    """jsclean - dead-code elimination for a single JS/TS program text."""
    pass


if __name__ == "__main__":
    app()
