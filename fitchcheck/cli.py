"""
CLI for fitchcheck - Fitch natural-deduction proof checker.

Commands:
- fitchcheck check: Verify a proof file
- fitchcheck format: Re-align a proof file
- fitchcheck rules: List the inference rules and logical symbols
- fitchcheck init: Write a default config and an example proof
"""

from __future__ import annotations

import logging
import sys
from dataclasses import replace
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .checker import check_proof
from .config import CheckerSettings, create_default_config, load_config
from .diagnostics import collect_diagnostics, extract_line_number
from .formatter import format_proof
from .models import ResultStatus
from .rulebook import SYMBOLS, RuleFamily

app = typer.Typer(
    name="fitchcheck",
    help="Fitch natural-deduction proof checker for first-order logic",
)
console = Console()
err_console = Console(stderr=True)

STDIN_PATH = "-"

EXAMPLE_PROOF = """\
 1 | ∀x∀y(Likes(x,y) → Likes(y,x))
 2 | ∃x∀y Likes(x,y)
   |----
 3 | | [a] ∀y Likes(a,y)
   | |----
 4 | | | [b]
   | | |----
 5 | | | Likes(a,b)                     ∀Elim: 3
 6 | | | ∀y(Likes(a,y) → Likes(y,a))    ∀Elim: 1
 7 | | | Likes(a,b) → Likes(b,a)        ∀Elim: 6
 8 | | | Likes(b,a)                     →Elim: 7, 5
 9 | | | ∃y Likes(b,y)                  ∃Intro: 8
10 | | ∀x∃y Likes(x,y)                  ∀Intro: 4-9
11 | ∀x∃y Likes(x,y)                    ∃Elim: 2, 3-10
"""


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _settings(
    config_file: Path | None, variables: str | None, verbose: bool | None
) -> CheckerSettings:
    """Load config, apply CLI overrides, and set up logging."""
    try:
        settings, config_path = load_config(config_file)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Invalid configuration: {escape(str(e))}[/red]")
        raise typer.Exit(2)

    if variables is not None:
        settings = replace(settings, variables=variables)
    if verbose is not None:
        settings = replace(settings, verbose=verbose)

    _configure_logging(settings.verbose)
    if config_path:
        logging.getLogger(__name__).debug("Using config %s", config_path)
    return settings


def _read_source(path: Path) -> str:
    if str(path) == STDIN_PATH:
        return sys.stdin.read()
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        console.print(f"[red]Cannot read {escape(str(path))}: {escape(str(e))}[/red]")
        raise typer.Exit(2)


@app.command("check")
def check(
    path: Path = typer.Argument(..., help="Proof file to check, or - for standard input"),
    variables: str = typer.Option(
        None, "--variables", help="Comma-separated bindable variables (overrides config)"
    ),
    config_file: Path = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to YAML config file (defaults to fitch.yaml if exists)",
    ),
    verbose: bool = typer.Option(
        None, "--verbose", "-v", help="Log each checking decision (overrides config)"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON"),
):
    """
    Check a Fitch proof.

    Exit code is 0 when the proof is correct, 1 when some lines are wrong,
    and 2 when the document cannot be parsed.
    """
    settings = _settings(config_file, variables, verbose)
    text = _read_source(path)

    try:
        ruleset = settings.ruleset
    except ValueError as e:
        console.print(f"[red]Invalid configuration: {escape(str(e))}[/red]")
        raise typer.Exit(2)

    result = check_proof(
        text,
        settings.variables,
        max_formula_depth=settings.max_formula_depth,
        max_box_depth=settings.max_box_depth,
        ruleset=ruleset,
    )

    if as_json:
        console.print_json(data=result.to_dict())
    elif result.status == ResultStatus.CORRECT:
        console.print(f"[green]{result}[/green]")
    elif result.status == ResultStatus.FATAL_ERROR:
        console.print(f"[red]{escape(str(result))}[/red]")
    else:
        table = Table(title=f"{len(result.messages)} problem(s)", show_header=True)
        table.add_column("Line", style="cyan", justify="right")
        table.add_column("Row", style="dim", justify="right")
        table.add_column("Message", style="red")
        for diagnostic in collect_diagnostics(text, result):
            table.add_row(
                str(extract_line_number(diagnostic.message)),
                str(diagnostic.line + 1),
                escape(diagnostic.message),
            )
        console.print(table)

    if result.status == ResultStatus.FATAL_ERROR:
        raise typer.Exit(2)
    if result.status == ResultStatus.ERROR:
        raise typer.Exit(1)


@app.command("format")
def format_command(
    path: Path = typer.Argument(..., help="Proof file to format, or - for standard input"),
    write: bool = typer.Option(False, "--write", "-w", help="Rewrite the file in place"),
    variables: str = typer.Option(
        None, "--variables", help="Comma-separated bindable variables (overrides config)"
    ),
    config_file: Path = typer.Option(None, "--config", "-c", help="Path to YAML config file"),
):
    """
    Re-align labels, bars and justifications of a proof.
    """
    settings = _settings(config_file, variables, None)
    text = _read_source(path)

    result = format_proof(
        text,
        settings.variables,
        max_formula_depth=settings.max_formula_depth,
        max_box_depth=settings.max_box_depth,
    )
    if result.text is None:
        console.print(f"[red]Cannot format: {escape(result.error or '')}[/red]")
        raise typer.Exit(1)

    if write:
        if str(path) == STDIN_PATH:
            console.print("[red]--write needs a file path[/red]")
            raise typer.Exit(1)
        path.write_text(result.text, encoding="utf-8")
        console.print(f"[green]Formatted {escape(str(path))}[/green]")
    else:
        typer.echo(result.text, nl=not result.text.endswith("\n"))


@app.command()
def rules(
    config_file: Path = typer.Option(None, "--config", "-c", help="Path to YAML config file"),
    plain: bool = typer.Option(False, "--plain", help="Print a plain-text list instead of tables"),
):
    """
    List the inference rules and the logical symbols.
    """
    settings = _settings(config_file, None, None)
    try:
        ruleset = settings.ruleset
    except ValueError as e:
        console.print(f"[red]Invalid configuration: {escape(str(e))}[/red]")
        raise typer.Exit(2)

    if plain:
        typer.echo(ruleset.to_help_text())
        return

    table = Table(title="Inference Rules", show_header=True)
    table.add_column("Rule", style="cyan")
    table.add_column("Family", style="dim")
    table.add_column("References")
    table.add_column("Description")
    table.add_column("Example", style="dim")
    for family in RuleFamily:
        for info in ruleset.by_family(family):
            table.add_row(
                info.name,
                family.name.lower(),
                info.signature,
                escape(info.description),
                escape(info.example),
            )
    console.print(table)

    symbols = Table(title="Symbols", show_header=True)
    symbols.add_column("Symbol", style="cyan")
    symbols.add_column("Meaning")
    symbols.add_column("Keywords", style="dim")
    for symbol in SYMBOLS:
        symbols.add_row(symbol.symbol, symbol.description, ", ".join(symbol.keywords))
    console.print(symbols)


@app.command()
def init(
    project_dir: Path = typer.Argument(Path("."), help="Directory to initialize"),
):
    """
    Write a default fitch.yaml and an example proof.
    """
    project_dir = project_dir.resolve()

    console.print(f"[bold]Initializing fitchcheck in {escape(str(project_dir))}[/bold]")
    project_dir.mkdir(parents=True, exist_ok=True)

    config_file = project_dir / "fitch.yaml"
    if not config_file.exists():
        create_default_config(config_file)
        console.print("  Created fitch.yaml")

    example_file = project_dir / "example.fitch"
    if not example_file.exists():
        example_file.write_text(EXAMPLE_PROOF, encoding="utf-8")
        console.print("  Created example.fitch")

    console.print(
        Panel.fit(
            "Check it with: fitchcheck check example.fitch",
            title="[green]Ready[/green]",
        )
    )


if __name__ == "__main__":
    app()
