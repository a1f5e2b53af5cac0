# src/bindingtree/cli.py
"""bindingtree Command Line Interface.

Entry point for the bindingtree CLI tool.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal, assert_never

import typer
import yaml
from pydantic import ValidationError

from bindingtree import __version__
from bindingtree.contracts.graph import GraphSnapshot
from bindingtree.contracts.tree import AndNode, BoxNode, LinearTree, NotNode, OrNode, child_indices
from bindingtree.core.canonical import canonical_json, tree_hash, tree_json
from bindingtree.core.config import BindingTreeSettings, load_settings
from bindingtree.core.dag import GraphValidationError, classify, combine_or, compile_graph, edge_name, validate_tree
from bindingtree.core.loader import load_graph, load_tree

__all__ = [
    "app",
]

app = typer.Typer(
    name="bindingtree",
    help="Compile constraint graphs into binding-box trees.",
    no_args_is_help=True,
)


@dataclass(frozen=True)
class _CliState:
    """Global flags captured by the callback, consulted when settings files load."""

    verbose: bool = False
    json_logs: bool = False


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"bindingtree version {__version__}")
        raise typer.Exit()


def _load_dotenv(env_file: Path | None = None) -> bool:
    """Load environment variables (BINDINGTREE_* overrides) from a .env file.

    Raises:
        typer.Exit: If explicit env_file path doesn't exist.
    """
    from dotenv import load_dotenv

    if env_file is not None:
        if not env_file.exists():
            typer.secho(
                f"Error: .env file not found: {env_file}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(1)
        return load_dotenv(env_file, override=False)

    return load_dotenv(override=False)


@app.callback()
def main(
    ctx: typer.Context,
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_dotenv: bool = typer.Option(
        False,
        "--no-dotenv",
        help="Skip loading .env file.",
    ),
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        help="Path to .env file (skips automatic search).",
        exists=False,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose/debug logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs (for machine processing).",
    ),
) -> None:
    """Compile constraint graphs into binding-box trees."""
    from bindingtree.core.logging import configure_logging

    configure_logging(json_output=json_logs, level="DEBUG" if verbose else "INFO")
    ctx.obj = _CliState(verbose=verbose, json_logs=json_logs)

    if not no_dotenv:
        _load_dotenv(env_file=env_file)
    elif env_file is not None:
        typer.secho(
            "Warning: --env-file ignored because --no-dotenv is set.",
            fg=typer.colors.YELLOW,
            err=True,
        )


def _format_validation_error(
    title: str,
    message: str,
    hint: str | None = None,
    details: list[str] | None = None,
) -> None:
    """Display a formatted validation error with optional hint and details."""
    from rich.console import Console
    from rich.panel import Panel
    from rich.text import Text

    console = Console(stderr=True)

    content = Text()
    content.append(message, style="white")

    if details:
        content.append("\n\n")
        for detail in details:
            content.append(f"  • {detail}\n", style="dim")

    if hint:
        content.append("\n")
        content.append("Hint: ", style="yellow bold")
        content.append(hint, style="yellow")

    panel = Panel(
        content,
        title=f"[red bold]❌ {title}[/]",
        border_style="red",
        padding=(0, 1),
    )
    console.print(panel)


def _resolve_settings(ctx: typer.Context, settings: Path | None) -> BindingTreeSettings:
    """Load the settings file (or defaults) and apply its logging section.

    Command-line logging flags win over the file.
    """
    if settings is None:
        return BindingTreeSettings()

    settings_path = settings.expanduser()
    try:
        config = load_settings(settings_path)
    except FileNotFoundError:
        _format_validation_error(
            title="File Not Found",
            message=f"Settings file does not exist: {settings}",
            hint="Check the path and ensure the file exists.",
        )
        raise typer.Exit(1) from None
    except ValidationError as e:
        details = [f"{'.'.join(str(x) for x in error['loc'])}: {error['msg']}" for error in e.errors()]
        _format_validation_error(
            title="Configuration Validation Failed",
            message=f"Invalid settings in {settings_path.name}",
            details=details,
            hint="Check field names, types, and allowed values.",
        )
        raise typer.Exit(1) from None

    from bindingtree.core.logging import configure_logging

    state: _CliState = ctx.obj or _CliState()
    configure_logging(
        json_output=state.json_logs or config.logging.json_output,
        level="DEBUG" if state.verbose else config.logging.level,
        quiet_loggers=config.logging.quiet_loggers,
    )
    return config


def _read_graph(graph_file: Path) -> GraphSnapshot:
    try:
        return load_graph(graph_file.expanduser())
    except FileNotFoundError:
        _format_validation_error(
            title="File Not Found",
            message=f"Graph file does not exist: {graph_file}",
        )
        raise typer.Exit(1) from None
    except yaml.YAMLError as e:
        _format_validation_error(
            title="YAML Syntax Error",
            message=f"Failed to parse {graph_file.name}",
            details=[str(e)],
            hint="Check for unclosed brackets, incorrect indentation, or invalid characters.",
        )
        raise typer.Exit(1) from None
    except ValidationError as e:
        details = [f"{'.'.join(str(x) for x in error['loc'])}: {error['msg']}" for error in e.errors()]
        _format_validation_error(
            title="Invalid Graph Document",
            message=f"{graph_file.name} does not match the graph schema",
            details=details,
        )
        raise typer.Exit(1) from None
    except ValueError as e:
        # json.JSONDecodeError (after ValidationError, which is also a ValueError)
        _format_validation_error(title="JSON Syntax Error", message=f"Failed to parse {graph_file.name}", details=[str(e)])
        raise typer.Exit(1) from None


def _read_tree(tree_file: Path) -> LinearTree:
    try:
        tree = load_tree(tree_file.expanduser())
        validate_tree(tree)
    except FileNotFoundError:
        _format_validation_error(title="File Not Found", message=f"Tree file does not exist: {tree_file}")
        raise typer.Exit(1) from None
    except yaml.YAMLError as e:
        _format_validation_error(title="YAML Syntax Error", message=f"Failed to parse {tree_file.name}", details=[str(e)])
        raise typer.Exit(1) from None
    except GraphValidationError as e:
        _format_validation_error(title="Invalid Tree", message=str(e))
        raise typer.Exit(1) from None
    except (ValueError, TypeError, KeyError) as e:
        _format_validation_error(title="Malformed Tree", message=f"{tree_file.name}: {e}")
        raise typer.Exit(1) from None
    return tree


def _write_output(text: str, output: Path | None) -> None:
    if output is None:
        typer.echo(text)
    else:
        output.expanduser().write_text(text + "\n", encoding="utf-8")
        typer.echo(f"Wrote {output}", err=True)


@app.command(name="compile")
def compile_command(
    ctx: typer.Context,
    graph_file: Path = typer.Argument(..., help="Graph snapshot (JSON or YAML)."),
    settings: Path | None = typer.Option(None, "--settings", "-s", help="Path to settings YAML file."),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write the result here instead of stdout."),
    allow_partial: bool = typer.Option(
        False,
        "--allow-partial",
        help="Emit the trees that compiled even if other components failed.",
    ),
) -> None:
    """Compile a graph snapshot into binding-box trees (canonical JSON)."""
    from bindingtree.core.logging import graph_context

    config = _resolve_settings(ctx, settings)
    snapshot = _read_graph(graph_file)
    with graph_context(graph_file):
        result = compile_graph(snapshot, config.compiler)

    for warning in result.warnings:
        typer.secho(f"Warning: {warning.message}", fg=typer.colors.YELLOW, err=True)

    if not result.ok:
        _format_validation_error(
            title="Graph Compilation Failed",
            message=f"{len(result.errors)} error(s) kept part of the graph from compiling",
            details=[error.message for error in result.errors],
            hint="Check for cycles, gates with the wrong number of children, and nodes no root reaches.",
        )
        if not allow_partial:
            raise typer.Exit(1)

    _write_output(canonical_json(result.to_json()), output)


@app.command()
def validate(
    ctx: typer.Context,
    graph_file: Path = typer.Argument(..., help="Graph snapshot (JSON or YAML)."),
    settings: Path | None = typer.Option(None, "--settings", "-s", help="Path to settings YAML file."),
) -> None:
    """Validate a graph snapshot without writing trees."""
    from bindingtree.core.logging import graph_context

    config = _resolve_settings(ctx, settings)
    snapshot = _read_graph(graph_file)
    with graph_context(graph_file):
        result = compile_graph(snapshot, config.compiler)

    try:
        result.raise_for_errors()
    except GraphValidationError as e:
        _format_validation_error(
            title="Graph Compilation Failed",
            message=str(e),
            hint="Check for cycles, gates with the wrong number of children, and nodes no root reaches.",
        )
        raise typer.Exit(1) from None

    typer.echo("✅ Graph valid!")
    typer.echo(f"  Nodes: {len(snapshot.nodes)} ({len(result.disconnected)} disconnected)")
    typer.echo(f"  Edges: {len(snapshot.edges)} ({len(result.warnings)} skipped)")
    for compiled in result.trees:
        typer.echo(f"  Tree rooted at {compiled.root}: {len(compiled.tree)} nodes, hash {tree_hash(compiled.tree)[:12]}")


@app.command(name="classify")
def classify_command(
    source_multiple: bool = typer.Option(False, "--source-multiple/--source-single", help="Source qualifier multiplicity."),
    target_multiple: bool = typer.Option(False, "--target-multiple/--target-single", help="Target qualifier multiplicity."),
) -> None:
    """Print the dependency type implied by two qualifier multiplicities."""
    typer.echo(classify(source_multiple, target_multiple).value)


@app.command()
def inspect(
    ctx: typer.Context,
    tree_file: Path = typer.Argument(..., help="Compiled tree (engine JSON shape)."),
    settings: Path | None = typer.Option(None, "--settings", "-s", help="Path to settings YAML file."),
    output_format: Literal["console", "json"] = typer.Option(
        "console",
        "--format",
        "-f",
        help="Output format: 'console' (table) or 'json' (canonical tree).",
    ),
) -> None:
    """Show the nodes and edges of a compiled tree."""
    config = _resolve_settings(ctx, settings)
    tree = _read_tree(tree_file)

    if output_format == "json":
        typer.echo(tree_json(tree))
        return

    from rich.console import Console
    from rich.table import Table

    table = Table(title=f"{tree_file.name} ({len(tree)} nodes, hash {tree_hash(tree)[:12]})")
    table.add_column("Index", justify="right")
    table.add_column("Node")
    table.add_column("Children")
    for index, node in enumerate(tree.nodes):
        match node:
            case BoxNode(content=content):
                label = f"Box ({len(content)} field(s))"
            case AndNode():
                label = "AND"
            case OrNode():
                label = "OR"
            case NotNode():
                label = "NOT"
            case _:
                assert_never(node)
        children = ", ".join(
            f"{child} [{edge_name(tree, index, child, config.compiler.unnamed_edge_prefix)}]" for child in child_indices(node)
        )
        table.add_row(str(index), label, children or "-")
    Console().print(table)


@app.command()
def combine(
    left_file: Path = typer.Argument(..., help="First tree (becomes the left OR branch)."),
    right_file: Path = typer.Argument(..., help="Second tree (becomes the right OR branch)."),
    left_name: str = typer.Option("A", "--left-name", help="Edge name from the OR root to the first tree."),
    right_name: str = typer.Option("B", "--right-name", help="Edge name from the OR root to the second tree."),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write the result here instead of stdout."),
) -> None:
    """Combine two compiled trees under a new OR root."""
    left = _read_tree(left_file)
    right = _read_tree(right_file)
    try:
        combined = combine_or(left_name, left, right_name, right)
    except GraphValidationError as e:
        _format_validation_error(title="Cannot Combine Trees", message=str(e))
        raise typer.Exit(1) from None
    _write_output(tree_json(combined), output)


if __name__ == "__main__":
    app()
