"""tplast CLI — inspect normalized template trees."""

import json
import logging
import sys
from enum import Enum
from pathlib import Path

import click
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from tplast import __version__

console = Console()


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Log normalization details")
def main(verbose: bool):
    """tplast — normalize template parse trees for generic analysis tools."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        )


def _load(file: str, config_path: str | None):
    from tplast.config import load_config
    from tplast.errors import TplastError
    from tplast.parser import parse_for_analysis

    try:
        config = load_config(config_path) if config_path else None
        return parse_for_analysis(Path(file).read_text(), file, config)
    except TplastError as e:
        console.print(f"[red]{escape(str(e))}[/]")
        sys.exit(1)


# ── Parse ────────────────────────────────────────────────────────────


@main.command(name="parse")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--format", "-f", "fmt", default="tree", type=click.Choice(["tree", "json", "yaml"])
)
@click.option(
    "--config", "-c", "config_path", default=None, type=click.Path(exists=True), help="YAML config file"
)
def parse_command(file: str, fmt: str, config_path: str | None):
    """Parse FILE and print its normalized tree."""
    from tplast.traverse import to_dict

    result = _load(file, config_path)

    if fmt == "json":
        click.echo(json.dumps(to_dict(result.ast), indent=2))
    elif fmt == "yaml":
        click.echo(yaml.safe_dump(to_dict(result.ast), sort_keys=False))
    else:
        start, end = result.ast.range
        tree = Tree(f"[bold cyan]Program[/] [dim]{file} [{start}, {end})[/]")
        _add_children(tree, result.ast)
        console.print(tree)


def _label(node) -> str:
    parts = [f"[cyan]{node.kind}[/]"]
    name = getattr(node, "name", None)
    if isinstance(name, str):
        parts.append(name)
    original = getattr(node, "original_kind", None)
    if original is not None:
        shown = original.name if isinstance(original, Enum) else original
        parts.append(f"[dim](original_kind={shown})[/]")
    span = getattr(node, "source_span", None)
    if span is not None:
        start = getattr(span.start, "offset", span.start)
        end = getattr(span.end, "offset", span.end)
        parts.append(f"[dim][{start}, {end})[/]")
    return " ".join(parts)


def _add_children(tree: Tree, node) -> None:
    from tplast.normalize import is_node
    from tplast.visitor_keys import keys_for

    for key in keys_for(node):
        value = getattr(node, key, None)
        children = value if isinstance(value, (list, tuple)) else [value]
        children = [c for c in children if is_node(c)]
        if not children:
            continue
        branch = tree.add(f"[dim]{key}[/]")
        for child in children:
            _add_children(branch.add(_label(child)), child)


# ── Comments ─────────────────────────────────────────────────────────


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def comments(file: str):
    """List the comment tokens of FILE in source order."""
    result = _load(file, None)

    if not result.ast.comments:
        console.print("[yellow]No comments found.[/]")
        return

    table = Table(title=f"Comments ({len(result.ast.comments)} found)")
    table.add_column("Range", style="dim")
    table.add_column("Line", justify="right")
    table.add_column("Kind", style="cyan")
    table.add_column("Text")

    for token in result.ast.comments:
        start, end = token.range
        table.add_row(f"{start}-{end}", str(token.loc.start.line), token.kind, token.text.strip()[:60])

    console.print(table)


# ── Keys ─────────────────────────────────────────────────────────────


@main.command()
def keys():
    """Print the visitor key table."""
    from tplast.visitor_keys import VISITOR_KEYS

    table = Table(title="Visitor Keys")
    table.add_column("Kind", style="cyan")
    table.add_column("Child fields")

    for kind, fields in sorted(VISITOR_KEYS.items()):
        table.add_row(kind, ", ".join(fields))

    console.print(table)


if __name__ == "__main__":
    main()
