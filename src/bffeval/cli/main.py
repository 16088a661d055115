# src/bffeval/cli/main.py
import click
import logging
import sys
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .. import __version__
from ..bff_ast import ParseError, load_parse_data
from ..config import config
from ..evaluator import Evaluator
from ..resources import DiskFileSystem, JsonParseDataProvider, path_to_uri

console = Console()

SHOW_CHOICES = ['references', 'definitions', 'values', 'all']


def _default_uri(tree_path):
    path = tree_path[:-len('.json')] if tree_path.endswith('.json') else tree_path
    return path_to_uri(path)


def _run(tree_path, uri):
    """Load a serialized tree and evaluate it. Returns (evaluator, result)."""
    with open(tree_path, 'r', encoding='utf-8') as f:
        parse_data = load_parse_data(f.read())

    file_system = DiskFileSystem()
    evaluator = Evaluator(file_system, JsonParseDataProvider(file_system))
    result = evaluator.evaluate(parse_data, uri or _default_uri(tree_path))
    return evaluator, result


def _print_error(error):
    label = "Internal error" if getattr(error, 'is_internal', False) else "Error"
    location = getattr(error, 'range', None)
    if location is not None:
        console.print(f"[bold red]❌ {label}:[/bold red] {location}")
        console.print(f"  {escape(str(error))}")
    else:
        console.print(f"[bold red]❌ {label}:[/bold red] {escape(str(error))}")


def _values_table(evaluator):
    table = Table(title="Root variables")
    table.add_column("Name", style="cyan")
    table.add_column("Type", style="yellow")
    table.add_column("Value", style="green")
    for name, value in evaluator.root_variables().items():
        table.add_row(name, value.type(), escape(value.inspect()))
    return table


def _definitions_table(data):
    table = Table(title="Definitions")
    table.add_column("Id", style="yellow")
    table.add_column("Name", style="cyan")
    table.add_column("Range", style="green")
    for definition in data.variable_definitions:
        table.add_row(str(definition.id), definition.name, str(definition.range))
    return table


def _references_table(data):
    table = Table(title="References")
    table.add_column("Definition", style="yellow")
    table.add_column("Name", style="cyan")
    table.add_column("Range", style="green")
    table.add_column("Using", style="magenta")
    for reference in data.variable_references:
        using = str(reference.using_range) if reference.using_range else ""
        table.add_row(str(reference.definition.id), reference.definition.name, str(reference.range), using)
    return table


@click.group()
@click.version_option(version=__version__, prog_name="bffeval")
@click.option('--debug', is_flag=True, help="Enable evaluator debug logs")
def cli(debug):
    """FASTBuild .bff evaluator - evaluate parse trees and inspect provenance"""
    if debug:
        config.enable_debug_logs = True
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")


@cli.command()
@click.argument('tree', type=click.Path(exists=True, dir_okay=False))
@click.option('--uri', default=None, help="URI of the evaluated document (default: TREE without .json)")
@click.option('--show', type=click.Choice(SHOW_CHOICES), default='values', show_default=True,
              help="What to print after evaluating")
def evaluate(tree, uri, show):
    """Evaluate a serialized .bff parse tree"""
    try:
        evaluator, result = _run(tree, uri)
    except (OSError, ParseError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        sys.exit(1)

    if show in ('values', 'all'):
        console.print(_values_table(evaluator))
    if show in ('definitions', 'all'):
        console.print(_definitions_table(result.data))
    if show in ('references', 'all'):
        console.print(_references_table(result.data))

    summary = result.data.summary()
    console.print(
        f"📊 {summary['evaluated_variables']} evaluated variables, "
        f"{summary['variable_references']} references, "
        f"{summary['variable_definitions']} definitions"
    )

    if not result.ok:
        _print_error(result.error)
        sys.exit(1)
    console.print("[bold green]✅ Evaluation succeeded[/bold green]")


@cli.command()
@click.argument('tree', type=click.Path(exists=True, dir_okay=False))
@click.option('--uri', default=None, help="URI of the evaluated document (default: TREE without .json)")
def check(tree, uri):
    """Check that a serialized .bff parse tree evaluates without errors"""
    try:
        _, result = _run(tree, uri)
    except (OSError, ParseError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        sys.exit(1)

    if not result.ok:
        _print_error(result.error)
        sys.exit(1)
    console.print("[bold green]✅ Evaluates without errors![/bold green]")


if __name__ == "__main__":
    cli()
