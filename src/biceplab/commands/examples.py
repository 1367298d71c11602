"""Example catalog commands."""

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from biceplab.click_group import BiceplabGroup
from biceplab.config_manager import ConfigError, ConfigManager
from biceplab.example_catalog import CatalogError, ExampleCatalog

logger = logging.getLogger(__name__)
console = Console()


@click.group(name="examples", cls=BiceplabGroup)
def examples_group():
    """Browse the tutorial examples.

    \b
    SUBCOMMANDS:
        list   List all examples
        show   Show one example's files and parameter files
    """
    pass


@examples_group.command(name="list")
def examples_list():
    """List all tutorial examples."""
    try:
        catalog = ExampleCatalog.load()
    except CatalogError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    table = Table(title="Tutorial Examples", show_header=True, header_style="bold")
    table.add_column("Example", style="cyan")
    table.add_column("Title")
    table.add_column("Environments")

    for example in catalog.examples:
        table.add_row(example.name, example.title, ", ".join(example.parameter_files) or "-")

    console.print(table)
    console.print("\nDeploy with: biceplab deploy <example>")


@examples_group.command(name="show")
@click.argument("example", type=str)
@click.option("--examples-dir", help="Scaffolded examples directory", type=click.Path(path_type=Path))
def examples_show(example: str, examples_dir: Path | None):
    """Show details for one example.

    \b
    Examples:
        biceplab examples show 02
    """
    try:
        definition = ExampleCatalog.load().get(example)
        base = examples_dir or Path(ConfigManager.get_effective_config().examples_dir)
    except (CatalogError, ConfigError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    template = definition.template_path(base)
    click.echo(f"\n{definition.name}: {definition.title}")
    if definition.description:
        click.echo(f"\n{definition.description}\n")
    status = "found" if template.exists() else "missing - run 'biceplab scaffold'"
    click.echo(f"  Template:   {template} ({status})")
    for env_name, file_name in definition.parameter_files.items():
        click.echo(f"  Parameters: {file_name} [{env_name}]")
    click.echo(f"  Deployment: {definition.deployment_prefix}-deployment-<timestamp>")


__all__ = ["examples_group", "examples_list", "examples_show"]
