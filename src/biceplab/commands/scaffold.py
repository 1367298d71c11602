"""Scaffold command: write the tutorial docs and examples to disk."""

import logging
import sys
from pathlib import Path

import click

from biceplab.scaffolder import Scaffolder, ScaffoldError

logger = logging.getLogger(__name__)


@click.command(name="scaffold")
@click.argument("target", required=False, default=".", type=click.Path(path_type=Path))
@click.option("--dry-run", is_flag=True, help="Show what would be written without writing")
def scaffold_command(target: Path, dry_run: bool):
    """Write the tutorial's README, docs/ and examples/ into TARGET.

    TARGET defaults to the current directory. Files that already match are
    left alone, so running this twice is harmless; files you changed are
    overwritten with the original content.

    \b
    Examples:
        biceplab scaffold
        biceplab scaffold ~/bicep-tutorial
        biceplab scaffold --dry-run
    """
    try:
        result = Scaffolder().scaffold(target, dry_run=dry_run)
    except ScaffoldError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    prefix = "Would write" if dry_run else "Wrote"
    for path in result.created:
        click.echo(f"  + {path}")
    for path in result.updated:
        click.echo(f"  ~ {path}")

    click.echo(
        f"\n{prefix} {len(result.written)} files to {target} "
        f"({len(result.created)} new, {len(result.updated)} updated, "
        f"{len(result.unchanged)} unchanged)"
    )
    if not dry_run and result.written:
        click.echo("\nNext steps:")
        click.echo("  az login")
        click.echo("  biceplab deploy 01")


__all__ = ["scaffold_command"]
