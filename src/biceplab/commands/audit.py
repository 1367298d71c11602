"""API version audit command.

Reports which Azure API versions the tutorial's templates pin and how
stale they are. The audit is advisory: it always exits 0, whatever it
finds and whether or not the registry lookups succeed.
"""

import logging
from datetime import date
from pathlib import Path

import click
from rich.console import Console

from biceplab.api_version_audit import classify_api_versions, scan_templates
from biceplab.audit_report import render_audit
from biceplab.config_manager import ConfigError, ConfigManager
from biceplab.provider_registry import AzureCliProviderRegistry, check_latest_versions

logger = logging.getLogger(__name__)
console = Console()


@click.command(name="audit")
@click.argument("path", required=False, type=click.Path(path_type=Path))
@click.option("--detailed", "-d", is_flag=True, help="List the files and resource types per API version")
@click.option(
    "--show-latest",
    is_flag=True,
    help="Look up the newest API version for each resource type (requires az login)",
)
@click.option(
    "--as-of",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    help="Classify ages relative to this date instead of today",
)
def audit_command(path: Path | None, detailed: bool, show_latest: bool, as_of):
    """Audit the API versions pinned in Bicep templates.

    Scans PATH (default: the configured examples directory) recursively for
    .bicep files and groups every resource declaration by API version. PATH
    may also be a single .bicep file.
    Versions more than one or two years old and preview versions are
    listed separately.

    \b
    Examples:
        biceplab audit
        biceplab audit examples/03-modules --detailed
        biceplab audit --show-latest
    """
    if path is None:
        try:
            path = Path(ConfigManager.get_effective_config().examples_dir)
        except ConfigError as e:
            logger.warning(f"Could not load config, auditing ./examples: {e}")
            path = Path("examples")

    today: date = as_of.date() if as_of else date.today()

    scan = scan_templates(path)
    classification = classify_api_versions([r.api_version for r in scan.records], today=today)

    latest_checks = None
    if show_latest and scan.records:
        console.print("[dim]Querying the Azure provider registry...[/dim]")
        latest_checks = check_latest_versions(scan, AzureCliProviderRegistry())

    render_audit(console, scan, classification, detailed=detailed, latest_checks=latest_checks)


__all__ = ["audit_command"]
