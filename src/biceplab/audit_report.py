"""Rich rendering of an API version audit."""

from pathlib import Path

from rich.console import Console
from rich.table import Table

from biceplab.api_version_audit import ScanResult, VersionClassification
from biceplab.provider_registry import LatestVersionCheck


def _display_path(path: Path, root: Path) -> str:
    if path == root:
        return path.name
    try:
        return str(path.relative_to(root))
    except ValueError:
        return str(path)


def render_summary(console: Console, scan: ScanResult, detailed: bool = False) -> None:
    """Table of API versions with their reference counts, newest first."""
    table = Table(title="API Versions in Use", show_header=True, header_style="bold")
    table.add_column("API Version", style="cyan")
    table.add_column("References", justify="right")
    if detailed:
        table.add_column("Used By")

    for api_version, records in scan.by_version.items():
        row = [api_version, str(len(records))]
        if detailed:
            row.append(
                "\n".join(
                    f"{_display_path(r.source_file, scan.root)}: {r.resource_type}"
                    for r in records
                )
            )
        table.add_row(*row)

    console.print(table)


def render_classification(console: Console, classification: VersionClassification) -> None:
    """Print each non-empty bucket."""
    sections = [
        ("red", "Very old API versions (more than 2 years old):", classification.very_old),
        ("yellow", "Old API versions (1-2 years old):", classification.old),
        ("magenta", "Preview API versions:", classification.preview),
    ]

    if not any(versions for _, _, versions in sections):
        console.print("\n[green]✓ All API versions are less than a year old and stable[/green]")
        return

    for colour, heading, versions in sections:
        if not versions:
            continue
        console.print(f"\n[bold {colour}]{heading}[/bold {colour}]")
        for api_version in versions:
            console.print(f"  - {api_version}")


def render_latest(console: Console, checks: list[LatestVersionCheck]) -> None:
    """Compare in-use versions with the registry's newest, one row per type."""
    if not checks:
        console.print("\n[dim]No resource types to look up.[/dim]")
        return

    table = Table(title="Latest Available API Versions", show_header=True, header_style="bold")
    table.add_column("Resource Type", style="cyan")
    table.add_column("In Use")
    table.add_column("Latest")
    table.add_column("Status")

    for check in checks:
        if check.error:
            status = f"[dim]? {check.error}[/dim]"
        elif check.up_to_date:
            status = "[green]✓ up to date[/green]"
        else:
            status = f"[yellow]✗ update available ({', '.join(check.outdated_versions)})[/yellow]"
        table.add_row(
            check.resource_type,
            ", ".join(check.used_versions),
            check.latest or "-",
            status,
        )

    console.print()
    console.print(table)


def render_audit(
    console: Console,
    scan: ScanResult,
    classification: VersionClassification,
    detailed: bool = False,
    latest_checks: list[LatestVersionCheck] | None = None,
) -> None:
    """Print the complete audit report."""
    console.print("\n[bold cyan]API Version Audit[/bold cyan]")
    console.print(f"Root: {scan.root}")

    for path in scan.skipped:
        console.print(f"[yellow]Skipped unreadable file: {_display_path(path, scan.root)}[/yellow]")

    if not scan.files:
        if not scan.root.exists():
            console.print("[yellow]Directory does not exist[/yellow]")
        elif scan.root.is_file() and not scan.skipped:
            console.print("[yellow]Not a .bicep template[/yellow]")
        console.print("[yellow]Found 0 template files[/yellow]")
        return

    console.print(f"Found {len(scan.files)} template files")
    console.print(f"Found {len(scan.records)} resource declarations\n")
    if not scan.records:
        return

    render_summary(console, scan, detailed=detailed)
    render_classification(console, classification)

    if latest_checks is not None:
        render_latest(console, latest_checks)


__all__ = ["render_audit", "render_classification", "render_latest", "render_summary"]
