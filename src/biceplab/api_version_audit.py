"""API version audit for Bicep templates.

Scans a directory tree for ``.bicep`` files, pulls every
``(resource type, API version)`` pair out of the resource declarations,
and sorts the distinct API versions into freshness buckets.

Declaration grammar:
    resource <symbolicName> '<Namespace.Provider/kind[/child...]>@<apiVersion>'

Only single-quoted type strings on the same line as the ``resource``
keyword are recognised. Declarations split across lines are not matched.

Buckets:
    very_old - versions dated before today minus 2 years
    old      - versions dated before today minus 1 year, but not very_old
    preview  - versions carrying the pre-release marker, whatever their date

Preview is independent of age: a preview version is also placed in the
age bucket its date falls into, so the buckets overlap.
"""

import logging
import re
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path

logger = logging.getLogger(__name__)

TEMPLATE_SUFFIX = ".bicep"
PREVIEW_MARKER = "preview"

DECLARATION_PATTERN = re.compile(
    r"\bresource[ \t]+\w+[ \t]+'(?P<resource_type>[^'@\s]+)@(?P<api_version>[^'\s]+)'"
)


@dataclass(frozen=True)
class VersionRecord:
    """One resource declaration's pinned API version."""

    api_version: str
    resource_type: str
    source_file: Path


@dataclass
class ScanResult:
    """Everything a single scan pass collected."""

    root: Path
    files: list[Path] = field(default_factory=list)
    skipped: list[Path] = field(default_factory=list)
    records: list[VersionRecord] = field(default_factory=list)

    @property
    def by_version(self) -> dict[str, list[VersionRecord]]:
        """Records grouped by API version, newest first."""
        groups: dict[str, list[VersionRecord]] = defaultdict(list)
        for record in self.records:
            groups[record.api_version].append(record)
        return {version: groups[version] for version in sorted(groups, reverse=True)}

    @property
    def by_resource_type(self) -> dict[str, list[VersionRecord]]:
        """Records grouped by resource type, alphabetically."""
        groups: dict[str, list[VersionRecord]] = defaultdict(list)
        for record in self.records:
            groups[record.resource_type].append(record)
        return {rtype: groups[rtype] for rtype in sorted(groups)}


@dataclass
class VersionClassification:
    """Distinct API versions sorted into (possibly overlapping) buckets."""

    very_old: list[str] = field(default_factory=list)
    old: list[str] = field(default_factory=list)
    preview: list[str] = field(default_factory=list)

    def buckets_for(self, api_version: str) -> set[str]:
        return {
            name
            for name, versions in (
                ("very_old", self.very_old),
                ("old", self.old),
                ("preview", self.preview),
            )
            if api_version in versions
        }


def find_templates(root: Path) -> list[Path]:
    """All template files under ``root``, sorted.

    ``root`` may also be a single template file. Anything else that is not a
    directory yields an empty list.
    """
    root = Path(root)
    if root.is_file():
        return [root] if root.suffix == TEMPLATE_SUFFIX else []
    if not root.is_dir():
        logger.debug(f"Audit root does not exist: {root}")
        return []
    return sorted(p for p in root.rglob(f"*{TEMPLATE_SUFFIX}") if p.is_file())


def extract_declarations(text: str, source_file: Path) -> list[VersionRecord]:
    """Version records for every resource declaration in ``text``."""
    return [
        VersionRecord(
            api_version=match.group("api_version"),
            resource_type=match.group("resource_type"),
            source_file=source_file,
        )
        for match in DECLARATION_PATTERN.finditer(text)
    ]


def scan_templates(root: Path) -> ScanResult:
    """Read every template under ``root`` and collect its version records."""
    result = ScanResult(root=Path(root))
    for path in find_templates(root):
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.warning(f"Skipping unreadable template {path}: {e}")
            result.skipped.append(path)
            continue
        records = extract_declarations(text, path)
        logger.debug(f"{path}: {len(records)} resource declarations")
        result.files.append(path)
        result.records.extend(records)
    return result


def is_preview(api_version: str) -> bool:
    return PREVIEW_MARKER in api_version.lower()


def parse_version_date(api_version: str) -> date | None:
    """Date portion of an API version (``2023-06-01-preview`` -> 2023-06-01)."""
    try:
        return datetime.strptime(api_version[:10], "%Y-%m-%d").date()
    except ValueError:
        return None


def years_before(day: date, years: int) -> date:
    """Same calendar day ``years`` earlier; Feb 29 maps to Feb 28."""
    try:
        return day.replace(year=day.year - years)
    except ValueError:
        return day.replace(year=day.year - years, day=28)


def classify_api_versions(api_versions: list[str], today: date | None = None) -> VersionClassification:
    """Sort distinct API versions into very_old, old and preview buckets.

    Args:
        api_versions: API versions to classify (duplicates are ignored)
        today: Reference date (default: today)

    Returns:
        VersionClassification with each bucket newest first
    """
    today = today or date.today()
    one_year_ago = years_before(today, 1)
    two_years_ago = years_before(today, 2)

    classification = VersionClassification()
    for api_version in sorted(set(api_versions), reverse=True):
        preview = is_preview(api_version)
        if preview:
            classification.preview.append(api_version)

        version_date = parse_version_date(api_version)
        if version_date is None:
            logger.warning(f"Could not read a date from API version: {api_version}")
            continue

        if version_date < two_years_ago:
            classification.very_old.append(api_version)
        elif version_date < one_year_ago:
            classification.old.append(api_version)

    return classification


def split_resource_type(resource_type: str) -> tuple[str, str] | None:
    """Split ``Microsoft.Storage/storageAccounts/blobServices`` into namespace and kind.

    Returns None when there is no ``/`` to split on.
    """
    if "/" not in resource_type:
        return None
    namespace, kind = resource_type.split("/", 1)
    if not namespace or not kind:
        return None
    return namespace, kind


__all__ = [
    "DECLARATION_PATTERN",
    "PREVIEW_MARKER",
    "ScanResult",
    "VersionClassification",
    "VersionRecord",
    "classify_api_versions",
    "extract_declarations",
    "find_templates",
    "scan_templates",
    "split_resource_type",
]
