"""Resource provider registry lookups.

Answers "what is the newest API version Azure knows for this resource
type?" for the audit's ``--show-latest`` mode. The Azure CLI returns a
provider's API versions newest first; only the first one is used.

Lookups are read-only and may fail (offline, not logged in, unknown
namespace). Failures are recorded per resource type and never stop the
audit.
"""

import json
import logging
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from biceplab.api_version_audit import ScanResult, split_resource_type
from biceplab.azure_cli_executor import run_az_command

logger = logging.getLogger(__name__)


class ProviderRegistryError(Exception):
    """Raised when a provider registry lookup fails."""

    pass


class ProviderRegistry(ABC):
    """Source of known API versions per resource type."""

    @abstractmethod
    def list_api_versions(self, namespace: str, kind: str) -> list[str]:
        """Known API versions for ``namespace/kind``, newest first."""

    def latest_api_version(self, namespace: str, kind: str) -> str | None:
        versions = self.list_api_versions(namespace, kind)
        return versions[0] if versions else None


class AzureCliProviderRegistry(ProviderRegistry):
    """ProviderRegistry backed by ``az provider show``.

    Each namespace is fetched once per registry instance.
    """

    def __init__(self, az_executable: str = "az"):
        self.az = az_executable
        self._namespaces: dict[str, dict[str, list[str]]] = {}

    def _load_namespace(self, namespace: str) -> dict[str, list[str]]:
        if namespace in self._namespaces:
            return self._namespaces[namespace]

        cmd = [
            self.az,
            "provider",
            "show",
            "--namespace",
            namespace,
            "--query",
            "resourceTypes[].{resourceType: resourceType, apiVersions: apiVersions}",
            "--output",
            "json",
        ]
        try:
            result = run_az_command(cmd)
            entries = json.loads(result.stdout or "[]")
        except FileNotFoundError as e:
            raise ProviderRegistryError(f"Azure CLI executable not found: {self.az}") from e
        except subprocess.CalledProcessError as e:
            detail = (e.stderr or "").strip().splitlines()
            raise ProviderRegistryError(
                f"az provider show failed for {namespace}: {detail[0] if detail else e.returncode}"
            ) from e
        except OSError as e:
            raise ProviderRegistryError(f"Could not run {self.az}: {e}") from e
        except json.JSONDecodeError as e:
            raise ProviderRegistryError(f"Unreadable provider data for {namespace}: {e}") from e

        if entries is None:
            entries = []
        if not isinstance(entries, list) or not all(isinstance(entry, dict) for entry in entries):
            raise ProviderRegistryError(
                f"Unexpected provider data for {namespace}: expected a list of resource types"
            )

        # Resource type names are case-insensitive
        types = {
            entry["resourceType"].lower(): [
                v for v in entry.get("apiVersions") or [] if isinstance(v, str)
            ]
            for entry in entries
            if isinstance(entry.get("resourceType"), str)
        }
        self._namespaces[namespace] = types
        return types

    def list_api_versions(self, namespace: str, kind: str) -> list[str]:
        return self._load_namespace(namespace).get(kind.lower(), [])


@dataclass
class LatestVersionCheck:
    """Used versions of one resource type compared with the registry's newest."""

    resource_type: str
    used_versions: list[str] = field(default_factory=list)
    latest: str | None = None
    error: str | None = None

    @property
    def outdated_versions(self) -> list[str]:
        if self.latest is None:
            return []
        return [v for v in self.used_versions if v != self.latest]

    @property
    def up_to_date(self) -> bool:
        return self.latest is not None and not self.outdated_versions


def check_latest_versions(scan: ScanResult, registry: ProviderRegistry) -> list[LatestVersionCheck]:
    """Look up the newest API version for every resource type in a scan.

    Resource types without a namespace/kind separator are skipped.
    """
    checks: list[LatestVersionCheck] = []
    for resource_type, records in scan.by_resource_type.items():
        parts = split_resource_type(resource_type)
        if parts is None:
            logger.debug(f"Skipping latest-version lookup for {resource_type}")
            continue

        check = LatestVersionCheck(
            resource_type=resource_type,
            used_versions=sorted({r.api_version for r in records}, reverse=True),
        )
        try:
            check.latest = registry.latest_api_version(*parts)
            if check.latest is None:
                check.error = "not found in provider registry"
        except ProviderRegistryError as e:
            logger.debug(f"Registry lookup failed for {resource_type}: {e}")
            check.error = str(e)
        checks.append(check)

    return checks


__all__ = [
    "AzureCliProviderRegistry",
    "LatestVersionCheck",
    "ProviderRegistry",
    "ProviderRegistryError",
    "check_latest_versions",
]
