"""Tests for provider registry lookups and latest-version checks."""

import json
import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from biceplab.api_version_audit import ScanResult, VersionRecord
from biceplab.provider_registry import (
    AzureCliProviderRegistry,
    ProviderRegistry,
    ProviderRegistryError,
    check_latest_versions,
)

STORAGE_PROVIDER = [
    {"resourceType": "storageAccounts", "apiVersions": ["2023-05-01", "2023-01-01", "2022-09-01"]},
    {"resourceType": "storageAccounts/blobServices", "apiVersions": ["2023-05-01"]},
]


class StaticRegistry(ProviderRegistry):
    def __init__(self, versions: dict[str, list[str]], failing: set[str] | None = None):
        self.versions = versions
        self.failing = failing or set()
        self.lookups: list[tuple[str, str]] = []

    def list_api_versions(self, namespace, kind):
        self.lookups.append((namespace, kind))
        if namespace in self.failing:
            raise ProviderRegistryError(f"lookup failed for {namespace}")
        return self.versions.get(f"{namespace}/{kind}", [])


def _scan(*pairs: tuple[str, str]) -> ScanResult:
    return ScanResult(
        root=Path("."),
        files=[Path("main.bicep")],
        records=[VersionRecord(v, t, Path("main.bicep")) for t, v in pairs],
    )


class TestAzureCliProviderRegistry:
    """Test the az-backed registry."""

    @patch("biceplab.azure_cli_executor.subprocess.run")
    def test_returns_versions_newest_first(self, mock_run: MagicMock) -> None:
        mock_run.return_value = subprocess.CompletedProcess(
            args=["az"], returncode=0, stdout=json.dumps(STORAGE_PROVIDER), stderr=""
        )

        registry = AzureCliProviderRegistry()

        assert registry.latest_api_version("Microsoft.Storage", "storageAccounts") == "2023-05-01"
        args = mock_run.call_args[0][0]
        assert args[:5] == ["az", "provider", "show", "--namespace", "Microsoft.Storage"]

    @patch("biceplab.azure_cli_executor.subprocess.run")
    def test_kind_lookup_is_case_insensitive(self, mock_run: MagicMock) -> None:
        mock_run.return_value = subprocess.CompletedProcess(
            args=["az"], returncode=0, stdout=json.dumps(STORAGE_PROVIDER), stderr=""
        )

        registry = AzureCliProviderRegistry()

        assert registry.list_api_versions("Microsoft.Storage", "StorageAccounts/BlobServices") == [
            "2023-05-01"
        ]

    @patch("biceplab.azure_cli_executor.subprocess.run")
    def test_namespace_fetched_once(self, mock_run: MagicMock) -> None:
        mock_run.return_value = subprocess.CompletedProcess(
            args=["az"], returncode=0, stdout=json.dumps(STORAGE_PROVIDER), stderr=""
        )

        registry = AzureCliProviderRegistry()
        registry.latest_api_version("Microsoft.Storage", "storageAccounts")
        registry.latest_api_version("Microsoft.Storage", "storageAccounts/blobServices")

        assert mock_run.call_count == 1

    @patch("biceplab.azure_cli_executor.subprocess.run")
    def test_unknown_kind_returns_none(self, mock_run: MagicMock) -> None:
        mock_run.return_value = subprocess.CompletedProcess(
            args=["az"], returncode=0, stdout=json.dumps(STORAGE_PROVIDER), stderr=""
        )

        assert AzureCliProviderRegistry().latest_api_version("Microsoft.Storage", "nope") is None

    @patch("biceplab.azure_cli_executor.subprocess.run")
    def test_cli_failure_raises_registry_error(self, mock_run: MagicMock) -> None:
        mock_run.side_effect = subprocess.CalledProcessError(
            1, "az", stderr="ERROR: Please run 'az login' to setup account."
        )

        with pytest.raises(ProviderRegistryError, match="az login"):
            AzureCliProviderRegistry().latest_api_version("Microsoft.Storage", "storageAccounts")

    @patch("biceplab.azure_cli_executor.subprocess.run")
    def test_missing_cli_raises_registry_error(self, mock_run: MagicMock) -> None:
        mock_run.side_effect = FileNotFoundError("az")

        with pytest.raises(ProviderRegistryError, match="not found"):
            AzureCliProviderRegistry().latest_api_version("Microsoft.Storage", "storageAccounts")

    @patch("biceplab.azure_cli_executor.subprocess.run")
    def test_unrunnable_cli_raises_registry_error(self, mock_run: MagicMock) -> None:
        mock_run.side_effect = PermissionError(13, "Permission denied")

        with pytest.raises(ProviderRegistryError, match="Could not run az"):
            AzureCliProviderRegistry().latest_api_version("Microsoft.Storage", "storageAccounts")

    @pytest.mark.parametrize(
        "stdout",
        [
            json.dumps({"error": "x"}),
            json.dumps(["storageAccounts"]),
            json.dumps("Microsoft.Storage"),
        ],
    )
    @patch("biceplab.azure_cli_executor.subprocess.run")
    def test_malformed_provider_data_raises_registry_error(
        self, mock_run: MagicMock, stdout: str
    ) -> None:
        mock_run.return_value = subprocess.CompletedProcess(
            args=["az"], returncode=0, stdout=stdout, stderr=""
        )

        with pytest.raises(ProviderRegistryError, match="Unexpected provider data"):
            AzureCliProviderRegistry().latest_api_version("Microsoft.Storage", "storageAccounts")

    @patch("biceplab.azure_cli_executor.subprocess.run")
    def test_malformed_data_is_recorded_per_type(self, mock_run: MagicMock) -> None:
        mock_run.return_value = subprocess.CompletedProcess(
            args=["az"], returncode=0, stdout=json.dumps({"error": "x"}), stderr=""
        )
        scan = _scan(("Microsoft.Storage/storageAccounts", "2023-01-01"))

        checks = check_latest_versions(scan, AzureCliProviderRegistry())

        assert len(checks) == 1
        assert checks[0].latest is None
        assert "Unexpected provider data" in checks[0].error


class TestCheckLatestVersions:
    """Test comparing a scan against a registry."""

    def test_flags_match_and_mismatch(self):
        registry = StaticRegistry(
            {
                "Microsoft.Storage/storageAccounts": ["2023-05-01", "2023-01-01"],
                "Microsoft.Web/sites": ["2022-09-01"],
            }
        )
        scan = _scan(
            ("Microsoft.Storage/storageAccounts", "2023-01-01"),
            ("Microsoft.Web/sites", "2022-09-01"),
        )

        checks = {c.resource_type: c for c in check_latest_versions(scan, registry)}

        storage = checks["Microsoft.Storage/storageAccounts"]
        assert storage.latest == "2023-05-01"
        assert not storage.up_to_date
        assert storage.outdated_versions == ["2023-01-01"]
        assert checks["Microsoft.Web/sites"].up_to_date

    def test_type_without_separator_is_skipped(self):
        registry = StaticRegistry({})
        scan = _scan(("Microsoft.Storage", "2023-01-01"), ("Microsoft.Web/sites", "2022-09-01"))

        checks = check_latest_versions(scan, registry)

        assert [c.resource_type for c in checks] == ["Microsoft.Web/sites"]
        assert registry.lookups == [("Microsoft.Web", "sites")]

    def test_failed_lookup_is_recorded_and_others_continue(self):
        registry = StaticRegistry(
            {"Microsoft.Web/sites": ["2023-12-01"]}, failing={"Microsoft.Storage"}
        )
        scan = _scan(
            ("Microsoft.Storage/storageAccounts", "2023-01-01"),
            ("Microsoft.Web/sites", "2022-09-01"),
        )

        checks = {c.resource_type: c for c in check_latest_versions(scan, registry)}

        assert "lookup failed" in checks["Microsoft.Storage/storageAccounts"].error
        assert not checks["Microsoft.Storage/storageAccounts"].up_to_date
        assert checks["Microsoft.Web/sites"].latest == "2023-12-01"

    def test_unknown_type_reports_not_found(self):
        checks = check_latest_versions(_scan(("Contoso.Widgets/gadgets", "2021-01-01")), StaticRegistry({}))

        assert checks[0].latest is None
        assert checks[0].error == "not found in provider registry"
