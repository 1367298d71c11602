"""
Shared test fixtures for biceplab tests.

This module provides common fixtures used across all test types:
- Template corpora written to tmp_path
- A scaffolded examples directory
- A recording DeploymentBackend double
- An isolated home/config directory
"""

from pathlib import Path
from typing import Any

import pytest

from biceplab.deployment_backend import DeploymentBackend, DeploymentBackendError

# ============================================================================
# DIRECTORY FIXTURES
# ============================================================================


@pytest.fixture
def temp_home_dir(tmp_path, monkeypatch):
    """Temporary home directory.

    Points HOME and ConfigManager at tmp_path so nothing touches the
    real ~/.biceplab.
    """
    from biceplab.config_manager import ENV_OVERRIDES, ConfigManager

    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    monkeypatch.setattr(ConfigManager, "DEFAULT_CONFIG_DIR", home_dir / ".biceplab")
    monkeypatch.setattr(ConfigManager, "DEFAULT_CONFIG_FILE", home_dir / ".biceplab" / "config.toml")
    for env_var in ENV_OVERRIDES.values():
        monkeypatch.delenv(env_var, raising=False)
    return home_dir


@pytest.fixture
def template_tree(tmp_path):
    """Factory writing ``{relative path: content}`` under tmp_path/templates."""
    root = tmp_path / "templates"
    root.mkdir()

    def _write(files: dict[str, str]) -> Path:
        for relative, content in files.items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
        return root

    return _write


@pytest.fixture
def scaffolded_workspace(tmp_path):
    """The bundled corpus scaffolded into tmp_path/workspace."""
    from biceplab.scaffolder import Scaffolder

    workspace = tmp_path / "workspace"
    Scaffolder().scaffold(workspace)
    return workspace


# ============================================================================
# DEPLOYMENT BACKEND DOUBLE
# ============================================================================


class FakeDeploymentBackend(DeploymentBackend):
    """Records every call; optionally fails on a named operation."""

    def __init__(self, fail_on: str | None = None, outputs: dict[str, Any] | None = None):
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.fail_on = fail_on
        self.outputs = outputs if outputs is not None else {
            "storageAccountName": {"type": "String", "value": "stbicepdev123"}
        }

    def _record(self, operation: str, *args: Any) -> None:
        self.calls.append((operation, args))
        if operation == self.fail_on:
            raise DeploymentBackendError(
                f"Command failed with exit code 1: az {operation}",
                command=["az", operation],
                returncode=1,
                stderr="ERROR: (AuthorizationFailed) The client does not have authorization",
            )

    @property
    def operations(self) -> list[str]:
        return [operation for operation, _ in self.calls]

    def create_resource_group(self, name, location):
        self._record("create_resource_group", name, location)
        return '{"name": "%s", "properties": {"provisioningState": "Succeeded"}}' % name

    def validate_template(self, resource_group, template_file, parameters_file=None, parameters=None):
        self._record("validate_template", resource_group, template_file, parameters_file, parameters)
        return "{}"

    def deploy_template(
        self, resource_group, template_file, deployment_name, parameters_file=None, parameters=None
    ):
        self._record(
            "deploy_template", resource_group, template_file, deployment_name, parameters_file, parameters
        )
        return '{"properties": {"provisioningState": "Succeeded"}}'

    def show_deployment_outputs(self, resource_group, deployment_name):
        self._record("show_deployment_outputs", resource_group, deployment_name)
        return self.outputs

    def list_resources(self, resource_group):
        self._record("list_resources", resource_group)
        return "Name           ResourceGroup      Location\n-------------  -----------------  --------\nstbicepdev123  rg-bicep-tutorial  eastus\n"

    def delete_resource_group(self, name):
        self._record("delete_resource_group", name)
        return ""


@pytest.fixture
def fake_backend():
    """A recording backend that succeeds on every call."""
    return FakeDeploymentBackend()


@pytest.fixture
def failing_backend():
    """Factory for a backend that fails on one operation."""

    def _make(operation: str) -> FakeDeploymentBackend:
        return FakeDeploymentBackend(fail_on=operation)

    return _make
