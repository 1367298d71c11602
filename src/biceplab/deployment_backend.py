"""Deployment backend interface and its Azure CLI implementation.

Callers (the deployer and the cleanup command) depend only on
DeploymentBackend. AzureCliDeploymentBackend shells out to ``az`` and
hands the CLI's own output back unchanged so it can be printed verbatim.

Every operation is all-or-nothing: a non-zero exit raises
DeploymentBackendError carrying the CLI's stdout and stderr. Nothing is
retried.
"""

import json
import logging
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from biceplab.azure_cli_executor import run_az_command, sanitize_command

logger = logging.getLogger(__name__)


class DeploymentBackendError(Exception):
    """Raised when an external deployment command fails."""

    def __init__(
        self,
        message: str,
        command: list[str] | None = None,
        returncode: int | None = None,
        stdout: str = "",
        stderr: str = "",
    ):
        super().__init__(message)
        self.command = command or []
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr

    @property
    def cli_output(self) -> str:
        """Whatever the CLI printed, stderr first."""
        return "\n".join(part for part in (self.stderr.strip(), self.stdout.strip()) if part)


class DeploymentBackend(ABC):
    """Operations the tutorial needs from a cloud deployment tool."""

    @abstractmethod
    def create_resource_group(self, name: str, location: str) -> str:
        """Create (or update) a resource group. Returns the tool's output."""

    @abstractmethod
    def validate_template(
        self,
        resource_group: str,
        template_file: Path,
        parameters_file: Path | None = None,
        parameters: dict[str, str] | None = None,
    ) -> str:
        """Validate a template against a resource group without deploying it."""

    @abstractmethod
    def deploy_template(
        self,
        resource_group: str,
        template_file: Path,
        deployment_name: str,
        parameters_file: Path | None = None,
        parameters: dict[str, str] | None = None,
    ) -> str:
        """Deploy a template into a resource group. Returns the tool's output."""

    @abstractmethod
    def show_deployment_outputs(self, resource_group: str, deployment_name: str) -> dict[str, Any]:
        """Return the outputs of a finished deployment."""

    @abstractmethod
    def list_resources(self, resource_group: str) -> str:
        """Return a human-readable table of the resources in a group."""

    @abstractmethod
    def delete_resource_group(self, name: str) -> str:
        """Delete a resource group and everything in it."""


class AzureCliDeploymentBackend(DeploymentBackend):
    """DeploymentBackend that invokes the Azure CLI."""

    def __init__(self, az_executable: str = "az"):
        self.az = az_executable

    def _run(self, args: list[str]) -> str:
        cmd = [self.az, *args]
        try:
            result = run_az_command(cmd)
        except FileNotFoundError as e:
            raise DeploymentBackendError(
                f"Azure CLI executable not found: {self.az}", command=cmd
            ) from e
        except subprocess.CalledProcessError as e:
            raise DeploymentBackendError(
                f"Command failed with exit code {e.returncode}: {sanitize_command(cmd)}",
                command=cmd,
                returncode=e.returncode,
                stdout=e.stdout or "",
                stderr=e.stderr or "",
            ) from e
        return result.stdout

    @staticmethod
    def _parameter_args(
        parameters_file: Path | None, parameters: dict[str, str] | None
    ) -> list[str]:
        args: list[str] = []
        if parameters_file is not None:
            args.extend(["--parameters", f"@{parameters_file}"])
        if parameters:
            args.append("--parameters")
            args.extend(f"{key}={value}" for key, value in parameters.items())
        return args

    def create_resource_group(self, name: str, location: str) -> str:
        return self._run(["group", "create", "--name", name, "--location", location])

    def validate_template(
        self,
        resource_group: str,
        template_file: Path,
        parameters_file: Path | None = None,
        parameters: dict[str, str] | None = None,
    ) -> str:
        return self._run(
            [
                "deployment",
                "group",
                "validate",
                "--resource-group",
                resource_group,
                "--template-file",
                str(template_file),
                *self._parameter_args(parameters_file, parameters),
            ]
        )

    def deploy_template(
        self,
        resource_group: str,
        template_file: Path,
        deployment_name: str,
        parameters_file: Path | None = None,
        parameters: dict[str, str] | None = None,
    ) -> str:
        return self._run(
            [
                "deployment",
                "group",
                "create",
                "--resource-group",
                resource_group,
                "--template-file",
                str(template_file),
                "--name",
                deployment_name,
                *self._parameter_args(parameters_file, parameters),
            ]
        )

    def show_deployment_outputs(self, resource_group: str, deployment_name: str) -> dict[str, Any]:
        stdout = self._run(
            [
                "deployment",
                "group",
                "show",
                "--resource-group",
                resource_group,
                "--name",
                deployment_name,
                "--query",
                "properties.outputs",
                "--output",
                "json",
            ]
        )
        if not stdout.strip():
            return {}
        try:
            outputs = json.loads(stdout)
        except json.JSONDecodeError as e:
            raise DeploymentBackendError(
                f"Could not parse deployment outputs: {e}", stdout=stdout
            ) from e
        return outputs or {}

    def list_resources(self, resource_group: str) -> str:
        return self._run(["resource", "list", "--resource-group", resource_group, "--output", "table"])

    def delete_resource_group(self, name: str) -> str:
        return self._run(["group", "delete", "--name", name, "--yes", "--no-wait"])


__all__ = ["AzureCliDeploymentBackend", "DeploymentBackend", "DeploymentBackendError"]
