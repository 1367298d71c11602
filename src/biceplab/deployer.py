"""Example deployment workflow.

Runs one tutorial example through a DeploymentBackend:

1. Create (or reuse) the resource group
2. Validate the template
3. Deploy it
4. Read back the deployment outputs
5. List the resources now in the group

Any backend failure aborts the workflow; nothing is rolled back or retried.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from biceplab.deployment_backend import DeploymentBackend
from biceplab.example_catalog import ExampleDefinition

logger = logging.getLogger(__name__)


class DeploymentError(Exception):
    """Raised when an example cannot be deployed from the local files."""

    pass


@dataclass
class DeploymentRequest:
    """What to deploy and where."""

    example: ExampleDefinition
    resource_group: str
    location: str
    environment: str
    deployment_name: str | None = None
    skip_validation: bool = False
    parameters: dict[str, str] = field(default_factory=dict)


@dataclass
class DeploymentResult:
    """Everything the workflow learned from the backend."""

    deployment_name: str
    resource_group: str
    template_file: Path
    parameter_file: Path | None
    deploy_output: str
    outputs: dict[str, Any] = field(default_factory=dict)
    resources_table: str = ""
    validated: bool = False


def generate_deployment_name(prefix: str, now: datetime | None = None) -> str:
    """Build a unique deployment name, e.g. ``params-deployment-20250701-093000``."""
    now = now or datetime.now()
    return f"{prefix}-deployment-{now:%Y%m%d-%H%M%S}"


class ExampleDeployer:
    """Deploy tutorial examples from a scaffolded examples directory."""

    def __init__(
        self,
        backend: DeploymentBackend,
        examples_dir: Path,
        progress_callback: Callable[[str], None] | None = None,
    ):
        self.backend = backend
        self.examples_dir = Path(examples_dir)
        self.progress_callback = progress_callback

    def _progress(self, message: str) -> None:
        logger.debug(message)
        if self.progress_callback:
            self.progress_callback(message)

    def resolve_parameter_file(self, example: ExampleDefinition, environment: str) -> Path | None:
        """Parameter file for an environment, or None if it is not on disk."""
        name = example.parameter_file_for(environment)
        if name is None:
            return None

        path = example.directory(self.examples_dir) / name
        if not path.exists():
            self._progress(f"Parameter file not found: {path} (deploying with template defaults)")
            return None
        return path

    def deploy(self, request: DeploymentRequest) -> DeploymentResult:
        """Run the full workflow for one example.

        Raises:
            DeploymentError: If the example's template is missing locally
            DeploymentBackendError: If any backend call fails
        """
        example = request.example
        template_file = example.template_path(self.examples_dir)
        if not template_file.exists():
            raise DeploymentError(
                f"Template not found: {template_file}\n"
                "Run 'biceplab scaffold' to generate the examples first."
            )

        deployment_name = request.deployment_name or generate_deployment_name(
            example.deployment_prefix
        )
        parameter_file = self.resolve_parameter_file(example, request.environment)
        if parameter_file:
            self._progress(f"Using parameter file: {parameter_file.name}")

        self._progress("Creating resource group...")
        self.backend.create_resource_group(request.resource_group, request.location)

        validated = False
        if not request.skip_validation:
            self._progress("Validating template...")
            self.backend.validate_template(
                request.resource_group, template_file, parameter_file, request.parameters or None
            )
            validated = True

        self._progress("Deploying template...")
        deploy_output = self.backend.deploy_template(
            request.resource_group,
            template_file,
            deployment_name,
            parameter_file,
            request.parameters or None,
        )

        outputs = self.backend.show_deployment_outputs(request.resource_group, deployment_name)
        resources_table = self.backend.list_resources(request.resource_group)

        logger.debug(f"Deployment {deployment_name} succeeded")
        return DeploymentResult(
            deployment_name=deployment_name,
            resource_group=request.resource_group,
            template_file=template_file,
            parameter_file=parameter_file,
            deploy_output=deploy_output,
            outputs=outputs,
            resources_table=resources_table,
            validated=validated,
        )


__all__ = [
    "DeploymentError",
    "DeploymentRequest",
    "DeploymentResult",
    "ExampleDeployer",
    "generate_deployment_name",
]
