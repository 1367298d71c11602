"""Deployment commands for the tutorial examples.

- deploy:  Create the resource group and deploy one example
- cleanup: Delete a tutorial resource group

Both shell out to the Azure CLI through a DeploymentBackend. When the CLI
fails its own output is printed unchanged and the command exits 1.
"""

import json
import logging
import sys
from pathlib import Path

import click

from biceplab.config_manager import ConfigError, ConfigManager
from biceplab.deployer import DeploymentError, DeploymentRequest, ExampleDeployer
from biceplab.deployment_backend import (
    AzureCliDeploymentBackend,
    DeploymentBackend,
    DeploymentBackendError,
)
from biceplab.example_catalog import CatalogError, ExampleCatalog
from biceplab.prerequisites import PrerequisiteChecker, PrerequisiteError

logger = logging.getLogger(__name__)


def _get_backend(ctx: click.Context) -> DeploymentBackend:
    """Backend from the context (tests inject doubles there), else the Azure CLI."""
    if isinstance(ctx.obj, dict) and ctx.obj.get("backend") is not None:
        return ctx.obj["backend"]
    PrerequisiteChecker.ensure_ready()
    return AzureCliDeploymentBackend()


def _parse_parameters(values: tuple[str, ...]) -> dict[str, str]:
    parameters: dict[str, str] = {}
    for value in values:
        if "=" not in value:
            raise click.BadParameter(f"Expected KEY=VALUE, got {value!r}", param_hint="--parameter")
        key, val = value.split("=", 1)
        parameters[key.strip()] = val.strip()
    return parameters


def _report_backend_error(e: DeploymentBackendError) -> None:
    click.echo(f"Error: {e}", err=True)
    if e.cli_output:
        click.echo(e.cli_output, err=True)


@click.command(name="deploy")
@click.argument("example", type=str)
@click.option("--resource-group", "-g", help="Resource group (default: from config)", type=str)
@click.option("--location", "-l", help="Azure location (default: from config)", type=str)
@click.option("--environment", "-e", help="Environment, selects the parameter file", type=str)
@click.option("--examples-dir", help="Scaffolded examples directory", type=click.Path(path_type=Path))
@click.option("--name", "deployment_name", help="Deployment name (default: generated)", type=str)
@click.option("--parameter", "-p", "parameters", multiple=True, help="Extra KEY=VALUE template parameter")
@click.option("--skip-validation", is_flag=True, help="Deploy without validating first")
@click.pass_context
def deploy_command(
    ctx: click.Context,
    example: str,
    resource_group: str | None,
    location: str | None,
    environment: str | None,
    examples_dir: Path | None,
    deployment_name: str | None,
    parameters: tuple[str, ...],
    skip_validation: bool,
):
    """Deploy a tutorial example to Azure.

    EXAMPLE is the example directory name or its number
    (e.g. 02-parameters-variables or 2).

    \b
    Examples:
        biceplab deploy 01
        biceplab deploy 02 -e prod -g rg-bicep-prod
        biceplab deploy 03-modules --location westeurope
    """
    try:
        config = ConfigManager.get_effective_config()
        catalog = ExampleCatalog.load()
        definition = catalog.get(example)

        rg = resource_group or config.default_resource_group
        if not ConfigManager.validate_resource_group_name(rg):
            raise click.BadParameter(f"Invalid resource group name: {rg}", param_hint="--resource-group")
        final_location = location or config.default_location
        final_environment = environment or config.default_environment
        final_examples_dir = examples_dir or Path(config.examples_dir)

        backend = _get_backend(ctx)
        deployer = ExampleDeployer(backend, final_examples_dir, progress_callback=click.echo)

        request = DeploymentRequest(
            example=definition,
            resource_group=rg,
            location=final_location,
            environment=final_environment,
            deployment_name=deployment_name,
            skip_validation=skip_validation,
            parameters=_parse_parameters(parameters),
        )

        click.echo(f"Deploying example {definition.name}: {definition.title}")
        click.echo(f"Resource Group: {rg}")
        click.echo(f"Location:       {final_location}")
        click.echo(f"Environment:    {final_environment}")
        click.echo("")

        result = deployer.deploy(request)

        click.echo(f"\n✓ Deployment {result.deployment_name} succeeded")
        click.echo("\nDeployment outputs:")
        click.echo(json.dumps(result.outputs, indent=2))
        click.echo("\nCreated resources:")
        click.echo(result.resources_table.rstrip())

        if len(definition.parameter_files) > 1:
            click.echo("\nExample usage for different environments:")
            for env_name in definition.parameter_files:
                if env_name == "default":
                    click.echo(f"  biceplab deploy {definition.name}")
                else:
                    click.echo(f"  biceplab deploy {definition.name} -e {env_name}")

    except (ConfigError, CatalogError, DeploymentError, PrerequisiteError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except DeploymentBackendError as e:
        _report_backend_error(e)
        sys.exit(1)
    except click.ClickException:
        raise
    except Exception as e:
        logger.exception("Unexpected error during deployment")
        click.echo(f"Unexpected error: {e}", err=True)
        sys.exit(1)


@click.command(name="cleanup")
@click.option("--resource-group", "-g", help="Resource group to delete (default: from config)", type=str)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def cleanup_command(ctx: click.Context, resource_group: str | None, yes: bool):
    """Delete a tutorial resource group and everything in it.

    Deletion runs asynchronously in Azure; the command returns once the
    request is accepted.

    \b
    Examples:
        biceplab cleanup
        biceplab cleanup -g rg-bicep-prod --yes
    """
    try:
        rg = resource_group or ConfigManager.get_effective_config().default_resource_group

        if not yes:
            click.echo(f"\nResource group: {rg}")
            click.echo("All resources in this group will be deleted. This cannot be undone.")
            if not click.confirm("\nDelete this resource group?", default=False):
                click.echo("Cancelled.")
                return

        backend = _get_backend(ctx)
        backend.delete_resource_group(rg)
        click.echo(f"Deletion of resource group '{rg}' started.")

    except (ConfigError, PrerequisiteError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except DeploymentBackendError as e:
        _report_backend_error(e)
        sys.exit(1)
    except (click.ClickException, click.exceptions.Abort):
        raise
    except Exception as e:
        logger.exception("Unexpected error during cleanup")
        click.echo(f"Unexpected error: {e}", err=True)
        sys.exit(1)


__all__ = ["cleanup_command", "deploy_command"]
