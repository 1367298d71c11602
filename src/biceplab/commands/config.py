"""Configuration commands."""

import logging
import os
import sys

import click

from biceplab.click_group import BiceplabGroup
from biceplab.config_manager import ENV_OVERRIDES, BiceplabConfig, ConfigError, ConfigManager

logger = logging.getLogger(__name__)


@click.group(name="config", cls=BiceplabGroup)
def config_group():
    """View and change biceplab defaults.

    Stored in ~/.biceplab/config.toml. BICEPLAB_* environment variables
    override the file.

    \b
    SUBCOMMANDS:
        show   Show the effective configuration
        set    Set a configuration value
    """
    pass


@config_group.command(name="show")
@click.option("--config", "config_path", help="Config file path", type=click.Path())
def config_show(config_path: str | None):
    """Show the effective configuration and where each value comes from."""
    try:
        stored = ConfigManager.load_config(config_path)
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    effective = stored.with_environment()
    click.echo(f"Config file: {config_path or ConfigManager.DEFAULT_CONFIG_FILE}\n")
    for key in BiceplabConfig.keys():
        env_var = ENV_OVERRIDES[key]
        source = f"  (from {env_var})" if os.getenv(env_var) else ""
        click.echo(f"  {key:<24} {getattr(effective, key)}{source}")


@config_group.command(name="set")
@click.argument("key", type=click.Choice(BiceplabConfig.keys()))
@click.argument("value", type=str)
@click.option("--config", "config_path", help="Config file path", type=click.Path())
def config_set(key: str, value: str, config_path: str | None):
    """Set a configuration value.

    \b
    Examples:
        biceplab config set default_resource_group rg-bicep-lab
        biceplab config set default_location westeurope
    """
    try:
        ConfigManager.set_value(key, value, config_path)
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"Set {key} = {value}")


__all__ = ["config_group", "config_set", "config_show"]
