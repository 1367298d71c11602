"""CLI entry point for biceplab.

Commands:
    biceplab scaffold [TARGET]      # Write the tutorial docs and examples
    biceplab examples list          # List the examples
    biceplab deploy <example>       # Deploy an example with the Azure CLI
    biceplab cleanup                # Delete the tutorial resource group
    biceplab audit [PATH]           # Audit pinned API versions
    biceplab config show|set        # Manage defaults
"""

import logging

import click

from biceplab import __version__
from biceplab.click_group import BiceplabGroup
from biceplab.commands.audit import audit_command
from biceplab.commands.config import config_group
from biceplab.commands.deploy import cleanup_command, deploy_command
from biceplab.commands.examples import examples_group
from biceplab.commands.scaffold import scaffold_command

logger = logging.getLogger(__name__)


@click.group(
    cls=BiceplabGroup,
    invoke_without_command=True,
    context_settings={"help_option_names": ["--help", "-h"]},
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug output, including az commands")
@click.pass_context
@click.version_option(version=__version__)
def main(ctx: click.Context, verbose: bool) -> None:
    """biceplab - hands-on companion for the Bicep tutorial.

    Scaffolds the tutorial's docs and example templates, deploys the
    examples with the Azure CLI, and audits the API versions they use.

    \b
    GETTING STARTED:
        scaffold      Write README, docs/ and examples/ to a directory
        examples      List and inspect the examples

    \b
    DEPLOYMENT (requires the Azure CLI and 'az login'):
        deploy        Deploy an example to a resource group
        cleanup       Delete the tutorial resource group

    \b
    MAINTENANCE:
        audit         Report old and preview API versions in templates
        config        View and change defaults

    \b
    EXAMPLES:
        $ biceplab scaffold ~/bicep-tutorial
        $ cd ~/bicep-tutorial
        $ biceplab deploy 01
        $ biceplab deploy 02 -e prod -g rg-bicep-prod
        $ biceplab audit --detailed
        $ biceplab cleanup --yes

    \b
    CONFIGURATION:
        Config file: ~/.biceplab/config.toml
        Set defaults: default_resource_group, default_location,
                      default_environment, examples_dir

    For help on any command: biceplab <command> --help
    """
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit(0)


main.add_command(scaffold_command)
main.add_command(examples_group)
main.add_command(deploy_command)
main.add_command(cleanup_command)
main.add_command(audit_command)
main.add_command(config_group)


if __name__ == "__main__":
    main()
