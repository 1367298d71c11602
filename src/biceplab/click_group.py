"""Click group shared by ``biceplab`` and its subgroups.

Commands are listed in the order they are registered, which follows the
tutorial workflow (scaffold, examples, deploy, cleanup, audit, config)
rather than alphabetical order.

On a usage error the message is printed together with the help of the
command that failed. Unknown command names are reported with the list of
available commands.
"""

from typing import Any

import click


class BiceplabGroup(click.Group):
    """Group that keeps registration order and explains usage errors."""

    def list_commands(self, ctx: click.Context) -> list[str]:
        return list(self.commands)

    def resolve_command(
        self, ctx: click.Context, args: list[str]
    ) -> tuple[str | None, click.Command | None, list[str]]:
        name = args[0] if args else ""
        unknown = name and not name.startswith("-") and self.get_command(ctx, name) is None
        if unknown and not ctx.resilient_parsing:
            available = ", ".join(self.list_commands(ctx))
            raise click.UsageError(f"No such command '{name}'. Available commands: {available}", ctx)
        return super().resolve_command(ctx, args)

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except click.UsageError as e:
            # Show the failing subcommand's help, not this group's
            error_ctx = e.ctx or ctx
            click.echo(f"Error: {e.format_message()}\n", err=True)
            click.echo(error_ctx.get_help(), err=True)
            error_ctx.exit(e.exit_code)


BiceplabGroup.group_class = BiceplabGroup
