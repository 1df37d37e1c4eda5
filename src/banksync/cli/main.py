"""Main CLI entry point."""

import click

from banksync.logging_setup import configure_logging

# Import and register all commands at module level
from banksync.cli.commands import sync, providers, check_config


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default="config.yaml",
    show_default=True,
    help="Path to config file (overrides BANKSYNC_CONFIG environment variable)",
    envvar="BANKSYNC_CONFIG",
)
@click.option(
    "--log-level",
    help="Log level, e.g. DEBUG or INFO (overrides BANKSYNC_LOG_LEVEL environment variable)",
    envvar="BANKSYNC_LOG_LEVEL",
)
@click.pass_context
def cli(ctx, config_path: str, log_level: str | None):
    """banksync - Mirror bank transactions into your budget.

    Fetches recent transactions for each configured bank account and
    reconciles them against the budget ledger, creating missing transactions
    and updating changed ones.
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path

    if ctx.invoked_subcommand is not None:
        try:
            configure_logging(log_level, force=True)
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="--log-level")


# Register all commands
sync.register_commands(cli)
providers.register_commands(cli)
check_config.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
