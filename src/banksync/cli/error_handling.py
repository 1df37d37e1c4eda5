"""CLI error handling helpers."""

import click

from banksync.config import SyncConfig, load_config
from banksync.domain.errors import DomainError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def load_config_or_exit(ctx: click.Context) -> SyncConfig:
    """Load the config named on the command line, or exit with a CLI error."""
    try:
        return load_config(ctx.obj["config_path"])
    except DomainError as e:
        handle_domain_error(ctx, e)
