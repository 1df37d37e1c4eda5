"""Config validation command."""

import click

from banksync.cli.error_handling import handle_domain_error, load_config_or_exit
from banksync.domain.errors import DomainError
from banksync.providers.factories import create_provider_registry


@click.command("check-config")
@click.pass_context
def check_config(ctx):
    """Validate the config file and show the configured accounts."""
    config = load_config_or_exit(ctx)
    try:
        registry = create_provider_registry(config.providers)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if config.schedule_minutes is not None:
        schedule = f"every {config.schedule_minutes} minutes"
    else:
        schedule = f"cron '{config.schedule}'"

    click.echo(f"Ledger: {config.ledger.get('type')}")
    click.echo(f"Lookback: {config.lookback_days} days, schedule: {schedule}")
    click.echo("\nAccounts:")
    click.echo("-" * 60)

    unknown = []
    for pairing in config.accounts:
        flag = " (match uncleared)" if pairing.match_uncleared else ""
        click.echo(
            f"{pairing.source_account_number} [{pairing.provider}] -> "
            f"{pairing.budget_id}/{pairing.target_account_id}{flag}"
        )
        if pairing.provider not in registry:
            unknown.append(pairing.provider)

    if unknown:
        for slug in sorted(set(unknown)):
            click.echo(f"Error: Provider '{slug}' not recognized", err=True)
        ctx.exit(1)


def register_commands(cli):
    """Register check-config command with main CLI."""
    cli.add_command(check_config)
