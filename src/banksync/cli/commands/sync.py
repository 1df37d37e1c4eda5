"""Sync command."""

import click

from banksync.cli.error_handling import handle_domain_error, load_config_or_exit
from banksync.domain.errors import DomainError
from banksync.domain.sync import AccountSyncResult, SyncService, build_trigger, run_on_schedule
from banksync.ledger.factories import create_ledger_client
from banksync.providers.factories import create_provider_registry
from banksync.utils.date_parser import parse_date


def echo_results(results: list[AccountSyncResult], dry_run: bool = False) -> None:
    """Print one line per account and the failures, if any."""
    click.echo("\nSync complete:" if not dry_run else "\nDry run complete:")
    for result in results:
        label = f"  {result.source_account_number} ({result.provider})"
        if not result.ok:
            click.echo(f"{label}: failed: {result.error}", err=True)
        elif dry_run:
            click.echo(
                f"{label}: would create {result.planned_creates}, "
                f"would update {result.planned_updates}"
            )
        else:
            click.echo(f"{label}: created {result.created}, updated {result.updated}")


@click.command("sync")
@click.option(
    "--watch/--once",
    default=False,
    envvar="BANKSYNC_WATCH",
    help="Keep running and sync on the configured schedule (default: sync once and exit)",
)
@click.option("--dry-run", is_flag=True, help="Show what would change without writing to the ledger")
@click.option(
    "--since",
    help="Sync transactions from this date, e.g. 2024-01-15 or 'last week' "
    "(one-shot runs only; default: 'lookback_days' before now)",
)
@click.pass_context
def sync_accounts(ctx, watch: bool, dry_run: bool, since: str | None):
    """Sync all configured accounts into the ledger.

    Examples:
        banksync sync
        banksync sync --dry-run --since "last month"
        banksync --config /etc/banksync.yaml sync --watch
    """
    if watch and since:
        raise click.UsageError("--since cannot be combined with --watch", ctx=ctx)

    config = load_config_or_exit(ctx)

    since_date = None
    if since:
        try:
            since_date = parse_date(since)
        except ValueError as e:
            click.echo(f"Error: Invalid since date: {e}", err=True)
            ctx.exit(1)

    try:
        registry = create_provider_registry(config.providers)
        ledger = create_ledger_client(config.ledger)
    except DomainError as e:
        handle_domain_error(ctx, e)
    ctx.call_on_close(ledger.close)

    service = SyncService(config, registry, ledger, dry_run=dry_run)

    if watch:
        run_on_schedule(
            service,
            build_trigger(config),
            on_cycle=lambda results: echo_results(results, dry_run=dry_run),
        )
        return

    results = service.sync_all(since=since_date)
    echo_results(results, dry_run=dry_run)


def register_commands(cli):
    """Register sync command with main CLI."""
    cli.add_command(sync_accounts)
