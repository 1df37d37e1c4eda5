"""Provider listing command."""

import click

from banksync.providers.factories import create_provider_registry


@click.command("providers")
def list_providers():
    """List the bank providers that accounts can use."""
    registry = create_provider_registry()
    click.echo("\nProviders:")
    click.echo("-" * 40)
    for slug in registry.slugs():
        provider = registry.get(slug)
        doc_lines = (provider.__doc__ or "").strip().splitlines()
        summary = doc_lines[0] if doc_lines else ""
        click.echo(f"{slug:15s} | {summary}")


def register_commands(cli):
    """Register providers command with main CLI."""
    cli.add_command(list_providers)
