"""CLI commands for banksync."""
