"""Command-line interface for banksync."""
