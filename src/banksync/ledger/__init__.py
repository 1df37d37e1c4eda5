"""Ledger layer for banksync."""

from banksync.ledger.base import LedgerClient
from banksync.ledger.factories import create_ledger_client, create_sqlite_ledger

__all__ = ["LedgerClient", "create_ledger_client", "create_sqlite_ledger"]
