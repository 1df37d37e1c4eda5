"""Ledger factory functions for creating ledger clients."""

import os
from pathlib import Path
from typing import Any, Mapping, Optional

from banksync.domain.errors import ConfigurationError
from banksync.ledger.base import LedgerClient
from banksync.ledger.sqlalchemy_ledger import SQLAlchemyLedger
from banksync.ledger.ynab import DEFAULT_BASE_URL, YNABClient


def create_sqlite_ledger(database_path: Optional[str] = None) -> SQLAlchemyLedger:
    """Create a local SQLite ledger.

    Args:
        database_path: Path to SQLite database file. If None, checks the
            BANKSYNC_LEDGER_PATH environment variable, then defaults to
            ~/.banksync/ledger.db

    Returns:
        SQLAlchemyLedger instance configured for SQLite
    """
    if database_path is None:
        database_path = os.environ.get("BANKSYNC_LEDGER_PATH")

    if database_path is None:
        db_dir = Path.home() / ".banksync"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "ledger.db")

    return SQLAlchemyLedger(f"sqlite:///{Path(database_path).expanduser()}")


def create_ledger_client(ledger_config: Mapping[str, Any]) -> LedgerClient:
    """Create the ledger client described by the ``ledger`` config block.

    Raises:
        ConfigurationError: If the ledger type is unknown or a token is missing
    """
    ledger_type = ledger_config.get("type", "ynab")

    if ledger_type == "ynab":
        token = os.environ.get("BANKSYNC_YNAB_TOKEN") or ledger_config.get("token")
        if not token:
            raise ConfigurationError(
                "YNAB ledger requires 'token' in config or BANKSYNC_YNAB_TOKEN"
            )
        return YNABClient(
            token=token,
            base_url=ledger_config.get("base_url", DEFAULT_BASE_URL),
            timeout=float(ledger_config.get("timeout", 30.0)),
            retries=int(ledger_config.get("retries", 2)),
        )

    if ledger_type == "sqlite":
        return create_sqlite_ledger(ledger_config.get("path"))

    raise ConfigurationError(f"Unknown ledger type '{ledger_type}' (expected 'ynab' or 'sqlite')")
