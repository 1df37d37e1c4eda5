"""Shared pytest fixtures for banksync tests."""

import logging
import os
import tempfile
from datetime import date
from pathlib import Path

import pytest

from banksync.config import AccountPairing, SyncConfig
from banksync.domain.entities import (
    ClearedStatus,
    LedgerTransaction,
    TransactionRecord,
)
from banksync.domain.errors import LedgerApiError
from banksync.ledger.base import LedgerClient
from banksync.ledger.factories import create_sqlite_ledger
from banksync.providers.base import BankProvider
from banksync.providers.registry import ProviderRegistry


def make_record(
    import_id="X1",
    amount=-5000,
    cleared=ClearedStatus.CLEARED,
    txn_date=date(2024, 1, 10),
    payee_name=None,
    memo=None,
    account_id="acct-1",
):
    """Build a bank-side record with sensible defaults."""
    return TransactionRecord(
        date=txn_date,
        amount=amount,
        cleared=cleared,
        import_id=import_id,
        payee_name=payee_name,
        memo=memo,
        account_id=account_id,
    )


def make_ledger(
    id="L1",
    amount=-5000,
    cleared=ClearedStatus.CLEARED,
    txn_date=date(2024, 1, 10),
    import_id=None,
    payee_name=None,
    memo=None,
    account_id="acct-1",
):
    """Build a ledger-side transaction with sensible defaults."""
    return LedgerTransaction(
        id=id,
        date=txn_date,
        amount=amount,
        cleared=cleared,
        import_id=import_id,
        payee_name=payee_name,
        memo=memo,
        account_id=account_id,
    )


class StaticProvider(BankProvider):
    """Provider returning a fixed list of records, or raising a fixed error."""

    def __init__(self, slug="static", records=(), error=None):
        super().__init__({})
        self.slug = slug
        self.records = list(records)
        self.error = error
        self.calls = []

    def fetch_transactions(self, account_number, start_date, end_date=None):
        self.calls.append((account_number, start_date, end_date))
        if self.error is not None:
            raise self.error
        return list(self.records)


class FakeLedger(LedgerClient):
    """In-memory ledger recording every call."""

    def __init__(self, transactions=(), fail_create=False, fail_update=False):
        self.transactions = list(transactions)
        self.fail_create = fail_create
        self.fail_update = fail_update
        self.created = []
        self.updated = []
        self.listed = []
        self.closed = False

    def list_transactions_since(self, budget_id, account_id, since):
        self.listed.append((budget_id, account_id, since))
        return [
            t for t in self.transactions if t.account_id == account_id and t.date >= since
        ]

    def create_transactions(self, budget_id, records):
        if self.fail_create:
            raise LedgerApiError("create failed", status_code=500)
        self.created.append((budget_id, list(records)))
        return [
            make_ledger(
                id=f"new-{i}",
                amount=r.amount,
                cleared=r.cleared,
                txn_date=r.date,
                import_id=r.import_id,
                account_id=r.account_id,
            )
            for i, r in enumerate(records)
        ]

    def update_transactions(self, budget_id, updates):
        if self.fail_update:
            raise LedgerApiError("update failed", status_code=500)
        self.updated.append((budget_id, list(updates)))
        return [make_ledger(id=u.id or f"upd-{i}") for i, u in enumerate(updates)]

    def close(self):
        self.closed = True


@pytest.fixture
def temp_ledger():
    """Create a temporary SQLite ledger for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    ledger = create_sqlite_ledger(database_path=db_path)
    ledger.database_path = db_path

    yield ledger

    ledger.close()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def pairing():
    """A single account pairing using the static provider."""
    return AccountPairing(
        budget_id="budget-1",
        provider="static",
        source_account_number="325-0000000000001-11",
        target_account_id="acct-1",
    )


@pytest.fixture
def sync_config(pairing):
    """Config holding the sample pairing."""
    return SyncConfig(accounts=(pairing,))


@pytest.fixture
def static_provider():
    """Static provider with no records."""
    return StaticProvider()


@pytest.fixture
def registry(static_provider):
    """Registry holding the static provider."""
    return ProviderRegistry([static_provider])


@pytest.fixture
def export_dir(tmp_path):
    """Directory for CSV statement exports."""
    directory = tmp_path / "exports"
    directory.mkdir()
    return directory


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def fixtures_dir():
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo CLI logging configuration so each test starts unconfigured."""
    yield
    from banksync import logging_setup

    logger = logging.getLogger("banksync")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
    logging_setup._CONFIGURED = False
