"""Tests for the local SQLAlchemy ledger."""

from datetime import date

import pytest
from sqlalchemy.exc import OperationalError

from banksync.domain.entities import ClearedStatus, LedgerTransaction, TransactionUpdate
from banksync.domain.errors import ConfigurationError, LedgerApiError
from banksync.ledger.factories import create_ledger_client
from banksync.ledger.sqlalchemy_ledger import SQLAlchemyLedger
from banksync.ledger.ynab import YNABClient

from conftest import make_record


class TestSQLAlchemyLedger:
    """Tests for SQLAlchemyLedger."""

    def test_create_returns_domain_models(self, temp_ledger):
        """Created transactions come back with ledger-assigned IDs."""
        created = temp_ledger.create_transactions(
            "budget-1", [make_record(import_id="X1", payee_name="Shop")]
        )

        assert len(created) == 1
        assert isinstance(created[0], LedgerTransaction)
        assert created[0].id
        assert created[0].import_id == "X1"
        assert created[0].payee_name == "Shop"
        assert created[0].cleared == ClearedStatus.CLEARED

    def test_duplicate_import_id_not_created(self, temp_ledger):
        """Records whose import ID exists are skipped, as YNAB does."""
        temp_ledger.create_transactions("budget-1", [make_record(import_id="X1")])

        created = temp_ledger.create_transactions(
            "budget-1", [make_record(import_id="X1"), make_record(import_id="X2")]
        )

        assert [t.import_id for t in created] == ["X2"]
        listed = temp_ledger.list_transactions_since("budget-1", "acct-1", date(2024, 1, 1))
        assert len(listed) == 2

    def test_list_filters_budget_account_and_date(self, temp_ledger):
        """Listing is scoped to budget, account and start date."""
        temp_ledger.create_transactions(
            "budget-1",
            [
                make_record(import_id="A", txn_date=date(2024, 1, 5)),
                make_record(import_id="B", txn_date=date(2024, 1, 15)),
                make_record(import_id="C", txn_date=date(2024, 1, 15), account_id="acct-2"),
            ],
        )
        temp_ledger.create_transactions(
            "budget-2", [make_record(import_id="D", txn_date=date(2024, 1, 15))]
        )

        listed = temp_ledger.list_transactions_since("budget-1", "acct-1", date(2024, 1, 10))

        assert [t.import_id for t in listed] == ["B"]

    def test_update_by_import_id(self, temp_ledger):
        """Updates without ID are resolved by import ID."""
        temp_ledger.create_transactions("budget-1", [make_record(import_id="X1", memo="old")])

        updated = temp_ledger.update_transactions(
            "budget-1",
            [TransactionUpdate.from_record(make_record(import_id="X1", memo="new"))],
        )

        assert [t.memo for t in updated] == ["new"]

    def test_update_by_id_keeps_import_id(self, temp_ledger):
        """Updating by ID never rewrites the stored import ID."""
        placeholder = temp_ledger.create_transactions(
            "budget-1", [make_record(import_id=None, cleared=ClearedStatus.UNCLEARED)]
        )[0]

        updated = temp_ledger.update_transactions(
            "budget-1",
            [
                TransactionUpdate.from_record(
                    make_record(import_id="X9", memo="[duplicate:X9]"), id=placeholder.id
                )
            ],
        )

        assert updated[0].id == placeholder.id
        assert updated[0].import_id is None
        assert updated[0].cleared == ClearedStatus.CLEARED
        assert updated[0].memo == "[duplicate:X9]"

    def test_update_unknown_raises(self, temp_ledger):
        """Unresolvable updates raise LedgerApiError with status 404."""
        with pytest.raises(LedgerApiError) as excinfo:
            temp_ledger.update_transactions(
                "budget-1", [TransactionUpdate.from_record(make_record(import_id="nope"))]
            )

        assert excinfo.value.status_code == 404

    def test_create_without_account_raises(self, temp_ledger):
        """Records must be stamped with an account before creation."""
        with pytest.raises(LedgerApiError):
            temp_ledger.create_transactions("budget-1", [make_record(account_id=None)])

        assert temp_ledger.list_transactions_since("budget-1", "acct-1", date(2024, 1, 1)) == []

    def test_database_failure_rolls_back(self, temp_ledger, monkeypatch):
        """A failed commit is reported as LedgerApiError and the ledger stays usable."""
        session = temp_ledger._get_session()

        def failing_commit():
            raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

        monkeypatch.setattr(session, "commit", failing_commit)
        with pytest.raises(LedgerApiError, match="disk I/O error") as excinfo:
            temp_ledger.create_transactions("budget-1", [make_record(import_id="X1")])
        assert isinstance(excinfo.value.__cause__, OperationalError)

        monkeypatch.undo()
        created = temp_ledger.create_transactions("budget-1", [make_record(import_id="X2")])

        assert [t.import_id for t in created] == ["X2"]
        listed = temp_ledger.list_transactions_since("budget-1", "acct-1", date(2024, 1, 1))
        assert [t.import_id for t in listed] == ["X2"]

    def test_failed_update_batch_is_rolled_back(self, temp_ledger):
        """An unresolvable update discards the earlier updates of its batch."""
        temp_ledger.create_transactions("budget-1", [make_record(import_id="X1", memo="old")])

        with pytest.raises(LedgerApiError):
            temp_ledger.update_transactions(
                "budget-1",
                [
                    TransactionUpdate.from_record(make_record(import_id="X1", memo="new")),
                    TransactionUpdate.from_record(make_record(import_id="nope")),
                ],
            )

        listed = temp_ledger.list_transactions_since("budget-1", "acct-1", date(2024, 1, 1))
        assert [t.memo for t in listed] == ["old"]


class TestCreateLedgerClient:
    """Tests for the ledger factory."""

    def test_sqlite_ledger(self, tmp_path):
        """sqlite type builds a local ledger at the given path."""
        ledger = create_ledger_client({"type": "sqlite", "path": str(tmp_path / "l.db")})
        try:
            assert isinstance(ledger, SQLAlchemyLedger)
            assert ledger.database_url.endswith("l.db")
        finally:
            ledger.close()

    def test_ynab_ledger(self, monkeypatch):
        """ynab type builds an API client."""
        monkeypatch.delenv("BANKSYNC_YNAB_TOKEN", raising=False)
        ledger = create_ledger_client({"type": "ynab", "token": "secret"})
        try:
            assert isinstance(ledger, YNABClient)
        finally:
            ledger.close()

    def test_ynab_requires_token(self, monkeypatch):
        """A YNAB ledger without token is a configuration error."""
        monkeypatch.delenv("BANKSYNC_YNAB_TOKEN", raising=False)

        with pytest.raises(ConfigurationError, match="token"):
            create_ledger_client({"type": "ynab"})

    def test_token_from_environment(self, monkeypatch):
        """BANKSYNC_YNAB_TOKEN supplies the token."""
        monkeypatch.setenv("BANKSYNC_YNAB_TOKEN", "env-secret")
        ledger = create_ledger_client({"type": "ynab"})
        ledger.close()

    def test_unknown_type(self):
        """Unknown ledger types are rejected."""
        with pytest.raises(ConfigurationError, match="Unknown ledger type"):
            create_ledger_client({"type": "spreadsheet"})
