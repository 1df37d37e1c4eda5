"""Local ledger backed by a SQLAlchemy database."""

from datetime import date
from typing import Any, Callable, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from banksync.domain.entities import (
    LedgerTransaction,
    TransactionRecord,
    TransactionUpdate,
)
from banksync.domain.errors import LedgerApiError
from banksync.ledger.base import LedgerClient
from banksync.ledger.mappers import apply_to_entry, entry_to_domain
from banksync.ledger.models import LedgerEntry, create_session_factory
from banksync.logging_setup import get_logger

logger = get_logger(__name__)


class SQLAlchemyLedger(LedgerClient):
    """SQLAlchemy-based implementation of the LedgerClient interface.

    Behaves like the YNAB API where it matters to a sync: records whose
    import ID already exists in the budget are not created again, and
    updates without an ID are matched by import ID.
    """

    def __init__(self, database_url: str):
        """Initialize the ledger.

        Args:
            database_url: SQLAlchemy database URL (e.g., 'sqlite:///path/to.db')
        """
        self.database_url = database_url
        self.session_factory = create_session_factory(database_url)
        self._session: Optional[Session] = None

    def _get_session(self) -> Session:
        """Get current session, creating one if needed."""
        if self._session is None:
            self._session = self.session_factory()
        return self._session

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None

    def list_transactions_since(
        self, budget_id: str, account_id: str, since: date
    ) -> list[LedgerTransaction]:
        session = self._get_session()
        entries = (
            session.query(LedgerEntry)
            .filter(
                LedgerEntry.budget_id == budget_id,
                LedgerEntry.account_id == account_id,
                LedgerEntry.date >= since,
            )
            .order_by(LedgerEntry.date, LedgerEntry.created_at)
            .all()
        )
        return [entry_to_domain(e) for e in entries]

    def create_transactions(
        self, budget_id: str, records: Sequence[TransactionRecord]
    ) -> list[LedgerTransaction]:
        return self._write(self._add_entries, budget_id, records)

    def update_transactions(
        self, budget_id: str, updates: Sequence[TransactionUpdate]
    ) -> list[LedgerTransaction]:
        return self._write(self._apply_updates, budget_id, updates)

    def _write(
        self,
        apply: Callable[[Session, str, Sequence[Any]], list[LedgerEntry]],
        budget_id: str,
        items: Sequence[Any],
    ) -> list[LedgerTransaction]:
        """Apply a batch in one database transaction.

        Any failure rolls the whole batch back, leaving the session usable
        for the next account.

        Raises:
            LedgerApiError: If the batch is rejected or the database fails
        """
        session = self._get_session()
        try:
            entries = apply(session, budget_id, items)
            session.commit()
        except LedgerApiError:
            session.rollback()
            raise
        except SQLAlchemyError as e:
            session.rollback()
            raise LedgerApiError(f"Local ledger write failed: {e}") from e
        return [entry_to_domain(e) for e in entries]

    def _add_entries(
        self, session: Session, budget_id: str, records: Sequence[TransactionRecord]
    ) -> list[LedgerEntry]:
        created = []
        for record in records:
            if not record.account_id:
                raise LedgerApiError(
                    f"Transaction {record.import_id} has no account_id", status_code=400
                )
            if record.import_id and self._find_by_import_id(session, budget_id, record.import_id):
                logger.debug("Skipping duplicate import_id %s.", record.import_id)
                continue
            entry = LedgerEntry(
                budget_id=budget_id,
                account_id=record.account_id,
                import_id=record.import_id,
            )
            apply_to_entry(entry, record)
            session.add(entry)
            created.append(entry)
        return created

    def _apply_updates(
        self, session: Session, budget_id: str, updates: Sequence[TransactionUpdate]
    ) -> list[LedgerEntry]:
        updated = []
        for update in updates:
            if update.id is not None:
                entry = session.get(LedgerEntry, update.id)
                if entry is not None and entry.budget_id != budget_id:
                    entry = None
            elif update.import_id:
                entry = self._find_by_import_id(session, budget_id, update.import_id)
            else:
                entry = None

            if entry is None:
                raise LedgerApiError(
                    f"Transaction not found (id={update.id}, import_id={update.import_id})",
                    status_code=404,
                    detail="resource_not_found",
                )
            apply_to_entry(entry, update)
            updated.append(entry)
        return updated

    @staticmethod
    def _find_by_import_id(session: Session, budget_id: str, import_id: str) -> Optional[LedgerEntry]:
        return (
            session.query(LedgerEntry)
            .filter(LedgerEntry.budget_id == budget_id, LedgerEntry.import_id == import_id)
            .first()
        )
