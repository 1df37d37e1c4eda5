"""Mapper functions between domain entities and ledger representations.

Two representations live here: SQLAlchemy rows of the local ledger and the
JSON objects exchanged with the YNAB API. Keeping the conversions in one place
isolates both schemas from the reconciliation logic.
"""

from datetime import date
from typing import Any, Union

from banksync.domain.entities import (
    ClearedStatus,
    LedgerTransaction,
    TransactionRecord,
    TransactionUpdate,
)
from banksync.ledger.models import LedgerEntry


def entry_to_domain(entry: LedgerEntry) -> LedgerTransaction:
    """Convert a local ledger row to a domain LedgerTransaction."""
    return LedgerTransaction(
        id=entry.id,
        date=entry.date,
        amount=entry.amount,
        cleared=ClearedStatus(entry.cleared),
        import_id=entry.import_id,
        payee_name=entry.payee_name,
        memo=entry.memo,
        account_id=entry.account_id,
    )


def apply_to_entry(entry: LedgerEntry, txn: Union[TransactionRecord, TransactionUpdate]) -> None:
    """Copy the mutable fields of a record or update onto a ledger row.

    ``import_id`` and ``account_id`` are left alone: an update never moves a
    transaction or changes its identity.
    """
    entry.date = txn.date
    entry.amount = txn.amount
    entry.cleared = ClearedStatus(txn.cleared).value
    entry.payee_name = txn.payee_name
    entry.memo = txn.memo


def ynab_to_domain(data: dict[str, Any]) -> LedgerTransaction:
    """Convert a YNAB transaction object to a domain LedgerTransaction."""
    return LedgerTransaction(
        id=data["id"],
        date=date.fromisoformat(data["date"]),
        amount=int(data["amount"]),
        cleared=ClearedStatus(data["cleared"]),
        import_id=data.get("import_id"),
        payee_name=data.get("payee_name"),
        memo=data.get("memo"),
        account_id=data.get("account_id"),
    )


def record_to_ynab(record: TransactionRecord) -> dict[str, Any]:
    """Convert a record into a YNAB SaveTransaction payload."""
    return {
        "account_id": record.account_id,
        "date": record.date.isoformat(),
        "amount": record.amount,
        "payee_name": record.payee_name,
        "memo": record.memo,
        "cleared": ClearedStatus(record.cleared).value,
        "import_id": record.import_id,
    }


def update_to_ynab(update: TransactionUpdate) -> dict[str, Any]:
    """Convert an update into a YNAB SaveTransactionWithIdOrImportId payload."""
    return {
        "id": update.id,
        "account_id": update.account_id,
        "date": update.date.isoformat(),
        "amount": update.amount,
        "payee_name": update.payee_name,
        "memo": update.memo,
        "cleared": ClearedStatus(update.cleared).value,
        "import_id": update.import_id,
    }
