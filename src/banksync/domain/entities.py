"""Domain model entities for banksync.

These are pure data classes describing transactions as both sides of a sync
see them, independent of any bank export format or ledger wire schema.
Amounts are integers in milliunits (1000 = one major currency unit).
"""

from dataclasses import dataclass, replace
from datetime import date
from enum import Enum
from typing import Optional


class ClearedStatus(str, Enum):
    """Clearing state of a transaction, using the ledger's wire values."""

    CLEARED = "cleared"
    UNCLEARED = "uncleared"
    RECONCILED = "reconciled"


# Fields compared when deciding whether a ledger record needs an update
COMPARED_FIELDS = ("date", "amount", "memo", "cleared", "payee_name")


@dataclass(frozen=True)
class TransactionRecord:
    """Bank-side transaction, normalized by a provider."""

    date: date
    amount: int
    cleared: ClearedStatus
    import_id: Optional[str]
    payee_name: Optional[str] = None
    memo: Optional[str] = None
    account_id: Optional[str] = None

    def with_account(self, account_id: str) -> "TransactionRecord":
        """Return a copy assigned to the given ledger account."""
        return replace(self, account_id=account_id)


@dataclass(frozen=True)
class LedgerTransaction:
    """Transaction as stored in the ledger, identified by the ledger's own ID."""

    id: str
    date: date
    amount: int
    cleared: ClearedStatus
    import_id: Optional[str] = None
    payee_name: Optional[str] = None
    memo: Optional[str] = None
    account_id: Optional[str] = None


@dataclass(frozen=True)
class TransactionUpdate:
    """Changes to apply to an existing ledger transaction.

    When ``id`` is None the ledger locates the transaction by ``import_id``.
    """

    id: Optional[str]
    date: date
    amount: int
    cleared: ClearedStatus
    import_id: Optional[str]
    payee_name: Optional[str] = None
    memo: Optional[str] = None
    account_id: Optional[str] = None

    @classmethod
    def from_record(cls, record: TransactionRecord, id: Optional[str] = None) -> "TransactionUpdate":
        """Build an update carrying all fields of a bank record."""
        return cls(
            id=id,
            date=record.date,
            amount=record.amount,
            cleared=record.cleared,
            import_id=record.import_id,
            payee_name=record.payee_name,
            memo=record.memo,
            account_id=record.account_id,
        )


def same_details(a, b) -> bool:
    """Return True if two transactions agree on every compared field."""
    return all(getattr(a, field) == getattr(b, field) for field in COMPARED_FIELDS)
