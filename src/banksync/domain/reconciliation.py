"""Reconciliation of bank records against ledger records.

The reconciler is pure: it receives everything it needs already fetched and
returns the creates and updates that bring the ledger in line with the bank.
It runs three passes:

1. Exact match on ``import_id``. Matched records whose details differ become
   updates; unmatched ones become creation candidates.
2. Optional uncleared matching. A cleared bank record adopts a manually
   entered uncleared ledger record of the same amount instead of being
   created, and the ledger record's memo is stamped with a duplicate marker.
3. Duplicate suppression. Candidates whose import ID is already stamped on
   some ledger memo were matched by an earlier run and are never created.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from banksync.domain.entities import (
    ClearedStatus,
    LedgerTransaction,
    TransactionRecord,
    TransactionUpdate,
    same_details,
)
from banksync.domain.errors import InvalidRecordError, missing_import_id
from banksync.logging_setup import get_logger

logger = get_logger(__name__)


@dataclass
class ReconciliationResult:
    """Creates and updates to submit to the ledger, in submission order."""

    to_create: list[TransactionRecord] = field(default_factory=list)
    to_update: list[TransactionUpdate] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.to_create and not self.to_update


def duplicate_marker(import_id: str) -> str:
    """Return the memo marker linking a ledger record to a bank import ID."""
    return f"[duplicate:{import_id}]"


def append_duplicate_marker(memo: Optional[str], import_id: str) -> str:
    """Append the duplicate marker for ``import_id`` to a memo.

    An empty memo becomes the bare marker.
    """
    if not memo:
        return duplicate_marker(import_id)
    return f"{memo} {duplicate_marker(import_id)}"


def is_marked_duplicate(import_id: str, ledger_records: Iterable[LedgerTransaction]) -> bool:
    """Check whether any ledger memo already carries the marker for ``import_id``."""
    marker = duplicate_marker(import_id)
    return any(t.memo and marker in t.memo for t in ledger_records)


def validate_records(records: Iterable[TransactionRecord]) -> None:
    """Ensure every bank record can be identified across runs.

    Raises:
        InvalidRecordError: If a record has no import ID
    """
    for record in records:
        if not record.import_id:
            raise InvalidRecordError(missing_import_id(record), record=record)


def reconcile(
    bank_records: Sequence[TransactionRecord],
    ledger_records: Sequence[LedgerTransaction],
    match_uncleared: bool = False,
) -> ReconciliationResult:
    """Compute the ledger changes needed to mirror the bank records.

    Args:
        bank_records: Normalized bank records for a single account
        ledger_records: Ledger records for the same account, covering at least
            the bank records' date range
        match_uncleared: Match new cleared records to existing uncleared
            ledger records of the same amount

    Returns:
        ReconciliationResult with creations in bank order, and exact-match
        updates followed by uncleared-match updates

    Raises:
        InvalidRecordError: If a bank record has no import ID
    """
    validate_records(bank_records)

    by_import_id: dict[str, LedgerTransaction] = {}
    for ledger_record in ledger_records:
        if ledger_record.import_id:
            by_import_id.setdefault(ledger_record.import_id, ledger_record)

    result = ReconciliationResult()
    candidates: list[TransactionRecord] = []
    claimed_ids: set[str] = set()

    for record in bank_records:
        existing = by_import_id.get(record.import_id)
        if existing is None:
            candidates.append(record)
            continue
        claimed_ids.add(existing.id)
        if not same_details(record, existing):
            result.to_update.append(TransactionUpdate.from_record(record, id=None))

    if match_uncleared and candidates:
        candidates = _match_uncleared(candidates, ledger_records, claimed_ids, result)

    result.to_create = [
        record
        for record in candidates
        if not is_marked_duplicate(record.import_id, ledger_records)
    ]

    logger.debug(
        "Found %d new transactions, %d to update.",
        len(result.to_create),
        len(result.to_update),
    )
    return result


def _match_uncleared(
    candidates: list[TransactionRecord],
    ledger_records: Sequence[LedgerTransaction],
    claimed_ids: set[str],
    result: ReconciliationResult,
) -> list[TransactionRecord]:
    """Pair cleared candidates with unclaimed uncleared ledger records.

    Each ledger record is consumed by at most one candidate; the first
    eligible record in ledger order wins. Returns the candidates left over.
    """
    pool = [
        t
        for t in ledger_records
        if t.cleared == ClearedStatus.UNCLEARED and t.id not in claimed_ids
    ]
    remaining: list[TransactionRecord] = []

    for record in candidates:
        if (
            record.cleared != ClearedStatus.CLEARED
            or not pool
            or is_marked_duplicate(record.import_id, ledger_records)
        ):
            remaining.append(record)
            continue

        match = next((t for t in pool if t.amount == record.amount), None)
        if match is None:
            remaining.append(record)
            continue

        logger.debug(
            "Matched new transaction %s to uncleared transaction %s.",
            record.import_id,
            match.id,
        )
        pool.remove(match)
        result.to_update.append(
            TransactionUpdate(
                id=match.id,
                date=match.date,
                amount=record.amount,
                cleared=record.cleared,
                import_id=record.import_id,
                payee_name=record.payee_name,
                memo=append_duplicate_marker(record.memo, record.import_id),
                account_id=record.account_id,
            )
        )

    return remaining
