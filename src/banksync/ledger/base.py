"""Abstract ledger client interface."""

from abc import ABC, abstractmethod
from datetime import date
from typing import Sequence

from banksync.domain.entities import (
    LedgerTransaction,
    TransactionRecord,
    TransactionUpdate,
)


class LedgerClient(ABC):
    """Budget-scoped access to the ledger holding the authoritative records."""

    @abstractmethod
    def list_transactions_since(
        self, budget_id: str, account_id: str, since: date
    ) -> list[LedgerTransaction]:
        """List transactions of an account dated on or after ``since``."""
        pass

    @abstractmethod
    def create_transactions(
        self, budget_id: str, records: Sequence[TransactionRecord]
    ) -> list[LedgerTransaction]:
        """Create transactions in one batch. Returns the created transactions."""
        pass

    @abstractmethod
    def update_transactions(
        self, budget_id: str, updates: Sequence[TransactionUpdate]
    ) -> list[LedgerTransaction]:
        """Update transactions in one batch. Returns the updated transactions.

        Updates without an ``id`` are resolved by ``import_id``.
        """
        pass

    def close(self) -> None:
        """Release connections held by the client."""
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
