"""Abstract bank provider interface."""

from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Iterable, Optional

from banksync.domain.entities import TransactionRecord


class BankProvider(ABC):
    """Source of bank transactions for one institution.

    Subclasses set ``slug``, the name used to select the provider in
    configuration, and receive that provider's config block on construction.
    """

    slug: str = ""

    def __init__(self, options: Optional[dict[str, Any]] = None):
        self.options = dict(options or {})

    @abstractmethod
    def fetch_transactions(
        self,
        account_number: str,
        start_date: date,
        end_date: Optional[date] = None,
    ) -> list[TransactionRecord]:
        """Fetch normalized transactions for an account.

        Args:
            account_number: Account number as the bank knows it
            start_date: First day to include
            end_date: Last day to include (defaults to today)

        Returns:
            Records with import_id, date, signed amount and cleared state set

        Raises:
            AdapterError: On authentication, network or parsing failures
        """
        pass

    @property
    def import_id_prefix(self) -> str:
        """Namespace prepended to every import ID from this provider."""
        return f"BS:{self.slug}:"

    def build_import_id(self, amount: int, txn_date: date, occurrence: int) -> str:
        """Build the deterministic import ID for a transaction."""
        return f"{self.import_id_prefix}{amount}:{txn_date.isoformat()}:{occurrence}"


def number_occurrences(keys: Iterable[tuple[int, date]]) -> list[int]:
    """Number repeated (amount, date) pairs 1, 2, ... in encounter order."""
    seen: dict[tuple[int, date], int] = {}
    occurrences = []
    for key in keys:
        seen[key] = seen.get(key, 0) + 1
        occurrences.append(seen[key])
    return occurrences
