"""YNAB API ledger client.

Talks to the YNAB v1 REST API:
- GET   /budgets/{budget_id}/accounts/{account_id}/transactions?since_date=...
- POST  /budgets/{budget_id}/transactions
- PATCH /budgets/{budget_id}/transactions

Failures surface as LedgerApiError with the status code and YNAB's error
detail, so callers can log something actionable.
"""

from datetime import date
from typing import Any, Optional, Sequence

import httpx

from banksync.domain.entities import (
    LedgerTransaction,
    TransactionRecord,
    TransactionUpdate,
)
from banksync.domain.errors import LedgerApiError
from banksync.ledger.base import LedgerClient
from banksync.ledger.mappers import record_to_ynab, update_to_ynab, ynab_to_domain
from banksync.logging_setup import get_logger

logger = get_logger(__name__)

DEFAULT_BASE_URL = "https://api.ynab.com/v1"


class YNABClient(LedgerClient):
    """LedgerClient implementation for the YNAB API."""

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        retries: int = 2,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """Initialize the client.

        Args:
            token: YNAB personal access token
            base_url: API root URL
            timeout: Per-request timeout in seconds
            retries: Connection retries for the default transport
            transport: Custom httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/json",
            },
            timeout=timeout,
            transport=transport or httpx.HTTPTransport(retries=retries),
        )

    def close(self) -> None:
        self._client.close()

    def list_transactions_since(
        self, budget_id: str, account_id: str, since: date
    ) -> list[LedgerTransaction]:
        data = self._request(
            "GET",
            f"/budgets/{budget_id}/accounts/{account_id}/transactions",
            params={"since_date": since.isoformat()},
        )
        return [
            ynab_to_domain(t)
            for t in data.get("transactions", [])
            if not t.get("deleted", False)
        ]

    def create_transactions(
        self, budget_id: str, records: Sequence[TransactionRecord]
    ) -> list[LedgerTransaction]:
        data = self._request(
            "POST",
            f"/budgets/{budget_id}/transactions",
            json={"transactions": [record_to_ynab(r) for r in records]},
        )
        duplicates = data.get("duplicate_import_ids") or []
        if duplicates:
            logger.warning("YNAB skipped %d duplicate import IDs: %s", len(duplicates), ", ".join(duplicates))
        return [ynab_to_domain(t) for t in data.get("transactions", [])]

    def update_transactions(
        self, budget_id: str, updates: Sequence[TransactionUpdate]
    ) -> list[LedgerTransaction]:
        data = self._request(
            "PATCH",
            f"/budgets/{budget_id}/transactions",
            json={"transactions": [update_to_ynab(u) for u in updates]},
        )
        return [ynab_to_domain(t) for t in data.get("transactions", [])]

    def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        """Send a request and return the response's ``data`` object.

        Raises:
            LedgerApiError: On transport failures and non-2xx responses
        """
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise LedgerApiError(f"YNAB request timed out: {method} {path}") from e
        except httpx.HTTPError as e:
            raise LedgerApiError(f"YNAB request failed: {method} {path}: {e}") from e

        if response.is_success:
            return response.json().get("data", {})

        detail = _error_detail(response)
        raise LedgerApiError(
            f"YNAB returned {response.status_code} for {method} {path}: {detail}",
            status_code=response.status_code,
            detail=detail,
        )


def _error_detail(response: httpx.Response) -> str:
    """Extract YNAB's error detail, falling back to the raw body."""
    try:
        error = response.json().get("error", {})
    except ValueError:
        return response.text
    if not isinstance(error, dict):
        return response.text
    return error.get("detail") or error.get("name") or response.text
