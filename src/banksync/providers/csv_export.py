"""Provider reading transactions from bank statement CSV exports."""

import csv
import re
from datetime import date
from pathlib import Path
from typing import Any, Mapping, Optional

from banksync.domain.entities import ClearedStatus, TransactionRecord
from banksync.domain.errors import AdapterError, ConfigurationError
from banksync.logging_setup import get_logger
from banksync.providers.base import BankProvider, number_occurrences
from banksync.utils.amount_parser import parse_milliunits
from banksync.utils.date_parser import parse_date

logger = get_logger(__name__)

DEFAULT_COLUMNS = {
    "date": "Date",
    "amount": "Amount",
    "payee": "Payee",
    "memo": "Memo",
    "status": "Status",
}


def sanitize_account_number(account_number: str) -> str:
    """Strip separators from an account number."""
    return re.sub(r"[^a-zA-Z0-9]", "", account_number)


class CSVExportProvider(BankProvider):
    """Reads ``<directory>/<account number>.csv`` statement exports.

    Options:
        directory: Folder holding the exports (required)
        columns: Mapping of date/amount/payee/memo/status to CSV headers
        dayfirst: Parse ambiguous dates as day-month-year
        decimal_comma: Amounts use "," as the decimal separator
        uncleared_statuses: Status value, or list of values, meaning the bank
            has not settled the transaction yet (default: ["pending"])
    """

    slug = "csv-export"

    def __init__(self, options: Optional[dict[str, Any]] = None):
        super().__init__(options)
        self.columns = {**DEFAULT_COLUMNS, **self._columns_option()}
        self.dayfirst = self._flag_option("dayfirst")
        self.decimal_comma = self._flag_option("decimal_comma")
        self.uncleared_statuses = {s.strip().lower() for s in self._statuses_option()}

        directory = self.options.get("directory")
        if directory is not None and not isinstance(directory, str):
            raise self._invalid_option("directory", "must be a path")

    def _invalid_option(self, key: str, problem: str) -> ConfigurationError:
        return ConfigurationError(f"Provider '{self.slug}': option '{key}' {problem}")

    def _columns_option(self) -> dict[str, str]:
        columns = self.options.get("columns") or {}
        if not isinstance(columns, Mapping):
            raise self._invalid_option("columns", "must map fields to CSV headers")
        unknown = sorted(set(columns) - set(DEFAULT_COLUMNS))
        if unknown:
            raise self._invalid_option("columns", f"has unknown fields: {', '.join(map(str, unknown))}")
        if not all(isinstance(header, str) and header.strip() for header in columns.values()):
            raise self._invalid_option("columns", "must name each CSV header as text")
        return dict(columns)

    def _flag_option(self, key: str) -> bool:
        value = self.options.get(key, False)
        if not isinstance(value, bool):
            raise self._invalid_option(key, "must be true or false")
        return value

    def _statuses_option(self) -> list[str]:
        statuses = self.options.get("uncleared_statuses", ["pending"])
        # A single status may be given as a plain string
        if isinstance(statuses, str):
            statuses = [statuses]
        if not isinstance(statuses, list) or not all(isinstance(s, str) for s in statuses):
            raise self._invalid_option("uncleared_statuses", "must be a list of status names")
        return statuses

    def export_path(self, account_number: str) -> Path:
        """Return the export file expected for an account."""
        directory = self.options.get("directory")
        if not directory:
            raise AdapterError(f"Provider '{self.slug}' has no 'directory' configured")
        return Path(directory).expanduser() / f"{sanitize_account_number(account_number)}.csv"

    def fetch_transactions(
        self,
        account_number: str,
        start_date: date,
        end_date: Optional[date] = None,
    ) -> list[TransactionRecord]:
        path = self.export_path(account_number)
        if not path.exists():
            raise AdapterError(f"CSV export not found: {path}")

        end_date = end_date or date.today()
        logger.debug("Reading CSV export %s...", path)

        rows = []
        with open(path, "r", encoding="utf-8-sig", newline="") as f:
            sample = f.read(1024)
            f.seek(0)
            try:
                delimiter = csv.Sniffer().sniff(sample, delimiters=",;\t").delimiter
            except csv.Error:
                delimiter = ","

            reader = csv.DictReader(f, delimiter=delimiter)
            if reader.fieldnames is None:
                return []

            missing = [
                self.columns[key] for key in ("date", "amount") if self.columns[key] not in reader.fieldnames
            ]
            if missing:
                raise AdapterError(f"{path}: missing required columns: {', '.join(missing)}")

            for row_num, row in enumerate(reader, start=2):
                parsed = self._parse_row(path, row_num, row)
                if start_date <= parsed["date"] <= end_date:
                    rows.append(parsed)

        # Oldest first, so occurrence numbers stay stable as new rows arrive
        rows.sort(key=lambda r: r["date"])
        occurrences = number_occurrences((r["amount"], r["date"]) for r in rows)

        transactions = []
        for parsed, occurrence in zip(rows, occurrences):
            transactions.append(
                TransactionRecord(
                    date=parsed["date"],
                    amount=parsed["amount"],
                    cleared=parsed["cleared"],
                    import_id=self.build_import_id(parsed["amount"], parsed["date"], occurrence),
                    payee_name=parsed["payee"],
                    memo=parsed["memo"],
                )
            )

        logger.debug("Parsed %d transactions from %s.", len(transactions), path)
        return transactions

    def _value(self, row: dict[str, Optional[str]], key: str) -> Optional[str]:
        value = row.get(self.columns[key])
        if value is None:
            return None
        return value.strip() or None

    def _parse_row(self, path: Path, row_num: int, row: dict[str, Optional[str]]) -> dict[str, Any]:
        date_str = self._value(row, "date")
        amount_str = self._value(row, "amount")
        if not date_str:
            raise AdapterError(f"{path}: row {row_num}: missing date")
        if not amount_str:
            raise AdapterError(f"{path}: row {row_num}: missing amount")

        try:
            txn_date = parse_date(date_str, dayfirst=self.dayfirst)
            amount = parse_milliunits(amount_str, decimal_comma=self.decimal_comma)
        except ValueError as e:
            raise AdapterError(f"{path}: row {row_num}: {e}") from e

        status = (self._value(row, "status") or "").lower()
        cleared = ClearedStatus.UNCLEARED if status in self.uncleared_statuses else ClearedStatus.CLEARED

        payee = self._value(row, "payee") if amount < 0 else None
        memo = self._value(row, "memo")
        if memo is not None and memo == self._value(row, "payee"):
            memo = None

        return {
            "date": txn_date,
            "amount": amount,
            "cleared": cleared,
            "payee": payee,
            "memo": memo,
        }
