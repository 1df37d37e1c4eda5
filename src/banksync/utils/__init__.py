"""Utility functions for banksync."""

from banksync.utils.date_parser import parse_date, lookback_start
from banksync.utils.amount_parser import parse_amount, parse_milliunits, to_milliunits

__all__ = ["parse_date", "lookback_start", "parse_amount", "parse_milliunits", "to_milliunits"]
