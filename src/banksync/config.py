"""Configuration loading for banksync.

The config file is YAML (JSON files work too, JSON being a YAML subset):

    ledger:
      type: ynab
      token: "..."
    schedule: "*/30 * * * *"
    lookback_days: 7
    providers:
      csv-export:
        directory: ./exports
    accounts:
      - budget_id: "..."
        provider: csv-export
        source_account_number: "325-0000000000000-00"
        target_account_id: "..."
        match_uncleared: true

``schedule`` is a crontab expression for ``sync --watch``. ``schedule_minutes``
may be given instead for a fixed interval.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from apscheduler.triggers.cron import CronTrigger

from banksync.domain.errors import ConfigurationError, missing_config_key

DEFAULT_CONFIG_PATH = "config.yaml"
DEFAULT_SCHEDULE = "*/30 * * * *"
DEFAULT_LOOKBACK_DAYS = 7


@dataclass(frozen=True)
class AccountPairing:
    """A bank account mirrored into a ledger account."""

    budget_id: str
    provider: str
    source_account_number: str
    target_account_id: str
    match_uncleared: bool = False


@dataclass(frozen=True)
class SyncConfig:
    """Everything the sync needs, passed explicitly to the services."""

    accounts: tuple[AccountPairing, ...]
    providers: dict[str, dict[str, Any]] = field(default_factory=dict)
    ledger: dict[str, Any] = field(default_factory=dict)
    schedule: str = DEFAULT_SCHEDULE
    schedule_minutes: Optional[int] = None
    lookback_days: int = DEFAULT_LOOKBACK_DAYS


def load_config(path: str | Path) -> SyncConfig:
    """Read and validate a config file.

    Raises:
        ConfigurationError: If the file is missing, unreadable or invalid
    """
    config_path = Path(path).expanduser()
    if not config_path.exists():
        raise ConfigurationError(f"Config file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid config file {config_path}: {e}") from e

    return parse_config(data)


def parse_config(data: Any) -> SyncConfig:
    """Build a SyncConfig from already-decoded config data.

    Raises:
        ConfigurationError: If required keys are missing or values are invalid
    """
    if not isinstance(data, Mapping):
        raise ConfigurationError("Config must be a mapping")

    raw_accounts = data.get("accounts")
    if not raw_accounts or not isinstance(raw_accounts, list):
        raise ConfigurationError("Config must list at least one entry under 'accounts'")

    accounts = tuple(
        _parse_account(raw, index) for index, raw in enumerate(raw_accounts, start=1)
    )

    providers = data.get("providers") or {}
    if not isinstance(providers, Mapping) or not all(
        isinstance(v, Mapping) for v in providers.values()
    ):
        raise ConfigurationError("'providers' must map provider slugs to option blocks")

    ledger = dict(data.get("ledger") or {})
    # Older configs carry the YNAB token at the top level
    if "token" in data and "token" not in ledger:
        ledger["token"] = data["token"]
    ledger.setdefault("type", "ynab")

    schedule, schedule_minutes = _parse_schedule(data)

    return SyncConfig(
        accounts=accounts,
        providers={slug: dict(options) for slug, options in providers.items()},
        ledger=ledger,
        schedule=schedule,
        schedule_minutes=schedule_minutes,
        lookback_days=_positive_int(data, "lookback_days", DEFAULT_LOOKBACK_DAYS),
    )


def _parse_account(raw: Any, index: int) -> AccountPairing:
    where = f"accounts[{index}]"
    if not isinstance(raw, Mapping):
        raise ConfigurationError(f"{where} must be a mapping")

    values = {}
    for key in ("budget_id", "provider", "source_account_number", "target_account_id"):
        value = raw.get(key)
        if value is None or str(value).strip() == "":
            raise ConfigurationError(missing_config_key(key, where))
        values[key] = str(value).strip()

    match_uncleared = raw.get("match_uncleared", False)
    if not isinstance(match_uncleared, bool):
        raise ConfigurationError(f"{where}: 'match_uncleared' must be true or false")

    return AccountPairing(match_uncleared=match_uncleared, **values)


def _positive_int(data: Mapping[str, Any], key: str, default: int) -> int:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigurationError(f"'{key}' must be a positive integer")
    return value


def _parse_schedule(data: Mapping[str, Any]) -> tuple[str, Optional[int]]:
    if "schedule_minutes" in data:
        if "schedule" in data:
            raise ConfigurationError("Set either 'schedule' or 'schedule_minutes', not both")
        return DEFAULT_SCHEDULE, _positive_int(data, "schedule_minutes", 0)

    schedule = data.get("schedule", DEFAULT_SCHEDULE)
    if not isinstance(schedule, str):
        raise ConfigurationError("'schedule' must be a crontab expression")
    try:
        CronTrigger.from_crontab(schedule)
    except ValueError as e:
        raise ConfigurationError(f"Invalid 'schedule' {schedule!r}: {e}") from e
    return schedule, None
