"""Sync domain service."""

from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from typing import Callable, Optional

from apscheduler.schedulers.base import BaseScheduler
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.base import BaseTrigger
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from banksync.config import AccountPairing, SyncConfig
from banksync.domain.reconciliation import reconcile
from banksync.ledger.base import LedgerClient
from banksync.logging_setup import get_logger
from banksync.providers.registry import ProviderRegistry
from banksync.utils.date_parser import lookback_start

logger = get_logger(__name__)


@dataclass
class AccountSyncResult:
    """Outcome of syncing one account pairing."""

    source_account_number: str
    provider: str
    planned_creates: int = 0
    planned_updates: int = 0
    created: int = 0
    updated: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class SyncService:
    """Service mirroring configured bank accounts into the ledger."""

    def __init__(
        self,
        config: SyncConfig,
        providers: ProviderRegistry,
        ledger: LedgerClient,
        dry_run: bool = False,
    ):
        """Initialize sync service.

        Args:
            config: Loaded configuration
            providers: Registry of bank providers
            ledger: Ledger client to reconcile against
            dry_run: Compute changes without submitting them
        """
        self.config = config
        self.providers = providers
        self.ledger = ledger
        self.dry_run = dry_run

    def sync_all(
        self, now: Optional[datetime] = None, since: Optional[date] = None
    ) -> list[AccountSyncResult]:
        """Sync every configured account pairing, one after another.

        A failing account is logged and recorded in its result; the remaining
        accounts are still processed.

        Args:
            now: Reference time for the lookback window (defaults to now)
            since: Explicit window start, overriding the lookback window

        Returns:
            One AccountSyncResult per configured pairing, in config order
        """
        logger.info("Synchronizing accounts...")
        now = now or datetime.now()
        sync_from = since or lookback_start(now, self.config.lookback_days)

        results = []
        for pairing in self.config.accounts:
            result = AccountSyncResult(
                source_account_number=pairing.source_account_number,
                provider=pairing.provider,
            )
            try:
                self.sync_account(pairing, sync_from, result=result)
            except Exception as e:
                logger.exception(
                    "Failed to sync account no. %s.", pairing.source_account_number
                )
                result.error = str(e) or type(e).__name__
            results.append(result)
        return results

    def sync_account(
        self,
        pairing: AccountPairing,
        since: date,
        until: Optional[date] = None,
        result: Optional[AccountSyncResult] = None,
    ) -> AccountSyncResult:
        """Sync a single account pairing.

        Raises:
            UnknownProviderError: If the pairing's provider is not registered
            AdapterError: If the bank provider fails
            InvalidRecordError: If the provider returns a record without import ID
            LedgerApiError: If the ledger fails; a failed creation skips updates
        """
        if result is None:
            result = AccountSyncResult(
                source_account_number=pairing.source_account_number,
                provider=pairing.provider,
            )

        provider = self.providers.get(pairing.provider)
        logger.info(
            "Synchronizing transactions for account no. %s (provider %s)...",
            pairing.source_account_number,
            provider.slug,
        )

        logger.debug("Fetching bank transactions...")
        bank_records = [
            record.with_account(pairing.target_account_id)
            for record in provider.fetch_transactions(
                pairing.source_account_number, since, until
            )
        ]
        logger.debug(
            "Provider %s (account no. %s) returned %d transactions.",
            provider.slug,
            pairing.source_account_number,
            len(bank_records),
        )

        logger.debug(
            "Fetching ledger transactions for account ID %s...",
            pairing.target_account_id,
        )
        ledger_records = self.ledger.list_transactions_since(
            pairing.budget_id, pairing.target_account_id, since
        )
        logger.debug(
            "Fetched %d transactions for account ID %s.",
            len(ledger_records),
            pairing.target_account_id,
        )

        plan = reconcile(
            bank_records, ledger_records, match_uncleared=pairing.match_uncleared
        )
        result.planned_creates = len(plan.to_create)
        result.planned_updates = len(plan.to_update)
        logger.info(
            "Found %d new transactions, %d to update.",
            result.planned_creates,
            result.planned_updates,
        )

        if self.dry_run:
            logger.info("Dry run: no changes submitted.")
            return result

        if plan.to_create:
            try:
                created = self.ledger.create_transactions(pairing.budget_id, plan.to_create)
            except Exception:
                logger.error(
                    "Failed to create %d transactions for account no. %s.",
                    len(plan.to_create),
                    pairing.source_account_number,
                )
                raise
            result.created = len(created)
            logger.info("Created %d new transactions.", result.created)

        if plan.to_update:
            updated = self.ledger.update_transactions(pairing.budget_id, plan.to_update)
            result.updated = len(updated)
            logger.info("Updated %d transactions.", result.updated)

        return result


def build_trigger(config: SyncConfig, timezone: Optional[tzinfo] = None) -> BaseTrigger:
    """Return the trigger for scheduled syncs.

    The cron ``schedule`` is used unless ``schedule_minutes`` asks for a fixed
    interval.
    """
    if config.schedule_minutes is not None:
        return IntervalTrigger(minutes=config.schedule_minutes, timezone=timezone)
    return CronTrigger.from_crontab(config.schedule, timezone=timezone)


def run_on_schedule(
    service: SyncService,
    trigger: BaseTrigger,
    scheduler: Optional[BaseScheduler] = None,
    on_cycle: Optional[Callable[[list[AccountSyncResult]], None]] = None,
) -> None:
    """Sync all accounts every time ``trigger`` fires, until interrupted.

    The job runs with ``max_instances=1``: a fire time reached while a cycle
    is still running is skipped, so cycles never overlap.

    Args:
        service: Configured sync service
        trigger: APScheduler trigger, usually from ``build_trigger``
        scheduler: Scheduler to run on (defaults to a BlockingScheduler)
        on_cycle: Callback receiving each cycle's results
    """
    if scheduler is None:
        scheduler = BlockingScheduler()

    def sync_cycle() -> None:
        results = service.sync_all()
        if on_cycle is not None:
            on_cycle(results)

    scheduler.add_job(
        sync_cycle,
        trigger,
        id="sync",
        name="Synchronize accounts",
        max_instances=1,
        coalesce=True,
    )
    logger.info("Starting in scheduled mode (%s).", trigger)
    scheduler.start()
