"""Domain layer for banksync application."""

__all__ = [
    "ReconciliationResult",
    "reconcile",
    "AccountSyncResult",
    "SyncService",
    "build_trigger",
    "run_on_schedule",
]


# Import services lazily to avoid circular dependencies with banksync.config
def __getattr__(name):
    if name in ("ReconciliationResult", "reconcile"):
        from banksync.domain import reconciliation
        return getattr(reconciliation, name)
    if name in ("AccountSyncResult", "SyncService", "build_trigger", "run_on_schedule"):
        from banksync.domain import sync
        return getattr(sync, name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
