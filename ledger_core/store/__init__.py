"""Ledger storage backends."""

from ledger_core.config import Settings
from ledger_core.store.base import LedgerSession, LedgerStore
from ledger_core.store.locks import AccountLocks
from ledger_core.store.memory import InMemoryLedgerStore
from ledger_core.store.sql import SqlLedgerStore


def create_store(settings: Settings) -> LedgerStore:
    """Build the store selected by LEDGER_BACKEND."""
    if settings.LEDGER_BACKEND == "memory":
        return InMemoryLedgerStore(lock_timeout=settings.LOCK_TIMEOUT_SECONDS)

    if settings.LEDGER_BACKEND == "sql":
        store = SqlLedgerStore.from_url(
            settings.DATABASE_URL,
            lock_timeout=settings.LOCK_TIMEOUT_SECONDS,
        )
        if settings.AUTO_CREATE_SCHEMA:
            store.create_schema()
        return store

    raise ValueError(f"Unknown LEDGER_BACKEND '{settings.LEDGER_BACKEND}'")


__all__ = [
    "AccountLocks",
    "InMemoryLedgerStore",
    "LedgerSession",
    "LedgerStore",
    "SqlLedgerStore",
    "create_store",
]
