"""
Tests for building a store from settings.
"""

import pytest

from ledger_core.config import Settings
from ledger_core.store import InMemoryLedgerStore, SqlLedgerStore, create_store


def make_settings(**overrides):
    settings = Settings()
    for key, value in overrides.items():
        setattr(settings, key, value)
    return settings


def test_memory_backend():
    store = create_store(make_settings(LEDGER_BACKEND="memory"))

    assert isinstance(store, InMemoryLedgerStore)


def test_sql_backend_creates_schema(tmp_path):
    settings = make_settings(
        LEDGER_BACKEND="sql",
        DATABASE_URL=f"sqlite:///{tmp_path / 'ledger.db'}",
        AUTO_CREATE_SCHEMA=True,
    )

    store = create_store(settings)
    try:
        assert isinstance(store, SqlLedgerStore)
        assert store.check_health() is True
        assert store.list_accounts_for_owner(1) == []
    finally:
        store.close()


def test_unknown_backend_rejected():
    with pytest.raises(ValueError, match="LEDGER_BACKEND"):
        create_store(make_settings(LEDGER_BACKEND="redis"))
