"""
Shared test fixtures.

Every store contract is exercised against both backends: the
in-memory store and the SQL store on a throwaway SQLite file.
Tests that ask for `store` run once per backend.
"""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from ledger_core.main import create_app
from ledger_core.models.enums import AccountKind
from ledger_core.schemas.account import AccountOpen
from ledger_core.store.memory import InMemoryLedgerStore
from ledger_core.store.sql import SqlLedgerStore


@pytest.fixture
def memory_store():
    return InMemoryLedgerStore(lock_timeout=5)


@pytest.fixture
def sql_store(tmp_path):
    """
    SQL store on a fresh SQLite file.

    A file rather than :memory: so that every pooled connection,
    including those used by worker threads, sees the same database.
    """
    store = SqlLedgerStore.from_url(
        f"sqlite:///{tmp_path / 'ledger.db'}", lock_timeout=5
    )
    store.create_schema()
    yield store
    store.close()


@pytest.fixture(params=["memory", "sql"])
def store(request):
    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture
def open_account(store):
    """Factory that opens an account in the current store."""
    def _open(
        account_number,
        balance="0.00",
        owner_id=1,
        kind=AccountKind.CHECKING,
        credit_limit=None,
    ):
        return store.open_account(AccountOpen(
            owner_id=owner_id,
            account_number=account_number,
            kind=kind,
            balance=Decimal(balance),
            credit_limit=None if credit_limit is None else Decimal(credit_limit),
        ))
    return _open


@pytest.fixture
def client(store):
    """Test client for an application built around the current store."""
    app = create_app(store=store)
    with TestClient(app) as test_client:
        yield test_client
