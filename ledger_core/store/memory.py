"""
In-memory ledger store.

Suitable for tests and single-process deployments. Writes made inside
a unit of work are staged on the session and published in one step
under the store's commit lock; readers take the same lock, so they
see either all of a unit of work or none of it. The commit lock is
held only while publishing, never for the length of a transfer.
"""

import itertools
import threading
from contextlib import contextmanager
from decimal import Decimal
from typing import Iterable, Iterator

from ledger_core.errors import (
    AccountNotFoundError,
    DuplicateAccountError,
    StorageError,
)
from ledger_core.models.base import utcnow
from ledger_core.money import CENTS
from ledger_core.schemas.account import Account, AccountOpen
from ledger_core.schemas.entry import EntryCreate, TransactionEntry
from ledger_core.schemas.transfer import TransferCreate, TransferRecord
from ledger_core.store.base import LedgerSession, LedgerStore, newest_first
from ledger_core.store.locks import AccountLocks


class _MemorySession(LedgerSession):

    def __init__(self, store: "InMemoryLedgerStore", locked_ids: list[int]):
        self._store = store
        self._locked_ids = set(locked_ids)
        self._accounts: dict[int, Account] = {}
        self._entries: list[TransactionEntry] = []
        self._transfers: list[TransferRecord] = []

    def get_account(self, account_id: int) -> Account:
        if account_id in self._accounts:
            return self._accounts[account_id]
        return self._store.get_account(account_id)

    def adjust_balance(self, account_id: int, delta: Decimal) -> Account:
        if account_id not in self._locked_ids:
            raise StorageError(
                f"Account {account_id} is not locked by this unit of work"
            )
        account = self.get_account(account_id)
        updated = account.model_copy(
            update={"balance": (account.balance + delta).quantize(CENTS)}
        )
        self._accounts[account_id] = updated
        return updated

    def append_transaction_entry(self, entry: EntryCreate) -> TransactionEntry:
        record = TransactionEntry(
            id=self._store._next_id(self._store._entry_ids),
            **entry.model_dump(),
        )
        self._entries.append(record)
        return record

    def append_transfer_record(self, record: TransferCreate) -> TransferRecord:
        transfer = TransferRecord(
            id=self._store._next_id(self._store._transfer_ids),
            **record.model_dump(),
        )
        self._transfers.append(transfer)
        return transfer

    def publish(self) -> None:
        with self._store._commit_lock:
            self._store._accounts.update(self._accounts)
            self._store._entries.extend(self._entries)
            for transfer in self._transfers:
                self._store._transfers[transfer.id] = transfer


class InMemoryLedgerStore(LedgerStore):
    """Dict-backed store. Snapshots are frozen pydantic models."""

    def __init__(self, lock_timeout: float = 10.0):
        self._accounts: dict[int, Account] = {}
        self._entries: list[TransactionEntry] = []
        self._transfers: dict[int, TransferRecord] = {}

        # Ids are never reused; a rolled-back unit of work leaves a gap.
        self._id_lock = threading.Lock()
        self._account_ids = itertools.count(1)
        self._entry_ids = itertools.count(1)
        self._transfer_ids = itertools.count(1)

        self._commit_lock = threading.RLock()
        self.locks = AccountLocks(timeout=lock_timeout)

    def _next_id(self, counter: itertools.count) -> int:
        with self._id_lock:
            return next(counter)

    @contextmanager
    def atomic(self, account_ids: Iterable[int] = ()) -> Iterator[LedgerSession]:
        with self.locks.hold(account_ids) as locked:
            session = _MemorySession(self, locked)
            yield session
            session.publish()

    # --- Accounts ---

    def open_account(self, request: AccountOpen) -> Account:
        with self._commit_lock:
            for existing in self._accounts.values():
                if existing.account_number == request.account_number:
                    raise DuplicateAccountError(request.account_number)

            account = Account(
                id=self._next_id(self._account_ids),
                owner_id=request.owner_id,
                account_number=request.account_number,
                kind=request.kind,
                balance=request.balance,
                credit_limit=request.credit_limit,
                created_at=utcnow(),
            )
            self._accounts[account.id] = account
            return account

    def get_account(self, account_id: int) -> Account:
        with self._commit_lock:
            account = self._accounts.get(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        return account

    def get_account_by_number(self, account_number: str) -> Account:
        with self._commit_lock:
            for account in self._accounts.values():
                if account.account_number == account_number:
                    return account
        raise AccountNotFoundError(account_number)

    def list_accounts_for_owner(self, owner_id: int) -> list[Account]:
        with self._commit_lock:
            return sorted(
                (a for a in self._accounts.values() if a.owner_id == owner_id),
                key=lambda a: a.id,
            )

    # --- Ledger reads ---

    def list_entries(self, account_ids: Iterable[int]) -> list[TransactionEntry]:
        wanted = set(account_ids)
        with self._commit_lock:
            matches = [
                e for e in self._entries
                if e.account_id in wanted or e.counterparty_account_id in wanted
            ]
        return sorted(matches, key=newest_first, reverse=True)

    def list_transfers(self, account_ids: Iterable[int]) -> list[TransferRecord]:
        wanted = set(account_ids)
        with self._commit_lock:
            matches = [
                t for t in self._transfers.values()
                if t.from_account_id in wanted or t.to_account_id in wanted
            ]
        return sorted(matches, key=newest_first, reverse=True)

    def total_balance(self) -> Decimal:
        with self._commit_lock:
            return sum(
                (a.balance for a in self._accounts.values()), Decimal("0.00")
            )
