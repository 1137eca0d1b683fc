"""
Ledger store interface.

LedgerStore is the only thing the transfer engine and the history
projector know about storage. Every backend implements the same
contract:

1. Reads return immutable snapshots, never live internal state
2. Entries and transfer records are append-only
3. Balances change only through adjust_balance
4. Writes happen inside atomic(), which holds the per-account locks
   and publishes all of its writes or none of them

The single-operation write methods below are conveniences that open
their own one-step unit of work.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from decimal import Decimal
from typing import Iterable

from ledger_core.schemas.account import Account, AccountOpen
from ledger_core.schemas.entry import EntryCreate, TransactionEntry
from ledger_core.schemas.transfer import TransferCreate, TransferRecord


def newest_first(item) -> tuple:
    """Sort key for entries and transfer records; use with reverse=True."""
    return (item.date, item.id)


class LedgerSession(ABC):
    """Operations available inside one unit of work."""

    @abstractmethod
    def get_account(self, account_id: int) -> Account:
        """Current view of an account, including this unit's staged changes."""

    @abstractmethod
    def adjust_balance(self, account_id: int, delta: Decimal) -> Account:
        """
        Add delta to the account balance and return the new snapshot.

        The account must be one of the ids the unit of work was opened
        with; adjusting an unlocked account is a StorageError.
        """

    @abstractmethod
    def append_transaction_entry(self, entry: EntryCreate) -> TransactionEntry:
        pass

    @abstractmethod
    def append_transfer_record(self, record: TransferCreate) -> TransferRecord:
        pass


class LedgerStore(ABC):

    # --- Units of work ---

    @abstractmethod
    def atomic(
        self, account_ids: Iterable[int] = ()
    ) -> AbstractContextManager[LedgerSession]:
        """
        Open a unit of work holding the locks of the given accounts.

        Locks are taken in ascending id order. If the block raises,
        nothing it wrote becomes visible.
        """

    # --- Accounts ---

    @abstractmethod
    def open_account(self, request: AccountOpen) -> Account:
        """Create an account. Raises DuplicateAccountError on a reused number."""

    @abstractmethod
    def get_account(self, account_id: int) -> Account:
        """Raises AccountNotFoundError if the account does not exist."""

    @abstractmethod
    def get_account_by_number(self, account_number: str) -> Account:
        pass

    @abstractmethod
    def list_accounts_for_owner(self, owner_id: int) -> list[Account]:
        pass

    # --- Ledger reads ---

    @abstractmethod
    def list_entries(self, account_ids: Iterable[int]) -> list[TransactionEntry]:
        """
        Entries that belong to, or name as counterparty, any of the accounts.

        Newest first: date descending, then id descending.
        """

    @abstractmethod
    def list_transfers(self, account_ids: Iterable[int]) -> list[TransferRecord]:
        """Transfer records touching any of the accounts, newest first."""

    @abstractmethod
    def total_balance(self) -> Decimal:
        """Sum of every account balance; transfers never change it."""

    # --- Lifecycle ---

    def check_health(self) -> bool:
        return True

    def close(self) -> None:
        pass

    # --- Single-step writes ---

    def adjust_balance(self, account_id: int, delta: Decimal) -> Account:
        with self.atomic([account_id]) as session:
            return session.adjust_balance(account_id, delta)

    def append_transaction_entry(self, entry: EntryCreate) -> TransactionEntry:
        with self.atomic() as session:
            return session.append_transaction_entry(entry)

    def append_transfer_record(self, record: TransferCreate) -> TransferRecord:
        with self.atomic() as session:
            return session.append_transfer_record(record)

    # --- Derived reads ---

    def list_entries_for_account(self, account_id: int) -> list[TransactionEntry]:
        return self.list_entries([account_id])

    def list_entries_for_user(self, user_id: int) -> list[TransactionEntry]:
        account_ids = [a.id for a in self.list_accounts_for_owner(user_id)]
        if not account_ids:
            return []
        return self.list_entries(account_ids)

    def list_transfers_for_user(self, user_id: int) -> list[TransferRecord]:
        account_ids = [a.id for a in self.list_accounts_for_owner(user_id)]
        if not account_ids:
            return []
        return self.list_transfers(account_ids)
