"""
SQLAlchemy-backed ledger store.

Works against PostgreSQL in deployment and SQLite in tests. Each
unit of work is one database transaction:

- the in-process account locks are taken first, in ascending id order
- the account rows are then locked with SELECT ... FOR UPDATE in the
  same order, which serializes transfers across processes on databases
  that support row locks
- every write is flushed inside the transaction and committed once;
  any failure rolls the whole transaction back

Database errors never leak out as SQLAlchemy exceptions. They are
logged and re-raised as StorageError with the original chained.
"""

import logging
from contextlib import contextmanager
from decimal import Decimal
from typing import Iterable, Iterator

from sqlalchemy import select, or_, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ledger_core.errors import (
    AccountNotFoundError,
    DuplicateAccountError,
    StorageError,
)
from ledger_core.models import (
    Base,
    AccountRow,
    TransactionEntryRow,
    TransferRow,
)
from ledger_core.models.base import (
    WRITE_TRANSACTION,
    build_engine,
    build_session_factory,
)
from ledger_core.money import CENTS
from ledger_core.schemas.account import Account, AccountOpen
from ledger_core.schemas.entry import EntryCreate, TransactionEntry
from ledger_core.schemas.transfer import TransferCreate, TransferRecord
from ledger_core.store.base import LedgerSession, LedgerStore
from ledger_core.store.locks import AccountLocks

logger = logging.getLogger(__name__)


def _claim_write_lock(db: Session) -> None:
    """
    Start the session's transaction as a write transaction.

    Must be the first use of the session. On SQLite this issues BEGIN
    IMMEDIATE; other databases ignore the option. Reads never call
    this, so they do not queue behind an open transfer.
    """
    db.connection(execution_options={WRITE_TRANSACTION: True})


class _SqlSession(LedgerSession):

    def __init__(self, db: Session, locked_ids: list[int]):
        self.db = db
        self._locked_ids = set(locked_ids)

    def get_account(self, account_id: int) -> Account:
        row = self.db.get(AccountRow, account_id)
        if row is None:
            raise AccountNotFoundError(account_id)
        return Account.model_validate(row)

    def adjust_balance(self, account_id: int, delta: Decimal) -> Account:
        if account_id not in self._locked_ids:
            raise StorageError(
                f"Account {account_id} is not locked by this unit of work"
            )
        row = self.db.execute(
            select(AccountRow)
            .where(AccountRow.id == account_id)
            .with_for_update()
        ).scalar_one_or_none()
        if row is None:
            raise AccountNotFoundError(account_id)

        row.balance = (row.balance + delta).quantize(CENTS)
        self.db.flush()
        return Account.model_validate(row)

    def append_transaction_entry(self, entry: EntryCreate) -> TransactionEntry:
        row = TransactionEntryRow(**entry.model_dump())
        self.db.add(row)
        self.db.flush()
        return TransactionEntry.model_validate(row)

    def append_transfer_record(self, record: TransferCreate) -> TransferRecord:
        row = TransferRow(**record.model_dump())
        self.db.add(row)
        self.db.flush()
        return TransferRecord.model_validate(row)


class SqlLedgerStore(LedgerStore):
    """
    Ledger store on a relational database.

    The store owns its engine. Construct it once at process start,
    pass it to the services that need it, and close() it on shutdown.
    """

    def __init__(self, engine: Engine, lock_timeout: float = 10.0):
        self.engine = engine
        self._session_factory = build_session_factory(engine)
        self.locks = AccountLocks(timeout=lock_timeout)

    @classmethod
    def from_url(cls, database_url: str, lock_timeout: float = 10.0) -> "SqlLedgerStore":
        return cls(build_engine(database_url), lock_timeout=lock_timeout)

    def create_schema(self) -> None:
        """Create any missing tables."""
        try:
            Base.metadata.create_all(bind=self.engine)
        except SQLAlchemyError as exc:
            logger.error("Failed to create ledger schema", exc_info=True)
            raise StorageError(f"Failed to create ledger schema: {exc}") from exc

    @contextmanager
    def _session(self) -> Iterator[Session]:
        """
        Provide a session and guarantee it is closed.

        Closing an uncommitted session rolls it back, so read-only
        callers never need to commit.
        """
        db = self._session_factory()
        try:
            yield db
        except SQLAlchemyError as exc:
            logger.error("Ledger storage failure", exc_info=True)
            raise StorageError(f"Ledger storage failure: {exc}") from exc
        finally:
            db.close()

    @contextmanager
    def atomic(self, account_ids: Iterable[int] = ()) -> Iterator[LedgerSession]:
        with self.locks.hold(account_ids) as locked:
            with self._session() as db:
                with db.begin():
                    _claim_write_lock(db)
                    for account_id in locked:
                        db.execute(
                            select(AccountRow)
                            .where(AccountRow.id == account_id)
                            .with_for_update()
                        )
                    yield _SqlSession(db, locked)

    # --- Accounts ---

    def open_account(self, request: AccountOpen) -> Account:
        with self._session() as db:
            _claim_write_lock(db)
            existing = db.execute(
                select(AccountRow.id).where(
                    AccountRow.account_number == request.account_number
                )
            ).scalar_one_or_none()
            if existing is not None:
                raise DuplicateAccountError(request.account_number)

            row = AccountRow(**request.model_dump())
            db.add(row)
            try:
                db.commit()
            except IntegrityError:
                # Lost a race with another opener of the same number
                db.rollback()
                raise DuplicateAccountError(request.account_number) from None
            return Account.model_validate(row)

    def get_account(self, account_id: int) -> Account:
        with self._session() as db:
            row = db.get(AccountRow, account_id)
            if row is None:
                raise AccountNotFoundError(account_id)
            return Account.model_validate(row)

    def get_account_by_number(self, account_number: str) -> Account:
        with self._session() as db:
            row = db.execute(
                select(AccountRow).where(
                    AccountRow.account_number == account_number
                )
            ).scalar_one_or_none()
            if row is None:
                raise AccountNotFoundError(account_number)
            return Account.model_validate(row)

    def list_accounts_for_owner(self, owner_id: int) -> list[Account]:
        with self._session() as db:
            rows = db.execute(
                select(AccountRow)
                .where(AccountRow.owner_id == owner_id)
                .order_by(AccountRow.id)
            ).scalars().all()
            return [Account.model_validate(r) for r in rows]

    # --- Ledger reads ---

    def list_entries(self, account_ids: Iterable[int]) -> list[TransactionEntry]:
        ids = list(set(account_ids))
        if not ids:
            return []
        with self._session() as db:
            rows = db.execute(
                select(TransactionEntryRow)
                .where(or_(
                    TransactionEntryRow.account_id.in_(ids),
                    TransactionEntryRow.counterparty_account_id.in_(ids),
                ))
                .order_by(
                    TransactionEntryRow.date.desc(),
                    TransactionEntryRow.id.desc(),
                )
            ).scalars().all()
            return [TransactionEntry.model_validate(r) for r in rows]

    def list_transfers(self, account_ids: Iterable[int]) -> list[TransferRecord]:
        ids = list(set(account_ids))
        if not ids:
            return []
        with self._session() as db:
            rows = db.execute(
                select(TransferRow)
                .where(or_(
                    TransferRow.from_account_id.in_(ids),
                    TransferRow.to_account_id.in_(ids),
                ))
                .order_by(TransferRow.date.desc(), TransferRow.id.desc())
            ).scalars().all()
            return [TransferRecord.model_validate(r) for r in rows]

    def total_balance(self) -> Decimal:
        # Summed in Python: SQLite keeps balances as decimal strings
        with self._session() as db:
            balances = db.execute(select(AccountRow.balance)).scalars().all()
            return sum(balances, Decimal("0.00"))

    # --- Lifecycle ---

    def check_health(self) -> bool:
        try:
            with self._session() as db:
                db.execute(text("SELECT 1"))
            return True
        except StorageError:
            return False

    def close(self) -> None:
        self.engine.dispose()
