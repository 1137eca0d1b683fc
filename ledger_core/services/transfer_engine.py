"""
Transfer engine: moves money between two accounts.

Each transfer:
1. Validates the amount (positive, whole cents) and that the two
   accounts differ
2. Loads the source, checks the caller owns it, then loads the
   destination
3. Checks the source can afford the debit
4. Opens a unit of work on both accounts, re-checks the source under
   its lock, then debits the source and credits the destination
5. Records the transfer and its two paired entries in the same unit
   of work
6. Returns the transfer record

Steps 1-3 only read, so a rejection there leaves no trace. Once the
debit starts, the store publishes everything or nothing.
"""

import enum
import logging
from decimal import Decimal

from ledger_core.errors import (
    InvalidAmountError,
    LedgerError,
    NotAccountOwnerError,
    SameAccountError,
    StorageError,
    TransferRejectedError,
)
from ledger_core.models.base import utcnow
from ledger_core.models.enums import EntryType, TransferStatus
from ledger_core.money import to_money
from ledger_core.schemas.account import Account
from ledger_core.schemas.entry import EntryCreate
from ledger_core.schemas.transfer import (
    TransferCreate,
    TransferRecord,
    TransferRequest,
)
from ledger_core.services.invariants import check_debit
from ledger_core.store.base import LedgerStore

logger = logging.getLogger(__name__)

TRANSFER_CATEGORY = "Transfer"


class TransferState(str, enum.Enum):
    """Where an execute() call is. REJECTED is only reachable before DEBITING."""
    VALIDATING = "validating"
    CHECKING = "checking"
    DEBITING = "debiting"
    CREDITING = "crediting"
    RECORDING = "recording"
    COMPLETED = "completed"
    REJECTED = "rejected"


class TransferEngine:
    """
    Executes transfers against any LedgerStore.

    The engine holds no state between calls; all coordination between
    concurrent transfers happens through the store's per-account locks.
    """

    def __init__(self, store: LedgerStore):
        self.store = store

    def execute(
        self, request: TransferRequest, owner_id: int | None = None
    ) -> TransferRecord:
        """
        Execute one transfer.

        owner_id is the authenticated caller. When given, the caller
        must own the source account.

        Raises a TransferRejectedError subclass for invalid requests
        and StorageError if the store failed; in both cases no balance,
        entry or record was changed.
        """
        state = TransferState.VALIDATING
        try:
            amount = self._validate(request)
            source = self.store.get_account(request.from_account_id)
            # Ownership is settled before the destination is looked up
            if owner_id is not None and source.owner_id != owner_id:
                raise NotAccountOwnerError(source.id, owner_id)
            destination = self.store.get_account(request.to_account_id)

            state = TransferState.CHECKING
            check_debit(source, amount)
        except TransferRejectedError as exc:
            self._log_rejection(request, exc, state)
            raise

        return self._commit(request, amount, source, destination)

    def _validate(self, request: TransferRequest) -> Decimal:
        try:
            amount = to_money(request.amount)
        except ValueError:
            raise InvalidAmountError(request.amount) from None
        if amount <= 0:
            raise InvalidAmountError(amount)

        if request.from_account_id == request.to_account_id:
            raise SameAccountError(request.from_account_id)
        return amount

    def _commit(
        self,
        request: TransferRequest,
        amount: Decimal,
        source: Account,
        destination: Account,
    ) -> TransferRecord:
        state = TransferState.CHECKING
        try:
            with self.store.atomic([source.id, destination.id]) as session:
                # The snapshot checked earlier may be stale by now
                check_debit(session.get_account(source.id), amount)

                state = TransferState.DEBITING
                session.adjust_balance(source.id, -amount)

                state = TransferState.CREDITING
                session.adjust_balance(destination.id, amount)

                state = TransferState.RECORDING
                now = utcnow()
                record = session.append_transfer_record(TransferCreate(
                    from_account_id=source.id,
                    to_account_id=destination.id,
                    amount=amount,
                    memo=request.memo,
                    date=now,
                    status=TransferStatus.COMPLETED,
                ))
                session.append_transaction_entry(EntryCreate(
                    account_id=source.id,
                    amount=-amount,
                    description=f"Transfer to account {destination.account_number}",
                    category=TRANSFER_CATEGORY,
                    entry_type=EntryType.TRANSFER,
                    date=now,
                    counterparty_account_id=destination.id,
                    transfer_id=record.id,
                ))
                session.append_transaction_entry(EntryCreate(
                    account_id=destination.id,
                    amount=amount,
                    description=f"Transfer from account {source.account_number}",
                    category=TRANSFER_CATEGORY,
                    entry_type=EntryType.TRANSFER,
                    date=now,
                    transfer_id=record.id,
                ))
        except TransferRejectedError as exc:
            self._log_rejection(request, exc, state)
            raise
        except LedgerError:
            self._log_failure(request, state)
            raise
        except Exception as exc:
            self._log_failure(request, state)
            raise StorageError(
                f"Transfer from account {source.id} to account "
                f"{destination.id} did not complete: {exc}"
            ) from exc

        logger.info(
            "Transfer completed",
            extra={
                "transfer_id": record.id,
                "from_account_id": record.from_account_id,
                "to_account_id": record.to_account_id,
                "amount": str(record.amount),
                "state": TransferState.COMPLETED.value,
            },
        )
        return record

    def _log_rejection(
        self,
        request: TransferRequest,
        exc: TransferRejectedError,
        state: TransferState,
    ) -> None:
        logger.info(
            "Transfer rejected",
            extra={
                "from_account_id": request.from_account_id,
                "to_account_id": request.to_account_id,
                "amount": str(request.amount),
                "reason": exc.reason,
                "rejected_during": state.value,
                "state": TransferState.REJECTED.value,
            },
        )

    def _log_failure(self, request: TransferRequest, state: TransferState) -> None:
        logger.error(
            "Transfer failed and was rolled back",
            exc_info=True,
            extra={
                "from_account_id": request.from_account_id,
                "to_account_id": request.to_account_id,
                "amount": str(request.amount),
                "failed_during": state.value,
            },
        )
