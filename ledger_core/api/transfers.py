"""
Transfer and transaction history API endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ledger_core.api.deps import (
    STORAGE_UNAVAILABLE,
    get_current_user_id,
    get_store,
)
from ledger_core.errors import (
    AccountNotFoundError,
    InvalidAmountError,
    NotAccountOwnerError,
    StorageError,
    TransferRejectedError,
)
from ledger_core.schemas.entry import TransactionEntry
from ledger_core.schemas.transfer import TransferRecord, TransferRequest
from ledger_core.services.history import HistoryProjector
from ledger_core.services.transfer_engine import TransferEngine
from ledger_core.store.base import LedgerStore

router = APIRouter(tags=["Transfers"])


async def amount_validation_handler(request: Request, exc: RequestValidationError):
    """
    Report an unparseable transfer amount like any other bad amount.

    A body whose only problem is an amount that is not a number gets
    the same 400 invalid_amount response the engine gives for zero or
    negative amounts. Every other validation error keeps FastAPI's 422.
    """
    errors = exc.errors()
    if errors and all(
        tuple(e["loc"]) == ("body", "amount") and e["type"] != "missing"
        for e in errors
    ):
        rejection = InvalidAmountError(errors[0].get("input"))
        return JSONResponse(status_code=400, content={"detail": rejection.detail()})
    return await request_validation_exception_handler(request, exc)


@router.post("/transfers", response_model=TransferRecord, status_code=201)
def create_transfer(
    request: TransferRequest,
    user_id: int = Depends(get_current_user_id),
    store: LedgerStore = Depends(get_store),
):
    """
    Move money from one of the caller's accounts to any other account.

    The amount is sent as a decimal string, e.g. "100.00".
    """
    engine = TransferEngine(store)
    try:
        return engine.execute(request, owner_id=user_id)
    except NotAccountOwnerError as e:
        raise HTTPException(status_code=403, detail=e.detail())
    except AccountNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.detail())
    except TransferRejectedError as e:
        raise HTTPException(status_code=400, detail=e.detail())
    except StorageError:
        raise HTTPException(status_code=503, detail=STORAGE_UNAVAILABLE)


@router.get("/transfers", response_model=list[TransferRecord])
def list_transfers(
    user_id: int = Depends(get_current_user_id),
    store: LedgerStore = Depends(get_store),
):
    """Transfers into or out of the caller's accounts, newest first."""
    try:
        return HistoryProjector(store).user_transfers(user_id)
    except StorageError:
        raise HTTPException(status_code=503, detail=STORAGE_UNAVAILABLE)


@router.get("/transactions", response_model=list[TransactionEntry])
def list_transactions(
    user_id: int = Depends(get_current_user_id),
    store: LedgerStore = Depends(get_store),
):
    """Transaction entries across all of the caller's accounts, newest first."""
    try:
        return HistoryProjector(store).user_history(user_id)
    except StorageError:
        raise HTTPException(status_code=503, detail=STORAGE_UNAVAILABLE)
