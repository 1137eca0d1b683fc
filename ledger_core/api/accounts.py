"""
Account API endpoints.

Callers only ever see their own accounts.
"""

from fastapi import APIRouter, Depends, HTTPException

from ledger_core.api.deps import (
    STORAGE_UNAVAILABLE,
    get_current_user_id,
    get_store,
)
from ledger_core.errors import (
    AccountNotFoundError,
    NotAccountOwnerError,
    StorageError,
)
from ledger_core.schemas.account import Account
from ledger_core.schemas.entry import TransactionEntry
from ledger_core.services.account_service import AccountService
from ledger_core.services.history import HistoryProjector
from ledger_core.store.base import LedgerStore

router = APIRouter(prefix="/accounts", tags=["Accounts"])


@router.get("", response_model=list[Account])
def list_accounts(
    user_id: int = Depends(get_current_user_id),
    store: LedgerStore = Depends(get_store),
):
    """List the caller's accounts."""
    service = AccountService(store)
    try:
        return service.get_user_accounts(user_id)
    except StorageError:
        raise HTTPException(status_code=503, detail=STORAGE_UNAVAILABLE)


@router.get("/{account_id}", response_model=Account)
def get_account(
    account_id: int,
    user_id: int = Depends(get_current_user_id),
    store: LedgerStore = Depends(get_store),
):
    """Get account details."""
    service = AccountService(store)
    try:
        return service.get_account(account_id, owner_id=user_id)
    except AccountNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.detail())
    except NotAccountOwnerError as e:
        raise HTTPException(status_code=403, detail=e.detail())
    except StorageError:
        raise HTTPException(status_code=503, detail=STORAGE_UNAVAILABLE)


@router.get(
    "/{account_id}/transactions",
    response_model=list[TransactionEntry],
)
def get_account_transactions(
    account_id: int,
    user_id: int = Depends(get_current_user_id),
    store: LedgerStore = Depends(get_store),
):
    """Get the account's transaction entries, newest first."""
    try:
        AccountService(store).get_account(account_id, owner_id=user_id)
        return HistoryProjector(store).account_history(account_id)
    except AccountNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.detail())
    except NotAccountOwnerError as e:
        raise HTTPException(status_code=403, detail=e.detail())
    except StorageError:
        raise HTTPException(status_code=503, detail=STORAGE_UNAVAILABLE)
