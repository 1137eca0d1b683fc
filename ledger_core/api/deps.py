"""
Request dependencies shared by the routers.
"""

from fastapi import Header, HTTPException, Request

from ledger_core.store.base import LedgerStore


def get_store(request: Request) -> LedgerStore:
    """The store the application was built with."""
    return request.app.state.store


def get_current_user_id(
    x_user_id: int | None = Header(default=None),
) -> int:
    """
    Caller identity, as established by the session layer in front of us.

    The ledger trusts this value; it does not authenticate anyone.
    """
    if x_user_id is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return x_user_id


STORAGE_UNAVAILABLE = {
    "reason": "storage_error",
    "message": "The ledger is temporarily unavailable; nothing was changed",
}
