"""
Pydantic schemas for transfers.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from ledger_core.models.enums import TransferStatus


class TransferRequest(BaseModel):
    """
    A request to move money between two accounts.

    The amount is deliberately not range-checked here: the
    transfer engine owns that rule and reports it as
    InvalidAmountError.
    """
    from_account_id: int
    to_account_id: int
    amount: Decimal
    memo: str | None = Field(default=None, max_length=255)

    @field_validator("memo")
    @classmethod
    def blank_memo_is_absent(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v.strip()


class TransferCreate(BaseModel):
    from_account_id: int
    to_account_id: int
    amount: Decimal
    memo: str | None = None
    date: datetime
    status: TransferStatus = TransferStatus.COMPLETED


class TransferRecord(BaseModel):
    id: int
    from_account_id: int
    to_account_id: int
    amount: Decimal
    memo: str | None
    date: datetime
    status: TransferStatus

    model_config = {"from_attributes": True, "frozen": True}
