"""
Pydantic schemas for transaction entries.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from ledger_core.models.enums import EntryType


class EntryCreate(BaseModel):
    """One signed leg to append to the ledger."""
    account_id: int
    amount: Decimal
    description: str = Field(min_length=1, max_length=255)
    category: str = Field(min_length=1, max_length=50)
    entry_type: EntryType
    date: datetime
    counterparty_account_id: int | None = None
    transfer_id: int | None = None


class TransactionEntry(BaseModel):
    id: int
    account_id: int
    amount: Decimal
    description: str
    category: str
    entry_type: EntryType
    date: datetime
    counterparty_account_id: int | None
    transfer_id: int | None

    model_config = {"from_attributes": True, "frozen": True}
