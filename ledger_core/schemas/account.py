"""
Pydantic schemas for accounts.

Account is the read snapshot every store returns; AccountOpen is
the provisioning request used to seed an account.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator, model_validator

from ledger_core.models.enums import AccountKind
from ledger_core.money import to_money


class AccountOpen(BaseModel):
    """Request to open a new account with a seed balance."""
    owner_id: int
    account_number: str = Field(min_length=1, max_length=34)
    kind: AccountKind
    balance: Decimal = Decimal("0.00")
    credit_limit: Decimal | None = None

    @field_validator("balance", "credit_limit", mode="before")
    @classmethod
    def exact_money(cls, v):
        if v is None:
            return None
        return to_money(v)

    @model_validator(mode="after")
    def check_seed_balance(self) -> "AccountOpen":
        if self.kind != AccountKind.CREDIT:
            if self.credit_limit is not None:
                raise ValueError("only credit accounts have a credit limit")
            if self.balance < 0:
                raise ValueError("seed balance must not be negative")
            return self

        limit = self.credit_limit or Decimal("0.00")
        if limit < 0:
            raise ValueError("credit limit must not be negative")
        if -self.balance > limit:
            raise ValueError("seed debt exceeds the credit limit")
        return self


class Account(BaseModel):
    id: int
    owner_id: int
    account_number: str
    kind: AccountKind
    balance: Decimal
    credit_limit: Decimal | None
    created_at: datetime

    model_config = {"from_attributes": True, "frozen": True}
