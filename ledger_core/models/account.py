"""
Customer account model.

The balance column is the running total of every transaction
entry posted against the account. It is only ever changed by the
ledger store's adjust_balance, inside a unit of work that holds
the account's lock.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import String, DateTime, Integer, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from ledger_core.models.base import Base, Money, utcnow
from ledger_core.models.enums import AccountKind


class AccountRow(Base):
    __tablename__ = "accounts"

    id: Mapped[int] = mapped_column(primary_key=True)
    owner_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    account_number: Mapped[str] = mapped_column(
        String(34), unique=True, nullable=False
    )
    kind: Mapped[AccountKind] = mapped_column(
        SAEnum(
            AccountKind,
            name="account_kind_enum",
            values_callable=lambda kinds: [k.value for k in kinds],
            create_constraint=True,
        ),
        nullable=False,
    )
    balance: Mapped[Decimal] = mapped_column(
        Money, nullable=False, default=Decimal("0.00")
    )
    # NULL unless kind is CREDIT
    credit_limit: Mapped[Decimal | None] = mapped_column(
        Money, nullable=True, default=None
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )

    def __repr__(self) -> str:
        return (
            f"<Account {self.account_number} "
            f"{self.kind.value} balance={self.balance}>"
        )
