"""
Transaction entry model.

Each entry is one leg of a fund movement. A transfer writes two:
a negative entry on the source account and a positive entry of
the same magnitude on the destination. Entries are immutable:
once posted, they are never modified or deleted.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import String, DateTime, ForeignKey, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from ledger_core.models.base import Base, Money
from ledger_core.models.enums import EntryType


class TransactionEntryRow(Base):
    """
    An immutable, signed ledger entry.

    Negative amounts are outflows, positive amounts are inflows.
    counterparty_account_id is only set on the outflow leg of a
    transfer and names the destination account.
    """

    __tablename__ = "transaction_entries"

    id: Mapped[int] = mapped_column(primary_key=True)
    account_id: Mapped[int] = mapped_column(
        ForeignKey("accounts.id"), nullable=False, index=True
    )
    amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    entry_type: Mapped[EntryType] = mapped_column(
        SAEnum(
            EntryType,
            name="entry_type_enum",
            values_callable=lambda types: [t.value for t in types],
            create_constraint=True,
        ),
        nullable=False,
    )
    date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    counterparty_account_id: Mapped[int | None] = mapped_column(
        ForeignKey("accounts.id"), nullable=True, index=True
    )
    transfer_id: Mapped[int | None] = mapped_column(
        ForeignKey("transfers.id"), nullable=True, index=True
    )

    def __repr__(self) -> str:
        return (
            f"<TransactionEntry {self.entry_type.value} "
            f"account={self.account_id} {self.amount}>"
        )
