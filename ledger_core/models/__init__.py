"""
Database models package.

All models must be imported here so that Base.metadata knows
every table when the SQL ledger store creates the schema.
"""

from ledger_core.models.base import Base, Money, utcnow
from ledger_core.models.enums import AccountKind, EntryType, TransferStatus
from ledger_core.models.account import AccountRow
from ledger_core.models.transfer import TransferRow
from ledger_core.models.transaction_entry import TransactionEntryRow

__all__ = [
    "Base",
    "Money",
    "utcnow",
    "AccountKind",
    "EntryType",
    "TransferStatus",
    "AccountRow",
    "TransferRow",
    "TransactionEntryRow",
]
