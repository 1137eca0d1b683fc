"""
Shared enumerations for database models.

Using Python enums mapped to database enums ensures that
only valid values can be stored. An invalid account kind
or entry type is caught at the database level, not just
in Python validation.
"""

import enum


class AccountKind(str, enum.Enum):
    """Customer account kinds. Only credit accounts carry a limit."""
    CHECKING = "checking"
    SAVINGS = "savings"
    CREDIT = "credit"


class EntryType(str, enum.Enum):
    """What produced a transaction entry."""
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    TRANSFER = "transfer"


class TransferStatus(str, enum.Enum):
    # PENDING is reserved for asynchronous settlement
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
