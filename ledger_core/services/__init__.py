"""Business logic services."""

from ledger_core.services.account_service import AccountService
from ledger_core.services.history import HistoryProjector
from ledger_core.services.invariants import available_funds, check_debit
from ledger_core.services.transfer_engine import TransferEngine, TransferState

__all__ = [
    "AccountService",
    "HistoryProjector",
    "TransferEngine",
    "TransferState",
    "available_funds",
    "check_debit",
]
