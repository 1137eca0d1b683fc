"""
Ledger error taxonomy.

Rejections (TransferRejectedError subclasses) are expected outcomes:
they are detected before anything is mutated and the caller can fix
the input and try again. StorageError means the backend failed while
a unit of work was open; the unit of work was rolled back and the
operation did not happen.
"""

from decimal import Decimal


class LedgerError(Exception):
    """Base class for every error raised by the ledger core."""


class TransferRejectedError(LedgerError):
    """A request was refused before any state changed."""

    reason = "rejected"

    def detail(self) -> dict:
        return {"reason": self.reason, "message": str(self)}


class InvalidAmountError(TransferRejectedError):
    reason = "invalid_amount"

    def __init__(self, amount):
        self.amount = amount
        super().__init__(
            f"Amount must be a positive value in whole cents, got {amount}"
        )

    def detail(self) -> dict:
        return {**super().detail(), "amount": str(self.amount)}


class SameAccountError(TransferRejectedError):
    reason = "same_account"

    def __init__(self, account_id: int):
        self.account_id = account_id
        super().__init__(f"Cannot transfer from account {account_id} to itself")

    def detail(self) -> dict:
        return {**super().detail(), "account_id": self.account_id}


class AccountNotFoundError(TransferRejectedError):
    reason = "account_not_found"

    def __init__(self, account_id):
        self.account_id = account_id
        super().__init__(f"Account {account_id} not found")

    def detail(self) -> dict:
        return {**super().detail(), "account_id": self.account_id}


class InsufficientFundsError(TransferRejectedError):
    reason = "insufficient_funds"

    def __init__(self, account_id: int, amount: Decimal, shortfall: Decimal):
        self.account_id = account_id
        self.amount = amount
        self.shortfall = shortfall
        super().__init__(
            f"Insufficient funds in account {account_id}: "
            f"requested={amount}, shortfall={shortfall}"
        )

    def detail(self) -> dict:
        return {
            **super().detail(),
            "account_id": self.account_id,
            "amount": str(self.amount),
            "shortfall": str(self.shortfall),
        }


class NotAccountOwnerError(TransferRejectedError):
    reason = "not_account_owner"

    def __init__(self, account_id: int, owner_id: int):
        self.account_id = account_id
        self.owner_id = owner_id
        super().__init__(
            f"User {owner_id} does not own account {account_id}"
        )

    def detail(self) -> dict:
        return {**super().detail(), "account_id": self.account_id}


class DuplicateAccountError(LedgerError):
    """An account with the same account number already exists."""

    def __init__(self, account_number: str):
        self.account_number = account_number
        super().__init__(
            f"Account with number '{account_number}' already exists"
        )


class StorageError(LedgerError):
    """The backend failed; the surrounding unit of work was rolled back."""
