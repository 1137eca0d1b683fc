"""
Balance invariant checks.

Pure functions over account snapshots; nothing here touches storage.
A check made against a snapshot read outside the account lock is
only advisory: the transfer engine repeats it under the lock before
it debits.
"""

from decimal import Decimal

from ledger_core.errors import InsufficientFundsError
from ledger_core.models.enums import AccountKind
from ledger_core.schemas.account import Account

ZERO = Decimal("0.00")


def available_funds(account: Account) -> Decimal:
    """
    How much can leave the account right now.

    Plain accounts may spend down to zero. Credit accounts may run
    their balance down to minus the credit limit; a missing limit
    counts as zero.
    """
    if account.kind != AccountKind.CREDIT:
        return account.balance
    return (account.credit_limit or ZERO) + account.balance


def check_debit(account: Account, amount: Decimal) -> None:
    """
    Raise InsufficientFundsError if debiting amount would break the invariant.

    For a credit account this is the rule "outstanding debt plus the
    new amount must not exceed the credit limit".
    """
    available = available_funds(account)
    if amount > available:
        raise InsufficientFundsError(
            account_id=account.id,
            amount=amount,
            shortfall=amount - available,
        )
