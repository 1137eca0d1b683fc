"""
Account service: provisioning and ownership-aware lookups.

Account opening belongs to onboarding, outside the ledger core proper;
this service is the seam it calls. It is also what the request layer
uses to make sure a caller only sees their own accounts.
"""

import logging

from ledger_core.errors import NotAccountOwnerError
from ledger_core.schemas.account import Account, AccountOpen
from ledger_core.store.base import LedgerStore

logger = logging.getLogger(__name__)


class AccountService:

    def __init__(self, store: LedgerStore):
        self.store = store

    def open_account(self, request: AccountOpen) -> Account:
        """Open an account with its seed balance."""
        account = self.store.open_account(request)
        logger.info(
            "Account opened",
            extra={
                "account_id": account.id,
                "owner_id": account.owner_id,
                "kind": account.kind.value,
                "seed_balance": str(account.balance),
            },
        )
        return account

    def get_account(self, account_id: int, owner_id: int | None = None) -> Account:
        """
        Get an account by ID.

        When owner_id is given, raises NotAccountOwnerError unless the
        account belongs to that user.
        """
        account = self.store.get_account(account_id)
        if owner_id is not None and account.owner_id != owner_id:
            raise NotAccountOwnerError(account_id, owner_id)
        return account

    def get_account_by_number(self, account_number: str) -> Account:
        return self.store.get_account_by_number(account_number)

    def get_user_accounts(self, owner_id: int) -> list[Account]:
        """Get all accounts for a user."""
        return self.store.list_accounts_for_owner(owner_id)
