"""
History projector: read-only views over the ledger.
"""

from ledger_core.schemas.entry import TransactionEntry
from ledger_core.schemas.transfer import TransferRecord
from ledger_core.store.base import LedgerStore, newest_first


class HistoryProjector:

    def __init__(self, store: LedgerStore):
        self.store = store

    def account_history(self, account_id: int) -> list[TransactionEntry]:
        """
        Entries posted to the account or naming it as counterparty, newest first.

        Raises AccountNotFoundError for an unknown account.
        """
        self.store.get_account(account_id)
        return self.store.list_entries_for_account(account_id)

    def user_history(self, user_id: int) -> list[TransactionEntry]:
        """
        Union of the history of every account the user owns.

        An entry between two of the user's own accounts appears in both
        account histories; it is returned once. All accounts are read
        in one store call so the result reflects a single point in time.
        """
        entries: dict[int, TransactionEntry] = {}
        for entry in self.store.list_entries_for_user(user_id):
            entries.setdefault(entry.id, entry)
        return sorted(entries.values(), key=newest_first, reverse=True)

    def user_transfers(self, user_id: int) -> list[TransferRecord]:
        """Transfers into or out of any account the user owns, newest first."""
        return self.store.list_transfers_for_user(user_id)
