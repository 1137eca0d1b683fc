"""
Concurrency tests for the TransferEngine.

Transfers run on real threads against both backends. The
assertions are about end state: however the transfers interleave,
money is conserved and no plain account ever goes negative.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

from ledger_core.errors import InsufficientFundsError
from ledger_core.models.enums import AccountKind
from ledger_core.schemas.transfer import TransferRequest
from ledger_core.services.transfer_engine import TransferEngine


def run_transfers(store, requests, workers=16):
    """
    Execute requests in parallel.

    Returns (completed records, insufficient-funds rejections). Any
    other exception is re-raised by future.result().
    """
    engine = TransferEngine(store)

    def attempt(request):
        try:
            return engine.execute(request)
        except InsufficientFundsError as e:
            return e

    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(attempt, r) for r in requests]
        outcomes = [f.result() for f in futures]

    completed = [o for o in outcomes if not isinstance(o, InsufficientFundsError)]
    rejected = [o for o in outcomes if isinstance(o, InsufficientFundsError)]
    return completed, rejected


class TestConcurrentTransfers:

    def test_hundred_transfers_from_five_hundred(self, store, open_account):
        acct_a = open_account("ACC-A", "500.00")
        acct_b = open_account("ACC-B", "0.00")
        request = TransferRequest(
            from_account_id=acct_a.id,
            to_account_id=acct_b.id,
            amount=Decimal("10.00"),
        )

        completed, rejected = run_transfers(store, [request] * 100)

        assert len(completed) == 50
        assert len(rejected) == 50
        assert store.get_account(acct_a.id).balance == Decimal("0.00")
        assert store.get_account(acct_b.id).balance == Decimal("500.00")
        assert len(store.list_transfers([acct_a.id])) == 50
        assert len(store.list_entries([acct_a.id, acct_b.id])) == 100

    def test_opposite_directions_do_not_deadlock(self, store, open_account):
        acct_a = open_account("ACC-A", "1000.00")
        acct_b = open_account("ACC-B", "1000.00")
        a_to_b = TransferRequest(
            from_account_id=acct_a.id,
            to_account_id=acct_b.id,
            amount=Decimal("1.00"),
        )
        b_to_a = TransferRequest(
            from_account_id=acct_b.id,
            to_account_id=acct_a.id,
            amount=Decimal("1.00"),
        )

        completed, rejected = run_transfers(store, [a_to_b, b_to_a] * 50)

        assert len(completed) == 100
        assert rejected == []
        assert store.get_account(acct_a.id).balance == Decimal("1000.00")
        assert store.get_account(acct_b.id).balance == Decimal("1000.00")

    def test_mixed_traffic_conserves_money(self, store, open_account):
        accounts = [
            open_account("ACC-1", "100.00"),
            open_account("ACC-2", "35.00"),
            open_account("ACC-3", "0.00"),
            open_account(
                "CARD-4", "0.00", kind=AccountKind.CREDIT, credit_limit="50.00"
            ),
        ]
        before = store.total_balance()

        requests = []
        for i in range(120):
            source = accounts[i % 4]
            destination = accounts[(i * 3 + 1) % 4]
            requests.append(TransferRequest(
                from_account_id=source.id,
                to_account_id=destination.id,
                amount=Decimal("7.25"),
            ))

        completed, rejected = run_transfers(store, requests)

        assert len(completed) + len(rejected) == 120
        assert store.total_balance() == before

        for account in accounts:
            current = store.get_account(account.id)
            if current.kind == AccountKind.CREDIT:
                assert -current.balance <= current.credit_limit
            else:
                assert current.balance >= 0

        entries = store.list_entries([a.id for a in accounts])
        assert len(entries) == 2 * len(completed)

    def test_readers_never_see_half_a_transfer(self, store, open_account):
        acct_a = open_account("ACC-A", "1000.00")
        acct_b = open_account("ACC-B", "1000.00")
        ids = [acct_a.id, acct_b.id]
        before = store.total_balance()
        requests = [
            TransferRequest(
                from_account_id=src.id,
                to_account_id=dst.id,
                amount=Decimal("3.00"),
            )
            for src, dst in [(acct_a, acct_b), (acct_b, acct_a)] * 30
        ]

        done = threading.Event()
        samples = []

        def read_until_done():
            while True:
                finished = done.is_set()
                total = store.total_balance()
                transfers = store.list_transfers(ids)
                entries = store.list_entries(ids)
                samples.append((total, len(transfers), len(entries)))
                if finished:
                    return

        reader = threading.Thread(target=read_until_done)
        reader.start()
        try:
            completed, rejected = run_transfers(store, requests)
        finally:
            done.set()
            reader.join()

        assert len(completed) == 60
        assert rejected == []
        assert samples[-1][1:] == (60, 120)
        for total, transfer_count, entry_count in samples:
            assert total == before
            # records are read first, so their entries must already be there
            assert entry_count >= 2 * transfer_count
