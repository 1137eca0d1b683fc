"""
Tests for the account API endpoints.
"""

from ledger_core.errors import StorageError


def as_user(user_id):
    return {"X-User-Id": str(user_id)}


class TestListAccounts:

    def test_lists_only_callers_accounts(self, client, open_account):
        mine = open_account("ACC-1", "10.00", owner_id=1)
        open_account("ACC-2", owner_id=2)

        response = client.get("/accounts", headers=as_user(1))

        assert response.status_code == 200
        data = response.json()
        assert [a["id"] for a in data] == [mine.id]
        assert data[0]["balance"] == "10.00"
        assert data[0]["kind"] == "checking"

    def test_requires_user(self, client):
        assert client.get("/accounts").status_code == 401

    def test_storage_failure_returns_503(self, client, store, monkeypatch):
        def broken(owner_id):
            raise StorageError("database unreachable")

        monkeypatch.setattr(store, "list_accounts_for_owner", broken)

        response = client.get("/accounts", headers=as_user(1))

        assert response.status_code == 503


class TestGetAccount:

    def test_get_own_account(self, client, open_account):
        account = open_account("ACC-1", "10.00", owner_id=1)

        response = client.get(f"/accounts/{account.id}", headers=as_user(1))

        assert response.status_code == 200
        assert response.json()["account_number"] == "ACC-1"

    def test_other_users_account_returns_403(self, client, open_account):
        account = open_account("ACC-1", owner_id=1)

        response = client.get(f"/accounts/{account.id}", headers=as_user(2))

        assert response.status_code == 403
        assert response.json()["detail"]["reason"] == "not_account_owner"

    def test_unknown_account_returns_404(self, client):
        response = client.get("/accounts/999", headers=as_user(1))

        assert response.status_code == 404


class TestAccountTransactions:

    def test_account_history(self, client, open_account):
        acct_a = open_account("ACC-A", "20.00", owner_id=1)
        acct_b = open_account("ACC-B", owner_id=1)
        client.post("/transfers", headers=as_user(1), json={
            "from_account_id": acct_a.id,
            "to_account_id": acct_b.id,
            "amount": "7.50",
        })

        response = client.get(
            f"/accounts/{acct_a.id}/transactions", headers=as_user(1)
        )

        assert response.status_code == 200
        assert [e["amount"] for e in response.json()] == ["-7.50"]

    def test_other_users_history_returns_403(self, client, open_account):
        account = open_account("ACC-1", owner_id=1)

        response = client.get(
            f"/accounts/{account.id}/transactions", headers=as_user(2)
        )

        assert response.status_code == 403
