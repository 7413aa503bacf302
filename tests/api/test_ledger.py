"""
Tests for the tenant, account, journal and reference endpoints.

These test the HTTP layer: status codes, response format, and the
mapping of ledger errors onto HTTP errors. Business logic is tested
in tests/services/.
"""

import uuid
from decimal import Decimal


def create_tenant(client, name="Acme"):
    response = client.post("/tenants", json={"name": name})
    return response.json()["id"]


def create_account(client, tenant_id, number, name, account_type_id=1):
    response = client.post(f"/tenants/{tenant_id}/accounts", json={
        "account_number": number,
        "name": name,
        "account_type_id": account_type_id,
        "currency_code": "USD",
    })
    return response.json()["id"]


class TestTenants:

    def test_create_tenant_returns_201(self, client):
        response = client.post("/tenants", json={"name": "Acme"})
        assert response.status_code == 201
        assert response.json()["name"] == "Acme"

    def test_blank_name_returns_400(self, client):
        response = client.post("/tenants", json={"name": " "})
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "INVALID_INPUT"

    def test_get_tenant(self, client):
        tenant_id = create_tenant(client)
        response = client.get(f"/tenants/{tenant_id}")
        assert response.status_code == 200
        assert response.json()["id"] == tenant_id

    def test_get_tenant_by_name(self, client):
        tenant_id = create_tenant(client, "Globex")
        response = client.get("/tenants", params={"name": "Globex"})
        assert response.status_code == 200
        assert response.json()["id"] == tenant_id

    def test_unknown_tenant_returns_404(self, client):
        response = client.get(f"/tenants/{uuid.uuid4()}")
        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "NOT_FOUND"

    def test_malformed_tenant_id_returns_400(self, client):
        response = client.get("/tenants/not-a-uuid")
        assert response.status_code == 400


class TestAccounts:

    def test_create_account_returns_201(self, client):
        tenant_id = create_tenant(client)
        response = client.post(f"/tenants/{tenant_id}/accounts", json={
            "account_number": "1000",
            "name": "Cash",
            "account_type_id": 1,
        })
        assert response.status_code == 201
        data = response.json()
        assert data["account_number"] == "1000"
        assert data["tenant_id"] == tenant_id
        assert data["is_active"] is True

    def test_duplicate_number_returns_422(self, client):
        tenant_id = create_tenant(client)
        create_account(client, tenant_id, "1000", "Cash")

        response = client.post(f"/tenants/{tenant_id}/accounts", json={
            "account_number": "1000",
            "name": "Cash Again",
            "account_type_id": 1,
        })
        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "FAILED_PRECONDITION"

    def test_list_accounts(self, client):
        tenant_id = create_tenant(client)
        create_account(client, tenant_id, "1000", "Cash")
        create_account(client, tenant_id, "4000", "Revenue", 4)

        response = client.get(
            f"/tenants/{tenant_id}/accounts", params={"account_type_id": 4}
        )
        assert response.status_code == 200
        data = response.json()
        assert data["total_count"] == 1
        assert data["items"][0]["account_number"] == "4000"

    def test_other_tenants_account_returns_404(self, client):
        acme = create_tenant(client, "Acme")
        globex = create_tenant(client, "Globex")
        account_id = create_account(client, globex, "1000", "Cash")

        response = client.get(f"/tenants/{acme}/accounts/{account_id}")
        assert response.status_code == 404

    def test_new_account_balance_is_zero(self, client):
        tenant_id = create_tenant(client)
        account_id = create_account(client, tenant_id, "1000", "Cash")

        response = client.get(f"/tenants/{tenant_id}/accounts/{account_id}/balance")
        assert response.status_code == 200
        data = response.json()
        assert Decimal(data["debit_balance"]) == 0
        assert Decimal(data["net_balance"]) == 0


class TestJournalEntries:

    def _setup(self, client):
        tenant_id = create_tenant(client)
        cash = create_account(client, tenant_id, "1000", "Cash", 1)
        revenue = create_account(client, tenant_id, "4000", "Revenue", 4)
        return tenant_id, cash, revenue

    def test_balanced_entry_returns_201(self, client):
        tenant_id, cash, revenue = self._setup(client)

        response = client.post(f"/tenants/{tenant_id}/journal-entries", json={
            "reference_number": "INV-1",
            "description": "Cash sale",
            "lines": [
                {"account_id": cash, "debit": "100.00"},
                {"account_id": revenue, "credit": "100.00"},
            ],
        })
        assert response.status_code == 201
        data = response.json()
        assert data["reference_number"] == "INV-1"
        assert len(data["lines"]) == 2

        balance = client.get(
            f"/tenants/{tenant_id}/accounts/{cash}/balance"
        ).json()
        assert Decimal(balance["debit_balance"]) == Decimal("100.00")

    def test_unbalanced_entry_returns_422(self, client):
        tenant_id, cash, revenue = self._setup(client)

        response = client.post(f"/tenants/{tenant_id}/journal-entries", json={
            "lines": [
                {"account_id": cash, "debit": "100.00"},
                {"account_id": revenue, "credit": "99.99"},
            ],
        })
        assert response.status_code == 422
        assert "not balanced" in response.json()["detail"]["message"]

    def test_single_line_returns_400(self, client):
        tenant_id, cash, _ = self._setup(client)

        response = client.post(f"/tenants/{tenant_id}/journal-entries", json={
            "lines": [{"account_id": cash, "debit": "0"}],
        })
        assert response.status_code == 400

    def test_get_and_list_entries(self, client):
        tenant_id, cash, revenue = self._setup(client)
        created = client.post(f"/tenants/{tenant_id}/journal-entries", json={
            "lines": [
                {"account_id": cash, "debit": "5"},
                {"account_id": revenue, "credit": "5"},
            ],
        }).json()

        response = client.get(
            f"/tenants/{tenant_id}/journal-entries/{created['id']}"
        )
        assert response.status_code == 200
        assert response.json()["id"] == created["id"]

        response = client.get(
            f"/tenants/{tenant_id}/journal-entries", params={"account_id": cash}
        )
        assert response.status_code == 200
        assert response.json()["total_count"] == 1


class TestReference:

    def test_account_types(self, client):
        response = client.get("/account-types")
        assert response.status_code == 200
        assert response.json()[0]["code"] == "ASSET"

    def test_currencies(self, client):
        response = client.get("/currencies")
        assert response.status_code == 200
        assert "USD" in [c["code"] for c in response.json()]
