from tests.conftest import add_tenant, create_customer, create_product


class TestDashboard:
    """Tests for GET /api/reports/dashboard"""

    def test_empty_organization(self, client, auth_headers):
        response = client.get("/api/reports/dashboard", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["currency_symbol"] == "R"
        assert data["inventory"]["total_products"] == 0
        assert data["portfolio"]["total_buildings"] == 0
        assert data["portfolio"]["occupancy_rate"] == 0.0
        assert data["customers"]["total_customers"] == 0
        assert data["customers"]["top_customers"] == []
        assert data["credit"]["utilization_rate"] == 0.0

    def test_combines_every_module(self, client, auth_headers, building):
        create_product(client, auth_headers, stock_quantity=4)
        add_tenant(client, auth_headers, building["id"])
        customer = create_customer(client, auth_headers, credit={"credit_limit": 1000})
        client.post(
            f"/api/credit/accounts/{customer['id']}/transactions",
            json={"type": "purchase", "amount": 250},
            headers=auth_headers,
        )

        data = client.get("/api/reports/dashboard", headers=auth_headers).json()

        assert data["inventory"]["total_products"] == 1
        assert data["inventory"]["low_stock_count"] == 1
        assert data["portfolio"]["occupied_units"] == 1
        assert data["portfolio"]["total_rent"] == 5000.0
        assert data["customers"]["credit_accounts"] == 1
        assert data["credit"]["total_outstanding"] == 250.0
        assert data["credit"]["utilization_rate"] == 25.0

    def test_scoped_to_organization(self, client, auth_headers, user_b_headers):
        create_product(client, auth_headers)

        data = client.get("/api/reports/dashboard", headers=user_b_headers).json()

        assert data["inventory"]["total_products"] == 0

    def test_requires_authentication(self, client):
        response = client.get("/api/reports/dashboard")
        assert response.status_code in (401, 403)
