import csv
import io
from datetime import datetime, timedelta, UTC

from tests.conftest import create_customer


class TestCreateCustomer:
    """Tests for POST /api/customers"""

    def test_defaults(self, client, auth_headers):
        customer = create_customer(client, auth_headers)

        assert customer["customer_number"] == "CUST-000001"
        assert customer["full_name"] == "Sipho Dlamini"
        assert customer["address_country"] == "South Africa"
        assert customer["status"] == "active"
        assert customer["customer_type"] == "regular"
        assert customer["tags"] == []
        assert customer["total_purchases"] == 0
        assert customer["total_spent"] == 0.0
        assert customer["credit_account"] is None
        assert customer["loyalty_account"] is None

    def test_numbers_follow_sequence(self, client, auth_headers):
        create_customer(client, auth_headers)
        second = create_customer(client, auth_headers, first_name="Naledi")

        assert second["customer_number"] == "CUST-000002"

    def test_sequence_is_per_organization(self, client, user_a_headers, user_b_headers):
        create_customer(client, user_a_headers)
        other = create_customer(client, user_b_headers)

        assert other["customer_number"] == "CUST-000001"

    def test_open_credit_and_loyalty(self, client, auth_headers):
        customer = create_customer(
            client,
            auth_headers,
            credit={"credit_limit": 2000, "payment_terms": 14},
            loyalty={},
        )

        credit = customer["credit_account"]
        assert credit["credit_limit"] == 2000.0
        assert credit["current_balance"] == 0.0
        assert credit["available_credit"] == 2000.0
        assert credit["payment_terms"] == 14
        assert credit["credit_status"] == "good"

        loyalty = customer["loyalty_account"]
        assert loyalty["card_number"] == f"LOY-{customer['id']:08d}"
        assert loyalty["tier"] == "bronze"
        assert loyalty["next_tier_points"] == 1000

    def test_taken_card_number_rolls_back(self, client, auth_headers):
        create_customer(client, auth_headers, loyalty={"card_number": "CARD-1"})

        response = client.post(
            "/api/customers",
            json={"first_name": "Second", "last_name": "Card", "loyalty": {"card_number": "CARD-1"}},
            headers=auth_headers,
        )

        assert response.status_code == 409
        assert client.get("/api/customers", headers=auth_headers).json()["total"] == 1

    def test_explicit_country_kept(self, client, auth_headers):
        customer = create_customer(client, auth_headers, address_country="Botswana")
        assert customer["address_country"] == "Botswana"


class TestListCustomers:
    """Tests for GET /api/customers filters"""

    def test_newest_first_and_search(self, client, auth_headers):
        create_customer(client, auth_headers)
        create_customer(client, auth_headers, first_name="Naledi", last_name="Nkosi", email=None, phone="071 234 5678")

        everyone = client.get("/api/customers", headers=auth_headers).json()
        by_phone = client.get("/api/customers?search=234", headers=auth_headers).json()
        by_email = client.get("/api/customers?search=SIPHO@", headers=auth_headers).json()

        assert [c["first_name"] for c in everyone["customers"]] == ["Naledi", "Sipho"]
        assert [c["first_name"] for c in by_phone["customers"]] == ["Naledi"]
        assert [c["first_name"] for c in by_email["customers"]] == ["Sipho"]

    def test_search_underscore_is_literal(self, client, auth_headers):
        create_customer(client, auth_headers)
        create_customer(client, auth_headers, first_name="Naledi", email="naledi_n@example.com")

        data = client.get("/api/customers", params={"search": "_"}, headers=auth_headers).json()

        assert [c["first_name"] for c in data["customers"]] == ["Naledi"]

    def test_status_and_type(self, client, auth_headers):
        create_customer(client, auth_headers, customer_type="vip")
        create_customer(client, auth_headers, first_name="Naledi", status="suspended")

        vip = client.get("/api/customers?customer_type=vip", headers=auth_headers).json()
        suspended = client.get("/api/customers?status=suspended", headers=auth_headers).json()
        none = client.get("/api/customers?status=suspended&customer_type=vip", headers=auth_headers).json()

        assert [c["first_name"] for c in vip["customers"]] == ["Sipho"]
        assert [c["first_name"] for c in suspended["customers"]] == ["Naledi"]
        assert none["total"] == 0

    def test_credit_status(self, client, auth_headers):
        overdue = create_customer(client, auth_headers, first_name="Overdue", credit={"credit_limit": 1000})
        at_limit = create_customer(client, auth_headers, first_name="Maxed", credit={"credit_limit": 500})
        create_customer(client, auth_headers, first_name="Good", credit={"credit_limit": 500})
        create_customer(client, auth_headers, first_name="NoCredit")

        client.patch(
            f"/api/credit/accounts/{overdue['id']}", json={"overdue_amount": 100}, headers=auth_headers
        )
        client.post(
            f"/api/credit/accounts/{at_limit['id']}/transactions",
            json={"type": "purchase", "amount": 500},
            headers=auth_headers,
        )

        def names(credit_status):
            data = client.get(f"/api/customers?credit_status={credit_status}", headers=auth_headers).json()
            return [c["first_name"] for c in data["customers"]]

        assert names("overdue") == ["Overdue"]
        assert names("at_limit") == ["Maxed"]
        assert names("good") == ["Good"]

    def test_loyalty_tier(self, client, auth_headers):
        silver = create_customer(client, auth_headers, first_name="Silver", loyalty={})
        create_customer(client, auth_headers, first_name="Bronze", loyalty={})
        client.post(
            f"/api/loyalty/accounts/{silver['id']}/transactions",
            json={"type": "bonus", "points": 1000},
            headers=auth_headers,
        )

        data = client.get("/api/customers?loyalty_tier=silver", headers=auth_headers).json()

        assert [c["first_name"] for c in data["customers"]] == ["Silver"]

    def test_created_date_range(self, client, auth_headers):
        create_customer(client, auth_headers)
        today = datetime.now(UTC).date()
        yesterday = today - timedelta(days=1)

        included = client.get(
            f"/api/customers?created_from={today}&created_to={today}", headers=auth_headers
        ).json()
        excluded = client.get(f"/api/customers?created_to={yesterday}", headers=auth_headers).json()

        assert included["total"] == 1
        assert excluded["total"] == 0

    def test_pagination(self, client, auth_headers):
        for i in range(5):
            create_customer(client, auth_headers, first_name=f"C{i}")

        data = client.get("/api/customers?limit=2&offset=2", headers=auth_headers).json()

        assert data["total"] == 5
        assert [c["first_name"] for c in data["customers"]] == ["C2", "C1"]


class TestUpdateCustomer:
    """Tests for PATCH /api/customers/{id}"""

    def test_update_details(self, client, auth_headers):
        customer = create_customer(client, auth_headers)

        response = client.patch(
            f"/api/customers/{customer['id']}",
            json={"customer_type": "wholesale", "tags": ["bulk"]},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["customer_type"] == "wholesale"
        assert response.json()["tags"] == ["bulk"]
        assert response.json()["customer_number"] == customer["customer_number"]

    def test_credit_block_opens_account(self, client, auth_headers):
        customer = create_customer(client, auth_headers)

        response = client.patch(
            f"/api/customers/{customer['id']}", json={"credit": {"credit_limit": 750}}, headers=auth_headers
        )

        assert response.json()["credit_account"]["credit_limit"] == 750.0

    def test_credit_limit_below_balance_rejected(self, client, auth_headers):
        customer = create_customer(client, auth_headers, credit={"credit_limit": 1000})
        client.post(
            f"/api/credit/accounts/{customer['id']}/transactions",
            json={"type": "purchase", "amount": 600},
            headers=auth_headers,
        )

        response = client.patch(
            f"/api/customers/{customer['id']}",
            json={"first_name": "Changed", "credit": {"credit_limit": 500}},
            headers=auth_headers,
        )

        assert response.status_code == 400
        unchanged = client.get(f"/api/customers/{customer['id']}", headers=auth_headers).json()
        assert unchanged["first_name"] == "Sipho"
        assert unchanged["credit_account"]["credit_limit"] == 1000.0

    def test_loyalty_block_enrolls(self, client, auth_headers):
        customer = create_customer(client, auth_headers)

        response = client.patch(
            f"/api/customers/{customer['id']}",
            json={"loyalty": {"card_number": "VIP-77"}},
            headers=auth_headers,
        )

        assert response.json()["loyalty_account"]["card_number"] == "VIP-77"


class TestRecordSale:
    """Tests for POST /api/customers/{id}/sales"""

    def test_sale_updates_totals_and_points(self, client, auth_headers):
        customer = create_customer(client, auth_headers, loyalty={})

        response = client.post(
            f"/api/customers/{customer['id']}/sales",
            json={"amount": 250.75, "order_id": "ORD-1"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["total_purchases"] == 1
        assert data["total_spent"] == 250.75
        assert data["last_purchase_date"] is not None
        assert data["loyalty_account"]["current_points"] == 250
        assert data["loyalty_account"]["lifetime_points"] == 250

        transactions = client.get(
            f"/api/loyalty/accounts/{customer['id']}/transactions", headers=auth_headers
        ).json()
        assert transactions["transactions"][0]["type"] == "earned"
        assert transactions["transactions"][0]["order_id"] == "ORD-1"

    def test_sale_without_points(self, client, auth_headers):
        customer = create_customer(client, auth_headers, loyalty={})

        data = client.post(
            f"/api/customers/{customer['id']}/sales",
            json={"amount": 99.99, "award_points": False},
            headers=auth_headers,
        ).json()

        assert data["total_spent"] == 99.99
        assert data["loyalty_account"]["current_points"] == 0

    def test_sale_for_unenrolled_customer(self, client, auth_headers):
        customer = create_customer(client, auth_headers)

        data = client.post(
            f"/api/customers/{customer['id']}/sales", json={"amount": 40}, headers=auth_headers
        ).json()

        assert data["total_purchases"] == 1
        assert data["loyalty_account"] is None

    def test_amount_must_be_positive(self, client, auth_headers):
        customer = create_customer(client, auth_headers)

        response = client.post(
            f"/api/customers/{customer['id']}/sales", json={"amount": 0}, headers=auth_headers
        )

        assert response.status_code == 422


class TestDeleteCustomer:
    """Tests for DELETE /api/customers/{id}"""

    def test_delete_removes_accounts(self, client, auth_headers):
        customer = create_customer(client, auth_headers, credit={"credit_limit": 100}, loyalty={})

        response = client.delete(f"/api/customers/{customer['id']}", headers=auth_headers)

        assert response.status_code == 204
        assert client.get(f"/api/customers/{customer['id']}", headers=auth_headers).status_code == 404
        assert client.get(f"/api/credit/accounts/{customer['id']}", headers=auth_headers).status_code == 404
        assert client.get(f"/api/loyalty/accounts/{customer['id']}", headers=auth_headers).status_code == 404

    def test_other_organization_cannot_delete(self, client, auth_headers, user_b_headers):
        customer = create_customer(client, auth_headers)

        response = client.delete(f"/api/customers/{customer['id']}", headers=user_b_headers)

        assert response.status_code == 404


class TestCustomerStats:
    """Tests for GET /api/customers/stats"""

    def test_stats(self, client, auth_headers):
        big = create_customer(client, auth_headers, credit={"credit_limit": 1000}, loyalty={})
        create_customer(client, auth_headers, first_name="Small", status="inactive", credit={"credit_limit": 500})
        client.post(f"/api/customers/{big['id']}/sales", json={"amount": 300}, headers=auth_headers)
        client.post(
            f"/api/credit/accounts/{big['id']}/transactions",
            json={"type": "purchase", "amount": 400},
            headers=auth_headers,
        )

        data = client.get("/api/customers/stats", headers=auth_headers).json()

        assert data["total_customers"] == 2
        assert data["active_customers"] == 1
        assert data["credit_accounts"] == 2
        assert data["loyalty_accounts"] == 1
        assert data["total_credit_outstanding"] == 400.0
        assert data["average_credit_balance"] == 200.0
        assert data["new_this_month"] == 2
        assert data["top_customers"][0]["name"] == "Sipho Dlamini"
        assert data["top_customers"][0]["total_spent"] == 300.0


class TestCustomerExport:
    """Tests for GET /api/customers/export"""

    def test_export(self, client, auth_headers):
        customer = create_customer(client, auth_headers, credit={"credit_limit": 1000}, loyalty={})
        create_customer(client, auth_headers, first_name="Plain")
        client.post(f"/api/customers/{customer['id']}/sales", json={"amount": 120.5}, headers=auth_headers)

        response = client.get("/api/customers/export", headers=auth_headers)

        assert response.status_code == 200
        assert 'filename="customers-export-' in response.headers["content-disposition"]
        header, *body, totals = list(csv.reader(io.StringIO(response.text)))
        assert header[0] == "Customer Number"
        assert "Total Spent (R)" in header

        plain, sipho = body
        assert plain[0] == "CUST-000002"
        assert plain[10:14] == ["", "", "", ""]
        assert sipho[9] == "120.50"
        assert sipho[10] == "1000.00"
        assert sipho[12] == "Bronze"
        assert sipho[13] == "120"

        assert totals[0] == "TOTALS"
        assert totals[8] == "1"
        assert totals[9] == "120.50"
        assert totals[13] == "120"
