import pytest

from tests.conftest import create_customer


@pytest.fixture
def member(client, auth_headers):
    return create_customer(client, auth_headers, loyalty={})


def post_points(client, headers, customer_id, **payload):
    return client.post(
        f"/api/loyalty/accounts/{customer_id}/transactions", json=payload, headers=headers
    )


class TestEarningPoints:
    """Earned and bonus points raise current and lifetime points"""

    def test_earn(self, client, auth_headers, member):
        response = post_points(client, auth_headers, member["id"], type="earned", points=300)

        assert response.status_code == 201
        assert response.json()["balance_after"] == 300

        account = client.get(f"/api/loyalty/accounts/{member['id']}", headers=auth_headers).json()
        assert account["current_points"] == 300
        assert account["lifetime_points"] == 300
        assert account["points_to_next_tier"] == 700
        assert account["tier_progress"] == 30.0
        assert account["last_earned_date"] is not None

    def test_promotion_through_tiers(self, client, auth_headers, member):
        post_points(client, auth_headers, member["id"], type="bonus", points=1000)
        silver = client.get(f"/api/loyalty/accounts/{member['id']}", headers=auth_headers).json()

        post_points(client, auth_headers, member["id"], type="earned", points=14000)
        platinum = client.get(f"/api/loyalty/accounts/{member['id']}", headers=auth_headers).json()

        assert silver["tier"] == "silver"
        assert silver["next_tier_points"] == 5000
        assert platinum["tier"] == "platinum"
        assert platinum["next_tier_points"] == 0
        assert platinum["points_to_next_tier"] == 0
        assert platinum["tier_progress"] == 100.0

    def test_points_must_be_positive(self, client, auth_headers, member):
        response = post_points(client, auth_headers, member["id"], type="earned", points=0)
        assert response.status_code == 422


class TestSpendingPoints:
    """Redeemed and expired points only lower current points"""

    def test_redeem_keeps_lifetime_and_tier(self, client, auth_headers, member):
        post_points(client, auth_headers, member["id"], type="earned", points=1200)

        response = post_points(client, auth_headers, member["id"], type="redeemed", points=1000)

        assert response.json()["balance_after"] == 200
        account = client.get(f"/api/loyalty/accounts/{member['id']}", headers=auth_headers).json()
        assert account["current_points"] == 200
        assert account["lifetime_points"] == 1200
        assert account["tier"] == "silver"
        assert account["last_redeemed_date"] is not None

    def test_expire(self, client, auth_headers, member):
        post_points(client, auth_headers, member["id"], type="earned", points=50)

        post_points(client, auth_headers, member["id"], type="expired", points=50)

        account = client.get(f"/api/loyalty/accounts/{member['id']}", headers=auth_headers).json()
        assert account["current_points"] == 0
        assert account["last_redeemed_date"] is None

    def test_cannot_redeem_more_than_balance(self, client, auth_headers, member):
        post_points(client, auth_headers, member["id"], type="earned", points=100)

        response = post_points(client, auth_headers, member["id"], type="redeemed", points=101)

        assert response.status_code == 400
        assert "Insufficient points" in response.json()["detail"]


class TestLoyaltyAccounts:
    """Listing, card numbers, stats and tier table"""

    def test_list_highest_balance_first(self, client, auth_headers, member):
        rich = create_customer(client, auth_headers, first_name="Rich", loyalty={})
        post_points(client, auth_headers, rich["id"], type="bonus", points=5000)
        post_points(client, auth_headers, member["id"], type="earned", points=10)

        data = client.get("/api/loyalty/accounts", headers=auth_headers).json()

        assert [a["customer_name"] for a in data["accounts"]] == ["Rich Dlamini", "Sipho Dlamini"]
        assert data["accounts"][0]["tier"] == "gold"

    def test_tier_filter(self, client, auth_headers, member):
        rich = create_customer(client, auth_headers, first_name="Rich", loyalty={})
        post_points(client, auth_headers, rich["id"], type="bonus", points=5000)

        data = client.get("/api/loyalty/accounts?tier=bronze", headers=auth_headers).json()

        assert [a["customer_id"] for a in data["accounts"]] == [member["id"]]

    def test_reissue_card(self, client, auth_headers, member):
        response = client.patch(
            f"/api/loyalty/accounts/{member['id']}", json={"card_number": "GOLD-1"}, headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["card_number"] == "GOLD-1"

    def test_card_taken_by_other_account(self, client, auth_headers, member):
        other = create_customer(client, auth_headers, first_name="Other", loyalty={"card_number": "TAKEN"})

        response = client.patch(
            f"/api/loyalty/accounts/{member['id']}", json={"card_number": "TAKEN"}, headers=auth_headers
        )

        assert response.status_code == 409
        assert other["loyalty_account"]["card_number"] == "TAKEN"

    def test_card_numbers_are_per_organization(self, client, auth_headers, user_b_headers):
        create_customer(client, auth_headers, first_name="Ours", loyalty={"card_number": "VIP-1"})

        response = client.post(
            "/api/customers",
            json={"first_name": "Theirs", "last_name": "Nkosi", "loyalty": {"card_number": "VIP-1"}},
            headers=user_b_headers,
        )

        assert response.status_code == 201
        assert response.json()["loyalty_account"]["card_number"] == "VIP-1"

        other = create_customer(client, user_b_headers, first_name="Second", loyalty={})
        reissue = client.patch(
            f"/api/loyalty/accounts/{other['id']}", json={"card_number": "VIP-1"}, headers=user_b_headers
        )
        assert reissue.status_code == 409

    def test_keeping_own_card_is_fine(self, client, auth_headers, member):
        card = member["loyalty_account"]["card_number"]

        response = client.patch(
            f"/api/loyalty/accounts/{member['id']}", json={"card_number": card}, headers=auth_headers
        )

        assert response.status_code == 200

    def test_not_enrolled(self, client, auth_headers):
        plain = create_customer(client, auth_headers)

        response = post_points(client, auth_headers, plain["id"], type="earned", points=5)

        assert response.status_code == 404

    def test_stats(self, client, auth_headers, member):
        rich = create_customer(client, auth_headers, first_name="Rich", loyalty={})
        post_points(client, auth_headers, rich["id"], type="bonus", points=1500)
        post_points(client, auth_headers, member["id"], type="earned", points=500)

        data = client.get("/api/loyalty/stats", headers=auth_headers).json()

        assert data == {
            "total_accounts": 2,
            "total_current_points": 2000,
            "total_lifetime_points": 2000,
            "average_points": 1000.0,
            "tier_distribution": {"bronze": 1, "silver": 1, "gold": 0, "platinum": 0},
        }

    def test_tier_requirements(self, client, auth_headers):
        data = client.get("/api/loyalty/tiers", headers=auth_headers).json()

        assert data == [
            {"tier": "bronze", "min_lifetime_points": 0, "next_tier": "silver", "next_tier_points": 1000},
            {"tier": "silver", "min_lifetime_points": 1000, "next_tier": "gold", "next_tier_points": 5000},
            {"tier": "gold", "min_lifetime_points": 5000, "next_tier": "platinum", "next_tier_points": 15000},
            {"tier": "platinum", "min_lifetime_points": 15000, "next_tier": None, "next_tier_points": 0},
        ]
