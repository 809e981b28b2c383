from tests.conftest import create_product


class TestCreateProduct:
    """Tests for POST /api/products"""

    def test_create_product_with_derived_values(self, client, auth_headers):
        """Response carries stock status, margin and stock values"""
        product = create_product(client, auth_headers)

        assert product["name"] == "Widget"
        assert product["stock_status"] == "in_stock"
        assert product["profit_margin"] == 40.0
        assert product["total_cost_value"] == 3000.0
        assert product["total_selling_value"] == 5000.0
        assert product["expected_profit"] == 2000.0

    def test_duplicate_sku_conflicts(self, client, auth_headers):
        create_product(client, auth_headers, sku="DUP-1")

        response = client.post(
            "/api/products", json={"name": "Other", "sku": "DUP-1"}, headers=auth_headers
        )

        assert response.status_code == 409
        assert "DUP-1" in response.json()["detail"]

    def test_same_sku_allowed_in_other_organization(self, client, user_a_headers, user_b_headers):
        create_product(client, user_a_headers, sku="SHARED")
        create_product(client, user_b_headers, sku="SHARED")

    def test_negative_price_rejected(self, client, auth_headers):
        response = client.post(
            "/api/products", json={"name": "Bad", "price": -1}, headers=auth_headers
        )

        assert response.status_code == 422

    def test_zero_price_has_zero_margin(self, client, auth_headers):
        product = create_product(client, auth_headers, sku=None, price=0, cost_price=10)

        assert product["profit_margin"] == 0.0


class TestStockStatus:
    """Stock status thresholds"""

    def test_out_of_stock(self, client, auth_headers):
        product = create_product(client, auth_headers, stock_quantity=0)
        assert product["stock_status"] == "out_of_stock"

    def test_default_threshold_is_low_stock(self, client, auth_headers):
        """Without min_stock_level, 10 units or fewer is low stock"""
        product = create_product(client, auth_headers, stock_quantity=10)
        assert product["stock_status"] == "low_stock"

    def test_custom_threshold(self, client, auth_headers):
        product = create_product(client, auth_headers, stock_quantity=10, min_stock_level=5)
        assert product["stock_status"] == "in_stock"

    def test_zero_min_level_falls_back_to_default(self, client, auth_headers):
        product = create_product(client, auth_headers, stock_quantity=8, min_stock_level=0)
        assert product["stock_status"] == "low_stock"


class TestListProducts:
    """Tests for GET /api/products filters"""

    def _seed(self, client, headers):
        create_product(client, headers, name="Apple Juice", sku="AJ-1", category="Drinks", stock_quantity=40)
        create_product(client, headers, name="Bread", sku="BR-1", category="Bakery", stock_quantity=5)
        create_product(client, headers, name="Cola", sku="CL-1", category="Drinks", stock_quantity=0)
        create_product(
            client, headers, name="Dusty Item", sku="DI-1", category="Misc", stock_quantity=100, is_active=False
        )

    def test_list_sorted_by_name(self, client, auth_headers):
        self._seed(client, auth_headers)

        response = client.get("/api/products", headers=auth_headers)

        assert response.status_code == 200
        names = [p["name"] for p in response.json()["products"]]
        assert names == ["Apple Juice", "Bread", "Cola", "Dusty Item"]
        assert response.json()["total"] == 4

    def test_search_matches_name_sku_or_category(self, client, auth_headers):
        self._seed(client, auth_headers)

        by_category = client.get("/api/products?search=drink", headers=auth_headers).json()
        by_sku = client.get("/api/products?search=br-", headers=auth_headers).json()

        assert {p["name"] for p in by_category["products"]} == {"Apple Juice", "Cola"}
        assert [p["name"] for p in by_sku["products"]] == ["Bread"]

    def test_search_treats_wildcards_literally(self, client, auth_headers):
        """'_' and '%' match themselves on the list and alerts endpoints alike"""
        create_product(client, auth_headers, name="Widget", sku="WID-001", stock_quantity=3)
        create_product(client, auth_headers, name="a_b", sku="AB-1", category="Misc", stock_quantity=3)
        create_product(client, auth_headers, name="50% Off", sku="HALF-1", category="Promo", stock_quantity=3)

        for term, expected in [("_", ["a_b"]), ("%", ["50% Off"]), ("\\", [])]:
            listed = client.get("/api/products", params={"search": term}, headers=auth_headers).json()
            alerts = client.get("/api/products/alerts", params={"search": term}, headers=auth_headers).json()

            assert [p["name"] for p in listed["products"]] == expected
            assert [a["name"] for a in alerts["alerts"]] == expected

    def test_category_filter_and_all(self, client, auth_headers):
        self._seed(client, auth_headers)

        drinks = client.get("/api/products?category=Drinks", headers=auth_headers).json()
        everything = client.get("/api/products?category=all", headers=auth_headers).json()

        assert drinks["total"] == 2
        assert everything["total"] == 4

    def test_stock_status_filter(self, client, auth_headers):
        self._seed(client, auth_headers)

        low = client.get("/api/products?stock_status=low_stock", headers=auth_headers).json()
        out = client.get("/api/products?stock_status=out_of_stock", headers=auth_headers).json()
        in_stock = client.get("/api/products?stock_status=in_stock", headers=auth_headers).json()

        assert [p["name"] for p in low["products"]] == ["Bread"]
        assert [p["name"] for p in out["products"]] == ["Cola"]
        assert [p["name"] for p in in_stock["products"]] == ["Apple Juice", "Dusty Item"]

    def test_filters_combine(self, client, auth_headers):
        """A product is listed only when every filter matches"""
        self._seed(client, auth_headers)

        response = client.get(
            "/api/products?category=Drinks&stock_status=in_stock&is_active=true",
            headers=auth_headers,
        )

        assert [p["name"] for p in response.json()["products"]] == ["Apple Juice"]

    def test_unknown_stock_status_rejected(self, client, auth_headers):
        response = client.get("/api/products?stock_status=plenty", headers=auth_headers)
        assert response.status_code == 422

    def test_pagination(self, client, auth_headers):
        self._seed(client, auth_headers)

        response = client.get("/api/products?limit=2&offset=1", headers=auth_headers).json()

        assert [p["name"] for p in response["products"]] == ["Bread", "Cola"]
        assert response["total"] == 4

    def test_categories(self, client, auth_headers):
        self._seed(client, auth_headers)
        create_product(client, auth_headers, name="No Category", sku="NC-1", category=None)

        response = client.get("/api/products/categories", headers=auth_headers)

        assert response.json() == ["Bakery", "Drinks", "Misc"]


class TestUpdateAndDelete:
    """Tests for PATCH / DELETE /api/products/{id}"""

    def test_partial_update(self, client, auth_headers):
        product = create_product(client, auth_headers)

        response = client.patch(
            f"/api/products/{product['id']}", json={"price": 120.0}, headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["price"] == 120.0
        assert response.json()["name"] == "Widget"
        assert response.json()["profit_margin"] == 50.0

    def test_update_to_taken_sku_conflicts(self, client, auth_headers):
        create_product(client, auth_headers, sku="A-1")
        other = create_product(client, auth_headers, name="Other", sku="B-1")

        response = client.patch(
            f"/api/products/{other['id']}", json={"sku": "A-1"}, headers=auth_headers
        )

        assert response.status_code == 409

    def test_keeping_own_sku_is_fine(self, client, auth_headers):
        product = create_product(client, auth_headers, sku="KEEP")

        response = client.patch(
            f"/api/products/{product['id']}", json={"sku": "KEEP", "name": "Renamed"}, headers=auth_headers
        )

        assert response.status_code == 200

    def test_delete_product(self, client, auth_headers):
        product = create_product(client, auth_headers)

        response = client.delete(f"/api/products/{product['id']}", headers=auth_headers)
        assert response.status_code == 204

        response = client.get(f"/api/products/{product['id']}", headers=auth_headers)
        assert response.status_code == 404

    def test_other_organization_product_not_found(self, client, user_a_headers, user_b_headers):
        product = create_product(client, user_a_headers)

        assert client.get(f"/api/products/{product['id']}", headers=user_b_headers).status_code == 404
        assert client.delete(f"/api/products/{product['id']}", headers=user_b_headers).status_code == 404


class TestAdjustStock:
    """Tests for POST /api/products/{id}/stock"""

    def test_receive_and_remove_stock(self, client, auth_headers):
        product = create_product(client, auth_headers, stock_quantity=20)

        received = client.post(
            f"/api/products/{product['id']}/stock",
            json={"quantity_change": 15, "reason": "Delivery"},
            headers=auth_headers,
        )
        removed = client.post(
            f"/api/products/{product['id']}/stock",
            json={"quantity_change": -35},
            headers=auth_headers,
        )

        assert received.json()["stock_quantity"] == 35
        assert removed.json()["stock_quantity"] == 0
        assert removed.json()["stock_status"] == "out_of_stock"

    def test_cannot_go_negative(self, client, auth_headers):
        product = create_product(client, auth_headers, stock_quantity=3)

        response = client.post(
            f"/api/products/{product['id']}/stock",
            json={"quantity_change": -4},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert "Insufficient stock" in response.json()["detail"]

        unchanged = client.get(f"/api/products/{product['id']}", headers=auth_headers).json()
        assert unchanged["stock_quantity"] == 3
