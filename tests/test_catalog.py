"""카탈로그 API 테스트.

Catalog tests — States, groups with margin ranges, categories, products,
global margins and customers.
"""

from httpx import AsyncClient

from tests.conftest import auth_header

API = "/api/v1"


class TestStates:
    """계산서 상태 테스트."""

    async def test_list_with_editable_filter(self, client: AsyncClient, user_token: str, states):
        response = await client.get(f"{API}/states", headers=auth_header(user_token))
        assert response.status_code == 200
        assert {s["code"] for s in response.json()} == {"Offer", "Accepted", "Archived"}

        response = await client.get(f"{API}/states", params={"editable": True}, headers=auth_header(user_token))
        assert [s["code"] for s in response.json()] == ["Offer"]

    async def test_counts_calculations(self, client: AsyncClient, user_token: str, calculation):
        response = await client.get(f"{API}/states", headers=auth_header(user_token))
        counts = {s["code"]: s["calculations"] for s in response.json()}
        assert counts["Offer"] == 1
        assert counts["Accepted"] == 0

    async def test_create_and_duplicate(self, client: AsyncClient, admin_token: str):
        payload = {"code": "Draft", "editable": True, "color": "#FFAA00"}
        response = await client.post(f"{API}/states", json=payload, headers=auth_header(admin_token))
        assert response.status_code == 201
        response = await client.post(f"{API}/states", json=payload, headers=auth_header(admin_token))
        assert response.status_code == 409

    async def test_invalid_color(self, client: AsyncClient, admin_token: str):
        response = await client.post(
            f"{API}/states", json={"code": "Draft", "color": "red"}, headers=auth_header(admin_token)
        )
        assert response.status_code == 422

    async def test_user_cannot_create(self, client: AsyncClient, user_token: str):
        response = await client.post(f"{API}/states", json={"code": "Draft"}, headers=auth_header(user_token))
        assert response.status_code == 403

    async def test_delete_state_in_use(self, client: AsyncClient, admin_token: str, calculation, states):
        response = await client.delete(f"{API}/states/{states['offer'].id}", headers=auth_header(admin_token))
        assert response.status_code == 400

    async def test_delete_unused_state(self, client: AsyncClient, admin_token: str, states):
        response = await client.delete(f"{API}/states/{states['archived'].id}", headers=auth_header(admin_token))
        assert response.status_code == 204


class TestGroups:
    """그룹 및 마진 범위 테스트."""

    async def test_create_group_with_margins(self, client: AsyncClient, admin_token: str):
        payload = {
            "code": "Print",
            "margins": [
                {"minimum": 500, "maximum": 1000, "margin": 1.2},
                {"minimum": 0, "maximum": 500, "margin": 1.5},
            ],
        }
        response = await client.post(f"{API}/groups", json=payload, headers=auth_header(admin_token))
        assert response.status_code == 201
        margins = response.json()["margins"]
        assert [m["minimum"] for m in margins] == [0.0, 500.0]

    async def test_overlapping_margins_rejected(self, client: AsyncClient, admin_token: str):
        payload = {
            "code": "Print",
            "margins": [
                {"minimum": 0, "maximum": 600, "margin": 1.5},
                {"minimum": 500, "maximum": 1000, "margin": 1.2},
            ],
        }
        response = await client.post(f"{API}/groups", json=payload, headers=auth_header(admin_token))
        assert response.status_code == 422

    async def test_inverted_range_rejected(self, client: AsyncClient, admin_token: str):
        payload = {"code": "Print", "margins": [{"minimum": 100, "maximum": 10, "margin": 1.5}]}
        response = await client.post(f"{API}/groups", json=payload, headers=auth_header(admin_token))
        assert response.status_code == 422

    async def test_update_replaces_margins(self, client: AsyncClient, admin_token: str, group):
        response = await client.put(
            f"{API}/groups/{group.id}",
            json={"margins": [{"minimum": 0, "maximum": 10000, "margin": 1.3}]},
            headers=auth_header(admin_token),
        )
        assert response.status_code == 200
        data = response.json()
        assert len(data["margins"]) == 1
        assert data["categories"] == 0

    async def test_delete_group_with_categories(self, client: AsyncClient, admin_token: str, group, category):
        response = await client.delete(f"{API}/groups/{group.id}", headers=auth_header(admin_token))
        assert response.status_code == 400

    async def test_duplicate_code(self, client: AsyncClient, admin_token: str, group):
        response = await client.post(f"{API}/groups", json={"code": "Material"}, headers=auth_header(admin_token))
        assert response.status_code == 409


class TestCategories:
    """카테고리 테스트."""

    async def test_create_category(self, client: AsyncClient, admin_token: str, group):
        response = await client.post(
            f"{API}/categories",
            json={"code": "Ink", "group_id": str(group.id)},
            headers=auth_header(admin_token),
        )
        assert response.status_code == 201
        assert response.json()["group_code"] == "Material"

    async def test_unknown_group(self, client: AsyncClient, admin_token: str):
        response = await client.post(
            f"{API}/categories",
            json={"code": "Ink", "group_id": "00000000-0000-0000-0000-000000000000"},
            headers=auth_header(admin_token),
        )
        assert response.status_code == 404

    async def test_delete_category_in_use(self, client: AsyncClient, admin_token: str, product, category):
        response = await client.delete(f"{API}/categories/{category.id}", headers=auth_header(admin_token))
        assert response.status_code == 400


class TestProducts:
    """제품 테스트."""

    async def test_list_products(self, client: AsyncClient, user_token: str, product):
        response = await client.get(f"{API}/products", params={"search": "a4"}, headers=auth_header(user_token))
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        item = data["items"][0]
        assert item["description"] == "Paper A4"
        assert item["category_code"] == "Paper"
        assert item["group_code"] == "Material"

    async def test_create_and_duplicate(self, client: AsyncClient, admin_token: str, category):
        payload = {"description": "Paper A3", "unit": "pce", "price": 0.2, "category_id": str(category.id)}
        response = await client.post(f"{API}/products", json=payload, headers=auth_header(admin_token))
        assert response.status_code == 201
        response = await client.post(f"{API}/products", json=payload, headers=auth_header(admin_token))
        assert response.status_code == 409

    async def test_update_price(self, client: AsyncClient, admin_token: str, product):
        response = await client.put(
            f"{API}/products/{product.id}", json={"price": 120.5}, headers=auth_header(admin_token)
        )
        assert response.status_code == 200
        assert response.json()["price"] == 120.5

    async def test_export_products(self, client: AsyncClient, user_token: str, product):
        response = await client.get(f"{API}/products/export/xlsx", headers=auth_header(user_token))
        assert response.status_code == 200
        assert response.content[:2] == b"PK"


class TestGlobalMargins:
    """전체 마진 테스트."""

    async def test_replace_and_lookup(self, client: AsyncClient, admin_token: str, global_margins):
        response = await client.put(
            f"{API}/global-margins",
            json={
                "margins": [
                    {"minimum": 0, "maximum": 1000, "margin": 1.2},
                    {"minimum": 1000, "maximum": 5000, "margin": 1.1},
                ]
            },
            headers=auth_header(admin_token),
        )
        assert response.status_code == 200
        assert len(response.json()) == 2

        response = await client.get(
            f"{API}/global-margins/margin", params={"amount": 1500}, headers=auth_header(admin_token)
        )
        assert response.json()["margin"] == 1.1

        response = await client.get(
            f"{API}/global-margins/margin", params={"amount": 9999}, headers=auth_header(admin_token)
        )
        assert response.json()["margin"] == 0.0

    async def test_overlap_rejected(self, client: AsyncClient, admin_token: str):
        response = await client.put(
            f"{API}/global-margins",
            json={
                "margins": [
                    {"minimum": 0, "maximum": 1000, "margin": 1.2},
                    {"minimum": 999, "maximum": 5000, "margin": 1.1},
                ]
            },
            headers=auth_header(admin_token),
        )
        assert response.status_code == 422


class TestCustomers:
    """고객 테스트."""

    async def test_create_and_search(self, client: AsyncClient, user_token: str):
        response = await client.post(
            f"{API}/customers",
            json={"company": "ACME", "city": "Lausanne", "email": "info@example.com"},
            headers=auth_header(user_token),
        )
        assert response.status_code == 201
        assert response.json()["display_name"] == "ACME"

        response = await client.get(f"{API}/customers", params={"search": "acme"}, headers=auth_header(user_token))
        assert response.json()["total"] == 1

    async def test_name_required(self, client: AsyncClient, user_token: str):
        response = await client.post(f"{API}/customers", json={"city": "Bern"}, headers=auth_header(user_token))
        assert response.status_code == 422
