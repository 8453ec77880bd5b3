"""관리 도구 API 테스트.

Admin API tests — Application parameters, the bulk total update, the
archive job and the product price update.
"""

from datetime import date

import pytest
from httpx import AsyncClient

from calcapp.models import Calculation
from calcapp.services.calculation_service import calculation_service
from calcapp.services.product_update_service import compute_price
from tests.conftest import auth_header

ADMIN_URL = "/api/v1/admin"
CALCULATIONS_URL = "/api/v1/calculations"


class TestParameters:
    """애플리케이션 파라미터 테스트."""

    async def test_defaults(self, client: AsyncClient, admin_token: str):
        response = await client.get(f"{ADMIN_URL}/parameters", headers=auth_header(admin_token))
        assert response.status_code == 200
        data = response.json()
        assert data["min_margin"] == 1.1
        assert data["default_state_id"] is None

    async def test_update(self, client: AsyncClient, admin_token: str, states):
        accepted_id = str(states["accepted"].id)
        response = await client.put(
            f"{ADMIN_URL}/parameters",
            json={"min_margin": 1.5, "default_state_id": accepted_id, "customer_name": "ACME Print"},
            headers=auth_header(admin_token),
        )
        assert response.status_code == 200
        data = response.json()
        assert data["min_margin"] == 1.5
        assert data["default_state_id"] == accepted_id
        assert data["customer_name"] == "ACME Print"

        response = await client.get(f"{ADMIN_URL}/parameters", headers=auth_header(admin_token))
        assert response.json()["min_margin"] == 1.5

    async def test_min_margin_is_rounded(self, client: AsyncClient, admin_token: str):
        response = await client.put(
            f"{ADMIN_URL}/parameters", json={"min_margin": 1.375}, headers=auth_header(admin_token)
        )
        assert response.status_code == 200
        assert response.json()["min_margin"] == 1.38

    async def test_unknown_default_state(self, client: AsyncClient, admin_token: str):
        response = await client.put(
            f"{ADMIN_URL}/parameters",
            json={"default_state_id": "00000000-0000-0000-0000-000000000000"},
            headers=auth_header(admin_token),
        )
        assert response.status_code == 404

    async def test_negative_margin(self, client: AsyncClient, admin_token: str):
        response = await client.put(
            f"{ADMIN_URL}/parameters", json={"min_margin": -1}, headers=auth_header(admin_token)
        )
        assert response.status_code == 422

    @pytest.fixture
    async def messy_ids(self, db, states, category, global_margins) -> dict[str, str]:
        """정리 대상 계산서 — A calculation to clean, an empty one and a closed empty one."""
        messy = Calculation(
            date=date(2026, 1, 15), customer="ACME", description="Messy", state=states["offer"], groups=[]
        )
        messy.add_item(category, "Zeta", "pce", 10.0, 1.0)
        messy.add_item(category, "Alpha", "pce", 10.0, 1.0)
        messy.add_item(category, "alpha", "pce", 10.0, 1.0)
        messy.add_item(category, "Free sample", "pce", 0.0, 1.0)
        await calculation_service.update_total(db, messy)
        messy.categories[0].code = "Old"
        empty = Calculation(
            date=date(2026, 1, 16), customer="ACME", description="Empty", state=states["offer"], groups=[]
        )
        closed = Calculation(
            date=date(2026, 1, 17), customer="ACME", description="Closed", state=states["accepted"], groups=[]
        )
        db.add_all([messy, empty, closed])
        await db.commit()
        return {"messy": str(messy.id), "empty": str(empty.id), "closed": str(closed.id)}

    async def test_clean_up_options(self, client: AsyncClient, admin_token: str, messy_ids: dict[str, str]):
        options = {
            "empty_calculations": True,
            "empty_items": True,
            "duplicate_items": True,
            "copy_codes": True,
            "sort_items": True,
        }
        response = await client.post(
            f"{ADMIN_URL}/calculations/update", json={**options, "simulate": False}, headers=auth_header(admin_token)
        )
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 3
        assert data["updated"] == 2
        assert data["unmodifiable"] == 1
        assert data["empty_calculations"] == 1
        assert data["empty_items"] == 1
        assert data["duplicate_items"] == 1
        assert data["copy_codes"] == 1
        assert data["sort_items"] == 1

        lines = {line["id"]: line for line in data["lines"]}
        assert lines[messy_ids["empty"]]["deleted"] is True
        messy = lines[messy_ids["messy"]]
        assert messy["old_total"] == 41.25
        assert messy["new_total"] == 27.5
        assert len(messy["messages"]) == 5

        response = await client.get(f"{CALCULATIONS_URL}/{messy_ids['empty']}", headers=auth_header(admin_token))
        assert response.status_code == 404
        response = await client.get(f"{CALCULATIONS_URL}/{messy_ids['closed']}", headers=auth_header(admin_token))
        assert response.status_code == 200

        detail = (
            await client.get(f"{CALCULATIONS_URL}/{messy_ids['messy']}", headers=auth_header(admin_token))
        ).json()
        assert detail["lines_count"] == 2
        assert detail["overall_total"] == 27.5
        category = detail["groups"][0]["categories"][0]
        assert category["code"] == "Paper"
        assert [item["description"] for item in category["items"]] == ["Alpha", "Zeta"]

    async def test_close_calculations_includes_closed_states(
        self, client: AsyncClient, admin_token: str, messy_ids: dict[str, str]
    ):
        response = await client.post(
            f"{ADMIN_URL}/calculations/update",
            json={"close_calculations": True, "empty_calculations": True, "simulate": True},
            headers=auth_header(admin_token),
        )
        data = response.json()
        assert data["unmodifiable"] == 0
        assert data["empty_calculations"] == 2
        assert {line["id"] for line in data["lines"] if line["deleted"]} == {messy_ids["empty"], messy_ids["closed"]}

        # 시뮬레이션은 삭제하지 않음 — Nothing was deleted
        response = await client.get(f"{CALCULATIONS_URL}/{messy_ids['empty']}", headers=auth_header(admin_token))
        assert response.status_code == 200

    async def test_user_forbidden(self, client: AsyncClient, user_token: str):
        response = await client.get(f"{ADMIN_URL}/parameters", headers=auth_header(user_token))
        assert response.status_code == 403


class TestCalculationUpdate:
    """계산서 합계 일괄 갱신 테스트."""

    @pytest.fixture
    async def stale_calculation_id(self, db, calculation, global_margins) -> str:
        """전체 마진 변경 — The global margin moves to 1.2, the cached total stays 275."""
        calc_id = str(calculation.id)
        global_margins[0].margin = 1.2
        await db.commit()
        return calc_id

    async def test_simulate(self, client: AsyncClient, admin_token: str, stale_calculation_id: str):
        response = await client.post(
            f"{ADMIN_URL}/calculations/update", json={"simulate": True}, headers=auth_header(admin_token)
        )
        assert response.status_code == 200
        data = response.json()
        assert data["simulate"] is True
        assert data["total"] == 1
        assert data["updated"] == 1
        line = data["lines"][0]
        assert line["id"] == stale_calculation_id
        assert line["old_total"] == 275.0
        assert line["new_total"] == 300.0
        assert line["delta"] == 25.0

        response = await client.get(f"{CALCULATIONS_URL}/{stale_calculation_id}", headers=auth_header(admin_token))
        assert response.json()["overall_total"] == 275.0

    async def test_update_keeps_timestamps(self, client: AsyncClient, admin_token: str, stale_calculation_id: str):
        before = (
            await client.get(f"{CALCULATIONS_URL}/{stale_calculation_id}", headers=auth_header(admin_token))
        ).json()

        response = await client.post(
            f"{ADMIN_URL}/calculations/update", json={"simulate": False}, headers=auth_header(admin_token)
        )
        assert response.json()["updated"] == 1

        after = (
            await client.get(f"{CALCULATIONS_URL}/{stale_calculation_id}", headers=auth_header(admin_token))
        ).json()
        assert after["overall_total"] == 300.0
        assert after["global_margin"] == 1.2
        assert after["updated_at"] == before["updated_at"]
        assert after["updated_by"] == before["updated_by"]

        # 두 번째 실행은 변경 없음 — A second run finds nothing to change
        response = await client.post(
            f"{ADMIN_URL}/calculations/update", json={"simulate": False}, headers=auth_header(admin_token)
        )
        assert response.json()["total"] == 1
        assert response.json()["updated"] == 0

    async def test_date_range(self, client: AsyncClient, admin_token: str, stale_calculation_id: str):
        response = await client.post(
            f"{ADMIN_URL}/calculations/update",
            json={"date_from": "2026-02-01", "simulate": True},
            headers=auth_header(admin_token),
        )
        assert response.json()["total"] == 0

    async def test_other_states(self, client: AsyncClient, admin_token: str, states, stale_calculation_id: str):
        response = await client.post(
            f"{ADMIN_URL}/calculations/update",
            json={"state_ids": [str(states["accepted"].id)], "simulate": True},
            headers=auth_header(admin_token),
        )
        assert response.json()["total"] == 0

    async def test_user_forbidden(self, client: AsyncClient, user_token: str):
        response = await client.post(f"{ADMIN_URL}/calculations/update", json={}, headers=auth_header(user_token))
        assert response.status_code == 403


class TestArchive:
    """계산서 보관 테스트."""

    async def test_defaults(self, client: AsyncClient, admin_token: str, states, calculation):
        response = await client.get(f"{ADMIN_URL}/calculations/archive", headers=auth_header(admin_token))
        assert response.status_code == 200
        data = response.json()
        assert data["source_ids"] == [str(states["offer"].id)]
        # 가장 오래된 계산서 + 1개월이 최신 계산서 이후 → 최신 - 1개월
        assert data["date"] == "2025-12-15"

    async def test_simulate(self, client: AsyncClient, admin_token: str, states, calculation):
        calc_id = str(calculation.id)
        archived_id = str(states["archived"].id)
        response = await client.post(
            f"{ADMIN_URL}/calculations/archive",
            json={"target_id": archived_id, "date": "2026-01-31", "simulate": True},
            headers=auth_header(admin_token),
        )
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["target_code"] == "Archived"
        assert data["groups"][0]["state_code"] == "Offer"
        assert data["groups"][0]["calculations"][0]["id"] == calc_id

        response = await client.get(f"{CALCULATIONS_URL}/{calc_id}", headers=auth_header(admin_token))
        assert response.json()["state_code"] == "Offer"

    async def test_archive(self, client: AsyncClient, admin_token: str, states, calculation):
        calc_id = str(calculation.id)
        response = await client.post(
            f"{ADMIN_URL}/calculations/archive",
            json={"target_id": str(states["archived"].id), "date": "2026-01-31", "simulate": False},
            headers=auth_header(admin_token),
        )
        assert response.json()["total"] == 1

        response = await client.get(f"{CALCULATIONS_URL}/{calc_id}", headers=auth_header(admin_token))
        assert response.json()["state_code"] == "Archived"
        assert response.json()["editable"] is False

    async def test_newer_calculations_are_kept(self, client: AsyncClient, admin_token: str, states, calculation):
        response = await client.post(
            f"{ADMIN_URL}/calculations/archive",
            json={"target_id": str(states["archived"].id), "date": "2026-01-14", "simulate": True},
            headers=auth_header(admin_token),
        )
        assert response.json()["total"] == 0
        assert response.json()["groups"] == []

    async def test_target_in_sources(self, client: AsyncClient, admin_token: str, states):
        offer_id = str(states["offer"].id)
        response = await client.post(
            f"{ADMIN_URL}/calculations/archive",
            json={"source_ids": [offer_id], "target_id": offer_id},
            headers=auth_header(admin_token),
        )
        assert response.status_code == 400

    async def test_unknown_target(self, client: AsyncClient, admin_token: str, states):
        response = await client.post(
            f"{ADMIN_URL}/calculations/archive",
            json={"target_id": "00000000-0000-0000-0000-000000000000"},
            headers=auth_header(admin_token),
        )
        assert response.status_code == 404


class TestComputePrice:
    """새 가격 계산 단위 테스트."""

    @pytest.mark.parametrize(
        "old_price, percent, value, rounded, expected",
        [
            (100.0, True, 0.1, False, 110.0),
            (10.0, True, 0.125, False, 11.25),
            (10.0, True, 0.123, True, 11.25),
            (100.0, False, -0.5, False, 99.5),
            (1.02, False, 0.0, True, 1.0),
        ],
    )
    def test_compute_price(self, old_price, percent, value, rounded, expected):
        assert compute_price(old_price, percent, value, rounded) == expected


class TestProductUpdate:
    """제품 가격 일괄 변경 테스트."""

    async def test_simulate(self, client: AsyncClient, admin_token: str, category, product):
        response = await client.post(
            f"{ADMIN_URL}/products/update",
            json={"category_id": str(category.id), "type": "percent", "value": 0.1},
            headers=auth_header(admin_token),
        )
        assert response.status_code == 200
        data = response.json()
        assert data["simulate"] is True
        assert data["category_code"] == "Paper"
        assert data["total"] == 1
        assert data["updated"] == 1
        assert data["lines"][0]["new_price"] == 110.0
        assert data["lines"][0]["delta"] == 10.0
        assert product.price == 100.0

    async def test_update_selected(self, client: AsyncClient, admin_token: str, category, product):
        response = await client.post(
            f"{ADMIN_URL}/products/update",
            json={
                "category_id": str(category.id),
                "all_products": False,
                "product_ids": [str(product.id)],
                "type": "fixed",
                "value": 2.5,
                "simulate": False,
            },
            headers=auth_header(admin_token),
        )
        assert response.json()["updated"] == 1

        response = await client.get(f"/api/v1/products/{product.id}", headers=auth_header(admin_token))
        assert response.json()["price"] == 102.5

    async def test_unchanged_prices_are_skipped(self, client: AsyncClient, admin_token: str, category, product):
        response = await client.post(
            f"{ADMIN_URL}/products/update",
            json={"category_id": str(category.id), "type": "fixed", "value": 0.0},
            headers=auth_header(admin_token),
        )
        assert response.json()["total"] == 1
        assert response.json()["updated"] == 0

    async def test_no_product_selected(self, client: AsyncClient, admin_token: str, category, product):
        response = await client.post(
            f"{ADMIN_URL}/products/update",
            json={"category_id": str(category.id), "all_products": False, "value": 0.1},
            headers=auth_header(admin_token),
        )
        assert response.status_code == 400

    async def test_invalid_type(self, client: AsyncClient, admin_token: str, category):
        response = await client.post(
            f"{ADMIN_URL}/products/update",
            json={"category_id": str(category.id), "type": "double", "value": 2},
            headers=auth_header(admin_token),
        )
        assert response.status_code == 422

    async def test_unknown_category(self, client: AsyncClient, admin_token: str):
        response = await client.post(
            f"{ADMIN_URL}/products/update",
            json={"category_id": "00000000-0000-0000-0000-000000000000", "value": 0.1},
            headers=auth_header(admin_token),
        )
        assert response.status_code == 404
