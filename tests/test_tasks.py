"""작업 및 디지털 프린트 API 테스트.

Task and digital print API tests — CRUD, rights, range validation and the
quantity computations.
"""

from httpx import AsyncClient

from tests.conftest import auth_header

TASKS_URL = "/api/v1/tasks"
DIGI_PRINTS_URL = "/api/v1/digiprints"


def _task_payload(category_id: str, name: str = "Offset print") -> dict:
    return {
        "name": name,
        "unit": "pce",
        "category_id": category_id,
        "items": [
            {
                "name": "Printing",
                "margins": [
                    {"minimum": 0, "maximum": 100, "value": 2.0},
                    {"minimum": 100, "maximum": 1000, "value": 1.5},
                ],
            },
            {"name": "Cutting", "margins": [{"minimum": 0, "maximum": 1000, "value": 0.5}]},
        ],
    }


def _digi_print_payload() -> dict:
    return {
        "format": "A3",
        "width": 297,
        "height": 420,
        "items": [
            {"type": "price", "minimum": 0, "maximum": 10, "amount": 5.0},
            {"type": "price", "minimum": 10, "maximum": 100, "amount": 4.0},
            {"type": "backlit", "minimum": 0, "maximum": 100, "amount": 1.0},
        ],
    }


class TestTasks:
    """작업 CRUD 및 계산 테스트."""

    async def test_create_task(self, client: AsyncClient, admin_token: str, category):
        """관리자는 작업을 생성할 수 있다."""
        response = await client.post(
            TASKS_URL, json=_task_payload(str(category.id)), headers=auth_header(admin_token)
        )
        assert response.status_code == 201
        data = response.json()
        assert data["category_code"] == "Paper"
        assert [item["name"] for item in data["items"]] == ["Printing", "Cutting"]
        assert len(data["items"][0]["margins"]) == 2

    async def test_user_cannot_create_task(self, client: AsyncClient, user_token: str, category):
        response = await client.post(
            TASKS_URL, json=_task_payload(str(category.id)), headers=auth_header(user_token)
        )
        assert response.status_code == 403

    async def test_duplicate_task_name(self, client: AsyncClient, admin_token: str, category):
        payload = _task_payload(str(category.id))
        await client.post(TASKS_URL, json=payload, headers=auth_header(admin_token))
        response = await client.post(TASKS_URL, json=payload, headers=auth_header(admin_token))
        assert response.status_code == 409

    async def test_duplicate_item_name(self, client: AsyncClient, admin_token: str, category):
        payload = _task_payload(str(category.id))
        payload["items"][1]["name"] = "printing"
        response = await client.post(TASKS_URL, json=payload, headers=auth_header(admin_token))
        assert response.status_code == 400

    async def test_overlapping_ranges_rejected(self, client: AsyncClient, admin_token: str, category):
        payload = _task_payload(str(category.id))
        payload["items"][0]["margins"][1]["minimum"] = 50
        response = await client.post(TASKS_URL, json=payload, headers=auth_header(admin_token))
        assert response.status_code == 422

    async def test_compute_all_items(self, client: AsyncClient, admin_token: str, category):
        """수량 150 → 인쇄 1.5 × 150 + 재단 0.5 × 150."""
        created = (
            await client.post(TASKS_URL, json=_task_payload(str(category.id)), headers=auth_header(admin_token))
        ).json()

        response = await client.post(
            f"{TASKS_URL}/{created['id']}/compute",
            json={"quantity": 150},
            headers=auth_header(admin_token),
        )
        assert response.status_code == 200
        data = response.json()
        assert [item["amount"] for item in data["items"]] == [225.0, 75.0]
        assert data["overall"] == 300.0
        assert data["unit"] == "pce"

    async def test_compute_selected_items(self, client: AsyncClient, admin_token: str, category):
        created = (
            await client.post(TASKS_URL, json=_task_payload(str(category.id)), headers=auth_header(admin_token))
        ).json()
        cutting_id = created["items"][1]["id"]

        response = await client.post(
            f"{TASKS_URL}/{created['id']}/compute",
            json={"quantity": 50, "items": [cutting_id]},
            headers=auth_header(admin_token),
        )
        data = response.json()
        assert len(data["items"]) == 1
        assert data["overall"] == 25.0

    async def test_compute_outside_ranges_is_zero(self, client: AsyncClient, admin_token: str, category):
        created = (
            await client.post(TASKS_URL, json=_task_payload(str(category.id)), headers=auth_header(admin_token))
        ).json()
        response = await client.post(
            f"{TASKS_URL}/{created['id']}/compute",
            json={"quantity": 5000},
            headers=auth_header(admin_token),
        )
        assert response.json()["overall"] == 0.0

    async def test_update_replaces_items(self, client: AsyncClient, admin_token: str, category):
        created = (
            await client.post(TASKS_URL, json=_task_payload(str(category.id)), headers=auth_header(admin_token))
        ).json()
        response = await client.put(
            f"{TASKS_URL}/{created['id']}",
            json={"unit": "m2", "items": [{"name": "Printing", "margins": []}]},
            headers=auth_header(admin_token),
        )
        assert response.status_code == 200
        data = response.json()
        assert data["unit"] == "m2"
        assert [item["name"] for item in data["items"]] == ["Printing"]

    async def test_delete_task(self, client: AsyncClient, admin_token: str, category):
        created = (
            await client.post(TASKS_URL, json=_task_payload(str(category.id)), headers=auth_header(admin_token))
        ).json()
        response = await client.delete(f"{TASKS_URL}/{created['id']}", headers=auth_header(admin_token))
        assert response.status_code == 204
        response = await client.get(f"{TASKS_URL}/{created['id']}", headers=auth_header(admin_token))
        assert response.status_code == 404


class TestDigiPrints:
    """디지털 프린트 테스트."""

    async def test_create_and_compute(self, client: AsyncClient, admin_token: str):
        created = await client.post(DIGI_PRINTS_URL, json=_digi_print_payload(), headers=auth_header(admin_token))
        assert created.status_code == 201
        digi_print_id = created.json()["id"]

        response = await client.post(
            f"{DIGI_PRINTS_URL}/{digi_print_id}/compute",
            json={"quantity": 20, "backlit": True},
            headers=auth_header(admin_token),
        )
        assert response.status_code == 200
        data = response.json()
        assert [(item["type"], item["total"]) for item in data["items"]] == [("price", 80.0), ("backlit", 20.0)]
        assert data["overall"] == 100.0

    async def test_compute_first_range(self, client: AsyncClient, admin_token: str):
        digi_print_id = (
            await client.post(DIGI_PRINTS_URL, json=_digi_print_payload(), headers=auth_header(admin_token))
        ).json()["id"]
        response = await client.post(
            f"{DIGI_PRINTS_URL}/{digi_print_id}/compute",
            json={"quantity": 2},
            headers=auth_header(admin_token),
        )
        assert response.json()["overall"] == 10.0

    async def test_duplicate_format(self, client: AsyncClient, admin_token: str):
        await client.post(DIGI_PRINTS_URL, json=_digi_print_payload(), headers=auth_header(admin_token))
        response = await client.post(DIGI_PRINTS_URL, json=_digi_print_payload(), headers=auth_header(admin_token))
        assert response.status_code == 409

    async def test_unknown_type_rejected(self, client: AsyncClient, admin_token: str):
        payload = _digi_print_payload()
        payload["items"][0]["type"] = "laminating"
        response = await client.post(DIGI_PRINTS_URL, json=payload, headers=auth_header(admin_token))
        assert response.status_code == 422

    async def test_ranges_of_other_types_may_overlap(self, client: AsyncClient, admin_token: str):
        payload = _digi_print_payload()
        payload["items"].append({"type": "replicating", "minimum": 0, "maximum": 50, "amount": 0.5})
        response = await client.post(DIGI_PRINTS_URL, json=payload, headers=auth_header(admin_token))
        assert response.status_code == 201
