"""제품 Excel 가져오기 테스트.

Product import tests — Workbooks are built in memory with openpyxl.
"""

from io import BytesIO

from httpx import AsyncClient
from openpyxl import Workbook

from tests.conftest import auth_header

IMPORT_URL = "/api/v1/products/import"
PRODUCTS_URL = "/api/v1/products"
XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _workbook(rows: list[list], headers: list[str] | None = None) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.append(headers or ["Description", "Unit", "Price", "Supplier", "Category"])
    for row in rows:
        ws.append(row)
    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def _rows() -> list[list]:
    return [
        ["Paper A4", "pce", 110.0, "Supplier", "paper"],
        ["Paper A3", "pce", 0.25, "Supplier", "Paper"],
        [None, None, None, None, None],
        ["Paper A3", "pce", 0.3, "Supplier", "Paper"],
        ["Glue", "l", 12.0, None, "Unknown"],
        ["Tape", "pce", -1, None, "Paper"],
    ]


async def _upload(client: AsyncClient, token: str, content: bytes, simulate: bool, filename: str = "products.xlsx"):
    return await client.post(
        IMPORT_URL,
        params={"simulate": simulate},
        files={"file": (filename, content, XLSX)},
        headers=auth_header(token),
    )


class TestProductImport:
    """제품 가져오기 테스트."""

    async def test_simulation_reports_without_writing(self, client: AsyncClient, admin_token: str, product):
        response = await _upload(client, admin_token, _workbook(_rows()), simulate=True)
        assert response.status_code == 200
        data = response.json()
        assert data["simulate"] is True
        assert data["created"] == 1
        assert data["updated"] == 1
        assert data["errors"] == 3
        assert [row["row"] for row in data["rows"]] == [2, 3, 5, 6, 7]
        assert [row["action"] for row in data["rows"]] == ["updated", "created", "error", "error", "error"]

        response = await client.get(PRODUCTS_URL, headers=auth_header(admin_token))
        assert response.json()["total"] == 1
        assert response.json()["items"][0]["price"] == 100.0

    async def test_import_writes_products(self, client: AsyncClient, admin_token: str, product):
        response = await _upload(client, admin_token, _workbook(_rows()), simulate=False)
        assert response.status_code == 200
        assert response.json()["simulate"] is False

        response = await client.get(PRODUCTS_URL, headers=auth_header(admin_token))
        prices = {item["description"]: item["price"] for item in response.json()["items"]}
        assert prices == {"Paper A4": 110.0, "Paper A3": 0.25}

    async def test_missing_columns(self, client: AsyncClient, admin_token: str, category):
        content = _workbook([["Paper A4", 1.0]], headers=["Description", "Price"])
        response = await _upload(client, admin_token, content, simulate=True)
        assert response.status_code == 400

    async def test_not_a_workbook(self, client: AsyncClient, admin_token: str):
        response = await _upload(client, admin_token, b"not an excel file", simulate=True)
        assert response.status_code == 400

    async def test_wrong_extension(self, client: AsyncClient, admin_token: str):
        response = await _upload(client, admin_token, b"a,b", simulate=True, filename="products.csv")
        assert response.status_code == 400

    async def test_user_cannot_import(self, client: AsyncClient, user_token: str):
        response = await _upload(client, user_token, _workbook([]), simulate=True)
        assert response.status_code == 403

    async def test_non_finite_prices_are_row_errors(self, client: AsyncClient, admin_token: str, category):
        rows = [
            ["Paper NaN", "pce", "nan", None, "Paper"],
            ["Paper Inf", "pce", "inf", None, "Paper"],
        ]
        response = await _upload(client, admin_token, _workbook(rows), simulate=False)
        assert response.status_code == 200
        data = response.json()
        assert data["created"] == 0
        assert data["errors"] == 2
        assert all(row["error"].startswith("Invalid price") for row in data["rows"])

        response = await client.get(PRODUCTS_URL, headers=auth_header(admin_token))
        assert response.json()["total"] == 0
