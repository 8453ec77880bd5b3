"""보고서 API 테스트.

Report API tests — Charts, pivot table, global search and the translation
proxy (DeepL answered by an httpx mock transport).
"""

from datetime import date
from urllib.parse import parse_qs

import httpx
import pytest
from httpx import AsyncClient

from calcapp.config import settings
from calcapp.services.chart_service import chart_service
from calcapp.services.pdf_service import pdf_service
from calcapp.services.translator_service import translator_service
from tests.conftest import auth_header

API_URL = "/api/v1"


class TestCharts:
    """차트 테스트."""

    async def test_by_month(self, db, calculation):
        chart = await chart_service.by_month(db, 3, today=date(2026, 2, 10))
        assert [(e.year, e.month) for e in chart.entries] == [(2025, 12), (2026, 1), (2026, 2)]
        january = chart.entries[1]
        assert january.count == 1
        assert january.items == 200.0
        assert january.total == 275.0
        assert january.margin_amount == 75.0
        assert january.margin_percent == pytest.approx(1.375)
        assert chart.entries[0].count == 0
        assert chart.entries[0].margin_percent == 0.0
        assert chart.count == 1
        assert chart.total == 275.0

    async def test_by_month_endpoint(self, client: AsyncClient, user_token: str, calculation):
        response = await client.get(f"{API_URL}/charts/month", params={"months": 4}, headers=auth_header(user_token))
        assert response.status_code == 200
        data = response.json()
        assert data["months"] == 4
        assert len(data["entries"]) == 4

    async def test_months_out_of_range(self, client: AsyncClient, user_token: str):
        response = await client.get(f"{API_URL}/charts/month", params={"months": 0}, headers=auth_header(user_token))
        assert response.status_code == 422

    async def test_by_state(self, client: AsyncClient, user_token: str, calculation):
        response = await client.get(f"{API_URL}/charts/state", headers=auth_header(user_token))
        assert response.status_code == 200
        data = response.json()
        assert [e["code"] for e in data["entries"]] == ["Offer"]
        entry = data["entries"][0]
        assert entry["count"] == 1
        assert entry["total"] == 275.0
        assert entry["percent"] == 1.0
        assert data["margin_percent"] == pytest.approx(1.375)

    async def test_chart_pdfs(self, client: AsyncClient, user_token: str, calculation):
        for url, params in ((f"{API_URL}/charts/month/pdf", {"months": 18}), (f"{API_URL}/charts/state/pdf", {})):
            response = await client.get(url, params=params, headers=auth_header(user_token))
            assert response.status_code == 200
            assert response.headers["content-type"] == "application/pdf"
            assert response.content.startswith(b"%PDF")

    async def test_chart_pdfs_without_data(self, db):
        month = await chart_service.by_month(db, 3, today=date(2026, 2, 10))
        assert pdf_service.months(month, 1.1).startswith(b"%PDF")
        state = await chart_service.by_state(db)
        assert pdf_service.states(state, 1.1).startswith(b"%PDF")

    async def test_month_pdf_with_data(self, db, calculation):
        month = await chart_service.by_month(db, 3, today=date(2026, 2, 10))
        assert pdf_service.months(month, 1.5).startswith(b"%PDF")


class TestPivotEndpoint:
    """피벗 테이블 엔드포인트 테스트."""

    async def test_pivot(self, client: AsyncClient, user_token: str, calculation):
        response = await client.get(f"{API_URL}/pivot", headers=auth_header(user_token))
        assert response.status_code == 200
        assert response.json()["value"] == 200.0

    async def test_empty_pivot(self, client: AsyncClient, user_token: str):
        response = await client.get(f"{API_URL}/pivot", headers=auth_header(user_token))
        assert response.status_code == 200
        assert response.json() is None

    async def test_unknown_period(self, client: AsyncClient, user_token: str, calculation):
        response = await client.get(f"{API_URL}/pivot", params={"period": "decade"}, headers=auth_header(user_token))
        assert response.status_code == 400


class TestSearch:
    """전체 검색 테스트."""

    async def test_search_calculation(self, client: AsyncClient, user_token: str, calculation):
        response = await client.get(
            f"{API_URL}/search", params={"q": "fly", "entity": "calculation"}, headers=auth_header(user_token)
        )
        assert response.status_code == 200
        assert response.json() == [
            {"type": "calculation", "id": str(calculation.id), "field": "description", "content": "Flyers"}
        ]

    async def test_search_every_entity(self, client: AsyncClient, user_token: str, calculation, product):
        response = await client.get(f"{API_URL}/search", params={"q": "paper"}, headers=auth_header(user_token))
        hits = {(hit["type"], hit["field"]) for hit in response.json()}
        assert ("product", "description") in hits
        assert ("category", "code") in hits
        assert ("category", "description") in hits
        assert all(hit["type"] != "calculation" for hit in response.json())

    async def test_search_limit(self, client: AsyncClient, user_token: str, calculation, product):
        response = await client.get(
            f"{API_URL}/search", params={"q": "pa", "entity": "category", "limit": 1}, headers=auth_header(user_token)
        )
        assert len({hit["id"] for hit in response.json()}) == 1

    async def test_query_too_short(self, client: AsyncClient, user_token: str):
        response = await client.get(f"{API_URL}/search", params={"q": "a"}, headers=auth_header(user_token))
        assert response.status_code == 422


def _deepl_handler(request: httpx.Request) -> httpx.Response:
    """DeepL API 대체 — Answer the translate and languages calls."""
    if request.headers.get("Authorization") != "DeepL-Auth-Key test-key":
        return httpx.Response(403, json={"message": "Wrong endpoint"})
    if request.url.path.endswith("/translate"):
        form = parse_qs(request.content.decode())
        if form["target_lang"] == ["XX"]:
            return httpx.Response(400, json={"message": "Value for 'target_lang' not supported."})
        return httpx.Response(
            200,
            json={"translations": [{"detected_source_language": "EN", "text": f"[{form['target_lang'][0]}] {form['text'][0]}"}]},
        )
    if request.url.path.endswith("/languages"):
        return httpx.Response(200, json=[{"language": "FR", "name": "French"}, {"language": "DE", "name": "German"}])
    return httpx.Response(404)


@pytest.fixture
def deepl(monkeypatch):
    """번역 서비스 모의 설정 — Configure the translator with a mock transport."""
    monkeypatch.setattr(settings, "DEEPL_API_KEY", "test-key")
    monkeypatch.setattr(translator_service, "transport", httpx.MockTransport(_deepl_handler))
    monkeypatch.setattr(translator_service, "_languages", None)


class TestTranslate:
    """번역 프록시 테스트."""

    async def test_translate(self, client: AsyncClient, user_token: str, deepl):
        response = await client.post(
            f"{API_URL}/translate", json={"text": "Hello", "to": "fr"}, headers=auth_header(user_token)
        )
        assert response.status_code == 200
        assert response.json() == {
            "result": True,
            "source": "en",
            "target": "fr",
            "text": "Hello",
            "translation": "[FR] Hello",
        }

    async def test_upstream_error(self, client: AsyncClient, user_token: str, deepl):
        response = await client.post(
            f"{API_URL}/translate", json={"text": "Hello", "to": "xx"}, headers=auth_header(user_token)
        )
        assert response.status_code == 502
        assert "not supported" in response.json()["detail"]

    async def test_not_configured(self, client: AsyncClient, user_token: str, monkeypatch):
        monkeypatch.setattr(settings, "DEEPL_API_KEY", "")
        response = await client.post(
            f"{API_URL}/translate", json={"text": "Hello", "to": "fr"}, headers=auth_header(user_token)
        )
        assert response.status_code == 400

    async def test_languages(self, client: AsyncClient, user_token: str, deepl):
        response = await client.get(f"{API_URL}/translate/languages", headers=auth_header(user_token))
        assert response.status_code == 200
        assert response.json() == [{"code": "fr", "name": "French"}, {"code": "de", "name": "German"}]

    async def test_unexpected_response_shapes(self, client: AsyncClient, user_token: str, deepl, monkeypatch):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/translate"):
                return httpx.Response(200, json=["not", "an", "object"])
            if request.url.path.endswith("/languages"):
                return httpx.Response(200, json={"language": "FR"})
            return httpx.Response(500, json="Server exploded")

        monkeypatch.setattr(translator_service, "transport", httpx.MockTransport(handler))
        response = await client.post(
            f"{API_URL}/translate", json={"text": "Hello", "to": "fr"}, headers=auth_header(user_token)
        )
        assert response.status_code == 502

        response = await client.get(f"{API_URL}/translate/languages", headers=auth_header(user_token))
        assert response.status_code == 502

    async def test_error_body_that_is_not_an_object(self, client: AsyncClient, user_token: str, deepl, monkeypatch):
        monkeypatch.setattr(
            translator_service, "transport", httpx.MockTransport(lambda request: httpx.Response(500, json="Server exploded"))
        )
        response = await client.post(
            f"{API_URL}/translate", json={"text": "Hello", "to": "fr"}, headers=auth_header(user_token)
        )
        assert response.status_code == 502
        assert response.json()["detail"] == "Translation service error (500)"
