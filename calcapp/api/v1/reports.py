"""보고서 라우터 — 차트, 피벗 테이블, 검색, 번역.

Report Router — Charts (JSON and PDF), the pivot table, the global search
and the translation proxy.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Query
from fastapi.responses import StreamingResponse

from calcapp.api.deps import CurrentUser, DbSession, download
from calcapp.schemas.report import (
    LanguageResponse,
    MonthChartResponse,
    SearchHit,
    StateChartResponse,
    TranslateRequest,
    TranslateResponse,
)
from calcapp.services.application_service import application_service
from calcapp.services.chart_service import chart_service
from calcapp.services.pdf_service import PDF_MEDIA_TYPE, pdf_service
from calcapp.services.pivot_service import pivot_service
from calcapp.services.search_service import search_service
from calcapp.services.translator_service import translator_service

router: APIRouter = APIRouter()


@router.get("/charts/month", response_model=MonthChartResponse)
async def chart_by_month(
    db: DbSession,
    current_user: CurrentUser,
    months: Annotated[int, Query(ge=1, le=24, description="개월 수 (Number of months)")] = 6,
) -> MonthChartResponse:
    return await chart_service.by_month(db, months)


@router.get("/charts/month/pdf")
async def chart_by_month_pdf(
    db: DbSession,
    current_user: CurrentUser,
    months: Annotated[int, Query(ge=1, le=24, description="개월 수 (Number of months)")] = 6,
) -> StreamingResponse:
    """월별 차트 PDF — Bar chart and table of the last months."""
    chart: MonthChartResponse = await chart_service.by_month(db, months)
    min_margin: float = await application_service.get_min_margin(db)
    return download(pdf_service.months(chart, min_margin), PDF_MEDIA_TYPE, "calculations_by_month.pdf")


@router.get("/charts/state", response_model=StateChartResponse)
async def chart_by_state(db: DbSession, current_user: CurrentUser) -> StateChartResponse:
    return await chart_service.by_state(db)


@router.get("/charts/state/pdf")
async def chart_by_state_pdf(db: DbSession, current_user: CurrentUser) -> StreamingResponse:
    """상태별 차트 PDF — Pie chart and table per state."""
    chart: StateChartResponse = await chart_service.by_state(db)
    min_margin: float = await application_service.get_min_margin(db)
    return download(pdf_service.states(chart, min_margin), PDF_MEDIA_TYPE, "calculations_by_state.pdf")


@router.get("/pivot")
async def pivot_table(
    db: DbSession,
    current_user: CurrentUser,
    aggregator: Annotated[str, Query(description="sum, count, average")] = "sum",
    data: Annotated[str, Query(description="total, overall, quantity")] = "total",
    period: Annotated[str, Query(description="semester, quarter, month, week")] = "month",
) -> dict[str, Any] | None:
    """피벗 테이블 — 데이터가 없으면 null (``null`` when there is no item)."""
    return await pivot_service.get_pivot(db, aggregator, data, period)


@router.get("/search", response_model=list[SearchHit])
async def search(
    db: DbSession,
    current_user: CurrentUser,
    q: Annotated[str, Query(min_length=2, description="검색어")],
    entity: Annotated[str | None, Query(description="엔티티 유형 (Entity type filter)")] = None,
    limit: Annotated[int, Query(ge=1, le=100)] = 15,
) -> list[SearchHit]:
    return await search_service.search(db, q, entity, limit)


@router.post("/translate", response_model=TranslateResponse)
async def translate(data: TranslateRequest, current_user: CurrentUser) -> TranslateResponse:
    """텍스트 번역 — API 키가 없으면 400, 외부 오류는 502."""
    return await translator_service.translate(data)


@router.get("/translate/languages", response_model=list[LanguageResponse])
async def languages(current_user: CurrentUser) -> list[LanguageResponse]:
    return await translator_service.get_languages()
