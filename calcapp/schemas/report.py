"""보고서 Pydantic 스키마 — Charts, search and translation schemas."""

from pydantic import BaseModel, Field


# === 차트 (Charts) ===

class MonthChartEntry(BaseModel):
    year: int
    month: int
    count: int
    items: float
    total: float
    margin_amount: float
    margin_percent: float


class MonthChartResponse(BaseModel):
    months: int
    entries: list[MonthChartEntry] = []
    count: int
    items: float
    total: float
    margin_amount: float
    margin_percent: float


class StateChartEntry(BaseModel):
    id: str
    code: str
    editable: bool
    color: str
    count: int
    items: float
    total: float
    margin_percent: float
    percent: float  # 전체 합계 대비 비율 (Share of the grand total)


class StateChartResponse(BaseModel):
    entries: list[StateChartEntry] = []
    count: int
    items: float
    total: float
    margin_percent: float


# === 검색 (Search) ===

class SearchHit(BaseModel):
    type: str  # 엔티티 유형 (Entity type, e.g. "calculation")
    id: str
    field: str
    content: str


# === 번역 (Translation) ===

class TranslateRequest(BaseModel):
    text: str = Field(min_length=1)
    to: str = Field(min_length=2, max_length=10)
    source: str | None = Field(default=None, max_length=10)  # 생략 시 자동 감지 (Detected when omitted)


class TranslateResponse(BaseModel):
    result: bool = True
    source: str
    target: str
    text: str
    translation: str


class LanguageResponse(BaseModel):
    code: str
    name: str
