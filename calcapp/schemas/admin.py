"""관리 작업 Pydantic 스키마 — Admin job queries and results.

Covers the bulk total update, the archive job, the product price update
and the application parameters.
"""

from datetime import date as date_type
from uuid import UUID
from pydantic import BaseModel, Field


# === 계산서 일괄 갱신 (Bulk update) ===

class CalculationUpdateQuery(BaseModel):
    """일괄 갱신 요청 — 상태가 없으면 모든 상태 (Every state when none given).

    Options run before the totals are recomputed:
        close_calculations: 편집 불가 계산서 포함 (Also update calculations in non-editable states)
        empty_calculations: 항목 없는 계산서 삭제 (Delete calculations without items)
        empty_items: 가격/수량 0 항목 삭제 (Remove items with a zero price or quantity)
        duplicate_items: 중복 항목 삭제 (Remove duplicate items, keeping the first)
        copy_codes: 그룹/카테고리 코드 재복사 (Copy the catalog group and category codes)
        sort_items: 정렬 (Sort groups, categories and items)
    """

    state_ids: list[UUID] = []
    date_from: date_type | None = None
    date_to: date_type | None = None
    close_calculations: bool = False
    empty_calculations: bool = False
    empty_items: bool = False
    duplicate_items: bool = False
    copy_codes: bool = False
    sort_items: bool = False
    simulate: bool = True


class CalculationUpdateLine(BaseModel):
    id: str
    date: date_type
    customer: str
    description: str
    state_code: str
    old_total: float
    new_total: float
    delta: float
    deleted: bool = False
    messages: list[str] = []


class CalculationUpdateResult(BaseModel):
    simulate: bool
    total: int  # 검사한 계산서 수 (Number of calculations checked)
    updated: int
    unmodifiable: int = 0
    empty_calculations: int = 0
    empty_items: int = 0
    duplicate_items: int = 0
    copy_codes: int = 0
    sort_items: int = 0
    lines: list[CalculationUpdateLine] = []


# === 보관 (Archive) ===

class ArchiveQuery(BaseModel):
    """보관 요청 — ``date`` 생략 시 기본 일자 (Default date when omitted)."""

    source_ids: list[UUID] = []
    target_id: UUID
    date: date_type | None = None
    simulate: bool = True


class ArchiveLine(BaseModel):
    id: str
    date: date_type
    customer: str
    description: str
    overall_total: float


class ArchiveGroup(BaseModel):
    """이전 상태별 묶음 — Calculations grouped by their previous state."""

    state_id: str
    state_code: str
    calculations: list[ArchiveLine] = []


class ArchiveResult(BaseModel):
    simulate: bool
    date: date_type
    target_id: str
    target_code: str
    total: int
    groups: list[ArchiveGroup] = []


class ArchiveDefaults(BaseModel):
    """보관 기본값 — Default source states and date for the archive form."""

    source_ids: list[str]
    date: date_type


# === 제품 가격 갱신 (Product price update) ===

class ProductUpdateQuery(BaseModel):
    """제품 가격 일괄 변경 요청.

    Attributes:
        category_id: 대상 카테고리 (Category of the products)
        all_products: 카테고리의 모든 제품 (Every product of the category)
        product_ids: 선택 제품 (Explicit products when ``all_products`` is false)
        type: "percent" (old × (1 + value)) 또는 "fixed" (old + value)
        value: 변경 값 (Percent as a fraction, or fixed amount)
        round: 0.05 단위 반올림 (Round to the nearest 0.05)
    """

    category_id: UUID
    all_products: bool = True
    product_ids: list[UUID] = []
    type: str = Field(default="percent", pattern="^(percent|fixed)$")
    value: float
    round: bool = False
    simulate: bool = True


class ProductUpdateLine(BaseModel):
    id: str
    description: str
    old_price: float
    new_price: float
    delta: float


class ProductUpdateResult(BaseModel):
    simulate: bool
    category_code: str
    total: int
    updated: int
    lines: list[ProductUpdateLine] = []


# === 애플리케이션 파라미터 (Parameters) ===

class ParametersUpdate(BaseModel):
    min_margin: float | None = Field(default=None, ge=0)
    default_state_id: UUID | None = None
    default_category_id: UUID | None = None
    customer_name: str | None = Field(default=None, max_length=255)
    customer_email: str | None = Field(default=None, max_length=255)
    customer_url: str | None = Field(default=None, max_length=255)


class ParametersResponse(BaseModel):
    min_margin: float
    default_state_id: str | None = None
    default_category_id: str | None = None
    customer_name: str | None = None
    customer_email: str | None = None
    customer_url: str | None = None
