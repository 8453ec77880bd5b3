"""계산서 관련 Pydantic 요청/응답 스키마 정의.

Calculation Pydantic schemas: states, calculations (list, detail, edit),
total rows and the AJAX totals (parameters) request/response.
"""

from datetime import date as date_type, datetime
from uuid import UUID
from pydantic import BaseModel, Field


# === 상태 (State) 스키마 ===

class StateCreate(BaseModel):
    """계산서 상태 생성 요청.

    Attributes:
        code: 상태 코드 (Unique code)
        editable: 편집 가능 여부 (Whether calculations in this state can be edited)
        color: 표시 색상 (Display color, hex)
    """

    code: str = Field(min_length=1, max_length=30)
    description: str | None = Field(default=None, max_length=255)
    editable: bool = True
    color: str = Field(default="#000000", pattern="^#[0-9a-fA-F]{6}$")


class StateUpdate(BaseModel):
    code: str | None = Field(default=None, min_length=1, max_length=30)
    description: str | None = Field(default=None, max_length=255)
    editable: bool | None = None
    color: str | None = Field(default=None, pattern="^#[0-9a-fA-F]{6}$")


class StateResponse(BaseModel):
    id: str
    code: str
    description: str | None = None
    editable: bool
    color: str
    calculations: int = 0  # 계산서 수 (Number of calculations in this state)


# === 계산서 편집 (Calculation edit) 스키마 ===

class CalculationItemInput(BaseModel):
    """계산서 항목 입력 — 카테고리는 카탈로그 카테고리 (Catalog category id)."""

    category_id: UUID
    description: str = Field(min_length=1, max_length=255)
    unit: str | None = Field(default=None, max_length=15)
    price: float = 0.0
    quantity: float = 0.0


class CalculationCreate(BaseModel):
    """계산서 생성 요청 스키마.

    Attributes:
        date: 일자, 생략 시 오늘 (Date, today when omitted)
        customer: 고객 (Customer label)
        description: 설명 (Description)
        state_id: 상태, 생략 시 기본 상태 (State, the default state when omitted)
        user_margin: 사용자 마진, 0.1 = +10% (User margin fraction)
        items: 항목 목록 (Items, grouped by their category's group)
    """

    date: date_type | None = None
    customer: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1, max_length=255)
    state_id: UUID | None = None
    user_margin: float = Field(default=0.0, ge=-1.0, le=3.0)
    items: list[CalculationItemInput] = []


class CalculationUpdate(BaseModel):
    """계산서 수정 요청 — ``items`` replaces every item when given."""

    date: date_type | None = None
    customer: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, min_length=1, max_length=255)
    state_id: UUID | None = None
    user_margin: float | None = Field(default=None, ge=-1.0, le=3.0)
    items: list[CalculationItemInput] | None = None


class CalculationCloneRequest(BaseModel):
    state_id: UUID | None = None
    description: str | None = Field(default=None, min_length=1, max_length=255)


class CalculationStateChange(BaseModel):
    state_id: UUID


class CalculationAddProduct(BaseModel):
    product_id: UUID
    quantity: float = 1.0


# === 계산서 응답 (Calculation responses) ===

class CalculationItemResponse(BaseModel):
    id: str
    description: str
    unit: str | None = None
    price: float
    quantity: float
    total: float
    position: int


class CalculationCategoryResponse(BaseModel):
    id: str
    category_id: str
    code: str
    amount: float
    position: int
    items: list[CalculationItemResponse] = []


class CalculationGroupResponse(BaseModel):
    id: str
    group_id: str
    code: str
    amount: float
    margin: float
    margin_amount: float
    total: float
    position: int
    categories: list[CalculationCategoryResponse] = []


class TotalRow(BaseModel):
    """합계 뷰 행 — Row of the total view.

    ``id`` holds the row kind: -1 empty, -2 group, -3 total of groups,
    -4 global margin, -5 net total, -6 user margin, -7 overall total.
    """

    id: int
    description: str
    amount: float = 0.0
    margin_percent: float = 0.0
    margin_amount: float = 0.0
    total: float = 0.0


class CalculationResponse(BaseModel):
    id: str
    date: date_type
    customer: str
    description: str
    state_id: str
    state_code: str
    state_color: str
    editable: bool
    items_total: float
    overall_total: float
    overall_margin: float
    below_margin: bool
    created_by: str | None = None
    updated_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class CalculationDetailResponse(CalculationResponse):
    """계산서 상세 — 그룹 트리와 합계 행 포함 (With the group tree and total rows)."""

    user_margin: float
    global_margin: float
    lines_count: int
    groups: list[CalculationGroupResponse] = []
    totals: list[TotalRow] = []


class CalculationEditResult(BaseModel):
    """편집 작업 결과 — Result of remove-duplicates, remove-empty and sort."""

    count: int  # 삭제된 항목 수 또는 변경 여부 (Removed items, or 1 when sorting changed the order)
    calculation: CalculationDetailResponse


# === 합계 파라미터 (AJAX totals) ===

class ParametersGroup(BaseModel):
    id: UUID  # 카탈로그 그룹 ID (Catalog group id)
    total: float = 0.0


class ParametersQuery(BaseModel):
    """합계 계산 요청 — Totals of an edited (unsaved) calculation.

    Attributes:
        adjust: 최소 마진 미달 시 사용자 마진 조정 (Raise the user margin to reach the minimum)
        user_margin: 사용자 마진 (User margin fraction)
        groups: 그룹별 항목 합계 (Item totals per catalog group)
    """

    adjust: bool = False
    user_margin: float = 0.0
    groups: list[ParametersGroup] = []


class ParametersResponse(BaseModel):
    result: bool = True
    overall_margin: float
    overall_total: float
    overall_below: bool
    user_margin: float
    min_margin: float
    groups: list[TotalRow]
