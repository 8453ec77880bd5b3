"""카탈로그 관련 Pydantic 요청/응답 스키마 정의.

Catalog Pydantic schemas: groups (with margin ranges), categories,
products and global margins.
"""

from datetime import datetime
from uuid import UUID
from pydantic import BaseModel, Field, model_validator


# === 범위 (Range) 공통 ===

class RangeInput(BaseModel):
    """범위 입력 — minimum <= value < maximum."""

    minimum: float = Field(ge=0)
    maximum: float = Field(ge=0)

    @model_validator(mode="after")
    def _check_bounds(self) -> "RangeInput":
        if self.maximum <= self.minimum:
            raise ValueError("The maximum must be greater than the minimum")
        return self


class MarginInput(RangeInput):
    margin: float = Field(ge=0)  # 마진 배수 (Margin multiplier, 1.1 = +10%)


def check_overlaps(ranges: list[RangeInput] | None) -> None:
    """범위 겹침 검사 — Raise when two ranges overlap."""
    ordered = sorted(ranges or [], key=lambda r: r.minimum)
    for previous, current in zip(ordered, ordered[1:]):
        if current.minimum < previous.maximum:
            raise ValueError(
                f"The range {current.minimum} - {current.maximum} overlaps {previous.minimum} - {previous.maximum}"
            )


class MarginResponse(BaseModel):
    id: str
    minimum: float
    maximum: float
    margin: float


# === 그룹 (Group) 스키마 ===

class GroupCreate(BaseModel):
    """그룹 생성 요청 스키마.

    Attributes:
        code: 그룹 코드 (Unique code)
        description: 설명 (Optional description)
        margins: 금액 범위별 마진 (Margin ranges, must not overlap)
    """

    code: str = Field(min_length=1, max_length=30)
    description: str | None = Field(default=None, max_length=255)
    margins: list[MarginInput] = []

    @model_validator(mode="after")
    def _check_margins(self) -> "GroupCreate":
        check_overlaps(self.margins)
        return self


class GroupUpdate(BaseModel):
    """그룹 수정 요청 스키마 — ``margins`` replaces all ranges when given."""

    code: str | None = Field(default=None, min_length=1, max_length=30)
    description: str | None = Field(default=None, max_length=255)
    margins: list[MarginInput] | None = None

    @model_validator(mode="after")
    def _check_margins(self) -> "GroupUpdate":
        check_overlaps(self.margins)
        return self


class GroupResponse(BaseModel):
    id: str
    code: str
    description: str | None = None
    margins: list[MarginResponse] = []
    categories: int = 0  # 카테고리 수 (Number of categories)


# === 카테고리 (Category) 스키마 ===

class CategoryCreate(BaseModel):
    code: str = Field(min_length=1, max_length=30)
    description: str | None = Field(default=None, max_length=255)
    group_id: UUID


class CategoryUpdate(BaseModel):
    code: str | None = Field(default=None, min_length=1, max_length=30)
    description: str | None = Field(default=None, max_length=255)
    group_id: UUID | None = None


class CategoryResponse(BaseModel):
    id: str
    code: str
    description: str | None = None
    group_id: str
    group_code: str


# === 제품 (Product) 스키마 ===

class ProductCreate(BaseModel):
    """제품 생성 요청 스키마.

    Attributes:
        description: 제품 설명 (Unique description)
        unit: 단위 (Unit label)
        price: 단가 (Unit price)
        supplier: 공급업체 (Supplier)
        category_id: 카테고리 UUID (Category identifier)
    """

    description: str = Field(min_length=1, max_length=255)
    unit: str | None = Field(default=None, max_length=15)
    price: float = 0.0
    supplier: str | None = Field(default=None, max_length=255)
    category_id: UUID


class ProductUpdate(BaseModel):
    description: str | None = Field(default=None, min_length=1, max_length=255)
    unit: str | None = Field(default=None, max_length=15)
    price: float | None = None
    supplier: str | None = Field(default=None, max_length=255)
    category_id: UUID | None = None


class ProductResponse(BaseModel):
    id: str
    description: str
    unit: str | None = None
    price: float
    supplier: str | None = None
    category_id: str
    category_code: str
    group_code: str
    updated_at: datetime | None = None


class ProductImportRow(BaseModel):
    """가져오기 행 결과 — Outcome of one imported spreadsheet row."""

    row: int
    description: str | None = None
    action: str  # "created" / "updated" / "error"
    error: str | None = None


class ProductImportResult(BaseModel):
    simulate: bool
    created: int = 0
    updated: int = 0
    errors: int = 0
    rows: list[ProductImportRow] = []


# === 전체 마진 (Global margin) 스키마 ===

class GlobalMarginsUpdate(BaseModel):
    """전체 마진 일괄 교체 — Replace every global margin range."""

    margins: list[MarginInput]

    @model_validator(mode="after")
    def _check_margins(self) -> "GlobalMarginsUpdate":
        check_overlaps(self.margins)
        return self
