"""작업 및 디지털 프린트 Pydantic 스키마 — Task and digital print schemas."""

from uuid import UUID
from pydantic import BaseModel, Field, model_validator

from calcapp.schemas.catalog import RangeInput, check_overlaps


# === 작업 (Task) 스키마 ===

class TaskMarginInput(RangeInput):
    value: float = Field(ge=0)


class TaskItemInput(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    margins: list[TaskMarginInput] = []

    @model_validator(mode="after")
    def _check_margins(self) -> "TaskItemInput":
        check_overlaps(self.margins)
        return self


class TaskCreate(BaseModel):
    """작업 생성 요청 스키마.

    Attributes:
        name: 작업 이름 (Unique name)
        unit / supplier: 단위/공급업체
        category_id: 카테고리 UUID (Category of the computed item)
        items: 항목과 수량 범위별 값 (Items with value per quantity range)
    """

    name: str = Field(min_length=1, max_length=255)
    unit: str | None = Field(default=None, max_length=15)
    supplier: str | None = Field(default=None, max_length=255)
    category_id: UUID
    items: list[TaskItemInput] = []


class TaskUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    unit: str | None = Field(default=None, max_length=15)
    supplier: str | None = Field(default=None, max_length=255)
    category_id: UUID | None = None
    items: list[TaskItemInput] | None = None  # 주어지면 전체 교체 (Replaces all items when given)


class TaskMarginResponse(BaseModel):
    id: str
    minimum: float
    maximum: float
    value: float


class TaskItemResponse(BaseModel):
    id: str
    name: str
    position: int
    margins: list[TaskMarginResponse] = []


class TaskResponse(BaseModel):
    id: str
    name: str
    unit: str | None = None
    supplier: str | None = None
    category_id: str
    category_code: str
    items: list[TaskItemResponse] = []


class TaskComputeRequest(BaseModel):
    """작업 계산 요청 — 선택 항목이 없으면 전체 (All items when none are selected)."""

    quantity: float = Field(gt=0)
    items: list[UUID] | None = None


class TaskComputeItem(BaseModel):
    id: str
    name: str
    value: float
    amount: float


class TaskComputeResponse(BaseModel):
    result: bool = True
    task_id: str
    unit: str | None = None
    quantity: float
    items: list[TaskComputeItem]
    overall: float


# === 디지털 프린트 (DigiPrint) 스키마 ===

class DigiPrintItemInput(RangeInput):
    type: str = Field(pattern="^(price|backlit|replicating)$")
    amount: float = Field(ge=0)


def _check_digi_print_items(items: list[DigiPrintItemInput] | None) -> None:
    for item_type in {item.type for item in items or []}:
        check_overlaps([item for item in items if item.type == item_type])


class DigiPrintCreate(BaseModel):
    format: str = Field(min_length=1, max_length=30)
    width: int = Field(default=0, ge=0)
    height: int = Field(default=0, ge=0)
    items: list[DigiPrintItemInput] = []

    @model_validator(mode="after")
    def _check_items(self) -> "DigiPrintCreate":
        _check_digi_print_items(self.items)
        return self


class DigiPrintUpdate(BaseModel):
    format: str | None = Field(default=None, min_length=1, max_length=30)
    width: int | None = Field(default=None, ge=0)
    height: int | None = Field(default=None, ge=0)
    items: list[DigiPrintItemInput] | None = None

    @model_validator(mode="after")
    def _check_items(self) -> "DigiPrintUpdate":
        _check_digi_print_items(self.items)
        return self


class DigiPrintItemResponse(BaseModel):
    id: str
    type: str
    minimum: float
    maximum: float
    amount: float


class DigiPrintResponse(BaseModel):
    id: str
    format: str
    width: int
    height: int
    items: list[DigiPrintItemResponse] = []


class DigiPrintComputeRequest(BaseModel):
    """디지털 프린트 계산 요청 — Quantity and the types to include."""

    quantity: float = Field(gt=0)
    price: bool = True
    backlit: bool = False
    replicating: bool = False


class DigiPrintComputeItem(BaseModel):
    type: str
    amount: float
    total: float


class DigiPrintComputeResponse(BaseModel):
    result: bool = True
    digi_print_id: str
    quantity: float
    items: list[DigiPrintComputeItem]
    overall: float
