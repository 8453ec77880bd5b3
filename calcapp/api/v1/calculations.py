"""계산서 라우터 — 계산서 CRUD, 편집 작업, 합계 및 내보내기.

Calculation Router — Calculation CRUD, edit operations, the AJAX totals
endpoint and the Excel/PDF/Word exports.

Each endpoint checks the calculation rights (every operation by default);
calculations in a non-editable state can only be read, cloned, deleted and moved.
"""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from calcapp.api.deps import CurrentUser, DbSession, download, require_permission
from calcapp.config import settings
from calcapp.models.calculation import Calculation
from calcapp.models.rights import ENTITY_CALCULATION, EntityPermission
from calcapp.models.user import User
from calcapp.schemas.calculation import (
    CalculationAddProduct,
    CalculationCloneRequest,
    CalculationCreate,
    CalculationDetailResponse,
    CalculationEditResult,
    CalculationResponse,
    CalculationStateChange,
    CalculationUpdate,
    ParametersQuery,
    ParametersResponse,
)
from calcapp.services.application_service import application_service
from calcapp.services.calculation_edit_service import calculation_edit_service
from calcapp.services.calculation_service import calculation_service
from calcapp.services.pdf_service import PDF_MEDIA_TYPE, pdf_service
from calcapp.services.spreadsheet_service import XLSX_MEDIA_TYPE, spreadsheet_service
from calcapp.services.word_service import DOCX_MEDIA_TYPE, word_service
from calcapp.utils.exceptions import BadRequestError
from calcapp.utils.pagination import Page

router: APIRouter = APIRouter()

# 엔티티 권한 — Rights on the entity
CanList = Annotated[User, Depends(require_permission(ENTITY_CALCULATION, EntityPermission.LIST))]
CanShow = Annotated[User, Depends(require_permission(ENTITY_CALCULATION, EntityPermission.SHOW))]
CanAdd = Annotated[User, Depends(require_permission(ENTITY_CALCULATION, EntityPermission.ADD))]
CanEdit = Annotated[User, Depends(require_permission(ENTITY_CALCULATION, EntityPermission.EDIT))]
CanDelete = Annotated[User, Depends(require_permission(ENTITY_CALCULATION, EntityPermission.DELETE))]
CanExport = Annotated[User, Depends(require_permission(ENTITY_CALCULATION, EntityPermission.EXPORT))]


# === 목록 (List) ===


@router.get("", response_model=Page[CalculationResponse])
async def list_calculations(
    db: DbSession,
    current_user: CanList,
    state_id: Annotated[UUID | None, Query(description="상태 ID 필터")] = None,
    search: Annotated[str | None, Query(description="검색어 (Customer, description, creator)")] = None,
    date_from: Annotated[date | None, Query()] = None,
    date_to: Annotated[date | None, Query()] = None,
    below: Annotated[bool, Query(description="최소 마진 미달만 (Below the minimum margin only)")] = False,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=200)] = settings.ITEMS_PER_PAGE,
) -> Page[CalculationResponse]:
    return await calculation_edit_service.list_calculations(
        db, state_id, search, date_from, date_to, below, page, per_page
    )


@router.get("/export/{file_format}")
async def export_calculations(
    file_format: str,
    db: DbSession,
    current_user: CanExport,
    state_id: Annotated[UUID | None, Query()] = None,
    search: Annotated[str | None, Query()] = None,
) -> StreamingResponse:
    """계산서 목록 내보내기 — Export the calculation list as ``xlsx`` or ``pdf``."""
    calculations = await calculation_edit_service.list_models(db, state_id=state_id, search=search)
    min_margin: float = await application_service.get_min_margin(db)
    if file_format == "pdf":
        return download(pdf_service.calculations(calculations, min_margin), PDF_MEDIA_TYPE, "calculations.pdf")
    if file_format == "xlsx":
        return download(spreadsheet_service.calculations(calculations, min_margin), XLSX_MEDIA_TYPE, "calculations.xlsx")
    raise BadRequestError(f"Unsupported export format '{file_format}'")


@router.get("/below", response_model=list[CalculationResponse])
async def list_below(db: DbSession, current_user: CanList) -> list[CalculationResponse]:
    """최소 마진 미달 계산서 — Calculations below the minimum margin."""
    return await calculation_edit_service.list_below(db)


@router.get("/duplicates", response_model=list[CalculationResponse])
async def list_duplicates(db: DbSession, current_user: CanList) -> list[CalculationResponse]:
    return await calculation_edit_service.list_duplicates(db)


@router.get("/empty", response_model=list[CalculationResponse])
async def list_empty(db: DbSession, current_user: CanList) -> list[CalculationResponse]:
    return await calculation_edit_service.list_empty(db)


@router.get("/duplicates/pdf")
async def export_duplicates(db: DbSession, current_user: CanExport) -> StreamingResponse:
    """중복 항목 보고서 — PDF of the calculations holding duplicate items."""
    calculations = await calculation_edit_service.get_duplicate_models(db)
    return download(pdf_service.duplicate_items(calculations), PDF_MEDIA_TYPE, "duplicate_items.pdf")


@router.get("/empty/pdf")
async def export_empty(db: DbSession, current_user: CanExport) -> StreamingResponse:
    """빈 항목 보고서 — PDF of the calculations holding empty items."""
    calculations = await calculation_edit_service.get_empty_models(db)
    return download(pdf_service.empty_items(calculations), PDF_MEDIA_TYPE, "empty_items.pdf")


@router.post("/totals", response_model=ParametersResponse)
async def compute_totals(data: ParametersQuery, db: DbSession, current_user: CurrentUser) -> ParametersResponse:
    """편집 중 합계 계산.

    Compute the total rows of an edited calculation from the item totals
    per group; with ``adjust`` the user margin is raised to reach the
    minimum margin.
    """
    return await calculation_service.create_parameters(db, data)


# === 단일 계산서 (Single calculation) ===


@router.get("/{calculation_id}", response_model=CalculationDetailResponse)
async def get_calculation(calculation_id: UUID, db: DbSession, current_user: CanShow) -> CalculationDetailResponse:
    return await calculation_edit_service.get_calculation(db, calculation_id)


@router.get("/{calculation_id}/export/{file_format}")
async def export_calculation(
    calculation_id: UUID,
    file_format: str,
    db: DbSession,
    current_user: CanExport,
) -> StreamingResponse:
    """계산서 문서 — Export a calculation as ``xlsx``, ``pdf`` or ``docx``."""
    calculation: Calculation = await calculation_edit_service.get_model(db, calculation_id)
    totals = calculation_service.create_groups_from_calculation(calculation)
    filename: str = f"calculation_{calculation.id}.{file_format}"
    if file_format == "xlsx":
        return download(spreadsheet_service.calculation(calculation, totals), XLSX_MEDIA_TYPE, filename)
    if file_format == "pdf":
        min_margin: float = await application_service.get_min_margin(db)
        return download(pdf_service.calculation(calculation, totals, min_margin), PDF_MEDIA_TYPE, filename)
    if file_format == "docx":
        return download(word_service.calculation(calculation, totals), DOCX_MEDIA_TYPE, filename)
    raise BadRequestError(f"Unsupported export format '{file_format}'")


@router.post("", response_model=CalculationDetailResponse, status_code=201)
async def create_calculation(
    data: CalculationCreate,
    db: DbSession,
    current_user: CanAdd,
) -> CalculationDetailResponse:
    result: CalculationDetailResponse = await calculation_edit_service.create_calculation(db, data)
    await db.commit()
    return result


@router.put("/{calculation_id}", response_model=CalculationDetailResponse)
async def update_calculation(
    calculation_id: UUID,
    data: CalculationUpdate,
    db: DbSession,
    current_user: CanEdit,
) -> CalculationDetailResponse:
    """계산서 수정 — 편집 불가 상태이면 403 (Forbidden when the state is not editable)."""
    result: CalculationDetailResponse = await calculation_edit_service.update_calculation(db, calculation_id, data)
    await db.commit()
    return result


@router.delete("/{calculation_id}", status_code=204)
async def delete_calculation(calculation_id: UUID, db: DbSession, current_user: CanDelete) -> None:
    await calculation_edit_service.delete_calculation(db, calculation_id)
    await db.commit()


@router.post("/{calculation_id}/clone", response_model=CalculationDetailResponse, status_code=201)
async def clone_calculation(
    calculation_id: UUID,
    data: CalculationCloneRequest,
    db: DbSession,
    current_user: CanAdd,
) -> CalculationDetailResponse:
    result: CalculationDetailResponse = await calculation_edit_service.clone_calculation(db, calculation_id, data)
    await db.commit()
    return result


@router.patch("/{calculation_id}/state", response_model=CalculationDetailResponse)
async def change_state(
    calculation_id: UUID,
    data: CalculationStateChange,
    db: DbSession,
    current_user: CanEdit,
) -> CalculationDetailResponse:
    """상태 변경 — 작성자에게 알림 (The creator is notified by e-mail)."""
    result: CalculationDetailResponse = await calculation_edit_service.change_state(
        db, calculation_id, data.state_id, current_user
    )
    await db.commit()
    return result


@router.post("/{calculation_id}/products", response_model=CalculationDetailResponse)
async def add_product(
    calculation_id: UUID,
    data: CalculationAddProduct,
    db: DbSession,
    current_user: CanEdit,
) -> CalculationDetailResponse:
    result: CalculationDetailResponse = await calculation_edit_service.add_product(
        db, calculation_id, data.product_id, data.quantity
    )
    await db.commit()
    return result


@router.post("/{calculation_id}/remove-duplicates", response_model=CalculationEditResult)
async def remove_duplicates(calculation_id: UUID, db: DbSession, current_user: CanEdit) -> CalculationEditResult:
    result: CalculationEditResult = await calculation_edit_service.remove_duplicates(db, calculation_id)
    await db.commit()
    return result


@router.post("/{calculation_id}/remove-empty", response_model=CalculationEditResult)
async def remove_empty(calculation_id: UUID, db: DbSession, current_user: CanEdit) -> CalculationEditResult:
    result: CalculationEditResult = await calculation_edit_service.remove_empty(db, calculation_id)
    await db.commit()
    return result


@router.post("/{calculation_id}/sort", response_model=CalculationEditResult)
async def sort_calculation(calculation_id: UUID, db: DbSession, current_user: CanEdit) -> CalculationEditResult:
    result: CalculationEditResult = await calculation_edit_service.sort(db, calculation_id)
    await db.commit()
    return result
