"""전체 마진 라우터 — Global margin ranges (list and replace all)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from calcapp.api.deps import DbSession, download, require_permission
from calcapp.models.rights import ENTITY_GLOBAL_MARGIN, EntityPermission
from calcapp.models.user import User
from calcapp.schemas.catalog import GlobalMarginsUpdate, MarginResponse
from calcapp.services.global_margin_service import global_margin_service
from calcapp.services.spreadsheet_service import XLSX_MEDIA_TYPE, spreadsheet_service

router: APIRouter = APIRouter()

# 엔티티 권한 — Rights on the entity
CanList = Annotated[User, Depends(require_permission(ENTITY_GLOBAL_MARGIN, EntityPermission.LIST))]
CanShow = Annotated[User, Depends(require_permission(ENTITY_GLOBAL_MARGIN, EntityPermission.SHOW))]
CanEdit = Annotated[User, Depends(require_permission(ENTITY_GLOBAL_MARGIN, EntityPermission.EDIT))]
CanExport = Annotated[User, Depends(require_permission(ENTITY_GLOBAL_MARGIN, EntityPermission.EXPORT))]


@router.get("", response_model=list[MarginResponse])
async def list_global_margins(db: DbSession, current_user: CanList) -> list[MarginResponse]:
    return await global_margin_service.list_margins(db)


@router.get("/margin")
async def get_global_margin(
    db: DbSession,
    current_user: CanShow,
    amount: Annotated[float, Query(description="금액 (Amount)")],
) -> dict[str, float]:
    """금액의 전체 마진 — Margin of the range containing the amount (0 when none)."""
    return {"amount": amount, "margin": await global_margin_service.get_margin(db, amount)}


@router.get("/export/xlsx")
async def export_global_margins(db: DbSession, current_user: CanExport) -> StreamingResponse:
    content: bytes = spreadsheet_service.global_margins(await global_margin_service.list_models(db))
    return download(content, XLSX_MEDIA_TYPE, "global_margins.xlsx")


@router.put("", response_model=list[MarginResponse])
async def replace_global_margins(
    data: GlobalMarginsUpdate,
    db: DbSession,
    current_user: CanEdit,
) -> list[MarginResponse]:
    """전체 마진 교체 — Replace every range (ranges must not overlap)."""
    result: list[MarginResponse] = await global_margin_service.replace_margins(db, data)
    await db.commit()
    return result
