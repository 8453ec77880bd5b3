"""계산서 상태 라우터 — Calculation state endpoints (writes need the state rights)."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from calcapp.api.deps import DbSession, download, require_permission
from calcapp.models.rights import ENTITY_CALCULATION_STATE, EntityPermission
from calcapp.models.user import User
from calcapp.schemas.calculation import StateCreate, StateResponse, StateUpdate
from calcapp.services.spreadsheet_service import XLSX_MEDIA_TYPE, spreadsheet_service
from calcapp.services.state_service import state_service

router: APIRouter = APIRouter()

# 엔티티 권한 — Rights on the entity
CanList = Annotated[User, Depends(require_permission(ENTITY_CALCULATION_STATE, EntityPermission.LIST))]
CanShow = Annotated[User, Depends(require_permission(ENTITY_CALCULATION_STATE, EntityPermission.SHOW))]
CanAdd = Annotated[User, Depends(require_permission(ENTITY_CALCULATION_STATE, EntityPermission.ADD))]
CanEdit = Annotated[User, Depends(require_permission(ENTITY_CALCULATION_STATE, EntityPermission.EDIT))]
CanDelete = Annotated[User, Depends(require_permission(ENTITY_CALCULATION_STATE, EntityPermission.DELETE))]
CanExport = Annotated[User, Depends(require_permission(ENTITY_CALCULATION_STATE, EntityPermission.EXPORT))]


@router.get("", response_model=list[StateResponse])
async def list_states(
    db: DbSession,
    current_user: CanList,
    editable: Annotated[bool | None, Query(description="편집 가능 여부 필터")] = None,
) -> list[StateResponse]:
    return await state_service.list_states(db, editable)


@router.get("/export/xlsx")
async def export_states(db: DbSession, current_user: CanExport) -> StreamingResponse:
    content: bytes = spreadsheet_service.states(await state_service.list_models(db))
    return download(content, XLSX_MEDIA_TYPE, "states.xlsx")


@router.get("/{state_id}", response_model=StateResponse)
async def get_state(state_id: UUID, db: DbSession, current_user: CanShow) -> StateResponse:
    return await state_service.get_state(db, state_id)


@router.post("", response_model=StateResponse, status_code=201)
async def create_state(data: StateCreate, db: DbSession, current_user: CanAdd) -> StateResponse:
    result: StateResponse = await state_service.create_state(db, data)
    await db.commit()
    return result


@router.put("/{state_id}", response_model=StateResponse)
async def update_state(state_id: UUID, data: StateUpdate, db: DbSession, current_user: CanEdit) -> StateResponse:
    result: StateResponse = await state_service.update_state(db, state_id, data)
    await db.commit()
    return result


@router.delete("/{state_id}", status_code=204)
async def delete_state(state_id: UUID, db: DbSession, current_user: CanDelete) -> None:
    """상태 삭제 — 계산서가 사용 중이면 400 (Rejected while calculations use it)."""
    await state_service.delete_state(db, state_id)
    await db.commit()
