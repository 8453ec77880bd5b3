"""그룹 라우터 — Group endpoints with their margin ranges."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from calcapp.api.deps import DbSession, download, require_permission
from calcapp.models.rights import ENTITY_GROUP, EntityPermission
from calcapp.models.user import User
from calcapp.schemas.catalog import GroupCreate, GroupResponse, GroupUpdate
from calcapp.services.group_service import group_service
from calcapp.services.spreadsheet_service import XLSX_MEDIA_TYPE, spreadsheet_service

router: APIRouter = APIRouter()

# 엔티티 권한 — Rights on the entity
CanList = Annotated[User, Depends(require_permission(ENTITY_GROUP, EntityPermission.LIST))]
CanShow = Annotated[User, Depends(require_permission(ENTITY_GROUP, EntityPermission.SHOW))]
CanAdd = Annotated[User, Depends(require_permission(ENTITY_GROUP, EntityPermission.ADD))]
CanEdit = Annotated[User, Depends(require_permission(ENTITY_GROUP, EntityPermission.EDIT))]
CanDelete = Annotated[User, Depends(require_permission(ENTITY_GROUP, EntityPermission.DELETE))]
CanExport = Annotated[User, Depends(require_permission(ENTITY_GROUP, EntityPermission.EXPORT))]


@router.get("", response_model=list[GroupResponse])
async def list_groups(db: DbSession, current_user: CanList) -> list[GroupResponse]:
    return await group_service.list_groups(db)


@router.get("/export/xlsx")
async def export_groups(db: DbSession, current_user: CanExport) -> StreamingResponse:
    content: bytes = spreadsheet_service.groups(await group_service.list_models(db))
    return download(content, XLSX_MEDIA_TYPE, "groups.xlsx")


@router.get("/{group_id}", response_model=GroupResponse)
async def get_group(group_id: UUID, db: DbSession, current_user: CanShow) -> GroupResponse:
    return await group_service.get_group(db, group_id)


@router.post("", response_model=GroupResponse, status_code=201)
async def create_group(data: GroupCreate, db: DbSession, current_user: CanAdd) -> GroupResponse:
    result: GroupResponse = await group_service.create_group(db, data)
    await db.commit()
    return result


@router.put("/{group_id}", response_model=GroupResponse)
async def update_group(group_id: UUID, data: GroupUpdate, db: DbSession, current_user: CanEdit) -> GroupResponse:
    """그룹 수정 — ``margins`` 가 주어지면 모든 범위를 교체 (Given margins replace the ranges)."""
    result: GroupResponse = await group_service.update_group(db, group_id, data)
    await db.commit()
    return result


@router.delete("/{group_id}", status_code=204)
async def delete_group(group_id: UUID, db: DbSession, current_user: CanDelete) -> None:
    await group_service.delete_group(db, group_id)
    await db.commit()
