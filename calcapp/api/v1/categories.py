"""카테고리 라우터 — Category endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from calcapp.api.deps import DbSession, download, require_permission
from calcapp.models.rights import ENTITY_CATEGORY, EntityPermission
from calcapp.models.user import User
from calcapp.schemas.catalog import CategoryCreate, CategoryResponse, CategoryUpdate
from calcapp.services.category_service import category_service
from calcapp.services.spreadsheet_service import XLSX_MEDIA_TYPE, spreadsheet_service

router: APIRouter = APIRouter()

# 엔티티 권한 — Rights on the entity
CanList = Annotated[User, Depends(require_permission(ENTITY_CATEGORY, EntityPermission.LIST))]
CanShow = Annotated[User, Depends(require_permission(ENTITY_CATEGORY, EntityPermission.SHOW))]
CanAdd = Annotated[User, Depends(require_permission(ENTITY_CATEGORY, EntityPermission.ADD))]
CanEdit = Annotated[User, Depends(require_permission(ENTITY_CATEGORY, EntityPermission.EDIT))]
CanDelete = Annotated[User, Depends(require_permission(ENTITY_CATEGORY, EntityPermission.DELETE))]
CanExport = Annotated[User, Depends(require_permission(ENTITY_CATEGORY, EntityPermission.EXPORT))]


@router.get("", response_model=list[CategoryResponse])
async def list_categories(
    db: DbSession,
    current_user: CanList,
    group_id: Annotated[UUID | None, Query(description="그룹 ID 필터")] = None,
) -> list[CategoryResponse]:
    return await category_service.list_categories(db, group_id)


@router.get("/export/xlsx")
async def export_categories(db: DbSession, current_user: CanExport) -> StreamingResponse:
    content: bytes = spreadsheet_service.categories(await category_service.list_models(db))
    return download(content, XLSX_MEDIA_TYPE, "categories.xlsx")


@router.get("/{category_id}", response_model=CategoryResponse)
async def get_category(category_id: UUID, db: DbSession, current_user: CanShow) -> CategoryResponse:
    return await category_service.get_category(db, category_id)


@router.post("", response_model=CategoryResponse, status_code=201)
async def create_category(data: CategoryCreate, db: DbSession, current_user: CanAdd) -> CategoryResponse:
    result: CategoryResponse = await category_service.create_category(db, data)
    await db.commit()
    return result


@router.put("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: UUID,
    data: CategoryUpdate,
    db: DbSession,
    current_user: CanEdit,
) -> CategoryResponse:
    result: CategoryResponse = await category_service.update_category(db, category_id, data)
    await db.commit()
    return result


@router.delete("/{category_id}", status_code=204)
async def delete_category(category_id: UUID, db: DbSession, current_user: CanDelete) -> None:
    """카테고리 삭제 — 제품, 작업 또는 계산서가 참조하면 400."""
    await category_service.delete_category(db, category_id)
    await db.commit()
