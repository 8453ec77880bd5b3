"""작업 라우터 — 작업 CRUD 및 수량별 계산.

Task Router — Task CRUD and the quantity computation.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from calcapp.api.deps import DbSession, download, require_permission
from calcapp.models.rights import ENTITY_TASK, EntityPermission
from calcapp.models.user import User
from calcapp.schemas.task import TaskComputeRequest, TaskComputeResponse, TaskCreate, TaskResponse, TaskUpdate
from calcapp.services.spreadsheet_service import XLSX_MEDIA_TYPE, spreadsheet_service
from calcapp.services.task_service import task_service

router: APIRouter = APIRouter()

# 엔티티 권한 — Rights on the entity
CanList = Annotated[User, Depends(require_permission(ENTITY_TASK, EntityPermission.LIST))]
CanShow = Annotated[User, Depends(require_permission(ENTITY_TASK, EntityPermission.SHOW))]
CanAdd = Annotated[User, Depends(require_permission(ENTITY_TASK, EntityPermission.ADD))]
CanEdit = Annotated[User, Depends(require_permission(ENTITY_TASK, EntityPermission.EDIT))]
CanDelete = Annotated[User, Depends(require_permission(ENTITY_TASK, EntityPermission.DELETE))]
CanExport = Annotated[User, Depends(require_permission(ENTITY_TASK, EntityPermission.EXPORT))]


@router.get("", response_model=list[TaskResponse])
async def list_tasks(db: DbSession, current_user: CanList) -> list[TaskResponse]:
    return await task_service.list_tasks(db)


@router.get("/export/xlsx")
async def export_tasks(db: DbSession, current_user: CanExport) -> StreamingResponse:
    content: bytes = spreadsheet_service.tasks(await task_service.list_models(db))
    return download(content, XLSX_MEDIA_TYPE, "tasks.xlsx")


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(task_id: UUID, db: DbSession, current_user: CanShow) -> TaskResponse:
    return await task_service.get_task(db, task_id)


@router.post("/{task_id}/compute", response_model=TaskComputeResponse)
async def compute_task(
    task_id: UUID,
    data: TaskComputeRequest,
    db: DbSession,
    current_user: CanShow,
) -> TaskComputeResponse:
    """작업 계산 — Value × quantity for each selected item."""
    return await task_service.compute_task(db, task_id, data)


@router.post("", response_model=TaskResponse, status_code=201)
async def create_task(data: TaskCreate, db: DbSession, current_user: CanAdd) -> TaskResponse:
    result: TaskResponse = await task_service.create_task(db, data)
    await db.commit()
    return result


@router.put("/{task_id}", response_model=TaskResponse)
async def update_task(task_id: UUID, data: TaskUpdate, db: DbSession, current_user: CanEdit) -> TaskResponse:
    result: TaskResponse = await task_service.update_task(db, task_id, data)
    await db.commit()
    return result


@router.delete("/{task_id}", status_code=204)
async def delete_task(task_id: UUID, db: DbSession, current_user: CanDelete) -> None:
    await task_service.delete_task(db, task_id)
    await db.commit()
