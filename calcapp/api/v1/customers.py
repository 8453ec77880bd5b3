"""고객 라우터 — Customer endpoints (the default user rights allow every operation)."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from calcapp.api.deps import DbSession, download, require_permission
from calcapp.config import settings
from calcapp.models.rights import ENTITY_CUSTOMER, EntityPermission
from calcapp.models.user import User
from calcapp.schemas.customer import CustomerCreate, CustomerResponse, CustomerUpdate
from calcapp.services.customer_service import customer_service
from calcapp.services.spreadsheet_service import XLSX_MEDIA_TYPE, spreadsheet_service
from calcapp.utils.pagination import Page

router: APIRouter = APIRouter()

# 엔티티 권한 — Rights on the entity
CanList = Annotated[User, Depends(require_permission(ENTITY_CUSTOMER, EntityPermission.LIST))]
CanShow = Annotated[User, Depends(require_permission(ENTITY_CUSTOMER, EntityPermission.SHOW))]
CanAdd = Annotated[User, Depends(require_permission(ENTITY_CUSTOMER, EntityPermission.ADD))]
CanEdit = Annotated[User, Depends(require_permission(ENTITY_CUSTOMER, EntityPermission.EDIT))]
CanDelete = Annotated[User, Depends(require_permission(ENTITY_CUSTOMER, EntityPermission.DELETE))]
CanExport = Annotated[User, Depends(require_permission(ENTITY_CUSTOMER, EntityPermission.EXPORT))]


@router.get("", response_model=Page[CustomerResponse])
async def list_customers(
    db: DbSession,
    current_user: CanList,
    search: Annotated[str | None, Query(description="검색어")] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=200)] = settings.ITEMS_PER_PAGE,
) -> Page[CustomerResponse]:
    return await customer_service.list_customers(db, search, page, per_page)


@router.get("/export/xlsx")
async def export_customers(
    db: DbSession,
    current_user: CanExport,
    search: Annotated[str | None, Query()] = None,
) -> StreamingResponse:
    content: bytes = spreadsheet_service.customers(await customer_service.list_models(db, search))
    return download(content, XLSX_MEDIA_TYPE, "customers.xlsx")


@router.get("/{customer_id}", response_model=CustomerResponse)
async def get_customer(customer_id: UUID, db: DbSession, current_user: CanShow) -> CustomerResponse:
    return await customer_service.get_customer(db, customer_id)


@router.post("", response_model=CustomerResponse, status_code=201)
async def create_customer(data: CustomerCreate, db: DbSession, current_user: CanAdd) -> CustomerResponse:
    result: CustomerResponse = await customer_service.create_customer(db, data)
    await db.commit()
    return result


@router.put("/{customer_id}", response_model=CustomerResponse)
async def update_customer(
    customer_id: UUID,
    data: CustomerUpdate,
    db: DbSession,
    current_user: CanEdit,
) -> CustomerResponse:
    result: CustomerResponse = await customer_service.update_customer(db, customer_id, data)
    await db.commit()
    return result


@router.delete("/{customer_id}", status_code=204)
async def delete_customer(customer_id: UUID, db: DbSession, current_user: CanDelete) -> None:
    await customer_service.delete_customer(db, customer_id)
    await db.commit()
