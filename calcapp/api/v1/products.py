"""제품 라우터 — 제품 CRUD, Excel 가져오기 및 내보내기.

Product Router — Product CRUD, the spreadsheet import and the export.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, File, Query, UploadFile
from fastapi.responses import StreamingResponse

from calcapp.api.deps import DbSession, download, require_permission
from calcapp.config import settings
from calcapp.models.rights import ENTITY_PRODUCT, EntityPermission
from calcapp.models.user import User
from calcapp.schemas.catalog import ProductCreate, ProductImportResult, ProductResponse, ProductUpdate
from calcapp.services.product_service import product_service
from calcapp.services.spreadsheet_service import XLSX_MEDIA_TYPE, spreadsheet_service
from calcapp.utils.exceptions import BadRequestError
from calcapp.utils.pagination import Page

router: APIRouter = APIRouter()

# 엔티티 권한 — Rights on the entity
CanList = Annotated[User, Depends(require_permission(ENTITY_PRODUCT, EntityPermission.LIST))]
CanShow = Annotated[User, Depends(require_permission(ENTITY_PRODUCT, EntityPermission.SHOW))]
CanAdd = Annotated[User, Depends(require_permission(ENTITY_PRODUCT, EntityPermission.ADD))]
CanEdit = Annotated[User, Depends(require_permission(ENTITY_PRODUCT, EntityPermission.EDIT))]
CanDelete = Annotated[User, Depends(require_permission(ENTITY_PRODUCT, EntityPermission.DELETE))]
CanExport = Annotated[User, Depends(require_permission(ENTITY_PRODUCT, EntityPermission.EXPORT))]


@router.get("", response_model=Page[ProductResponse])
async def list_products(
    db: DbSession,
    current_user: CanList,
    category_id: Annotated[UUID | None, Query(description="카테고리 ID 필터")] = None,
    group_id: Annotated[UUID | None, Query(description="그룹 ID 필터")] = None,
    search: Annotated[str | None, Query(description="검색어")] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=200)] = settings.ITEMS_PER_PAGE,
) -> Page[ProductResponse]:
    return await product_service.list_products(db, category_id, group_id, search, page, per_page)


@router.get("/export/xlsx")
async def export_products(
    db: DbSession,
    current_user: CanExport,
    category_id: Annotated[UUID | None, Query()] = None,
) -> StreamingResponse:
    content: bytes = spreadsheet_service.products(await product_service.list_models(db, category_id))
    return download(content, XLSX_MEDIA_TYPE, "products.xlsx")


@router.post("/import", response_model=ProductImportResult)
async def import_products(
    db: DbSession,
    current_user: CanAdd,
    file: UploadFile = File(...),
    simulate: Annotated[bool, Query(description="검증만 수행 (Validate without writing)")] = True,
) -> ProductImportResult:
    """Excel 파일에서 제품 가져오기.

    Import products from an .xlsx sheet (description, unit, price,
    supplier, category). Existing descriptions are updated.
    """
    if not file.filename or not file.filename.lower().endswith(".xlsx"):
        raise BadRequestError("Only .xlsx files are supported")
    content: bytes = await file.read()
    result: ProductImportResult = await product_service.import_products(db, content, simulate)
    await db.commit()
    return result


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: UUID, db: DbSession, current_user: CanShow) -> ProductResponse:
    return await product_service.get_product(db, product_id)


@router.post("", response_model=ProductResponse, status_code=201)
async def create_product(data: ProductCreate, db: DbSession, current_user: CanAdd) -> ProductResponse:
    result: ProductResponse = await product_service.create_product(db, data)
    await db.commit()
    return result


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: UUID,
    data: ProductUpdate,
    db: DbSession,
    current_user: CanEdit,
) -> ProductResponse:
    result: ProductResponse = await product_service.update_product(db, product_id, data)
    await db.commit()
    return result


@router.delete("/{product_id}", status_code=204)
async def delete_product(product_id: UUID, db: DbSession, current_user: CanDelete) -> None:
    await product_service.delete_product(db, product_id)
    await db.commit()
