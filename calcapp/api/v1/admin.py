"""관리 도구 라우터 — 파라미터, 계산서 일괄 갱신, 보관, 제품 가격 변경.

Admin Router — Application parameters and the bulk jobs (total update,
archive, product price update) and the role rights. Every endpoint requires
ROLE_ADMIN; the administrator rights require ROLE_SUPER_ADMIN.
When ``simulate`` is set the jobs report what would change without writing.
"""

from fastapi import APIRouter

from calcapp.api.deps import AdminUser, DbSession, SuperAdminUser
from calcapp.models.user import ROLE_ADMIN, ROLE_USER
from calcapp.schemas.admin import (
    ArchiveDefaults,
    ArchiveQuery,
    ArchiveResult,
    CalculationUpdateQuery,
    CalculationUpdateResult,
    ParametersResponse,
    ParametersUpdate,
    ProductUpdateQuery,
    ProductUpdateResult,
)
from calcapp.schemas.user import RightsUpdate, RoleRightsResponse
from calcapp.services.application_service import application_service
from calcapp.services.calculation_archive_service import calculation_archive_service
from calcapp.services.calculation_update_service import calculation_update_service
from calcapp.services.product_update_service import product_update_service
from calcapp.services.rights_service import rights_service

router: APIRouter = APIRouter()


@router.get("/parameters", response_model=ParametersResponse)
async def get_parameters(db: DbSession, current_user: AdminUser) -> ParametersResponse:
    return await application_service.get_parameters(db)


@router.put("/parameters", response_model=ParametersResponse)
async def update_parameters(data: ParametersUpdate, db: DbSession, current_user: AdminUser) -> ParametersResponse:
    result: ParametersResponse = await application_service.update_parameters(db, data)
    await db.commit()
    return result


@router.post("/calculations/update", response_model=CalculationUpdateResult)
async def update_calculations(
    data: CalculationUpdateQuery,
    db: DbSession,
    current_user: AdminUser,
) -> CalculationUpdateResult:
    """계산서 일괄 갱신 — Clean up the matching calculations and recompute their totals."""
    result: CalculationUpdateResult = await calculation_update_service.update(db, data)
    await db.commit()
    return result


@router.get("/calculations/archive", response_model=ArchiveDefaults)
async def get_archive_defaults(db: DbSession, current_user: AdminUser) -> ArchiveDefaults:
    return await calculation_archive_service.get_defaults(db)


@router.post("/calculations/archive", response_model=ArchiveResult)
async def archive_calculations(data: ArchiveQuery, db: DbSession, current_user: AdminUser) -> ArchiveResult:
    """계산서 보관 — Move old calculations to the target state."""
    result: ArchiveResult = await calculation_archive_service.archive(db, data)
    await db.commit()
    return result


@router.post("/products/update", response_model=ProductUpdateResult)
async def update_products(data: ProductUpdateQuery, db: DbSession, current_user: AdminUser) -> ProductUpdateResult:
    """제품 가격 일괄 변경 — Change the prices of a category's products."""
    result: ProductUpdateResult = await product_update_service.update(db, data)
    await db.commit()
    return result


# === 역할 권한 (Role rights) ===

@router.get("/rights/admin", response_model=RoleRightsResponse)
async def get_admin_rights(db: DbSession, current_user: SuperAdminUser) -> RoleRightsResponse:
    return await rights_service.get_role(db, current_user, ROLE_ADMIN)


@router.put("/rights/admin", response_model=RoleRightsResponse)
async def update_admin_rights(data: RightsUpdate, db: DbSession, current_user: SuperAdminUser) -> RoleRightsResponse:
    """관리자 권한 저장 — Rights of ROLE_ADMIN; the defaults remove the stored value."""
    result: RoleRightsResponse = await rights_service.update_role(db, current_user, ROLE_ADMIN, data)
    await db.commit()
    return result


@router.get("/rights/user", response_model=RoleRightsResponse)
async def get_user_rights(db: DbSession, current_user: AdminUser) -> RoleRightsResponse:
    return await rights_service.get_role(db, current_user, ROLE_USER)


@router.put("/rights/user", response_model=RoleRightsResponse)
async def update_user_rights(data: RightsUpdate, db: DbSession, current_user: AdminUser) -> RoleRightsResponse:
    result: RoleRightsResponse = await rights_service.update_role(db, current_user, ROLE_USER, data)
    await db.commit()
    return result
