"""디지털 프린트 라우터 — Digital print CRUD and computation."""

from uuid import UUID

from fastapi import APIRouter

from calcapp.api.deps import AdminUser, CurrentUser, DbSession
from calcapp.schemas.task import (
    DigiPrintComputeRequest,
    DigiPrintComputeResponse,
    DigiPrintCreate,
    DigiPrintResponse,
    DigiPrintUpdate,
)
from calcapp.services.digiprint_service import digiprint_service

router: APIRouter = APIRouter()


@router.get("", response_model=list[DigiPrintResponse])
async def list_digi_prints(db: DbSession, current_user: CurrentUser) -> list[DigiPrintResponse]:
    return await digiprint_service.list_digi_prints(db)


@router.get("/{digi_print_id}", response_model=DigiPrintResponse)
async def get_digi_print(digi_print_id: UUID, db: DbSession, current_user: CurrentUser) -> DigiPrintResponse:
    return await digiprint_service.get_digi_print(db, digi_print_id)


@router.post("/{digi_print_id}/compute", response_model=DigiPrintComputeResponse)
async def compute_digi_print(
    digi_print_id: UUID,
    data: DigiPrintComputeRequest,
    db: DbSession,
    current_user: CurrentUser,
) -> DigiPrintComputeResponse:
    """디지털 프린트 계산 — Amount × quantity for the selected types (price, backlit, replicating)."""
    return await digiprint_service.compute_digi_print(db, digi_print_id, data)


@router.post("", response_model=DigiPrintResponse, status_code=201)
async def create_digi_print(data: DigiPrintCreate, db: DbSession, current_user: AdminUser) -> DigiPrintResponse:
    result: DigiPrintResponse = await digiprint_service.create_digi_print(db, data)
    await db.commit()
    return result


@router.put("/{digi_print_id}", response_model=DigiPrintResponse)
async def update_digi_print(
    digi_print_id: UUID,
    data: DigiPrintUpdate,
    db: DbSession,
    current_user: AdminUser,
) -> DigiPrintResponse:
    result: DigiPrintResponse = await digiprint_service.update_digi_print(db, digi_print_id, data)
    await db.commit()
    return result


@router.delete("/{digi_print_id}", status_code=204)
async def delete_digi_print(digi_print_id: UUID, db: DbSession, current_user: AdminUser) -> None:
    await digiprint_service.delete_digi_print(db, digi_print_id)
    await db.commit()
