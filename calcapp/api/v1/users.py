"""사용자 라우터 — 사용자 CRUD, 권한, 비밀번호 변경, 메시지 발송.

User Router — User management, user rights, own password change and
messages. Only a super admin may grant ROLE_SUPER_ADMIN (checked by the
service). The CRUD endpoints check the rights on the user entity; the rights
endpoints require ROLE_ADMIN.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from calcapp.api.deps import AdminUser, CurrentUser, DbSession, download, require_permission
from calcapp.models.rights import ENTITY_USER, EntityPermission
from calcapp.models.user import User
from calcapp.schemas.common import MessageResponse
from calcapp.schemas.user import (
    PasswordChange,
    RightsUpdate,
    UserCreate,
    UserMessage,
    UserResponse,
    UserRightsResponse,
    UserUpdate,
)
from calcapp.services.pdf_service import PDF_MEDIA_TYPE, pdf_service
from calcapp.services.rights_service import rights_service
from calcapp.services.spreadsheet_service import XLSX_MEDIA_TYPE, spreadsheet_service
from calcapp.services.user_service import user_service

router: APIRouter = APIRouter()

# 사용자 엔티티 권한 — Rights on the user entity
ListUser = Annotated[User, Depends(require_permission(ENTITY_USER, EntityPermission.LIST))]
ShowUser = Annotated[User, Depends(require_permission(ENTITY_USER, EntityPermission.SHOW))]
AddUser = Annotated[User, Depends(require_permission(ENTITY_USER, EntityPermission.ADD))]
EditUser = Annotated[User, Depends(require_permission(ENTITY_USER, EntityPermission.EDIT))]
DeleteUser = Annotated[User, Depends(require_permission(ENTITY_USER, EntityPermission.DELETE))]
ExportUser = Annotated[User, Depends(require_permission(ENTITY_USER, EntityPermission.EXPORT))]


@router.get("", response_model=list[UserResponse])
async def list_users(db: DbSession, current_user: ListUser) -> list[UserResponse]:
    return await user_service.list_users(db)


@router.get("/export/xlsx")
async def export_users(db: DbSession, current_user: ExportUser) -> StreamingResponse:
    content: bytes = spreadsheet_service.users(await user_service.list_models(db))
    return download(content, XLSX_MEDIA_TYPE, "users.xlsx")


@router.get("/rights/xlsx")
async def export_rights_xlsx(db: DbSession, current_user: AdminUser) -> StreamingResponse:
    """권한 보고서 (Excel) — Role rights then the rights of every user."""
    roles, users = await rights_service.list_rights(db)
    return download(spreadsheet_service.users_rights(roles, users), XLSX_MEDIA_TYPE, "rights.xlsx")


@router.get("/rights/pdf")
async def export_rights_pdf(db: DbSession, current_user: AdminUser) -> StreamingResponse:
    roles, users = await rights_service.list_rights(db)
    return download(pdf_service.users_rights(roles, users), PDF_MEDIA_TYPE, "rights.pdf")


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: UUID, db: DbSession, current_user: ShowUser) -> UserResponse:
    return await user_service.get_user(db, user_id)


@router.post("", response_model=UserResponse, status_code=201)
async def create_user(data: UserCreate, db: DbSession, current_user: AddUser) -> UserResponse:
    result: UserResponse = await user_service.create_user(db, current_user, data)
    await db.commit()
    return result


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(user_id: UUID, data: UserUpdate, db: DbSession, current_user: EditUser) -> UserResponse:
    result: UserResponse = await user_service.update_user(db, current_user, user_id, data)
    await db.commit()
    return result


@router.delete("/{user_id}", status_code=204)
async def delete_user(user_id: UUID, db: DbSession, current_user: DeleteUser) -> None:
    await user_service.delete_user(db, current_user, user_id)
    await db.commit()


@router.get("/{user_id}/rights", response_model=UserRightsResponse)
async def get_user_rights(user_id: UUID, db: DbSession, current_user: AdminUser) -> UserRightsResponse:
    return await rights_service.get_user(db, user_id)


@router.put("/{user_id}/rights", response_model=UserRightsResponse)
async def update_user_rights(
    user_id: UUID,
    data: RightsUpdate,
    db: DbSession,
    current_user: AdminUser,
) -> UserRightsResponse:
    """사용자 권한 저장 — Overwrite the role rights for this user.

    Rights equal to the role rights clear the override.
    """
    result: UserRightsResponse = await rights_service.update_user(db, current_user, user_id, data)
    await db.commit()
    return result


@router.delete("/{user_id}/rights", response_model=UserRightsResponse)
async def reset_user_rights(user_id: UUID, db: DbSession, current_user: AdminUser) -> UserRightsResponse:
    result: UserRightsResponse = await rights_service.update_user(db, current_user, user_id, None)
    await db.commit()
    return result


@router.put("/{user_id}/password", response_model=MessageResponse)
async def change_password(
    user_id: UUID,
    data: PasswordChange,
    db: DbSession,
    current_user: CurrentUser,
) -> MessageResponse:
    """비밀번호 변경 — 본인은 현재 비밀번호 필요, 타인은 관리자만.

    Change a password. Users change their own (with the current password);
    admins may change anyone's.
    """
    await user_service.change_password(db, current_user, user_id, data)
    await db.commit()
    return MessageResponse(message="The password has been changed")


@router.post("/{user_id}/message", response_model=MessageResponse)
async def send_message(
    user_id: UUID,
    data: UserMessage,
    db: DbSession,
    current_user: CurrentUser,
) -> MessageResponse:
    await user_service.send_message(db, current_user, user_id, data)
    return MessageResponse(message="The message has been sent")
