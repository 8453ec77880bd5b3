"""사용자 서비스 — 사용자 CRUD, 비밀번호, 메시지 비즈니스 로직.

User Service — Business logic for user management, password changes and
messages between users.

Rights:
    - 관리자(레벨 2 이하)만 사용자 관리 가능 (Admins manage users)
    - ROLE_SUPER_ADMIN 부여/수정은 슈퍼 관리자만 (Only a super admin grants or edits super admins)
    - 자기 자신은 삭제/비활성화 불가 (Users cannot delete or disable themselves)
"""

import logging
from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from calcapp.models.user import ROLE_ADMIN, ROLE_LEVELS, ROLE_SUPER_ADMIN, User
from calcapp.repositories.auth_repository import auth_repository
from calcapp.repositories.user_repository import user_repository
from calcapp.schemas.user import PasswordChange, UserCreate, UserMessage, UserResponse, UserUpdate
from calcapp.services.mail_service import mail_service
from calcapp.utils.exceptions import BadRequestError, DuplicateError, ForbiddenError, NotFoundError
from calcapp.utils.password import hash_password, verify_password

logger = logging.getLogger(__name__)


class UserService:
    """사용자 관련 비즈니스 로직을 처리하는 서비스.

    Service handling user business logic.
    """

    def _to_response(self, user: User) -> UserResponse:
        return UserResponse(
            id=str(user.id),
            username=user.username,
            email=user.email,
            role=user.role,
            enabled=user.enabled,
            verified=user.verified,
            last_login=user.last_login,
            created_at=user.created_at,
            overwrite=user.overwrite or False,
        )

    def _check_role(self, current_user: User, role: str) -> None:
        """역할 부여 권한 확인 — Validate a role the current user wants to grant.

        Raises:
            BadRequestError: 알 수 없는 역할 (Unknown role)
            ForbiddenError: 슈퍼 관리자가 아닌 사용자가 ROLE_SUPER_ADMIN 부여
                            (Only a super admin may grant ROLE_SUPER_ADMIN)
        """
        if role not in ROLE_LEVELS:
            raise BadRequestError(f"Unknown role: {role}")
        if role == ROLE_SUPER_ADMIN and not current_user.is_super_admin:
            raise ForbiddenError("Only a super administrator can grant this role")

    def _check_target(self, current_user: User, user: User) -> None:
        # 슈퍼 관리자 계정은 슈퍼 관리자만 수정 — Super admins are edited by super admins only
        if user.is_super_admin and not current_user.is_super_admin:
            raise ForbiddenError("Only a super administrator can modify this user")

    async def _get(self, db: AsyncSession, user_id: UUID) -> User:
        user: User | None = await user_repository.get_by_id(db, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def list_users(self, db: AsyncSession) -> list[UserResponse]:
        users: Sequence[User] = await user_repository.list_ordered(db)
        return [self._to_response(u) for u in users]

    async def list_models(self, db: AsyncSession) -> Sequence[User]:
        return await user_repository.list_ordered(db)

    async def get_user(self, db: AsyncSession, user_id: UUID) -> UserResponse:
        return self._to_response(await self._get(db, user_id))

    async def create_user(self, db: AsyncSession, current_user: User, data: UserCreate) -> UserResponse:
        """새 사용자를 생성합니다.

        Create a new user.

        Raises:
            DuplicateError: 사용자명 또는 이메일 중복 (Username or e-mail already used)
            ForbiddenError: 역할 부여 권한 없음 (Role cannot be granted)
        """
        self._check_role(current_user, data.role)
        if await user_repository.get_by_username(db, data.username) is not None:
            raise DuplicateError("Username already exists")
        if await user_repository.get_by_email(db, data.email) is not None:
            raise DuplicateError("E-mail already exists")

        user: User = await user_repository.create(
            db,
            {
                "username": data.username,
                "email": data.email,
                "password_hash": hash_password(data.password),
                "role": data.role,
                "enabled": data.enabled,
            },
        )
        logger.info("User %s created by %s", user.username, current_user.username)
        return self._to_response(user)

    async def update_user(self, db: AsyncSession, current_user: User, user_id: UUID, data: UserUpdate) -> UserResponse:
        """사용자 정보를 수정합니다 — Update a user.

        Raises:
            NotFoundError: 사용자 없음 (User not found)
            DuplicateError: 사용자명 또는 이메일 중복 (Username or e-mail already used)
            ForbiddenError: 권한 없음 (Rights violation)
            BadRequestError: 자기 자신 비활성화 (Disabling oneself)
        """
        user: User = await self._get(db, user_id)
        self._check_target(current_user, user)
        if data.role is not None:
            self._check_role(current_user, data.role)
        if data.enabled is False and user.id == current_user.id:
            raise BadRequestError("You cannot disable your own account")

        if data.username is not None and data.username.lower() != user.username.lower():
            if await user_repository.get_by_username(db, data.username) is not None:
                raise DuplicateError("Username already exists")
        if data.email is not None and data.email.lower() != user.email.lower():
            if await user_repository.get_by_email(db, data.email) is not None:
                raise DuplicateError("E-mail already exists")

        updated: User | None = await user_repository.update(db, user_id, data.model_dump(exclude_unset=True))
        if updated is None:
            raise NotFoundError("User not found")
        return self._to_response(updated)

    async def delete_user(self, db: AsyncSession, current_user: User, user_id: UUID) -> None:
        user: User = await self._get(db, user_id)
        self._check_target(current_user, user)
        if user.id == current_user.id:
            raise BadRequestError("You cannot delete your own account")
        await user_repository.delete(db, user_id)
        logger.info("User %s deleted by %s", user.username, current_user.username)

    async def change_password(self, db: AsyncSession, current_user: User, user_id: UUID, data: PasswordChange) -> None:
        """비밀번호 변경.

        Change a password. Users changing their own password must give the
        current one; admins may reset the password of another user. Active
        refresh tokens of the user are revoked.
        """
        user: User = await self._get(db, user_id)
        if user.id == current_user.id:
            if not data.current_password or not verify_password(data.current_password, user.password_hash):
                raise BadRequestError("The current password is not valid")
        else:
            if current_user.level > ROLE_LEVELS[ROLE_ADMIN]:
                raise ForbiddenError("Insufficient permissions")
            self._check_target(current_user, user)

        user.password_hash = hash_password(data.password)
        await auth_repository.delete_user_refresh_tokens(db, user.id)
        await db.flush()
        logger.info("Password of %s changed by %s", user.username, current_user.username)

    async def send_message(self, db: AsyncSession, current_user: User, user_id: UUID, data: UserMessage) -> None:
        """사용자에게 이메일 메시지 발송 — Send an e-mail message to a user."""
        recipient: User = await self._get(db, user_id)
        if recipient.id == current_user.id:
            raise BadRequestError("You cannot send a message to yourself")
        await mail_service.send_message(current_user, recipient, data.subject, data.message)


# 싱글턴 인스턴스 — Singleton instance
user_service: UserService = UserService()
