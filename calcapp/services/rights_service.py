"""권한 서비스 — 역할/사용자별 엔티티 권한.

Rights Service — Per-entity rights of the roles and of the users.

Resolution order for a user:
    1. 슈퍼 관리자는 항상 허용 (A super admin is always granted)
    2. 비활성 사용자는 거부 (A disabled user is denied)
    3. ``overwrite`` 이면 사용자 권한 (The user's own rights when overwritten)
    4. 역할 파라미터 (``admin_rights`` / ``user_rights`` properties)
    5. 기본 권한 (The built-in defaults)

Saving rights equal to the defaults removes the stored value.
"""

import json
import logging
from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from calcapp.models.property import PROPERTY_ADMIN_RIGHTS, PROPERTY_USER_RIGHTS
from calcapp.models.rights import (
    PERMISSION_ALL,
    ENTITIES,
    EntityPermission,
    default_rights,
    from_names,
    has_permission,
    normalize_rights,
    to_names,
)
from calcapp.models.user import ROLE_ADMIN, ROLE_SUPER_ADMIN, ROLE_USER, User
from calcapp.repositories.property_repository import property_repository
from calcapp.repositories.user_repository import user_repository
from calcapp.schemas.user import RightsUpdate, RoleRightsResponse, UserRightsResponse
from calcapp.utils.exceptions import BadRequestError, ForbiddenError, NotFoundError

logger = logging.getLogger(__name__)

# 역할 → 파라미터 이름 — Property holding the rights of an editable role
ROLE_PROPERTIES: dict[str, str] = {
    ROLE_ADMIN: PROPERTY_ADMIN_RIGHTS,
    ROLE_USER: PROPERTY_USER_RIGHTS,
}


def _parse_rights(data: RightsUpdate) -> list[int]:
    try:
        return from_names(data.rights)
    except ValueError as e:
        raise BadRequestError(str(e))


class RightsService:
    """권한 서비스 — Rights service."""

    async def get_role_rights(self, db: AsyncSession, role: str) -> list[int]:
        """역할 권한 — Stored rights of a role, or its defaults."""
        if role == ROLE_SUPER_ADMIN:
            return [PERMISSION_ALL] * len(ENTITIES)
        prop = await property_repository.get_by_name(db, ROLE_PROPERTIES.get(role, PROPERTY_USER_RIGHTS))
        if prop is None or not prop.value:
            return default_rights(role)
        try:
            return normalize_rights(json.loads(prop.value))
        except (ValueError, TypeError):
            logger.warning("Invalid rights parameter '%s' for the role %s", prop.value, role)
            return default_rights(role)

    async def get_user_rights(self, db: AsyncSession, user: User) -> list[int]:
        if user.is_super_admin:
            return [PERMISSION_ALL] * len(ENTITIES)
        if user.overwrite and user.rights is not None:
            return normalize_rights(user.rights)
        return await self.get_role_rights(db, user.role)

    async def is_granted(
        self,
        db: AsyncSession,
        user: User,
        entity: str,
        permission: EntityPermission,
    ) -> bool:
        """권한 확인 — Whether the user holds the permission on the entity."""
        if user.is_super_admin:
            return True
        if not user.enabled:
            return False
        return has_permission(await self.get_user_rights(db, user), entity, permission)

    # === 역할 권한 (Role rights) ===

    def _check_role(self, current_user: User, role: str) -> str:
        if role not in ROLE_PROPERTIES:
            raise NotFoundError("Role not found")
        if role == ROLE_ADMIN and not current_user.is_super_admin:
            raise ForbiddenError("Only a super administrator can edit the administrator rights")
        return ROLE_PROPERTIES[role]

    async def get_role(self, db: AsyncSession, current_user: User, role: str) -> RoleRightsResponse:
        name: str = self._check_role(current_user, role)
        rights: list[int] = await self.get_role_rights(db, role)
        stored = await property_repository.get_by_name(db, name)
        return RoleRightsResponse(role=role, default=stored is None, rights=to_names(rights))

    async def update_role(
        self,
        db: AsyncSession,
        current_user: User,
        role: str,
        data: RightsUpdate,
    ) -> RoleRightsResponse:
        """역할 권한 저장 — Save the rights of a role.

        Raises:
            NotFoundError: 편집할 수 없는 역할 (Not an editable role)
            ForbiddenError: 관리자 권한은 슈퍼 관리자만 (Admin rights need a super admin)
            BadRequestError: 알 수 없는 엔티티 또는 권한 (Unknown entity or permission)
        """
        name: str = self._check_role(current_user, role)
        rights: list[int] = _parse_rights(data)
        if rights == default_rights(role):
            await property_repository.remove(db, name)
            logger.info("Rights of the role %s reset to the defaults by %s", role, current_user.username)
        else:
            await property_repository.set_value(db, name, json.dumps(rights))
            logger.info("Rights of the role %s updated by %s", role, current_user.username)
        return await self.get_role(db, current_user, role)

    # === 사용자 권한 (User rights) ===

    async def _to_response(self, db: AsyncSession, user: User) -> UserRightsResponse:
        return UserRightsResponse(
            id=str(user.id),
            username=user.username,
            role=user.role,
            enabled=user.enabled,
            overwrite=bool(user.overwrite),
            rights=to_names(await self.get_user_rights(db, user)),
        )

    async def _get(self, db: AsyncSession, user_id: UUID) -> User:
        user: User | None = await user_repository.get_by_id(db, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def get_user(self, db: AsyncSession, user_id: UUID) -> UserRightsResponse:
        return await self._to_response(db, await self._get(db, user_id))

    async def update_user(
        self,
        db: AsyncSession,
        current_user: User,
        user_id: UUID,
        data: RightsUpdate | None,
    ) -> UserRightsResponse:
        """사용자 권한 저장 — Overwrite the rights of a user.

        ``None`` (or rights equal to the role rights) restores the role rights.

        Raises:
            ForbiddenError: 자기 자신의 권한 수정 (Own rights, unless super admin)
            ForbiddenError: 슈퍼 관리자 수정 (A super admin target needs a super admin)
        """
        user: User = await self._get(db, user_id)
        if user.id == current_user.id and not current_user.is_super_admin:
            raise ForbiddenError("You cannot edit your own rights")
        if user.is_super_admin and not current_user.is_super_admin:
            raise ForbiddenError("Only a super administrator can modify this user")

        rights: list[int] | None = None if data is None else _parse_rights(data)
        if rights is None or rights == await self.get_role_rights(db, user.role):
            user.rights = None
            user.overwrite = False
        else:
            user.rights = rights
            user.overwrite = True
        await db.flush()
        logger.info(
            "Rights of the user %s %s by %s",
            user.username,
            "overwritten" if user.overwrite else "reset",
            current_user.username,
        )
        return await self._to_response(db, user)

    async def list_rights(self, db: AsyncSession) -> tuple[list[tuple[str, list[int]]], list[tuple[User, list[int]]]]:
        """권한 보고서 데이터 — The role rights then the rights of every user."""
        roles: list[tuple[str, list[int]]] = [
            (role, await self.get_role_rights(db, role)) for role in (ROLE_ADMIN, ROLE_USER)
        ]
        users: Sequence[User] = await user_repository.list_ordered(db)
        return roles, [(user, await self.get_user_rights(db, user)) for user in users]


# 싱글턴 인스턴스 — Singleton instance
rights_service: RightsService = RightsService()
