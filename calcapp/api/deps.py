"""FastAPI 의존성 주입 모듈 — 인증 및 권한 검사.

FastAPI dependency injection module — Authentication and authorization.

Authentication Flow:
    1. 클라이언트가 Authorization: Bearer <token> 헤더를 전송
       (Client sends Authorization: Bearer <token> header)
    2. decode_token()이 JWT를 검증하고 페이로드를 반환
       (decode_token verifies the JWT and returns the payload)
    3. 페이로드의 "sub" 필드로 DB에서 사용자를 조회
       (User is fetched from DB using the payload "sub" field)
    4. 비활성 사용자는 401 (Disabled users are rejected)
    5. 사용자명을 ``current_username`` 에 기록 — 계산서 수정자 기록용
       (The username is stored for the persistence listeners)

Authorization Flow (require_level):
    역할 레벨이 max_level 이하인지 확인; 1 = super admin, 2 = admin, 3 = user
    (Lower level = higher authority; 403 when the level is too high)

Authorization Flow (require_permission):
    엔티티 권한 확인 (rights_service.is_granted); 슈퍼 관리자는 항상 허용
    (Per-entity rights; 403 when the permission is missing)
"""

from typing import Annotated, Awaitable, Callable
from uuid import UUID

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.responses import StreamingResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from io import BytesIO
from sqlalchemy.ext.asyncio import AsyncSession

from calcapp.database import get_db
from calcapp.listeners import current_username
from calcapp.models.rights import EntityPermission
from calcapp.models.user import ROLE_LEVELS, ROLE_ADMIN, ROLE_SUPER_ADMIN, ROLE_USER, User
from calcapp.repositories.user_repository import user_repository
from calcapp.services.rights_service import rights_service
from calcapp.utils.jwt import decode_token

# HTTP Bearer 토큰 추출기 — Extracts the JWT from the Authorization header
security: HTTPBearer = HTTPBearer()


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """JWT 토큰에서 현재 인증된 사용자를 추출합니다.

    Decode the JWT from the Authorization header and return the
    authenticated user.

    Raises:
        HTTPException(401): 토큰이 유효하지 않거나 만료됨 (Invalid or expired token)
        HTTPException(401): 사용자를 찾을 수 없거나 비활성 (User not found or disabled)
    """
    try:
        payload: dict = decode_token(credentials.credentials)
        # 토큰 타입 검증 — Reject refresh and reset tokens used as access tokens
        if payload.get("type") != "access":
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token type")
        user_id: UUID = UUID(payload["sub"])
    except HTTPException:
        raise
    except (jwt.InvalidTokenError, KeyError, ValueError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")

    user: User | None = await user_repository.get_by_id(db, user_id)
    if user is None or not user.enabled:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found or disabled")

    current_username.set(user.username)
    return user


def require_level(max_level: int) -> Callable[..., Awaitable[User]]:
    """역할 레벨 기반 권한 검사 의존성 팩토리.

    Dependency factory enforcing a maximum role level.

    Level hierarchy:
        1 = ROLE_SUPER_ADMIN
        2 = ROLE_ADMIN
        3 = ROLE_USER
    """
    async def _check(
        current_user: Annotated[User, Depends(get_current_user)],
    ) -> User:
        if current_user.level > max_level:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
        return current_user
    return _check


def require_permission(entity: str, permission: EntityPermission) -> Callable[..., Awaitable[User]]:
    """엔티티 권한 검사 의존성 팩토리.

    Dependency factory enforcing a permission on an entity, e.g.
    ``require_permission(ENTITY_PRODUCT, EntityPermission.ADD)``.
    """
    async def _check(
        current_user: Annotated[User, Depends(get_current_user)],
        db: Annotated[AsyncSession, Depends(get_db)],
    ) -> User:
        if not await rights_service.is_granted(db, current_user, entity, permission):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
        return current_user
    return _check


# 편의 의존성 — Pre-configured level dependencies
require_super_admin = require_level(ROLE_LEVELS[ROLE_SUPER_ADMIN])
require_admin = require_level(ROLE_LEVELS[ROLE_ADMIN])
require_user = require_level(ROLE_LEVELS[ROLE_USER])

# 타입 별칭 — Annotated aliases used by the routers
DbSession = Annotated[AsyncSession, Depends(get_db)]
CurrentUser = Annotated[User, Depends(require_user)]
AdminUser = Annotated[User, Depends(require_admin)]
SuperAdminUser = Annotated[User, Depends(require_super_admin)]


def download(content: bytes, media_type: str, filename: str) -> StreamingResponse:
    """파일 다운로드 응답 — Attachment response for an exported document."""
    return StreamingResponse(
        BytesIO(content),
        media_type=media_type,
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
