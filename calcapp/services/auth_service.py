"""인증 서비스 — 로그인, 토큰 갱신, 비밀번호 재설정 비즈니스 로직.

Auth Service — Business logic for login, token refresh, logout and the
password reset flow.
"""

import logging
from datetime import datetime, timedelta, timezone
from uuid import UUID

import jwt
from sqlalchemy.ext.asyncio import AsyncSession

from calcapp.config import settings
from calcapp.models.token import RefreshToken
from calcapp.models.user import User
from calcapp.repositories.auth_repository import auth_repository
from calcapp.repositories.user_repository import user_repository
from calcapp.schemas.auth import (
    ForgotPasswordRequest,
    LoginRequest,
    RefreshRequest,
    ResetPasswordRequest,
    TokenResponse,
    UserMeResponse,
)
from calcapp.services.mail_service import mail_service
from calcapp.utils.exceptions import BadRequestError, UnauthorizedError
from calcapp.utils.jwt import (
    create_access_token,
    create_refresh_token,
    create_reset_token,
    decode_token,
)
from calcapp.utils.password import hash_password, verify_password

logger = logging.getLogger(__name__)


class AuthService:
    """인증 관련 비즈니스 로직을 처리하는 서비스.

    Service handling authentication business logic.
    """

    def _build_jwt_payload(self, user: User) -> dict[str, str | int]:
        return {"sub": str(user.id), "role": user.role, "level": user.level}

    async def _generate_tokens(self, db: AsyncSession, user: User) -> TokenResponse:
        """액세스 토큰과 리프레시 토큰을 생성합니다.

        Generate an access/refresh token pair. Older refresh tokens of the
        user are revoked so that only one stays active.
        """
        payload: dict[str, str | int] = self._build_jwt_payload(user)
        access_token: str = create_access_token(payload)
        refresh_token: str = create_refresh_token(payload)

        # 기존 리프레시 토큰 정리 — Revoke previous refresh tokens
        await auth_repository.delete_user_refresh_tokens(db, user.id)

        expires_at: datetime = datetime.now(timezone.utc) + timedelta(days=settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS)
        await auth_repository.create_refresh_token(db, user_id=user.id, token=refresh_token, expires_at=expires_at)
        return TokenResponse(access_token=access_token, refresh_token=refresh_token)

    async def login(self, db: AsyncSession, data: LoginRequest) -> TokenResponse:
        """로그인을 처리합니다.

        Process a login by username or e-mail.

        Raises:
            UnauthorizedError: 잘못된 인증 정보 또는 비활성 계정
                               (Invalid credentials or disabled account)
        """
        user: User | None = await auth_repository.get_user_by_login(db, data.username)
        if user is None or not verify_password(data.password, user.password_hash):
            logger.info("Failed login for '%s'", data.username)
            raise UnauthorizedError("Invalid username or password")

        if not user.enabled:
            raise UnauthorizedError("Account is disabled")

        user.last_login = datetime.now(timezone.utc)
        return await self._generate_tokens(db, user)

    async def refresh_tokens(self, db: AsyncSession, data: RefreshRequest) -> TokenResponse:
        """리프레시 토큰으로 새 토큰 쌍을 발급합니다 — Rotate the refresh token.

        Raises:
            UnauthorizedError: 유효하지 않거나 만료된 리프레시 토큰일 때
                               (Invalid or expired refresh token)
        """
        db_token: RefreshToken | None = await auth_repository.get_refresh_token(db, data.refresh_token)
        if db_token is None:
            raise UnauthorizedError("Invalid refresh token")

        if db_token.is_expired():
            await auth_repository.delete_refresh_token(db, data.refresh_token)
            raise UnauthorizedError("Refresh token has expired")

        try:
            payload: dict = decode_token(data.refresh_token)
        except jwt.InvalidTokenError:
            await auth_repository.delete_refresh_token(db, data.refresh_token)
            raise UnauthorizedError("Invalid refresh token")

        if payload.get("type") != "refresh" or payload.get("sub") is None:
            raise UnauthorizedError("Invalid refresh token payload")

        user: User | None = await user_repository.get_by_id(db, UUID(payload["sub"]))
        if user is None or not user.enabled:
            raise UnauthorizedError("User not found or disabled")

        await auth_repository.delete_refresh_token(db, data.refresh_token)
        return await self._generate_tokens(db, user)

    async def logout(self, db: AsyncSession, refresh_token: str) -> None:
        """로그아웃 처리 — Revoke the refresh token."""
        await auth_repository.delete_refresh_token(db, refresh_token)

    def get_me(self, user: User) -> UserMeResponse:
        return UserMeResponse(
            id=str(user.id),
            username=user.username,
            email=user.email,
            role=user.role,
            level=user.level,
            enabled=user.enabled,
            verified=user.verified,
            last_login=user.last_login,
        )

    async def forgot_password(self, db: AsyncSession, data: ForgotPasswordRequest) -> None:
        """비밀번호 재설정 메일 요청.

        Send a reset link when the username or e-mail matches an enabled
        account. The response never reveals whether the account exists.
        """
        user: User | None = await auth_repository.get_user_by_login(db, data.username)
        if user is None or not user.enabled:
            logger.info("Password reset requested for unknown login '%s'", data.username)
            return
        token: str = create_reset_token(str(user.id), user.password_hash)
        await mail_service.send_reset_password(user, token)

    async def reset_password(self, db: AsyncSession, data: ResetPasswordRequest) -> None:
        """재설정 토큰으로 비밀번호 변경.

        Change the password with a reset token. The token is bound to the
        password hash it was issued for, so it works only once.

        Raises:
            BadRequestError: 유효하지 않거나 만료된 토큰 (Invalid, used or expired token)
        """
        try:
            payload: dict = decode_token(data.token)
        except jwt.InvalidTokenError:
            raise BadRequestError("Invalid or expired reset token")
        if payload.get("type") != "reset" or payload.get("sub") is None:
            raise BadRequestError("Invalid reset token")

        user: User | None = await user_repository.get_by_id(db, UUID(payload["sub"]))
        if user is None or payload.get("pwd") != user.password_hash[-10:]:
            raise BadRequestError("Invalid or expired reset token")

        user.password_hash = hash_password(data.password)
        user.verified = True
        await auth_repository.delete_user_refresh_tokens(db, user.id)
        await db.flush()
        logger.info("Password reset for %s", user.username)


# 싱글턴 인스턴스 — Singleton instance
auth_service: AuthService = AuthService()
