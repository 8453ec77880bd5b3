"""인증 관련 Pydantic 요청/응답 스키마 정의.

Authentication-related Pydantic request/response schema definitions.
Covers login, token issuance/refresh, password reset and the current user.
"""

from datetime import datetime
from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """로그인 요청 스키마.

    Attributes:
        username: 사용자명 또는 이메일 (Username or e-mail)
        password: 비밀번호 (Plain text password, verified against bcrypt hash)
    """

    username: str
    password: str


class TokenResponse(BaseModel):
    """JWT 토큰 발급 응답 스키마.

    Attributes:
        access_token: JWT 액세스 토큰 (Short-lived access token)
        refresh_token: JWT 리프레시 토큰 (Long-lived refresh token)
        token_type: 토큰 유형 (Always "bearer")
    """

    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class RefreshRequest(BaseModel):
    refresh_token: str  # 기존 리프레시 토큰 (Current refresh token)


class ForgotPasswordRequest(BaseModel):
    """비밀번호 재설정 메일 요청 — Ask for a reset link by username or e-mail."""

    username: str


class ResetPasswordRequest(BaseModel):
    """비밀번호 재설정 — Set a new password with a reset token."""

    token: str
    password: str = Field(min_length=6)


class UserMeResponse(BaseModel):
    """현재 사용자 정보 응답 스키마 (GET /me).

    Attributes:
        role: 역할 이름 (Role name)
        level: 권한 레벨 (Permission level, 1 = super admin)
    """

    id: str
    username: str
    email: str
    role: str
    level: int
    enabled: bool
    verified: bool
    last_login: datetime | None = None
