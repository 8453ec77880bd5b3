"""인증 라우터 — 로그인, 토큰 갱신, 로그아웃, 비밀번호 재설정.

Auth Router — Login, token refresh, logout, profile and password reset.
"""

from fastapi import APIRouter

from calcapp.api.deps import CurrentUser, DbSession
from calcapp.schemas.auth import (
    ForgotPasswordRequest,
    LoginRequest,
    RefreshRequest,
    ResetPasswordRequest,
    TokenResponse,
    UserMeResponse,
)
from calcapp.schemas.common import MessageResponse
from calcapp.services.auth_service import auth_service

router: APIRouter = APIRouter()


@router.post("/login", response_model=TokenResponse)
async def login(data: LoginRequest, db: DbSession) -> TokenResponse:
    """로그인 — 사용자명 또는 이메일 (Username or e-mail)."""
    result: TokenResponse = await auth_service.login(db, data)
    await db.commit()
    return result


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(data: RefreshRequest, db: DbSession) -> TokenResponse:
    """토큰 갱신 — Issue a new token pair from a refresh token."""
    result: TokenResponse = await auth_service.refresh_tokens(db, data)
    await db.commit()
    return result


@router.post("/logout", status_code=204)
async def logout(data: RefreshRequest, db: DbSession) -> None:
    await auth_service.logout(db, data.refresh_token)
    await db.commit()


@router.get("/me", response_model=UserMeResponse)
async def get_me(current_user: CurrentUser) -> UserMeResponse:
    return auth_service.get_me(current_user)


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(data: ForgotPasswordRequest, db: DbSession) -> MessageResponse:
    """재설정 링크 요청 — 계정 존재 여부와 무관하게 같은 응답.

    Send a reset link. The answer is the same whether or not the account exists.
    """
    await auth_service.forgot_password(db, data)
    return MessageResponse(message="If the account exists, a reset link has been sent")


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(data: ResetPasswordRequest, db: DbSession) -> MessageResponse:
    await auth_service.reset_password(db, data)
    await db.commit()
    return MessageResponse(message="The password has been changed")
