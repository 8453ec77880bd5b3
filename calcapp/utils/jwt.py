"""JWT 토큰 생성 및 검증 유틸리티 모듈.

JWT token creation and verification utility module.

JWT Payload Structure:
    {
        "sub": "user_uuid",                   # 사용자 ID (User identifier)
        "role": "ROLE_ADMIN",                 # 역할 이름 (Role name)
        "level": 2,                           # 역할 레벨 (Role permission level)
        "exp": 1234567890,                    # 만료 시간 (Expiration)
        "type": "access"|"refresh"|"reset"    # 토큰 유형 (Token type discriminator)
    }
"""

from datetime import datetime, timedelta, timezone
from typing import Any
import jwt

from calcapp.config import settings


def _encode(data: dict[str, Any], expires: timedelta, token_type: str) -> str:
    to_encode: dict[str, Any] = data.copy()
    expire: datetime = datetime.now(timezone.utc) + expires
    to_encode.update({"exp": expire, "type": token_type})
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def create_access_token(data: dict[str, Any]) -> str:
    """JWT 액세스 토큰을 생성합니다.

    Generate a JWT access token expiring after JWT_ACCESS_TOKEN_EXPIRE_MINUTES.

    Args:
        data: JWT 페이로드 데이터 (JWT payload data, typically {"sub", "role", "level"})

    Returns:
        str: 인코딩된 JWT 문자열 (Encoded JWT token string)
    """
    return _encode(data, timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES), "access")


def create_refresh_token(data: dict[str, Any]) -> str:
    """JWT 리프레시 토큰을 생성합니다.

    Generate a JWT refresh token expiring after JWT_REFRESH_TOKEN_EXPIRE_DAYS.
    """
    return _encode(data, timedelta(days=settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS), "refresh")


def create_reset_token(user_id: str, password_hash: str) -> str:
    """비밀번호 재설정 토큰을 생성합니다.

    Generate a password reset token. The token embeds a fragment of the
    current password hash so it stops working once the password changes.

    Args:
        user_id: 사용자 UUID 문자열 (User UUID as string)
        password_hash: 현재 비밀번호 해시 (Current password hash)

    Returns:
        str: 인코딩된 재설정 토큰 (Encoded reset token)
    """
    return _encode(
        {"sub": user_id, "pwd": password_hash[-10:]},
        timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES),
        "reset",
    )


def decode_token(token: str) -> dict[str, Any]:
    """JWT 토큰을 디코딩하고 검증합니다.

    Decode and verify a JWT token string.

    Raises:
        jwt.ExpiredSignatureError: 토큰 만료 시 (When token has expired)
        jwt.InvalidTokenError: 유효하지 않은 토큰 (When token is invalid)
    """
    return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
