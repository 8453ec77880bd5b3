"""사용자 관리 Pydantic 스키마 — User management schemas."""

from datetime import datetime
from pydantic import BaseModel, EmailStr, Field


class UserCreate(BaseModel):
    """사용자 생성 요청 스키마.

    Attributes:
        username: 로그인 아이디 (Unique username)
        email: 이메일 (Unique e-mail)
        password: 비밀번호 (Plain text, bcrypt-hashed on the server)
        role: 역할 이름 (ROLE_SUPER_ADMIN / ROLE_ADMIN / ROLE_USER)
    """

    username: str = Field(min_length=2, max_length=180)
    email: EmailStr
    password: str = Field(min_length=6)
    role: str = "ROLE_USER"
    enabled: bool = True


class UserUpdate(BaseModel):
    """사용자 수정 요청 스키마 (부분 업데이트)."""

    username: str | None = Field(default=None, min_length=2, max_length=180)
    email: EmailStr | None = None
    role: str | None = None
    enabled: bool | None = None
    verified: bool | None = None


class PasswordChange(BaseModel):
    """비밀번호 변경 — 본인은 현재 비밀번호 필요 (Own account requires the current password)."""

    current_password: str | None = None
    password: str = Field(min_length=6)


class UserMessage(BaseModel):
    """사용자에게 보내는 메시지 — E-mail message sent to a user."""

    subject: str = Field(min_length=1, max_length=255)
    message: str = Field(min_length=1)


class UserResponse(BaseModel):
    id: str
    username: str
    email: str
    role: str
    enabled: bool
    verified: bool
    last_login: datetime | None = None
    created_at: datetime | None = None
    overwrite: bool = False


# === 권한 (Rights) ===

class RightsUpdate(BaseModel):
    """권한 수정 요청 — ``{"product": ["list", "show"]}``; missing entities get no right."""

    rights: dict[str, list[str]]


class RoleRightsResponse(BaseModel):
    role: str
    default: bool  # 기본 권한 사용 여부 (The built-in defaults are in use)
    rights: dict[str, list[str]]


class UserRightsResponse(BaseModel):
    id: str
    username: str
    role: str
    enabled: bool
    overwrite: bool  # 역할 권한 대신 사용자 권한 (User rights replace the role rights)
    rights: dict[str, list[str]]
