"""사용자 SQLAlchemy ORM 모델 정의.

User SQLAlchemy ORM model definition.
Roles are stored as names and mapped to permission levels:

    ROLE_SUPER_ADMIN = 1, ROLE_ADMIN = 2, ROLE_USER = 3

Tables:
    - users: 사용자 계정 (User accounts)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import JSON, String, Boolean, DateTime, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from calcapp.database import Base

ROLE_SUPER_ADMIN: str = "ROLE_SUPER_ADMIN"
ROLE_ADMIN: str = "ROLE_ADMIN"
ROLE_USER: str = "ROLE_USER"

# 역할별 권한 레벨 — 숫자가 작을수록 높은 권한 (Lower level = higher authority)
ROLE_LEVELS: dict[str, int] = {
    ROLE_SUPER_ADMIN: 1,
    ROLE_ADMIN: 2,
    ROLE_USER: 3,
}


class User(Base):
    """사용자 모델 — 시스템 사용자 계정 정보.

    User model — System user account information.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        username: 로그인 아이디 (Login username, globally unique)
        email: 이메일 (E-mail, globally unique)
        password_hash: bcrypt 해시 (Bcrypt password hash)
        role: 역할 이름 (Role name, one of ROLE_LEVELS)
        enabled: 활성 여부 (Disabled users cannot log in)
        verified: 이메일 확인 여부 (E-mail verified flag)
        last_login: 마지막 로그인 일시 (Last successful login)
        rights: 사용자별 권한 마스크 (Per-entity rights, used when ``overwrite`` is set)
        overwrite: 역할 기본 권한 대신 사용 (Use ``rights`` instead of the role defaults)
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 로그인 아이디 — Login username (unique)
    username: Mapped[str] = mapped_column(String(180), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(180), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    # 역할 이름 — Role name (ROLE_SUPER_ADMIN / ROLE_ADMIN / ROLE_USER)
    role: Mapped[str] = mapped_column(String(30), nullable=False, default=ROLE_USER)
    enabled: Mapped[bool] = mapped_column(Boolean, default=True)
    verified: Mapped[bool] = mapped_column(Boolean, default=False)
    last_login: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # 엔티티별 권한 — One bitmask per entity, see calcapp.models.rights
    rights: Mapped[list[int] | None] = mapped_column(JSON, nullable=True)
    overwrite: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    refresh_tokens = relationship("RefreshToken", back_populates="user", cascade="all, delete-orphan")

    @property
    def level(self) -> int:
        """역할 권한 레벨 — Permission level of the role (unknown roles get the lowest)."""
        return ROLE_LEVELS.get(self.role, ROLE_LEVELS[ROLE_USER])

    @property
    def is_super_admin(self) -> bool:
        return self.role == ROLE_SUPER_ADMIN

    def __str__(self) -> str:
        return self.username
