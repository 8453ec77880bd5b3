"""애플리케이션 파라미터 모델 — Application property (name/value) model."""

import uuid
from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from calcapp.database import Base

# 파라미터 이름 — Known property names
PROPERTY_MIN_MARGIN: str = "min_margin"
PROPERTY_DEFAULT_STATE: str = "default_state_id"
PROPERTY_DEFAULT_CATEGORY: str = "default_category_id"
PROPERTY_CUSTOMER_NAME: str = "customer_name"
PROPERTY_CUSTOMER_EMAIL: str = "customer_email"
PROPERTY_CUSTOMER_URL: str = "customer_url"
# 역할 기본 권한 (JSON) — Role rights, removed when equal to the built-in defaults
PROPERTY_ADMIN_RIGHTS: str = "admin_rights"
PROPERTY_USER_RIGHTS: str = "user_rights"


class Property(Base):
    """애플리케이션 파라미터 — Application parameter stored as text."""

    __tablename__ = "properties"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    value: Mapped[str | None] = mapped_column(String(255), nullable=True)
