"""고객 SQLAlchemy ORM 모델 — Customer model."""

import uuid
from datetime import date, datetime, timezone
from sqlalchemy import String, Date, DateTime, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from calcapp.database import Base


class Customer(Base):
    """고객 모델 — 주소록 항목.

    Customer model — Address book entry. Either the company or the
    first/last name must be given.
    """

    __tablename__ = "customers"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str | None] = mapped_column(String(50), nullable=True)
    first_name: Mapped[str | None] = mapped_column(String(50), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(50), nullable=True)
    company: Mapped[str | None] = mapped_column(String(255), nullable=True)
    address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    zip_code: Mapped[str | None] = mapped_column(String(10), nullable=True)
    city: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # 국가 코드 — ISO country code (default Switzerland)
    country: Mapped[str | None] = mapped_column(String(2), nullable=True, default="CH")
    email: Mapped[str | None] = mapped_column(String(100), nullable=True)
    web_site: Mapped[str | None] = mapped_column(String(100), nullable=True)
    birthday: Mapped[date | None] = mapped_column(Date, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)

    @property
    def display_name(self) -> str:
        """표시 이름 — 회사명 우선 (Company first, then the person's name)."""
        return self.company or self.full_name

    def __str__(self) -> str:
        return self.display_name
