"""카탈로그 관련 SQLAlchemy ORM 모델 정의.

Catalog SQLAlchemy ORM model definitions.

Tables:
    - groups: 그룹 (Product groups with margin ranges)
    - group_margins: 그룹 마진 범위 (Margin multiplier per amount range)
    - categories: 카테고리 (Categories, each belonging to one group)
    - products: 제품 (Catalog products with a unit price)
    - global_margins: 전체 마진 범위 (Margin applied to the whole calculation)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import String, DateTime, Float, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from calcapp.database import Base
from calcapp.models.mixins import RangeMixin, find_range


class Group(Base):
    """그룹 모델 — 카테고리 묶음과 금액별 마진.

    Group model — Top-level catalog grouping. The margin applied to the
    amount of a calculation group is looked up in ``margins``.

    Attributes:
        code: 그룹 코드 (Unique group code)
        description: 설명 (Optional description)
        margins: 금액 범위별 마진 (Margin ranges ordered by minimum)
    """

    __tablename__ = "groups"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    code: Mapped[str] = mapped_column(String(30), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    margins = relationship(
        "GroupMargin",
        back_populates="group",
        cascade="all, delete-orphan",
        order_by="GroupMargin.minimum",
        lazy="selectin",
    )

    def find_margin(self, amount: float) -> "GroupMargin | None":
        return find_range(self.margins, amount)

    def find_percent(self, amount: float) -> float:
        """금액에 해당하는 마진 배수 — Margin multiplier for ``amount`` (0 when none matches)."""
        margin: GroupMargin | None = self.find_margin(amount)
        return margin.margin if margin is not None else 0.0

    def __str__(self) -> str:
        return self.code


class GroupMargin(RangeMixin, Base):
    """그룹 마진 범위 — Group margin for ``minimum <= amount < maximum``."""

    __tablename__ = "group_margins"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    group_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False)
    # 마진 배수 — Margin multiplier (1.1 = +10%)
    margin: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    group = relationship("Group", back_populates="margins")


class Category(Base):
    """카테고리 모델 — 제품 분류 (그룹 소속).

    Category model — Product classification. Every category belongs to a group;
    a group cannot be deleted while categories reference it.
    """

    __tablename__ = "categories"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    code: Mapped[str] = mapped_column(String(30), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # 소속 그룹 FK — Parent group (RESTRICT: 카테고리가 있으면 그룹 삭제 불가)
    group_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("groups.id", ondelete="RESTRICT"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    group = relationship("Group", lazy="selectin")

    def __str__(self) -> str:
        return self.code


class Product(Base):
    """제품 모델 — 카탈로그 제품 (단가 포함).

    Product model — Catalog product copied into calculation items.

    Attributes:
        description: 제품 설명 (Unique description)
        unit: 단위 (Unit label, e.g. "pce", "m2")
        price: 단가 (Unit price)
        supplier: 공급업체 (Supplier name)
        category_id: 카테고리 FK (Category foreign key)
    """

    __tablename__ = "products"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    description: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    unit: Mapped[str | None] = mapped_column(String(15), nullable=True)
    price: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    supplier: Mapped[str | None] = mapped_column(String(255), nullable=True)
    category_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    category = relationship("Category", lazy="selectin")

    def __str__(self) -> str:
        return self.description


class GlobalMargin(RangeMixin, Base):
    """전체 마진 범위 — Global margin applied to the calculation net total."""

    __tablename__ = "global_margins"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    margin: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
