"""작업 및 디지털 프린트 관련 SQLAlchemy ORM 모델 정의.

Task and digital print SQLAlchemy ORM model definitions.
Both are price tables whose values depend on the ordered quantity.

Tables:
    - tasks / task_items / task_item_margins: 작업 (Tasks with per-item quantity ranges)
    - digi_prints / digi_print_items: 디지털 프린트 (Digital print formats with price ranges)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import String, DateTime, Float, Integer, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from calcapp.database import Base
from calcapp.models.mixins import RangeMixin, find_range


class Task(Base):
    """작업 모델 — 수량에 따라 단가가 달라지는 작업.

    Task model — A job whose item values depend on the quantity.
    """

    __tablename__ = "tasks"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    unit: Mapped[str | None] = mapped_column(String(15), nullable=True)
    supplier: Mapped[str | None] = mapped_column(String(255), nullable=True)
    category_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    category = relationship("Category", lazy="selectin")
    items = relationship(
        "TaskItem",
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="TaskItem.position",
        lazy="selectin",
    )

    def __str__(self) -> str:
        return self.name


class TaskItem(Base):
    """작업 항목 — 수량 범위별 값.

    Task item; ``find_value`` returns the value of the range containing the quantity.
    """

    __tablename__ = "task_items"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    task_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    position: Mapped[int] = mapped_column(Integer, default=0)

    __table_args__ = (
        UniqueConstraint("task_id", "name", name="uq_task_item_name"),
    )

    task = relationship("Task", back_populates="items")
    margins = relationship(
        "TaskItemMargin",
        back_populates="task_item",
        cascade="all, delete-orphan",
        order_by="TaskItemMargin.minimum",
        lazy="selectin",
    )

    def find_value(self, quantity: float) -> float:
        margin: TaskItemMargin | None = find_range(self.margins, quantity)
        return margin.value if margin is not None else 0.0


class TaskItemMargin(RangeMixin, Base):
    __tablename__ = "task_item_margins"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    task_item_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("task_items.id", ondelete="CASCADE"), nullable=False)
    value: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    task_item = relationship("TaskItem", back_populates="margins")


# 디지털 프린트 항목 유형 — Digital print item types
DIGI_PRINT_PRICE: str = "price"
DIGI_PRINT_BACKLIT: str = "backlit"
DIGI_PRINT_REPLICATING: str = "replicating"


class DigiPrint(Base):
    """디지털 프린트 모델 — 포맷별 가격표.

    Digital print model — Price table per print format (e.g. "A3").
    """

    __tablename__ = "digi_prints"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    format: Mapped[str] = mapped_column(String(30), unique=True, nullable=False)
    width: Mapped[int] = mapped_column(Integer, default=0)
    height: Mapped[int] = mapped_column(Integer, default=0)

    items = relationship(
        "DigiPrintItem",
        back_populates="digi_print",
        cascade="all, delete-orphan",
        order_by="DigiPrintItem.minimum",
        lazy="selectin",
    )

    def items_of_type(self, item_type: str) -> list["DigiPrintItem"]:
        return [item for item in self.items if item.type == item_type]

    def find_amount(self, item_type: str, quantity: float) -> float:
        """유형/수량에 해당하는 단가 — Unit amount for a type and quantity (0 when none)."""
        item: DigiPrintItem | None = find_range(self.items_of_type(item_type), quantity)
        return item.amount if item is not None else 0.0

    def __str__(self) -> str:
        return self.format


class DigiPrintItem(RangeMixin, Base):
    __tablename__ = "digi_print_items"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    digi_print_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("digi_prints.id", ondelete="CASCADE"), nullable=False)
    # 유형 — price / backlit / replicating
    type: Mapped[str] = mapped_column(String(20), nullable=False, default=DIGI_PRINT_PRICE)
    amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    digi_print = relationship("DigiPrint", back_populates="items")
