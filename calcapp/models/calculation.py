"""계산서 관련 SQLAlchemy ORM 모델 정의.

Calculation SQLAlchemy ORM model definitions.

A calculation is a tree: groups → categories → items. Group and category
codes are copied from the catalog so that the document stays readable when
the catalog changes. Amounts are kept on the rows and refreshed by
``CalculationGroup.update()`` / ``CalculationService.update_total()``.

Tables:
    - calculation_states: 상태 (Workflow states, e.g. "Offer", "Accepted")
    - calculations: 계산서 (Calculation header with cached totals)
    - calculation_groups: 계산서 그룹 (Groups with amount and margin)
    - calculation_categories: 계산서 카테고리 (Categories with amount)
    - calculation_items: 계산서 항목 (Line items: price × quantity)
"""

import re
import uuid
from datetime import date, datetime, timezone
from datetime import date as date_type
from sqlalchemy import String, Boolean, Date, DateTime, Float, Integer, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from calcapp.database import Base
from calcapp.utils.amounts import floor_amount, is_float_zero, safe_divide

_DIGITS = re.compile(r"(\d+)")


def natural_key(value: str | None) -> list:
    """자연 정렬 키 (대소문자 무시) — Case-insensitive natural sort key ("A2" < "A10")."""
    return [int(part) if part.isdigit() else part.casefold() for part in _DIGITS.split(value or "")]


class CalculationState(Base):
    """계산서 상태 모델.

    Calculation state model. Only calculations in an ``editable`` state can
    be modified; a state cannot be deleted while calculations reference it.

    Attributes:
        code: 상태 코드 (Unique state code)
        description: 설명 (Optional description)
        editable: 편집 가능 여부 (Whether calculations in this state can be edited)
        color: 표시 색상 (Display color, hex)
    """

    __tablename__ = "calculation_states"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    code: Mapped[str] = mapped_column(String(30), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)
    editable: Mapped[bool] = mapped_column(Boolean, default=True)
    color: Mapped[str] = mapped_column(String(10), default="#000000")

    def __str__(self) -> str:
        return self.code


class Calculation(Base):
    """계산서 모델 — 견적 헤더와 캐시된 합계.

    Calculation model — Quotation header. ``items_total``, ``global_margin``
    and ``overall_total`` are cached results of the last total update.

    Attributes:
        date: 계산서 일자 (Calculation date)
        customer: 고객명 (Customer label)
        description: 설명 (Description)
        state_id: 상태 FK (Workflow state)
        user_margin: 사용자 마진, 0.1 = +10% (Additional user margin fraction)
        global_margin: 전체 마진 배수 (Global margin multiplier)
        items_total: 항목 합계 (Sum of item totals)
        overall_total: 최종 합계 (Overall total incl. all margins)
        created_by / updated_by: 작성자/수정자 username
    """

    __tablename__ = "calculations"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    date: Mapped[date_type] = mapped_column(Date, nullable=False, default=date_type.today)
    customer: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    state_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("calculation_states.id", ondelete="RESTRICT"), nullable=False)
    user_margin: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    global_margin: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    items_total: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    overall_total: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    created_by: Mapped[str | None] = mapped_column(String(180), nullable=True)
    updated_by: Mapped[str | None] = mapped_column(String(180), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    # 수정 일시 — persistence 리스너가 갱신 (Maintained by the persistence listener)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    state = relationship("CalculationState", lazy="selectin")
    groups = relationship(
        "CalculationGroup",
        back_populates="calculation",
        cascade="all, delete-orphan",
        order_by="CalculationGroup.position",
        lazy="selectin",
    )

    # -------------------------------------------------------------------
    # 집계 — Aggregates
    # -------------------------------------------------------------------
    @property
    def is_empty(self) -> bool:
        return len(self.groups) == 0

    @property
    def items(self) -> list["CalculationItem"]:
        return [item for group in self.groups for category in group.categories for item in category.items]

    @property
    def categories(self) -> list["CalculationCategory"]:
        return [category for group in self.groups for category in group.categories]

    @property
    def lines_count(self) -> int:
        return len(self.items)

    @property
    def categories_count(self) -> int:
        return len(self.categories)

    @property
    def groups_amount(self) -> float:
        return sum(group.amount for group in self.groups)

    @property
    def groups_margin_amount(self) -> float:
        return sum(group.margin_amount for group in self.groups)

    @property
    def groups_margin(self) -> float:
        """그룹 평균 마진 배수 — Average margin multiplier of the groups."""
        return 1.0 + safe_divide(self.groups_margin_amount, self.groups_amount)

    @property
    def groups_total(self) -> float:
        return sum(group.total for group in self.groups)

    @property
    def global_margin_amount(self) -> float:
        return self.groups_total * (self.global_margin - 1.0)

    @property
    def total_net(self) -> float:
        return self.groups_total + self.global_margin_amount

    @property
    def user_margin_amount(self) -> float:
        return self.total_net * self.user_margin

    @property
    def overall_margin(self) -> float:
        """전체 마진 배수 (내림) — floor(overall_total / items_total), 0 when empty."""
        return floor_amount(safe_divide(self.overall_total, self.items_total))

    @property
    def overall_margin_amount(self) -> float:
        return self.overall_total - self.items_total

    def is_margin_below(self, min_margin: float) -> bool:
        """최소 마진 미달 여부 — Empty calculations are never below the minimum."""
        if self.is_empty or is_float_zero(self.overall_total):
            return False
        return self.overall_margin < min_margin

    @property
    def is_editable(self) -> bool:
        """편집 가능 여부 — New calculations are editable; otherwise the state decides."""
        if self.id is None:
            return True
        return self.state is not None and self.state.editable

    # -------------------------------------------------------------------
    # 편집 — Editing
    # -------------------------------------------------------------------
    def find_group(self, group) -> "CalculationGroup | None":
        return next((g for g in self.groups if g.matches(group)), None)

    def add_product(self, product, quantity: float = 1.0) -> "CalculationItem":
        """제품을 항목으로 추가합니다.

        Append a product as a new item. The calculation group and category
        matching the product's category are found or created.

        Args:
            product: 추가할 제품 (Catalog product, with category and group loaded)
            quantity: 수량 (Quantity)

        Returns:
            CalculationItem: 추가된 항목 (The new item)
        """
        return self.add_item(product.category, product.description, product.unit, product.price, quantity)

    def add_item(
        self,
        category,
        description: str,
        unit: str | None,
        price: float,
        quantity: float,
    ) -> "CalculationItem":
        """카테고리 아래에 항목 추가 — Append an item under a catalog category (and its group)."""
        group = category.group

        calc_group: CalculationGroup | None = self.find_group(group)
        if calc_group is None:
            calc_group = CalculationGroup.create(group, position=len(self.groups))
            self.groups.append(calc_group)

        calc_category: CalculationCategory | None = calc_group.find_category(category)
        if calc_category is None:
            calc_category = CalculationCategory.create(category, position=len(calc_group.categories))
            calc_group.categories.append(calc_category)

        item: CalculationItem = CalculationItem(
            description=description,
            unit=unit,
            price=price,
            quantity=quantity,
            position=len(calc_category.items),
        )
        calc_category.items.append(item)
        calc_category.update()
        return item

    def find_duplicate_items(self) -> list["CalculationItem"]:
        """중복 항목 — Items whose description (case-insensitive) appears more than once."""
        counts: dict[str, int] = {}
        for item in self.items:
            key: str = item.duplicate_key
            counts[key] = counts.get(key, 0) + 1
        return [item for item in self.items if counts[item.duplicate_key] > 1]

    def remove_duplicate_items(self) -> int:
        """첫 항목만 남기고 중복 항목을 삭제 — Keep the first of each description; return the removed count."""
        seen: set[str] = set()
        removed: int = 0
        for category in self.categories:
            for item in list(category.items):
                key: str = item.duplicate_key
                if key in seen:
                    category.items.remove(item)
                    removed += 1
                else:
                    seen.add(key)
        if removed:
            self._prune()
        return removed

    def find_empty_items(self) -> list["CalculationItem"]:
        return [item for item in self.items if item.is_empty]

    def remove_empty_items(self) -> int:
        """가격 또는 수량이 0인 항목을 삭제 — Remove items with a zero price or quantity."""
        removed: int = 0
        for category in self.categories:
            for item in list(category.items):
                if item.is_empty:
                    category.items.remove(item)
                    removed += 1
        if removed:
            self._prune()
        return removed

    def _prune(self) -> None:
        """빈 카테고리/그룹 삭제 및 위치 재정렬 — Drop empty categories and groups, renumber."""
        for group in list(self.groups):
            for category in list(group.categories):
                if not category.items:
                    group.categories.remove(category)
                else:
                    category.update()
            if not group.categories:
                self.groups.remove(group)
        self.update_positions()

    def update_positions(self) -> bool:
        """위치 재번호 — Renumber positions in list order; return whether one changed."""
        changed: bool = False
        for group_index, group in enumerate(self.groups):
            changed |= group.position != group_index
            group.position = group_index
            for category_index, category in enumerate(group.categories):
                changed |= category.position != category_index
                category.position = category_index
                for item_index, item in enumerate(category.items):
                    changed |= item.position != item_index
                    item.position = item_index
        return changed

    def sort(self) -> bool:
        """정렬 — Order groups and categories by code, items by description (natural order)."""
        self.groups.sort(key=lambda g: natural_key(g.code))
        for group in self.groups:
            group.categories.sort(key=lambda c: natural_key(c.code))
            for category in group.categories:
                category.items.sort(key=lambda i: natural_key(i.description))
        return self.update_positions()

    def update_codes(self) -> int:
        """카탈로그 코드 재복사 — Re-copy group/category codes; return the changed count."""
        changed: int = 0
        for group in self.groups:
            if group.group is not None and group.code != group.group.code:
                group.code = group.group.code
                changed += 1
            for category in group.categories:
                if category.category is not None and category.code != category.category.code:
                    category.code = category.category.code
                    changed += 1
        return changed

    def clone(self, state: CalculationState | None = None, description: str | None = None) -> "Calculation":
        """계산서 복제 — Deep copy with today's date, optionally a new state and description."""
        copy = Calculation(
            date=date.today(),
            customer=self.customer,
            description=description or self.description,
            state=state or self.state,
            user_margin=self.user_margin,
            global_margin=self.global_margin,
            items_total=self.items_total,
            overall_total=self.overall_total,
            groups=[group.clone() for group in self.groups],
        )
        return copy

    def __str__(self) -> str:
        return f"{self.id}"


class CalculationGroup(Base):
    """계산서 그룹 — 그룹 금액과 적용 마진."""

    __tablename__ = "calculation_groups"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    calculation_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("calculations.id", ondelete="CASCADE"), nullable=False)
    group_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("groups.id", ondelete="RESTRICT"), nullable=False)
    code: Mapped[str] = mapped_column(String(30), nullable=False)
    amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    # 마진 배수 — Margin multiplier looked up from the group's ranges
    margin: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    position: Mapped[int] = mapped_column(Integer, default=0)

    calculation = relationship("Calculation", back_populates="groups")
    group = relationship("Group", lazy="selectin")
    categories = relationship(
        "CalculationCategory",
        back_populates="group",
        cascade="all, delete-orphan",
        order_by="CalculationCategory.position",
        lazy="selectin",
    )

    @classmethod
    def create(cls, group, position: int = 0) -> "CalculationGroup":
        return cls(group=group, code=group.code, amount=0.0, margin=0.0, position=position, categories=[])

    def matches(self, group) -> bool:
        return self.group is group or (self.group_id is not None and self.group_id == group.id)

    def find_category(self, category) -> "CalculationCategory | None":
        return next((c for c in self.categories if c.matches(category)), None)

    @property
    def margin_amount(self) -> float:
        return self.amount * (self.margin - 1.0)

    @property
    def total(self) -> float:
        return self.amount * self.margin

    def update(self) -> "CalculationGroup":
        """금액과 마진 갱신 — Refresh categories, the amount and the margin."""
        amount: float = 0.0
        for category in self.categories:
            amount += category.update().amount
        self.amount = amount
        self.margin = self.group.find_percent(amount) if self.group is not None else 0.0
        return self

    def clone(self) -> "CalculationGroup":
        return CalculationGroup(
            group=self.group,
            code=self.code,
            amount=self.amount,
            margin=self.margin,
            position=self.position,
            categories=[category.clone() for category in self.categories],
        )

    def __str__(self) -> str:
        return self.code


class CalculationCategory(Base):
    """계산서 카테고리 — 항목 합계."""

    __tablename__ = "calculation_categories"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    group_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("calculation_groups.id", ondelete="CASCADE"), nullable=False)
    category_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False)
    code: Mapped[str] = mapped_column(String(30), nullable=False)
    amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    position: Mapped[int] = mapped_column(Integer, default=0)

    group = relationship("CalculationGroup", back_populates="categories")
    category = relationship("Category", lazy="selectin")
    items = relationship(
        "CalculationItem",
        back_populates="category",
        cascade="all, delete-orphan",
        order_by="CalculationItem.position",
        lazy="selectin",
    )

    @classmethod
    def create(cls, category, position: int = 0) -> "CalculationCategory":
        return cls(category=category, code=category.code, amount=0.0, position=position, items=[])

    def matches(self, category) -> bool:
        return self.category is category or (self.category_id is not None and self.category_id == category.id)

    def update(self) -> "CalculationCategory":
        self.amount = sum(item.total for item in self.items)
        return self

    def clone(self) -> "CalculationCategory":
        return CalculationCategory(
            category=self.category,
            code=self.code,
            amount=self.amount,
            position=self.position,
            items=[item.clone() for item in self.items],
        )

    def __str__(self) -> str:
        return self.code


class CalculationItem(Base):
    """계산서 항목 — 단가 × 수량."""

    __tablename__ = "calculation_items"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    category_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("calculation_categories.id", ondelete="CASCADE"), nullable=False)
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    unit: Mapped[str | None] = mapped_column(String(15), nullable=True)
    price: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    quantity: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    position: Mapped[int] = mapped_column(Integer, default=0)

    category = relationship("CalculationCategory", back_populates="items")

    @property
    def total(self) -> float:
        return self.price * self.quantity

    @property
    def is_empty(self) -> bool:
        return is_float_zero(self.price) or is_float_zero(self.quantity)

    @property
    def duplicate_key(self) -> str:
        return (self.description or "").strip().lower()

    def clone(self) -> "CalculationItem":
        return CalculationItem(
            description=self.description,
            unit=self.unit,
            price=self.price,
            quantity=self.quantity,
            position=self.position,
        )

    def __str__(self) -> str:
        return self.description
