"""계산서 레포지토리 — 목록, 관리 작업, 통계 쿼리.

Calculation Repository — List filters, admin job selections, chart
aggregates and the flat item rows used by the pivot table.
"""

from datetime import date
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import Select, and_, extract, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from calcapp.models.calculation import (
    Calculation,
    CalculationCategory,
    CalculationGroup,
    CalculationItem,
    CalculationState,
)
from calcapp.repositories.base import BaseRepository


class CalculationRepository(BaseRepository[Calculation]):
    """계산서 레포지토리 — Calculation repository (the tree is eager-loaded)."""

    def __init__(self) -> None:
        super().__init__(Calculation)

    def build_list_query(
        self,
        state_id: UUID | None = None,
        search: str | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        below_margin: float | None = None,
        ids: Sequence[UUID] | None = None,
    ) -> Select:
        """목록 쿼리 (최신순) — Filtered calculations, newest first.

        Args:
            state_id: 상태 필터 (State filter)
            search: 고객/설명/생성자 검색어 (Text matched against customer, description, creator)
            date_from / date_to: 일자 범위, 양끝 포함 (Inclusive date range)
            below_margin: 이 마진 미만만 (Only calculations whose overall margin is below this value)
            ids: ID 제한 (Restrict to these ids)
        """
        query: Select = select(Calculation).order_by(Calculation.date.desc(), Calculation.created_at.desc())
        if state_id is not None:
            query = query.where(Calculation.state_id == state_id)
        if search:
            pattern: str = f"%{search}%"
            query = query.where(
                or_(
                    Calculation.customer.ilike(pattern),
                    Calculation.description.ilike(pattern),
                    Calculation.created_by.ilike(pattern),
                )
            )
        if date_from is not None:
            query = query.where(Calculation.date >= date_from)
        if date_to is not None:
            query = query.where(Calculation.date <= date_to)
        if below_margin is not None:
            query = query.where(self.below_margin_clause(below_margin))
        if ids is not None:
            query = query.where(Calculation.id.in_(list(ids)))
        return query

    @staticmethod
    def below_margin_clause(min_margin: float):
        """최소 마진 미달 조건 — overall_total / items_total < min_margin for non-empty totals."""
        return and_(
            Calculation.items_total != 0,
            Calculation.overall_total != 0,
            (Calculation.overall_total / Calculation.items_total) < min_margin,
        )

    async def list_calculations(self, db: AsyncSession, **filters: Any) -> Sequence[Calculation]:
        result = await db.execute(self.build_list_query(**filters))
        return result.scalars().unique().all()

    async def list_for_update(
        self,
        db: AsyncSession,
        state_ids: Sequence[UUID],
        date_from: date | None,
        date_to: date | None,
    ) -> Sequence[Calculation]:
        """일괄 갱신 대상 — Calculations in the states (every state when empty), inside the inclusive date range."""
        query: Select = select(Calculation).order_by(Calculation.date, Calculation.created_at)
        if state_ids:
            query = query.where(Calculation.state_id.in_(list(state_ids)))
        if date_from is not None:
            query = query.where(Calculation.date >= date_from)
        if date_to is not None:
            query = query.where(Calculation.date <= date_to)
        result = await db.execute(query)
        return result.scalars().unique().all()

    async def list_for_archive(
        self,
        db: AsyncSession,
        state_ids: Sequence[UUID],
        target_id: UUID,
        until: date,
    ) -> Sequence[Calculation]:
        """보관 대상 — Calculations in the source states dated on or before ``until``."""
        query: Select = (
            select(Calculation)
            .where(
                Calculation.state_id.in_(list(state_ids)),
                Calculation.state_id != target_id,
                Calculation.date <= until,
            )
            .order_by(Calculation.date, Calculation.created_at)
        )
        result = await db.execute(query)
        return result.scalars().unique().all()

    async def get_date_range(self, db: AsyncSession, state_ids: Sequence[UUID]) -> tuple[date | None, date | None]:
        """상태별 최소/최대 일자 — Oldest and newest dates of calculations in the states."""
        query = select(func.min(Calculation.date), func.max(Calculation.date)).where(
            Calculation.state_id.in_(list(state_ids))
        )
        row = (await db.execute(query)).one()
        return row[0], row[1]

    async def get_duplicate_item_ids(self, db: AsyncSession) -> list[UUID]:
        """중복 항목이 있는 계산서 ID — Calculations holding the same item description twice."""
        key = func.lower(func.trim(CalculationItem.description))
        query = (
            select(CalculationGroup.calculation_id)
            .join(CalculationCategory, CalculationCategory.group_id == CalculationGroup.id)
            .join(CalculationItem, CalculationItem.category_id == CalculationCategory.id)
            .group_by(CalculationGroup.calculation_id, key)
            .having(func.count() > 1)
        )
        return list(dict.fromkeys((await db.execute(query)).scalars().all()))

    async def get_empty_item_ids(self, db: AsyncSession) -> list[UUID]:
        """빈 항목이 있는 계산서 ID — Calculations holding an item with a zero price or quantity."""
        query = (
            select(CalculationGroup.calculation_id)
            .join(CalculationCategory, CalculationCategory.group_id == CalculationGroup.id)
            .join(CalculationItem, CalculationItem.category_id == CalculationCategory.id)
            .where(or_(CalculationItem.price == 0, CalculationItem.quantity == 0))
            .distinct()
        )
        return list((await db.execute(query)).scalars().all())

    async def get_pivot_rows(self, db: AsyncSession) -> list[dict[str, Any]]:
        """피벗 테이블용 평면 항목 행 — One row per non-empty calculation item.

        ``item_overall`` is the item total multiplied by its group margin.
        """
        query = (
            select(
                Calculation.id.label("calculation_id"),
                Calculation.date.label("calculation_date"),
                Calculation.overall_total.label("calculation_overall_total"),
                Calculation.items_total.label("calculation_items_total"),
                CalculationState.code.label("calculation_state"),
                CalculationGroup.code.label("item_group"),
                CalculationGroup.margin.label("item_group_margin"),
                CalculationCategory.code.label("item_category"),
                CalculationItem.description.label("item_description"),
                CalculationItem.price.label("item_price"),
                CalculationItem.quantity.label("item_quantity"),
            )
            .join(CalculationState, Calculation.state_id == CalculationState.id)
            .join(CalculationGroup, CalculationGroup.calculation_id == Calculation.id)
            .join(CalculationCategory, CalculationCategory.group_id == CalculationGroup.id)
            .join(CalculationItem, CalculationItem.category_id == CalculationCategory.id)
            .where(CalculationItem.price != 0, CalculationItem.quantity != 0)
            .order_by(Calculation.date, CalculationGroup.code, CalculationCategory.code)
        )
        rows: list[dict[str, Any]] = []
        for row in (await db.execute(query)).mappings().all():
            data: dict[str, Any] = dict(row)
            item_total: float = data["item_price"] * data["item_quantity"]
            data["item_total"] = item_total
            data["item_overall"] = item_total * data["item_group_margin"]
            data["calculation_overall_margin"] = (
                data["calculation_overall_total"] / data["calculation_items_total"]
                if data["calculation_items_total"]
                else 0.0
            )
            rows.append(data)
        return rows

    async def get_by_month(self, db: AsyncSession, date_from: date) -> list[dict[str, Any]]:
        """월별 집계 — Count and totals per (year, month) from ``date_from``."""
        year = extract("year", Calculation.date)
        month = extract("month", Calculation.date)
        query = (
            select(
                year.label("year"),
                month.label("month"),
                func.count().label("count"),
                func.coalesce(func.sum(Calculation.items_total), 0.0).label("items"),
                func.coalesce(func.sum(Calculation.overall_total), 0.0).label("total"),
            )
            .where(Calculation.date >= date_from)
            .group_by(year, month)
            .order_by(year, month)
        )
        return [dict(row) for row in (await db.execute(query)).mappings().all()]

    async def get_by_state(self, db: AsyncSession) -> list[dict[str, Any]]:
        """상태별 집계 — Count and totals per state."""
        query = (
            select(
                CalculationState.id.label("id"),
                CalculationState.code.label("code"),
                CalculationState.editable.label("editable"),
                CalculationState.color.label("color"),
                func.count(Calculation.id).label("count"),
                func.coalesce(func.sum(Calculation.items_total), 0.0).label("items"),
                func.coalesce(func.sum(Calculation.overall_total), 0.0).label("total"),
            )
            .join(Calculation, Calculation.state_id == CalculationState.id)
            .group_by(CalculationState.id, CalculationState.code, CalculationState.editable, CalculationState.color)
            .order_by(CalculationState.code)
        )
        return [dict(row) for row in (await db.execute(query)).mappings().all()]


# 싱글턴 인스턴스 — Singleton instance
calculation_repository: CalculationRepository = CalculationRepository()
