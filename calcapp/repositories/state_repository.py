"""계산서 상태 레포지토리 — Calculation state queries."""

from typing import Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from calcapp.models.calculation import Calculation, CalculationState
from calcapp.repositories.base import BaseRepository


class StateRepository(BaseRepository[CalculationState]):
    """계산서 상태 레포지토리 — Calculation state repository."""

    def __init__(self) -> None:
        super().__init__(CalculationState)

    async def list_ordered(self, db: AsyncSession, editable: bool | None = None) -> Sequence[CalculationState]:
        query = select(CalculationState).order_by(CalculationState.code)
        if editable is not None:
            query = query.where(CalculationState.editable == editable)
        result = await db.execute(query)
        return result.scalars().all()

    async def get_editable_ids(self, db: AsyncSession) -> list[UUID]:
        result = await db.execute(select(CalculationState.id).where(CalculationState.editable.is_(True)))
        return list(result.scalars().all())

    async def count_calculations(self, db: AsyncSession, state_id: UUID) -> int:
        query = select(func.count()).select_from(Calculation).where(Calculation.state_id == state_id)
        return (await db.execute(query)).scalar() or 0

    async def get_calculation_counts(self, db: AsyncSession) -> dict[UUID, int]:
        """상태별 계산서 수 — Number of calculations per state id."""
        query = select(Calculation.state_id, func.count()).group_by(Calculation.state_id)
        return {state_id: count for state_id, count in (await db.execute(query)).all()}


# 싱글턴 인스턴스 — Singleton instance
state_repository: StateRepository = StateRepository()
