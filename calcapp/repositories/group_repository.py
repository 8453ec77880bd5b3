"""그룹 레포지토리 — Group and group margin queries."""

from typing import Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from calcapp.models.calculation import CalculationGroup
from calcapp.models.catalog import Category, Group
from calcapp.repositories.base import BaseRepository


class GroupRepository(BaseRepository[Group]):
    """그룹 레포지토리 — Group repository (margins are eager-loaded)."""

    def __init__(self) -> None:
        super().__init__(Group)

    async def list_ordered(self, db: AsyncSession) -> Sequence[Group]:
        result = await db.execute(select(Group).order_by(Group.code))
        return result.scalars().all()

    async def count_categories(self, db: AsyncSession, group_id: UUID) -> int:
        """그룹을 참조하는 카테고리 수 — Categories referencing the group."""
        query = select(func.count()).select_from(Category).where(Category.group_id == group_id)
        return (await db.execute(query)).scalar() or 0

    async def count_calculations(self, db: AsyncSession, group_id: UUID) -> int:
        """그룹을 사용하는 계산서 그룹 수 — Calculation groups referencing the group."""
        query = select(func.count()).select_from(CalculationGroup).where(CalculationGroup.group_id == group_id)
        return (await db.execute(query)).scalar() or 0


# 싱글턴 인스턴스 — Singleton instance
group_repository: GroupRepository = GroupRepository()
