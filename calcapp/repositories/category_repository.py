"""카테고리 레포지토리 — Category queries."""

from typing import Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from calcapp.models.calculation import CalculationCategory
from calcapp.models.catalog import Category, Group, Product
from calcapp.models.task import Task
from calcapp.repositories.base import BaseRepository


class CategoryRepository(BaseRepository[Category]):
    """카테고리 레포지토리 — Category repository."""

    def __init__(self) -> None:
        super().__init__(Category)

    async def list_ordered(self, db: AsyncSession, group_id: UUID | None = None) -> Sequence[Category]:
        """그룹 코드, 카테고리 코드 순 목록 — Categories ordered by group code then code."""
        query = select(Category).join(Group, Category.group_id == Group.id).order_by(Group.code, Category.code)
        if group_id is not None:
            query = query.where(Category.group_id == group_id)
        result = await db.execute(query)
        return result.scalars().all()

    async def count_references(self, db: AsyncSession, category_id: UUID) -> int:
        """카테고리를 참조하는 제품/작업/계산서 수 — Products, tasks and calculation rows using it."""
        total: int = 0
        for model, column in (
            (Product, Product.category_id),
            (Task, Task.category_id),
            (CalculationCategory, CalculationCategory.category_id),
        ):
            query = select(func.count()).select_from(model).where(column == category_id)
            total += (await db.execute(query)).scalar() or 0
        return total


# 싱글턴 인스턴스 — Singleton instance
category_repository: CategoryRepository = CategoryRepository()
