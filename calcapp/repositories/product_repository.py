"""제품 레포지토리 — Product queries."""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from calcapp.models.catalog import Category, Group, Product
from calcapp.repositories.base import BaseRepository


class ProductRepository(BaseRepository[Product]):
    """제품 레포지토리 — Product repository."""

    def __init__(self) -> None:
        super().__init__(Product)

    def build_list_query(
        self,
        category_id: UUID | None = None,
        group_id: UUID | None = None,
        search: str | None = None,
    ) -> Select:
        """목록 쿼리 — Products ordered by group, category and description."""
        query: Select = (
            select(Product)
            .join(Category, Product.category_id == Category.id)
            .join(Group, Category.group_id == Group.id)
            .order_by(Group.code, Category.code, Product.description)
        )
        if category_id is not None:
            query = query.where(Product.category_id == category_id)
        if group_id is not None:
            query = query.where(Category.group_id == group_id)
        if search:
            pattern: str = f"%{search}%"
            query = query.where(
                or_(
                    Product.description.ilike(pattern),
                    Product.supplier.ilike(pattern),
                    Product.unit.ilike(pattern),
                    Category.code.ilike(pattern),
                )
            )
        return query

    async def list_products(
        self,
        db: AsyncSession,
        category_id: UUID | None = None,
        search: str | None = None,
    ) -> Sequence[Product]:
        result = await db.execute(self.build_list_query(category_id=category_id, search=search))
        return result.scalars().all()

    async def get_by_description(self, db: AsyncSession, description: str) -> Product | None:
        query: Select = select(Product).where(func.lower(Product.description) == description.lower())
        result = await db.execute(query)
        return result.scalar_one_or_none()


# 싱글턴 인스턴스 — Singleton instance
product_repository: ProductRepository = ProductRepository()
