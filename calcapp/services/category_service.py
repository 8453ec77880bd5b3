"""카테고리 서비스 — Category CRUD business logic."""

from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from calcapp.models.catalog import Category
from calcapp.repositories.category_repository import category_repository
from calcapp.repositories.group_repository import group_repository
from calcapp.schemas.catalog import CategoryCreate, CategoryResponse, CategoryUpdate
from calcapp.utils.exceptions import BadRequestError, DuplicateError, NotFoundError


class CategoryService:
    """카테고리 관련 비즈니스 로직을 처리하는 서비스.

    Service handling category business logic. Categories referenced by
    products, tasks or calculations cannot be deleted.
    """

    def _to_response(self, category: Category) -> CategoryResponse:
        return CategoryResponse(
            id=str(category.id),
            code=category.code,
            description=category.description,
            group_id=str(category.group_id),
            group_code=category.group.code,
        )

    async def get_model(self, db: AsyncSession, category_id: UUID) -> Category:
        category: Category | None = await category_repository.get_by_id(db, category_id)
        if category is None:
            raise NotFoundError("Category not found")
        return category

    async def list_models(self, db: AsyncSession, group_id: UUID | None = None) -> Sequence[Category]:
        return await category_repository.list_ordered(db, group_id)

    async def list_categories(self, db: AsyncSession, group_id: UUID | None = None) -> list[CategoryResponse]:
        return [self._to_response(c) for c in await category_repository.list_ordered(db, group_id)]

    async def get_category(self, db: AsyncSession, category_id: UUID) -> CategoryResponse:
        return self._to_response(await self.get_model(db, category_id))

    async def _check_group(self, db: AsyncSession, group_id: UUID) -> None:
        if await group_repository.get_by_id(db, group_id) is None:
            raise NotFoundError("Group not found")

    async def create_category(self, db: AsyncSession, data: CategoryCreate) -> CategoryResponse:
        """카테고리 생성.

        Raises:
            NotFoundError: 그룹 없음 (Group not found)
            DuplicateError: 같은 코드의 카테고리가 이미 존재할 때 (Code already used)
        """
        await self._check_group(db, data.group_id)
        if await category_repository.exists(db, {"code": data.code}):
            raise DuplicateError("A category with this code already exists")
        category: Category = await category_repository.create(db, data.model_dump())
        return self._to_response(category)

    async def update_category(self, db: AsyncSession, category_id: UUID, data: CategoryUpdate) -> CategoryResponse:
        category: Category = await self.get_model(db, category_id)
        if data.group_id is not None and data.group_id != category.group_id:
            await self._check_group(db, data.group_id)
        if data.code is not None and await category_repository.exists(db, {"code": data.code}, exclude_id=category_id):
            raise DuplicateError("A category with this code already exists")

        update: dict = data.model_dump(exclude_unset=True)
        if "group_id" in update:
            # 관계도 함께 갱신 — Keep the eager-loaded group in sync with the foreign key
            category.group = await group_repository.get_by_id(db, update.pop("group_id"))
        for field, value in update.items():
            setattr(category, field, value)
        await db.flush()
        await db.refresh(category)
        return self._to_response(category)

    async def delete_category(self, db: AsyncSession, category_id: UUID) -> None:
        category: Category = await self.get_model(db, category_id)
        references: int = await category_repository.count_references(db, category_id)
        if references:
            raise BadRequestError(f"The category '{category.code}' is used by {references} product(s), task(s) or calculation(s)")
        await category_repository.delete(db, category_id)


# 싱글턴 인스턴스 — Singleton instance
category_service: CategoryService = CategoryService()
