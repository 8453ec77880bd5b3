"""그룹 서비스 — 그룹 및 마진 범위 CRUD.

Group Service — Group CRUD including the margin ranges. A group cannot
be deleted while categories or calculations reference it.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from calcapp.models.catalog import Group, GroupMargin
from calcapp.repositories.group_repository import group_repository
from calcapp.schemas.catalog import GroupCreate, GroupResponse, GroupUpdate, MarginInput, MarginResponse
from calcapp.utils.exceptions import BadRequestError, DuplicateError, NotFoundError


class GroupService:
    """그룹 관련 비즈니스 로직을 처리하는 서비스 — Group business logic."""

    def _to_response(self, group: Group, categories: int = 0) -> GroupResponse:
        return GroupResponse(
            id=str(group.id),
            code=group.code,
            description=group.description,
            margins=[
                MarginResponse(id=str(m.id), minimum=m.minimum, maximum=m.maximum, margin=m.margin)
                for m in group.margins
            ],
            categories=categories,
        )

    @staticmethod
    def _build_margins(margins: list[MarginInput]) -> list[GroupMargin]:
        return [
            GroupMargin(minimum=m.minimum, maximum=m.maximum, margin=m.margin)
            for m in sorted(margins, key=lambda m: m.minimum)
        ]

    async def get_model(self, db: AsyncSession, group_id: UUID) -> Group:
        group: Group | None = await group_repository.get_by_id(db, group_id)
        if group is None:
            raise NotFoundError("Group not found")
        return group

    async def list_models(self, db: AsyncSession) -> Sequence[Group]:
        return await group_repository.list_ordered(db)

    async def list_groups(self, db: AsyncSession) -> list[GroupResponse]:
        groups: Sequence[Group] = await group_repository.list_ordered(db)
        return [self._to_response(g, await group_repository.count_categories(db, g.id)) for g in groups]

    async def get_group(self, db: AsyncSession, group_id: UUID) -> GroupResponse:
        group: Group = await self.get_model(db, group_id)
        return self._to_response(group, await group_repository.count_categories(db, group_id))

    async def create_group(self, db: AsyncSession, data: GroupCreate) -> GroupResponse:
        """그룹 생성 — Create a group with its margin ranges.

        Raises:
            DuplicateError: 같은 코드의 그룹이 이미 존재할 때 (Code already used)
        """
        if await group_repository.exists(db, {"code": data.code}):
            raise DuplicateError("A group with this code already exists")
        group: Group = Group(code=data.code, description=data.description, margins=self._build_margins(data.margins))
        db.add(group)
        await db.flush()
        await db.refresh(group)
        return self._to_response(group)

    async def update_group(self, db: AsyncSession, group_id: UUID, data: GroupUpdate) -> GroupResponse:
        group: Group = await self.get_model(db, group_id)
        if data.code is not None and await group_repository.exists(db, {"code": data.code}, exclude_id=group_id):
            raise DuplicateError("A group with this code already exists")

        update: dict = data.model_dump(exclude_unset=True, exclude={"margins"})
        for field, value in update.items():
            setattr(group, field, value)
        if data.margins is not None:
            # 마진 범위 전체 교체 — Replace every margin range
            group.margins = self._build_margins(data.margins)
        await db.flush()
        await db.refresh(group)
        return self._to_response(group, await group_repository.count_categories(db, group_id))

    async def delete_group(self, db: AsyncSession, group_id: UUID) -> None:
        """그룹 삭제 — 참조 중이면 400 (Rejected while categories or calculations use it)."""
        group: Group = await self.get_model(db, group_id)
        categories: int = await group_repository.count_categories(db, group_id)
        if categories:
            raise BadRequestError(f"The group '{group.code}' contains {categories} category(ies)")
        calculations: int = await group_repository.count_calculations(db, group_id)
        if calculations:
            raise BadRequestError(f"The group '{group.code}' is used by {calculations} calculation(s)")
        await group_repository.delete(db, group_id)


# 싱글턴 인스턴스 — Singleton instance
group_service: GroupService = GroupService()
