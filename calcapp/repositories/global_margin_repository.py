"""전체 마진 레포지토리 — Global margin queries."""

from typing import Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from calcapp.models.catalog import GlobalMargin
from calcapp.repositories.base import BaseRepository


class GlobalMarginRepository(BaseRepository[GlobalMargin]):
    """전체 마진 레포지토리 — Global margin repository."""

    def __init__(self) -> None:
        super().__init__(GlobalMargin)

    async def list_ordered(self, db: AsyncSession) -> Sequence[GlobalMargin]:
        result = await db.execute(select(GlobalMargin).order_by(GlobalMargin.minimum))
        return result.scalars().all()

    async def get_margin(self, db: AsyncSession, amount: float) -> float:
        """금액에 해당하는 전체 마진 — Margin of the range containing ``amount`` (0 when none)."""
        query = (
            select(GlobalMargin.margin)
            .where(GlobalMargin.minimum <= amount, GlobalMargin.maximum > amount)
            .order_by(GlobalMargin.minimum)
            .limit(1)
        )
        margin: float | None = (await db.execute(query)).scalar()
        return margin if margin is not None else 0.0

    async def delete_all(self, db: AsyncSession) -> None:
        await db.execute(delete(GlobalMargin))
        await db.flush()


# 싱글턴 인스턴스 — Singleton instance
global_margin_repository: GlobalMarginRepository = GlobalMarginRepository()
