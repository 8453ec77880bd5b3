"""전체 마진 서비스 — Global margins (list and replace all)."""

import logging
from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from calcapp.models.catalog import GlobalMargin
from calcapp.repositories.global_margin_repository import global_margin_repository
from calcapp.schemas.catalog import GlobalMarginsUpdate, MarginResponse

logger = logging.getLogger(__name__)


class GlobalMarginService:
    """전체 마진 서비스 — Global margin business logic."""

    def _to_response(self, margin: GlobalMargin) -> MarginResponse:
        return MarginResponse(id=str(margin.id), minimum=margin.minimum, maximum=margin.maximum, margin=margin.margin)

    async def list_models(self, db: AsyncSession) -> Sequence[GlobalMargin]:
        return await global_margin_repository.list_ordered(db)

    async def list_margins(self, db: AsyncSession) -> list[MarginResponse]:
        return [self._to_response(m) for m in await global_margin_repository.list_ordered(db)]

    async def get_margin(self, db: AsyncSession, amount: float) -> float:
        return await global_margin_repository.get_margin(db, amount)

    async def replace_margins(self, db: AsyncSession, data: GlobalMarginsUpdate) -> list[MarginResponse]:
        """전체 마진 일괄 교체 — Delete every range and store the given ones."""
        await global_margin_repository.delete_all(db)
        for margin in sorted(data.margins, key=lambda m: m.minimum):
            db.add(GlobalMargin(minimum=margin.minimum, maximum=margin.maximum, margin=margin.margin))
        await db.flush()
        logger.info("Global margins replaced (%d range(s))", len(data.margins))
        return await self.list_margins(db)


# 싱글턴 인스턴스 — Singleton instance
global_margin_service: GlobalMarginService = GlobalMarginService()
