"""계산서 보관 서비스 — Moves old calculations to an archive state.

Every calculation in one of the source states (the editable states by
default), dated on or before the archive date, is moved to the target state.
"""

import logging
from datetime import date
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from calcapp.listeners import current_username, suspend_listeners
from calcapp.models.calculation import Calculation, CalculationState
from calcapp.repositories.calculation_repository import calculation_repository
from calcapp.repositories.state_repository import state_repository
from calcapp.schemas.admin import ArchiveDefaults, ArchiveGroup, ArchiveLine, ArchiveQuery, ArchiveResult
from calcapp.utils.dates import add_months
from calcapp.utils.exceptions import BadRequestError, NotFoundError

logger = logging.getLogger(__name__)


class CalculationArchiveService:
    """계산서 보관 서비스 — Calculation archive service."""

    async def _get_sources(self, db: AsyncSession, source_ids: list[UUID]) -> list[UUID]:
        return list(source_ids) or await state_repository.get_editable_ids(db)

    async def get_default_date(self, db: AsyncSession, source_ids: list[UUID]) -> date:
        """기본 보관 일자.

        One month after the oldest calculation of the source states, but
        never later than one month before the newest one. Six months ago
        when the source states hold no calculation.
        """
        oldest, newest = await calculation_repository.get_date_range(db, source_ids) if source_ids else (None, None)
        if oldest is None:
            return add_months(date.today(), -6)
        value: date = add_months(oldest, 1)
        if newest is not None and value >= newest:
            return add_months(newest, -1)
        return value

    async def get_defaults(self, db: AsyncSession) -> ArchiveDefaults:
        """보관 폼 기본값 — Default sources and date."""
        source_ids: list[UUID] = await state_repository.get_editable_ids(db)
        return ArchiveDefaults(
            source_ids=[str(i) for i in source_ids],
            date=await self.get_default_date(db, source_ids),
        )

    async def archive(self, db: AsyncSession, query: ArchiveQuery) -> ArchiveResult:
        """계산서 보관.

        Move the matching calculations to the target state. The result is
        grouped by the previous state.

        Raises:
            NotFoundError: 대상 상태 없음 (Unknown target state)
            BadRequestError: 대상 상태가 원본에 포함됨 (The target is one of the sources)
        """
        target: CalculationState | None = await state_repository.get_by_id(db, query.target_id)
        if target is None:
            raise NotFoundError("Target state not found")
        source_ids: list[UUID] = await self._get_sources(db, query.source_ids)
        if target.id in source_ids:
            raise BadRequestError("The target state cannot be one of the source states")
        until: date = query.date or await self.get_default_date(db, source_ids)

        result: ArchiveResult = ArchiveResult(
            simulate=query.simulate,
            date=until,
            target_id=str(target.id),
            target_code=target.code,
            total=0,
        )
        if not source_ids:
            return result

        calculations = await calculation_repository.list_for_archive(db, source_ids, target.id, until)
        groups: dict[UUID, ArchiveGroup] = {}
        for calculation in calculations:
            old_state: CalculationState = calculation.state
            group: ArchiveGroup = groups.setdefault(
                old_state.id, ArchiveGroup(state_id=str(old_state.id), state_code=old_state.code)
            )
            group.calculations.append(self._to_line(calculation))
            calculation.state = target
        result.groups = sorted(groups.values(), key=lambda g: g.state_code)
        result.total = len(calculations)

        if query.simulate or not calculations:
            await db.rollback()
        else:
            with suspend_listeners():
                await db.flush()
            logger.info(
                "Calculations archived by %s: %d moved to '%s' (until %s)",
                current_username.get() or "system",
                result.total,
                target.code,
                until.isoformat(),
            )
        return result

    @staticmethod
    def _to_line(calculation: Calculation) -> ArchiveLine:
        return ArchiveLine(
            id=str(calculation.id),
            date=calculation.date,
            customer=calculation.customer,
            description=calculation.description,
            overall_total=calculation.overall_total,
        )


# 싱글턴 인스턴스 — Singleton instance
calculation_archive_service: CalculationArchiveService = CalculationArchiveService()
