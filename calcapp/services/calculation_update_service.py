"""계산서 일괄 갱신 서비스 — Bulk clean-up and recomputation of calculations.

Every calculation in the selected states (all states by default) and date
range is checked. Calculations in a non-editable state are skipped unless
``close_calculations`` is set. The selected clean-up options run first,
then the totals are recomputed with ``update_total``.

The timestamps of the updated calculations are preserved: persistence
listeners are suspended while the changes are flushed. Nothing is written
when simulating.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from calcapp.listeners import current_username, suspend_listeners
from calcapp.models.calculation import Calculation
from calcapp.repositories.calculation_repository import calculation_repository
from calcapp.schemas.admin import CalculationUpdateLine, CalculationUpdateQuery, CalculationUpdateResult
from calcapp.services.calculation_service import calculation_service
from calcapp.utils.amounts import round_amount

logger = logging.getLogger(__name__)

# 결과 메시지 — Line messages, one per applied change
MESSAGE_EMPTY_CALCULATION: str = "Empty calculation deleted"
MESSAGE_EMPTY_ITEMS: str = "Empty items removed"
MESSAGE_COPY_CODES: str = "Group and category codes copied"
MESSAGE_DUPLICATE_ITEMS: str = "Duplicate items removed"
MESSAGE_SORT_ITEMS: str = "Items sorted"
MESSAGE_TOTAL: str = "Total updated"


class CalculationUpdateService:
    """계산서 일괄 갱신 서비스 — Bulk update service."""

    async def update(self, db: AsyncSession, query: CalculationUpdateQuery) -> CalculationUpdateResult:
        """계산서를 일괄 정리하고 합계를 갱신합니다.

        Apply the selected options to every matching calculation, then
        recompute its totals. Only the changed (or deleted) calculations are
        reported; each line lists the applied changes.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            query: 상태, 일자 범위, 옵션, 시뮬레이션 (States, date range, options and simulate flag)

        Returns:
            CalculationUpdateResult: 변경 목록과 옵션별 개수 (Changed calculations and per-option counts)
        """
        result: CalculationUpdateResult = CalculationUpdateResult(simulate=query.simulate, total=0, updated=0)
        calculations = await calculation_repository.list_for_update(
            db, query.state_ids, query.date_from, query.date_to
        )

        # 조회 중 자동 flush 방지 — Keep changes in memory until the end of the loop
        with db.no_autoflush:
            for calculation in calculations:
                result.total += 1
                if not query.close_calculations and not calculation.is_editable:
                    result.unmodifiable += 1
                    continue

                old_total: float = calculation.overall_total
                if query.empty_calculations and calculation.is_empty:
                    result.empty_calculations += 1
                    line: CalculationUpdateLine = self._to_line(calculation, old_total, [MESSAGE_EMPTY_CALCULATION])
                    line.deleted = True
                    line.new_total = 0.0
                    line.delta = round_amount(-old_total)
                    result.lines.append(line)
                    await db.delete(calculation)
                    continue

                messages: list[str] = await self._apply(db, calculation, query, result)
                if messages:
                    result.lines.append(self._to_line(calculation, old_total, messages))
        result.updated = len(result.lines)

        if query.simulate or not result.lines:
            await db.rollback()
        else:
            with suspend_listeners():
                await db.flush()
        self._log_result(result)
        return result

    @staticmethod
    async def _apply(
        db: AsyncSession,
        calculation: Calculation,
        query: CalculationUpdateQuery,
        result: CalculationUpdateResult,
    ) -> list[str]:
        """옵션 적용 후 합계 갱신 — Run the options, then ``update_total``; return the applied changes."""
        messages: list[str] = []
        if query.empty_items and (count := calculation.remove_empty_items()):
            result.empty_items += count
            messages.append(MESSAGE_EMPTY_ITEMS)
        if query.copy_codes and (count := calculation.update_codes()):
            result.copy_codes += count
            messages.append(MESSAGE_COPY_CODES)
        if query.duplicate_items and (count := calculation.remove_duplicate_items()):
            result.duplicate_items += count
            messages.append(MESSAGE_DUPLICATE_ITEMS)
        if query.sort_items and calculation.sort():
            result.sort_items += 1
            messages.append(MESSAGE_SORT_ITEMS)
        if await calculation_service.update_total(db, calculation):
            messages.append(MESSAGE_TOTAL)
        return messages

    @staticmethod
    def _to_line(calculation: Calculation, old_total: float, messages: list[str]) -> CalculationUpdateLine:
        return CalculationUpdateLine(
            id=str(calculation.id),
            date=calculation.date,
            customer=calculation.customer,
            description=calculation.description,
            state_code=calculation.state.code,
            old_total=old_total,
            new_total=calculation.overall_total,
            delta=round_amount(calculation.overall_total - old_total),
            messages=messages,
        )

    @staticmethod
    def _log_result(result: CalculationUpdateResult) -> None:
        if result.simulate:
            return
        logger.info(
            "Calculations updated by %s: %d of %d (%d unmodifiable, %d empty calculation(s), "
            "%d empty item(s), %d duplicate item(s), %d code(s), %d sorted)",
            current_username.get() or "system",
            result.updated,
            result.total,
            result.unmodifiable,
            result.empty_calculations,
            result.empty_items,
            result.duplicate_items,
            result.copy_codes,
            result.sort_items,
        )


# 싱글턴 인스턴스 — Singleton instance
calculation_update_service: CalculationUpdateService = CalculationUpdateService()
