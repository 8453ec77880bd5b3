"""계산서 합계 서비스 — 합계, 마진, 합계 뷰 행 계산.

Calculation Service — Computes calculation totals and margins.

Total pipeline:
    1. 그룹별 금액/마진 갱신 (Each group refreshes its amount and margin)
    2. items_total = Σ 그룹 금액, overall = Σ 그룹 합계
    3. global_margin = 전체 마진 범위 (Global margin range of the overall)
    4. overall = overall × global_margin × (1 + user_margin)
Every step is rounded to two decimals.
"""

from enum import IntEnum
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from calcapp.models.calculation import Calculation
from calcapp.models.catalog import Group
from calcapp.repositories.global_margin_repository import global_margin_repository
from calcapp.repositories.group_repository import group_repository
from calcapp.schemas.calculation import ParametersGroup, ParametersQuery, ParametersResponse, TotalRow
from calcapp.services.application_service import application_service
from calcapp.utils.amounts import (
    ceil_amount,
    floor_amount,
    is_float_equals,
    is_float_zero,
    round_amount,
    safe_divide,
)


class RowKind(IntEnum):
    """합계 뷰 행 종류 — Kind of a total view row (stored in ``TotalRow.id``)."""

    EMPTY = -1
    GROUP = -2
    TOTAL_GROUP = -3
    GLOBAL_MARGIN = -4
    TOTAL_NET = -5
    USER_MARGIN = -6
    OVERALL_TOTAL = -7


# 행 설명 — Row descriptions
ROW_DESCRIPTIONS: dict[RowKind, str] = {
    RowKind.EMPTY: "No data",
    RowKind.TOTAL_GROUP: "Total of groups",
    RowKind.GLOBAL_MARGIN: "Global margin",
    RowKind.TOTAL_NET: "Net total",
    RowKind.USER_MARGIN: "User margin",
    RowKind.OVERALL_TOTAL: "Overall total",
}


def _row(kind: RowKind, description: str | None = None, **values: float) -> TotalRow:
    return TotalRow(id=int(kind), description=description or ROW_DESCRIPTIONS[kind], **values)


class CalculationService:
    """계산서 합계 서비스.

    Service computing totals, the total view rows and the AJAX parameters
    of an edited calculation.
    """

    async def get_global_margin(self, db: AsyncSession, amount: float) -> float:
        """전체 마진 — Global margin for ``amount`` (0 for a zero amount)."""
        if is_float_zero(amount):
            return 0.0
        return await global_margin_repository.get_margin(db, amount)

    async def update_total(self, db: AsyncSession, calculation: Calculation) -> bool:
        """계산서 합계를 갱신합니다.

        Update the cached totals of a calculation.

        Returns:
            bool: 변경 여부 — False when the items total, the global margin
            and the overall total are all unchanged (the entity is left untouched)
        """
        old_items_total: float = round_amount(calculation.items_total or 0.0)
        old_overall_total: float = round_amount(calculation.overall_total or 0.0)
        old_global_margin: float = round_amount(calculation.global_margin or 0.0)

        # 1. 그룹 갱신 — Update every group, sum the amounts and totals
        items_total: float = 0.0
        overall_total: float = 0.0
        for group in calculation.groups:
            group.update()
            items_total += group.amount
            overall_total += group.total
        items_total = round_amount(items_total)
        overall_total = round_amount(overall_total)

        # 2. 전체 마진과 사용자 마진 — Global margin then user margin
        global_margin: float = round_amount(await self.get_global_margin(db, overall_total))
        overall_total = round_amount(overall_total * global_margin)
        overall_total = round_amount(overall_total * (1.0 + (calculation.user_margin or 0.0)))

        if (
            is_float_equals(old_items_total, items_total)
            and is_float_equals(old_global_margin, global_margin)
            and is_float_equals(old_overall_total, overall_total)
        ):
            return False

        calculation.items_total = items_total
        calculation.global_margin = global_margin
        calculation.overall_total = overall_total
        return True

    def create_groups_from_calculation(self, calculation: Calculation) -> list[TotalRow]:
        """합계 뷰 행 생성 — Total view rows of a saved calculation.

        One row per group followed by the total rows. The stored global
        margin is used. An empty calculation yields a single empty row.
        """
        if calculation.is_empty:
            return [_row(RowKind.EMPTY)]

        rows: list[TotalRow] = [
            _row(
                RowKind.GROUP,
                group.code,
                amount=group.amount,
                margin_percent=group.margin,
                margin_amount=group.margin_amount,
                total=group.total,
            )
            for group in calculation.groups
        ]
        totals: dict[RowKind, TotalRow] = self._compute_totals(rows, calculation.user_margin, calculation.global_margin)
        return rows + list(totals.values())

    async def create_groups(self, db: AsyncSession, calculation: Calculation) -> list[TotalRow]:
        """합계 뷰 행 (비동기 래퍼) — Async variant used by the routers."""
        return self.create_groups_from_calculation(calculation)

    async def create_parameters(self, db: AsyncSession, query: ParametersQuery) -> ParametersResponse:
        """편집 중인 계산서의 합계 파라미터.

        Compute the totals of an edited calculation from the item totals per
        group. When ``adjust`` is set and the overall margin is below the
        minimum, the user margin is raised to reach it.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            query: 사용자 마진, 조정 플래그, 그룹별 합계 (User margin, adjust flag, totals per group)

        Returns:
            ParametersResponse: 합계 행과 마진 정보 (Total rows and margin information)
        """
        min_margin: float = await application_service.get_min_margin(db)
        rows: list[TotalRow] = await self._convert_query_groups(db, query.groups)
        if not rows:
            return ParametersResponse(
                overall_margin=0.0,
                overall_total=0.0,
                overall_below=False,
                user_margin=0.0,
                min_margin=min_margin,
                groups=[_row(RowKind.EMPTY)],
            )

        user_margin: float = query.user_margin
        global_margin: float = await self.get_global_margin(db, self._net_of(rows))
        totals: dict[RowKind, TotalRow] = self._compute_totals(rows, user_margin, global_margin)
        overall: TotalRow = totals[RowKind.OVERALL_TOTAL]
        overall_total: float = overall.total
        overall_margin: float = overall.margin_percent
        overall_below: bool = not is_float_zero(overall_total) and overall_margin < min_margin

        if query.adjust and overall_below:
            self._adjust_user_margin(totals, min_margin)
            user_margin = totals[RowKind.USER_MARGIN].margin_percent
            overall_below = False

        return ParametersResponse(
            overall_margin=overall_margin,
            overall_total=overall_total,
            overall_below=overall_below,
            user_margin=user_margin,
            min_margin=min_margin,
            groups=rows + list(totals.values()),
        )

    async def _convert_query_groups(self, db: AsyncSession, query_groups: list[ParametersGroup]) -> list[TotalRow]:
        """요청 그룹을 행으로 변환 — Sum the totals per catalog group and apply the group margins.

        Zero totals and unknown groups are skipped.
        """
        rows: dict[UUID, TotalRow] = {}
        groups: dict[UUID, Group | None] = {}
        for query_group in query_groups:
            if is_float_zero(query_group.total):
                continue
            if query_group.id not in groups:
                groups[query_group.id] = await group_repository.get_by_id(db, query_group.id)
            group: Group | None = groups[query_group.id]
            if group is None:
                continue

            row: TotalRow = rows.setdefault(query_group.id, _row(RowKind.GROUP, group.code))
            amount: float = row.amount + query_group.total
            margin_percent: float = group.find_percent(amount)
            total: float = round_amount(margin_percent * amount)
            row.amount = amount
            row.margin_percent = margin_percent
            row.margin_amount = total - amount
            row.total = total
        return list(rows.values())

    @staticmethod
    def _net_of(rows: list[TotalRow]) -> float:
        return round_amount(sum(r.amount for r in rows)) + round_amount(sum(r.margin_amount for r in rows))

    def _compute_totals(
        self,
        rows: list[TotalRow],
        user_margin: float,
        global_margin: float,
    ) -> dict[RowKind, TotalRow]:
        """합계 행 계산 — Total group, global margin, net total, user margin and overall rows."""
        groups_amount: float = round_amount(sum(r.amount for r in rows))
        groups_margin: float = round_amount(sum(r.margin_amount for r in rows))
        total_net: float = groups_amount + groups_margin

        totals: dict[RowKind, TotalRow] = {}
        totals[RowKind.TOTAL_GROUP] = _row(
            RowKind.TOTAL_GROUP,
            amount=groups_amount,
            margin_percent=1.0 + round_amount(safe_divide(groups_margin, groups_amount)),
            margin_amount=groups_margin,
            total=total_net,
        )

        global_amount: float = round_amount(total_net * (global_margin - 1.0))
        total_net += global_amount
        totals[RowKind.GLOBAL_MARGIN] = _row(RowKind.GLOBAL_MARGIN, margin_percent=global_margin, total=global_amount)
        totals[RowKind.TOTAL_NET] = _row(RowKind.TOTAL_NET, total=total_net)

        user_amount: float = round_amount(total_net * user_margin)
        totals[RowKind.USER_MARGIN] = _row(RowKind.USER_MARGIN, margin_percent=user_margin, total=user_amount)

        overall_total: float = total_net + user_amount
        overall_amount: float = overall_total - groups_amount
        overall_margin: float = floor_amount(1.0 + safe_divide(overall_amount, groups_amount))
        totals[RowKind.OVERALL_TOTAL] = _row(
            RowKind.OVERALL_TOTAL,
            amount=groups_amount,
            margin_percent=overall_margin,
            margin_amount=overall_amount,
            total=overall_total,
        )
        return totals

    @staticmethod
    def _adjust_user_margin(totals: dict[RowKind, TotalRow], min_margin: float) -> None:
        """최소 마진 도달을 위한 사용자 마진 조정.

        Raise the user margin so that the overall total reaches
        ``groups amount × min_margin``; the overall row is recomputed.
        """
        total_amount: float = totals[RowKind.TOTAL_GROUP].amount
        net_total: float = totals[RowKind.TOTAL_NET].total
        user_margin: float = ceil_amount(safe_divide(total_amount * min_margin - net_total, net_total))

        user_row: TotalRow = totals[RowKind.USER_MARGIN]
        user_row.margin_percent = user_margin
        user_row.total = net_total * user_margin

        overall_row: TotalRow = totals[RowKind.OVERALL_TOTAL]
        overall_row.total = net_total + user_row.total
        overall_row.margin_percent = floor_amount(safe_divide(overall_row.total, total_amount))
        overall_row.margin_amount = overall_row.total - total_amount


# 싱글턴 인스턴스 — Singleton instance
calculation_service: CalculationService = CalculationService()
