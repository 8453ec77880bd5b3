"""차트 서비스 — Calculation charts by month and by state."""

from datetime import date
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from calcapp.repositories.calculation_repository import calculation_repository
from calcapp.schemas.report import MonthChartEntry, MonthChartResponse, StateChartEntry, StateChartResponse
from calcapp.utils.amounts import round_amount, safe_divide
from calcapp.utils.dates import add_months, first_of_month


class ChartService:
    """차트 데이터 서비스 — Chart data service."""

    async def by_month(self, db: AsyncSession, months: int = 6, today: date | None = None) -> MonthChartResponse:
        """월별 차트.

        Per month of the last ``months`` months (the current one included):
        the number of calculations, the items total, the overall total, the
        margin amount and the margin percent. Months without calculations
        are reported with zeros.
        """
        start: date = first_of_month(add_months(today or date.today(), -(months - 1)))
        rows: dict[tuple[int, int], dict[str, Any]] = {
            (int(r["year"]), int(r["month"])): r for r in await calculation_repository.get_by_month(db, start)
        }

        entries: list[MonthChartEntry] = []
        for offset in range(months):
            current: date = add_months(start, offset)
            row: dict[str, Any] = rows.get((current.year, current.month), {})
            items: float = float(row.get("items") or 0.0)
            total: float = float(row.get("total") or 0.0)
            entries.append(
                MonthChartEntry(
                    year=current.year,
                    month=current.month,
                    count=int(row.get("count") or 0),
                    items=round_amount(items),
                    total=round_amount(total),
                    margin_amount=round_amount(total - items),
                    margin_percent=safe_divide(total, items),
                )
            )

        items_sum: float = sum(e.items for e in entries)
        total_sum: float = sum(e.total for e in entries)
        return MonthChartResponse(
            months=months,
            entries=entries,
            count=sum(e.count for e in entries),
            items=round_amount(items_sum),
            total=round_amount(total_sum),
            margin_amount=round_amount(total_sum - items_sum),
            margin_percent=safe_divide(total_sum, items_sum),
        )

    async def by_state(self, db: AsyncSession) -> StateChartResponse:
        """상태별 차트 — Count, totals, margin and share of the grand total per state."""
        rows: list[dict[str, Any]] = await calculation_repository.get_by_state(db)
        grand_total: float = sum(float(r["total"]) for r in rows)
        entries: list[StateChartEntry] = [
            StateChartEntry(
                id=str(r["id"]),
                code=r["code"],
                editable=r["editable"],
                color=r["color"],
                count=int(r["count"]),
                items=round_amount(float(r["items"])),
                total=round_amount(float(r["total"])),
                margin_percent=safe_divide(float(r["total"]), float(r["items"])),
                percent=safe_divide(float(r["total"]), grand_total),
            )
            for r in rows
        ]
        items_sum: float = sum(e.items for e in entries)
        return StateChartResponse(
            entries=entries,
            count=sum(e.count for e in entries),
            items=round_amount(items_sum),
            total=round_amount(grand_total),
            margin_percent=safe_divide(grand_total, items_sum),
        )


# 싱글턴 인스턴스 — Singleton instance
chart_service: ChartService = ChartService()
