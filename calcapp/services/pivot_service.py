"""피벗 테이블 서비스 — Builds the calculation pivot table.

Columns: year and month of the calculation (or another date period).
Rows: state, group and category of the items.
Data: the item total (or the total including the group margin, or the quantity).
"""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from calcapp.pivot import AGGREGATORS, PivotField, PivotFieldFactory, PivotTable, PivotTableFactory
from calcapp.repositories.calculation_repository import calculation_repository
from calcapp.utils.exceptions import BadRequestError

# 값 필드 — Selectable data fields
DATA_FIELDS: dict[str, str] = {
    "total": "item_total",
    "overall": "item_overall",
    "quantity": "item_quantity",
}

# 열 기간 — Selectable column periods (below the year)
PERIODS: tuple[str, ...] = ("semester", "quarter", "month", "week")


class PivotService:
    """피벗 테이블 서비스 — Pivot table service."""

    def create_table(
        self,
        dataset: list[dict[str, Any]],
        aggregator: str = "sum",
        data: str = "total",
        period: str = "month",
    ) -> PivotTable | None:
        """데이터셋으로 피벗 테이블 생성 — Build the table from item rows (None when empty).

        Raises:
            BadRequestError: 알 수 없는 집계기, 값 필드 또는 기간 (Unknown aggregator, data field or period)
        """
        if aggregator not in AGGREGATORS:
            raise BadRequestError(f"Unknown aggregator '{aggregator}'")
        if data not in DATA_FIELDS:
            raise BadRequestError(f"Unknown data field '{data}'")
        if period not in PERIODS:
            raise BadRequestError(f"Unknown period '{period}'")

        # 주 단위는 ISO 연도 아래에 둔다 — Weeks are grouped under their ISO year
        year: PivotField = (
            PivotFieldFactory.week_year("calculation_date", "Year")
            if period == "week"
            else PivotFieldFactory.year("calculation_date", "Year")
        )
        columns: list[PivotField] = [
            year,
            getattr(PivotFieldFactory, period)("calculation_date", period.capitalize()),
        ]
        rows: list[PivotField] = [
            PivotFieldFactory.default("calculation_state", "State"),
            PivotFieldFactory.default("item_group", "Group"),
            PivotFieldFactory.default("item_category", "Category"),
        ]
        factory: PivotTableFactory = PivotTableFactory(dataset, AGGREGATORS[aggregator], "Calculations")
        return (
            factory.set_column_fields(columns)
            .set_row_fields(rows)
            .set_data_field(PivotFieldFactory.default(DATA_FIELDS[data]))
            .create()
        )

    async def get_pivot(
        self,
        db: AsyncSession,
        aggregator: str = "sum",
        data: str = "total",
        period: str = "month",
    ) -> dict[str, Any] | None:
        dataset: list[dict[str, Any]] = await calculation_repository.get_pivot_rows(db)
        table: PivotTable | None = self.create_table(dataset, aggregator, data, period)
        return table.to_dict() if table is not None else None


# 싱글턴 인스턴스 — Singleton instance
pivot_service: PivotService = PivotService()
