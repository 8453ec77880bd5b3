"""피벗 테이블 패키지 — In-memory cross tabulation of calculation rows.

Usage:
    factory = PivotTableFactory(rows, SumAggregator, "Calculations")
    factory.set_column_fields([PivotFieldFactory.year("date"), PivotFieldFactory.month("date")])
    factory.set_row_fields(PivotFieldFactory.default("group", "Group"))
    factory.set_data_field(PivotFieldFactory.default("total"))
    table = factory.create()
"""

from calcapp.pivot.aggregator import (
    Aggregator,
    AverageAggregator,
    CountAggregator,
    SumAggregator,
    AGGREGATORS,
)
from calcapp.pivot.field import PivotDateField, PivotField, PivotFieldFactory
from calcapp.pivot.node import PivotNode
from calcapp.pivot.table import PivotCell, PivotTable
from calcapp.pivot.factory import PivotTableFactory

__all__ = [
    "Aggregator", "AverageAggregator", "CountAggregator", "SumAggregator", "AGGREGATORS",
    "PivotDateField", "PivotField", "PivotFieldFactory",
    "PivotNode", "PivotCell", "PivotTable", "PivotTableFactory",
]
