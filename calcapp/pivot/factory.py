"""피벗 테이블 팩토리 — Builds a PivotTable from a list of dict rows."""

from typing import Any, Iterable

from calcapp.pivot.aggregator import Aggregator, SumAggregator
from calcapp.pivot.field import PivotField
from calcapp.pivot.node import PivotNode
from calcapp.pivot.table import PivotCell, PivotTable

# 루트 제목 구분자 — Separator joining the field titles of a root node
TITLE_SEPARATOR: str = "\\"


class PivotTableFactory:
    """피벗 테이블 팩토리.

    Pivot table factory. Column fields, row fields and a data field are
    required; an optional key field skips rows whose key was already seen.

    Args:
        dataset: 데이터 행 목록 (Rows as dicts)
        aggregator_class: 집계기 클래스 (Aggregator used for every node and cell)
        title: 테이블 제목 (Table title)
    """

    def __init__(
        self,
        dataset: list[dict[str, Any]],
        aggregator_class: type[Aggregator] = SumAggregator,
        title: str | None = None,
    ) -> None:
        if not (isinstance(aggregator_class, type) and issubclass(aggregator_class, Aggregator)):
            raise TypeError(f"Expected an Aggregator subclass, got {aggregator_class!r}")
        self.dataset: list[dict[str, Any]] = dataset
        self.aggregator_class: type[Aggregator] = aggregator_class
        self.title: str | None = title
        self.column_fields: list[PivotField] = []
        self.row_fields: list[PivotField] = []
        self.data_field: PivotField | None = None
        self.key_field: PivotField | None = None

    @property
    def is_valid(self) -> bool:
        return bool(self.dataset and self.column_fields and self.row_fields and self.data_field is not None)

    def set_column_fields(self, fields: PivotField | Iterable[PivotField]) -> "PivotTableFactory":
        self.column_fields = self._check_fields(fields)
        return self

    def set_row_fields(self, fields: PivotField | Iterable[PivotField]) -> "PivotTableFactory":
        self.row_fields = self._check_fields(fields)
        return self

    def set_data_field(self, field: PivotField) -> "PivotTableFactory":
        self.data_field = field
        return self

    def set_key_field(self, field: PivotField | None) -> "PivotTableFactory":
        self.key_field = field
        return self

    def create(self) -> PivotTable | None:
        """피벗 테이블 생성 — Build the table, or None when the factory is not valid."""
        if not self.is_valid:
            return None

        seen: set[Any] = set()
        table: PivotTable = PivotTable(self._create_aggregator(), self.title)
        for row in self.dataset:
            if self.key_field is not None:
                key: Any = self.key_field.get_value(row)
                if key in seen:
                    continue
                seen.add(key)

            value: Any = self.data_field.get_value(row)
            column: PivotNode = self._set_node_value(self.column_fields, row, table.root_column, value)
            current_row: PivotNode = self._set_node_value(self.row_fields, row, table.root_row, value)
            cell: PivotCell | None = table.find_cell_by_node(column, current_row)
            if cell is not None:
                cell.add_value(value)
            else:
                table.add_cell_value(self._create_aggregator(), column, current_row, value)
            table.add_value(value)

        table.key_field = self.key_field
        table.data_field = self.data_field
        table.column_fields = list(self.column_fields)
        table.row_fields = list(self.row_fields)
        table.root_column.title = self._fields_title(self.column_fields)
        table.root_row.title = self._fields_title(self.row_fields)
        return table

    def _create_aggregator(self) -> Aggregator:
        return self.aggregator_class()

    def _set_node_value(self, fields: list[PivotField], row: dict[str, Any], node: PivotNode, value: Any) -> PivotNode:
        """필드 경로의 잎 노드를 찾거나 만들고 값을 추가 — Walk/create the field path and add the value at the leaf."""
        for field in fields:
            key: Any = field.get_value(row)
            child: PivotNode | None = node.find(key)
            if child is None:
                child = node.add(self._create_aggregator(), key)
                child.title = field.get_display_value(key)
            node = child
        node.add_value(value)
        return node

    @staticmethod
    def _check_fields(fields: PivotField | Iterable[PivotField]) -> list[PivotField]:
        if isinstance(fields, PivotField):
            return [fields]
        result: list[PivotField] = []
        for field in fields:
            if not isinstance(field, PivotField):
                raise TypeError(f"Expected a PivotField, got {type(field).__name__}")
            result.append(field)
        return result

    @staticmethod
    def _fields_title(fields: list[PivotField]) -> str:
        return TITLE_SEPARATOR.join(field.title for field in fields)
