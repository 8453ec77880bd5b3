"""피벗 테이블과 셀 — Pivot table and cells."""

from typing import Any

from calcapp.pivot.aggregator import Aggregator
from calcapp.pivot.field import PivotField
from calcapp.pivot.node import PivotNode


class PivotCell:
    """피벗 셀 — Value at the intersection of a column leaf and a row leaf."""

    def __init__(self, aggregator: Aggregator, column: PivotNode, row: PivotNode, value: Any = None) -> None:
        self.aggregator: Aggregator = aggregator
        self.column: PivotNode = column
        self.row: PivotNode = row
        if value is not None:
            self.aggregator.add_value(value)

    def add_value(self, value: Any) -> "PivotCell":
        self.aggregator.add_value(value)
        return self

    def equals_key(self, column_key: Any, row_key: Any) -> bool:
        return self.column.key == column_key and self.row.key == row_key

    def equals_path(self, column_path: str, row_path: str) -> bool:
        return self.column.path == column_path and self.row.path == row_path

    @property
    def value(self) -> float:
        return self.aggregator.result

    def to_dict(self) -> dict[str, Any]:
        return {
            "column": self.column.path,
            "row": self.row.path,
            "value": self.aggregator.formatted_result,
        }


class PivotTable:
    """피벗 테이블.

    Holds the column and row header trees, the cells and the grand total.

    Attributes:
        aggregator: 전체 합계 (Grand total)
        root_column / root_row: 헤더 트리 루트 (Roots of the header trees)
        cells: 셀 목록, 생성 순서 (Cells in creation order)
    """

    def __init__(self, aggregator: Aggregator, title: str | None = None) -> None:
        self.aggregator: Aggregator = aggregator
        self.title: str | None = title
        self.root_column: PivotNode = PivotNode(aggregator.clone())
        self.root_row: PivotNode = PivotNode(aggregator.clone())
        self.cells: list[PivotCell] = []
        self.key_field: PivotField | None = None
        self.data_field: PivotField | None = None
        self.column_fields: list[PivotField] = []
        self.row_fields: list[PivotField] = []
        self.total_title: str | None = None
        self._index: dict[tuple[int, int], PivotCell] = {}

    def add_value(self, value: Any) -> "PivotTable":
        self.aggregator.add_value(value)
        return self

    def add_cell(self, cell: PivotCell) -> "PivotTable":
        self.cells.append(cell)
        self._index[(id(cell.column), id(cell.row))] = cell
        return self

    def add_cell_value(self, aggregator: Aggregator, column: PivotNode, row: PivotNode, value: Any = None) -> PivotCell:
        cell: PivotCell = PivotCell(aggregator, column, row, value)
        self.add_cell(cell)
        return cell

    def find_cell_by_node(self, column: PivotNode, row: PivotNode) -> PivotCell | None:
        return self._index.get((id(column), id(row)))

    def find_cell_by_key(self, column_key: Any, row_key: Any) -> PivotCell | None:
        return next((cell for cell in self.cells if cell.equals_key(column_key, row_key)), None)

    def find_cell_by_path(self, column_path: str, row_path: str) -> PivotCell | None:
        return next((cell for cell in self.cells if cell.equals_path(column_path, row_path)), None)

    @property
    def value(self) -> float:
        return self.aggregator.result

    def to_dict(self) -> dict[str, Any]:
        """JSON 직렬화 — Serializable form; empty entries are left out."""
        data: dict[str, Any] = {
            "title": self.title,
            "aggregator": self.aggregator.name,
            "value": self.aggregator.formatted_result,
            "key_field": self.key_field.to_dict() if self.key_field else None,
            "data_field": self.data_field.to_dict() if self.data_field else None,
            "column_fields": [field.to_dict() for field in self.column_fields],
            "row_fields": [field.to_dict() for field in self.row_fields],
            "column": self.root_column.to_dict(),
            "row": self.root_row.to_dict(),
            "cells": [cell.to_dict() for cell in self.cells],
        }
        return {name: value for name, value in data.items() if value not in (None, [], {})}
