"""피벗 테이블 테스트.

Pivot table tests — Header trees, cells, aggregators and the service
validation of the query parameters.
"""

from datetime import date

import pytest

from calcapp.pivot import (
    AverageAggregator,
    CountAggregator,
    PivotFieldFactory,
    PivotNode,
    PivotTableFactory,
    SumAggregator,
)
from calcapp.services.pivot_service import pivot_service
from calcapp.utils.exceptions import BadRequestError


def _dataset() -> list[dict]:
    return [
        {
            "calculation_date": date(2026, 1, 15),
            "calculation_state": "Offer",
            "item_group": "Material",
            "item_category": "Paper",
            "item_total": 200.0,
            "item_overall": 250.0,
            "item_quantity": 2.0,
        },
        {
            "calculation_date": date(2026, 1, 20),
            "calculation_state": "Offer",
            "item_group": "Material",
            "item_category": "Ink",
            "item_total": 50.0,
            "item_overall": 62.5,
            "item_quantity": 1.0,
        },
        {
            "calculation_date": date(2026, 3, 2),
            "calculation_state": "Accepted",
            "item_group": "Material",
            "item_category": "Paper",
            "item_total": 100.0,
            "item_overall": 125.0,
            "item_quantity": 1.0,
        },
    ]


class TestAggregators:
    """집계기 테스트."""

    def test_sum(self):
        agg = SumAggregator()
        agg.add_value(1.5).add_value(2.5)
        assert agg.result == 4.0

    def test_count(self):
        agg = CountAggregator(10.0)
        agg.add_value(20.0)
        assert agg.result == 2

    def test_average_merge_keeps_weighted_mean(self):
        left = AverageAggregator()
        left.add_value(10.0).add_value(20.0)
        right = AverageAggregator(60.0)
        left.add(right)
        assert left.result == 30.0

    def test_clone_is_empty(self):
        agg = SumAggregator(5.0)
        assert agg.clone().result == 0.0


class TestPivotNode:
    """헤더 노드 테스트."""

    def test_children_sorted_and_parent_updated(self):
        root = PivotNode(SumAggregator())
        b = root.add(SumAggregator(), "b")
        a = root.add(SumAggregator(), "a")
        b.add_value(2.0)
        a.add_value(3.0)

        assert [child.key for child in root] == ["a", "b"]
        assert root.value == 5.0
        assert a.path == "a"
        assert a.level == 1

    def test_node_cannot_be_own_parent(self):
        node = PivotNode(SumAggregator())
        with pytest.raises(ValueError):
            node.add_node(node)

    def test_sort_mode_descending(self):
        root = PivotNode(SumAggregator())
        root.add(SumAggregator(), "a")
        root.add(SumAggregator(), "b")
        root.set_sort_mode("desc")
        assert [child.key for child in root] == ["b", "a"]


class TestPivotTableFactory:
    """피벗 테이블 팩토리 테스트."""

    def _create(self, aggregator=SumAggregator):
        return (
            PivotTableFactory(_dataset(), aggregator, "Calculations")
            .set_column_fields([
                PivotFieldFactory.year("calculation_date"),
                PivotFieldFactory.month("calculation_date"),
            ])
            .set_row_fields([
                PivotFieldFactory.default("calculation_state", "State"),
                PivotFieldFactory.default("item_group", "Group"),
            ])
            .set_data_field(PivotFieldFactory.default("item_total"))
            .create()
        )

    def test_sum_table(self):
        table = self._create()

        assert table.value == 350.0
        year = table.root_column.find(2026)
        assert year.value == 350.0
        assert [month.key for month in year] == [1, 3]
        assert year.find(1).value == 250.0
        assert year.find(1).title == "January"
        assert table.root_row.find("Offer").value == 250.0

        cell = table.find_cell_by_path("2026/1", "Offer/Material")
        assert cell.value == 250.0
        assert len(table.cells) == 2

    def test_find_by_keys(self):
        table = self._create()
        assert table.root_column.find_by_keys([2026, 3]).value == 100.0
        assert table.root_column.find_by_keys([2026, 2]) is None
        assert table.find_cell_by_key(3, "Material").value == 100.0
        assert table.find_cell_by_key(2, "Material") is None

    def test_key_field_skips_seen_rows(self):
        table = (
            PivotTableFactory(_dataset(), SumAggregator)
            .set_column_fields(PivotFieldFactory.year("calculation_date"))
            .set_row_fields(PivotFieldFactory.default("calculation_state"))
            .set_data_field(PivotFieldFactory.default("item_total"))
            .set_key_field(PivotFieldFactory.default("item_category"))
            .create()
        )
        assert table.value == 250.0
        assert table.root_row.find("Accepted") is None

    def test_count_table(self):
        table = self._create(CountAggregator)
        assert table.value == 3
        assert table.find_cell_by_path("2026/3", "Accepted/Material").value == 1

    def test_root_titles_join_field_titles(self):
        table = self._create()
        assert table.root_column.title == "Year\\Month"
        assert table.root_row.title == "State\\Group"

    def test_invalid_factory_returns_none(self):
        factory = PivotTableFactory([], SumAggregator)
        assert factory.create() is None

    def test_rejects_non_aggregator(self):
        with pytest.raises(TypeError):
            PivotTableFactory(_dataset(), dict)


class TestPivotService:
    """피벗 서비스 테스트."""

    def test_create_table_to_dict(self):
        data = pivot_service.create_table(_dataset(), "sum", "overall", "quarter").to_dict()

        assert data["title"] == "Calculations"
        assert data["aggregator"] == "SumAggregator"
        assert data["value"] == 437.5
        assert data["column"]["children"][0]["key"] == 2026
        assert {cell["column"] for cell in data["cells"]} == {"2026/1"}
        assert {cell["row"] for cell in data["cells"]} == {
            "Offer/Material/Paper",
            "Offer/Material/Ink",
            "Accepted/Material/Paper",
        }

    def test_week_is_grouped_under_iso_year(self):
        dataset = [
            {**_dataset()[0], "calculation_date": date(2024, 12, 30)},
            {**_dataset()[1], "calculation_date": date(2024, 12, 27)},
        ]
        table = pivot_service.create_table(dataset, "sum", "total", "week")

        assert table.root_column.find_by_keys([2025, 1]).value == 200.0
        assert table.root_column.find_by_keys([2024, 52]).value == 50.0
        assert table.root_column.find_by_keys([2024, 1]) is None
        assert table.root_column.find(2025).find(1).title == "W01"

    def test_empty_dataset_returns_none(self):
        assert pivot_service.create_table([]) is None

    @pytest.mark.parametrize(
        "kwargs",
        [{"aggregator": "median"}, {"data": "price"}, {"period": "day"}],
    )
    def test_unknown_parameters(self, kwargs):
        with pytest.raises(BadRequestError):
            pivot_service.create_table(_dataset(), **kwargs)

    async def test_pivot_from_database(self, db, calculation):
        data = await pivot_service.get_pivot(db)

        assert data["value"] == 200.0
        assert data["cells"] == [{"column": "2026/1", "row": "Offer/Material/Paper", "value": 200.0}]
