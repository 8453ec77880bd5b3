"""계산서 합계 서비스 테스트.

Calculation total service tests — Cached totals, total view rows and the
AJAX parameters with user margin adjustment.
"""

import uuid

import pytest

from calcapp.repositories.property_repository import property_repository
from calcapp.schemas.calculation import ParametersGroup, ParametersQuery
from calcapp.services.calculation_service import RowKind, calculation_service


class TestUpdateTotal:
    """update_total 테스트."""

    async def test_totals_of_fixture(self, calculation):
        assert calculation.items_total == 200.0
        assert calculation.global_margin == 1.1
        assert calculation.overall_total == 275.0
        assert calculation.overall_margin == 1.37

    async def test_unchanged_totals_return_false(self, db, calculation):
        assert await calculation_service.update_total(db, calculation) is False

    async def test_user_margin_is_applied(self, db, calculation):
        calculation.user_margin = 0.1
        assert await calculation_service.update_total(db, calculation) is True
        assert calculation.overall_total == 302.5

    async def test_group_margin_range_changes(self, db, calculation, category):
        calculation.add_item(category, "Paper A3", "pce", 500.0, 2.0)
        assert await calculation_service.update_total(db, calculation) is True
        # 1200 → group margin 1.1 → 1320 → global margin 1.1 → 1452
        assert calculation.items_total == 1200.0
        assert calculation.overall_total == 1452.0

    async def test_global_margin_is_zero_without_amount(self, db):
        assert await calculation_service.get_global_margin(db, 0.0) == 0.0


class TestTotalRows:
    """합계 뷰 행 테스트."""

    async def test_rows_of_calculation(self, db, calculation):
        rows = await calculation_service.create_groups(db, calculation)

        assert [r.id for r in rows] == [
            RowKind.GROUP,
            RowKind.TOTAL_GROUP,
            RowKind.GLOBAL_MARGIN,
            RowKind.TOTAL_NET,
            RowKind.USER_MARGIN,
            RowKind.OVERALL_TOTAL,
        ]
        group_row = rows[0]
        assert group_row.description == "Material"
        assert group_row.amount == 200.0
        assert group_row.margin_percent == 1.25
        assert group_row.total == 250.0
        assert rows[-1].total == pytest.approx(275.0)
        assert rows[-1].margin_percent == 1.37

    async def test_empty_calculation_has_single_row(self, db, states):
        from calcapp.models import Calculation

        calc = Calculation(customer="ACME", description="Empty", state=states["offer"], groups=[])
        rows = await calculation_service.create_groups(db, calc)
        assert len(rows) == 1
        assert rows[0].id == RowKind.EMPTY


class TestParameters:
    """AJAX 합계 파라미터 테스트."""

    async def test_parameters_without_adjust(self, db, group, global_margins):
        query = ParametersQuery(groups=[ParametersGroup(id=group.id, total=200.0)])
        response = await calculation_service.create_parameters(db, query)

        assert response.groups[0].amount == 200.0
        assert response.groups[0].margin_percent == 1.25
        assert response.groups[0].total == 250.0
        assert response.overall_total == pytest.approx(275.0)
        assert response.overall_margin == 1.37
        assert response.overall_below is False
        assert response.min_margin == 1.1

    async def test_totals_of_same_group_are_summed(self, db, group, global_margins):
        query = ParametersQuery(
            groups=[
                ParametersGroup(id=group.id, total=600.0),
                ParametersGroup(id=group.id, total=600.0),
                ParametersGroup(id=uuid.uuid4(), total=50.0),
                ParametersGroup(id=group.id, total=0.0),
            ]
        )
        response = await calculation_service.create_parameters(db, query)

        group_rows = [r for r in response.groups if r.id == RowKind.GROUP]
        assert len(group_rows) == 1
        assert group_rows[0].amount == 1200.0
        assert group_rows[0].margin_percent == 1.1

    async def test_adjust_raises_user_margin(self, db, group, global_margins):
        await property_repository.set_value(db, "min_margin", "2.0")
        await db.commit()

        query = ParametersQuery(adjust=True, groups=[ParametersGroup(id=group.id, total=200.0)])
        response = await calculation_service.create_parameters(db, query)

        assert response.min_margin == 2.0
        assert response.user_margin == 0.46
        assert response.overall_below is False
        overall = response.groups[-1]
        assert overall.id == RowKind.OVERALL_TOTAL
        assert overall.total == pytest.approx(401.5)
        assert overall.margin_percent == 2.0

    async def test_below_without_adjust(self, db, group, global_margins):
        await property_repository.set_value(db, "min_margin", "2.0")
        await db.commit()

        query = ParametersQuery(groups=[ParametersGroup(id=group.id, total=200.0)])
        response = await calculation_service.create_parameters(db, query)

        assert response.overall_below is True
        assert response.user_margin == 0.0

    async def test_no_groups_returns_empty_row(self, db):
        response = await calculation_service.create_parameters(db, ParametersQuery())
        assert response.overall_total == 0.0
        assert [r.id for r in response.groups] == [RowKind.EMPTY]
