"""계산서 트리 모델 테스트.

Calculation tree tests — Item insertion, group margins, duplicate and empty
items, natural sort, clone and code refresh. Models are used in memory only.
"""

from datetime import date

import pytest

from calcapp.models import Calculation, CalculationState, Category, Group, GroupMargin


def _catalog() -> tuple[Group, Category, Category]:
    group = Group(
        code="Material",
        margins=[
            GroupMargin(minimum=0.0, maximum=1000.0, margin=1.25),
            GroupMargin(minimum=1000.0, maximum=100000.0, margin=1.1),
        ],
    )
    paper = Category(code="Paper", group=group)
    ink = Category(code="Ink", group=group)
    return group, paper, ink


def _calculation() -> Calculation:
    return Calculation(
        date=date(2026, 1, 15),
        customer="ACME",
        description="Flyers",
        state=CalculationState(code="Offer", editable=True, color="#000000"),
        user_margin=0.0,
        global_margin=0.0,
        items_total=0.0,
        overall_total=0.0,
        groups=[],
    )


class TestAddItem:
    """항목 추가 테스트."""

    def test_add_item_creates_group_and_category(self):
        group, paper, _ = _catalog()
        calc = _calculation()
        item = calc.add_item(paper, "Paper A4", "pce", 10.0, 3.0)

        assert len(calc.groups) == 1
        assert calc.groups[0].code == "Material"
        assert calc.groups[0].categories[0].code == "Paper"
        assert item.total == 30.0
        assert calc.groups[0].categories[0].amount == 30.0

    def test_same_category_is_reused(self):
        _, paper, ink = _catalog()
        calc = _calculation()
        calc.add_item(paper, "Paper A4", "pce", 10.0, 1.0)
        calc.add_item(paper, "Paper A3", "pce", 20.0, 1.0)
        calc.add_item(ink, "Black ink", "l", 5.0, 2.0)

        assert len(calc.groups) == 1
        assert calc.categories_count == 2
        assert calc.lines_count == 3
        assert [i.position for i in calc.groups[0].categories[0].items] == [0, 1]

    def test_group_update_applies_range_margin(self):
        _, paper, _ = _catalog()
        calc = _calculation()
        calc.add_item(paper, "Paper A4", "pce", 100.0, 12.0)
        group = calc.groups[0].update()

        # 1200 falls in the 1000-100000 range
        assert group.amount == 1200.0
        assert group.margin == 1.1
        assert group.total == pytest.approx(1320.0)


class TestCleanUp:
    """중복/빈 항목 정리 테스트."""

    def test_remove_duplicate_items_keeps_first(self):
        _, paper, ink = _catalog()
        calc = _calculation()
        calc.add_item(paper, "Paper A4", "pce", 10.0, 1.0)
        calc.add_item(paper, " paper a4 ", "pce", 12.0, 1.0)
        calc.add_item(ink, "Black ink", "l", 5.0, 2.0)

        assert len(calc.find_duplicate_items()) == 2
        assert calc.remove_duplicate_items() == 1
        assert [i.description for i in calc.items] == ["Paper A4", "Black ink"]

    def test_remove_empty_items_prunes_categories(self):
        _, paper, ink = _catalog()
        calc = _calculation()
        calc.add_item(paper, "Paper A4", "pce", 10.0, 1.0)
        calc.add_item(ink, "Free sample", "l", 0.0, 2.0)

        assert len(calc.find_empty_items()) == 1
        assert calc.remove_empty_items() == 1
        assert calc.categories_count == 1
        assert calc.categories[0].code == "Paper"

    def test_removing_every_item_empties_calculation(self):
        _, paper, _ = _catalog()
        calc = _calculation()
        calc.add_item(paper, "Nothing", "pce", 10.0, 0.0)

        assert calc.remove_empty_items() == 1
        assert calc.is_empty

    def test_nothing_to_remove(self):
        _, paper, _ = _catalog()
        calc = _calculation()
        calc.add_item(paper, "Paper A4", "pce", 10.0, 1.0)
        assert calc.remove_duplicate_items() == 0
        assert calc.remove_empty_items() == 0


class TestSort:
    """자연 정렬 테스트."""

    def test_sort_uses_natural_order(self):
        _, paper, ink = _catalog()
        calc = _calculation()
        calc.add_item(paper, "Item 10", "pce", 1.0, 1.0)
        calc.add_item(paper, "item 2", "pce", 1.0, 1.0)
        calc.add_item(ink, "Ink", "l", 1.0, 1.0)

        assert calc.sort() is True
        assert [c.code for c in calc.groups[0].categories] == ["Ink", "Paper"]
        assert [i.description for i in calc.categories[1].items] == ["item 2", "Item 10"]
        assert [i.position for i in calc.categories[1].items] == [0, 1]

    def test_sorted_calculation_is_unchanged(self):
        _, paper, _ = _catalog()
        calc = _calculation()
        calc.add_item(paper, "A", "pce", 1.0, 1.0)
        calc.add_item(paper, "B", "pce", 1.0, 1.0)
        assert calc.sort() is False


class TestCloneAndCodes:
    """복제 및 코드 갱신 테스트."""

    def test_clone_copies_tree(self):
        _, paper, _ = _catalog()
        calc = _calculation()
        calc.add_item(paper, "Paper A4", "pce", 10.0, 3.0)
        accepted = CalculationState(code="Accepted", editable=False, color="#000000")

        copy = calc.clone(accepted, "Copy")

        assert copy.date == date.today()
        assert copy.state is accepted
        assert copy.description == "Copy"
        assert copy.customer == "ACME"
        assert copy.lines_count == 1
        assert copy.items[0] is not calc.items[0]
        assert copy.items[0].total == 30.0

    def test_clone_keeps_state_and_description(self):
        calc = _calculation()
        copy = calc.clone()
        assert copy.state is calc.state
        assert copy.description == "Flyers"

    def test_update_codes(self):
        group, paper, _ = _catalog()
        calc = _calculation()
        calc.add_item(paper, "Paper A4", "pce", 10.0, 1.0)
        group.code = "Materials"
        paper.code = "Papers"

        assert calc.update_codes() == 2
        assert calc.groups[0].code == "Materials"
        assert calc.categories[0].code == "Papers"
        assert calc.update_codes() == 0


class TestMargins:
    """마진 계산 테스트."""

    def test_overall_margin_is_floored(self):
        calc = _calculation()
        calc.items_total = 200.0
        calc.overall_total = 275.0
        assert calc.overall_margin == 1.37
        assert calc.overall_margin_amount == 75.0

    def test_group_and_user_margin_amounts(self):
        _, paper, _ = _catalog()
        calc = _calculation()
        calc.add_item(paper, "Paper A4", "pce", 100.0, 2.0)
        calc.groups[0].update()
        calc.global_margin = 1.1
        calc.user_margin = 0.1

        assert calc.groups_amount == 200.0
        assert calc.groups_total == 250.0
        assert calc.groups_margin == 1.25
        assert calc.global_margin_amount == pytest.approx(25.0)
        assert calc.total_net == pytest.approx(275.0)
        assert calc.user_margin_amount == pytest.approx(27.5)

    def test_is_margin_below(self):
        _, paper, _ = _catalog()
        calc = _calculation()
        assert calc.is_margin_below(1.1) is False  # empty

        calc.add_item(paper, "Paper A4", "pce", 100.0, 1.0)
        calc.items_total = 100.0
        calc.overall_total = 105.0
        assert calc.is_margin_below(1.1) is True
        calc.overall_total = 120.0
        assert calc.is_margin_below(1.1) is False

    def test_new_calculation_is_editable(self):
        calc = _calculation()
        calc.state = CalculationState(code="Accepted", editable=False, color="#000000")
        assert calc.is_editable is True
