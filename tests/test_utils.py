"""금액/날짜 헬퍼 테스트.

Amount rounding and month arithmetic helpers.
"""

from datetime import date

import pytest

from calcapp.utils.amounts import (
    ceil_amount,
    floor_amount,
    is_float_equals,
    is_float_zero,
    round_amount,
    round_to_step,
    safe_divide,
)
from calcapp.utils.dates import add_months, first_of_month


class TestAmounts:
    """금액 반올림 테스트."""

    def test_round_half_away_from_zero(self):
        assert round_amount(2.675) == 2.68
        assert round_amount(0.005) == 0.01
        assert round_amount(-1.005) == -1.01

    def test_floor_and_ceil(self):
        assert floor_amount(1.379) == 1.37
        assert floor_amount(2.0) == 2.0
        assert ceil_amount(0.4545) == 0.46
        assert ceil_amount(0.46) == 0.46

    def test_safe_divide_by_zero(self):
        assert safe_divide(10.0, 0.0) == 0.0
        assert safe_divide(10.0, 0.0, default=-1.0) == -1.0
        assert safe_divide(10.0, 4.0) == 2.5

    def test_float_comparisons(self):
        assert is_float_zero(1e-12)
        assert not is_float_zero(0.01)
        assert is_float_equals(0.1 + 0.2, 0.3)

    @pytest.mark.parametrize("value, expected", [(1.02, 1.0), (1.03, 1.05), (12.37, 12.35), (12.38, 12.4)])
    def test_round_to_step(self, value, expected):
        assert round_to_step(value, 0.05) == expected


class TestDates:
    """월 단위 날짜 계산 테스트."""

    def test_add_months_clamps_day(self):
        assert add_months(date(2026, 1, 31), 1) == date(2026, 2, 28)
        assert add_months(date(2024, 3, 31), -1) == date(2024, 2, 29)

    def test_add_months_across_years(self):
        assert add_months(date(2026, 1, 15), -2) == date(2025, 11, 15)
        assert add_months(date(2025, 11, 30), 3) == date(2026, 2, 28)

    def test_first_of_month(self):
        assert first_of_month(date(2026, 5, 19)) == date(2026, 5, 1)
