"""금액 계산 헬퍼 — Amount arithmetic helpers.

All monetary values are floats rounded to two decimals, half away from zero.
Comparisons use a small tolerance so that values computed in different
orders still compare equal.
"""

import math
from decimal import ROUND_HALF_UP, Decimal

# 부동소수점 비교 허용 오차 — Float comparison tolerance
EPSILON: float = 1e-9

_CENT: Decimal = Decimal("0.01")


def round_amount(value: float) -> float:
    """소수점 2자리 반올림 (0.005 → 0.01) — Round half away from zero to 2 decimals."""
    return float(Decimal(repr(value)).quantize(_CENT, rounding=ROUND_HALF_UP))


def floor_amount(value: float) -> float:
    """소수점 2자리 내림 — Floor to 2 decimals."""
    return math.floor(round(value * 100.0, 6)) / 100.0


def ceil_amount(value: float) -> float:
    """소수점 2자리 올림 — Ceil to 2 decimals."""
    return math.ceil(round(value * 100.0, 6)) / 100.0


def is_float_zero(value: float) -> bool:
    return abs(value) < EPSILON


def is_float_equals(left: float, right: float) -> bool:
    return abs(left - right) < EPSILON


def safe_divide(dividend: float, divisor: float, default: float = 0.0) -> float:
    """0으로 나누기 방지 — Divide, returning ``default`` for a zero divisor."""
    if is_float_zero(divisor):
        return default
    return dividend / divisor


def round_to_step(value: float, step: float = 0.05) -> float:
    """가장 가까운 step 단위로 반올림 — Round to the nearest multiple of ``step``."""
    steps: Decimal = Decimal(repr(round(value / step, 9))).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return round_amount(float(steps) * step)
