"""공통 모델 믹스인 — Shared model mixins.

RangeMixin adds the ``minimum``/``maximum`` columns used by every
amount or quantity range table (group margins, global margins, task item
margins, digital print prices). A range contains a value when
``minimum <= value < maximum``.
"""

from sqlalchemy import Float
from sqlalchemy.orm import Mapped, mapped_column


class RangeMixin:
    """최소/최대 범위 믹스인 — Minimum (inclusive) / maximum (exclusive) range."""

    minimum: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    maximum: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    def contains(self, value: float) -> bool:
        """값이 범위 안에 있는지 확인 — Whether ``minimum <= value < maximum``."""
        return self.minimum <= value < self.maximum

    @property
    def delta(self) -> float:
        return self.maximum - self.minimum


def find_range(ranges, value: float):
    """값을 포함하는 첫 번째 범위를 반환 — First range containing ``value`` or None."""
    return next((r for r in ranges if r.contains(value)), None)
