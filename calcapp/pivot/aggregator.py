"""피벗 집계기 — Pivot aggregators.

An aggregator accumulates raw values (``add_value``) or merges another
aggregator of the same kind (``add``), which is how parent nodes are
recomputed from their children.
"""

from abc import ABC, abstractmethod
from typing import Any


class Aggregator(ABC):
    """집계기 기본 클래스 — Base aggregator."""

    def __init__(self, value: Any = None) -> None:
        self.init()
        if value is not None:
            self.add_value(value)

    @abstractmethod
    def init(self) -> "Aggregator":
        """초기화 — Reset the accumulated state."""

    @abstractmethod
    def add_value(self, value: Any) -> "Aggregator":
        """값 추가 — Accumulate a raw value."""

    @abstractmethod
    def add(self, other: "Aggregator") -> "Aggregator":
        """다른 집계기 병합 — Merge another aggregator of the same kind."""

    @property
    @abstractmethod
    def result(self) -> float:
        """집계 결과 — Aggregated result."""

    @property
    def formatted_result(self) -> float:
        return round(self.result, 2)

    @property
    def name(self) -> str:
        return type(self).__name__

    def clone(self) -> "Aggregator":
        """빈 복제본 — New empty aggregator of the same kind."""
        return type(self)()

    def __str__(self) -> str:
        return f"{self.name}({self.formatted_result})"


class SumAggregator(Aggregator):
    """합계 — Sum of the values."""

    def init(self) -> "SumAggregator":
        self._total: float = 0.0
        return self

    def add_value(self, value: Any) -> "SumAggregator":
        if isinstance(value, Aggregator):
            return self.add(value)
        self._total += float(value or 0.0)
        return self

    def add(self, other: Aggregator) -> "SumAggregator":
        self._total += other.result
        return self

    @property
    def result(self) -> float:
        return self._total


class CountAggregator(Aggregator):
    """개수 — Number of values."""

    def init(self) -> "CountAggregator":
        self._count: int = 0
        return self

    def add_value(self, value: Any) -> "CountAggregator":
        if isinstance(value, Aggregator):
            return self.add(value)
        self._count += 1
        return self

    def add(self, other: Aggregator) -> "CountAggregator":
        self._count += int(other.result)
        return self

    @property
    def result(self) -> float:
        return self._count

    @property
    def formatted_result(self) -> float:
        return self._count


class AverageAggregator(Aggregator):
    """평균 — Mean of the values; merging keeps the weighted mean."""

    def init(self) -> "AverageAggregator":
        self._total: float = 0.0
        self._count: int = 0
        return self

    def add_value(self, value: Any) -> "AverageAggregator":
        if isinstance(value, Aggregator):
            return self.add(value)
        self._total += float(value or 0.0)
        self._count += 1
        return self

    def add(self, other: Aggregator) -> "AverageAggregator":
        if isinstance(other, AverageAggregator):
            self._total += other._total
            self._count += other._count
        else:
            self._total += other.result
            self._count += 1
        return self

    @property
    def result(self) -> float:
        return self._total / self._count if self._count else 0.0


# 이름별 집계기 — Aggregators selectable by name
AGGREGATORS: dict[str, type[Aggregator]] = {
    "sum": SumAggregator,
    "count": CountAggregator,
    "average": AverageAggregator,
}
