"""피벗 필드 — Pivot fields.

A field reads one value from a dataset row (a ``dict``). Date fields
reduce a date to a period number (year, semester, quarter, month, week)
and render it with a readable title.
"""

import calendar
from datetime import date, datetime
from typing import Any


class PivotField:
    """피벗 필드 — Plain field reading ``row[name]``.

    Attributes:
        name: 데이터셋 키 (Key in the dataset rows)
        title: 표시 제목 (Display title, defaults to the name)
    """

    def __init__(self, name: str, title: str | None = None) -> None:
        self.name: str = name
        self.title: str = title or name

    def get_value(self, row: dict[str, Any]) -> Any:
        return row.get(self.name)

    def get_display_value(self, value: Any) -> str:
        return "" if value is None else str(value)

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "title": self.title}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


# 날짜 필드 방식 — Date field methods
METHOD_YEAR: str = "year"
METHOD_SEMESTER: str = "semester"
METHOD_QUARTER: str = "quarter"
METHOD_MONTH: str = "month"
METHOD_WEEK: str = "week"
# ISO 주의 연도 — Year owning the ISO week (2024-12-30 belongs to 2025)
METHOD_WEEK_YEAR: str = "week_year"


def _to_date(value: Any) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


class PivotDateField(PivotField):
    """날짜 필드 — Field reducing a date to a period number."""

    def __init__(self, name: str, method: str, title: str | None = None) -> None:
        if method not in (METHOD_YEAR, METHOD_SEMESTER, METHOD_QUARTER, METHOD_MONTH, METHOD_WEEK, METHOD_WEEK_YEAR):
            raise ValueError(f"Unknown date method: {method}")
        super().__init__(name, title or method.replace("_", " ").capitalize())
        self.method: str = method

    def get_value(self, row: dict[str, Any]) -> int | None:
        value: date | None = _to_date(row.get(self.name))
        if value is None:
            return None
        if self.method == METHOD_YEAR:
            return value.year
        if self.method == METHOD_SEMESTER:
            return 1 if value.month <= 6 else 2
        if self.method == METHOD_QUARTER:
            return (value.month - 1) // 3 + 1
        if self.method == METHOD_MONTH:
            return value.month
        if self.method == METHOD_WEEK_YEAR:
            return value.isocalendar()[0]
        return value.isocalendar()[1]

    def get_display_value(self, value: Any) -> str:
        if value is None:
            return ""
        if self.method == METHOD_MONTH:
            return calendar.month_name[int(value)]
        if self.method == METHOD_SEMESTER:
            return f"S{value}"
        if self.method == METHOD_QUARTER:
            return f"Q{value}"
        if self.method == METHOD_WEEK:
            return f"W{int(value):02d}"
        return str(value)

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "method": self.method}


class PivotFieldFactory:
    """필드 생성 헬퍼 — Shortcuts creating the supported fields."""

    @staticmethod
    def default(name: str, title: str | None = None) -> PivotField:
        return PivotField(name, title)

    @staticmethod
    def year(name: str, title: str | None = None) -> PivotDateField:
        return PivotDateField(name, METHOD_YEAR, title)

    @staticmethod
    def semester(name: str, title: str | None = None) -> PivotDateField:
        return PivotDateField(name, METHOD_SEMESTER, title)

    @staticmethod
    def quarter(name: str, title: str | None = None) -> PivotDateField:
        return PivotDateField(name, METHOD_QUARTER, title)

    @staticmethod
    def month(name: str, title: str | None = None) -> PivotDateField:
        return PivotDateField(name, METHOD_MONTH, title)

    @staticmethod
    def week(name: str, title: str | None = None) -> PivotDateField:
        return PivotDateField(name, METHOD_WEEK, title)

    @staticmethod
    def week_year(name: str, title: str | None = None) -> PivotDateField:
        return PivotDateField(name, METHOD_WEEK_YEAR, title)
