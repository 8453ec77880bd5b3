"""영속성 이벤트 리스너 — Persistence event listeners.

Before each flush, calculations that are new or modified (directly or through
one of their groups, categories or items) get their ``updated_at`` and
``updated_by`` stamped. Bulk admin jobs wrap their flush in
``suspend_listeners()`` so that recomputed or archived calculations keep
their original timestamps.

The acting username is taken from ``current_username``, which the
authentication dependency sets for every request.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone

from sqlalchemy import event
from sqlalchemy.orm import Session

from calcapp.models.calculation import (
    Calculation,
    CalculationCategory,
    CalculationGroup,
    CalculationItem,
)

logger = logging.getLogger(__name__)

# 현재 요청 사용자명 — Username of the user acting in the current context
current_username: ContextVar[str | None] = ContextVar("current_username", default=None)

_suspended: ContextVar[bool] = ContextVar("listeners_suspended", default=False)


@contextmanager
def suspend_listeners() -> Iterator[None]:
    """리스너 일시 중지 — Disable timestamp stamping inside the block."""
    token = _suspended.set(True)
    try:
        yield
    finally:
        _suspended.reset(token)


def is_suspended() -> bool:
    return _suspended.get()


def _parent_calculation(target: object) -> Calculation | None:
    """하위 객체의 계산서 — Walk up from a child row to its calculation."""
    if isinstance(target, CalculationItem):
        target = target.category
    if isinstance(target, CalculationCategory):
        target = target.group
    if isinstance(target, CalculationGroup):
        target = target.calculation
    return target if isinstance(target, Calculation) else None


@event.listens_for(Session, "before_flush")
def stamp_calculations(session: Session, flush_context, instances) -> None:
    """변경된 계산서에 수정 일시/수정자 기록 — Stamp modified calculations before flush."""
    if is_suspended():
        return

    touched: dict[int, Calculation] = {}
    for target in list(session.new) + [obj for obj in session.dirty if session.is_modified(obj)]:
        calculation: Calculation | None = _parent_calculation(target)
        if calculation is not None:
            touched[id(calculation)] = calculation

    if not touched:
        return

    now: datetime = datetime.now(timezone.utc)
    username: str | None = current_username.get()
    for calculation in touched.values():
        created: bool = calculation in session.new
        calculation.updated_at = now
        if username is not None:
            calculation.updated_by = username
            if calculation.created_by is None:
                calculation.created_by = username
        logger.info(
            "Calculation %s %s by %s",
            "(new)" if calculation.id is None else calculation.id,
            "created" if created else "updated",
            username or "(anonymous)",
        )
