"""애플리케이션 파라미터 서비스 — Application parameters.

Parameters are stored as text properties. Missing values fall back to
the configured defaults (``settings.MIN_MARGIN`` for the minimum margin).
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from calcapp.config import settings
from calcapp.models.calculation import CalculationState
from calcapp.models.property import (
    PROPERTY_CUSTOMER_EMAIL,
    PROPERTY_CUSTOMER_NAME,
    PROPERTY_CUSTOMER_URL,
    PROPERTY_DEFAULT_CATEGORY,
    PROPERTY_DEFAULT_STATE,
    PROPERTY_MIN_MARGIN,
)
from calcapp.repositories.category_repository import category_repository
from calcapp.repositories.property_repository import property_repository
from calcapp.repositories.state_repository import state_repository
from calcapp.schemas.admin import ParametersResponse, ParametersUpdate
from calcapp.utils.amounts import round_amount
from calcapp.utils.exceptions import NotFoundError

logger = logging.getLogger(__name__)


def _parse_uuid(value: str | None) -> UUID | None:
    if not value:
        return None
    try:
        return UUID(value)
    except ValueError:
        logger.warning("Ignoring the invalid identifier parameter '%s'", value)
        return None


class ApplicationService:
    """애플리케이션 파라미터 서비스 — Application parameters service."""

    async def get_min_margin(self, db: AsyncSession) -> float:
        """최소 마진 배수 — Minimum margin multiplier (settings default when unset)."""
        prop = await property_repository.get_by_name(db, PROPERTY_MIN_MARGIN)
        if prop is None or not prop.value:
            return settings.MIN_MARGIN
        try:
            return round_amount(float(prop.value))
        except ValueError:
            logger.warning("Invalid minimum margin parameter '%s'", prop.value)
            return settings.MIN_MARGIN

    async def is_margin_below(self, db: AsyncSession, margin: float) -> bool:
        return margin < await self.get_min_margin(db)

    async def get_default_state(self, db: AsyncSession) -> CalculationState | None:
        """기본 상태 — Default state of new calculations.

        Falls back to the first editable state when the parameter is unset.
        """
        prop = await property_repository.get_by_name(db, PROPERTY_DEFAULT_STATE)
        state_id: UUID | None = _parse_uuid(prop.value if prop else None)
        if state_id is not None:
            state: CalculationState | None = await state_repository.get_by_id(db, state_id)
            if state is not None:
                return state
        editable = await state_repository.list_ordered(db, editable=True)
        return editable[0] if editable else None

    async def get_parameters(self, db: AsyncSession) -> ParametersResponse:
        values: dict[str, str | None] = await property_repository.get_values(db)
        return ParametersResponse(
            min_margin=await self.get_min_margin(db),
            default_state_id=values.get(PROPERTY_DEFAULT_STATE),
            default_category_id=values.get(PROPERTY_DEFAULT_CATEGORY),
            customer_name=values.get(PROPERTY_CUSTOMER_NAME),
            customer_email=values.get(PROPERTY_CUSTOMER_EMAIL),
            customer_url=values.get(PROPERTY_CUSTOMER_URL),
        )

    async def update_parameters(self, db: AsyncSession, data: ParametersUpdate) -> ParametersResponse:
        """파라미터 저장 — Save the given parameters.

        Raises:
            NotFoundError: 기본 상태 또는 카테고리 없음 (Unknown default state or category)
        """
        update: dict = data.model_dump(exclude_unset=True)
        if update.get("default_state_id") is not None:
            if await state_repository.get_by_id(db, update["default_state_id"]) is None:
                raise NotFoundError("State not found")
        if update.get("default_category_id") is not None:
            if await category_repository.get_by_id(db, update["default_category_id"]) is None:
                raise NotFoundError("Category not found")

        # 마진 비교는 소수점 2자리 기준 — Margins are compared with 2 decimals
        if update.get("min_margin") is not None:
            update["min_margin"] = round_amount(update["min_margin"])
        for name, value in update.items():
            await property_repository.set_value(db, name, None if value is None else str(value))
        logger.info("Application parameters updated: %s", ", ".join(sorted(update)))
        return await self.get_parameters(db)


# 싱글턴 인스턴스 — Singleton instance
application_service: ApplicationService = ApplicationService()
