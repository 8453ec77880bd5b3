"""계산서 상태 서비스 — State CRUD business logic."""

from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from calcapp.models.calculation import CalculationState
from calcapp.repositories.state_repository import state_repository
from calcapp.schemas.calculation import StateCreate, StateResponse, StateUpdate
from calcapp.utils.exceptions import BadRequestError, DuplicateError, NotFoundError


class StateService:
    """계산서 상태 관련 비즈니스 로직을 처리하는 서비스.

    Service handling calculation state business logic. A state used by
    calculations cannot be deleted.
    """

    def _to_response(self, state: CalculationState, count: int = 0) -> StateResponse:
        return StateResponse(
            id=str(state.id),
            code=state.code,
            description=state.description,
            editable=state.editable,
            color=state.color,
            calculations=count,
        )

    async def list_states(self, db: AsyncSession, editable: bool | None = None) -> list[StateResponse]:
        states: Sequence[CalculationState] = await state_repository.list_ordered(db, editable)
        counts: dict[UUID, int] = await state_repository.get_calculation_counts(db)
        return [self._to_response(s, counts.get(s.id, 0)) for s in states]

    async def list_models(self, db: AsyncSession) -> Sequence[CalculationState]:
        return await state_repository.list_ordered(db)

    async def get_model(self, db: AsyncSession, state_id: UUID) -> CalculationState:
        state: CalculationState | None = await state_repository.get_by_id(db, state_id)
        if state is None:
            raise NotFoundError("State not found")
        return state

    async def get_state(self, db: AsyncSession, state_id: UUID) -> StateResponse:
        state: CalculationState = await self.get_model(db, state_id)
        return self._to_response(state, await state_repository.count_calculations(db, state_id))

    async def create_state(self, db: AsyncSession, data: StateCreate) -> StateResponse:
        """새 상태를 생성합니다.

        Raises:
            DuplicateError: 같은 코드의 상태가 이미 존재할 때 (Code already used)
        """
        if await state_repository.exists(db, {"code": data.code}):
            raise DuplicateError("A state with this code already exists")
        state: CalculationState = await state_repository.create(db, data.model_dump())
        return self._to_response(state)

    async def update_state(self, db: AsyncSession, state_id: UUID, data: StateUpdate) -> StateResponse:
        await self.get_model(db, state_id)
        if data.code is not None and await state_repository.exists(db, {"code": data.code}, exclude_id=state_id):
            raise DuplicateError("A state with this code already exists")
        state: CalculationState | None = await state_repository.update(db, state_id, data.model_dump(exclude_unset=True))
        if state is None:
            raise NotFoundError("State not found")
        return self._to_response(state, await state_repository.count_calculations(db, state_id))

    async def delete_state(self, db: AsyncSession, state_id: UUID) -> None:
        """상태 삭제 — 계산서가 참조하면 400 (Rejected while calculations use it)."""
        state: CalculationState = await self.get_model(db, state_id)
        count: int = await state_repository.count_calculations(db, state_id)
        if count:
            raise BadRequestError(f"The state '{state.code}' is used by {count} calculation(s)")
        await state_repository.delete(db, state_id)


# 싱글턴 인스턴스 — Singleton instance
state_service: StateService = StateService()
