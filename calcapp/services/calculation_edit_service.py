"""계산서 편집 서비스 — 계산서 CRUD 및 편집 작업.

Calculation Edit Service — Calculation CRUD, clone, state change, product
insertion and the clean-up operations (duplicates, empty items, sort).

Every write recomputes the cached totals through
``calculation_service.update_total()``. Calculations whose state is not
editable can be read, cloned, deleted and moved to another state only.
"""

import logging
from datetime import date
from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from calcapp.models.calculation import Calculation, CalculationState
from calcapp.models.catalog import Category, Product
from calcapp.models.user import User
from calcapp.repositories.calculation_repository import calculation_repository
from calcapp.repositories.category_repository import category_repository
from calcapp.repositories.product_repository import product_repository
from calcapp.repositories.state_repository import state_repository
from calcapp.repositories.user_repository import user_repository
from calcapp.schemas.calculation import (
    CalculationCategoryResponse,
    CalculationCloneRequest,
    CalculationCreate,
    CalculationDetailResponse,
    CalculationEditResult,
    CalculationGroupResponse,
    CalculationItemInput,
    CalculationItemResponse,
    CalculationResponse,
    CalculationUpdate,
)
from calcapp.services.application_service import application_service
from calcapp.services.calculation_service import calculation_service
from calcapp.services.mail_service import mail_service
from calcapp.utils.exceptions import BadRequestError, ForbiddenError, NotFoundError
from calcapp.utils.pagination import Page, paginate

logger = logging.getLogger(__name__)


class CalculationEditService:
    """계산서 CRUD 및 편집 작업 서비스 — Calculation business logic."""

    # -------------------------------------------------------------------
    # 응답 변환 — Response conversion
    # -------------------------------------------------------------------
    def _to_response(self, calculation: Calculation, min_margin: float) -> CalculationResponse:
        return CalculationResponse(
            id=str(calculation.id),
            date=calculation.date,
            customer=calculation.customer,
            description=calculation.description,
            state_id=str(calculation.state_id),
            state_code=calculation.state.code,
            state_color=calculation.state.color,
            editable=calculation.is_editable,
            items_total=calculation.items_total,
            overall_total=calculation.overall_total,
            overall_margin=calculation.overall_margin,
            below_margin=calculation.is_margin_below(min_margin),
            created_by=calculation.created_by,
            updated_by=calculation.updated_by,
            created_at=calculation.created_at,
            updated_at=calculation.updated_at,
        )

    def _to_detail(self, calculation: Calculation, min_margin: float) -> CalculationDetailResponse:
        """상세 응답 — 그룹 트리와 합계 행 (Group tree and total rows)."""
        base: CalculationResponse = self._to_response(calculation, min_margin)
        groups: list[CalculationGroupResponse] = [
            CalculationGroupResponse(
                id=str(group.id),
                group_id=str(group.group_id),
                code=group.code,
                amount=group.amount,
                margin=group.margin,
                margin_amount=group.margin_amount,
                total=group.total,
                position=group.position,
                categories=[
                    CalculationCategoryResponse(
                        id=str(category.id),
                        category_id=str(category.category_id),
                        code=category.code,
                        amount=category.amount,
                        position=category.position,
                        items=[
                            CalculationItemResponse(
                                id=str(item.id),
                                description=item.description,
                                unit=item.unit,
                                price=item.price,
                                quantity=item.quantity,
                                total=item.total,
                                position=item.position,
                            )
                            for item in category.items
                        ],
                    )
                    for category in group.categories
                ],
            )
            for group in calculation.groups
        ]
        return CalculationDetailResponse(
            **base.model_dump(),
            user_margin=calculation.user_margin,
            global_margin=calculation.global_margin,
            lines_count=calculation.lines_count,
            groups=groups,
            totals=calculation_service.create_groups_from_calculation(calculation),
        )

    async def _detail(self, db: AsyncSession, calculation: Calculation) -> CalculationDetailResponse:
        return self._to_detail(calculation, await application_service.get_min_margin(db))

    # -------------------------------------------------------------------
    # 조회 — Queries
    # -------------------------------------------------------------------
    async def list_calculations(
        self,
        db: AsyncSession,
        state_id: UUID | None = None,
        search: str | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        below: bool = False,
        page: int = 1,
        per_page: int = 20,
    ) -> Page[CalculationResponse]:
        """계산서 목록 (페이지네이션).

        Paginated calculation list, newest first.

        Args:
            state_id: 상태 필터 (State filter)
            search: 검색어 (Text matched against customer, description and creator)
            date_from / date_to: 일자 범위 (Inclusive date range)
            below: 최소 마진 미달만 (Only calculations below the minimum margin)
        """
        min_margin: float = await application_service.get_min_margin(db)
        query = calculation_repository.build_list_query(
            state_id=state_id,
            search=search,
            date_from=date_from,
            date_to=date_to,
            below_margin=min_margin if below else None,
        )
        items, total = await paginate(db, query, page, per_page)
        return Page[CalculationResponse].build(
            [self._to_response(c, min_margin) for c in items], total, page, per_page
        )

    async def list_models(self, db: AsyncSession, **filters) -> Sequence[Calculation]:
        return await calculation_repository.list_calculations(db, **filters)

    async def list_below(self, db: AsyncSession) -> list[CalculationResponse]:
        """최소 마진 미달 계산서 — Calculations below the minimum margin."""
        min_margin: float = await application_service.get_min_margin(db)
        calculations = await calculation_repository.list_calculations(db, below_margin=min_margin)
        return [self._to_response(c, min_margin) for c in calculations]

    async def list_duplicates(self, db: AsyncSession) -> list[CalculationResponse]:
        """중복 항목이 있는 계산서 — Calculations holding duplicate items."""
        return await self._to_responses(db, await self.get_duplicate_models(db))

    async def list_empty(self, db: AsyncSession) -> list[CalculationResponse]:
        """빈 항목이 있는 계산서 — Calculations holding items with a zero price or quantity."""
        return await self._to_responses(db, await self.get_empty_models(db))

    async def get_duplicate_models(self, db: AsyncSession) -> Sequence[Calculation]:
        ids: list[UUID] = await calculation_repository.get_duplicate_item_ids(db)
        return await calculation_repository.list_calculations(db, ids=ids) if ids else []

    async def get_empty_models(self, db: AsyncSession) -> Sequence[Calculation]:
        ids: list[UUID] = await calculation_repository.get_empty_item_ids(db)
        return await calculation_repository.list_calculations(db, ids=ids) if ids else []

    async def _to_responses(self, db: AsyncSession, calculations: Sequence[Calculation]) -> list[CalculationResponse]:
        if not calculations:
            return []
        min_margin: float = await application_service.get_min_margin(db)
        return [self._to_response(c, min_margin) for c in calculations]

    async def get_model(self, db: AsyncSession, calculation_id: UUID) -> Calculation:
        calculation: Calculation | None = await calculation_repository.get_by_id(db, calculation_id)
        if calculation is None:
            raise NotFoundError("Calculation not found")
        return calculation

    async def get_calculation(self, db: AsyncSession, calculation_id: UUID) -> CalculationDetailResponse:
        return await self._detail(db, await self.get_model(db, calculation_id))

    async def get_editable(self, db: AsyncSession, calculation_id: UUID) -> Calculation:
        """편집 가능한 계산서 — Load a calculation and check that its state allows editing.

        Raises:
            ForbiddenError: 편집 불가 상태 (The state is not editable)
        """
        calculation: Calculation = await self.get_model(db, calculation_id)
        if not calculation.is_editable:
            raise ForbiddenError(f"The calculation is in the state '{calculation.state.code}' and cannot be edited")
        return calculation

    # -------------------------------------------------------------------
    # 생성/수정/삭제 — Create, update, delete
    # -------------------------------------------------------------------
    async def _get_state(self, db: AsyncSession, state_id: UUID | None) -> CalculationState:
        """상태 조회 — 생략 시 기본 상태 (The default state when omitted)."""
        if state_id is None:
            state: CalculationState | None = await application_service.get_default_state(db)
            if state is None:
                raise BadRequestError("No calculation state is defined")
            return state
        state = await state_repository.get_by_id(db, state_id)
        if state is None:
            raise NotFoundError("State not found")
        return state

    async def _add_items(self, db: AsyncSession, calculation: Calculation, items: list[CalculationItemInput]) -> None:
        """항목 추가 — 카테고리별로 그룹/카테고리 생성 (Groups and categories are created as needed).

        Raises:
            NotFoundError: 알 수 없는 카테고리 (Unknown category)
        """
        category_ids: list[UUID] = list(dict.fromkeys(item.category_id for item in items))
        categories: dict[UUID, Category] = {
            c.id: c for c in await category_repository.get_by_ids(db, category_ids)
        }
        for item in items:
            category: Category | None = categories.get(item.category_id)
            if category is None:
                raise NotFoundError(f"Category {item.category_id} not found")
            calculation.add_item(category, item.description, item.unit, item.price, item.quantity)

    async def create_calculation(self, db: AsyncSession, data: CalculationCreate) -> CalculationDetailResponse:
        """새 계산서를 생성합니다.

        Create a calculation from a list of items. The state defaults to the
        configured default state and the date to today.

        Raises:
            NotFoundError: 상태 또는 카테고리 없음 (Unknown state or category)
            BadRequestError: 상태가 하나도 없을 때 (No state is defined)
        """
        state: CalculationState = await self._get_state(db, data.state_id)
        calculation: Calculation = Calculation(
            date=data.date or date.today(),
            customer=data.customer,
            description=data.description,
            state=state,
            user_margin=data.user_margin,
            groups=[],
        )
        await self._add_items(db, calculation, data.items)
        await calculation_service.update_total(db, calculation)
        db.add(calculation)
        await db.flush()
        logger.info("Calculation %s created for '%s'", calculation.id, calculation.customer)
        return await self._detail(db, calculation)

    async def update_calculation(
        self,
        db: AsyncSession,
        calculation_id: UUID,
        data: CalculationUpdate,
    ) -> CalculationDetailResponse:
        """계산서 수정 — ``items`` 가 주어지면 모든 항목을 교체 (Given items replace every item).

        Raises:
            ForbiddenError: 편집 불가 상태 (The state is not editable)
        """
        calculation: Calculation = await self.get_editable(db, calculation_id)
        update: dict = data.model_dump(exclude_unset=True, exclude={"items", "state_id"})
        for field, value in update.items():
            if value is not None:
                setattr(calculation, field, value)
        if data.state_id is not None:
            calculation.state = await self._get_state(db, data.state_id)

        if data.items is not None:
            # 기존 그룹 삭제 후 재구성 — Drop the groups (delete-orphan) and rebuild
            calculation.groups.clear()
            await db.flush()
            await self._add_items(db, calculation, data.items)

        await calculation_service.update_total(db, calculation)
        await db.flush()
        return await self._detail(db, calculation)

    async def delete_calculation(self, db: AsyncSession, calculation_id: UUID) -> None:
        calculation: Calculation = await self.get_model(db, calculation_id)
        await db.delete(calculation)
        await db.flush()
        logger.info("Calculation %s deleted", calculation_id)

    async def clone_calculation(
        self,
        db: AsyncSession,
        calculation_id: UUID,
        data: CalculationCloneRequest,
    ) -> CalculationDetailResponse:
        """계산서 복제 — 오늘 일자, 주어진 상태(기본 상태) 및 설명 (Today's date, given or default state)."""
        source: Calculation = await self.get_model(db, calculation_id)
        state: CalculationState = await self._get_state(db, data.state_id)
        copy: Calculation = source.clone(state, data.description)
        await calculation_service.update_total(db, copy)
        db.add(copy)
        await db.flush()
        logger.info("Calculation %s cloned into %s", source.id, copy.id)
        return await self._detail(db, copy)

    async def change_state(
        self,
        db: AsyncSession,
        calculation_id: UUID,
        state_id: UUID,
        current_user: User,
    ) -> CalculationDetailResponse:
        """상태 변경 — 작성자에게 알림 메일 발송.

        Move a calculation to another state. The state of a non-editable
        calculation can be changed too. The creator is notified by e-mail
        when someone else changes the state.
        """
        calculation: Calculation = await self.get_model(db, calculation_id)
        state: CalculationState = await self._get_state(db, state_id)
        if calculation.state_id == state.id:
            return await self._detail(db, calculation)

        old_code: str = calculation.state.code
        calculation.state = state
        await db.flush()
        logger.info("Calculation %s moved from '%s' to '%s'", calculation.id, old_code, state.code)

        if calculation.created_by and calculation.created_by != current_user.username:
            creator: User | None = await user_repository.get_by_username(db, calculation.created_by)
            if creator is not None and creator.enabled:
                await mail_service.send_state_changed(calculation, creator, old_code, current_user.username)
        return await self._detail(db, calculation)

    async def add_product(
        self,
        db: AsyncSession,
        calculation_id: UUID,
        product_id: UUID,
        quantity: float = 1.0,
    ) -> CalculationDetailResponse:
        """제품 추가 — Append a catalog product as a new item."""
        calculation: Calculation = await self.get_editable(db, calculation_id)
        product: Product | None = await product_repository.get_by_id(db, product_id)
        if product is None:
            raise NotFoundError("Product not found")
        calculation.add_product(product, quantity)
        await calculation_service.update_total(db, calculation)
        await db.flush()
        return await self._detail(db, calculation)

    # -------------------------------------------------------------------
    # 정리 작업 — Clean-up operations
    # -------------------------------------------------------------------
    async def remove_duplicates(self, db: AsyncSession, calculation_id: UUID) -> CalculationEditResult:
        calculation: Calculation = await self.get_editable(db, calculation_id)
        removed: int = calculation.remove_duplicate_items()
        return await self._finish_edit(db, calculation, removed)

    async def remove_empty(self, db: AsyncSession, calculation_id: UUID) -> CalculationEditResult:
        calculation: Calculation = await self.get_editable(db, calculation_id)
        removed: int = calculation.remove_empty_items()
        return await self._finish_edit(db, calculation, removed)

    async def sort(self, db: AsyncSession, calculation_id: UUID) -> CalculationEditResult:
        calculation: Calculation = await self.get_editable(db, calculation_id)
        changed: bool = calculation.sort()
        return await self._finish_edit(db, calculation, int(changed))

    async def _finish_edit(self, db: AsyncSession, calculation: Calculation, count: int) -> CalculationEditResult:
        if count:
            await calculation_service.update_total(db, calculation)
            await db.flush()
        return CalculationEditResult(count=count, calculation=await self._detail(db, calculation))


# 싱글턴 인스턴스 — Singleton instance
calculation_edit_service: CalculationEditService = CalculationEditService()
