"""작업 서비스 — 작업 CRUD 및 수량별 계산.

Task Service — Task CRUD (with items and quantity ranges) and the
compute operation used when adding a task to a calculation.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from calcapp.models.catalog import Category
from calcapp.models.task import Task, TaskItem, TaskItemMargin
from calcapp.repositories.category_repository import category_repository
from calcapp.repositories.task_repository import task_repository
from calcapp.schemas.task import (
    TaskComputeItem,
    TaskComputeRequest,
    TaskComputeResponse,
    TaskCreate,
    TaskItemInput,
    TaskItemResponse,
    TaskMarginResponse,
    TaskResponse,
    TaskUpdate,
)
from calcapp.utils.amounts import round_amount
from calcapp.utils.exceptions import BadRequestError, DuplicateError, NotFoundError


class TaskService:
    """작업 관련 비즈니스 로직을 처리하는 서비스 — Task business logic."""

    def _to_response(self, task: Task) -> TaskResponse:
        return TaskResponse(
            id=str(task.id),
            name=task.name,
            unit=task.unit,
            supplier=task.supplier,
            category_id=str(task.category_id),
            category_code=task.category.code,
            items=[
                TaskItemResponse(
                    id=str(item.id),
                    name=item.name,
                    position=item.position,
                    margins=[
                        TaskMarginResponse(id=str(m.id), minimum=m.minimum, maximum=m.maximum, value=m.value)
                        for m in item.margins
                    ],
                )
                for item in task.items
            ],
        )

    @staticmethod
    def _build_items(items: list[TaskItemInput]) -> list[TaskItem]:
        names: set[str] = set()
        result: list[TaskItem] = []
        for position, item in enumerate(items):
            if item.name.lower() in names:
                raise BadRequestError(f"The item '{item.name}' is duplicated")
            names.add(item.name.lower())
            result.append(
                TaskItem(
                    name=item.name,
                    position=position,
                    margins=[
                        TaskItemMargin(minimum=m.minimum, maximum=m.maximum, value=m.value)
                        for m in sorted(item.margins, key=lambda m: m.minimum)
                    ],
                )
            )
        return result

    async def _get_category(self, db: AsyncSession, category_id: UUID) -> Category:
        category: Category | None = await category_repository.get_by_id(db, category_id)
        if category is None:
            raise NotFoundError("Category not found")
        return category

    async def get_model(self, db: AsyncSession, task_id: UUID) -> Task:
        task: Task | None = await task_repository.get_by_id(db, task_id)
        if task is None:
            raise NotFoundError("Task not found")
        return task

    async def list_models(self, db: AsyncSession) -> Sequence[Task]:
        return await task_repository.list_ordered(db)

    async def list_tasks(self, db: AsyncSession) -> list[TaskResponse]:
        return [self._to_response(t) for t in await task_repository.list_ordered(db)]

    async def get_task(self, db: AsyncSession, task_id: UUID) -> TaskResponse:
        return self._to_response(await self.get_model(db, task_id))

    async def create_task(self, db: AsyncSession, data: TaskCreate) -> TaskResponse:
        """작업 생성.

        Raises:
            DuplicateError: 같은 이름의 작업이 이미 존재할 때 (Name already used)
        """
        category: Category = await self._get_category(db, data.category_id)
        if await task_repository.exists(db, {"name": data.name}):
            raise DuplicateError("A task with this name already exists")
        task: Task = Task(
            name=data.name,
            unit=data.unit,
            supplier=data.supplier,
            category=category,
            items=self._build_items(data.items),
        )
        db.add(task)
        await db.flush()
        await db.refresh(task)
        return self._to_response(task)

    async def update_task(self, db: AsyncSession, task_id: UUID, data: TaskUpdate) -> TaskResponse:
        task: Task = await self.get_model(db, task_id)
        if data.name is not None and await task_repository.exists(db, {"name": data.name}, exclude_id=task_id):
            raise DuplicateError("A task with this name already exists")

        update: dict = data.model_dump(exclude_unset=True, exclude={"items"})
        if "category_id" in update:
            task.category = await self._get_category(db, update.pop("category_id"))
        for field, value in update.items():
            setattr(task, field, value)
        if data.items is not None:
            task.items = []
            # 이름 고유 제약 — Old items must be deleted before the new ones are inserted
            await db.flush()
            task.items = self._build_items(data.items)
        await db.flush()
        await db.refresh(task)
        return self._to_response(task)

    async def delete_task(self, db: AsyncSession, task_id: UUID) -> None:
        if not await task_repository.delete(db, task_id):
            raise NotFoundError("Task not found")

    def compute(self, task: Task, quantity: float, item_ids: list[UUID] | None = None) -> TaskComputeResponse:
        """작업 금액 계산.

        Compute the task amounts for a quantity. For every selected item
        (all items when none is selected) the value of the range containing
        the quantity is multiplied by the quantity.

        Args:
            task: 작업 (Task with items and margins loaded)
            quantity: 수량 (Quantity)
            item_ids: 선택 항목 (Selected item ids, None for all)

        Returns:
            TaskComputeResponse: 항목별 금액과 합계 (Item amounts and overall total)
        """
        selected: set[UUID] | None = set(item_ids) if item_ids else None
        items: list[TaskComputeItem] = []
        overall: float = 0.0
        for item in task.items:
            if selected is not None and item.id not in selected:
                continue
            value: float = item.find_value(quantity)
            amount: float = round_amount(value * quantity)
            overall += amount
            items.append(TaskComputeItem(id=str(item.id), name=item.name, value=value, amount=amount))
        return TaskComputeResponse(
            task_id=str(task.id),
            unit=task.unit,
            quantity=quantity,
            items=items,
            overall=round_amount(overall),
        )

    async def compute_task(self, db: AsyncSession, task_id: UUID, data: TaskComputeRequest) -> TaskComputeResponse:
        return self.compute(await self.get_model(db, task_id), data.quantity, data.items)


# 싱글턴 인스턴스 — Singleton instance
task_service: TaskService = TaskService()
