"""작업 및 디지털 프린트 레포지토리 — Task and digital print queries."""

from typing import Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from calcapp.models.task import DigiPrint, Task
from calcapp.repositories.base import BaseRepository


class TaskRepository(BaseRepository[Task]):
    """작업 레포지토리 — Task repository (items and margins are eager-loaded)."""

    def __init__(self) -> None:
        super().__init__(Task)

    async def list_ordered(self, db: AsyncSession) -> Sequence[Task]:
        result = await db.execute(select(Task).order_by(func.lower(Task.name)))
        return result.scalars().all()


class DigiPrintRepository(BaseRepository[DigiPrint]):
    """디지털 프린트 레포지토리 — Digital print repository."""

    def __init__(self) -> None:
        super().__init__(DigiPrint)

    async def list_ordered(self, db: AsyncSession) -> Sequence[DigiPrint]:
        result = await db.execute(select(DigiPrint).order_by(DigiPrint.format))
        return result.scalars().all()


# 싱글턴 인스턴스 — Singleton instances
task_repository: TaskRepository = TaskRepository()
digi_print_repository: DigiPrintRepository = DigiPrintRepository()
