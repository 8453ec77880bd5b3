"""디지털 프린트 서비스 — Digital print CRUD and compute."""

from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from calcapp.models.task import (
    DIGI_PRINT_BACKLIT,
    DIGI_PRINT_PRICE,
    DIGI_PRINT_REPLICATING,
    DigiPrint,
    DigiPrintItem,
)
from calcapp.repositories.task_repository import digi_print_repository
from calcapp.schemas.task import (
    DigiPrintComputeItem,
    DigiPrintComputeRequest,
    DigiPrintComputeResponse,
    DigiPrintCreate,
    DigiPrintItemInput,
    DigiPrintItemResponse,
    DigiPrintResponse,
    DigiPrintUpdate,
)
from calcapp.utils.amounts import round_amount
from calcapp.utils.exceptions import DuplicateError, NotFoundError


class DigiPrintService:
    """디지털 프린트 비즈니스 로직 — Digital print business logic."""

    def _to_response(self, digi_print: DigiPrint) -> DigiPrintResponse:
        return DigiPrintResponse(
            id=str(digi_print.id),
            format=digi_print.format,
            width=digi_print.width,
            height=digi_print.height,
            items=[
                DigiPrintItemResponse(
                    id=str(item.id), type=item.type, minimum=item.minimum, maximum=item.maximum, amount=item.amount
                )
                for item in digi_print.items
            ],
        )

    @staticmethod
    def _build_items(items: list[DigiPrintItemInput]) -> list[DigiPrintItem]:
        return [
            DigiPrintItem(type=item.type, minimum=item.minimum, maximum=item.maximum, amount=item.amount)
            for item in sorted(items, key=lambda i: (i.type, i.minimum))
        ]

    async def get_model(self, db: AsyncSession, digi_print_id: UUID) -> DigiPrint:
        digi_print: DigiPrint | None = await digi_print_repository.get_by_id(db, digi_print_id)
        if digi_print is None:
            raise NotFoundError("Digital print not found")
        return digi_print

    async def list_models(self, db: AsyncSession) -> Sequence[DigiPrint]:
        return await digi_print_repository.list_ordered(db)

    async def list_digi_prints(self, db: AsyncSession) -> list[DigiPrintResponse]:
        return [self._to_response(d) for d in await digi_print_repository.list_ordered(db)]

    async def get_digi_print(self, db: AsyncSession, digi_print_id: UUID) -> DigiPrintResponse:
        return self._to_response(await self.get_model(db, digi_print_id))

    async def create_digi_print(self, db: AsyncSession, data: DigiPrintCreate) -> DigiPrintResponse:
        if await digi_print_repository.exists(db, {"format": data.format}):
            raise DuplicateError("A digital print with this format already exists")
        digi_print: DigiPrint = DigiPrint(
            format=data.format,
            width=data.width,
            height=data.height,
            items=self._build_items(data.items),
        )
        db.add(digi_print)
        await db.flush()
        await db.refresh(digi_print)
        return self._to_response(digi_print)

    async def update_digi_print(self, db: AsyncSession, digi_print_id: UUID, data: DigiPrintUpdate) -> DigiPrintResponse:
        digi_print: DigiPrint = await self.get_model(db, digi_print_id)
        if data.format is not None and await digi_print_repository.exists(
            db, {"format": data.format}, exclude_id=digi_print_id
        ):
            raise DuplicateError("A digital print with this format already exists")
        for field, value in data.model_dump(exclude_unset=True, exclude={"items"}).items():
            setattr(digi_print, field, value)
        if data.items is not None:
            digi_print.items = self._build_items(data.items)
        await db.flush()
        await db.refresh(digi_print)
        return self._to_response(digi_print)

    async def delete_digi_print(self, db: AsyncSession, digi_print_id: UUID) -> None:
        if not await digi_print_repository.delete(db, digi_print_id):
            raise NotFoundError("Digital print not found")

    def compute(
        self,
        digi_print: DigiPrint,
        quantity: float,
        price: bool = True,
        backlit: bool = False,
        replicating: bool = False,
    ) -> DigiPrintComputeResponse:
        """디지털 프린트 금액 계산.

        For each selected type, the unit amount of the range containing the
        quantity is multiplied by the quantity.
        """
        items: list[DigiPrintComputeItem] = []
        overall: float = 0.0
        for item_type, selected in (
            (DIGI_PRINT_PRICE, price),
            (DIGI_PRINT_BACKLIT, backlit),
            (DIGI_PRINT_REPLICATING, replicating),
        ):
            if not selected:
                continue
            amount: float = digi_print.find_amount(item_type, quantity)
            total: float = round_amount(amount * quantity)
            overall += total
            items.append(DigiPrintComputeItem(type=item_type, amount=amount, total=total))
        return DigiPrintComputeResponse(
            digi_print_id=str(digi_print.id),
            quantity=quantity,
            items=items,
            overall=round_amount(overall),
        )

    async def compute_digi_print(
        self, db: AsyncSession, digi_print_id: UUID, data: DigiPrintComputeRequest
    ) -> DigiPrintComputeResponse:
        digi_print: DigiPrint = await self.get_model(db, digi_print_id)
        return self.compute(digi_print, data.quantity, data.price, data.backlit, data.replicating)


# 싱글턴 인스턴스 — Singleton instance
digiprint_service: DigiPrintService = DigiPrintService()
