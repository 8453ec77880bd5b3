"""고객 서비스 — Customer CRUD business logic."""

from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from calcapp.models.customer import Customer
from calcapp.repositories.customer_repository import customer_repository
from calcapp.schemas.customer import CustomerCreate, CustomerResponse, CustomerUpdate
from calcapp.utils.exceptions import BadRequestError, NotFoundError
from calcapp.utils.pagination import Page, paginate


class CustomerService:
    """고객 관련 비즈니스 로직을 처리하는 서비스 — Customer business logic."""

    def _to_response(self, customer: Customer) -> CustomerResponse:
        return CustomerResponse(
            id=str(customer.id),
            title=customer.title,
            first_name=customer.first_name,
            last_name=customer.last_name,
            company=customer.company,
            address=customer.address,
            zip_code=customer.zip_code,
            city=customer.city,
            country=customer.country,
            email=customer.email,
            web_site=customer.web_site,
            birthday=customer.birthday,
            display_name=customer.display_name,
            created_at=customer.created_at,
        )

    async def list_customers(
        self,
        db: AsyncSession,
        search: str | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> Page[CustomerResponse]:
        items, total = await paginate(db, customer_repository.build_list_query(search), page, per_page)
        return Page[CustomerResponse].build([self._to_response(c) for c in items], total, page, per_page)

    async def list_models(self, db: AsyncSession, search: str | None = None) -> Sequence[Customer]:
        result = await db.execute(customer_repository.build_list_query(search))
        return result.scalars().all()

    async def get_model(self, db: AsyncSession, customer_id: UUID) -> Customer:
        customer: Customer | None = await customer_repository.get_by_id(db, customer_id)
        if customer is None:
            raise NotFoundError("Customer not found")
        return customer

    async def get_customer(self, db: AsyncSession, customer_id: UUID) -> CustomerResponse:
        return self._to_response(await self.get_model(db, customer_id))

    async def create_customer(self, db: AsyncSession, data: CustomerCreate) -> CustomerResponse:
        customer: Customer = await customer_repository.create(db, data.model_dump())
        return self._to_response(customer)

    async def update_customer(self, db: AsyncSession, customer_id: UUID, data: CustomerUpdate) -> CustomerResponse:
        """고객 수정 — 수정 후에도 회사명 또는 이름이 있어야 함 (A name must remain)."""
        customer: Customer = await self.get_model(db, customer_id)
        update: dict = data.model_dump(exclude_unset=True)
        names = {field: update.get(field, getattr(customer, field)) for field in ("company", "first_name", "last_name")}
        if not any(names.values()):
            raise BadRequestError("The company or the first/last name must be given")
        updated: Customer | None = await customer_repository.update(db, customer_id, update)
        if updated is None:
            raise NotFoundError("Customer not found")
        return self._to_response(updated)

    async def delete_customer(self, db: AsyncSession, customer_id: UUID) -> None:
        if not await customer_repository.delete(db, customer_id):
            raise NotFoundError("Customer not found")


# 싱글턴 인스턴스 — Singleton instance
customer_service: CustomerService = CustomerService()
