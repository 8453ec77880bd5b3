"""고객 레포지토리 — Customer queries."""

from sqlalchemy import Select, func, or_, select

from calcapp.models.customer import Customer
from calcapp.repositories.base import BaseRepository


class CustomerRepository(BaseRepository[Customer]):
    """고객 레포지토리 — Customer repository."""

    def __init__(self) -> None:
        super().__init__(Customer)

    def build_list_query(self, search: str | None = None) -> Select:
        """회사명/성/이름 순 목록 쿼리 — Customers ordered by company, last and first name."""
        query: Select = select(Customer).order_by(
            func.coalesce(Customer.company, ""),
            func.coalesce(Customer.last_name, ""),
            func.coalesce(Customer.first_name, ""),
        )
        if search:
            pattern: str = f"%{search}%"
            query = query.where(
                or_(
                    Customer.company.ilike(pattern),
                    Customer.first_name.ilike(pattern),
                    Customer.last_name.ilike(pattern),
                    Customer.city.ilike(pattern),
                    Customer.email.ilike(pattern),
                )
            )
        return query


# 싱글턴 인스턴스 — Singleton instance
customer_repository: CustomerRepository = CustomerRepository()
