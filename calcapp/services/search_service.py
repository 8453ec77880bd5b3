"""검색 서비스 — Global free-text search."""

from sqlalchemy.ext.asyncio import AsyncSession

from calcapp.database import Base
from calcapp.models.calculation import Calculation, CalculationState
from calcapp.models.catalog import Category, Group, Product
from calcapp.models.customer import Customer
from calcapp.models.task import Task
from calcapp.repositories.search_repository import search_repository
from calcapp.schemas.report import SearchHit

# 검색 대상 — Searched entities: (type, model, text columns)
SEARCH_TARGETS: tuple[tuple[str, type[Base], tuple[str, ...]], ...] = (
    ("calculation", Calculation, ("customer", "description", "overall_total")),
    ("customer", Customer, ("company", "first_name", "last_name", "city", "email")),
    ("product", Product, ("description", "supplier", "price")),
    ("category", Category, ("code", "description")),
    ("group", Group, ("code", "description")),
    ("task", Task, ("name", "supplier")),
    ("state", CalculationState, ("code", "description")),
)


class SearchService:
    """전체 검색 서비스 — Global search service."""

    async def search(
        self,
        db: AsyncSession,
        text: str,
        entity: str | None = None,
        limit: int = 15,
    ) -> list[SearchHit]:
        """텍스트 검색.

        Search ``text`` in every entity (or only ``entity``). At most
        ``limit`` records are read per entity; a record matching in several
        columns yields one hit per column.
        """
        text = text.strip()
        if not text:
            return []
        hits: list[SearchHit] = []
        for name, model, fields in SEARCH_TARGETS:
            if entity is not None and entity != name:
                continue
            for record_id, field, content in await search_repository.search(db, model, fields, text, limit):
                hits.append(SearchHit(type=name, id=str(record_id), field=field, content=content))
        return hits

    @staticmethod
    def entities() -> list[str]:
        return [name for name, _, _ in SEARCH_TARGETS]


# 싱글턴 인스턴스 — Singleton instance
search_service: SearchService = SearchService()
