"""검색 레포지토리 — Free-text search across the main entities."""

from typing import Any, Sequence

from sqlalchemy import String, cast, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from calcapp.database import Base


class SearchRepository:
    """검색 레포지토리 — Case-insensitive ``LIKE`` search over text columns."""

    async def search(
        self,
        db: AsyncSession,
        model: type[Base],
        fields: Sequence[str],
        text: str,
        limit: int,
    ) -> list[tuple[Any, str, str]]:
        """모델 검색 — Return (id, field, content) for each matching column of the first ``limit`` records."""
        pattern: str = f"%{text}%"
        columns = [getattr(model, name) for name in fields]
        query = (
            select(model.id, *columns)
            .where(or_(*(cast(column, String).ilike(pattern) for column in columns)))
            .limit(limit)
        )
        needle: str = text.lower()
        hits: list[tuple[Any, str, str]] = []
        for row in (await db.execute(query)).all():
            for name, value in zip(fields, row[1:]):
                if value is not None and needle in str(value).lower():
                    hits.append((row[0], name, str(value)))
        return hits


# 싱글턴 인스턴스 — Singleton instance
search_repository: SearchRepository = SearchRepository()
