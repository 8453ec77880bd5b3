"""애플리케이션 파라미터 레포지토리 — Application property queries."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from calcapp.models.property import Property
from calcapp.repositories.base import BaseRepository


class PropertyRepository(BaseRepository[Property]):
    def __init__(self) -> None:
        super().__init__(Property)

    async def get_by_name(self, db: AsyncSession, name: str) -> Property | None:
        result = await db.execute(select(Property).where(Property.name == name))
        return result.scalar_one_or_none()

    async def get_values(self, db: AsyncSession) -> dict[str, str | None]:
        result = await db.execute(select(Property))
        return {prop.name: prop.value for prop in result.scalars().all()}

    async def set_value(self, db: AsyncSession, name: str, value: str | None) -> Property:
        """파라미터 저장 (없으면 생성) — Upsert a property value."""
        prop: Property | None = await self.get_by_name(db, name)
        if prop is None:
            prop = Property(name=name, value=value)
            db.add(prop)
        else:
            prop.value = value
        await db.flush()
        return prop

    async def remove(self, db: AsyncSession, name: str) -> bool:
        """파라미터 삭제 — Delete a property; return whether it existed."""
        prop: Property | None = await self.get_by_name(db, name)
        if prop is None:
            return False
        await db.delete(prop)
        await db.flush()
        return True


# 싱글턴 인스턴스 — Singleton instance
property_repository: PropertyRepository = PropertyRepository()
