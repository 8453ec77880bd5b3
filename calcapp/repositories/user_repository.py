"""사용자 레포지토리 — User queries."""

from typing import Sequence

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from calcapp.models.user import User
from calcapp.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """사용자 레포지토리 — User repository."""

    def __init__(self) -> None:
        super().__init__(User)

    async def list_ordered(self, db: AsyncSession) -> Sequence[User]:
        result = await db.execute(select(User).order_by(func.lower(User.username)))
        return result.scalars().all()

    async def get_by_username(self, db: AsyncSession, username: str) -> User | None:
        query: Select = select(User).where(func.lower(User.username) == username.lower())
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def get_by_email(self, db: AsyncSession, email: str) -> User | None:
        query: Select = select(User).where(func.lower(User.email) == email.lower())
        result = await db.execute(query)
        return result.scalar_one_or_none()


# 싱글턴 인스턴스 — Singleton instance
user_repository: UserRepository = UserRepository()
