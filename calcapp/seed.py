"""초기 데이터 시드 스크립트 — 상태, 그룹, 마진, 관리자 계정 생성.

Seed script — Creates the default calculation states, a sample group with
its category, the global margins and the super admin account.

Usage:
    python -m calcapp.seed

Creates:
    - 3개 상태: Offer (editable), Accepted, Archived
    - 1개 그룹 "Material" + 카테고리 "Various" 와 마진 범위 (1 group with margins)
    - 전체 마진 범위 (Global margin ranges)
    - 1개 관리자 계정: admin / admin123 (ROLE_SUPER_ADMIN)
"""

import asyncio

from sqlalchemy import select

from calcapp.database import async_session, engine, Base
from calcapp.models import CalculationState, Category, GlobalMargin, Group, GroupMargin, User
from calcapp.models.user import ROLE_SUPER_ADMIN
from calcapp.utils.password import hash_password

# (코드, 설명, 편집 가능, 색상) — (code, description, editable, color)
DEFAULT_STATES: list[tuple[str, str, bool, str]] = [
    ("Offer", "Calculation being prepared", True, "#0984E3"),
    ("Accepted", "Accepted by the customer", False, "#00B894"),
    ("Archived", "Archived calculation", False, "#636E72"),
]

# (최소, 최대, 마진) — (minimum, maximum, margin)
GROUP_MARGINS: list[tuple[float, float, float]] = [
    (0.0, 1000.0, 1.25),
    (1000.0, 10000.0, 1.15),
    (10000.0, 1000000.0, 1.1),
]

GLOBAL_MARGINS: list[tuple[float, float, float]] = [
    (0.0, 5000.0, 1.05),
    (5000.0, 1000000.0, 1.02),
]


async def seed() -> None:
    """데이터베이스를 초기 데이터로 시드합니다.

    Seed the database with initial data. Creates the tables if they do not
    exist, then inserts the defaults.

    Idempotent: 사용자가 이미 있으면 건너뜁니다 (Skips when any user exists).
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as db:
        result = await db.execute(select(User).limit(1))
        if result.scalar_one_or_none():
            print("Already seeded. Skipping.")
            return

        for code, description, editable, color in DEFAULT_STATES:
            db.add(CalculationState(code=code, description=description, editable=editable, color=color))

        group: Group = Group(code="Material", description="Material and supplies")
        group.margins = [
            GroupMargin(minimum=minimum, maximum=maximum, margin=margin)
            for minimum, maximum, margin in GROUP_MARGINS
        ]
        db.add(group)
        await db.flush()  # flush로 group.id 생성 (Flush to generate group.id)
        db.add(Category(code="Various", description="Various material", group_id=group.id))

        for minimum, maximum, margin in GLOBAL_MARGINS:
            db.add(GlobalMargin(minimum=minimum, maximum=maximum, margin=margin))

        admin: User = User(
            username="admin",
            email="admin@example.com",
            password_hash=hash_password("admin123"),
            role=ROLE_SUPER_ADMIN,
            enabled=True,
            verified=True,
        )
        db.add(admin)

        await db.commit()
        print("Seeded: 3 states, 1 group, global margins, admin user=admin/admin123")


if __name__ == "__main__":
    asyncio.run(seed())
