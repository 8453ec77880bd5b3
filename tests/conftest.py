"""테스트 인프라 — 인메모리 SQLite DB, 세션, httpx 클라이언트 픽스처.

Test infrastructure — In-memory SQLite database, session and httpx client
fixtures. Every test gets a fresh schema. Fixture data is committed so that
the simulated admin jobs (which roll back) keep it.
"""

from collections.abc import AsyncGenerator
from datetime import date

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from calcapp.database import Base, get_db
from calcapp.main import app
from calcapp.models import *  # noqa: F401,F403 — register all models with metadata
from calcapp.models import (
    Calculation,
    CalculationState,
    Category,
    GlobalMargin,
    Group,
    GroupMargin,
    Product,
    User,
)
from calcapp.models.user import ROLE_ADMIN, ROLE_SUPER_ADMIN, ROLE_USER
from calcapp.utils.jwt import create_access_token
from calcapp.utils.password import hash_password

TEST_DATABASE_URL = "sqlite+aiosqlite://"


# ---------------------------------------------------------------------------
# Function-scoped: 엔진, 세션, 클라이언트
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """테스트용 async 엔진 — 단일 연결을 공유하는 인메모리 DB."""
    eng = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def db(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """각 테스트에 격리된 DB 세션을 제공합니다."""
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI 테스트 클라이언트 — DB 세션을 오버라이드합니다."""
    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    app.dependency_overrides[get_db] = _override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# 헬퍼 픽스처: 사용자
# ---------------------------------------------------------------------------
async def _create_user(db: AsyncSession, username: str, role: str, enabled: bool = True) -> User:
    user = User(
        username=username,
        email=f"{username}@example.com",
        password_hash=hash_password(f"{username}123!"),
        role=role,
        enabled=enabled,
    )
    db.add(user)
    await db.commit()
    return user


@pytest_asyncio.fixture
async def super_admin_user(db: AsyncSession) -> User:
    return await _create_user(db, "root", ROLE_SUPER_ADMIN)


@pytest_asyncio.fixture
async def admin_user(db: AsyncSession) -> User:
    return await _create_user(db, "admin", ROLE_ADMIN)


@pytest_asyncio.fixture
async def normal_user(db: AsyncSession) -> User:
    return await _create_user(db, "user", ROLE_USER)


@pytest_asyncio.fixture
async def disabled_user(db: AsyncSession) -> User:
    return await _create_user(db, "disabled", ROLE_USER, enabled=False)


def make_token(user: User) -> str:
    """테스트용 JWT 액세스 토큰을 생성합니다."""
    return create_access_token({"sub": str(user.id), "role": user.role, "level": user.level})


@pytest.fixture
def super_admin_token(super_admin_user) -> str:
    return make_token(super_admin_user)


@pytest.fixture
def admin_token(admin_user) -> str:
    return make_token(admin_user)


@pytest.fixture
def user_token(normal_user) -> str:
    return make_token(normal_user)


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


# ---------------------------------------------------------------------------
# 헬퍼 픽스처: 카탈로그와 상태
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def states(db: AsyncSession) -> dict[str, CalculationState]:
    """편집 가능(Offer) 상태와 편집 불가(Accepted, Archived) 상태."""
    result = {
        "offer": CalculationState(code="Offer", editable=True, color="#0984E3"),
        "accepted": CalculationState(code="Accepted", editable=False, color="#00B894"),
        "archived": CalculationState(code="Archived", editable=False, color="#636E72"),
    }
    db.add_all(result.values())
    await db.commit()
    return result


@pytest_asyncio.fixture
async def group(db: AsyncSession) -> Group:
    """마진 1.25 (0-1000), 1.10 (1000-100000) 그룹."""
    g = Group(
        code="Material",
        margins=[
            GroupMargin(minimum=0.0, maximum=1000.0, margin=1.25),
            GroupMargin(minimum=1000.0, maximum=100000.0, margin=1.1),
        ],
    )
    db.add(g)
    await db.commit()
    return g


@pytest_asyncio.fixture
async def category(db: AsyncSession, group: Group) -> Category:
    c = Category(code="Paper", description="Paper and cardboard", group=group)
    db.add(c)
    await db.commit()
    return c


@pytest_asyncio.fixture
async def product(db: AsyncSession, category: Category) -> Product:
    p = Product(description="Paper A4", unit="pce", price=100.0, supplier="Supplier", category=category)
    db.add(p)
    await db.commit()
    return p


@pytest_asyncio.fixture
async def global_margins(db: AsyncSession) -> list[GlobalMargin]:
    """전체 마진 1.1 (0-100000)."""
    margins = [GlobalMargin(minimum=0.0, maximum=100000.0, margin=1.1)]
    db.add_all(margins)
    await db.commit()
    return margins


@pytest_asyncio.fixture
async def calculation(db: AsyncSession, states, category, global_margins) -> Calculation:
    """편집 가능한 계산서 — 100 × 2, 그룹 마진 1.25, 전체 마진 1.1 → 275.00."""
    from calcapp.services.calculation_service import calculation_service

    calc = Calculation(
        date=date(2026, 1, 15),
        customer="ACME",
        description="Flyers",
        state=states["offer"],
        user_margin=0.0,
        created_by="admin",
        groups=[],
    )
    calc.add_item(category, "Paper A4", "pce", 100.0, 2.0)
    await calculation_service.update_total(db, calc)
    db.add(calc)
    await db.commit()
    return calc
