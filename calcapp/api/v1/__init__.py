"""API v1 라우터 패키지 — 모든 엔드포인트 통합.

API v1 Router package — Aggregates every endpoint into a single router.

Included routers:
    - auth: 인증 (Login, tokens, password reset)
    - users: 사용자 관리 (User management, messages)
    - states, groups, categories, products, global_margins: 카탈로그 (Catalog)
    - customers: 고객 (Address book)
    - tasks, digiprints: 작업 계산 (Task and digital print computation)
    - calculations: 계산서 (Calculations and exports)
    - admin: 관리 도구 (Parameters and bulk jobs)
    - reports: 차트, 피벗, 검색, 번역 (Charts, pivot, search, translation)
"""

from fastapi import APIRouter

from calcapp.api.v1.auth import router as auth_router
from calcapp.api.v1.users import router as users_router
from calcapp.api.v1.states import router as states_router
from calcapp.api.v1.groups import router as groups_router
from calcapp.api.v1.categories import router as categories_router
from calcapp.api.v1.products import router as products_router
from calcapp.api.v1.global_margins import router as global_margins_router
from calcapp.api.v1.customers import router as customers_router
from calcapp.api.v1.tasks import router as tasks_router
from calcapp.api.v1.digiprints import router as digiprints_router
from calcapp.api.v1.calculations import router as calculations_router
from calcapp.api.v1.admin import router as admin_router
from calcapp.api.v1.reports import router as reports_router

api_router: APIRouter = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["Auth"])
api_router.include_router(users_router, prefix="/users", tags=["Users"])
api_router.include_router(states_router, prefix="/states", tags=["States"])
api_router.include_router(groups_router, prefix="/groups", tags=["Groups"])
api_router.include_router(categories_router, prefix="/categories", tags=["Categories"])
api_router.include_router(products_router, prefix="/products", tags=["Products"])
api_router.include_router(global_margins_router, prefix="/global-margins", tags=["Global Margins"])
api_router.include_router(customers_router, prefix="/customers", tags=["Customers"])
api_router.include_router(tasks_router, prefix="/tasks", tags=["Tasks"])
api_router.include_router(digiprints_router, prefix="/digiprints", tags=["Digital Prints"])
api_router.include_router(calculations_router, prefix="/calculations", tags=["Calculations"])
api_router.include_router(admin_router, prefix="/admin", tags=["Admin"])
api_router.include_router(reports_router, tags=["Reports"])
