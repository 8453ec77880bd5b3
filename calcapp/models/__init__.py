"""SQLAlchemy ORM 모델 패키지 — 모든 도메인 모델의 중앙 임포트 지점.

SQLAlchemy ORM models package — Central import point for all domain models.
Importing from this package registers every model with the metadata,
which Alembic and the test fixtures rely on.

Modules:
    user: 사용자 (Users and roles)
    token: 리프레시 토큰 (Refresh tokens)
    catalog: 그룹, 그룹 마진, 카테고리, 제품, 전체 마진 (Catalog and margins)
    task: 작업, 디지털 프린트 (Tasks and digital prints)
    customer: 고객 (Customers)
    calculation: 계산서 상태와 계산서 트리 (States and the calculation tree)
    property: 애플리케이션 파라미터 (Application parameters)
"""

from calcapp.models.user import User
from calcapp.models.token import RefreshToken
from calcapp.models.catalog import Group, GroupMargin, Category, Product, GlobalMargin
from calcapp.models.task import Task, TaskItem, TaskItemMargin, DigiPrint, DigiPrintItem
from calcapp.models.customer import Customer
from calcapp.models.calculation import (
    CalculationState,
    Calculation,
    CalculationGroup,
    CalculationCategory,
    CalculationItem,
)
from calcapp.models.property import Property

__all__ = [
    "User", "RefreshToken",
    "Group", "GroupMargin", "Category", "Product", "GlobalMargin",
    "Task", "TaskItem", "TaskItemMargin", "DigiPrint", "DigiPrintItem",
    "Customer",
    "CalculationState", "Calculation", "CalculationGroup", "CalculationCategory", "CalculationItem",
    "Property",
]
