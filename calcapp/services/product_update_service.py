"""제품 가격 일괄 변경 서비스 — Bulk product price update.

New price:
    percent → old × (1 + value)
    fixed   → old + value
optionally rounded to the nearest 0.05. Products whose price would not
change are skipped.
"""

import logging
from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from calcapp.listeners import current_username
from calcapp.models.catalog import Category, Product
from calcapp.repositories.category_repository import category_repository
from calcapp.repositories.product_repository import product_repository
from calcapp.schemas.admin import ProductUpdateLine, ProductUpdateQuery, ProductUpdateResult
from calcapp.utils.amounts import is_float_equals, round_amount, round_to_step
from calcapp.utils.exceptions import BadRequestError, NotFoundError

logger = logging.getLogger(__name__)


def compute_price(old_price: float, percent: bool, value: float, rounded: bool) -> float:
    """새 가격 계산 — Compute the new price of a product."""
    new_price: float = old_price * (1.0 + value) if percent else old_price + value
    if rounded:
        new_price = round_to_step(new_price, 0.05)
    return round_amount(new_price)


class ProductUpdateService:
    """제품 가격 일괄 변경 서비스 — Product price update service."""

    async def _get_products(self, db: AsyncSession, category: Category, query: ProductUpdateQuery) -> Sequence[Product]:
        products: Sequence[Product] = await product_repository.list_products(db, category_id=category.id)
        if query.all_products:
            return products
        if not query.product_ids:
            raise BadRequestError("At least one product must be selected")
        selected: set[UUID] = set(query.product_ids)
        return [p for p in products if p.id in selected]

    async def update(self, db: AsyncSession, query: ProductUpdateQuery) -> ProductUpdateResult:
        """제품 가격을 일괄 변경합니다.

        Raises:
            NotFoundError: 카테고리 없음 (Unknown category)
            BadRequestError: 선택된 제품 없음 (No product selected)
        """
        category: Category | None = await category_repository.get_by_id(db, query.category_id)
        if category is None:
            raise NotFoundError("Category not found")

        products: Sequence[Product] = await self._get_products(db, category, query)
        result: ProductUpdateResult = ProductUpdateResult(
            simulate=query.simulate,
            category_code=category.code,
            total=len(products),
            updated=0,
        )
        percent: bool = query.type == "percent"
        for product in products:
            old_price: float = product.price
            new_price: float = compute_price(old_price, percent, query.value, query.round)
            if is_float_equals(old_price, new_price):
                continue
            result.lines.append(
                ProductUpdateLine(
                    id=str(product.id),
                    description=product.description,
                    old_price=old_price,
                    new_price=new_price,
                    delta=round_amount(new_price - old_price),
                )
            )
            if not query.simulate:
                product.price = new_price
        result.updated = len(result.lines)

        if not query.simulate and result.lines:
            await db.flush()
            logger.info(
                "Product prices of '%s' updated by %s: %d of %d (%s %s)",
                category.code,
                current_username.get() or "system",
                result.updated,
                result.total,
                query.type,
                query.value,
            )
        return result


# 싱글턴 인스턴스 — Singleton instance
product_update_service: ProductUpdateService = ProductUpdateService()
