"""제품 서비스 — 제품 CRUD 및 Excel 가져오기.

Product Service — Product CRUD and the spreadsheet import.

Import layout (first sheet, row 1 = headers, case-insensitive):
    description | unit | price | supplier | category
The category column holds the category code.
"""

import logging
import math
from io import BytesIO
from zipfile import BadZipFile
from typing import Any, Sequence
from uuid import UUID

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from sqlalchemy.ext.asyncio import AsyncSession

from calcapp.models.catalog import Category, Product
from calcapp.repositories.category_repository import category_repository
from calcapp.repositories.product_repository import product_repository
from calcapp.schemas.catalog import (
    ProductCreate,
    ProductImportResult,
    ProductImportRow,
    ProductResponse,
    ProductUpdate,
)
from calcapp.utils.exceptions import BadRequestError, DuplicateError, NotFoundError
from calcapp.utils.pagination import Page, paginate

logger = logging.getLogger(__name__)

# 가져오기 필수 열 — Required import columns
REQUIRED_COLUMNS: tuple[str, ...] = ("description", "price", "category")


class ProductService:
    """제품 관련 비즈니스 로직을 처리하는 서비스 — Product business logic."""

    def _to_response(self, product: Product) -> ProductResponse:
        return ProductResponse(
            id=str(product.id),
            description=product.description,
            unit=product.unit,
            price=product.price,
            supplier=product.supplier,
            category_id=str(product.category_id),
            category_code=product.category.code,
            group_code=product.category.group.code,
            updated_at=product.updated_at,
        )

    async def list_products(
        self,
        db: AsyncSession,
        category_id: UUID | None = None,
        group_id: UUID | None = None,
        search: str | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> Page[ProductResponse]:
        query = product_repository.build_list_query(category_id, group_id, search)
        items, total = await paginate(db, query, page, per_page)
        return Page[ProductResponse].build([self._to_response(p) for p in items], total, page, per_page)

    async def list_models(self, db: AsyncSession, category_id: UUID | None = None) -> Sequence[Product]:
        return await product_repository.list_products(db, category_id=category_id)

    async def get_model(self, db: AsyncSession, product_id: UUID) -> Product:
        product: Product | None = await product_repository.get_by_id(db, product_id)
        if product is None:
            raise NotFoundError("Product not found")
        return product

    async def get_product(self, db: AsyncSession, product_id: UUID) -> ProductResponse:
        return self._to_response(await self.get_model(db, product_id))

    async def _get_category(self, db: AsyncSession, category_id: UUID) -> Category:
        category: Category | None = await category_repository.get_by_id(db, category_id)
        if category is None:
            raise NotFoundError("Category not found")
        return category

    async def create_product(self, db: AsyncSession, data: ProductCreate) -> ProductResponse:
        """제품 생성.

        Raises:
            NotFoundError: 카테고리 없음 (Category not found)
            DuplicateError: 같은 설명의 제품이 이미 존재할 때 (Description already used)
        """
        category: Category = await self._get_category(db, data.category_id)
        if await product_repository.get_by_description(db, data.description) is not None:
            raise DuplicateError("A product with this description already exists")
        product: Product = Product(**data.model_dump(exclude={"category_id"}), category=category)
        db.add(product)
        await db.flush()
        await db.refresh(product)
        return self._to_response(product)

    async def update_product(self, db: AsyncSession, product_id: UUID, data: ProductUpdate) -> ProductResponse:
        product: Product = await self.get_model(db, product_id)
        update: dict = data.model_dump(exclude_unset=True)
        if "description" in update:
            existing: Product | None = await product_repository.get_by_description(db, update["description"])
            if existing is not None and existing.id != product_id:
                raise DuplicateError("A product with this description already exists")
        if "category_id" in update:
            product.category = await self._get_category(db, update.pop("category_id"))
        for field, value in update.items():
            setattr(product, field, value)
        await db.flush()
        await db.refresh(product)
        return self._to_response(product)

    async def delete_product(self, db: AsyncSession, product_id: UUID) -> None:
        if not await product_repository.delete(db, product_id):
            raise NotFoundError("Product not found")

    # -------------------------------------------------------------------
    # Excel 가져오기 — Spreadsheet import
    # -------------------------------------------------------------------
    @staticmethod
    def _read_rows(content: bytes) -> list[tuple[int, dict[str, Any]]]:
        """시트 행 읽기 — Read (row number, values by header) from the first sheet.

        Raises:
            BadRequestError: 읽을 수 없는 파일 또는 필수 열 누락 (Unreadable file or missing columns)
        """
        try:
            wb = load_workbook(filename=BytesIO(content), read_only=True, data_only=True)
        except (InvalidFileException, BadZipFile, KeyError, OSError, ValueError) as exc:
            raise BadRequestError("The file is not a valid Excel workbook") from exc

        try:
            ws = wb.worksheets[0]
            header_row = next(ws.iter_rows(min_row=1, max_row=1, values_only=True), None)
            if header_row is None:
                raise BadRequestError("The sheet is empty")
            headers: list[str] = [str(v).strip().lower() if v is not None else "" for v in header_row]
            missing: list[str] = [c for c in REQUIRED_COLUMNS if c not in headers]
            if missing:
                raise BadRequestError(f"Missing required columns: {', '.join(missing)}")

            rows: list[tuple[int, dict[str, Any]]] = []
            for row_num, values in enumerate(ws.iter_rows(min_row=2, values_only=True), start=2):
                data: dict[str, Any] = {
                    header: values[i] for i, header in enumerate(headers) if header and i < len(values)
                }
                # 빈 행 무시 — Skip blank rows
                if all(v is None or str(v).strip() == "" for v in data.values()):
                    continue
                rows.append((row_num, data))
            return rows
        finally:
            wb.close()

    async def import_products(self, db: AsyncSession, content: bytes, simulate: bool = True) -> ProductImportResult:
        """Excel 파일에서 제품을 가져옵니다.

        Import products from a spreadsheet. Existing descriptions are
        updated, new ones are created; invalid rows are reported and skipped.
        When simulating nothing is written.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            content: .xlsx 파일 바이트 (Workbook bytes)
            simulate: 검증만 수행 (Validate without writing)

        Returns:
            ProductImportResult: 행별 결과 (Per-row outcome and counters)
        """
        result: ProductImportResult = ProductImportResult(simulate=simulate)
        categories: dict[str, Category] = {
            c.code.lower(): c for c in await category_repository.list_ordered(db)
        }
        seen: set[str] = set()

        for row_num, data in self._read_rows(content):
            description: str = str(data.get("description") or "").strip()
            line: ProductImportRow = ProductImportRow(row=row_num, description=description or None, action="error")
            result.rows.append(line)

            if not description:
                line.error = "The description is empty"
            elif description.lower() in seen:
                line.error = "The description is duplicated in the file"
            elif (category := categories.get(str(data.get("category") or "").strip().lower())) is None:
                line.error = f"Unknown category '{data.get('category')}'"
            else:
                try:
                    price: float = float(data.get("price") or 0.0)
                except (TypeError, ValueError):
                    price = -1.0
                if not math.isfinite(price) or price < 0:
                    line.error = f"Invalid price '{data.get('price')}'"
                else:
                    seen.add(description.lower())
                    unit: str | None = str(data["unit"]).strip() if data.get("unit") is not None else None
                    supplier: str | None = str(data["supplier"]).strip() if data.get("supplier") is not None else None
                    product: Product | None = await product_repository.get_by_description(db, description)
                    if product is None:
                        line.action = "created"
                        result.created += 1
                        if not simulate:
                            db.add(Product(
                                description=description,
                                unit=unit,
                                price=price,
                                supplier=supplier,
                                category=category,
                            ))
                    else:
                        line.action = "updated"
                        result.updated += 1
                        if not simulate:
                            product.unit = unit
                            product.price = price
                            product.supplier = supplier
                            product.category = category

            if line.error is not None:
                result.errors += 1

        if not simulate:
            await db.flush()
        logger.info(
            "Product import%s: %d created, %d updated, %d error(s)",
            " (simulation)" if simulate else "",
            result.created,
            result.updated,
            result.errors,
        )
        return result


# 싱글턴 인스턴스 — Singleton instance
product_service: ProductService = ProductService()
