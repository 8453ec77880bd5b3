"""Excel 내보내기 서비스 — Spreadsheet (.xlsx) exports built with openpyxl.

Each export has one styled header row followed by one row per record.
The single calculation export lists the items grouped by group and
category, followed by the total rows.
"""

from io import BytesIO
from typing import Any, Iterable, Sequence

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from calcapp.models.calculation import Calculation, CalculationState
from calcapp.models.catalog import Category, GlobalMargin, Group, Product
from calcapp.models.customer import Customer
from calcapp.models.rights import PERMISSIONS_SORTED, rights_matrix
from calcapp.models.task import Task
from calcapp.models.user import User
from calcapp.schemas.calculation import TotalRow

# 헤더 스타일 — Header style
HEADER_FONT: Font = Font(bold=True, color="FFFFFF", size=11)
HEADER_FILL: PatternFill = PatternFill(start_color="2D3436", end_color="2D3436", fill_type="solid")
GROUP_FILL: PatternFill = PatternFill(start_color="6C5CE7", end_color="6C5CE7", fill_type="solid")
TOTAL_FONT: Font = Font(bold=True)

# 숫자 형식 — Number formats
AMOUNT_FORMAT: str = "#,##0.00"
PERCENT_FORMAT: str = "0.00%"
DATE_FORMAT: str = "dd.mm.yyyy"

XLSX_MEDIA_TYPE: str = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _style_headers(ws: Worksheet, headers: list[str], row: int = 1) -> None:
    for col_idx, header in enumerate(headers, 1):
        cell = ws.cell(row=row, column=col_idx, value=header)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = Alignment(horizontal="center")


def _format_columns(ws: Worksheet, formats: dict[int, str], first_row: int = 2) -> None:
    for col_idx, number_format in formats.items():
        for (cell,) in ws.iter_rows(min_row=first_row, min_col=col_idx, max_col=col_idx):
            cell.number_format = number_format


def _autosize(ws: Worksheet) -> None:
    """열 너비 조정 — Fit the column widths to the longest value (capped)."""
    widths: dict[int, int] = {}
    for row in ws.iter_rows():
        for cell in row:
            if cell.value is not None:
                widths[cell.column] = max(widths.get(cell.column, 0), len(str(cell.value)))
    for col_idx, width in widths.items():
        ws.column_dimensions[get_column_letter(col_idx)].width = min(width + 2, 60)


def _save(wb: Workbook) -> bytes:
    output: BytesIO = BytesIO()
    wb.save(output)
    return output.getvalue()


class SpreadsheetService:
    """Excel 문서 생성 서비스 — Spreadsheet document service."""

    def _table(
        self,
        title: str,
        headers: list[str],
        rows: Iterable[Sequence[Any]],
        formats: dict[int, str] | None = None,
    ) -> bytes:
        """단일 시트 표 — One sheet with a header row and the given rows."""
        wb: Workbook = Workbook()
        ws: Worksheet = wb.active
        ws.title = title[:31]
        _style_headers(ws, headers)
        for row in rows:
            ws.append(list(row))
        _format_columns(ws, formats or {})
        ws.freeze_panes = "A2"
        _autosize(ws)
        return _save(wb)

    # -------------------------------------------------------------------
    # 계산서 — Calculations
    # -------------------------------------------------------------------
    def calculations(self, calculations: Sequence[Calculation], min_margin: float) -> bytes:
        """계산서 목록 — Calculation list; rows below the minimum margin are red."""
        wb: Workbook = Workbook()
        ws: Worksheet = wb.active
        ws.title = "Calculations"
        _style_headers(ws, ["Id", "Date", "State", "Customer", "Description", "Items", "Margin", "Total"])
        below_font: Font = Font(color="C0392B")
        for row_idx, c in enumerate(calculations, 2):
            ws.append([
                str(c.id), c.date, c.state.code, c.customer, c.description,
                c.items_total, c.overall_margin, c.overall_total,
            ])
            if c.is_margin_below(min_margin):
                ws.cell(row=row_idx, column=7).font = below_font
        _format_columns(ws, {2: DATE_FORMAT, 6: AMOUNT_FORMAT, 7: PERCENT_FORMAT, 8: AMOUNT_FORMAT})
        ws.freeze_panes = "A2"
        _autosize(ws)
        return _save(wb)

    def calculation(self, calculation: Calculation, totals: list[TotalRow]) -> bytes:
        """계산서 문서.

        Single calculation: a header block, the items grouped by group and
        category, then the total rows (description, amount, margin, total).
        """
        wb: Workbook = Workbook()
        ws: Worksheet = wb.active
        ws.title = "Calculation"
        header: list[tuple[str, Any]] = [
            ("Calculation", str(calculation.id)),
            ("Date", calculation.date),
            ("State", calculation.state.code),
            ("Customer", calculation.customer),
            ("Description", calculation.description),
        ]
        for label, value in header:
            ws.append([label, value])
            ws.cell(row=ws.max_row, column=1).font = TOTAL_FONT
        ws.cell(row=2, column=2).number_format = DATE_FORMAT
        ws.append([])

        first: int = ws.max_row + 1
        _style_headers(ws, ["Description", "Unit", "Price", "Quantity", "Total"], row=first)
        for group in calculation.groups:
            ws.append([group.code])
            for col_idx in range(1, 6):
                cell = ws.cell(row=ws.max_row, column=col_idx)
                cell.fill = GROUP_FILL
                cell.font = HEADER_FONT
            for category in group.categories:
                ws.append([category.code])
                ws.cell(row=ws.max_row, column=1).font = TOTAL_FONT
                for item in category.items:
                    ws.append([item.description, item.unit, item.price, item.quantity, item.total])
        _format_columns(ws, {3: AMOUNT_FORMAT, 4: AMOUNT_FORMAT, 5: AMOUNT_FORMAT}, first + 1)

        ws.append([])
        totals_row: int = ws.max_row + 1
        _style_headers(ws, ["Totals", "Amount", "Margin", "Margin amount", "Total"], row=totals_row)
        for total in totals:
            ws.append([total.description, total.amount, total.margin_percent, total.margin_amount, total.total])
        _format_columns(
            ws,
            {2: AMOUNT_FORMAT, 3: PERCENT_FORMAT, 4: AMOUNT_FORMAT, 5: AMOUNT_FORMAT},
            totals_row + 1,
        )
        ws.cell(row=ws.max_row, column=1).font = TOTAL_FONT
        ws.cell(row=ws.max_row, column=5).font = TOTAL_FONT
        _autosize(ws)
        return _save(wb)

    # -------------------------------------------------------------------
    # 카탈로그 — Catalog and address book
    # -------------------------------------------------------------------
    def customers(self, customers: Sequence[Customer]) -> bytes:
        return self._table(
            "Customers",
            ["Company", "Title", "First name", "Last name", "Address", "Zip code", "City", "Country", "E-mail", "Web site"],
            (
                [c.company, c.title, c.first_name, c.last_name, c.address, c.zip_code, c.city, c.country, c.email, c.web_site]
                for c in customers
            ),
        )

    def products(self, products: Sequence[Product]) -> bytes:
        return self._table(
            "Products",
            ["Group", "Category", "Description", "Unit", "Price", "Supplier"],
            (
                [p.category.group.code, p.category.code, p.description, p.unit, p.price, p.supplier]
                for p in products
            ),
            {5: AMOUNT_FORMAT},
        )

    def categories(self, categories: Sequence[Category]) -> bytes:
        return self._table(
            "Categories",
            ["Code", "Description", "Group"],
            ([c.code, c.description, c.group.code] for c in categories),
        )

    def groups(self, groups: Sequence[Group]) -> bytes:
        """그룹 — One row per margin range (groups without margins get one empty row)."""
        rows: list[list[Any]] = []
        for group in groups:
            if not group.margins:
                rows.append([group.code, group.description, None, None, None])
            for margin in group.margins:
                rows.append([group.code, group.description, margin.minimum, margin.maximum, margin.margin])
        return self._table(
            "Groups",
            ["Code", "Description", "Minimum", "Maximum", "Margin"],
            rows,
            {3: AMOUNT_FORMAT, 4: AMOUNT_FORMAT, 5: PERCENT_FORMAT},
        )

    def states(self, states: Sequence[CalculationState]) -> bytes:
        return self._table(
            "States",
            ["Code", "Description", "Editable", "Color"],
            ([s.code, s.description, "Yes" if s.editable else "No", s.color] for s in states),
        )

    def global_margins(self, margins: Sequence[GlobalMargin]) -> bytes:
        return self._table(
            "Global margins",
            ["Minimum", "Maximum", "Margin"],
            ([m.minimum, m.maximum, m.margin] for m in margins),
            {1: AMOUNT_FORMAT, 2: AMOUNT_FORMAT, 3: PERCENT_FORMAT},
        )

    def tasks(self, tasks: Sequence[Task]) -> bytes:
        """작업 — One row per item margin range."""
        rows: list[list[Any]] = []
        for task in tasks:
            for item in task.items:
                for margin in item.margins:
                    rows.append([task.name, task.category.code, task.unit, item.name, margin.minimum, margin.maximum, margin.value])
            if not task.items:
                rows.append([task.name, task.category.code, task.unit, None, None, None, None])
        return self._table(
            "Tasks",
            ["Task", "Category", "Unit", "Item", "Minimum", "Maximum", "Value"],
            rows,
            {5: AMOUNT_FORMAT, 6: AMOUNT_FORMAT, 7: AMOUNT_FORMAT},
        )

    def users(self, users: Sequence[User]) -> bytes:
        return self._table(
            "Users",
            ["Username", "E-mail", "Role", "Enabled", "Last login"],
            (
                [
                    u.username,
                    u.email,
                    u.role,
                    "Yes" if u.enabled else "No",
                    u.last_login.replace(tzinfo=None) if u.last_login else None,
                ]
                for u in users
            ),
        )

    def users_rights(
        self,
        roles: Sequence[tuple[str, list[int]]],
        users: Sequence[tuple[User, list[int]]],
    ) -> bytes:
        """권한 보고서 — Role rights then user rights, one row per entity."""
        wb: Workbook = Workbook()
        ws: Worksheet = wb.active
        ws.title = "Rights"
        _style_headers(ws, ["Name", "Entity"] + [p.name.capitalize() for p in PERMISSIONS_SORTED])

        def _append(name: str, role: str, rights: list[int]) -> None:
            ws.append([name])
            ws.cell(row=ws.max_row, column=1).font = TOTAL_FONT
            for entity, flags in rights_matrix(rights, role):
                ws.append(["", entity] + ["\u2022" if flag else "" for flag in flags])

        for role, rights in roles:
            _append(role, role, rights)
        for user, rights in users:
            _append(user.username, user.role, rights)
        ws.append([f"{len(roles)} role(s), {len(users)} user(s)"])
        ws.cell(row=ws.max_row, column=1).font = TOTAL_FONT
        ws.freeze_panes = "A2"
        _autosize(ws)
        return _save(wb)


# 싱글턴 인스턴스 — Singleton instance
spreadsheet_service: SpreadsheetService = SpreadsheetService()
