"""PDF 내보내기 서비스 — PDF documents built with reportlab (platypus).

Documents:
    - calculations / calculation: 계산서 목록과 문서 (Calculation list and single calculation)
    - months / states: 차트 보고서 (Bar chart by month, pie chart by state, with their tables)
    - duplicate_items / empty_items: 정리가 필요한 계산서 (Calculations with duplicate or empty items)
    - users_rights: 역할 및 사용자 권한 (Rights of the roles then of every user)
"""

import calendar
from datetime import date
from io import BytesIO
from typing import Any, Callable, Sequence
from xml.sax.saxutils import escape

from reportlab.graphics.charts.barcharts import VerticalBarChart
from reportlab.graphics.charts.piecharts import Pie
from reportlab.graphics.shapes import Drawing
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from calcapp.config import settings
from calcapp.models.calculation import Calculation, CalculationItem
from calcapp.models.rights import PERMISSIONS_SORTED, rights_matrix
from calcapp.models.user import User
from calcapp.schemas.calculation import TotalRow
from calcapp.schemas.report import MonthChartResponse, StateChartResponse

PDF_MEDIA_TYPE: str = "application/pdf"

HEADER_COLOR = colors.HexColor("#2D3436")
GROUP_COLOR = colors.HexColor("#6C5CE7")
BELOW_COLOR = colors.HexColor("#C0392B")
AMOUNT_COLOR = colors.HexColor("#0984E3")
MARGIN_COLOR = colors.HexColor("#00B894")


def format_amount(value: float) -> str:
    """금액 형식 (1'234.50) — Swiss style amount."""
    return f"{value:,.2f}".replace(",", "'")


def format_percent(value: float) -> str:
    return f"{value * 100:.0f}%"


def format_date(value: date) -> str:
    return value.strftime("%d.%m.%Y")


def _header_style(extra: list[tuple] | None = None) -> TableStyle:
    commands: list[tuple] = [
        ("BACKGROUND", (0, 0), (-1, 0), HEADER_COLOR),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 8),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
    ]
    return TableStyle(commands + (extra or []))


def _state_color(value: str | None) -> colors.Color:
    """상태 색상 — State color, grey when the stored value is not a hex color."""
    try:
        return colors.HexColor(value or "")
    except ValueError:
        return colors.grey


def _duplicate_lines(calculation: Calculation) -> list[str]:
    counts: dict[str, int] = {}
    first: dict[str, CalculationItem] = {}
    for item in calculation.find_duplicate_items():
        counts[item.duplicate_key] = counts.get(item.duplicate_key, 0) + 1
        first.setdefault(item.duplicate_key, item)
    return [f"{item.description} ({counts[key]})" for key, item in first.items()]


def _empty_lines(calculation: Calculation) -> list[str]:
    return [
        f"{item.description} (price: {format_amount(item.price)}, quantity: {format_amount(item.quantity)})"
        for item in calculation.find_empty_items()
    ]


class PdfService:
    """PDF 문서 생성 서비스 — PDF document service."""

    def _build(self, elements: list, title: str, pagesize: tuple[float, float] = A4) -> bytes:
        output: BytesIO = BytesIO()
        doc: SimpleDocTemplate = SimpleDocTemplate(
            output,
            pagesize=pagesize,
            title=title,
            author=settings.APP_NAME,
            leftMargin=12 * mm,
            rightMargin=12 * mm,
            topMargin=12 * mm,
            bottomMargin=12 * mm,
        )
        doc.build(elements)
        return output.getvalue()

    def calculations(self, calculations: Sequence[Calculation], min_margin: float) -> bytes:
        """계산서 목록 (가로) — Calculation list in landscape; margins below the minimum are red."""
        styles = getSampleStyleSheet()
        data: list[list[Any]] = [["Id", "Date", "State", "Customer", "Description", "Items", "Margin", "Total"]]
        extra: list[tuple] = [("ALIGN", (5, 0), (-1, -1), "RIGHT")]
        items_total: float = 0.0
        overall_total: float = 0.0
        for row_idx, c in enumerate(calculations, 1):
            data.append([
                str(c.id)[:8],
                format_date(c.date),
                c.state.code,
                c.customer[:40],
                c.description[:50],
                format_amount(c.items_total),
                format_percent(c.overall_margin),
                format_amount(c.overall_total),
            ])
            if c.is_margin_below(min_margin):
                extra.append(("TEXTCOLOR", (6, row_idx), (6, row_idx), BELOW_COLOR))
            items_total += c.items_total
            overall_total += c.overall_total
        data.append([
            f"{len(calculations)} calculation(s)", "", "", "", "",
            format_amount(items_total),
            format_percent(overall_total / items_total) if items_total else "",
            format_amount(overall_total),
        ])
        extra.append(("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"))

        table: Table = Table(data, repeatRows=1)
        table.setStyle(_header_style(extra))
        elements: list = [Paragraph("Calculations", styles["Title"]), table]
        return self._build(elements, "Calculations", landscape(A4))

    def calculation(self, calculation: Calculation, totals: list[TotalRow], min_margin: float) -> bytes:
        """계산서 문서.

        Single calculation: the header, the items by group and category and
        the total rows. The overall margin is red when below the minimum.
        """
        styles = getSampleStyleSheet()
        elements: list = [
            Paragraph(f"Calculation {calculation.id}", styles["Title"]),
            Paragraph(f"{calculation.customer} - {calculation.description}", styles["Heading3"]),
            Paragraph(f"{format_date(calculation.date)} - {calculation.state.code}", styles["Normal"]),
            Spacer(1, 6 * mm),
        ]

        data: list[list[Any]] = [["Description", "Unit", "Price", "Quantity", "Total"]]
        extra: list[tuple] = [("ALIGN", (2, 0), (-1, -1), "RIGHT")]
        for group in calculation.groups:
            data.append([group.code, "", "", "", format_amount(group.amount)])
            row: int = len(data) - 1
            extra += [
                ("BACKGROUND", (0, row), (-1, row), GROUP_COLOR),
                ("TEXTCOLOR", (0, row), (-1, row), colors.white),
                ("FONTNAME", (0, row), (-1, row), "Helvetica-Bold"),
            ]
            for category in group.categories:
                data.append([category.code, "", "", "", format_amount(category.amount)])
                extra.append(("FONTNAME", (0, len(data) - 1), (-1, len(data) - 1), "Helvetica-Bold"))
                for item in category.items:
                    data.append([
                        item.description[:70],
                        item.unit or "",
                        format_amount(item.price),
                        format_amount(item.quantity),
                        format_amount(item.total),
                    ])
        if len(data) > 1:
            items_table: Table = Table(data, colWidths=[95 * mm, 15 * mm, 25 * mm, 20 * mm, 30 * mm], repeatRows=1)
            items_table.setStyle(_header_style(extra))
            elements += [items_table, Spacer(1, 6 * mm)]

        totals_data: list[list[Any]] = [["", "Amount", "Margin", "Margin amount", "Total"]]
        for total in totals:
            totals_data.append([
                total.description,
                format_amount(total.amount) if total.amount else "",
                format_percent(total.margin_percent) if total.margin_percent else "",
                format_amount(total.margin_amount) if total.margin_amount else "",
                format_amount(total.total),
            ])
        totals_extra: list[tuple] = [
            ("ALIGN", (1, 0), (-1, -1), "RIGHT"),
            ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
        ]
        if calculation.is_margin_below(min_margin):
            totals_extra.append(("TEXTCOLOR", (2, -1), (2, -1), BELOW_COLOR))
        totals_table: Table = Table(totals_data, colWidths=[65 * mm, 30 * mm, 25 * mm, 35 * mm, 30 * mm])
        totals_table.setStyle(_header_style(totals_extra))
        elements.append(totals_table)
        return self._build(elements, f"Calculation {calculation.id}")

    # -------------------------------------------------------------------
    # 차트 보고서 — Chart reports
    # -------------------------------------------------------------------
    def months(self, chart: MonthChartResponse, min_margin: float) -> bytes:
        """월별 보고서 — Stacked bar chart (amount and margin) followed by the monthly table.

        The landscape orientation is used above twelve months. Margin
        percents below the minimum are red.
        """
        styles = getSampleStyleSheet()
        pagesize: tuple[float, float] = landscape(A4) if chart.months > 12 else A4
        elements: list = [Paragraph("Calculations by month", styles["Title"])]
        if chart.total > 0:
            width: float = pagesize[0] - 30 * mm
            elements += [self._month_chart(chart, width), Spacer(1, 6 * mm)]

        data: list[list[Any]] = [["Month", "Calculations", "Amount", "Margin", "Margin %", "Total"]]
        extra: list[tuple] = [("ALIGN", (1, 0), (-1, -1), "RIGHT")]
        for row_idx, entry in enumerate(chart.entries, 1):
            data.append([
                f"{calendar.month_name[entry.month]} {entry.year}",
                str(entry.count),
                format_amount(entry.items),
                format_amount(entry.margin_amount),
                format_percent(entry.margin_percent),
                format_amount(entry.total),
            ])
            if entry.count and entry.margin_percent < min_margin:
                extra.append(("TEXTCOLOR", (4, row_idx), (4, row_idx), BELOW_COLOR))
        data.append([
            "Total",
            str(chart.count),
            format_amount(chart.items),
            format_amount(chart.margin_amount),
            format_percent(chart.margin_percent),
            format_amount(chart.total),
        ])
        extra.append(("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"))
        if chart.count and chart.margin_percent < min_margin:
            extra.append(("TEXTCOLOR", (4, -1), (4, -1), BELOW_COLOR))

        table: Table = Table(data, repeatRows=1)
        table.setStyle(_header_style(extra))
        elements.append(table)
        return self._build(elements, "Calculations by month", pagesize)

    @staticmethod
    def _month_chart(chart: MonthChartResponse, width: float) -> Drawing:
        drawing: Drawing = Drawing(width, 70 * mm)
        bars: VerticalBarChart = VerticalBarChart()
        bars.x = 15 * mm
        bars.y = 10 * mm
        bars.width = width - 20 * mm
        bars.height = 55 * mm
        bars.data = [
            [entry.items for entry in chart.entries],
            [max(entry.margin_amount, 0.0) for entry in chart.entries],
        ]
        bars.categoryAxis.style = "stacked"
        bars.categoryAxis.categoryNames = [
            f"{calendar.month_abbr[entry.month]} {entry.year}" for entry in chart.entries
        ]
        bars.categoryAxis.labels.fontSize = 7
        bars.valueAxis.labels.fontSize = 7
        bars.valueAxis.valueMin = 0
        bars.bars[0].fillColor = AMOUNT_COLOR
        bars.bars[1].fillColor = MARGIN_COLOR
        drawing.add(bars)
        return drawing

    def states(self, chart: StateChartResponse, min_margin: float) -> bytes:
        """상태별 보고서 — Pie chart of the totals per state followed by the state table."""
        styles = getSampleStyleSheet()
        elements: list = [Paragraph("Calculations by state", styles["Title"])]
        if chart.total > 0:
            elements += [self._state_chart(chart), Spacer(1, 6 * mm)]

        data: list[list[Any]] = [["State", "Calculations", "Percent", "Amount", "Margin %", "Total"]]
        extra: list[tuple] = [("ALIGN", (1, 0), (-1, -1), "RIGHT")]
        for row_idx, entry in enumerate(chart.entries, 1):
            data.append([
                entry.code,
                str(entry.count),
                format_percent(entry.percent),
                format_amount(entry.items),
                format_percent(entry.margin_percent),
                format_amount(entry.total),
            ])
            extra.append(("BACKGROUND", (0, row_idx), (0, row_idx), _state_color(entry.color)))
            extra.append(("TEXTCOLOR", (0, row_idx), (0, row_idx), colors.white))
            if entry.count and entry.margin_percent < min_margin:
                extra.append(("TEXTCOLOR", (4, row_idx), (4, row_idx), BELOW_COLOR))
        data.append([
            "Total",
            str(chart.count),
            format_percent(1.0) if chart.total else "",
            format_amount(chart.items),
            format_percent(chart.margin_percent),
            format_amount(chart.total),
        ])
        extra.append(("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"))
        if chart.count and chart.margin_percent < min_margin:
            extra.append(("TEXTCOLOR", (4, -1), (4, -1), BELOW_COLOR))

        table: Table = Table(data, repeatRows=1)
        table.setStyle(_header_style(extra))
        elements.append(table)
        return self._build(elements, "Calculations by state")

    @staticmethod
    def _state_chart(chart: StateChartResponse) -> Drawing:
        entries = [entry for entry in chart.entries if entry.total > 0]
        drawing: Drawing = Drawing(180 * mm, 70 * mm)
        pie: Pie = Pie()
        pie.x = 60 * mm
        pie.y = 5 * mm
        pie.width = 60 * mm
        pie.height = 60 * mm
        pie.data = [entry.total for entry in entries]
        pie.labels = [entry.code for entry in entries]
        pie.slices.fontSize = 7
        for index, entry in enumerate(entries):
            pie.slices[index].fillColor = _state_color(entry.color)
        drawing.add(pie)
        return drawing

    # -------------------------------------------------------------------
    # 항목 보고서 — Duplicate and empty items
    # -------------------------------------------------------------------
    def duplicate_items(self, calculations: Sequence[Calculation]) -> bytes:
        """중복 항목 보고서 — Calculations with duplicate items, one line per duplicated description."""
        return self._items_report("Calculations with duplicate items", calculations, _duplicate_lines)

    def empty_items(self, calculations: Sequence[Calculation]) -> bytes:
        """빈 항목 보고서 — Calculations with items having a zero price or quantity."""
        return self._items_report("Calculations with empty items", calculations, _empty_lines)

    def _items_report(
        self,
        title: str,
        calculations: Sequence[Calculation],
        lines: Callable[[Calculation], list[str]],
    ) -> bytes:
        styles = getSampleStyleSheet()
        cell_style = styles["BodyText"].clone("items", fontSize=8, leading=10, textColor=BELOW_COLOR)
        elements: list = [Paragraph(title, styles["Title"])]
        if not calculations:
            elements.append(Paragraph("No calculation found.", styles["Normal"]))
            return self._build(elements, title)

        data: list[list[Any]] = [["Id", "Date", "State", "Customer", "Description", "Items"]]
        count: int = 0
        for calculation in calculations:
            found: list[str] = lines(calculation)
            count += len(found)
            data.append([
                str(calculation.id)[:8],
                format_date(calculation.date),
                calculation.state.code,
                calculation.customer[:30],
                calculation.description[:40],
                Paragraph("<br/>".join(escape(line) for line in found), cell_style),
            ])
        table: Table = Table(
            data,
            colWidths=[18 * mm, 20 * mm, 22 * mm, 45 * mm, 60 * mm, 100 * mm],
            repeatRows=1,
        )
        table.setStyle(_header_style([("VALIGN", (0, 0), (-1, -1), "TOP")]))
        elements += [
            table,
            Spacer(1, 4 * mm),
            Paragraph(f"{len(calculations)} calculation(s), {count} item(s)", styles["Normal"]),
        ]
        return self._build(elements, title, landscape(A4))

    # -------------------------------------------------------------------
    # 권한 보고서 — User rights
    # -------------------------------------------------------------------
    def users_rights(
        self,
        roles: Sequence[tuple[str, list[int]]],
        users: Sequence[tuple[User, list[int]]],
    ) -> bytes:
        """권한 보고서 — The role rights, then the effective rights of every user."""
        styles = getSampleStyleSheet()
        headers: list[str] = ["Name", "Entity"] + [p.name.capitalize() for p in PERMISSIONS_SORTED]
        data: list[list[Any]] = [headers]
        extra: list[tuple] = [("ALIGN", (2, 0), (-1, -1), "CENTER")]
        sections: list[tuple[str, str, list[int]]] = [(role, role, rights) for role, rights in roles]
        sections += [(user.username, user.role, rights) for user, rights in users]
        for name, role, rights in sections:
            extra += [
                ("FONTNAME", (0, len(data)), (-1, len(data)), "Helvetica-Bold"),
                ("BACKGROUND", (0, len(data)), (-1, len(data)), colors.whitesmoke),
            ]
            data.append([name] + [""] * (len(headers) - 1))
            for entity, flags in rights_matrix(rights, role):
                data.append(["", entity] + ["\u2022" if flag else "" for flag in flags])

        table: Table = Table(data, repeatRows=1)
        table.setStyle(_header_style(extra))
        elements: list = [
            Paragraph("User rights", styles["Title"]),
            table,
            Spacer(1, 4 * mm),
            Paragraph(f"{len(roles)} role(s), {len(users)} user(s)", styles["Normal"]),
        ]
        return self._build(elements, "User rights")


# 싱글턴 인스턴스 — Singleton instance
pdf_service: PdfService = PdfService()
