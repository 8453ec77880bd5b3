"""Word 내보내기 서비스 — Single calculation as a .docx document (python-docx)."""

from io import BytesIO

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Pt

from calcapp.models.calculation import Calculation
from calcapp.schemas.calculation import TotalRow
from calcapp.services.pdf_service import format_amount, format_date, format_percent

DOCX_MEDIA_TYPE: str = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


class WordService:
    """Word 문서 생성 서비스 — Word document service."""

    @staticmethod
    def _set_row(cells, values: list[str], bold: bool = False) -> None:
        for index, (cell, value) in enumerate(zip(cells, values)):
            cell.text = value
            paragraph = cell.paragraphs[0]
            if index > 0:
                paragraph.alignment = WD_ALIGN_PARAGRAPH.RIGHT
            for run in paragraph.runs:
                run.font.size = Pt(9)
                run.font.bold = bold

    def calculation(self, calculation: Calculation, totals: list[TotalRow]) -> bytes:
        """계산서 문서 — Header, items by group and category, then the total rows."""
        document = Document()
        document.core_properties.title = f"Calculation {calculation.id}"
        document.add_heading(f"Calculation {calculation.id}", level=1)
        document.add_paragraph(f"{calculation.customer} - {calculation.description}")
        document.add_paragraph(f"{format_date(calculation.date)} - {calculation.state.code}")

        if not calculation.is_empty:
            table = document.add_table(rows=1, cols=5)
            table.style = "Table Grid"
            self._set_row(table.rows[0].cells, ["Description", "Unit", "Price", "Quantity", "Total"], bold=True)
            for group in calculation.groups:
                self._set_row(table.add_row().cells, [group.code, "", "", "", format_amount(group.amount)], bold=True)
                for category in group.categories:
                    self._set_row(table.add_row().cells, [category.code, "", "", "", format_amount(category.amount)])
                    for item in category.items:
                        self._set_row(
                            table.add_row().cells,
                            [
                                item.description,
                                item.unit or "",
                                format_amount(item.price),
                                format_amount(item.quantity),
                                format_amount(item.total),
                            ],
                        )
            document.add_paragraph()

        totals_table = document.add_table(rows=1, cols=5)
        totals_table.style = "Table Grid"
        self._set_row(totals_table.rows[0].cells, ["", "Amount", "Margin", "Margin amount", "Total"], bold=True)
        for index, total in enumerate(totals):
            self._set_row(
                totals_table.add_row().cells,
                [
                    total.description,
                    format_amount(total.amount) if total.amount else "",
                    format_percent(total.margin_percent) if total.margin_percent else "",
                    format_amount(total.margin_amount) if total.margin_amount else "",
                    format_amount(total.total),
                ],
                bold=index == len(totals) - 1,
            )

        output: BytesIO = BytesIO()
        document.save(output)
        return output.getvalue()


# 싱글턴 인스턴스 — Singleton instance
word_service: WordService = WordService()
