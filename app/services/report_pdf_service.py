"""
Financial report PDF generation.
Renders the monthly recap and revenue/COGS tables with reportlab.
"""
from datetime import datetime
from io import BytesIO

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from app.schemas.report import MonthRecap, PeriodFigures

HEADER_COLOR = colors.HexColor("#1a56db")


def _money(value: float) -> str:
    return f"{value:,.2f}"


def _period_table(rows: list[PeriodFigures], label: str) -> Table:
    data = [[label, "Revenue", "COGS", "Gross Profit"]]
    data.extend(
        [row.period, _money(row.revenue), _money(row.cogs), _money(row.gross_profit)]
        for row in rows
    )
    table = Table(data, colWidths=[1.5 * inch, 1.6 * inch, 1.6 * inch, 1.6 * inch])
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), HEADER_COLOR),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("ALIGN", (1, 0), (-1, -1), "RIGHT"),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor("#d1d5db")),
                ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#f3f4f6")]),
            ]
        )
    )
    return table


def build_financial_report_pdf(
    title: str,
    generated_at: datetime,
    recap: MonthRecap,
    monthly: list[PeriodFigures],
    yearly: list[PeriodFigures],
) -> bytes:
    """
    Build the financial report PDF.

    Args:
        title: Document title
        generated_at: Timestamp printed under the title
        recap: Current month recap
        monthly: Monthly revenue/COGS of the current year
        yearly: Yearly revenue/COGS

    Returns:
        PDF document bytes
    """
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer, pagesize=A4, topMargin=0.5 * inch, bottomMargin=0.5 * inch, title=title
    )
    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        "ReportTitle",
        parent=styles["Heading1"],
        fontSize=20,
        textColor=HEADER_COLOR,
        alignment=TA_CENTER,
        spaceAfter=6,
    )
    heading_style = styles["Heading2"]

    elements = [
        Paragraph(title, title_style),
        Paragraph(f"Generated {generated_at:%Y-%m-%d %H:%M %Z}", styles["Normal"]),
        Spacer(1, 0.25 * inch),
        Paragraph(f"Current month ({recap.month})", heading_style),
        Table(
            [
                ["Total revenue", _money(recap.total_revenue)],
                ["Total COGS", _money(recap.total_cogs)],
                ["Gross profit / loss", _money(recap.total_gross_profit_loss)],
            ],
            colWidths=[2.5 * inch, 2 * inch],
            style=[("ALIGN", (1, 0), (1, -1), "RIGHT")],
        ),
        Spacer(1, 0.25 * inch),
        Paragraph("Monthly revenue and COGS", heading_style),
        _period_table(monthly, "Month"),
        Spacer(1, 0.25 * inch),
        Paragraph("Yearly revenue and COGS", heading_style),
    ]
    if yearly:
        elements.append(_period_table(yearly, "Year"))
    else:
        elements.append(Paragraph("No sales recorded yet.", styles["Normal"]))

    doc.build(elements)
    return buffer.getvalue()
