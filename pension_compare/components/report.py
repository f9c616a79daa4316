"""PDF export of a comparison result."""

import io
from typing import List
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import PageBreak, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from ..calculators.comparison import ComparisonResult, summary_text

_HEADER_STYLE = TableStyle(
    [
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#E6ECE9")),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 8),
    ]
)


def _money(value: float) -> str:
    return f"£{value:,.0f}"


def _input_rows(result: ComparisonResult) -> List[List[str]]:
    rows = [["Field", "Value"]]

    def _flatten(prefix: str, obj):
        if isinstance(obj, dict):
            for k, v in obj.items():
                key = f"{prefix}{k}" if prefix else k
                _flatten(f"{key}.", v)
        else:
            rows.append([prefix[:-1], str(obj)])

    _flatten("", result.to_dict()["inputs"])
    return rows


def _metric_rows(result: ComparisonResult) -> List[List[str]]:
    m1, m2 = result.strategy1.metrics, result.strategy2.metrics
    rows = [["Metric", result.strategy1.descriptor.short_name, result.strategy2.descriptor.short_name]]
    for label, attr in [
        ("Initial tax", "initial_tax_paid"),
        ("Withdrawal tax", "total_withdrawal_tax"),
        ("Fees", "total_fees"),
        ("Net withdrawn", "total_net_withdrawn"),
        ("Final value after tax", "final_after_tax_value"),
        ("Total value realised", "total_value_realized"),
    ]:
        rows.append([label, _money(getattr(m1, attr)), _money(getattr(m2, attr))])
    return rows


def _yearly_rows(result: ComparisonResult) -> List[List[str]]:
    rows = [["Year", "Net 1", "Value 1", "Status 1", "Net 2", "Value 2", "Status 2"]]
    for c in result.yearly_comparison:
        r1, r2 = c.strategy1_row, c.strategy2_row
        rows.append([
            str(c.year),
            _money(r1.net_withdrawal), _money(r1.end_value), r1.status.value,
            _money(r2.net_withdrawal), _money(r2.end_value), r2.status.value,
        ])
    return rows


def build_pdf(result: ComparisonResult) -> bytes:
    """Create a PDF report with inputs, summary, insights and the yearly table."""
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=A4, leftMargin=36, rightMargin=36)
    styles = getSampleStyleSheet()
    title = f"{result.strategy1.descriptor.name} vs {result.strategy2.descriptor.name}"
    story = [Paragraph(escape(title), styles["Title"]), Spacer(1, 12)]

    story.append(Paragraph("Inputs", styles["Heading2"]))
    story.extend([Table(_input_rows(result), hAlign="LEFT", style=_HEADER_STYLE), Spacer(1, 12)])

    story.append(Paragraph("Summary", styles["Heading2"]))
    story.append(Paragraph(escape(summary_text(result)), styles["BodyText"]))
    story.extend([Spacer(1, 6), Table(_metric_rows(result), hAlign="LEFT", style=_HEADER_STYLE), Spacer(1, 12)])

    story.append(Paragraph("Insights", styles["Heading2"]))
    for line in result.insights:
        story.append(Paragraph(f"• {escape(line)}", styles["BodyText"]))

    synthetic = {k: v for k, v in result.synthetic_price_years.items() if v}
    if synthetic:
        story.append(Spacer(1, 6))
        notes = "; ".join(f"{k}: {v[0]}-{v[-1]}" for k, v in synthetic.items())
        story.append(Paragraph(f"Prices before fund launch are index-derived estimates ({escape(notes)}).",
                               styles["Italic"]))

    story.extend([PageBreak(), Paragraph("Year by Year", styles["Heading2"])])
    story.append(Table(_yearly_rows(result), hAlign="LEFT", style=_HEADER_STYLE, repeatRows=1))

    doc.build(story)
    pdf_bytes = buffer.getvalue()
    buffer.close()
    return pdf_bytes
