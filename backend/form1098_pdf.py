"""Render a Form 1098 record to a one-page PDF with reportlab."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from io import BytesIO
from pathlib import Path
from typing import List, Optional, Tuple

from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from backend.db_models import Form1098ORM

HEADER_RULE = colors.HexColor("#1a3a5f")
GRID = colors.HexColor("#cbd5e0")


def format_amount(amount: Optional[Decimal]) -> str:
    if amount is None:
        return "$0.00"
    return f"${Decimal(amount):,.2f}"


def _styles():
    styles = getSampleStyleSheet()
    styles.add(ParagraphStyle("FormTitle", parent=styles["Heading1"], fontSize=16, spaceAfter=4))
    styles.add(ParagraphStyle("FormSubtitle", parent=styles["Normal"], fontSize=9, textColor=colors.grey))
    styles.add(ParagraphStyle("Section", parent=styles["Heading3"], fontSize=11, spaceBefore=10, spaceAfter=4))
    styles.add(ParagraphStyle("Cell", parent=styles["Normal"], fontSize=9, leading=11))
    return styles


def _escape(value: Optional[str]) -> str:
    if not value:
        return ""
    return (
        str(value)
        .replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace("\n", "<br/>")
    )


def _party_table(rows: List[Tuple[str, Optional[str]]], styles) -> Table:
    data = [
        [Paragraph(f"<b>{label}</b>", styles["Cell"]), Paragraph(_escape(value), styles["Cell"])]
        for label, value in rows
    ]
    table = Table(data, colWidths=[1.8 * inch, 4.7 * inch])
    table.setStyle(TableStyle([
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
        ("LINEBELOW", (0, 0), (-1, -1), 0.5, GRID),
    ]))
    return table


def _box_table(boxes: List[Tuple[str, str, str]], styles) -> Table:
    data = [
        [
            Paragraph(f"<b>{number}</b>", styles["Cell"]),
            Paragraph(label, styles["Cell"]),
            Paragraph(value, styles["Cell"]),
        ]
        for number, label, value in boxes
    ]
    table = Table(data, colWidths=[0.5 * inch, 4.2 * inch, 1.8 * inch])
    table.setStyle(TableStyle([
        ("ALIGN", (0, 0), (0, -1), "CENTER"),
        ("ALIGN", (2, 0), (2, -1), "RIGHT"),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
        ("TOPPADDING", (0, 0), (-1, -1), 4),
        ("LINEBELOW", (0, 0), (-1, -1), 0.5, GRID),
        ("BOX", (2, 0), (2, -1), 1, GRID),
    ]))
    return table


def render_form1098(form: Form1098ORM) -> bytes:
    """Return the PDF bytes for ``form``."""
    styles = _styles()
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=letter,
        leftMargin=0.75 * inch,
        rightMargin=0.75 * inch,
        topMargin=0.75 * inch,
        bottomMargin=0.75 * inch,
        title=f"Form 1098 ({form.tax_year})",
    )

    header = Table(
        [[
            Paragraph("<b>Form 1098</b>", styles["FormTitle"]),
            Paragraph(f"<b>Mortgage Interest Statement</b><br/>Tax Year {form.tax_year}", styles["Cell"]),
        ]],
        colWidths=[2 * inch, 4.5 * inch],
    )
    header.setStyle(TableStyle([
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("LINEBELOW", (0, -1), (-1, -1), 2, HEADER_RULE),
    ]))

    origination = form.origination_date.strftime("%m/%d/%Y") if form.origination_date else ""
    boxes = [
        ("1", "Mortgage interest received from payer(s)/borrower(s)", format_amount(form.mortgage_interest_received)),
        ("2", "Outstanding mortgage principal", format_amount(form.outstanding_principal)),
        ("3", "Mortgage origination date", origination),
        ("4", "Refund of overpaid interest", format_amount(form.refund_overpaid_interest)),
        ("5", "Mortgage insurance premiums", format_amount(form.mortgage_insurance_premiums)),
        ("6", "Points paid on purchase of principal residence", format_amount(form.points_paid_purchase)),
        ("7", "Address of property securing mortgage", _escape(form.property_address)),
        ("8", "Other" + (f": {_escape(form.other_description)}" if form.other_description else ""),
         format_amount(form.other_amount)),
        ("9", "Number of properties securing the mortgage", str(form.number_of_properties or 1)),
        ("10", "Real estate taxes", format_amount(form.real_estate_taxes)),
        ("11", "Mortgage acquisition cost", format_amount(form.acquisition_cost)),
    ]

    story = [
        header,
        Spacer(1, 8),
        Paragraph("Recipient / Lender", styles["Section"]),
        _party_table([
            ("Name", form.lender_name),
            ("Address", form.lender_address),
            ("TIN", form.lender_tin),
            ("Telephone", form.lender_phone),
        ], styles),
        Paragraph("Payer / Borrower", styles["Section"]),
        _party_table([
            ("Name", form.borrower_name),
            ("TIN", form.borrower_ssn),
            ("Address", form.borrower_address),
            ("Account number", form.account_number),
        ], styles),
        Paragraph("Amounts", styles["Section"]),
        _box_table(boxes, styles),
        Spacer(1, 12),
        Paragraph(
            f"Generated {datetime.utcnow().strftime('%m/%d/%Y %H:%M')} UTC. Not an official IRS form.",
            styles["FormSubtitle"],
        ),
    ]
    doc.build(story)
    return buffer.getvalue()


def write_form1098(form: Form1098ORM, directory: Path) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"form1098-{form.id}.pdf"
    path.write_bytes(render_form1098(form))
    return path
