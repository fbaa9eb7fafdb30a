import io

from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from intake.document_text import extract_document_text, extract_text_from_pdf


def _pdf_with_lines(lines):
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=letter)
    y = 720
    for line in lines:
        pdf.drawString(72, y, line)
        y -= 18
    pdf.save()
    return buffer.getvalue()


def test_pdf_text_layer_is_read():
    data = _pdf_with_lines(["Wage and Tax Statement 2022", "Wages, tips, other compensation 52,345.67"])
    text = extract_text_from_pdf(data)
    assert "52,345.67" in text
    assert "2022" in text


def test_unreadable_pdf_yields_empty_text():
    assert extract_text_from_pdf(b"not a pdf at all") == ""


def test_images_have_no_text_layer():
    assert extract_document_text("scan.png", b"\x89PNG\r\n") == ""
