"""Text extraction for uploaded tax documents."""

from __future__ import annotations

import io
import logging
from pathlib import Path

from PyPDF2 import PdfReader
from PyPDF2.errors import PdfReadError

logger = logging.getLogger(__name__)


def extract_text_from_pdf(data: bytes) -> str:
    """Return the concatenated page text of a PDF, or ``""`` when it cannot be read."""
    try:
        reader = PdfReader(io.BytesIO(data))
        return "\n".join(page.extract_text() or "" for page in reader.pages)
    except (PdfReadError, ValueError, OSError) as exc:
        logger.warning("PDF text extraction failed: %s", exc)
        return ""


def extract_document_text(filename: str, data: bytes) -> str:
    """Route by extension; only PDFs carry a text layer we can read."""
    suffix = Path(filename).suffix.lower()
    if suffix == ".pdf":
        return extract_text_from_pdf(data)
    logger.info("No text extractor for %s; fields will be placeholders", filename)
    return ""
