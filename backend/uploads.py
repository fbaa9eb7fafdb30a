"""Validation and storage for uploaded tax forms."""

from __future__ import annotations

import logging
import os
import re
import secrets
import time
from pathlib import Path
from typing import Any, Dict, Iterable, Tuple

from fastapi import HTTPException, UploadFile, status

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".jpeg", ".jpg", ".png", ".pdf", ".doc", ".docx"}
ALLOWED_MIME_TYPES = {
    "image/jpeg",
    "image/png",
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}

UPLOAD_SUBDIRS = ("w9-forms", "w2-forms", "form1098")


def ensure_upload_dirs(settings: Dict[str, Any], subdirs: Iterable[str] = UPLOAD_SUBDIRS) -> Path:
    """Create the upload root and its per-form folders."""
    root = Path(settings["upload_dir"])
    for sub in subdirs:
        (root / sub).mkdir(parents=True, exist_ok=True)
    return root


def sanitize_filename(filename: str) -> str:
    """Strip path components and anything outside ``[A-Za-z0-9_.-]``."""
    filename = os.path.basename(filename)
    filename = re.sub(r"[^\w\-.]", "_", filename)
    if not filename or filename == ".":
        filename = "unnamed_file"
    return filename


def build_stored_name(prefix: str, user_id: str, original: str) -> str:
    ext = Path(sanitize_filename(original)).suffix.lower()
    unique_suffix = f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}"
    return f"{prefix}-{user_id}-{unique_suffix}{ext}"


async def read_validated_upload(file: UploadFile, max_bytes: int) -> Tuple[str, bytes]:
    """Validate name, type and size of an upload and return ``(filename, content)``."""
    if not file.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded")

    ext = Path(file.filename.lower()).suffix
    if ext not in ALLOWED_EXTENSIONS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only images, PDFs, and Word documents are allowed",
        )
    if file.content_type and file.content_type not in ALLOWED_MIME_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only images, PDFs, and Word documents are allowed",
        )

    content = await file.read()
    if not content:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Empty file.")
    if len(content) > max_bytes:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail="File too large")
    return file.filename, content


def store_upload(settings: Dict[str, Any], subdir: str, stored_name: str, content: bytes) -> Path:
    directory = ensure_upload_dirs(settings, [subdir]) / subdir
    path = directory / stored_name
    path.write_bytes(content)
    logger.info("Stored upload %s (%d bytes)", path, len(content))
    return path
