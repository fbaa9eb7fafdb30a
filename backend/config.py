from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict

ROOT_DIR = Path(__file__).resolve().parents[1]


def get_settings() -> Dict[str, Any]:
    """Read runtime settings from the environment.

    Evaluated per call so tests can flip variables with ``monkeypatch``.
    """
    allowed_raw = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000")
    allowed_list = [o.strip() for o in allowed_raw.split(",") if o.strip()]
    return {
        "upload_dir": Path(os.getenv("UPLOAD_DIR", str(ROOT_DIR / "uploads"))),
        "max_upload_bytes": int(os.getenv("MAX_UPLOAD_BYTES", str(5 * 1024 * 1024))),
        "tax_year": int(os.getenv("TAX_YEAR", "2022")),
        "allowed_origins": allowed_list,
        "allow_origin_regex": os.getenv("ALLOWED_ORIGIN_REGEX", None),
        "auth_bypass": os.getenv("AUTH_BYPASS", "false").lower() == "true",
        "environment": os.getenv("APP_ENV", "development"),
    }
