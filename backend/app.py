"""FastAPI service for taxpayer intake: profile, dependents, W-9/W-2 uploads, 1098 drafts and a tax estimate."""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.config import get_settings
from backend.db import close_db, init_db
from backend.routers import auth as auth_router
from backend.routers import dashboard as dashboard_router
from backend.routers import form1098 as form1098_router
from backend.routers import w2 as w2_router
from backend.seed import seed_demo_data
from backend.uploads import ensure_upload_dirs
from loader import resolve_year

logger = logging.getLogger("taxintake-api")
logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))

settings = get_settings()

app = FastAPI(
    title="Tax Intake API",
    description="Taxpayer intake backend: profile, dependents, document uploads and tax estimates.",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings["allowed_origins"] or ["*"],
    allow_origin_regex=settings["allow_origin_regex"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router.router)
app.include_router(dashboard_router.router)
app.include_router(w2_router.router)
app.include_router(form1098_router.router)


@app.on_event("startup")
async def startup_event() -> None:
    init_db()
    seed_demo_data()
    upload_root = ensure_upload_dirs(get_settings())
    logger.info("Uploads stored under %s", upload_root)
    logger.info("Estimating with %s tax parameters", resolve_year(get_settings()["tax_year"]))


@app.on_event("shutdown")
async def shutdown_event() -> None:
    close_db()


@app.get("/health")
async def health() -> Dict[str, str]:
    return {"status": "OK", "environment": get_settings()["environment"]}


@app.get("/")
async def root() -> Dict[str, Any]:
    return {
        "message": "Tax Intake API",
        "endpoints": ["/api/auth", "/api/dashboard", "/api/w2", "/api/form1098", "/health"],
    }


@app.exception_handler(RequestValidationError)
async def validation_error_handler(_: Request, exc: RequestValidationError):  # type: ignore[override]
    errors = [
        {"field": ".".join(str(p) for p in err.get("loc", ()) if p != "body"), "message": err.get("msg")}
        for err in exc.errors()
    ]
    return fastapi_response(400, {"success": False, "message": "Validation failed", "errors": errors})


@app.exception_handler(HTTPException)
async def http_error_handler(_, exc: HTTPException):  # type: ignore[override]
    return fastapi_response(exc.status_code, {"detail": exc.detail}, getattr(exc, "headers", None))


@app.exception_handler(Exception)
async def unhandled_error_handler(_, exc: Exception):  # type: ignore[override]
    logger.exception("Unhandled error: %s", exc)
    return fastapi_response(500, {"detail": "Internal server error"})


def fastapi_response(status_code: int, payload: Dict[str, Any], headers: Optional[Dict[str, str]] = None):
    return JSONResponse(status_code=status_code, content=jsonable_encoder(payload), headers=headers)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("backend.app:app", host="0.0.0.0", port=int(os.getenv("PORT", "8000")), reload=True)
