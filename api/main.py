"""
LiquidLens API — Main Application

POST /humanize        — Humanize template fragments in text
POST /humanize/batch  — Humanize multiple texts
GET  /patterns        — Catalog pattern table (priority order)
POST /catalog/reload  — Reload the pattern catalog (atomic swap, API key)
GET  /diagnose        — Module status and catalog health
GET  /health          — Health check
"""

from __future__ import annotations

import asyncio
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.requests import Request

from liquidlens.auth import auth_enabled, require_api_key
from liquidlens.cache import humanize_cache
from liquidlens.catalog import CatalogError, CatalogHolder
from liquidlens.config import settings
from liquidlens.logging import setup_logging, get_logger
from liquidlens.matcher import LiquidMatcher
from liquidlens.schemas.humanize import (
    HumanizeRequest,
    HumanizeBatchRequest,
    HumanizeResponse,
    HumanizeBatchResponse,
    PatternsResponse,
    ReloadRequest,
    ReloadResponse,
    HealthResponse,
)

logger = get_logger("api")

catalog_holder = CatalogHolder(path=settings.CATALOG_PATH or None)
matcher = LiquidMatcher(catalog_holder)


# ============================================================
# STARTUP / SHUTDOWN
# ============================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    summary = catalog_holder.catalog.summary()
    logger.info(
        "LiquidLens API starting",
        extra={
            "catalog_version": catalog_holder.version,
            "path": summary["source"],
            "display_mode": settings.DISPLAY_MODE,
        },
    )
    if not auth_enabled():
        logger.warning("No LIQUIDLENS_API_KEYS set; catalog reload is unauthenticated")
    if summary["patterns_dropped"]:
        logger.warning(
            f"{summary['patterns_dropped']} catalog entries dropped at load",
            extra={"catalog_section": "patterns"},
        )
    yield
    logger.info("LiquidLens API shutting down")


app = FastAPI(
    title="LiquidLens API",
    description="Humanizes Liquid template fragments into readable prose",
    version=f"{settings.VERSION} (core {settings.CORE_VERSION})",
    lifespan=lifespan,
)

# CORS: set LIQUIDLENS_CORS_ORIGINS in production
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",")],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "X-API-Key"],
    allow_credentials=False,
)


# ============================================================
# GLOBAL ERROR HANDLER
# ============================================================

@app.exception_handler(Exception)
async def global_error_handler(request: Request, exc: Exception):
    """Catch unhandled exceptions — return structured error, don't leak internals."""
    logger.error(
        f"Unhandled exception: {type(exc).__name__}",
        extra={
            "error": str(exc),
            "error_type": type(exc).__name__,
            "path": request.url.path,
            "method": request.method,
        },
        exc_info=True,
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error. The text could not be humanized."},
    )


# ============================================================
# ROUTES
# ============================================================

async def _humanize_one(item: HumanizeRequest) -> dict:
    """Humanize one text, serving from the cache when the catalog has not changed."""
    version = catalog_holder.version
    cached = await humanize_cache.get(item.text, item.mode, version)
    if cached:
        return cached

    result = {
        "text": item.text,
        **matcher.humanize(item.text, item.mode),
        "catalog_version": version,
        "cached": False,
    }
    await humanize_cache.put(item.text, item.mode, version, result)
    return result


@app.post("/humanize", response_model=HumanizeResponse)
async def humanize(request: HumanizeRequest):
    """Find template fragments and rewrite each one as prose."""
    start = time.time()
    result = await _humanize_one(request)

    logger.info(
        f"Humanize complete: {len(result['matches'])} fragments",
        extra={
            "fragments_count": len(result["matches"]),
            "display_mode": request.mode,
            "catalog_version": result["catalog_version"],
            "duration_ms": int((time.time() - start) * 1000),
        },
    )
    return result


@app.post("/humanize/batch", response_model=HumanizeBatchResponse)
async def humanize_batch(request: HumanizeBatchRequest):
    """Humanize several texts. Each item is independent."""
    results = await asyncio.gather(*[_humanize_one(item) for item in request.items])

    logger.info(
        f"Batch complete: {len(results)} items",
        extra={"fragments_count": sum(len(r["matches"]) for r in results)},
    )
    return {"results": results, "total": len(results)}


@app.get("/patterns", response_model=PatternsResponse)
async def get_patterns():
    """Catalog patterns in priority order, plus the catalog's fallback tag names."""
    catalog = catalog_holder.catalog
    patterns = catalog.get_patterns()
    return {
        "patterns": patterns,
        "fallback_tag_patterns": [name for name, _ in catalog.fallback_tag_patterns],
        "total": len(patterns),
    }


@app.post("/catalog/reload", response_model=ReloadResponse)
async def reload_catalog(
    request: ReloadRequest,
    key_id: Optional[str] = Depends(require_api_key),
):
    """
    Rebuild the catalog and swap it in. Requires an API key when keys
    are configured.

    Uses the strict loader: an unreadable or invalid file answers 422
    and the current catalog stays in place. The response never echoes
    the file path or the parse error; those go to the log.
    """
    try:
        catalog = catalog_holder.reload(request.path, strict=True)
    except CatalogError as e:
        logger.warning(
            "Catalog reload rejected",
            extra={
                "error": str(e),
                "path": request.path,
                "key_id": key_id,
                "catalog_version": catalog_holder.version,
            },
        )
        raise HTTPException(422, "Catalog could not be loaded. The current catalog is unchanged.")

    logger.info(
        "Catalog swapped",
        extra={"catalog_version": catalog_holder.version, "key_id": key_id},
    )
    return {"catalog_version": catalog_holder.version, "summary": catalog.summary()}


@app.get("/diagnose")
async def diagnose():
    """Module status and catalog summary."""
    return matcher.diagnose()


@app.get("/health", response_model=HealthResponse)
async def health():
    """Health check."""
    return {
        "status": "operational",
        "version": settings.VERSION,
        "core_version": settings.CORE_VERSION,
        "catalog_version": catalog_holder.version,
        "patterns_loaded": len(catalog_holder.catalog.patterns),
        "cache": humanize_cache.stats,
    }


# --- Version Headers Middleware ---
@app.middleware("http")
async def add_version_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers["X-LiquidLens-Version"] = settings.VERSION
    response.headers["X-Core-Version"] = settings.CORE_VERSION
    response.headers["X-Content-Type-Options"] = "nosniff"
    return response


# --- Request Logging Middleware ---
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every API request with method, path, status, duration."""
    path = request.url.path
    if path == "/health":
        return await call_next(request)

    start = time.time()
    response = await call_next(request)
    duration_ms = round((time.time() - start) * 1000, 1)

    logger.info(
        f"{request.method} {path} → {response.status_code} ({duration_ms}ms)",
        extra={
            "method": request.method,
            "path": path,
            "status_code": response.status_code,
            "duration_ms": duration_ms,
        },
    )
    return response


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
