"""FastAPI application entry point."""

import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from cli.logging_config import setup_logging
from observability import log_run_summary, metrics
from oracle import OracleError
from oracle.tasks import drain_background
from web.deps import get_config
from web.routes import chat, user
from web.user_store import init_db

logger = structlog.get_logger()

VERSION = "3.1.0"
PHASE_ONE_ERROR = "Ocurrió un error al procesar tu pregunta."


@asynccontextmanager
async def lifespan(app: FastAPI):
    config = get_config()
    setup_logging(
        json_mode=config.logging.json_mode,
        level=config.logging.level,
        log_file=config.paths.log_file,
    )
    init_db(config.paths.db_path)
    logger.info("web.startup", db_path=str(config.paths.db_path))
    yield
    await drain_background(timeout=5.0)
    log_run_summary()
    logger.info("web.shutdown")


app = FastAPI(
    title="Tarot Oracle",
    version=VERSION,
    lifespan=lifespan,
)

# CORS: allow frontend origin
frontend_origin = os.getenv("FRONTEND_ORIGIN", "http://localhost:3000")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[frontend_origin],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    fields = [".".join(str(p) for p in err["loc"][1:]) for err in exc.errors()]
    return JSONResponse(
        status_code=400,
        content={"error": "Solicitud inválida.", "detail": [f for f in fields if f]},
    )


@app.exception_handler(OracleError)
async def oracle_error(request: Request, exc: OracleError):
    logger.error("chat.failed", path=request.url.path, error=str(exc))
    metrics.counter("phase_one_failures")
    return JSONResponse(status_code=500, content={"error": PHASE_ONE_ERROR})


@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


# Mount routes
app.include_router(chat.router)
app.include_router(user.router)


@app.get("/api/health")
async def health():
    return {"status": "ok", "message": "El oráculo está despierto"}


@app.get("/api/version")
async def version():
    return {
        "version": VERSION,
        "features": [
            "sse-streaming",
            "sectioned-readings",
            "context-evaluation",
            "memory-extraction",
            "parallel-title-generation",
        ],
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.get("/api/metrics")
async def metrics_summary():
    return metrics.summary()
