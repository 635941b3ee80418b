from __future__ import annotations

import logging
import sys

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api import report_router, tables_router
from .core.config import settings
from .core.db import engine
from .core.exceptions import RejectReason, TableRuleError
from .models.db import Base
from .models.schemas import ConfirmationOut, TableOut
from .services.table_service import ConfirmationRequired


def configure_logging() -> None:
    """Configure structured logging for the application."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Set specific log levels for third-party libraries
    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)


logger = logging.getLogger(__name__)
configure_logging()


def create_app() -> FastAPI:
    app = FastAPI(title="Seat Ledger", version="1.0.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_list(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log incoming requests."""
        logger.info(f"Request: {request.method} {request.url.path}")
        response = await call_next(request)
        logger.info(f"Response: {request.method} {request.url.path} - Status: {response.status_code}")
        return response

    @app.exception_handler(TableRuleError)
    async def table_rule_error(request: Request, exc: TableRuleError):
        status_code = 404 if exc.reason == RejectReason.TABLE_NOT_FOUND else 400
        logger.info(f"Rejected {request.method} {request.url.path}: {exc.reason.value}")
        return JSONResponse(
            status_code=status_code,
            content={"detail": exc.message, "reason": exc.reason.value},
        )

    @app.exception_handler(ConfirmationRequired)
    async def confirmation_required(request: Request, exc: ConfirmationRequired):
        pending = exc.pending
        body = ConfirmationOut(
            kind=pending.kind,
            message=pending.message,
            seat_nos=list(pending.seat_nos),
            preview=TableOut.from_entity(pending.result, exc.now),
        )
        return JSONResponse(status_code=409, content={"detail": body.model_dump()})

    app.include_router(tables_router)
    app.include_router(report_router)

    @app.get("/")
    def root():
        return {"ok": True, "service": "seat-ledger", "docs": "/docs"}

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.on_event("startup")
    def startup():
        logger.info("Starting application...")
        Base.metadata.create_all(bind=engine)
        logger.info("Key/value store table created/verified")
        logger.info("Application startup complete")

    return app


app = create_app()
