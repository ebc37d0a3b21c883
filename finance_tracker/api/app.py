"""
HTTP JSON API for the Finance Tracker

Routes:
    GET  /api/data            -> full document
    POST /api/add-income      -> {amount, date, note}
    POST /api/add-expense     -> {amount, date, note}
    POST /api/update-savings  -> {amount}

Every route answers with the full finance document.

Errors visible to clients:
- 400 for a body that is not valid JSON or not a valid payload
- 400 when an amount would push a total beyond the finite float range
- 405 for the wrong HTTP method (framework default)

Path operations are plain `def` functions, so each request runs on its
own worker thread; the state manager's lock serializes them.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from finance_tracker.audit import configure_logging, create_correlation_id
from finance_tracker.config import Settings, get_settings
from finance_tracker.models.finance import (
    FinanceState,
    NonFiniteStateError,
    SavingsRequest,
    TransactionRequest,
)
from finance_tracker.orchestrator import FinanceStateManager, create_app_components


def get_manager(request: Request) -> FinanceStateManager:
    """The state manager attached to the running application."""
    return request.app.state.manager


def _mount_frontend(app: FastAPI, static_dir: Path, index_file: Path) -> None:
    """Serve the static front end when its directory exists."""
    if not static_dir.is_dir():
        return

    app.mount("/static", StaticFiles(directory=static_dir), name="static")

    @app.get("/", include_in_schema=False)
    def index():
        if not index_file.is_file():
            raise HTTPException(status_code=404, detail="Not Found")
        return FileResponse(index_file)


def create_app(
    manager: Optional[FinanceStateManager] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        manager: State manager to serve. Built from settings when omitted.
        settings: Settings to use (defaults to the cached global settings)
    """
    settings = settings or get_settings()
    configure_logging(settings.app.log_level)
    manager = manager or create_app_components(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Make sure a document exists before the first request
        app.state.manager.initialize()
        yield

    app = FastAPI(
        title="Finance Tracker API",
        debug=settings.app.debug_mode,
        lifespan=lifespan,
    )
    app.state.manager = manager

    @app.exception_handler(RequestValidationError)
    async def bad_payload(request: Request, exc: RequestValidationError):
        # Echoed inputs may hold inf/NaN, which JSON cannot carry
        detail = jsonable_encoder([
            {"loc": e["loc"], "msg": e["msg"], "type": e["type"]}
            for e in exc.errors()
        ])
        get_manager(request).audit_logger.log_request_rejected(
            path=request.url.path,
            reason=str(detail),
            correlation_id=create_correlation_id(),
        )
        return JSONResponse(status_code=400, content={"detail": detail})

    @app.exception_handler(NonFiniteStateError)
    async def non_finite_total(request: Request, exc: NonFiniteStateError):
        get_manager(request).audit_logger.log_request_rejected(
            path=request.url.path,
            reason=str(exc),
            correlation_id=create_correlation_id(),
        )
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.get("/api/data", response_model=FinanceState)
    def get_data(request: Request):
        return get_manager(request).get_snapshot(create_correlation_id())

    @app.post("/api/add-income", response_model=FinanceState)
    def add_income(payload: TransactionRequest, request: Request):
        return get_manager(request).add_income(payload, create_correlation_id())

    @app.post("/api/add-expense", response_model=FinanceState)
    def add_expense(payload: TransactionRequest, request: Request):
        return get_manager(request).add_expense(payload, create_correlation_id())

    @app.post("/api/update-savings", response_model=FinanceState)
    def update_savings(payload: SavingsRequest, request: Request):
        return get_manager(request).set_savings(payload, create_correlation_id())

    _mount_frontend(app, settings.server.static_path, settings.server.index_path)

    return app
