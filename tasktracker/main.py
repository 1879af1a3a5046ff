from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from loguru import logger

import tasktracker.config as _cfg
from tasktracker.errors import TaskTrackerError
from tasktracker.logger import setup_logging
from tasktracker.middleware import authorization_gate, log_requests
from tasktracker.routers import auth, tasks
from tasktracker.services.counters import IdCounters
from tasktracker.services.sessions import SessionManager
from tasktracker.services.tasks import TaskRepository
from tasktracker.services.users import UserRegistry
from tasktracker.store import JsonStore

ROOT_TEXT = (
    "TaskTracker API. Register with POST /users, log in with POST /sessions, "
    "then manage your tasks under /tasks with an 'Authorization: Bearer <token>' header."
)


def create_app(data_dir: Optional[str] = None) -> FastAPI:
    """Build the service with its working set loaded from ``data_dir``."""
    setup_logging()

    store = JsonStore(data_dir or _cfg.DATA_DIR)
    counters = IdCounters(store)
    users = UserRegistry(store, counters)

    app = FastAPI(title=_cfg.APP_TITLE)
    app.state.store = store
    app.state.users = users
    app.state.sessions = SessionManager(store, users)
    app.state.tasks = TaskRepository(store, counters)

    # the last one added runs first
    app.middleware("http")(authorization_gate)
    app.middleware("http")(log_requests)

    app.include_router(auth.router)
    app.include_router(tasks.router)
    _register_error_handlers(app)

    @app.get("/", response_class=PlainTextResponse)
    def root():
        return ROOT_TEXT

    logger.info(f"{_cfg.APP_TITLE} ready, data dir {store.data_dir}")
    return app


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(TaskTrackerError)
    async def tasktracker_error_handler(request: Request, exc: TaskTrackerError):
        if exc.status_code >= 500:
            logger.opt(exception=exc).error(f"{type(exc).__name__} on {request.method} {request.url.path}")
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Validation error on {request.method} {request.url.path}")
        details = [
            {"field": ".".join(str(loc) for loc in e["loc"]), "message": e["msg"], "type": e["type"]}
            for e in exc.errors()
        ]
        return JSONResponse(status_code=400, content={"detail": details})

    # Generic error handler: never leak internals
    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.opt(exception=exc).error(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})


app = create_app()
