"""Request middleware: the authorization gate and request logging."""

import time

from fastapi import Request
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.concurrency import run_in_threadpool

from tasktracker.errors import Unauthenticated
from tasktracker.utils.auth import extract_token

# (path, method) pairs reachable without a session; None matches any method
PUBLIC_ENDPOINTS = (
    ("/", None),
    ("/users", "POST"),
    ("/sessions", "POST"),
    ("/docs", None),
    ("/redoc", None),
    ("/openapi.json", None),
)


def is_public(method: str, path: str) -> bool:
    path = path.rstrip("/") or "/"
    method = method.upper()
    for public_path, public_method in PUBLIC_ENDPOINTS:
        if path == public_path and (public_method is None or public_method == method):
            return True
    return False


async def authorization_gate(request: Request, call_next):
    """Reject protected requests without a live session before any handler runs.

    On success the session is attached as ``request.state.session``.
    """
    if is_public(request.method, request.url.path):
        return await call_next(request)

    token = extract_token(request.headers.get("authorization"))
    try:
        if not token:
            raise Unauthenticated("Missing bearer token")
        session = await run_in_threadpool(request.app.state.sessions.validate, token)
    except Unauthenticated as exc:
        logger.warning(f"Rejected {request.method} {request.url.path}: {exc.detail}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers={"WWW-Authenticate": "Bearer"},
        )

    request.state.session = session
    return await call_next(request)


async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    duration = (time.perf_counter() - start) * 1000.0
    logger.info(
        f"{request.method} {request.url.path} -> {response.status_code} in {duration:.1f} ms"
    )
    return response
