from __future__ import annotations

import logging
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from notestore_api.dependencies import clear_caches, get_operation_permissions, get_settings
from notestore_api.domain.exceptions import (
    AliasError,
    AlreadyExistsError,
    MisconfiguredOperationError,
    NotFoundError,
    NoteTooLongError,
    PolicyDeniedError,
)
from notestore_api.interface.api.guard import declared_operations
from notestore_api.interface.api.routes import router
from notestore_api.operations import validate_operation_permissions


def create_app() -> FastAPI:
    app = FastAPI(title="Notestore API", version="0.1.0")

    clear_caches()
    settings = get_settings()

    logger = logging.getLogger("notestore.api")

    @app.middleware("http")
    async def request_id_and_logging(request: Request, call_next):
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id
        start = time.perf_counter()

        if settings.api_auth_mode == "bearer":
            if request.url.path != "/health":
                token = settings.api_auth_token or ""
                auth = request.headers.get("authorization") or ""
                if not token or auth != f"Bearer {token}":
                    return JSONResponse(
                        status_code=401,
                        content={"detail": "unauthorized"},
                        headers={"X-Request-ID": request_id},
                    )

        try:
            response = await call_next(request)
        except Exception:
            dt_ms = (time.perf_counter() - start) * 1000.0
            logger.exception("request_error", extra={"rid": request_id, "path": request.url.path, "ms": dt_ms})
            return JSONResponse(
                status_code=500,
                content={"detail": "internal_error", "request_id": request_id},
                headers={"X-Request-ID": request_id},
            )

        dt_ms = (time.perf_counter() - start) * 1000.0
        fields = {
            "rid": request_id,
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "ms": dt_ms,
        }
        if settings.api_debug_log:
            fields["query"] = request.url.query
        logger.info("request", extra=fields)
        response.headers["X-Request-ID"] = request_id
        return response

    @app.exception_handler(NotFoundError)
    async def not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"detail": exc.detail})

    @app.exception_handler(PolicyDeniedError)
    async def policy_denied(request: Request, exc: PolicyDeniedError):
        return JSONResponse(status_code=403, content={"detail": "forbidden"})

    @app.exception_handler(MisconfiguredOperationError)
    async def misconfigured(request: Request, exc: MisconfiguredOperationError):
        logger.error(
            "operation_misconfigured",
            extra={"rid": getattr(request.state, "request_id", ""), "path": request.url.path, "op": str(exc)},
        )
        return JSONResponse(status_code=403, content={"detail": "forbidden"})

    @app.exception_handler(AliasError)
    async def alias_invalid(request: Request, exc: AliasError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(AlreadyExistsError)
    async def alias_taken(request: Request, exc: AlreadyExistsError):
        return JSONResponse(status_code=409, content={"detail": "alias_taken"})

    @app.exception_handler(NoteTooLongError)
    async def note_too_long(request: Request, exc: NoteTooLongError):
        return JSONResponse(status_code=413, content={"detail": "note_too_long"})

    app.include_router(router)
    validate_operation_permissions(declared_operations(app.routes), get_operation_permissions())
    return app


app = create_app()
