from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from docgate.db.errors import EntityNotFoundError, StoreError
from docgate.services.query_errors import NotAStructError, QueryCompileError

_LOG = logging.getLogger("docgate.http")


def _error_response(status_code: int, message: str, kind: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": message, "error": kind})


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(QueryCompileError)
    async def _query_error(request: Request, exc: QueryCompileError):
        if isinstance(exc, NotAStructError):
            _LOG.error("%s %s: %s", request.method, request.url.path, exc.message)
            return _error_response(500, exc.message, exc.kind)
        return _error_response(400, exc.message, exc.kind)

    @app.exception_handler(EntityNotFoundError)
    async def _not_found(request: Request, exc: EntityNotFoundError):
        return _error_response(404, str(exc), "NotFound")

    @app.exception_handler(StoreError)
    async def _store_error(request: Request, exc: StoreError):
        _LOG.error("%s %s: store error: %s", request.method, request.url.path, exc)
        return _error_response(500, str(exc), type(exc).__name__)
