"""
FastAPI application entry point for the todos API.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from todos_api.config import get_settings
from todos_api.dependencies import get_account_store, get_token_service
from todos_api.errors import MissingToken, TodoServiceError
from todos_api.routes import account_router, router

logger = logging.getLogger(__name__)


async def _service_error_handler(request: Request, exc: TodoServiceError):
    content = {"detail": exc.message}
    if isinstance(exc, MissingToken):
        content["auth"] = False
    return JSONResponse(status_code=exc.status_code, content=content)


async def _validation_error_handler(request: Request, exc: RequestValidationError):
    # Missing or empty body fields are plain bad requests.
    fields = [".".join(str(p) for p in err.get("loc", ())) for err in exc.errors()]
    return JSONResponse(
        status_code=400,
        content={"detail": "Invalid request", "fields": fields},
    )


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level)
    # Load the signing key and open the store before serving any request.
    get_token_service()
    get_account_store()
    app = FastAPI(title="Todos API", version="0.1.0")
    app.add_exception_handler(TodoServiceError, _service_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.include_router(router, prefix=settings.api_prefix)
    app.include_router(account_router)
    return app


app = create_app()
