"""FastAPI application (field-level access control surface).

Operational goals:
- The permission matrix is loaded and checked against the entity schema
  before the app exists; a bad matrix aborts startup.
- Denied writes come back as explicit 403s naming the fields.
- Request-id propagation and structured access logs.
"""

from __future__ import annotations

import json
import logging
import time
import uuid
from typing import Callable

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.router import router as api_router
from app.core.env import load_env_if_present
from app.models.schema import entity_schema
from fieldaccess.core.errors import ActorUnresolvedError, FieldPermissionDenied
from fieldaccess.core.loader import get_matrix
from fieldaccess.core.matrix import validate_against_schema


logger = logging.getLogger("assetdesk")
logger.setLevel(logging.INFO)


def create_app() -> FastAPI:
    load_env_if_present()
    matrix = get_matrix()
    validate_against_schema(matrix, entity_schema())

    app = FastAPI(
        title="assetdesk Field Access API",
        version="1.0.0",
        openapi_url="/openapi.json",
        docs_url=None,
        redoc_url=None,
        description="Role-based, field-level view/edit decisions for assets, users and tickets.",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)

    @app.exception_handler(FieldPermissionDenied)
    async def field_permission_denied(request: Request, exc: FieldPermissionDenied) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_403_FORBIDDEN,
            content={"detail": exc.message(), "denied_fields": exc.denied_fields},
        )

    @app.exception_handler(ActorUnresolvedError)
    async def actor_unresolved(request: Request, exc: ActorUnresolvedError) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content={"detail": "Not authenticated."})

    @app.middleware("http")
    async def request_id_and_access_log(request: Request, call_next: Callable):
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        start = time.time()
        try:
            response = await call_next(request)
        except Exception:  # noqa: BLE001
            logger.exception("Unhandled error", extra={"request_id": request_id})
            return JSONResponse(
                status_code=500,
                content={"detail": "Internal error."},
                headers={"x-request-id": request_id},
            )

        duration_ms = int((time.time() - start) * 1000)
        response.headers["x-request-id"] = request_id

        # No headers or bodies: tokens and record contents stay out of logs.
        logger.info(
            json.dumps(
                {
                    "event": "access",
                    "request_id": request_id,
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": getattr(response, "status_code", None),
                    "duration_ms": duration_ms,
                }
            )
        )
        return response

    return app


app = create_app()
