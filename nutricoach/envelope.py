# -*- coding: utf-8 -*-
"""Response envelope for function-style endpoints.

Function endpoints (``/api/functions/*``) answer HTTP 200 even when the
operation fails, carrying ``{"success": false, "error": ...}`` in the body.
Existing callers branch on ``error`` rather than on the status code.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Coroutine, Dict, Optional

from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from pydantic import BaseModel

from .errors import InvalidRequest, NotFoundError, NutricoachError

logger = logging.getLogger(__name__)


class FunctionResult(BaseModel):
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    data: Optional[Dict[str, Any]] = None


def ok(data: Optional[Dict[str, Any]] = None, message: Optional[str] = None) -> FunctionResult:
    return FunctionResult(success=True, message=message, data=data)


def failure(error: str, message: Optional[str] = None) -> FunctionResult:
    return FunctionResult(success=False, error=error, message=message)


def _describe_validation(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "Invalid request: " + "; ".join(parts)


def _envelope(result: FunctionResult) -> JSONResponse:
    return JSONResponse(status_code=200, content=result.model_dump(exclude_none=True))


class FunctionRoute(APIRoute):
    """Route class that folds every failure into a 200 envelope."""

    def get_route_handler(self) -> Callable[[Request], Coroutine[Any, Any, Response]]:
        original = super().get_route_handler()
        name = self.name

        async def handler(request: Request) -> Response:
            try:
                return await original(request)
            except RequestValidationError as exc:
                message = _describe_validation(exc)
                logger.warning("%s rejected: %s", name, message)
                return _envelope(failure(message))
            except (InvalidRequest, NotFoundError) as exc:
                logger.warning("%s rejected: %s", name, exc.message)
                return _envelope(failure(exc.message, exc.hint))
            except NutricoachError as exc:
                logger.error("%s failed: %s", name, exc.message, exc_info=True)
                return _envelope(failure(exc.message, exc.hint))
            except HTTPException as exc:
                return _envelope(failure(str(exc.detail)))
            except Exception as exc:
                logger.exception("%s crashed", name)
                return _envelope(failure(str(exc) or "Unknown error"))

        return handler


def install_error_handlers(app: FastAPI) -> None:
    """Map domain errors raised by resource endpoints to HTTP status codes."""

    @app.exception_handler(NutricoachError)
    async def _domain_error(request: Request, exc: NutricoachError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})
