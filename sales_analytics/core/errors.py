from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ErrorDetail(BaseModel):
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None


class AppError(Exception):
    def __init__(self, code: str, message: str, status_code: int = 400) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code


class SalesAnalysisError(AppError):
    """Raised when any part of the report could not be produced.

    ``error`` keeps the underlying failure message for the response body.
    """

    def __init__(self, error: str, message: str = "Failed to fetch sales analysis") -> None:
        super().__init__(code="sales_analysis_failed", message=message, status_code=500)
        self.error = error


class StoreQueryError(Exception):
    """A read against the relational store failed.

    Carries the identifier of the query that failed so it can be logged.
    """

    def __init__(self, query_name: str, message: str) -> None:
        super().__init__(message)
        self.query_name = query_name
        self.message = message


class ErrorEnvelope(BaseModel):
    error: ErrorDetail


class FailureBody(BaseModel):
    message: str
    error: str


def app_error_handler(_: Request, exc: AppError) -> JSONResponse:
    envelope = ErrorEnvelope(error=ErrorDetail(code=exc.code, message=exc.message))
    return JSONResponse(status_code=exc.status_code, content=envelope.model_dump())


def sales_analysis_error_handler(_: Request, exc: SalesAnalysisError) -> JSONResponse:
    body = FailureBody(message=exc.message, error=exc.error)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


def validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    envelope = ErrorEnvelope(
        error=ErrorDetail(
            code="validation_error",
            message="Validation error",
            details={"errors": exc.errors()},
        )
    )
    return JSONResponse(status_code=422, content=envelope.model_dump())
