"""Mapping of domain exceptions to HTTP responses"""

import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from fleet_deductions.domain.exceptions import (
    DomainException,
    DriverNotFoundError,
    InvalidPenaltyError,
    InvalidTriggerConfigError,
    PenaltyAlreadyExistsError,
    PenaltyInactiveError,
    PenaltyNotFoundError,
    TripNotFoundError,
)

STATUS_BY_ERROR = {
    PenaltyNotFoundError: 404,
    DriverNotFoundError: 404,
    TripNotFoundError: 404,
    PenaltyAlreadyExistsError: 409,
    PenaltyInactiveError: 400,
    InvalidTriggerConfigError: 422,
    InvalidPenaltyError: 422,
}


def status_for(exc: DomainException) -> int:
    for error_cls, status_code in STATUS_BY_ERROR.items():
        if isinstance(exc, error_cls):
            return status_code
    return 500


def register_error_handlers(app: FastAPI) -> None:
    """Render every error in the {success: false, message} envelope"""

    @app.exception_handler(DomainException)
    async def domain_exception_handler(request: Request, exc: DomainException):
        status_code = status_for(exc)
        logging.warning(
            f"{type(exc).__name__}: {exc}",
            extra={"request_id": getattr(request.state, "request_id", "unknown"), "status": status_code},
        )
        return JSONResponse(status_code=status_code, content={"success": False, "message": str(exc)})

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": exc.detail},
            headers=exc.headers,
        )
