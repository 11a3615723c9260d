"""
Error taxonomy shared by routes and controllers.

Every API error is an ``HTTPException`` subclass with a fixed status code, so
route handlers can keep the ``except HTTPException: raise`` pattern and let
FastAPI render ``{"detail": ...}`` bodies.
"""

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from utils.state import State


class TerraGuardError(HTTPException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal server error"

    def __init__(self, detail: str = None):
        super().__init__(
            status_code=self.status_code, detail=detail or self.default_detail
        )


class ValidationError(TerraGuardError):
    """Missing or out-of-range request fields."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request"


class AuthenticationError(TerraGuardError):
    """No usable bearer token on the request."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Missing or invalid auth token"


class AuthorizationError(TerraGuardError):
    """Token rejected or role not allowed."""

    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Access denied"


class NotFoundError(TerraGuardError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class InternalError(TerraGuardError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal server error"


class DatabaseError(InternalError):
    default_detail = "Database error"


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        fields = [".".join(str(part) for part in err["loc"][1:]) for err in errors]
        State.logger.warning(
            f"Rejected {request.method} {request.url.path}: invalid fields {fields}"
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": f"Invalid value for: {', '.join(fields)}"},
        )
