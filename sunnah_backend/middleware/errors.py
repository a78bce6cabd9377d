"""Error handling middleware."""

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.status import (
    HTTP_422_UNPROCESSABLE_CONTENT,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from sunnah_backend.core.logging import get_logger

logger = get_logger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Middleware to turn unhandled errors into consistent JSON responses.

    Responses that routes or the access gate build on purpose (401, 426, 429
    and the geocoding fault body) are passed through untouched; only raised
    exceptions are rewritten.
    """

    @classmethod
    def register(cls, app: FastAPI) -> None:
        """Install the JSON error body as the app's exception handlers."""
        handler = cls(app)
        app.add_exception_handler(HTTPException, handler.handle_exception)
        app.add_exception_handler(RequestValidationError, handler.handle_exception)
        app.add_middleware(cls)

    def _get_error_detail(self, exc: Exception) -> tuple[str, int]:
        """Get error detail and status code from exception.

        Only HTTP and validation errors keep their own status; anything else
        is an unhandled fault.
        """
        if isinstance(exc, HTTPException):
            return str(exc.detail), exc.status_code
        if isinstance(exc, RequestValidationError):
            return str(exc.errors()), HTTP_422_UNPROCESSABLE_CONTENT
        return INTERNAL_ERROR_MESSAGE, HTTP_500_INTERNAL_SERVER_ERROR

    def _create_error_response(
        self,
        error_type: str,
        detail: str,
        status_code: int,
        correlation_id: str | None,
    ) -> JSONResponse:
        """Create JSON error response with optional correlation ID."""
        response = JSONResponse(
            status_code=status_code,
            content={
                "error": error_type,
                "message": detail,
                "status_code": status_code,
                "correlation_id": correlation_id if correlation_id else "unknown",
            },
        )
        if correlation_id:
            response.headers["X-Request-ID"] = correlation_id
        return response

    def _log_error(
        self,
        request: Request,
        error_type: str,
        detail: str,
        status_code: int,
        correlation_id: str | None,
    ) -> None:
        """Log error details."""
        logger.error(
            "request_error",
            error_type=error_type,
            error_message=detail,
            status_code=status_code,
            path=request.url.path,
            method=request.method,
            correlation_id=correlation_id,
        )

    async def handle_exception(self, request: Request, exc: Exception) -> JSONResponse:
        """
        Handle any exception and return a JSON response.

        Args:
        ----
            request: The request that caused the exception
            exc: The exception to handle

        Returns:
        -------
            A JSON response with error details
        """
        correlation_id = getattr(request.state, "correlation_id", None)
        error_type = exc.__class__.__name__
        detail, status_code = self._get_error_detail(exc)

        # The cause of a 500 is only logged, never returned
        self._log_error(request, error_type, str(exc), status_code, correlation_id)
        return self._create_error_response(
            error_type, detail, status_code, correlation_id
        )

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """
        Process the request/response cycle and handle errors.

        Args:
        ----
            request: The incoming request
            call_next: The next handler in the middleware chain

        Returns:
        -------
            The response from downstream handlers or error response
        """
        try:
            return await call_next(request)
        except Exception as exc:
            return await self.handle_exception(request, exc)
