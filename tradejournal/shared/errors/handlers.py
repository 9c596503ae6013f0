"""
Centralized error handlers for FastAPI.

Maps domain-specific errors to HTTP responses.
No stack traces or internal details are exposed to clients.
All error responses share the ``{"error": ..., "detail": ...}`` shape.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from tradejournal.domain.journal.errors import (
    AuthenticationRequiredError,
    CapitalFlowNotFoundError,
    CsvImportError,
    DuplicateHoldingError,
    EmailAlreadyRegisteredError,
    HoldingNotFoundError,
    InsightGenerationError,
    InvalidCalculationError,
    InvalidCredentialsError,
    InvalidPeriodError,
    JournalDomainError,
    NoTradesError,
    SymbolNotFoundError,
    TradeNotFoundError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)

HTTP_400 = 400
HTTP_401 = 401
HTTP_404 = 404
HTTP_409 = 409
HTTP_500 = 500


def _error_response(
    status_code: int,
    error: str,
    detail: str | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build a consistent JSON error response."""
    body: dict[str, str | None] = {"error": error}
    if detail:
        body["detail"] = detail
    return JSONResponse(status_code=status_code, content=body, headers=headers)


def register_error_handlers(app: FastAPI) -> None:
    """Register all domain error handlers on the FastAPI application.

    Args:
        app: The FastAPI application instance.
    """

    @app.exception_handler(AuthenticationRequiredError)
    async def handle_authentication_required(
        _request: Request, exc: AuthenticationRequiredError
    ) -> JSONResponse:
        return _error_response(
            HTTP_401, exc.reason, headers={"WWW-Authenticate": "Bearer"}
        )

    @app.exception_handler(InvalidCredentialsError)
    async def handle_invalid_credentials(
        _request: Request, exc: InvalidCredentialsError
    ) -> JSONResponse:
        logger.info("Sign-in rejected")
        return _error_response(HTTP_401, exc.message)

    @app.exception_handler(EmailAlreadyRegisteredError)
    async def handle_email_taken(
        _request: Request, exc: EmailAlreadyRegisteredError
    ) -> JSONResponse:
        return _error_response(HTTP_400, exc.message)

    @app.exception_handler(UserNotFoundError)
    @app.exception_handler(TradeNotFoundError)
    @app.exception_handler(HoldingNotFoundError)
    @app.exception_handler(CapitalFlowNotFoundError)
    @app.exception_handler(SymbolNotFoundError)
    async def handle_not_found(_request: Request, exc: JournalDomainError) -> JSONResponse:
        """Handle the not-found family. Ownership misses look the same."""
        logger.warning("%s", exc.message)
        return _error_response(HTTP_404, exc.message)

    @app.exception_handler(DuplicateHoldingError)
    async def handle_duplicate_holding(
        _request: Request, exc: DuplicateHoldingError
    ) -> JSONResponse:
        logger.warning("Duplicate holding: %s", exc.symbol)
        return _error_response(HTTP_409, exc.message)

    @app.exception_handler(NoTradesError)
    async def handle_no_trades(_request: Request, exc: NoTradesError) -> JSONResponse:
        return _error_response(HTTP_400, "No trades found", exc.message)

    @app.exception_handler(CsvImportError)
    @app.exception_handler(InvalidPeriodError)
    @app.exception_handler(InvalidCalculationError)
    async def handle_bad_input(_request: Request, exc: JournalDomainError) -> JSONResponse:
        logger.warning("Rejected input: %s", exc.message)
        return _error_response(HTTP_400, exc.message)

    @app.exception_handler(InsightGenerationError)
    async def handle_insight_generation(
        _request: Request, exc: InsightGenerationError
    ) -> JSONResponse:
        logger.error("Insight generation error: %s", exc.reason)
        return _error_response(HTTP_500, "Failed to generate AI insights", exc.reason)

    @app.exception_handler(JournalDomainError)
    async def handle_journal_domain(
        _request: Request, exc: JournalDomainError
    ) -> JSONResponse:
        """Catch-all for unhandled journal domain errors."""
        logger.error("Unhandled journal domain error: %s", exc.message)
        return _error_response(HTTP_500, "Internal server error")

    @app.exception_handler(Exception)
    async def handle_unexpected(_request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unexpected errors. Never exposes internals."""
        logger.exception("Unexpected error: %s", type(exc).__name__)
        return _error_response(HTTP_500, "Internal server error")
