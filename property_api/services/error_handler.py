"""
Error handling service for consistent failure envelopes and logging.
Every error leaving the app is rendered as {"success": false, "message": ...}.
"""

from typing import Any, Dict, Optional
from fastapi import Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from property_api.utils.exceptions import APIException
import logging
import uuid

logger = logging.getLogger(__name__)


class ErrorHandlerService:
    """
    Service for handling and formatting errors consistently across the application.
    Internal error details are logged and never sent to clients.
    """

    @staticmethod
    def format_error_response(message: str) -> Dict[str, Any]:
        """
        Format the failure envelope.

        Args:
            message: User-safe error message

        Returns:
            Envelope dictionary
        """
        return {"success": False, "message": message}

    @staticmethod
    def handle_api_exception(
        exception: APIException,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """
        Handle custom API exceptions, keeping their status code and message.
        """
        request_id = ErrorHandlerService._get_request_id(request)

        logger.warning(
            f"API Exception [{request_id}]: {exception.error_code} - {exception.detail}",
            extra={
                "error_code": exception.error_code,
                "status_code": exception.status_code,
                "request_id": request_id,
                "path": request.url.path if request else None
            }
        )

        return JSONResponse(
            status_code=exception.status_code,
            content=ErrorHandlerService.format_error_response(exception.detail),
            headers=exception.headers
        )

    @staticmethod
    def handle_http_exception(
        exception: StarletteHTTPException,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """Handle framework HTTP errors such as unknown routes."""
        request_id = ErrorHandlerService._get_request_id(request)
        logger.info(f"HTTP Exception [{request_id}]: {exception.status_code} - {exception.detail}")

        return JSONResponse(
            status_code=exception.status_code,
            content=ErrorHandlerService.format_error_response(str(exception.detail)),
            headers=getattr(exception, "headers", None)
        )

    @staticmethod
    def handle_database_error(
        exception: SQLAlchemyError,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """Handle store errors that escaped the service layer."""
        request_id = ErrorHandlerService._get_request_id(request)
        logger.error(
            f"Database Error [{request_id}]: {exception}",
            extra={
                "request_id": request_id,
                "path": request.url.path if request else None
            }
        )

        return JSONResponse(
            status_code=500,
            content=ErrorHandlerService.format_error_response("A database error occurred")
        )

    @staticmethod
    def handle_unexpected_error(
        exception: Exception,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """Handle unexpected exceptions with a generic message."""
        request_id = ErrorHandlerService._get_request_id(request)
        logger.exception(
            f"Unexpected Error [{request_id}]: {type(exception).__name__}: {exception}",
            extra={
                "request_id": request_id,
                "path": request.url.path if request else None
            }
        )

        return JSONResponse(
            status_code=500,
            content=ErrorHandlerService.format_error_response("An unexpected error occurred")
        )

    @staticmethod
    def _get_request_id(request: Optional[Request]) -> str:
        """Request id assigned by the middleware, or a fresh one."""
        if request is not None:
            request_id = getattr(request.state, "request_id", None)
            if request_id:
                return request_id
        return str(uuid.uuid4())[:8]
