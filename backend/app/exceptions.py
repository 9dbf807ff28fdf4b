"""
Selah Backend — Error Types
============================

Every failure a route can report is a SelahError subclass. Each class states
its own HTTP mapping (`status_code`, `error_code`) so main.py needs a single
handler to turn any of them into the JSON error envelope:

    SelahError                    500 server_error
    ├── ValidationError           400 validation_error     (business rules; schema errors stay 422)
    ├── AuthenticationError       401 unauthorized          + WWW-Authenticate: Bearer
    ├── NotFoundError             404 not_found             (also: rows owned by someone else)
    ├── ExternalServiceError      502 bad_gateway           (public book catalog)
    ├── LLMServiceError           503 llm_service_error     + Retry-After when known
    ├── CircuitBreakerOpenError   503 service_unavailable   + Retry-After
    └── DatabaseError             500 server_error          (message never leaves the server)

`context` is for the server log only; `public_details()` is what the client sees.
There is no 403: another user's row is reported as missing.
"""

import logging
from typing import Any, Dict, Optional


class SelahError(Exception):
    status_code = 500
    error_code = "server_error"
    log_level = logging.ERROR

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = dict(context or {})

    @property
    def public_message(self) -> str:
        return self.message

    def public_details(self) -> Optional[Dict[str, Any]]:
        return None

    def headers(self) -> Dict[str, str]:
        return {}


class ValidationError(SelahError):
    """Input that parses but breaks a rule (blank search, end offset before start)."""

    status_code = 400
    error_code = "validation_error"
    log_level = logging.WARNING

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, context)
        self.field = field
        if field:
            self.context["field"] = field

    def public_details(self) -> Optional[Dict[str, Any]]:
        return self.context or None


class AuthenticationError(SelahError):
    status_code = 401
    error_code = "unauthorized"
    log_level = logging.DEBUG

    def __init__(self, message: str = "Unauthorized", context: Optional[Dict[str, Any]] = None):
        super().__init__(message, context)

    def headers(self) -> Dict[str, str]:
        return {"WWW-Authenticate": "Bearer"}


class NotFoundError(SelahError):
    status_code = 404
    error_code = "not_found"
    log_level = logging.DEBUG

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        else:
            message = f"The requested {resource} was not found"
        super().__init__(message, context)
        self.context["resource"] = resource
        if resource_id:
            self.context["resource_id"] = resource_id


class ExternalServiceError(SelahError):
    """An upstream HTTP dependency failed; this server is fine."""

    status_code = 502
    error_code = "bad_gateway"

    def __init__(
        self,
        message: str = "An upstream service is unavailable. Please try again later.",
        service: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, context)
        self.service = service
        if service:
            self.context["service"] = service

    def public_details(self) -> Optional[Dict[str, Any]]:
        return {"service": self.service} if self.service else None


class LLMServiceError(SelahError):
    status_code = 503
    error_code = "llm_service_error"

    def __init__(
        self,
        message: str = "AI annotation service is temporarily unavailable",
        retry_after: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, context)
        self.retry_after = retry_after
        if retry_after:
            self.context["retry_after"] = retry_after

    def headers(self) -> Dict[str, str]:
        return {"Retry-After": str(self.retry_after)} if self.retry_after else {}


class CircuitBreakerOpenError(SelahError):
    """The Gemini breaker is open; calls are refused until `recovery_time` passes."""

    status_code = 503
    error_code = "service_unavailable"
    log_level = logging.WARNING

    def __init__(self, recovery_time: int = 60, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            "AI annotation is paused after repeated failures. "
            f"Try again in about {recovery_time} seconds.",
            context,
        )
        self.recovery_time = recovery_time
        self.context["recovery_time"] = recovery_time

    def public_details(self) -> Optional[Dict[str, Any]]:
        return {"recovery_time": self.recovery_time}

    def headers(self) -> Dict[str, str]:
        return {"Retry-After": str(self.recovery_time)}


class DatabaseError(SelahError):
    """SQL text and constraint names stay in the log; clients get a generic line."""

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, context)

    @property
    def public_message(self) -> str:
        return "An internal error occurred. Please try again later."
