from __future__ import annotations

from typing import Any, Dict, Optional, Type


class TeamCityClientError(Exception):
    """Base error for client failures."""


class TransportError(TeamCityClientError):
    """Network or timeout failure; no HTTP response was received."""


class ParseError(TeamCityClientError):
    pass


class ModelValidationError(TeamCityClientError):
    pass


class TeamCityHTTPError(TeamCityClientError):
    def __init__(
        self,
        *,
        status_code: int,
        method: str,
        url: str,
        message: str,
        response_json: Optional[Dict[str, Any]] = None,
        response_text: Optional[str] = None,
    ):
        super().__init__(f"{status_code} {method} {url}: {message}")
        self.status_code = status_code
        self.method = method
        self.url = url
        self.message = message
        self.response_json = response_json
        self.response_text = response_text


class ValidationError(TeamCityHTTPError):
    """The server rejected the payload (HTTP 400/422)."""


class AuthenticationError(TeamCityHTTPError):
    """Credentials missing or insufficient (HTTP 401/403)."""


class NotFoundError(TeamCityHTTPError):
    """Requested resource does not exist (HTTP 404)."""


class ConflictError(TeamCityHTTPError):
    """Resource already exists or is in a conflicting state (HTTP 409)."""


_STATUS_ERRORS: Dict[int, Type[TeamCityHTTPError]] = {
    400: ValidationError,
    401: AuthenticationError,
    403: AuthenticationError,
    404: NotFoundError,
    409: ConflictError,
    422: ValidationError,
}


def error_class_for_status(status_code: int) -> Type[TeamCityHTTPError]:
    return _STATUS_ERRORS.get(status_code, TeamCityHTTPError)


__all__ = [
    "TeamCityClientError",
    "TeamCityHTTPError",
    "TransportError",
    "ParseError",
    "ModelValidationError",
    "ValidationError",
    "AuthenticationError",
    "NotFoundError",
    "ConflictError",
    "error_class_for_status",
]
