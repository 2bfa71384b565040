# storefront/core/errors.py
from enum import Enum
from typing import Any

from fastapi import Request, status
from fastapi.responses import JSONResponse

from storefront.constants import LOGIN_PATH, message
from storefront.core.config import get_settings


class ApiErrorKind(str, Enum):
    """
    Fixed taxonomy of upstream failures surfaced to the user.
    """

    NETWORK = "network"
    INVALID_REQUEST = "invalid_request"
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    UNKNOWN = "unknown"


_STATUS_KINDS: dict[int, ApiErrorKind] = {
    400: ApiErrorKind.INVALID_REQUEST,
    401: ApiErrorKind.UNAUTHENTICATED,
    403: ApiErrorKind.FORBIDDEN,
    404: ApiErrorKind.NOT_FOUND,
    409: ApiErrorKind.CONFLICT,
    429: ApiErrorKind.RATE_LIMITED,
    500: ApiErrorKind.SERVER_ERROR,
    503: ApiErrorKind.SERVER_ERROR,
}


def classify_status(status_code: int | None) -> ApiErrorKind:
    if status_code is None:
        return ApiErrorKind.NETWORK
    return _STATUS_KINDS.get(status_code, ApiErrorKind.UNKNOWN)


def extract_field_errors(data: Any) -> dict[str, str]:
    """
    Flatten a DRF-style error body ({"field": ["msg", ...]}) into
    {field: first message}.
    """
    if not isinstance(data, dict):
        return {}
    fields: dict[str, str] = {}
    for name, value in data.items():
        if isinstance(value, list) and value:
            fields[name] = str(value[0])
        elif isinstance(value, str):
            fields[name] = value
    return fields


def user_message(
    kind: ApiErrorKind,
    status_code: int | None = None,
    fields: dict[str, str] | None = None,
    locale: str = "en",
) -> str:
    """
    Map an error class to the message shown in the notification.

    For 400 the first field-level error wins when the API sent one.
    """
    if kind is ApiErrorKind.NETWORK:
        return message("NETWORK_ERROR", locale)
    if kind is ApiErrorKind.INVALID_REQUEST:
        if fields:
            return next(iter(fields.values()))
        return message("INVALID_REQUEST", locale)
    if kind is ApiErrorKind.UNAUTHENTICATED:
        return message("LOGIN_ERROR", locale)
    if kind is ApiErrorKind.FORBIDDEN:
        return message("FORBIDDEN", locale)
    if kind is ApiErrorKind.NOT_FOUND:
        return message("NOT_FOUND", locale)
    if kind is ApiErrorKind.CONFLICT:
        return message("CONFLICT", locale)
    if kind is ApiErrorKind.RATE_LIMITED:
        return message("RATE_LIMITED", locale)
    if kind is ApiErrorKind.SERVER_ERROR:
        if status_code == 503:
            return message("SERVICE_UNAVAILABLE", locale)
        return message("SERVER_ERROR", locale)
    return message("ERROR", locale)


class ApiError(Exception):
    """
    Raised by the API gateway for any failed upstream call.

    Attributes:
        kind: taxonomy class
        status_code: upstream HTTP status (None for network failures)
        fields: field-level validation errors (400 only)
        login_required: set when the session was force-logged-out
    """

    def __init__(
        self,
        kind: ApiErrorKind,
        status_code: int | None = None,
        fields: dict[str, str] | None = None,
        detail: Any = None,
        login_required: bool = False,
    ):
        self.kind = kind
        self.status_code = status_code
        self.fields = fields or {}
        self.detail = detail
        self.login_required = login_required
        super().__init__(self.message())

    @classmethod
    def from_response(cls, status_code: int, data: Any) -> "ApiError":
        kind = classify_status(status_code)
        fields = extract_field_errors(data) if kind is ApiErrorKind.INVALID_REQUEST else {}
        return cls(kind, status_code=status_code, fields=fields, detail=data)

    def message(self, locale: str = "en") -> str:
        return user_message(self.kind, self.status_code, self.fields, locale)

    @property
    def response_status(self) -> int:
        """Status the storefront answers the browser with."""
        if self.kind is ApiErrorKind.NETWORK:
            return status.HTTP_503_SERVICE_UNAVAILABLE
        if self.status_code is None or self.status_code < 400:
            return status.HTTP_502_BAD_GATEWAY
        return self.status_code


def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    """
    App-level handler: every ApiError becomes a transient notification
    body. Nothing is retried here.
    """
    locale = request.cookies.get("locale", get_settings().DEFAULT_LOCALE)
    body: dict[str, Any] = {
        "error": exc.kind.value,
        "message": exc.message(locale),
    }
    if exc.fields:
        body["fields"] = exc.fields
    if exc.login_required:
        body["redirect"] = LOGIN_PATH
    return JSONResponse(status_code=exc.response_status, content=body)
