"""
API response models.

Standardizes the output of the request pipeline.
"""

from typing import TYPE_CHECKING, Any, Optional

import httpx
from pydantic import ValidationError

from apiexecutor.core.call_scope import CallScope, get_scope
from apiexecutor.core.exceptions import ApiResponseError, ExecuteErrors
from apiexecutor.models.api_error import ErrorObject

if TYPE_CHECKING:
    from apiexecutor.models.request import ApiRequest


class ApiResponse:
    """
    Response of unknown format: the raw body and no domain error.

    Base class for format-specific responses. Response hooks set ``renew``
    to ask the executor to send the same request again.
    """

    def __init__(self, http_response: httpx.Response, body: Optional[bytes] = None):
        self.http_response = http_response
        self.body = body if body is not None else http_response.content
        self.renew = False

    @property
    def status_code(self) -> int:
        return self.http_response.status_code

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    @property
    def scope(self) -> Optional[CallScope]:
        return get_scope(self.http_response)

    @property
    def request(self) -> Optional["ApiRequest"]:
        scope = self.scope
        return scope.request if scope is not None else None

    def error(self) -> Optional[ApiResponseError]:
        """Return the API-level error reported in the body, if any."""
        return None

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status_code={self.status_code}, renew={self.renew})"


class JsonResponse(ApiResponse):
    """Response in JSON format: ``{"response": ...}`` or ``{"error": {...}}``."""

    def __init__(self, http_response: httpx.Response, payload: Any, body: Optional[bytes] = None):
        super().__init__(http_response, body)
        self.payload = payload

    @property
    def data(self) -> Any:
        """The ``response`` field of the body."""
        if isinstance(self.payload, dict):
            return self.payload.get("response")
        return None

    def error(self) -> Optional[ApiResponseError]:
        if not isinstance(self.payload, dict):
            return None

        execute_errors = self.payload.get("execute_errors")
        if isinstance(execute_errors, list):
            errors = []
            for item in execute_errors:
                obj = _error_object(item)
                if obj is None or obj.is_empty:
                    return None
                errors.append(obj.to_error())
            if not errors:
                return None
            return ExecuteErrors(errors)

        obj = _error_object(self.payload.get("error"))
        if obj is None or obj.is_empty:
            return None
        return obj.to_error()


def _error_object(raw: Any) -> Optional[ErrorObject]:
    if not isinstance(raw, dict):
        return None
    try:
        return ErrorObject.model_validate(raw)
    except ValidationError:
        return None
