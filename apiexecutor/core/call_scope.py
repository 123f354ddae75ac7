"""
CallScope management.

A CallScope travels with one logical call: it holds the ApiRequest that started
the call and the attempt counter shared by every send made on its behalf.
The scope is passed explicitly through the executor and bound to outgoing
httpx requests through their ``extensions`` mapping.
"""

import threading
from typing import TYPE_CHECKING, Any, Optional

import httpx

if TYPE_CHECKING:
    from apiexecutor.models.request import ApiRequest

# Key of the scope inside httpx.Request.extensions.
SCOPE_EXTENSION = "apiexecutor.call_scope"

_INT32_MAX = 2**31 - 1


class AttemptCounter:
    """
    Thread-safe 32-bit send counter.

    Several calls may share one counter when a caller reuses the scope of a
    previous response, possibly from different threads.
    """

    def __init__(self, value: int = 0):
        self._value = value
        self._lock = threading.Lock()

    @property
    def value(self) -> int:
        with self._lock:
            return self._value

    def increment(self) -> int:
        """Add one send and return the new value."""
        with self._lock:
            if self._value >= _INT32_MAX:
                raise OverflowError("attempt counter overflow")
            self._value += 1
            return self._value


class CallScope:
    """State of one logical call."""

    __slots__ = ("request", "counter")

    def __init__(self, request: "ApiRequest", counter: Optional[AttemptCounter] = None):
        self.request = request
        self.counter = counter if counter is not None else AttemptCounter()

    @property
    def attempt(self) -> int:
        return self.counter.value

    def derive(self, request: "ApiRequest") -> "CallScope":
        """Return a scope for ``request`` that keeps counting on this scope's counter."""
        return CallScope(request, self.counter)

    def __repr__(self) -> str:
        return f"CallScope(method={self.request.method!r}, attempt={self.attempt})"


def bind_scope(http_request: httpx.Request, scope: CallScope) -> httpx.Request:
    """Attach ``scope`` to an outgoing HTTP request."""
    http_request.extensions[SCOPE_EXTENSION] = scope
    return http_request


def get_scope(carrier: Any) -> Optional[CallScope]:
    """
    Resolve the CallScope from any object of the pipeline.

    Accepts a CallScope, an httpx.Request, an httpx.Response, an ApiResponse
    (anything exposing ``http_response``) or None.
    """
    if carrier is None:
        return None
    if isinstance(carrier, CallScope):
        return carrier
    if isinstance(carrier, httpx.Request):
        return carrier.extensions.get(SCOPE_EXTENSION)
    if isinstance(carrier, httpx.Response):
        try:
            return get_scope(carrier.request)
        except RuntimeError:
            # Response built without a request.
            return None
    http_response = getattr(carrier, "http_response", None)
    if http_response is not None:
        return get_scope(http_response)
    return None


def get_request(carrier: Any) -> Optional["ApiRequest"]:
    """Get the ApiRequest of the current call, or None."""
    scope = get_scope(carrier)
    return scope.request if scope is not None else None


def get_attempt(carrier: Any) -> int:
    """Get the number of sends made in the current scope (0 if there is no scope)."""
    scope = get_scope(carrier)
    return scope.attempt if scope is not None else 0
