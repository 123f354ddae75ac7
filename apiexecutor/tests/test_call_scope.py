import threading

import httpx

from apiexecutor.core.call_scope import (
    SCOPE_EXTENSION,
    AttemptCounter,
    CallScope,
    bind_scope,
    get_attempt,
    get_request,
    get_scope,
)
from apiexecutor.models.request import ApiRequest
from apiexecutor.models.response import ApiResponse


def test_fresh_scope_starts_at_zero():
    req = ApiRequest("users.get")
    scope = CallScope(req)

    assert scope.attempt == 0
    assert scope.request is req


def test_derived_scope_shares_counter():
    """A derived scope binds the new request but keeps counting on the same counter."""
    first = ApiRequest("users.get")
    second = ApiRequest("status.get")
    scope = CallScope(first)
    scope.counter.increment()

    derived = scope.derive(second)
    derived.counter.increment()

    assert derived.request is second
    assert derived.counter is scope.counter
    assert scope.attempt == 2


def test_counter_increments_are_atomic_across_threads():
    counter = AttemptCounter()

    def worker():
        for _ in range(1000):
            counter.increment()

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert counter.value == 8000


def test_accessors_without_scope():
    assert get_request(None) is None
    assert get_attempt(None) == 0
    assert get_attempt(httpx.Request("POST", "https://api.test/method/users.get")) == 0
    assert get_scope(object()) is None


def test_accessors_resolve_scope_from_http_objects():
    req = ApiRequest("users.get")
    scope = CallScope(req)
    scope.counter.increment()

    http_request = bind_scope(httpx.Request("POST", "https://api.test/method/users.get"), scope)
    http_response = httpx.Response(200, content=b"{}", request=http_request)
    response = ApiResponse(http_response)

    assert http_request.extensions[SCOPE_EXTENSION] is scope
    for carrier in (scope, http_request, http_response, response):
        assert get_request(carrier) is req
        assert get_attempt(carrier) == 1


def test_response_without_request_has_no_scope():
    assert get_scope(httpx.Response(200)) is None
