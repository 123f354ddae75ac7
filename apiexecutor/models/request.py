"""
API request model.

An ApiRequest names the remote method and carries its params and headers.
Hooks may mutate it in place (add params, block it) until the HTTP request
is built.
"""

from typing import Mapping, Optional, Union

import httpx

from apiexecutor.core.call_scope import SCOPE_EXTENSION, CallScope
from apiexecutor.models.params import Params

CONTENT_TYPE = "application/x-www-form-urlencoded"

HeadersLike = Union[httpx.Headers, Mapping[str, str]]


class ApiRequest:
    """
    One API method call.

    Content-Type is always form-urlencoded; headers passed in cannot change it.
    """

    def __init__(
        self,
        method: str = "",
        params: Optional[Params] = None,
        headers: Optional[HeadersLike] = None,
    ):
        self.method = method
        self.params = params if params is not None else Params()
        self._headers = httpx.Headers(headers)
        self._set_content_type()
        self._blocked = False
        self._block_reason: Optional[BaseException] = None

    # Headers

    @property
    def headers(self) -> httpx.Headers:
        return self._headers

    @headers.setter
    def headers(self, headers: HeadersLike) -> None:
        """Replace all headers."""
        self._headers = httpx.Headers(headers)
        self._set_content_type()

    def append_headers(self, headers: HeadersLike) -> None:
        """Merge ``headers`` into the current ones, overwriting existing keys."""
        for key, value in httpx.Headers(headers).items():
            self._headers[key] = value
        self._set_content_type()

    def _set_content_type(self) -> None:
        if self._headers.get("content-type") != CONTENT_TYPE:
            self._headers["Content-Type"] = CONTENT_TYPE

    # Blocking

    @property
    def blocked(self) -> bool:
        return self._blocked

    @property
    def block_reason(self) -> Optional[BaseException]:
        return self._block_reason

    def block(self, reason: Optional[BaseException] = None) -> None:
        """Prevent the request from being sent, optionally explaining why."""
        self._blocked = True
        self._block_reason = reason

    def unblock(self) -> None:
        self._blocked = False
        self._block_reason = None

    # HTTP request building

    def url(self, base_url: str) -> str:
        """Return the method URL without params."""
        return f"{base_url.rstrip('/')}/{self.method.lstrip('/')}"

    def build_http_request(
        self,
        client: httpx.AsyncClient,
        base_url: str,
        scope: Optional[CallScope] = None,
        http_method: str = "POST",
    ) -> httpx.Request:
        """
        Build the HTTP request for this API request.

        POST sends params as the form body, GET in the query string. The
        scope is bound to the request so transport hooks can recover it.
        """
        extensions = {SCOPE_EXTENSION: scope} if scope is not None else None
        http_method = http_method.upper()
        encoded = self.params.encode()

        if http_method == "GET":
            url = self.url(base_url)
            if encoded:
                url = f"{url}?{encoded}"
            return client.build_request(
                http_method,
                url,
                headers=self._headers,
                extensions=extensions,
            )

        return client.build_request(
            http_method,
            self.url(base_url),
            content=encoded.encode("utf-8"),
            headers=self._headers,
            extensions=extensions,
        )

    def __repr__(self) -> str:
        return f"ApiRequest(method={self.method!r}, params={str(self.params)!r})"
