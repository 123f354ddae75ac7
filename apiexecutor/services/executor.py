"""
Executor Service

Sends ApiRequests through the hook chains and the HTTP client, parses the
responses and re-sends a request as long as a response hook asks for it
(``response.renew``), bounded by MAX_REQUEST_TRIES per call scope.
"""

import asyncio
import logging
from typing import Any, Mapping, Optional

import httpx

from apiexecutor.config import ExecutorConfig
from apiexecutor.core.call_scope import CallScope
from apiexecutor.core.exceptions import (
    ChainInterruptedError,
    InvalidRequestError,
    MaxTriesExceededError,
    RequestBlockedError,
    RequestTimeoutError,
    ResponseParseError,
    TransportError,
)
from apiexecutor.core.http_client import HttpClientFactory
from apiexecutor.core.middleware import HandlerChain, Hook
from apiexecutor.models.params import Params
from apiexecutor.models.request import ApiRequest
from apiexecutor.models.response import ApiResponse
from apiexecutor.services.parsers import JsonResponseParser, ResponseParser

logger = logging.getLogger("apiexecutor.executor")


class Executor:
    """
    Executes API requests.

    Hook extension points, each run newest-registered first:
      - api_request:   hook(next, request: ApiRequest, scope: CallScope)
      - http_request:  hook(next, http_request: httpx.Request)
      - http_response: hook(next, http_response: httpx.Response), before parsing
      - api_response:  hook(next, response: ApiResponse), after parsing

    Raw response hooks run before the parser (not after it) so they can
    replace the body the parser reads. A request hook that returns without
    awaiting ``next`` cancels the send.
    """

    def __init__(
        self,
        config: Optional[ExecutorConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
        parser: Optional[ResponseParser] = None,
    ):
        """
        Args:
            config: ExecutorConfig instance (read from the environment if omitted)
            client: httpx.AsyncClient used as transport (built from config if omitted)
            parser: Default response parser (JsonResponseParser if omitted)
        """
        self.config = config if config is not None else ExecutorConfig()
        self._owns_client = client is None
        self.client = (
            client if client is not None else HttpClientFactory(self.config).create_async_client()
        )
        self.parser: Optional[ResponseParser] = parser if parser is not None else JsonResponseParser()
        self.base_url = self.config.BASE_URL
        self.max_request_tries = self.config.MAX_REQUEST_TRIES

        self.api_request_chain = HandlerChain("api_request")
        self.http_request_chain = HandlerChain("http_request")
        self.http_response_chain = HandlerChain("http_response")
        self.api_response_chain = HandlerChain("api_response")

    # Hook registration

    def api_request_hook(self, hook: Hook) -> Hook:
        return self.api_request_chain.register(hook)

    def http_request_hook(self, hook: Hook) -> Hook:
        return self.http_request_chain.register(hook)

    def http_response_hook(self, hook: Hook) -> Hook:
        return self.http_response_chain.register(hook)

    def api_response_hook(self, hook: Hook) -> Hook:
        return self.api_response_chain.register(hook)

    def reset_api_request_hooks(self) -> None:
        self.api_request_chain.reset()

    def reset_http_request_hooks(self) -> None:
        self.http_request_chain.reset()

    def reset_http_response_hooks(self) -> None:
        self.http_response_chain.reset()

    def reset_api_response_hooks(self) -> None:
        self.api_response_chain.reset()

    # Lifecycle

    async def aclose(self) -> None:
        """Close the HTTP client if this executor created it."""
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> "Executor":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    # Execution

    def new_request(self, method: str, values: Optional[Mapping[str, Any]] = None) -> ApiRequest:
        """Create a request whose params carry the configured API version and language."""
        params = Params(values, version=self.config.API_VERSION, lang=self.config.API_LANG)
        return ApiRequest(method, params)

    async def do_request(
        self,
        request: Optional[ApiRequest],
        *,
        scope: Optional[CallScope] = None,
        parser: Optional[ResponseParser] = None,
        timeout: Optional[float] = None,
    ) -> ApiResponse:
        """
        Execute an API request.

        Args:
            request: Request to send
            scope: Scope of a previous response; its attempt counter keeps counting
            parser: Response parser for this call (executor default if omitted)
            timeout: Deadline for the whole call, renews included (seconds)

        Returns:
            The parsed response when the API reported no error. A domain error
            is raised instead of returned; the response is on ``exc.response``,
            and ``exc.response.scope`` continues the attempt counter.

        Raises:
            InvalidRequestError: request or parser missing
            RequestBlockedError: a hook blocked the request
            ChainInterruptedError: a request hook did not call ``next``
            MaxTriesExceededError: the scope has no send attempts left
            TransportError: the HTTP exchange failed (RequestTimeoutError on timeout)
            ResponseParseError: the body could not be parsed
            ApiResponseError: the API reported an error; ``exc.response`` holds the response
        """
        if request is None:
            raise InvalidRequestError("input request empty")

        parser = parser if parser is not None else self.parser
        if parser is None:
            raise InvalidRequestError("response parser is nil")

        scope = CallScope(request) if scope is None else scope.derive(request)

        if timeout is None:
            return await self._execute(request, scope, parser)

        try:
            return await asyncio.wait_for(self._execute(request, scope, parser), timeout)
        except asyncio.TimeoutError as e:
            logger.warning(
                f"Request timed out after {timeout}s",
                extra={"api_method": request.method, "attempt": scope.attempt},
            )
            raise RequestTimeoutError(e) from e

    async def _execute(
        self, request: ApiRequest, scope: CallScope, parser: ResponseParser
    ) -> ApiResponse:
        while True:
            self._check_blocked(request)

            if scope.attempt >= self.max_request_tries:
                logger.warning(
                    "Max request tries exceeded",
                    extra={"api_method": request.method, "max_tries": self.max_request_tries},
                )
                raise MaxTriesExceededError(self.max_request_tries)

            try:
                await self.api_request_chain.run(request, scope, require_next=True)
            except ChainInterruptedError:
                # A hook that blocked the request may skip ``next`` as well.
                self._check_blocked(request)
                raise
            self._check_blocked(request)

            http_request = request.build_http_request(self.client, self.base_url, scope)
            http_request = await self.http_request_chain.run(
                http_request, require_next=True
            )

            http_response = await self._send(request, http_request, scope)
            http_response = await self.http_response_chain.run(http_response)

            try:
                response = await parser.parse(http_response)
            except ResponseParseError:
                raise
            except Exception as e:
                raise ResponseParseError(e) from e

            response = await self.api_response_chain.run(response)

            if response.renew:
                logger.info(
                    "Renewing request",
                    extra={"api_method": request.method, "attempt": scope.attempt},
                )
                continue

            error = response.error()
            if error is not None:
                error.response = response
                raise error
            return response

    async def _send(
        self, request: ApiRequest, http_request: httpx.Request, scope: CallScope
    ) -> httpx.Response:
        logger.debug(
            f"Sending {request.method}",
            extra={"api_method": request.method, "attempt": scope.attempt},
        )
        try:
            return await self.client.send(http_request)
        except httpx.TimeoutException as e:
            raise RequestTimeoutError(e) from e
        except httpx.HTTPError as e:
            logger.error(
                f"HTTP request failed for method '{request.method}'",
                extra={
                    "api_method": request.method,
                    "target_url": str(http_request.url),
                    "error_type": type(e).__name__,
                    "error_detail": str(e),
                },
            )
            raise TransportError(e) from e
        finally:
            scope.counter.increment()

    @staticmethod
    def _check_blocked(request: ApiRequest) -> None:
        if request.blocked:
            reason = request.block_reason
            if reason is not None:
                raise RequestBlockedError(reason) from reason
            raise RequestBlockedError()
