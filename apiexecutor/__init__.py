"""
apiexecutor - request execution pipeline for a method-style HTTP API.

Builds API requests, runs them through hook chains, sends them with httpx,
parses the responses and re-sends requests on demand of response hooks.
"""

from apiexecutor.config import ExecutorConfig
from apiexecutor.core.call_scope import CallScope, get_attempt, get_request
from apiexecutor.core.exceptions import (
    ApiError,
    ApiResponseError,
    ChainInterruptedError,
    ExecuteErrors,
    ExecutorError,
    InvalidRequestError,
    MaxTriesExceededError,
    RequestBlockedError,
    RequestContextMissingError,
    RequestTimeoutError,
    ResponseParseError,
    TransportError,
)
from apiexecutor.models.params import Params
from apiexecutor.models.request import ApiRequest
from apiexecutor.models.response import ApiResponse, JsonResponse
from apiexecutor.services.captcha import captcha_hook
from apiexecutor.services.executor import Executor
from apiexecutor.services.limiter import (
    LimiterJanitor,
    LimiterTransport,
    RateLimiter,
    TokenBucket,
    TtlLimiterStore,
)
from apiexecutor.services.parsers import JsonResponseParser, RawResponseParser

__all__ = [
    "ApiError",
    "ApiRequest",
    "ApiResponse",
    "ApiResponseError",
    "CallScope",
    "ChainInterruptedError",
    "ExecuteErrors",
    "Executor",
    "ExecutorConfig",
    "ExecutorError",
    "InvalidRequestError",
    "JsonResponse",
    "JsonResponseParser",
    "LimiterJanitor",
    "LimiterTransport",
    "MaxTriesExceededError",
    "Params",
    "RateLimiter",
    "RawResponseParser",
    "RequestBlockedError",
    "RequestContextMissingError",
    "RequestTimeoutError",
    "ResponseParseError",
    "TokenBucket",
    "TransportError",
    "TtlLimiterStore",
    "captcha_hook",
    "get_attempt",
    "get_request",
]
