"""
Services package.

Provides the executor, response parsers, rate limiting and captcha handling.
"""

from .executor import Executor
from .limiter import RateLimiter, TtlLimiterStore
from .parsers import JsonResponseParser, RawResponseParser

__all__ = [
    "Executor",
    "JsonResponseParser",
    "RateLimiter",
    "RawResponseParser",
    "TtlLimiterStore",
]
