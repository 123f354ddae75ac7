"""
Core logic package.

Provides the call scope, hook chains, errors, logging and HTTP client setup.
"""

from .call_scope import CallScope, get_attempt, get_request, get_scope
from .middleware import HandlerChain

__all__ = [
    "CallScope",
    "HandlerChain",
    "get_attempt",
    "get_request",
    "get_scope",
]
