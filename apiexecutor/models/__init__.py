"""
Data model definitions package.

Aggregates request and response models for use in other modules.
"""

from .params import Params
from .request import ApiRequest
from .response import ApiResponse, JsonResponse

__all__ = [
    "ApiRequest",
    "ApiResponse",
    "JsonResponse",
    "Params",
]
