"""
Response body parsers.

A parser turns the raw httpx response into an ApiResponse. It owns the body:
it reads it and closes the response exactly once, whatever the outcome.
"""

import json
import logging
from typing import Protocol, runtime_checkable

import httpx

from apiexecutor.core.exceptions import ResponseParseError
from apiexecutor.models.response import ApiResponse, JsonResponse

logger = logging.getLogger("apiexecutor.parsers")


@runtime_checkable
class ResponseParser(Protocol):
    async def parse(self, http_response: httpx.Response) -> ApiResponse: ...


async def _read_body(http_response: httpx.Response) -> bytes:
    try:
        return await http_response.aread()
    except httpx.HTTPError as e:
        raise ResponseParseError(e) from e
    finally:
        await http_response.aclose()


class RawResponseParser:
    """Keeps the body as is; used for formats the executor does not understand."""

    async def parse(self, http_response: httpx.Response) -> ApiResponse:
        body = await _read_body(http_response)
        return ApiResponse(http_response, body)


class JsonResponseParser:
    """Parses JSON bodies into JsonResponse."""

    async def parse(self, http_response: httpx.Response) -> ApiResponse:
        body = await _read_body(http_response)
        try:
            payload = json.loads(body)
        except (ValueError, UnicodeDecodeError) as e:
            logger.debug(
                "Response body is not valid JSON",
                extra={"status": http_response.status_code, "body_size": len(body)},
            )
            raise ResponseParseError(e) from e
        return JsonResponse(http_response, payload, body)
