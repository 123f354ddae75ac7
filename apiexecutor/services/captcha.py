"""
Captcha handling through the renew mechanism.

When the API answers with "Captcha needed", the hook asks a solver for the
captcha text, stores the answer in the request params and marks the response
for renewal, so the executor sends the request again transparently.
"""

import logging
from typing import Awaitable, Callable

from apiexecutor.core.exceptions import ApiError
from apiexecutor.models.response import ApiResponse

logger = logging.getLogger("apiexecutor.captcha")

CAPTCHA_NEEDED_CODE = 14
CAPTCHA_SID_KEY = "captcha_sid"
CAPTCHA_KEY_KEY = "captcha_key"

CaptchaSolver = Callable[[str], Awaitable[str]]


def captcha_hook(solver: CaptchaSolver):
    """Return an api_response hook solving captcha errors with ``solver(captcha_img)``."""

    async def solve_captcha_hook(next, response: ApiResponse):
        error = response.error()
        request = response.request
        if (
            isinstance(error, ApiError)
            and error.code == CAPTCHA_NEEDED_CODE
            and error.captcha_sid
            and request is not None
        ):
            logger.info(
                "Captcha requested, solving",
                extra={"api_method": request.method, "captcha_sid": error.captcha_sid},
            )
            key = await solver(error.captcha_img)
            request.params.set(CAPTCHA_SID_KEY, error.captcha_sid)
            request.params.set(CAPTCHA_KEY_KEY, key)
            response.renew = True
        return await next(response)

    return solve_captcha_hook
