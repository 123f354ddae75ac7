"""
Custom exception classes.

Represent errors raised while executing API requests.
"""

from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from apiexecutor.models.response import ApiResponse


class ExecutorError(Exception):
    """Base exception class for request execution."""

    pass


class InvalidRequestError(ExecutorError):
    """Raised when the call inputs are unusable (missing request or parser)."""

    pass


class RequestBlockedError(ExecutorError):
    """Raised when a hook marked the request as blocked."""

    def __init__(self, reason: Optional[BaseException] = None):
        self.reason = reason
        if reason is not None:
            super().__init__(f"request blocked: {reason}")
        else:
            super().__init__("request blocked")


class MaxTriesExceededError(ExecutorError):
    """Raised when the call scope has used up its send attempts."""

    def __init__(self, max_tries: int):
        self.max_tries = max_tries
        super().__init__(f"max request calls exceeded: {max_tries}")


class TransportError(ExecutorError):
    """Raised when the HTTP exchange itself failed."""

    def __init__(self, cause: BaseException):
        self.cause = cause
        super().__init__(f"http error: {cause}")


class RequestTimeoutError(TransportError):
    """Raised when the HTTP exchange or the whole call timed out."""

    pass


class ResponseParseError(ExecutorError):
    """Raised when the response body could not be parsed."""

    def __init__(self, cause: BaseException):
        self.cause = cause
        super().__init__(f"parse response error: {cause}")


class RequestContextMissingError(ExecutorError):
    """Raised when an outgoing HTTP request carries no call scope."""

    def __init__(self, detail: str = "api request not found in http request"):
        super().__init__(detail)


class ApiResponseError(ExecutorError):
    """
    Base class for errors reported by the API in a successful HTTP exchange.

    ``response`` is set by the executor before the error is raised.
    """

    response: Optional["ApiResponse"] = None


class ApiError(ApiResponseError):
    """Error object returned in the response body of a single API method."""

    def __init__(
        self,
        message: str,
        code: int,
        redirect_uri: str = "",
        captcha_img: str = "",
        captcha_sid: str = "",
        method: str = "",
    ):
        self.message = message
        self.code = code
        self.redirect_uri = redirect_uri
        self.captcha_img = captcha_img
        self.captcha_sid = captcha_sid
        self.method = method
        super().__init__(message)

    def __repr__(self) -> str:
        return f"ApiError(code={self.code}, message={self.message!r})"


class ExecuteErrors(ApiResponseError):
    """Errors of the nested method calls reported by an ``execute`` request."""

    def __init__(self, errors: List[ApiError]):
        self.errors = errors
        super().__init__(f"execute errors: {errors}")


class ChainInterruptedError(ExecutorError):
    """Raised when a request hook returned without calling ``next``; nothing was sent."""

    def __init__(self, chain: str):
        self.chain = chain
        super().__init__(f"{chain} chain interrupted before send")
