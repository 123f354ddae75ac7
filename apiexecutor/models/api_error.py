"""
API error payload models.

Validates the error objects found in API response bodies.
"""

from pydantic import BaseModel, ConfigDict

from apiexecutor.core.exceptions import ApiError


class ErrorObject(BaseModel):
    """``error`` object of a response body (also an item of ``execute_errors``)."""

    model_config = ConfigDict(extra="ignore")

    error_msg: str = ""
    error_code: int = 0
    redirect_uri: str = ""
    captcha_img: str = ""
    captcha_sid: str = ""
    method: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.error_msg and self.error_code == 0

    def to_error(self) -> ApiError:
        return ApiError(
            message=self.error_msg,
            code=self.error_code,
            redirect_uri=self.redirect_uri,
            captcha_img=self.captcha_img,
            captcha_sid=self.captcha_sid,
            method=self.method,
        )
