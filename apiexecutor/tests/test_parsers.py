import httpx
import pytest

from apiexecutor.core.exceptions import ApiError, ExecuteErrors, ResponseParseError
from apiexecutor.models.response import ApiResponse, JsonResponse
from apiexecutor.services.parsers import JsonResponseParser, RawResponseParser, ResponseParser


class FailingStream(httpx.AsyncByteStream):
    def __init__(self):
        self.closed = False

    async def __aiter__(self):
        raise httpx.ReadError("connection reset")
        yield b""

    async def aclose(self):
        self.closed = True


def _response(body: bytes) -> httpx.Response:
    return httpx.Response(200, content=body)


class TestJsonResponseParser:
    @pytest.mark.asyncio
    async def test_ok_response(self):
        http_response = _response(b'{"response":1}')

        res = await JsonResponseParser().parse(http_response)

        assert isinstance(res, JsonResponse)
        assert res.data == 1
        assert res.error() is None
        assert res.body == b'{"response":1}'
        assert http_response.is_closed

    @pytest.mark.asyncio
    async def test_captcha_error(self):
        body = (
            b'{"error":{"error_code":14,"error_msg":"Captcha needed",'
            b'"captcha_sid":"238902364356","captcha_img":"https://api.test/captcha.php?sid=238902364356"}}'
        )

        res = await JsonResponseParser().parse(_response(body))
        err = res.error()

        assert isinstance(err, ApiError)
        assert err.code == 14
        assert err.message == "Captcha needed"
        assert err.captcha_sid == "238902364356"
        assert err.captcha_img == "https://api.test/captcha.php?sid=238902364356"

    @pytest.mark.asyncio
    async def test_validation_error_redirect(self):
        body = (
            b'{"error":{"error_code":17,"error_msg":"Validation required",'
            b'"redirect_uri":"https://api.test/validate?hash=1","request_params":[]}}'
        )

        err = (await JsonResponseParser().parse(_response(body))).error()

        assert err.code == 17
        assert err.redirect_uri == "https://api.test/validate?hash=1"

    @pytest.mark.asyncio
    async def test_execute_errors(self):
        body = (
            b'{"response":[false,1],"execute_errors":['
            b'{"method":"users.get","error_code":18,"error_msg":"User was deleted or banned"},'
            b'{"method":"wall.get","error_code":15,"error_msg":"Access denied"}]}'
        )

        res = await JsonResponseParser().parse(_response(body))
        err = res.error()

        assert isinstance(err, ExecuteErrors)
        assert [e.code for e in err.errors] == [18, 15]
        assert err.errors[0].method == "users.get"
        assert res.data == [False, 1]

    @pytest.mark.asyncio
    async def test_empty_error_object_is_not_an_error(self):
        res = await JsonResponseParser().parse(_response(b'{"response":1,"error":{}}'))

        assert res.error() is None

    @pytest.mark.asyncio
    async def test_non_object_body(self):
        res = await JsonResponseParser().parse(_response(b"[1,2]"))

        assert res.data is None
        assert res.error() is None

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        http_response = _response(b"EOF")

        with pytest.raises(ResponseParseError):
            await JsonResponseParser().parse(http_response)
        assert http_response.is_closed

    @pytest.mark.asyncio
    async def test_read_failure_closes_body(self):
        stream = FailingStream()
        http_response = httpx.Response(200, stream=stream)

        with pytest.raises(ResponseParseError) as exc_info:
            await JsonResponseParser().parse(http_response)

        assert isinstance(exc_info.value.cause, httpx.ReadError)
        assert stream.closed


class TestRawResponseParser:
    @pytest.mark.asyncio
    async def test_keeps_body(self):
        http_response = httpx.Response(200, content=b"<html></html>")

        res = await RawResponseParser().parse(http_response)

        assert type(res) is ApiResponse
        assert res.text == "<html></html>"
        assert str(res) == "<html></html>"
        assert res.error() is None
        assert res.renew is False
        assert http_response.is_closed

    def test_parsers_satisfy_protocol(self):
        assert isinstance(JsonResponseParser(), ResponseParser)
        assert isinstance(RawResponseParser(), ResponseParser)
