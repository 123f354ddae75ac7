import json
from typing import Callable, List, Optional

import httpx
import pytest

from apiexecutor.config import ExecutorConfig
from apiexecutor.core.call_scope import get_attempt

BASE_URL = "https://api.test/method/"


class RecordingTransport(httpx.AsyncBaseTransport):
    """
    Fake transport: records every request and answers through ``handler``.

    The attempt counter and method seen at send time are recorded too.
    """

    def __init__(self, handler: Optional[Callable[[httpx.Request], httpx.Response]] = None):
        self.handler = handler or (lambda request: httpx.Response(200, json={"response": 1}))
        self.requests: List[httpx.Request] = []
        self.attempts_seen: List[int] = []

    @property
    def calls(self) -> int:
        return len(self.requests)

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        self.attempts_seen.append(get_attempt(request))
        return self.handler(request)


def json_response(payload) -> Callable[[httpx.Request], httpx.Response]:
    return lambda request: httpx.Response(200, content=json.dumps(payload).encode())


@pytest.fixture
def executor_config():
    return ExecutorConfig(
        _env_file=None,
        BASE_URL=BASE_URL,
        MAX_REQUEST_TRIES=50,
        REQUEST_TIMEOUT=5.0,
    )


@pytest.fixture
def transport():
    return RecordingTransport()
