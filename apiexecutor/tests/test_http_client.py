from unittest.mock import patch

import httpx

from apiexecutor.config import ExecutorConfig
from apiexecutor.core.http_client import HttpClientFactory


class TestHttpClientFactory:
    @patch("httpx.AsyncClient")
    def test_create_async_client_verify_false(self, mock_client):
        """VERIFY_SSL=False should produce client with verify=False"""
        config = ExecutorConfig(_env_file=None, VERIFY_SSL=False)
        HttpClientFactory(config).create_async_client()

        mock_client.assert_called_once()
        _, kwargs = mock_client.call_args
        assert kwargs["verify"] is False
        assert kwargs["trust_env"] is False

    @patch("httpx.AsyncClient")
    def test_create_async_client_defaults(self, mock_client):
        """Limits and timeout come from config"""
        config = ExecutorConfig(
            _env_file=None, REQUEST_TIMEOUT=7.5, HTTP_MAX_CONNECTIONS=10, HTTP_MAX_KEEPALIVE=4
        )
        HttpClientFactory(config).create_async_client()

        _, kwargs = mock_client.call_args
        assert kwargs["verify"] is True
        assert kwargs["timeout"] == 7.5
        assert kwargs["limits"].max_connections == 10
        assert kwargs["limits"].max_keepalive_connections == 4

    @patch("httpx.AsyncClient")
    def test_explicit_kwargs_win(self, mock_client):
        """Arguments passed by the caller override config"""
        config = ExecutorConfig(_env_file=None, VERIFY_SSL=True)
        transport = httpx.MockTransport(lambda request: httpx.Response(200))
        HttpClientFactory(config).create_async_client(
            verify=False, timeout=1.0, trust_env=True, transport=transport
        )

        _, kwargs = mock_client.call_args
        assert kwargs["verify"] is False
        assert kwargs["timeout"] == 1.0
        assert kwargs["trust_env"] is True
        assert kwargs["transport"] is transport
