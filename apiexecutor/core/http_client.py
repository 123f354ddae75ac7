import logging

import httpx

from apiexecutor.config import ExecutorConfig

logger = logging.getLogger("apiexecutor.http_client")


class HttpClientFactory:
    """
    HTTP Client Factory for centralized transport settings.
    """

    def __init__(self, config: ExecutorConfig):
        self.config = config

    def create_async_client(self, **kwargs) -> httpx.AsyncClient:
        """
        Create an httpx.AsyncClient with configured SSL verification, limits and timeout.

        Args:
            **kwargs: Additional arguments for httpx.AsyncClient (e.g. transport=LimiterTransport(...))
        """
        verify = kwargs.pop("verify", None)

        # If verify is not explicitly provided, use config default
        if verify is None:
            verify = self.config.VERIFY_SSL

        if "limits" not in kwargs:
            kwargs["limits"] = httpx.Limits(
                max_keepalive_connections=self.config.HTTP_MAX_KEEPALIVE,
                max_connections=self.config.HTTP_MAX_CONNECTIONS,
            )
        kwargs.setdefault("timeout", self.config.REQUEST_TIMEOUT)
        # Avoid leaking host HTTP(S)_PROXY/NO_PROXY into API calls unless explicitly requested.
        kwargs.setdefault("trust_env", False)

        logger.debug(
            "Creating AsyncClient",
            extra={"verify": bool(verify), "timeout": kwargs["timeout"]},
        )
        return httpx.AsyncClient(verify=verify, **kwargs)
