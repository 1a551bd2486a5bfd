"""Base HTTP client with retry logic."""

import asyncio

import httpx
from loguru import logger
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

# Default settings
API_BASE_URL = "https://prices.runescape.wiki/api/v1/osrs"
API_TIMEOUT = 30
USER_AGENT = "flip-analyzer"


def set_api_config(base_url: str, timeout: int, user_agent: str | None = None) -> None:
    """Set API configuration."""
    global API_BASE_URL, API_TIMEOUT, USER_AGENT
    API_BASE_URL = base_url
    API_TIMEOUT = timeout
    if user_agent:
        USER_AGENT = user_agent


def _is_retryable_error(exc: BaseException) -> bool:
    """Check if exception is retryable (network errors + 5xx server errors)."""
    if isinstance(exc, (httpx.ReadError, httpx.ConnectError, httpx.TimeoutException)):
        return True
    return isinstance(exc, httpx.HTTPStatusError) and exc.response.status_code >= 500


class BaseClient:
    """Base async HTTP client with rate limiting and exponential backoff.

    ``transport`` is handed to httpx as-is, so tests can plug in
    ``httpx.MockTransport``.
    """

    def __init__(self, max_concurrent: int = 20, transport: httpx.AsyncBaseTransport | None = None):
        self._client: httpx.AsyncClient | None = None
        self._sem = asyncio.Semaphore(max_concurrent)
        self._transport = transport
        self._request_count = 0
        logger.info("{}: max_concurrent={}", self.__class__.__name__, max_concurrent)

    async def open(self) -> "BaseClient":
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=API_TIMEOUT,
                headers={"User-Agent": USER_AGENT},
                limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
                transport=self._transport,
            )
        return self

    async def close(self) -> None:
        logger.info("Total API requests: {}", self._request_count)
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self):
        return await self.open()

    async def __aexit__(self, *_):
        await self.close()

    @property
    def request_count(self) -> int:
        return self._request_count

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=30),
        retry=retry_if_exception(_is_retryable_error),
        reraise=True,
    )
    async def _get(self, path: str, params: dict | None = None) -> dict | list:
        """GET request with retry logic."""
        if self._client is None:
            await self.open()
        async with self._sem:
            self._request_count += 1
            resp = await self._client.get(f"{API_BASE_URL}/{path}", params=params)
            resp.raise_for_status()
            return resp.json()


async def safe_request(coro, default=None):
    """Execute coroutine, return default on failure."""
    try:
        return await coro
    except Exception as e:
        logger.warning("Request failed: {}", e)
        return default if default is not None else {}
