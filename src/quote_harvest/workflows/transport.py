"""HTML retrieval toward the quotes source (aiohttp) and the shared request pacer."""

from __future__ import annotations

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Optional, Protocol
from urllib.parse import quote, urlencode

import aiohttp

from .errors import NetworkError
from .harvest_config import HDR_ACCEPT_LANGUAGE, HDR_USER_AGENT, PARAM_PAGE, PARAM_PAGE_SIZE
from .harvest_utils import HarvestConfig

logger = logging.getLogger(__name__)

SleepFunc = Callable[[float], Awaitable[Any]]


class Transport(Protocol):
    async def fetch(self, url: str, headers: Optional[Dict[str, str]] = None, timeout: Optional[float] = None) -> str:
        ...


def build_page_url(base_url: str, category: str, page: int, page_size: int) -> str:
    base = base_url if base_url.endswith("/") else f"{base_url}/"
    query = urlencode({PARAM_PAGE: page, PARAM_PAGE_SIZE: page_size})
    return f"{base}{quote(category, safe='')}?{query}"


def default_headers(config: HarvestConfig) -> Dict[str, str]:
    return {
        HDR_USER_AGENT: config.user_agent,
        HDR_ACCEPT_LANGUAGE: config.accept_language,
    }


class RequestPacer:
    """Serialize requests to the source host and hold a delay after each one.

    The delay runs after every fetch attempt, successful or not, before the
    slot is released to the next request.
    """

    def __init__(self, delay_seconds: float, *, sleep: Optional[SleepFunc] = None) -> None:
        self.delay_seconds = max(0.0, delay_seconds)
        self._sleep: SleepFunc = sleep or asyncio.sleep
        self._lock = asyncio.Lock()
        self.requests = 0
        self._started = time.perf_counter()

    @asynccontextmanager
    async def slot(self) -> AsyncIterator[None]:
        async with self._lock:
            self.requests += 1
            try:
                yield
            finally:
                if self.delay_seconds > 0:
                    await self._sleep(self.delay_seconds)

    def rate_metrics(self) -> Dict[str, Any]:
        runtime = max(time.perf_counter() - self._started, 1e-6)
        return {
            "requests": self.requests,
            "runtime_seconds": round(runtime, 3),
            "effective_rps": round(self.requests / runtime, 3) if self.requests else 0.0,
        }


class AiohttpTransport:
    """Async HTML transport with retry/backoff on transient failures."""

    def __init__(self, config: HarvestConfig, *, sleep: Optional[SleepFunc] = None) -> None:
        self.config = config
        self._sleep: SleepFunc = sleep or asyncio.sleep
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "AiohttpTransport":
        self._session = aiohttp.ClientSession(headers=default_headers(self.config))
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def fetch(self, url: str, headers: Optional[Dict[str, str]] = None, timeout: Optional[float] = None) -> str:
        delay = self.config.backoff_initial
        for attempt in range(1, self.config.max_attempts + 1):
            try:
                return await self._fetch_once(url, headers, timeout)
            except NetworkError as exc:
                retryable = exc.status is None or exc.status == 429 or exc.status >= 500
                if not retryable or attempt == self.config.max_attempts:
                    raise
                logger.debug("retrying %s after attempt %d: %s", url, attempt, exc.reason)
                await self._sleep(delay)
                delay = min(delay * 2, self.config.backoff_max)
        raise RuntimeError("unexpected retry state")

    async def _fetch_once(self, url: str, headers: Optional[Dict[str, str]], timeout: Optional[float]) -> str:
        if self._session is None:
            raise RuntimeError("AiohttpTransport must be used as an async context manager")
        client_timeout = aiohttp.ClientTimeout(total=timeout or self.config.timeout)
        try:
            async with self._session.get(url, headers=headers, timeout=client_timeout) as resp:
                status = resp.status
                raw_bytes = await resp.read()
        except asyncio.TimeoutError as exc:
            raise NetworkError(url, "timeout") from exc
        except aiohttp.ClientError as exc:
            raise NetworkError(url, f"{type(exc).__name__}: {exc}") from exc
        if not 200 <= status < 300:
            raise NetworkError(url, "non-success status", status=status)
        return raw_bytes.decode("utf-8", "ignore")


__all__ = [
    "Transport",
    "RequestPacer",
    "AiohttpTransport",
    "build_page_url",
    "default_headers",
]
