import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional, TypeVar
from urllib.parse import quote

import httpx

from practice_tracker.configs import settings
from practice_tracker.utils.errors import UpstreamUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")

HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/121.0.0.0 Safari/537.36"
    ),
    "Accept": "application/json",
}


class FetchError(Exception):
    """A single attempt against one endpoint failed."""


async def with_retries(attempt: Callable[[], Awaitable[T]], attempts: int, delay: float,
                       description: str = "request") -> T:
    """Run ``attempt`` up to ``attempts`` times, sleeping ``delay`` seconds in between."""
    last_error: Optional[FetchError] = None
    for number in range(1, attempts + 1):
        try:
            return await attempt()
        except FetchError as e:
            last_error = e
            logger.warning("%s failed (attempt %s/%s): %s", description, number, attempts, e)
            if number < attempts and delay > 0:
                await asyncio.sleep(delay)
    raise last_error or FetchError(f"{description} was never attempted")


@dataclass
class FetchResult:
    endpoint: str
    payload: Any


def is_error_body(payload: Any) -> bool:
    if not isinstance(payload, dict):
        return False
    if payload.get("error") or payload.get("errors"):
        return True
    return str(payload.get("status", "")).lower() == "error"


class PlatformClient:
    """Fetches a user's solved-problem report, falling back across endpoints in order."""

    platform_label = "Platform"
    max_endpoints = 2

    def __init__(self, endpoints: List[str], attempts: int = 3, retry_delay: float = 2.0,
                 timeout: float = 10.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.endpoints = endpoints[:self.max_endpoints]
        self.attempts = attempts
        self.retry_delay = retry_delay
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def endpoints_from_settings(cls) -> List[str]:
        return []

    @classmethod
    def from_settings(cls, transport: Optional[httpx.AsyncBaseTransport] = None) -> "PlatformClient":
        return cls(
            endpoints=cls.endpoints_from_settings(),
            attempts=settings.SYNC_ATTEMPTS_PER_ENDPOINT,
            retry_delay=settings.SYNC_RETRY_DELAY_SECONDS,
            timeout=settings.SYNC_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def _fetch_once(self, client: httpx.AsyncClient, url: str) -> Any:
        try:
            response = await client.get(url)
        except httpx.TimeoutException:
            raise FetchError(f"timed out after {self.timeout}s")
        except httpx.HTTPError as e:
            raise FetchError(f"{type(e).__name__}: {e}")
        if not response.is_success:
            raise FetchError(f"HTTP {response.status_code}")
        try:
            payload = response.json()
        except ValueError:
            raise FetchError("response is not valid JSON")
        if is_error_body(payload):
            message = payload.get("message") or payload.get("error") or payload.get("errors")
            raise FetchError(f"API returned an error: {message}")
        return payload

    async def fetch(self, username: str) -> FetchResult:
        last_error = "no endpoints configured"
        async with httpx.AsyncClient(timeout=self.timeout, headers=HEADERS, transport=self.transport,
                                     follow_redirects=True) as client:
            for template in self.endpoints:
                url = template.format(username=quote(username, safe=""))
                try:
                    payload = await with_retries(lambda: self._fetch_once(client, url), self.attempts,
                                                 self.retry_delay, description=f"{self.platform_label} {url}")
                except FetchError as e:
                    last_error = str(e)
                    logger.warning("%s endpoint %s exhausted, trying next", self.platform_label, url)
                    continue
                logger.info("Fetched %s data for %s from %s", self.platform_label, username, url)
                return FetchResult(endpoint=url, payload=payload)
        raise UpstreamUnavailableError(f"Failed to fetch {self.platform_label} data: {last_error}")
