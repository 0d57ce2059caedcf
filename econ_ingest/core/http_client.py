"""
Base HTTP client shared by every provider client.

One request path for GET and POST: build the URL, add credentials, send,
read the JSON payload (object or array), let the provider flag errors
carried in a 200 body, and retry transient failures with backoff.

Every error raised from here is an APIError whose message has already
been scrubbed of this client's credentials.
"""
import asyncio
import logging
import random
from abc import ABC
from typing import Any, Callable, Dict, List, Optional, TypeVar

import httpx

from econ_ingest.core.api_errors import (
    APIError,
    FatalError,
    RateLimitError,
    RetryableError,
    classify_http_error,
    redact_secrets,
)

logger = logging.getLogger(__name__)

T = TypeVar('T')


class BaseAPIClient(ABC):
    """
    Base class for provider API clients.

    Subclasses set SOURCE_NAME and BASE_URL and may override:
    - _add_auth_to_params() for query-string credentials
    - _build_headers() for header credentials or a required User-Agent
    - _check_api_error() for errors reported inside a successful response
    """

    SOURCE_NAME: str = "unknown"
    BASE_URL: str = ""

    DEFAULT_MAX_CONCURRENCY: int = 2
    DEFAULT_TIMEOUT: float = 30.0
    DEFAULT_MAX_RETRIES: int = 3
    DEFAULT_BACKOFF_FACTOR: float = 2.0
    MAX_BACKOFF: float = 60.0
    JITTER: float = 0.25

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        max_retries: int = DEFAULT_MAX_RETRIES,
        backoff_factor: float = DEFAULT_BACKOFF_FACTOR,
        timeout: float = DEFAULT_TIMEOUT,
        rate_limit_interval: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            api_key: Provider credential, if any
            base_url: Override for BASE_URL (from SourceConfig)
            max_concurrency: Requests in flight at once for this client
            max_retries: Total attempts per request (at least 1)
            backoff_factor: Multiplier for exponential backoff
            timeout: Per-request timeout in seconds
            rate_limit_interval: Minimum seconds between this client's requests
            transport: httpx transport override (tests use httpx.MockTransport)
        """
        self.api_key = api_key
        if base_url:
            self.BASE_URL = base_url
        self.max_concurrency = max_concurrency
        self.max_retries = max(1, max_retries)
        self.backoff_factor = backoff_factor
        self.timeout = timeout
        self.rate_limit_interval = rate_limit_interval
        self._transport = transport

        self.semaphore = asyncio.Semaphore(max_concurrency)
        self._spacing_lock = asyncio.Lock()
        self._last_request_at: float = 0
        self._client: Optional[httpx.AsyncClient] = None

        logger.debug(
            f"{self.SOURCE_NAME} client ready "
            f"(key={'yes' if api_key else 'no'}, retries={self.max_retries})"
        )

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                limits=httpx.Limits(max_connections=self.max_concurrency * 2),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    # ------------------------------------------------------------------
    # Provider hooks
    # ------------------------------------------------------------------

    def _redact(self, text: Any) -> str:
        """Strip this client's credentials from text bound for logs or errors."""
        return redact_secrets(str(text), [self.api_key])

    def _add_auth_to_params(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return params

    def _build_headers(self) -> Dict[str, str]:
        return {
            "Accept": "application/json",
            "User-Agent": f"EconIngest/{self.SOURCE_NAME}-client",
        }

    def _check_api_error(self, data: Any, resource_id: str) -> Optional[APIError]:
        """Return the error a provider reported inside an HTTP 200 payload, if any."""
        return None

    # ------------------------------------------------------------------
    # Request path
    # ------------------------------------------------------------------

    def _url(self, path: str) -> str:
        if not path:
            return self.BASE_URL
        if path.startswith("http"):
            return path
        return f"{self.BASE_URL.rstrip('/')}/{path.lstrip('/')}"

    async def _space_requests(self) -> None:
        if not self.rate_limit_interval:
            return
        async with self._spacing_lock:
            loop = asyncio.get_running_loop()
            wait = self.rate_limit_interval - (loop.time() - self._last_request_at)
            if wait > 0:
                await asyncio.sleep(wait)
            self._last_request_at = loop.time()

    def _read(self, response: httpx.Response, resource_id: str) -> Any:
        """
        Turn a response into its JSON payload.

        Raises:
            APIError: For error statuses, unparseable bodies and in-payload errors
        """
        if response.is_error:
            error = classify_http_error(
                response.status_code, self._redact(response.text[:500]), self.SOURCE_NAME
            )
            retry_after = response.headers.get("Retry-After", "")
            if isinstance(error, RateLimitError) and retry_after.isdigit():
                error.retry_after = int(retry_after)
            raise error

        try:
            data = response.json()
        except ValueError:
            raise FatalError(
                message=f"Unparseable response for {resource_id}: {self._redact(response.text[:200])}",
                source=self.SOURCE_NAME,
                status_code=response.status_code,
            )

        api_error = self._check_api_error(data, resource_id)
        if api_error is not None:
            raise api_error
        return data

    async def _backoff(self, attempt: int, base_delay: float = 1.0) -> None:
        """Sleep base_delay * backoff_factor**attempt, capped, with +/-25% jitter."""
        delay = min(base_delay * (self.backoff_factor ** attempt), self.MAX_BACKOFF)
        delay += delay * self.JITTER * (2 * random.random() - 1)
        await asyncio.sleep(max(0.1, delay))

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
        resource_id: str = "unknown",
    ) -> Any:
        """
        Send one logical request, retrying transient failures.

        RateLimitError waits retry_after seconds; other retryable errors
        (5xx, network) back off exponentially. The last error is raised once
        max_retries attempts are spent.
        """
        url = self._url(path)
        params = self._add_auth_to_params(dict(params or {}))
        headers = self._build_headers()

        async with self.semaphore:
            await self._space_requests()
            client = self._http()

            for attempt in range(self.max_retries):
                try:
                    response = await client.request(
                        method, url, params=params, json=json_body, headers=headers
                    )
                    return self._read(response, resource_id)
                except httpx.RequestError as e:
                    error: APIError = RetryableError(
                        message=f"Request failed for {resource_id}: {self._redact(e)}",
                        source=self.SOURCE_NAME,
                    )
                except APIError as e:
                    error = e

                if not error.retryable or attempt == self.max_retries - 1:
                    raise error

                logger.warning(
                    f"[{self.SOURCE_NAME}] {resource_id} attempt {attempt + 1}/{self.max_retries} "
                    f"failed: {error}"
                )
                if isinstance(error, RateLimitError):
                    await asyncio.sleep(error.retry_after)
                else:
                    await self._backoff(attempt)

    async def get(
        self, path: str, params: Optional[Dict[str, Any]] = None, resource_id: str = "unknown"
    ) -> Any:
        return await self._request("GET", path, params=params, resource_id=resource_id)

    async def post(
        self,
        path: str,
        json_body: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        resource_id: str = "unknown",
    ) -> Any:
        return await self._request(
            "POST", path, params=params, json_body=json_body, resource_id=resource_id
        )

    async def fetch_multiple(
        self,
        items: List[T],
        fetch_func: Callable[[T], Any],
        item_id_func: Callable[[T], str] = str,
    ) -> Dict[str, Any]:
        """
        Fetch several items concurrently (bounded by the semaphore).

        A failed item is logged and maps to None; the others still complete.
        """
        results: Dict[str, Any] = {}

        async def fetch_one(item: T) -> None:
            item_id = item_id_func(item)
            try:
                results[item_id] = await fetch_func(item)
            except APIError as e:
                logger.error(f"[{self.SOURCE_NAME}] Failed to fetch {item_id}: {e}")
                results[item_id] = None

        await asyncio.gather(*[fetch_one(item) for item in items])
        return results
