from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

import httpx

logger = logging.getLogger(__name__)

RETRYABLE_STATUS = {429, 500, 502, 503, 504}
SEARCH_PATH = "/search/car/active"
CONNECTION_CHECK_TIMEOUT = 10.0


class MarketCheckError(Exception):
    """Base exception for MarketCheck errors."""


class MarketCheckConfigError(MarketCheckError):
    """Raised when the client is built without an API key."""


class MarketCheckRetryableError(MarketCheckError):
    """Raised when a retryable HTTP status/error is encountered."""


@dataclass
class SearchQuery:
    text: Optional[str] = None
    postal_code: Optional[str] = None
    radius_miles: Optional[int] = None


@dataclass
class UpstreamResult:
    listings: List[Dict[str, Any]] = field(default_factory=list)
    num_found: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def records_or_empty(self) -> List[Dict[str, Any]]:
        if not self.ok:
            return []
        return list(self.listings)

    def first_or_none(self) -> Optional[Dict[str, Any]]:
        if not self.ok or not self.listings:
            return None
        return self.listings[0]

    @classmethod
    def failure(cls, reason: str) -> "UpstreamResult":
        return cls(error=reason)


class AsyncTransport(Protocol):
    async def get(
        self,
        path: str,
        params: Dict[str, Any],
        timeout: float,
    ) -> httpx.Response: ...

    async def close(self) -> None: ...


class HttpxTransport:
    """httpx-based transport with connection pooling."""

    def __init__(self, base_url: str):
        self._client = httpx.AsyncClient(base_url=base_url, timeout=None)

    async def get(
        self,
        path: str,
        params: Dict[str, Any],
        timeout: float,
    ) -> httpx.Response:
        return await self._client.get(path, params=params, timeout=timeout)

    async def close(self) -> None:
        await self._client.aclose()


def _parse_body(body: Any) -> UpstreamResult:
    if not isinstance(body, dict):
        return UpstreamResult.failure("Unexpected MarketCheck response body")
    listings = body.get("listings") or []
    if not isinstance(listings, list):
        return UpstreamResult.failure("MarketCheck listings field is not a list")
    records = [item for item in listings if isinstance(item, dict)]
    num_found = body.get("num_found")
    if not isinstance(num_found, int):
        num_found = len(records)
    return UpstreamResult(listings=records, num_found=num_found)


class MarketCheckClient:
    """Thin async client against the MarketCheck active car search endpoint.

    Every public call returns an ``UpstreamResult``; transport errors, timeouts
    and bad statuses come back as failed results instead of exceptions.
    """

    def __init__(
        self,
        api_key: Optional[str],
        *,
        base_url: str = "https://api.marketcheck.com/v2",
        timeout: float = 15.0,
        rows: int = 40,
        default_postal_code: str = "10523",
        default_radius_miles: int = 25,
        max_attempts: int = 1,
        backoff_base: float = 0.5,
        transport: Optional[AsyncTransport] = None,
    ):
        if not api_key:
            raise MarketCheckConfigError("MarketCheck API key not configured")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.rows = rows
        self.default_postal_code = default_postal_code
        self.default_radius_miles = default_radius_miles
        self.max_attempts = max(1, max_attempts)
        self.backoff_base = backoff_base
        self._transport = transport or HttpxTransport(self.base_url)
        self._owns_transport = transport is None

    async def aclose(self) -> None:
        if self._owns_transport:
            await self._transport.close()

    def build_search_params(self, query: SearchQuery) -> Dict[str, Any]:
        return {
            "api_key": self.api_key,
            "car_type": "used",
            "rows": self.rows,
            "year_make_model": query.text or "",
            "zip": query.postal_code or self.default_postal_code,
            "radius": query.radius_miles or self.default_radius_miles,
            "sort_by": "distance",
        }

    async def search_active(self, query: SearchQuery) -> UpstreamResult:
        result = await self._get(SEARCH_PATH, self.build_search_params(query), self.timeout)
        if result.ok:
            logger.info("MarketCheck search returned %s of %s listings", len(result.listings), result.num_found)
        else:
            logger.warning("MarketCheck search failed (query=%r): %s", query.text, result.error)
        return result

    async def search_by_vin(self, vin: str) -> UpstreamResult:
        params = {"api_key": self.api_key, "vin": vin, "rows": 1}
        result = await self._get(SEARCH_PATH, params, self.timeout)
        if not result.ok:
            logger.warning("MarketCheck VIN search failed for %s: %s", vin, result.error)
        return result

    async def check_connection(self) -> UpstreamResult:
        params = {"api_key": self.api_key, "rows": 1, "car_type": "used"}
        return await self._get(SEARCH_PATH, params, min(self.timeout, CONNECTION_CHECK_TIMEOUT))

    @property
    def key_prefix(self) -> str:
        return self.api_key[:8] + "..."

    async def _get(self, path: str, params: Dict[str, Any], timeout: float) -> UpstreamResult:
        attempts = 0
        last_error: Optional[Exception] = None
        while attempts < self.max_attempts:
            try:
                response = await self._transport.get(path, params=params, timeout=timeout)
            except httpx.TimeoutException as exc:
                last_error = MarketCheckError(f"MarketCheck timed out after {timeout}s: {exc}")
                await self._maybe_wait(attempts)
                attempts += 1
                continue
            except httpx.RequestError as exc:
                last_error = exc
                await self._maybe_wait(attempts)
                attempts += 1
                continue

            if response.status_code in RETRYABLE_STATUS:
                last_error = MarketCheckRetryableError(f"MarketCheck returned {response.status_code} for {path}")
                await self._maybe_wait(attempts)
                attempts += 1
                continue

            try:
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                return UpstreamResult.failure(f"MarketCheck returned {response.status_code}: {exc}")

            try:
                body = response.json()
            except ValueError:
                return UpstreamResult.failure("Invalid JSON from MarketCheck")
            return _parse_body(body)

        if last_error:
            return UpstreamResult.failure(str(last_error) or type(last_error).__name__)
        return UpstreamResult.failure("MarketCheck request failed")

    async def _maybe_wait(self, attempt: int) -> None:
        if attempt >= self.max_attempts - 1:
            return
        delay = self.backoff_base * (2 ** attempt)
        jitter = random.uniform(0, 0.3)
        await asyncio.sleep(delay + jitter)
