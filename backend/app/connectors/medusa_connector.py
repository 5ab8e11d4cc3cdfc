"""
Medusa Store API Connector
Handles all HTTP interactions with the commerce backend

The commerce backend is the system of record for products, categories,
collections, regions, customers and carts. This connector only reads and
re-shapes its responses; it never owns any of that state.

Author: MinkenWorld
Date: 2025-11-02
"""
import logging
import time
from typing import Any, Dict, Optional, Tuple

import httpx

from app.core.config import settings

logger = logging.getLogger(__name__)


class CommerceAPIError(Exception):
    """Raised when the commerce backend fails or answers with a non-2xx status"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class MedusaConnector:
    """
    Connector for the Medusa Store API

    Handles:
    - Authenticated GET/POST with the publishable API key
    - Optional in-memory TTL cache for slow-changing catalog reads
    - Health check of the backend
    """

    def __init__(
        self,
        base_url: str = None,
        publishable_key: str = None,
        timeout: float = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        cache_max_entries: int = None
    ):
        """
        Initialize Medusa connector

        Args:
            base_url: Backend URL (e.g., 'http://localhost:9000')
            publishable_key: Store publishable API key
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (used by tests)
            cache_max_entries: Upper bound on cached responses
        """
        self.base_url = (base_url or settings.MEDUSA_BACKEND_URL).rstrip("/")
        self.publishable_key = publishable_key if publishable_key is not None else settings.MEDUSA_PUBLISHABLE_KEY
        self.timeout = timeout or settings.COMMERCE_TIMEOUT_SECONDS
        self.headers = {
            'Content-Type': 'application/json',
            'x-publishable-api-key': self.publishable_key
        }
        self._transport = transport
        # {cache_key: (expires_at, payload)}
        self._cache: Dict[str, Tuple[float, Dict[str, Any]]] = {}
        self.cache_max_entries = cache_max_entries or settings.CATALOG_CACHE_MAX_ENTRIES

        if not self.publishable_key:
            logger.warning("MEDUSA_PUBLISHABLE_KEY is not set; store requests will likely be rejected")

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=self.headers,
            timeout=self.timeout,
            transport=self._transport
        )

    @staticmethod
    def _clean_query(query: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """Drop None values; httpx would send them as empty strings"""
        return {k: v for k, v in (query or {}).items() if v is not None}

    @staticmethod
    def _cache_key(path: str, query: Dict[str, Any]) -> str:
        return f"{path}?{sorted((k, str(v)) for k, v in query.items())}"

    async def _request(
        self,
        method: str,
        path: str,
        query: Dict[str, Any] = None,
        json: Dict[str, Any] = None,
        headers: Dict[str, str] = None
    ) -> Dict[str, Any]:
        """Execute a request and return the decoded JSON body"""
        start_time = time.perf_counter()
        try:
            async with self._client() as client:
                response = await client.request(
                    method,
                    path,
                    params=query,
                    json=json,
                    headers=headers
                )
        except httpx.HTTPError as e:
            logger.error(f"Commerce backend {method} {path} failed: {e}")
            raise CommerceAPIError(f"Commerce backend unreachable: {e}") from e

        duration = time.perf_counter() - start_time
        logger.debug(f"{method} {path} -> {response.status_code} in {duration:.3f}s")

        if response.status_code >= 400:
            raise CommerceAPIError(
                f"Commerce backend {method} {path} returned {response.status_code}: {response.text[:200]}",
                status_code=response.status_code
            )

        try:
            return response.json()
        except ValueError as e:
            raise CommerceAPIError(f"Invalid JSON from {path}: {e}", status_code=response.status_code) from e

    async def fetch(
        self,
        path: str,
        query: Dict[str, Any] = None,
        headers: Dict[str, str] = None,
        cache_ttl: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        GET a Store API resource

        Args:
            path: Resource path (e.g., '/store/products')
            query: Query parameters; None values are dropped
            headers: Extra headers (e.g., customer Authorization)
            cache_ttl: Seconds to keep the response in memory. None disables caching.

        Returns:
            Decoded JSON body
        """
        query = self._clean_query(query)

        if cache_ttl:
            key = self._cache_key(path, query)
            cached = self._cache.get(key)
            if cached and cached[0] > time.monotonic():
                return cached[1]

        data = await self._request("GET", path, query=query, headers=headers)

        if cache_ttl:
            self._store(key, data, cache_ttl)

        return data

    async def post(
        self,
        path: str,
        json: Dict[str, Any],
        headers: Dict[str, str] = None
    ) -> Dict[str, Any]:
        """POST to a Store API resource"""
        return await self._request("POST", path, json=json, headers=headers)

    def _store(self, key: str, data: Dict[str, Any], ttl: int):
        """Cache a response, evicting expired entries and then the oldest ones when full"""
        now = time.monotonic()
        self._cache.pop(key, None)

        for expired in [k for k, (expires_at, _) in self._cache.items() if expires_at <= now]:
            del self._cache[expired]

        # Dicts keep insertion order, so the first keys are the oldest writes
        while len(self._cache) >= self.cache_max_entries:
            del self._cache[next(iter(self._cache))]

        self._cache[key] = (now + ttl, data)

    def clear_cache(self):
        self._cache.clear()

    async def health(self) -> Dict[str, Any]:
        """Test commerce backend connectivity"""
        start_time = time.perf_counter()
        try:
            async with self._client() as client:
                response = await client.get("/health")
            latency_ms = round((time.perf_counter() - start_time) * 1000, 2)
            return {
                'success': response.status_code < 400,
                'status_code': response.status_code,
                'latency_ms': latency_ms
            }
        except httpx.HTTPError as e:
            return {
                'success': False,
                'error': str(e)
            }


# ============================================================================
# SINGLETON INSTANCE
# ============================================================================

_connector_instance: Optional[MedusaConnector] = None


def get_connector() -> MedusaConnector:
    """
    Get the process-wide connector instance.

    Returns:
        MedusaConnector instance
    """
    global _connector_instance
    if _connector_instance is None:
        _connector_instance = MedusaConnector()
    return _connector_instance


def set_connector(connector: Optional[MedusaConnector]):
    """Replace the process-wide connector (None resets it)."""
    global _connector_instance
    _connector_instance = connector
