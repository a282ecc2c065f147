"""
JWKS client for issuer-published signing keys.
"""

import time
from typing import Any, Callable, Dict, Optional

import httpx
from cachetools import TTLCache

from shared.logging import get_logger
from shared.metrics import MetricsCollector

from ..errors import JWKSFetchError
from .resolver import IssuerResolver, WellKnownResolver


def build_jwks(*public_jwks: Dict[str, Any]) -> Dict[str, Any]:
    """Build the JWKS document an issuer publishes."""
    return {"keys": [dict(key) for key in public_jwks]}


def select_key(jwks: Dict[str, Any], kid: str) -> Optional[Dict[str, Any]]:
    """Return the first key in ``jwks`` whose ``kid`` matches."""
    for key in jwks.get("keys", []):
        if isinstance(key, dict) and key.get("kid") == kid:
            return key
    return None


class JWKSClient:
    """Client for fetching JWKS documents from token issuers.

    Every lookup fetches the document unless ``cache_ttl`` is positive, in
    which case documents are kept per issuer for at most ``cache_ttl`` seconds
    and at most ``cache_maxsize`` issuers are held at once.
    A cached document missing the requested ``kid`` is refetched once so a
    freshly rotated key is still found.
    """

    def __init__(
        self,
        resolver: Optional[IssuerResolver] = None,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 5.0,
        cache_ttl: float = 0.0,
        cache_maxsize: int = 1024,
        clock: Callable[[], float] = time.monotonic,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.resolver = resolver or WellKnownResolver()
        self.cache_ttl = cache_ttl
        self.metrics = metrics
        self.logger = get_logger("jwt.jwks")

        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)

        # issuer -> jwks; issuers come from unverified tokens, so the size is capped
        self._cache: TTLCache = TTLCache(maxsize=cache_maxsize, ttl=cache_ttl, timer=clock)

    async def __aenter__(self) -> "JWKSClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def fetch_jwks(self, issuer: str) -> Dict[str, Any]:
        """Fetch the JWKS document published by ``issuer``."""
        url = self.resolver.resolve(issuer)
        start_time = time.monotonic()

        try:
            response = await self._client.get(url)
        except httpx.HTTPError as e:
            self._record_fetch("error", start_time)
            self.logger.warning("JWKS request failed", url=url, error=str(e))
            raise JWKSFetchError(f"Request to {url} failed", details={"error": str(e)}) from e

        if not response.is_success:
            self._record_fetch("error", start_time)
            self.logger.warning("JWKS endpoint returned failure", url=url, status_code=response.status_code)
            raise JWKSFetchError(
                f"{url} returned {response.status_code}",
                details={"status_code": response.status_code},
            )

        try:
            document = response.json()
        except ValueError as e:
            self._record_fetch("error", start_time)
            self.logger.warning("JWKS body is not JSON", url=url)
            raise JWKSFetchError(f"{url} returned a non-JSON body") from e

        keys = document.get("keys") if isinstance(document, dict) else None
        if not isinstance(keys, list):
            keys = []

        self._record_fetch("ok", start_time)
        self.logger.info("JWKS fetched", url=url, keys_count=len(keys))
        return {"keys": keys}

    async def get_jwks(self, issuer: str, *, force: bool = False) -> Dict[str, Any]:
        """Get the JWKS for ``issuer`` from cache or the network."""
        if self.cache_ttl > 0 and not force:
            cached = self._cache.get(issuer)
            if cached is not None:
                return cached

        jwks = await self.fetch_jwks(issuer)
        if self.cache_ttl > 0:
            self._cache[issuer] = jwks
        return jwks

    async def find_key(self, issuer: str, kid: str) -> Optional[Dict[str, Any]]:
        """Get the key ``kid`` published by ``issuer``, or None."""
        # Expired entries do not count as cached
        cached = self.cache_ttl > 0 and issuer in self._cache
        key = select_key(await self.get_jwks(issuer), kid)

        if key is None and cached:
            # Key might be rotated; refresh once
            key = select_key(await self.get_jwks(issuer, force=True), kid)

        if key is None:
            self.logger.warning("Key not found", issuer=issuer, kid=kid)
        return key

    def clear_cache(self):
        """Clear the JWKS cache."""
        self._cache.clear()
        self.logger.info("JWKS cache cleared")

    def _record_fetch(self, status: str, start_time: float):
        if self.metrics is not None:
            self.metrics.record_jwks_fetch(status, time.monotonic() - start_time)
