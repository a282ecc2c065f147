"""
Shared fixtures for JWT service tests.
"""

from typing import Callable, List

import httpx
import pytest

from service_jwt.app.jwks.client import JWKSClient, build_jwks
from service_jwt.app.token.keys import Keyset, generate_keyset
from shared.test_helpers import KID


@pytest.fixture(scope="session")
def keyset() -> Keyset:
    """Key pair tagged with the test kid."""
    return generate_keyset(KID)


@pytest.fixture
def requested_urls() -> List[str]:
    """URLs the mocked JWKS endpoint was asked for."""
    return []


@pytest.fixture
def jwks_handler(keyset, requested_urls) -> Callable[[httpx.Request], httpx.Response]:
    """Handler serving a JWKS with the test public key."""
    def handler(request: httpx.Request) -> httpx.Response:
        requested_urls.append(str(request.url))
        return httpx.Response(200, json=build_jwks(keyset.public_jwk))

    return handler


@pytest.fixture
def make_jwks_client() -> Callable[..., JWKSClient]:
    """Factory for a JWKSClient backed by a mock transport."""
    def factory(handler: Callable[[httpx.Request], httpx.Response], **kwargs) -> JWKSClient:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return JWKSClient(http_client=http_client, **kwargs)

    return factory
