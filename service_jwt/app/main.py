"""
JWT service: issues ES256 tokens, publishes its JWKS and verifies tokens.
"""

import json
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from shared.base_service import BaseService
from shared.config import ServiceConfig
from shared.logging import set_token_context

from .jwks.client import JWKSClient, build_jwks
from .jwks.resolver import build_resolver
from .token.keys import Keyset, generate_keyset, public_jwk
from .token.model import Token
from .token.signer import sign
from .validation.pipeline import TokenVerifier, VerificationOutcome


class TokenIssueRequest(BaseModel):
    """Request model for issuing a token."""
    sub: str
    exp: Optional[float] = None


class TokenIssueResponse(BaseModel):
    """Response model for an issued token."""
    token: str
    kid: str
    iss: str
    exp: Optional[int]


class TokenVerificationRequest(BaseModel):
    """Request model for token verification."""
    token: str


class TokenVerificationResponse(BaseModel):
    """Response model for token verification."""
    valid: bool
    outcome: VerificationOutcome
    subject: Optional[str] = None


def load_keyset(config: ServiceConfig) -> Keyset:
    """Load the service signing key from disk, or generate one."""
    if not config.private_jwk_file:
        return generate_keyset(config.service_kid)

    private = json.loads(Path(config.private_jwk_file).read_text())
    private.setdefault("kid", config.service_kid)
    return Keyset(private_jwk=private, public_jwk=public_jwk(private))


class JWTService(BaseService):
    """JWT service implementation."""

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        *,
        keyset: Optional[Keyset] = None,
        jwks_client: Optional[JWKSClient] = None,
    ):
        super().__init__("jwt", 8010, config=config)
        self.keyset = keyset or load_keyset(self.config)
        self.kid = self.keyset.private_jwk.get("kid", self.config.service_kid)

        self.jwks_client = jwks_client or JWKSClient(
            build_resolver(self.config.allowed_issuers),
            timeout=self.config.jwks_timeout_seconds,
            cache_ttl=self.config.jwks_cache_ttl_seconds,
            cache_maxsize=self.config.jwks_cache_max_entries,
            metrics=self.metrics,
        )
        self.verifier = TokenVerifier(self.jwks_client, metrics=self.metrics)

        @self.app.on_event("shutdown")
        async def _shutdown():
            await self.jwks_client.aclose()

        self._setup_jwt_routes()
        self.app.state.jwt_service = self

    def _setup_jwt_routes(self):
        """Set up token routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "jwt",
                "message": "JWT Access Layer - ES256 issuing and verification",
                "version": "1.0.0",
                "issuer": self.config.service_issuer,
                "kid": self.kid
            }

        @self.app.get("/.well-known/jwks.json")
        async def jwks():
            """Publish the service's public signing key."""
            return build_jwks(self.keyset.public_jwk)

        @self.app.post("/tokens", response_model=TokenIssueResponse)
        async def issue_token(request: TokenIssueRequest):
            """Issue a token for the given subject."""
            exp = request.exp if request.exp is not None else self.config.default_expiry_seconds
            token = Token.create(self.kid, self.config.service_issuer, request.sub, exp)
            set_token_context(subject=request.sub, issuer=self.config.service_issuer)

            compact = await sign(self.keyset.private_jwk, token, metrics=self.metrics)
            self.logger.info("Token issued", sub=request.sub, exp=token.payload.exp)

            return TokenIssueResponse(
                token=compact,
                kid=self.kid,
                iss=token.payload.iss,
                exp=token.payload.exp
            )

        @self.app.post("/tokens/verify", response_model=TokenVerificationResponse)
        async def verify_token(request: TokenVerificationRequest):
            """Token verification endpoint."""
            token = request.token
            if token.startswith("Bearer "):
                token = token[7:]

            result = await self.verifier.verify_detailed(token)
            if result.valid:
                set_token_context(subject=result.subject, issuer=result.issuer)

            return TokenVerificationResponse(
                valid=result.valid,
                outcome=result.outcome,
                subject=result.subject
            )

    async def _check_dependencies(self):
        """Report signing key availability."""
        return {"signing_key": "ok" if self.keyset.private_jwk.get("d") else "error"}


def create_app():
    """Create FastAPI application."""
    service = JWTService()
    return service.app


if __name__ == "__main__":
    service = JWTService()
    service.run()
