"""
JWT service package.

Issues compact ES256 JWTs and verifies them against the issuer's published
JSON Web Key Set. The pieces live under ``service_jwt.app``:

- app.token: claim set construction, compact serialization and ES256 signing.
- app.jwks: issuer-to-JWKS resolution, fetching and publishing.
- app.validation: the verification pipeline.
- app.main: FastAPI application that issues, publishes and verifies.

Importing the package performs no IO.
"""

from .app.token.model import Token
from .app.token.signer import sign
from .app.validation.pipeline import verify

__all__ = ["Token", "sign", "verify"]
