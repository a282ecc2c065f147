#!/usr/bin/env python3
"""
Sign a token and verify it against a locally mocked JWKS endpoint.

In production the issuer serves its JWKS at
``https://<issuer>/.well-known/jwks.json``; here the HTTP layer is replaced by
an ``httpx.MockTransport`` so verification never leaves the machine.
"""

import argparse
import asyncio
import json
import uuid

import httpx

from service_jwt.app.jwks.client import JWKSClient, build_jwks
from service_jwt.app.token.keys import generate_keyset
from service_jwt.app.token.model import Token
from service_jwt.app.token.signer import sign
from service_jwt.app.validation.pipeline import TokenVerifier


async def run(kid: str, issuer: str, expires_in: int) -> dict:
    """Sign a token for a random subject and verify it."""
    keyset = generate_keyset(kid)
    jwks = build_jwks(keyset.public_jwk)

    transport = httpx.MockTransport(lambda request: httpx.Response(200, json=jwks))
    async with httpx.AsyncClient(transport=transport) as http_client:
        verifier = TokenVerifier(JWKSClient(http_client=http_client))
        token = await sign(keyset.private_jwk, Token.create(kid, issuer, str(uuid.uuid4()), expires_in))
        verified_subject = await verifier.verify(token)

    return {"token": token, "verifiedSubject": verified_subject}


def main():
    parser = argparse.ArgumentParser(description="Sign and verify an ES256 JWT locally")
    parser.add_argument("--kid", default="demo-key")
    parser.add_argument("--issuer", default="api.example.com")
    parser.add_argument("--expires-in", type=int, default=60 * 60, help="Relative expiry in seconds")
    args = parser.parse_args()

    result = asyncio.run(run(args.kid, args.issuer, args.expires_in))
    print(json.dumps(result, indent=2))


if __name__ == "__main__":
    main()
