"""
JWKS package.

Resolves a token issuer to the URL of its JSON Web Key Set, fetches the
document and selects keys by ``kid``. Also builds the document this service
publishes for its own keys.

Key points:
- One fetch per verification unless a bounded cache TTL is configured.
- No retries; a failed fetch fails the verification.
- Timeouts are owned by the httpx client.
"""
