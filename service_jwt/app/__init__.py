"""
Application package for the JWT service.

Design notes:
- Module import must not perform network calls. All IO happens in the
  verification pipeline, route handlers or explicit startup hooks.
- Use the shared/ utilities for logging, metrics, config and errors.
- Each sign/verify call builds its own context; nothing is shared between
  concurrent calls unless a JWKS cache is explicitly enabled.
"""
