"""
Shared utilities for the JWT access layer.

This package aggregates common building blocks consumed by the service:

- config: Service configuration via pydantic-settings
- logging: Structured logging with request correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types and responses
- base_service: FastAPI application skeleton with health and metrics routes
- test_helpers: Token crafting helpers for tests

Any cross-cutting logic should live here. shared/ imports from service_jwt
only in test_helpers.
"""
