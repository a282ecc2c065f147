#!/usr/bin/env python3
"""
Sign/verify throughput benchmark (lower ms is better).

The JWKS endpoint is mocked so the numbers cover serialization, the pipeline
and the ES256 primitives only.
"""

import argparse
import asyncio
import os
import time

import httpx

from service_jwt.app.jwks.client import JWKSClient, build_jwks
from service_jwt.app.token.keys import generate_keyset
from service_jwt.app.token.model import Token
from service_jwt.app.token.signer import sign
from service_jwt.app.validation.pipeline import TokenVerifier

KID = "bench-key"


async def bench(label: str, iterations: int, fn) -> dict:
    """Await ``fn`` ``iterations`` times and summarize the timing."""
    start = time.perf_counter()
    for _ in range(iterations):
        await fn()
    duration_ms = (time.perf_counter() - start) * 1000
    return {
        "task": label,
        "iterations": iterations,
        "total (ms)": round(duration_ms, 2),
        "avg (ms)": round(duration_ms / iterations, 4),
        "ops/sec": round(1000 / (duration_ms / iterations), 2),
    }


async def run(iterations: int) -> list:
    keyset = generate_keyset(KID)
    token = Token.create(KID, "example.com", "bench-subject", 300)
    jwks = build_jwks(keyset.public_jwk)

    transport = httpx.MockTransport(lambda request: httpx.Response(200, json=jwks))
    async with httpx.AsyncClient(transport=transport) as http_client:
        verifier = TokenVerifier(JWKSClient(http_client=http_client))
        compact = await sign(keyset.private_jwk, token)

        return [
            await bench("sign", iterations, lambda: sign(keyset.private_jwk, token)),
            await bench("verify", iterations, lambda: verifier.verify(compact)),
        ]


def print_table(rows: list):
    headers = list(rows[0].keys())
    widths = [max(len(h), *(len(str(row[h])) for row in rows)) for h in headers]
    print(" | ".join(h.ljust(w) for h, w in zip(headers, widths)))
    print("-+-".join("-" * w for w in widths))
    for row in rows:
        print(" | ".join(str(row[h]).ljust(w) for h, w in zip(headers, widths)))


def main():
    parser = argparse.ArgumentParser(description="Benchmark ES256 JWT sign/verify")
    parser.add_argument(
        "--iterations",
        type=int,
        default=int(os.getenv("BENCH_ITERS", "150")),
        help="Iterations per task (BENCH_ITERS env var)",
    )
    args = parser.parse_args()

    rows = asyncio.run(run(args.iterations))
    print("\njwt benchmark (lower ms is better)")
    print_table(rows)


if __name__ == "__main__":
    main()
