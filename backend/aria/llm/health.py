"""Provider health checks."""

import asyncio
import time
from typing import Any

from ..errors import ProviderError
from .router import PROVIDERS, ProviderRouter


def _probe(router: ProviderRouter, provider: str) -> dict[str, Any]:
    start = time.perf_counter()
    try:
        completion = router.complete(provider, "Hello", max_tokens=16)
    except ProviderError as e:
        return {
            "provider": provider,
            "model": None,
            "status": "error",
            "latency_ms": None,
            "error": str(e),
        }
    return {
        "provider": provider,
        "model": completion.model,
        "status": "healthy",
        "latency_ms": round((time.perf_counter() - start) * 1000),
        "error": None,
    }


async def check_health(router: ProviderRouter) -> list[dict[str, Any]]:
    """Probe every provider concurrently."""
    return list(
        await asyncio.gather(
            *(asyncio.to_thread(_probe, router, provider) for provider in PROVIDERS)
        )
    )
