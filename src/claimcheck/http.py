from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx

USER_AGENT = "claimcheck-engine/1.0"


@asynccontextmanager
async def http_client(
    client: httpx.AsyncClient | None,
    *,
    timeout: float,
    verify: bool = True,
) -> AsyncIterator[httpx.AsyncClient]:
    """Yield the injected client, or a short-lived one owned by this call."""
    if client is not None:
        yield client
        return
    async with httpx.AsyncClient(
        timeout=timeout,
        verify=verify,
        follow_redirects=True,
        headers={"User-Agent": USER_AGENT},
    ) as owned:
        yield owned
