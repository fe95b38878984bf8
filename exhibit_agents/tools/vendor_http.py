"""Shared httpx helpers for vendor REST calls."""

from contextlib import asynccontextmanager
from typing import Any

import httpx


@asynccontextmanager
async def client_scope(client: httpx.AsyncClient | None):
    """Yield the injected client, or a short-lived one closed on exit."""
    if client is not None:
        yield client
        return
    async with httpx.AsyncClient() as owned:
        yield owned


def response_body(resp: httpx.Response) -> Any:
    """Response body as JSON when possible, raw text otherwise."""
    try:
        return resp.json()
    except ValueError:
        return resp.text
