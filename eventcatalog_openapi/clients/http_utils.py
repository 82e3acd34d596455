from __future__ import annotations

import asyncio
import logging
from typing import Dict, Optional

import httpx

from eventcatalog_openapi.config import settings
from eventcatalog_openapi.errors import SpecFetchError

logger = logging.getLogger("eventcatalog_openapi.clients.http")


# One shared AsyncClient for the process (connection pooling + timeouts)
_client: Optional[httpx.AsyncClient] = None
_client_lock = asyncio.Lock()


def _default_headers() -> Dict[str, str]:
    return {
        "Accept": "application/json, application/yaml, text/yaml, */*",
        "User-Agent": settings.http_user_agent,
    }


async def get_http_client() -> httpx.AsyncClient:
    global _client
    async with _client_lock:
        if _client is None or _client.is_closed:
            _client = httpx.AsyncClient(
                timeout=settings.http_client_timeout_seconds,
                headers=_default_headers(),
                follow_redirects=True,
            )
            logger.info("HTTP client created (timeout=%ss)", settings.http_client_timeout_seconds)
        return _client


async def close_http_client() -> None:
    global _client
    async with _client_lock:
        if _client is not None and not _client.is_closed:
            await _client.aclose()
            logger.info("HTTP client closed")
        _client = None


def _raise_for_status(resp: httpx.Response) -> None:
    try:
        resp.raise_for_status()
    except httpx.HTTPStatusError as e:
        # keep body for debugging (limited)
        raise SpecFetchError(url=str(resp.request.url), status=resp.status_code, body=resp.text[:500]) from e


async def fetch_text(url: str, *, client: Optional[httpx.AsyncClient] = None) -> str:
    """
    GET a remote document once (no retries) and return its body as text.

    Connection failures and timeouts raise SpecFetchError with no status.
    """
    client = client or await get_http_client()
    logger.debug("Fetching %s", url)
    try:
        resp = await client.get(url)
    except httpx.HTTPError as e:
        raise SpecFetchError(url=url, status=None, body=str(e)) from e
    _raise_for_status(resp)
    return resp.text


def fetch_text_sync(url: str) -> str:
    """
    Blocking variant used by the $ref loader, which jsonref calls synchronously.

    Only call it off the event loop (load_spec runs dereferencing in a worker thread).
    """
    try:
        resp = httpx.get(
            url,
            timeout=settings.http_client_timeout_seconds,
            headers=_default_headers(),
            follow_redirects=True,
        )
    except httpx.HTTPError as e:
        raise SpecFetchError(url=url, status=None, body=str(e)) from e
    _raise_for_status(resp)
    return resp.text
