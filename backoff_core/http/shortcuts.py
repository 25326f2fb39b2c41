"""
Request Shortcuts
=================
One-shot calls for code that does not keep an executor around.

Usage:
    from backoff_core.http import get, post

    response = await get("https://api.twitch.tv/helix/users", headers=auth)
    response = await post(url, json=payload, client=shared_client)
"""

from typing import Any, Mapping, Optional

import httpx

from .executor import HeaderRetryExecutor


async def send(
    request: httpx.Request,
    client: Optional[httpx.AsyncClient] = None,
    **executor_kwargs: Any,
) -> httpx.Response:
    """Send a prepared request through a header-driven executor."""
    async with HeaderRetryExecutor(client=client, **executor_kwargs) as executor:
        return await executor.execute(request)


async def request(
    method: str,
    url: str,
    *,
    headers: Optional[Mapping[str, str]] = None,
    params: Optional[Mapping[str, Any]] = None,
    content: Optional[bytes] = None,
    json: Any = None,
    data: Optional[Mapping[str, Any]] = None,
    client: Optional[httpx.AsyncClient] = None,
    **executor_kwargs: Any,
) -> httpx.Response:
    """
    Build and send a request with rate-limit-reset backoff.

    When ``client`` is omitted a temporary client is created for this call.
    Remaining keyword arguments go to HeaderRetryExecutor.
    """
    async with HeaderRetryExecutor(client=client, **executor_kwargs) as executor:
        outgoing = executor.client.build_request(
            method,
            url,
            headers=headers,
            params=params,
            content=content,
            json=json,
            data=data,
        )
        return await executor.execute(outgoing)


async def get(url: str, **kwargs: Any) -> httpx.Response:
    return await request("GET", url, **kwargs)


async def post(url: str, **kwargs: Any) -> httpx.Response:
    return await request("POST", url, **kwargs)
