"""
Request Cloning
===============
Every attempt sends a fresh copy of the caller's request.
"""

import httpx

from ..exceptions import RequestNotRetryable


def clone_request(request: httpx.Request) -> httpx.Request:
    """
    Build a fresh copy of ``request`` that can be sent again.

    Raises:
        RequestNotRetryable: If the body is an unread stream
    """
    try:
        content = request.content
    except httpx.RequestNotRead as e:
        raise RequestNotRetryable(
            f"{request.method} {request.url} has a streaming body and cannot be replayed",
            last_exception=e,
        )
    return httpx.Request(
        method=request.method,
        url=request.url,
        headers=request.headers.copy(),
        content=content,
        extensions=dict(request.extensions),
    )
