"""
Header-Driven Retry
===================
HTTP executor for APIs that signal throttling with 429 and a reset timestamp.
"""

from .requests import clone_request
from .executor import HeaderRetryExecutor
from .shortcuts import send, request, get, post

__all__ = [
    "clone_request",
    "HeaderRetryExecutor",
    "send",
    "request",
    "get",
    "post",
]
