"""Invoke helpers: call sync or async handlers uniformly.

Junction handlers can be ``def`` or ``async def``. Any code that calls
a user-provided handler, error handler, or terminal handler goes
through here so the sync/async check lives in exactly one place.

A plain ``def`` handler that wants to continue the chain returns the
continuation's awaitable, which is awaited here::

    def add_header(request, response, next):
        response.set_header("X-Served-By", "junction")
        return next()
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call a handler and await the result if it's awaitable."""
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
