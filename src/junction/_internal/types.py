"""Shared type aliases used across junction modules."""

from collections.abc import Awaitable, Callable
from typing import Any, TypeAlias

# Continuation handed to every handler: ``await next()`` or ``await next(error)``
Next: TypeAlias = Callable[..., Awaitable[None]]

# Request handler: (request, response, next), sync or async
Handler: TypeAlias = Callable[..., Any]

# Error handler: (error, request, response, next), sync or async
ErrorHandler: TypeAlias = Callable[..., Any]

# Terminal continuation: (request, response, error), sync or async
Terminal: TypeAlias = Callable[..., Any]
