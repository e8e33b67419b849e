"""Handlers: Protocol-based, no inheritance required.

A request handler is any callable matching:
    async def handler(request, response, next) -> None

An error handler is any callable matching:
    async def handler(error, request, response, next) -> None
"""

from junction.middleware.protocol import ErrorHandler, Next, RequestHandler

__all__ = [
    "ErrorHandler",
    "Next",
    "RequestHandler",
]
