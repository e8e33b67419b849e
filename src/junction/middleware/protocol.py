"""Handler protocols and the Next type alias.

A request handler is any callable matching::

    async def my_handler(request: Request, response: ResponseWriter, next: Next) -> None: ...

An error handler takes the propagated error first::

    async def my_error_handler(error, request: Request, response: ResponseWriter, next: Next) -> None: ...

No base class required. Which of the two a callable is gets decided by
how it is registered (``use`` or ``use_error``), never by its signature.
Plain ``def`` works too; return ``next()`` to continue the chain. Calling
``next()`` in a ``def`` handler without returning it only creates the
continuation: the chain stops there and the dispatcher logs a warning.
"""

from typing import Protocol

from junction._internal.types import Next
from junction.http.request import Request
from junction.http.response import ResponseWriter


class RequestHandler(Protocol):
    """Protocol for handlers registered with ``Dispatcher.use()``.

    Accepts both functions and callable objects::

        # Function handler
        async def timing(request, response, next):
            start = time.monotonic()
            await next()
            logger.info("%s took %.3fs", request.path, time.monotonic() - start)

        # Class handler
        class RequireToken:
            async def __call__(self, request, response, next):
                if request.headers.get("authorization") != self.token:
                    await next(HTTPError(401))
                    return
                await next()
    """

    async def __call__(self, request: Request, response: ResponseWriter, next: Next) -> None: ...


class ErrorHandler(Protocol):
    """Protocol for handlers registered with ``Dispatcher.use_error()``."""

    async def __call__(
        self,
        error: object,
        request: Request,
        response: ResponseWriter,
        next: Next,
    ) -> None: ...
