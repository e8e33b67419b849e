"""ASGI adapter: serves a dispatcher to an ASGI server.

The only component that touches raw ASGI scopes. Converts the scope to
a ``Request``, wraps ``send`` in a ``ResponseWriter``, and runs the
dispatcher's chain. Lifespan events are acknowledged so servers that
require them (pounce, uvicorn) start cleanly.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from junction._internal.asgi import Receive, Scope, Send
from junction._internal.types import Terminal
from junction.http.request import Request
from junction.http.response import ResponseWriter

if TYPE_CHECKING:
    from junction.routing.dispatcher import Dispatcher

logger = logging.getLogger("junction.server")


class ASGIAdapter:
    """ASGI 3.0 application wrapping a dispatcher.

    Usage::

        app = ASGIAdapter(dispatcher)   # hand ``app`` to any ASGI server

    Mounting an adapter inside another dispatcher mounts the dispatcher
    it wraps.
    """

    __slots__ = ("dispatcher", "final_handler")

    def __init__(self, dispatcher: Dispatcher, final_handler: Terminal | None = None) -> None:
        self.dispatcher = dispatcher
        self.final_handler = final_handler

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        if scope["type"] != "http":
            logger.debug("ignoring unsupported ASGI scope type %r", scope["type"])
            return

        request = Request.from_asgi(scope, receive)
        response = ResponseWriter(send)

        await self.dispatcher.dispatch(request, response, self.final_handler)

        if not response.finished:
            logger.warning(
                "%s %s: dispatch chain returned without ending the response",
                request.method,
                request.url,
            )
            await response.end()

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return
