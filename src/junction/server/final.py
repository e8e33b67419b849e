"""Final handler: the response of last resort.

Runs when a dispatch chain is exhausted. With no error pending nothing
answered the request, so it sends ``404 Cannot GET /path``. With an
error pending it picks a status from the error, reports the error to
the configured sink, and sends a minimal HTML error page.

The page body depends on ``FinalHandlerConfig.env``: outside production
it contains the error's traceback, in production only the status phrase.
"""

import html
import logging
from http import HTTPStatus

from junction._internal.invoke import invoke
from junction._internal.urls import get_pathname, get_protohost
from junction.config import FinalHandlerConfig
from junction.errors import HTTPError
from junction.http.request import Request
from junction.http.response import ResponseWriter
from junction.server.terminal_errors import format_error_detail, log_error

logger = logging.getLogger("junction.server")

_DOCUMENT = (
    "<!DOCTYPE html>\n"
    '<html lang="en">\n'
    "<head>\n"
    '<meta charset="utf-8">\n'
    "<title>Error</title>\n"
    "</head>\n"
    "<body>\n"
    "<pre>{message}</pre>\n"
    "</body>\n"
    "</html>\n"
)


def error_status(error: object) -> int:
    """Pick the response status for a propagated error.

    Uses ``error.status`` or ``error.status_code`` when it is a 4xx/5xx
    integer, otherwise 500.
    """
    for attr in ("status", "status_code"):
        status = getattr(error, attr, None)
        if isinstance(status, int) and 400 <= status < 600:
            return status
    return 500


def error_headers(error: object) -> tuple[tuple[str, str], ...]:
    """Extra headers an error asks to be sent (``HTTPError.headers``)."""
    if isinstance(error, HTTPError):
        return error.headers
    return ()


def status_phrase(status: int) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return str(status)


def render_document(message: str) -> str:
    """Wrap *message* in the minimal error page, escaping it."""
    escaped = html.escape(message).replace("\n", "<br>").replace("  ", " &nbsp;")
    return _DOCUMENT.format(message=escaped)


class FinalHandler:
    """Default terminal continuation: ``await final(request, response, error)``.

    Usage::

        final = FinalHandler(FinalHandlerConfig(env="production"))
        dispatcher = Dispatcher(final_handler=final)
    """

    __slots__ = ("config",)

    def __init__(self, config: FinalHandlerConfig | None = None) -> None:
        self.config = config or FinalHandlerConfig()

    async def __call__(
        self,
        request: Request,
        response: ResponseWriter,
        error: object | None = None,
    ) -> None:
        if error is not None:
            status = error_status(error)
            headers = error_headers(error)
            message = (
                format_error_detail(error) if self.config.expose_errors else status_phrase(status)
            )
            await self.report(error, request, response, status)
        else:
            status = 404
            headers = ()
            message = f"Cannot {request.method} {_target_path(request)}"

        if response.headers_sent:
            # Too late for a status line; close whatever is in flight.
            logger.debug("cannot send %d for %s, response already started", status, request.url)
            await response.end()
            return

        await self.send(request, response, status, message, headers)

    async def report(
        self,
        error: object,
        request: Request,
        response: ResponseWriter,
        status: int,
    ) -> None:
        """Hand *error* to ``on_error``, or log it with ``log_error``."""
        if self.config.on_error is not None:
            await invoke(self.config.on_error, error, request, response)
            return
        if not self.config.log_errors or self.config.env == "test":
            return
        log_error(error, request, status=status, style=self.config.traceback)

    async def send(
        self,
        request: Request,
        response: ResponseWriter,
        status: int,
        message: str,
        headers: tuple[tuple[str, str], ...] = (),
    ) -> None:
        """Write the error page, replacing anything handlers set up."""
        response.headers.clear()
        for name, value in headers:
            response.add_header(name, value)

        response.status = status
        response.set_header("Content-Security-Policy", "default-src 'none'")
        response.set_header("X-Content-Type-Options", "nosniff")
        response.set_header("Content-Type", "text/html; charset=utf-8")

        body = render_document(message)
        if request.method == "HEAD":
            response.set_header("Content-Length", str(len(body.encode("utf-8"))))
            await response.write(b"")
            await response.end()
            return
        await response.end(body)


def _target_path(request: Request) -> str:
    url = request.original_url or request.url
    return get_pathname(url, get_protohost(url))
