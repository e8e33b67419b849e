"""Write-side response handle.

Every layer in a chain shares one ``ResponseWriter``. Handlers set the
status and headers, then ``write()`` chunks or ``end()`` the response.
The writer translates those calls into ASGI ``http.response.start`` /
``http.response.body`` messages.
"""

from http import HTTPStatus

from junction._internal.asgi import Send
from junction.http.headers import MutableHeaders


def _body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


def _encode(chunk: str | bytes) -> bytes:
    return chunk.encode("utf-8") if isinstance(chunk, str) else chunk


class ResponseWriter:
    """A mutable response handle bound to an ASGI ``send`` callable.

    Usage inside a handler::

        async def hello(request, response, next):
            response.status = 200
            response.set_header("Content-Type", "text/plain; charset=utf-8")
            await response.end("Hello")

    ``end()`` with a body sets ``Content-Length``; ``write()`` streams
    chunks and leaves framing to the server.
    """

    __slots__ = ("_send", "finished", "headers", "headers_sent", "status")

    def __init__(self, send: Send) -> None:
        self._send = send
        self.status: int = 200
        self.headers: MutableHeaders = MutableHeaders()
        self.headers_sent: bool = False
        self.finished: bool = False

    @property
    def reason(self) -> str:
        """Standard reason phrase for the current status."""
        try:
            return HTTPStatus(self.status).phrase
        except ValueError:
            return ""

    # -- Headers --

    def set_header(self, name: str, value: str) -> None:
        """Set a header, replacing existing values."""
        self._check_headers_open(name)
        self.headers.set(name, value)

    def add_header(self, name: str, value: str) -> None:
        """Append a header value (e.g. another ``Set-Cookie``)."""
        self._check_headers_open(name)
        self.headers.add(name, value)

    def get_header(self, name: str) -> str | None:
        return self.headers.get(name)

    def remove_header(self, name: str) -> None:
        self._check_headers_open(name)
        self.headers.remove(name)

    # -- Body --

    async def write(self, chunk: str | bytes) -> None:
        """Send a body chunk, starting the response if needed."""
        if self.finished:
            msg = "Cannot write to a response that has already ended"
            raise RuntimeError(msg)
        await self._start()
        data = _encode(chunk)
        if data and _body_allowed(self.status):
            await self._send({"type": "http.response.body", "body": data, "more_body": True})

    async def end(self, body: str | bytes = b"") -> None:
        """Finish the response, optionally with a final body.

        Calling ``end()`` on a finished response is a no-op.
        """
        if self.finished:
            return
        data = _encode(body) if _body_allowed(self.status) else b""
        if not self.headers_sent:
            self.headers.set("Content-Length", str(len(data)))
        await self._start()
        self.finished = True
        await self._send({"type": "http.response.body", "body": data, "more_body": False})

    # -- Internal --

    async def _start(self) -> None:
        if self.headers_sent:
            return
        self.headers_sent = True
        await self._send(
            {
                "type": "http.response.start",
                "status": self.status,
                "headers": self.headers.raw(),
            }
        )

    def _check_headers_open(self, name: str) -> None:
        if self.headers_sent:
            msg = f"Cannot set header {name!r} after the response has started"
            raise RuntimeError(msg)
