"""Immutable HTTP request.

Frozen metadata with async body access. A dispatcher never mutates the
request it was handed: when a layer is mounted below the root, the layer
receives a *derived* request whose ``url`` has the mount prefix removed.
The frame that made the copy still holds the original, which is what
makes path restoration on the way back out a no-op.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from dataclasses import dataclass, field, replace
from types import SimpleNamespace
from typing import Any

from junction._internal.asgi import HTTPScope, Receive, Scope
from junction._internal.urls import get_pathname, get_protohost
from junction.http.headers import Headers
from junction.http.query import QueryParams


async def _empty_receive() -> dict[str, Any]:
    return {"type": "http.request", "body": b"", "more_body": False}


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request as seen by one layer.

    ``url`` is the request target relative to the layer's mount point.
    ``original_url`` is the target the outermost dispatcher received and
    is never rewritten. ``mount_prefixes`` records every prefix trimmed
    on the way down, outermost first.

    ``state`` is shared by every request derived from the same inbound
    request, so a handler can hand data to the handlers after it::

        async def load_user(request, response, next):
            request.state.user = await users.get(request.headers.get("x-user"))
            await next()
    """

    method: str
    url: str
    headers: Headers = field(default_factory=Headers)
    original_url: str = ""
    mount_prefixes: tuple[str, ...] = ()
    http_version: str = "1.1"
    server: tuple[str, int] | None = None
    client: tuple[str, int] | None = None
    state: SimpleNamespace = field(default_factory=SimpleNamespace, compare=False)

    # Private: ASGI receive callable for body streaming
    _receive: Receive = field(default=_empty_receive, repr=False, compare=False)

    # Private: mutable cache for the body, shared with derived requests
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    # -- Computed properties --

    @property
    def protohost(self) -> str | None:
        """Scheme+host prefix when ``url`` is an absolute-form target."""
        return get_protohost(self.url)

    @property
    def path(self) -> str:
        """The path component of ``url`` (no query string)."""
        return get_pathname(self.url, self.protohost)

    @property
    def query_string(self) -> str:
        """Raw query string of ``url``, without the ``?``."""
        _, sep, rest = self.url.partition("?")
        if not sep:
            return ""
        return rest.partition("#")[0]

    @property
    def query(self) -> QueryParams:
        """Parsed query string parameters."""
        return QueryParams(self.query_string)

    @property
    def base_path(self) -> str:
        """The part of the original path consumed by mount points."""
        return "".join(self.mount_prefixes)

    @property
    def content_type(self) -> str | None:
        """The Content-Type header value."""
        return self.headers.get("content-type")

    # -- Derivation --

    def with_url(self, url: str, prefix: str | None = None) -> Request:
        """Return a copy addressed at *url*, optionally recording a trimmed *prefix*."""
        if prefix is None:
            return replace(self, url=url)
        return replace(self, url=url, mount_prefixes=(*self.mount_prefixes, prefix))

    def with_original_url(self) -> Request:
        """Return a request with ``original_url`` captured, if not already."""
        if self.original_url:
            return self
        return replace(self, original_url=self.url)

    # -- Async body access --

    async def body(self) -> bytes:
        """Read the full request body.

        Result is cached: the ASGI receive is consumed once, then the
        same bytes are returned to every layer that asks.
        """
        if "_body" in self._cache:
            return self._cache["_body"]
        chunks = [chunk async for chunk in self.stream()]
        result = b"".join(chunks)
        self._cache["_body"] = result
        return result

    async def stream(self) -> AsyncGenerator[bytes]:
        """Stream the request body in chunks."""
        while True:
            message = await self._receive()
            body = message.get("body", b"")
            if body:
                yield body
            if not message.get("more_body", False):
                break

    # -- Factory --

    @classmethod
    def from_asgi(cls, scope: Scope, receive: Receive) -> Request:
        """Create a Request from an ASGI scope and receive callable."""
        http = HTTPScope.from_scope(scope)
        return cls(
            method=http.method,
            url=http.target,
            headers=Headers(http.headers),
            http_version=http.http_version,
            server=http.server,
            client=http.client,
            _receive=receive,
        )
