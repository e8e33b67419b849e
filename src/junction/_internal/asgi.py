"""Typed ASGI definitions.

Replaces the standard Scope = MutableMapping[str, Any] with a typed
dataclass for internal use. Handlers never see these; they get a
``Request`` and a ``ResponseWriter``.
"""

from collections.abc import Awaitable, Callable, MutableMapping
from dataclasses import dataclass
from typing import Any, TypeAlias

# Raw ASGI 3.0 types
Scope: TypeAlias = MutableMapping[str, Any]
Receive: TypeAlias = Callable[[], Awaitable[MutableMapping[str, Any]]]
Send: TypeAlias = Callable[[MutableMapping[str, Any]], Awaitable[None]]


@dataclass(frozen=True, slots=True)
class HTTPScope:
    """Typed HTTP scope parsed from raw ASGI scope dict."""

    method: str
    path: str
    raw_path: bytes | None
    query_string: bytes
    root_path: str
    http_version: str
    headers: tuple[tuple[bytes, bytes], ...]
    server: tuple[str, int] | None
    client: tuple[str, int] | None

    @property
    def target(self) -> str:
        """The request target as it appeared on the request line (path + query).

        Built from ``raw_path`` so percent-encoded separators (``%2F``,
        ``%3F``) stay encoded. Falls back to the decoded ``path`` for
        servers that omit ``raw_path``.
        """
        path = self.raw_path.decode("latin-1") if self.raw_path else self.path
        if self.query_string:
            return f"{path}?{self.query_string.decode('latin-1')}"
        return path

    @classmethod
    def from_scope(cls, scope: Scope) -> "HTTPScope":
        """Parse raw ASGI scope into typed object."""
        server = scope.get("server")
        client = scope.get("client")
        return cls(
            method=scope["method"],
            path=scope.get("path") or "/",
            raw_path=scope.get("raw_path"),
            query_string=scope.get("query_string", b""),
            root_path=scope.get("root_path", ""),
            http_version=scope.get("http_version", "1.1"),
            headers=tuple(tuple(pair) for pair in scope.get("headers", ())),
            server=tuple(server) if server else None,
            client=tuple(client) if client else None,
        )
