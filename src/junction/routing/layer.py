"""Layer registry entries.

A layer is one ``(mount path, handler)`` pair in a dispatcher's ordered
registry. Its kind is decided once, at registration, and never inferred
from the handler's signature at dispatch time:

- ``PLAIN``: ``handler(request, response, next)``, runs while no error
  is propagating.
- ``ERROR``: ``handler(error, request, response, next)``, runs only
  while an error is propagating.
- ``NESTED``: another dispatcher; runs its own chain, then continues
  the parent's.
"""

import weakref
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from junction.errors import ConfigurationError

if TYPE_CHECKING:
    from junction.routing.dispatcher import Dispatcher


class LayerKind(Enum):
    PLAIN = "plain"
    ERROR = "error"
    NESTED = "nested"

    @property
    def handles_errors(self) -> bool:
        return self is LayerKind.ERROR


def normalize_mount_path(path: str) -> str:
    """Strip the trailing slash from *path*; empty means root.

    >>> normalize_mount_path("/admin/")
    '/admin'
    >>> normalize_mount_path("")
    '/'
    """
    if not path or path == "/":
        return "/"
    if not path.startswith("/"):
        path = "/" + path
    if path.endswith("/"):
        path = path[:-1]
    return path


def is_dispatcher(handler: Any) -> bool:
    """Whether *handler* can run its own layer chain."""
    return callable(getattr(handler, "dispatch", None)) and hasattr(handler, "layers")


def unwrap_listener(handler: Any) -> Any:
    """Return the dispatcher behind a listener adapter, or *handler* itself."""
    from junction.server.asgi import ASGIAdapter

    if isinstance(handler, ASGIAdapter):
        return handler.dispatcher
    return handler


def classify(handler: Any, *, error: bool = False) -> LayerKind:
    """Decide the kind of a handler being registered.

    Raises ConfigurationError for anything that cannot be invoked.
    """
    if is_dispatcher(handler):
        if error:
            msg = "A dispatcher cannot be registered as an error handler; use use() instead"
            raise ConfigurationError(msg)
        return LayerKind.NESTED
    if not callable(handler):
        msg = f"Handler must be callable or a dispatcher, got {type(handler).__name__}"
        raise ConfigurationError(msg)
    return LayerKind.ERROR if error else LayerKind.PLAIN


def handler_name(handler: Any) -> str:
    """Readable handler name for debug logging."""
    name = getattr(handler, "__qualname__", None) or getattr(handler, "__name__", None)
    if name:
        return name
    if is_dispatcher(handler):
        return f"{type(handler).__name__}({getattr(handler, 'full_mount_path', '/')})"
    return type(handler).__name__


@dataclass(frozen=True, slots=True)
class Layer:
    """One registered handler and the path it is mounted at."""

    mount_path: str
    handler: Any
    kind: LayerKind
    _owner: weakref.ReferenceType["Dispatcher"] | None = None

    @property
    def prefix(self) -> str:
        """The path prefix matched and trimmed for this layer ('' for root)."""
        return "" if self.mount_path == "/" else self.mount_path

    @property
    def owner(self) -> "Dispatcher | None":
        """The dispatcher that registered this layer, if still alive."""
        return self._owner() if self._owner is not None else None

    def accepts(self, error: object | None) -> bool:
        """Whether this layer runs in the current propagation mode."""
        return self.kind.handles_errors == (error is not None)

    @property
    def name(self) -> str:
        return handler_name(self.handler)
