"""The dispatcher: an ordered chain of mount-point-scoped layers.

Mutable during setup (``use``, ``use_error``, decorators). Frozen on the
first request: the layer list becomes a tuple and further registration
raises ``ConfigurationError``.

A request walks the chain like this::

    dispatcher.use(log_requests)                   # every request
    dispatcher.use("/admin", admin)                # nested dispatcher
    dispatcher.use_error(render_error)             # only once something failed

    await dispatcher.dispatch(request, response)

Each matched handler receives a ``next`` continuation. ``await next()``
moves on to the next matching layer, ``await next(exc)`` switches the
chain into error mode, and not calling it at all means the handler
answered the request. When the chain runs out, the terminal continuation
(the dispatcher's ``FinalHandler`` unless the caller passed one) gets
whatever error is still propagating.
"""

import inspect
import logging
import threading
import weakref
from collections.abc import Callable, Coroutine
from typing import TYPE_CHECKING, Any

import anyio.lowlevel

from junction._internal.asgi import Receive, Scope, Send
from junction._internal.invoke import invoke
from junction._internal.types import ErrorHandler, Handler, Terminal
from junction._internal.urls import (
    get_pathname,
    get_protohost,
    join_mount_paths,
    matches_prefix,
    trim_prefix,
)
from junction.config import DispatcherConfig
from junction.errors import ConfigurationError
from junction.http.request import Request
from junction.http.response import ResponseWriter
from junction.routing.layer import (
    Layer,
    LayerKind,
    classify,
    normalize_mount_path,
    unwrap_listener,
)
from junction.server.final import FinalHandler

if TYPE_CHECKING:
    from junction.server.asgi import ASGIAdapter

logger = logging.getLogger("junction.dispatcher")


class Dispatcher:
    """An ordered registry of layers and the entry point that walks it.

    A dispatcher can be served directly (it is an ASGI application),
    mounted inside another dispatcher with ``parent.use("/path", child)``,
    or driven by hand through ``dispatch()``.

    Thread safety:
        Registration is single-threaded setup work. The freeze on first
        dispatch uses a Lock + double-check so exactly one caller turns
        the layer list into a tuple.
    """

    __slots__ = (
        "__weakref__",
        "_adapter",
        "_freeze_lock",
        "_frozen",
        "config",
        "final_handler",
        "full_mount_path",
        "layers",
        "mount_path",
        "owner",
    )

    def __init__(
        self,
        config: DispatcherConfig | None = None,
        *,
        final_handler: Terminal | None = None,
    ) -> None:
        self.config: DispatcherConfig = config or DispatcherConfig()
        self.final_handler: Terminal = final_handler or FinalHandler(self.config.final)
        self.layers: list[Layer] | tuple[Layer, ...] = []
        self.mount_path: str = "/"
        self.full_mount_path: str | None = None
        self.owner: weakref.ReferenceType[Dispatcher] | None = None
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()
        self._adapter: ASGIAdapter | None = None

    # -- Registration --

    def use(self, path: Any, handler: Any = None) -> "Dispatcher":
        """Mount a handler or a nested dispatcher at *path*.

        *path* may be omitted: ``use(handler)`` mounts at ``/``. A handler
        mounted at ``/admin`` runs for ``/admin``, ``/admin/settings`` and
        ``/admin.json``, but not for ``/`` or ``/administration``, and
        sees the URL with ``/admin`` removed.

        Returns the dispatcher, for chaining.
        """
        return self._register(path, handler, error=False)

    def use_error(self, path: Any, handler: Any = None) -> "Dispatcher":
        """Mount an error handler at *path*.

        Error handlers are called as ``handler(error, request, response, next)``
        and only while an error is propagating. Calling ``next()`` without
        an argument recovers; ``next(error)`` passes the error on.
        """
        return self._register(path, handler, error=True)

    def handler(self, path: str = "/") -> Callable[[Handler], Handler]:
        """Register a request handler via decorator."""

        def decorator(func: Handler) -> Handler:
            self.use(path, func)
            return func

        return decorator

    def error(self, path: str = "/") -> Callable[[ErrorHandler], ErrorHandler]:
        """Register an error handler via decorator."""

        def decorator(func: ErrorHandler) -> ErrorHandler:
            self.use_error(path, func)
            return func

        return decorator

    def _register(self, path: Any, handler: Any, *, error: bool) -> "Dispatcher":
        self._check_not_frozen()

        # default route to '/'
        if not isinstance(path, str):
            if handler is not None:
                msg = f"Mount path must be a string, got {type(path).__name__}"
                raise ConfigurationError(msg)
            path, handler = "/", path

        mount_path = normalize_mount_path(path)
        full_mount_path = join_mount_paths(self.full_mount_path, mount_path)

        handler = unwrap_listener(handler)
        kind = classify(handler, error=error)

        if kind is LayerKind.NESTED:
            if handler is self:
                msg = "A dispatcher cannot be mounted inside itself"
                raise ConfigurationError(msg)
            handler.mount_path = mount_path
            handler.full_mount_path = full_mount_path
            handler.owner = weakref.ref(self)

        logger.debug("use %s at > %s", kind.value, full_mount_path)
        self.layers.append(Layer(mount_path, handler, kind, weakref.ref(self)))  # type: ignore[union-attr]
        return self

    # -- Dispatch --

    async def dispatch(
        self,
        request: Request,
        response: ResponseWriter,
        out: Terminal | None = None,
    ) -> None:
        """Walk the layer chain for one request.

        *out* is called as ``out(request, response, error)`` when the
        chain is exhausted. Nested dispatchers receive their parent's
        continuation here. Without *out*, the dispatcher's final handler
        runs. At the top level, whichever terminal applies runs at most
        once for this request.
        """
        self._ensure_frozen()
        top_level = not request.original_url
        request = request.with_original_url()
        done = out if out is not None else self.final_handler
        if top_level:
            done = _once(done)
        frame = _Frame(self.layers, request, response, done)  # type: ignore[arg-type]
        await frame.next()

    # -- Listener --

    @property
    def adapter(self) -> "ASGIAdapter":
        """The ASGI adapter that serves this dispatcher."""
        if self._adapter is None:
            from junction.server.asgi import ASGIAdapter

            self._adapter = ASGIAdapter(self)
        return self._adapter

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        await self.adapter(scope, receive, send)

    def listen(self, host: str | None = None, port: int | None = None) -> None:
        """Serve this dispatcher with pounce until interrupted."""
        self._ensure_frozen()

        from junction.server.dev import run_server

        run_server(
            self.adapter,
            host or self.config.host,
            port or self.config.port,
            reload=self.config.reload,
            workers=self.config.workers,
        )

    # -- Internal --

    def _ensure_frozen(self) -> None:
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self.layers = tuple(self.layers)
            self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the dispatcher after it has started handling requests. "
                "Register handlers before the first request."
            )
            raise ConfigurationError(msg)

    def __repr__(self) -> str:
        return f"<Dispatcher {self.full_mount_path or '/'} layers={len(self.layers)}>"


class _Frame:
    """One traversal of one dispatcher's layers.

    The frame holds the request it was entered with and never changes
    it. Every matched layer gets a derived request with its mount prefix
    trimmed, so whatever a layer saw, the next layer is matched against
    the frame's own URL again.
    """

    __slots__ = ("index", "layers", "out", "pending", "protohost", "request", "response")

    def __init__(
        self,
        layers: tuple[Layer, ...],
        request: Request,
        response: ResponseWriter,
        out: Terminal,
    ) -> None:
        self.layers = layers
        self.request = request
        self.response = response
        self.out = out
        self.index = 0
        self.pending: list[Coroutine[Any, Any, None]] = []
        self.protohost = get_protohost(request.url)

    async def next(self, error: object | None = None) -> None:
        """Advance to the next matching layer, or hand off to ``out``."""
        pathname = get_pathname(self.request.url, self.protohost)

        while True:
            if self.index >= len(self.layers):
                # Yield to the scheduler before leaving the chain.
                await anyio.lowlevel.checkpoint()
                await invoke(self.out, self.request, self.response, error)
                return

            layer = self.layers[self.index]
            self.index += 1

            if not matches_prefix(pathname, layer.prefix):
                continue
            if not layer.accepts(error):
                continue

            request = self._scoped_request(layer)
            logger.debug(
                "%s %s %s > %s",
                request.method,
                layer.name,
                layer.mount_path,
                request.original_url,
            )

            try:
                await self._call(layer, error, request)
            except Exception as exc:
                self._unawaited()
                error = exc
                continue
            if self._unawaited():
                logger.warning(
                    "%s %s: handler called next() without awaiting or returning it; "
                    "the chain stopped here",
                    request.method,
                    layer.name,
                )
            return

    def _scoped_request(self, layer: Layer) -> Request:
        prefix = layer.prefix
        if not prefix:
            return self.request
        url = self.request.url
        host = self.protohost or ""
        matched = url[len(host) : len(host) + len(prefix)]
        return self.request.with_url(trim_prefix(url, prefix, self.protohost), matched)

    async def _call(self, layer: Layer, error: object | None, request: Request) -> None:
        if layer.kind is LayerKind.NESTED:
            await layer.handler.dispatch(request, self.response, self._resume)
        elif layer.kind is LayerKind.ERROR:
            await invoke(layer.handler, error, request, self.response, self._continue)
        else:
            await invoke(layer.handler, request, self.response, self._continue)

    def _continue(self, error: object | None = None) -> Coroutine[Any, Any, None]:
        # The ``next`` handed to handlers. Remembered so a continuation that
        # was created but never awaited can be reported.
        coro = self.next(error)
        self.pending.append(coro)
        return coro

    def _unawaited(self) -> int:
        """Close continuations that were created but never started; return how many."""
        stale = [c for c in self.pending if inspect.getcoroutinestate(c) == inspect.CORO_CREATED]
        self.pending.clear()
        for coro in stale:
            coro.close()
        return len(stale)

    async def _resume(self, request: Request, response: ResponseWriter, error: object | None) -> None:
        # Terminal continuation for a nested dispatcher: carry on with our own chain.
        await self.next(error)


def _once(final_handler: Terminal) -> Terminal:
    """Wrap *final_handler* so a traversal can reach it only once."""
    called = False

    async def done(request: Request, response: ResponseWriter, error: object | None) -> None:
        nonlocal called
        if called:
            logger.warning(
                "final handler already ran for %s %s; dropping repeated call (error=%r)",
                request.method,
                request.original_url,
                error,
            )
            return
        called = True
        try:
            await invoke(final_handler, request, response, error)
        except Exception:
            logger.exception(
                "final handler failed for %s %s (error=%r)",
                request.method,
                request.original_url,
                error,
            )
            raise

    return done
