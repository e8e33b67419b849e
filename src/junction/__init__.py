"""Junction: mount-point request dispatch for ASGI.

Routes each request through an ordered chain of handlers, each mounted
at a path prefix. Handlers transform the request, answer it, fail, or
pass it on; dispatchers nest inside dispatchers.

Basic usage::

    from junction import Dispatcher

    app = Dispatcher()
    admin = Dispatcher()

    @admin.handler("/settings")
    async def settings(request, response, next):
        await response.end(f"settings at {request.base_path}{request.path}")

    @app.error()
    async def oops(error, request, response, next):
        response.status = 500
        await response.end("something broke")

    app.use("/admin", admin)
    app.listen()
"""

__version__ = "0.1.0.dev0"
__all__ = [
    "ASGIAdapter",
    "ConfigurationError",
    "Dispatcher",
    "DispatcherConfig",
    "ErrorHandler",
    "FinalHandler",
    "FinalHandlerConfig",
    "HTTPError",
    "JunctionError",
    "Layer",
    "LayerKind",
    "MethodNotAllowed",
    "Next",
    "NotFound",
    "Request",
    "RequestHandler",
    "ResponseWriter",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import junction`` fast while providing a clean top-level API.
    """
    if name == "Dispatcher":
        from junction.routing.dispatcher import Dispatcher

        return Dispatcher

    if name in ("Layer", "LayerKind"):
        from junction.routing import layer as _layer

        return getattr(_layer, name)

    if name in ("DispatcherConfig", "FinalHandlerConfig"):
        from junction import config as _config

        return getattr(_config, name)

    if name == "Request":
        from junction.http.request import Request

        return Request

    if name == "ResponseWriter":
        from junction.http.response import ResponseWriter

        return ResponseWriter

    if name == "FinalHandler":
        from junction.server.final import FinalHandler

        return FinalHandler

    if name == "ASGIAdapter":
        from junction.server.asgi import ASGIAdapter

        return ASGIAdapter

    if name in ("ErrorHandler", "Next", "RequestHandler"):
        from junction.middleware import protocol as _protocol

        return getattr(_protocol, name)

    if name in ("ConfigurationError", "HTTPError", "JunctionError", "MethodNotAllowed", "NotFound"):
        from junction import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
