"""Listener: serves a dispatcher with pounce.

Pounce's ``run()`` takes an import string (e.g., ``"myapp:app"``), but a
dispatcher is a live object, so ``pounce.Server`` is used directly with
the ASGI callable. Pounce is imported lazily; install it with
``pip install junction[server]``.
"""

from junction.errors import ConfigurationError


def run_server(
    app: object,
    host: str,
    port: int,
    *,
    reload: bool = False,
    workers: int = 1,
) -> None:
    """Start a pounce server for the given ASGI callable.

    Args:
        app: ASGI callable (usually a dispatcher's ``ASGIAdapter``).
        host: Bind host address.
        port: Bind port number.
        reload: Enable auto-reload on file changes.
        workers: Worker count; reload forces a single worker.
    """
    try:
        from pounce.config import ServerConfig
        from pounce.server import Server
    except ImportError as exc:
        msg = "Serving a dispatcher requires pounce: pip install junction[server]"
        raise ConfigurationError(msg) from exc

    config = ServerConfig(
        host=host,
        port=port,
        workers=1 if reload else workers,
        reload=reload,
    )
    Server(config, app).run()
