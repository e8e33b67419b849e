"""Junction exception hierarchy.

Shared across the layer registry, the dispatcher, and the final handler
so every module raises and catches the same types. The dispatch engine
itself never inspects propagated errors; these types exist for handlers
and for the final handler's status mapping.
"""

from dataclasses import dataclass


class JunctionError(Exception):
    """Base for all junction-specific errors."""


class ConfigurationError(JunctionError):
    """Raised when a dispatcher is configured incorrectly.

    Typically raised by ``Dispatcher.use()`` / ``Dispatcher.use_error()``
    at registration time, never during dispatch.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(JunctionError):
    """An error that maps directly to an HTTP status code.

    Raise it from a handler (or pass it to ``next()``) and the final
    handler answers with ``status`` and the extra ``headers``.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404: nothing in the chain answered the request."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405: the mount exists but not for this HTTP method.

    Includes an ``Allow`` header listing the valid methods.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )
