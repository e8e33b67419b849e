"""Terminal error formatting for the default error sink.

Provides readable log output for errors that reach the final handler.
The verbosity comes from ``FinalHandlerConfig.traceback``:

- ``compact`` (default): error summary plus the last few application
  frames, with site-packages and stdlib frames filtered out::

      ValueError: bad input
        Trace (app frames):
          app/handlers.py:42 in load_user
            raise ValueError("bad input")

- ``full``: the complete Python traceback via ``logger.exception``.
- ``minimal``: one line with the raising location.
"""

from __future__ import annotations

import logging
import os
import traceback as _traceback
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from junction.http.request import Request

logger = logging.getLogger("junction.server")

_STDLIB_PREFIX = os.path.dirname(os.__file__)


def _is_app_frame(filename: str) -> bool:
    """True if the frame is from the application (not stdlib/site-packages)."""
    if "site-packages" in filename:
        return False
    if filename.startswith("<"):
        return False
    return not filename.startswith(_STDLIB_PREFIX)


def format_compact_traceback(exc: BaseException) -> str:
    """Error summary plus at most five application frames."""
    parts: list[str] = []

    tb = exc.__traceback__
    frames = _traceback.extract_tb(tb) if tb else []
    app_frames = [f for f in frames if _is_app_frame(f.filename)]

    # If no app frames, show last 3 frames instead
    display_frames = app_frames if app_frames else frames[-3:]

    parts.append(f"{type(exc).__name__}: {exc}")

    if display_frames:
        parts.append("  Trace (app frames):")
        for frame in display_frames[-5:]:
            parts.append(f"    {frame.filename}:{frame.lineno} in {frame.name}")
            if frame.line:
                parts.append(f"      {frame.line.strip()}")

    return "\n".join(parts)


def format_minimal_error(exc: BaseException) -> str:
    """One-line error summary."""
    tb = exc.__traceback__
    frames = _traceback.extract_tb(tb) if tb else []
    last = frames[-1] if frames else None
    location = f" at {last.filename}:{last.lineno}" if last else ""
    return f"{type(exc).__name__}{location}: {exc}"


def format_error_detail(error: object) -> str:
    """Full text for an error value, used in non-production responses.

    Exceptions render as their traceback; anything else that was passed
    to ``next()`` renders as ``str()``.
    """
    if isinstance(error, BaseException):
        if error.__traceback__ is None:
            return f"{type(error).__name__}: {error}"
        return "".join(_traceback.format_exception(error)).rstrip()
    return str(error)


def log_error(
    error: object,
    request: Request | None = None,
    *,
    status: int = 500,
    style: str = "compact",
) -> None:
    """Log an error that reached the end of a dispatch chain.

    Args:
        error: The propagated error. Usually an exception, but any value
            passed to ``next()`` counts.
        request: The request that produced it, when available.
        status: The status the final handler is about to send.
        style: ``compact``, ``full`` or ``minimal``.
    """
    prefix = (
        f"{status} {request.method} {request.original_url or request.url}"
        if request is not None
        else f"{status} error"
    )

    if not isinstance(error, BaseException):
        logger.error("%s: %r", prefix, error)
        return

    if style == "full":
        logger.error(prefix, exc_info=(type(error), error, error.__traceback__))
    elif style == "minimal":
        logger.error("%s: %s", prefix, format_minimal_error(error))
    else:
        logger.error("%s\n%s", prefix, format_compact_traceback(error))
