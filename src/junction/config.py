"""Dispatcher and final-handler configuration.

Both configs are frozen dataclasses: immutable after creation,
IDE-autocompletable, no string-key dict lookups, and no process-wide
environment variables consulted behind the caller's back.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from junction.errors import ConfigurationError

# Valid values for FinalHandlerConfig.traceback
TRACEBACK_STYLES = frozenset({"compact", "full", "minimal"})


@dataclass(frozen=True, slots=True)
class FinalHandlerConfig:
    """Configuration for the default terminal handler.

    ``env`` controls two things:

    - anything but ``"production"`` renders the error's traceback into
      the response body; production only shows the status phrase.
    - ``"test"`` silences the default error sink.

    ``on_error`` replaces the default sink. It is called as
    ``on_error(error, request, response)`` before the error response is
    written, and may be sync or async::

        config = FinalHandlerConfig(env="production", on_error=report_to_sentry)
    """

    env: str = "development"
    traceback: str = "compact"  # compact | full | minimal
    on_error: Callable[..., Any] | None = None
    log_errors: bool = True

    def __post_init__(self) -> None:
        if self.traceback not in TRACEBACK_STYLES:
            allowed = ", ".join(sorted(TRACEBACK_STYLES))
            msg = f"Unknown traceback style {self.traceback!r}. Expected one of: {allowed}"
            raise ConfigurationError(msg)

    @property
    def expose_errors(self) -> bool:
        """Whether error details may be written into responses."""
        return self.env != "production"


@dataclass(frozen=True, slots=True)
class DispatcherConfig:
    """Dispatcher configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = DispatcherConfig(port=3000, final=FinalHandlerConfig(env="production"))
    """

    # Listener
    host: str = "127.0.0.1"
    port: int = 8000
    reload: bool = False
    workers: int = 1

    # Terminal handler
    final: FinalHandlerConfig = field(default_factory=FinalHandlerConfig)
