from __future__ import annotations

import asyncio
from typing import Any, Optional


class LinkError(RuntimeError):
    """Base class for loopback link failures."""

    def __init__(
        self,
        message: str,
        *,
        port: Optional[int] = None,
        context: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.port = port
        self.context = context


class LinkConnectError(LinkError):
    """Connection refused or the loopback endpoint is unreachable."""


class LinkTimeoutError(LinkError):
    """An attempt outlived its timeout budget.

    ``abandoned`` holds the operation that lost the race, if any; it is left
    running and the caller decides how to dispose of it.
    """

    def __init__(
        self,
        message: str,
        *,
        port: Optional[int] = None,
        context: Optional[str] = None,
        abandoned: "Optional[asyncio.Future[Any]]" = None,
    ) -> None:
        super().__init__(message, port=port, context=context)
        self.abandoned = abandoned


class CompressionError(LinkError):
    """The DEFLATE codec rejected the payload."""


class LinkWriteError(LinkError):
    """Writing or flushing the payload failed after connecting."""


class SessionStateError(RuntimeError):
    """Illegal socket-session state transition (programming error)."""


def os_error_text(exc: BaseException) -> str:
    """Best-effort human text for socket-level exceptions."""
    if isinstance(exc, OSError):
        detail = exc.strerror or str(exc)
        if exc.errno is not None and detail:
            return f"{detail} (errno {exc.errno})"
        if detail:
            return detail
    text = str(exc).strip()
    return text or type(exc).__name__
