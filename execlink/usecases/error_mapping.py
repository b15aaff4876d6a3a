"""Translate link exceptions into failure reports and stable codes."""

from __future__ import annotations

from typing import Union

from execlink.adapters.link_errors import (
    CompressionError,
    LinkConnectError,
    LinkError,
    LinkTimeoutError,
    LinkWriteError,
    os_error_text,
)
from execlink.domain.link import Outcome, SendReport


def failure_code(exc: BaseException) -> str:
    """Return a stable code for the failure taxonomy.

    Args:
        exc: Exception raised by a session, probe, or encoder.

    Returns:
        One of ``CONNECT_FAILED``, ``TIMEOUT``, ``COMPRESSION_FAILED``,
        ``WRITE_FAILED``, ``LINK_ERROR`` or ``UNEXPECTED``.
    """
    if isinstance(exc, LinkTimeoutError):
        return "TIMEOUT"
    if isinstance(exc, LinkConnectError):
        return "CONNECT_FAILED"
    if isinstance(exc, CompressionError):
        return "COMPRESSION_FAILED"
    if isinstance(exc, LinkWriteError):
        return "WRITE_FAILED"
    if isinstance(exc, LinkError):
        return "LINK_ERROR"
    if isinstance(exc, ConnectionError):
        return "CONNECT_FAILED"
    if isinstance(exc, TimeoutError):
        return "TIMEOUT"
    return "UNEXPECTED"


def map_link_error(exc: BaseException, *, port: Union[str, int]) -> SendReport:
    """Flatten an exception into the failure report the host renders.

    Args:
        exc: Exception that escaped a session port.
        port: Port text the host asked for.

    Returns:
        SendReport: ``Outcome.FAILED`` report embedding the error text.
    """
    if isinstance(exc, OSError):
        message = os_error_text(exc)
    else:
        message = str(exc).strip() or type(exc).__name__
    return SendReport(port=str(port).strip(), outcome=Outcome.FAILED, error=message)


__all__ = ["failure_code", "map_link_error"]
