"""Socket session adapter: one outbound loopback TCP exchange.

Each ``run`` call walks an explicit state machine::

    IDLE -> CONNECTING -> CONNECTED -> SENDING -> SENT
                                 `-> SENT               (no script)
    CONNECTING | CONNECTED | SENDING -> FAILED

A single deadline is fixed when the attempt starts; connect, write flush and
graceful close are each raced against whatever remains of it, so every attempt
reaches ``SENT`` or ``FAILED``. Failures are returned as reports rather than
raised, which lets callers sequence attempts without per-step handlers.

Call context:
    ``SendScript`` and ``AutodiscoverPort`` use cases, via ``LinkController``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Dict, FrozenSet, Optional, Tuple

from ..domain.link import (
    LOOPBACK_HOST,
    NO_SCRIPT,
    SEND_TIMEOUT_MS,
    ConnectionAttempt,
    Outcome,
    Payload,
    Script,
    SendReport,
    SessionState,
    coerce_payload,
    parse_port,
)
from ..domain.ports import PayloadEncoderPort, SessionPort
from .link_errors import (
    CompressionError,
    LinkConnectError,
    LinkError,
    LinkTimeoutError,
    LinkWriteError,
    SessionStateError,
    os_error_text,
)
from .payload_codec import DeflateEncoder
from .timeout_race import dispose_abandoned, race_timeout

Connector = Callable[[str, int], Awaitable[Tuple[asyncio.StreamReader, asyncio.StreamWriter]]]

TRANSITIONS: Dict[SessionState, FrozenSet[SessionState]] = {
    SessionState.IDLE: frozenset({SessionState.CONNECTING}),
    SessionState.CONNECTING: frozenset({SessionState.CONNECTED, SessionState.FAILED}),
    SessionState.CONNECTED: frozenset(
        {SessionState.SENDING, SessionState.SENT, SessionState.FAILED}
    ),
    SessionState.SENDING: frozenset({SessionState.SENT, SessionState.FAILED}),
    SessionState.SENT: frozenset(),
    SessionState.FAILED: frozenset(),
}


def advance(attempt: ConnectionAttempt, target: SessionState) -> None:
    """Move ``attempt`` to ``target`` if the transition table allows it.

    Raises:
        SessionStateError: On a transition the table does not list.
    """
    if target not in TRANSITIONS[attempt.state]:
        raise SessionStateError(
            f"Illegal session transition {attempt.state.value} -> {target.value}"
        )
    attempt.state = target
    attempt.history.append(target)


class TcpSession(SessionPort):
    """Connect to ``127.0.0.1:<port>`` and optionally deliver one script."""

    def __init__(
        self,
        timeout_ms: int = SEND_TIMEOUT_MS,
        *,
        encoder: Optional[PayloadEncoderPort] = None,
        host: str = LOOPBACK_HOST,
        connector: Optional[Connector] = None,
    ) -> None:
        """Configure one session.

        Args:
            timeout_ms: Budget for the whole attempt in milliseconds.
            encoder: Payload compressor; defaults to ``DeflateEncoder``.
            host: Target address. Only loopback is used in production.
            connector: Coroutine function returning a reader/writer pair;
                defaults to ``asyncio.open_connection``.
        """
        if timeout_ms <= 0:
            raise ValueError("timeout_ms must be positive.")
        self.timeout_ms = timeout_ms
        self.encoder = encoder or DeflateEncoder()
        self.host = host
        self._connect: Connector = connector or asyncio.open_connection
        self._log = logging.getLogger(__name__)
        self.last_attempt: Optional[ConnectionAttempt] = None

    async def run(self, payload: Payload, port: str) -> SendReport:
        """Run one attempt and resolve to a report; never raises for I/O.

        Raw text or bytes are accepted and sent as a script. Only ``NO_SCRIPT``
        (or empty input) takes the connect-only path.

        Raises:
            TypeError: For a payload that is neither a variant nor text/bytes,
                before any connection is opened.
        """
        payload = coerce_payload(payload)
        port_text = str(port).strip()
        try:
            port_num = parse_port(port)
        except ValueError as exc:
            self._log.warning("Failed to connect or send on port %s: %s", port_text, exc)
            return SendReport(port=port_text, outcome=Outcome.FAILED, error=str(exc))
        port_text = str(port_num)

        loop = asyncio.get_running_loop()
        attempt = ConnectionAttempt(port=port_num, timeout_ms=self.timeout_ms)
        self.last_attempt = attempt
        deadline = loop.time() + self.timeout_ms / 1000.0
        writer: Optional[asyncio.StreamWriter] = None
        try:
            writer = await self._open(attempt, deadline)
            if payload is NO_SCRIPT:
                await self._close(attempt, writer, deadline)
                sent = 0
                outcome = Outcome.CONNECTED_ONLY
            else:
                sent = await self._send(attempt, writer, payload, deadline)
                outcome = Outcome.SCRIPT_SENT
            advance(attempt, SessionState.SENT)
        except LinkError as exc:
            _abort(writer)
            advance(attempt, SessionState.FAILED)
            self._log.warning("Failed to connect or send on port %s: %s", port_text, exc)
            return SendReport(port=port_text, outcome=Outcome.FAILED, error=str(exc))
        except asyncio.CancelledError:
            _abort(writer)
            raise
        return SendReport(port=port_text, outcome=outcome, bytes_sent=sent)

    # ------------------------------------------------------------------
    async def _open(self, attempt: ConnectionAttempt, deadline: float) -> asyncio.StreamWriter:
        advance(attempt, SessionState.CONNECTING)
        port = attempt.port
        try:
            _reader, writer = await race_timeout(
                self._connect(self.host, port),
                self._remaining_ms(deadline),
                f"Connection to port {port} timed out",
                port=port,
            )
        except LinkTimeoutError as exc:
            dispose_abandoned(exc.abandoned)
            raise
        except OSError as exc:
            raise LinkConnectError(os_error_text(exc), port=port, context="connect") from exc
        advance(attempt, SessionState.CONNECTED)
        self._log.info("Connected to backend on port %s", port)
        return writer

    async def _send(
        self,
        attempt: ConnectionAttempt,
        writer: asyncio.StreamWriter,
        script: Script,
        deadline: float,
    ) -> int:
        advance(attempt, SessionState.SENDING)
        port = attempt.port
        try:
            encoded = self.encoder.encode(script.data)
        except CompressionError as exc:
            exc.port = port
            raise
        try:
            writer.write(encoded)
            await race_timeout(
                writer.drain(),
                self._remaining_ms(deadline),
                f"Sending to port {port} timed out",
                port=port,
            )
        except LinkTimeoutError as exc:
            dispose_abandoned(exc.abandoned)
            raise
        except OSError as exc:
            raise LinkWriteError(os_error_text(exc), port=port, context="write") from exc
        self._log.info("Script sent to port %s (%d bytes)", port, len(encoded))
        await self._close(attempt, writer, deadline)
        return len(encoded)

    async def _close(
        self, attempt: ConnectionAttempt, writer: asyncio.StreamWriter, deadline: float
    ) -> None:
        """Close gracefully; a close that fails after the data left still counts as sent."""
        writer.close()
        try:
            await race_timeout(
                writer.wait_closed(),
                self._remaining_ms(deadline),
                f"Closing port {attempt.port} timed out",
                port=attempt.port,
            )
        except LinkTimeoutError as exc:
            dispose_abandoned(exc.abandoned)
            _abort(writer)
            self._log.debug("Close on port %s did not finish in time; aborted", attempt.port)
        except OSError as exc:
            self._log.debug("Close on port %s reported %s", attempt.port, os_error_text(exc))

    @staticmethod
    def _remaining_ms(deadline: float) -> float:
        return max(0.0, (deadline - asyncio.get_running_loop().time()) * 1000.0)


def _abort(writer: Optional[asyncio.StreamWriter]) -> None:
    if writer is not None:
        writer.transport.abort()


class TcpSessionFactory:
    """Build ``TcpSession`` objects bound to a budget, sharing one encoder."""

    def __init__(
        self,
        *,
        encoder: Optional[PayloadEncoderPort] = None,
        host: str = LOOPBACK_HOST,
        connector: Optional[Connector] = None,
    ) -> None:
        self.encoder = encoder or DeflateEncoder()
        self.host = host
        self.connector = connector

    def __call__(self, timeout_ms: int) -> TcpSession:
        return TcpSession(
            timeout_ms,
            encoder=self.encoder,
            host=self.host,
            connector=self.connector,
        )


__all__ = ["TRANSITIONS", "TcpSession", "TcpSessionFactory", "advance"]
