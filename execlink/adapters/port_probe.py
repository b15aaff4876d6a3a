from __future__ import annotations

import asyncio
import logging
from typing import Optional

from ..domain.link import LOOPBACK_HOST, PROBE_TIMEOUT_MS, parse_port
from ..domain.ports import ProbePort
from .link_errors import LinkTimeoutError, os_error_text
from .tcp_session import Connector
from .timeout_race import dispose_abandoned, race_timeout


class TcpPortProbe(ProbePort):
    """Connect-then-disconnect liveness check against a loopback port.

    No bytes are exchanged. The listening peer sees a bare connect followed by
    a close.
    """

    def __init__(
        self,
        timeout_ms: int = PROBE_TIMEOUT_MS,
        *,
        host: str = LOOPBACK_HOST,
        connector: Optional[Connector] = None,
    ) -> None:
        if timeout_ms <= 0:
            raise ValueError("timeout_ms must be positive.")
        self.timeout_ms = timeout_ms
        self.host = host
        self._connect: Connector = connector or asyncio.open_connection
        self._log = logging.getLogger(__name__)

    async def is_live(self, port: str) -> bool:
        try:
            port_num = parse_port(port)
        except ValueError as exc:
            self._log.debug("Port check skipped: %s", exc)
            return False
        try:
            _reader, writer = await race_timeout(
                self._connect(self.host, port_num),
                self.timeout_ms,
                f"Port check on {port_num} timed out",
                port=port_num,
            )
        except LinkTimeoutError as exc:
            dispose_abandoned(exc.abandoned)
            self._log.debug("%s", exc)
            return False
        except OSError as exc:
            self._log.debug("Port %s not accepting connections: %s", port_num, os_error_text(exc))
            return False
        writer.transport.abort()
        self._log.debug("Port %s is accepting connections", port_num)
        return True


__all__ = ["TcpPortProbe"]
