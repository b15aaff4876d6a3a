"""Use case for delivering one script to the backend on an explicit port."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Union

from execlink.adapters.link_errors import LinkError
from execlink.domain.link import SEND_TIMEOUT_MS, Payload, SendReport, coerce_payload
from execlink.domain.ports import SessionFactory
from execlink.usecases.error_mapping import failure_code, map_link_error

_log = logging.getLogger(__name__)


@dataclass
class SendScript:
    """Use-case callable: compress-then-send through a fresh session.

    Attributes:
        session_factory: Builds a session bound to ``timeout_ms``.
        timeout_ms: Budget for connect, flush and close together.
    """

    session_factory: SessionFactory
    timeout_ms: int = SEND_TIMEOUT_MS

    async def __call__(
        self, payload: Union[Payload, str, bytes, None], port: Union[str, int]
    ) -> SendReport:
        """Send ``payload`` to ``port`` and return the terminal report.

        Args:
            payload: Script text/bytes, a payload variant, or ``None`` for a
                connect-only attempt.
            port: Target port as entered by the host.

        Returns:
            SendReport: Success or failure; exceptions never reach the caller.

        Side Effects:
            Opens and closes one loopback TCP connection.
        """
        session = self.session_factory(self.timeout_ms)
        try:
            report = await session.run(coerce_payload(payload), str(port))
        except (LinkError, OSError) as exc:
            _log.warning("Send on port %s failed (%s): %s", port, failure_code(exc), exc)
            return map_link_error(exc, port=port)
        return report


__all__ = ["SendScript"]
