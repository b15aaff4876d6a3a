"""Autodiscovery use case: find the first candidate port the backend answers on.

Ports are tried one at a time in candidate order, each attempt running to
completion (success, error or timeout) before the next starts. With nothing
listening the worst case is ``len(ports) * timeout_ms``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Sequence

from execlink.adapters.link_errors import LinkError
from execlink.domain.link import CANDIDATE_PORTS, NO_SCRIPT, SEND_TIMEOUT_MS, DiscoveryResult
from execlink.domain.ports import SessionFactory
from execlink.usecases.error_mapping import failure_code


@dataclass
class AutodiscoverPort:
    """Use case: sequential connect-only scan over the candidate ports."""

    session_factory: SessionFactory
    ports: Sequence[int] = CANDIDATE_PORTS
    timeout_ms: int = SEND_TIMEOUT_MS

    def __post_init__(self) -> None:
        self.ports = tuple(self.ports)
        if not self.ports:
            raise ValueError("At least one candidate port is required.")
        self._log = logging.getLogger(__name__)

    async def __call__(self) -> DiscoveryResult:
        """Return the first port whose connect-only session succeeds.

        Returns:
            DiscoveryResult: ``port`` is ``None`` when every candidate failed;
            ``attempted`` lists the ports tried, in order.

        Side Effects:
            Opens and closes at most one loopback connection per candidate.
        """
        attempted: List[int] = []
        for port in self.ports:
            attempted.append(port)
            session = self.session_factory(self.timeout_ms)
            try:
                report = await session.run(NO_SCRIPT, str(port))
            except (LinkError, OSError) as exc:
                self._log.error("Auto-attach failed on port %s (%s): %s", port, failure_code(exc), exc)
                continue
            if report.ok:
                self._log.info("Auto-attached to backend on port %s", port)
                return DiscoveryResult(port=port, attempted=tuple(attempted))
            self._log.info("Auto-attach: port %s unavailable (%s)", port, report.error)
        self._log.warning("Failed to connect on all ports: %s", ", ".join(map(str, attempted)))
        return DiscoveryResult(port=None, attempted=tuple(attempted))


__all__ = ["AutodiscoverPort"]
