"""Use case for building a liveness snapshot of every candidate port.

Probes run concurrently as tasks on the caller's event loop; each owns its own
socket and shares nothing with the others.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Sequence

from execlink.domain.link import CANDIDATE_PORTS, PortStatus, PortStatusSnapshot
from execlink.usecases.check_port_status import CheckPortStatus


@dataclass
class ScanPortStatus:
    check: CheckPortStatus
    ports: Sequence[int] = CANDIDATE_PORTS

    async def __call__(self) -> PortStatusSnapshot:
        """Probe all ports and return their status in candidate order."""
        ports = tuple(self.ports)
        results = await asyncio.gather(*(self.check(port) for port in ports))
        return PortStatusSnapshot(
            entries=tuple(PortStatus(port=port, live=live) for port, live in zip(ports, results))
        )


__all__ = ["ScanPortStatus"]
