"""Label helpers for port indicators and attach state.

Call context:
    ``AttachVM`` and the command-line host use these to render link state.
"""

from __future__ import annotations

from typing import Optional

from ..domain.link import PortStatusSnapshot


def port_label(live: Optional[bool]) -> str:
    """Return indicator text for one port's liveness flag."""
    if live is None:
        return "Unknown"
    return "Live" if live else "Closed"


def attach_label(port: Optional[str]) -> str:
    """Describe the current attach state."""
    if not port:
        return "Not attached"
    return f"Attached on port {port}"


def snapshot_lines(snapshot: PortStatusSnapshot) -> list:
    """Render one ``<port>  <label>`` line per entry."""
    return [f"{entry.port}  {port_label(entry.live)}" for entry in snapshot.entries]


__all__ = ["attach_label", "port_label", "snapshot_lines"]
