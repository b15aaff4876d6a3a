from __future__ import annotations

from typing import Callable, Dict, Optional

from ..domain.link import (
    AUTODISCOVER_FAILED,
    CANDIDATE_PORTS,
    DiscoveryResult,
    PortStatusSnapshot,
    SendReport,
    parse_port,
)
from .status_format import attach_label, port_label


class AttachVM:
    """UI state for the backend link: attached port, status text, port flags.

    Holds no sockets; the controller feeds it use-case results and views
    read from it.
    """

    def __init__(
        self,
        *,
        on_send: Optional[Callable[[str, Optional[str]], None]] = None,
        on_check_port: Optional[Callable[[str], None]] = None,
        on_autodiscover: Optional[Callable[[], None]] = None,
        on_port_attached: Optional[Callable[[str], None]] = None,
        on_changed: Optional[Callable[["AttachVM"], None]] = None,
    ) -> None:
        self.on_send = on_send
        self.on_check_port = on_check_port
        self.on_autodiscover = on_autodiscover
        self.on_port_attached = on_port_attached
        self.on_changed = on_changed

        self.attached_port: Optional[str] = None
        self.status_message: str = attach_label(None)
        self.port_flags: Dict[str, Optional[bool]] = {str(p): None for p in CANDIDATE_PORTS}
        self.last_report: Optional[SendReport] = None

    # ---- Commands (view -> VM) ----
    def cmd_send(self, script: str, port: Optional[str] = None) -> None:
        if self.on_send:
            self.on_send(script, port or self.attached_port)

    def cmd_check_port(self, port: str) -> None:
        if self.on_check_port:
            self.on_check_port(port)

    def cmd_autodiscover(self) -> None:
        self.status_message = "Searching for backend..."
        self._notify()
        if self.on_autodiscover:
            self.on_autodiscover()

    # ---- Results (controller -> VM) ----
    def apply_send_report(self, report: SendReport) -> None:
        self.last_report = report
        self.status_message = report.message
        if report.ok:
            self._attach(_port_key(report.port))
        self._notify()

    def apply_discovery(self, result: DiscoveryResult) -> None:
        self.status_message = attach_label(str(result.port)) if result.found else AUTODISCOVER_FAILED
        if result.found:
            self._attach(str(result.port))
        for port in result.attempted:
            if str(port) != self.attached_port:
                self.port_flags[str(port)] = False
        self._notify()

    def apply_port_check(self, port: str, live: bool) -> None:
        self.port_flags[_port_key(port)] = bool(live)
        self._notify()

    def apply_snapshot(self, snapshot: PortStatusSnapshot) -> None:
        for entry in snapshot.entries:
            self.port_flags[str(entry.port)] = entry.live
        self._notify()

    # ---- Derived view data ----
    def port_rows(self) -> list:
        return [
            {"port": port, "label": port_label(live), "attached": port == self.attached_port}
            for port, live in self.port_flags.items()
        ]

    def _attach(self, port: str) -> None:
        self.attached_port = port
        self.port_flags[port] = True
        if self.on_port_attached:
            self.on_port_attached(port)

    def _notify(self) -> None:
        if self.on_changed:
            self.on_changed(self)


def _port_key(port) -> str:
    """Canonical flag key: ``"043875"`` and ``43875`` map to ``"43875"``."""
    try:
        return str(parse_port(port))
    except ValueError:
        return str(port).strip()
