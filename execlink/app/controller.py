"""Adapter and use-case wiring for the host collaborator.

This module owns lazy construction of the TCP adapters and use-case objects
that depend on values in :class:`execlink.viewmodels.settings_vm.SettingsVM`,
and exposes the three operations a host shell calls: ``send``,
``check_port_live`` and ``autodiscover``.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

from ..adapters.payload_codec import DeflateEncoder
from ..adapters.port_probe import TcpPortProbe
from ..adapters.tcp_session import Connector, TcpSessionFactory
from ..domain.link import Outcome, Payload, PortStatusSnapshot, SendReport
from ..domain.ports import PayloadEncoderPort
from ..usecases.autodiscover_port import AutodiscoverPort
from ..usecases.check_port_status import CheckPortStatus
from ..usecases.scan_port_status import ScanPortStatus
from ..usecases.send_script import SendScript
from ..viewmodels.attach_vm import AttachVM
from ..viewmodels.settings_vm import SettingsVM


class LinkController:
    """Create and cache link use-cases from settings state.

    Call chain:
        The host shell (CLI in ``execlink.app.main`` or a GUI) creates one
        instance and awaits its operations. Results are also pushed into the
        optional ``AttachVM`` so bound views refresh.
    """

    def __init__(
        self,
        settings_vm: SettingsVM,
        *,
        attach_vm: Optional[AttachVM] = None,
        encoder: Optional[PayloadEncoderPort] = None,
        connector: Optional[Connector] = None,
        send_timeout_ms: Optional[int] = None,
        probe_timeout_ms: Optional[int] = None,
    ) -> None:
        """Initialize controller with settings-backed lazy dependencies.

        Args:
            settings_vm: Settings state holding timeouts and the last port.
            attach_vm: Optional UI state updated after every operation.
            encoder: Payload compressor shared by all sessions.
            connector: Stream opener override, used by tests.
            send_timeout_ms: Session budget for this run only (not persisted).
            probe_timeout_ms: Liveness budget for this run only (not persisted).

        Raises:
            ValueError: If an override is not a positive integer.
        """
        for name, value in (("send_timeout_ms", send_timeout_ms), ("probe_timeout_ms", probe_timeout_ms)):
            if value is not None and value <= 0:
                raise ValueError(f"{name} must be positive.")
        self._send_timeout_ms = send_timeout_ms
        self._probe_timeout_ms = probe_timeout_ms
        self._log = logging.getLogger(__name__)
        self.settings_vm = settings_vm
        self.attach_vm = attach_vm
        self._encoder = encoder or DeflateEncoder()
        self._connector = connector
        self.uc_send: Optional[SendScript] = None
        self.uc_check: Optional[CheckPortStatus] = None
        self.uc_autodiscover: Optional[AutodiscoverPort] = None
        self.uc_scan: Optional[ScanPortStatus] = None

    def reset(self) -> None:
        """Drop cached use-cases so the next call rebuilds them from settings."""
        self.uc_send = None
        self.uc_check = None
        self.uc_autodiscover = None
        self.uc_scan = None

    def ensure_ready(self) -> None:
        """Build use-cases from current settings if not already cached."""
        if self.uc_send and self.uc_check and self.uc_autodiscover and self.uc_scan:
            return
        factory = TcpSessionFactory(encoder=self._encoder, connector=self._connector)
        send_timeout = self._send_timeout_ms or self.settings_vm.send_timeout_ms
        probe_timeout = self._probe_timeout_ms or self.settings_vm.probe_timeout_ms
        probe = TcpPortProbe(probe_timeout, connector=self._connector)
        self.uc_send = SendScript(session_factory=factory, timeout_ms=send_timeout)
        self.uc_autodiscover = AutodiscoverPort(session_factory=factory, timeout_ms=send_timeout)
        self.uc_check = CheckPortStatus(probe=probe)
        self.uc_scan = ScanPortStatus(check=self.uc_check)
        self._log.debug(
            "Link use-cases ready (send %d ms, probe %d ms)",
            send_timeout,
            probe_timeout,
        )

    # ==================================================================
    # Host operations
    # ==================================================================
    async def send(
        self,
        payload: Union[Payload, str, bytes, None],
        port: Union[str, int, None] = None,
    ) -> str:
        """Deliver ``payload`` and return the report text for display.

        ``port`` falls back to the last attached port from settings.
        """
        report = await self.send_report(payload, port)
        return report.message

    async def send_report(
        self,
        payload: Union[Payload, str, bytes, None],
        port: Union[str, int, None] = None,
    ) -> SendReport:
        target = str(port).strip() if port is not None else self.settings_vm.last_port
        if not target:
            report = SendReport(port="", outcome=Outcome.FAILED, error="no port selected")
        else:
            self.ensure_ready()
            report = await self.uc_send(payload, target)
            if report.ok:
                self._remember(report.port)
        if self.attach_vm is not None:
            self.attach_vm.apply_send_report(report)
        return report

    async def check_port_live(self, port: Union[str, int]) -> bool:
        self.ensure_ready()
        live = await self.uc_check(port)
        if self.attach_vm is not None:
            self.attach_vm.apply_port_check(str(port), live)
        return live

    async def autodiscover(self) -> str:
        """Return the first live candidate port, or the failure sentinel."""
        self.ensure_ready()
        result = await self.uc_autodiscover()
        if result.found:
            self._remember(str(result.port))
        if self.attach_vm is not None:
            self.attach_vm.apply_discovery(result)
        return result.as_host_value()

    async def port_status(self) -> PortStatusSnapshot:
        self.ensure_ready()
        snapshot = await self.uc_scan()
        if self.attach_vm is not None:
            self.attach_vm.apply_snapshot(snapshot)
        return snapshot

    def _remember(self, port: str) -> None:
        try:
            self.settings_vm.remember_port(port)
        except (OSError, ValueError) as exc:
            self._log.warning("Could not persist last port %s: %s", port, exc)


__all__ = ["LinkController"]
