from __future__ import annotations

from typing import List, Tuple

import pytest

from execlink.adapters.link_errors import LinkConnectError
from execlink.adapters.tcp_session import TcpSessionFactory
from execlink.domain.link import (
    AUTODISCOVER_FAILED,
    CANDIDATE_PORTS,
    NO_SCRIPT,
    Outcome,
    SendReport,
)
from execlink.usecases.autodiscover_port import AutodiscoverPort


class _ScriptedSessions:
    """Session factory stub: ports in ``live`` succeed, others fail."""

    def __init__(self, live=(), raising=()) -> None:
        self.live = {str(p) for p in live}
        self.raising = {str(p) for p in raising}
        self.calls: List[Tuple[object, str, int]] = []

    def __call__(self, timeout_ms: int):
        factory = self

        class _Session:
            async def run(self, payload, port):
                factory.calls.append((payload, port, timeout_ms))
                if port in factory.raising:
                    raise LinkConnectError("boom", port=int(port))
                if port in factory.live:
                    return SendReport(port=port, outcome=Outcome.CONNECTED_ONLY)
                return SendReport(port=port, outcome=Outcome.FAILED, error="refused")

        return _Session()


@pytest.mark.asyncio
async def test_fourth_port_live_stops_scan() -> None:
    sessions = _ScriptedSessions(live=[8395])
    result = await AutodiscoverPort(session_factory=sessions)()

    assert result.port == 8395
    assert result.as_host_value() == "8395"
    assert [port for _, port, _ in sessions.calls] == ["8392", "8393", "8394", "8395"]
    assert all(payload is NO_SCRIPT for payload, _, _ in sessions.calls)
    assert all(timeout == 3000 for _, _, timeout in sessions.calls)


@pytest.mark.asyncio
async def test_no_live_port_returns_sentinel_after_all_candidates() -> None:
    sessions = _ScriptedSessions()
    result = await AutodiscoverPort(session_factory=sessions)()

    assert result.port is None
    assert result.as_host_value() == AUTODISCOVER_FAILED
    assert result.attempted == CANDIDATE_PORTS
    assert [port for _, port, _ in sessions.calls] == [str(p) for p in CANDIDATE_PORTS]


@pytest.mark.asyncio
async def test_first_responder_wins_when_several_live() -> None:
    sessions = _ScriptedSessions(live=[8393, 8396])
    result = await AutodiscoverPort(session_factory=sessions)()
    assert result.port == 8393
    assert len(sessions.calls) == 2


@pytest.mark.asyncio
async def test_raising_session_is_skipped() -> None:
    sessions = _ScriptedSessions(live=[8393], raising=[8392])
    result = await AutodiscoverPort(session_factory=sessions)()
    assert result.port == 8393


def test_empty_port_list_rejected() -> None:
    with pytest.raises(ValueError):
        AutodiscoverPort(session_factory=_ScriptedSessions(), ports=())


@pytest.mark.asyncio
async def test_scan_against_real_listener(backend, closed_port) -> None:
    uc = AutodiscoverPort(
        session_factory=TcpSessionFactory(),
        ports=(closed_port, backend.port),
        timeout_ms=1000,
    )
    result = await uc()
    assert result.port == backend.port
    assert result.attempted == (closed_port, backend.port)
    assert await backend.wait_payload() == b""
    assert backend.connections == 1
