from __future__ import annotations

import pytest

from execlink.domain.link import (
    AUTODISCOVER_FAILED,
    CANDIDATE_PORTS,
    NO_SCRIPT,
    DiscoveryResult,
    Outcome,
    PortStatus,
    PortStatusSnapshot,
    Script,
    SendReport,
    coerce_payload,
    parse_port,
)


def test_candidate_ports_fixed_order() -> None:
    assert CANDIDATE_PORTS == (8392, 8393, 8394, 8395, 8396, 8397)


@pytest.mark.parametrize("raw,expected", [("8392", 8392), (" 8397 ", 8397), (1, 1), (65535, 65535)])
def test_parse_port_accepts_valid_values(raw, expected) -> None:
    assert parse_port(raw) == expected


@pytest.mark.parametrize("raw", ["", "NULL", "-1", "0", "65536", "80.5", True])
def test_parse_port_rejects_invalid_values(raw) -> None:
    with pytest.raises(ValueError):
        parse_port(raw)


def test_coerce_payload_variants() -> None:
    assert coerce_payload(None) is NO_SCRIPT
    assert coerce_payload("") is NO_SCRIPT
    assert coerce_payload(b"") is NO_SCRIPT
    assert coerce_payload(NO_SCRIPT) is NO_SCRIPT
    assert coerce_payload("NULL") == Script(b"NULL")
    assert coerce_payload(bytearray(b"abc")) == Script(b"abc")
    assert coerce_payload("héllo").data == "héllo".encode("utf-8")
    with pytest.raises(TypeError):
        coerce_payload(12)  # type: ignore[arg-type]


def test_no_script_is_singleton_and_falsy() -> None:
    assert type(NO_SCRIPT)() is NO_SCRIPT
    assert not NO_SCRIPT
    assert repr(NO_SCRIPT) == "NO_SCRIPT"


def test_send_report_messages() -> None:
    sent = SendReport(port="8392", outcome=Outcome.SCRIPT_SENT, bytes_sent=17)
    assert sent.ok
    assert str(sent) == "Successfully executed script on port: 8392 (17 bytes)"

    bare = SendReport(port="8393", outcome=Outcome.CONNECTED_ONLY)
    assert bare.message == "Successfully connected to backend on port: 8393 (no script sent)"

    failed = SendReport(port="8394", outcome=Outcome.FAILED, error="Connection to port 8394 timed out")
    assert not failed.ok
    assert failed.message == "Failed to connect or send on port 8394: Connection to port 8394 timed out"


def test_discovery_result_host_value() -> None:
    assert DiscoveryResult(port=8395, attempted=(8392, 8393, 8394, 8395)).as_host_value() == "8395"
    missing = DiscoveryResult(port=None, attempted=CANDIDATE_PORTS)
    assert not missing.found
    assert missing.as_host_value() == AUTODISCOVER_FAILED


def test_port_status_snapshot_helpers() -> None:
    snap = PortStatusSnapshot(entries=(PortStatus(8392, False), PortStatus(8393, True)))
    assert snap.live_ports() == (8393,)
    assert snap.as_dict() == {"8392": False, "8393": True}
