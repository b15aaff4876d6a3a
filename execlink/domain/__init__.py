"""Domain package exports for link value objects."""

from .link import (
    AUTODISCOVER_FAILED,
    CANDIDATE_PORTS,
    LOOPBACK_HOST,
    NO_SCRIPT,
    PROBE_TIMEOUT_MS,
    SEND_TIMEOUT_MS,
    ConnectionAttempt,
    DiscoveryResult,
    Outcome,
    Payload,
    PortStatus,
    PortStatusSnapshot,
    Script,
    SendReport,
    SessionState,
    coerce_payload,
    parse_port,
)

__all__ = [
    "AUTODISCOVER_FAILED",
    "CANDIDATE_PORTS",
    "LOOPBACK_HOST",
    "NO_SCRIPT",
    "PROBE_TIMEOUT_MS",
    "SEND_TIMEOUT_MS",
    "ConnectionAttempt",
    "DiscoveryResult",
    "Outcome",
    "Payload",
    "PortStatus",
    "PortStatusSnapshot",
    "Script",
    "SendReport",
    "SessionState",
    "coerce_payload",
    "parse_port",
]
