from __future__ import annotations

"""Domain value objects for loopback links to the script-execution backend."""

import enum
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

LOOPBACK_HOST = "127.0.0.1"

CANDIDATE_PORTS: Tuple[int, ...] = (8392, 8393, 8394, 8395, 8396, 8397)
"""Autodiscovery search space; order is probe priority and tie-break."""

SEND_TIMEOUT_MS = 3000
PROBE_TIMEOUT_MS = 1000

AUTODISCOVER_FAILED = "Failed to connect on all ports"
"""Sentinel returned by autodiscovery when no candidate port answers."""


def parse_port(value: Union[str, int]) -> int:
    """Parse host-supplied port text into a TCP port number.

    Raises:
        ValueError: If the value is not an integer in ``1..65535``.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid port: {value!r}")
    if isinstance(value, int):
        port = value
    else:
        text = str(value).strip()
        if not text.isdigit():
            raise ValueError(f"Invalid port: {value!r}")
        port = int(text)
    if not 0 < port < 65536:
        raise ValueError(f"Port out of range: {port}")
    return port


@dataclass(frozen=True)
class Script:
    """Payload variant carrying script bytes to deliver."""

    data: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.data, (bytes, bytearray, memoryview)):
            raise TypeError("Script data must be bytes-like.")
        object.__setattr__(self, "data", bytes(self.data))

    @classmethod
    def from_text(cls, text: str, encoding: str = "utf-8") -> "Script":
        return cls(text.encode(encoding))

    def __len__(self) -> int:
        return len(self.data)


class _NoScript:
    """Payload variant for connect-only attempts (no bytes written)."""

    _instance: Optional["_NoScript"] = None

    def __new__(cls) -> "_NoScript":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NO_SCRIPT"

    def __bool__(self) -> bool:
        return False


NO_SCRIPT = _NoScript()

Payload = Union[Script, _NoScript]


def coerce_payload(value: Union[Payload, str, bytes, None]) -> Payload:
    """Map host-side values onto the payload variants.

    ``None`` and empty text/bytes become ``NO_SCRIPT``; text is UTF-8 encoded.
    """
    if isinstance(value, (Script, _NoScript)):
        return value
    if value is None:
        return NO_SCRIPT
    if isinstance(value, str):
        return Script.from_text(value) if value else NO_SCRIPT
    if isinstance(value, (bytes, bytearray, memoryview)):
        return Script(bytes(value)) if len(value) else NO_SCRIPT
    raise TypeError(f"Unsupported payload type: {type(value).__name__}")


class SessionState(str, enum.Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    SENDING = "sending"
    SENT = "sent"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in (SessionState.SENT, SessionState.FAILED)


class Outcome(str, enum.Enum):
    SCRIPT_SENT = "script_sent"
    CONNECTED_ONLY = "connected_only"
    FAILED = "failed"


@dataclass
class ConnectionAttempt:
    """Ephemeral record of one socket lifecycle."""

    port: int
    timeout_ms: int
    state: SessionState = SessionState.IDLE
    history: List[SessionState] = field(default_factory=lambda: [SessionState.IDLE])
    """Every state visited, in order, starting with ``IDLE``."""


@dataclass(frozen=True)
class SendReport:
    """Terminal outcome of a socket session, rendered for the host."""

    port: str
    outcome: Outcome
    bytes_sent: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome is not Outcome.FAILED

    @property
    def message(self) -> str:
        if self.outcome is Outcome.SCRIPT_SENT:
            return f"Successfully executed script on port: {self.port} ({self.bytes_sent} bytes)"
        if self.outcome is Outcome.CONNECTED_ONLY:
            return f"Successfully connected to backend on port: {self.port} (no script sent)"
        if not self.port:
            return f"Failed to connect or send: {self.error}"
        return f"Failed to connect or send on port {self.port}: {self.error}"

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class DiscoveryResult:
    """Autodiscovery outcome: the first live port and the ports tried."""

    port: Optional[int]
    attempted: Tuple[int, ...] = ()

    @property
    def found(self) -> bool:
        return self.port is not None

    def as_host_value(self) -> str:
        return str(self.port) if self.port is not None else AUTODISCOVER_FAILED


@dataclass(frozen=True)
class PortStatus:
    port: int
    live: bool


@dataclass(frozen=True)
class PortStatusSnapshot:
    """Liveness of every candidate port, in candidate order."""

    entries: Tuple[PortStatus, ...] = ()

    def live_ports(self) -> Tuple[int, ...]:
        return tuple(entry.port for entry in self.entries if entry.live)

    def as_dict(self) -> dict:
        return {str(entry.port): entry.live for entry in self.entries}
