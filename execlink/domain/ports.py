from __future__ import annotations
from typing import Callable, Optional, Protocol

from .link import Payload, SendReport


# ---- Ports (Hexagonal boundaries) ----
class PayloadEncoderPort(Protocol):
    """Compress payload bytes before they go on the wire."""

    def encode(self, data: bytes) -> bytes: ...


class SessionPort(Protocol):
    """Run one connect-and-optionally-send exchange against a loopback port."""

    async def run(self, payload: Payload, port: str) -> SendReport: ...


class ProbePort(Protocol):
    """Boolean liveness check for a single loopback port."""

    async def is_live(self, port: str) -> bool: ...


class StoragePort(Protocol):
    """Persistence for user settings."""

    def save_user_settings(self, payload: dict) -> None: ...
    def load_user_settings(self) -> Optional[dict]: ...


SessionFactory = Callable[[int], SessionPort]
"""Build a session bound to a timeout budget in milliseconds."""
