"""Adapter package for loopback I/O implementations.

Purpose:
    Collect concrete implementations for domain ports (TCP sessions, liveness
    probes, payload compression, settings persistence) used by use cases.

Dependencies:
    Submodules depend on ``asyncio`` streams, ``zlib``, filesystem APIs, and
    domain protocol definitions.

Call context:
    Imported by ``execlink.app.controller`` for runtime wiring and by tests
    against real loopback listeners.
"""
