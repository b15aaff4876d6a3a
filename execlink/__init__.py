"""Loopback link to a local script-execution backend.

Discovers the backend by probing a fixed set of loopback ports and delivers
DEFLATE-compressed scripts to it over a raw TCP socket, one fresh connection
per operation.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
