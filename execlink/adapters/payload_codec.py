from __future__ import annotations

import logging
import zlib

from ..domain.ports import PayloadEncoderPort
from .link_errors import CompressionError

DEFAULT_LEVEL = zlib.Z_DEFAULT_COMPRESSION
CHUNK_SIZE = 64 * 1024


class DeflateEncoder(PayloadEncoderPort):
    """zlib-wrapped DEFLATE encoder for script payloads.

    Output is deterministic for identical input and level. Input is fed to the
    compressor in ``chunk_size`` slices so large scripts never need a second
    full-size copy.
    """

    def __init__(self, level: int = DEFAULT_LEVEL, chunk_size: int = CHUNK_SIZE) -> None:
        if not (level == zlib.Z_DEFAULT_COMPRESSION or 0 <= level <= 9):
            raise ValueError(f"Invalid compression level: {level}")
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive.")
        self.level = level
        self.chunk_size = chunk_size
        self._log = logging.getLogger(__name__)

    def encode(self, data: bytes) -> bytes:
        view = memoryview(data)
        try:
            compressor = zlib.compressobj(self.level)
            parts = [
                compressor.compress(view[offset : offset + self.chunk_size])
                for offset in range(0, len(view), self.chunk_size)
            ]
            parts.append(compressor.flush())
        except (zlib.error, MemoryError) as exc:
            self._log.error("Compression failed: %s", exc)
            raise CompressionError(f"Compression failed: {exc}", context="encode") from exc
        encoded = b"".join(parts)
        self._log.debug("Compressed %d bytes to %d bytes", len(view), len(encoded))
        return encoded


__all__ = ["CHUNK_SIZE", "DEFAULT_LEVEL", "DeflateEncoder"]
