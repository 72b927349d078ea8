from __future__ import annotations

import logging
from typing import Any, Optional

from .errors import WriteError
from .port import PortHandle
from .timeouts import TimeoutPolicy, pause

_logger = logging.getLogger(__name__)


class Writer:
    """
    Writes to the peer: whole payloads, paced chunks, or single characters.
    Each write switches the port to write mode first, which includes the settle pause.
    Features:
        - send_chunk_remainder: also send the final slice shorter than chunk_size (off by default)
        - send_chunk_size_trailer: end a chunked write with the character whose code is chunk_size (on by default)
    """

    def __init__(self, port: PortHandle, policy: TimeoutPolicy, *, encoding: str = "utf-8",
                 send_chunk_remainder: bool = False, send_chunk_size_trailer: bool = True) -> None:
        self._port = port
        self._policy = policy
        self._encoding = encoding
        self.send_chunk_remainder = send_chunk_remainder
        self.send_chunk_size_trailer = send_chunk_size_trailer

    def _encode(self, data: Any) -> bytes:
        if isinstance(data, (bytes, bytearray, memoryview)):
            return bytes(data)
        return str(data).encode(self._encoding)

    def _send(self, data: bytes) -> int:
        stream = self._port.output_stream
        try:
            written = stream.write(data)
            stream.flush()
        except OSError as ex:
            raise WriteError(f"serial write to {self._port.port_description} failed: {ex}") from ex
        return len(data) if written is None else written

    def write_all(self, payload: Any) -> int:
        """
        Write the whole payload in one write followed by one flush.
        Args:
            payload: Bytes-like data is sent as is, anything else as str(payload)
        Returns:
            int: Number of bytes written
        Raises:
            WriteError: If the provider fails
        """
        data = self._encode(payload)
        self._policy.before_write(self._port)
        return self._send(data)

    def write_chunked(self, data: str, chunk_size: int, delay_ms: int) -> int:
        """
        Write data gradually, chunk_size characters at a time, pausing delay_ms after each chunk.
        A final slice shorter than chunk_size is dropped unless send_chunk_remainder is set.
        Args:
            data (str): Text to send
            chunk_size (int): Characters per chunk
            delay_ms (int): Pause after each chunk in milliseconds
        Returns:
            int: Number of bytes written, trailer included
        Raises:
            ValueError: If chunk_size <= 0, delay_ms < 0, or a chunk or the trailer cannot be encoded
            WriteError: If the provider fails
        """
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be > 0, got {chunk_size}")
        if delay_ms < 0:
            raise ValueError(f"delay must be >= 0 ms, got {delay_ms}")

        full = len(data) - len(data) % chunk_size
        stop = len(data) if self.send_chunk_remainder else full
        if full < len(data) and not self.send_chunk_remainder:
            _logger.debug("dropping %d trailing character(s) shorter than chunk_size", len(data) - full)
        # Encode everything first so nothing is sent when any piece cannot be encoded.
        pieces = [self._encode(data[i:i + chunk_size]) for i in range(0, stop, chunk_size)]
        trailer = b""
        if self.send_chunk_size_trailer:
            if chunk_size > 0x10FFFF:
                raise ValueError(f"chunk_size {chunk_size} has no character to send as trailer")
            trailer = self._encode(chr(chunk_size))
        self._policy.before_write(self._port)

        total = 0
        for piece in pieces:
            total += self._send(piece)
            _logger.debug("chunk %r", piece)
            pause(delay_ms, self._policy.sleep)
        if trailer:
            total += self._send(trailer)
        return total

    def write_char(self, ch: str, delay_ms: Optional[int] = None) -> int:
        """
        Write a single character, optionally pausing afterwards.
        Args:
            ch (str): One character
            delay_ms (int, optional): Pause after the write in milliseconds
        Returns:
            int: Number of bytes written
        Raises:
            ValueError: If ch is not exactly one character or delay_ms < 0
            WriteError: If the provider fails
        """
        if not isinstance(ch, str) or len(ch) != 1:
            raise ValueError(f"expected a single character, got {ch!r}")
        if delay_ms is not None and delay_ms < 0:
            raise ValueError(f"delay must be >= 0 ms, got {delay_ms}")
        self._policy.before_write(self._port)
        written = self._send(self._encode(ch))
        if delay_ms is not None:
            pause(delay_ms, self._policy.sleep)
        return written
