from __future__ import annotations

import logging
from typing import List, Optional

from .port import PortHandle
from .timeouts import TimeoutPolicy

_logger = logging.getLogger(__name__)


def _check_limit(limit: int) -> None:
    if limit < 0:
        raise ValueError(f"limit must be >= 0, got {limit}")


class Reader:
    """
    Token reads from the peer.

    Every variant switches the port to semi-blocking read mode and then pulls
    whitespace-delimited tokens. The limited variants keep reading while
    ``count <= limit``, so up to ``limit + 1`` tokens are consumed; existing
    sketches rely on that count.
    """

    def __init__(self, port: PortHandle, policy: TimeoutPolicy) -> None:
        self._port = port
        self._policy = policy

    def read(self, limit: Optional[int] = None) -> str:
        """
        Read tokens, each followed by a newline.
        Args:
            limit (int, optional): Stop after limit + 1 tokens; None drains until the stream is idle
        Returns:
            str: The tokens read, newline terminated
        """
        if limit is not None:
            _check_limit(limit)
        self._policy.before_read(self._port)
        scanner = self._port.scanner
        parts: List[str] = []
        while (limit is None or len(parts) <= limit) and scanner.has_next():
            parts.append(scanner.next())
        _logger.debug("read %d token(s)", len(parts))
        return "".join(f"{p}\n" for p in parts)

    def read_array(self, limit: int) -> List[Optional[str]]:
        """
        Read up to limit + 1 tokens into fixed slots.
        Args:
            limit (int): Index of the last slot
        Returns:
            list: limit + 1 slots; None marks a slot the stream went idle before filling
        """
        _check_limit(limit)
        self._policy.before_read(self._port)
        scanner = self._port.scanner
        slots: List[Optional[str]] = [None] * (limit + 1)
        count = 0
        while count <= limit and scanner.has_next():
            slots[count] = scanner.next()
            count += 1
        if count <= limit:
            _logger.debug("stream idle after %d of %d slot(s)", count, limit + 1)
        return slots

    def read_bytes(self, limit: int) -> bytes:
        """
        Read up to limit + 1 tokens, each parsed as a decimal byte.
        Args:
            limit (int): Index of the last byte
        Returns:
            bytes: limit + 1 bytes; slots not filled before the stream went idle are zero
        Raises:
            ParseError: If a token is not a signed byte (-128..127). The bad token is
                consumed, so the next read starts after it rather than retrying it.
        """
        _check_limit(limit)
        self._policy.before_read(self._port)
        scanner = self._port.scanner
        out = bytearray(limit + 1)
        count = 0
        while count <= limit and scanner.has_next():
            out[count] = scanner.next_byte()
            count += 1
        return bytes(out)
