from __future__ import annotations

import re
from typing import Final, Protocol

from .errors import ParseError, ReadError

WHITESPACE: Final[bytes] = b" \t\n\r\x0b\x0c"

_BYTE_TOKEN = re.compile(r"[+-]?[0-9]+")


class ByteStream(Protocol):
    in_waiting: int

    def read(self, size: int = 1) -> bytes: ...


class TokenScanner:
    """
    Buffered whitespace tokenizer over a serial input stream.
    Whether another token is available is an explicit poll (has_next), which blocks
    according to the stream's current read timeout. Bytes read past the last
    returned token stay buffered for the next call.
    """

    def __init__(self, stream: ByteStream, encoding: str = "utf-8") -> None:
        self._stream = stream
        self._encoding = encoding
        self._buf = bytearray()

    @property
    def buffered(self) -> bytes:
        return bytes(self._buf)

    def reset(self) -> None:
        self._buf.clear()

    def _skip_whitespace(self) -> None:
        i = 0
        while i < len(self._buf) and self._buf[i] in WHITESPACE:
            i += 1
        if i:
            del self._buf[:i]

    def _token_end(self) -> int:
        for i, b in enumerate(self._buf):
            if b in WHITESPACE:
                return i
        return -1

    def _fill(self) -> bool:
        """
        Read at least one byte (waiting per the read timeout) plus whatever else is already waiting.
        Returns:
            bool: False if the read timed out with nothing received
        Raises:
            ReadError: If the provider fails
        """
        try:
            chunk = self._stream.read(1)
            if not chunk:
                return False
            waiting = self._stream.in_waiting
            if waiting:
                chunk += self._stream.read(waiting)
        except OSError as ex:
            raise ReadError(f"serial read failed: {ex}") from ex
        self._buf += chunk
        return True

    def has_next(self) -> bool:
        """
        Poll for a token. A partial token is complete once the stream goes idle.
        Returns:
            bool: True if next() will return a token without reading
        """
        while True:
            self._skip_whitespace()
            if self._buf and self._token_end() >= 0:
                return True
            if not self._fill():
                return bool(self._buf)

    def next(self) -> str:
        """
        Consume and decode the next token.
        Raises:
            ReadError: If no token is available
        """
        if not self.has_next():
            raise ReadError("no token available")
        end = self._token_end()
        if end < 0:
            end = len(self._buf)
        token = bytes(self._buf[:end])
        del self._buf[:end]
        return token.decode(self._encoding, errors="replace")

    def next_byte(self) -> int:
        """
        Consume the next token as a decimal byte value.
        Accepts -128..127, the range of a signed byte; negative values map to their two's complement.
        The token is consumed even when it does not parse.
        Raises:
            ParseError: If the token is not an integer in range
        """
        token = self.next()
        if not _BYTE_TOKEN.fullmatch(token):
            raise ParseError(token)
        value = int(token, 10)
        if not -128 <= value <= 127:
            raise ParseError(token, f"token {token!r} is out of byte range")
        return value & 0xFF
