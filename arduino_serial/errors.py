from __future__ import annotations

from typing import Optional


class SerialLinkError(Exception):
    """Base class for errors raised by arduino_serial."""


class PortStateError(SerialLinkError):
    """Raised when a port operation is not valid in the handle's current state."""


class ParseError(SerialLinkError, ValueError):
    """
    Raised when a token read in byte mode is not a valid byte value.
    Attributes:
        token (str): The offending token, already consumed from the stream
    """

    def __init__(self, token: str, message: Optional[str] = None) -> None:
        self.token = token
        super().__init__(message or f"token {token!r} is not a byte value")


class ReadError(SerialLinkError, OSError):
    """Raised when the serial provider fails during a read."""


class WriteError(SerialLinkError, OSError):
    """Raised when the serial provider fails during a write."""
