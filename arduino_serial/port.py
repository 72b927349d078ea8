from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Optional

import serial

from .errors import PortStateError
from .scanner import TokenScanner
from .timeouts import TimeoutMode

_logger = logging.getLogger(__name__)

SerialFactory = Callable[[str], serial.SerialBase]


class PortState(Enum):
    """
    Lifecycle of a PortHandle.
    UNBOUND: no port description yet
    BOUND: resolved to a port, not open
    OPEN: transport open, reads and writes allowed
    CLOSED: was open, now released (may be reopened or rebound)
    """
    UNBOUND = "unbound"
    BOUND = "bound"
    OPEN = "open"
    CLOSED = "closed"


def _default_factory(url: str) -> serial.SerialBase:
    # Plain device names resolve to serial.Serial, "loop://" and friends to their url handlers.
    return serial.serial_for_url(url, do_not_open=True)


class PortHandle:
    """
    Owns the pyserial instance for one port description.
    Rebinding the port or changing the baud rate is refused while the port is open.
    """

    _serial: Optional[serial.SerialBase]
    _scanner: Optional[TokenScanner]

    def __init__(self, port_description: Optional[str] = None, baud_rate: Optional[int] = None, *,
                 serial_factory: Optional[SerialFactory] = None, encoding: str = "utf-8") -> None:
        """
        Initialize a handle, binding it immediately when a port description is given.
        Args:
            port_description (str, optional): Device path (/dev/ttyACM0, COM5) or pyserial URL (loop://)
            baud_rate (int, optional): Baud rate, must match the peer sketch
            serial_factory (callable, optional): Builds an unopened pyserial instance from a description
            encoding (str): Text encoding used by the token scanner
        """
        self._factory = serial_factory or _default_factory
        self._encoding = encoding
        self._port_description: Optional[str] = None
        self._baud_rate: Optional[int] = None
        self._serial = None
        self._scanner = None
        self._state = PortState.UNBOUND
        if baud_rate is not None:
            self.set_baud_rate(baud_rate)
        if port_description is not None:
            self.bind(port_description)

    @property
    def state(self) -> PortState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state is PortState.OPEN

    @property
    def port_description(self) -> Optional[str]:
        return self._port_description

    @property
    def baud_rate(self) -> Optional[int]:
        return self._baud_rate

    @property
    def serial(self) -> Optional[serial.SerialBase]:
        """The underlying pyserial instance, or None while unbound."""
        return self._serial

    def bind(self, port_description: str) -> None:
        """
        Resolve the handle to a new port, discarding the previous pyserial instance.
        Args:
            port_description (str): Device path or pyserial URL
        Raises:
            ValueError: If the description is empty
            PortStateError: If the current port is open
        """
        if not port_description:
            raise ValueError("port description must not be empty")
        if self._state is PortState.OPEN:
            raise PortStateError(f"cannot rebind to {port_description}: {self._port_description} is open")
        ser = self._factory(port_description)
        if self._baud_rate is not None:
            ser.baudrate = self._baud_rate
        self._serial = ser
        self._scanner = None
        self._port_description = port_description
        self._state = PortState.BOUND
        _logger.debug("bound to %s", port_description)

    def set_baud_rate(self, rate: int) -> None:
        """
        Set the baud rate, applying it to the bound port right away.
        Args:
            rate (int): Positive baud rate
        Raises:
            ValueError: If rate is not a positive integer
            PortStateError: If the port is open
        """
        if isinstance(rate, bool) or not isinstance(rate, int) or rate <= 0:
            raise ValueError(f"invalid baud rate: {rate!r}")
        if self._state is PortState.OPEN:
            raise PortStateError(f"cannot change baud rate while {self._port_description} is open")
        self._baud_rate = rate
        if self._serial is not None:
            self._serial.baudrate = rate

    def open(self) -> bool:
        """
        Open the bound port.
        Returns:
            bool: True if the port is open, False if it is missing, busy, or misconfigured
        Raises:
            PortStateError: If no port has been bound
        """
        if self._serial is None:
            raise PortStateError("no port description set")
        if self._state is PortState.OPEN:
            return True
        try:
            self._serial.open()
        except (serial.SerialException, OSError, ValueError) as ex:
            _logger.warning("could not open %s: %s", self._port_description, ex)
            return False
        self._scanner = None
        self._state = PortState.OPEN
        _logger.info("opened %s at %s baud", self._port_description, self._serial.baudrate)
        return True

    def close(self) -> None:
        """
        Close the port. Safe to call when unbound or already closed.
        """
        if self._state is not PortState.OPEN:
            return
        try:
            self._serial.close()
        finally:
            self._scanner = None
            self._state = PortState.CLOSED
        _logger.info("closed %s", self._port_description)

    def set_timeouts(self, mode: TimeoutMode, read_timeout: Optional[float], write_timeout: Optional[float]) -> None:
        """
        Configure the provider's timeouts for the next operation.
        Args:
            mode (TimeoutMode): Mode being entered, for tracing
            read_timeout (float, optional): pyserial read timeout; None blocks
            write_timeout (float, optional): pyserial write timeout; None blocks
        Raises:
            PortStateError: If the port is not open
        """
        ser = self._require_open()
        ser.timeout = read_timeout
        ser.write_timeout = write_timeout
        _logger.debug("%s: read_timeout=%s write_timeout=%s", mode.value, read_timeout, write_timeout)

    @property
    def input_stream(self) -> serial.SerialBase:
        return self._require_open()

    @property
    def output_stream(self) -> serial.SerialBase:
        return self._require_open()

    @property
    def scanner(self) -> TokenScanner:
        """Token scanner over the input stream; lookahead survives until the port is rebound, reopened or closed."""
        if self._scanner is None:
            self._scanner = TokenScanner(self.input_stream, encoding=self._encoding)
        return self._scanner

    def _require_open(self) -> serial.SerialBase:
        if self._state is not PortState.OPEN:
            raise PortStateError(f"port {self._port_description or '<unbound>'} is not open")
        return self._serial
