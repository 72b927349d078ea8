from __future__ import annotations

import logging
import time
from typing import Generic, List, Optional, TypeVar

import serial

from .config import SerialConfig
from .notify import Notifier, log_notifier
from .port import PortHandle, PortState, SerialFactory
from .reader import Reader
from .timeouts import Sleep, TimeoutPolicy, pause
from .writer import Writer

_logger = logging.getLogger(__name__)

T = TypeVar("T")

OPEN_FAILURE_TITLE: str = "Error Connecting"


class Arduino(Generic[T]):
    """
    Serial connection to a microcontroller running a line-oriented sketch.

    Combines a PortHandle with the read and write primitives. ``T`` is the
    payload type accepted by write_all.

    Example:
        with Arduino("/dev/ttyACM0", 9600) as board:
            if board.open_connection():
                board.write_all("ping\\n")
                print(board.read(0))
    """

    def __init__(self, port_description: Optional[str] = None, baud_rate: Optional[int] = None, *,
                 config: Optional[SerialConfig] = None, notifier: Optional[Notifier] = None,
                 serial_factory: Optional[SerialFactory] = None, sleep: Sleep = time.sleep) -> None:
        """
        Initialize the connection; the port is bound now but only opened by open_connection().
        Args:
            port_description (str, optional): Device path or pyserial URL; may be set later
            baud_rate (int, optional): Baud rate, must match the sketch's Serial.begin()
            config (SerialConfig, optional): Pacing, timeout, and encoding settings
            notifier (callable, optional): notify(title, message) called when opening fails
            serial_factory (callable, optional): Builds an unopened pyserial instance
            sleep (callable): Sleep function used for every settle and pacing delay
        """
        self._config = config or SerialConfig()
        self._notifier = notifier or log_notifier
        self._sleep = sleep
        self._port = PortHandle(
            port_description if port_description is not None else self._config.port,
            baud_rate if baud_rate is not None else self._config.baudrate,
            serial_factory=serial_factory,
            encoding=self._config.encoding,
        )
        self._policy = TimeoutPolicy(
            read_timeout=self._config.read_timeout,
            write_timeout=self._config.write_timeout,
            write_settle_ms=self._config.write_settle_ms,
            sleep=sleep,
        )
        self._reader = Reader(self._port, self._policy)
        self._writer = Writer(
            self._port,
            self._policy,
            encoding=self._config.encoding,
            send_chunk_remainder=self._config.send_chunk_remainder,
            send_chunk_size_trailer=self._config.send_chunk_size_trailer,
        )

    @classmethod
    def from_config(cls, config: SerialConfig, **kwargs) -> "Arduino[T]":
        """Build a connection whose port and baud rate come from config."""
        return cls(config=config, **kwargs)

    def __enter__(self) -> "Arduino[T]":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close_connection()

    # --- Connection lifecycle ---
    def open_connection(self) -> bool:
        """
        Open the port and give the board time to come up.
        On failure the notifier is called once and the port stays closed.
        Returns:
            bool: True once the port is open and the settle delay has passed
        Raises:
            PortStateError: If no port description has been set
        """
        if self._port.open():
            pause(self._config.open_settle_ms, self._sleep)
            return True
        try:
            self._notifier(OPEN_FAILURE_TITLE, f"Could not open {self._port.port_description}. Try another port.")
        except Exception:
            _logger.exception("notifier raised while reporting open failure")
        return False

    def close_connection(self) -> None:
        self._port.close()

    def set_port_description(self, port_description: str) -> None:
        """Bind to another port. Close the current one first."""
        self._port.bind(port_description)

    def get_port_description(self) -> Optional[str]:
        return self._port.port_description

    def set_baud_rate(self, baud_rate: int) -> None:
        """Set the baud rate; use the same value as the sketch. Not allowed while open."""
        self._port.set_baud_rate(baud_rate)

    def get_baud_rate(self) -> Optional[int]:
        return self._port.baud_rate

    @property
    def state(self) -> PortState:
        return self._port.state

    @property
    def is_open(self) -> bool:
        return self._port.is_open

    @property
    def serial_port(self) -> Optional[serial.SerialBase]:
        """The underlying pyserial instance."""
        return self._port.serial

    # --- Reads ---
    def read(self, limit: Optional[int] = None) -> str:
        """
        Read whitespace-delimited tokens, one per line.
        Without a limit this runs until no more data arrives, which may be forever
        when no read timeout is configured.
        """
        return self._reader.read(limit)

    def read_array(self, limit: int) -> List[Optional[str]]:
        return self._reader.read_array(limit)

    def read_bytes(self, limit: int) -> bytes:
        return self._reader.read_bytes(limit)

    # --- Writes ---
    def write_all(self, payload: T) -> int:
        return self._writer.write_all(payload)

    def write_chunked(self, data: str, chunk_size: int, delay_ms: int) -> int:
        return self._writer.write_chunked(data, chunk_size, delay_ms)

    def write_char(self, ch: str, delay_ms: Optional[int] = None) -> int:
        return self._writer.write_char(ch, delay_ms)
