"""Arduino serial package.

Host-side serial transport for microcontrollers running line-oriented sketches,
built on pyserial.
"""

__all__ = [
    "Arduino",
    "PortHandle",
    "PortState",
    "TimeoutMode",
    "TimeoutPolicy",
    "TokenScanner",
    "SerialConfig",
    "load_config",
    "SerialLinkError",
    "PortStateError",
    "ParseError",
    "ReadError",
    "WriteError",
]

from .arduino import Arduino
from .config import SerialConfig, load_config
from .errors import ParseError, PortStateError, ReadError, SerialLinkError, WriteError
from .port import PortHandle, PortState
from .scanner import TokenScanner
from .timeouts import TimeoutMode, TimeoutPolicy

__version__ = "0.1.0"
