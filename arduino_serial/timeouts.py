from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Callable, Optional

if TYPE_CHECKING:
    from .port import PortHandle

_logger = logging.getLogger(__name__)

DEFAULT_WRITE_SETTLE_MS: int = 5

Sleep = Callable[[float], None]


class TimeoutMode(Enum):
    """
    Timeout mode applied to the port right before an operation.
    SEMI_BLOCKING_READ: block until at least one byte is available, then take only what is waiting
    SCANNER_WRITE: blocking reads, writes bounded only by the write timeout
    """
    SEMI_BLOCKING_READ = "semi-blocking-read"
    SCANNER_WRITE = "scanner-write"


def pause(delay_ms: int, sleep: Sleep = time.sleep) -> None:
    """
    Sleep for a pacing delay. An interrupted sleep is logged and treated as complete.
    time.sleep retries after signals (PEP 475) and never raises InterruptedError, so
    that path is only reached with an injected sleep function that raises it.
    Args:
        delay_ms (int): Delay in milliseconds; 0 returns immediately
        sleep (callable): Sleep function taking seconds
    Raises:
        ValueError: If delay_ms is negative
    """
    if delay_ms < 0:
        raise ValueError(f"delay must be >= 0 ms, got {delay_ms}")
    if delay_ms == 0:
        return
    try:
        sleep(delay_ms / 1000.0)
    except InterruptedError as ex:
        _logger.warning("pacing delay of %d ms interrupted (%s); continuing", delay_ms, ex)


@dataclass
class TimeoutPolicy:
    """
    Per-call timeout configuration.
    Attributes:
        read_timeout: Wait for the first byte of a read; None blocks until data arrives
        write_timeout: pyserial write timeout; None blocks
        write_settle_ms: Pause after switching to write mode, before any byte is sent
        sleep: Sleep function used for the settle pause
    """
    read_timeout: Optional[float] = None
    write_timeout: Optional[float] = None
    write_settle_ms: int = DEFAULT_WRITE_SETTLE_MS
    sleep: Sleep = field(default=time.sleep, repr=False)

    def before_read(self, port: PortHandle) -> None:
        port.set_timeouts(TimeoutMode.SEMI_BLOCKING_READ, self.read_timeout, None)

    def before_write(self, port: PortHandle) -> None:
        # Freshly reset boards drop bytes sent right after the mode switch.
        port.set_timeouts(TimeoutMode.SCANNER_WRITE, None, self.write_timeout)
        pause(self.write_settle_ms, self.sleep)
