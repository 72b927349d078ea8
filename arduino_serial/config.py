from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional, Union

from .timeouts import DEFAULT_WRITE_SETTLE_MS

_logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH: str = "arduino_serial.toml"
DEFAULT_OPEN_SETTLE_MS: int = 100


@dataclass(frozen=True)
class SerialConfig:
    """
    Connection and pacing settings.
    Attributes:
        port: Device path or pyserial URL
        baudrate: Baud rate; None leaves the provider default
        encoding: Text encoding for tokens and written text
        read_timeout: Wait for the first byte of a read in seconds; None blocks
        write_timeout: pyserial write timeout in seconds; None blocks
        open_settle_ms: Pause after a successful open
        write_settle_ms: Pause after switching to write mode
        send_chunk_remainder: Send the short final slice of a chunked write
        send_chunk_size_trailer: Finish a chunked write with chr(chunk_size)
    """
    port: Optional[str] = None
    baudrate: Optional[int] = None
    encoding: str = "utf-8"
    read_timeout: Optional[float] = None
    write_timeout: Optional[float] = None
    open_settle_ms: int = DEFAULT_OPEN_SETTLE_MS
    write_settle_ms: int = DEFAULT_WRITE_SETTLE_MS
    send_chunk_remainder: bool = False
    send_chunk_size_trailer: bool = True

    def __post_init__(self) -> None:
        for key in ("read_timeout", "write_timeout", "open_settle_ms", "write_settle_ms"):
            value = getattr(self, key)
            if value is not None and value < 0:
                raise ValueError(f"{key} must be >= 0, got {value!r}")
        if self.baudrate is not None and self.baudrate <= 0:
            raise ValueError(f"baudrate must be > 0, got {self.baudrate!r}")

    def replace(self, **changes: Any) -> "SerialConfig":
        """Return a copy with the given fields changed; None values are ignored."""
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values.update({k: v for k, v in changes.items() if v is not None})
        return SerialConfig(**values)


def _get(section: dict, key: str, kind: type, default: Any) -> Any:
    if key not in section:
        return default
    value = section[key]
    if kind is float and isinstance(value, int) and not isinstance(value, bool):
        value = float(value)
    if isinstance(value, bool) is not (kind is bool) or not isinstance(value, kind):
        raise ValueError(f"{key} must be {kind.__name__}, got {value!r}")
    return value


def config_from_dict(config: dict) -> SerialConfig:
    """
    Build a SerialConfig from parsed TOML tables ([serial], [pacing], [chunking]).
    Raises:
        ValueError: If a value has the wrong type or is out of range
    """
    serial_cfg = config.get("serial", {})
    pacing_cfg = config.get("pacing", {})
    chunk_cfg = config.get("chunking", {})
    d = SerialConfig()
    return SerialConfig(
        port=_get(serial_cfg, "port", str, d.port),
        baudrate=_get(serial_cfg, "baudrate", int, d.baudrate),
        encoding=_get(serial_cfg, "encoding", str, d.encoding),
        read_timeout=_get(serial_cfg, "read_timeout", float, d.read_timeout),
        write_timeout=_get(serial_cfg, "write_timeout", float, d.write_timeout),
        open_settle_ms=_get(pacing_cfg, "open_settle_ms", int, d.open_settle_ms),
        write_settle_ms=_get(pacing_cfg, "write_settle_ms", int, d.write_settle_ms),
        send_chunk_remainder=_get(chunk_cfg, "send_remainder", bool, d.send_chunk_remainder),
        send_chunk_size_trailer=_get(chunk_cfg, "send_size_trailer", bool, d.send_chunk_size_trailer),
    )


def load_config(config_path: Union[str, Path] = DEFAULT_CONFIG_PATH) -> SerialConfig:
    """
    Load configuration from a TOML file.
    Args:
        config_path: Path to the TOML file
    Returns:
        SerialConfig: Parsed settings, or defaults if the file does not exist
    Raises:
        ValueError: If the file is not valid TOML or holds a value of the wrong type
    """
    path = Path(config_path)
    try:
        with path.open("rb") as f:
            raw = tomllib.load(f)
    except FileNotFoundError:
        _logger.warning("config file %s not found, using defaults", path)
        return SerialConfig()
    except tomllib.TOMLDecodeError as ex:
        raise ValueError(f"failed to parse {path}: {ex}") from ex
    return config_from_dict(raw)
