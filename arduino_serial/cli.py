from __future__ import annotations

import logging
from typing import Optional

import click
from serial.tools import list_ports  # type: ignore

from .arduino import Arduino
from .config import DEFAULT_CONFIG_PATH, SerialConfig, load_config
from .errors import SerialLinkError


def _notify_stderr(title: str, message: str) -> None:
    click.echo(f"{title}: {message}", err=True)


def _connect(config: SerialConfig) -> Arduino[str]:
    if not config.port:
        raise click.ClickException("No port given. Use -p/--port or set [serial] port in the config file.")
    board: Arduino[str] = Arduino.from_config(config, notifier=_notify_stderr)
    if not board.open_connection():
        raise click.ClickException(f"Unable to open {config.port}")
    return board


@click.group()
@click.option("-p", "--port", help="Serial port (e.g., /dev/ttyACM0, COM3, loop://)")
@click.option("-b", "--baudrate", type=int, help="Baud rate; must match the sketch")
@click.option("-c", "--config", "config_path", type=click.Path(dir_okay=False), default=DEFAULT_CONFIG_PATH,
              show_default=True, help="TOML config file")
@click.option("-v", "--verbose", is_flag=True, help="Log debug output")
@click.pass_context
def main(ctx: click.Context, port: Optional[str], baudrate: Optional[int], config_path: str, verbose: bool) -> None:
    """Talk to a microcontroller over a serial port.

    Examples:

      # Read one line worth of tokens, giving up after 2 idle seconds
      arduino-serial -p /dev/ttyACM0 -b 9600 read --limit 0 --idle-timeout 2

      # Send a string 4 characters at a time, 50 ms apart
      arduino-serial -p COM3 write "hello world!" --chunk-size 4 --delay 50
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    try:
        ctx.obj = load_config(config_path).replace(port=port, baudrate=baudrate)
    except ValueError as e:
        raise click.ClickException(str(e))


@main.command()
def ports() -> None:
    """List serial ports found on this machine."""
    found = sorted(list_ports.comports(), key=lambda p: p.device)
    if not found:
        click.echo("No serial ports found")
        return
    for info in found:
        click.echo(f"{info.device}\t{info.description}")


@main.command()
@click.option("-l", "--limit", type=int, help="Read limit + 1 tokens; omit to read until idle")
@click.option("-m", "--mode", type=click.Choice(["text", "array", "bytes"]), default="text", show_default=True)
@click.option("-t", "--idle-timeout", type=float, help="Seconds to wait for data before a read gives up")
@click.pass_obj
def read(config: SerialConfig, limit: Optional[int], mode: str, idle_timeout: Optional[float]) -> None:
    """Read whitespace-delimited tokens from the board."""
    if mode != "text" and limit is None:
        raise click.UsageError(f"--limit is required with --mode {mode}")
    try:
        config = config.replace(read_timeout=idle_timeout)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--idle-timeout")
    with _connect(config) as board:
        try:
            if mode == "text":
                click.echo(board.read(limit), nl=False)
            elif mode == "array":
                for slot in board.read_array(limit):
                    click.echo("-" if slot is None else slot)
            else:
                for value in board.read_bytes(limit):
                    click.echo(value)
        except (SerialLinkError, ValueError) as e:
            raise click.ClickException(str(e))


@main.command()
@click.argument("text")
@click.option("-n", "--chunk-size", type=int, help="Send this many characters at a time")
@click.option("-d", "--delay", type=int, default=0, show_default=True, help="Milliseconds between chunks")
@click.pass_obj
def write(config: SerialConfig, text: str, chunk_size: Optional[int], delay: int) -> None:
    """Send TEXT to the board, at once or in paced chunks."""
    with _connect(config) as board:
        try:
            if chunk_size is None:
                written = board.write_all(text)
            else:
                written = board.write_chunked(text, chunk_size, delay)
        except (SerialLinkError, ValueError) as e:
            raise click.ClickException(str(e))
    click.echo(f"Sent {written} bytes to {config.port}")


@main.command("write-char")
@click.argument("char")
@click.option("-d", "--delay", type=int, help="Milliseconds to wait after the write")
@click.pass_obj
def write_char(config: SerialConfig, char: str, delay: Optional[int]) -> None:
    """Send a single CHAR to the board."""
    with _connect(config) as board:
        try:
            written = board.write_char(char, delay)
        except (SerialLinkError, ValueError) as e:
            raise click.ClickException(str(e))
    click.echo(f"Sent {written} bytes to {config.port}")


if __name__ == "__main__":
    main()
