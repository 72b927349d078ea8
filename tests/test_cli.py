from __future__ import annotations

from types import SimpleNamespace

import pytest
from click.testing import CliRunner

from arduino_serial import cli


@pytest.fixture
def run(tmp_path):
    runner = CliRunner()
    config = tmp_path / "arduino_serial.toml"
    config.write_text("")

    def invoke(*args):
        return runner.invoke(cli.main, ["-c", str(config), *args])

    return invoke


def test_ports(run, monkeypatch):
    fake = [
        SimpleNamespace(device="/dev/ttyUSB0", description="CP2102"),
        SimpleNamespace(device="/dev/ttyACM0", description="Arduino Uno"),
    ]
    monkeypatch.setattr(cli.list_ports, "comports", lambda: fake)
    result = run("ports")
    assert result.exit_code == 0
    assert result.output.splitlines() == ["/dev/ttyACM0\tArduino Uno", "/dev/ttyUSB0\tCP2102"]


def test_no_ports(run, monkeypatch):
    monkeypatch.setattr(cli.list_ports, "comports", lambda: [])
    result = run("ports")
    assert result.exit_code == 0
    assert "No serial ports found" in result.output


def test_write(run):
    result = run("-p", "loop://", "write", "hello")
    assert result.exit_code == 0, result.output
    assert "Sent 5 bytes to loop://" in result.output


def test_write_chunked(run):
    result = run("-p", "loop://", "-b", "9600", "write", "abcdefg", "--chunk-size", "3", "--delay", "1")
    assert result.exit_code == 0, result.output
    # two full chunks plus the chunk-size trailer
    assert "Sent 7 bytes" in result.output


def test_write_char(run):
    result = run("-p", "loop://", "write-char", "A", "--delay", "1")
    assert result.exit_code == 0, result.output
    assert "Sent 1 bytes" in result.output


def test_write_char_rejects_string(run):
    result = run("-p", "loop://", "write-char", "AB")
    assert result.exit_code == 1
    assert "single character" in result.output


def test_read_idle(run):
    result = run("-p", "loop://", "read", "--idle-timeout", "0.05")
    assert result.exit_code == 0, result.output
    assert result.output == ""


def test_read_array_needs_limit(run):
    result = run("-p", "loop://", "read", "--mode", "array")
    assert result.exit_code == 2


def test_read_array_idle(run):
    result = run("-p", "loop://", "read", "--mode", "array", "--limit", "1", "-t", "0.05")
    assert result.exit_code == 0, result.output
    assert result.output.splitlines() == ["-", "-"]


def test_open_failure(run):
    result = run("-p", "/dev/arduino-serial-missing-port", "write", "x")
    assert result.exit_code == 1
    assert "Error Connecting" in result.output
    assert "Unable to open" in result.output


def test_missing_port(run):
    result = run("write", "x")
    assert result.exit_code == 1
    assert "No port given" in result.output


def test_bad_config(tmp_path):
    path = tmp_path / "bad.toml"
    path.write_text("[serial]\nbaudrate = 'fast'\n")
    result = CliRunner().invoke(cli.main, ["-c", str(path), "ports"])
    assert result.exit_code == 1
    assert "baudrate" in result.output


def test_read_negative_idle_timeout(run):
    result = run("-p", "loop://", "read", "--idle-timeout=-1")
    assert result.exit_code == 2
    assert "read_timeout" in result.output


def test_zero_baudrate(run):
    result = run("-p", "loop://", "-b", "0", "write", "x")
    assert result.exit_code == 1
    assert "baudrate" in result.output
