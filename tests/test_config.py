from __future__ import annotations

import logging

import pytest

from arduino_serial.config import SerialConfig, config_from_dict, load_config

FULL = """
[serial]
port = "/dev/ttyACM0"
baudrate = 9600
encoding = "latin-1"
read_timeout = 1
write_timeout = 0.5

[pacing]
open_settle_ms = 250
write_settle_ms = 10

[chunking]
send_remainder = true
send_size_trailer = false
"""


def test_load_full_file(tmp_path):
    path = tmp_path / "arduino_serial.toml"
    path.write_text(FULL)
    config = load_config(path)
    assert config == SerialConfig(
        port="/dev/ttyACM0",
        baudrate=9600,
        encoding="latin-1",
        read_timeout=1.0,
        write_timeout=0.5,
        open_settle_ms=250,
        write_settle_ms=10,
        send_chunk_remainder=True,
        send_chunk_size_trailer=False,
    )
    assert isinstance(config.read_timeout, float)


def test_missing_file_gives_defaults(tmp_path, caplog):
    with caplog.at_level(logging.WARNING):
        config = load_config(tmp_path / "nope.toml")
    assert config == SerialConfig()
    assert config.open_settle_ms == 100
    assert config.write_settle_ms == 5
    assert config.read_timeout is None
    assert "not found" in caplog.text


def test_partial_tables():
    config = config_from_dict({"serial": {"baudrate": 115200}})
    assert config.baudrate == 115200
    assert config.port is None
    assert config.send_chunk_size_trailer is True


@pytest.mark.parametrize(
    "raw",
    [
        {"serial": {"baudrate": "9600"}},
        {"serial": {"baudrate": True}},
        {"serial": {"read_timeout": "fast"}},
        {"pacing": {"open_settle_ms": 1.5}},
        {"chunking": {"send_remainder": 1}},
    ],
)
def test_wrong_types(raw):
    with pytest.raises(ValueError):
        config_from_dict(raw)


def test_malformed_file(tmp_path):
    path = tmp_path / "bad.toml"
    path.write_text("[serial\nport = ")
    with pytest.raises(ValueError) as ex:
        load_config(path)
    assert "bad.toml" in str(ex.value)


def test_replace_ignores_none():
    base = SerialConfig(port="COM3", baudrate=9600)
    changed = base.replace(port=None, baudrate=115200)
    assert changed.port == "COM3"
    assert changed.baudrate == 115200
    assert base.baudrate == 9600


@pytest.mark.parametrize(
    "raw, key",
    [
        ({"pacing": {"open_settle_ms": -1}}, "open_settle_ms"),
        ({"pacing": {"write_settle_ms": -5}}, "write_settle_ms"),
        ({"serial": {"read_timeout": -0.5}}, "read_timeout"),
        ({"serial": {"write_timeout": -1}}, "write_timeout"),
        ({"serial": {"baudrate": 0}}, "baudrate"),
    ],
)
def test_out_of_range_values(raw, key):
    with pytest.raises(ValueError) as ex:
        config_from_dict(raw)
    assert key in str(ex.value)


def test_out_of_range_file(tmp_path):
    path = tmp_path / "arduino_serial.toml"
    path.write_text("[pacing]\nopen_settle_ms = -1\n")
    with pytest.raises(ValueError) as ex:
        load_config(path)
    assert "open_settle_ms" in str(ex.value)
