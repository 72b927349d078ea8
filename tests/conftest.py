from __future__ import annotations

from typing import List, Tuple

import pytest

from arduino_serial import Arduino, SerialConfig


class SleepRecorder:
    """Stands in for time.sleep; records requested delays without waiting."""

    def __init__(self, events: List[Tuple[str, object]]) -> None:
        self.events = events

    def __call__(self, seconds: float) -> None:
        self.events.append(("sleep", seconds))

    @property
    def calls(self) -> List[float]:
        return [v for kind, v in self.events if kind == "sleep"]


@pytest.fixture
def events() -> List[Tuple[str, object]]:
    return []


@pytest.fixture
def sleeper(events) -> SleepRecorder:
    return SleepRecorder(events)


@pytest.fixture
def loop_config() -> SerialConfig:
    # Short idle timeout so reads on the loopback return once it is drained.
    return SerialConfig(read_timeout=0.05, write_timeout=1.0)


@pytest.fixture
def board(loop_config, sleeper):
    b: Arduino[str] = Arduino("loop://", 9600, config=loop_config, sleep=sleeper)
    assert b.open_connection()
    sleeper.events.clear()
    yield b
    b.close_connection()


@pytest.fixture
def written(board, events, monkeypatch):
    """
    Wrap the loopback's write so each call is recorded alongside the sleeps.
    Returns a callable giving the payloads written so far.
    """
    ser = board.serial_port
    original = ser.write

    def write(data):
        events.append(("write", bytes(data)))
        return original(data)

    monkeypatch.setattr(ser, "write", write)
    return lambda: [v for kind, v in events if kind == "write"]
