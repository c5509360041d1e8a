"""
Shared fixtures for stream provisioner tests.

Provides a fake clock that advances instantly on sleep and a scripted
stream client, so orchestration tests never wait on real time or AWS.
"""

import sys
from typing import Callable, Optional

import pytest

from stream_provisioner.provisioner.client import StreamNotFoundError
from stream_provisioner.provisioner.clock import CancellationToken
from stream_provisioner.utils.logging import configure_logging

ABSENT = "ABSENT"


class FakeClock:
    """Clock whose sleep advances time without blocking."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self.sleeps: list[float] = []
        self.on_sleep: Optional[Callable[[int], None]] = None

    def monotonic(self) -> float:
        return self.now

    def sleep(self, seconds: float, cancellation: Optional[CancellationToken] = None) -> bool:
        if self.on_sleep is not None:
            self.on_sleep(len(self.sleeps))
        if cancellation is not None and cancellation.cancelled:
            return False
        self.sleeps.append(seconds)
        self.now += seconds
        return True


class ScriptedStreamClient:
    """
    StreamClient that replays a script of describe responses.

    Each entry is a raw status string, ABSENT, or an exception instance to
    raise. The last entry repeats once the script is exhausted.
    """

    def __init__(self, script: list, create_error: Optional[Exception] = None) -> None:
        self.script = list(script)
        self.create_error = create_error
        self.describe_calls: list[str] = []
        self.create_calls: list[tuple[str, int]] = []
        self.events: list[tuple[str, object]] = []

    def describe(self, name: str) -> str:
        self.describe_calls.append(name)
        step = self.script.pop(0) if len(self.script) > 1 else self.script[0]
        self.events.append(("describe", step))
        if isinstance(step, Exception):
            raise step
        if step == ABSENT:
            raise StreamNotFoundError(name, f"Stream {name} does not exist")
        return step

    def create(self, name: str, shard_count: int) -> None:
        self.create_calls.append((name, shard_count))
        self.events.append(("create", (name, shard_count)))
        if self.create_error is not None:
            raise self.create_error


@pytest.fixture(autouse=True)
def reset_logging():
    """Point structlog at the current stderr before each test."""
    configure_logging(level="debug", format_type="json", stream=sys.stderr)
    yield


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scripted_client():
    def _make(script: list, create_error: Optional[Exception] = None) -> ScriptedStreamClient:
        return ScriptedStreamClient(script, create_error=create_error)

    return _make
