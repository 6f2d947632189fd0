"""
Fixtures shared by the driver tests: a scripted browser session and a
manually advanced clock, so no test needs a real browser or real time.
"""

from typing import List, Optional

import pytest

from browser_driver.orchestrator import TEST_FAILURES_SCRIPT
from browser_driver.poller import TESTS_DONE_SCRIPT
from browser_driver.session import BrowserSession, LogRecord


class FakeClock:
    def __init__(self, start: float = 0.0):
        self.now = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds

    def sleep(self, seconds: float):
        self.sleeps.append(seconds)
        self.advance(seconds)


class FakeSession(BrowserSession):
    """
    Session that replays scripted console batches.

    Args:
        batches: one list of records per ``get_log`` call; later calls get []
        done_after: completion flag turns true on this flag query (None = never)
        failures: value returned for the failure-count global
        clock: advanced by ``tick_cost`` on every flag query
    """

    def __init__(
        self,
        batches: Optional[List[List[LogRecord]]] = None,
        done_after: Optional[int] = 1,
        failures=0,
        clock: Optional[FakeClock] = None,
        tick_cost: float = 0,
        fail_on_get_log: Optional[Exception] = None,
    ):
        self.batches = list(batches or [])
        self.done_after = done_after
        self.failures = failures
        self.clock = clock
        self.tick_cost = tick_cost
        self.fail_on_get_log = fail_on_get_log
        self.calls: List[tuple] = []
        self.flag_queries = 0
        self.quit_count = 0

    def navigate(self, url: str) -> None:
        self.calls.append(("navigate", url))

    def get_log(self) -> List[LogRecord]:
        self.calls.append(("get_log",))
        if self.fail_on_get_log is not None:
            raise self.fail_on_get_log
        return self.batches.pop(0) if self.batches else []

    def execute_script(self, script: str):
        self.calls.append(("execute_script", script))
        if script == TESTS_DONE_SCRIPT:
            self.flag_queries += 1
            if self.clock is not None:
                self.clock.advance(self.tick_cost)
            return self.done_after is not None and self.flag_queries >= self.done_after
        if script == TEST_FAILURES_SCRIPT:
            return self.failures
        raise AssertionError(f"Unexpected script: {script}")

    def quit(self) -> None:
        self.calls.append(("quit",))
        self.quit_count += 1


class Sinks:
    def __init__(self):
        self.stdout: List[str] = []
        self.stderr: List[str] = []


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def sinks():
    return Sinks()


@pytest.fixture
def make_session():
    return FakeSession
