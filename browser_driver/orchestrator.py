import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional

from .log_drain import LogDrain, Sink
from .poller import DEFAULT_RUN_TIMEOUT, CompletionPoller
from .process_guard import ExitGuard
from .session import BrowserSession
from .timeout_utils import TimeoutError

logger = logging.getLogger(__name__)

TEST_FAILURES_SCRIPT = "window.testFailures"

EXIT_PASSED = 0
EXIT_FAILED = 1
EXIT_TIMEOUT = 2


@dataclass(frozen=True)
class TestOutcome:
    """Result of one run. ``failure_count`` is None when the page never finished."""

    __test__ = False  # not a pytest test class

    failure_count: Optional[int] = None

    @property
    def completed(self) -> bool:
        return self.failure_count is not None

    @property
    def passed(self) -> bool:
        return self.failure_count == 0

    @property
    def exit_code(self) -> int:
        if not self.completed:
            return EXIT_TIMEOUT
        return EXIT_PASSED if self.passed else EXIT_FAILED


def as_failure_count(value: Any) -> Optional[int]:
    """Coerce the page's failure global; anything but a non-negative integer is None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, int) and value >= 0:
        return value
    return None


class SessionOrchestrator:
    """
    Runs a page's in-browser test suite from navigation to teardown.

    Sequence: navigate -> poll (drain + completion flag) -> final drain ->
    read failure count -> quit -> ``done(failure_count)``.
    """

    def __init__(
        self,
        session_factory: Callable[[], BrowserSession],
        root_url: str,
        stdout: Sink,
        stderr: Sink,
        timeout: float = DEFAULT_RUN_TIMEOUT,
        poll_interval: float = 0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        reap_children: bool = True,
    ):
        self.session_factory = session_factory
        self.root_url = root_url
        self.stdout = stdout
        self.stderr = stderr
        self.timeout = timeout
        self.poll_interval = poll_interval
        self.clock = clock
        self.sleep = sleep
        self.reap_children = reap_children

    @contextmanager
    def open_session(self) -> Iterator[BrowserSession]:
        """Acquire a session and guarantee its teardown on every exit path."""
        session = self.session_factory()
        guard = ExitGuard(session.quit, reap_children=self.reap_children)
        guard.arm()
        try:
            yield session
        finally:
            self._teardown(session)
            guard.disarm()

    def _teardown(self, session: BrowserSession):
        logger.info("🛑 Tearing down browser session...")
        try:
            session.quit()
        except Exception as e:
            logger.debug(f"Error quitting browser session: {e}")

    def run(self, done: Optional[Callable[[Optional[int]], None]] = None) -> TestOutcome:
        """
        Execute the run and report it through ``done`` exactly once.

        A timeout is reported as ``done(None)``. Any other error tears the
        session down and propagates without calling ``done``.
        """
        failure_count = None

        with self.open_session() as session:
            drain = LogDrain(session, self.stdout, self.stderr)
            poller = CompletionPoller(
                session,
                drain,
                timeout=self.timeout,
                poll_interval=self.poll_interval,
                clock=self.clock,
                sleep=self.sleep,
            )

            logger.info(f"🌐 Navigating to {self.root_url}")
            session.navigate(self.root_url)

            try:
                poller.run()
            except TimeoutError as e:
                logger.error(f"❌ {e}")
            else:
                # Entries logged between the last tick and completion
                drain.drain()
                raw = session.execute_script(TEST_FAILURES_SCRIPT)
                failure_count = as_failure_count(raw)
                if failure_count is None:
                    logger.warning(f"⚠️ Page reported an unusable failure count: {raw!r}")

        outcome = TestOutcome(failure_count)
        logger.info(f"📋 Run finished: failures={outcome.failure_count}")
        if done is not None:
            done(outcome.failure_count)
        return outcome
