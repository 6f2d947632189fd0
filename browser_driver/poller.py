import logging
import time
from enum import Enum
from typing import Callable

from .log_drain import LogDrain
from .session import BrowserSession
from .timeout_utils import Deadline, TimeoutError

logger = logging.getLogger(__name__)

TESTS_DONE_SCRIPT = "window.testsDone"
DEFAULT_RUN_TIMEOUT = 600


class PollState(str, Enum):
    POLLING = "polling"
    DONE = "done"


class CompletionPoller:
    """
    Drains console output and checks the page's completion flag, tick after
    tick, until the flag is set or the deadline passes.

    Ticks run back-to-back unless ``poll_interval`` is set; each tick is
    naturally throttled by the two round trips it makes.
    """

    def __init__(
        self,
        session: BrowserSession,
        drain: LogDrain,
        timeout: float = DEFAULT_RUN_TIMEOUT,
        poll_interval: float = 0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.session = session
        self.drain = drain
        self.timeout = timeout
        self.poll_interval = poll_interval
        self.clock = clock
        self.sleep = sleep
        self.state = PollState.POLLING
        self.ticks = 0

    def tick(self) -> PollState:
        self.drain.drain()
        if self.session.execute_script(TESTS_DONE_SCRIPT):
            self.state = PollState.DONE
        self.ticks += 1
        return self.state

    def run(self) -> PollState:
        """
        Poll until DONE.

        Raises:
            TimeoutError: the flag was still unset when the deadline elapsed
        """
        deadline = Deadline(self.timeout, clock=self.clock)
        self.state = PollState.POLLING

        while self.tick() is PollState.POLLING:
            if deadline.expired():
                elapsed = deadline.elapsed()
                logger.warning(
                    f"⏱️ Completion flag not set after {self.ticks} ticks ({elapsed:.1f}s)"
                )
                raise TimeoutError(self.timeout, elapsed)
            if self.poll_interval > 0:
                self.sleep(min(self.poll_interval, deadline.remaining()))

        logger.info(
            f"✅ Page reported completion after {self.ticks} ticks "
            f"({deadline.elapsed():.1f}s)"
        )
        return self.state
