"""Browser session abstractions."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, List


class LogLevel(str, Enum):
    SEVERE = "SEVERE"
    WARNING = "WARNING"
    INFO = "INFO"
    DEBUG = "DEBUG"


@dataclass(frozen=True)
class LogRecord:
    """One browser console entry, as returned by the session."""

    level: str
    message: str = ""

    @property
    def is_severe(self) -> bool:
        return self.level == LogLevel.SEVERE


class BrowserSession(ABC):
    """
    Interface for a live browser instance the driver can steer.

    Calls are blocking and must never overlap: the driver issues them one at
    a time from a single thread.
    """

    @abstractmethod
    def navigate(self, url: str) -> None:
        """Open ``url`` in the session's page."""

    @abstractmethod
    def get_log(self) -> List[LogRecord]:
        """Return console entries produced since the previous call, oldest first."""

    @abstractmethod
    def execute_script(self, script: str) -> Any:
        """Evaluate ``script`` in the page and return its JSON-able result."""

    @abstractmethod
    def quit(self) -> None:
        """Tear down the browser. Must be safe to call more than once."""
