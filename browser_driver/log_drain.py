import logging
from typing import Callable, List

from .log_parser import parse_log_message
from .session import BrowserSession, LogRecord

logger = logging.getLogger(__name__)

ERROR_PREFIX = "[ERROR] "

Sink = Callable[[str], None]


class LogDrain:
    """
    Pulls new console entries from the session and routes them to the sinks.

    Error-tier entries go verbatim (prefixed) to ``stderr``; everything else
    is parsed and written to ``stdout`` one line at a time.
    """

    def __init__(
        self,
        session: BrowserSession,
        stdout: Sink,
        stderr: Sink,
        parser: Callable[[str], List[str]] = parse_log_message,
    ):
        self.session = session
        self.stdout = stdout
        self.stderr = stderr
        self.parser = parser

    def drain(self) -> int:
        """Fetch and forward everything logged since the last drain."""
        records = self.session.get_log() or []
        for record in records:
            self._route(record)
        if records:
            logger.debug(f"Drained {len(records)} console entries")
        return len(records)

    def _route(self, record: LogRecord):
        message = record.message or ""
        if record.is_severe:
            self.stderr(f"{ERROR_PREFIX}{message}")
            return
        for line in self.parser(message):
            self.stdout(line)
