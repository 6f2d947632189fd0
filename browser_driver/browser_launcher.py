import json
import logging
from typing import Any, List, Optional

from .browser_config import BrowserConfig
from .session import BrowserSession, LogLevel, LogRecord

# Configure module-level logger
logger = logging.getLogger(__name__)

INSTALL_HINT = (
    "Running browser tests requires Playwright and its Chromium build. "
    'Install them with "pip install playwright" and '
    '"python -m playwright install chromium"'
)

# Playwright console message types -> browser log levels
CONSOLE_LEVELS = {
    "error": LogLevel.SEVERE,
    "assert": LogLevel.SEVERE,
    "warning": LogLevel.WARNING,
    "debug": LogLevel.DEBUG,
}


class SetupError(RuntimeError):
    """Raised when the browser automation stack is not installed."""


def _load_sync_playwright():
    try:
        from playwright.sync_api import sync_playwright
    except ImportError as e:
        raise SetupError(INSTALL_HINT) from e
    return sync_playwright


RELEASE_ORDER = (
    ("page", "close"),
    ("context", "close"),
    ("browser", "close"),
    ("playwright", "stop"),
)


def location_header(location) -> str:
    """
    Source header put in front of every console entry: ``"<url>" <line>:<column>``.

    It always scans as exactly three arguments (one string, two integers),
    which the log parser drops before formatting.
    """
    location = location or {}
    url = location.get("url") or ""
    line = location.get("lineNumber") or 0
    column = location.get("columnNumber") or 0
    return f"{json.dumps(url, ensure_ascii=False)} {int(line)}:{int(column)}"


def render_console_value(value: Any) -> str:
    """
    Render one console argument the way the browser log serializes it.

    Strings are JSON-escaped, so a newline inside a message travels as the
    two-character ``\\n`` escape the parser splits on.
    """
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return repr(value)
    return json.dumps(value)


class PlaywrightSession(BrowserSession):
    """
    Browser session backed by Playwright's sync API.

    Console messages and uncaught page errors are buffered as Playwright
    emits them; ``get_log`` hands out the buffer and starts a new one.
    """

    def __init__(self, playwright, browser, context, page, navigation_timeout: float = 60):
        self.playwright = playwright
        self.browser = browser
        self.context = context
        self.page = page
        self.navigation_timeout = navigation_timeout
        self._pending: List[tuple] = []

        page.on("console", self._on_console)
        page.on("pageerror", self._on_page_error)

    def _on_console(self, message):
        self._pending.append(("console", message))

    def _on_page_error(self, error):
        self._pending.append(("pageerror", error))

    def navigate(self, url: str) -> None:
        self.page.goto(url, timeout=self.navigation_timeout * 1000)

    def get_log(self) -> List[LogRecord]:
        pending, self._pending = self._pending, []
        return [self._to_record(kind, item) for kind, item in pending]

    def _to_record(self, kind, item) -> LogRecord:
        if kind == "pageerror":
            return LogRecord(LogLevel.SEVERE, str(item))

        level = CONSOLE_LEVELS.get(item.type, LogLevel.INFO)
        if level == LogLevel.SEVERE:
            return LogRecord(level, item.text)
        return LogRecord(level, f"{location_header(item.location)} {self._render_args(item)}")

    def _render_args(self, message) -> str:
        from playwright.sync_api import Error as PlaywrightError

        try:
            values = [handle.json_value() for handle in message.args]
        except PlaywrightError as e:
            # Handles die with their execution context (e.g. after navigation)
            logger.debug(f"Console arguments no longer available: {e}")
            return render_console_value(message.text)
        return " ".join(render_console_value(value) for value in values)

    def execute_script(self, script: str) -> Any:
        return self.page.evaluate(script)

    def quit(self) -> None:
        """Close page, context and browser, then stop Playwright; each step best-effort."""
        released = False
        for attr, method in RELEASE_ORDER:
            resource = getattr(self, attr)
            if resource is None:
                continue
            setattr(self, attr, None)
            released = True
            try:
                getattr(resource, method)()
            except Exception as e:
                logger.debug(f"Error releasing {attr}: {e}")

        if released:
            logger.info("🛑 Browser shutdown complete")


def _abandon_launch(p, browser):
    for resource, method in ((browser, "close"), (p, "stop")):
        if resource is None:
            continue
        try:
            getattr(resource, method)()
        except Exception as e:
            logger.debug(f"Error cleaning up failed launch: {e}")


def launch_session(
    visible: bool = False,
    extra_args: Optional[List[str]] = None,
    navigation_timeout: float = 60,
) -> PlaywrightSession:
    """
    Launch Chromium and open a blank page ready to receive console output.

    Raises:
        SetupError: Playwright or its Chromium build is missing
    """
    sync_playwright = _load_sync_playwright()
    options = BrowserConfig.get_launch_options(visible=visible, extra_args=extra_args)

    logger.info(f"🚀 Launching Chromium (headless={options['headless']})...")
    BrowserConfig.log_browser_info(logger.info)

    p = sync_playwright().start()
    browser = None
    try:
        browser = p.chromium.launch(**options)
        context = browser.new_context()
        page = context.new_page()
    except Exception as e:
        logger.error(f"❌ Failed to launch browser instance: {e}")
        _abandon_launch(p, browser)
        if "Executable doesn't exist" in str(e):
            raise SetupError(INSTALL_HINT) from e
        raise

    logger.info("✅ Browser instance launched successfully.")
    return PlaywrightSession(p, browser, context, page, navigation_timeout)
