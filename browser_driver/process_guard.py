"""
Process-level safety net for the browser session.
Makes sure no browser process outlives the driver, however the driver exits.
"""

import atexit
import logging
import os
import signal
import sys
from typing import Callable, List

import psutil

logger = logging.getLogger(__name__)


def reap_child_processes(timeout: float = 5) -> List[int]:
    """
    Terminate every remaining child of this process (browser, driver helpers).

    Returns:
        PIDs that had to be force-killed
    """
    try:
        children = psutil.Process(os.getpid()).children(recursive=True)
    except psutil.Error as e:
        logger.debug(f"Could not list child processes: {e}")
        return []

    for child in children:
        try:
            child.terminate()
        except psutil.NoSuchProcess:
            pass

    _, alive = psutil.wait_procs(children, timeout=timeout)
    killed = []
    for child in alive:
        try:
            child.kill()
            killed.append(child.pid)
        except psutil.NoSuchProcess:
            pass

    if killed:
        logger.warning(f"⚠️ Force-killed lingering browser processes: {killed}")
    return killed


class ExitGuard:
    """
    Runs ``teardown`` when the interpreter exits while the guard is armed.

    Arm it right after the session exists and disarm it once the session has
    been torn down normally.
    """

    def __init__(self, teardown: Callable[[], None], reap_children: bool = True):
        self.teardown = teardown
        self.reap_children = reap_children
        self.armed = False

    def arm(self):
        if not self.armed:
            atexit.register(self._on_exit)
            self.armed = True

    def disarm(self):
        if self.armed:
            atexit.unregister(self._on_exit)
            self.armed = False

    def _on_exit(self):
        self.armed = False
        logger.warning("🛑 Process exiting with a live browser session, tearing down")
        try:
            self.teardown()
        except Exception as e:
            logger.error(f"❌ Teardown at exit failed: {e}")
        if self.reap_children:
            reap_child_processes()

    def __enter__(self):
        self.arm()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.disarm()
        return False


def install_sigterm_handler():
    """Turn SIGTERM into SystemExit so ``finally`` blocks and exit hooks run."""

    def handler(signum, frame):
        logger.warning(f"Received signal {signum}, exiting")
        sys.exit(128 + signum)

    return signal.signal(signal.SIGTERM, handler)
