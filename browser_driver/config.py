import json
import os
import threading
from typing import List, Optional

# Determine project root
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

CONFIG_FILENAME = "browser_driver.json"

# Potential paths for the optional config file, first match wins
CANDIDATE_PATHS = [
    CONFIG_FILENAME,
    os.path.join(PROJECT_ROOT, CONFIG_FILENAME),
]

LOCK = threading.Lock()


def get_default_config():
    """Get default configuration for a browser test run."""
    return {
        "root_url": "http://localhost:3000",
        "visible": False,  # Headless unless asked otherwise
        "chrome_args": [],  # Extra Chromium launch arguments
        "run_timeout": 600,  # Seconds to wait for window.testsDone
        "poll_interval": 0,  # Pause between completion checks (s)
        "navigation_timeout": 60,  # page.goto timeout (s)
        "log_level": "INFO",
    }


def parse_chrome_args(raw: Optional[str]) -> List[str]:
    """
    Split a whitespace-separated argument string.

    "%20" inside an argument becomes a space, so arguments may carry spaces:
        "--a --user-agent=Foo%20Bar" -> ["--a", "--user-agent=Foo Bar"]
    """
    if not raw:
        return []
    return [arg.replace("%20", " ") for arg in raw.split()]


def find_config_file() -> Optional[str]:
    for path in CANDIDATE_PATHS:
        if os.path.exists(path):
            return path
    return None


def _env_overrides(environ) -> dict:
    overrides = {}
    if environ.get("ROOT_URL"):
        overrides["root_url"] = environ["ROOT_URL"]
    if environ.get("TEST_BROWSER_VISIBLE"):
        overrides["visible"] = True
    if environ.get("TEST_CHROME_ARGS"):
        overrides["chrome_args"] = parse_chrome_args(environ["TEST_CHROME_ARGS"])
    if environ.get("TEST_BROWSER_TIMEOUT"):
        overrides["run_timeout"] = float(environ["TEST_BROWSER_TIMEOUT"])
    return overrides


def load_config(path: Optional[str] = None, environ=None):
    """Load defaults, then the JSON config file, then environment overrides."""
    environ = os.environ if environ is None else environ
    with LOCK:
        config = get_default_config()
        config_file = path or find_config_file()
        if config_file and os.path.exists(config_file):
            try:
                with open(config_file, "r") as f:
                    user_config = json.load(f)
                # Merge: user config overrides defaults
                config = {**config, **user_config}
            except (OSError, ValueError):
                pass
        if isinstance(config.get("chrome_args"), str):
            config["chrome_args"] = parse_chrome_args(config["chrome_args"])
        config.update(_env_overrides(environ))
        return config
