import platform
import sys
from typing import Any, Dict, List, Optional


class BrowserConfig:
    """Platform-specific Chromium configuration for Playwright."""

    @staticmethod
    def get_os_info() -> Dict[str, str]:
        """Get detailed OS information."""
        return {
            "system": platform.system(),  # Darwin, Linux, Windows
            "machine": platform.machine(),  # arm64, x86_64
            "platform": platform.platform(),
            "python_version": sys.version,
        }

    @staticmethod
    def get_chromium_args(extra_args: Optional[List[str]] = None) -> List[str]:
        """Get platform-specific Chromium launch arguments, extra args last."""
        system = BrowserConfig.get_os_info()["system"]

        # Keep timers running at full speed so in-page tests are not throttled
        base_args = [
            "--disable-background-timer-throttling",
            "--disable-renderer-backgrounding",
            "--disable-backgrounding-occluded-windows",
            "--disable-dev-shm-usage",
            "--no-first-run",
            "--no-default-browser-check",
        ]

        if system == "Linux":
            # Linux/Docker needs sandbox flags
            base_args += [
                "--disable-gpu",
                "--no-sandbox",
                "--disable-setuid-sandbox",
            ]

        return base_args + list(extra_args or [])

    @staticmethod
    def get_launch_options(
        visible: bool = False, extra_args: Optional[List[str]] = None
    ) -> Dict[str, Any]:
        """Keyword arguments for ``chromium.launch``."""
        return {
            "headless": not visible,
            "args": BrowserConfig.get_chromium_args(extra_args),
        }

    @staticmethod
    def log_browser_info(logger_func, browser_type: str = "chromium"):
        """Log browser and OS telemetry."""
        os_info = BrowserConfig.get_os_info()
        logger_func(f"=== Browser Telemetry ===")
        logger_func(f"Browser Type: {browser_type}")
        logger_func(f"OS: {os_info['system']}")
        logger_func(f"Architecture: {os_info['machine']}")
        logger_func(f"Platform: {os_info['platform']}")
        logger_func(f"========================")
