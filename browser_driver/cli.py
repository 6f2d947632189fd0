"""Command-line entry point: run a page's in-browser tests and exit with their status."""

import argparse
import functools
import logging
import sys
from typing import List, Optional

from . import config
from .browser_launcher import SetupError, launch_session
from .logger import setup_driver_logger
from .orchestrator import SessionOrchestrator
from .process_guard import install_sigterm_handler

EXIT_SETUP_ERROR = 3


def stream_sink(stream):
    def sink(line: str):
        stream.write(line + "\n")
        stream.flush()

    return sink


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="browser-driver",
        description="Load a test page in Chromium, relay its console and report its failures.",
    )
    parser.add_argument("--root-url", help="Page that runs the tests (default: $ROOT_URL)")
    parser.add_argument(
        "--visible",
        action="store_true",
        default=None,
        help="Show the browser window instead of running headless",
    )
    parser.add_argument(
        "--chrome-args",
        help='Extra Chromium arguments, whitespace separated; "%%20" encodes a space',
    )
    parser.add_argument("--timeout", type=float, help="Seconds to wait for the tests to finish")
    parser.add_argument("--config", help="Path to a JSON config file")
    parser.add_argument("--log-level", help="Driver log level (DEBUG, INFO, ...)")
    return parser


def resolve_settings(args: argparse.Namespace) -> dict:
    """Config file and environment first, command-line flags on top."""
    settings = config.load_config(args.config)
    if args.root_url:
        settings["root_url"] = args.root_url
    if args.visible:
        settings["visible"] = True
    if args.chrome_args is not None:
        settings["chrome_args"] = config.parse_chrome_args(args.chrome_args)
    if args.timeout is not None:
        settings["run_timeout"] = args.timeout
    if args.log_level:
        settings["log_level"] = args.log_level
    return settings


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = resolve_settings(args)

    driver_logger = setup_driver_logger(
        getattr(logging, str(settings["log_level"]).upper(), logging.INFO)
    )
    install_sigterm_handler()

    session_factory = functools.partial(
        launch_session,
        visible=settings["visible"],
        extra_args=settings["chrome_args"],
        navigation_timeout=settings["navigation_timeout"],
    )
    orchestrator = SessionOrchestrator(
        session_factory,
        settings["root_url"],
        stdout=stream_sink(sys.stdout),
        stderr=stream_sink(sys.stderr),
        timeout=settings["run_timeout"],
        poll_interval=settings["poll_interval"],
    )

    def done(failure_count):
        if failure_count is None:
            driver_logger.error("Tests never reported completion")
            sys.stderr.write(
                f"Tests did not finish within {settings['run_timeout']:g}s\n"
            )
        else:
            driver_logger.info(f"Tests finished with {failure_count} failure(s)")

    try:
        outcome = orchestrator.run(done)
    except SetupError as e:
        sys.stderr.write(f"{e}\n")
        return EXIT_SETUP_ERROR

    return outcome.exit_code


if __name__ == "__main__":
    sys.exit(main())
