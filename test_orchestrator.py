import logging
import random

import pytest

from browser_driver.orchestrator import (
    TEST_FAILURES_SCRIPT,
    SessionOrchestrator,
    TestOutcome,
    as_failure_count,
)
from browser_driver.poller import TESTS_DONE_SCRIPT
from browser_driver.session import LogLevel, LogRecord

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

ROOT_URL = "http://localhost:3000/"


def make_orchestrator(session, sinks, clock, **kwargs):
    return SessionOrchestrator(
        lambda: session,
        ROOT_URL,
        stdout=sinks.stdout.append,
        stderr=sinks.stderr.append,
        clock=clock,
        sleep=clock.sleep,
        reap_children=False,
        **kwargs,
    )


def test_normal_run_sequence(make_session, sinks, fake_clock):
    logger.info("🧪 Normal run: navigate, poll, final drain, failures, quit, done")
    session = make_session(done_after=2, failures=0)
    reported = []

    outcome = make_orchestrator(session, sinks, fake_clock).run(reported.append)

    assert session.calls == [
        ("navigate", ROOT_URL),
        ("get_log",),
        ("execute_script", TESTS_DONE_SCRIPT),
        ("get_log",),
        ("execute_script", TESTS_DONE_SCRIPT),
        ("get_log",),
        ("execute_script", TEST_FAILURES_SCRIPT),
        ("quit",),
    ]
    assert reported == [0]
    assert outcome == TestOutcome(0)
    assert outcome.passed and outcome.exit_code == 0


def test_failures_are_reported(make_session, sinks, fake_clock):
    session = make_session(done_after=1, failures=3)
    reported = []

    outcome = make_orchestrator(session, sinks, fake_clock).run(reported.append)

    assert reported == [3]
    assert outcome.completed and not outcome.passed
    assert outcome.exit_code == 1


def test_no_entry_lost_or_duplicated(make_session, sinks, fake_clock):
    messages = [f"entry {i}" for i in range(40)]
    records = [LogRecord(LogLevel.INFO, f'"LOG" 1 2 "{m}"') for m in messages]

    rng = random.Random(1234)
    for _ in range(20):
        sinks.stdout.clear()
        # Split the stream at random points; the last batch only shows up in
        # the drain that follows completion
        cuts = sorted(rng.sample(range(1, len(records)), 5))
        bounds = [0] + cuts + [len(records)]
        batches = [records[a:b] for a, b in zip(bounds, bounds[1:])]
        session = make_session(batches=batches, done_after=len(batches) - 1)

        make_orchestrator(session, sinks, fake_clock).run()

        assert sinks.stdout == messages


def test_trailing_entries_flushed_after_completion(make_session, sinks, fake_clock):
    session = make_session(
        batches=[
            [LogRecord(LogLevel.INFO, '"LOG" 1 2 "during"')],
            [
                LogRecord(LogLevel.INFO, '"LOG" 1 2 "after flag"'),
                LogRecord(LogLevel.SEVERE, "late error"),
            ],
        ],
        done_after=1,
    )

    make_orchestrator(session, sinks, fake_clock).run()

    assert sinks.stdout == ["during", "after flag"]
    assert sinks.stderr == ["[ERROR] late error"]


def test_timeout_tears_down_and_reports_none(make_session, sinks, fake_clock):
    session = make_session(done_after=None, clock=fake_clock, tick_cost=30)
    reported = []

    outcome = make_orchestrator(session, sinks, fake_clock).run(reported.append)

    assert fake_clock.now == 600
    assert reported == [None]
    assert session.quit_count == 1
    assert ("execute_script", TEST_FAILURES_SCRIPT) not in session.calls
    assert outcome.exit_code == 2


def test_custom_timeout(make_session, sinks, fake_clock):
    session = make_session(done_after=None, clock=fake_clock, tick_cost=1)
    outcome = make_orchestrator(session, sinks, fake_clock, timeout=5).run()
    assert fake_clock.now == 5
    assert not outcome.completed


def test_drain_error_still_quits_and_skips_done(make_session, sinks, fake_clock):
    session = make_session(fail_on_get_log=RuntimeError("protocol error"))
    reported = []

    with pytest.raises(RuntimeError):
        make_orchestrator(session, sinks, fake_clock).run(reported.append)

    assert session.quit_count == 1
    assert reported == []


def test_quit_errors_do_not_mask_outcome(make_session, sinks, fake_clock):
    session = make_session(done_after=1, failures=0)

    def broken_quit():
        session.quit_count += 1
        raise RuntimeError("already gone")

    session.quit = broken_quit
    reported = []

    outcome = make_orchestrator(session, sinks, fake_clock).run(reported.append)

    assert session.quit_count == 1
    assert reported == [0]
    assert outcome.passed


def test_exit_hook_armed_only_while_session_is_live(make_session, sinks, fake_clock, monkeypatch):
    registered = []
    monkeypatch.setattr("atexit.register", registered.append)
    monkeypatch.setattr("atexit.unregister", registered.remove)

    session = make_session(done_after=1)
    orchestrator = make_orchestrator(session, sinks, fake_clock)

    with orchestrator.open_session():
        assert len(registered) == 1
    assert registered == []
    assert session.quit_count == 1


def test_setup_failure_never_calls_done(sinks, fake_clock):
    def factory():
        raise RuntimeError("no browser")

    orchestrator = SessionOrchestrator(
        factory, ROOT_URL, sinks.stdout.append, sinks.stderr.append, clock=fake_clock
    )
    reported = []

    with pytest.raises(RuntimeError):
        orchestrator.run(reported.append)
    assert reported == []


def test_as_failure_count():
    assert as_failure_count(0) == 0
    assert as_failure_count(4) == 4
    assert as_failure_count(2.0) == 2
    assert as_failure_count(None) is None
    assert as_failure_count(True) is None
    assert as_failure_count(-1) is None
    assert as_failure_count("3") is None
