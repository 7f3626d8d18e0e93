"""
Pytest fixtures for the studio termin test suite.

Provides:
- In-memory SQLite sessions with the activity-log listeners registered
- A deterministic clock
- Structured log capture
"""

import json
import logging
from datetime import UTC, datetime
from decimal import Decimal
from io import StringIO

import pytest

from studio_kernel.db.activity import (
    register_activity_listeners,
    unregister_activity_listeners,
)
from studio_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from studio_kernel.domain.clock import DeterministicClock
from studio_kernel.domain.contract import DEFAULT_POLICY, TerminPolicy
from studio_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)

TEST_ACTOR_ID = "user-test-001"


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture studio_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            reconcile(document)
            logs = captured_logs()
            assert any(r["message"] == "STUDIO_ENGINE_TRACE" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("studio_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Domain fixtures
# =============================================================================


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    return DeterministicClock(datetime(2025, 3, 15, 9, 30, tzinfo=UTC))


@pytest.fixture
def policy() -> TerminPolicy:
    return DEFAULT_POLICY


@pytest.fixture
def hundred_million() -> Decimal:
    return Decimal("100000000")


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def db_engine():
    """Fresh in-memory SQLite database per test."""
    engine = init_engine_from_url("sqlite://")
    create_tables()
    register_activity_listeners()
    yield engine
    unregister_activity_listeners()
    drop_tables()
    reset_engine()


@pytest.fixture
def session(db_engine):
    """Session bound to the test actor; rolled back after the test."""
    s = get_session()
    s.info["actor_id"] = TEST_ACTOR_ID
    yield s
    s.rollback()
    s.close()
