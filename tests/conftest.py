"""
Pytest fixtures for the variance analysis test suite.

Provides:
- Structured logging capture
- Deterministic clock and settings
- In-memory SQLite sessions for the project store
- Small record / dataset builders shared across test packages
"""

import json
import logging
from datetime import date, datetime, timezone
from io import StringIO
from typing import Generator

import pytest
from sqlalchemy.orm import Session

from variance_config import get_active_settings
from variance_kernel.db.engine import (
    create_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from variance_kernel.domain.clock import DeterministicClock
from variance_kernel.domain.records import ParsedDataset, VarianceRecord
from variance_kernel.domain.values import VarianceThresholds
from variance_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)

FIXED_NOW = datetime(2024, 3, 15, 9, 30, tzinfo=timezone.utc)


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
    Capture variance logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, import_service):
            import_service.ingest_text(...)
            logs = captured_logs()
            assert any(r["message"] == "ingestion_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("variance")
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
# Clock and settings
# =============================================================================


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    return DeterministicClock(FIXED_NOW)


@pytest.fixture
def settings():
    """Packaged default settings."""
    return get_active_settings()


@pytest.fixture
def thresholds() -> VarianceThresholds:
    return VarianceThresholds(percent=10.0, dollar=50000.0)


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
def session() -> Generator[Session, None, None]:
    """Fresh in-memory SQLite database per test."""
    init_engine_from_url("sqlite://")
    create_tables()
    db_session = get_session()
    try:
        yield db_session
    finally:
        db_session.rollback()
        db_session.close()
        reset_engine()


# =============================================================================
# Record builders
# =============================================================================


def make_record(
    category: str = "Travel",
    budget: float = 1000.0,
    actual: float = 1000.0,
    **fields,
) -> VarianceRecord:
    return VarianceRecord(category=category, budget=budget, actual=actual, **fields)


@pytest.fixture
def record_factory():
    return make_record


@pytest.fixture
def sample_records() -> list[VarianceRecord]:
    """Six records over two cost centers, four GL accounts and two periods."""
    return [
        make_record("Advertising", 10000.0, 12500.0, cost_center="1001 - Marketing",
                    gl_account="51000 - Advertising", period="2024-01"),
        make_record("Events", 8000.0, 7000.0, cost_center="1001 - Marketing",
                    gl_account="51010 - Events", period="2024-01"),
        make_record("Advertising", 10000.0, 10200.0, cost_center="1001 - Marketing",
                    gl_account="51000 - Advertising", period="2024-02"),
        make_record("Travel", 5000.0, 5600.0, cost_center="1002 - Sales",
                    gl_account="52000 - Travel", period="2024-01"),
        make_record("Travel", 5000.0, 4000.0, cost_center="1002 - Sales",
                    gl_account="52000 - Travel", period="2024-02"),
        make_record("Commissions", 200000.0, 260000.0, cost_center="1002 - Sales",
                    gl_account="52010 - Commissions", period="2024-02"),
    ]


@pytest.fixture
def sample_dataset(sample_records) -> ParsedDataset:
    return ParsedDataset(
        records=sample_records,
        columns=("Category", "Cost Center", "GL Account", "Period", "Budget", "Actual"),
    )


@pytest.fixture
def as_of() -> date:
    return FIXED_NOW.date()
