"""JSON-lines output, run context and setup of the variance logger."""

import json
import logging
from datetime import date
from io import StringIO
from uuid import uuid4

import pytest

from variance_kernel.domain.values import VarianceStatus
from variance_kernel.exceptions import FormatError, MappingError
from variance_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture
def emitted():
    """Route the variance logger into a buffer; call the fixture to read lines back."""
    reset_logging()
    buffer = StringIO()
    sink = logging.StreamHandler(buffer)
    configure_logging(handler=sink, level=logging.DEBUG)

    def lines() -> list[dict]:
        return [json.loads(raw) for raw in buffer.getvalue().splitlines() if raw]

    yield lines
    reset_logging()


class TestJsonLines:
    def test_core_keys(self, emitted):
        get_logger("ingestion").info("ingestion_started")

        (line,) = emitted()
        assert line["level"] == "INFO"
        assert line["logger"] == "variance.ingestion"
        assert line["message"] == "ingestion_started"
        assert line["ts"].endswith("+00:00")

    def test_extra_fields_become_keys(self, emitted):
        get_logger("ingestion").info(
            "ingestion_completed", extra={"record_count": 42, "source": "q1.csv"}
        )

        line = emitted()[0]
        assert (line["record_count"], line["source"]) == (42, "q1.csv")

    def test_domain_values_are_serialized(self, emitted):
        dataset_id = uuid4()
        get_logger("workflow").info(
            "record_updated",
            extra={
                "dataset": dataset_id,
                "due": date(2024, 3, 1),
                "status": VarianceStatus.CLOSED,
                "columns": frozenset({"Budget", "Actual"}),
            },
        )

        line = emitted()[0]
        assert line["dataset"] == str(dataset_id)
        assert line["due"] == "2024-03-01"
        assert line["status"] == "closed"
        assert line["columns"] == ["Actual", "Budget"]

    def test_mapping_error_is_flattened(self, emitted):
        try:
            raise MappingError(missing_roles=("budget",))
        except MappingError:
            get_logger("mapping").error("mapping_failed", exc_info=True)

        line = emitted()[0]
        assert line["exc_type"] == "MappingError"
        assert line["exc_code"] == "MAPPING_ERROR"
        assert line["exc_missing_roles"] == ["budget"]
        assert "MappingError" in line["traceback"]

    def test_plain_exception_has_no_code(self, emitted):
        try:
            raise ValueError("bad cell")
        except ValueError:
            get_logger("parsing").warning("cell_skipped", exc_info=True)

        line = emitted()[0]
        assert line["exc_message"] == "bad cell"
        assert "exc_code" not in line

    def test_context_stamped_on_every_line(self, emitted):
        LogContext.set(correlation_id="run-7", source_name="budget.xlsx")
        log = get_logger("ingestion")
        log.info("file_read")
        log.info("columns_resolved")

        assert [(l["correlation_id"], l["source_name"]) for l in emitted()] == [
            ("run-7", "budget.xlsx"),
            ("run-7", "budget.xlsx"),
        ]

    def test_context_wins_over_extra(self, emitted):
        with LogContext.bind(dataset_id="from-context"):
            get_logger("workflow").info("starred", extra={"dataset_id": "from-extra"})

        assert emitted()[0]["dataset_id"] == "from-context"

    def test_level_filters_lines(self):
        reset_logging()
        buffer = StringIO()
        configure_logging(handler=logging.StreamHandler(buffer))
        log = get_logger("engines")
        log.debug("trace_detail")
        log.warning("threshold_clamped")

        messages = [json.loads(raw)["message"] for raw in buffer.getvalue().splitlines()]
        assert messages == ["threshold_clamped"]
        reset_logging()


class TestLogContext:
    def test_set_converts_to_text_and_skips_none(self):
        project = uuid4()
        LogContext.set(project_id=project, source_name=None)
        assert LogContext.get_all() == {"project_id": str(project)}

    def test_set_rejects_unknown_field(self):
        with pytest.raises(TypeError):
            LogContext.set(actor_id="someone")

    def test_clear_empties_everything(self):
        LogContext.set(correlation_id="x", dataset_id="y")
        LogContext.clear()
        assert LogContext.get_all() == {}

    def test_bind_is_scoped(self):
        LogContext.set(source_name="q1.csv")
        with LogContext.bind(source_name="q2.csv", dataset_id="d-2"):
            assert LogContext.get_all() == {"source_name": "q2.csv", "dataset_id": "d-2"}
        assert LogContext.get_all() == {"source_name": "q1.csv"}

    def test_nested_binds_unwind_in_order(self):
        with LogContext.bind(correlation_id="outer"):
            with LogContext.bind(correlation_id="inner"):
                assert LogContext.get_all()["correlation_id"] == "inner"
            assert LogContext.get_all()["correlation_id"] == "outer"
        assert "correlation_id" not in LogContext.get_all()

    def test_bind_restores_after_exception(self):
        with pytest.raises(FormatError):
            with LogContext.bind(source_name="broken.xlsx"):
                raise FormatError("unreadable", source_name="broken.xlsx")
        assert LogContext.get_all() == {}

    def test_bind_rejects_unknown_field_eagerly(self):
        with pytest.raises(TypeError):
            LogContext.bind(event_id="nope")
        assert LogContext.get_all() == {}


class TestConfiguration:
    def test_second_configure_is_ignored(self):
        reset_logging()
        first, second = logging.StreamHandler(StringIO()), logging.StreamHandler(StringIO())
        configure_logging(handler=first)
        configure_logging(handler=second, level=logging.DEBUG)

        namespace = logging.getLogger("variance")
        assert namespace.handlers == [first]
        assert namespace.level == logging.INFO
        assert isinstance(first.formatter, StructuredFormatter)
        reset_logging()

    def test_reset_detaches_handler(self):
        reset_logging()
        configure_logging(handler=logging.StreamHandler(StringIO()))
        reset_logging()
        namespace = logging.getLogger("variance")
        assert namespace.handlers == []
        assert namespace.propagate

    def test_child_loggers_share_namespace(self, emitted):
        log = get_logger("services.workspace")
        assert log.name == "variance.services.workspace"
        log.debug("workspace_loaded")
        assert emitted()[0]["logger"] == "variance.services.workspace"
