"""Structured JSON logging: formatter output, LogContext and configuration."""

import json
import logging
from datetime import date
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest

from studio_kernel.exceptions import MilestoneIndexError
from studio_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _fresh_logging():
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


class JsonSink:
    """A handler writing into memory, plus helpers to read it back."""

    def __init__(self):
        self.buffer = StringIO()
        self.handler = logging.StreamHandler(self.buffer)
        self.handler.setFormatter(StructuredFormatter())

    @property
    def records(self) -> list[dict]:
        return [json.loads(line) for line in self.buffer.getvalue().splitlines() if line]

    @property
    def last(self) -> dict:
        return self.records[-1]


@pytest.fixture
def sink() -> JsonSink:
    sink = JsonSink()
    reset_logging()
    configure_logging(handler=sink.handler)
    return sink


class TestRecordShape:

    def test_core_keys(self, sink):
        get_logger("engines").info("termin_recalculated")

        record = sink.last
        assert record["message"] == "termin_recalculated"
        assert record["level"] == "INFO"
        assert record["logger"] == "studio_kernel.engines"
        assert record["ts"].endswith("+00:00")

    def test_extra_becomes_top_level(self, sink):
        get_logger("services").info(
            "document_saved", extra={"collection": "invoices", "milestone_count": 5}
        )

        assert sink.last["collection"] == "invoices"
        assert sink.last["milestone_count"] == 5

    def test_typed_values_rendered_as_strings(self, sink):
        record_id = uuid4()
        get_logger("services").info(
            "milestone_paid",
            extra={
                "record_id": record_id,
                "payment_date": date(2025, 3, 1),
                "amount": Decimal("2500000"),
            },
        )

        assert sink.last["record_id"] == str(record_id)
        assert sink.last["payment_date"] == "2025-03-01"
        assert sink.last["amount"] == "2500000"

    def test_below_level_dropped(self, sink):
        log = get_logger("engines")
        log.debug("noise")
        log.warning("termin_spec_unparseable")

        assert [r["message"] for r in sink.records] == ["termin_spec_unparseable"]


class TestExceptions:

    def test_plain_exception(self, sink):
        try:
            raise ValueError("bad spec")
        except ValueError:
            get_logger("config").exception("config_rejected")

        record = sink.last
        assert record["level"] == "ERROR"
        assert record["exc_type"] == "ValueError"
        assert record["exc_message"] == "bad spec"
        assert "Traceback" in record["traceback"]
        assert "exc_code" not in record

    def test_studio_error_carries_code_and_context(self, sink):
        try:
            raise MilestoneIndexError(7, 4)
        except MilestoneIndexError:
            get_logger("services").error("edit_rejected", exc_info=True)

        record = sink.last
        assert record["exc_type"] == "MilestoneIndexError"
        assert record["exc_code"] == "MILESTONE_INDEX"
        assert (record["exc_index"], record["exc_count"]) == (7, 4)


class TestLogContext:

    def test_fields_appear_on_records(self, sink):
        LogContext.set(actor_id="user-9", document_id="inv-1")
        get_logger("services").info("document_loaded")

        assert sink.last["actor_id"] == "user-9"
        assert sink.last["document_id"] == "inv-1"

    def test_unset_fields_omitted(self, sink):
        get_logger("services").info("document_loaded")

        assert not {"correlation_id", "actor_id", "document_id", "trace_id"} & sink.last.keys()

    def test_none_ignored_by_set(self):
        LogContext.set(actor_id="user-9", document_id=None)

        assert LogContext.get_all() == {"actor_id": "user-9"}

    def test_clear(self):
        LogContext.set(correlation_id="req-1", trace_id="t-1")
        LogContext.clear()

        assert LogContext.get_all() == {}

    def test_bind_overrides_then_restores(self):
        LogContext.set(document_id="inv-1")

        with LogContext.bind(document_id="inv-2", trace_id="t-1"):
            assert LogContext.get_all() == {"document_id": "inv-2", "trace_id": "t-1"}

        assert LogContext.get_all() == {"document_id": "inv-1"}

    def test_bind_restores_after_error(self):
        with pytest.raises(RuntimeError):
            with LogContext.bind(actor_id="user-1"):
                raise RuntimeError("boom")

        assert LogContext.get_all() == {}


class TestConfiguration:

    def test_second_configure_ignored(self, sink):
        late = JsonSink()
        configure_logging(handler=late.handler)

        handlers = logging.getLogger("studio_kernel").handlers
        assert sink.handler in handlers
        assert late.handler not in handlers

    def test_children_share_root_handler(self):
        sink = JsonSink()
        reset_logging()
        configure_logging(handler=sink.handler, level=logging.DEBUG)

        get_logger("db.engine").debug("engine_initialized")

        assert sink.last["logger"] == "studio_kernel.db.engine"

    def test_reset_detaches_handler(self, sink):
        reset_logging()

        root = logging.getLogger("studio_kernel")
        assert sink.handler not in root.handlers
        assert root.propagate
