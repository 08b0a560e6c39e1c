"""
Tests for structured JSON logging (quote_kernel/logging_config.py).

Covers record shape, request-scoped context from the quotation service
and engine, and exception fields of coded errors.
"""

import json
import logging
from decimal import Decimal
from io import StringIO

import pytest

from quote_engines import compute
from quote_kernel.domain.request import Emirate
from quote_kernel.exceptions import RuleKindMismatchError
from quote_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
)
from quote_services.quotation_service import QuotationService
from quote_services.rule_table_provider import RuleTableProvider


@pytest.fixture
def stream() -> StringIO:
    """Configure the quote_kernel hierarchy to write JSON into a buffer."""
    buffer = StringIO()
    handler = logging.StreamHandler(buffer)
    handler.setFormatter(StructuredFormatter())
    configure_logging(handler=handler, level=logging.DEBUG)
    return buffer


def _records(stream: StringIO) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line]


def _by_message(stream: StringIO, message: str) -> list[dict]:
    return [r for r in _records(stream) if r["message"] == message]


class TestRecordShape:
    def test_core_fields_and_extras(self, stream):
        get_logger("engines.calculator").info(
            "fee_calculation_completed",
            extra={"line_item_count": 4, "office_space": "not_required"},
        )

        (record,) = _records(stream)
        assert record["level"] == "INFO"
        assert record["logger"] == "quote_kernel.engines.calculator"
        assert record["line_item_count"] == 4
        assert record["office_space"] == "not_required"
        assert "ts" in record
        assert "request_id" not in record

    def test_domain_values_serialized(self, stream):
        get_logger("test").info(
            "typed",
            extra={"amount": Decimal("13000.00"), "emirate": Emirate.RAS_AL_KHAIMAH},
        )

        (record,) = _records(stream)
        assert record["amount"] == "13000.00"
        assert record["emirate"] == "Ras Al Khaimah"

    def test_coded_exception_fields(self, stream):
        try:
            raise RuleKindMismatchError("v1", "activity:Freezone/Dubai/Trading", "activity", "OfficeSpaceRule")
        except RuleKindMismatchError:
            get_logger("config").error("rule_table_rejected", exc_info=True)

        (record,) = _records(stream)
        assert record["exc_type"] == "RuleKindMismatchError"
        assert record["exc_code"] == "RULE_KIND_MISMATCH"
        assert record["exc_rule_key"] == "activity:Freezone/Dubai/Trading"
        assert "traceback" in record

    def test_plain_exception_has_no_code(self, stream):
        try:
            raise ValueError("boom")
        except ValueError:
            get_logger("test").error("failed", exc_info=True)

        (record,) = _records(stream)
        assert record["exc_message"] == "boom"
        assert "exc_code" not in record

    def test_debug_filtered_at_info(self):
        buffer = StringIO()
        handler = logging.StreamHandler(buffer)
        handler.setFormatter(StructuredFormatter())
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.debug("quotation_running_total")
        logger.info("quotation_assembled")

        assert [r["message"] for r in _records(buffer)] == ["quotation_assembled"]


class TestLogContext:
    def test_bind_nests_and_restores(self):
        with LogContext.bind(request_id="req-1"):
            with LogContext.bind(rule_table_version="uae_standard_v1"):
                assert LogContext.get_all() == {
                    "request_id": "req-1",
                    "rule_table_version": "uae_standard_v1",
                }
            assert LogContext.get_all() == {"request_id": "req-1"}
        assert LogContext.get_all() == {}

    def test_inner_bind_overrides(self):
        with LogContext.bind(request_id="outer"):
            with LogContext.bind(request_id="inner"):
                assert LogContext.get_all()["request_id"] == "inner"
            assert LogContext.get_all()["request_id"] == "outer"

    def test_none_values_ignored(self):
        with LogContext.bind(request_id=None):
            assert LogContext.get_all() == {}

    def test_unknown_field_rejected(self):
        with pytest.raises(TypeError):
            LogContext.bind(correlation_id="nope")

    def test_get_all_is_a_copy(self):
        with LogContext.bind(request_id="req-1"):
            LogContext.get_all()["request_id"] = "changed"
            assert LogContext.get_all()["request_id"] == "req-1"


class TestQuotationLogging:
    """Context fields flow from the service and engine into engine records."""

    def test_engine_records_carry_request_and_version(self, stream, make_request, rule_table, clock):
        service = QuotationService(RuleTableProvider(rule_table), clock=clock)
        service.quote(make_request(), request_id="req-42")

        (assembled,) = _by_message(stream, "quotation_assembled")
        assert assembled["request_id"] == "req-42"
        assert assembled["rule_table_version"] == "test_v1"
        assert assembled["total_minor"] == 1_300_000

        traces = _by_message(stream, "QUOTE_ENGINE_TRACE")
        assert [t["engine_name"] for t in traces] == ["resolver", "calculator", "assembler"]
        assert all(t["request_id"] == "req-42" for t in traces)

    def test_coverage_gap_is_error_level(self, stream, make_request, rule_table, clock):
        compute(make_request(emirate=Emirate.AJMAN), rule_table, clock)

        (gap,) = _by_message(stream, "rule_table_coverage_gap")
        assert gap["level"] == "ERROR"
        assert gap["rule_key"] == "jurisdiction-base:Freezone/Ajman"
        assert gap["rule_table_version"] == "test_v1"


class TestConfigureLogging:
    def test_idempotent(self, stream):
        configure_logging(handler=logging.StreamHandler(StringIO()))
        assert len(logging.getLogger("quote_kernel").handlers) == 1

    def test_does_not_propagate_once_configured(self, stream):
        assert logging.getLogger("quote_kernel").propagate is False
