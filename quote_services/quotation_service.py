"""
quote_services.quotation_service -- request handling around the engine.

Responsibility:
    Price a request against the provider's current rule-table snapshot and,
    once the engine has returned, hand the resulting lead to the CRM sink.
    This replaces any time-based coordination between pricing and lead
    submission with explicit sequencing: compute first, submit after.

Architecture position:
    Services -- orchestration over quote_engines, quote_config and the
    LeadSink collaborator.

Invariants enforced:
    - One snapshot per request: the rule table is read once, before
      ``compute`` runs.
    - The sink never sees a quotation that was not fully computed.
    - Requests rejected with a ValidationError are not submitted as leads;
      requests hit by a ConfigurationError are submitted without a total.

Failure modes:
    - Any exception from the sink (LeadSubmissionError or a sink that
      breaks its contract) is logged and reported on the QuoteOutcome;
      the quotation is still returned.
    - Programming errors from the engine propagate.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass

from quote_engines import compute
from quote_kernel.domain.clock import Clock, SystemClock
from quote_kernel.domain.quotation import QuotationResult
from quote_kernel.domain.request import QuotationRequest
from quote_kernel.logging_config import LogContext, get_logger
from quote_services.lead import (
    DEFAULT_LEAD_SOURCE,
    LeadRecord,
    LeadSink,
    build_lead_record,
)
from quote_services.rule_table_provider import RuleTableProvider

logger = get_logger("services.quotation")


@dataclass(frozen=True)
class QuoteOutcome:
    """What happened to one request."""

    request_id: str
    result: QuotationResult
    lead: LeadRecord | None = None
    lead_submitted: bool = False
    submission_error: str | None = None


class QuotationService:
    """
    Prices requests and forwards leads.

    Contract:
        Receives the rule-table provider, clock and (optional) lead sink via
        constructor injection.  Stateless across requests.
    """

    def __init__(
        self,
        provider: RuleTableProvider,
        clock: Clock | None = None,
        sink: LeadSink | None = None,
        lead_source: str = DEFAULT_LEAD_SOURCE,
    ):
        self._provider = provider
        self._clock = clock or SystemClock()
        self._sink = sink
        self._lead_source = lead_source

    def quote(self, request: QuotationRequest, request_id: str | None = None) -> QuoteOutcome:
        request_id = request_id or uuid.uuid4().hex
        with LogContext.bind(request_id=request_id):
            rule_table = self._provider.snapshot()
            result = compute(request, rule_table, self._clock)

            if result.is_validation_error:
                return QuoteOutcome(request_id=request_id, result=result)

            lead = build_lead_record(request, result.quotation, lead_source=self._lead_source)
            if self._sink is None:
                return QuoteOutcome(request_id=request_id, result=result, lead=lead)

            try:
                self._sink.submit(lead)
            except Exception as e:
                logger.warning("lead_submission_failed", exc_info=True, extra={
                    "sink": self._sink.name,
                    "error_type": type(e).__name__,
                })
                return QuoteOutcome(
                    request_id=request_id,
                    result=result,
                    lead=lead,
                    submission_error=str(e),
                )

            logger.info("lead_submitted", extra={
                "sink": self._sink.name,
                "quoted": result.is_success,
            })
            return QuoteOutcome(
                request_id=request_id,
                result=result,
                lead=lead,
                lead_submitted=True,
            )
