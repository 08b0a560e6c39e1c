"""
quote_services -- orchestration around the pure quotation engine.

Holds the rule-table snapshot provider, the quotation request service and
the typed lead hand-off for the external CRM collaborator.
"""

from quote_services.lead import (
    LeadRecord,
    LeadSink,
    LeadSubmissionError,
    LoggingLeadSink,
    build_lead_record,
    line_item_pairs,
)
from quote_services.quotation_service import QuotationService, QuoteOutcome
from quote_services.rule_table_provider import RuleTableProvider

__all__ = [
    "LeadRecord",
    "LeadSink",
    "LeadSubmissionError",
    "LoggingLeadSink",
    "QuotationService",
    "QuoteOutcome",
    "RuleTableProvider",
    "build_lead_record",
    "line_item_pairs",
]
