"""
quote_services.lead -- typed lead record for the CRM hand-off.

Responsibility:
    Shape a request (and, once available, its quotation) into a flat,
    typed record that an external CRM collaborator can map onto its own
    field names.  Presentation-layer or CRM field identifiers never appear
    here; the collaborator owns that mapping.

Architecture position:
    Services -- pure data shaping plus the abstract LeadSink collaborator.
    Nothing in this module performs network I/O.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from quote_kernel.domain.quotation import Quotation
from quote_kernel.domain.request import QuotationRequest
from quote_kernel.logging_config import get_logger

logger = get_logger("services.lead")

DEFAULT_LEAD_SOURCE = "Cost Calculator"


class LeadSubmissionError(Exception):
    """Raised by a LeadSink when it could not accept a lead."""

    code: str = "LEAD_SUBMISSION_FAILED"

    def __init__(self, sink: str, reason: str):
        self.sink = sink
        self.reason = reason
        super().__init__(f"Lead sink '{sink}' rejected the lead: {reason}")


@dataclass(frozen=True)
class LeadRecord:
    """
    Flat lead record: contact fields, request fields, and the quoted total.

    ``quoted_total_minor`` is None when no quotation was produced.
    """

    first_name: str
    last_name: str
    email: str
    mobile: str
    nationality: str
    jurisdiction: str
    emirate: str
    activities: str
    office_space: str
    shareholders: int
    visas: int
    lead_source: str
    currency: str | None = None
    quoted_total_minor: int | None = None
    quoted_total_display: str | None = None
    provisional: bool = False
    rule_table_version: str | None = None

    def as_flat_dict(self) -> dict[str, Any]:
        return {
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "mobile": self.mobile,
            "nationality": self.nationality,
            "jurisdiction": self.jurisdiction,
            "emirate": self.emirate,
            "activities": self.activities,
            "office_space": self.office_space,
            "shareholders": self.shareholders,
            "visas": self.visas,
            "lead_source": self.lead_source,
            "currency": self.currency,
            "quoted_total_minor": self.quoted_total_minor,
            "quoted_total_display": self.quoted_total_display,
            "provisional": self.provisional,
            "rule_table_version": self.rule_table_version,
        }


def build_lead_record(
    request: QuotationRequest,
    quotation: Quotation | None = None,
    lead_source: str = DEFAULT_LEAD_SOURCE,
) -> LeadRecord:
    """Build the lead record for a request and, optionally, its quotation."""
    if quotation is not None and quotation.request != request:
        raise ValueError("Quotation was computed for a different request")

    contact = request.contact
    record = LeadRecord(
        first_name=contact.first_name,
        last_name=contact.last_name,
        email=contact.email,
        mobile=contact.full_mobile,
        nationality=contact.nationality,
        jurisdiction=request.jurisdiction.value,
        emirate=request.emirate.value,
        activities=", ".join(a.value for a in request.activities),
        office_space=request.office_space.value,
        shareholders=request.shareholders,
        visas=request.visas,
        lead_source=lead_source,
    )
    if quotation is None:
        return record

    return LeadRecord(
        **{
            **record.as_flat_dict(),
            "currency": quotation.currency.code,
            "quoted_total_minor": quotation.total.minor_units,
            "quoted_total_display": quotation.total.format(),
            "provisional": quotation.is_provisional,
            "rule_table_version": quotation.rule_table_version,
        }
    )


def line_item_pairs(quotation: Quotation) -> dict[str, int]:
    """Description -> minor-unit amount, in display order, plus the total."""
    pairs: dict[str, int] = {}
    for description, amount in quotation.breakdown():
        pairs[description] = pairs.get(description, 0) + amount
    pairs["Total"] = quotation.total.minor_units
    return pairs


class LeadSink(ABC):
    """
    External collaborator that receives leads.

    Contract:
        Implementations own delivery: retries, delays and best-effort
        semantics are theirs.  A sink that cannot accept a lead raises
        LeadSubmissionError.
    """

    name: str = "lead_sink"

    @abstractmethod
    def submit(self, record: LeadRecord) -> None:
        ...


class LoggingLeadSink(LeadSink):
    """Sink that writes each lead as a structured log record."""

    name = "log"

    def submit(self, record: LeadRecord) -> None:
        logger.info("lead_captured", extra={"lead": record.as_flat_dict()})
