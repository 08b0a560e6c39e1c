"""
quote_engines.assembler -- Quotation assembly.

Responsibility:
    Combine priced line items into an immutable Quotation: exact total,
    computed-at timestamp from the injected clock, validity window from the
    quotation policy, and the originating request for traceability.

Architecture position:
    Engines -- pure calculation layer.  Time comes only from the injected
    Clock; the validity duration only from QuotationPolicy.

Invariants enforced:
    - Total is the left-to-right sum of line-item amounts in stored order.
    - A Quotation is either fully constructed or not at all.
"""

from __future__ import annotations

from collections.abc import Sequence

from quote_engines.tracer import traced_engine
from quote_kernel.domain.clock import Clock
from quote_kernel.domain.quotation import LineItem, Quotation
from quote_kernel.domain.request import QuotationRequest
from quote_kernel.domain.rules import QuotationPolicy
from quote_kernel.domain.values import Currency, Money
from quote_kernel.logging_config import get_logger

logger = get_logger("engines.assembler")


@traced_engine("assembler", "1.0", fingerprint_fields=("request",))
def assemble(
    line_items: Sequence[LineItem],
    request: QuotationRequest,
    clock: Clock,
    *,
    policy: QuotationPolicy,
    currency: Currency,
    rule_table_version: str,
) -> Quotation:
    """
    Assemble a Quotation from computed line items.

    Args:
        line_items: Items in computation order.
        request: The request the items were priced for.
        clock: Source of ``computed_at``.
        policy: Supplies the validity duration.
        currency: Quotation currency; every line item must match.
        rule_table_version: Version of the table the items were priced from.

    Raises:
        CurrencyMismatchError: if a line item is in another currency.
    """
    total = Money.zero(currency)
    for item in line_items:
        total = total + item.amount
        logger.debug("quotation_running_total", extra={
            "category": item.category.value,
            "rule_id": item.rule_id,
            "amount_minor": item.amount.minor_units,
            "running_total_minor": total.minor_units,
        })

    quotation = Quotation(
        line_items=tuple(line_items),
        total=total,
        currency=currency,
        computed_at=clock.now(),
        validity=policy.validity,
        request=request,
        rule_table_version=rule_table_version,
    )

    logger.info("quotation_assembled", extra={
        "total_minor": quotation.total.minor_units,
        "currency": currency.code,
        "line_item_count": len(quotation.line_items),
        "provisional": quotation.is_provisional,
        "valid_until": quotation.valid_until.isoformat(),
    })
    return quotation
