"""
quote_engines.quotation_engine -- the single public engine operation.

Responsibility:
    ``compute(request, rule_table, clock)`` runs
    Request -> resolve -> calculate -> assemble and returns a
    QuotationResult.  Synchronous, single pass, no suspension points.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Callers own timeouts,
    retries, and what happens to the quotation afterwards.

Invariants enforced:
    - Determinism: identical (request, rule_table, clock value) produce
      equal Quotations.
    - No partial results: a failed resolution returns its error and nothing
      is calculated or assembled.
    - Programming errors (negative or overflowing amounts, currency
      mismatches) propagate as exceptions; they are never turned into a
      result value.

Usage:
    from quote_engines import compute

    result = compute(request, rule_table, SystemClock())
    if result:
        quotation = result.quotation
"""

from __future__ import annotations

import time

from quote_engines.assembler import assemble
from quote_engines.calculator import calculate
from quote_engines.resolver import ResolvedRuleSet, resolve
from quote_kernel.domain.clock import Clock
from quote_kernel.domain.quotation import QuotationResult
from quote_kernel.domain.request import QuotationRequest
from quote_kernel.domain.rules import RuleTable
from quote_kernel.logging_config import LogContext, get_logger

logger = get_logger("engines.quotation")


def compute(
    request: QuotationRequest,
    rule_table: RuleTable,
    clock: Clock,
) -> QuotationResult:
    """
    Compute the canonical quotation for a request.

    Args:
        request: Field-validated request; structural invariants are
            re-checked here.
        rule_table: Read-only pricing snapshot.  Its QuotationPolicy
            supplies the validity window.
        clock: Injected time source for ``computed_at``.

    Returns:
        QuotationResult.success(quotation), or QuotationResult.failure with
        a ValidationError or ConfigurationError.
    """
    t0 = time.monotonic()
    with LogContext.bind(rule_table_version=rule_table.version):
        logger.info("quotation_computation_started", extra={
            "jurisdiction": request.jurisdiction.value,
            "emirate": request.emirate.value,
            "activity_count": len(request.activities),
            "office_space": request.office_space.value,
        })

        resolved = resolve(request, rule_table)
        if not isinstance(resolved, ResolvedRuleSet):
            logger.info("quotation_computation_failed", extra={
                "error_code": resolved.code,
                "user_error": resolved.is_user_error,
            })
            return QuotationResult.failure(resolved)

        line_items = calculate(resolved, request)
        quotation = assemble(
            line_items,
            request,
            clock,
            policy=rule_table.policy,
            currency=rule_table.currency,
            rule_table_version=rule_table.version,
        )

        duration_ms = round((time.monotonic() - t0) * 1000, 2)
        logger.info("quotation_computation_completed", extra={
            "total_minor": quotation.total.minor_units,
            "currency": quotation.currency.code,
            "line_item_count": len(quotation.line_items),
            "duration_ms": duration_ms,
        })
        return QuotationResult.success(quotation)
